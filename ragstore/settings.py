"""
Django settings for the ragstore project.

Search store tunables are read from the environment here and resolved by
``search_stores.config.resolve_search_settings``. Upstream API keys are never
configured here; callers supply them per request.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "django-insecure-ragstore-dev-key")

DEBUG = os.getenv("DJANGO_DEBUG", "False") == "True"

ALLOWED_HOSTS = [host for host in os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if host]

INSTALLED_APPS = [
    "ninja",
    "search_stores",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "ragstore.urls"

ASGI_APPLICATION = "ragstore.asgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

USE_TZ = True
TIME_ZONE = "UTC"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Uploads up to 20 MB per file are kept in memory before being forwarded upstream
DATA_UPLOAD_MAX_MEMORY_SIZE = 20 * 1024 * 1024
FILE_UPLOAD_MAX_MEMORY_SIZE = 20 * 1024 * 1024


def _float_env(name: str):
    value = os.getenv(name)
    return float(value) if value else None


def _int_env(name: str):
    value = os.getenv(name)
    return int(value) if value else None


# Search stores
SEARCH_STORE_BACKEND = os.getenv("SEARCH_STORE_BACKEND", "gemini")
SEARCH_STORE_DEFAULT_MODEL = os.getenv("SEARCH_STORE_DEFAULT_MODEL", "gemini-2.5-flash")
SEARCH_STORE_POLL_INTERVAL = _float_env("SEARCH_STORE_POLL_INTERVAL")
SEARCH_STORE_POLL_MAX_ATTEMPTS = _int_env("SEARCH_STORE_POLL_MAX_ATTEMPTS")
SEARCH_STORE_RETRY_MAX_RETRIES = _int_env("SEARCH_STORE_RETRY_MAX_RETRIES")
SEARCH_STORE_RETRY_BASE_DELAY = _float_env("SEARCH_STORE_RETRY_BASE_DELAY")
SEARCH_STORE_CACHE_TTL = _float_env("SEARCH_STORE_CACHE_TTL")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name}: {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "search_stores": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}
