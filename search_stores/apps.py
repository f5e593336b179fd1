"""
Django app configuration for search_stores.
"""

from django.apps import AppConfig


class SearchStoresConfig(AppConfig):
    name = "search_stores"
    verbose_name = "Search Stores"
    default_auto_field = "django.db.models.BigAutoField"
