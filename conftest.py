"""
Pytest configuration for Django tests.

No database is needed: the upstream service is replaced by an in-memory
backend in every test module.
"""

import os

# Set test settings module before importing Django
os.environ["DJANGO_SETTINGS_MODULE"] = "ragstore.settings_test"
