"""
URL configuration for the ragstore project.
"""

from django.urls import path
from ninja import NinjaAPI

from ragstore.system_api import router as system_router
from search_stores.api import router as search_stores_router

api = NinjaAPI(title="RAG Store Orchestration API", version="0.1.0")
api.add_router("/", search_stores_router, tags=["search-stores"])
api.add_router("/system", system_router, tags=["system"])

urlpatterns = [
    path("api/", api.urls),
]
