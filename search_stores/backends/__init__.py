"""
Search store backend implementations.

This package contains concrete implementations of the SearchStoreBackend
interface.

Available backends:
- gemini: Google Gemini File Search (production)
"""

from ..registry import BackendRegistry
from .gemini import GeminiSearchStoreBackend


def register_backends() -> None:
    """Register the built-in backends, with gemini as the default."""
    BackendRegistry.register("gemini", GeminiSearchStoreBackend, set_default=True)


__all__ = ["GeminiSearchStoreBackend", "register_backends"]
