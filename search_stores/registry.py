"""
Registry of search store backend classes.

Backends are registered by name and instantiated per API key, since the key
arrives with each request rather than from settings. The backend used when
none is named comes from ``SEARCH_STORE_BACKEND``, falling back to the
registered default.
"""

from django.conf import settings

from .base import SearchStoreBackend
from .exceptions import BackendNotFoundError, ConfigurationError


class BackendRegistry:
    """
    Name -> backend class mapping shared by the whole process.

    Usage:
        BackendRegistry.register('gemini', GeminiSearchStoreBackend)

        # Backend named by settings (or the registered default)
        backend = BackendRegistry.create(api_key=api_key)

        # Explicit backend
        backend = BackendRegistry.create('gemini', api_key=api_key)
    """

    _backends: dict[str, type[SearchStoreBackend]] = {}
    _default: str | None = None
    _ensure_backends: callable = None  # Set by search_stores/__init__.py
    _backends_loaded: bool = False

    @classmethod
    def _load_backends(cls) -> None:
        # Built-in backends import their SDKs, so load them on first use only
        if cls._backends_loaded or cls._ensure_backends is None:
            return
        cls._backends_loaded = True
        cls._ensure_backends()

    @classmethod
    def register(
        cls,
        name: str,
        backend_class: type[SearchStoreBackend],
        *,
        set_default: bool = False,
    ) -> None:
        """
        Make ``backend_class`` available under ``name``.

        The first backend registered becomes the default unless a later one
        passes ``set_default=True``.
        """
        if not (isinstance(backend_class, type) and issubclass(backend_class, SearchStoreBackend)):
            raise ConfigurationError(
                f"{backend_class!r} is not a SearchStoreBackend subclass and cannot be registered"
            )
        cls._backends[name] = backend_class
        if set_default or not cls._default:
            cls._default = name

    @classmethod
    def unregister(cls, name: str) -> None:
        """Remove ``name``; the default moves to another backend if it was removed."""
        if cls._backends.pop(name, None) is not None and cls._default == name:
            cls._default = next(iter(cls._backends), None)

    @classmethod
    def get_default(cls) -> str | None:
        """Name of the backend used when none is requested."""
        cls._load_backends()
        return getattr(settings, "SEARCH_STORE_BACKEND", None) or cls._default

    @classmethod
    def backend_class(cls, name: str | None = None) -> type[SearchStoreBackend]:
        """
        Look up the class registered under ``name`` (or the default).

        Raises:
            ConfigurationError: If nothing is named and no default exists
            BackendNotFoundError: If ``name`` is not registered
        """
        cls._load_backends()
        resolved = name or cls.get_default()
        if not resolved:
            raise ConfigurationError(
                "No search store backend configured. "
                "Set SEARCH_STORE_BACKEND in settings or register a default backend."
            )
        try:
            return cls._backends[resolved]
        except KeyError:
            known = ", ".join(sorted(cls._backends)) or "none"
            raise BackendNotFoundError(
                f"Unknown search store backend '{resolved}' (registered: {known})"
            ) from None

    @classmethod
    def create(cls, name: str | None = None, *, api_key: str | None) -> SearchStoreBackend:
        """Build a new backend instance bound to ``api_key``."""
        return cls.backend_class(name)(api_key=api_key)

    @classmethod
    def list_backends(cls) -> list[str]:
        cls._load_backends()
        return list(cls._backends)

    @classmethod
    def clear(cls) -> None:
        """
        Forget every registered backend. Primarily for testing purposes.

        Built-in backends are registered again on next use.
        """
        cls._backends.clear()
        cls._default = None
        cls._backends_loaded = False
