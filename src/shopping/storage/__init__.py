"""Cart storage factory.

Provides get_storage() / set_storage() to swap implementations:
- MemoryCartStorage for development and testing
- FileCartStorage when CART_STORAGE_DIR is configured
"""

from shopping.config import get_settings
from shopping.storage.file_adapter import FileCartStorage
from shopping.storage.memory_adapter import MemoryCartStorage
from shopping.storage.port import CartStorage

_current_storage: CartStorage | None = None


def get_storage() -> CartStorage:
    """Return the current cart storage, creating the configured default."""
    global _current_storage
    if _current_storage is None:
        settings = get_settings()
        if settings.storage_dir:
            _current_storage = FileCartStorage(settings.storage_dir)
        else:
            _current_storage = MemoryCartStorage()
    return _current_storage


def set_storage(storage: CartStorage) -> None:
    """Override the active cart storage (useful for tests)."""
    global _current_storage
    _current_storage = storage


def reset_storage() -> None:
    """Reset to the configured default storage."""
    global _current_storage
    _current_storage = None
