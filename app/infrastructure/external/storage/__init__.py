"""Storage: local filesystem backend for uploaded document files.

LocalStorageService implements IStorageService (upload, exists, public_url).
"""

from app.infrastructure.external.storage.local_storage import LocalStorageService

__all__ = ["LocalStorageService"]
