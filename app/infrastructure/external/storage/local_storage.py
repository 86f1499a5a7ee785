"""Filesystem backend for uploaded filing documents.

Files live under a single root; every reference is resolved against it and
anything escaping the root is refused. Content lands in a temp file in the
target directory and is renamed into place only after its SHA-256 matches
what the caller computed, so a reader never sees a partial document.
"""

from __future__ import annotations

import hashlib
import json
import os
import tempfile
from pathlib import Path
from typing import Any, BinaryIO

import aiofiles
import aiofiles.os

from app.infrastructure.exceptions import (
    StorageAlreadyExistsError,
    StoragePathError,
    StorageUnavailableException,
)
from app.shared.utils.datetime import utc_now

SIDECAR_SUFFIX = ".meta.json"


class LocalStorageService:
    """IStorageService over a local directory, with a JSON sidecar per file."""

    READ_BLOCK = 64 * 1024

    def __init__(self, storage_root: str, base_url: str | None = None) -> None:
        self.root = Path(storage_root).resolve()
        self.base_url = base_url.rstrip("/") if base_url else None
        self.root.mkdir(parents=True, exist_ok=True, mode=0o750)

    def _resolve(self, storage_ref: str) -> Path:
        candidate = (self.root / storage_ref).resolve()
        if not candidate.is_relative_to(self.root):
            raise StoragePathError(storage_ref)
        return candidate

    @staticmethod
    def _sidecar(path: Path) -> Path:
        return path.with_name(path.name + SIDECAR_SUFFIX)

    async def _sha256(self, path: Path) -> str:
        digest = hashlib.sha256()
        async with aiofiles.open(path, "rb") as handle:
            while block := await handle.read(self.READ_BLOCK):
                digest.update(block)
        return digest.hexdigest()

    async def _existing_upload(self, path: Path, storage_ref: str, checksum: str) -> dict[str, Any]:
        # Re-sending identical bytes returns the original record; anything else is a clash.
        if await self._sha256(path) != checksum:
            raise StorageAlreadyExistsError(storage_ref)
        sidecar = self._sidecar(path)
        recorded: dict[str, Any] = {}
        if sidecar.exists():
            async with aiofiles.open(sidecar, "r") as handle:
                loaded = json.loads(await handle.read())
            if isinstance(loaded, dict):
                recorded = loaded
        return {
            "storage_ref": storage_ref,
            "checksum": checksum,
            "size": path.stat().st_size,
            "uploaded_at": recorded.get("uploaded_at", utc_now().isoformat()),
        }

    async def _write_verified(self, path: Path, storage_ref: str, content: bytes, checksum: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True, mode=0o750)
        fd, staging = tempfile.mkstemp(dir=path.parent, prefix=".partial_", suffix=path.suffix)
        os.close(fd)
        try:
            async with aiofiles.open(staging, "wb") as handle:
                await handle.write(content)
            os.chmod(staging, 0o640)
            actual = await self._sha256(Path(staging))
            if actual != checksum:
                raise StorageUnavailableException(
                    storage_ref, f"checksum mismatch: expected {checksum}, got {actual}"
                )
            os.replace(staging, path)
        finally:
            if os.path.exists(staging):
                os.unlink(staging)

    async def upload(
        self,
        file_data: BinaryIO,
        storage_ref: str,
        expected_checksum: str,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Store ``file_data`` at ``storage_ref`` and return its stored record."""
        path = self._resolve(storage_ref)
        if path.exists():
            return await self._existing_upload(path, storage_ref, expected_checksum)

        content = file_data.read()
        record: dict[str, Any] = {
            "storage_ref": storage_ref,
            "checksum": expected_checksum,
            "size": len(content),
            "content_type": content_type,
            "uploaded_at": utc_now().isoformat(),
            "custom": metadata or {},
        }
        try:
            await self._write_verified(path, storage_ref, content, expected_checksum)
            async with aiofiles.open(self._sidecar(path), "w") as handle:
                await handle.write(json.dumps(record, indent=2))
        except OSError as e:
            raise StorageUnavailableException(storage_ref, str(e)) from e
        return {key: record[key] for key in ("storage_ref", "checksum", "size", "uploaded_at")}

    async def exists(self, storage_ref: str) -> bool:
        try:
            path = self._resolve(storage_ref)
        except StoragePathError:
            return False
        return await aiofiles.os.path.exists(path)

    def public_url(self, storage_ref: str) -> str:
        """Where clients download the file; relative when no base URL is configured."""
        route = f"/files/{storage_ref}"
        return f"{self.base_url}{route}" if self.base_url else route
