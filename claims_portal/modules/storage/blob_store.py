"""Blob storage for claim attachment bytes."""

from __future__ import annotations

import asyncio
import os
import random
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional
from urllib.parse import quote

from claims_portal.config import Settings, get_settings
from claims_portal.exceptions import PayloadTooLarge, StorageError
from claims_portal.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_BYTES = 5 * 1024 * 1024
CHUNK_SIZE = 64 * 1024
MAX_REFERENCE_ATTEMPTS = 5


@dataclass(frozen=True)
class StoredBlob:
    """Result of a successful store: the opaque reference and the measured size."""

    reference: str
    size: int


def generate_reference(original_name: str) -> str:
    """Build a collision-resistant blob name that keeps the original extension."""
    suffix = Path(original_name).suffix
    return f"{int(time.time() * 1000)}-{random.randrange(10**9)}{suffix}"


def _storage_error(reference: str, exc: OSError) -> StorageError:
    return StorageError(
        f"Failed to store blob {reference}: {exc}",
        details={"reference": reference},
    )


class BlobStore(ABC):
    """Interface for attachment byte storage."""

    @abstractmethod
    async def store(self, original_name: str, stream: BinaryIO, mime_type: str) -> StoredBlob:
        """Persist the stream under a generated reference.

        Raises:
            PayloadTooLarge: If the content exceeds the per-file limit.
            StorageError: On I/O failure.
        """

    @abstractmethod
    async def delete(self, reference: str) -> None:
        """Remove a stored blob. Missing blobs are not an error."""

    @abstractmethod
    def resolve_url(self, reference: str) -> str:
        """Map a reference to an externally fetchable URL."""


class LocalBlobStore(BlobStore):
    """Stores blobs as files in a local directory served under ``public_base_url``."""

    def __init__(
        self,
        root_dir: Path | str,
        public_base_url: str,
        max_bytes: int = DEFAULT_MAX_BYTES,
    ) -> None:
        self.root_dir = Path(root_dir)
        self.public_base_url = public_base_url.rstrip("/")
        self.max_bytes = max_bytes

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "LocalBlobStore":
        settings = settings or get_settings()
        return cls(
            root_dir=settings.uploads_path,
            public_base_url=settings.public_base_url,
            max_bytes=settings.max_upload_bytes,
        )

    def path_for(self, reference: str) -> Path:
        return self.root_dir / reference

    # ── Store ────────────────────────────────────────────────────────

    async def store(self, original_name: str, stream: BinaryIO, mime_type: str) -> StoredBlob:
        for _ in range(MAX_REFERENCE_ATTEMPTS):
            reference = generate_reference(original_name)
            try:
                size = await asyncio.to_thread(self._write, reference, stream)
            except FileExistsError:
                logger.debug("blob_reference_taken", reference=reference)
                continue
            logger.info(
                "blob_stored",
                reference=reference,
                original_name=original_name,
                mime_type=mime_type,
                size=size,
            )
            return StoredBlob(reference=reference, size=size)
        raise StorageError(
            f"No free blob reference for {original_name} after {MAX_REFERENCE_ATTEMPTS} attempts",
            details={"original_name": original_name},
        )

    def _write(self, reference: str, stream: BinaryIO) -> int:
        """Copy the stream into a part file, then rename it into place.

        Raises ``FileExistsError`` before reading anything when the
        reference is already taken, so the caller can pick another one.
        An existing blob is never overwritten.
        """
        target = self.path_for(reference)
        part = target.with_name(target.name + ".part")
        try:
            self.root_dir.mkdir(parents=True, exist_ok=True)
            if target.exists():
                raise FileExistsError(str(target))
            fh = open(part, "xb")
        except FileExistsError:
            raise
        except OSError as exc:
            raise _storage_error(reference, exc) from exc

        size = 0
        try:
            with fh:
                while True:
                    chunk = stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_bytes:
                        raise PayloadTooLarge(
                            f"File too large (limit {self.max_bytes} bytes)",
                            details={"limit": self.max_bytes},
                        )
                    fh.write(chunk)
            if target.exists():
                raise _storage_error(reference, FileExistsError(str(target)))
            os.replace(part, target)
        except OSError as exc:
            part.unlink(missing_ok=True)
            raise _storage_error(reference, exc) from exc
        except BaseException:
            part.unlink(missing_ok=True)
            raise
        return size

    # ── Delete ───────────────────────────────────────────────────────

    async def delete(self, reference: str) -> None:
        path = self.path_for(reference)
        await asyncio.to_thread(path.unlink, missing_ok=True)
        logger.info("blob_deleted", reference=reference)

    # ── URLs ─────────────────────────────────────────────────────────

    def resolve_url(self, reference: str) -> str:
        return f"{self.public_base_url}/{quote(reference, safe='')}"
