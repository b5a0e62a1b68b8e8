"""Attachment blob storage."""

from claims_portal.modules.storage.blob_store import BlobStore, LocalBlobStore, StoredBlob

__all__ = ["BlobStore", "LocalBlobStore", "StoredBlob"]
