"""Shared test fixtures and configuration."""

from __future__ import annotations

import datetime as dt
import io
import os
from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio

os.environ.setdefault("CLAIMS_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("CLAIMS_LOG_LEVEL", "WARNING")

from claims_portal.config import Settings
from claims_portal.database import Database
from claims_portal.modules.claims import (
    AttachmentUpload,
    ClaimQueryService,
    ClaimReviewService,
    ClaimSubmissionService,
)
from claims_portal.modules.storage import LocalBlobStore

TODAY = dt.date(2026, 3, 14)
BASE_URL = "http://claims.test/uploads"


@pytest.fixture
def make_upload():
    """Factory for in-memory attachment uploads."""

    def _make(name: str, data: bytes = b"receipt", content_type: str = "application/pdf") -> AttachmentUpload:
        return AttachmentUpload(filename=name, stream=io.BytesIO(data), content_type=content_type)

    return _make


@pytest.fixture
def broken_stream():
    """Factory for upload streams that fail after their first chunk."""

    class _BrokenStream:
        def __init__(self) -> None:
            self.reads = 0

        def read(self, size: int = -1) -> bytes:
            self.reads += 1
            if self.reads > 1:
                raise ValueError("I/O operation on closed file")
            return b"x" * 10

    return _BrokenStream


@pytest.fixture
def claim_form():
    """Factory for complete, valid submission forms."""

    def _make(**overrides) -> dict:
        form = {
            "employee_id": "ATS0789",
            "employee_name": "Priya Sharma",
            "title": "Client visit",
            "amount": "1000.00",
            "category": "Travel",
            "description": "Train tickets and hotel for the Pune client visit.",
        }
        form.update(overrides)
        return form

    return _make


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Return test settings."""
    return Settings(
        claims_env="test",
        claims_log_level="WARNING",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'claims.db'}",
        uploads_dir=str(tmp_path / "uploads"),
        public_base_url=BASE_URL,
        seed_sample_data=False,
        _env_file=None,
    )


@pytest_asyncio.fixture
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    """Provide a freshly created database for each test."""
    db = Database.from_settings(settings)
    await db.init_schema()
    yield db
    await db.close()


@pytest.fixture
def uploads_dir(settings: Settings) -> Path:
    return settings.uploads_path


@pytest.fixture
def blob_store(settings: Settings) -> LocalBlobStore:
    return LocalBlobStore.from_settings(settings)


@pytest.fixture
def submission_service(database: Database, blob_store: LocalBlobStore) -> ClaimSubmissionService:
    return ClaimSubmissionService(database, blob_store, today=lambda: TODAY)


@pytest.fixture
def query_service(database: Database, blob_store: LocalBlobStore) -> ClaimQueryService:
    return ClaimQueryService(database, blob_store)


@pytest.fixture
def review_service(database: Database, blob_store: LocalBlobStore) -> ClaimReviewService:
    return ClaimReviewService(database, blob_store)


@pytest.fixture
def today() -> dt.date:
    """The date the submission service treats as today."""
    return TODAY
