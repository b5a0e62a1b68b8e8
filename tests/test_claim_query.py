"""Tests for the claim query service."""

from __future__ import annotations

import datetime as dt

import pytest

from claims_portal.exceptions import NotFound, ValidationError
from claims_portal.modules.claims import ClaimSubmissionService


async def _submit_on(database, blob_store, day: dt.date, form: dict):
    return await ClaimSubmissionService(database, blob_store, today=lambda: day).submit(form)


class TestGetAll:
    """Tests for ClaimQueryService.get_all."""

    @pytest.mark.asyncio
    async def test_empty(self, query_service) -> None:
        assert await query_service.get_all() == []

    @pytest.mark.asyncio
    async def test_ordered_by_date_descending(self, database, blob_store, query_service, claim_form) -> None:
        """Listing returns the newest claim first regardless of insert order."""
        await _submit_on(database, blob_store, dt.date(2026, 2, 1), claim_form(employee_id="ATS0101"))
        await _submit_on(database, blob_store, dt.date(2026, 2, 9), claim_form(employee_id="ATS0102"))
        await _submit_on(database, blob_store, dt.date(2026, 2, 5), claim_form(employee_id="ATS0103"))

        claims = await query_service.get_all()
        assert [c.date for c in claims] == [dt.date(2026, 2, 9), dt.date(2026, 2, 5), dt.date(2026, 2, 1)]
        assert [c.employee_id for c in claims] == ["ATS0102", "ATS0103", "ATS0101"]

    @pytest.mark.asyncio
    async def test_includes_attachments(self, submission_service, query_service, claim_form, make_upload) -> None:
        await submission_service.submit({**claim_form(), "attachments": [make_upload("taxi.jpg", b"jpeg", "image/jpeg")]})
        claims = await query_service.get_all()
        assert [(a.name, a.size) for a in claims[0].attachments] == [("taxi.jpg", 4)]


class TestGetById:
    """Tests for ClaimQueryService.get_by_id."""

    @pytest.mark.asyncio
    async def test_found(self, submission_service, query_service, claim_form) -> None:
        created = await submission_service.submit(claim_form())
        assert await query_service.get_by_id(created.id) == created

    @pytest.mark.asyncio
    async def test_not_found(self, query_service) -> None:
        with pytest.raises(NotFound) as exc_info:
            await query_service.get_by_id(12345)
        assert exc_info.value.details == {"claim_id": 12345}


class TestGetByEmployee:
    """Tests for ClaimQueryService.get_by_employee."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("employee_id", ["ATS0000", "ATS012", "XYZ0123", "ATS0123 ", "", "ATS00123"])
    async def test_rejects_malformed_ids(self, query_service, employee_id) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await query_service.get_by_employee(employee_id)
        assert exc_info.value.message == "Invalid Employee ID format"

    @pytest.mark.asyncio
    async def test_rejects_before_querying(self, query_service) -> None:
        """Malformed ids fail even when no database is reachable."""
        from unittest.mock import MagicMock

        query_service._database = MagicMock()
        with pytest.raises(ValidationError):
            await query_service.get_by_employee("ATS0000")
        query_service._database.session.assert_not_called()

    @pytest.mark.asyncio
    async def test_accepts_valid_id(self, query_service) -> None:
        assert await query_service.get_by_employee("ATS0123") == []

    @pytest.mark.asyncio
    async def test_filters_and_orders(self, database, blob_store, query_service, claim_form) -> None:
        await _submit_on(database, blob_store, dt.date(2026, 2, 1), claim_form(employee_id="ATS0123"))
        await _submit_on(database, blob_store, dt.date(2026, 2, 3), claim_form(employee_id="ATS0123"))
        await _submit_on(database, blob_store, dt.date(2026, 2, 2), claim_form(employee_id="ATS0456"))

        claims = await query_service.get_by_employee("ATS0123")
        assert [c.date for c in claims] == [dt.date(2026, 2, 3), dt.date(2026, 2, 1)]
        assert {c.employee_id for c in claims} == {"ATS0123"}
