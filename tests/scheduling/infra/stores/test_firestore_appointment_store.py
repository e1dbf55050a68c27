"""Testes do FirestoreAppointmentStore com cliente mockado."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import pytest

from scheduling.domain.appointment import RepeatRule
from scheduling.infra.stores.firestore_appointment_store import (
    FirestoreAppointmentStore,
    from_wall_clock,
    to_wall_clock,
)
from tests.fakes.scheduling_fakes import COMPANY_ID, MONDAY, STAFF_ID, at, make_appointment
from utils.errors import FirestoreUnavailableError

SAO_PAULO = "America/Sao_Paulo"


def _snapshot(doc_id: str, data: dict | None) -> MagicMock:
    doc = MagicMock()
    doc.id = doc_id
    doc.exists = data is not None
    doc.to_dict.return_value = data
    return doc


def _stored_document() -> dict:
    return {
        "companyId": COMPANY_ID,
        "staffId": STAFF_ID,
        "date": datetime(2026, 3, 2, 13, 0, tzinfo=UTC),
        "startTime": "10:00",
        "endTime": "10:30",
        "totalDuration": 30,
        "status": "confirmed",
        "resourceIds": [],
    }


@pytest.fixture
def collection() -> MagicMock:
    collection = MagicMock()
    collection.where.return_value = collection
    return collection


@pytest.fixture
def client(collection: MagicMock) -> MagicMock:
    client = MagicMock()
    client.collection.return_value = collection
    return client


@pytest.fixture
def store(client: MagicMock) -> FirestoreAppointmentStore:
    return FirestoreAppointmentStore(client, timezone=SAO_PAULO)


class TestWallClock:
    """Conversão entre timestamp e horário de parede."""

    def test_round_trip_in_salon_timezone(self) -> None:
        tz = ZoneInfo(SAO_PAULO)
        stored = from_wall_clock(at(10), tz)
        assert stored.utcoffset() is not None
        assert to_wall_clock(stored.astimezone(UTC), tz) == at(10)

    def test_naive_values_pass_through(self) -> None:
        assert to_wall_clock(at(10), ZoneInfo("UTC")) == at(10)


class TestReads:
    """Leituras e tradução de erros do SDK."""

    @pytest.mark.asyncio
    async def test_get_converts_timestamp_to_wall_clock(self, store, collection) -> None:
        collection.document.return_value.get.return_value = _snapshot("a1", _stored_document())

        appointment = await store.get("a1")

        assert appointment.id == "a1"
        assert appointment.date == at(10)
        collection.document.assert_called_with("a1")

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, store, collection) -> None:
        collection.document.return_value.get.return_value = _snapshot("a1", None)
        assert await store.get("a1") is None

    @pytest.mark.asyncio
    async def test_get_failure_raises_unavailable(self, store, collection) -> None:
        collection.document.return_value.get.side_effect = RuntimeError("deadline exceeded")
        with pytest.raises(FirestoreUnavailableError):
            await store.get("a1")

    @pytest.mark.asyncio
    async def test_list_for_staff_filters_company_staff_and_day(self, store, collection) -> None:
        collection.stream.return_value = [_snapshot("a1", _stored_document())]

        found = await store.list_for_staff(COMPANY_ID, STAFF_ID, MONDAY, at(23, 59))

        assert [item.id for item in found] == ["a1"]
        fields = [call.kwargs["filter"].field_path for call in collection.where.call_args_list]
        assert fields == ["companyId", "staffId", "date", "date"]

    @pytest.mark.asyncio
    async def test_stream_failure_raises_unavailable(self, store, collection) -> None:
        collection.stream.side_effect = RuntimeError("unavailable")
        with pytest.raises(FirestoreUnavailableError):
            await store.list_by_group("grp-1")


class TestWrites:
    """Escritas simples e em lote."""

    @pytest.mark.asyncio
    async def test_create_writes_camel_case_document(self, store, collection) -> None:
        ref = collection.document.return_value
        ref.id = "new-id"

        appointment_id = await store.create(make_appointment("10:00", id="ignored"))

        assert appointment_id == "new-id"
        document = ref.set.call_args.args[0]
        assert "id" not in document
        assert document["companyId"] == COMPANY_ID
        assert document["startTime"] == "10:00"
        assert document["date"] == at(10).replace(tzinfo=ZoneInfo(SAO_PAULO))
        assert document["resourceIds"] == []

    @pytest.mark.asyncio
    async def test_repeat_end_date_is_localized(self, store, collection) -> None:
        rule = RepeatRule(type="weekly", end_date=at(10).replace(day=30))
        await store.create(make_appointment(repeat=rule))
        document = collection.document.return_value.set.call_args.args[0]
        assert document["repeat"]["endDate"].tzinfo is not None

    @pytest.mark.asyncio
    async def test_commit_series_uses_single_batch(self, store, client, collection) -> None:
        batch = client.batch.return_value
        refs = [MagicMock(id=f"occ-{index}") for index in range(2)]
        original_ref = MagicMock(id="a1")
        collection.document.side_effect = [*refs, original_ref]
        original = make_appointment(id="a1", repeat_group_id="a1")

        created = await store.commit_series(original, [make_appointment(), make_appointment()])

        assert created == ["occ-0", "occ-1"]
        assert batch.set.call_count == 2
        batch.update.assert_called_once()
        assert batch.update.call_args.args[1]["repeatGroupId"] == "a1"
        batch.commit.assert_called_once()

    @pytest.mark.asyncio
    async def test_failed_batch_raises_unavailable(self, store, client) -> None:
        client.batch.return_value.commit.side_effect = RuntimeError("aborted")
        with pytest.raises(FirestoreUnavailableError):
            await store.apply_batch([make_appointment(id="a1")], ["a2"])
