"""Testes do store de agendamentos em memória."""

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from scheduling.domain.appointment import AppointmentResource
from scheduling.infra.stores.memory_stores import (
    MemoryAppointmentStore,
    MemoryBranchSettings,
    MemoryStaffDirectory,
)
from scheduling.protocols import AppointmentStoreProtocol, StaffDirectoryProtocol
from scheduling.services.conflicts import staff_slot_is_free
from scheduling.services.intervals import Interval
from tests.fakes.scheduling_fakes import (
    COMPANY_ID,
    MONDAY,
    STAFF_ID,
    at,
    make_appointment,
    weekly_schedule,
)
from utils.errors import NotFoundError


class TestMemoryAppointmentStore:
    """Leituras, escritas e isolamento de cópias."""

    def test_implements_protocols(self) -> None:
        assert isinstance(MemoryAppointmentStore(), AppointmentStoreProtocol)
        assert isinstance(MemoryStaffDirectory(), StaffDirectoryProtocol)

    @pytest.mark.asyncio
    async def test_create_assigns_new_id(self) -> None:
        store = MemoryAppointmentStore()
        appointment_id = await store.create(make_appointment(id="ignored"))
        assert appointment_id != "ignored"
        assert (await store.get(appointment_id)).id == appointment_id

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self) -> None:
        store = MemoryAppointmentStore([make_appointment(id="a1")])
        record = await store.get("a1")
        record.notes = "changed"
        assert (await store.get("a1")).notes is None

    @pytest.mark.asyncio
    async def test_list_for_staff_uses_half_open_range(self) -> None:
        tuesday = MONDAY + timedelta(days=1)
        store = MemoryAppointmentStore(
            [
                make_appointment("10:00", id="mon"),
                make_appointment("00:00", day=tuesday, id="tue"),
                make_appointment("10:00", id="other", staff_id="staff-2"),
            ]
        )
        found = await store.list_for_staff(COMPANY_ID, STAFF_ID, MONDAY, tuesday)
        assert [item.id for item in found] == ["mon"]

    @pytest.mark.asyncio
    async def test_list_for_resource_filters_by_resource(self) -> None:
        chair = [AppointmentResource(resource_id="chair-1")]
        store = MemoryAppointmentStore(
            [make_appointment(id="with", resources=chair), make_appointment(id="without")]
        )
        found = await store.list_for_resource(
            COMPANY_ID, "chair-1", MONDAY, MONDAY + timedelta(days=1)
        )
        assert [item.id for item in found] == ["with"]

    @pytest.mark.asyncio
    async def test_list_range_filters_by_branch(self) -> None:
        store = MemoryAppointmentStore(
            [make_appointment(id="a1", branch_id="b1"), make_appointment(id="a2", branch_id="b2")]
        )
        found = await store.list_range(
            COMPANY_ID, MONDAY, MONDAY + timedelta(days=1), branch_id="b2"
        )
        assert [item.id for item in found] == ["a2"]

    @pytest.mark.asyncio
    async def test_save_unknown_appointment_raises(self) -> None:
        with pytest.raises(NotFoundError):
            await MemoryAppointmentStore().save(make_appointment(id="ghost"))

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self) -> None:
        store = MemoryAppointmentStore([make_appointment(id="a1")])
        await store.delete("a1")
        await store.delete("a1")
        assert store.all() == []

    @pytest.mark.asyncio
    async def test_apply_batch_is_all_or_nothing(self) -> None:
        store = MemoryAppointmentStore([make_appointment(id="a1"), make_appointment(id="a2")])
        updated = (await store.get("a1")).model_copy(update={"status": "cancelled"})
        with pytest.raises(NotFoundError):
            await store.apply_batch([updated, make_appointment(id="ghost")], ["a2"])
        assert (await store.get("a1")).status == "confirmed"
        assert await store.get("a2") is not None

    @pytest.mark.asyncio
    async def test_commit_series_requires_saved_original(self) -> None:
        with pytest.raises(NotFoundError):
            await MemoryAppointmentStore().commit_series(make_appointment(id="ghost"), [])


class TestGuardedWrites:
    """Escrita condicional serializada por profissional e dia."""

    @pytest.mark.asyncio
    async def test_concurrent_creates_for_same_slot_book_once(self) -> None:
        store = MemoryAppointmentStore()
        candidate = make_appointment("10:00", 30)
        is_free = staff_slot_is_free(Interval(at(10), at(10, 30)))

        results = await asyncio.gather(
            *(store.create_if_free(candidate, is_free) for _ in range(5))
        )

        assert sum(result is not None for result in results) == 1
        assert len(store.all()) == 1

    @pytest.mark.asyncio
    async def test_save_if_free_rejects_taken_slot(self) -> None:
        store = MemoryAppointmentStore(
            [make_appointment("10:00", id="a1"), make_appointment("11:00", id="a2")]
        )
        moved = (await store.get("a1")).model_copy(
            update={"date": at(11), "start_time": "11:00", "end_time": "11:30"}
        )
        saved = await store.save_if_free(
            moved, staff_slot_is_free(Interval(at(11), at(11, 30)), "a1")
        )
        assert saved is False
        assert (await store.get("a1")).start_time == "10:00"


class TestMemoryDirectories:
    """Directories de agenda e funcionamento."""

    @pytest.mark.asyncio
    async def test_staff_schedule_lookup(self) -> None:
        directory = MemoryStaffDirectory()
        assert await directory.get_schedule(COMPANY_ID, STAFF_ID) is None
        directory.set_schedule(STAFF_ID, weekly_schedule())
        assert (await directory.get_schedule(COMPANY_ID, STAFF_ID)).is_scheduled

    @pytest.mark.asyncio
    async def test_branch_without_hours_returns_none(self) -> None:
        assert await MemoryBranchSettings().get_business_hours(COMPANY_ID, "b1") is None
