"""Testes do orquestrador de disponibilidade."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

import pytest

from scheduling.domain.appointment import AppointmentResource
from scheduling.domain.availability import AvailabilityQuery
from scheduling.domain.schedule import BusinessDayHours, BusinessHours, Resource
from scheduling.infra.stores.memory_stores import MemoryAppointmentStore
from scheduling.services.availability import AvailabilityPolicy
from scheduling.services.working_hours import DefaultWorkingHours
from tests.fakes.scheduling_fakes import (
    COMPANY_ID,
    MONDAY,
    STAFF_ID,
    FailingBranchSettings,
    FailingStaffDirectory,
    at,
    build_orchestrator,
    make_appointment,
    weekly_schedule,
)

SUNDAY = datetime(2026, 3, 8)


def _query(start: datetime, duration: int = 30, **overrides: object) -> AvailabilityQuery:
    data: dict[str, object] = {
        "company_id": COMPANY_ID,
        "staff_id": STAFF_ID,
        "date": start,
        "duration": duration,
    }
    data.update(overrides)
    return AvailabilityQuery(**data)


class TestStaffWorkingHours:
    """Expediente do profissional com pausa de almoço."""

    @pytest.fixture
    def orchestrator(self):
        return build_orchestrator(
            MemoryAppointmentStore(),
            schedule=weekly_schedule("09:00", "18:00", breaks=[("13:00", "14:00")]),
        )

    @pytest.mark.asyncio
    async def test_rejects_booking_across_break(self, orchestrator) -> None:
        """12:30 por 60 minutos invade a pausa."""
        assert await orchestrator.check_availability(_query(at(12, 30), 60)) is False

    @pytest.mark.asyncio
    async def test_accepts_booking_after_break(self, orchestrator) -> None:
        """14:00 por 60 minutos cabe depois da pausa."""
        assert await orchestrator.check_availability(_query(at(14), 60)) is True

    @pytest.mark.asyncio
    async def test_booking_ending_at_close_is_accepted(self, orchestrator) -> None:
        assert await orchestrator.check_availability(_query(at(17, 30), 30)) is True

    @pytest.mark.asyncio
    async def test_booking_past_close_is_rejected(self, orchestrator) -> None:
        assert await orchestrator.check_availability(_query(at(17, 30), 60)) is False

    @pytest.mark.asyncio
    async def test_booking_ending_at_midnight_is_accepted(self) -> None:
        """Expediente até 24:00 aceita atendimento que termina à meia-noite."""
        orchestrator = build_orchestrator(
            MemoryAppointmentStore([make_appointment("23:00", 30, id="a1")]),
            schedule=weekly_schedule("20:00", "24:00"),
        )
        assert await orchestrator.check_availability(_query(at(23, 30), 30)) is True
        assert await orchestrator.check_availability(_query(at(23, 30), 60)) is False
        assert await orchestrator.check_availability(_query(at(23), 30)) is False

    @pytest.mark.asyncio
    async def test_day_off_is_rejected(self, orchestrator) -> None:
        """Domingo não está no expediente."""
        assert await orchestrator.check_availability(_query(at(10, day=SUNDAY))) is False

    @pytest.mark.asyncio
    async def test_outside_validity_window_is_rejected(self) -> None:
        orchestrator = build_orchestrator(
            MemoryAppointmentStore(),
            schedule=weekly_schedule(scheduled_until=MONDAY - timedelta(days=1)),
        )
        assert await orchestrator.check_availability(_query(at(10))) is False

    @pytest.mark.asyncio
    async def test_missing_schedule_uses_default_hours(self) -> None:
        """Sem agenda configurada vale o expediente padrão da política."""
        orchestrator = build_orchestrator(
            MemoryAppointmentStore(),
            policy=AvailabilityPolicy(default_hours=DefaultWorkingHours("10:00", "12:00")),
        )
        assert await orchestrator.check_availability(_query(at(10))) is True
        assert await orchestrator.check_availability(_query(at(9, 30))) is False
        assert await orchestrator.check_availability(_query(at(10, day=SUNDAY))) is True


class TestDecisionOrder:
    """Filial, conflito e recursos."""

    @pytest.mark.asyncio
    async def test_without_staff_is_always_available(self) -> None:
        orchestrator = build_orchestrator(
            MemoryAppointmentStore([make_appointment("10:00", 60)]),
            resources=[Resource(id="chair-1", status="inactive")],
        )
        query = _query(at(10), staff_id=None, resource_ids=("chair-1",))
        assert await orchestrator.check_availability(query) is True

    @pytest.mark.asyncio
    async def test_staff_conflict_rejects(self) -> None:
        orchestrator = build_orchestrator(
            MemoryAppointmentStore([make_appointment("10:00", 60, id="a1")])
        )
        assert await orchestrator.check_availability(_query(at(10, 30))) is False
        assert await orchestrator.check_availability(_query(at(11))) is True

    @pytest.mark.asyncio
    async def test_exclude_appointment_ignores_own_booking(self) -> None:
        orchestrator = build_orchestrator(
            MemoryAppointmentStore([make_appointment("10:00", 60, id="a1")])
        )
        query = _query(at(10, 30), exclude_appointment_id="a1")
        assert await orchestrator.check_availability(query) is True

    @pytest.mark.asyncio
    async def test_outside_business_hours_rejects(self) -> None:
        hours = BusinessHours(
            days={"monday": BusinessDayHours(open_time="10:00", close_time="16:00")}
        )
        orchestrator = build_orchestrator(MemoryAppointmentStore(), business_hours=hours)
        assert await orchestrator.check_availability(_query(at(9, 30))) is False
        assert await orchestrator.check_availability(_query(at(15, 45))) is False
        assert await orchestrator.check_availability(_query(at(10))) is True

    @pytest.mark.asyncio
    async def test_business_day_missing_from_configuration_is_closed(self) -> None:
        hours = BusinessHours(days={"tuesday": BusinessDayHours()})
        orchestrator = build_orchestrator(MemoryAppointmentStore(), business_hours=hours)
        assert await orchestrator.check_availability(_query(at(10))) is False

    @pytest.mark.asyncio
    async def test_unavailable_resource_rejects(self) -> None:
        booked = make_appointment(
            "10:00",
            30,
            id="a1",
            staff_id="staff-2",
            resources=[AppointmentResource(resource_id="chair-1")],
        )
        orchestrator = build_orchestrator(
            MemoryAppointmentStore([booked]),
            resources=[Resource(id="chair-1")],
        )
        query = _query(at(10), resource_ids=("chair-1",))
        assert await orchestrator.check_availability(query) is False
        assert await orchestrator.check_availability(_query(at(10))) is True

    @pytest.mark.asyncio
    async def test_invalid_duration_is_unavailable(self) -> None:
        """Duração que estoura o calendário vira indisponível."""
        orchestrator = build_orchestrator(MemoryAppointmentStore())
        assert await orchestrator.check_availability(_query(at(10), 10**12)) is False


class TestErrorPolicy:
    """Falhas de leitura seguem AvailabilityPolicy.on_error."""

    @pytest.mark.asyncio
    async def test_lookup_failure_permits_by_default(
        self,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        orchestrator = build_orchestrator(
            MemoryAppointmentStore(),
            staff_directory=FailingStaffDirectory(),
        )
        with caplog.at_level(logging.INFO):
            assert await orchestrator.check_availability(_query(at(10))) is True

        fallback = [r for r in caplog.records if getattr(r, "fallback_used", False)]
        assert len(fallback) == 1
        assert fallback[0].component == "availability"
        assert fallback[0].decision == "permit"
        assert any(r.getMessage() == "availability_check_failed" for r in caplog.records)

    @pytest.mark.asyncio
    async def test_lookup_failure_denies_when_configured(self) -> None:
        orchestrator = build_orchestrator(
            MemoryAppointmentStore(),
            branch_settings=FailingBranchSettings(),
            policy=AvailabilityPolicy(on_error="deny"),
        )
        assert await orchestrator.check_availability(_query(at(10))) is False
