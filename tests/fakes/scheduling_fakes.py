"""Fakes e builders deterministas para testes do motor de agendamento."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from scheduling.domain.appointment import Appointment, AppointmentServiceLine
from scheduling.domain.schedule import BreakPeriod, DaySchedule, WorkingHoursSchedule
from scheduling.infra.stores.memory_stores import (
    MemoryAppointmentStore,
    MemoryBranchSettings,
    MemoryResourceDirectory,
    MemoryStaffDirectory,
)
from scheduling.services.availability import AvailabilityOrchestrator
from scheduling.services.conflicts import ConflictDetector
from scheduling.services.resources import ResourceAvailabilityChecker
from utils.errors import FirestoreUnavailableError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from scheduling.domain.schedule import BusinessHours, Resource
    from scheduling.protocols.directories import (
        BranchSettingsProtocol,
        ResourceDirectoryProtocol,
        StaffDirectoryProtocol,
    )
    from scheduling.services.availability import AvailabilityPolicy

# Segunda-feira
MONDAY = datetime(2026, 3, 2)
COMPANY_ID = "cmp-1"
STAFF_ID = "staff-1"
FIXED_NOW = datetime(2026, 2, 20, 12, 0, tzinfo=UTC)

WEEKDAYS_MON_FRI = ("monday", "tuesday", "wednesday", "thursday", "friday")


def at(hour: int, minute: int = 0, day: datetime = MONDAY) -> datetime:
    return day.replace(hour=hour, minute=minute, second=0, microsecond=0)


def weekly_schedule(
    start: str = "09:00",
    end: str = "18:00",
    breaks: Sequence[tuple[str, str]] = (),
    days: Sequence[str] = WEEKDAYS_MON_FRI,
    **overrides: object,
) -> WorkingHoursSchedule:
    """Agenda configurada com o mesmo expediente nos dias informados."""
    day = DaySchedule(
        is_working=True,
        start=start,
        end=end,
        breaks=[BreakPeriod(start=b_start, end=b_end) for b_start, b_end in breaks],
    )
    return WorkingHoursSchedule(
        is_scheduled=True,
        working_hours={name: day for name in days},
        **overrides,
    )


def make_appointment(
    start_time: str = "10:00",
    duration: int = 30,
    day: datetime = MONDAY,
    **overrides: object,
) -> Appointment:
    hour, minute = (int(part) for part in start_time.split(":"))
    data: dict[str, object] = {
        "company_id": COMPANY_ID,
        "staff_id": STAFF_ID,
        "client_id": "client-1",
        "services": [
            AppointmentServiceLine(service_id="svc-cut", duration=duration, price=50.0)
        ],
        "date": at(hour, minute, day),
        "start_time": start_time,
        "total_duration": duration,
        "status": "confirmed",
    }
    data.update(overrides)
    return Appointment(**data)


class FailingStaffDirectory:
    """Directory cujo acesso sempre falha (Firestore indisponível)."""

    async def get_schedule(self, company_id: str, staff_id: str) -> WorkingHoursSchedule | None:
        raise FirestoreUnavailableError("staff lookup timeout")


class FailingBranchSettings:
    async def get_business_hours(
        self,
        company_id: str,
        branch_id: str | None,
    ) -> BusinessHours | None:
        raise FirestoreUnavailableError("settings lookup timeout")


class StaticResourceDirectory:
    """Directory de recursos com contagem de consultas."""

    def __init__(self, *resources: Resource) -> None:
        self._resources = {resource.id: resource for resource in resources}
        self.lookups: list[str] = []

    async def get_resource(self, company_id: str, resource_id: str) -> Resource | None:
        self.lookups.append(resource_id)
        return self._resources.get(resource_id)


class FailingSeriesStore(MemoryAppointmentStore):
    """Store em memória cujo batch de série falha sem gravar nada."""

    async def commit_series(
        self,
        original: Appointment,
        occurrences: Sequence[Appointment],
    ) -> list[str]:
        raise FirestoreUnavailableError("batch commit failed")


class RacingAppointmentStore(MemoryAppointmentStore):
    """Simula outra reserva gravada entre a checagem e a escrita."""

    def __init__(self, competitor: Appointment) -> None:
        super().__init__()
        self._competitor = competitor

    async def create_if_free(
        self,
        appointment: Appointment,
        is_free: Callable[[Sequence[Appointment]], bool],
    ) -> str | None:
        await self.create(self._competitor)
        return await super().create_if_free(appointment, is_free)


def fixed_clock() -> datetime:
    return FIXED_NOW


def build_orchestrator(
    store: MemoryAppointmentStore,
    *,
    schedule: WorkingHoursSchedule | None = None,
    business_hours: BusinessHours | None = None,
    resources: Sequence[Resource] = (),
    policy: AvailabilityPolicy | None = None,
    staff_directory: StaffDirectoryProtocol | None = None,
    branch_settings: BranchSettingsProtocol | None = None,
    resource_directory: ResourceDirectoryProtocol | None = None,
) -> AvailabilityOrchestrator:
    """Orquestrador em memória para STAFF_ID (e filial padrão None)."""
    if staff_directory is None:
        staff_directory = MemoryStaffDirectory(
            {STAFF_ID: schedule} if schedule is not None else {}
        )
    if branch_settings is None:
        branch_settings = MemoryBranchSettings(
            {None: business_hours} if business_hours is not None else {}
        )
    if resource_directory is None:
        resource_directory = MemoryResourceDirectory(resources)
    return AvailabilityOrchestrator(
        staff_directory=staff_directory,
        branch_settings=branch_settings,
        conflict_detector=ConflictDetector(store),
        resource_checker=ResourceAvailabilityChecker(resource_directory, store),
        policy=policy,
    )
