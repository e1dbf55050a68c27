"""Stores em memória: apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Sem persistência entre reinícios.
"""

from __future__ import annotations

import asyncio
import uuid
from collections import defaultdict
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from scheduling.protocols.appointment_store import AppointmentStoreProtocol
from scheduling.protocols.directories import (
    BranchSettingsProtocol,
    ResourceDirectoryProtocol,
    StaffDirectoryProtocol,
)
from utils.errors import NotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from scheduling.domain.appointment import Appointment
    from scheduling.domain.schedule import BusinessHours, Resource, WorkingHoursSchedule


class MemoryAppointmentStore(AppointmentStoreProtocol):
    """Store de agendamentos em memória, apenas para dev/test.

    Escrita condicional serializada por lock por profissional e dia.
    """

    def __init__(self, appointments: Iterable[Appointment] = ()) -> None:
        self._records: dict[str, Appointment] = {}
        self._locks: defaultdict[tuple[str, str, str], asyncio.Lock] = defaultdict(asyncio.Lock)
        for appointment in appointments:
            self._put(appointment)

    def _put(self, appointment: Appointment) -> str:
        appointment_id = appointment.id or uuid.uuid4().hex
        self._records[appointment_id] = appointment.model_copy(
            deep=True, update={"id": appointment_id}
        )
        return appointment_id

    def _select(self, predicate: Callable[[Appointment], bool]) -> list[Appointment]:
        return [item.model_copy(deep=True) for item in self._records.values() if predicate(item)]

    def _lock_for(self, appointment: Appointment) -> asyncio.Lock:
        key = (appointment.company_id, appointment.staff_id or "", appointment.date.date().isoformat())
        return self._locks[key]

    def _staff_day(self, appointment: Appointment) -> list[Appointment]:
        day_start = datetime.combine(appointment.date.date(), datetime.min.time())
        day_end = day_start + timedelta(days=1)
        return self._select(
            lambda item: item.company_id == appointment.company_id
            and item.staff_id == appointment.staff_id
            and day_start <= item.date < day_end
        )

    async def get(self, appointment_id: str) -> Appointment | None:
        record = self._records.get(appointment_id)
        return record.model_copy(deep=True) if record else None

    async def list_for_staff(
        self,
        company_id: str,
        staff_id: str,
        start: datetime,
        end: datetime,
    ) -> list[Appointment]:
        return self._select(
            lambda item: item.company_id == company_id
            and item.staff_id == staff_id
            and start <= item.date < end
        )

    async def list_for_resource(
        self,
        company_id: str,
        resource_id: str,
        start: datetime,
        end: datetime,
    ) -> list[Appointment]:
        return self._select(
            lambda item: item.company_id == company_id
            and resource_id in item.resource_ids
            and start <= item.date < end
        )

    async def list_range(
        self,
        company_id: str,
        start: datetime,
        end: datetime,
        staff_id: str | None = None,
        branch_id: str | None = None,
    ) -> list[Appointment]:
        return self._select(
            lambda item: item.company_id == company_id
            and start <= item.date < end
            and (staff_id is None or item.staff_id == staff_id)
            and (branch_id is None or item.branch_id == branch_id)
        )

    async def list_by_group(self, repeat_group_id: str) -> list[Appointment]:
        return self._select(lambda item: item.repeat_group_id == repeat_group_id)

    async def create(self, appointment: Appointment) -> str:
        return self._put(appointment.model_copy(update={"id": None}))

    async def create_if_free(
        self,
        appointment: Appointment,
        is_free: Callable[[Sequence[Appointment]], bool],
    ) -> str | None:
        async with self._lock_for(appointment):
            if not is_free(self._staff_day(appointment)):
                return None
            return self._put(appointment.model_copy(update={"id": None}))

    async def save(self, appointment: Appointment) -> None:
        if not appointment.id or appointment.id not in self._records:
            raise NotFoundError("Agendamento", appointment.id or "")
        self._put(appointment)

    async def save_if_free(
        self,
        appointment: Appointment,
        is_free: Callable[[Sequence[Appointment]], bool],
    ) -> bool:
        async with self._lock_for(appointment):
            if not is_free(self._staff_day(appointment)):
                return False
            await self.save(appointment)
            return True

    async def delete(self, appointment_id: str) -> None:
        self._records.pop(appointment_id, None)

    async def commit_series(
        self,
        original: Appointment,
        occurrences: Sequence[Appointment],
    ) -> list[str]:
        if not original.id or original.id not in self._records:
            raise NotFoundError("Agendamento", original.id or "")
        created = [self._put(item.model_copy(update={"id": None})) for item in occurrences]
        self._put(original)
        return created

    async def apply_batch(
        self,
        updates: Sequence[Appointment],
        deletes: Sequence[str],
    ) -> None:
        missing = [item.id or "" for item in updates if item.id not in self._records]
        if missing:
            raise NotFoundError("Agendamento", missing[0])
        for item in updates:
            self._put(item)
        for appointment_id in deletes:
            self._records.pop(appointment_id, None)

    def all(self) -> list[Appointment]:
        """Retorna todos os registros (apenas para testes)."""
        return self._select(lambda _item: True)


class MemoryStaffDirectory(StaffDirectoryProtocol):
    """Agendas de profissionais em memória, apenas para dev/test."""

    def __init__(self, schedules: dict[str, WorkingHoursSchedule] | None = None) -> None:
        self._schedules = dict(schedules or {})

    def set_schedule(self, staff_id: str, schedule: WorkingHoursSchedule) -> None:
        self._schedules[staff_id] = schedule

    async def get_schedule(self, company_id: str, staff_id: str) -> WorkingHoursSchedule | None:
        return self._schedules.get(staff_id)


class MemoryResourceDirectory(ResourceDirectoryProtocol):
    """Recursos em memória, apenas para dev/test."""

    def __init__(self, resources: Iterable[Resource] = ()) -> None:
        self._resources = {resource.id: resource for resource in resources}

    def add(self, resource: Resource) -> None:
        self._resources[resource.id] = resource

    async def get_resource(self, company_id: str, resource_id: str) -> Resource | None:
        return self._resources.get(resource_id)


class MemoryBranchSettings(BranchSettingsProtocol):
    """Funcionamento de filiais em memória, apenas para dev/test."""

    def __init__(self, hours: dict[str | None, BusinessHours] | None = None) -> None:
        self._hours = dict(hours or {})

    def set_hours(self, branch_id: str | None, hours: BusinessHours) -> None:
        self._hours[branch_id] = hours

    async def get_business_hours(
        self,
        company_id: str,
        branch_id: str | None,
    ) -> BusinessHours | None:
        return self._hours.get(branch_id)
