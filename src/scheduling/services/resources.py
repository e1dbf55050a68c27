"""Verificação de disponibilidade de recursos compartilhados."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from scheduling.services.conflicts import find_overlapping
from scheduling.services.intervals import day_bounds, fits_within
from scheduling.services.working_hours import DefaultWorkingHours, resolve_day_intervals

if TYPE_CHECKING:
    from collections.abc import Sequence

    from scheduling.domain.schedule import Resource
    from scheduling.protocols.appointment_store import AppointmentStoreProtocol
    from scheduling.protocols.directories import ResourceDirectoryProtocol
    from scheduling.services.intervals import Interval

logger = logging.getLogger(__name__)


class ResourceAvailabilityChecker:
    """Checa status, expediente e capacidade de cada recurso.

    Recurso sem cadastro é logado e ignorado; recurso sem agenda opera o
    dia todo e só a capacidade é verificada.
    """

    def __init__(
        self,
        directory: ResourceDirectoryProtocol,
        store: AppointmentStoreProtocol,
        defaults: DefaultWorkingHours | None = None,
    ) -> None:
        self._directory = directory
        self._store = store
        self._defaults = defaults or DefaultWorkingHours()

    async def are_available(
        self,
        company_id: str,
        resource_ids: Sequence[str],
        candidate: Interval,
        exclude_appointment_id: str | None = None,
    ) -> bool:
        for resource_id in resource_ids:
            resource = await self._directory.get_resource(company_id, resource_id)
            if resource is None:
                logger.warning(
                    "resource_not_found",
                    extra={"component": "resource_checker", "resource_id": resource_id},
                )
                continue
            if not await self._is_available(
                company_id, resource, candidate, exclude_appointment_id
            ):
                return False
        return True

    async def _is_available(
        self,
        company_id: str,
        resource: Resource,
        candidate: Interval,
        exclude_appointment_id: str | None,
    ) -> bool:
        if not resource.is_active:
            _log_rejection(resource, "inactive")
            return False

        if not self._within_schedule(resource, candidate):
            _log_rejection(resource, "outside_schedule")
            return False

        day_start, day_end = day_bounds(candidate.start)
        booked = await self._store.list_for_resource(
            company_id, resource.id, day_start, day_end
        )
        in_use = len(find_overlapping(booked, candidate, exclude_appointment_id))
        if in_use >= resource.capacity:
            _log_rejection(resource, "capacity_reached", in_use=in_use)
            return False
        return True

    def _within_schedule(self, resource: Resource, candidate: Interval) -> bool:
        schedule = resource.schedule
        if schedule is None or not schedule.is_scheduled or not schedule.working_hours:
            return True
        if not schedule.covers(candidate.start):
            return False
        intervals = resolve_day_intervals(
            schedule.day(candidate.start), candidate.start, self._defaults
        )
        return fits_within(candidate, intervals)


def _log_rejection(resource: Resource, reason: str, in_use: int | None = None) -> None:
    extra: dict[str, object] = {
        "component": "resource_checker",
        "resource_id": resource.id,
        "reason": reason,
        "capacity": resource.capacity,
    }
    if in_use is not None:
        extra["in_use"] = in_use
    logger.info("resource_unavailable", extra=extra)


__all__ = ["ResourceAvailabilityChecker"]
