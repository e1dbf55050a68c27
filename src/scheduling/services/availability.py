"""Orquestrador de disponibilidade.

Ordem fixa, parando na primeira falha:
1. sem profissional -> disponível
2. horário de funcionamento da filial
3. expediente do profissional (candidato inteiro em um sub-intervalo)
4. conflito com agendamentos do profissional
5. recursos (quando informados)

Erros inesperados seguem `AvailabilityPolicy.on_error`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from config.logging import log_fallback
from scheduling.services.business_hours import is_within_business_hours, open_periods
from scheduling.services.intervals import fits_within, interval_for
from scheduling.services.working_hours import DefaultWorkingHours, WorkingHoursResolver
from utils.errors import InvalidTimeError

if TYPE_CHECKING:
    from datetime import datetime

    from config.settings.scheduling import SchedulingSettings
    from scheduling.domain.availability import AvailabilityQuery
    from scheduling.protocols.directories import (
        BranchSettingsProtocol,
        StaffDirectoryProtocol,
    )
    from scheduling.services.conflicts import ConflictDetector
    from scheduling.services.intervals import Interval
    from scheduling.services.resources import ResourceAvailabilityChecker

logger = logging.getLogger(__name__)

OnError = Literal["permit", "deny"]


@dataclass(frozen=True, slots=True)
class AvailabilityPolicy:
    """Política central de decisão do motor.

    on_error: "permit" libera o horário quando uma leitura falha
    (comportamento histórico); "deny" bloqueia.
    default_hours: expediente aplicado sem agenda configurada.
    """

    on_error: OnError = "permit"
    default_hours: DefaultWorkingHours = field(default_factory=DefaultWorkingHours)

    @classmethod
    def from_settings(cls, settings: SchedulingSettings) -> AvailabilityPolicy:
        return cls(
            on_error=settings.on_error,
            default_hours=DefaultWorkingHours.from_settings(settings),
        )

    def decide_on_error(self) -> bool:
        return self.on_error == "permit"


class AvailabilityOrchestrator:
    """Decisão única sim/não usada por reserva, edição e listagem de slots."""

    def __init__(
        self,
        *,
        staff_directory: StaffDirectoryProtocol,
        branch_settings: BranchSettingsProtocol,
        conflict_detector: ConflictDetector,
        resource_checker: ResourceAvailabilityChecker,
        policy: AvailabilityPolicy | None = None,
    ) -> None:
        self._staff_directory = staff_directory
        self._branch_settings = branch_settings
        self._conflicts = conflict_detector
        self._resources = resource_checker
        self._policy = policy or AvailabilityPolicy()
        self._resolver = WorkingHoursResolver(self._policy.default_hours)

    @property
    def policy(self) -> AvailabilityPolicy:
        return self._policy

    async def check_availability(self, query: AvailabilityQuery) -> bool:
        if not query.staff_id:
            return True

        try:
            candidate = interval_for(query.date, query.duration)
        except InvalidTimeError:
            logger.info(
                "availability_invalid_time",
                extra={"component": "availability", "staff_id": query.staff_id},
            )
            return False

        try:
            return await self._evaluate(query, query.staff_id, candidate)
        except Exception as exc:
            decision = self._policy.decide_on_error()
            logger.warning(
                "availability_check_failed",
                extra={
                    "component": "availability",
                    "staff_id": query.staff_id,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            log_fallback(
                logger,
                "availability",
                reason="lookup_failed",
                decision=self._policy.on_error,
            )
            return decision

    async def staff_intervals(
        self,
        company_id: str,
        staff_id: str,
        day: datetime,
    ) -> list[Interval]:
        """Sub-intervalos de trabalho do profissional no dia."""
        schedule = await self._staff_directory.get_schedule(company_id, staff_id)
        return self._resolver.resolve(schedule, day)

    async def business_intervals(
        self,
        company_id: str,
        branch_id: str | None,
        day: datetime,
    ) -> list[Interval] | None:
        """Períodos abertos da filial; None quando não há configuração."""
        hours = await self._branch_settings.get_business_hours(company_id, branch_id)
        if hours is None:
            return None
        return open_periods(hours, day)

    def default_intervals(self, day: datetime) -> list[Interval]:
        return self._policy.default_hours.intervals_for(day)

    async def _evaluate(
        self,
        query: AvailabilityQuery,
        staff_id: str,
        candidate: Interval,
    ) -> bool:
        hours = await self._branch_settings.get_business_hours(
            query.company_id, query.branch_id
        )
        if not is_within_business_hours(hours, candidate):
            return _rejected(staff_id, "outside_business_hours")

        working = await self.staff_intervals(query.company_id, staff_id, candidate.start)
        if not fits_within(candidate, working):
            return _rejected(staff_id, "outside_working_hours")

        if await self._conflicts.has_conflict(
            query.company_id,
            staff_id,
            query.date,
            query.duration,
            exclude_appointment_id=query.exclude_appointment_id,
        ):
            return _rejected(staff_id, "staff_conflict")

        if query.resource_ids and not await self._resources.are_available(
            query.company_id,
            query.resource_ids,
            candidate,
            exclude_appointment_id=query.exclude_appointment_id,
        ):
            return _rejected(staff_id, "resource_unavailable")

        return True


def _rejected(staff_id: str, reason: str) -> bool:
    logger.debug(
        "availability_rejected",
        extra={"component": "availability", "staff_id": staff_id, "reason": reason},
    )
    return False


__all__ = ["AvailabilityOrchestrator", "AvailabilityPolicy"]
