"""Expansão de séries recorrentes.

A geração de datas é pura e determinística; a gravação da série (novas
ocorrências + marcação do original com o repeatGroupId) é um único batch.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Literal

from scheduling.domain.appointment import ChangeLogEntry
from scheduling.domain.availability import AvailabilityQuery
from utils.errors import SlotUnavailableError

if TYPE_CHECKING:
    from collections.abc import Callable

    from config.settings.scheduling import SchedulingSettings
    from scheduling.domain.appointment import Appointment, RepeatRule, RepeatType
    from scheduling.protocols.appointment_store import AppointmentStoreProtocol
    from scheduling.services.availability import AvailabilityOrchestrator

logger = logging.getLogger(__name__)

DEFAULT_MAX_OCCURRENCES = 52
RECURRING_CREATED_CHANGE = "Recurring appointment created"


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class RecurrencePolicy:
    """Escolha explícita sobre revalidar ocorrências geradas.

    Padrão: não revalida (a série é validada só na criação do original).
    on_unavailable: "skip" pula a ocorrência ocupada; "abort" cancela a
    série inteira com SlotUnavailableError.
    """

    revalidate_occurrences: bool = False
    on_unavailable: Literal["skip", "abort"] = "skip"
    default_max_occurrences: int = DEFAULT_MAX_OCCURRENCES

    @classmethod
    def from_settings(cls, settings: SchedulingSettings) -> RecurrencePolicy:
        return cls(
            revalidate_occurrences=settings.recurrence_revalidate,
            on_unavailable=settings.recurrence_on_unavailable,
            default_max_occurrences=settings.recurrence_max_occurrences,
        )


def add_months(moment: datetime, months: int) -> datetime:
    """Soma meses mantendo o dia, limitado ao último dia do mês."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def advance(anchor: datetime, repeat_type: RepeatType, steps: int) -> datetime:
    """Data `steps` unidades após `anchor`.

    A série avança a partir da ocorrência anterior, então o corte de fim
    de mês se propaga (31/jan -> 28/fev -> 28/mar).
    """
    if repeat_type == "daily":
        return anchor + timedelta(days=steps)
    if repeat_type == "weekly":
        return anchor + timedelta(weeks=steps)
    if repeat_type == "monthly":
        return add_months(anchor, steps)
    raise ValueError(f"Tipo de repetição sem avanço: {repeat_type}")


def generate_occurrence_dates(
    start: datetime,
    rule: RepeatRule,
    default_max_occurrences: int = DEFAULT_MAX_OCCURRENCES,
) -> list[datetime]:
    """Datas das ocorrências adicionais (o original é a ocorrência 1).

    Para em maxOccurrences - 1 geradas ou quando a data passa de endDate,
    o que vier primeiro. O limite padrão vale sempre que maxOccurrences
    não é informado. Datas em excludeDates contam na série mas não são
    retornadas.
    """
    if not rule.is_recurring:
        return []
    max_occurrences = rule.max_occurrences or default_max_occurrences
    end_date = _as_wall_clock(rule.end_date, start)
    excluded = set(rule.exclude_dates)

    dates: list[datetime] = []
    generated = 0
    occurrence = start
    while generated < max_occurrences - 1:
        occurrence = advance(occurrence, rule.type, rule.interval)
        if end_date is not None and occurrence > end_date:
            break
        generated += 1
        if occurrence.date().isoformat() in excluded:
            continue
        dates.append(occurrence)
    return dates


def _as_wall_clock(value: datetime | None, reference: datetime) -> datetime | None:
    """Alinha endDate (às vezes com tz, vindo do Firestore) ao início naive."""
    if value is None:
        return None
    if value.tzinfo is not None and reference.tzinfo is None:
        return value.replace(tzinfo=None)
    return value


class RecurrenceExpander:
    """Materializa as ocorrências de uma série a partir do original salvo."""

    def __init__(
        self,
        store: AppointmentStoreProtocol,
        orchestrator: AvailabilityOrchestrator | None = None,
        policy: RecurrencePolicy | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._orchestrator = orchestrator
        self._policy = policy or RecurrencePolicy()
        self._clock = clock
        if self._policy.revalidate_occurrences and orchestrator is None:
            raise ValueError("revalidate_occurrences exige um orchestrator")

    async def expand(self, original: Appointment, actor_id: str) -> list[str]:
        """Gera e grava as ocorrências; retorna os IDs criados."""
        rule = original.repeat
        if rule is None or not rule.is_recurring:
            return []
        if not original.id:
            raise ValueError("Agendamento original precisa estar salvo")

        group_id = original.repeat_group_id or original.id
        now = self._clock()
        dates = generate_occurrence_dates(
            original.date, rule, self._policy.default_max_occurrences
        )

        occurrences: list[Appointment] = []
        for when in dates:
            occurrence = original.model_copy(
                deep=True,
                update={
                    "id": None,
                    "date": when,
                    "repeat_group_id": group_id,
                    "created_by": actor_id,
                    "created_at": now,
                    "updated_at": now,
                    "change_history": [
                        ChangeLogEntry(
                            changed_by=actor_id,
                            changed_at=now,
                            changes=[RECURRING_CREATED_CHANGE],
                        )
                    ],
                },
            )
            if self._policy.revalidate_occurrences and not await self._is_free(occurrence):
                if self._policy.on_unavailable == "abort":
                    logger.info(
                        "recurrence_aborted",
                        extra={"component": "recurrence", "repeat_group_id": group_id},
                    )
                    raise SlotUnavailableError(
                        f"Ocorrência de {when.date().isoformat()} não está disponível"
                    )
                logger.info(
                    "recurrence_occurrence_skipped",
                    extra={
                        "component": "recurrence",
                        "repeat_group_id": group_id,
                        "occurrence_date": when.date().isoformat(),
                    },
                )
                continue
            occurrences.append(occurrence)

        tagged = original.model_copy(update={"repeat_group_id": group_id, "updated_at": now})
        created_ids = await self._store.commit_series(tagged, occurrences)
        logger.info(
            "recurrence_expanded",
            extra={
                "component": "recurrence",
                "repeat_group_id": group_id,
                "occurrences": len(created_ids),
            },
        )
        return created_ids

    async def _is_free(self, occurrence: Appointment) -> bool:
        if self._orchestrator is None:
            return True
        return await self._orchestrator.check_availability(
            AvailabilityQuery(
                company_id=occurrence.company_id,
                branch_id=occurrence.branch_id,
                staff_id=occurrence.staff_id,
                date=occurrence.date,
                duration=occurrence.total_duration,
                resource_ids=tuple(occurrence.resource_ids),
            )
        )


__all__ = [
    "DEFAULT_MAX_OCCURRENCES",
    "RECURRING_CREATED_CHANGE",
    "RecurrenceExpander",
    "RecurrencePolicy",
    "add_months",
    "advance",
    "generate_occurrence_dates",
]
