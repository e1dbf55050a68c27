"""Resolvedor único de expediente (profissionais, recursos e filiais).

Produz os sub-intervalos de trabalho de um dia: janela do dia menos as
pausas, em ordem. Sem agenda configurada vale o expediente padrão.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from config.logging import log_fallback
from scheduling.services.intervals import Interval, at_time, subtract_all
from utils.errors import InvalidTimeError

if TYPE_CHECKING:
    from datetime import datetime

    from config.settings.scheduling import SchedulingSettings
    from scheduling.domain.schedule import DaySchedule, WorkingHoursSchedule

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DefaultWorkingHours:
    """Expediente padrão, sem pausas.

    Aplicado quando o profissional não tem cadastro, tem `isScheduled`
    falso ou não tem `workingHours`; também completa `start`/`end`
    ausentes num dia de trabalho.
    """

    start: str = "09:00"
    end: str = "18:00"

    @classmethod
    def from_settings(cls, settings: SchedulingSettings) -> DefaultWorkingHours:
        return cls(start=settings.default_work_start, end=settings.default_work_end)

    def intervals_for(self, day: datetime) -> list[Interval]:
        return [Interval(at_time(day, self.start), at_time(day, self.end))]


def resolve_day_intervals(
    day_schedule: DaySchedule | None,
    day: datetime,
    defaults: DefaultWorkingHours,
) -> list[Interval]:
    """Sub-intervalos de trabalho de um dia já selecionado na agenda.

    Dia ausente ou `isWorking` falso: lista vazia. Pausas inválidas são
    ignoradas; janela inválida cai no expediente padrão.
    """
    if day_schedule is None or not day_schedule.is_working:
        return []

    try:
        window = Interval(
            at_time(day, day_schedule.start or defaults.start),
            at_time(day, day_schedule.end or defaults.end),
        )
    except InvalidTimeError:
        log_fallback(logger, "working_hours", reason="invalid_day_window", decision="default_hours")
        window = defaults.intervals_for(day)[0]
    if window.end <= window.start:
        return []

    breaks: list[Interval] = []
    for item in day_schedule.breaks:
        try:
            pause = Interval(at_time(day, item.start), at_time(day, item.end))
        except InvalidTimeError:
            logger.warning(
                "working_hours_break_invalid",
                extra={"break_start": item.start, "break_end": item.end},
            )
            continue
        if pause.end > pause.start:
            breaks.append(pause)

    return subtract_all([window], breaks)


class WorkingHoursResolver:
    """Resolve a agenda semanal de um profissional para uma data."""

    def __init__(self, defaults: DefaultWorkingHours | None = None) -> None:
        self._defaults = defaults or DefaultWorkingHours()

    @property
    def defaults(self) -> DefaultWorkingHours:
        return self._defaults

    def resolve(
        self,
        schedule: WorkingHoursSchedule | None,
        day: datetime,
    ) -> list[Interval]:
        """Sub-intervalos de trabalho ordenados e disjuntos para `day`.

        Fora da janela scheduleStartDate/scheduledUntil retorna vazio.
        """
        if schedule is None or not schedule.is_scheduled or not schedule.working_hours:
            logger.debug("working_hours_default_applied")
            return self._defaults.intervals_for(day)
        if not schedule.covers(day):
            return []
        return resolve_day_intervals(schedule.day(day), day, self._defaults)


__all__ = ["DefaultWorkingHours", "WorkingHoursResolver", "resolve_day_intervals"]
