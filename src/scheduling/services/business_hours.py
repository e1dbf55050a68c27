"""Gate de horário de funcionamento da filial."""

from __future__ import annotations

from typing import TYPE_CHECKING

from scheduling.services.intervals import fits_within
from scheduling.services.working_hours import DefaultWorkingHours, resolve_day_intervals

if TYPE_CHECKING:
    from datetime import datetime

    from scheduling.domain.schedule import BusinessHours
    from scheduling.services.intervals import Interval

_BUSINESS_DEFAULTS = DefaultWorkingHours(start="09:00", end="17:00")


def open_periods(hours: BusinessHours, day: datetime) -> list[Interval]:
    """Períodos abertos do dia (janela menos pausas). Dia ausente = fechado."""
    day_hours = hours.day(day)
    if day_hours is None:
        return []
    return resolve_day_intervals(day_hours.to_day_schedule(), day, _BUSINESS_DEFAULTS)


def is_within_business_hours(hours: BusinessHours | None, candidate: Interval) -> bool:
    """Sem configuração a filial está sempre aberta.

    Com configuração, o candidato deve caber inteiro em um período aberto.
    """
    if hours is None:
        return True
    return fits_within(candidate, open_periods(hours, candidate.start))


__all__ = ["is_within_business_hours", "open_periods"]
