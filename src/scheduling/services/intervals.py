"""Aritmética pura de intervalos de horário.

Intervalos são semiabertos [start, end): extremos que se tocam não se
sobrepõem. Horários são datetimes naive no fuso de parede do salão.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import TYPE_CHECKING

from utils.errors import InvalidTimeError

if TYPE_CHECKING:
    from collections.abc import Iterable

_TIME_OF_DAY = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


@dataclass(frozen=True, slots=True)
class Interval:
    """Intervalo semiaberto [start, end)."""

    start: datetime
    end: datetime

    def overlaps(self, other: Interval) -> bool:
        return self.start < other.end and other.start < self.end

    def contains(self, other: Interval) -> bool:
        """True se `other` cabe inteiro neste intervalo."""
        return self.start <= other.start and other.end <= self.end

    @property
    def minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


def overlaps(a: Interval, b: Interval) -> bool:
    """a.start < b.end AND b.start < a.end."""
    return a.overlaps(b)


def add_minutes(moment: datetime, minutes: int | float) -> datetime:
    """Soma minutos a um horário.

    Raises:
        InvalidTimeError: horário não é datetime ou minutos não é finito.
    """
    if not isinstance(moment, datetime):
        raise InvalidTimeError(f"Horário inválido: {moment!r}")
    if isinstance(minutes, bool) or not isinstance(minutes, (int, float)):
        raise InvalidTimeError(f"Duração inválida: {minutes!r}")
    if isinstance(minutes, float) and not math.isfinite(minutes):
        raise InvalidTimeError(f"Duração inválida: {minutes!r}")
    try:
        return moment + timedelta(minutes=minutes)
    except OverflowError as exc:
        raise InvalidTimeError(f"Duração fora do intervalo: {minutes!r}") from exc


def day_bounds(moment: datetime) -> tuple[datetime, datetime]:
    """Início do dia e início do dia seguinte (limite exclusivo)."""
    if not isinstance(moment, datetime):
        raise InvalidTimeError(f"Data inválida: {moment!r}")
    start = datetime.combine(moment.date(), time.min, tzinfo=moment.tzinfo)
    return start, start + timedelta(days=1)


def parse_time_of_day(value: str) -> time:
    """Interpreta "HH:MM" (hora com 1 ou 2 dígitos).

    "24:00" é aceito como fim de expediente e vira time.max; at_time o
    converte na meia-noite seguinte.
    """
    if not isinstance(value, str):
        raise InvalidTimeError(f"Horário inválido: {value!r}")
    match = _TIME_OF_DAY.match(value)
    if match is None:
        raise InvalidTimeError(f"Horário inválido: {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour == 24 and minute == 0:
        return time.max
    if hour > 23 or minute > 59:
        raise InvalidTimeError(f"Horário inválido: {value!r}")
    return time(hour, minute)


def at_time(day: datetime, value: str) -> datetime:
    """Combina a data de `day` com o horário "HH:MM".

    "24:00" vira a meia-noite do dia seguinte, limite exclusivo do dia.
    """
    if not isinstance(day, datetime):
        raise InvalidTimeError(f"Data inválida: {day!r}")
    parsed = parse_time_of_day(value)
    if parsed == time.max:
        return day_bounds(day)[1]
    return datetime.combine(day.date(), parsed, tzinfo=day.tzinfo)


def format_time_of_day(moment: datetime) -> str:
    return moment.strftime("%H:%M")


def format_end_time(start: datetime, end: datetime) -> str:
    """Formata o fim de um intervalo; meia-noite após o início sai como "24:00"."""
    if end > start and end == day_bounds(start)[1]:
        return "24:00"
    return format_time_of_day(end)


def interval_for(start: datetime, duration_minutes: int | float) -> Interval:
    """Intervalo candidato a partir do início e da duração."""
    return Interval(start, add_minutes(start, duration_minutes))


def subtract(interval: Interval, block: Interval) -> list[Interval]:
    """Remove `block` de `interval` (0, 1 ou 2 sobras)."""
    if not interval.overlaps(block):
        return [interval]
    remaining: list[Interval] = []
    if block.start > interval.start:
        remaining.append(Interval(interval.start, block.start))
    if block.end < interval.end:
        remaining.append(Interval(block.end, interval.end))
    return remaining


def subtract_all(intervals: Iterable[Interval], blocks: Iterable[Interval]) -> list[Interval]:
    """Subtrai cada bloqueio, em ordem de início, da lista de intervalos."""
    current = sorted(intervals, key=lambda item: item.start)
    for block in sorted(blocks, key=lambda item: item.start):
        current = [piece for item in current for piece in subtract(item, block)]
    return current


def fits_within(candidate: Interval, intervals: Iterable[Interval]) -> bool:
    """True se o candidato cabe inteiro em algum dos intervalos."""
    return any(item.contains(candidate) for item in intervals)


__all__ = [
    "Interval",
    "add_minutes",
    "at_time",
    "day_bounds",
    "fits_within",
    "format_end_time",
    "format_time_of_day",
    "interval_for",
    "overlaps",
    "parse_time_of_day",
    "subtract",
    "subtract_all",
]
