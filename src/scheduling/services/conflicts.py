"""Detecção de conflito de agenda do profissional."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from scheduling.services.intervals import Interval, at_time, day_bounds, interval_for
from utils.errors import InvalidTimeError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from datetime import datetime

    from scheduling.domain.appointment import Appointment
    from scheduling.protocols.appointment_store import AppointmentStoreProtocol

logger = logging.getLogger(__name__)


def stored_interval(appointment: Appointment, day: datetime) -> Interval:
    """Intervalo de um agendamento salvo, lido sobre a data `day`.

    Sem `endTime` usa `totalDuration`. Raises InvalidTimeError.
    """
    start = at_time(day, appointment.start_time)
    if appointment.end_time:
        return Interval(start, at_time(day, appointment.end_time))
    return interval_for(start, appointment.total_duration)


def find_overlapping(
    appointments: Iterable[Appointment],
    candidate: Interval,
    exclude_appointment_id: str | None = None,
) -> list[Appointment]:
    """Agendamentos ativos que se sobrepõem ao candidato.

    Ignora cancelados e o agendamento excluído. Registro com horário
    ilegível é logado e não gera conflito.
    """
    overlapping: list[Appointment] = []
    for appointment in appointments:
        if appointment.is_cancelled:
            continue
        if exclude_appointment_id and appointment.id == exclude_appointment_id:
            continue
        try:
            booked = stored_interval(appointment, candidate.start)
        except InvalidTimeError:
            logger.warning(
                "stored_appointment_time_invalid",
                extra={
                    "component": "conflict_detector",
                    "appointment_id": appointment.id,
                },
            )
            continue
        if booked.overlaps(candidate):
            overlapping.append(appointment)
    return overlapping


def staff_slot_is_free(
    candidate: Interval,
    exclude_appointment_id: str | None = None,
) -> Callable[[Sequence[Appointment]], bool]:
    """Predicado para escrita condicional no store."""

    def _is_free(appointments: Sequence[Appointment]) -> bool:
        return not find_overlapping(appointments, candidate, exclude_appointment_id)

    return _is_free


class ConflictDetector:
    """Compara o candidato com os agendamentos do profissional no dia."""

    def __init__(self, store: AppointmentStoreProtocol) -> None:
        self._store = store

    async def has_conflict(
        self,
        company_id: str,
        staff_id: str,
        start: datetime,
        duration: int,
        exclude_appointment_id: str | None = None,
    ) -> bool:
        candidate = interval_for(start, duration)
        day_start, day_end = day_bounds(start)
        appointments = await self._store.list_for_staff(
            company_id, staff_id, day_start, day_end
        )
        conflicts = find_overlapping(appointments, candidate, exclude_appointment_id)
        if conflicts:
            logger.info(
                "staff_conflict_found",
                extra={
                    "component": "conflict_detector",
                    "staff_id": staff_id,
                    "conflicting_ids": [item.id for item in conflicts],
                },
            )
        return bool(conflicts)


__all__ = [
    "ConflictDetector",
    "find_overlapping",
    "staff_slot_is_free",
    "stored_interval",
]
