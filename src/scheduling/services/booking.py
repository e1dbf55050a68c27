"""Fronteira de reserva: criação, edição e ciclo de vida de agendamentos.

Toda escrita que muda horário passa pelo orquestrador; com reserva
atômica ligada, a gravação ainda relê o dia do profissional dentro do
store e só grava se o horário continuar livre.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Literal

from scheduling.domain.appointment import Appointment, ChangeLogEntry
from scheduling.domain.availability import AvailabilityQuery
from scheduling.services.conflicts import staff_slot_is_free
from scheduling.services.intervals import (
    add_minutes,
    at_time,
    format_end_time,
    format_time_of_day,
    interval_for,
)
from utils.errors import InvalidTimeError, NotFoundError, SlotUnavailableError

if TYPE_CHECKING:
    from collections.abc import Callable

    from scheduling.domain.appointment import AppointmentStatus
    from scheduling.protocols.appointment_store import AppointmentStoreProtocol
    from scheduling.services.availability import AvailabilityOrchestrator
    from scheduling.services.intervals import Interval
    from scheduling.services.recurrence import RecurrenceExpander

logger = logging.getLogger(__name__)

SeriesScope = Literal["this", "future", "all"]

_TIMING_FIELDS = (
    "date",
    "start_time",
    "end_time",
    "staff_id",
    "total_duration",
    "services",
    "resources",
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AppointmentService:
    """Operações de agendamento expostas ao dashboard."""

    def __init__(
        self,
        *,
        store: AppointmentStoreProtocol,
        orchestrator: AvailabilityOrchestrator,
        expander: RecurrenceExpander,
        atomic_booking: bool = True,
        default_duration: int = 30,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._orchestrator = orchestrator
        self._expander = expander
        self._atomic = atomic_booking
        self._default_duration = default_duration
        self._clock = clock

    async def check_availability(self, query: AvailabilityQuery) -> bool:
        return await self._orchestrator.check_availability(query)

    async def create_appointment(self, appointment: Appointment, user_id: str) -> str:
        """Valida, grava e expande a série (se houver). Retorna o ID.

        Raises:
            SlotUnavailableError: horário ocupado, fora do expediente ou inválido.
        """
        prepared = self._normalize(appointment)
        now = self._clock()
        prepared = prepared.model_copy(
            update={
                "id": None,
                "created_by": user_id,
                "created_at": now,
                "updated_at": now,
                "change_history": [
                    ChangeLogEntry(
                        changed_by=user_id,
                        changed_at=now,
                        changes=["Appointment created"],
                    )
                ],
            }
        )

        if not await self._orchestrator.check_availability(_query_for(prepared)):
            _log_rejected("create", prepared)
            raise SlotUnavailableError()

        if self._atomic and prepared.staff_id:
            appointment_id = await self._store.create_if_free(
                prepared, staff_slot_is_free(_interval_of(prepared))
            )
            if appointment_id is None:
                _log_rejected("create", prepared, reason="lost_race")
                raise SlotUnavailableError()
        else:
            appointment_id = await self._store.create(prepared)

        logger.info(
            "appointment_created",
            extra={
                "component": "booking",
                "appointment_id": appointment_id,
                "staff_id": prepared.staff_id,
            },
        )

        if prepared.repeat is not None and prepared.repeat.is_recurring:
            created = prepared.model_copy(update={"id": appointment_id})
            try:
                await self._expander.expand(created, user_id)
            except Exception:
                logger.exception(
                    "recurrence_expansion_failed",
                    extra={
                        "component": "booking",
                        "appointment_id": appointment_id,
                        "result": "error",
                    },
                )
                raise
        return appointment_id

    async def update_appointment(
        self,
        appointment_id: str,
        changes: dict[str, Any],
        user_id: str,
    ) -> Appointment:
        """Aplica alterações parciais (nomes snake_case) com histórico.

        Revalida disponibilidade quando data, horário (início ou fim),
        profissional, duração, serviços ou recursos mudam. endTime é sempre
        recalculado a partir de startTime e da duração.
        """
        current = await self._require(appointment_id)
        merged = Appointment.model_validate(
            {**current.model_dump(), **changes, "id": appointment_id}
        )
        timing_changed = _timing_changed(current, merged)
        if timing_changed:
            merged = self._normalize(merged)
        elif "services" in changes:
            merged = merged.model_copy(update={"total_price": merged.services_price()})

        now = self._clock()
        entry = ChangeLogEntry(
            changed_by=user_id,
            changed_at=now,
            changes=_describe_changes(current, merged),
        )
        updated = merged.model_copy(
            update={
                "updated_at": now,
                "change_history": [*current.change_history, entry],
            }
        )

        if timing_changed:
            await self._save_revalidated(updated)
        else:
            await self._store.save(updated)

        logger.info(
            "appointment_updated",
            extra={
                "component": "booking",
                "appointment_id": appointment_id,
                "changes": entry.changes,
            },
        )
        return updated

    async def update_appointment_status(
        self,
        appointment_id: str,
        status: AppointmentStatus,
        user_id: str,
    ) -> Appointment:
        return await self.update_appointment(appointment_id, {"status": status}, user_id)

    async def cancel_appointment(
        self,
        appointment_id: str,
        user_id: str,
        reason: str | None = None,
    ) -> Appointment:
        changes: dict[str, Any] = {"status": "cancelled"}
        if reason:
            changes["internal_notes"] = f"Cancellation reason: {reason}"
        return await self.update_appointment(appointment_id, changes, user_id)

    async def delete_appointment(self, appointment_id: str) -> None:
        await self._store.delete(appointment_id)
        logger.info(
            "appointment_deleted",
            extra={"component": "booking", "appointment_id": appointment_id},
        )

    async def get_appointment(self, appointment_id: str) -> Appointment | None:
        return await self._store.get(appointment_id)

    async def get_appointments(
        self,
        company_id: str,
        start: datetime,
        end: datetime,
        staff_id: str | None = None,
        branch_id: str | None = None,
    ) -> list[Appointment]:
        """Agendamentos no intervalo ordenados por data e horário de início."""
        appointments = await self._store.list_range(
            company_id, start, end, staff_id=staff_id, branch_id=branch_id
        )
        return sorted(appointments, key=lambda item: (item.date.date(), item.start_time))

    async def cancel_series(
        self,
        appointment_id: str,
        user_id: str,
        scope: SeriesScope = "this",
        reason: str | None = None,
    ) -> list[str]:
        """Cancela uma ocorrência, as futuras ou a série inteira (atômico)."""
        targets = await self._series_targets(appointment_id, scope)
        now = self._clock()
        entry = ChangeLogEntry(
            changed_by=user_id,
            changed_at=now,
            changes=["Status changed to cancelled"],
        )
        updates: list[Appointment] = []
        for item in targets:
            if item.is_cancelled:
                continue
            fields: dict[str, Any] = {
                "status": "cancelled",
                "updated_at": now,
                "change_history": [*item.change_history, entry],
            }
            if reason:
                fields["internal_notes"] = f"Cancellation reason: {reason}"
            updates.append(item.model_copy(update=fields))
        await self._store.apply_batch(updates, [])
        cancelled_ids = [item.id for item in updates if item.id]
        logger.info(
            "series_cancelled",
            extra={"component": "booking", "scope": scope, "count": len(cancelled_ids)},
        )
        return cancelled_ids

    async def delete_series(self, appointment_id: str, scope: SeriesScope = "this") -> list[str]:
        targets = await self._series_targets(appointment_id, scope)
        deleted_ids = [item.id for item in targets if item.id]
        await self._store.apply_batch([], deleted_ids)
        logger.info(
            "series_deleted",
            extra={"component": "booking", "scope": scope, "count": len(deleted_ids)},
        )
        return deleted_ids

    async def _series_targets(self, appointment_id: str, scope: SeriesScope) -> list[Appointment]:
        if scope not in ("this", "future", "all"):
            raise ValueError(f"Escopo de série inválido: {scope}")
        anchor = await self._require(appointment_id)
        if scope == "this" or not anchor.repeat_group_id:
            return [anchor]
        series = await self._store.list_by_group(anchor.repeat_group_id)
        if not any(item.id == anchor.id for item in series):
            series.append(anchor)
        if scope == "future":
            series = [item for item in series if item.date >= anchor.date]
        return sorted(series, key=lambda item: item.date)

    async def _save_revalidated(self, appointment: Appointment) -> None:
        if not await self._orchestrator.check_availability(_query_for(appointment)):
            _log_rejected("update", appointment)
            raise SlotUnavailableError()
        if self._atomic and appointment.staff_id:
            saved = await self._store.save_if_free(
                appointment,
                staff_slot_is_free(_interval_of(appointment), appointment.id),
            )
            if not saved:
                _log_rejected("update", appointment, reason="lost_race")
                raise SlotUnavailableError()
            return
        await self._store.save(appointment)

    async def _require(self, appointment_id: str) -> Appointment:
        appointment = await self._store.get(appointment_id)
        if appointment is None:
            raise NotFoundError("Agendamento", appointment_id)
        return appointment

    def _normalize(self, appointment: Appointment) -> Appointment:
        """Deriva totais dos serviços e alinha date/endTime ao startTime.

        Horário ilegível vira SlotUnavailableError (tratado como ocupado).
        """
        duration = (
            appointment.services_duration()
            or appointment.total_duration
            or self._default_duration
        )
        price = appointment.services_price() if appointment.services else appointment.total_price
        try:
            start = at_time(appointment.date, appointment.start_time)
            end = add_minutes(start, duration)
        except InvalidTimeError as exc:
            raise SlotUnavailableError(f"Horário inválido: {appointment.start_time!r}") from exc
        return appointment.model_copy(
            update={
                "date": start,
                "start_time": format_time_of_day(start),
                "end_time": format_end_time(start, end),
                "total_duration": duration,
                "total_price": price,
            }
        )


def _query_for(appointment: Appointment) -> AvailabilityQuery:
    return AvailabilityQuery(
        company_id=appointment.company_id,
        branch_id=appointment.branch_id,
        staff_id=appointment.staff_id,
        date=appointment.date,
        duration=appointment.total_duration,
        resource_ids=tuple(appointment.resource_ids),
        exclude_appointment_id=appointment.id,
    )


def _interval_of(appointment: Appointment) -> Interval:
    return interval_for(appointment.date, appointment.total_duration)


def _timing_changed(current: Appointment, merged: Appointment) -> bool:
    return any(getattr(current, name) != getattr(merged, name) for name in _TIMING_FIELDS)


def _describe_changes(current: Appointment, merged: Appointment) -> list[str]:
    changes: list[str] = []
    if current.date.date() != merged.date.date():
        changes.append("Date changed")
    if current.start_time != merged.start_time:
        changes.append("Time changed")
    if current.staff_id != merged.staff_id:
        changes.append("Staff changed")
    if current.status != merged.status:
        changes.append(f"Status changed to {merged.status}")
    if current.services != merged.services:
        changes.append("Services modified")
    if current.resources != merged.resources:
        changes.append("Resources changed")
    return changes


def _log_rejected(action: str, appointment: Appointment, reason: str = "unavailable") -> None:
    logger.info(
        "appointment_rejected",
        extra={
            "component": "booking",
            "action": action,
            "staff_id": appointment.staff_id,
            "reason": reason,
        },
    )


__all__ = ["AppointmentService", "SeriesScope"]
