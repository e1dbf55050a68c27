"""Gerador de slots do dia."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from config.logging import log_fallback
from scheduling.domain.availability import TimeSlot
from scheduling.services.intervals import add_minutes, format_end_time, format_time_of_day
from utils.errors import InvalidTimeError

if TYPE_CHECKING:
    from datetime import datetime

    from scheduling.domain.availability import AvailabilityQuery
    from scheduling.services.availability import AvailabilityOrchestrator
    from scheduling.services.intervals import Interval

logger = logging.getLogger(__name__)

DEFAULT_SLOT_GRANULARITY_MIN = 30


class SlotGenerator:
    """Enumera inícios candidatos e consulta o orquestrador para cada um.

    Com profissional, percorre os sub-intervalos de trabalho dele; sem
    profissional, os períodos abertos da filial (ou o expediente padrão).
    Só emite slots cujo atendimento termina dentro do bloco.
    """

    def __init__(
        self,
        orchestrator: AvailabilityOrchestrator,
        slot_granularity: int = DEFAULT_SLOT_GRANULARITY_MIN,
    ) -> None:
        if slot_granularity <= 0:
            raise ValueError("slot_granularity deve ser > 0")
        self._orchestrator = orchestrator
        self._granularity = slot_granularity

    async def get_available_time_slots(
        self,
        query: AvailabilityQuery,
        slot_granularity: int | None = None,
    ) -> list[TimeSlot]:
        granularity = slot_granularity or self._granularity
        if granularity <= 0:
            raise ValueError("slot_granularity deve ser > 0")

        blocks = await self._blocks_for_day(query)
        try:
            starts = _enumerate_starts(blocks, query.duration, granularity)
        except InvalidTimeError:
            logger.info(
                "slots_invalid_duration",
                extra={"component": "slot_generator", "staff_id": query.staff_id},
            )
            return []

        decisions = await asyncio.gather(
            *(
                self._orchestrator.check_availability(query.model_copy(update={"date": start}))
                for start, _ in starts
            )
        )
        return [
            TimeSlot(
                date=start,
                start_time=format_time_of_day(start),
                end_time=format_end_time(start, end),
                available=available,
                staff_id=query.staff_id,
            )
            for (start, end), available in zip(starts, decisions, strict=True)
        ]

    async def _blocks_for_day(self, query: AvailabilityQuery) -> list[Interval]:
        day = query.date
        try:
            if query.staff_id:
                return await self._orchestrator.staff_intervals(
                    query.company_id, query.staff_id, day
                )
            periods = await self._orchestrator.business_intervals(
                query.company_id, query.branch_id, day
            )
        except Exception as exc:
            logger.warning(
                "slots_schedule_lookup_failed",
                extra={
                    "component": "slot_generator",
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            log_fallback(logger, "slot_generator", reason="lookup_failed", decision="default_hours")
            return self._orchestrator.default_intervals(day)
        if periods is None:
            return self._orchestrator.default_intervals(day)
        return periods


def _enumerate_starts(
    blocks: list[Interval],
    duration: int,
    granularity: int,
) -> list[tuple[datetime, datetime]]:
    starts: list[tuple[datetime, datetime]] = []
    for block in blocks:
        cursor = block.start
        while cursor < block.end:
            slot_end = add_minutes(cursor, duration)
            if slot_end > block.end:
                break
            starts.append((cursor, slot_end))
            cursor = add_minutes(cursor, granularity)
    return starts


__all__ = ["DEFAULT_SLOT_GRANULARITY_MIN", "SlotGenerator"]
