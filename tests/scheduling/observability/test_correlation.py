"""Testes do contexto de rastreamento."""

from __future__ import annotations

import logging

from config.logging import BookingContextFilter
from scheduling.observability import (
    booking_context,
    get_company_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)


class TestBookingContext:
    """Testes de booking_context e ContextVars."""

    def test_context_sets_and_restores_values(self) -> None:
        with booking_context(company_id="cmp-1", correlation_id="corr-1") as correlation_id:
            assert correlation_id == "corr-1"
            assert get_correlation_id() == "corr-1"
            assert get_company_id() == "cmp-1"
        assert get_correlation_id() == ""
        assert get_company_id() == ""

    def test_generates_correlation_id_when_missing(self) -> None:
        with booking_context(company_id="cmp-1") as correlation_id:
            assert len(correlation_id) == 36

    def test_set_and_reset(self) -> None:
        token = set_correlation_id("abc")
        assert get_correlation_id() == "abc"
        reset_correlation_id(token)
        assert get_correlation_id() == ""

    def test_filter_reads_active_context(self) -> None:
        filter_ = BookingContextFilter(
            "salon_scheduling",
            correlation_id_getter=get_correlation_id,
            company_id_getter=get_company_id,
        )
        record = logging.LogRecord("x", logging.INFO, "", 0, "msg", (), None)
        with booking_context(company_id="cmp-9", correlation_id="corr-9"):
            filter_.filter(record)
        assert record.correlation_id == "corr-9"
        assert record.company_id == "cmp-9"
