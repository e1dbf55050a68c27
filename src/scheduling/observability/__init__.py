"""Observabilidade: contexto de logs estruturados.

Uso:
    from scheduling.observability import booking_context, get_correlation_id
"""

from scheduling.observability.correlation import (
    booking_context,
    get_company_id,
    get_correlation_id,
    reset_company_id,
    reset_correlation_id,
    set_company_id,
    set_correlation_id,
)

__all__ = [
    "booking_context",
    "get_company_id",
    "get_correlation_id",
    "reset_company_id",
    "reset_correlation_id",
    "set_company_id",
    "set_correlation_id",
]
