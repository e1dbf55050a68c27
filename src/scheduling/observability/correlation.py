"""Contexto de rastreamento injetado nos logs.

correlation_id identifica uma operação de reserva de ponta a ponta;
company_id identifica a empresa (tenant) cuja agenda está sendo lida.
Ambos usam ContextVar para serem thread/async-safe.

Uso:
    from scheduling.observability import booking_context

    with booking_context(company_id="cmp-1"):
        await service.create_appointment(appointment, user_id)
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")
_company_id: ContextVar[str] = ContextVar("company_id", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual (vazio se não definido)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id; se None, gera um novo UUID.

    Returns:
        Token para reset posterior via reset_correlation_id().
    """
    value = correlation_id or str(uuid.uuid4())
    return _correlation_id.set(value)


def reset_correlation_id(token: Token[str]) -> None:
    _correlation_id.reset(token)


def get_company_id() -> str:
    return _company_id.get()


def set_company_id(company_id: str) -> Token[str]:
    return _company_id.set(company_id)


def reset_company_id(token: Token[str]) -> None:
    _company_id.reset(token)


@contextmanager
def booking_context(
    company_id: str = "",
    correlation_id: str | None = None,
) -> Iterator[str]:
    """Define company_id e correlation_id durante o bloco.

    Yields:
        correlation_id efetivo.
    """
    correlation_token = set_correlation_id(correlation_id)
    company_token = set_company_id(company_id)
    try:
        yield get_correlation_id()
    finally:
        reset_company_id(company_token)
        reset_correlation_id(correlation_token)
