"""Filters de logging para injeção de contexto de agendamento.

Campos injetados:
- correlation_id: ID de rastreamento da operação de reserva
- company_id: empresa (tenant) dona da agenda consultada
- service: Nome do serviço (ex: salon_scheduling)

Nunca adicionar dados de cliente (nome, telefone) nos logs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


def _empty() -> str:
    return ""


class BookingContextFilter(logging.Filter):
    """Injeta correlation_id, company_id e service em cada record de log.

    Valores passados explicitamente via `extra` têm precedência sobre os
    getters de contexto.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
        company_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or _empty
        self._get_company_id = company_id_getter or _empty

    def filter(self, record: logging.LogRecord) -> bool:
        """Enriquece o record; nunca descarta."""
        existing_correlation = getattr(record, "correlation_id", None)
        record.correlation_id = existing_correlation or self._get_correlation_id()
        existing_company = getattr(record, "company_id", None)
        record.company_id = existing_company or self._get_company_id()
        record.service = self._service_name
        return True
