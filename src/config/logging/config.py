"""Configuração centralizada de logging.

Funções para configurar logging estruturado JSON com:
- Campos obrigatórios (correlation_id, service, company_id, level, logger, message)
- Formatação padronizada
- Níveis configuráveis por ambiente

Uso:
    from config.logging import configure_logging, get_logger

    # Na inicialização do serviço (scheduling/bootstrap/)
    configure_logging(level="INFO", service_name="salon_scheduling")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("slot_checked", extra={"staff_id": "st-1", "available": True})
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import BookingContextFilter
from config.logging.formatters import create_json_formatter

if TYPE_CHECKING:
    from collections.abc import Callable

# Níveis de log válidos
VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

# Nome padrão do serviço
DEFAULT_SERVICE_NAME = "salon_scheduling"


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
    company_id_getter: Callable[[], str] | None = None,
) -> None:
    """Configura logging JSON estruturado para o serviço.

    Deve ser chamada uma vez na inicialização (scheduling/bootstrap/).

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id do
            contexto atual (ContextVar de scheduling.observability).
        company_id_getter: Função que retorna a empresa (tenant) da
            requisição em andamento.

    Raises:
        ValueError: Se o nível de log for inválido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(create_json_formatter())
    handler.addFilter(
        BookingContextFilter(
            service_name,
            correlation_id_getter=correlation_id_getter,
            company_id_getter=company_id_getter,
        )
    )

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Substituir handlers existentes para evitar duplicação
    root.handlers = [handler]


def get_logger(name: str) -> logging.Logger:
    """Retorna logger para o módulo especificado (geralmente __name__)."""
    return logging.getLogger(name)


def log_fallback(
    logger: logging.Logger,
    component: str,
    reason: str | None = None,
    decision: str | None = None,
) -> None:
    """Log observável de fallback aplicado pelo motor (sem PII).

    Registra quando uma política permissiva ou padrão foi acionada
    (ex: erro de leitura no Firestore, agenda ausente, horário inválido).

    Args:
        logger: Logger instance.
        component: Nome do componente (ex: "availability").
        reason: Razão do fallback (ex: "lookup_failed").
        decision: Decisão tomada (ex: "permit", "default_hours").

    Exemplo:
        log_fallback(logger, "availability", reason="lookup_failed", decision="permit")
    """
    extra: dict[str, object] = {
        "fallback_used": True,
        "component": component,
    }
    if reason:
        extra["reason"] = reason
    if decision:
        extra["decision"] = decision

    logger.info(
        "Fallback applied for %s",
        component,
        extra=extra,
    )
