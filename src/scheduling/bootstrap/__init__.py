"""Bootstrap do motor de agendamento: inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings e
conecta implementações concretas aos protocolos.

Uso:
    from scheduling.bootstrap import initialize_app, get_scheduling_engine

    # Na inicialização do serviço
    initialize_app()

    engine = get_scheduling_engine()
    await engine.booking.create_appointment(appointment, user_id)
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from pydantic import ValidationError

from config.logging import configure_logging
from config.settings import (
    get_base_settings,
    get_firestore_settings,
    get_scheduling_settings,
    get_store_settings,
)
from scheduling.observability import get_company_id, get_correlation_id

# Nome do serviço para logs
SERVICE_NAME = "salon_scheduling"

STRICT_VALIDATION_ENVS = {"staging", "production"}

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Inicializa o serviço: logging JSON com correlation_id e company_id.

    O nível vem de BaseSettings.log_level (LOG_LEVEL, ou DEBUG com DEBUG=true).

    Deve ser chamada uma vez no início do serviço.
    """
    configure_logging(
        level=get_base_settings().log_level,
        service_name=SERVICE_NAME,
        correlation_id_getter=get_correlation_id,
        company_id_getter=get_company_id,
    )


def initialize_test_app() -> None:
    """Inicializa logging em nível DEBUG para testes."""
    configure_logging(
        level="DEBUG",
        service_name=f"{SERVICE_NAME}_test",
        correlation_id_getter=get_correlation_id,
        company_id_getter=get_company_id,
    )


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development`/`test` mantém alerta sem bloquear execução local.
    """
    environment = os.getenv("ENVIRONMENT", "development").lower()
    strict_mode = environment in STRICT_VALIDATION_ENVS
    errors: list[str] = []

    base = get_base_settings()
    errors.extend(f"base: {error}" for error in base.validate())

    store_settings = get_store_settings()
    errors.extend(f"store: {error}" for error in store_settings.validate(base))

    if store_settings.backend == "firestore":
        firestore_errors = get_firestore_settings().validate(base.gcp_project)
        errors.extend(f"firestore: {error}" for error in firestore_errors)

    try:
        get_scheduling_settings()
    except ValidationError as exc:
        errors.extend(
            f"scheduling: {'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
            for item in exc.errors()
        )
    except ValueError as exc:
        errors.append(f"scheduling: {exc}")

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if strict_mode:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {environment}:\n{details}")


# ──────────────────────────────────────────────────────────────────────────────
# Getters (lazy initialization com cache)
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_appointment_store():
    """Obtém store de agendamentos (singleton)."""
    from scheduling.bootstrap.dependencies import create_appointment_store
    return create_appointment_store()


@lru_cache(maxsize=1)
def get_scheduling_engine():
    """Obtém o motor montado (singleton).

    Returns:
        SchedulingEngine com orchestrator, slots e booking
    """
    from scheduling.bootstrap.dependencies import build_scheduling_engine, create_directories
    return build_scheduling_engine(get_appointment_store(), create_directories())
