"""Configuração de logging estruturado.

Uso:
    from config.logging import configure_logging, get_logger

    # Na inicialização (bootstrap)
    configure_logging(level="INFO", service_name="salon_scheduling")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("appointment_created", extra={"appointment_id": "apt-1"})
"""

from config.logging.config import configure_logging, get_logger, log_fallback
from config.logging.filters import BookingContextFilter
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "REQUIRED_LOG_FIELDS",
    "BookingContextFilter",
    "configure_logging",
    "create_json_formatter",
    "get_logger",
    "log_fallback",
]
