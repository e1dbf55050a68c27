"""Formatters de logging estruturado.

Logs JSON com os campos obrigatórios do serviço de agendamento:
timestamp (asctime), level, logger, message, correlation_id, company_id
e service.
"""

from __future__ import annotations

from pythonjsonlogger.json import JsonFormatter

# Campos obrigatórios em todo log estruturado
REQUIRED_LOG_FIELDS = (
    "asctime",
    "levelname",
    "name",
    "message",
    "correlation_id",
    "company_id",
    "service",
)

# Mapeamento de nomes de campos para formato padrão
FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
}


def create_json_formatter() -> JsonFormatter:
    """Cria formatter JSON com campos padronizados.

    Exemplo de output:
        {
            "asctime": "2026-03-02T10:30:00",
            "level": "INFO",
            "logger": "scheduling.services.availability",
            "message": "availability_checked",
            "correlation_id": "abc-123",
            "company_id": "cmp-1",
            "service": "salon_scheduling",
            "available": true
        }
    """
    format_string = " ".join(f"%({field})s" for field in REQUIRED_LOG_FIELDS)

    return JsonFormatter(
        format_string,
        rename_fields=FIELD_RENAME_MAP,
    )
