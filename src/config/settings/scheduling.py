"""Settings do motor de disponibilidade e agendamento.

Centraliza a leitura de env do motor (timezone, granularidade de slots,
expediente padrão e políticas de erro/recorrência).
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

_TIME_OF_DAY_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class SchedulingSettings(BaseModel):
    """Configurações usadas pelos serviços de disponibilidade."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    timezone: str = Field(
        default="UTC",
        description="Timezone de parede do salão; horários são interpretados nela.",
    )
    slot_granularity_min: int = Field(
        default=30,
        ge=1,
        description="Passo em minutos entre inícios de slots oferecidos.",
    )
    default_duration_min: int = Field(
        default=30,
        ge=1,
        description="Duração usada quando o agendamento não informa totalDuration.",
    )
    default_work_start: str = Field(
        default="09:00",
        pattern=_TIME_OF_DAY_PATTERN,
        description="Início do expediente padrão quando não há agenda configurada.",
    )
    default_work_end: str = Field(
        default="18:00",
        pattern=_TIME_OF_DAY_PATTERN,
        description="Fim do expediente padrão quando não há agenda configurada.",
    )
    on_error: Literal["permit", "deny"] = Field(
        default="permit",
        description="Resultado da checagem quando uma leitura de dados falha.",
    )
    recurrence_max_occurrences: int = Field(
        default=52,
        ge=1,
        description="Limite padrão de ocorrências de uma série recorrente.",
    )
    recurrence_revalidate: bool = Field(
        default=False,
        description="Revalida disponibilidade de cada ocorrência gerada.",
    )
    recurrence_on_unavailable: Literal["skip", "abort"] = Field(
        default="skip",
        description="Ação quando uma ocorrência revalidada está ocupada.",
    )


def _parse_bool(value: str) -> bool:
    """Converte texto de env em bool com o mesmo padrao dos outros settings."""
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _load_scheduling_from_env() -> SchedulingSettings:
    """Carrega SchedulingSettings a partir de variaveis de ambiente."""
    return SchedulingSettings(
        timezone=os.getenv("SCHEDULING_TIMEZONE", "UTC"),
        slot_granularity_min=int(os.getenv("SCHEDULING_SLOT_GRANULARITY_MIN", "30")),
        default_duration_min=int(os.getenv("SCHEDULING_DEFAULT_DURATION_MIN", "30")),
        default_work_start=os.getenv("SCHEDULING_DEFAULT_WORK_START", "09:00"),
        default_work_end=os.getenv("SCHEDULING_DEFAULT_WORK_END", "18:00"),
        on_error=os.getenv("SCHEDULING_ON_ERROR", "permit").strip().lower(),
        recurrence_max_occurrences=int(
            os.getenv("SCHEDULING_RECURRENCE_MAX_OCCURRENCES", "52")
        ),
        recurrence_revalidate=_parse_bool(
            os.getenv("SCHEDULING_RECURRENCE_REVALIDATE", "false")
        ),
        recurrence_on_unavailable=os.getenv(
            "SCHEDULING_RECURRENCE_ON_UNAVAILABLE", "skip"
        ).strip().lower(),
    )


@lru_cache(maxsize=1)
def get_scheduling_settings() -> SchedulingSettings:
    """Retorna instancia cacheada de SchedulingSettings."""
    return _load_scheduling_from_env()


__all__ = ["SchedulingSettings", "get_scheduling_settings"]
