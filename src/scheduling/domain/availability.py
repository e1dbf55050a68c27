"""Modelos de consulta de disponibilidade e projeção de slots."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - usado em runtime pelo schema do Pydantic

from pydantic import BaseModel, ConfigDict, Field


class AvailabilityQuery(BaseModel):
    """Pedido de verificação: pode-se marcar `duration` minutos a partir de `date`?"""

    model_config = ConfigDict(extra="ignore", frozen=True)

    company_id: str = Field(..., description="Empresa dona da agenda.")
    branch_id: str | None = Field(
        default=None,
        description="Filial; define o horário de funcionamento aplicado.",
    )
    staff_id: str | None = Field(
        default=None,
        description="Profissional; sem ele as checagens de agenda são puladas.",
    )
    date: datetime = Field(..., description="Início candidato (horário de parede).")
    duration: int = Field(..., ge=1, description="Duração do atendimento em minutos.")
    resource_ids: tuple[str, ...] = Field(default_factory=tuple)
    exclude_appointment_id: str | None = Field(
        default=None,
        description="Agendamento ignorado nas checagens (fluxo de edição).",
    )


class TimeSlot(BaseModel):
    """Slot de um dia para listagem (não persistido)."""

    model_config = ConfigDict(extra="ignore")

    date: datetime = Field(..., description="Início do slot.")
    start_time: str = Field(..., description="Início no formato HH:MM.")
    end_time: str = Field(..., description="Fim do atendimento no formato HH:MM.")
    available: bool = Field(..., description="Indica se o slot esta disponivel.")
    staff_id: str | None = None


__all__ = ["AvailabilityQuery", "TimeSlot"]
