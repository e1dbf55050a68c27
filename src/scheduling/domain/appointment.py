"""Appointment - agendamento do salão persistido no Firestore.

Documento em camelCase (contrato com o dashboard); o modelo expõe
snake_case em Python via alias_generator.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

AppointmentStatus = Literal[
    "pending",
    "confirmed",
    "arrived",
    "in_progress",
    "completed",
    "cancelled",
    "no_show",
]
PaymentStatus = Literal["none", "partial", "full", "refunded"]
RepeatType = Literal["none", "daily", "weekly", "monthly"]

_CAMEL_CONFIG = ConfigDict(
    extra="ignore",
    alias_generator=to_camel,
    populate_by_name=True,
)


class AppointmentServiceLine(BaseModel):
    """Serviço contratado dentro do agendamento."""

    model_config = _CAMEL_CONFIG

    service_id: str = Field(..., description="ID do serviço no catálogo.")
    service_name: str = ""
    duration: int = Field(default=0, ge=0, description="Duração em minutos.")
    price: float = Field(default=0.0, ge=0)


class AppointmentResource(BaseModel):
    """Recurso (cadeira, sala, equipamento) reservado pelo agendamento."""

    model_config = _CAMEL_CONFIG

    resource_id: str
    resource_name: str = ""


class ChangeLogEntry(BaseModel):
    """Entrada do histórico de alterações (quem, quando, o quê)."""

    model_config = _CAMEL_CONFIG

    changed_by: str
    changed_at: datetime
    changes: list[str] = Field(default_factory=list)


class RepeatRule(BaseModel):
    """Regra de repetição de uma série recorrente."""

    model_config = _CAMEL_CONFIG

    type: RepeatType = "none"
    interval: int = Field(default=1, ge=1)
    end_date: datetime | None = None
    max_occurrences: int | None = Field(default=None, ge=1)
    exclude_dates: list[str] = Field(
        default_factory=list,
        description="Datas (YYYY-MM-DD) puladas na expansão.",
    )

    @property
    def is_recurring(self) -> bool:
        return self.type != "none"


class Appointment(BaseModel):
    """Agendamento de um cliente com um profissional.

    `date` guarda o início do atendimento em horário de parede do salão
    (datetime naive); `start_time`/`end_time` são "HH:MM" do mesmo dia.
    """

    model_config = _CAMEL_CONFIG

    id: str | None = None
    company_id: str
    branch_id: str | None = None

    # Cliente (PII fica apenas no documento, nunca em logs)
    client_id: str = ""
    client_name: str = ""
    client_phone: str = ""

    staff_id: str | None = None
    staff_name: str = ""

    services: list[AppointmentServiceLine] = Field(default_factory=list)
    resources: list[AppointmentResource] = Field(default_factory=list)

    date: datetime
    start_time: str
    end_time: str = ""
    total_duration: int = Field(default=0, ge=0)
    total_price: float = Field(default=0.0, ge=0)

    status: AppointmentStatus = "pending"
    payment_status: PaymentStatus = "none"

    repeat: RepeatRule | None = None
    repeat_group_id: str | None = None

    notes: str | None = None
    internal_notes: str | None = None

    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    change_history: list[ChangeLogEntry] = Field(default_factory=list)

    @property
    def resource_ids(self) -> list[str]:
        return [resource.resource_id for resource in self.resources]

    @property
    def is_cancelled(self) -> bool:
        return self.status == "cancelled"

    def services_duration(self) -> int:
        """Soma das durações dos serviços (minutos)."""
        return sum(line.duration for line in self.services)

    def services_price(self) -> float:
        return sum(line.price for line in self.services)

    def to_firestore_dict(self) -> dict[str, Any]:
        """Converte para dict compatível com Firestore (camelCase, sem None).

        Inclui `resourceIds` desnormalizado para consultas array-contains.
        """
        data = self.model_dump(by_alias=True, exclude_none=True, exclude={"id"})
        data["resourceIds"] = self.resource_ids
        return data

    @classmethod
    def from_firestore_dict(
        cls,
        data: dict[str, Any],
        doc_id: str | None = None,
    ) -> Appointment:
        """Cria instância a partir de documento Firestore."""
        payload = dict(data)
        payload.pop("resourceIds", None)
        if doc_id is not None:
            payload["id"] = doc_id
        return cls.model_validate(payload)


__all__ = [
    "Appointment",
    "AppointmentResource",
    "AppointmentServiceLine",
    "AppointmentStatus",
    "ChangeLogEntry",
    "PaymentStatus",
    "RepeatRule",
    "RepeatType",
]
