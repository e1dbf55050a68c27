"""Agendas semanais: expediente de profissionais, recursos e filiais.

Formato dos documentos (camelCase):
- staff.schedule: {isScheduled, scheduleStartDate, scheduledUntil,
  workingHours: {monday: {isWorking, start, end, breaks: [{start, end}]}}}
- locationSettings.contactDetails.businessHours: texto legado ou
  {monday: {isOpen, openTime, closeTime, breaks: [{startTime, endTime}]}}
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

_ARABIC_DAY_NAMES = {
    "الأحد": "sunday",
    "الإثنين": "monday",
    "الثلاثاء": "tuesday",
    "الأربعاء": "wednesday",
    "الخميس": "thursday",
    "الجمعة": "friday",
    "السبت": "saturday",
}
_CLOSED_MARKERS = frozenset({"closed", "مغلق"})
_RANGE_PATTERN = re.compile(r"(\d{2}:\d{2})\s*-\s*(\d{2}:\d{2})")
_BREAK_PATTERN = re.compile(r"\((?:استراحة|Break):\s*(.+)\)", re.IGNORECASE)

_CAMEL_CONFIG = ConfigDict(
    extra="ignore",
    alias_generator=to_camel,
    populate_by_name=True,
)


def weekday_name(moment: datetime) -> str:
    """Nome do dia da semana em inglês minúsculo (chave das agendas)."""
    return WEEKDAYS[moment.weekday()]


class BreakPeriod(BaseModel):
    """Pausa dentro de um dia de trabalho ("HH:MM" a "HH:MM")."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    start: str = Field(..., validation_alias=AliasChoices("start", "startTime"))
    end: str = Field(..., validation_alias=AliasChoices("end", "endTime"))


class DaySchedule(BaseModel):
    """Expediente de um dia. `start`/`end` ausentes usam o expediente padrão."""

    model_config = _CAMEL_CONFIG

    is_working: bool = False
    start: str | None = None
    end: str | None = None
    breaks: list[BreakPeriod] = Field(default_factory=list)


class WorkingHoursSchedule(BaseModel):
    """Agenda semanal de um profissional ou recurso."""

    model_config = _CAMEL_CONFIG

    is_scheduled: bool = False
    schedule_start_date: datetime | None = None
    scheduled_until: datetime | None = None
    working_hours: dict[str, DaySchedule] = Field(default_factory=dict)

    def day(self, moment: datetime) -> DaySchedule | None:
        return self.working_hours.get(weekday_name(moment))

    def covers(self, moment: datetime) -> bool:
        """True se a data está dentro da janela de validade da agenda."""
        day = moment.date()
        if self.schedule_start_date and day < self.schedule_start_date.date():
            return False
        return not (self.scheduled_until and day > self.scheduled_until.date())


class BusinessDayHours(BaseModel):
    """Horário de funcionamento da filial em um dia."""

    model_config = _CAMEL_CONFIG

    is_open: bool = True
    open_time: str = "09:00"
    close_time: str = "17:00"
    breaks: list[BreakPeriod] = Field(default_factory=list)

    def to_day_schedule(self) -> DaySchedule:
        """Projeta no formato de expediente para reuso do resolvedor."""
        return DaySchedule(
            is_working=self.is_open,
            start=self.open_time,
            end=self.close_time,
            breaks=list(self.breaks),
        )


def _default_week() -> dict[str, BusinessDayHours]:
    week = {day: BusinessDayHours() for day in WEEKDAYS}
    week["sunday"] = BusinessDayHours(is_open=False)
    return week


class BusinessHours(BaseModel):
    """Funcionamento semanal de uma filial.

    Dia ausente numa configuração existente é tratado como fechado.
    """

    model_config = ConfigDict(extra="ignore")

    days: dict[str, BusinessDayHours] = Field(default_factory=dict)

    def day(self, moment: datetime) -> BusinessDayHours | None:
        return self.days.get(weekday_name(moment))

    @classmethod
    def from_text(cls, text: str) -> BusinessHours | None:
        """Interpreta o texto legado exibido no dashboard.

        Exemplo: "Monday: 09:00 - 17:00 (Break: 12:00-13:00)\\nSunday: Closed".
        Dias não citados mantêm o padrão (09:00-17:00, domingo fechado).
        Retorna None para texto vazio (sem configuração).
        """
        if not text or not text.strip():
            return None
        week = _default_week()
        for line in text.splitlines():
            day_name, separator, hours = line.partition(":")
            if not separator:
                continue
            day_key = _resolve_day_key(day_name.strip())
            if day_key is None:
                continue
            hours = hours.strip()
            if hours.lower() in _CLOSED_MARKERS:
                week[day_key] = week[day_key].model_copy(update={"is_open": False})
                continue
            parsed = _parse_open_day(hours)
            if parsed is not None:
                week[day_key] = parsed
        return cls(days=week)

    @classmethod
    def from_firestore_value(cls, value: Any) -> BusinessHours | None:
        """Aceita o texto legado ou o mapa estruturado por dia da semana."""
        if value is None:
            return None
        if isinstance(value, str):
            return cls.from_text(value)
        if isinstance(value, dict):
            if not value:
                return None
            days = {
                str(key).lower(): BusinessDayHours.model_validate(day)
                for key, day in value.items()
                if isinstance(day, dict)
            }
            return cls(days=days)
        raise TypeError(f"Formato de businessHours não suportado: {type(value).__name__}")


def _resolve_day_key(name: str) -> str | None:
    lowered = name.lower()
    if lowered in WEEKDAYS:
        return lowered
    return _ARABIC_DAY_NAMES.get(name)


def _parse_open_day(hours: str) -> BusinessDayHours | None:
    match = _RANGE_PATTERN.search(hours)
    if match is None:
        return None
    breaks: list[BreakPeriod] = []
    break_match = _BREAK_PATTERN.search(hours)
    if break_match:
        for chunk in break_match.group(1).split(","):
            chunk_match = _RANGE_PATTERN.search(chunk)
            if chunk_match:
                breaks.append(
                    BreakPeriod(start=chunk_match.group(1), end=chunk_match.group(2))
                )
    return BusinessDayHours(
        is_open=True,
        open_time=match.group(1),
        close_time=match.group(2),
        breaks=breaks,
    )


class Resource(BaseModel):
    """Recurso compartilhado com capacidade de uso simultâneo."""

    model_config = _CAMEL_CONFIG

    id: str
    company_id: str = ""
    name: str = ""
    status: str = "active"
    active: bool = True
    capacity: int = 1
    schedule: WorkingHoursSchedule | None = None

    @property
    def is_active(self) -> bool:
        return self.status == "active" and self.active

    @classmethod
    def from_firestore_dict(cls, doc_id: str, data: dict[str, Any]) -> Resource:
        """Cria instância a partir do documento `resources/{id}`.

        Aceita `workingHours` no topo do documento (formato do dashboard)
        além de `schedule` aninhado.
        """
        payload = dict(data)
        payload["id"] = doc_id
        working_hours = payload.pop("workingHours", None)
        if working_hours and not payload.get("schedule"):
            payload["schedule"] = {"isScheduled": True, "workingHours": working_hours}
        return cls.model_validate(payload)


__all__ = [
    "WEEKDAYS",
    "BreakPeriod",
    "BusinessDayHours",
    "BusinessHours",
    "DaySchedule",
    "Resource",
    "WorkingHoursSchedule",
    "weekday_name",
]
