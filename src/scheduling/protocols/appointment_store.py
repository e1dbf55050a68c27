"""Protocolo para persistência de Appointment.

Intervalos de data são semiabertos: [start, end) sobre o campo `date`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime

    from scheduling.domain.appointment import Appointment

    FreePredicate = Callable[[Sequence[Appointment]], bool]


@runtime_checkable
class AppointmentStoreProtocol(Protocol):
    """Contrato para store de agendamentos."""

    async def get(self, appointment_id: str) -> Appointment | None:
        """Busca agendamento por ID."""
        ...

    async def list_for_staff(
        self,
        company_id: str,
        staff_id: str,
        start: datetime,
        end: datetime,
    ) -> list[Appointment]:
        """Agendamentos do profissional no intervalo (inclui cancelados)."""
        ...

    async def list_for_resource(
        self,
        company_id: str,
        resource_id: str,
        start: datetime,
        end: datetime,
    ) -> list[Appointment]:
        """Agendamentos que reservam o recurso no intervalo."""
        ...

    async def list_range(
        self,
        company_id: str,
        start: datetime,
        end: datetime,
        staff_id: str | None = None,
        branch_id: str | None = None,
    ) -> list[Appointment]:
        """Agendamentos da empresa no intervalo, com filtros opcionais."""
        ...

    async def list_by_group(self, repeat_group_id: str) -> list[Appointment]:
        """Ocorrências de uma série recorrente."""
        ...

    async def create(self, appointment: Appointment) -> str:
        """Persiste novo agendamento e retorna o ID gerado."""
        ...

    async def create_if_free(
        self,
        appointment: Appointment,
        is_free: FreePredicate,
    ) -> str | None:
        """Relê o dia do profissional e grava só se `is_free` aprovar.

        Leitura e escrita são atômicas. Retorna None quando recusado.
        """
        ...

    async def save(self, appointment: Appointment) -> None:
        """Substitui o documento existente (appointment.id obrigatório)."""
        ...

    async def save_if_free(
        self,
        appointment: Appointment,
        is_free: FreePredicate,
    ) -> bool:
        """Como `create_if_free`, para edição de um agendamento existente."""
        ...

    async def delete(self, appointment_id: str) -> None:
        """Remove agendamento (correções; fluxo normal cancela)."""
        ...

    async def commit_series(
        self,
        original: Appointment,
        occurrences: Sequence[Appointment],
    ) -> list[str]:
        """Grava ocorrências e a marcação do original em um único batch."""
        ...

    async def apply_batch(
        self,
        updates: Sequence[Appointment],
        deletes: Sequence[str],
    ) -> None:
        """Aplica atualizações e remoções atomicamente."""
        ...
