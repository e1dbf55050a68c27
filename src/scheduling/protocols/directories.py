"""Protocolos de leitura de cadastros consumidos pelo motor."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from scheduling.domain.schedule import BusinessHours, Resource, WorkingHoursSchedule


@runtime_checkable
class StaffDirectoryProtocol(Protocol):
    """Agenda semanal dos profissionais."""

    async def get_schedule(
        self,
        company_id: str,
        staff_id: str,
    ) -> WorkingHoursSchedule | None:
        """Retorna a agenda do profissional ou None se não houver cadastro."""
        ...


@runtime_checkable
class ResourceDirectoryProtocol(Protocol):
    """Cadastro de recursos (cadeiras, salas, equipamentos)."""

    async def get_resource(self, company_id: str, resource_id: str) -> Resource | None:
        """Retorna o recurso ou None se não existir."""
        ...


@runtime_checkable
class BranchSettingsProtocol(Protocol):
    """Configurações da filial (horário de funcionamento)."""

    async def get_business_hours(
        self,
        company_id: str,
        branch_id: str | None,
    ) -> BusinessHours | None:
        """Retorna o funcionamento da filial; None = sempre aberta."""
        ...
