"""Settings do armazenamento de agendamentos.

Seleciona o backend do store de appointments (memória ou Firestore).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

AppointmentStoreBackend = Literal["memory", "firestore"]


@dataclass(frozen=True)
class AppointmentStoreSettings:
    """Configurações do store de agendamentos.

    Attributes:
        backend: Backend de persistência dos appointments
        atomic_booking: Usa escrita condicional (verifica e grava atomicamente)
    """

    backend: AppointmentStoreBackend = "memory"
    atomic_booking: bool = True

    def validate(self, base: BaseSettings) -> list[str]:
        """Valida configurações do store.

        Args:
            base: BaseSettings para verificar ambiente.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.backend not in {"memory", "firestore"}:
            errors.append(f"APPOINTMENT_STORE_BACKEND inválido: {self.backend}")

        if self.backend == "memory" and not base.is_development:
            errors.append(
                "APPOINTMENT_STORE_BACKEND=memory proibido em staging/production"
            )

        return errors


def _load_store_from_env() -> AppointmentStoreSettings:
    """Carrega AppointmentStoreSettings de variáveis de ambiente."""
    backend_str = os.getenv("APPOINTMENT_STORE_BACKEND", "memory").lower()
    backend: AppointmentStoreBackend = (
        backend_str if backend_str in ("memory", "firestore") else "memory"
    )
    return AppointmentStoreSettings(
        backend=backend,
        atomic_booking=os.getenv("SCHEDULING_ATOMIC_BOOKING", "true").lower()
        in ("true", "1", "yes"),
    )


@lru_cache(maxsize=1)
def get_store_settings() -> AppointmentStoreSettings:
    """Retorna instância cacheada de AppointmentStoreSettings."""
    return _load_store_from_env()
