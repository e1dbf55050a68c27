"""Settings do Firestore.

Configurações para Google Cloud Firestore (collections do salão).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class FirestoreSettings:
    """Configurações do Firestore.

    Attributes:
        project_id: ID do projeto GCP (usa GCP_PROJECT se não definido)
        collection_appointments: Collection de agendamentos
        collection_staff: Collection de profissionais (agenda semanal)
        collection_resources: Collection de recursos (cadeiras, salas)
        collection_location_settings: Collection de configurações da filial
    """

    project_id: str = ""
    collection_appointments: str = "appointments"
    collection_staff: str = "staff"
    collection_resources: str = "resources"
    collection_location_settings: str = "locationSettings"

    def validate(self, gcp_project: str) -> list[str]:
        """Valida configurações do Firestore.

        Args:
            gcp_project: Projeto GCP padrão para fallback.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []
        effective_project = self.project_id or gcp_project

        if not effective_project:
            errors.append(
                "FIRESTORE_PROJECT_ID ou GCP_PROJECT deve estar configurado"
            )

        collections = (
            self.collection_appointments,
            self.collection_staff,
            self.collection_resources,
            self.collection_location_settings,
        )
        if any(not name for name in collections):
            errors.append("Nomes de collection do Firestore não podem ser vazios")

        return errors


def _load_firestore_from_env() -> FirestoreSettings:
    """Carrega FirestoreSettings de variáveis de ambiente."""
    return FirestoreSettings(
        project_id=os.getenv("FIRESTORE_PROJECT_ID", ""),
        collection_appointments=os.getenv(
            "FIRESTORE_COLLECTION_APPOINTMENTS", "appointments"
        ),
        collection_staff=os.getenv("FIRESTORE_COLLECTION_STAFF", "staff"),
        collection_resources=os.getenv("FIRESTORE_COLLECTION_RESOURCES", "resources"),
        collection_location_settings=os.getenv(
            "FIRESTORE_COLLECTION_LOCATION_SETTINGS", "locationSettings"
        ),
    )


@lru_cache(maxsize=1)
def get_firestore_settings() -> FirestoreSettings:
    """Retorna instância cacheada de FirestoreSettings."""
    return _load_firestore_from_env()
