"""Stores: implementações concretas de persistência.

Módulos disponíveis:
    - firestore_appointment_store: Agendamentos no Firestore (transação + batch)
    - firestore_directories: Profissionais, recursos e filiais no Firestore
    - memory_stores: Stores em memória para desenvolvimento/testes
"""

from __future__ import annotations

from scheduling.infra.stores.firestore_appointment_store import FirestoreAppointmentStore
from scheduling.infra.stores.firestore_directories import (
    FirestoreBranchSettings,
    FirestoreResourceDirectory,
    FirestoreStaffDirectory,
)
from scheduling.infra.stores.memory_stores import (
    MemoryAppointmentStore,
    MemoryBranchSettings,
    MemoryResourceDirectory,
    MemoryStaffDirectory,
)

__all__ = [
    "FirestoreAppointmentStore",
    "FirestoreBranchSettings",
    "FirestoreResourceDirectory",
    "FirestoreStaffDirectory",
    "MemoryAppointmentStore",
    "MemoryBranchSettings",
    "MemoryResourceDirectory",
    "MemoryStaffDirectory",
]
