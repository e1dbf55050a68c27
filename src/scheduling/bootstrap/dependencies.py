"""Factories de stores e serviços: criação de implementações concretas.

Este módulo centraliza a criação de stores baseadas nas configurações
de ambiente e o wiring do motor de agendamento.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import TYPE_CHECKING

from config.settings import get_firestore_settings, get_scheduling_settings, get_store_settings
from scheduling.bootstrap.clients import create_firestore_client
from scheduling.infra.stores import (
    FirestoreAppointmentStore,
    FirestoreBranchSettings,
    FirestoreResourceDirectory,
    FirestoreStaffDirectory,
    MemoryAppointmentStore,
    MemoryBranchSettings,
    MemoryResourceDirectory,
    MemoryStaffDirectory,
)
from scheduling.services.availability import AvailabilityOrchestrator, AvailabilityPolicy
from scheduling.services.booking import AppointmentService
from scheduling.services.conflicts import ConflictDetector
from scheduling.services.recurrence import RecurrenceExpander, RecurrencePolicy
from scheduling.services.resources import ResourceAvailabilityChecker
from scheduling.services.slots import SlotGenerator

if TYPE_CHECKING:
    from config.settings import SchedulingSettings
    from scheduling.protocols import (
        AppointmentStoreProtocol,
        BranchSettingsProtocol,
        ResourceDirectoryProtocol,
        StaffDirectoryProtocol,
    )

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Directories:
    """Leituras de cadastro consumidas pelo motor."""

    staff: StaffDirectoryProtocol
    resources: ResourceDirectoryProtocol
    branches: BranchSettingsProtocol


@dataclass(frozen=True)
class SchedulingEngine:
    """Motor montado: decisão única, listagem de slots e reservas."""

    orchestrator: AvailabilityOrchestrator
    slots: SlotGenerator
    booking: AppointmentService


def _warn_memory_backend(component: str) -> None:
    environment = os.getenv("ENVIRONMENT", "development")
    if environment not in ("development", "test"):
        logger.warning(
            "memory_store_in_non_dev",
            extra={"component": component, "backend": "memory", "environment": environment},
        )


# ──────────────────────────────────────────────────────────────────────────────
# Store Factories
# ──────────────────────────────────────────────────────────────────────────────


def create_appointment_store() -> AppointmentStoreProtocol:
    """Cria store de agendamentos baseado na configuração.

    Lê APPOINTMENT_STORE_BACKEND da env:
    - "memory": MemoryAppointmentStore (dev only)
    - "firestore": FirestoreAppointmentStore (staging/production)

    Returns:
        Implementação de AppointmentStoreProtocol
    """
    backend = os.getenv("APPOINTMENT_STORE_BACKEND", "memory").lower()

    if backend == "firestore":
        firestore_settings = get_firestore_settings()
        store = FirestoreAppointmentStore(
            create_firestore_client(),
            timezone=get_scheduling_settings().timezone,
            collection=firestore_settings.collection_appointments,
        )
        logger.info("appointment_store_created", extra={"backend": "firestore"})
        return store

    if backend == "memory":
        _warn_memory_backend("appointment_store")
        logger.info("appointment_store_created", extra={"backend": "memory"})
        return MemoryAppointmentStore()

    msg = f"APPOINTMENT_STORE_BACKEND inválido: {backend}"
    raise ValueError(msg)


def create_directories() -> Directories:
    """Cria leituras de profissionais, recursos e filiais no mesmo backend."""
    backend = os.getenv("APPOINTMENT_STORE_BACKEND", "memory").lower()

    if backend == "firestore":
        client = create_firestore_client()
        firestore_settings = get_firestore_settings()
        return Directories(
            staff=FirestoreStaffDirectory(
                client,
                timezone=get_scheduling_settings().timezone,
                collection=firestore_settings.collection_staff,
            ),
            resources=FirestoreResourceDirectory(
                client, collection=firestore_settings.collection_resources
            ),
            branches=FirestoreBranchSettings(
                client, collection=firestore_settings.collection_location_settings
            ),
        )

    if backend == "memory":
        _warn_memory_backend("directories")
        return Directories(
            staff=MemoryStaffDirectory(),
            resources=MemoryResourceDirectory(),
            branches=MemoryBranchSettings(),
        )

    msg = f"APPOINTMENT_STORE_BACKEND inválido: {backend}"
    raise ValueError(msg)


# ──────────────────────────────────────────────────────────────────────────────
# Engine Wiring
# ──────────────────────────────────────────────────────────────────────────────


def build_scheduling_engine(
    store: AppointmentStoreProtocol,
    directories: Directories,
    settings: SchedulingSettings | None = None,
    atomic_booking: bool | None = None,
) -> SchedulingEngine:
    """Conecta stores e políticas ao motor.

    Args:
        store: Store de agendamentos.
        directories: Leituras de cadastro.
        settings: SchedulingSettings (padrão: env).
        atomic_booking: Sobrescreve SCHEDULING_ATOMIC_BOOKING.
    """
    settings = settings or get_scheduling_settings()
    if atomic_booking is None:
        atomic_booking = get_store_settings().atomic_booking

    policy = AvailabilityPolicy.from_settings(settings)
    orchestrator = AvailabilityOrchestrator(
        staff_directory=directories.staff,
        branch_settings=directories.branches,
        conflict_detector=ConflictDetector(store),
        resource_checker=ResourceAvailabilityChecker(
            directories.resources, store, policy.default_hours
        ),
        policy=policy,
    )
    expander = RecurrenceExpander(
        store,
        orchestrator=orchestrator,
        policy=RecurrencePolicy.from_settings(settings),
    )
    booking = AppointmentService(
        store=store,
        orchestrator=orchestrator,
        expander=expander,
        atomic_booking=atomic_booking,
        default_duration=settings.default_duration_min,
    )
    logger.info(
        "scheduling_engine_built",
        extra={
            "component": "bootstrap",
            "on_error": policy.on_error,
            "atomic_booking": atomic_booking,
            "recurrence_revalidate": settings.recurrence_revalidate,
        },
    )
    return SchedulingEngine(
        orchestrator=orchestrator,
        slots=SlotGenerator(orchestrator, settings.slot_granularity_min),
        booking=booking,
    )
