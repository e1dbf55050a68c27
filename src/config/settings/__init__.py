"""Agregador de settings do motor de agendamento do salão.

Re-exporta todas as settings e funções de cada módulo.
Organização por domínio para isolamento de mudanças.
"""

from __future__ import annotations

# Base settings
from config.settings.base import (
    AppointmentStoreBackend,
    AppointmentStoreSettings,
    BaseSettings,
    Environment,
    get_base_settings,
    get_store_settings,
)

# Infrastructure settings
from config.settings.infra import (
    FirestoreSettings,
    get_firestore_settings,
)

# Scheduling engine settings
from config.settings.scheduling import (
    SchedulingSettings,
    get_scheduling_settings,
)

__all__ = [
    "AppointmentStoreBackend",
    "AppointmentStoreSettings",
    "BaseSettings",
    "Environment",
    "FirestoreSettings",
    "SchedulingSettings",
    "get_base_settings",
    "get_firestore_settings",
    "get_scheduling_settings",
    "get_store_settings",
]
