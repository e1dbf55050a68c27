"""Agregador de settings base.

Re-exporta todas as settings base para uso externo.
"""

from __future__ import annotations

from config.settings.base.core import (
    BaseSettings,
    Environment,
    get_base_settings,
)
from config.settings.base.store import (
    AppointmentStoreBackend,
    AppointmentStoreSettings,
    get_store_settings,
)

__all__ = [
    "AppointmentStoreBackend",
    "AppointmentStoreSettings",
    "BaseSettings",
    "Environment",
    "get_base_settings",
    "get_store_settings",
]
