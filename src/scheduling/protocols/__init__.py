"""Protocolos e contratos do motor de agendamento."""

from .appointment_store import AppointmentStoreProtocol
from .directories import (
    BranchSettingsProtocol,
    ResourceDirectoryProtocol,
    StaffDirectoryProtocol,
)

__all__ = [
    "AppointmentStoreProtocol",
    "BranchSettingsProtocol",
    "ResourceDirectoryProtocol",
    "StaffDirectoryProtocol",
]
