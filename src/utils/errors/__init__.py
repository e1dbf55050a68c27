"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    FirestoreUnavailableError,
    InfrastructureError,
    InvalidTimeError,
    NotFoundError,
    SchedulingError,
    SlotUnavailableError,
)

__all__ = [
    "FirestoreUnavailableError",
    "InfrastructureError",
    "InvalidTimeError",
    "NotFoundError",
    "SchedulingError",
    "SlotUnavailableError",
]
