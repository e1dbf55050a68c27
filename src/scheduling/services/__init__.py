"""Serviços do motor de agendamento.

Regras de disponibilidade sem IO direto; leituras e escritas passam
pelos protocolos em scheduling/protocols/.
"""

from scheduling.services.availability import AvailabilityOrchestrator, AvailabilityPolicy
from scheduling.services.booking import AppointmentService
from scheduling.services.conflicts import ConflictDetector
from scheduling.services.recurrence import RecurrenceExpander, RecurrencePolicy
from scheduling.services.resources import ResourceAvailabilityChecker
from scheduling.services.slots import SlotGenerator
from scheduling.services.working_hours import DefaultWorkingHours, WorkingHoursResolver

__all__ = [
    "AppointmentService",
    "AvailabilityOrchestrator",
    "AvailabilityPolicy",
    "ConflictDetector",
    "DefaultWorkingHours",
    "RecurrenceExpander",
    "RecurrencePolicy",
    "ResourceAvailabilityChecker",
    "SlotGenerator",
    "WorkingHoursResolver",
]
