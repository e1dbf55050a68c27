"""Exceções de domínio e de infraestrutura do motor de agendamento."""

from __future__ import annotations


class SchedulingError(Exception):
    """Base para erros do motor de agendamento."""


class InvalidTimeError(SchedulingError, ValueError):
    """Horário/data que não pode ser interpretado (formato inválido, NaN)."""


class SlotUnavailableError(SchedulingError):
    """Rejeição explícita de reserva: o horário não está disponível."""

    def __init__(self, message: str = "Horário selecionado não está disponível") -> None:
        super().__init__(message)


class NotFoundError(SchedulingError, LookupError):
    """Agendamento, profissional ou recurso referenciado não existe."""

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind} não encontrado: {identifier}")
        self.kind = kind
        self.identifier = identifier


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""


class FirestoreUnavailableError(InfrastructureError):
    """Falha de indisponibilidade ao acessar Firestore."""
