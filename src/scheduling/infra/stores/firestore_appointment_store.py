"""Firestore Appointment Store.

Estrutura no Firestore:
    appointments/{appointment_id}

`date` é gravado como timestamp no fuso do salão e lido de volta como
datetime naive de parede. `resourceIds` é desnormalizado para consultas
array-contains. Consultas por profissional/recurso exigem índices
compostos (companyId + staffId/resourceIds + date).
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo

from google.cloud import firestore
from google.cloud.firestore import FieldFilter

from scheduling.domain.appointment import Appointment
from scheduling.protocols.appointment_store import AppointmentStoreProtocol
from utils.errors import FirestoreUnavailableError, NotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from google.cloud.firestore import Client as FirestoreClient

logger = logging.getLogger(__name__)

APPOINTMENTS_COLLECTION = "appointments"


def to_wall_clock(value: datetime, tz: ZoneInfo) -> datetime:
    """Timestamp do Firestore (aware) -> datetime naive no fuso do salão."""
    if value.tzinfo is None:
        return value
    return value.astimezone(tz).replace(tzinfo=None)


def from_wall_clock(value: datetime, tz: ZoneInfo) -> datetime:
    """Datetime naive de parede -> aware no fuso do salão para gravação."""
    if value.tzinfo is not None:
        return value
    return value.replace(tzinfo=tz)


class FirestoreAppointmentStore(AppointmentStoreProtocol):
    """Store de agendamentos usando Firestore.

    Características:
        - Escrita condicional via transação (relê o dia do profissional)
        - Séries e ações em lote via WriteBatch (tudo ou nada)
        - Falhas do SDK viram FirestoreUnavailableError

    Args:
        firestore_client: Cliente Firestore
        timezone: Fuso de parede do salão (ex: "America/Sao_Paulo")
        collection: Nome da collection de agendamentos
    """

    def __init__(
        self,
        firestore_client: FirestoreClient,
        timezone: str = "UTC",
        collection: str = APPOINTMENTS_COLLECTION,
    ) -> None:
        self._db = firestore_client
        self._tz = ZoneInfo(timezone)
        self._collection_name = collection

    def _collection(self) -> Any:
        return self._db.collection(self._collection_name)

    def _to_document(self, appointment: Appointment) -> dict[str, Any]:
        data = appointment.to_firestore_dict()
        data["date"] = from_wall_clock(appointment.date, self._tz)
        repeat = data.get("repeat")
        if appointment.repeat is not None and appointment.repeat.end_date is not None:
            repeat["endDate"] = from_wall_clock(appointment.repeat.end_date, self._tz)
        return data

    def _from_document(self, doc: Any) -> Appointment:
        data = dict(doc.to_dict() or {})
        if isinstance(data.get("date"), datetime):
            data["date"] = to_wall_clock(data["date"], self._tz)
        repeat = data.get("repeat")
        if isinstance(repeat, dict) and isinstance(repeat.get("endDate"), datetime):
            data["repeat"] = {**repeat, "endDate": to_wall_clock(repeat["endDate"], self._tz)}
        return Appointment.from_firestore_dict(data, doc_id=doc.id)

    def _day_query(
        self,
        company_id: str,
        field: str,
        op: str,
        value: str,
        start: datetime,
        end: datetime,
    ) -> Any:
        return (
            self._collection()
            .where(filter=FieldFilter("companyId", "==", company_id))
            .where(filter=FieldFilter(field, op, value))
            .where(filter=FieldFilter("date", ">=", from_wall_clock(start, self._tz)))
            .where(filter=FieldFilter("date", "<", from_wall_clock(end, self._tz)))
        )

    def _read(self, action: str, query: Any) -> list[Appointment]:
        try:
            return [self._from_document(doc) for doc in query.stream()]
        except Exception as exc:
            _log_failure(action, exc)
            raise FirestoreUnavailableError(f"Erro ao consultar agendamentos: {exc}") from exc

    # ──────────────────────────────────────────────────────────────────────
    # Leituras
    # ──────────────────────────────────────────────────────────────────────

    async def get(self, appointment_id: str) -> Appointment | None:
        return await asyncio.to_thread(self._get_sync, appointment_id)

    def _get_sync(self, appointment_id: str) -> Appointment | None:
        try:
            doc = self._collection().document(appointment_id).get()
        except Exception as exc:
            _log_failure("get", exc)
            raise FirestoreUnavailableError(f"Erro ao ler agendamento: {exc}") from exc
        if not doc.exists:
            return None
        return self._from_document(doc)

    async def list_for_staff(
        self,
        company_id: str,
        staff_id: str,
        start: datetime,
        end: datetime,
    ) -> list[Appointment]:
        query = self._day_query(company_id, "staffId", "==", staff_id, start, end)
        return await asyncio.to_thread(self._read, "list_for_staff", query)

    async def list_for_resource(
        self,
        company_id: str,
        resource_id: str,
        start: datetime,
        end: datetime,
    ) -> list[Appointment]:
        query = self._day_query(
            company_id, "resourceIds", "array_contains", resource_id, start, end
        )
        return await asyncio.to_thread(self._read, "list_for_resource", query)

    async def list_range(
        self,
        company_id: str,
        start: datetime,
        end: datetime,
        staff_id: str | None = None,
        branch_id: str | None = None,
    ) -> list[Appointment]:
        query = (
            self._collection()
            .where(filter=FieldFilter("companyId", "==", company_id))
            .where(filter=FieldFilter("date", ">=", from_wall_clock(start, self._tz)))
            .where(filter=FieldFilter("date", "<", from_wall_clock(end, self._tz)))
        )
        if staff_id:
            query = query.where(filter=FieldFilter("staffId", "==", staff_id))
        if branch_id:
            query = query.where(filter=FieldFilter("branchId", "==", branch_id))
        return await asyncio.to_thread(self._read, "list_range", query)

    async def list_by_group(self, repeat_group_id: str) -> list[Appointment]:
        query = self._collection().where(
            filter=FieldFilter("repeatGroupId", "==", repeat_group_id)
        )
        return await asyncio.to_thread(self._read, "list_by_group", query)

    # ──────────────────────────────────────────────────────────────────────
    # Escritas
    # ──────────────────────────────────────────────────────────────────────

    async def create(self, appointment: Appointment) -> str:
        return await asyncio.to_thread(self._create_sync, appointment)

    def _create_sync(self, appointment: Appointment) -> str:
        try:
            ref = self._collection().document()
            ref.set(self._to_document(appointment))
        except Exception as exc:
            _log_failure("create", exc)
            raise FirestoreUnavailableError(f"Erro ao criar agendamento: {exc}") from exc
        logger.debug("appointment_persisted", extra={"appointment_id": ref.id})
        return ref.id

    async def create_if_free(
        self,
        appointment: Appointment,
        is_free: Callable[[Sequence[Appointment]], bool],
    ) -> str | None:
        return await asyncio.to_thread(self._guarded_write_sync, appointment, is_free, None)

    async def save(self, appointment: Appointment) -> None:
        await asyncio.to_thread(self._save_sync, appointment)

    def _save_sync(self, appointment: Appointment) -> None:
        if not appointment.id:
            raise NotFoundError("Agendamento", "")
        try:
            self._collection().document(appointment.id).set(self._to_document(appointment))
        except Exception as exc:
            _log_failure("save", exc)
            raise FirestoreUnavailableError(f"Erro ao salvar agendamento: {exc}") from exc

    async def save_if_free(
        self,
        appointment: Appointment,
        is_free: Callable[[Sequence[Appointment]], bool],
    ) -> bool:
        if not appointment.id:
            raise NotFoundError("Agendamento", "")
        result = await asyncio.to_thread(
            self._guarded_write_sync, appointment, is_free, appointment.id
        )
        return result is not None

    def _guarded_write_sync(
        self,
        appointment: Appointment,
        is_free: Callable[[Sequence[Appointment]], bool],
        appointment_id: str | None,
    ) -> str | None:
        """Relê o dia do profissional e grava na mesma transação.

        Conflito de escrita concorrente faz o SDK repetir a transação.
        """
        day_start = datetime.combine(appointment.date.date(), datetime.min.time())
        query = self._day_query(
            appointment.company_id,
            "staffId",
            "==",
            appointment.staff_id or "",
            day_start,
            day_start + timedelta(days=1),
        )
        ref = (
            self._collection().document(appointment_id)
            if appointment_id
            else self._collection().document()
        )
        document = self._to_document(appointment)

        @firestore.transactional
        def _write(transaction: Any) -> bool:
            existing = [
                self._from_document(doc) for doc in query.stream(transaction=transaction)
            ]
            if not is_free(existing):
                return False
            transaction.set(ref, document)
            return True

        try:
            written = _write(self._db.transaction())
        except Exception as exc:
            _log_failure("guarded_write", exc)
            raise FirestoreUnavailableError(f"Erro na reserva atômica: {exc}") from exc
        return ref.id if written else None

    async def delete(self, appointment_id: str) -> None:
        await asyncio.to_thread(self._delete_sync, appointment_id)

    def _delete_sync(self, appointment_id: str) -> None:
        try:
            self._collection().document(appointment_id).delete()
        except Exception as exc:
            _log_failure("delete", exc)
            raise FirestoreUnavailableError(f"Erro ao remover agendamento: {exc}") from exc

    async def commit_series(
        self,
        original: Appointment,
        occurrences: Sequence[Appointment],
    ) -> list[str]:
        return await asyncio.to_thread(self._commit_series_sync, original, occurrences)

    def _commit_series_sync(
        self,
        original: Appointment,
        occurrences: Sequence[Appointment],
    ) -> list[str]:
        if not original.id:
            raise NotFoundError("Agendamento", "")
        batch = self._db.batch()
        created_ids: list[str] = []
        for occurrence in occurrences:
            ref = self._collection().document()
            batch.set(ref, self._to_document(occurrence))
            created_ids.append(ref.id)
        batch.update(
            self._collection().document(original.id),
            {
                "repeatGroupId": original.repeat_group_id,
                "updatedAt": original.updated_at,
            },
        )
        try:
            batch.commit()
        except Exception as exc:
            _log_failure("commit_series", exc)
            raise FirestoreUnavailableError(f"Erro ao gravar série: {exc}") from exc
        return created_ids

    async def apply_batch(
        self,
        updates: Sequence[Appointment],
        deletes: Sequence[str],
    ) -> None:
        await asyncio.to_thread(self._apply_batch_sync, updates, deletes)

    def _apply_batch_sync(
        self,
        updates: Sequence[Appointment],
        deletes: Sequence[str],
    ) -> None:
        batch = self._db.batch()
        for appointment in updates:
            if not appointment.id:
                raise NotFoundError("Agendamento", "")
            batch.set(self._collection().document(appointment.id), self._to_document(appointment))
        for appointment_id in deletes:
            batch.delete(self._collection().document(appointment_id))
        try:
            batch.commit()
        except Exception as exc:
            _log_failure("apply_batch", exc)
            raise FirestoreUnavailableError(f"Erro ao aplicar lote: {exc}") from exc


def _log_failure(action: str, exc: Exception) -> None:
    logger.error(
        "appointment_store_failed",
        extra={
            "component": "firestore_appointment_store",
            "action": action,
            "error": str(exc),
            "error_type": type(exc).__name__,
        },
    )
