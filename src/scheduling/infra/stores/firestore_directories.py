"""Leituras de cadastro no Firestore (profissionais, recursos, filiais).

Estrutura no Firestore:
    staff/{staff_id}                      -> schedule
    resources/{resource_id}               -> status, active, capacity, workingHours
    locationSettings/{company}_{branch}   -> contactDetails.businessHours
    locationSettings/{company}_main       (sem filial)
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo

from scheduling.domain.schedule import BusinessHours, Resource, WorkingHoursSchedule
from scheduling.infra.stores.firestore_appointment_store import to_wall_clock
from scheduling.protocols.directories import (
    BranchSettingsProtocol,
    ResourceDirectoryProtocol,
    StaffDirectoryProtocol,
)
from utils.errors import FirestoreUnavailableError

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient

logger = logging.getLogger(__name__)

STAFF_COLLECTION = "staff"
RESOURCES_COLLECTION = "resources"
LOCATION_SETTINGS_COLLECTION = "locationSettings"


def _read_document(
    db: FirestoreClient,
    collection: str,
    doc_id: str,
) -> dict[str, Any] | None:
    try:
        doc = db.collection(collection).document(doc_id).get()
    except Exception as exc:
        logger.error(
            "directory_read_failed",
            extra={
                "collection": collection,
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )
        raise FirestoreUnavailableError(f"Erro ao ler {collection}: {exc}") from exc
    if not doc.exists:
        return None
    return doc.to_dict() or {}


def _belongs_to(data: dict[str, Any], company_id: str) -> bool:
    owner = data.get("companyId")
    return owner is None or owner == company_id


class FirestoreStaffDirectory(StaffDirectoryProtocol):
    """Agenda semanal lida de `staff/{id}.schedule`."""

    def __init__(
        self,
        firestore_client: FirestoreClient,
        timezone: str = "UTC",
        collection: str = STAFF_COLLECTION,
    ) -> None:
        self._db = firestore_client
        self._tz = ZoneInfo(timezone)
        self._collection = collection

    async def get_schedule(self, company_id: str, staff_id: str) -> WorkingHoursSchedule | None:
        return await asyncio.to_thread(self._get_schedule_sync, company_id, staff_id)

    def _get_schedule_sync(self, company_id: str, staff_id: str) -> WorkingHoursSchedule | None:
        data = _read_document(self._db, self._collection, staff_id)
        if data is None or not _belongs_to(data, company_id):
            return None
        schedule = data.get("schedule")
        if not isinstance(schedule, dict):
            return None
        payload = dict(schedule)
        for key in ("scheduleStartDate", "scheduledUntil"):
            value = payload.get(key)
            if isinstance(value, datetime):
                payload[key] = to_wall_clock(value, self._tz)
        return WorkingHoursSchedule.model_validate(payload)


class FirestoreResourceDirectory(ResourceDirectoryProtocol):
    """Recursos lidos de `resources/{id}`."""

    def __init__(
        self,
        firestore_client: FirestoreClient,
        collection: str = RESOURCES_COLLECTION,
    ) -> None:
        self._db = firestore_client
        self._collection = collection

    async def get_resource(self, company_id: str, resource_id: str) -> Resource | None:
        return await asyncio.to_thread(self._get_resource_sync, company_id, resource_id)

    def _get_resource_sync(self, company_id: str, resource_id: str) -> Resource | None:
        data = _read_document(self._db, self._collection, resource_id)
        if data is None or not _belongs_to(data, company_id):
            return None
        return Resource.from_firestore_dict(resource_id, data)


class FirestoreBranchSettings(BranchSettingsProtocol):
    """Funcionamento lido de `locationSettings/{company}_{branch|main}`."""

    def __init__(
        self,
        firestore_client: FirestoreClient,
        collection: str = LOCATION_SETTINGS_COLLECTION,
    ) -> None:
        self._db = firestore_client
        self._collection = collection

    @staticmethod
    def document_id(company_id: str, branch_id: str | None) -> str:
        return f"{company_id}_{branch_id}" if branch_id else f"{company_id}_main"

    async def get_business_hours(
        self,
        company_id: str,
        branch_id: str | None,
    ) -> BusinessHours | None:
        return await asyncio.to_thread(self._get_business_hours_sync, company_id, branch_id)

    def _get_business_hours_sync(
        self,
        company_id: str,
        branch_id: str | None,
    ) -> BusinessHours | None:
        data = _read_document(self._db, self._collection, self.document_id(company_id, branch_id))
        if data is None:
            return None
        contact_details = data.get("contactDetails") or {}
        return BusinessHours.from_firestore_value(contact_details.get("businessHours"))
