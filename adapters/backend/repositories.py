"""
Owner-scoped CRUD over the backend tables.

Each repository reads the signed-in account id from the auth service and
scopes every query by it, so an account only ever sees and edits its own
rows. Backend errors are raised to the caller unchanged.
"""

from datetime import date, datetime, time
from typing import ClassVar, Generic, TypeVar

from adapters.backend.auth import AuthService
from adapters.backend.client import BackendClient, BackendError
from adapters.backend.records import (
    OWNER_COLUMN,
    Baby,
    BabyFields,
    BackendRecord,
    Caregiver,
    CaregiverFields,
    DailyLog,
    DailyLogFields,
    EmergencyContact,
    EmergencyContactFields,
    HealthDetails,
    HealthDetailsFields,
    HealthProfile,
    HealthProfileFields,
    VitalSignFields,
    VitalSignRecord,
)
from neowatch.domain.models import VitalReading
from neowatch.services.results import logger

RowT = TypeVar("RowT", bound=BackendRecord)
FieldsT = TypeVar("FieldsT", bound=BackendRecord)


class OwnedTableRepository(Generic[RowT, FieldsT]):
    """List / get / create / update / delete rows owned by the current account."""

    table: ClassVar[str]
    row_model: ClassVar[type[BackendRecord]]

    def __init__(self, client: BackendClient, auth: AuthService) -> None:
        self.client = client
        self.auth = auth
        self.logger = logger.bind(component="repository", table=self.table)

    def _row(self, data: dict) -> RowT:
        return self.row_model.model_validate(data)  # type: ignore[return-value]

    async def list_all(self) -> list[RowT]:
        owner_id = await self.auth.current_user_id()
        rows = await self.client.select(self.table, eq={OWNER_COLUMN: owner_id})
        return [self._row(row) for row in rows or []]

    async def get(self, record_id: int) -> RowT:
        owner_id = await self.auth.current_user_id()
        row = await self.client.select(
            self.table, eq={"id": record_id, OWNER_COLUMN: owner_id}, single=True
        )
        return self._row(row)

    async def create(self, fields: FieldsT) -> RowT:
        owner_id = await self.auth.current_user_id()
        payload = {**fields.to_payload(), OWNER_COLUMN: owner_id}
        row = await self.client.insert(self.table, payload)
        self.logger.info("record_created", record_id=row.get("id"))
        return self._row(row)

    async def update(self, record_id: int, fields: FieldsT) -> RowT:
        owner_id = await self.auth.current_user_id()
        payload = fields.to_payload(partial=True)
        payload.pop(OWNER_COLUMN, None)
        row = await self.client.update(
            self.table, payload, eq={"id": record_id, OWNER_COLUMN: owner_id}
        )
        self.logger.info("record_updated", record_id=record_id, columns=sorted(payload))
        return self._row(row)

    async def delete(self, record_id: int) -> bool:
        owner_id = await self.auth.current_user_id()
        await self.client.delete(self.table, eq={"id": record_id, OWNER_COLUMN: owner_id})
        self.logger.info("record_deleted", record_id=record_id)
        return True


class BabyRepository(OwnedTableRepository[Baby, BabyFields]):
    table = "datos"
    row_model = Baby


class CaregiverRepository(OwnedTableRepository[Caregiver, CaregiverFields]):
    table = "Cuidadores"
    row_model = Caregiver


class EmergencyContactRepository(OwnedTableRepository[EmergencyContact, EmergencyContactFields]):
    table = "Emergencias"
    row_model = EmergencyContact


class OwnedSingletonRepository(Generic[RowT, FieldsT]):
    """Tables holding at most one row per account: get or upsert."""

    table: ClassVar[str]
    row_model: ClassVar[type[BackendRecord]]

    def __init__(self, client: BackendClient, auth: AuthService) -> None:
        self.client = client
        self.auth = auth
        self.logger = logger.bind(component="repository", table=self.table)

    async def _get_for(self, owner_id: str) -> RowT | None:
        try:
            row = await self.client.select(self.table, eq={OWNER_COLUMN: owner_id}, single=True)
        except BackendError as e:
            if e.is_no_rows:
                return None
            raise
        return self.row_model.model_validate(row)  # type: ignore[return-value]

    async def get(self) -> RowT | None:
        return await self._get_for(await self.auth.current_user_id())

    async def upsert(self, fields: FieldsT) -> RowT:
        owner_id = await self.auth.current_user_id()
        existing = await self._get_for(owner_id)
        if existing is not None:
            payload = fields.to_payload(partial=True)
            row = await self.client.update(self.table, payload, eq={OWNER_COLUMN: owner_id})
        else:
            payload = {**fields.to_payload(), OWNER_COLUMN: owner_id}
            row = await self.client.insert(self.table, payload)
        self.logger.info("record_upserted", created=existing is None)
        return self.row_model.model_validate(row)  # type: ignore[return-value]


class HealthRepository(OwnedSingletonRepository[HealthProfile, HealthProfileFields]):
    table = "Salud"
    row_model = HealthProfile


class HealthDetailsRepository(OwnedSingletonRepository[HealthDetails, HealthDetailsFields]):
    table = "SaludDetalles"
    row_model = HealthDetails


class VitalSignsRepository:
    """Stored vital-sign samples per baby."""

    table = "vital_signs"

    def __init__(self, client: BackendClient) -> None:
        self.client = client

    async def latest(self, baby_id: str, limit: int = 50) -> list[VitalSignRecord]:
        rows = await self.client.select(
            self.table, eq={"baby_id": baby_id}, order="recorded_at", descending=True, limit=limit
        )
        return [VitalSignRecord.model_validate(row) for row in rows or []]

    async def record(self, fields: VitalSignFields) -> VitalSignRecord:
        row = await self.client.insert(self.table, fields.to_payload())
        return VitalSignRecord.model_validate(row)

    async def record_reading(self, baby_id: str, reading: VitalReading) -> VitalSignRecord:
        return await self.record(VitalSignFields.from_reading(baby_id, reading))


class DailyLogRepository:
    """Care log (feeding, diaper, sleep) entries per baby."""

    table = "daily_logs"

    def __init__(self, client: BackendClient) -> None:
        self.client = client

    async def logs_for_day(self, baby_id: str, day: date | datetime) -> list[DailyLog]:
        """Entries started on `day` (local time unless `day` is aware), newest first."""
        if isinstance(day, datetime):
            tzinfo = day.tzinfo
            day = day.date()
        else:
            tzinfo = None
        start = datetime.combine(day, time.min, tzinfo=tzinfo)
        end = datetime.combine(day, time.max, tzinfo=tzinfo)
        if tzinfo is None:
            start, end = start.astimezone(), end.astimezone()

        rows = await self.client.select(
            self.table,
            eq={"baby_id": baby_id},
            gte={"started_at": start.isoformat()},
            lte={"started_at": end.isoformat()},
            order="started_at",
            descending=True,
        )
        return [DailyLog.model_validate(row) for row in rows or []]

    async def create(self, fields: DailyLogFields) -> DailyLog:
        row = await self.client.insert(self.table, fields.to_payload())
        return DailyLog.model_validate(row)

    async def delete(self, log_id: str | int) -> bool:
        await self.client.delete(self.table, eq={"id": log_id})
        return True
