"""
Backend record models for the caregiver account.

Each table row maps one-to-one onto a model. Attribute names are English;
aliases keep the backend's column names on the wire. Every owned row carries
the account id (`owner_id`, column `id_Anexo`) of exactly one account.

Two shapes per table:
- `<Name>Fields`: the editable columns, all optional (create / update input)
- `<Name>`: a stored row (fields + primary key + owner)
"""

from datetime import UTC, date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

from neowatch.domain.models import VitalReading

OWNER_COLUMN = "id_Anexo"


class Sex(str, Enum):
    FEMALE = "Femenino"
    MALE = "Masculino"


class Custodian(str, Enum):
    """Caregiver's relationship to the baby."""

    MOTHER = "Madre"
    FATHER = "Padre"
    GUARDIAN = "Tutor"
    CAREGIVER = "Cuidador"


class BloodGroup(str, Enum):
    A = "A"
    B = "B"
    AB = "AB"
    O = "O"  # noqa: E741


class RhFactor(str, Enum):
    POSITIVE = "+"
    NEGATIVE = "-"


class BackendRecord(BaseModel):
    """Base for all rows: accepts column names or attribute names."""

    model_config = ConfigDict(populate_by_name=True)

    def to_payload(self, *, partial: bool = False) -> dict:
        """Serialize to column names. `partial` keeps only explicitly set fields."""
        if partial:
            return self.model_dump(by_alias=True, exclude_unset=True, mode="json")
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class AdminProfile(BackendRecord):
    """Account holder row, linked to the identity user by id."""

    id: str = Field(alias="id_Principal")
    email: str | None = Field(default=None, alias="correo")
    username: str | None = Field(default=None, alias="usuario")


def _full_name(*parts: str | None) -> str:
    return " ".join(p.strip() for p in parts if p and p.strip())


class BabyFields(BackendRecord):
    first_name: str | None = Field(default=None, alias="primer_Nombre")
    middle_name: str | None = Field(default=None, alias="segundo_Nombre")
    paternal_surname: str | None = Field(default=None, alias="apellido_Paterno")
    maternal_surname: str | None = Field(default=None, alias="apellido_Materno")
    birth_date: date | None = Field(default=None, alias="fecha_Nacimiento")
    sex: Sex | None = Field(default=None, alias="sexo")


class Baby(BabyFields):
    id: int
    owner_id: str = Field(alias=OWNER_COLUMN)

    @computed_field(return_type=str)
    def full_name(self) -> str:
        return _full_name(
            self.first_name, self.middle_name, self.paternal_surname, self.maternal_surname
        )

    def age_days(self, today: date | None = None) -> int | None:
        if self.birth_date is None:
            return None
        return ((today or date.today()) - self.birth_date).days


class CaregiverFields(BackendRecord):
    first_name: str | None = Field(default=None, alias="primer_Nombre")
    middle_name: str | None = Field(default=None, alias="segundo_Nombre")
    paternal_surname: str | None = Field(default=None, alias="apellido_Paterno")
    maternal_surname: str | None = Field(default=None, alias="apellido_Materno")
    custodian: Custodian | None = Field(default=None, alias="Custodios")
    country: str | None = Field(default=None, alias="pais")
    dial_code: str | None = Field(default=None, alias="lada")
    phone: str | None = Field(default=None, alias="numero")


class Caregiver(CaregiverFields):
    id: int
    owner_id: str = Field(alias=OWNER_COLUMN)

    @computed_field(return_type=str)
    def full_name(self) -> str:
        return _full_name(
            self.first_name, self.middle_name, self.paternal_surname, self.maternal_surname
        )


class EmergencyContactFields(BackendRecord):
    name: str | None = Field(default=None, alias="Nombre")
    country: str | None = Field(default=None, alias="pais")
    dial_code: str | None = Field(default=None, alias="lada")
    phone: str | None = Field(default=None, alias="numero")


class EmergencyContact(EmergencyContactFields):
    id: int
    owner_id: str = Field(alias=OWNER_COLUMN)

    @computed_field(return_type=str | None)
    def dial_string(self) -> str | None:
        """Phone number ready to dial, e.g. '+52 5512345678'."""
        if not self.phone:
            return None
        return f"{self.dial_code} {self.phone}" if self.dial_code else self.phone


class HealthProfileFields(BackendRecord):
    blood_group: BloodGroup | None = Field(default=None, alias="grupo_sanguineo")
    rh_factor: RhFactor | None = Field(default=None, alias="tipo_RH")
    other_group: str | None = Field(default=None, alias="grupo_distinto")
    weight: float | None = Field(default=None, gt=0.0, alias="peso")
    height: float | None = Field(default=None, gt=0.0, alias="talla")


class HealthProfile(HealthProfileFields):
    id: int
    owner_id: str = Field(alias=OWNER_COLUMN)

    @computed_field(return_type=str | None)
    def blood_type(self) -> str | None:
        if self.blood_group is None:
            return None
        return f"{self.blood_group.value}{self.rh_factor.value if self.rh_factor else ''}"


class HealthDetailsFields(BackendRecord):
    has_allergies: bool | None = Field(default=None, alias="Alergias")
    allergy_details: str | None = Field(default=None, alias="detalles_Ale")
    has_complications: bool | None = Field(default=None, alias="complicaciones")
    complication_details: str | None = Field(default=None, alias="detalles_Com")


class HealthDetails(HealthDetailsFields):
    id: int
    owner_id: str = Field(alias=OWNER_COLUMN)


class VitalSignFields(BackendRecord):
    baby_id: str
    heart_rate: int | None = None
    oxygen_saturation: float | None = None
    temperature: float | None = None
    activity: str | None = None
    status: str | None = None
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_reading(cls, baby_id: str, reading: VitalReading) -> "VitalSignFields":
        return cls(
            baby_id=baby_id,
            heart_rate=reading.heart_rate,
            oxygen_saturation=reading.oxygen,
            temperature=reading.temperature,
            activity=reading.activity.value,
            status=reading.severity.value,
            recorded_at=reading.recorded_at,
        )


class VitalSignRecord(VitalSignFields):
    id: str | int


class DailyLogFields(BackendRecord):
    baby_id: str
    log_type: str = Field(description="e.g. feeding, diaper, sleep")
    started_at: datetime
    ended_at: datetime | None = None
    notes: str | None = None


class DailyLog(DailyLogFields):
    id: str | int

    @computed_field(return_type=float | None)
    def duration_minutes(self) -> float | None:
        if self.ended_at is None:
            return None
        return round((self.ended_at - self.started_at).total_seconds() / 60, 1)
