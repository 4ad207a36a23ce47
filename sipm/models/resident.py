"""
Core Data Models for SIPM

These models define the schemas for resident data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Serialize to the exact stored shape (camelCase keys, display-string enums)

DESIGN DECISION: Enum values ARE the historical display strings.
Stored collections written by earlier versions of the registry
load without any migration step.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel


NIK_LENGTH = 16


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Gender(str, Enum):
    """Resident gender."""
    MALE = "Laki-laki"
    FEMALE = "Perempuan"


class MaritalStatus(str, Enum):
    """Marital status as recorded on the family card."""
    SINGLE = "Belum Kawin"
    MARRIED = "Kawin"
    DIVORCED = "Cerai Hidup"
    WIDOWED = "Cerai Mati"


class ResidentStatus(str, Enum):
    """
    Life status of a resident.

    CRITICAL: A DECEASED resident must carry a death certificate image.
    """
    ALIVE = "Hidup"
    DECEASED = "Meninggal"


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def new_resident_id() -> str:
    """Generate an opaque resident identifier."""
    return uuid4().hex


# =============================================================================
# RESIDENT MODELS
# =============================================================================

class _RegistryModel(BaseModel):
    """Shared config: snake_case in Python, camelCase at the storage boundary."""
    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ResidentInput(_RegistryModel):
    """
    A candidate resident record, as collected by the entry form.

    This is PROPOSED data. It MUST go through the validator
    before the registry accepts it.

    Length and conditional rules are deliberately NOT enforced here
    so the validator can report them with descriptive messages.
    """
    nik: str = Field(
        ...,
        max_length=32,
        description="16-digit national identity number"
    )
    name: str = Field(
        ...,
        max_length=200,
        description="Full name"
    )
    gender: Gender = Gender.MALE
    dob: date = Field(
        ...,
        description="Date of birth"
    )
    address: str = Field(default="", max_length=500)
    rt: str = Field(default="", max_length=10, description="Neighbourhood (RT) code")
    dusun: str = Field(default="", max_length=100, description="Hamlet name")
    marital_status: MaritalStatus = MaritalStatus.SINGLE
    occupation: str = Field(default="", max_length=100)
    status: ResidentStatus = ResidentStatus.ALIVE
    death_certificate_img: Optional[str] = Field(
        default=None,
        description="Death certificate image as a data URL"
    )


class ResidentUpdate(_RegistryModel):
    """
    Partial update for an existing resident.

    Only fields explicitly set are applied; see `changes()`.
    """
    nik: Optional[str] = Field(default=None, max_length=32)
    name: Optional[str] = Field(default=None, max_length=200)
    gender: Optional[Gender] = None
    dob: Optional[date] = None
    address: Optional[str] = Field(default=None, max_length=500)
    rt: Optional[str] = Field(default=None, max_length=10)
    dusun: Optional[str] = Field(default=None, max_length=100)
    marital_status: Optional[MaritalStatus] = None
    occupation: Optional[str] = Field(default=None, max_length=100)
    status: Optional[ResidentStatus] = None
    death_certificate_img: Optional[str] = None

    def changes(self) -> dict[str, Any]:
        """Fields the caller actually supplied, keyed by Python name."""
        return self.model_dump(exclude_unset=True)


class Resident(ResidentInput):
    """
    A persisted resident record.

    `id` and `created_at` are assigned by the registry at creation
    and are never changed afterwards.
    """
    id: str = Field(
        default_factory=new_resident_id,
        min_length=1,
        description="Opaque unique identifier"
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        description="When the record was first saved"
    )

    @field_validator('created_at')
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Stored timestamps without an offset are UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @classmethod
    def from_input(cls, candidate: ResidentInput) -> "Resident":
        """Build a new record with a fresh id and creation timestamp."""
        return cls(**candidate.model_dump())

    def to_storage_dict(self) -> dict[str, Any]:
        """Serialize to the persisted JSON shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_input(self) -> ResidentInput:
        """Strip the registry-assigned fields (used when editing)."""
        return ResidentInput(**self.model_dump(exclude={"id", "created_at"}))


def seed_resident() -> Resident:
    """The single record a brand-new registry starts with."""
    return Resident(
        id="1",
        nik="3171010101010001",
        name="Budi Santoso",
        gender=Gender.MALE,
        dob=date(1985, 5, 15),
        address="Jl. Merdeka No. 10",
        rt="001",
        dusun="Krajan",
        marital_status=MaritalStatus.MARRIED,
        occupation="PNS",
        status=ResidentStatus.ALIVE,
    )
