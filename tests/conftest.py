"""Shared fixtures for the SIPM test suite."""

import base64
from datetime import date, datetime, timezone
from io import BytesIO

import pytest
from PIL import Image

from sipm.models.resident import (
    Gender,
    MaritalStatus,
    Resident,
    ResidentInput,
    ResidentStatus,
)
from sipm.registry import ResidentRegistry
from sipm.services.storage import InMemoryResidentStore


def make_input(**overrides) -> ResidentInput:
    """A complete, valid candidate with any fields overridden."""
    fields = dict(
        nik="3201020304050607",
        name="Siti Aminah",
        gender=Gender.FEMALE,
        dob=date(1990, 7, 21),
        address="Jl. Kenanga No. 3",
        rt="002",
        dusun="Sawah",
        marital_status=MaritalStatus.MARRIED,
        occupation="Petani",
        status=ResidentStatus.ALIVE,
    )
    fields.update(overrides)
    return ResidentInput(**fields)


def make_resident(created_at: datetime, **overrides) -> Resident:
    """A stored resident created at a fixed moment."""
    resident_id = overrides.pop("id", None)
    resident = Resident.from_input(make_input(**overrides))
    update = {"created_at": created_at}
    if resident_id is not None:
        update["id"] = resident_id
    return resident.model_copy(update=update)


def png_bytes(size=(4, 4)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def certificate_url() -> str:
    """A death certificate already encoded as a data URL."""
    return "data:image/png;base64," + base64.b64encode(png_bytes()).decode("ascii")


@pytest.fixture
def store() -> InMemoryResidentStore:
    return InMemoryResidentStore()


@pytest.fixture
def registry(store) -> ResidentRegistry:
    return ResidentRegistry(store)


@pytest.fixture
def utc():
    return timezone.utc
