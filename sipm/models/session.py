"""Session user model. Never persisted."""

from enum import Enum

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """Role label shown in the UI. Not enforced anywhere."""
    ADMIN = "Admin"
    STAFF = "Petugas"


class User(BaseModel):
    """The operator of the current session."""

    id: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    role: UserRole
    full_name: str
