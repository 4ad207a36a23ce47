"""Resident validation package."""

from sipm.validation.validator import NikIndex, ResidentValidator, ValidationError

__all__ = ["NikIndex", "ResidentValidator", "ValidationError"]
