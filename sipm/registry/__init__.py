"""Resident registry package."""

from sipm.registry.service import ResidentRegistry

__all__ = ["ResidentRegistry"]
