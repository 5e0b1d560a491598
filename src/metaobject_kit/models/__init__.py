"""Pydantic models for validated operation parameters."""

from .inputs import IteratorParams, ListParams, UpdateParams

__all__ = ["IteratorParams", "ListParams", "UpdateParams"]
