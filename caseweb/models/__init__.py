"""Database models for caseweb."""

from caseweb.models.case import Case

__all__ = ["Case"]
