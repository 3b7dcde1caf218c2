"""Repositories for caseweb."""

from caseweb.repositories.base import BaseRepository
from caseweb.repositories.case_repository import CaseRepository

__all__ = ["BaseRepository", "CaseRepository"]
