"""
Case model for the caseweb gateway.

The ``cases`` table is owned by the case-management application; the gateway
maps only the columns it reads and never writes to it.
"""

import uuid
from datetime import date, datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class Case(SQLModel, table=True):
    """A case row as stored by the case-management application."""

    __tablename__ = "cases"

    id: uuid.UUID = Field(primary_key=True)
    patient_name: str | None = None
    patient_internal_id: str | None = None
    patient_dob: date | None = None
    clinical_question: str | None = None
    upload_date: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    file_path: str | None = None
