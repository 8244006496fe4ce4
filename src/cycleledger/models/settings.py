"""Key-value rows backing the persisted tracker state."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar

from sqlalchemy import Column, Text
from sqlmodel import Field, SQLModel

from .ledger import utcnow


class AppSetting(SQLModel, table=True):
    """One persisted key and its textual (often JSON) value."""

    __tablename__: ClassVar[str] = "app_setting"

    key: str = Field(primary_key=True, max_length=64)
    # JSON documents (history) outgrow a VARCHAR quickly
    value: str = Field(sa_column=Column(Text, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)
