# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from leavedesk.models.base import now_utc


class StoredDocument(SQLModel, table=True):
    """One document of the SQL-backed document store, keyed by (collection, doc_id)."""

    __tablename__ = "document"

    collection: str = Field(primary_key=True, max_length=100)
    doc_id: str = Field(primary_key=True, max_length=255)
    fields_json: dict[str, Any] = Field(default_factory=dict, sa_type=sa.JSON)
    created_at: datetime = Field(
        default_factory=now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
