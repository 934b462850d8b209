"""SQLAlchemy table metadata for persisted records."""

from __future__ import annotations

from sqlalchemy import JSON, Column, MetaData, String, Table

metadata = MetaData()

records_table = Table(
    "records",
    metadata,
    Column("data_id", String, primary_key=True),
    Column("typename", String, nullable=True),
    Column("fields", JSON, nullable=False, default=dict),
)
