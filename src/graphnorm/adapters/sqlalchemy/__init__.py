"""SQLAlchemy persistence for the record store."""

from __future__ import annotations

from .mappings import metadata, records_table
from .record_source import SqlAlchemyRecordSource
from .unit_of_work import SqlAlchemyStoreUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "SqlAlchemyRecordSource",
    "SqlAlchemyStoreUnitOfWork",
    "StartupError",
    "metadata",
    "records_table",
    "shutdown",
    "startup",
]
