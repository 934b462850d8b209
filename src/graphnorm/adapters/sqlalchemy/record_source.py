"""Record source backed by a SQLAlchemy session."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

from sqlalchemy import delete, insert, select

from graphnorm.adapters.sqlalchemy.mappings import records_table
from graphnorm.domain.store import Record

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from graphnorm.domain.ast import JSONObject, JSONValue
    from graphnorm.domain.store import DataID

log = logging.getLogger(__name__)


class SqlAlchemyRecordSource:
    """Lazily load records from the ``records`` table.

    Every record handed out is kept in an identity map, because the normalizer
    mutates records in place. Nothing reaches the database until ``flush``.
    """

    def __init__(self, session: Session) -> None:
        self.session = session
        self._loaded: dict[DataID, Record] = {}
        self._removed: set[DataID] = set()

    def get(self, data_id: DataID) -> Record | None:
        if data_id in self._loaded:
            return self._loaded[data_id]
        if data_id in self._removed:
            return None
        row = self.session.execute(
            select(records_table.c.typename, records_table.c.fields).where(
                records_table.c.data_id == data_id
            )
        ).one_or_none()
        if row is None:
            return None
        record = Record(data_id, row.typename, dict(cast("dict[str, JSONValue]", row.fields)))
        self._loaded[data_id] = record
        return record

    def set(self, data_id: DataID, record: Record) -> None:
        self._removed.discard(data_id)
        self._loaded[data_id] = record

    def has(self, data_id: DataID) -> bool:
        return self.get(data_id) is not None

    def remove(self, data_id: DataID) -> None:
        self._loaded.pop(data_id, None)
        self._removed.add(data_id)

    def get_record_ids(self) -> tuple[DataID, ...]:
        stored = self.session.execute(select(records_table.c.data_id)).scalars().all()
        ids = [data_id for data_id in stored if data_id not in self._removed]
        ids.extend(data_id for data_id in self._loaded if data_id not in ids)
        return tuple(ids)

    def size(self) -> int:
        return len(self.get_record_ids())

    def to_json(self) -> dict[DataID, JSONObject]:
        snapshot: dict[DataID, JSONObject] = {}
        for data_id in self.get_record_ids():
            record = self.get(data_id)
            if record is not None:
                snapshot[data_id] = record.to_json()
        return snapshot

    def flush(self) -> int:
        """Write loaded records and removals to the session; return rows written."""

        touched = [*self._loaded, *self._removed]
        if touched:
            self.session.execute(delete(records_table).where(records_table.c.data_id.in_(touched)))
        rows = [
            {"data_id": record.data_id, "typename": record.typename, "fields": record.fields}
            for record in self._loaded.values()
        ]
        if rows:
            self.session.execute(insert(records_table), rows)
        self._removed.clear()
        log.debug("Flushed %s records", len(rows))
        return len(rows)
