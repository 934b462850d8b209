"""Record source contract and the in-memory implementation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from graphnorm.domain.store.record import Record

if TYPE_CHECKING:
    from graphnorm.domain.ast import JSONObject
    from graphnorm.domain.store.record import DataID


@runtime_checkable
class RecordSource(Protocol):
    """Mutable id to record mapping written by the normalizer.

    Records returned by ``get`` are live: the normalizer mutates them in place.
    """

    def get(self, data_id: DataID) -> Record | None: ...

    def set(self, data_id: DataID, record: Record) -> None: ...

    def has(self, data_id: DataID) -> bool: ...

    def remove(self, data_id: DataID) -> None: ...

    def get_record_ids(self) -> tuple[DataID, ...]: ...

    def size(self) -> int: ...

    def to_json(self) -> dict[DataID, JSONObject]: ...


@dataclass(slots=True)
class InMemoryRecordSource:
    records: dict[DataID, Record] = field(default_factory=dict["DataID", Record])

    def get(self, data_id: DataID) -> Record | None:
        return self.records.get(data_id)

    def set(self, data_id: DataID, record: Record) -> None:
        self.records[data_id] = record

    def has(self, data_id: DataID) -> bool:
        return data_id in self.records

    def remove(self, data_id: DataID) -> None:
        self.records.pop(data_id, None)

    def get_record_ids(self) -> tuple[DataID, ...]:
        return tuple(self.records)

    def size(self) -> int:
        return len(self.records)

    def to_json(self) -> dict[DataID, JSONObject]:
        return {data_id: record.to_json() for data_id, record in self.records.items()}

    @classmethod
    def from_json(cls, data: dict[DataID, JSONObject]) -> InMemoryRecordSource:
        return cls({data_id: Record.from_json(record) for data_id, record in data.items()})
