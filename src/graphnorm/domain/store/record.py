"""Flat records keyed by storage key."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final, cast

if TYPE_CHECKING:
    from graphnorm.domain.ast import JSONObject, JSONValue

type DataID = str

ID_KEY: Final[str] = "__id"
TYPENAME_KEY: Final[str] = "__typename"
REF_KEY: Final[str] = "__ref"
REFS_KEY: Final[str] = "__refs"

ROOT_ID: Final[DataID] = "client:root"
ROOT_TYPE: Final[str] = "__Root"


@dataclass(slots=True, eq=False)
class Record:
    """One normalized entity.

    Field values are scalars stored verbatim, single references stored as
    ``{"__ref": id}`` and reference lists stored as ``{"__refs": [id | None, ...]}``.
    A reference slot may also hold ``None`` for an explicit null link.
    """

    data_id: DataID
    typename: str | None
    fields: dict[str, JSONValue] = field(default_factory=dict["str", "JSONValue"])

    def has_value(self, storage_key: str) -> bool:
        if storage_key in (ID_KEY, TYPENAME_KEY):
            return True
        return storage_key in self.fields

    def get_value(self, storage_key: str) -> JSONValue:
        if storage_key == ID_KEY:
            return self.data_id
        if storage_key == TYPENAME_KEY:
            return self.typename
        return self.fields.get(storage_key)

    def set_value(self, storage_key: str, value: JSONValue) -> None:
        if storage_key == ID_KEY:
            return
        if storage_key == TYPENAME_KEY:
            # a selected __typename field lands on the reserved key
            if isinstance(value, str):
                self.typename = value
            return
        self.fields[storage_key] = value

    def get_linked_record_id(self, storage_key: str) -> DataID | None:
        value = self.fields.get(storage_key)
        if isinstance(value, dict) and isinstance(value.get(REF_KEY), str):
            return cast("DataID", value[REF_KEY])
        return None

    def set_linked_record_id(self, storage_key: str, data_id: DataID) -> None:
        self.fields[storage_key] = {REF_KEY: data_id}

    def get_linked_record_ids(self, storage_key: str) -> list[DataID | None] | None:
        value = self.fields.get(storage_key)
        if isinstance(value, dict) and isinstance(value.get(REFS_KEY), list):
            return list(cast("list[DataID | None]", value[REFS_KEY]))
        return None

    def set_linked_record_ids(self, storage_key: str, data_ids: list[DataID | None]) -> None:
        refs: list[JSONValue] = list(data_ids)
        self.fields[storage_key] = {REFS_KEY: refs}

    def copy(self) -> Record:
        return Record(self.data_id, self.typename, copy.deepcopy(self.fields))

    def to_json(self) -> JSONObject:
        data: JSONObject = {ID_KEY: self.data_id, TYPENAME_KEY: self.typename}
        data.update(copy.deepcopy(self.fields))
        return data

    @classmethod
    def from_json(cls, data: JSONObject) -> Record:
        fields = {
            key: copy.deepcopy(value)
            for key, value in data.items()
            if key not in (ID_KEY, TYPENAME_KEY)
        }
        data_id = data.get(ID_KEY)
        if not isinstance(data_id, str):
            raise ValueError(f"Record is missing a string {ID_KEY}: {data!r}")
        typename = data.get(TYPENAME_KEY)
        return cls(data_id, typename if isinstance(typename, str) else None, fields)


def create_record(data_id: DataID, typename: str | None) -> Record:
    return Record(data_id, typename)
