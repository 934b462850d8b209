"""Resolution of polymorphic ``@match`` fields."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from graphnorm.domain.store import TYPENAME_KEY

from .errors import PayloadShapeError
from .payloads import MatchPayload

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from graphnorm.domain.ast import JSONValue, MatchField
    from graphnorm.domain.store import ClientIDGenerator, DataID, Record

    from .payloads import Path


@dataclass(slots=True)
class MatchResolver:
    """Link a match field to a wrapper record and defer its fragment.

    The matched fragment is not normalized here. A ``MatchPayload`` hands the raw
    data to a module loader, which re-enters the normalizer once the fragment's
    normalization tree is available.
    """

    upsert_record: Callable[[DataID, str], Record]
    id_generator: ClientIDGenerator
    parent_path: Path = ()
    payloads: list[MatchPayload] = field(default_factory=list["MatchPayload"])

    def resolve(
        self,
        selection: MatchField,
        storage_key: str,
        record: Record,
        value: JSONValue,
        variables: Mapping[str, JSONValue],
        path: Path,
    ) -> None:
        if value is None:
            record.set_value(storage_key, None)
            return
        if not isinstance(value, dict):
            raise PayloadShapeError(
                f"Expected data for @match field `{selection.response_key}` to be an object."
            )
        typename = value.get(TYPENAME_KEY)
        case = selection.case_for(typename) if isinstance(typename, str) else None
        if case is None:
            # the server knows a type this client has no module for
            record.set_value(storage_key, None)
            return

        next_id = self.id_generator(record.data_id, storage_key, None)
        self.upsert_record(next_id, case.type_name)
        record.set_linked_record_id(storage_key, next_id)
        self.payloads.append(
            MatchPayload(
                data_id=next_id,
                type_name=case.type_name,
                data=value,
                operation_reference=case.operation_reference,
                variables=variables,
                path=(*self.parent_path, *path, selection.response_key),
            )
        )
