"""Metadata produced by a normalization call for downstream collaborators."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from graphnorm.domain.ast import JSONObject, JSONValue, SelectionParent
    from graphnorm.domain.store import DataID

type Path = tuple[str, ...]


class IncrementalKind(StrEnum):
    DEFER = "defer"
    STREAM = "stream"


@dataclass(frozen=True, slots=True)
class NormalizationSelector:
    """Where to start normalizing: a record, the selections to apply and their variables."""

    data_id: DataID
    node: SelectionParent
    variables: Mapping[str, JSONValue] = field(default_factory=dict["str", "JSONValue"])


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldPayload:
    """One occurrence of a handle-decorated field awaiting its handler."""

    data_id: DataID
    field_key: str
    args: JSONObject
    handle: str
    handle_key: str

    def to_json(self) -> JSONObject:
        return {
            "dataID": self.data_id,
            "fieldKey": self.field_key,
            "args": dict(self.args),
            "handle": self.handle,
            "handleKey": self.handle_key,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchPayload:
    """A resolved ``@match`` field whose fragment still has to be normalized.

    ``data`` is the raw payload object for the field; ``operation_reference``
    names the normalization tree a module loader has to fetch before
    re-entering the normalizer with ``data_id`` as the root.
    """

    data_id: DataID
    type_name: str
    data: JSONObject
    operation_reference: str
    variables: Mapping[str, JSONValue]
    path: Path

    def to_json(self) -> JSONObject:
        return {
            "dataID": self.data_id,
            "typeName": self.type_name,
            "data": self.data,
            "operationReference": self.operation_reference,
            "variables": dict(self.variables),
            "path": list(self.path),
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class IncrementalPlaceholder:
    """A deferred or streamed subtree to be filled in by a later payload."""

    kind: IncrementalKind
    label: str
    path: Path
    selector: NormalizationSelector
    type_name: str | None

    def to_json(self) -> JSONObject:
        return {
            "kind": str(self.kind),
            "label": self.label,
            "path": list(self.path),
            "selector": {
                "dataID": self.selector.data_id,
                "variables": dict(self.selector.variables),
                "node": {"kind": str(self.selector.node.kind), "label": self.label},
            },
            "typeName": self.type_name,
        }


@dataclass(frozen=True, slots=True)
class NormalizationResult:
    field_payloads: list[FieldPayload] = field(default_factory=list["FieldPayload"])
    match_payloads: list[MatchPayload] = field(default_factory=list["MatchPayload"])
    incremental_placeholders: list[IncrementalPlaceholder] = field(
        default_factory=list["IncrementalPlaceholder"]
    )

    def to_json(self) -> JSONObject:
        return {
            "fieldPayloads": [payload.to_json() for payload in self.field_payloads],
            "matchPayloads": [payload.to_json() for payload in self.match_payloads],
            "incrementalPlaceholders": [
                placeholder.to_json() for placeholder in self.incremental_placeholders
            ],
        }
