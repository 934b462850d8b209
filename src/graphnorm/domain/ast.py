"""Compiled normalization selection tree.

The tree is a closed set of node kinds. Every node carries a ``kind`` tag and the
normalizer dispatches on that tag. Fragment spreads are inlined by the compiler
before a tree reaches this layer, so they have no node of their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar

type JSONScalar = str | int | float | bool | None
type JSONValue = JSONScalar | list[JSONValue] | dict[str, JSONValue]
type JSONObject = dict[str, JSONValue]


class NodeKind(StrEnum):
    OPERATION = "Operation"
    SCALAR_FIELD = "ScalarField"
    LINKED_FIELD = "LinkedField"
    INLINE_FRAGMENT = "InlineFragment"
    MATCH_FIELD = "MatchField"
    DEFER = "Defer"
    STREAM = "Stream"


@dataclass(frozen=True, slots=True)
class Variable:
    """Reference to a value in the operation's variable bindings."""

    name: str


type ArgumentValue = Variable | JSONValue
type Condition = bool | Variable


@dataclass(frozen=True, slots=True)
class Argument:
    name: str
    value: ArgumentValue


@dataclass(frozen=True, slots=True)
class FieldHandle:
    """Request for post-normalization processing of a field by a named handler.

    ``key`` overrides the field name in the handle storage key; ``filters``
    selects which field arguments take part in that key.
    """

    handle: str
    key: str = ""
    filters: tuple[str, ...] | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ScalarField:
    kind: ClassVar[NodeKind] = NodeKind.SCALAR_FIELD

    name: str
    alias: str | None = None
    args: tuple[Argument, ...] = ()
    storage_key: str | None = None
    handles: tuple[FieldHandle, ...] = ()

    @property
    def response_key(self) -> str:
        return self.alias or self.name


@dataclass(frozen=True, slots=True, kw_only=True)
class LinkedField:
    """Field whose value is one record or a list of records.

    ``concrete_type`` is ``None`` when the field is typed as an interface or
    union; the record type then comes from the payload's ``__typename``.
    """

    kind: ClassVar[NodeKind] = NodeKind.LINKED_FIELD

    name: str
    alias: str | None = None
    args: tuple[Argument, ...] = ()
    storage_key: str | None = None
    concrete_type: str | None = None
    plural: bool = False
    selections: tuple[Selection, ...] = ()
    handles: tuple[FieldHandle, ...] = ()

    @property
    def response_key(self) -> str:
        return self.alias or self.name


@dataclass(frozen=True, slots=True, kw_only=True)
class InlineFragment:
    """Type condition over a set of selections.

    ``abstract`` marks a condition on an interface or union type. Such a condition
    is always considered satisfied, and fields under it may legitimately be
    missing from the payload.
    """

    kind: ClassVar[NodeKind] = NodeKind.INLINE_FRAGMENT

    type_condition: str
    abstract: bool = False
    selections: tuple[Selection, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchCase:
    type_name: str
    fragment_name: str
    module_name: str
    operation_reference: str


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchField:
    kind: ClassVar[NodeKind] = NodeKind.MATCH_FIELD

    name: str
    alias: str | None = None
    cases: tuple[MatchCase, ...] = ()
    storage_key: str | None = None

    @property
    def response_key(self) -> str:
        return self.alias or self.name

    def case_for(self, type_name: str) -> MatchCase | None:
        for case in self.cases:
            if case.type_name == type_name:
                return case
        return None


@dataclass(frozen=True, slots=True, kw_only=True)
class Defer:
    kind: ClassVar[NodeKind] = NodeKind.DEFER

    label: str
    condition: Condition = True
    selections: tuple[Selection, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class Stream:
    kind: ClassVar[NodeKind] = NodeKind.STREAM

    label: str
    condition: Condition = True
    selections: tuple[Selection, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class Operation:
    kind: ClassVar[NodeKind] = NodeKind.OPERATION

    name: str
    selections: tuple[Selection, ...] = ()


type Field = ScalarField | LinkedField | MatchField
type Selection = ScalarField | LinkedField | InlineFragment | MatchField | Defer | Stream
type SelectionParent = Operation | LinkedField | InlineFragment | Defer | Stream
