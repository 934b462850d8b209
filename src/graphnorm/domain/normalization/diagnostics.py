"""Data-quality diagnostics emitted while normalizing.

Diagnostics never alter the normalization output. They are only produced when
a sink is supplied, which is what a development configuration does.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import ClassVar, Protocol, runtime_checkable

log = logging.getLogger(__name__)


class DiagnosticKind(StrEnum):
    TYPENAME_CONFLICT = "typename_conflict"
    MISSING_FIELD = "missing_field"


@dataclass(frozen=True, slots=True, kw_only=True)
class TypenameConflictDiagnostic:
    """The same id was written with two different concrete types."""

    kind: ClassVar[DiagnosticKind] = DiagnosticKind.TYPENAME_CONFLICT

    data_id: str
    previous_typename: str
    next_typename: str

    @property
    def message(self) -> str:
        return (
            f"Invalid record `{self.data_id}`. Expected __typename to be consistent, but "
            f"the record was assigned conflicting types `{self.previous_typename}` and "
            f"`{self.next_typename}`. The server likely violated the globally unique id "
            "requirement by returning the same id for different objects."
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class MissingFieldDiagnostic:
    """A field selected under a concrete type had no value in the payload."""

    kind: ClassVar[DiagnosticKind] = DiagnosticKind.MISSING_FIELD

    data_id: str
    field_name: str
    storage_key: str

    @property
    def message(self) -> str:
        return (
            f"Payload did not contain a value for field `{self.field_name}: "
            f"{self.storage_key}` on record `{self.data_id}`. Check that you are parsing "
            "with the same query that was used to fetch the payload."
        )


type Diagnostic = TypenameConflictDiagnostic | MissingFieldDiagnostic


@runtime_checkable
class DiagnosticSink(Protocol):
    def emit(self, diagnostic: Diagnostic) -> None: ...


@dataclass(slots=True)
class LoggingDiagnosticSink:
    """Forward diagnostics to the standard logging system as warnings."""

    logger: logging.Logger = field(default=log)

    def emit(self, diagnostic: Diagnostic) -> None:
        self.logger.warning("%s: %s", diagnostic.kind, diagnostic.message)


@dataclass(slots=True)
class DiagnosticCollector:
    """Keep diagnostics in memory, in emission order."""

    diagnostics: list[Diagnostic] = field(default_factory=list["Diagnostic"])

    def emit(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [diagnostic for diagnostic in self.diagnostics if diagnostic.kind is kind]
