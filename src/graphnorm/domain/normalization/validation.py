"""Development-only consistency checks on normalized records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .diagnostics import MissingFieldDiagnostic, TypenameConflictDiagnostic

if TYPE_CHECKING:
    from graphnorm.domain.ast import Field
    from graphnorm.domain.store import Record

    from .diagnostics import DiagnosticSink


@dataclass(slots=True)
class ConsistencyValidator:
    """Report id/type collisions and unexpectedly missing fields.

    Without a sink every check is a no-op.
    """

    sink: DiagnosticSink | None = None

    @property
    def enabled(self) -> bool:
        return self.sink is not None

    def validate_record_type(self, record: Record, typename: str) -> None:
        if self.sink is None:
            return
        if record.typename is None or record.typename == typename:
            return
        self.sink.emit(
            TypenameConflictDiagnostic(
                data_id=record.data_id,
                previous_typename=record.typename,
                next_typename=typename,
            )
        )

    def validate_missing_field(
        self,
        record: Record,
        field: Field,
        storage_key: str,
        *,
        under_abstract_type: bool,
    ) -> None:
        if self.sink is None or under_abstract_type:
            return
        self.sink.emit(
            MissingFieldDiagnostic(
                data_id=record.data_id,
                field_name=field.response_key,
                storage_key=storage_key,
            )
        )
