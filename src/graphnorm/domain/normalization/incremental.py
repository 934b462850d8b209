"""``@defer`` and ``@stream`` handling."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from graphnorm.domain.ast import Variable

from .errors import InvalidConditionError
from .payloads import IncrementalKind, IncrementalPlaceholder, NormalizationSelector

if TYPE_CHECKING:
    from collections.abc import Mapping

    from graphnorm.domain.ast import Condition, Defer, JSONValue, Stream
    from graphnorm.domain.store import Record

    from .payloads import Path


def evaluate_condition(
    condition: Condition, variables: Mapping[str, JSONValue], *, label: str
) -> bool:
    if not isinstance(condition, Variable):
        return condition
    value = variables.get(condition.name)
    if not isinstance(value, bool):
        raise InvalidConditionError(
            f"Expected variable `{condition.name}` for `{label}` to be a boolean, got {value!r}."
        )
    return value


@dataclass(slots=True)
class IncrementalDeliveryCollector:
    parent_path: Path = ()
    placeholders: list[IncrementalPlaceholder] = field(
        default_factory=list["IncrementalPlaceholder"]
    )

    def defer(
        self,
        node: Defer,
        record: Record,
        variables: Mapping[str, JSONValue],
        path: Path,
    ) -> bool:
        """Return ``True`` when the fragment is deferred and must not be visited now."""

        if not evaluate_condition(node.condition, variables, label=node.label):
            return False
        self._append(IncrementalKind.DEFER, node, record, variables, path)
        return True

    def stream(
        self,
        node: Stream,
        record: Record,
        variables: Mapping[str, JSONValue],
        path: Path,
    ) -> None:
        """Record a continuation for the list owned by ``record``.

        The items already present have been normalized by the caller; the
        placeholder addresses the owning record so later items can be appended.
        """

        if evaluate_condition(node.condition, variables, label=node.label):
            self._append(IncrementalKind.STREAM, node, record, variables, path)

    def _append(
        self,
        kind: IncrementalKind,
        node: Defer | Stream,
        record: Record,
        variables: Mapping[str, JSONValue],
        path: Path,
    ) -> None:
        self.placeholders.append(
            IncrementalPlaceholder(
                kind=kind,
                label=node.label,
                path=(*self.parent_path, *path),
                selector=NormalizationSelector(record.data_id, node, variables),
                type_name=record.typename,
            )
        )
