"""Collection of handle-decorated field occurrences."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from graphnorm.domain.store import get_argument_values, get_handle_storage_key

from .payloads import FieldPayload

if TYPE_CHECKING:
    from collections.abc import Mapping

    from graphnorm.domain.ast import JSONValue, LinkedField, ScalarField
    from graphnorm.domain.store import Record


@dataclass(slots=True)
class FieldPayloadCollector:
    payloads: list[FieldPayload] = field(default_factory=list["FieldPayload"])

    def collect(
        self,
        record: Record,
        selection: ScalarField | LinkedField,
        storage_key: str,
        variables: Mapping[str, JSONValue],
    ) -> None:
        """Append one payload per handle on ``selection`` for ``record``.

        The payload carries all of the field's resolved arguments; only the
        handle's ``filters`` take part in its handle key.
        """

        if not selection.handles:
            return
        args = get_argument_values(selection.args, variables)
        for handle in selection.handles:
            self.payloads.append(
                FieldPayload(
                    data_id=record.data_id,
                    field_key=storage_key,
                    args=dict(args),
                    handle=handle.handle,
                    handle_key=get_handle_storage_key(selection, handle, variables),
                )
            )
