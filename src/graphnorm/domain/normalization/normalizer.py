"""Normalize a GraphQL response payload into a record source.

The normalizer walks the compiled selection tree and the payload in lockstep,
depth first. Scalar values are written verbatim, linked objects become records
referenced by id, and three lists of metadata are collected along the way for
handle fields, ``@match`` fields and ``@defer``/``@stream`` continuations.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

from graphnorm.config.normalizer import NormalizerConfig
from graphnorm.domain.ast import NodeKind
from graphnorm.domain.store import (
    TYPENAME_KEY,
    create_record,
    generate_client_id,
    get_match_storage_key,
    get_storage_key,
)

from .errors import MissingRootRecordError, PayloadShapeError
from .handles import FieldPayloadCollector
from .incremental import IncrementalDeliveryCollector
from .matches import MatchResolver
from .payloads import NormalizationResult
from .validation import ConsistencyValidator

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from graphnorm.domain.ast import (
        Defer,
        Field,
        InlineFragment,
        JSONObject,
        JSONValue,
        LinkedField,
        MatchField,
        ScalarField,
        SelectionParent,
        Stream,
    )
    from graphnorm.domain.store import ClientIDGenerator, DataID, Record, RecordSource

    from .diagnostics import DiagnosticSink
    from .payloads import NormalizationSelector

log = logging.getLogger(__name__)


def normalize(
    record_source: RecordSource,
    selector: NormalizationSelector,
    response: JSONObject,
    config: NormalizerConfig | None = None,
    *,
    parent_path: Sequence[str] = (),
    id_generator: ClientIDGenerator = generate_client_id,
    diagnostics: DiagnosticSink | None = None,
) -> NormalizationResult:
    """Write ``response`` into ``record_source`` starting at ``selector``.

    ``parent_path`` prefixes every emitted match and placeholder path; it is the
    path of the enclosing payload when normalizing an incremental or ``@match``
    follow-up. ``diagnostics`` enables the consistency checks; leave it unset in
    production.
    """

    normalizer = ResponseNormalizer(
        record_source,
        selector.variables,
        config=config or NormalizerConfig(),
        parent_path=parent_path,
        id_generator=id_generator,
        diagnostics=diagnostics,
    )
    return normalizer.normalize(selector.node, selector.data_id, response)


class ResponseNormalizer:
    """Single-use traversal state for one ``normalize`` call."""

    def __init__(
        self,
        record_source: RecordSource,
        variables: Mapping[str, JSONValue],
        *,
        config: NormalizerConfig,
        parent_path: Sequence[str] = (),
        id_generator: ClientIDGenerator = generate_client_id,
        diagnostics: DiagnosticSink | None = None,
    ) -> None:
        self._record_source = record_source
        self._variables = variables
        self._treat_missing_fields_as_null = config.treat_missing_fields_as_null
        self._id_generator = id_generator
        self._path: list[str] = []
        self._validator = ConsistencyValidator(diagnostics)
        self._handles = FieldPayloadCollector()
        self._matches = MatchResolver(
            upsert_record=self._upsert_record,
            id_generator=id_generator,
            parent_path=tuple(parent_path),
        )
        self._incremental = IncrementalDeliveryCollector(parent_path=tuple(parent_path))

    def normalize(
        self, node: SelectionParent, data_id: DataID, data: JSONObject
    ) -> NormalizationResult:
        record = self._record_source.get(data_id)
        if record is None:
            raise MissingRootRecordError(f"Expected root record `{data_id}` to exist.")
        if not isinstance(data, dict):
            raise PayloadShapeError(f"Expected payload for `{data_id}` to be an object.")

        log.debug("Normalizing payload into %s with %s", data_id, node.kind)
        self._traverse_selections(node, record, data)
        result = NormalizationResult(
            field_payloads=self._handles.payloads,
            match_payloads=self._matches.payloads,
            incremental_placeholders=self._incremental.placeholders,
        )
        log.debug(
            "Normalized %s: field_payloads=%s, match_payloads=%s, placeholders=%s",
            data_id,
            len(result.field_payloads),
            len(result.match_payloads),
            len(result.incremental_placeholders),
        )
        return result

    def _traverse_selections(
        self,
        parent: SelectionParent,
        record: Record,
        data: JSONObject,
        *,
        abstract: bool = False,
    ) -> None:
        """Visit ``parent``'s selections against one record.

        ``abstract`` is set below an abstract type condition and stays set through
        nested fragments, ``@defer`` and ``@stream``, but not into linked records.
        """

        for selection in parent.selections:
            match selection.kind:
                case NodeKind.SCALAR_FIELD | NodeKind.LINKED_FIELD | NodeKind.MATCH_FIELD:
                    self._normalize_field(
                        cast("Field", selection), record, data, abstract=abstract
                    )
                case NodeKind.INLINE_FRAGMENT:
                    fragment = cast("InlineFragment", selection)
                    if fragment.abstract or fragment.type_condition == record.typename:
                        self._traverse_selections(
                            fragment, record, data, abstract=abstract or fragment.abstract
                        )
                case NodeKind.DEFER:
                    defer = cast("Defer", selection)
                    if not self._incremental.defer(
                        defer, record, self._variables, tuple(self._path)
                    ):
                        self._traverse_selections(defer, record, data, abstract=abstract)
                case NodeKind.STREAM:
                    stream = cast("Stream", selection)
                    self._traverse_selections(stream, record, data, abstract=abstract)
                    self._incremental.stream(stream, record, self._variables, tuple(self._path))
                case _:
                    raise PayloadShapeError(f"Unexpected selection kind `{selection.kind}`.")

    def _normalize_field(
        self, selection: Field, record: Record, data: JSONObject, *, abstract: bool
    ) -> None:
        response_key = selection.response_key
        if selection.kind is NodeKind.MATCH_FIELD:
            storage_key = get_match_storage_key(cast("MatchField", selection))
        else:
            storage_key = get_storage_key(
                cast("ScalarField | LinkedField", selection), self._variables
            )

        value = data.get(response_key)
        if value is None:
            present = response_key in data
            if present or self._treat_missing_fields_as_null:
                if not present and _is_checked_for_absence(selection):
                    self._validator.validate_missing_field(
                        record, selection, storage_key, under_abstract_type=abstract
                    )
                record.set_value(storage_key, None)
        elif selection.kind is NodeKind.SCALAR_FIELD:
            record.set_value(storage_key, value)
        elif selection.kind is NodeKind.LINKED_FIELD:
            linked = cast("LinkedField", selection)
            self._path.append(response_key)
            if linked.plural:
                self._normalize_plural_link(linked, storage_key, record, value)
            else:
                self._normalize_link(linked, storage_key, record, value)
            self._path.pop()
        else:
            self._matches.resolve(
                cast("MatchField", selection),
                storage_key,
                record,
                value,
                self._variables,
                tuple(self._path),
            )

        if selection.kind is not NodeKind.MATCH_FIELD:
            self._handles.collect(
                record,
                cast("ScalarField | LinkedField", selection),
                storage_key,
                self._variables,
            )

    def _normalize_link(
        self, field: LinkedField, storage_key: str, record: Record, value: JSONValue
    ) -> None:
        if not isinstance(value, dict):
            raise PayloadShapeError(
                f"Expected data for field `{field.response_key}` to be an object."
            )
        typename = self._record_type(field, value)
        next_id = (
            _payload_data_id(value)
            or record.get_linked_record_id(storage_key)
            or self._id_generator(record.data_id, storage_key, None)
        )
        next_record = self._upsert_record(next_id, typename)
        record.set_linked_record_id(storage_key, next_id)
        self._traverse_selections(field, next_record, value)

    def _normalize_plural_link(
        self, field: LinkedField, storage_key: str, record: Record, value: JSONValue
    ) -> None:
        if not isinstance(value, list):
            raise PayloadShapeError(
                f"Expected data for field `{field.response_key}` to be an array of objects."
            )
        prev_ids = record.get_linked_record_ids(storage_key) or []
        next_ids: list[DataID | None] = []
        for index, item in enumerate(value):
            if item is None:
                next_ids.append(None)
                continue
            if not isinstance(item, dict):
                raise PayloadShapeError(
                    f"Expected elements for field `{field.response_key}` to be objects."
                )
            self._path.append(str(index))
            typename = self._record_type(field, item)
            next_id = (
                _payload_data_id(item)
                or (prev_ids[index] if index < len(prev_ids) else None)
                or self._id_generator(record.data_id, storage_key, index)
            )
            next_ids.append(next_id)
            next_record = self._upsert_record(next_id, typename)
            self._traverse_selections(field, next_record, item)
            self._path.pop()
        record.set_linked_record_ids(storage_key, next_ids)

    def _record_type(self, field: LinkedField, value: JSONObject) -> str:
        if field.concrete_type is not None:
            return field.concrete_type
        typename = value.get(TYPENAME_KEY)
        if not isinstance(typename, str):
            raise PayloadShapeError(
                f"Expected a typename for record in field `{field.response_key}`, "
                f"got {value!r}."
            )
        return typename

    def _upsert_record(self, data_id: DataID, typename: str) -> Record:
        record = self._record_source.get(data_id)
        if record is None:
            record = create_record(data_id, typename)
            self._record_source.set(data_id, record)
            return record
        self._validator.validate_record_type(record, typename)
        record.typename = typename
        return record


def _is_checked_for_absence(selection: Field) -> bool:
    # plural lists and @match wrappers are never reported
    match selection.kind:
        case NodeKind.SCALAR_FIELD:
            return True
        case NodeKind.LINKED_FIELD:
            return not cast("LinkedField", selection).plural
        case _:
            return False


def _payload_data_id(value: JSONObject) -> DataID | None:
    data_id = value.get("id")
    if isinstance(data_id, str):
        return data_id
    if isinstance(data_id, int) and not isinstance(data_id, bool):
        return str(data_id)
    return None
