"""Application orchestration entry points."""

from __future__ import annotations

import json
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from graphnorm.adapters.ast_schema import AstDocumentError, load_operation_file
from graphnorm.adapters.sqlalchemy.unit_of_work import SqlAlchemyStoreUnitOfWork, startup
from graphnorm.config import NormalizerConfig, get_normalizer_config
from graphnorm.domain.normalization import (
    LoggingDiagnosticSink,
    NormalizationResult,
    NormalizationSelector,
    normalize,
)
from graphnorm.domain.store import ROOT_ID, ROOT_TYPE, InMemoryRecordSource, create_record

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from pathlib import Path

    from graphnorm.domain.ast import JSONObject, JSONValue, Operation
    from graphnorm.domain.normalization import DiagnosticSink
    from graphnorm.domain.store import DataID, RecordSource


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class NormalizationReport:
    records: dict[DataID, JSONObject]
    result: NormalizationResult

    def to_json(self) -> JSONObject:
        return {"records": dict(self.records), **self.result.to_json()}


def read_json_object(path: Path, *, what: str) -> JSONObject:
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise AstDocumentError(f"Cannot read {what} {path}: {exc}") from exc
    if not isinstance(document, dict):
        raise AstDocumentError(f"Expected {what} {path} to contain a JSON object")
    return document


def response_data(response: JSONObject) -> JSONObject:
    """Unwrap a ``{"data": ...}`` GraphQL response envelope if present."""

    data = response.get("data")
    if isinstance(data, dict) and set(response) <= {"data", "errors", "extensions"}:
        return data
    return response


def ensure_root_record(record_source: RecordSource, data_id: DataID = ROOT_ID) -> None:
    if not record_source.has(data_id):
        record_source.set(data_id, create_record(data_id, ROOT_TYPE))


def normalize_operation(
    record_source: RecordSource,
    operation: Operation,
    response: JSONObject,
    variables: Mapping[str, JSONValue],
    *,
    config: NormalizerConfig,
    parent_path: Sequence[str] = (),
    diagnostics: DiagnosticSink | None = None,
) -> NormalizationResult:
    ensure_root_record(record_source)
    sink = diagnostics
    if sink is None and config.development:
        sink = LoggingDiagnosticSink()
    return normalize(
        record_source,
        NormalizationSelector(ROOT_ID, operation, variables),
        response_data(response),
        config,
        parent_path=parent_path,
        diagnostics=sink,
    )


def normalize_documents(
    *,
    query_path: Path,
    payload_path: Path,
    variables: Mapping[str, JSONValue] | None = None,
    config: NormalizerConfig | None = None,
    persist: bool = False,
    database_uri: str | None = None,
    parent_path: Sequence[str] = (),
    diagnostics: DiagnosticSink | None = None,
) -> NormalizationReport:
    """Normalize a payload file with a compiled AST file, optionally into the database."""

    effective_config = config or get_normalizer_config()
    operation = load_operation_file(query_path)
    response = read_json_object(payload_path, what="payload")
    bindings = dict(variables or {})
    log.info(
        "Normalizing %s with operation %s (persist=%s, development=%s)",
        payload_path,
        operation.name,
        persist,
        effective_config.development,
    )

    if not persist:
        record_source = InMemoryRecordSource()
        result = normalize_operation(
            record_source,
            operation,
            response,
            bindings,
            config=effective_config,
            parent_path=parent_path,
            diagnostics=diagnostics,
        )
        return NormalizationReport(record_source.to_json(), result)

    startup(database_uri=database_uri, force=True)
    with SqlAlchemyStoreUnitOfWork() as uow:
        result = normalize_operation(
            uow.records,
            operation,
            response,
            bindings,
            config=effective_config,
            parent_path=parent_path,
            diagnostics=diagnostics,
        )
        uow.commit()
        records = uow.records.to_json()
    log.info("Persisted %s records", len(records))
    return NormalizationReport(records, result)
