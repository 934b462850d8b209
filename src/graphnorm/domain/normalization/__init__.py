"""Response normalization into a flat record source."""

from __future__ import annotations

from .diagnostics import (
    Diagnostic,
    DiagnosticCollector,
    DiagnosticKind,
    DiagnosticSink,
    LoggingDiagnosticSink,
    MissingFieldDiagnostic,
    TypenameConflictDiagnostic,
)
from .errors import (
    InvalidConditionError,
    MissingRootRecordError,
    NormalizationError,
    PayloadShapeError,
)
from .handles import FieldPayloadCollector
from .incremental import IncrementalDeliveryCollector, evaluate_condition
from .matches import MatchResolver
from .normalizer import ResponseNormalizer, normalize
from .payloads import (
    FieldPayload,
    IncrementalKind,
    IncrementalPlaceholder,
    MatchPayload,
    NormalizationResult,
    NormalizationSelector,
    Path,
)
from .validation import ConsistencyValidator

__all__ = [
    "ConsistencyValidator",
    "Diagnostic",
    "DiagnosticCollector",
    "DiagnosticKind",
    "DiagnosticSink",
    "FieldPayload",
    "FieldPayloadCollector",
    "IncrementalDeliveryCollector",
    "IncrementalKind",
    "IncrementalPlaceholder",
    "InvalidConditionError",
    "LoggingDiagnosticSink",
    "MatchPayload",
    "MatchResolver",
    "MissingFieldDiagnostic",
    "MissingRootRecordError",
    "NormalizationError",
    "NormalizationResult",
    "NormalizationSelector",
    "Path",
    "PayloadShapeError",
    "ResponseNormalizer",
    "TypenameConflictDiagnostic",
    "evaluate_condition",
    "normalize",
]
