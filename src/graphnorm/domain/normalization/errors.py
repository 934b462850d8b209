"""Fatal normalization errors.

Only structural problems unwind a normalization call. Records written before
the error are left in the record source.
"""

from __future__ import annotations


class NormalizationError(RuntimeError):
    """Base class for errors that abort a normalization call."""


class PayloadShapeError(NormalizationError):
    """Raised when the payload disagrees with the shape of the selection tree."""


class MissingRootRecordError(NormalizationError):
    """Raised when the selector's root record does not exist in the source."""


class InvalidConditionError(NormalizationError):
    """Raised when a defer/stream condition does not evaluate to a boolean."""
