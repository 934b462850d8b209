"""Flat record store written by the normalizer."""

from __future__ import annotations

from .keys import (
    CLIENT_ID_PREFIX,
    ClientIDGenerator,
    canonical_json,
    format_storage_key,
    generate_client_id,
    get_argument_values,
    get_handle_storage_key,
    get_match_storage_key,
    get_storage_key,
    is_client_id,
)
from .record import (
    ID_KEY,
    REF_KEY,
    REFS_KEY,
    ROOT_ID,
    ROOT_TYPE,
    TYPENAME_KEY,
    DataID,
    Record,
    create_record,
)
from .record_source import InMemoryRecordSource, RecordSource

__all__ = [
    "CLIENT_ID_PREFIX",
    "ID_KEY",
    "REFS_KEY",
    "REF_KEY",
    "ROOT_ID",
    "ROOT_TYPE",
    "TYPENAME_KEY",
    "ClientIDGenerator",
    "DataID",
    "InMemoryRecordSource",
    "Record",
    "RecordSource",
    "canonical_json",
    "create_record",
    "format_storage_key",
    "generate_client_id",
    "get_argument_values",
    "get_handle_storage_key",
    "get_match_storage_key",
    "get_storage_key",
    "is_client_id",
]
