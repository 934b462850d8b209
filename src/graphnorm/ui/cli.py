from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from graphnorm.adapters.ast_schema import AstDocumentError
from graphnorm.app import normalize_documents
from graphnorm.config import ConfigurationError, configure_logging, get_normalizer_config
from graphnorm.domain.normalization import NormalizationError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from graphnorm.domain.ast import JSONValue

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Normalize GraphQL responses into a record store")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("normalize", help="Normalize one response payload")
    run.add_argument(
        "--query",
        type=Path,
        required=True,
        help="Path to the compiled normalization AST (JSON)",
    )
    run.add_argument(
        "--payload",
        type=Path,
        required=True,
        help="Path to the JSON response payload",
    )
    run.add_argument(
        "--variables",
        type=str,
        default="{}",
        help="Variable bindings as a JSON object (default: %(default)s)",
    )
    run.add_argument(
        "--parent-path",
        type=str,
        default="",
        help="Dot separated path prefix for emitted match/placeholder paths",
    )
    run.add_argument(
        "--treat-missing-as-null",
        action="store_true",
        help="Write null for fields missing from the payload",
    )
    run.add_argument(
        "--dev",
        action="store_true",
        help="Enable consistency diagnostics",
    )
    run.add_argument(
        "--persist",
        action="store_true",
        help="Write records to the configured database instead of memory",
    )
    run.add_argument(
        "--database-uri",
        type=str,
        help="Database URI used with --persist (defaults to config)",
    )
    return parser.parse_args(list(argv))


def _parse_variables(value: str) -> dict[str, JSONValue]:
    try:
        variables = json.loads(value)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid variables JSON: {value}") from exc
    if not isinstance(variables, dict):
        raise ValueError("Variables must be a JSON object")
    return variables


def _parse_path(value: str) -> tuple[str, ...]:
    return tuple(part for part in value.split(".") if part)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        configure_logging()
        parsed_args = _parse_args(args_list)
        variables = _parse_variables(parsed_args.variables)
        config = get_normalizer_config()
        if parsed_args.treat_missing_as_null:
            config = replace(config, treat_missing_fields_as_null=True)
        if parsed_args.dev:
            config = replace(config, development=True)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        report = normalize_documents(
            query_path=parsed_args.query,
            payload_path=parsed_args.payload,
            variables=variables,
            config=config,
            persist=parsed_args.persist,
            database_uri=parsed_args.database_uri,
            parent_path=_parse_path(parsed_args.parent_path),
        )
    except AstDocumentError:
        log.exception("Invalid input document")
        sys.exit(2)
    except NormalizationError:
        log.exception("Fatal error during normalization")
        sys.exit(1)

    sys.stdout.write(json.dumps(report.to_json(), indent=2, sort_keys=True) + "\n")


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()
