"""CLI entrypoint for validating a subscription document against its schema."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from collections.abc import Iterable
from typing import Any

import yaml
from jsonschema import Draft202012Validator

_DEFAULT_SCHEMA = Path(__file__).resolve().parents[1] / "schemas" / "subscription.schema.json"


class SchemaValidationError(ValueError):
    """Raised when a document does not conform to the subscription schema."""


def _load_document(path: Path) -> Any:
    # JSON is a subset of YAML, so one loader covers both.
    return yaml.safe_load(path.read_text(encoding="utf-8"))


def _format_errors(errors: Iterable) -> str:
    messages = []
    for error in errors:
        pointer = "/".join(str(p) for p in error.path)
        messages.append(f"- {pointer or '<root>'}: {error.message}")
    return "\n".join(messages)


def validate_document(document: Any, schema_path: Path = _DEFAULT_SCHEMA) -> None:
    schema = _load_document(schema_path)
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(document), key=lambda e: [str(p) for p in e.path])
    if errors:
        raise SchemaValidationError("\n" + _format_errors(errors))


def validate_subscription(input_path: Path, schema_path: Path = _DEFAULT_SCHEMA) -> None:
    validate_document(_load_document(input_path), schema_path)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Path to the subscription YAML or JSON to validate",
    )
    parser.add_argument(
        "--schema",
        type=Path,
        default=_DEFAULT_SCHEMA,
        help="Path to the JSON schema used for validation",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        validate_subscription(args.input, args.schema)
    except FileNotFoundError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except yaml.YAMLError as exc:
        print(f"ERROR: Failed to read document: {exc}", file=sys.stderr)
        return 1
    except SchemaValidationError as exc:
        print(f"ERROR: Subscription failed validation:{exc}", file=sys.stderr)
        return 1

    print(f"Subscription {args.input} is valid against {args.schema}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
