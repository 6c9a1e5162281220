"""
Upload Settings Schema.

Validates a parsed settings file against the bundled Draft-7 schema
(``schemas/upload_config_schema.json``). Violations are collected per
top-level section, so a report reads like::

    browserstack: timeout_sec: 0 is less than the minimum of 1
    upload: 'test_run_name' is a required property
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List

import jsonschema
from loguru import logger

SCHEMA_FILE = Path(__file__).parent / "schemas" / "upload_config_schema.json"
ROOT_SECTION = "(root)"


class SchemaValidationError(Exception):
    """
    Raised when upload settings violate the schema.

    Attributes:
        errors: Messages keyed by the top-level section they occur in
                (``browserstack``, ``upload``, or ``(root)``).
    """

    def __init__(self, message: str, errors: Dict[str, List[str]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or {}

    @property
    def sections(self) -> List[str]:
        return list(self.errors)


@lru_cache(maxsize=None)
def _validator(schema_file: Path) -> jsonschema.Draft7Validator:
    try:
        schema = json.loads(schema_file.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise FileNotFoundError(f"Schema not found: {schema_file}") from e
    logger.debug(f"Loaded upload settings schema: {schema_file}")
    return jsonschema.Draft7Validator(schema)


def load_upload_schema(schema_file: Path = SCHEMA_FILE) -> Dict[str, Any]:
    """Return the upload settings schema as a dictionary."""
    return _validator(Path(schema_file)).schema


def _describe(error: jsonschema.ValidationError) -> tuple[str, str]:
    """Split a violation into its section and a message relative to it."""
    path = [str(p) for p in error.absolute_path]
    if not path:
        return ROOT_SECTION, error.message
    section, field = path[0], ".".join(path[1:])
    return section, f"{field}: {error.message}" if field else error.message


def validate_upload_config(data: Dict[str, Any], schema_file: Path = SCHEMA_FILE) -> None:
    """
    Validate parsed upload settings.

    Raises:
        SchemaValidationError: With every violation, grouped by section.
        FileNotFoundError: If ``schema_file`` does not exist.
    """
    validator = _validator(Path(schema_file))
    violations = sorted(
        validator.iter_errors(data),
        key=lambda e: [str(p) for p in e.absolute_path],
    )
    if not violations:
        return

    by_section: Dict[str, List[str]] = {}
    for error in violations:
        section, message = _describe(error)
        by_section.setdefault(section, []).append(message)

    lines = [
        f"  {section}: {message}"
        for section, messages in by_section.items()
        for message in messages
    ]
    raise SchemaValidationError(
        f"Invalid upload settings ({len(violations)} error(s)):\n" + "\n".join(lines),
        errors=by_section,
    )
