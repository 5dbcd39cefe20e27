"""
Validate JSON configuration and external payloads against the bundled schemas.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

_SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"
FIELD_ALIASES_SCHEMA = "field-aliases.schema.json"
ESPECIALIDADES_SCHEMA = "especialidades.schema.json"

_schema_cache: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    if name not in _schema_cache:
        with open(_SCHEMA_DIR / name, "r", encoding="utf-8") as f:
            _schema_cache[name] = json.load(f)
    return _schema_cache[name]


def validate_payload(data: Any, schema_name: str) -> tuple[bool, list[str]]:
    """
    Validate *data* against the named schema.
    Returns (is_valid, list_of_error_messages).
    """
    schema = _load_schema(schema_name)
    validator = jsonschema.Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    messages = [f"{'→'.join(str(p) for p in e.absolute_path)}: {e.message}" for e in errors]
    return (len(messages) == 0, messages)


def validate_field_aliases(data: Any) -> tuple[bool, list[str]]:
    return validate_payload(data, FIELD_ALIASES_SCHEMA)


def validate_specialty_payload(data: Any) -> tuple[bool, list[str]]:
    return validate_payload(data, ESPECIALIDADES_SCHEMA)
