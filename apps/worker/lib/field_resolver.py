"""
Field alias resolution and text normalization for loosely-keyed records.

The same logical attribute shows up under several keys depending on which
version of the data service produced the record (lower/upper case,
abbreviations, legacy names). The alias table is configuration data loaded
from JSON; resolution probes aliases in priority order and returns the first
value that is present and non-blank.
"""
from __future__ import annotations

import json
import logging
import os
import re
import unicodedata
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

from packages.shared.schema_validator import validate_field_aliases

logger = logging.getLogger(__name__)

_DEFAULT_ALIASES_PATH = Path(__file__).resolve().parents[3] / "packages" / "shared" / "data" / "field_aliases.json"
FIELD_ALIASES_PATH = Path(os.getenv("FIELD_ALIASES_PATH", str(_DEFAULT_ALIASES_PATH)))

AliasTable = Mapping[str, list[str]]

_WS_RE = re.compile(r"\s+")


def is_blank(value: Any) -> bool:
    """None, whitespace-only strings and empty containers are blank."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def is_empty_like(value: Any) -> bool:
    """Data-quality emptiness: blank, "0" and "NULL" placeholders."""
    if is_blank(value):
        return True
    s = str(value).strip()
    return s == "0" or s.upper() == "NULL"


def normalize_text(value: Any) -> str:
    """Lower-case, strip diacritics, trim."""
    if value is None:
        return ""
    decomposed = unicodedata.normalize("NFD", str(value).lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.strip()


def safe_text(value: Any) -> str:
    """Display text with whitespace collapsed; None renders empty."""
    if value is None:
        return ""
    return _WS_RE.sub(" ", str(value)).strip()


def normalize_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().upper() in {"1", "S", "SI", "SÍ", "TRUE", "T", "Y", "YES"}
    return False


def load_alias_table(path: Path | str | None = None) -> dict[str, list[str]]:
    """
    Load and validate an alias table from JSON.
    Raises ValueError if the file does not match the alias schema.
    """
    p = Path(path) if path is not None else FIELD_ALIASES_PATH
    with open(p, "r", encoding="utf-8") as f:
        data = json.load(f)
    ok, errors = validate_field_aliases(data)
    if not ok:
        logger.error(f"Alias table {p} failed validation: {errors}")
        raise ValueError(f"Invalid field alias table {p}: {'; '.join(errors)}")
    logger.debug(f"Loaded {len(data['fields'])} logical fields from {p}")
    return {k: list(v) for k, v in data["fields"].items()}


@lru_cache(maxsize=1)
def default_alias_table() -> dict[str, list[str]]:
    return load_alias_table()


def aliases_for(field: str, table: AliasTable | None = None) -> list[str]:
    """Alias list for a logical field; unknown fields probe the key and its case variants."""
    tbl = table if table is not None else default_alias_table()
    aliases = tbl.get(field)
    if aliases:
        return list(aliases)
    variants = [field, field.upper(), field.lower()]
    return list(dict.fromkeys(variants))


def resolve(record: Mapping[str, Any] | None, aliases: list[str]) -> Any:
    """First non-blank value among *aliases*, else an empty string."""
    if not record:
        return ""
    for key in aliases:
        value = record.get(key)
        if not is_blank(value):
            return value
    return ""


def resolve_field(record: Mapping[str, Any] | None, field: str, table: AliasTable | None = None) -> Any:
    return resolve(record, aliases_for(field, table))


def resolve_text(record: Mapping[str, Any] | None, field: str, table: AliasTable | None = None) -> str:
    return safe_text(resolve_field(record, field, table))
