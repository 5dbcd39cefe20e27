"""
Attribute predicates: demographics, activity status, adherent flag, insurer.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from apps.worker.lib.field_resolver import (
    AliasTable,
    is_blank,
    normalize_bool,
    normalize_text,
    resolve_field,
)

_ACTIVE_TRUE = {"activo", "act", "a", "true", "1", "si", "s", "habilitado"}
_ACTIVE_FALSE = {"inactivo", "ina", "i", "false", "0", "no", "n", "inhabilitado", "baja"}

_YES = {"si", "s", "true", "1", "y", "yes"}
_NO = {"no", "n", "false", "0"}


def _parse_active_value(v: Any) -> Optional[bool]:
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return v != 0
    s = normalize_text(v)
    if s in _ACTIVE_TRUE:
        return True
    if s in _ACTIVE_FALSE:
        return False
    return None


def is_active(record: Mapping[str, Any], table: AliasTable | None = None) -> bool:
    """
    Activity flag first, then the textual estado field, then the legacy
    EXISTE column ("S"/"N"). Unknown records are kept as active.
    """
    for field in ("activo", "estado"):
        v = resolve_field(record, field, table)
        if is_blank(v):
            continue
        parsed = _parse_active_value(v)
        if parsed is not None:
            return parsed

    existe = resolve_field(record, "existe", table)
    if is_blank(existe):
        return True
    return normalize_bool(existe)


def parse_adherent(record: Mapping[str, Any], table: AliasTable | None = None) -> Optional[bool]:
    """Tri-state adherent flag; None when absent or unrecognized."""
    v = resolve_field(record, "adherente", table)
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return v != 0
    s = normalize_text(v)
    if s in _YES:
        return True
    if s in _NO:
        return False
    return None


def is_adherent(record: Mapping[str, Any], table: AliasTable | None = None) -> bool:
    # unknown counts as not adherent so "adherente = si" never over-includes
    return parse_adherent(record, table) is True


def has_malpractice_insurer(record: Mapping[str, Any], table: AliasTable | None = None) -> bool:
    return not is_blank(resolve_field(record, "malapraxis", table))


def contains_normalized(record: Mapping[str, Any], field: str, needle: str, table: AliasTable | None = None) -> bool:
    n = normalize_text(needle)
    if not n:
        return True
    return n in normalize_text(resolve_field(record, field, table))


def equals_normalized(record: Mapping[str, Any], field: str, expected: str, table: AliasTable | None = None) -> bool:
    e = normalize_text(expected)
    if not e:
        return True
    return normalize_text(resolve_field(record, field, table)) == e
