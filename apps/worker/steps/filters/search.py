from __future__ import annotations

from typing import Any, Mapping

from apps.worker.lib.field_resolver import AliasTable, normalize_text, resolve_field

SEARCH_FIELDS = [
    "apellido",
    "nombre_",
    "nombre",
    "mail_particular",
    "documento",
    "matricula_prov",
    "nro_socio",
]


def matches_search(record: Mapping[str, Any], query: str, table: AliasTable | None = None) -> bool:
    """Case/accent-insensitive substring search over identity and contact fields."""
    q = normalize_text(query)
    if not q:
        return True
    return any(q in normalize_text(resolve_field(record, f, table)) for f in SEARCH_FIELDS)
