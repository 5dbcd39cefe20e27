"""
Specialty token resolution.

Rules:
1. Collect up to six specialty-id slots; drop empty and zero values.
2. Translate ids through the catalog; unknown ids keep the raw id.
3. Merge the legacy combined specialty field (delimited string, list of
   strings, or list of objects carrying a name or id).
4. Deduplicate case/accent-insensitively, first seen wins.
5. "Sin especialidad" or nothing at all collapses to ["médico"].
6. With more than one token, "médico" is dropped.
"""
from __future__ import annotations

import re
from typing import Any, Mapping, Optional

from apps.worker.lib.field_resolver import (
    AliasTable,
    aliases_for,
    is_blank,
    normalize_text,
    resolve,
)
from apps.worker.lib.specialty_catalog import CatalogProvider

GENERALIST = "médico"
_GENERALIST_NORM = "medico"
_SIN_ESPECIALIDAD = {"sin especialidad", "sinespecialidad"}

SPECIALTY_SLOTS = [
    "nro_especialidad",
    "nro_especialidad2",
    "nro_especialidad3",
    "nro_especialidad4",
    "nro_especialidad5",
    "nro_especialidad6",
]

_SPLIT_RE = re.compile(r"[;,|]")
_NAME_KEYS = ("nombre", "NOMBRE", "name", "label", "descripcion", "DESCRIPCION")
_ID_KEYS = ("id", "ID", "value", "codigo", "CODIGO")


def _text(v: Any) -> str:
    if v is None:
        return ""
    return str(v).strip()


def _is_zero(s: str) -> bool:
    return s == "0"


def _translate(identifier: str, catalog: Optional[CatalogProvider]) -> str:
    if catalog is None:
        return identifier
    return catalog.name_for(identifier) or identifier


def _slot_ids(record: Mapping[str, Any]) -> list[str]:
    ids: list[str] = []
    for slot in SPECIALTY_SLOTS:
        raw = _text(resolve(record, [slot, slot.upper()]))
        if raw and not _is_zero(raw):
            ids.append(raw)
    return ids


def _legacy_tokens(raw: Any, catalog: Optional[CatalogProvider]) -> list[str]:
    if is_blank(raw):
        return []
    items: list[Any]
    if isinstance(raw, (list, tuple)):
        items = list(raw)
    elif isinstance(raw, str):
        items = _SPLIT_RE.split(raw)
    else:
        items = [raw]

    tokens: list[str] = []
    for item in items:
        if isinstance(item, Mapping):
            name = next((_text(item[k]) for k in _NAME_KEYS if _text(item.get(k))), "")
            if name:
                tokens.append(name)
                continue
            ident = next((_text(item[k]) for k in _ID_KEYS if _text(item.get(k))), "")
            if ident and not _is_zero(ident):
                tokens.append(_translate(ident, catalog))
            continue
        t = _text(item)
        if not t or _is_zero(t):
            continue
        # numeric legacy values are ids, not names
        tokens.append(_translate(t, catalog) if t.isdigit() else t)
    return tokens


def _dedupe(tokens: list[str]) -> list[str]:
    out: list[str] = []
    seen: set[str] = set()
    for t in tokens:
        key = normalize_text(t)
        if not key or key in seen:
            continue
        seen.add(key)
        out.append(t.strip())
    return out


def get_specialty_tokens(
    record: Mapping[str, Any] | None,
    catalog: Optional[CatalogProvider] = None,
    table: AliasTable | None = None,
) -> list[str]:
    """Display-ready specialty names for a record."""
    record = record or {}
    tokens = [_translate(i, catalog) for i in _slot_ids(record)]
    tokens.extend(_legacy_tokens(resolve(record, aliases_for("especialidad_legacy", table)), catalog))

    tokens = _dedupe(tokens)

    if not tokens or any(normalize_text(t) in _SIN_ESPECIALIDAD for t in tokens):
        return [GENERALIST]

    if len(tokens) > 1:
        named = [t for t in tokens if normalize_text(t) != _GENERALIST_NORM]
        if named:
            return named
    return tokens


def has_named_specialty(
    record: Mapping[str, Any] | None,
    catalog: Optional[CatalogProvider] = None,
    table: AliasTable | None = None,
) -> bool:
    """False when the record only resolves to the generalist fallback."""
    tokens = get_specialty_tokens(record, catalog, table)
    return not (len(tokens) == 1 and normalize_text(tokens[0]) == _GENERALIST_NORM)


def format_specialties(
    record: Mapping[str, Any] | None,
    catalog: Optional[CatalogProvider] = None,
    max_items: int | None = None,
    sep: str = " | ",
    table: AliasTable | None = None,
) -> str:
    tokens = get_specialty_tokens(record, catalog, table)
    if max_items is not None:
        tokens = tokens[:max_items]
    return sep.join(tokens)


def matches_specialty(
    record: Mapping[str, Any] | None,
    selected: Any,
    catalog: Optional[CatalogProvider] = None,
    table: AliasTable | None = None,
) -> bool:
    """
    Empty selection matches everything. Otherwise any token equal to,
    containing, or contained in the normalized selection matches.
    """
    sel = normalize_text(selected)
    if not sel:
        return True
    # a catalog id selection is compared through its display name too
    candidates = {sel}
    if catalog is not None:
        name = catalog.name_for(_text(selected))
        if name:
            candidates.add(normalize_text(name))
    for token in get_specialty_tokens(record, catalog, table):
        tok = normalize_text(token)
        if not tok:
            continue
        for c in candidates:
            if tok == c or c in tok or tok in c:
                return True
    return False
