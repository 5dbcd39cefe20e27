"""
"Missing field" predicates for data-quality queries.
"""
from __future__ import annotations

import re
from typing import Any, Mapping, Optional

from apps.worker.lib.field_resolver import AliasTable, is_blank, resolve_field
from apps.worker.lib.specialty_catalog import CatalogProvider
from apps.worker.lib.specialty_resolver import has_named_specialty
from packages.shared.models import MissingFieldFilter, MissingMode

SPECIALTY_FIELDS = {"especialidad", "especialidades"}
EMAIL_FIELD = "mail_particular"

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]{2,}$")


def is_valid_email(value: Any) -> bool:
    s = str(value if value is not None else "").strip()
    if not s or s == "@":
        return False
    return bool(_EMAIL_RE.match(s))


def is_missing_field(
    record: Mapping[str, Any],
    field: str,
    catalog: Optional[CatalogProvider] = None,
    table: AliasTable | None = None,
) -> bool:
    if field in SPECIALTY_FIELDS:
        return not has_named_specialty(record, catalog, table)
    if field == EMAIL_FIELD:
        return not is_valid_email(resolve_field(record, field, table))
    return is_blank(resolve_field(record, field, table))


def matches_missing_filter(
    record: Mapping[str, Any],
    flt: MissingFieldFilter | None,
    catalog: Optional[CatalogProvider] = None,
    table: AliasTable | None = None,
) -> bool:
    if flt is None or not flt.enabled or not flt.field:
        return True
    missing = is_missing_field(record, flt.field, catalog, table)
    return missing if flt.mode == MissingMode.MISSING else not missing
