"""
CSV rendering for record exports.

Output is UTF-8 with a BOM so spreadsheet apps pick the right encoding,
comma-delimited, CRLF line ends, one physical line per record.
"""
from __future__ import annotations

import io
from typing import Any, Iterable, Mapping, Optional

from apps.worker.lib.field_resolver import AliasTable
from apps.worker.lib.specialty_catalog import CatalogProvider
from apps.worker.steps.export_render.columns import cell_value, single_line
from packages.shared.models import ExportColumn

BOM = "\ufeff"
LINE_END = "\r\n"
_NEEDS_QUOTES = (",", '"', ";", "\r", "\n")


def _escape(value: str) -> str:
    if any(ch in value for ch in _NEEDS_QUOTES):
        return '"' + value.replace('"', '""') + '"'
    return value


def _line(cells: Iterable[str]) -> str:
    return ",".join(_escape(single_line(c)) for c in cells)


def generate_csv(
    columns: list[ExportColumn],
    rows: Iterable[Mapping[str, Any]],
    catalog: Optional[CatalogProvider] = None,
    table: AliasTable | None = None,
) -> bytes:
    """Header labels first, then one line per record in column order."""
    buf = io.StringIO()
    buf.write(BOM)
    buf.write(_line(c.header for c in columns))
    buf.write(LINE_END)
    for record in rows:
        buf.write(_line(cell_value(record, c.key, catalog, table) for c in columns))
        buf.write(LINE_END)
    return buf.getvalue().encode("utf-8")
