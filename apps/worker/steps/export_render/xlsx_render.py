"""
Spreadsheet rendering for record exports (openpyxl).

Layout:
  rows 1-4  header band: logo on the left, organisation name, report title,
            "Generado: dd/mm/yyyy HH:MM" line
  row 5     spacer
  row 6     column headers (frozen, autofiltered)
  row 7+    one record per row, zebra striped
"""
from __future__ import annotations

import io
import logging
import os
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from openpyxl import Workbook
from openpyxl.drawing.image import Image as XLImage
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.properties import PageSetupProperties

from apps.worker.lib.field_resolver import AliasTable
from apps.worker.lib.specialty_catalog import CatalogProvider
from apps.worker.steps.export_render.columns import (
    LEFT_ALIGNED_KEYS,
    cell_value,
    column_width,
)
from apps.worker.steps.export_render.logo import IMAGE_DECODE_ERRORS, image_size
from packages.shared.models import ExportColumn

logger = logging.getLogger(__name__)

EXPORT_ORG_NAME = os.getenv("EXPORT_ORG_NAME", "Colegio Médico de Corrientes")

HEADER_ROW = 6
DATA_START_ROW = HEADER_ROW + 1
LOGO_MAX_HEIGHT_PX = 110
WIDTH_SAMPLE_ROWS = 500

BRAND_BLUE = "FF0B4F8A"
ZEBRA_EVEN = "FFFFFFFF"
ZEBRA_ODD = "FFF8F9FA"

_TITLE_FONT = Font(bold=True, size=18, color=BRAND_BLUE)
_SUBTITLE_FONT = Font(bold=True, size=14, color="FF333333")
_META_FONT = Font(italic=True, size=10, color="FF666666")
_HEADER_FONT = Font(bold=True, size=11, color="FFFFFFFF")
_DATA_FONT = Font(size=10, color="FF333333")

_HEADER_FILL = PatternFill(start_color=BRAND_BLUE, end_color=BRAND_BLUE, fill_type="solid")
_EVEN_FILL = PatternFill(start_color=ZEBRA_EVEN, end_color=ZEBRA_EVEN, fill_type="solid")
_ODD_FILL = PatternFill(start_color=ZEBRA_ODD, end_color=ZEBRA_ODD, fill_type="solid")

_HEADER_SIDE = Side(style="thin", color="FF999999")
_DATA_SIDE = Side(style="thin", color="FFE0E0E0")
_HEADER_BORDER = Border(left=_HEADER_SIDE, right=_HEADER_SIDE, top=_HEADER_SIDE, bottom=_HEADER_SIDE)
_DATA_BORDER = Border(left=_DATA_SIDE, right=_DATA_SIDE, top=_DATA_SIDE, bottom=_DATA_SIDE)

_CENTER = Alignment(horizontal="center", vertical="center", wrap_text=True)
_LEFT = Alignment(horizontal="left", vertical="center", wrap_text=True)

_BAND_ROW_HEIGHTS = {1: 32, 2: 20, 3: 22, 4: 18, 5: 8}


def logo_span(col_count: int) -> int:
    """Columns reserved for the logo block, by how wide the table is."""
    if col_count >= 8:
        return 3
    if col_count >= 5:
        return 2
    return 1


def _sheet_title(name: str) -> str:
    # worksheet titles are limited to 31 chars and cannot contain []:*?/\
    cleaned = "".join(ch for ch in name if ch not in "[]:*?/\\").strip()
    return (cleaned or "Export")[:31]


def _merge(ws, start_row: int, start_column: int, end_row: int, end_column: int) -> None:
    if start_row == end_row and start_column == end_column:
        return
    ws.merge_cells(start_row=start_row, start_column=start_column, end_row=end_row, end_column=end_column)


def _add_logo(ws, logo: bytes) -> bool:
    try:
        width, height = image_size(logo)
        img = XLImage(io.BytesIO(logo))
    except IMAGE_DECODE_ERRORS as exc:
        logger.warning(f"Skipping unreadable logo: {exc}")
        return False
    if height > 0:
        scale = min(1.0, LOGO_MAX_HEIGHT_PX / height)
        img.width = int(width * scale)
        img.height = int(height * scale)
    ws.add_image(img, "A1")
    return True


def _write_band(ws, col_count: int, title: str, meta: str) -> None:
    span = logo_span(col_count)
    last = max(col_count, span + 1)
    _merge(ws, 1, start_column=1, end_row=4, end_column=span)
    ws.cell(row=1, column=1).alignment = _CENTER

    _merge(ws, 1, start_column=span + 1, end_row=2, end_column=last)
    org = ws.cell(row=1, column=span + 1, value=EXPORT_ORG_NAME)
    org.font = _TITLE_FONT
    org.alignment = _CENTER

    _merge(ws, 3, start_column=span + 1, end_row=3, end_column=last)
    sub = ws.cell(row=3, column=span + 1, value=title)
    sub.font = _SUBTITLE_FONT
    sub.alignment = _CENTER

    _merge(ws, 4, start_column=span + 1, end_row=4, end_column=last)
    meta_cell = ws.cell(row=4, column=span + 1, value=meta)
    meta_cell.font = _META_FONT
    meta_cell.alignment = _CENTER

    for row, height in _BAND_ROW_HEIGHTS.items():
        ws.row_dimensions[row].height = height


def generate_xlsx(
    columns: list[ExportColumn],
    rows: Iterable[Mapping[str, Any]],
    title: str,
    subtitle: Optional[str] = None,
    sheet_name: str = "Médicos",
    logo: Optional[bytes] = None,
    generated_at: Optional[datetime] = None,
    catalog: Optional[CatalogProvider] = None,
    table: AliasTable | None = None,
) -> bytes:
    """Render a styled workbook and return its bytes."""
    wb = Workbook()
    wb.properties.creator = EXPORT_ORG_NAME
    ws = wb.active
    ws.title = _sheet_title(sheet_name)

    col_count = len(columns)
    stamp = (generated_at or datetime.now()).strftime("%d/%m/%Y %H:%M")
    meta = f"Generado: {stamp}" + (f" · {subtitle}" if subtitle else "")
    _write_band(ws, col_count, title, meta)

    if logo:
        _add_logo(ws, logo)

    for idx, col in enumerate(columns, start=1):
        cell = ws.cell(row=HEADER_ROW, column=idx, value=col.header)
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = _CENTER
        cell.border = _HEADER_BORDER
    ws.row_dimensions[HEADER_ROW].height = 24

    samples: list[list[str]] = [[] for _ in columns]
    row_idx = DATA_START_ROW
    for i, record in enumerate(rows):
        fill = _EVEN_FILL if i % 2 == 0 else _ODD_FILL
        for idx, col in enumerate(columns, start=1):
            value = cell_value(record, col.key, catalog, table)
            cell = ws.cell(row=row_idx, column=idx, value=value)
            cell.font = _DATA_FONT
            cell.fill = fill
            cell.border = _DATA_BORDER
            cell.alignment = _LEFT if col.key in LEFT_ALIGNED_KEYS else _CENTER
            if i < WIDTH_SAMPLE_ROWS:
                samples[idx - 1].append(value)
        ws.row_dimensions[row_idx].height = 20
        row_idx += 1

    last_row = max(HEADER_ROW, row_idx - 1)
    last_col = get_column_letter(col_count)
    for idx, col in enumerate(columns, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = column_width(col.key, col.header, samples[idx - 1])

    ws.freeze_panes = f"A{DATA_START_ROW}"
    ws.auto_filter.ref = f"A{HEADER_ROW}:{last_col}{last_row}"

    ws.page_setup.orientation = "landscape"
    ws.page_setup.fitToWidth = 1
    ws.page_setup.fitToHeight = 0
    ws.sheet_properties.pageSetUpPr = PageSetupProperties(fitToPage=True)

    buf = io.BytesIO()
    wb.save(buf)
    logger.debug(f"Spreadsheet rendered: {row_idx - DATA_START_ROW} rows x {col_count} columns")
    return buf.getvalue()
