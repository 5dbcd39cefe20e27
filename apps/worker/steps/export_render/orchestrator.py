"""
Orchestrator for report rendering.

Validates columns, picks the renderer for the requested format and wraps
the bytes in a ReportResult with MIME type, filename and warnings.
"""
from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from apps.worker.lib.field_resolver import AliasTable
from apps.worker.lib.specialty_catalog import CatalogProvider
from apps.worker.steps.export_render.columns import to_export_columns
from apps.worker.steps.export_render.csv_render import generate_csv
from apps.worker.steps.export_render.logo import load_logo
from apps.worker.steps.export_render.xlsx_render import generate_xlsx
from packages.shared.models import (
    ExportColumn,
    ExportFormat,
    ReportOptions,
    ReportResult,
    Warning,
)
from packages.shared.storage import sha256_bytes

logger = logging.getLogger(__name__)

MIME_TYPES = {
    ExportFormat.CSV: "text/csv;charset=utf-8",
    ExportFormat.SPREADSHEET: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}
EXTENSIONS = {
    ExportFormat.CSV: "csv",
    ExportFormat.SPREADSHEET: "xlsx",
}


def build_filename(stem: str, fmt: ExportFormat, generated_at: datetime) -> str:
    return f"{stem or 'medicos'}_{generated_at.strftime('%Y%m%d_%H%M')}.{EXTENSIONS[fmt]}"


def build_report(
    fmt: ExportFormat | str,
    columns: Iterable[str | ExportColumn],
    rows: Iterable[Mapping[str, Any]],
    options: ReportOptions | None = None,
    catalog: Optional[CatalogProvider] = None,
    table: AliasTable | None = None,
) -> ReportResult:
    """
    Render *rows* as CSV or spreadsheet.

    Raises ValueError for an empty column list or an unknown format, before
    any rendering work. Logo problems never fail the report; they come back
    as warnings.
    """
    cols = to_export_columns(columns)
    export_format = ExportFormat.parse(fmt)
    opts = options or ReportOptions()
    generated_at = opts.generated_at or datetime.now()
    records = list(rows)
    warnings: list[Warning] = []

    start = time.time()
    if export_format == ExportFormat.CSV:
        content = generate_csv(cols, records, catalog, table)
    else:
        logo, logo_warning = load_logo(opts.logo)
        if logo_warning is not None:
            warnings.append(logo_warning)
        content = generate_xlsx(
            cols,
            records,
            title=opts.title,
            subtitle=opts.subtitle,
            sheet_name=opts.sheet_name,
            logo=logo,
            generated_at=generated_at,
            catalog=catalog,
            table=table,
        )

    filename = build_filename(opts.filename_stem, export_format, generated_at)
    logger.info(
        f"Report built: {filename} ({len(records)} rows, {len(cols)} columns, "
        f"{len(content)} bytes, {time.time() - start:.3f}s)"
    )
    return ReportResult(
        format=export_format,
        content=content,
        mime_type=MIME_TYPES[export_format],
        filename=filename,
        row_count=len(records),
        sha256=sha256_bytes(content),
        warnings=warnings,
    )
