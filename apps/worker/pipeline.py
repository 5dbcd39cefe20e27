"""
Export pipeline: filter a record set and render it as a report.

Two entry points:
  run_export          free-form selection (columns + filter groups)
  run_preset_export   one of the canned presets plus optional extra params
"""
from __future__ import annotations

import logging
import time
from datetime import date
from typing import Any, Iterable, Mapping, Optional

from apps.worker.lib.dates import today as _today
from apps.worker.lib.field_resolver import AliasTable
from apps.worker.lib.specialty_catalog import CatalogProvider
from apps.worker.steps.export_render import build_report
from apps.worker.steps.filters import (
    apply_filters,
    apply_preset_extra_filters,
    matches_preset,
    preset_columns,
    sort_for_preset,
)
from apps.worker.steps.filters.presets import get_preset
from packages.shared.models import (
    ExportFormat,
    ExportPresetId,
    FilterSelection,
    PresetParams,
    ReportOptions,
    ReportResult,
)
from packages.shared.storage import save_report

logger = logging.getLogger(__name__)

MEMBER_ID_COLUMN = "nro_socio"
NO_MATCHES_MSG = "No hay registros que coincidan con los filtros seleccionados"


def export_columns(selected: Iterable[str]) -> list[str]:
    """Member id first, then the selection in order, without repeats."""
    cols = [c for c in selected if c]
    if not cols:
        raise ValueError("Select at least one column to export")
    return list(dict.fromkeys([MEMBER_ID_COLUMN, *cols]))


def _persist(result: ReportResult) -> None:
    path = save_report(result.filename, result.content)
    logger.info(f"Report saved to {path} (sha256={result.sha256[:12]})")


def run_export(
    records: Iterable[Mapping[str, Any]],
    selection: FilterSelection,
    fmt: ExportFormat | str,
    catalog: Optional[CatalogProvider] = None,
    options: ReportOptions | None = None,
    today: date | None = None,
    persist: bool = False,
    table: AliasTable | None = None,
) -> ReportResult:
    """
    Filter *records* with *selection* and render the selected columns.

    Column and format validation happen before any record is touched.
    An empty filtered set still yields a report with just the header.
    """
    start = time.time()
    columns = export_columns(selection.columns)
    export_format = ExportFormat.parse(fmt)

    rows = apply_filters(records, selection, catalog=catalog, today=today or _today(), table=table)
    result = build_report(export_format, columns, rows, options, catalog=catalog, table=table)
    if persist:
        _persist(result)

    logger.info(f"Export finished: {result.row_count} rows in {time.time() - start:.3f}s")
    return result


def run_preset_export(
    records: Iterable[Mapping[str, Any]],
    preset_id: ExportPresetId | str,
    params: PresetParams | None = None,
    fmt: ExportFormat | str = ExportFormat.SPREADSHEET,
    catalog: Optional[CatalogProvider] = None,
    options: ReportOptions | None = None,
    today: date | None = None,
    persist: bool = False,
    table: AliasTable | None = None,
) -> ReportResult:
    """
    Export one of the canned presets. Raises ValueError when nothing matches.
    """
    start = time.time()
    preset = get_preset(preset_id)
    export_format = ExportFormat.parse(fmt)
    day = today or _today()

    rows = [
        r for r in records
        if matches_preset(preset_id, r, params, day, table) and apply_preset_extra_filters(r, params, table)
    ]
    if not rows:
        raise ValueError(NO_MATCHES_MSG)
    rows = sort_for_preset(preset_id, rows, table)

    opts = options or ReportOptions(title=preset["title"], filename_stem=f"medicos_{ExportPresetId(preset_id).value}")
    result = build_report(export_format, preset_columns(preset_id), rows, opts, catalog=catalog, table=table)
    if persist:
        _persist(result)

    logger.info(f"Preset export '{ExportPresetId(preset_id).value}' finished: {result.row_count} rows in {time.time() - start:.3f}s")
    return result
