"""
Filter evaluator: composes every sub-filter into one predicate over a record.

All active groups are ANDed. Inactive groups (empty values, no flags) are
vacuously true, so an empty FilterSelection matches every record.
"""
from __future__ import annotations

import logging
import time
from datetime import date
from typing import Any, Iterable, Mapping, NamedTuple, Optional

from apps.worker.lib.dates import in_range, parse_date
from apps.worker.lib.dates import today as _today
from apps.worker.lib.field_resolver import AliasTable, resolve_field
from apps.worker.lib.specialty_catalog import CatalogProvider
from apps.worker.lib.specialty_resolver import matches_specialty
from apps.worker.steps.filters.attributes import (
    contains_normalized,
    equals_normalized,
    has_malpractice_insurer,
    is_active,
    is_adherent,
)
from apps.worker.steps.filters.expiry import derive_expiry_mode, matches_expiry
from apps.worker.steps.filters.missing import matches_missing_filter
from apps.worker.steps.filters.search import matches_search
from packages.shared.models import (
    ActiveStatus,
    AdherentFilter,
    ExpiryMode,
    FilterSelection,
)

logger = logging.getLogger(__name__)


class _Prepared(NamedTuple):
    selection: FilterSelection
    expiry_mode: Optional[ExpiryMode]
    join_active: bool
    join_from: Optional[date]
    join_to: Optional[date]


def _prepare(selection: FilterSelection, today: date) -> _Prepared:
    otros = selection.otros
    join_active = bool(otros.fecha_ingreso_desde or otros.fecha_ingreso_hasta)
    return _Prepared(
        selection=selection,
        expiry_mode=derive_expiry_mode(selection.vencimientos, today),
        join_active=join_active,
        join_from=parse_date(otros.fecha_ingreso_desde) if otros.fecha_ingreso_desde else None,
        join_to=parse_date(otros.fecha_ingreso_hasta) if otros.fecha_ingreso_hasta else None,
    )


def _evaluate_prepared(
    record: Mapping[str, Any],
    prep: _Prepared,
    catalog: Optional[CatalogProvider],
    table: AliasTable | None,
) -> bool:
    sel = prep.selection
    otros = sel.otros

    # 1. Missing-field
    if not matches_missing_filter(record, sel.faltantes, catalog, table):
        return False

    # 2. Boolean attributes
    if otros.con_malapraxis and not has_malpractice_insurer(record, table):
        return False

    # 3. Demographic / attribute match
    if not contains_normalized(record, "sexo", otros.sexo, table):
        return False
    if not contains_normalized(record, "provincia", otros.provincia, table):
        return False
    if not contains_normalized(record, "localidad", otros.localidad, table):
        return False
    if not equals_normalized(record, "categoria", otros.categoria, table):
        return False
    if not equals_normalized(record, "condicion_impositiva", otros.condicion_impositiva, table):
        return False
    if otros.especialidad and not matches_specialty(record, otros.especialidad, catalog, table):
        return False

    # 4. Status
    if otros.estado == ActiveStatus.ACTIVO and not is_active(record, table):
        return False
    if otros.estado == ActiveStatus.INACTIVO and is_active(record, table):
        return False
    if otros.adherente == AdherentFilter.SI and not is_adherent(record, table):
        return False
    if otros.adherente == AdherentFilter.NO and is_adherent(record, table):
        return False

    # 5. Join date: an explicit range never admits unknown dates
    if prep.join_active:
        joined = parse_date(resolve_field(record, "fecha_ingreso", table))
        if joined is None or not in_range(joined, prep.join_from, prep.join_to):
            return False

    # 6. Expiry window
    if not matches_expiry(record, prep.expiry_mode, table):
        return False

    # 7. Free text
    if not matches_search(record, sel.q, table):
        return False

    return True


def evaluate(
    record: Mapping[str, Any],
    selection: FilterSelection | None,
    catalog: Optional[CatalogProvider] = None,
    today: date | None = None,
    table: AliasTable | None = None,
) -> bool:
    """True iff *record* satisfies every active sub-filter of *selection*."""
    if selection is None:
        return True
    return _evaluate_prepared(record, _prepare(selection, today or _today()), catalog, table)


def apply_filters(
    records: Iterable[Mapping[str, Any]],
    selection: FilterSelection | None,
    catalog: Optional[CatalogProvider] = None,
    today: date | None = None,
    table: AliasTable | None = None,
) -> list[Mapping[str, Any]]:
    """Filter a record list, preserving order."""
    rows = list(records)
    if selection is None:
        return rows
    start = time.time()
    prep = _prepare(selection, today or _today())
    kept = [r for r in rows if _evaluate_prepared(r, prep, catalog, table)]
    logger.info(
        f"Filtered {len(rows)} records -> {len(kept)} "
        f"(expiry_mode={getattr(prep.expiry_mode, 'kind', None)}, {time.time() - start:.3f}s)"
    )
    return kept
