"""
Credential expiry filtering.

The expiry filter has two mutually exclusive modes chosen from the input:
checkbox mode when any expired/expiring flag is set, window mode when only a
date range or a day count is set. With neither, the filter is inactive.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Optional

from apps.worker.lib.dates import add_days, in_range, parse_date
from apps.worker.lib.dates import today as _today
from apps.worker.lib.field_resolver import AliasTable, resolve_field
from packages.shared.models import (
    CheckboxMode,
    CredentialFlags,
    CredentialKind,
    DateWindow,
    ExpiryFilter,
    ExpiryMode,
    WindowMode,
)

logger = logging.getLogger(__name__)

EXPIRY_FIELDS: dict[CredentialKind, str] = {
    CredentialKind.MALAPRAXIS: "vencimiento_malapraxis",
    CredentialKind.ANSSAL: "vencimiento_anssal",
    CredentialKind.COBERTURA: "vencimiento_cobertura",
}


def get_expiry_date(
    record: Mapping[str, Any],
    kind: CredentialKind,
    table: AliasTable | None = None,
) -> Optional[date]:
    return parse_date(resolve_field(record, EXPIRY_FIELDS[kind], table))


def _credential_flags(expiry: ExpiryFilter) -> list[CredentialFlags]:
    return [
        CredentialFlags(
            kind=CredentialKind.MALAPRAXIS,
            vencida=expiry.malapraxis_vencida,
            por_vencer=expiry.malapraxis_por_vencer,
        ),
        CredentialFlags(
            kind=CredentialKind.ANSSAL,
            vencida=expiry.anssal_vencido,
            por_vencer=expiry.anssal_por_vencer,
        ),
        CredentialFlags(
            kind=CredentialKind.COBERTURA,
            vencida=expiry.cobertura_vencida,
            por_vencer=expiry.cobertura_por_vencer,
        ),
    ]


def derive_expiry_mode(expiry: ExpiryFilter | None, today: date | None = None) -> Optional[ExpiryMode]:
    """Pick CheckboxMode or WindowMode; None when the filter is inactive."""
    if expiry is None:
        return None
    if not expiry.any_checkbox and not expiry.wants_window:
        return None

    day = today or _today()
    start = parse_date(expiry.fecha_desde) if expiry.fecha_desde else None
    end_by_date = parse_date(expiry.fecha_hasta) if expiry.fecha_hasta else None
    end = add_days(day, expiry.dias) if expiry.dias > 0 else end_by_date

    window = DateWindow(start=start or day, end=end)
    logger.debug(
        f"Expiry filter: checkbox={expiry.any_checkbox} window={window.start}..{window.end} dias={expiry.dias}"
    )

    if expiry.any_checkbox:
        expired_window = None
        if start is not None or end_by_date is not None:
            expired_window = DateWindow(start=start, end=end_by_date)
        return CheckboxMode(
            today=day,
            credentials=_credential_flags(expiry),
            window=window,
            expired_window=expired_window,
        )
    return WindowMode(today=day, window=window)


def _credential_matches(d: Optional[date], flags: CredentialFlags, mode: CheckboxMode) -> bool:
    if d is None:
        return False
    expired = d < mode.today
    if flags.vencida and expired:
        if mode.expired_window is None or mode.expired_window.contains(d):
            return True
    if flags.por_vencer and not expired:
        if in_range(d, mode.window.start, mode.window.end):
            return True
    return False


def matches_expiry(
    record: Mapping[str, Any],
    mode: Optional[ExpiryMode],
    table: AliasTable | None = None,
) -> bool:
    """Evaluate a record against an already-derived expiry mode (OR across credential kinds)."""
    if mode is None:
        return True

    if isinstance(mode, CheckboxMode):
        for flags in mode.credentials:
            if not (flags.vencida or flags.por_vencer):
                continue
            if _credential_matches(get_expiry_date(record, flags.kind, table), flags, mode):
                return True
        return False

    for kind in EXPIRY_FIELDS:
        d = get_expiry_date(record, kind, table)
        if d is not None and in_range(d, mode.window.start, mode.window.end):
            return True
    return False
