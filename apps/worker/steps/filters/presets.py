"""
Canned export presets: each preset fixes a column set, a base predicate
and a sort order. Extra parameters (free text, status, zone) narrow further.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional

from apps.worker.lib.dates import add_days, in_range, parse_date
from apps.worker.lib.dates import today as _today
from apps.worker.lib.field_resolver import (
    AliasTable,
    is_blank,
    is_empty_like,
    normalize_text,
    resolve_field,
)
from apps.worker.steps.filters.attributes import contains_normalized, is_active, is_adherent
from apps.worker.steps.filters.search import matches_search
from packages.shared.models import ExportGroupId, ExportPresetId, PresetParams

_CONTACT_COLS = ["mail_particular", "celular_particular"]
_IDENTITY_COLS = ["apellido", "nombre_", "documento", "matricula_prov"]

GROUPS: list[tuple[ExportGroupId, str]] = [
    (ExportGroupId.VENCIMIENTOS, "Vencimientos / Cumplimiento"),
    (ExportGroupId.CONTACTABILIDAD, "Contactabilidad"),
    (ExportGroupId.CALIDAD, "Calidad de padrón"),
    (ExportGroupId.ADMINISTRATIVOS, "Administrativos / Matrícula"),
]

PRESETS: dict[ExportPresetId, dict[str, Any]] = {
    ExportPresetId.MALAPRAXIS_VENCIDA: {
        "group": ExportGroupId.VENCIMIENTOS,
        "title": "Malapraxis vencida",
        "columns": _IDENTITY_COLS + _CONTACT_COLS + ["vencimiento_malapraxis"],
    },
    ExportPresetId.MALAPRAXIS_POR_VENCER: {
        "group": ExportGroupId.VENCIMIENTOS,
        "title": "Malapraxis por vencer",
        "columns": _IDENTITY_COLS + _CONTACT_COLS + ["vencimiento_malapraxis"],
    },
    ExportPresetId.ANSSAL_VENCIDO: {
        "group": ExportGroupId.VENCIMIENTOS,
        "title": "ANSSAL vencido",
        "columns": _IDENTITY_COLS + ["anssal", "vencimiento_anssal"] + _CONTACT_COLS,
    },
    ExportPresetId.ANSSAL_POR_VENCER: {
        "group": ExportGroupId.VENCIMIENTOS,
        "title": "ANSSAL por vencer",
        "columns": _IDENTITY_COLS + ["anssal", "vencimiento_anssal"] + _CONTACT_COLS,
    },
    ExportPresetId.COBERTURA_VENCIDA: {
        "group": ExportGroupId.VENCIMIENTOS,
        "title": "Cobertura vencida",
        "columns": _IDENTITY_COLS + ["cobertura", "vencimiento_cobertura"] + _CONTACT_COLS,
    },
    ExportPresetId.COBERTURA_POR_VENCER: {
        "group": ExportGroupId.VENCIMIENTOS,
        "title": "Cobertura por vencer",
        "columns": _IDENTITY_COLS + ["cobertura", "vencimiento_cobertura"] + _CONTACT_COLS,
    },
    ExportPresetId.CONTACTABLES: {
        "group": ExportGroupId.CONTACTABILIDAD,
        "title": "Contactables (mail o celular)",
        "columns": ["apellido", "nombre_", "nro_socio"] + _CONTACT_COLS + ["provincia", "localidad"],
    },
    ExportPresetId.DATOS_INCOMPLETOS: {
        "group": ExportGroupId.CALIDAD,
        "title": "Datos críticos incompletos",
        "columns": ["apellido", "nombre_", "documento", "provincia", "localidad", "observacion"],
    },
    ExportPresetId.SIN_CUIT_O_CBU: {
        "group": ExportGroupId.CALIDAD,
        "title": "Sin CUIT o sin CBU",
        "columns": ["apellido", "nombre_", "documento", "cuit", "cbu", "condicion_impositiva"],
    },
    ExportPresetId.ALTAS_RECIENTES: {
        "group": ExportGroupId.ADMINISTRATIVOS,
        "title": "Altas recientes (por fecha_matricula)",
        "columns": _IDENTITY_COLS + ["fecha_matricula", "categoria", "provincia", "localidad"],
    },
    ExportPresetId.POR_ZONA: {
        "group": ExportGroupId.ADMINISTRATIVOS,
        "title": "Por zona (Provincia/Localidad)",
        "columns": _IDENTITY_COLS + _CONTACT_COLS + [
            "provincia", "localidad", "domicilio_particular", "codigo_postal",
        ],
    },
}

_SORT_DATE_FIELD = {
    ExportPresetId.MALAPRAXIS_VENCIDA: "vencimiento_malapraxis",
    ExportPresetId.MALAPRAXIS_POR_VENCER: "vencimiento_malapraxis",
    ExportPresetId.ANSSAL_VENCIDO: "vencimiento_anssal",
    ExportPresetId.ANSSAL_POR_VENCER: "vencimiento_anssal",
    ExportPresetId.COBERTURA_VENCIDA: "vencimiento_cobertura",
    ExportPresetId.COBERTURA_POR_VENCER: "vencimiento_cobertura",
    ExportPresetId.ALTAS_RECIENTES: "fecha_matricula",
}

_EXPIRED = {
    ExportPresetId.MALAPRAXIS_VENCIDA: "vencimiento_malapraxis",
    ExportPresetId.ANSSAL_VENCIDO: "vencimiento_anssal",
    ExportPresetId.COBERTURA_VENCIDA: "vencimiento_cobertura",
}
_EXPIRING = {
    ExportPresetId.MALAPRAXIS_POR_VENCER: "vencimiento_malapraxis",
    ExportPresetId.ANSSAL_POR_VENCER: "vencimiento_anssal",
    ExportPresetId.COBERTURA_POR_VENCER: "vencimiento_cobertura",
}


def get_preset(preset_id: ExportPresetId | str) -> dict[str, Any]:
    try:
        return PRESETS[ExportPresetId(preset_id)]
    except ValueError:
        raise ValueError(f"Unknown export preset '{preset_id}'") from None


def preset_columns(preset_id: ExportPresetId | str) -> list[str]:
    return list(get_preset(preset_id)["columns"])


def _date_of(record: Mapping[str, Any], field: str, table: AliasTable | None) -> Optional[date]:
    return parse_date(resolve_field(record, field, table))


def matches_preset(
    preset_id: ExportPresetId | str,
    record: Mapping[str, Any],
    params: PresetParams | None = None,
    today: date | None = None,
    table: AliasTable | None = None,
) -> bool:
    pid = ExportPresetId(preset_id)
    p = params or PresetParams()
    day = today or _today()

    custom_from = parse_date(p.fecha_desde) if p.fecha_desde.strip() else None
    custom_to = parse_date(p.fecha_hasta) if p.fecha_hasta.strip() else None
    has_custom_range = custom_from is not None or custom_to is not None
    window_from = custom_from or day
    window_to = custom_to or add_days(day, max(1, p.dias))

    if pid in _EXPIRED:
        d = _date_of(record, _EXPIRED[pid], table)
        cutoff = custom_from or day
        return d is not None and d < cutoff

    if pid in _EXPIRING:
        d = _date_of(record, _EXPIRING[pid], table)
        start = window_from if has_custom_range else day
        return d is not None and in_range(d, start, window_to)

    if pid == ExportPresetId.CONTACTABLES:
        return any(not is_blank(resolve_field(record, f, table)) for f in _CONTACT_COLS)

    if pid == ExportPresetId.DATOS_INCOMPLETOS:
        critical = ["documento", "apellido", "nombre_", "provincia", "localidad"]
        return any(is_empty_like(resolve_field(record, f, table)) for f in critical)

    if pid == ExportPresetId.SIN_CUIT_O_CBU:
        return is_empty_like(resolve_field(record, "cuit", table)) or is_empty_like(resolve_field(record, "cbu", table))

    if pid == ExportPresetId.ALTAS_RECIENTES:
        d = _date_of(record, "fecha_matricula", table)
        start = custom_from or add_days(day, -30)
        end = custom_to or day
        return d is not None and in_range(d, start, end)

    return True


def apply_preset_extra_filters(
    record: Mapping[str, Any],
    params: PresetParams | None,
    table: AliasTable | None = None,
) -> bool:
    if params is None:
        return True
    if not matches_search(record, params.q, table):
        return False

    status = normalize_text(params.status)
    if status:
        current = "activo" if is_active(record, table) else "inactivo"
        if current != status:
            return False

    adherente = normalize_text(params.adherente)
    if adherente == "si" and not is_adherent(record, table):
        return False
    if adherente == "no" and is_adherent(record, table):
        return False

    if not contains_normalized(record, "provincia", params.provincia, table):
        return False
    if not contains_normalized(record, "localidad", params.localidad, table):
        return False
    return True


def sort_for_preset(
    preset_id: ExportPresetId | str,
    rows: list[Mapping[str, Any]],
    table: AliasTable | None = None,
) -> list[Mapping[str, Any]]:
    """Date-keyed presets sort ascending with unknown dates last; others by surname."""
    pid = ExportPresetId(preset_id)
    field = _SORT_DATE_FIELD.get(pid)
    if field:
        def _date_key(r: Mapping[str, Any]) -> tuple[int, date]:
            d = _date_of(r, field, table)
            return (1, date.max) if d is None else (0, d)
        return sorted(rows, key=_date_key)
    return sorted(rows, key=lambda r: normalize_text(resolve_field(r, "apellido", table)))
