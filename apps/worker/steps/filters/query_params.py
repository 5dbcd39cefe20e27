"""
Flatten a FilterSelection into query-string parameters for server-side
filtering (bulk export path). Default/empty values are omitted entirely.
"""
from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import urlencode

from apps.worker.lib.dates import parse_date
from packages.shared.models import ActiveStatus, AdherentFilter, FilterSelection

_ESTADO_PARAM = {
    ActiveStatus.ACTIVO: "activos",
    ActiveStatus.INACTIVO: "inactivos",
}

_FLAG_PARAMS = [
    ("malapraxis_vencida", "malapraxis_vencida"),
    ("malapraxis_por_vencer", "malapraxis_por_vencer"),
    ("anssal_vencido", "anssal_vencido"),
    ("anssal_por_vencer", "anssal_por_vencer"),
    ("cobertura_vencida", "cobertura_vencida"),
    ("cobertura_por_vencer", "cobertura_por_vencer"),
]


def _iso_day(value: Any) -> str:
    """YYYY-MM-DD for parseable dates; raw text otherwise."""
    d = parse_date(value)
    if d is not None:
        return d.isoformat()
    return str(value or "").strip()


def selection_to_query_params(selection: FilterSelection) -> dict[str, str]:
    otros = selection.otros
    venc = selection.vencimientos
    params: dict[str, Any] = {
        "estado": _ESTADO_PARAM.get(otros.estado),
        "adherente": otros.adherente.value if otros.adherente != AdherentFilter.ANY else None,
        "sexo": otros.sexo,
        "provincia": otros.provincia,
        "localidad": otros.localidad,
        "categoria": otros.categoria,
        "especialidad": otros.especialidad,
        "condicion_impositiva": otros.condicion_impositiva,
        "fecha_ingreso_desde": _iso_day(otros.fecha_ingreso_desde) if otros.fecha_ingreso_desde else None,
        "fecha_ingreso_hasta": _iso_day(otros.fecha_ingreso_hasta) if otros.fecha_ingreso_hasta else None,
    }
    for attr, key in _FLAG_PARAMS:
        params[key] = "1" if getattr(venc, attr) else None
    params["por_vencer_dias"] = str(venc.dias) if venc.dias > 0 else None
    params["vencimientos_desde"] = _iso_day(venc.fecha_desde) if venc.fecha_desde else None
    params["vencimientos_hasta"] = _iso_day(venc.fecha_hasta) if venc.fecha_hasta else None

    out: dict[str, str] = {}
    for k, v in params.items():
        if v is None:
            continue
        s = str(v).strip()
        if s:
            out[k] = s
    return out


def build_query_string(params: Mapping[str, Any]) -> str:
    """URL-encode non-empty params, keeping insertion order."""
    pairs = []
    for k, v in params.items():
        if v is None:
            continue
        s = str(v).strip()
        if s:
            pairs.append((k, s))
    return urlencode(pairs)
