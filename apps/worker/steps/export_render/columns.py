"""
Column labels and per-cell formatting shared by the CSV and spreadsheet renderers.
"""
from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Optional

from apps.worker.lib.dates import format_date_es
from apps.worker.lib.field_resolver import AliasTable, resolve_field, resolve_text
from apps.worker.lib.specialty_catalog import CatalogProvider
from apps.worker.lib.specialty_resolver import format_specialties
from apps.worker.steps.filters.attributes import is_active, parse_adherent
from packages.shared.models import ExportColumn

HEADER_LABELS: dict[str, str] = {
    "apellido": "Apellido",
    "nombre_": "Nombre",
    "nombre": "Nombre",
    "sexo": "Sexo",
    "documento": "DNI",
    "cuit": "CUIT",
    "fecha_nac": "Fecha de Nacimiento",
    "existe": "Estado",
    "estado": "Estado",
    "activo": "Estado",
    "adherente": "Adherente",
    "provincia": "Provincia",
    "localidad": "Localidad",
    "codigo_postal": "Código Postal",
    "domicilio_particular": "Domicilio Particular",
    "tele_particular": "Teléfono",
    "celular_particular": "Celular",
    "mail_particular": "Email",
    "nro_socio": "N° de Socio",
    "categoria": "Categoría",
    "titulo": "Título",
    "matricula_prov": "Matrícula Provincial",
    "matricula_nac": "Matrícula Nacional",
    "fecha_recibido": "Fecha de Recibido",
    "fecha_matricula": "Fecha de Matrícula",
    "fecha_ingreso": "Fecha de Ingreso",
    "domicilio_consulta": "Domicilio Consultorio",
    "telefono_consulta": "Teléfono Consultorio",
    "condicion_impositiva": "Condición Impositiva",
    "especialidad": "Especialidades",
    "especialidades": "Especialidades",
    "anssal": "ANSSAL",
    "cobertura": "Cobertura",
    "vencimiento_anssal": "Vencimiento ANSSAL",
    "malapraxis": "Mala Praxis",
    "vencimiento_malapraxis": "Vencimiento Mala Praxis",
    "vencimiento_cobertura": "Vencimiento Cobertura",
    "cbu": "CBU",
    "observacion": "Observación",
}

SPECIALTY_KEYS = {"especialidad", "especialidades"}
STATUS_KEYS = {"activo", "estado"}

LEFT_ALIGNED_KEYS = {
    "apellido",
    "nombre_",
    "nombre",
    "especialidad",
    "especialidades",
    "domicilio_particular",
    "domicilio_consulta",
    "mail_particular",
    "malapraxis",
    "observacion",
}

_ACRONYMS = [("Cuit", "CUIT"), ("Cbu", "CBU"), ("Anssal", "ANSSAL")]
_NEWLINE_RE = re.compile(r"[\r\n]+")


def default_pretty(key: str) -> str:
    out = key.replace("_", " ").strip().title()
    for word, acronym in _ACRONYMS:
        out = re.sub(rf"\b{word}\b", acronym, out)
    return out


def label_for(key: str) -> str:
    return HEADER_LABELS.get(key) or default_pretty(key)


def to_export_columns(columns: Iterable[str | ExportColumn]) -> list[ExportColumn]:
    """Normalize keys or ExportColumn objects, dropping duplicates. Raises on empty."""
    out: list[ExportColumn] = []
    seen: set[str] = set()
    for col in columns or []:
        if isinstance(col, ExportColumn):
            key, header = col.key.strip(), col.header
        else:
            key = str(col or "").strip()
            header = ""
        if not key or key in seen:
            continue
        seen.add(key)
        out.append(ExportColumn(key=key, header=header or label_for(key)))
    if not out:
        raise ValueError("At least one export column is required")
    return out


def _is_date_key(key: str) -> bool:
    return key.startswith("vencimiento_") or key.startswith("fecha_")


def cell_value(
    record: Mapping[str, Any],
    key: str,
    catalog: Optional[CatalogProvider] = None,
    table: AliasTable | None = None,
) -> str:
    if key in SPECIALTY_KEYS:
        return format_specialties(record, catalog, table=table)
    if _is_date_key(key):
        return format_date_es(resolve_field(record, key, table))
    if key in STATUS_KEYS:
        return "Activo" if is_active(record, table) else "Inactivo"
    if key == "adherente":
        return "Sí" if parse_adherent(record, table) else "No"
    return resolve_text(record, key, table)


def single_line(text: str) -> str:
    return _NEWLINE_RE.sub(" ", text)


def base_width(key: str) -> int:
    """Starting column width from what the key usually holds."""
    if key in SPECIALTY_KEYS or key.startswith("domicilio") or key == "observacion":
        return 30
    if key in ("apellido", "nombre_", "nombre", "mail_particular", "malapraxis"):
        return 22
    if _is_date_key(key):
        return 14
    return 12


def column_width(key: str, header: str, values: Iterable[str]) -> int:
    longest = max([len(header), *(len(v) for v in values)], default=0)
    return min(60, max(10, base_width(key), longest + 2))
