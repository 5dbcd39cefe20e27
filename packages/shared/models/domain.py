from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import Warning
from .enums import ActiveStatus, AdherentFilter, ExportFormat, MissingMode


Record = dict[str, Any]


class ExpiryFilter(BaseModel):
    """Credential expiry filter: six flags plus an optional window."""
    model_config = ConfigDict(populate_by_name=True)

    malapraxis_vencida: bool = Field(default=False, alias="malapraxisVencida")
    malapraxis_por_vencer: bool = Field(default=False, alias="malapraxisPorVencer")
    anssal_vencido: bool = Field(default=False, alias="anssalVencido")
    anssal_por_vencer: bool = Field(default=False, alias="anssalPorVencer")
    cobertura_vencida: bool = Field(default=False, alias="coberturaVencida")
    cobertura_por_vencer: bool = Field(default=False, alias="coberturaPorVencer")
    fecha_desde: Optional[str] = Field(default="", alias="fechaDesde")
    fecha_hasta: Optional[str] = Field(default="", alias="fechaHasta")
    # 0 = no quick range; 30/60/90 = next N days
    dias: int = Field(default=0, ge=0)

    @property
    def any_checkbox(self) -> bool:
        return any((
            self.malapraxis_vencida,
            self.malapraxis_por_vencer,
            self.anssal_vencido,
            self.anssal_por_vencer,
            self.cobertura_vencida,
            self.cobertura_por_vencer,
        ))

    @property
    def wants_window(self) -> bool:
        return bool((self.fecha_desde or "").strip() or (self.fecha_hasta or "").strip() or self.dias > 0)


class OtherFilter(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sexo: str = ""
    estado: ActiveStatus = ActiveStatus.ANY
    adherente: AdherentFilter = AdherentFilter.ANY
    provincia: str = ""
    localidad: str = ""
    especialidad: str = ""
    categoria: str = ""
    condicion_impositiva: str = Field(default="", alias="condicionImpositiva")
    fecha_ingreso_desde: str = Field(default="", alias="fechaIngresoDesde")
    fecha_ingreso_hasta: str = Field(default="", alias="fechaIngresoHasta")
    con_malapraxis: bool = Field(default=False, alias="conMalapraxis")

    @field_validator("estado", "adherente", mode="before")
    @classmethod
    def _blank_is_any(cls, v: Any) -> Any:
        if v is None:
            return ""
        return str(v).strip().lower()


class MissingFieldFilter(BaseModel):
    enabled: bool = False
    field: str = ""
    mode: MissingMode = MissingMode.MISSING


class FilterSelection(BaseModel):
    """Complete user-editable filter configuration, passed in per invocation."""
    model_config = ConfigDict(populate_by_name=True)

    columns: list[str] = Field(default_factory=list)
    vencimientos: ExpiryFilter = Field(default_factory=ExpiryFilter)
    otros: OtherFilter = Field(default_factory=OtherFilter)
    faltantes: MissingFieldFilter = Field(default_factory=MissingFieldFilter)
    q: str = ""

    @field_validator("columns", mode="before")
    @classmethod
    def _unique_ordered(cls, v: Any) -> list[str]:
        seen: set[str] = set()
        out: list[str] = []
        for key in v or []:
            k = str(key or "").strip()
            if k and k not in seen:
                seen.add(k)
                out.append(k)
        return out


class ReportOptions(BaseModel):
    """Per-call report configuration."""
    title: str = "Listado de Médicos"
    subtitle: Optional[str] = None
    sheet_name: str = "Médicos"
    filename_stem: str = "medicos"
    logo: Optional[bytes | str] = None
    generated_at: Optional[datetime] = None


class ReportResult(BaseModel):
    format: ExportFormat
    content: bytes
    mime_type: str
    filename: str
    row_count: int
    sha256: str = ""
    warnings: list[Warning] = Field(default_factory=list)
