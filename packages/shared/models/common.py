from datetime import date
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .enums import CredentialKind


class DateWindow(BaseModel):
    """Inclusive day-precision window. Either bound may be open."""
    start: Optional[date] = None
    end: Optional[date] = None

    def contains(self, d: date) -> bool:
        if self.start is not None and d < self.start:
            return False
        if self.end is not None and d > self.end:
            return False
        return True


class CredentialFlags(BaseModel):
    kind: CredentialKind
    vencida: bool = False
    por_vencer: bool = False


class CheckboxMode(BaseModel):
    """At least one expired/expiring flag is set; OR across credential kinds."""
    kind: Literal["checkbox"] = "checkbox"
    today: date
    credentials: list[CredentialFlags]
    window: DateWindow
    # explicit date range, also required of already-expired credentials
    expired_window: Optional[DateWindow] = None


class WindowMode(BaseModel):
    """No flags set, only a date range or day count: any expiry inside the window matches."""
    kind: Literal["window"] = "window"
    today: date
    window: DateWindow


ExpiryMode = Union[CheckboxMode, WindowMode]


class SpecialtyOption(BaseModel):
    value: str
    label: str


class ExportColumn(BaseModel):
    key: str
    header: str


class Warning(BaseModel):
    code: str
    message: str
    field: Optional[str] = None


class PresetParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    q: str = ""
    status: str = ""
    adherente: str = ""
    provincia: str = ""
    localidad: str = ""
    dias: int = Field(default=30, ge=0)
    fecha_desde: str = Field(default="", alias="fechaDesde")
    fecha_hasta: str = Field(default="", alias="fechaHasta")
