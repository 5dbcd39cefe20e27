from enum import Enum


class CredentialKind(str, Enum):
    MALAPRAXIS = "malapraxis"  # malpractice insurance
    ANSSAL = "anssal"  # social-insurance registration
    COBERTURA = "cobertura"


class ActiveStatus(str, Enum):
    ANY = ""
    ACTIVO = "activo"
    INACTIVO = "inactivo"


class AdherentFilter(str, Enum):
    ANY = ""
    SI = "si"
    NO = "no"


class MissingMode(str, Enum):
    MISSING = "missing"
    PRESENT = "present"


class ExportFormat(str, Enum):
    CSV = "csv"
    SPREADSHEET = "spreadsheet"

    @classmethod
    def parse(cls, value: "ExportFormat | str") -> "ExportFormat":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower()
        if raw in ("xlsx", "excel", "spreadsheet"):
            return cls.SPREADSHEET
        if raw == "csv":
            return cls.CSV
        raise ValueError(f"Unsupported export format '{value}'")


class ExportGroupId(str, Enum):
    VENCIMIENTOS = "vencimientos"
    CONTACTABILIDAD = "contactabilidad"
    CALIDAD = "calidad"
    ADMINISTRATIVOS = "administrativos"


class ExportPresetId(str, Enum):
    MALAPRAXIS_VENCIDA = "malapraxis_vencida"
    MALAPRAXIS_POR_VENCER = "malapraxis_por_vencer"
    ANSSAL_VENCIDO = "anssal_vencido"
    ANSSAL_POR_VENCER = "anssal_por_vencer"
    COBERTURA_VENCIDA = "cobertura_vencida"
    COBERTURA_POR_VENCER = "cobertura_por_vencer"
    CONTACTABLES = "contactables"
    DATOS_INCOMPLETOS = "datos_incompletos"
    SIN_CUIT_O_CBU = "sin_cuit_o_cbu"
    ALTAS_RECIENTES = "altas_recientes"
    POR_ZONA = "por_zona"
