from .enums import (
    ActiveStatus,
    AdherentFilter,
    CredentialKind,
    ExportFormat,
    ExportGroupId,
    ExportPresetId,
    MissingMode,
)
from .common import (
    CheckboxMode,
    CredentialFlags,
    DateWindow,
    ExpiryMode,
    ExportColumn,
    PresetParams,
    SpecialtyOption,
    Warning,
    WindowMode,
)
from .domain import (
    ExpiryFilter,
    FilterSelection,
    MissingFieldFilter,
    OtherFilter,
    Record,
    ReportOptions,
    ReportResult,
)

__all__ = [
    "ActiveStatus",
    "AdherentFilter",
    "CheckboxMode",
    "CredentialFlags",
    "CredentialKind",
    "DateWindow",
    "ExpiryFilter",
    "ExpiryMode",
    "ExportColumn",
    "ExportFormat",
    "ExportGroupId",
    "ExportPresetId",
    "FilterSelection",
    "MissingFieldFilter",
    "MissingMode",
    "OtherFilter",
    "PresetParams",
    "Record",
    "ReportOptions",
    "ReportResult",
    "SpecialtyOption",
    "Warning",
    "WindowMode",
]
