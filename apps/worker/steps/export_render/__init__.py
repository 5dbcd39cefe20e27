from .orchestrator import build_report
from .columns import HEADER_LABELS, cell_value, label_for, to_export_columns
from .csv_render import generate_csv
from .xlsx_render import generate_xlsx
from .logo import load_logo

__all__ = [
    "build_report",
    "HEADER_LABELS",
    "cell_value",
    "label_for",
    "to_export_columns",
    "generate_csv",
    "generate_xlsx",
    "load_logo",
]
