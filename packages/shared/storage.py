"""
Local disk storage helpers for generated reports.
"""
from __future__ import annotations

import hashlib
import os
from pathlib import Path

DATA_DIR = Path(os.environ.get("DATA_DIR", "./data"))
REPORTS_DIR = DATA_DIR / "reports"


def sha256_bytes(data: bytes) -> str:
    """Hex digest identifying a rendered report."""
    return hashlib.sha256(data).hexdigest()


def save_report(filename: str, data: bytes) -> Path:
    """Write a rendered report under REPORTS_DIR, keeping only the base name. Returns the path."""
    REPORTS_DIR.mkdir(parents=True, exist_ok=True)
    path = REPORTS_DIR / Path(filename).name
    path.write_bytes(data)
    return path
