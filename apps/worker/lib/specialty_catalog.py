"""
Specialty catalog: identifier → display name.

The catalog is populated once from an external source and read many times.
Lookups before it is loaded return None so callers fall back to the raw
identifier. Reloads replace the whole mapping in a single assignment.
"""
from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Iterable, Optional, Protocol

import requests

from packages.shared.models import SpecialtyOption
from packages.shared.schema_validator import validate_specialty_payload

logger = logging.getLogger(__name__)

ESPECIALIDADES_API_URL = os.getenv("ESPECIALIDADES_API_URL", "http://localhost:8000").strip()
CATALOG_FETCH_TIMEOUT_SECONDS = float(os.getenv("CATALOG_FETCH_TIMEOUT_SECONDS", "30"))

_ID_KEYS = ("id", "ID", "codigo", "CODIGO", "value", "nombre", "NOMBRE")
_LABEL_KEYS = ("nombre", "NOMBRE", "descripcion", "DESCRIPCION", "detalle", "DETALLE", "label")


class CatalogProvider(Protocol):
    def name_for(self, identifier: Any) -> Optional[str]: ...


def _clean_id(identifier: Any) -> str:
    key = str(identifier if identifier is not None else "").strip()
    if key == "0":
        return ""
    return key


class SpecialtyCatalog:
    """Thread-safe, atomically reloaded specialty lookup."""

    def __init__(self, options: Iterable[SpecialtyOption | dict] | None = None):
        self._map: dict[str, str] = {}
        self._lock = threading.Lock()
        self._loaded = threading.Event()
        if options is not None:
            self.load(options)

    def load(self, options: Iterable[SpecialtyOption | dict]) -> int:
        """Replace the mapping. Entries with empty/zero ids or empty labels are dropped."""
        fresh: dict[str, str] = {}
        for opt in options or []:
            if isinstance(opt, dict):
                opt = SpecialtyOption(value=str(opt.get("value", "")), label=str(opt.get("label", "")))
            key = _clean_id(opt.value)
            name = (opt.label or "").strip()
            if not key or not name:
                continue
            fresh[key] = name
        with self._lock:
            self._map = fresh
        self._loaded.set()
        logger.info(f"Specialty catalog loaded: {len(fresh)} entries")
        return len(fresh)

    def name_for(self, identifier: Any) -> Optional[str]:
        key = _clean_id(identifier)
        if not key:
            return None
        return self._map.get(key)

    @property
    def is_loaded(self) -> bool:
        return self._loaded.is_set() and bool(self._map)

    def wait_until_loaded(self, timeout: float | None = None) -> bool:
        return self._loaded.wait(timeout)

    def as_dict(self) -> dict[str, str]:
        return dict(self._map)

    def __len__(self) -> int:
        return len(self._map)

    def load_async(
        self,
        fetcher: Callable[[], list[SpecialtyOption]],
        executor: ThreadPoolExecutor | None = None,
    ) -> Future:
        """
        Run *fetcher* in a worker thread and load its result.
        A failed fetch is logged and keeps the current mapping.
        """
        owns_executor = executor is None
        pool = executor or ThreadPoolExecutor(max_workers=1, thread_name_prefix="specialty-catalog")

        def _task() -> int:
            try:
                options = fetcher()
            except Exception:
                logger.exception("Specialty catalog fetch failed; keeping previous entries")
                return len(self._map)
            return self.load(options)

        future = pool.submit(_task)
        if owns_executor:
            pool.shutdown(wait=False)
        return future


def options_from_payload(data: Any) -> list[SpecialtyOption]:
    """Map loosely-keyed catalog items into SpecialtyOptions."""
    if not isinstance(data, list):
        return []
    ok, errors = validate_specialty_payload(data)
    if not ok:
        logger.warning(f"Specialty payload has {len(errors)} schema issue(s); first: {errors[0]}")
    options: list[SpecialtyOption] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        raw_id = next((item[k] for k in _ID_KEYS if item.get(k) not in (None, "")), None)
        raw_label = next((item[k] for k in _LABEL_KEYS if item.get(k) not in (None, "")), raw_id)
        ident = " ".join(str(raw_id or "").split())
        label = " ".join(str(raw_label or "").split())
        if ident:
            options.append(SpecialtyOption(value=ident, label=label or ident))
    return options


def fetch_specialty_options(base_url: str | None = None, timeout: float | None = None) -> list[SpecialtyOption]:
    """GET /api/especialidades/ and map the payload."""
    url = f"{(base_url or ESPECIALIDADES_API_URL).rstrip('/')}/api/especialidades/"
    resp = requests.get(url, timeout=timeout or CATALOG_FETCH_TIMEOUT_SECONDS)
    resp.raise_for_status()
    options = options_from_payload(resp.json())
    logger.info(f"Fetched {len(options)} specialties from {url}")
    return options
