from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
import requests

from apps.worker.lib import specialty_catalog
from apps.worker.lib.specialty_catalog import (
    SpecialtyCatalog,
    fetch_specialty_options,
    options_from_payload,
)
from packages.shared.models import SpecialtyOption


class _FakeResponse:
    def __init__(self, payload, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class TestSpecialtyCatalog:
    def test_unloaded_lookups_return_none(self):
        cat = SpecialtyCatalog()
        assert not cat.is_loaded
        assert cat.name_for("3") is None

    def test_load_drops_empty_and_zero_ids(self):
        cat = SpecialtyCatalog()
        count = cat.load([
            SpecialtyOption(value="3", label="Pediatría"),
            SpecialtyOption(value="0", label="Ninguna"),
            SpecialtyOption(value="", label="Vacía"),
            SpecialtyOption(value="5", label="  "),
        ])
        assert count == 1
        assert cat.as_dict() == {"3": "Pediatría"}
        assert cat.name_for(" 3 ") == "Pediatría"
        assert cat.name_for(0) is None

    def test_reload_replaces_mapping(self):
        cat = SpecialtyCatalog([{"value": "1", "label": "A"}])
        before = cat.as_dict()
        cat.load([{"value": "2", "label": "B"}])
        assert cat.name_for("1") is None
        assert cat.name_for("2") == "B"
        assert before == {"1": "A"}

    def test_load_async_populates_catalog(self):
        cat = SpecialtyCatalog()
        release = threading.Event()

        def fetcher():
            release.wait(5)
            return [SpecialtyOption(value="3", label="Pediatría")]

        with ThreadPoolExecutor(max_workers=1) as pool:
            future = cat.load_async(fetcher, executor=pool)
            # reads before completion fall back to nothing
            assert cat.name_for("3") is None
            release.set()
            assert future.result(timeout=5) == 1
        assert cat.wait_until_loaded(timeout=1)
        assert cat.name_for("3") == "Pediatría"

    def test_load_async_failure_keeps_previous_entries(self):
        cat = SpecialtyCatalog([{"value": "1", "label": "A"}])

        def failing():
            raise requests.ConnectionError("down")

        future = cat.load_async(failing)
        assert future.result(timeout=5) == 1
        assert cat.name_for("1") == "A"


def test_options_from_payload_handles_loose_keys():
    payload = [
        {"ID": 3, "NOMBRE": "Pediatría"},
        {"codigo": "7", "descripcion": "Cardiología  Infantil"},
        {"nombre": "Clínica"},
    ]
    options = options_from_payload(payload)
    assert [(o.value, o.label) for o in options] == [
        ("3", "Pediatría"),
        ("7", "Cardiología Infantil"),
        ("Clínica", "Clínica"),
    ]


def test_options_from_payload_non_list_is_empty():
    assert options_from_payload({"detail": "error"}) == []


def test_fetch_specialty_options(monkeypatch):
    calls = {}

    def fake_get(url, timeout):
        calls["url"] = url
        calls["timeout"] = timeout
        return _FakeResponse([{"id": 3, "nombre": "Pediatría"}])

    monkeypatch.setattr(specialty_catalog.requests, "get", fake_get)
    options = fetch_specialty_options("http://catalog.local/", timeout=2)
    assert calls == {"url": "http://catalog.local/api/especialidades/", "timeout": 2}
    assert options == [SpecialtyOption(value="3", label="Pediatría")]


def test_fetch_specialty_options_http_error(monkeypatch):
    monkeypatch.setattr(specialty_catalog.requests, "get", lambda url, timeout: _FakeResponse([], 503))
    with pytest.raises(requests.HTTPError):
        fetch_specialty_options("http://catalog.local")
