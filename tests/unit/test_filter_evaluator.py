"""
Unit tests for the composed record filter.
"""
from __future__ import annotations

from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from apps.worker.lib.specialty_catalog import SpecialtyCatalog
from apps.worker.steps.filters import apply_filters, derive_expiry_mode, evaluate, is_missing_field
from packages.shared.models import CheckboxMode, FilterSelection, WindowMode

TODAY = date(2025, 6, 15)


def _iso(days_from_today: int) -> str:
    return (TODAY + timedelta(days=days_from_today)).isoformat()


def _make_selection(**kwargs) -> FilterSelection:
    return FilterSelection.model_validate(kwargs)


def _make_record(**fields) -> dict:
    base = {"apellido": "Gómez", "nombre_": "Ana", "nro_socio": "100"}
    base.update(fields)
    return base


class TestIdentity:
    @pytest.mark.parametrize("record", [
        {},
        {"apellido": "Pérez", "activo": 0},
        {"MALAPRAXIS_VENCIMIENTO": "garbage", "fecha_ingreso": "x"},
    ])
    def test_empty_selection_matches_everything(self, record):
        assert evaluate(record, FilterSelection(), today=TODAY)
        assert evaluate(record, None, today=TODAY)


class TestExpiry:
    def test_window_only_by_day_count(self):
        rec = _make_record(malapraxis_vencimiento=_iso(10))
        assert evaluate(rec, _make_selection(vencimientos={"dias": 30}), today=TODAY)
        assert not evaluate(rec, _make_selection(vencimientos={"dias": 5}), today=TODAY)

    def test_window_only_any_credential(self):
        rec = _make_record(vencimiento_cobertura=_iso(3), malapraxis_vencimiento=_iso(90))
        assert evaluate(rec, _make_selection(vencimientos={"dias": 7}), today=TODAY)

    def test_window_by_explicit_dates(self):
        rec = _make_record(vencimiento_anssal="2025-07-01")
        sel = _make_selection(vencimientos={"fechaDesde": "2025-06-20", "fechaHasta": "2025-07-10"})
        assert evaluate(rec, sel, today=TODAY)
        sel = _make_selection(vencimientos={"fechaDesde": "2025-07-02", "fechaHasta": "2025-07-10"})
        assert not evaluate(rec, sel, today=TODAY)

    def test_checkbox_expiring(self):
        rec = _make_record(malapraxis_vencimiento=_iso(10))
        sel = _make_selection(vencimientos={"malapraxisPorVencer": True, "dias": 30})
        assert evaluate(rec, sel, today=TODAY)

    def test_checkbox_expired_rejects_future_date(self):
        rec = _make_record(malapraxis_vencimiento=_iso(10))
        sel = _make_selection(vencimientos={"malapraxisVencida": True, "dias": 30})
        assert not evaluate(rec, sel, today=TODAY)

    def test_checkbox_expired_without_window_has_no_lower_bound(self):
        rec = _make_record(malapraxis_vencimiento="2024-01-01")
        assert evaluate(rec, _make_selection(vencimientos={"malapraxisVencida": True}), today=TODAY)
        rec_old = _make_record(malapraxis_vencimiento="1999-05-05")
        assert evaluate(rec_old, _make_selection(vencimientos={"malapraxisVencida": True}), today=TODAY)

    def test_checkbox_expired_honours_explicit_range(self):
        rec = _make_record(malapraxis_vencimiento="2024-01-01")
        sel = _make_selection(vencimientos={"malapraxisVencida": True, "fechaDesde": "2025-01-01"})
        assert not evaluate(rec, sel, today=TODAY)

    def test_checkbox_kinds_are_ored(self):
        rec = _make_record(malapraxis_vencimiento=_iso(100), vencimiento_anssal=_iso(-2))
        sel = _make_selection(vencimientos={"malapraxisPorVencer": True, "anssalVencido": True, "dias": 30})
        assert evaluate(rec, sel, today=TODAY)

    def test_checkbox_ignores_unflagged_kinds(self):
        rec = _make_record(vencimiento_cobertura=_iso(-2))
        sel = _make_selection(vencimientos={"malapraxisVencida": True})
        assert not evaluate(rec, sel, today=TODAY)

    def test_unparseable_expiry_never_matches(self):
        rec = _make_record(malapraxis_vencimiento="pendiente")
        assert not evaluate(rec, _make_selection(vencimientos={"dias": 365}), today=TODAY)

    def test_mode_derivation(self):
        sel = _make_selection(vencimientos={"malapraxisPorVencer": True, "dias": 10})
        mode = derive_expiry_mode(sel.vencimientos, TODAY)
        assert isinstance(mode, CheckboxMode)
        assert mode.window.start == TODAY
        assert mode.window.end == TODAY + timedelta(days=10)
        assert mode.expired_window is None

        mode = derive_expiry_mode(_make_selection(vencimientos={"dias": 10}).vencimientos, TODAY)
        assert isinstance(mode, WindowMode)
        assert derive_expiry_mode(FilterSelection().vencimientos, TODAY) is None


class TestAttributes:
    def test_specialty_scenario_with_catalog(self):
        catalog = SpecialtyCatalog([{"value": "3", "label": "Pediatría"}])
        rec = {"sexo": "F", "provincia": "Corrientes", "nro_especialidad": "3"}
        sel = _make_selection(otros={"especialidad": "pedia"})
        assert evaluate(rec, sel, catalog=catalog, today=TODAY)

    def test_contains_and_exact_fields(self):
        rec = _make_record(PROVINCIA="Corrientes", localidad="Goya", categoria="A", SEXO="F")
        assert evaluate(rec, _make_selection(otros={"provincia": "corri", "sexo": "f"}), today=TODAY)
        assert evaluate(rec, _make_selection(otros={"categoria": "a"}), today=TODAY)
        assert not evaluate(rec, _make_selection(otros={"categoria": "AB"}), today=TODAY)
        assert not evaluate(rec, _make_selection(otros={"localidad": "Esquina"}), today=TODAY)

    def test_status_filters(self):
        active = _make_record(activo=1)
        inactive = _make_record(EXISTE="N")
        unknown = _make_record()
        sel_active = _make_selection(otros={"estado": "activo"})
        sel_inactive = _make_selection(otros={"estado": "INACTIVO"})
        assert evaluate(active, sel_active, today=TODAY)
        assert evaluate(unknown, sel_active, today=TODAY)
        assert not evaluate(inactive, sel_active, today=TODAY)
        assert evaluate(inactive, sel_inactive, today=TODAY)

    def test_adherent_unknown_is_not_adherent(self):
        sel_si = _make_selection(otros={"adherente": "si"})
        sel_no = _make_selection(otros={"adherente": "no"})
        assert evaluate(_make_record(ADHERENTE="S"), sel_si, today=TODAY)
        assert not evaluate(_make_record(), sel_si, today=TODAY)
        assert evaluate(_make_record(), sel_no, today=TODAY)

    def test_con_malapraxis(self):
        sel = _make_selection(otros={"conMalapraxis": True})
        assert evaluate(_make_record(MALAPRAXIS="La Segunda"), sel, today=TODAY)
        assert not evaluate(_make_record(), sel, today=TODAY)

    def test_join_date_range_rejects_unknown_dates(self):
        sel = _make_selection(otros={"fechaIngresoDesde": "2020-01-01", "fechaIngresoHasta": "2020-12-31"})
        assert evaluate(_make_record(fecha_ingreso="15/06/2020"), sel, today=TODAY)
        assert not evaluate(_make_record(fecha_ingreso="2021-01-01"), sel, today=TODAY)
        assert not evaluate(_make_record(fecha_ingreso="desconocida"), sel, today=TODAY)
        assert not evaluate(_make_record(), sel, today=TODAY)

    def test_invalid_status_rejected_by_model(self):
        with pytest.raises(ValidationError):
            _make_selection(otros={"estado": "suspendido"})


class TestMissingAndSearch:
    def test_missing_email_uses_validity(self):
        assert is_missing_field({"mail_particular": "@"}, "mail_particular")
        assert is_missing_field({"mail_particular": "ana@"}, "mail_particular")
        assert not is_missing_field({"mail_particular": "ana@example.com"}, "mail_particular")

    def test_missing_specialty_treats_generalist_as_missing(self):
        assert is_missing_field({"especialidad": "Médico"}, "especialidades")
        assert not is_missing_field({"especialidad": "Cardiología"}, "especialidad")

    def test_missing_and_present_modes(self):
        rec_without = _make_record()
        rec_with = _make_record(CUIT="20-11111111-2")
        missing = _make_selection(faltantes={"enabled": True, "field": "cuit", "mode": "missing"})
        present = _make_selection(faltantes={"enabled": True, "field": "cuit", "mode": "present"})
        assert evaluate(rec_without, missing, today=TODAY)
        assert not evaluate(rec_with, missing, today=TODAY)
        assert evaluate(rec_with, present, today=TODAY)

    def test_disabled_missing_filter_is_ignored(self):
        sel = _make_selection(faltantes={"enabled": False, "field": "cuit"})
        assert evaluate(_make_record(CUIT="x"), sel, today=TODAY)

    def test_free_text_search(self):
        rec = _make_record(apellido="Núñez", DOCUMENTO="30111222")
        assert evaluate(rec, _make_selection(q="nunez"), today=TODAY)
        assert evaluate(rec, _make_selection(q="3011"), today=TODAY)
        assert not evaluate(rec, _make_selection(q="zzz"), today=TODAY)


def test_apply_filters_preserves_order():
    records = [
        _make_record(apellido="B", activo=1),
        _make_record(apellido="A", activo=0),
        _make_record(apellido="C", activo=1),
    ]
    kept = apply_filters(records, _make_selection(otros={"estado": "activo"}), today=TODAY)
    assert [r["apellido"] for r in kept] == ["B", "C"]
    assert apply_filters(records, None) == records
