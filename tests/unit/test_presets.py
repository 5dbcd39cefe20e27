from __future__ import annotations

from datetime import date

import pytest

from apps.worker.steps.filters import (
    GROUPS,
    PRESETS,
    apply_preset_extra_filters,
    matches_preset,
    preset_columns,
    sort_for_preset,
)
from packages.shared.models import ExportGroupId, ExportPresetId, PresetParams

TODAY = date(2025, 6, 15)


def test_every_preset_has_a_known_group_and_columns():
    groups = {g for g, _ in GROUPS}
    assert set(PRESETS) == set(ExportPresetId)
    for preset in PRESETS.values():
        assert preset["group"] in groups
        assert preset["columns"]


def test_preset_columns_returns_copy():
    cols = preset_columns("contactables")
    cols.append("x")
    assert "x" not in preset_columns(ExportPresetId.CONTACTABLES)


def test_unknown_preset_raises():
    with pytest.raises(ValueError):
        preset_columns("todos")


class TestPresetPredicates:
    def test_expired_uses_today_as_cutoff(self):
        rec = {"vencimiento_malapraxis": "2025-06-14"}
        assert matches_preset("malapraxis_vencida", rec, today=TODAY)
        assert not matches_preset("malapraxis_vencida", {"vencimiento_malapraxis": "2025-06-15"}, today=TODAY)
        assert not matches_preset("malapraxis_vencida", {}, today=TODAY)

    def test_expired_custom_cutoff(self):
        rec = {"VENCIMIENTO_ANSSAL": "2025-03-01"}
        params = PresetParams(fechaDesde="2025-01-01")
        assert not matches_preset("anssal_vencido", rec, params, TODAY)

    def test_expiring_default_window(self):
        params = PresetParams(dias=10)
        assert matches_preset("cobertura_por_vencer", {"vencimiento_cobertura": "2025-06-25"}, params, TODAY)
        assert not matches_preset("cobertura_por_vencer", {"vencimiento_cobertura": "2025-06-26"}, params, TODAY)
        assert not matches_preset("cobertura_por_vencer", {"vencimiento_cobertura": "2025-06-14"}, params, TODAY)

    def test_expiring_zero_days_still_covers_tomorrow(self):
        params = PresetParams(dias=0)
        assert matches_preset("malapraxis_por_vencer", {"vencimiento_malapraxis": "2025-06-16"}, params, TODAY)

    def test_contactables(self):
        assert matches_preset("contactables", {"celular_particular": "3794-000000"}, today=TODAY)
        assert not matches_preset("contactables", {"mail_particular": "  "}, today=TODAY)

    def test_incomplete_data(self):
        complete = {"documento": "1", "apellido": "A", "nombre_": "B", "provincia": "C", "localidad": "D"}
        assert not matches_preset("datos_incompletos", complete, today=TODAY)
        assert matches_preset("datos_incompletos", {**complete, "documento": "0"}, today=TODAY)

    def test_missing_cuit_or_cbu(self):
        assert matches_preset("sin_cuit_o_cbu", {"cuit": "20-1-2", "cbu": "NULL"}, today=TODAY)
        assert not matches_preset("sin_cuit_o_cbu", {"cuit": "20-1-2", "cbu": "123"}, today=TODAY)

    def test_recent_registrations_default_to_last_thirty_days(self):
        assert matches_preset("altas_recientes", {"fecha_matricula": "2025-05-20"}, today=TODAY)
        assert not matches_preset("altas_recientes", {"fecha_matricula": "2025-05-01"}, today=TODAY)

    def test_by_zone_matches_everything(self):
        assert matches_preset("por_zona", {}, today=TODAY)


class TestExtraFilters:
    def test_no_params_passes(self):
        assert apply_preset_extra_filters({}, None)

    def test_text_status_and_zone(self):
        rec = {"apellido": "Benítez", "activo": 1, "provincia": "Corrientes", "localidad": "Goya"}
        assert apply_preset_extra_filters(rec, PresetParams(q="benitez", status="activo", localidad="goy"))
        assert not apply_preset_extra_filters(rec, PresetParams(status="inactivo"))
        assert not apply_preset_extra_filters(rec, PresetParams(provincia="Chaco"))
        assert not apply_preset_extra_filters(rec, PresetParams(q="lopez"))

    def test_adherent_param(self):
        assert apply_preset_extra_filters({"adherente": "S"}, PresetParams(adherente="si"))
        assert not apply_preset_extra_filters({}, PresetParams(adherente="si"))


def test_sort_by_date_puts_unknown_last():
    rows = [
        {"apellido": "C", "vencimiento_malapraxis": ""},
        {"apellido": "B", "vencimiento_malapraxis": "2025-02-01"},
        {"apellido": "A", "vencimiento_malapraxis": "2024-12-31"},
    ]
    ordered = sort_for_preset("malapraxis_vencida", rows)
    assert [r["apellido"] for r in ordered] == ["A", "B", "C"]


def test_sort_by_surname_is_accent_insensitive():
    rows = [{"apellido": "Zapata"}, {"apellido": "Álvarez"}, {"apellido": "acosta"}]
    ordered = sort_for_preset(ExportPresetId.POR_ZONA, rows)
    assert [r["apellido"] for r in ordered] == ["acosta", "Álvarez", "Zapata"]


def test_group_ids_cover_enum():
    assert {g for g, _ in GROUPS} == set(ExportGroupId)
