from __future__ import annotations

import numpy as np
import pytest

from sim_layout_pv.simulation.financial import (
    BREAK_EVEN,
    PROFITABLE,
    RECOVERING,
    DegradationModel,
    _npv,
    accelerated_depreciation,
    battery_backup_hours,
    calculate_roi_metrics,
    compute_irr,
    project_financials,
)
from sim_layout_pv.simulation.layout import Layout

FLAT = DegradationModel(first_year_pct=0.0, annual_pct=0.0)


def test_break_even_on_exact_year_boundary() -> None:
    projection = project_financials(0.0, 20000.0, 100000.0, FLAT)

    assert projection.break_even_year == 5
    assert projection.break_even_month == 12
    assert [r.roi_status for r in projection.yearly[3:6]] == [RECOVERING, BREAK_EVEN, PROFITABLE]


def test_break_even_month_interpolates_inside_the_year() -> None:
    projection = project_financials(0.0, 20000.0, 90000.0, FLAT)

    assert projection.break_even_year == 5
    assert projection.break_even_month == 6


def test_no_break_even_without_savings() -> None:
    projection = project_financials(1000.0, 0.0, 50000.0, FLAT)

    assert projection.break_even_year is None
    assert projection.break_even_month == 0
    assert all(r.roi_status == RECOVERING for r in projection.yearly)
    assert len(projection.yearly) == 25


def test_degradation_factor() -> None:
    model = DegradationModel()

    assert model.factor(1) == pytest.approx(0.98)
    assert model.factor(3) == pytest.approx(0.972)
    assert DegradationModel(50.0, 10.0).factor(10) == 0.0


def test_degradation_reads_first_panel_specifications() -> None:
    layout = Layout.build(
        [
            {"id": "p1", "type": "panel", "specifications": {"degradation_first_year": 1.5, "degradation_annual": 0.5}},
            {"id": "p2", "type": "panel", "specifications": {"degradation_first_year": 9}},
        ]
    )
    model = DegradationModel.from_layout(layout)

    assert model == DegradationModel(1.5, 0.5)
    assert DegradationModel.from_layout(Layout.build([])) == DegradationModel()


def test_projection_applies_degradation_to_generation_and_savings() -> None:
    projection = project_financials(1000.0, 10000.0, 1e9)

    assert projection.yearly[0].generation == pytest.approx(980.0)
    assert projection.yearly[1].energy_savings == pytest.approx(9760.0)
    assert projection.df_yearly.shape[0] == 25


def test_accelerated_depreciation_is_written_down_value() -> None:
    benefits = accelerated_depreciation(100000.0, years=3)

    assert benefits.tolist() == pytest.approx([18000.0, 4800.0, 2880.0])


def test_commercial_mode_adds_depreciation_and_breaks_even_sooner() -> None:
    residential = project_financials(0.0, 20000.0, 100000.0, FLAT)
    commercial = project_financials(0.0, 20000.0, 100000.0, FLAT, is_commercial=True)

    assert commercial.yearly[0].ad_benefit == pytest.approx(18000.0)
    assert commercial.yearly[0].savings == pytest.approx(38000.0)
    assert residential.yearly[0].ad_benefit == 0.0
    assert commercial.break_even_year < residential.break_even_year


def test_roi_metrics() -> None:
    metrics = calculate_roi_metrics(project_financials(0.0, 20000.0, 100000.0, FLAT))

    assert metrics.total_savings_25_year == pytest.approx(500000.0)
    assert metrics.roi_25_year == pytest.approx(400.0)
    assert metrics.payback_period == 5
    assert 0.19 < metrics.irr < 0.21
    cashflows = np.array([-100000.0] + [20000.0] * 25)
    assert abs(_npv(metrics.irr, cashflows)) < 1.0
    assert metrics.to_dict()["totalSavings25Year"] == pytest.approx(500000.0)


def test_roi_metrics_without_savings_have_no_irr() -> None:
    metrics = calculate_roi_metrics(project_financials(0.0, 0.0, 100000.0, FLAT))

    assert metrics.irr is None
    assert metrics.payback_period is None
    assert metrics.roi_25_year == pytest.approx(-100.0)


def test_irr_of_simple_series() -> None:
    assert compute_irr(np.array([-100.0, 110.0])) == pytest.approx(0.10, abs=1e-5)
    assert np.isnan(compute_irr(np.array([100.0, 10.0])))


def test_npv_discounts_from_period_zero() -> None:
    assert _npv(0.1, np.array([-100.0, 110.0])) == pytest.approx(0.0)
    assert _npv(0.0, np.array([-1000.0, 200.0, 300.0])) == pytest.approx(-500.0)


def test_battery_backup_hours() -> None:
    assert battery_backup_hours(10.0, 720.0) == pytest.approx(8.0)
    assert battery_backup_hours(0.0, 720.0) == 0.0
    assert battery_backup_hours(10.0, 0.0) == 0.0
