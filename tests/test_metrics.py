import numpy as np
import pytest

from hrtpk.errors import InvalidInputError
from hrtpk.metrics import (
    auc_trapz, cavg, cmax, cmin, fluctuation_index, level_at, peak_to_trough_ratio, tmax,
)
from hrtpk.types import SimulationResult


def _triangle() -> SimulationResult:
    t = np.array([0.0, 1.0, 2.0, 3.0, 4.0])
    C = np.array([0.0, 100.0, 200.0, 100.0, 0.0])
    return SimulationResult(time_h=t, conc_pg_mL=C)


def test_peak_and_area():
    res = _triangle()
    assert cmax(res) == 200.0 and tmax(res) == 2.0
    assert cmin(res) == 0.0
    assert auc_trapz(res) == pytest.approx(400.0)
    assert cavg(res) == pytest.approx(100.0)


def test_level_at_interpolates():
    res = _triangle()
    assert level_at(res, 1.5) == pytest.approx(150.0)
    assert level_at(res, -1.0) == 0.0
    assert level_at(res, 10.0) == 0.0


def test_ratios_over_last_interval():
    t = np.arange(0.0, 10.0, 1.0)
    C = np.array([0, 10, 20, 30, 40, 50, 40, 30, 40, 50], dtype=float)
    res = SimulationResult(time_h=t, conc_pg_mL=C)
    assert peak_to_trough_ratio(res) == float("inf")
    # last 3 h window: t = 6..9 -> 40, 30, 40, 50
    assert peak_to_trough_ratio(res, interval_h=3.0) == pytest.approx(50.0 / 30.0)
    # time-weighted average over the window: (35 + 35 + 45) / 3
    assert fluctuation_index(res, interval_h=3.0) == pytest.approx((50 - 30) / (115.0 / 3.0))


def test_empty_result_has_no_metrics():
    with pytest.raises(InvalidInputError):
        cmax(SimulationResult())


def test_mismatched_result_rejected():
    with pytest.raises(InvalidInputError):
        SimulationResult(time_h=[0.0, 1.0], conc_pg_mL=[0.0])


def test_fluctuation_uses_time_weighted_average():
    """Dense sampling around the peak must not inflate the average."""
    t = np.array([0.0, 1.0, 1.1, 1.2, 1.3, 10.0])
    C = np.array([10.0, 100.0, 100.0, 100.0, 100.0, 10.0])
    res = SimulationResult(time_h=t, conc_pg_mL=C)
    assert fluctuation_index(res) == pytest.approx((100.0 - 10.0) / cavg(res))
    assert cavg(res) != pytest.approx(float(np.mean(C)))

    tail = SimulationResult(time_h=t[1:], conc_pg_mL=C[1:])
    assert fluctuation_index(res, interval_h=9.5) == pytest.approx((100.0 - 10.0) / cavg(tail))
