import numpy as np
import pytest

from hrtpk.conversion import potency_factor
from hrtpk.dosing import (
    antiandrogen, combine_schedules, from_explicit_schedule, gel, injection, oral,
    patch_dose, patch_rate, repeating, sublingual,
)
from hrtpk.errors import InvalidInputError, UnsupportedConfigurationError
from hrtpk.simulate import simulate
from hrtpk.sublingual import theta_for_tier, theta_from_hold
from hrtpk.types import Compound, DoseEvent, PatchMode, PatientProfile, Route


def test_injection_normalises_to_equivalent():
    ev = injection(5.0, 0.0)
    assert ev.route is Route.INJECTION and ev.compound is Compound.EV
    assert ev.dose_mg == pytest.approx(5.0 * potency_factor(Compound.EV))
    assert ev.raw_mg == pytest.approx(5.0)
    with pytest.raises(UnsupportedConfigurationError):
        injection(5.0, 0.0, compound=Compound.E2)
    with pytest.raises(InvalidInputError):
        injection(-1.0, 0.0)


def test_sublingual_needs_exactly_one_absorption_input():
    assert sublingual(1.0, 0.0, tier="strict").theta == theta_for_tier("strict")
    assert sublingual(1.0, 0.0, hold_min=7.0).theta == theta_from_hold(7.0)
    assert sublingual(1.0, 0.0, theta=0.3).theta == 0.3
    with pytest.raises(InvalidInputError):
        sublingual(1.0, 0.0)
    with pytest.raises(InvalidInputError):
        sublingual(1.0, 0.0, theta=0.2, tier="quick")
    with pytest.raises(InvalidInputError):
        sublingual(1.0, 0.0, theta=2.0)


def test_patch_builders():
    by_rate = patch_rate(50.0, 0.0)
    assert by_rate.patch_mode is PatchMode.RATE and by_rate.dose_mg == 0.0 and by_rate.wear_h is None
    by_dose = patch_dose(0.2, 0.0, wear_h=168.0)
    assert by_dose.patch_mode is PatchMode.DOSE and by_dose.wear_h == 168.0
    with pytest.raises(InvalidInputError):
        patch_rate(50.0, 0.0, wear_h=0.0)


def test_gel_and_antiandrogen_builders():
    assert gel(1.0, 0.0).route is Route.GEL
    cpa = antiandrogen(25.0, 3.0)
    assert cpa.compound is Compound.CPA and cpa.route is Route.ORAL and cpa.raw_mg == 25.0


def test_repeating_schedule():
    """5 mg EV every 7 days, 8 doses."""
    first = injection(5.0, 9.0)
    events = repeating(first, every_days=7, count=8)
    assert len(events) == 8
    assert events[0] == first
    assert np.allclose(np.diff([e.timestamp_h for e in events]), 168.0)
    assert all(e.dose_mg == first.dose_mg for e in events)
    with pytest.raises(InvalidInputError):
        repeating(first, every_days=7, count=0)
    with pytest.raises(InvalidInputError):
        repeating(first, every_days=0, count=3)


def test_from_explicit_schedule_sorts():
    template = sublingual(1.0, 0.0, tier="casual")
    events = from_explicit_schedule([(24.0, 2.0), (0.0, 1.0), (12.0, 1.5)], template)
    assert [e.timestamp_h for e in events] == [0.0, 12.0, 24.0]
    assert [e.dose_mg for e in events] == [1.0, 1.5, 2.0]
    assert all(e.theta == template.theta for e in events)
    with pytest.raises(InvalidInputError):
        from_explicit_schedule([(0.0, -1.0)], template)



def test_from_explicit_schedule_with_patch_templates():
    """A rate-mode template takes rates (ug/day), a dose-mode template takes totals (mg)."""
    t = np.arange(0.0, 200.0, 1.0)
    by_rate = from_explicit_schedule([(84.0, 100.0), (0.0, 50.0)], patch_rate(50.0, 0.0))
    assert [e.patch_rate_ug_per_day for e in by_rate] == [50.0, 100.0]
    assert all(e.dose_mg == 0.0 for e in by_rate)
    by_dose = from_explicit_schedule([(0.0, 0.175), (84.0, 0.35)], patch_dose(0.175, 0.0))
    assert [e.dose_mg for e in by_dose] == [0.175, 0.35]
    assert all(e.patch_rate_ug_per_day is None for e in by_dose)

    assert np.allclose(simulate(by_rate, PatientProfile(70.0), t).conc_pg_mL,
                       simulate(by_dose, PatientProfile(70.0), t).conc_pg_mL)


def test_from_explicit_schedule_validates_events():
    bad_template = DoseEvent(0.0, Route.SUBLINGUAL, Compound.E2, 1.0)
    with pytest.raises(InvalidInputError) as exc:
        from_explicit_schedule([(0.0, 1.0)], bad_template)
    assert exc.value.field == "theta" and exc.value.dose_index == 0

def test_combine_schedules():
    inj = repeating(injection(5.0, 0.0), every_days=7, count=2)
    cpa = repeating(antiandrogen(12.5, 12.0), every_days=1, count=3)
    combined = combine_schedules(inj, cpa, [oral(2.0, 6.0)])
    assert len(combined) == 6
    times = [e.timestamp_h for e in combined]
    assert times == sorted(times)
