import pytest

from hrtpk.conversion import from_e2_equivalent, is_convertible, potency_factor, to_e2_equivalent
from hrtpk.errors import InvalidInputError, NotConvertibleError, UnsupportedConfigurationError
from hrtpk.types import Compound, DoseEvent, Route

CONVERTIBLE = [c for c in Compound if c is not Compound.CPA]


@pytest.mark.parametrize("compound", CONVERTIBLE, ids=lambda c: c.value)
def test_round_trip(compound):
    """from_e2_equivalent undoes to_e2_equivalent for every convertible compound."""
    for x in (0.0, 1e-3, 0.5, 2.0, 10.0, 40.0, 1234.5):
        assert from_e2_equivalent(compound, to_e2_equivalent(compound, x)) == pytest.approx(x, rel=1e-12)


def test_potency_factors():
    assert potency_factor(Compound.E2) == 1.0
    # molar mass ratio 272.38 / 356.50
    assert potency_factor(Compound.EV) == pytest.approx(0.7640, abs=1e-4)
    assert to_e2_equivalent(Compound.EV, 10.0) == pytest.approx(7.640, abs=1e-3)
    # heavier esters carry less estradiol per mg
    factors = [potency_factor(c) for c in (Compound.EV, Compound.EB, Compound.EEN, Compound.EC, Compound.EUN)]
    assert factors == sorted(factors, reverse=True)
    assert all(0.0 < f < 1.0 for f in factors)


def test_antiandrogen_not_convertible():
    assert not is_convertible(Compound.CPA)
    with pytest.raises(NotConvertibleError) as exc:
        potency_factor(Compound.CPA)
    # callers catching the broader error keep working
    assert isinstance(exc.value, UnsupportedConfigurationError)
    assert isinstance(exc.value, ValueError)
    with pytest.raises(NotConvertibleError):
        to_e2_equivalent(Compound.CPA, 50.0)


@pytest.mark.parametrize("mass", [-1.0, float("nan"), float("inf")])
def test_rejects_bad_mass(mass):
    with pytest.raises(InvalidInputError):
        to_e2_equivalent(Compound.EV, mass)
    with pytest.raises(InvalidInputError):
        from_e2_equivalent(Compound.EV, mass)


def test_dose_event_stores_one_mass():
    """Raw and equivalent come from the same stored value, so they never drift."""
    ev = DoseEvent.from_raw(0.0, Route.INJECTION, Compound.EV, 10.0)
    assert ev.dose_mg == pytest.approx(to_e2_equivalent(Compound.EV, 10.0))
    assert ev.e2_equivalent_mg == ev.dose_mg
    assert ev.raw_mg == pytest.approx(10.0)

    same = DoseEvent.from_e2_equivalent(0.0, Route.INJECTION, Compound.EV, ev.e2_equivalent_mg)
    assert same == ev

    e2 = DoseEvent.from_raw(0.0, Route.ORAL, Compound.E2, 2.0)
    assert e2.raw_mg == e2.e2_equivalent_mg == 2.0

    with pytest.raises(NotConvertibleError):
        DoseEvent.from_e2_equivalent(0.0, Route.ORAL, Compound.CPA, 10.0)
