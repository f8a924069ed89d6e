import pytest

from hrtpk.errors import UnsupportedConfigurationError
from hrtpk.fields import FieldPolicy, field_policy, is_supported, supported_routes
from hrtpk.types import Compound, Route


def test_estradiol_only_equivalent():
    for route in (Route.ORAL, Route.SUBLINGUAL):
        assert field_policy(route, Compound.E2) == FieldPolicy(e2_editable=True)


def test_antiandrogen_only_raw():
    assert field_policy(Route.ORAL, Compound.CPA) == FieldPolicy(raw_editable=True)


def test_valerate_shows_equivalent_read_only():
    """EV on injection, oral and sublingual: raw is the input, E2 is derived text."""
    for route in (Route.INJECTION, Route.ORAL, Route.SUBLINGUAL):
        p = field_policy(route, Compound.EV)
        assert p.raw_editable and p.e2_read_only and not p.e2_editable


def test_other_esters_link_both_fields():
    for c in (Compound.EB, Compound.EC, Compound.EEN, Compound.EUN):
        p = field_policy(Route.INJECTION, c)
        assert p.raw_editable and p.e2_editable and not p.e2_read_only


def test_patch_and_gel():
    assert field_policy(Route.PATCH, Compound.E2) == FieldPolicy(patch_toggle=True)
    gel = field_policy(Route.GEL, Compound.E2)
    assert gel.disabled and gel.e2_editable


def test_support_matrix():
    assert supported_routes(Compound.CPA) == {Route.ORAL}
    assert is_supported(Route.INJECTION, Compound.EV)
    assert not is_supported(Route.PATCH, Compound.EV)
    assert not is_supported(Route.INJECTION, Compound.E2)
    # every route has at least one compound
    assert {r for c in Compound for r in supported_routes(c)} == set(Route)


@pytest.mark.parametrize("route, compound", [
    (Route.INJECTION, Compound.CPA),
    (Route.GEL, Compound.EV),
    (Route.SUBLINGUAL, Compound.EC),
])
def test_unsupported_pairs_raise(route, compound):
    with pytest.raises(UnsupportedConfigurationError) as exc:
        field_policy(route, compound)
    assert exc.value.field == "route"
