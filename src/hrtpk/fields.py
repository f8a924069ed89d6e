# src/hrtpk/fields.py
"""
Which dose quantities make sense for a route/compound pair.

The form layer asks this module what to show so that it and the engine agree
on which combinations exist at all.
"""
from dataclasses import dataclass
from typing import Optional

from .errors import UnsupportedConfigurationError
from .types import Compound, Route

_ESTERS_INJECTION_ONLY = (Compound.EB, Compound.EC, Compound.EEN, Compound.EUN)

SUPPORTED_ROUTES: dict[Compound, frozenset[Route]] = {
    Compound.E2: frozenset({Route.ORAL, Route.SUBLINGUAL, Route.PATCH, Route.GEL}),
    Compound.EV: frozenset({Route.INJECTION, Route.ORAL, Route.SUBLINGUAL}),
    Compound.CPA: frozenset({Route.ORAL}),
    **{c: frozenset({Route.INJECTION}) for c in _ESTERS_INJECTION_ONLY},
}


@dataclass(frozen=True)
class FieldPolicy:
    """
    raw_editable : the administered compound mass is an input
    e2_editable  : the estradiol-equivalent mass is an input
    e2_read_only : the equivalent is shown as derived text only
    patch_toggle : masses are replaced by the patch dose/rate toggle
    disabled     : the route is present but not modelled (beta)
    """
    raw_editable: bool = False
    e2_editable: bool = False
    e2_read_only: bool = False
    patch_toggle: bool = False
    disabled: bool = False


def supported_routes(compound: Compound) -> frozenset[Route]:
    return SUPPORTED_ROUTES.get(compound, frozenset())


def is_supported(route: Route, compound: Compound) -> bool:
    return route in supported_routes(compound)


def check_supported(route: Route, compound: Compound, dose_index: Optional[int] = None) -> None:
    if not is_supported(route, compound):
        raise UnsupportedConfigurationError(
            f"{compound.value} cannot be given by the {route.value} route.",
            field="route", dose_index=dose_index)


def field_policy(route: Route, compound: Compound) -> FieldPolicy:
    check_supported(route, compound)

    if route is Route.PATCH:
        return FieldPolicy(patch_toggle=True)
    if route is Route.GEL:
        return FieldPolicy(e2_editable=True, disabled=True)
    if compound is Compound.E2:
        # raw and equivalent are the same number
        return FieldPolicy(e2_editable=True)
    if compound is Compound.CPA:
        return FieldPolicy(raw_editable=True)
    if compound is Compound.EV:
        # valerate kinetics are calibrated per mg of ester; the equivalent is informational
        return FieldPolicy(raw_editable=True, e2_read_only=True)
    return FieldPolicy(raw_editable=True, e2_editable=True)
