# src/hrtpk/dosing.py
from __future__ import annotations

import dataclasses
import math
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from .errors import InvalidInputError
from .fields import check_supported
from .kinetics import validate_event
from .sublingual import resolve_theta, validate_theta
from .types import Compound, DoseEvent, PatchMode, Route


def injection(raw_mg: float, timestamp_h: float, compound: Compound = Compound.EV) -> DoseEvent:
    """
    An intramuscular/subcutaneous depot injection of an ester.
    Example: 5 mg estradiol valerate at t=0 h -> injection(5, 0.0)
    """
    _validate_non_negative("raw_mg", raw_mg)
    check_supported(Route.INJECTION, compound)
    return DoseEvent.from_raw(_finite("timestamp_h", timestamp_h), Route.INJECTION, compound, raw_mg)


def oral(mg: float, timestamp_h: float, compound: Compound = Compound.E2) -> DoseEvent:
    """
    A swallowed tablet. mg is the estradiol-equivalent mass for estradiol
    itself and the raw tablet mass for everything else (valerate, CPA).
    """
    _validate_non_negative("mg", mg)
    check_supported(Route.ORAL, compound)
    return DoseEvent.from_raw(_finite("timestamp_h", timestamp_h), Route.ORAL, compound, mg)


def sublingual(mg: float, timestamp_h: float, compound: Compound = Compound.E2, *,
               theta: Optional[float] = None, tier: Optional[str] = None,
               hold_min: Optional[float] = None) -> DoseEvent:
    """
    A tablet held under the tongue. The absorption split comes from exactly
    one of: theta directly, a named tier ("quick", "standard"...), or a
    custom hold time in minutes.
    """
    _validate_non_negative("mg", mg)
    check_supported(Route.SUBLINGUAL, compound)
    given = [x is not None for x in (theta, tier, hold_min)]
    if sum(given) != 1:
        raise InvalidInputError("Give exactly one of theta, tier or hold_min.", field="theta")
    th = validate_theta(theta) if theta is not None else resolve_theta(tier, hold_min)
    return DoseEvent.from_raw(_finite("timestamp_h", timestamp_h), Route.SUBLINGUAL, compound, mg,
                              theta=th)


def patch_dose(total_mg: float, timestamp_h: float, wear_h: Optional[float] = None) -> DoseEvent:
    """
    A patch described by the total estradiol it releases over its wear time.
    wear_h=None uses the configured default wear time.
    """
    _validate_non_negative("total_mg", total_mg)
    if wear_h is not None:
        _validate_positive("wear_h", wear_h)
    return DoseEvent(_finite("timestamp_h", timestamp_h), Route.PATCH, Compound.E2, float(total_mg),
                     patch_mode=PatchMode.DOSE, wear_h=None if wear_h is None else float(wear_h))


def patch_rate(rate_ug_per_day: float, timestamp_h: float, wear_h: Optional[float] = None) -> DoseEvent:
    """
    A patch described by its nominal delivery rate (e.g. 50 or 100 ug/day).
    """
    _validate_non_negative("rate_ug_per_day", rate_ug_per_day)
    if wear_h is not None:
        _validate_positive("wear_h", wear_h)
    return DoseEvent(_finite("timestamp_h", timestamp_h), Route.PATCH, Compound.E2, 0.0,
                     patch_mode=PatchMode.RATE, patch_rate_ug_per_day=float(rate_ug_per_day),
                     wear_h=None if wear_h is None else float(wear_h))


def gel(e2_mg: float, timestamp_h: float) -> DoseEvent:
    """Recorded for history; gel doses do not contribute to simulations yet."""
    _validate_non_negative("e2_mg", e2_mg)
    return DoseEvent(_finite("timestamp_h", timestamp_h), Route.GEL, Compound.E2, float(e2_mg))


def antiandrogen(raw_mg: float, timestamp_h: float) -> DoseEvent:
    """A CPA tablet. Tracked with the rest of the history, adds no estradiol."""
    return oral(raw_mg, timestamp_h, compound=Compound.CPA)


def repeating(event: DoseEvent, every_days: float, count: int) -> Tuple[DoseEvent, ...]:
    """
    Repeat a dose on a fixed schedule, e.g. 5 mg EV every 7 days, 8 times:
      repeating(injection(5, t0), every_days=7, count=8)

    The first copy is the event itself.
    """
    _validate_positive("every_days", every_days)
    _validate_positive_int("count", count)

    offsets_h = np.arange(count, dtype=float) * float(every_days) * 24.0
    return tuple(dataclasses.replace(event, timestamp_h=event.timestamp_h + float(dt))
                 for dt in offsets_h)


def from_explicit_schedule(entries: Sequence[Tuple[float, float]], template: DoseEvent) -> Tuple[DoseEvent, ...]:
    """
    Build events from manual (timestamp_h, amount) entries sharing a template's
    route, compound and shape parameters. amount is interpreted like the
    template's own dose_mg (estradiol-equivalent, raw for CPA), except for a
    rate-mode patch template where it is the delivery rate in ug/day.
    Example: entries=[(0.0, 2.0), (12.0, 2.0), (24.0, 2.0)]
    """
    rate_mode = template.route is Route.PATCH and template.patch_mode is PatchMode.RATE
    events: list[DoseEvent] = []
    for i, (timestamp_h, amount) in enumerate(entries):
        _validate_non_negative("amount", amount)
        if rate_mode:
            changes = {"patch_rate_ug_per_day": float(amount)}
        else:
            changes = {"dose_mg": float(amount)}
        event = dataclasses.replace(template, timestamp_h=_finite("timestamp_h", timestamp_h), **changes)
        validate_event(event, dose_index=i)
        events.append(event)
    events.sort(key=lambda e: e.timestamp_h)
    return tuple(events)


def combine_schedules(*schedules: Iterable[DoseEvent]) -> Tuple[DoseEvent, ...]:
    """
    Merge several dose collections (e.g. weekly injections + daily CPA).
    Sorted by time for readability; the engine does not depend on order.
    """
    all_events: list[DoseEvent] = []
    for s in schedules:
        all_events.extend(s)
    return tuple(sorted(all_events, key=lambda e: (e.timestamp_h, e.route.value)))


# --------------------------
# Small input validators
# --------------------------
def _finite(name: str, x: float) -> float:
    if not math.isfinite(x):
        raise InvalidInputError(f"{name} must be a finite number (got {x}).", field=name)
    return float(x)

def _validate_positive(name: str, x: float) -> None:
    if not (_finite(name, x) > 0):
        raise InvalidInputError(f"{name} must be > 0 (got {x}).", field=name)

def _validate_non_negative(name: str, x: float) -> None:
    if _finite(name, x) < 0:
        raise InvalidInputError(f"{name} must be >= 0 (got {x}).", field=name)

def _validate_positive_int(name: str, x: int) -> None:
    if not (isinstance(x, int) and x > 0):
        raise InvalidInputError(f"{name} must be a positive integer (got {x}).", field=name)
