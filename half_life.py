"""
Half-Life Projection
Estimates how much of each logged dose is still active over time

Simple first-order decay per injection: remaining = dose * 0.5 ** (t / t½),
summed over every injection taken at or before the time point.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from units import DoseUnit, convert_dose

# Approximate elimination half-lives in hours
HALF_LIFE_CATEGORIES: Dict[str, Dict[str, float]] = {
    "GLP-1 Agonists & Weight Loss": {
        "Semaglutide": 168,
        "Tirzepatide": 120,
        "Retatrutide": 144,
        "Liraglutide": 13,
        "Dulaglutide": 120,
        "Exenatide": 2.4,
    },
    "Growth Hormone Secretagogues": {
        "CJC-1295 (no DAC)": 0.5,
        "CJC-1295 (DAC)": 168,
        "Ipamorelin": 2,
        "GHRP-2": 0.5,
        "GHRP-6": 0.5,
        "Hexarelin": 1.5,
        "MK-677 (Ibutamoren)": 24,
    },
    "Healing & Recovery": {
        "BPC-157": 4,
        "TB-500": 120,
        "Thymosin Alpha-1": 3,
        "Thymosin Beta-4": 24,
        "GHK-Cu": 1,
    },
    "Cosmetic & Skin": {
        "Melanotan I": 1,
        "Melanotan II": 1,
        "PT-141 (Bremelanotide)": 3,
    },
    "Performance & Muscle": {
        "IGF-1 LR3": 24,
        "IGF-1 DES": 0.5,
        "Follistatin 344": 48,
    },
    "Cognitive & Nootropic": {
        "Semax": 1,
        "Selank": 0.5,
        "Cerebrolysin": 2.5,
        "P21": 3,
        "Dihexa": 2,
    },
    "Metabolic & Other": {
        "AOD-9604": 0.5,
        "MOTS-c": 2,
        "Epithalon": 2,
        "Pinealon": 2,
        "SS-31 (Elamipretide)": 4,
    },
}

CUSTOM = "Custom"

# Upper bound on how far a projection may run past now
MAX_PROJECTION_DAYS = 365

HALF_LIFE_PRESETS: Dict[str, float] = {CUSTOM: 24}
for _group in HALF_LIFE_CATEGORIES.values():
    HALF_LIFE_PRESETS.update(_group)


@dataclass(frozen=True)
class DoseEvent:
    """A logged dose as seen by the projection"""
    taken_at: datetime
    amount: float
    unit: DoseUnit = DoseUnit.MG


def half_life_for(peptide: str, custom_hours: Optional[float] = None) -> float:
    """Preset half-life for a peptide, or ``custom_hours`` for "Custom"."""
    if peptide == CUSTOM and custom_hours is not None:
        return float(custom_hours)
    return HALF_LIFE_PRESETS[peptide]


def remaining_amount(dose: float, elapsed_hours: float, half_life_hours: float) -> float:
    if half_life_hours <= 0:
        raise ValueError("Half-life must be greater than 0")
    if elapsed_hours < 0:
        return 0.0
    return dose * 0.5 ** (elapsed_hours / half_life_hours)


def filter_events_for(peptide: str, events_by_name: Iterable[Tuple[str, DoseEvent]]) -> List[DoseEvent]:
    """Events whose logged compound name contains the selected preset name.

    "Custom" keeps everything.
    """
    pairs = list(events_by_name)
    if peptide == CUSTOM:
        return [event for _, event in pairs]
    needle = peptide.lower()
    return [event for name, event in pairs if needle in (name or "").lower()]


def project_active_levels(
    events: Iterable[DoseEvent],
    half_life_hours: float,
    days_to_project: int = 30,
    dose_unit: DoseUnit = DoseUnit.MG,
    now: Optional[datetime] = None,
) -> List[Tuple[datetime, float]]:
    """
    Daily estimated active amount from the first dose until ``days_to_project`` days from now

    Args:
        events: Logged doses (any order)
        half_life_hours: Elimination half-life
        days_to_project: How far past ``now`` to extend the curve (0-MAX_PROJECTION_DAYS)
        dose_unit: Unit the levels are reported in
        now: Reference time, same clock as the events (defaults to naive UTC now)

    Returns:
        List of (midnight timestamp, active amount) points
    """
    if half_life_hours <= 0:
        raise ValueError("Half-life must be greater than 0")

    if not 0 <= days_to_project <= MAX_PROJECTION_DAYS:
        raise ValueError(f"Days to project must be between 0 and {MAX_PROJECTION_DAYS}")

    events = sorted(events, key=lambda e: e.taken_at)
    if not events:
        return []

    now = now or datetime.utcnow()
    current = events[0].taken_at.replace(hour=0, minute=0, second=0, microsecond=0)
    end = now + timedelta(days=days_to_project)

    points = []
    while current <= end:
        total = 0.0
        for event in events:
            if event.taken_at <= current:
                elapsed = (current - event.taken_at).total_seconds() / 3600.0
                amount = convert_dose(event.amount, event.unit, dose_unit)
                total += remaining_amount(amount, elapsed, half_life_hours)
        points.append((current, total))
        current += timedelta(days=1)

    return points
