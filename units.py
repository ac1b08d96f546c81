"""
Units and Shared Types
Dose units, syringe profiles and name normalization used across the toolkit
"""

from __future__ import annotations

import enum
import math
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


class DoseUnit(enum.Enum):
    """Unit a dose is expressed in"""
    MCG = "mcg"
    MG = "mg"
    IU = "iu"  # compound-specific, never converted


class UnknownSyringeError(KeyError):
    """Raised when a syringe id is not one of the known profiles"""


@dataclass(frozen=True)
class SyringeProfile:
    """Printed scale of a syringe barrel"""
    id: str
    units_per_ml: float
    max_units: float
    label: str = ""


SYRINGES: Dict[str, SyringeProfile] = {
    "u100": SyringeProfile("u100", units_per_ml=100, max_units=100, label="U-100 insulin syringe (1 ml)"),
    "u50": SyringeProfile("u50", units_per_ml=100, max_units=50, label="U-100 insulin syringe (0.5 ml)"),
    "u40": SyringeProfile("u40", units_per_ml=40, max_units=40, label="U-40 syringe (1 ml)"),
}


def get_syringe(syringe_id: str) -> SyringeProfile:
    """Look up a syringe profile by id ("u100", "u50", "u40")"""
    key = (syringe_id or "").strip().lower()
    try:
        return SYRINGES[key]
    except KeyError:
        raise UnknownSyringeError(f"Unknown syringe type: {syringe_id}") from None


def parse_dose_unit(value) -> DoseUnit:
    """Accept a DoseUnit or its string value ("mcg", "MG", "µg")"""
    if isinstance(value, DoseUnit):
        return value
    text = str(value or "").strip().lower().replace("µg", "mcg").replace("ug", "mcg")
    try:
        return DoseUnit(text)
    except ValueError:
        raise ValueError(f"Unknown dose unit: {value}") from None


def is_positive(value) -> bool:
    """True for a finite number greater than zero.

    NaN and +/-inf count as "not filled in", the same as zero or negatives.
    """
    if isinstance(value, bool) or value is None:
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    return math.isfinite(number) and number > 0


def to_mcg(amount: float, unit: DoseUnit) -> float:
    """Convert a mcg or mg amount to micrograms"""
    if unit is DoseUnit.MG:
        return amount * 1000
    return amount


def convert_dose(value: float, from_unit: DoseUnit, to_unit: DoseUnit) -> float:
    """Convert between mg and mcg; IU and same-unit pairs pass through"""
    if from_unit is to_unit:
        return value
    if from_unit is DoseUnit.MG and to_unit is DoseUnit.MCG:
        return value * 1000
    if from_unit is DoseUnit.MCG and to_unit is DoseUnit.MG:
        return value / 1000
    return value


_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_compound(name: str) -> str:
    """Compound identifier used for matching: "CJC-1295 (no DAC)" -> "cjc-1295--no-dac-"."""
    return _NON_ALNUM.sub("-", (name or "").lower())


def normalize_stack(names: List[str]) -> List[str]:
    return [normalize_compound(n) for n in names]


# "250-500mcg daily", "0.25mg - 2.4mg weekly", "2-5mg twice weekly"
_DOSAGE_HINT = re.compile(
    r"(\d+(?:\.\d+)?)\s*(?:-\s*\d+(?:\.\d+)?\s*)?(mcg|µg|mg)\b",
    re.IGNORECASE,
)


def default_dose_from_hint(hint: Optional[str]) -> Optional[Tuple[float, DoseUnit]]:
    """
    Pull a starting dose out of a "common dosage" hint string

    Args:
        hint: Free-text dosage range from the reference dataset

    Returns:
        (amount, unit) using the lower end of the range, or None
    """
    if not hint:
        return None
    match = _DOSAGE_HINT.search(hint)
    if not match:
        return None
    amount = float(match.group(1))
    if amount <= 0:
        return None
    return amount, parse_dose_unit(match.group(2))
