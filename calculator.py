"""
Peptide Calculator
Handles reconstitution and dosing calculations
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from units import DoseUnit, SyringeProfile, SYRINGES, is_positive, parse_dose_unit, to_mcg

logger = logging.getLogger(__name__)

# Syringe marks tried in order when suggesting a water volume.
# Common round marks first, then the in-between ones.
CANDIDATE_UNIT_MARKS = (10, 20, 25, 50, 5, 15, 30, 40)

MIN_WATER_ML = 0.5
MAX_WATER_ML = 3.0
FALLBACK_WATER_ML = 2.0


@dataclass(frozen=True)
class DoseInput:
    """One calculation request, as entered on the calculator form"""
    vial_mass_mg: float
    diluent_volume_ml: float
    dose_amount: float
    dose_unit: DoseUnit = DoseUnit.MCG
    syringe: SyringeProfile = SYRINGES["u100"]

    @property
    def dose_mcg(self) -> float:
        return to_mcg(float(self.dose_amount), self.dose_unit)


@dataclass(frozen=True)
class DoseResult:
    concentration_mcg_per_ml: float
    draw_volume_ml: float
    units: float
    doses_per_vial: int
    exceeds_capacity: bool

    def for_display(self) -> Dict[str, Any]:
        """Values rounded the way the calculator shows them"""
        return {
            "concentration_mcg_per_ml": self.concentration_mcg_per_ml,
            "draw_volume_ml": round(self.draw_volume_ml, 4),
            "units": round(self.units, 1),
            "doses_per_vial": self.doses_per_vial,
            "exceeds_capacity": self.exceeds_capacity,
        }


@dataclass(frozen=True)
class WaterRecommendation:
    recommended_volume_ml: float
    expected_units: Optional[float] = None
    is_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recommended_volume_ml": self.recommended_volume_ml,
            "expected_units": self.expected_units,
            "is_fallback": self.is_fallback,
        }


def _round_half_up(value: float, places: int = 1) -> float:
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


def calculate_dose(dose_input: DoseInput) -> Optional[DoseResult]:
    """
    Work out what to draw for a single dose

    Args:
        dose_input: Vial mass, water added, desired dose and syringe

    Returns:
        DoseResult, or None while any of the three amounts is not a
        positive finite number (form not filled in yet)
    """
    if not (
        is_positive(dose_input.vial_mass_mg)
        and is_positive(dose_input.diluent_volume_ml)
        and is_positive(dose_input.dose_amount)
    ):
        return None

    dose_mcg = dose_input.dose_mcg
    total_mcg = float(dose_input.vial_mass_mg) * 1000

    concentration = total_mcg / float(dose_input.diluent_volume_ml)
    draw_ml = dose_mcg / concentration
    units = draw_ml * dose_input.syringe.units_per_ml
    doses_per_vial = int(math.floor(total_mcg / dose_mcg))

    return DoseResult(
        concentration_mcg_per_ml=concentration,
        draw_volume_ml=draw_ml,
        units=units,
        doses_per_vial=doses_per_vial,
        exceeds_capacity=units > dose_input.syringe.max_units,
    )


def recommend_water_volume(
    vial_mass_mg: float,
    dose_mcg: float,
    syringe: SyringeProfile,
) -> WaterRecommendation:
    """
    Suggest how much water to add so the dose lands on an easy-to-read mark

    The first mark in CANDIDATE_UNIT_MARKS whose water volume falls in
    0.5-3.0 ml (after rounding to 0.1 ml) and still fits the barrel wins.

    Args:
        vial_mass_mg: Peptide in the vial (mg)
        dose_mcg: Dose per injection (mcg)
        syringe: Syringe the dose will be drawn with

    Returns:
        WaterRecommendation; falls back to 2.0 ml with no expected units
    """
    if is_positive(vial_mass_mg) and is_positive(dose_mcg):
        dose_mcg = float(dose_mcg)
        total_mcg = float(vial_mass_mg) * 1000

        for target_units in CANDIDATE_UNIT_MARKS:
            if target_units > syringe.max_units:
                continue

            water_needed = (total_mcg * target_units) / (dose_mcg * syringe.units_per_ml)
            if not (MIN_WATER_ML <= water_needed <= MAX_WATER_ML):
                continue

            water_ml = _round_half_up(water_needed, 1)
            actual_units = dose_mcg / (total_mcg / water_ml) * syringe.units_per_ml
            if actual_units <= syringe.max_units:
                return WaterRecommendation(
                    recommended_volume_ml=water_ml,
                    expected_units=_round_half_up(actual_units, 1),
                )

    logger.debug(
        "No syringe mark fits %s mg / %s mcg on %s; using %.1f ml",
        vial_mass_mg, dose_mcg, syringe.id, FALLBACK_WATER_ML,
    )
    return WaterRecommendation(recommended_volume_ml=FALLBACK_WATER_ML, is_fallback=True)


def build_dose_input(
    vial_mass_mg,
    diluent_volume_ml,
    dose_amount,
    dose_unit="mcg",
    syringe: Optional[SyringeProfile] = None,
) -> DoseInput:
    """Build a DoseInput from loosely-typed form/JSON values.

    Raises ValueError for values that are not numbers at all; zero,
    negative or non-finite numbers are kept so calculate_dose can
    report them as incomplete.
    """
    unit = parse_dose_unit(dose_unit)
    if unit is DoseUnit.IU:
        raise ValueError("Dose must be given in mcg or mg")

    return DoseInput(
        vial_mass_mg=float(vial_mass_mg),
        diluent_volume_ml=float(diluent_volume_ml),
        dose_amount=float(dose_amount),
        dose_unit=unit,
        syringe=syringe or SYRINGES["u100"],
    )


def reconstitution_report(
    peptide_name: str,
    dose_input: DoseInput,
    doses_per_day: int = 1,
) -> Optional[Dict[str, Any]]:
    """
    Generate a complete reconstitution and dosing report

    Args:
        peptide_name: Name of the peptide
        dose_input: Vial, water, dose and syringe
        doses_per_day: Number of doses per day

    Returns:
        Dictionary with all calculations, or None for incomplete input
    """
    if doses_per_day <= 0:
        raise ValueError("Doses per day must be greater than 0")

    result = calculate_dose(dose_input)
    if result is None:
        return None

    report = {
        "peptide": peptide_name,
        "vial_size_mg": dose_input.vial_mass_mg,
        "water_added_ml": dose_input.diluent_volume_ml,
        "target_dose_mcg": dose_input.dose_mcg,
        "syringe": dose_input.syringe.id,
        "doses_per_day": doses_per_day,
        "vial_lasts_days": round(result.doses_per_vial / doses_per_day, 1),
    }
    report.update(result.for_display())
    return report


def print_reconstitution_report(report: Dict[str, Any]) -> None:
    """Print a formatted reconstitution report"""
    print(f"\n{'='*60}")
    print(f"PEPTIDE RECONSTITUTION REPORT: {report['peptide']}")
    print(f"{'='*60}")
    print(f"\nVIAL PREPARATION:")
    print(f"  • Peptide amount: {report['vial_size_mg']} mg")
    print(f"  • Bacteriostatic water: {report['water_added_ml']} ml")
    print(f"  • Final concentration: {report['concentration_mcg_per_ml']:g} mcg/ml")
    print(f"\nDOSING INSTRUCTIONS:")
    print(f"  • Target dose: {report['target_dose_mcg']:g} mcg")
    print(f"  • Inject volume: {report['draw_volume_ml']} ml")
    print(f"  • Syringe units: {report['units']} units ({report['syringe']})")
    if report["exceeds_capacity"]:
        print(f"  ⚠ Dose does not fit in one syringe - add more water or split the dose")
    print(f"  • Frequency: {report['doses_per_day']}x per day")
    print(f"\nVIAL LIFESPAN:")
    print(f"  • Total doses available: {report['doses_per_vial']}")
    print(f"  • Vial will last: {report['vial_lasts_days']} days")
    print(f"{'='*60}\n")


if __name__ == "__main__":
    example = reconstitution_report(
        "BPC-157",
        DoseInput(vial_mass_mg=5, diluent_volume_ml=2, dose_amount=250),
        doses_per_day=2,
    )
    print_reconstitution_report(example)
