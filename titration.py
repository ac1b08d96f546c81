"""Titration (dose escalation) plans.

These are EDUCATIONAL examples only, not medical advice.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Optional


class TitrationError(KeyError):
    """Unknown compound or protocol"""


TITRATION_PROTOCOLS: Dict[str, Dict[str, Any]] = {
    "semaglutide": {
        "name": "Semaglutide (Ozempic/Wegovy)",
        "category": "GLP-1 Agonist",
        "frequency": "Weekly",
        "protocols": [
            {
                "name": "Standard FDA Protocol",
                "description": "FDA-approved escalation for weight management",
                "steps": [
                    {"week": 1, "duration": 4, "dose": 0.25, "unit": "mg", "notes": "Starting dose - expect some nausea"},
                    {"week": 5, "duration": 4, "dose": 0.5, "unit": "mg", "notes": "First increase"},
                    {"week": 9, "duration": 4, "dose": 1.0, "unit": "mg", "notes": "Therapeutic dose"},
                    {"week": 13, "duration": 4, "dose": 1.7, "unit": "mg", "notes": "Optional increase"},
                    {"week": 17, "duration": 0, "dose": 2.4, "unit": "mg", "notes": "Maximum dose"},
                ],
            },
            {
                "name": "Slow Titration",
                "description": "For those sensitive to GI effects",
                "steps": [
                    {"week": 1, "duration": 6, "dose": 0.25, "unit": "mg", "notes": "Extended starting phase"},
                    {"week": 7, "duration": 6, "dose": 0.5, "unit": "mg", "notes": "Gradual increase"},
                    {"week": 13, "duration": 0, "dose": 1.0, "unit": "mg", "notes": "May stay here long-term"},
                ],
            },
        ],
    },
    "tirzepatide": {
        "name": "Tirzepatide (Mounjaro/Zepbound)",
        "category": "GIP/GLP-1 Dual Agonist",
        "frequency": "Weekly",
        "protocols": [
            {
                "name": "Standard Protocol",
                "description": "FDA-approved titration",
                "steps": [
                    {"week": 1, "duration": 4, "dose": 2.5, "unit": "mg", "notes": "Starting dose"},
                    {"week": 5, "duration": 4, "dose": 5, "unit": "mg", "notes": "First therapeutic dose"},
                    {"week": 9, "duration": 4, "dose": 7.5, "unit": "mg", "notes": "Increase if tolerated"},
                    {"week": 13, "duration": 4, "dose": 10, "unit": "mg", "notes": "Strong therapeutic dose"},
                    {"week": 17, "duration": 4, "dose": 12.5, "unit": "mg", "notes": "Near maximum"},
                    {"week": 21, "duration": 0, "dose": 15, "unit": "mg", "notes": "Maximum approved dose"},
                ],
            },
        ],
    },
    "liraglutide": {
        "name": "Liraglutide (Saxenda)",
        "category": "GLP-1 Agonist",
        "frequency": "Daily",
        "protocols": [
            {
                "name": "Standard Daily Protocol",
                "description": "FDA-approved daily titration",
                "steps": [
                    {"week": 1, "duration": 1, "dose": 0.6, "unit": "mg", "notes": "Week 1"},
                    {"week": 2, "duration": 1, "dose": 1.2, "unit": "mg", "notes": "Week 2"},
                    {"week": 3, "duration": 1, "dose": 1.8, "unit": "mg", "notes": "Week 3"},
                    {"week": 4, "duration": 1, "dose": 2.4, "unit": "mg", "notes": "Week 4"},
                    {"week": 5, "duration": 0, "dose": 3.0, "unit": "mg", "notes": "Maintenance dose"},
                ],
            },
        ],
    },
    "retatrutide": {
        "name": "Retatrutide",
        "category": "Triple Agonist",
        "frequency": "Weekly",
        "protocols": [
            {
                "name": "Clinical Trial Protocol",
                "description": "Based on phase 2 trial escalation",
                "steps": [
                    {"week": 1, "duration": 4, "dose": 1, "unit": "mg", "notes": "Low starting dose"},
                    {"week": 5, "duration": 4, "dose": 2, "unit": "mg", "notes": "First increase"},
                    {"week": 9, "duration": 4, "dose": 4, "unit": "mg", "notes": "Mid-range dose"},
                    {"week": 13, "duration": 4, "dose": 8, "unit": "mg", "notes": "Higher dose"},
                    {"week": 17, "duration": 0, "dose": 12, "unit": "mg", "notes": "Maximum studied"},
                ],
            },
        ],
    },
    "mk677": {
        "name": "MK-677 (Ibutamoren)",
        "category": "GH Secretagogue",
        "frequency": "Daily (Oral)",
        "protocols": [
            {
                "name": "Standard Protocol",
                "description": "Common dosing approach",
                "steps": [
                    {"week": 1, "duration": 2, "dose": 12.5, "unit": "mg", "notes": "Half dose to assess tolerance"},
                    {"week": 3, "duration": 0, "dose": 25, "unit": "mg", "notes": "Full dose - take at night"},
                ],
            },
            {
                "name": "Low Dose Protocol",
                "description": "For those experiencing side effects",
                "steps": [
                    {"week": 1, "duration": 0, "dose": 10, "unit": "mg", "notes": "Lower dose, fewer sides"},
                ],
            },
        ],
    },
}


@dataclass(frozen=True)
class ScheduledStep:
    week: int
    dose: float
    unit: str
    notes: str
    start_date: date
    end_date: Optional[date]  # None = open-ended

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week": self.week,
            "dose": self.dose,
            "unit": self.unit,
            "notes": self.notes,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }


def get_protocol(compound: str, protocol_index: int = 0) -> Dict[str, Any]:
    """Look up one protocol for a compound key ("semaglutide", "mk677", ...)"""
    drug = TITRATION_PROTOCOLS.get((compound or "").strip().lower())
    if drug is None:
        raise TitrationError(f"No titration plans for '{compound}'")
    protocols = drug["protocols"]
    if not 0 <= protocol_index < len(protocols):
        raise TitrationError(f"'{compound}' has no protocol #{protocol_index}")
    return protocols[protocol_index]


def build_schedule(steps: List[Dict[str, Any]], start_date: date) -> List[ScheduledStep]:
    """
    Lay protocol steps out on the calendar

    Args:
        steps: Step dicts with week, duration (weeks, 0 = ongoing), dose, unit, notes
        start_date: First day of the first step

    Returns:
        Steps with concrete start and end dates
    """
    schedule = []
    current = start_date

    for step in steps:
        duration = int(step.get("duration") or 0)
        end = current + timedelta(days=duration * 7 - 1) if duration > 0 else None

        schedule.append(
            ScheduledStep(
                week=int(step["week"]),
                dose=float(step["dose"]),
                unit=step.get("unit", "mg"),
                notes=step.get("notes", ""),
                start_date=current,
                end_date=end,
            )
        )

        if end is not None:
            current = end + timedelta(days=1)

    return schedule


def step_status(step: ScheduledStep, today: date) -> str:
    """'past', 'current' or 'upcoming' relative to ``today``"""
    if today < step.start_date:
        return "upcoming"
    if step.end_date is not None and today > step.end_date:
        return "past"
    return "current"
