import unittest
from datetime import datetime

from half_life import (
    CUSTOM, HALF_LIFE_PRESETS, MAX_PROJECTION_DAYS, DoseEvent, filter_events_for, half_life_for, project_active_levels,
    remaining_amount,
)
from units import DoseUnit


class TestDecay(unittest.TestCase):

    def test_one_half_life(self):
        self.assertAlmostEqual(remaining_amount(10, 24, 24), 5.0)
        self.assertAlmostEqual(remaining_amount(10, 48, 24), 2.5)
        self.assertEqual(remaining_amount(10, 0, 24), 10)

    def test_before_injection(self):
        self.assertEqual(remaining_amount(10, -1, 24), 0.0)

    def test_half_life_must_be_positive(self):
        with self.assertRaises(ValueError):
            remaining_amount(10, 1, 0)

    def test_presets(self):
        self.assertEqual(HALF_LIFE_PRESETS["Semaglutide"], 168)
        self.assertEqual(HALF_LIFE_PRESETS[CUSTOM], 24)
        self.assertEqual(half_life_for("BPC-157"), 4)
        self.assertEqual(half_life_for(CUSTOM, 36), 36)
        with self.assertRaises(KeyError):
            half_life_for("Unobtanium")


class TestProjection(unittest.TestCase):

    def setUp(self):
        self.event = DoseEvent(datetime(2024, 1, 1, 12, 0), 1.0, DoseUnit.MG)
        self.now = datetime(2024, 1, 3, 0, 0)

    def test_daily_points_from_first_dose(self):
        points = project_active_levels([self.event], 24, days_to_project=0, now=self.now)

        self.assertEqual([t for t, _ in points], [
            datetime(2024, 1, 1), datetime(2024, 1, 2), datetime(2024, 1, 3),
        ])
        levels = [level for _, level in points]
        self.assertEqual(levels[0], 0.0)  # midnight, before the dose
        self.assertAlmostEqual(levels[1], 0.5 ** 0.5)
        self.assertAlmostEqual(levels[2], 0.5 ** 1.5)

    def test_doses_accumulate(self):
        second = DoseEvent(datetime(2024, 1, 2, 0, 0), 1.0, DoseUnit.MG)
        points = project_active_levels([second, self.event], 24, days_to_project=0, now=self.now)
        self.assertAlmostEqual(points[1][1], 0.5 ** 0.5 + 1.0)

    def test_unit_conversion(self):
        mcg_event = DoseEvent(datetime(2024, 1, 1, 12, 0), 500, DoseUnit.MCG)
        points = project_active_levels([mcg_event], 24, days_to_project=0, dose_unit=DoseUnit.MG, now=self.now)
        self.assertAlmostEqual(points[2][1], 0.5 * 0.5 ** 1.5)

        points = project_active_levels([self.event], 24, days_to_project=0, dose_unit=DoseUnit.MCG, now=self.now)
        self.assertAlmostEqual(points[1][1], 1000 * 0.5 ** 0.5)

    def test_projects_into_future(self):
        points = project_active_levels([self.event], 24, days_to_project=5, now=self.now)
        self.assertEqual(len(points), 8)
        self.assertEqual(points[-1][0], datetime(2024, 1, 8))

    def test_no_events(self):
        self.assertEqual(project_active_levels([], 24, now=self.now), [])

    def test_bad_half_life(self):
        with self.assertRaises(ValueError):
            project_active_levels([self.event], 0, now=self.now)

    def test_projection_window_is_bounded(self):
        points = project_active_levels([self.event], 24, days_to_project=MAX_PROJECTION_DAYS, now=self.now)
        self.assertEqual(len(points), MAX_PROJECTION_DAYS + 3)
        for days in (MAX_PROJECTION_DAYS + 1, 200000, -1):
            with self.assertRaises(ValueError):
                project_active_levels([self.event], 24, days_to_project=days, now=self.now)
        with self.assertRaises(ValueError):
            project_active_levels([], 24, days_to_project=-1, now=self.now)


class TestFilterEvents(unittest.TestCase):

    def test_case_insensitive_substring(self):
        a = DoseEvent(datetime(2024, 1, 1), 0.25)
        b = DoseEvent(datetime(2024, 1, 2), 250, DoseUnit.MCG)
        logged = [("semaglutide (compounded)", a), ("BPC-157", b)]

        self.assertEqual(filter_events_for("Semaglutide", logged), [a])
        self.assertEqual(filter_events_for("BPC-157", logged), [b])
        self.assertEqual(filter_events_for(CUSTOM, logged), [a, b])
        self.assertEqual(filter_events_for("TB-500", logged), [])


if __name__ == "__main__":
    unittest.main()
