import math
import unittest

from units import (
    DoseUnit, UnknownSyringeError, convert_dose, default_dose_from_hint, get_syringe, is_positive,
    normalize_compound, parse_dose_unit, to_mcg,
)


class TestNormalization(unittest.TestCase):

    def test_normalize_compound(self):
        self.assertEqual(normalize_compound("BPC-157"), "bpc-157")
        self.assertEqual(normalize_compound("CJC-1295 (no DAC)"), "cjc-1295--no-dac-")
        self.assertEqual(normalize_compound("NAD+"), "nad-")
        self.assertEqual(normalize_compound("Fragment 176-191"), "fragment-176-191")
        self.assertEqual(normalize_compound(""), "")

    def test_is_positive(self):
        self.assertTrue(is_positive(0.001))
        self.assertTrue(is_positive("2.5"))
        for value in (0, -1, math.nan, math.inf, -math.inf, None, "abc", True):
            with self.subTest(value=value):
                self.assertFalse(is_positive(value))


class TestDoseUnits(unittest.TestCase):

    def test_parse(self):
        self.assertIs(parse_dose_unit("MG"), DoseUnit.MG)
        self.assertIs(parse_dose_unit(" mcg "), DoseUnit.MCG)
        self.assertIs(parse_dose_unit("µg"), DoseUnit.MCG)
        self.assertIs(parse_dose_unit(DoseUnit.IU), DoseUnit.IU)
        with self.assertRaises(ValueError):
            parse_dose_unit("ml")

    def test_to_mcg(self):
        self.assertEqual(to_mcg(2.5, DoseUnit.MG), 2500)
        self.assertEqual(to_mcg(250, DoseUnit.MCG), 250)

    def test_convert_dose(self):
        self.assertEqual(convert_dose(1.5, DoseUnit.MG, DoseUnit.MCG), 1500)
        self.assertEqual(convert_dose(250, DoseUnit.MCG, DoseUnit.MG), 0.25)
        self.assertEqual(convert_dose(10, DoseUnit.IU, DoseUnit.MG), 10)
        self.assertEqual(convert_dose(3, DoseUnit.MG, DoseUnit.MG), 3)


class TestSyringes(unittest.TestCase):

    def test_lookup(self):
        self.assertEqual(get_syringe("U100").max_units, 100)
        self.assertEqual(get_syringe("u50").units_per_ml, 100)
        self.assertEqual(get_syringe("u40").units_per_ml, 40)

    def test_unknown(self):
        with self.assertRaises(UnknownSyringeError):
            get_syringe("u1000")


class TestDosageHints(unittest.TestCase):

    def test_lower_bound_is_used(self):
        cases = {
            "250-500mcg daily": (250.0, DoseUnit.MCG),
            "0.25mg - 2.4mg weekly": (0.25, DoseUnit.MG),
            "2-5mg twice weekly": (2.0, DoseUnit.MG),
            "1.6mg 2-3 times weekly": (1.6, DoseUnit.MG),
            "250-750mcg 1-3 times daily (nasal or subcutaneous)": (250.0, DoseUnit.MCG),
            "10-20mg weekly (split doses)": (10.0, DoseUnit.MG),
        }
        for hint, expected in cases.items():
            with self.subTest(hint=hint):
                self.assertEqual(default_dose_from_hint(hint), expected)

    def test_unparseable(self):
        self.assertIsNone(default_dose_from_hint(None))
        self.assertIsNone(default_dose_from_hint("Approx. 5-7 days"))
        self.assertIsNone(default_dose_from_hint("As directed"))


if __name__ == "__main__":
    unittest.main()
