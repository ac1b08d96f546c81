import os
import tempfile
import unittest
from datetime import datetime, timedelta

from database import PeptideDB
from models import create_database, get_engine, get_session
from config import LOCAL_SQLITE_URL, Config
from seed_data import PEPTIDES_DATA, seed_common_peptides


class TestPeptideDB(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.db_url = "sqlite:///" + os.path.join(self.tmp.name, "toolkit.db")
        create_database(self.db_url)
        self.session = get_session(self.db_url)
        self.db = PeptideDB(self.session)

    def tearDown(self):
        self.session.close()
        get_engine(self.db_url).dispose()
        self.tmp.cleanup()

    def test_seeding_is_idempotent(self):
        self.assertEqual(seed_common_peptides(self.session, verbose=False), len(PEPTIDES_DATA))
        self.assertEqual(seed_common_peptides(self.session, verbose=False), 0)
        self.assertEqual(len(self.db.list_peptides()), len(PEPTIDES_DATA))

    def test_lookup_by_name_ignores_case(self):
        self.db.add_peptide("BPC-157", category="Healing Peptide", half_life_hours=4)
        self.assertEqual(self.db.get_peptide_by_name("  bpc-157 ").half_life_hours, 4)
        self.assertIsNone(self.db.get_peptide_by_name("bpc"))
        self.assertIsNone(self.db.get_peptide_by_name(""))

    def test_list_by_category(self):
        self.db.add_peptide("Semax", category="Cognitive")
        self.db.add_peptide("Selank", category="Cognitive")
        self.db.add_peptide("BPC-157", category="Healing")
        self.assertEqual([p.name for p in self.db.list_peptides("Cognitive")], ["Selank", "Semax"])

    def test_update_peptide(self):
        peptide = self.db.add_peptide("Semax", half_life_hours=1)
        updated = self.db.update_peptide(peptide.id, half_life_hours=0.75, not_a_column="x")

        self.assertEqual(updated.half_life_hours, 0.75)
        self.assertEqual(self.db.get_peptide(peptide.id).half_life_hours, 0.75)
        self.assertIsNone(self.db.update_peptide(9999, half_life_hours=2))

    def test_injection_log(self):
        now = datetime.utcnow()
        self.db.log_injection("BPC-157", 250, timestamp=now - timedelta(days=10))
        self.db.log_injection("Semaglutide", 0.25, "mg", timestamp=now - timedelta(days=1))
        self.db.log_injection("BPC-157", 500)

        self.assertEqual([i.dose_amount for i in self.db.list_injections("bpc")], [250, 500])
        self.assertEqual(len(self.db.list_injections()), 3)

        recent = self.db.get_recent_injections(7)
        self.assertEqual([i.peptide_name for i in recent], ["BPC-157", "Semaglutide"])
        self.assertEqual(recent[1].to_dict()["dose_unit"], "mg")

    def test_add_vial_reconstituted(self):
        vial = self.db.add_vial("BPC-157", 5, diluent_volume_ml=2, batch_number="B1")
        self.assertEqual(vial.concentration_mcg_per_ml, 2500)
        self.assertEqual(vial.remaining_mg, 5)
        self.assertIsNotNone(vial.reconstitution_date)
        self.assertEqual(vial.doses_remaining(250), 20)

        dry = self.db.add_vial("TB-500", 10)
        self.assertIsNone(dry.concentration_mcg_per_ml)
        self.assertIsNone(dry.reconstitution_date)

        for quantity, water in [(0, None), (-5, None), (5, 0), (5, -1)]:
            with self.subTest(quantity=quantity, water=water):
                with self.assertRaises(ValueError):
                    self.db.add_vial("BPC-157", quantity, diluent_volume_ml=water)

    def test_injection_draws_from_oldest_vial(self):
        first = self.db.add_vial("BPC-157", 0.3)
        second = self.db.add_vial("BPC-157", 5)

        injection = self.db.log_injection("bpc-157", 250, "mcg")
        self.assertEqual(injection.vial_id, first.id)
        self.assertAlmostEqual(self.db.get_vial(first.id).remaining_mg, 0.05)
        self.assertEqual(injection.to_dict()["vial_id"], first.id)

        # the older vial only has 0.05 mg left; it is emptied, not driven negative
        self.db.log_injection("BPC-157", 0.25, "mg")
        self.assertEqual(self.db.get_vial(first.id).remaining_mg, 0)

        injection = self.db.log_injection("BPC-157", 500, "mcg")
        self.assertEqual(injection.vial_id, second.id)
        self.assertAlmostEqual(self.db.get_vial(second.id).remaining_mg, 4.5)

    def test_injection_without_deduction(self):
        vial = self.db.add_vial("Semaglutide", 5)

        self.assertIsNone(self.db.log_injection("Semaglutide", 0.25, "mg", deduct=False).vial_id)
        self.assertIsNone(self.db.log_injection("Semaglutide", 10, "iu").vial_id)
        self.assertIsNone(self.db.log_injection("Tirzepatide", 2.5, "mg").vial_id)
        self.assertEqual(self.db.get_vial(vial.id).remaining_mg, 5)

        self.db.deactivate_vial(vial.id)
        self.assertIsNone(self.db.log_injection("Semaglutide", 0.25, "mg").vial_id)

    def test_stock_queries(self):
        now = datetime(2024, 6, 1)
        low = self.db.add_vial("BPC-157", 8, expiration_date=now + timedelta(days=10))
        self.db.add_vial("BPC-157", 10)
        full = self.db.add_vial("Semaglutide", 20, expiration_date=now + timedelta(days=90))
        empty = self.db.add_vial("TB-500", 2, expiration_date=now - timedelta(days=1))
        self.db.deduct_from_inventory("TB-500", 5)

        self.assertEqual(self.db.get_vial(empty.id).remaining_mg, 0)
        self.assertEqual([v.remaining_mg for v in self.db.low_stock_vials()], [8, 10])
        self.assertEqual([v.id for v in self.db.expiring_vials(30, now=now)], [low.id])
        self.assertEqual([v.id for v in self.db.expiring_vials(100, now=now)], [low.id, full.id])

        self.assertEqual(self.db.total_stock_mg(), 38)
        self.assertEqual(self.db.total_stock_mg("bpc-157"), 18)
        self.assertEqual(self.db.total_stock_mg("Ipamorelin"), 0)
        self.assertIsNone(self.db.deduct_from_inventory("Ipamorelin", 1))

        tight = PeptideDB(self.session, low_stock_threshold_mg=9)
        self.assertEqual([v.id for v in tight.low_stock_vials()], [low.id])

    def test_reconstitute_and_deactivate(self):
        vial = self.db.add_vial("Ipamorelin", 5)
        when = datetime(2024, 3, 1, 9, 0)

        mixed = self.db.reconstitute_vial(vial.id, 2.5, when=when)
        self.assertEqual(mixed.concentration_mcg_per_ml, 2000)
        self.assertEqual(mixed.reconstitution_date, when)
        self.assertIsNone(self.db.reconstitute_vial(9999, 2))
        with self.assertRaises(ValueError):
            self.db.reconstitute_vial(vial.id, 0)

        self.assertFalse(self.db.deactivate_vial(vial.id).is_active)
        self.assertEqual(self.db.list_vials(), [])
        self.assertEqual(len(self.db.list_vials(include_inactive=True)), 1)
        self.assertIsNone(self.db.deactivate_vial(9999))


class TestConfig(unittest.TestCase):

    def test_database_url(self):
        self.assertEqual(Config.get_database_url(use_sqlite=True), LOCAL_SQLITE_URL)
        self.assertEqual(Config.get_database_url(), Config.DATABASE_URL)
        self.assertTrue(Config.DATABASE_URL)


if __name__ == "__main__":
    unittest.main()
