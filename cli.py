#!/usr/bin/env python3
"""
Peptide Toolkit CLI
Command-line interface for the calculator, stack checker, inventory and dose log
"""

from datetime import date, datetime

from models import get_session, create_database
from database import PeptideDB
from seed_data import seed_common_peptides
from calculator import (
    build_dose_input, recommend_water_volume, reconstitution_report, print_reconstitution_report,
)
from interactions import evaluate, get_rules
from half_life import (
    HALF_LIFE_PRESETS, MAX_PROJECTION_DAYS, DoseEvent, filter_events_for, half_life_for, project_active_levels,
)
from titration import TITRATION_PROTOCOLS, TitrationError, build_schedule, get_protocol, step_status
from units import (
    SYRINGES, UnknownSyringeError, default_dose_from_hint, get_syringe, parse_dose_unit, to_mcg,
)
from config import Config


SEVERITY_ICONS = {"danger": "⛔", "warning": "⚠", "synergy": "✓", "info": "ℹ"}


class PeptideCLI:
    """Command-line interface for dosing tools"""

    def __init__(self, db_url=None):
        """Initialize CLI with database session"""
        self.db_url = db_url or Config.DATABASE_URL
        create_database(self.db_url)

        self.session = get_session(self.db_url)
        self.db = PeptideDB(self.session, low_stock_threshold_mg=Config.LOW_STOCK_THRESHOLD_MG)
        seed_common_peptides(self.session, verbose=False)
        self.rules = get_rules(Config.INTERACTION_RULES_FILE or None)

    def run(self):
        """Main CLI loop"""
        print("\n" + "="*60)
        print("PEPTIDE TOOLKIT CLI")
        print("="*60)

        actions = {
            "1": self.list_peptides,
            "2": self.view_peptide,
            "3": self.calculate_reconstitution,
            "4": self.recommend_water,
            "5": self.check_stack,
            "6": self.log_injection,
            "7": self.view_injections,
            "8": self.half_life_projection,
            "9": self.titration_plan,
            "10": self.view_inventory,
            "11": self.add_vial,
        }

        while True:
            print("\nMAIN MENU:")
            print("1. List all peptides")
            print("2. View peptide details")
            print("3. Calculate reconstitution")
            print("4. Recommend water volume")
            print("5. Check stack interactions")
            print("6. Log injection")
            print("7. View recent injections")
            print("8. Half-life projection")
            print("9. Titration plan")
            print("10. Vial inventory")
            print("11. Add vial")
            print("0. Exit")

            choice = input("\nSelect option (0-11): ").strip()

            if choice == "0":
                print("\nGoodbye!")
                break
            action = actions.get(choice)
            if action:
                action()
            else:
                print("Invalid option. Please try again.")

    def _ask_syringe(self):
        options = ", ".join(SYRINGES)
        raw = input(f"Syringe ({options}) [{Config.DEFAULT_SYRINGE}]: ").strip()
        return get_syringe(raw or Config.DEFAULT_SYRINGE)

    def list_peptides(self):
        """List all peptides in database"""
        peptides = self.db.list_peptides()

        if not peptides:
            print("\n⚠ No peptides in database. Run seed_data.py to add common peptides.")
            return

        print("\n" + "="*60)
        print("AVAILABLE PEPTIDES")
        print("="*60)

        for i, p in enumerate(peptides, 1):
            print(f"{i}. {p.name} ({p.category or 'Uncategorized'})")
            print(f"   Common dosage: {p.common_dosage or 'N/A'}")
            print()

    def view_peptide(self):
        """View detailed peptide information"""
        name = input("\nEnter peptide name: ").strip()
        peptide = self.db.get_peptide_by_name(name)

        if not peptide:
            print(f"\n⚠ Peptide '{name}' not found.")
            return

        print("\n" + "="*60)
        print(f"PEPTIDE DETAILS: {peptide.name}")
        print("="*60)
        print(f"Category: {peptide.category}")
        print(f"Half-life: {peptide.half_life_hours} hours")
        print(f"Common dosage: {peptide.common_dosage}")
        default = default_dose_from_hint(peptide.common_dosage)
        if default:
            print(f"Suggested starting dose: {default[0]:g} {default[1].value}")
        print(f"\n{peptide.description or ''}")

    def calculate_reconstitution(self):
        """Interactive reconstitution calculator"""
        print("\n" + "="*60)
        print("RECONSTITUTION CALCULATOR")
        print("="*60)

        try:
            peptide_name = input("\nPeptide name: ").strip()
            mg_amount = float(input("Vial size (mg): "))
            ml_water = float(input("Bacteriostatic water to add (ml): "))
            dose = float(input("Desired dose per injection: "))
            unit = input("Dose unit (mcg/mg) [mcg]: ").strip() or "mcg"
            syringe = self._ask_syringe()
            doses_per_day = int(input("Doses per day: ") or "1")

            dose_input = build_dose_input(mg_amount, ml_water, dose, unit, syringe)
            report = reconstitution_report(peptide_name, dose_input, doses_per_day)

            if report is None:
                print("\n⚠ Vial size, water and dose must all be greater than 0.")
                return
            print_reconstitution_report(report)

        except (ValueError, UnknownSyringeError) as e:
            print(f"\n⚠ Error: {e}")

    def recommend_water(self):
        """Suggest a water volume that lands the dose on a clean syringe mark"""
        try:
            mg_amount = float(input("\nVial size (mg): "))
            dose = float(input("Desired dose per injection: "))
            unit = parse_dose_unit(input("Dose unit (mcg/mg) [mcg]: ").strip() or "mcg")
            syringe = self._ask_syringe()
        except (ValueError, UnknownSyringeError) as e:
            print(f"\n⚠ Error: {e}")
            return

        rec = recommend_water_volume(mg_amount, to_mcg(dose, unit), syringe)
        if rec.is_fallback:
            print(f"\nNo clean syringe mark fits; {rec.recommended_volume_ml} ml is a reasonable default.")
        else:
            print(f"\nAdd {rec.recommended_volume_ml} ml → draw to {rec.expected_units} units on {syringe.id}")

    def check_stack(self):
        """Check a stack for known interactions"""
        raw = input("\nPeptides in stack (comma separated): ").strip()
        stack = [s.strip() for s in raw.split(",") if s.strip()]

        findings = evaluate(stack, self.rules)
        if not findings:
            print("\n✓ No known interactions for this stack.")
            return

        print("\n" + "="*60)
        print("STACK ANALYSIS")
        print("="*60)
        for f in findings:
            icon = SEVERITY_ICONS.get(f.severity.value, "•")
            print(f"\n{icon} [{f.severity.value.upper()}] {f.title}")
            print(f"  {f.rule.description}")

    def log_injection(self):
        """Log an injection"""
        print("\n" + "="*60)
        print("LOG INJECTION")
        print("="*60)

        try:
            peptide_name = input("\nPeptide name: ").strip()
            if not peptide_name:
                print("\n⚠ Peptide name is required.")
                return
            amount = float(input("Dose amount: "))
            if amount <= 0:
                print("\n⚠ Dose must be greater than 0.")
                return
            unit = parse_dose_unit(input("Dose unit (mcg/mg) [mcg]: ").strip() or "mcg")
            site = input("Injection site (optional): ").strip() or None
            notes = input("Notes (optional): ").strip() or None

            injection = self.db.log_injection(
                peptide_name=peptide_name,
                dose_amount=amount,
                dose_unit=unit.value,
                injection_site=site,
                notes=notes,
            )
            print(f"\n✓ Injection logged successfully! (ID: {injection.id})")
            if injection.vial is not None:
                vial = injection.vial
                print(f"  Drawn from vial #{vial.id}: {vial.remaining_mg:g} mg left")
                if 0 < vial.remaining_mg <= self.db.low_stock_threshold_mg:
                    print("  ⚠ Running low - time to reorder")

        except ValueError as e:
            print(f"\n⚠ Error: {e}")

    def view_injections(self):
        """View recent injections"""
        days = int(input("\nShow injections from last X days (default 7): ").strip() or "7")

        injections = self.db.get_recent_injections(days)

        if not injections:
            print(f"\n⚠ No injections in the last {days} days.")
            return

        print("\n" + "="*60)
        print(f"INJECTIONS (LAST {days} DAYS)")
        print("="*60)

        for inj in injections:
            print(f"\n{inj.timestamp.strftime('%Y-%m-%d %H:%M')} UTC")
            print(f"  Peptide: {inj.peptide_name}")
            print(f"  Dose: {inj.dose_amount:g} {inj.dose_unit}")
            if inj.injection_site:
                print(f"  Site: {inj.injection_site}")
            if inj.notes:
                print(f"  Notes: {inj.notes}")

    def half_life_projection(self):
        """Print estimated active levels from the injection log"""
        peptide = input("\nPeptide (preset name or Custom): ").strip()
        try:
            custom = None
            if peptide == "Custom":
                custom = float(input("Half-life (hours): "))
            half_life = half_life_for(peptide, custom)
            if half_life <= 0:
                raise ValueError("Half-life must be greater than 0")
            days = int(input("Days to project (default 14): ").strip() or "14")
            if not 0 <= days <= MAX_PROJECTION_DAYS:
                raise ValueError(f"Days to project must be between 0 and {MAX_PROJECTION_DAYS}")
            unit = parse_dose_unit(input("Report in (mg/mcg) [mg]: ").strip() or "mg")
        except KeyError:
            print(f"\n⚠ No preset for '{peptide}'. Presets: {', '.join(sorted(HALF_LIFE_PRESETS))}")
            return
        except ValueError as e:
            print(f"\n⚠ Error: {e}")
            return

        logged = [
            (i.peptide_name, DoseEvent(i.timestamp, i.dose_amount, parse_dose_unit(i.dose_unit)))
            for i in self.db.list_injections()
        ]
        points = project_active_levels(
            filter_events_for(peptide, logged), half_life, days, unit, now=datetime.utcnow()
        )
        if not points:
            print(f"\n⚠ No injections logged for {peptide}.")
            return

        print(f"\nESTIMATED ACTIVE LEVEL ({unit.value}), half-life {half_life:g} h")
        for when, level in points:
            print(f"  {when.strftime('%b %d')}: {level:.3f}")

    def titration_plan(self):
        """Lay out a titration schedule"""
        print("\nAvailable: " + ", ".join(TITRATION_PROTOCOLS))
        compound = input("Compound: ").strip().lower()
        drug = TITRATION_PROTOCOLS.get(compound)
        if drug:
            for i, p in enumerate(drug["protocols"]):
                print(f"  {i}. {p['name']} - {p['description']}")

        try:
            index = int(input("Protocol number (default 0): ").strip() or "0")
            start_raw = input("Start date (YYYY-MM-DD, default today): ").strip()
            start = date.fromisoformat(start_raw) if start_raw else date.today()
            protocol = get_protocol(compound, index)
        except TitrationError as e:
            print(f"\n⚠ {e.args[0]}")
            return
        except ValueError as e:
            print(f"\n⚠ Error: {e}")
            return

        today = datetime.now().date()
        print("\n" + "="*60)
        print(protocol["name"].upper())
        print("="*60)
        for step in build_schedule(protocol["steps"], start):
            until = step.end_date.isoformat() if step.end_date else "ongoing"
            marker = {"current": "→", "past": "✓"}.get(step_status(step, today), " ")
            print(f"{marker} Week {step.week}: {step.dose:g}{step.unit}  {step.start_date.isoformat()} - {until}")
            print(f"    {step.notes}")

    def view_inventory(self):
        """Active vials, stock totals and alerts"""
        vials = self.db.list_vials()
        if not vials:
            print("\n⚠ No vials in inventory.")
            return

        print("\n" + "="*60)
        print("VIAL INVENTORY")
        print("="*60)
        for v in vials:
            mixed = (
                f"{v.concentration_mcg_per_ml:g} mcg/ml" if v.concentration_mcg_per_ml else "not reconstituted"
            )
            print(f"\n#{v.id} {v.peptide_name}: {v.remaining_mg:g} / {v.quantity_mg:g} mg ({mixed})")
            if v.expiration_date:
                print(f"   Expires: {v.expiration_date.strftime('%Y-%m-%d')}")
        print(f"\nTotal stock: {self.db.total_stock_mg():g} mg")

        low = self.db.low_stock_vials()
        if low:
            print(f"\n⚠ Low stock (≤ {self.db.low_stock_threshold_mg:g} mg):")
            for v in low:
                print(f"   #{v.id} {v.peptide_name}: {v.remaining_mg:g} mg")
        expiring = self.db.expiring_vials(30)
        if expiring:
            print("\n⚠ Expiring within 30 days:")
            for v in expiring:
                print(f"   #{v.id} {v.peptide_name}: {v.expiration_date.strftime('%Y-%m-%d')}")

    def add_vial(self):
        """Add a vial to the inventory"""
        try:
            peptide_name = input("\nPeptide name: ").strip()
            if not peptide_name:
                print("\n⚠ Peptide name is required.")
                return
            quantity = float(input("Vial size (mg): "))
            water_raw = input("Bacteriostatic water added (ml, blank if not mixed yet): ").strip()
            expires_raw = input("Expiration date (YYYY-MM-DD, optional): ").strip()
            expires = datetime.combine(date.fromisoformat(expires_raw), datetime.min.time()) if expires_raw else None

            vial = self.db.add_vial(
                peptide_name=peptide_name,
                quantity_mg=quantity,
                diluent_volume_ml=float(water_raw) if water_raw else None,
                expiration_date=expires,
                batch_number=input("Batch number (optional): ").strip() or None,
                source=input("Source (optional): ").strip() or None,
            )
        except ValueError as e:
            print(f"\n⚠ Error: {e}")
            return

        print(f"\n✓ Added vial #{vial.id}")
        if vial.concentration_mcg_per_ml:
            print(f"  Concentration: {vial.concentration_mcg_per_ml:g} mcg/ml")

    def close(self):
        """Close database session"""
        self.session.close()


def main():
    """Run CLI application"""
    cli = PeptideCLI()

    try:
        cli.run()
    except KeyboardInterrupt:
        print("\n\nInterrupted by user. Exiting...")
    finally:
        cli.close()


if __name__ == "__main__":
    main()
