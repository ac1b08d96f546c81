"""
Seed Database with Common Peptides
Populate the reference list used for dose defaults and the half-life chart
"""

from models import get_session, create_database
from database import PeptideDB
from config import Config


PEPTIDES_DATA = [
    {
        "name": "Semaglutide",
        "category": "GLP-1 Agonist",
        "half_life_hours": 168,
        "common_dosage": "0.25mg - 2.4mg weekly",
        "description": "A GLP-1 receptor agonist primarily used for weight loss and blood sugar management.",
    },
    {
        "name": "Tirzepatide",
        "category": "Dual GIP/GLP-1 Agonist",
        "half_life_hours": 120,
        "common_dosage": "2.5mg - 15mg weekly",
        "description": "Dual GIP and GLP-1 receptor agonist used for weight management and type 2 diabetes.",
    },
    {
        "name": "Liraglutide",
        "category": "GLP-1 Agonist",
        "half_life_hours": 13,
        "common_dosage": "0.6mg - 3.0mg daily",
        "description": "Daily GLP-1 receptor agonist.",
    },
    {
        "name": "Dulaglutide",
        "category": "GLP-1 Agonist",
        "half_life_hours": 120,
        "common_dosage": "0.75mg - 4.5mg weekly",
        "description": "Once-weekly GLP-1 receptor agonist.",
    },
    {
        "name": "Retatrutide",
        "category": "Triple Agonist (GLP-1/GIP/Glucagon)",
        "half_life_hours": 144,
        "common_dosage": "1-12mg weekly (trial ranges)",
        "description": "Investigational triple agonist.",
    },
    {
        "name": "BPC-157",
        "category": "Healing Peptide",
        "half_life_hours": 4,
        "common_dosage": "250-500mcg daily",
        "description": "Pentadecapeptide studied for soft tissue and gut healing.",
    },
    {
        "name": "TB-500 (Thymosin Beta-4)",
        "category": "Healing Peptide",
        "half_life_hours": 120,
        "common_dosage": "2-5mg twice weekly",
        "description": "Synthetic fragment of thymosin beta-4, often stacked with BPC-157.",
    },
    {
        "name": "Ipamorelin",
        "category": "Growth Hormone Secretagogue",
        "half_life_hours": 2,
        "common_dosage": "200-300mcg 2-3 times daily",
        "description": "Selective GH secretagogue (GHRP).",
    },
    {
        "name": "CJC-1295 (no DAC)",
        "category": "Growth Hormone Releasing Hormone",
        "half_life_hours": 0.5,
        "common_dosage": "100-200mcg 2-3 times daily",
        "description": "Short-acting GHRH analogue, also sold as Mod GRF 1-29.",
    },
    {
        "name": "CJC-1295 (DAC)",
        "category": "Growth Hormone Releasing Hormone",
        "half_life_hours": 168,
        "common_dosage": "1-2mg once weekly",
        "description": "Long-acting GHRH analogue with drug affinity complex.",
    },
    {
        "name": "MK-677 (Ibutamoren)",
        "category": "Growth Hormone Secretagogue",
        "half_life_hours": 24,
        "common_dosage": "10-25mg orally daily",
        "description": "Oral ghrelin mimetic.",
    },
    {
        "name": "Melanotan II",
        "category": "Melanocortin Agonist",
        "half_life_hours": 1,
        "common_dosage": "0.25-1mg daily",
        "description": "Melanocortin agonist used for tanning.",
    },
    {
        "name": "PT-141 (Bremelanotide)",
        "category": "Melanocortin Agonist",
        "half_life_hours": 2.5,
        "common_dosage": "1.25-1.75mg as needed",
        "description": "Melanocortin agonist for sexual health.",
    },
    {
        "name": "GHK-Cu (Copper Peptide)",
        "category": "Healing & Anti-Aging",
        "half_life_hours": 1,
        "common_dosage": "1-3mg 2-3 times weekly",
        "description": "Copper tripeptide studied for skin and wound healing.",
    },
    {
        "name": "AOD-9604",
        "category": "Metabolic & Fat Loss",
        "half_life_hours": 2.5,
        "common_dosage": "250-500mcg daily",
        "description": "Modified fragment of hGH (176-191).",
    },
    {
        "name": "MOTS-c",
        "category": "Metabolic & Mitochondrial",
        "half_life_hours": 3,
        "common_dosage": "10-20mg weekly (split doses)",
        "description": "Mitochondria-derived peptide.",
    },
    {
        "name": "Selank",
        "category": "Cognitive & Anxiolytic",
        "half_life_hours": 0.75,
        "common_dosage": "250-750mcg 1-3 times daily (nasal or subcutaneous)",
        "description": "Anxiolytic tuftsin analogue.",
    },
    {
        "name": "Semax",
        "category": "Cognitive & Nootropic",
        "half_life_hours": 0.75,
        "common_dosage": "200-600mcg 1-3 times daily (nasal)",
        "description": "ACTH(4-10) analogue.",
    },
    {
        "name": "Thymosin Alpha-1",
        "category": "Immune Modulator",
        "half_life_hours": 2,
        "common_dosage": "1.6mg 2-3 times weekly",
        "description": "Immune-modulating thymic peptide.",
    },
]


def seed_common_peptides(session, verbose: bool = True) -> int:
    """Add the common peptides that are not already present; returns how many were added"""
    db = PeptideDB(session)
    added = 0

    for data in PEPTIDES_DATA:
        if db.get_peptide_by_name(data["name"]):
            continue
        db.add_peptide(**data)
        added += 1
        if verbose:
            print(f"✓ Added {data['name']}")

    if verbose:
        print(f"\n{'='*60}")
        print(f"Seeded {added} peptides ({len(PEPTIDES_DATA) - added} already present)")
        print("="*60 + "\n")
    return added


def main():
    """Run seeding script"""
    db_url = Config.DATABASE_URL
    print(f"Using database: {db_url}")

    # Create tables if they don't exist
    create_database(db_url)

    session = get_session(db_url)
    try:
        seed_common_peptides(session)
    finally:
        session.close()


if __name__ == "__main__":
    main()
