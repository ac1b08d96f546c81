"""
Configuration for Peptide Dosing Toolkit
Values come from the environment, with a .env file loaded first
"""

import os
from dotenv import load_dotenv

load_dotenv()

LOCAL_SQLITE_URL = "sqlite:///peptide_toolkit.db"


class Config:
    """Toolkit settings"""

    # Any SQLAlchemy URL; local SQLite file when unset
    DATABASE_URL = os.getenv("DATABASE_URL") or LOCAL_SQLITE_URL

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")
    DEBUG = os.getenv("DEBUG", "False").lower() == "true"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Calculator / stack checker
    DEFAULT_SYRINGE = os.getenv("DEFAULT_SYRINGE", "u100")
    INTERACTION_RULES_FILE = os.getenv("INTERACTION_RULES_FILE", "")

    # Inventory
    LOW_STOCK_THRESHOLD_MG = float(os.getenv("LOW_STOCK_THRESHOLD_MG", "10"))

    @classmethod
    def get_database_url(cls, use_sqlite: bool = False) -> str:
        """Configured database URL, or the local SQLite file when ``use_sqlite``"""
        return LOCAL_SQLITE_URL if use_sqlite else cls.DATABASE_URL

    @classmethod
    def print_config(cls):
        """Show the active settings with credentials masked"""
        db_url = cls.DATABASE_URL
        if "@" in db_url:
            scheme, _, rest = db_url.partition("://")
            db_url = f"{scheme}://***@{rest.split('@', 1)[1]}"

        rows = [
            ("Database", db_url),
            ("Secret key", "set" if os.getenv("SECRET_KEY") else "development default"),
            ("Debug", cls.DEBUG),
            ("Log level", cls.LOG_LEVEL),
            ("Default syringe", cls.DEFAULT_SYRINGE),
            ("Interaction rules", cls.INTERACTION_RULES_FILE or "built-in"),
            ("Low stock at", f"{cls.LOW_STOCK_THRESHOLD_MG:g} mg"),
        ]
        print("\n" + "-" * 60)
        print("PEPTIDE DOSING TOOLKIT")
        print("-" * 60)
        for label, value in rows:
            print(f"{label:<18} {value}")
        print("-" * 60 + "\n")


if __name__ == "__main__":
    Config.print_config()
