"""
Peptide Toolkit Database Models
SQLAlchemy ORM models for the peptide reference list, vial inventory and injection log

All DateTime columns hold naive UTC.
"""

from datetime import datetime
from functools import lru_cache

from sqlalchemy import create_engine, Boolean, Column, Integer, String, Float, Text, DateTime, ForeignKey
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

Base = declarative_base()


class Peptide(Base):
    """Reference information for one compound"""
    __tablename__ = 'peptides'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    category = Column(String(100), index=True)
    half_life_hours = Column(Float)
    common_dosage = Column(String(200))  # e.g. "250-500mcg daily"
    description = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "half_life_hours": self.half_life_hours,
            "common_dosage": self.common_dosage,
            "description": self.description,
        }

    def __repr__(self):
        return f"<Peptide(name='{self.name}', category='{self.category}')>"


class Vial(Base):
    """One vial in the inventory, tracked by the mg still in it"""
    __tablename__ = 'vials'

    id = Column(Integer, primary_key=True)
    peptide_name = Column(String(100), nullable=False, index=True)

    quantity_mg = Column(Float, nullable=False)
    remaining_mg = Column(Float, nullable=False)
    diluent_volume_ml = Column(Float)  # BAC water added, None while still powder
    concentration_mcg_per_ml = Column(Float)

    purchase_date = Column(DateTime)
    reconstitution_date = Column(DateTime)
    expiration_date = Column(DateTime)
    batch_number = Column(String(50))
    source = Column(String(100))  # vendor

    is_active = Column(Boolean, nullable=False, default=True)
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    injections = relationship("Injection", back_populates="vial")

    def reconstitute(self, diluent_volume_ml, when=None):
        """Record the water added and the resulting concentration"""
        self.diluent_volume_ml = diluent_volume_ml
        self.concentration_mcg_per_ml = self.quantity_mg * 1000 / diluent_volume_ml
        self.reconstitution_date = when or datetime.utcnow()
        return self.concentration_mcg_per_ml

    def doses_remaining(self, dose_mcg):
        """Whole doses of ``dose_mcg`` left in the vial"""
        if not dose_mcg or dose_mcg <= 0:
            return None
        return int(self.remaining_mg * 1000 // dose_mcg)

    def to_dict(self):
        def iso(value):
            return value.isoformat() if value else None

        return {
            "id": self.id,
            "peptide_name": self.peptide_name,
            "quantity_mg": self.quantity_mg,
            "remaining_mg": self.remaining_mg,
            "diluent_volume_ml": self.diluent_volume_ml,
            "concentration_mcg_per_ml": self.concentration_mcg_per_ml,
            "purchase_date": iso(self.purchase_date),
            "reconstitution_date": iso(self.reconstitution_date),
            "expiration_date": iso(self.expiration_date),
            "batch_number": self.batch_number,
            "source": self.source,
            "is_active": self.is_active,
            "notes": self.notes,
        }

    def __repr__(self):
        return f"<Vial(peptide='{self.peptide_name}', remaining={self.remaining_mg}/{self.quantity_mg}mg)>"


class Injection(Base):
    """Individual injection log"""
    __tablename__ = 'injections'

    id = Column(Integer, primary_key=True)
    peptide_name = Column(String(100), nullable=False, index=True)
    vial_id = Column(Integer, ForeignKey('vials.id'))  # vial the dose was drawn from, if tracked

    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    dose_amount = Column(Float, nullable=False)
    dose_unit = Column(String(10), nullable=False, default="mcg")
    injection_site = Column(String(100))  # e.g., "abdomen", "thigh"
    notes = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow)

    vial = relationship("Vial", back_populates="injections")

    def to_dict(self):
        return {
            "id": self.id,
            "peptide_name": self.peptide_name,
            "vial_id": self.vial_id,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "dose_amount": self.dose_amount,
            "dose_unit": self.dose_unit,
            "injection_site": self.injection_site,
            "notes": self.notes,
        }

    def __repr__(self):
        return f"<Injection(peptide='{self.peptide_name}', dose={self.dose_amount}{self.dose_unit}, time={self.timestamp})>"


@lru_cache(maxsize=None)
def get_engine(db_url="sqlite:///peptide_toolkit.db"):
    """Engine for a database URL"""
    return create_engine(db_url, echo=False)


def create_database(db_url="sqlite:///peptide_toolkit.db"):
    """Create all tables in the database"""
    engine = get_engine(db_url)
    Base.metadata.create_all(engine)
    return engine


def get_session(db_url="sqlite:///peptide_toolkit.db"):
    """Get a database session"""
    Session = sessionmaker(bind=get_engine(db_url))
    return Session()


if __name__ == "__main__":
    from config import Config

    print("Creating database tables...")
    create_database(Config.DATABASE_URL)
    print("Database tables created successfully!")
