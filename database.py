"""
Database Operations
Reference peptide lookups, vial inventory and the injection log
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models import Peptide, Injection, Vial
from units import DoseUnit, convert_dose, parse_dose_unit

logger = logging.getLogger(__name__)

# A vial with this many mg or fewer left (but not empty) is low on stock
LOW_STOCK_THRESHOLD_MG = 10.0


class PeptideDB:
    """Thin repository over a SQLAlchemy session"""

    def __init__(self, session: Session, low_stock_threshold_mg: float = LOW_STOCK_THRESHOLD_MG):
        self.session = session
        self.low_stock_threshold_mg = low_stock_threshold_mg

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        return obj

    # ==================== REFERENCE PEPTIDES ====================

    def add_peptide(self, name: str, **fields) -> Peptide:
        """Insert a reference peptide (category, half_life_hours, common_dosage, description)"""
        return self._save(Peptide(name=name, **fields))

    def get_peptide(self, peptide_id: int) -> Optional[Peptide]:
        return self.session.get(Peptide, peptide_id)

    def get_peptide_by_name(self, name: str) -> Optional[Peptide]:
        """Exact name match, ignoring case and surrounding whitespace"""
        wanted = (name or "").strip()
        if not wanted:
            return None
        return self.session.query(Peptide).filter(Peptide.name.ilike(wanted)).first()

    def list_peptides(self, category: Optional[str] = None) -> List[Peptide]:
        """Alphabetical; ``category`` narrows to one category"""
        query = self.session.query(Peptide)
        if category:
            query = query.filter(Peptide.category == category)
        return query.order_by(Peptide.name).all()

    def update_peptide(self, peptide_id: int, **changes) -> Optional[Peptide]:
        """Apply known column changes; unknown keys are ignored"""
        peptide = self.get_peptide(peptide_id)
        if peptide is None:
            return None
        for column, value in changes.items():
            if column in Peptide.__table__.columns.keys() and column != "id":
                setattr(peptide, column, value)
        peptide.updated_at = datetime.utcnow()
        self.session.commit()
        return peptide

    # ==================== VIAL INVENTORY ====================

    def add_vial(
        self,
        peptide_name: str,
        quantity_mg: float,
        diluent_volume_ml: Optional[float] = None,
        purchase_date: Optional[datetime] = None,
        expiration_date: Optional[datetime] = None,
        batch_number: Optional[str] = None,
        source: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Vial:
        """Add a full vial; reconstituted right away when ``diluent_volume_ml`` is given"""
        if quantity_mg <= 0:
            raise ValueError("Vial quantity must be greater than 0")

        vial = Vial(
            peptide_name=peptide_name,
            quantity_mg=quantity_mg,
            remaining_mg=quantity_mg,
            purchase_date=purchase_date,
            expiration_date=expiration_date,
            batch_number=batch_number,
            source=source,
            notes=notes,
            is_active=True,
        )
        if diluent_volume_ml is not None:
            if diluent_volume_ml <= 0:
                raise ValueError("Water volume must be greater than 0")
            vial.reconstitute(diluent_volume_ml)
        return self._save(vial)

    def get_vial(self, vial_id: int) -> Optional[Vial]:
        return self.session.get(Vial, vial_id)

    def list_vials(self, peptide_name: Optional[str] = None, include_inactive: bool = False) -> List[Vial]:
        """Vials oldest first; ``peptide_name`` matches exactly, ignoring case"""
        query = self.session.query(Vial)
        if not include_inactive:
            query = query.filter(Vial.is_active.is_(True))
        if peptide_name:
            query = query.filter(Vial.peptide_name.ilike(peptide_name.strip()))
        return query.order_by(Vial.created_at, Vial.id).all()

    def reconstitute_vial(
        self,
        vial_id: int,
        diluent_volume_ml: float,
        when: Optional[datetime] = None,
    ) -> Optional[Vial]:
        if diluent_volume_ml <= 0:
            raise ValueError("Water volume must be greater than 0")
        vial = self.get_vial(vial_id)
        if vial is None:
            return None
        vial.reconstitute(diluent_volume_ml, when)
        self.session.commit()
        return vial

    def deactivate_vial(self, vial_id: int) -> Optional[Vial]:
        """Mark a vial used up or discarded"""
        vial = self.get_vial(vial_id)
        if vial is not None:
            vial.is_active = False
            self.session.commit()
        return vial

    def _draw_from_inventory(self, peptide_name: str, amount_mg: float) -> Optional[Vial]:
        """Take ``amount_mg`` from the oldest active vial with stock left (no commit)"""
        vial = (
            self.session.query(Vial)
            .filter(
                Vial.is_active.is_(True),
                Vial.remaining_mg > 0,
                Vial.peptide_name.ilike(peptide_name.strip()),
            )
            .order_by(Vial.created_at, Vial.id)
            .first()
        )
        if vial is None:
            logger.debug("No inventory for %s; nothing deducted", peptide_name)
            return None

        vial.remaining_mg = max(0.0, vial.remaining_mg - amount_mg)
        if 0 < vial.remaining_mg <= self.low_stock_threshold_mg:
            logger.warning("Low stock: %s vial %s has %.2f mg left", vial.peptide_name, vial.id, vial.remaining_mg)
        return vial

    def deduct_from_inventory(self, peptide_name: str, amount_mg: float) -> Optional[Vial]:
        """FIFO deduction; returns the vial drawn from, or None when there is no stock"""
        vial = self._draw_from_inventory(peptide_name, amount_mg)
        if vial is not None:
            self.session.commit()
        return vial

    def low_stock_vials(self) -> List[Vial]:
        """Active vials that are nearly, but not completely, used up"""
        return (
            self.session.query(Vial)
            .filter(
                Vial.is_active.is_(True),
                Vial.remaining_mg > 0,
                Vial.remaining_mg <= self.low_stock_threshold_mg,
            )
            .order_by(Vial.remaining_mg)
            .all()
        )

    def expiring_vials(self, days_ahead: int = 30, now: Optional[datetime] = None) -> List[Vial]:
        """Vials with stock left that expire within ``days_ahead`` days (or already have)"""
        cutoff = (now or datetime.utcnow()) + timedelta(days=days_ahead)
        return (
            self.session.query(Vial)
            .filter(
                Vial.is_active.is_(True),
                Vial.remaining_mg > 0,
                Vial.expiration_date.isnot(None),
                Vial.expiration_date <= cutoff,
            )
            .order_by(Vial.expiration_date)
            .all()
        )

    def total_stock_mg(self, peptide_name: Optional[str] = None) -> float:
        """Sum of mg left across active vials"""
        query = self.session.query(func.coalesce(func.sum(Vial.remaining_mg), 0.0)).filter(
            Vial.is_active.is_(True)
        )
        if peptide_name:
            query = query.filter(Vial.peptide_name.ilike(peptide_name.strip()))
        return float(query.scalar())

    # ==================== INJECTION LOG ====================

    def log_injection(
        self,
        peptide_name: str,
        dose_amount: float,
        dose_unit: str = "mcg",
        timestamp: Optional[datetime] = None,
        injection_site: Optional[str] = None,
        notes: Optional[str] = None,
        deduct: bool = True,
    ) -> Injection:
        """
        Record one dose

        Args:
            timestamp: Naive UTC; defaults to now
            deduct: Take the dose out of the oldest matching vial (mg/mcg doses only)
        """
        vial = None
        unit = parse_dose_unit(dose_unit)
        if deduct and unit is not DoseUnit.IU:
            vial = self._draw_from_inventory(peptide_name, convert_dose(dose_amount, unit, DoseUnit.MG))

        return self._save(
            Injection(
                peptide_name=peptide_name,
                vial_id=vial.id if vial is not None else None,
                dose_amount=dose_amount,
                dose_unit=unit.value,
                timestamp=timestamp or datetime.utcnow(),
                injection_site=injection_site,
                notes=notes,
            )
        )

    def get_recent_injections(self, days: int = 7) -> List[Injection]:
        """Injections from the last ``days`` days, newest first"""
        since = datetime.utcnow() - timedelta(days=days)
        query = self.session.query(Injection).filter(Injection.timestamp >= since)
        return query.order_by(Injection.timestamp.desc()).all()

    def list_injections(self, peptide_name: Optional[str] = None) -> List[Injection]:
        """All injections, oldest first; ``peptide_name`` filters by substring"""
        query = self.session.query(Injection)
        if peptide_name:
            query = query.filter(Injection.peptide_name.ilike(f"%{peptide_name.strip()}%"))
        return query.order_by(Injection.timestamp).all()
