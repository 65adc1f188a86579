"""
Pricing Database Models
"""
from sqlalchemy import (
    Column, String, DateTime, Boolean, Text, Numeric, ForeignKey,
    UniqueConstraint, CheckConstraint, Index,
)
from sqlalchemy.orm import relationship
from datetime import datetime

from dolu.db.database import Base, new_uuid


class ZoneRate(Base):
    """Directional base price between two zones (A->B may differ from B->A)."""

    __tablename__ = "pricing_zone_rates"

    id = Column(String(36), primary_key=True, default=new_uuid)
    from_zone_id = Column(String(36), ForeignKey("location_zones.id", ondelete="CASCADE"), nullable=False)
    to_zone_id = Column(String(36), ForeignKey("location_zones.id", ondelete="CASCADE"), nullable=False)
    base_price = Column(Numeric(10, 2), nullable=False, default=0)
    eta_text = Column(String(100), nullable=True)
    active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    from_zone = relationship("Zone", foreign_keys=[from_zone_id])
    to_zone = relationship("Zone", foreign_keys=[to_zone_id])

    __table_args__ = (
        UniqueConstraint("from_zone_id", "to_zone_id", name="uq_zone_rates_pair"),
        CheckConstraint("base_price >= 0", name="ck_zone_rates_base_price"),
        Index("ix_zone_rates_lookup", "from_zone_id", "to_zone_id", "active"),
    )

    def __repr__(self):
        return f"<ZoneRate {self.from_zone_id}->{self.to_zone_id} {self.base_price}>"


class Addon(Base):
    """Flat-fee optional service (e.g. FRAGILE, EXPRESS)."""

    __tablename__ = "pricing_addons"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(100), nullable=False, unique=True)
    code = Column(String(30), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    fee = Column(Numeric(10, 2), nullable=False, default=0)
    active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("fee >= 0", name="ck_addons_fee"),
    )

    def __repr__(self):
        return f"<Addon {self.code} {self.fee}>"


class ItemCategory(Base):
    """What is being shipped; some categories require a free-text description."""

    __tablename__ = "item_categories"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(100), nullable=False, unique=True)
    code = Column(String(30), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    requires_notes = Column(Boolean, default=False, nullable=False)
    active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
