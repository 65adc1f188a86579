"""
Location Hierarchy Database Models

State -> City -> Zone / Area. Areas are assigned to pricing zones; an area
without a zone cannot be priced.
"""
from sqlalchemy import Column, String, DateTime, Boolean, Text, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

from dolu.db.database import Base, new_uuid


class State(Base):
    """Top level of the location hierarchy."""

    __tablename__ = "locations_states"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String(100), nullable=False, unique=True)
    code = Column(String(10), nullable=False, unique=True)
    active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    cities = relationship("City", back_populates="state")

    def __repr__(self):
        return f"<State {self.code} {self.name}>"


class City(Base):
    """City within a state."""

    __tablename__ = "locations_cities"

    id = Column(String(36), primary_key=True, default=new_uuid)
    state_id = Column(String(36), ForeignKey("locations_states.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    state = relationship("State", back_populates="cities")
    zones = relationship("Zone", back_populates="city")
    areas = relationship("Area", back_populates="city")

    __table_args__ = (
        UniqueConstraint("state_id", "name", name="uq_cities_state_name"),
    )

    def __repr__(self):
        return f"<City {self.name}>"


class Zone(Base):
    """Pricing zone, scoped to one city."""

    __tablename__ = "location_zones"

    id = Column(String(36), primary_key=True, default=new_uuid)
    city_id = Column(String(36), ForeignKey("locations_cities.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    city = relationship("City", back_populates="zones")
    areas = relationship("Area", back_populates="zone")

    __table_args__ = (
        UniqueConstraint("city_id", "name", name="uq_zones_city_name"),
    )

    def __repr__(self):
        return f"<Zone {self.name}>"


class Area(Base):
    """Neighbourhood customers pick from; optionally assigned to a zone."""

    __tablename__ = "locations_areas"

    id = Column(String(36), primary_key=True, default=new_uuid)
    city_id = Column(String(36), ForeignKey("locations_cities.id", ondelete="CASCADE"), nullable=False, index=True)
    zone_id = Column(String(36), ForeignKey("location_zones.id", ondelete="SET NULL"), nullable=True, index=True)
    name = Column(String(100), nullable=False)
    active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    city = relationship("City", back_populates="areas")
    zone = relationship("Zone", back_populates="areas")

    __table_args__ = (
        UniqueConstraint("city_id", "name", name="uq_areas_city_name"),
    )

    def __repr__(self):
        return f"<Area {self.name} zone={self.zone_id}>"
