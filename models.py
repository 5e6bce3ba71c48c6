# models.py

from datetime import datetime
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from db import Base


class Park(Base):
    __tablename__ = "parks"
    id          = Column(Integer, primary_key=True, index=True)
    slug        = Column(String(100), nullable=False, unique=True)
    name        = Column(String(200), nullable=False)
    is_active   = Column(Boolean, nullable=False, default=True)
    created_at  = Column(DateTime, default=datetime.utcnow)

    path_prefixes = relationship("ParkPathPrefix", back_populates="park")
    attractions   = relationship("Attraction", back_populates="park")
    cameras       = relationship("ParkCamera", back_populates="park")


class ParkPathPrefix(Base):
    """Leading storage-path segment that routes uploads to a park."""

    __tablename__ = "park_path_prefixes"
    id          = Column(Integer, primary_key=True, index=True)
    park_id     = Column(Integer, ForeignKey("parks.id", ondelete="CASCADE"), nullable=False)
    path_prefix = Column(String(255), nullable=False, unique=True)
    is_active   = Column(Boolean, nullable=False, default=True)

    park = relationship("Park", back_populates="path_prefixes")


class Attraction(Base):
    __tablename__ = "attractions"
    id          = Column(Integer, primary_key=True, index=True)
    park_id     = Column(Integer, ForeignKey("parks.id", ondelete="CASCADE"), nullable=False)
    slug        = Column(String(100), nullable=False)
    name        = Column(String(200), nullable=False)
    is_active   = Column(Boolean, nullable=False, default=True)

    park    = relationship("Park", back_populates="attractions")
    cameras = relationship("ParkCamera", back_populates="attraction")


class ParkCamera(Base):
    """Physical camera identified by its 4-digit customer code within a park."""

    __tablename__ = "park_cameras"
    __table_args__ = (
        UniqueConstraint("park_id", "customer_code", name="uq_park_camera_code"),
    )

    id            = Column(Integer, primary_key=True, index=True)
    park_id       = Column(Integer, ForeignKey("parks.id", ondelete="CASCADE"), nullable=False)
    customer_code = Column(String(4), nullable=False)
    camera_name   = Column(String(100), nullable=True)
    attraction_id = Column(Integer, ForeignKey("attractions.id", ondelete="SET NULL"), nullable=True)
    is_active     = Column(Boolean, nullable=False, default=True)

    park       = relationship("Park", back_populates="cameras")
    attraction = relationship("Attraction", back_populates="cameras")


class Photo(Base):
    """Ingested ride photo.

    ``camera_code`` replaced ``source_customer_code``; deployments mid-migration
    may only carry one of the two columns.
    """

    __tablename__ = "photos"
    id                   = Column(Integer, primary_key=True, index=True)
    park_id              = Column(Integer, ForeignKey("parks.id", ondelete="SET NULL"), nullable=True)
    camera_code          = Column(String(4), nullable=True)
    source_customer_code = Column(String(4), nullable=True)
    attraction_id        = Column(Integer, ForeignKey("attractions.id", ondelete="SET NULL"), nullable=True)
    captured_at          = Column(DateTime, nullable=False)
    storage_bucket       = Column(String(100), nullable=False)
    storage_path         = Column(String(500), nullable=False)
    speed_kmh            = Column(Float, nullable=True)
    created_at           = Column(DateTime, default=datetime.utcnow)
