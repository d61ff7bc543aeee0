from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String

from attendance_engine.core.database import Base
from attendance_engine.core.utils import current_time


class LocationProfile(Base):
    """A registered store the workforce checks in to."""

    __tablename__ = 'locations'

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        unique=True,
        index=True,
    )
    name = Column(String, nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    allowed_radius_meters = Column(Float, nullable=False, default=100)
    geofence_enabled = Column(Boolean, nullable=False, default=True)
    early_window_minutes = Column(Integer, nullable=False, default=30)

    created_at = Column(DateTime, default=current_time)
    updated_at = Column(DateTime, default=current_time, onupdate=current_time)
