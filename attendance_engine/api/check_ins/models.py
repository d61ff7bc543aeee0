from enum import Enum
from typing import List

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, relationship

from attendance_engine.core.database import Base
from attendance_engine.core.utils import current_time

CHECK_IN_UNIQUE_CONSTRAINT = 'uix_check_in_worker_date'


class CheckInMethod(str, Enum):
    TOKEN = 'TOKEN'
    GEO = 'GEO'
    MANUAL = 'MANUAL'


class AnomalyType(str, Enum):
    LOCATION_OUTSIDE_GEOFENCE = 'LOCATION_OUTSIDE_GEOFENCE'


class AnomalySeverity(str, Enum):
    LOW = 'LOW'
    MEDIUM = 'MEDIUM'
    HIGH = 'HIGH'


class CheckInRecord(Base):
    __tablename__ = 'check_in_records'
    __table_args__ = (
        UniqueConstraint('worker_id', 'work_date', name=CHECK_IN_UNIQUE_CONSTRAINT),
    )

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        unique=True,
        index=True,
    )
    worker_id = Column(Integer, ForeignKey('workers.id'), index=True, nullable=False)
    location_id = Column(Integer, ForeignKey('locations.id'), nullable=True)
    work_date = Column(Date, nullable=False)
    # NULL only on placeholder rows written outside the engine
    checked_in_at = Column(DateTime, nullable=True)
    method = Column(String, nullable=True)
    token_id = Column(Integer, ForeignKey('checkin_tokens.id'), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    distance_meters = Column(Float, nullable=True)
    within_geofence = Column(Boolean, nullable=True)
    status = Column(String, nullable=True)
    timeliness_status = Column(String, nullable=True)
    scheduled_start = Column(DateTime, nullable=True)
    scheduled_end = Column(DateTime, nullable=True)
    device_info = Column(JSON, nullable=True)
    photo_url = Column(String, nullable=True)
    unscheduled_reason = Column(String, nullable=True)

    created_at = Column(DateTime, default=current_time)
    updated_at = Column(DateTime, default=current_time, onupdate=current_time)

    anomalies: Mapped[List['AnomalyRecord']] = relationship(
        'AnomalyRecord', back_populates='check_in', order_by='AnomalyRecord.id'
    )


class AnomalyRecord(Base):
    __tablename__ = 'check_in_anomalies'

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        unique=True,
        index=True,
    )
    check_in_id = Column(
        Integer, ForeignKey('check_in_records.id'), index=True, nullable=False
    )
    anomaly_type = Column(String, nullable=False)
    severity = Column(String, nullable=False)
    description = Column(String, nullable=True)
    details = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=current_time)

    check_in: Mapped['CheckInRecord'] = relationship(
        'CheckInRecord', back_populates='anomalies'
    )
