from enum import Enum

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String

from attendance_engine.core.database import Base
from attendance_engine.core.utils import current_time


class ShiftStatus(str, Enum):
    CONFIRMED = 'CONFIRMED'
    CANCELLED = 'CANCELLED'


class ScheduledShift(Base):
    __tablename__ = 'scheduled_shifts'

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        unique=True,
        index=True,
    )
    worker_id = Column(Integer, ForeignKey('workers.id'), index=True, nullable=False)
    location_id = Column(Integer, ForeignKey('locations.id'), nullable=True)
    work_date = Column(Date, index=True, nullable=False)
    scheduled_start = Column(DateTime, nullable=False)
    scheduled_end = Column(DateTime, nullable=False)
    status = Column(String, nullable=False, default=ShiftStatus.CONFIRMED.value)

    created_at = Column(DateTime, default=current_time)
    updated_at = Column(DateTime, default=current_time, onupdate=current_time)
