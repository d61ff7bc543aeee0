from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String

from attendance_engine.core.database import Base
from attendance_engine.core.utils import current_time


class Worker(Base):
    __tablename__ = 'workers'

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        unique=True,
        index=True,
    )
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    assigned_location_id = Column(
        Integer, ForeignKey('locations.id'), index=True, nullable=True
    )
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=current_time)
    updated_at = Column(DateTime, default=current_time, onupdate=current_time)
