from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from attendance_engine.core.database import Base
from attendance_engine.core.utils import current_time


class UsageMode(str, Enum):
    SINGLE_USE = 'single_use'
    BOUNDED = 'bounded'
    UNLIMITED = 'unlimited'


class TokenStatus(str, Enum):
    ACTIVE = 'ACTIVE'
    CONSUMED = 'CONSUMED'
    USAGE_EXCEEDED = 'USAGE_EXCEEDED'
    EXPIRED = 'EXPIRED'
    REVOKED = 'REVOKED'


class CheckInToken(Base):
    """A signed check-in token bound to one location.

    Rows are never deleted; revocation only flips ``is_active``.
    """

    __tablename__ = 'checkin_tokens'

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        unique=True,
        index=True,
    )
    location_id = Column(
        Integer, ForeignKey('locations.id'), index=True, nullable=False
    )
    token = Column(Text, nullable=False)
    nonce = Column(String, unique=True, index=True, nullable=False)
    issued_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    usage_mode = Column(String, nullable=False, default=UsageMode.BOUNDED.value)
    max_uses = Column(Integer, nullable=True)
    current_uses = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    revoked_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=current_time)
    updated_at = Column(DateTime, default=current_time, onupdate=current_time)

    @property
    def exhausted(self) -> bool:
        if self.usage_mode == UsageMode.UNLIMITED.value or self.max_uses is None:
            return False
        return (self.current_uses or 0) >= self.max_uses

    def lifecycle_status(self, now: datetime) -> TokenStatus:
        if not self.is_active:
            return TokenStatus.REVOKED
        if self.exhausted:
            if self.usage_mode == UsageMode.SINGLE_USE.value:
                return TokenStatus.CONSUMED
            return TokenStatus.USAGE_EXCEEDED
        if now >= self.expires_at:
            return TokenStatus.EXPIRED
        return TokenStatus.ACTIVE
