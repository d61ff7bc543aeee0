from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from attendance_engine.api.check_ins.models import (
    AnomalySeverity,
    AnomalyType,
    CheckInMethod,
)
from attendance_engine.core.schedule import TimelinessStatus


class CheckInRequest(BaseModel):
    """Body of a worker's check-in. The worker comes from the bearer token."""

    token: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    device_info: Optional[dict[str, Any]] = None
    photo_url: Optional[str] = None
    unscheduled_reason: Optional[str] = None

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator('token', 'photo_url', 'unscheduled_reason')
    @classmethod
    def empty_to_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class CheckInEvent(CheckInRequest):
    worker_id: Optional[int] = None


class Anomaly(BaseModel):
    id: int
    anomaly_type: AnomalyType
    severity: AnomalySeverity
    description: Optional[str] = None
    details: Optional[dict[str, Any]] = None

    model_config = ConfigDict(
        from_attributes=True,
    )


class CheckInRecord(BaseModel):
    id: int
    worker_id: int
    location_id: int
    work_date: date
    checked_in_at: datetime
    method: CheckInMethod
    status: str
    timeliness_status: TimelinessStatus
    distance_meters: Optional[float] = None
    within_geofence: Optional[bool] = None
    scheduled_start: Optional[datetime] = None
    scheduled_end: Optional[datetime] = None
    anomalies: List[Anomaly] = []

    model_config = ConfigDict(
        from_attributes=True,
    )


class CheckInResponse(CheckInRecord):
    message: str
