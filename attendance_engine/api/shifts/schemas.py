from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, model_validator

from attendance_engine.api.shifts.models import ShiftStatus


class ScheduledShiftCreate(BaseModel):
    worker_id: int
    location_id: Optional[int] = None
    work_date: date
    scheduled_start: datetime
    scheduled_end: datetime
    status: ShiftStatus = ShiftStatus.CONFIRMED

    @model_validator(mode='after')
    def validate_range(self) -> 'ScheduledShiftCreate':
        if self.scheduled_end <= self.scheduled_start:
            raise ValueError('scheduled_end must be after scheduled_start')
        return self
