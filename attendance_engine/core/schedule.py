from datetime import datetime, timedelta
from enum import Enum


class TimelinessStatus(str, Enum):
    UNSCHEDULED = 'UNSCHEDULED'
    LATE = 'LATE'
    EARLY = 'EARLY'
    NORMAL = 'NORMAL'


class ScheduleClassifier:
    def classify(
        self, shift, event_time: datetime, early_window_minutes: int
    ) -> TimelinessStatus:
        # Arriving exactly on time, or exactly at the start of the early
        # window, is NORMAL.
        if shift is None:
            return TimelinessStatus.UNSCHEDULED

        scheduled_start = shift.scheduled_start
        if event_time > scheduled_start:
            return TimelinessStatus.LATE
        if event_time < scheduled_start - timedelta(minutes=early_window_minutes):
            return TimelinessStatus.EARLY
        return TimelinessStatus.NORMAL
