# Import all models here so SQLAlchemy knows every table before create_all
from attendance_engine.api.check_ins.models import AnomalyRecord, CheckInRecord
from attendance_engine.api.checkin_tokens.models import CheckInToken
from attendance_engine.api.locations.models import LocationProfile
from attendance_engine.api.shifts.models import ScheduledShift
from attendance_engine.api.workers.models import Worker

# Re-export all models
__all__ = [
    'AnomalyRecord',
    'CheckInRecord',
    'CheckInToken',
    'LocationProfile',
    'ScheduledShift',
    'Worker',
]
