from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from attendance_engine.api.base_crud import CRUDBase
from attendance_engine.api.shifts import models, schemas


class CRUDScheduledShift(
    CRUDBase[models.ScheduledShift, schemas.ScheduledShiftCreate]
):
    def get_shift_for_date(
        self, db: Session, worker_id: int, work_date: date
    ) -> Optional[models.ScheduledShift]:
        """Earliest non-cancelled shift of the worker on ``work_date``."""
        return (
            db.query(self.model)
            .filter(
                self.model.worker_id == worker_id,
                self.model.work_date == work_date,
                self.model.status != models.ShiftStatus.CANCELLED.value,
            )
            .order_by(self.model.scheduled_start)
            .first()
        )


scheduled_shift = CRUDScheduledShift(models.ScheduledShift)
