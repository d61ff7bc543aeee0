from datetime import date
from typing import Optional

from psycopg2 import errors as pg_errors
from pydantic import BaseModel
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from attendance_engine.api.base_crud import CRUDBase
from attendance_engine.api.check_ins import models
from attendance_engine.core.exceptions.checkin_exceptions import (
    DuplicateCheckInError,
    StoreError,
)
from attendance_engine.core.logger import logger


def _is_check_in_unique_violation(e: IntegrityError) -> bool:
    orig = e.orig
    if isinstance(orig, pg_errors.UniqueViolation):
        return orig.diag.constraint_name == models.CHECK_IN_UNIQUE_CONSTRAINT
    # sqlite reports the columns instead of the constraint name
    message = str(orig)
    return 'UNIQUE constraint failed' in message and (
        'check_in_records.worker_id' in message
        and 'check_in_records.work_date' in message
    )


class CRUDCheckInRecord(CRUDBase[models.CheckInRecord, BaseModel]):
    def get_for_worker_date(
        self, db: Session, worker_id: int, work_date: date
    ) -> Optional[models.CheckInRecord]:
        return (
            db.query(self.model)
            .filter(
                self.model.worker_id == worker_id,
                self.model.work_date == work_date,
            )
            .first()
        )

    def _claim_placeholder(
        self, db: Session, worker_id: int, work_date: date, values: dict
    ) -> Optional[models.CheckInRecord]:
        """Fill a row that exists for the day but was never checked in."""
        result = db.execute(
            update(self.model)
            .where(
                self.model.worker_id == worker_id,
                self.model.work_date == work_date,
                self.model.checked_in_at.is_(None),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        logger.info('Claimed placeholder check-in for worker %s', worker_id)
        record = self.get_for_worker_date(db, worker_id, work_date)
        db.refresh(record)
        return record

    def create_once(
        self, db: Session, worker_id: int, work_date: date, values: dict
    ) -> models.CheckInRecord:
        """Write the single check-in of ``worker_id`` for ``work_date``.

        The unique constraint on (worker_id, work_date) decides concurrent
        attempts: the loser gets DuplicateCheckInError. Any failure rolls the
        whole transaction back, including uncommitted work of the caller.
        The new row is flushed, not committed.
        """
        try:
            record = self._claim_placeholder(db, worker_id, work_date, values)
            if record:
                return record

            record = self.model(worker_id=worker_id, work_date=work_date, **values)
            db.add(record)
            db.flush()
            return record
        except IntegrityError as e:
            db.rollback()
            if _is_check_in_unique_violation(e):
                logger.error(
                    'Duplicate check-in for worker %s on %s', worker_id, work_date
                )
                raise DuplicateCheckInError(worker_id, work_date)
            existing = self.get_for_worker_date(db, worker_id, work_date)
            if existing and existing.checked_in_at is not None:
                raise DuplicateCheckInError(worker_id, work_date)
            logger.error('Integrity error storing check-in: %s', str(e))
            raise StoreError('Check-in violates a constraint')
        except SQLAlchemyError as e:
            db.rollback()
            logger.error('SQL error storing check-in: %s', str(e))
            raise StoreError(str(e))


check_in = CRUDCheckInRecord(models.CheckInRecord)
