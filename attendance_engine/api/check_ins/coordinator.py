from datetime import datetime
from typing import Callable, Optional

from fastapi import BackgroundTasks
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from attendance_engine.api.check_ins import models, schemas
from attendance_engine.api.check_ins.crud import check_in as check_in_crud
from attendance_engine.api.check_ins.notifier import AnomalyNotifier
from attendance_engine.api.checkin_tokens.schemas import VerifyFailure
from attendance_engine.api.checkin_tokens.verifier import TokenVerifier
from attendance_engine.api.locations.crud import location as location_crud
from attendance_engine.api.shifts.crud import scheduled_shift as shift_crud
from attendance_engine.api.workers.crud import worker as worker_crud
from attendance_engine.core.config import EngineConfig
from attendance_engine.core.exceptions.checkin_exceptions import (
    AuthenticationError,
    CheckInError,
    CheckInValidationError,
    NotFoundError,
    NotFoundReason,
    StoreError,
)
from attendance_engine.core.geofence import (
    Coordinate,
    GeofenceEvaluator,
    GeofenceResult,
)
from attendance_engine.core.logger import logger
from attendance_engine.core.schedule import ScheduleClassifier, TimelinessStatus
from attendance_engine.core.utils import current_time, local_date

PRESENT = 'PRESENT'

MESSAGES = {
    TimelinessStatus.NORMAL: 'Checked in successfully',
    TimelinessStatus.EARLY: 'Checked in successfully (early arrival)',
    TimelinessStatus.LATE: 'Checked in late',
    TimelinessStatus.UNSCHEDULED: (
        'Checked in without a scheduled shift. '
        'A manager has to approve it before it counts toward payroll.'
    ),
}


def check_in_message(timeliness_status: str) -> str:
    return MESSAGES[TimelinessStatus(timeliness_status)]


def _parse_coordinate(event: schemas.CheckInEvent) -> Optional[Coordinate]:
    if event.latitude is None and event.longitude is None:
        return None
    if event.latitude is None or event.longitude is None:
        raise CheckInValidationError(
            'latitude and longitude must be provided together'
        )
    try:
        return Coordinate(latitude=event.latitude, longitude=event.longitude)
    except ValidationError:
        raise CheckInValidationError(
            'latitude must be within [-90, 90] and longitude within [-180, 180]'
        )


class CheckInCoordinator:
    """Records one attendance event for a worker.

    Resolves the location (token or the worker's assigned location), runs
    the geofence and schedule checks and writes the single check-in of the
    day. Everything the engine writes for one event commits together, or
    not at all.
    """

    def __init__(
        self,
        config: EngineConfig,
        verifier: TokenVerifier,
        workers=worker_crud,
        schedules=shift_crud,
        locations=location_crud,
        records=check_in_crud,
        notifier: Optional[AnomalyNotifier] = None,
        clock: Callable[[], datetime] = current_time,
    ):
        self.config = config
        self.verifier = verifier
        self.workers = workers
        self.schedules = schedules
        self.locations = locations
        self.records = records
        self.notifier = notifier or AnomalyNotifier()
        self.clock = clock
        self.geofence = GeofenceEvaluator(config.default_radius_meters)
        self.classifier = ScheduleClassifier()

    def record(
        self,
        db: Session,
        event: schemas.CheckInEvent,
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> models.CheckInRecord:
        """Store the check-in and notify about its anomalies.

        With ``background_tasks`` the notifier runs after the response is
        sent; otherwise it runs before returning.
        """
        if event.worker_id is None:
            raise CheckInValidationError('worker_id is required')
        coordinate = _parse_coordinate(event)
        if not event.token and coordinate is None:
            raise CheckInValidationError(
                'A check-in token or the current coordinates are required'
            )

        try:
            record, anomalies = self._record(db, event, coordinate)
        except CheckInError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.error('SQL error recording check-in: %s', str(e))
            raise StoreError(str(e))

        # Snapshots, the session may be gone when a background task runs
        record_view = schemas.CheckInRecord.model_validate(record)
        for anomaly in anomalies:
            anomaly_view = schemas.Anomaly.model_validate(anomaly)
            if background_tasks is not None:
                background_tasks.add_task(self._notify, anomaly_view, record_view)
            else:
                self._notify(anomaly_view, record_view)
        return record

    def _record(self, db: Session, event: schemas.CheckInEvent, coordinate):
        worker_id = event.worker_id
        if not self.workers.get_worker(db, worker_id):
            raise NotFoundError(
                NotFoundReason.WORKER_NOT_FOUND, f'Worker {worker_id} not found'
            )

        token_id = None
        if event.token:
            result = self.verifier.verify(db, event.token)
            if isinstance(result, VerifyFailure):
                raise AuthenticationError(result.message, result.error.value)
            location_id = result.location_id
            token_id = result.token_id
            method = models.CheckInMethod.TOKEN
        else:
            location_id = self.workers.get_assigned_location(db, worker_id)
            if location_id is None:
                logger.error('Worker %s has no assigned location', worker_id)
                raise NotFoundError(
                    NotFoundReason.NO_ASSIGNED_LOCATION,
                    f'Worker {worker_id} has no assigned location',
                )
            method = models.CheckInMethod.GEO

        location = self.locations.get_profile(db, location_id)
        if not location:
            logger.error('Location %s not found', location_id)
            raise NotFoundError(
                NotFoundReason.LOCATION_NOT_FOUND, f'Location {location_id} not found'
            )

        geofence = self.geofence.evaluate(location, coordinate)

        now = self.clock()
        work_date = local_date(now, self.config.timezone)
        shift = self.schedules.get_shift_for_date(db, worker_id, work_date)
        early_window = location.early_window_minutes
        if early_window is None:
            early_window = self.config.default_early_window_minutes
        timeliness = self.classifier.classify(shift, now, early_window)

        values = {
            'location_id': location_id,
            'checked_in_at': now,
            'method': method.value,
            'token_id': token_id,
            'latitude': coordinate.latitude if coordinate else None,
            'longitude': coordinate.longitude if coordinate else None,
            'distance_meters': geofence.distance,
            'within_geofence': geofence.within_radius if geofence.evaluated else None,
            'status': PRESENT,
            'timeliness_status': timeliness.value,
            'scheduled_start': shift.scheduled_start if shift else None,
            'scheduled_end': shift.scheduled_end if shift else None,
            'device_info': event.device_info,
            'photo_url': event.photo_url,
            'unscheduled_reason': (
                event.unscheduled_reason
                if timeliness == TimelinessStatus.UNSCHEDULED
                else None
            ),
        }
        record = self.records.create_once(db, worker_id, work_date, values)

        anomalies = []
        if not geofence.within_radius:
            anomaly = self._outside_geofence_anomaly(
                record, location, coordinate, geofence
            )
            db.add(anomaly)
            anomalies.append(anomaly)

        try:
            db.commit()
        except SQLAlchemyError as e:
            logger.error('Error committing check-in: %s', str(e))
            raise StoreError(str(e))
        db.refresh(record)

        logger.info(
            'Worker %s checked in at location %s via %s: %s',
            worker_id,
            location_id,
            method.value,
            timeliness.value,
        )
        return record, anomalies

    def _outside_geofence_anomaly(
        self,
        record: models.CheckInRecord,
        location,
        coordinate: Coordinate,
        geofence: GeofenceResult,
    ) -> models.AnomalyRecord:
        logger.info(
            'Check-in %s is %.1fm from location %s (allowed %sm)',
            record.id,
            geofence.distance,
            location.id,
            geofence.allowed_radius,
        )
        return models.AnomalyRecord(
            check_in_id=record.id,
            anomaly_type=models.AnomalyType.LOCATION_OUTSIDE_GEOFENCE.value,
            severity=models.AnomalySeverity.MEDIUM.value,
            description='Check-in location is outside the allowed radius',
            details={
                'expected': {'lat': location.latitude, 'lng': location.longitude},
                'actual': {'lat': coordinate.latitude, 'lng': coordinate.longitude},
                'distance_meters': round(geofence.distance),
                'allowed_radius_meters': geofence.allowed_radius,
            },
        )

    def _notify(self, anomaly: schemas.Anomaly, record: schemas.CheckInRecord):
        try:
            self.notifier.notify(anomaly, record)
        except Exception:
            logger.exception('Failed to notify anomaly %s', anomaly.id)
