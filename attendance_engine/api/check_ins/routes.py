from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from attendance_engine.api.check_ins import schemas
from attendance_engine.api.check_ins.coordinator import (
    CheckInCoordinator,
    check_in_message,
)
from attendance_engine.api.check_ins.crud import check_in as check_in_crud
from attendance_engine.api.check_ins.dependencies import get_coordinator
from attendance_engine.core.database import get_db
from attendance_engine.core.exceptions.checkin_exceptions import (
    NotFoundError,
    NotFoundReason,
)
from attendance_engine.core.logger import logger
from attendance_engine.core.security import TokenData, get_current_user
from attendance_engine.core.utils import local_date

router = APIRouter()


@router.post('/', response_model=schemas.CheckInResponse)
def record_check_in(
    check_in: schemas.CheckInRequest,
    background_tasks: BackgroundTasks,
    current_user: TokenData = Depends(get_current_user),
    coordinator: CheckInCoordinator = Depends(get_coordinator),
    db: Session = Depends(get_db),
):
    logger.info('Check-in request from worker %s', current_user.worker_id)
    event = schemas.CheckInEvent(
        **check_in.model_dump(), worker_id=current_user.worker_id
    )
    record = coordinator.record(db, event, background_tasks)
    response = schemas.CheckInRecord.model_validate(record)
    return schemas.CheckInResponse(
        **response.model_dump(),
        message=check_in_message(record.timeliness_status),
    )


@router.get('/today', response_model=schemas.CheckInRecord)
def get_today_check_in(
    current_user: TokenData = Depends(get_current_user),
    coordinator: CheckInCoordinator = Depends(get_coordinator),
    db: Session = Depends(get_db),
):
    work_date = local_date(coordinator.clock(), coordinator.config.timezone)
    record = check_in_crud.get_for_worker_date(db, current_user.worker_id, work_date)
    if not record or record.checked_in_at is None:
        raise NotFoundError(
            NotFoundReason.CHECK_IN_NOT_FOUND,
            f'No check-in recorded for {work_date}',
        )
    return record
