from datetime import datetime, time, timedelta

from sqlalchemy.orm import Session

from attendance_engine.api.checkin_tokens.dependencies import get_token_issuer
from attendance_engine.api.checkin_tokens.schemas import TokenOptions
from attendance_engine.api.locations import schemas as location_schemas
from attendance_engine.api.locations.crud import location as location_crud
from attendance_engine.api.shifts import schemas as shift_schemas
from attendance_engine.api.shifts.crud import scheduled_shift as shift_crud
from attendance_engine.api.workers import schemas as worker_schemas
from attendance_engine.api.workers.crud import worker as worker_crud
from attendance_engine.core.database import SessionLocal, create_db
from attendance_engine.core.security import create_access_token
from attendance_engine.core.utils import current_time

DEMO_LOCATION = {
    'name': 'Demo Store Gangnam',
    'latitude': 37.4979,
    'longitude': 127.0276,
    'allowed_radius_meters': 100,
    'geofence_enabled': True,
    'early_window_minutes': 30,
}

DEMO_WORKERS = [
    {'name': 'Demo Worker One', 'email': 'worker1@example.com'},
    {'name': 'Demo Worker Two', 'email': 'worker2@example.com'},
]


def create_location(db: Session):
    print('Creating location...')
    location = location_crud.get_by_name(db, DEMO_LOCATION['name'])
    if not location:
        schema = location_schemas.LocationProfileCreate(**DEMO_LOCATION)
        location = location_crud.create(db, schema)
    print(f'Location created: {location.id} - {location.name}')
    return location


def create_workers(db: Session, location_id: int):
    print('Creating workers...')
    workers = []
    for data in DEMO_WORKERS:
        worker = worker_crud.get_by_email(db, data['email'])
        if not worker:
            schema = worker_schemas.WorkerCreate(
                **data, assigned_location_id=location_id
            )
            worker = worker_crud.create(db, schema)
        print(f'Worker created: {worker.id} - {worker.email}')
        workers.append(worker)
    return workers


def create_shifts(db: Session, workers, location_id: int, days: int = 7):
    print('Creating shifts...')
    today = current_time().date()
    for worker in workers:
        for offset in range(days):
            work_date = today + timedelta(days=offset)
            if shift_crud.get_shift_for_date(db, worker.id, work_date):
                continue
            start = datetime.combine(work_date, time(9, 0))
            schema = shift_schemas.ScheduledShiftCreate(
                worker_id=worker.id,
                location_id=location_id,
                work_date=work_date,
                scheduled_start=start,
                scheduled_end=start + timedelta(hours=8),
            )
            shift_crud.create(db, schema)
    print(f'Shifts created for the next {days} days')


def main():
    create_db()
    db = SessionLocal()
    try:
        location = create_location(db)
        workers = create_workers(db, location.id)
        create_shifts(db, workers, location.id)

        issued = get_token_issuer().issue(db, location.id, TokenOptions())
        print(f'Check-in token for {location.name}: {issued.token}')
        for worker in workers:
            access_token = create_access_token(
                {'worker_id': worker.id, 'email': worker.email}
            )
            print(f'Bearer token for {worker.email}: {access_token}')
    finally:
        db.close()


if __name__ == '__main__':
    main()
