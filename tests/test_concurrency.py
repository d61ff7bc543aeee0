from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from threading import Barrier

from attendance_engine.api.check_ins.models import CheckInRecord
from attendance_engine.api.check_ins.schemas import CheckInEvent
from attendance_engine.api.checkin_tokens.models import CheckInToken, UsageMode
from attendance_engine.api.checkin_tokens.schemas import TokenOptions
from attendance_engine.api.locations.models import LocationProfile
from attendance_engine.api.shifts.models import ScheduledShift
from attendance_engine.api.workers.models import Worker
from attendance_engine.core.exceptions.checkin_exceptions import (
    AuthenticationError,
    DuplicateCheckInError,
)
from tests.conftest import STORE_LATITUDE, STORE_LONGITUDE

THREADS = 8


def _seed(session, workers: int = 1) -> int:
    location = LocationProfile(
        name='Test Store',
        latitude=STORE_LATITUDE,
        longitude=STORE_LONGITUDE,
        allowed_radius_meters=100,
    )
    session.add(location)
    session.commit()

    start = datetime(2026, 3, 2, 9, 0)
    for worker_id in range(1, workers + 1):
        session.add(
            Worker(
                id=worker_id,
                name=f'Worker {worker_id}',
                email=f'worker{worker_id}@example.com',
                assigned_location_id=location.id,
            )
        )
        session.add(
            ScheduledShift(
                worker_id=worker_id,
                work_date=start.date(),
                scheduled_start=start,
                scheduled_end=start + timedelta(hours=8),
            )
        )
    session.commit()
    return location.id


def _run_together(count: int, func):
    barrier = Barrier(count)

    def _task(index):
        barrier.wait()
        return func(index)

    with ThreadPoolExecutor(max_workers=count) as executor:
        return list(executor.map(_task, range(count)))


def test_concurrent_check_ins_store_one_record(file_session_factory, coordinator):
    setup = file_session_factory()
    _seed(setup)
    setup.close()

    event = CheckInEvent(
        worker_id=1, latitude=STORE_LATITUDE, longitude=STORE_LONGITUDE
    )

    def _check_in(_):
        session = file_session_factory()
        try:
            coordinator.record(session, event)
            return 'ok'
        except DuplicateCheckInError:
            return 'duplicate'
        finally:
            session.close()

    outcomes = _run_together(THREADS, _check_in)

    assert outcomes.count('ok') == 1
    assert outcomes.count('duplicate') == THREADS - 1

    session = file_session_factory()
    assert session.query(CheckInRecord).filter_by(worker_id=1).count() == 1
    session.close()


def test_concurrent_verifications_respect_budget(
    file_session_factory, issuer, verifier
):
    setup = file_session_factory()
    location_id = _seed(setup)
    options = TokenOptions(usage_mode=UsageMode.BOUNDED, max_uses=3)
    issued = issuer.issue(setup, location_id, options)
    setup.close()

    def _verify(_):
        session = file_session_factory()
        try:
            return verifier.verify(session, issued.token, commit=True).ok
        finally:
            session.close()

    results = _run_together(10, _verify)

    assert results.count(True) == 3
    session = file_session_factory()
    assert session.get(CheckInToken, issued.id).current_uses == 3
    session.close()


def test_concurrent_token_check_ins_by_different_workers(
    file_session_factory, issuer, coordinator
):
    setup = file_session_factory()
    location_id = _seed(setup, workers=THREADS)
    options = TokenOptions(usage_mode=UsageMode.BOUNDED, max_uses=3)
    issued = issuer.issue(setup, location_id, options)
    setup.close()

    def _check_in(index):
        session = file_session_factory()
        try:
            event = CheckInEvent(worker_id=index + 1, token=issued.token)
            coordinator.record(session, event)
            return True
        except AuthenticationError as e:
            return e.reason
        finally:
            session.close()

    outcomes = _run_together(THREADS, _check_in)

    assert outcomes.count(True) == 3
    assert outcomes.count('USAGE_EXCEEDED') == THREADS - 3

    session = file_session_factory()
    assert session.query(CheckInRecord).count() == 3
    assert session.get(CheckInToken, issued.id).current_uses == 3
    session.close()
