from datetime import date, datetime, timedelta
from math import degrees
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from attendance_engine.api.check_ins.coordinator import CheckInCoordinator
from attendance_engine.api.check_ins.dependencies import get_coordinator
from attendance_engine.api.checkin_tokens.dependencies import get_token_issuer
from attendance_engine.api.checkin_tokens.issuer import TokenIssuer
from attendance_engine.api.checkin_tokens.models import UsageMode
from attendance_engine.api.checkin_tokens.schemas import TokenOptions
from attendance_engine.api.checkin_tokens.verifier import TokenVerifier
from attendance_engine.api.locations.models import LocationProfile
from attendance_engine.api.shifts.models import ScheduledShift
from attendance_engine.api.workers.models import Worker
from attendance_engine.core.config import EngineConfig, Environment, settings
from attendance_engine.core.database import Base, get_db
from attendance_engine.core.geofence import EARTH_RADIUS_METERS
from attendance_engine.core.security import create_access_token
from main import app

TEST_SIGNING_KEY = 'test-checkin-signing-key-0123456789abcdef'
ADMIN_HEADERS = {'x-api-key': 'test_admin_api_key'}

# Monday 2026-03-02, fifteen minutes before a 09:00 shift
WORK_DATE = date(2026, 3, 2)
START_TIME = datetime(2026, 3, 2, 8, 45)

STORE_LATITUDE = 37.4979
STORE_LONGITUDE = 127.0276


def offset_north(latitude: float, longitude: float, meters: float):
    """A point ``meters`` due north along the meridian."""
    return latitude + degrees(meters / EARTH_RADIUS_METERS), longitude


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)

    def set_time(self, hour: int, minute: int = 0, second: int = 0) -> None:
        self.now = self.now.replace(hour=hour, minute=minute, second=second)


class RecordingNotifier:
    def __init__(self, error: Exception = None):
        self.calls = []
        self.error = error

    def notify(self, anomaly, record):
        self.calls.append((anomaly.id, record.id))
        if self.error:
            raise self.error


@pytest.fixture(scope='session', autouse=True)
def check_test_environment():
    if settings.ENVIRONMENT != Environment.TEST:
        raise RuntimeError(
            f'Tests can only be executed in test environment. Current environment: {settings.ENVIRONMENT}'
        )


@pytest.fixture(scope='session', autouse=True)
def setup_test_keys():
    """Set keys for testing to avoid None values in headers"""
    original_admin_key = settings.ADMIN_API_KEY
    original_secret_key = settings.SECRET_KEY

    settings.ADMIN_API_KEY = 'test_admin_api_key'
    settings.SECRET_KEY = 'test_secret_key'

    yield

    settings.ADMIN_API_KEY = original_admin_key
    settings.SECRET_KEY = original_secret_key


@pytest.fixture(scope='session')
def test_db_engine():
    engine = create_engine(
        settings.SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope='function')
def db_session(test_db_engine):
    """Create a fresh database session for each test"""
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=test_db_engine
    )

    # Drop and recreate all tables before each test
    Base.metadata.drop_all(bind=test_db_engine)
    Base.metadata.create_all(bind=test_db_engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FakeClock(START_TIME)


@pytest.fixture
def engine_config():
    return EngineConfig(signing_key=TEST_SIGNING_KEY)


@pytest.fixture
def issuer(engine_config, clock):
    return TokenIssuer(engine_config, clock=clock)


@pytest.fixture
def verifier(engine_config, clock):
    return TokenVerifier(engine_config, clock=clock)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def coordinator(engine_config, verifier, notifier, clock):
    return CheckInCoordinator(engine_config, verifier, notifier=notifier, clock=clock)


@pytest.fixture(scope='function')
def client(db_session, issuer, coordinator):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_issuer] = lambda: issuer
    app.dependency_overrides[get_coordinator] = lambda: coordinator
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def get_auth_headers_for_worker(worker_id: int) -> dict:
    """Generate auth headers for a specific worker ID"""
    user_data = {
        'worker_id': worker_id,
        'email': f'worker{worker_id}@example.com',
    }
    access_token = create_access_token(data=user_data)
    return {'Authorization': f'Bearer {access_token}'}


@pytest.fixture
def create_test_location(db_session):
    """Factory fixture to create locations"""

    def _create_location(**overrides):
        data = {
            'name': 'Test Store',
            'latitude': STORE_LATITUDE,
            'longitude': STORE_LONGITUDE,
            'allowed_radius_meters': 100,
            'geofence_enabled': True,
            'early_window_minutes': 30,
        }
        data.update(overrides)
        location = LocationProfile(**data)
        db_session.add(location)
        db_session.commit()
        return location

    yield _create_location


@pytest.fixture
def test_location(create_test_location):
    return create_test_location()


@pytest.fixture
def create_test_worker(db_session):
    """Factory fixture to create workers"""

    def _create_worker(worker_id: int, assigned_location_id=None):
        worker = Worker(
            id=worker_id,
            name=f'Worker {worker_id}',
            email=f'worker{worker_id}@example.com',
            assigned_location_id=assigned_location_id,
        )
        db_session.add(worker)
        db_session.commit()
        return worker

    yield _create_worker


@pytest.fixture
def test_worker(create_test_worker, test_location):
    """Worker 1, assigned to the default test location"""
    return create_test_worker(1, assigned_location_id=test_location.id)


@pytest.fixture
def auth_headers(test_worker):
    return get_auth_headers_for_worker(test_worker.id)


@pytest.fixture
def create_test_shift(db_session):
    def _create_shift(worker, start: datetime, hours: int = 8, **overrides):
        shift = ScheduledShift(
            worker_id=worker.id,
            work_date=start.date(),
            scheduled_start=start,
            scheduled_end=start + timedelta(hours=hours),
            **overrides,
        )
        db_session.add(shift)
        db_session.commit()
        return shift

    yield _create_shift


@pytest.fixture
def test_shift(create_test_shift, test_worker):
    """09:00-17:00 on the test work date"""
    return create_test_shift(test_worker, datetime(2026, 3, 2, 9, 0))


@pytest.fixture
def issued_token(issuer, db_session, test_location):
    """Bounded token with five uses for the test location"""
    options = TokenOptions(usage_mode=UsageMode.BOUNDED, max_uses=5)
    return issuer.issue(db_session, test_location.id, options)


@pytest.fixture
def mock_send_mail():
    with patch('attendance_engine.api.check_ins.notifier.send_mail') as mock:
        yield mock


@pytest.fixture
def file_session_factory(tmp_path):
    """Sessions on a file database, for tests that need one session per thread"""
    engine = create_engine(
        f'sqlite:///{tmp_path / "attendance.db"}',
        connect_args={'check_same_thread': False, 'timeout': 30},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()
