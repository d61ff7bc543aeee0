import os
from datetime import timedelta
from enum import Enum

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


class Environment(str, Enum):
    TEST = 'test'
    PRODUCTION = 'production'
    DEVELOP = 'develop'


class Settings:
    ENVIRONMENT: Environment = Environment(os.getenv('ENVIRONMENT') or Environment.TEST)
    DB_USERNAME: str = os.getenv('DB_USERNAME')
    DB_PASSWORD: str = os.getenv('DB_PASSWORD')
    DB_HOST: str = os.getenv('DB_HOST')
    DB_PORT: str = os.getenv('DB_PORT')
    DB_NAME: str = os.getenv('DB_NAME')

    SQLALCHEMY_TEST_DATABASE_URL = 'sqlite:///:memory:'
    DATABASE_URL: str = (
        f'postgresql://{DB_USERNAME}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}'
        if ENVIRONMENT != Environment.TEST
        else SQLALCHEMY_TEST_DATABASE_URL
    )

    POSTMARK_API_TOKEN: str = os.getenv('POSTMARK_API_TOKEN')
    EMAIL_FROM_ADDRESS: str = os.getenv('EMAIL_FROM_ADDRESS')
    EMAIL_FROM_NAME: str = os.getenv('EMAIL_FROM_NAME')
    EMAIL_REPLY_TO: str = os.getenv('EMAIL_REPLY_TO')
    ANOMALY_ALERT_EMAIL: str = os.getenv('ANOMALY_ALERT_EMAIL')

    SECRET_KEY: str = os.getenv('SECRET_KEY', '')
    CHECKIN_TOKEN_SECRET: str = os.getenv('CHECKIN_TOKEN_SECRET') or SECRET_KEY
    ADMIN_API_KEY: str = os.getenv('ADMIN_API_KEY')

    DEFAULT_ALLOWED_RADIUS_METERS: float = float(
        os.getenv('DEFAULT_ALLOWED_RADIUS_METERS', '100')
    )
    DEFAULT_EARLY_WINDOW_MINUTES: int = int(
        os.getenv('DEFAULT_EARLY_WINDOW_MINUTES', '30')
    )
    CHECKIN_TOKEN_TTL_HOURS: int = int(os.getenv('CHECKIN_TOKEN_TTL_HOURS', '24'))
    WORK_TIMEZONE: str = os.getenv('WORK_TIMEZONE', 'UTC')


settings = Settings()


class EngineConfig(BaseModel):
    """Values the check-in components need, resolved once at construction."""

    signing_key: str
    default_radius_meters: float = 100
    default_early_window_minutes: int = 30
    default_token_ttl: timedelta = timedelta(hours=24)
    timezone: str = 'UTC'

    @classmethod
    def from_settings(cls, source: Settings = settings) -> 'EngineConfig':
        return cls(
            signing_key=source.CHECKIN_TOKEN_SECRET,
            default_radius_meters=source.DEFAULT_ALLOWED_RADIUS_METERS,
            default_early_window_minutes=source.DEFAULT_EARLY_WINDOW_MINUTES,
            default_token_ttl=timedelta(hours=source.CHECKIN_TOKEN_TTL_HOURS),
            timezone=source.WORK_TIMEZONE,
        )
