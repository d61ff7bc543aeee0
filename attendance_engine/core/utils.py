import json
import secrets
from datetime import date, datetime, timezone
from uuid import UUID
from zoneinfo import ZoneInfo

import jwt


class Encoder(json.JSONEncoder):
    def default(self, o):
        if isinstance(o, (datetime, UUID)):
            return str(o)
        return super().default(o)


def to_timestamp(value: datetime) -> int:
    """Seconds since the epoch for a naive UTC datetime."""
    return int(value.replace(tzinfo=timezone.utc).timestamp())


def from_timestamp(value: int) -> datetime:
    return datetime.fromtimestamp(value, timezone.utc).replace(tzinfo=None)


def encode(
    payload: dict, *, key: str, issued_at: datetime, expires_at: datetime
) -> str:
    payload['iat'] = to_timestamp(issued_at)
    payload['exp'] = to_timestamp(expires_at)
    return jwt.encode(payload, key, algorithm='HS256', json_encoder=Encoder)


def decode(token: str, *, key: str) -> dict:
    """Checks the signature only. Claims are validated by the caller's clock."""
    return jwt.decode(
        token,
        key,
        algorithms=['HS256'],
        options={'verify_exp': False, 'verify_iat': False, 'verify_nbf': False},
    )


def current_time() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def local_date(moment: datetime, tz_name: str) -> date:
    """Calendar date of a naive UTC datetime in the given time zone."""
    return moment.replace(tzinfo=timezone.utc).astimezone(ZoneInfo(tz_name)).date()


def create_nonce() -> str:
    return secrets.token_urlsafe(12)
