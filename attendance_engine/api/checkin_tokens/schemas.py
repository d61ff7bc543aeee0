from datetime import datetime
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from attendance_engine.api.checkin_tokens.models import TokenStatus, UsageMode

TOKEN_TYPE = 'LOCATION_CHECKIN'


class VerifyError(str, Enum):
    SIGNATURE_INVALID = 'SIGNATURE_INVALID'
    TYPE_MISMATCH = 'TYPE_MISMATCH'
    EXPIRED = 'EXPIRED'
    USAGE_EXCEEDED = 'USAGE_EXCEEDED'
    REVOKED = 'REVOKED'
    UNKNOWN_TOKEN = 'UNKNOWN_TOKEN'


VERIFY_ERROR_MESSAGES = {
    VerifyError.SIGNATURE_INVALID: 'Invalid check-in token',
    VerifyError.TYPE_MISMATCH: 'Token is not a location check-in token',
    VerifyError.EXPIRED: 'Check-in token has expired',
    VerifyError.USAGE_EXCEEDED: 'Check-in token has reached its usage limit',
    VerifyError.REVOKED: 'Check-in token has been revoked',
    VerifyError.UNKNOWN_TOKEN: 'Check-in token is not registered',
}


class VerifySuccess(BaseModel):
    ok: Literal[True] = True
    location_id: int
    token_id: int


class VerifyFailure(BaseModel):
    ok: Literal[False] = False
    error: VerifyError

    @property
    def message(self) -> str:
        return VERIFY_ERROR_MESSAGES[self.error]


VerifyResult = Union[VerifySuccess, VerifyFailure]


class TokenOptions(BaseModel):
    ttl_seconds: Optional[int] = Field(default=None, gt=0)
    usage_mode: UsageMode = UsageMode.UNLIMITED
    max_uses: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode='after')
    def normalize_max_uses(self) -> 'TokenOptions':
        if self.usage_mode == UsageMode.SINGLE_USE:
            self.max_uses = 1
        elif self.usage_mode == UsageMode.UNLIMITED:
            self.max_uses = None
        elif self.max_uses is None:
            raise ValueError('max_uses is required for bounded tokens')
        return self


class IssuedToken(BaseModel):
    id: int
    location_id: int
    token: str
    expires_at: datetime


class IssuedTokenResponse(IssuedToken):
    qr_code: str


class CheckInToken(BaseModel):
    id: int
    location_id: int
    issued_at: datetime
    expires_at: datetime
    usage_mode: UsageMode
    max_uses: Optional[int] = None
    current_uses: int
    is_active: bool
    revoked_at: Optional[datetime] = None
    status: TokenStatus

    @classmethod
    def from_model(cls, token, now: datetime) -> 'CheckInToken':
        return cls(
            id=token.id,
            location_id=token.location_id,
            issued_at=token.issued_at,
            expires_at=token.expires_at,
            usage_mode=token.usage_mode,
            max_uses=token.max_uses,
            current_uses=token.current_uses,
            is_active=token.is_active,
            revoked_at=token.revoked_at,
            status=token.lifecycle_status(now),
        )


class CheckInTokenFilter(BaseModel):
    location_id: Optional[int] = None
    is_active: Optional[bool] = None
