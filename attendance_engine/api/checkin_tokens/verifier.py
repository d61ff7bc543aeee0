from datetime import datetime
from typing import Callable

import jwt
from sqlalchemy.orm import Session

from attendance_engine.api.checkin_tokens import schemas
from attendance_engine.api.checkin_tokens.crud import checkin_token as token_crud
from attendance_engine.core.config import EngineConfig
from attendance_engine.core.logger import logger
from attendance_engine.core.utils import current_time, decode, from_timestamp


class TokenVerifier:
    """Validates a presented check-in token and consumes one use of it.

    Each check below is terminal and none of them touches ``current_uses``;
    only a fully valid token is charged. The charge is left uncommitted so
    that it shares the caller's transaction (a rejected check-in gives the
    use back on rollback). Pass ``commit=True`` to verify standalone.
    """

    def __init__(
        self,
        config: EngineConfig,
        tokens=token_crud,
        clock: Callable[[], datetime] = current_time,
    ):
        self.config = config
        self.tokens = tokens
        self.clock = clock

    def _fail(self, error: schemas.VerifyError) -> schemas.VerifyFailure:
        logger.error('Check-in token rejected: %s', error.value)
        return schemas.VerifyFailure(error=error)

    def verify(
        self, db: Session, token: str, *, commit: bool = False
    ) -> schemas.VerifyResult:
        try:
            payload = decode(token, key=self.config.signing_key)
        except jwt.InvalidTokenError as e:
            logger.error('Error decoding check-in token: %s', str(e))
            return self._fail(schemas.VerifyError.SIGNATURE_INVALID)

        if payload.get('type') != schemas.TOKEN_TYPE:
            return self._fail(schemas.VerifyError.TYPE_MISMATCH)

        location_id = payload.get('location_id')
        nonce = payload.get('nonce')
        exp = payload.get('exp')
        if not isinstance(location_id, int) or not nonce or not isinstance(exp, int):
            logger.error('Invalid check-in token payload: %s', payload)
            return self._fail(schemas.VerifyError.SIGNATURE_INVALID)

        if self.clock() >= from_timestamp(exp):
            return self._fail(schemas.VerifyError.EXPIRED)

        db_token = self.tokens.get_by_nonce(db, nonce)
        if not db_token or db_token.location_id != location_id:
            return self._fail(schemas.VerifyError.UNKNOWN_TOKEN)
        if not db_token.is_active:
            return self._fail(schemas.VerifyError.REVOKED)
        if db_token.exhausted:
            return self._fail(schemas.VerifyError.USAGE_EXCEEDED)

        token_id = db_token.id
        # The read above can be stale; the guarded UPDATE is authoritative.
        if not self.tokens.consume_use(db, token_id):
            return self._fail(schemas.VerifyError.USAGE_EXCEEDED)
        db.expire(db_token)
        if commit:
            db.commit()

        logger.info(
            'Check-in token %s accepted for location %s', token_id, location_id
        )
        return schemas.VerifySuccess(location_id=location_id, token_id=token_id)
