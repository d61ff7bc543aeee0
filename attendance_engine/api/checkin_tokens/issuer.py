from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from attendance_engine.api.checkin_tokens import models, schemas
from attendance_engine.api.checkin_tokens.crud import checkin_token as token_crud
from attendance_engine.api.locations.crud import location as location_crud
from attendance_engine.core.config import EngineConfig
from attendance_engine.core.exceptions.checkin_exceptions import (
    NotFoundError,
    NotFoundReason,
    StoreError,
)
from attendance_engine.core.logger import logger
from attendance_engine.core.utils import create_nonce, current_time, encode

ONE_TIME_TOKEN_MINUTES = 30


class TokenIssuer:
    """Mints signed, expiring check-in tokens scoped to one location."""

    def __init__(
        self,
        config: EngineConfig,
        locations=location_crud,
        clock: Callable[[], datetime] = current_time,
    ):
        self.config = config
        self.locations = locations
        self.clock = clock

    def issue(
        self,
        db: Session,
        location_id: int,
        options: Optional[schemas.TokenOptions] = None,
    ) -> schemas.IssuedToken:
        options = options or schemas.TokenOptions()
        if not self.locations.get_profile(db, location_id):
            logger.error('Cannot issue token, location %s not found', location_id)
            raise NotFoundError(
                NotFoundReason.LOCATION_NOT_FOUND,
                f'Location {location_id} not found',
            )

        ttl = (
            timedelta(seconds=options.ttl_seconds)
            if options.ttl_seconds
            else self.config.default_token_ttl
        )
        # Claims carry whole seconds; keep the stored expiry identical.
        issued_at = self.clock().replace(microsecond=0)
        expires_at = issued_at + ttl
        nonce = create_nonce()

        payload = {
            'type': schemas.TOKEN_TYPE,
            'location_id': location_id,
            'issued_at': issued_at,
            'nonce': nonce,
        }
        token = encode(
            payload,
            key=self.config.signing_key,
            issued_at=issued_at,
            expires_at=expires_at,
        )

        db_token = models.CheckInToken(
            location_id=location_id,
            token=token,
            nonce=nonce,
            issued_at=issued_at,
            expires_at=expires_at,
            usage_mode=options.usage_mode.value,
            max_uses=options.max_uses,
            current_uses=0,
            is_active=True,
        )
        try:
            db.add(db_token)
            db.commit()
        except SQLAlchemyError as e:
            logger.error('Error storing check-in token: %s', str(e))
            db.rollback()
            raise StoreError(str(e))

        logger.info(
            'Issued %s check-in token %s for location %s, expires at %s',
            options.usage_mode.value,
            db_token.id,
            location_id,
            expires_at,
        )
        return schemas.IssuedToken(
            id=db_token.id,
            location_id=location_id,
            token=token,
            expires_at=expires_at,
        )

    def issue_one_time(
        self, db: Session, location_id: int, valid_minutes: int = ONE_TIME_TOKEN_MINUTES
    ) -> schemas.IssuedToken:
        options = schemas.TokenOptions(
            ttl_seconds=valid_minutes * 60,
            usage_mode=models.UsageMode.SINGLE_USE,
        )
        return self.issue(db, location_id, options)

    def refresh(
        self,
        db: Session,
        location_id: int,
        options: Optional[schemas.TokenOptions] = None,
    ) -> schemas.IssuedToken:
        """Revoke every active token of the location and issue a new one."""
        if not self.locations.get_profile(db, location_id):
            raise NotFoundError(
                NotFoundReason.LOCATION_NOT_FOUND,
                f'Location {location_id} not found',
            )
        token_crud.revoke_all_for_location(db, location_id, self.clock())
        return self.issue(db, location_id, options)
