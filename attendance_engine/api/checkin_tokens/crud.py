from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from attendance_engine.api.base_crud import CRUDBase
from attendance_engine.api.checkin_tokens import models, schemas
from attendance_engine.core.exceptions.checkin_exceptions import (
    NotFoundError,
    NotFoundReason,
)
from attendance_engine.core.logger import logger


class CRUDCheckInToken(CRUDBase[models.CheckInToken, schemas.IssuedToken]):
    def get_by_nonce(self, db: Session, nonce: str) -> Optional[models.CheckInToken]:
        return db.query(self.model).filter(self.model.nonce == nonce).first()

    def find_for_location(
        self,
        db: Session,
        location_id: int,
        active_only: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> List[models.CheckInToken]:
        filters = schemas.CheckInTokenFilter(
            location_id=location_id,
            is_active=True if active_only else None,
        )
        return self.find(db, skip=skip, limit=limit, filters=filters)

    def consume_use(self, db: Session, token_id: int) -> bool:
        """Take one use from the token's budget.

        The budget check and the increment are a single UPDATE, so two
        concurrent callers can never both take the last use. Returns False
        when no use was left (or the token was revoked meanwhile). Does not
        commit.
        """
        result = db.execute(
            update(self.model)
            .where(
                self.model.id == token_id,
                self.model.is_active.is_(True),
                or_(
                    self.model.max_uses.is_(None),
                    self.model.current_uses < self.model.max_uses,
                ),
            )
            .values(current_uses=self.model.current_uses + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def revoke(
        self, db: Session, location_id: int, token_id: int, now: datetime
    ) -> models.CheckInToken:
        token = self.get(db, token_id)
        if not token or token.location_id != location_id:
            raise NotFoundError(
                NotFoundReason.TOKEN_NOT_FOUND,
                f'Check-in token {token_id} not found for location {location_id}',
            )
        if token.is_active:
            token.is_active = False
            token.revoked_at = now
            db.commit()
            db.refresh(token)
            logger.info('Revoked check-in token %s', token_id)
        return token

    def revoke_all_for_location(
        self, db: Session, location_id: int, now: datetime
    ) -> int:
        """Deactivate every active token of the location. Does not commit."""
        result = db.execute(
            update(self.model)
            .where(
                self.model.location_id == location_id,
                self.model.is_active.is_(True),
            )
            .values(is_active=False, revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        logger.info(
            'Revoked %s active check-in tokens for location %s',
            result.rowcount,
            location_id,
        )
        return result.rowcount


checkin_token = CRUDCheckInToken(models.CheckInToken)
