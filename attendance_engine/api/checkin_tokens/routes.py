from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from attendance_engine.api.checkin_tokens import schemas
from attendance_engine.api.checkin_tokens.crud import checkin_token as token_crud
from attendance_engine.api.checkin_tokens.dependencies import get_token_issuer
from attendance_engine.api.checkin_tokens.issuer import TokenIssuer
from attendance_engine.core.database import get_db
from attendance_engine.core.logger import logger
from attendance_engine.core.qr import generate_qr_data_url
from attendance_engine.core.security import require_admin_api_key

router = APIRouter(dependencies=[Depends(require_admin_api_key)])


def _with_qr(issued: schemas.IssuedToken) -> schemas.IssuedTokenResponse:
    return schemas.IssuedTokenResponse(
        **issued.model_dump(),
        qr_code=generate_qr_data_url(issued.token),
    )


@router.post('/{location_id}/tokens', response_model=schemas.IssuedTokenResponse)
def issue_token(
    location_id: int,
    options: schemas.TokenOptions,
    issuer: TokenIssuer = Depends(get_token_issuer),
    db: Session = Depends(get_db),
):
    logger.info('Issuing check-in token for location %s: %s', location_id, options)
    return _with_qr(issuer.issue(db, location_id, options))


@router.post(
    '/{location_id}/tokens/one-time', response_model=schemas.IssuedTokenResponse
)
def issue_one_time_token(
    location_id: int,
    valid_minutes: int = Query(default=30, ge=1, le=24 * 60),
    issuer: TokenIssuer = Depends(get_token_issuer),
    db: Session = Depends(get_db),
):
    return _with_qr(issuer.issue_one_time(db, location_id, valid_minutes))


@router.post(
    '/{location_id}/tokens/refresh', response_model=schemas.IssuedTokenResponse
)
def refresh_token(
    location_id: int,
    issuer: TokenIssuer = Depends(get_token_issuer),
    db: Session = Depends(get_db),
):
    return _with_qr(issuer.refresh(db, location_id))


@router.get('/{location_id}/tokens', response_model=list[schemas.CheckInToken])
def get_tokens(
    location_id: int,
    active_only: bool = Query(default=False),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=100),
    issuer: TokenIssuer = Depends(get_token_issuer),
    db: Session = Depends(get_db),
):
    now = issuer.clock()
    tokens = token_crud.find_for_location(
        db, location_id, active_only=active_only, skip=skip, limit=limit
    )
    return [schemas.CheckInToken.from_model(token, now) for token in tokens]


@router.delete(
    '/{location_id}/tokens/{token_id}', response_model=schemas.CheckInToken
)
def revoke_token(
    location_id: int,
    token_id: int,
    issuer: TokenIssuer = Depends(get_token_issuer),
    db: Session = Depends(get_db),
):
    now = issuer.clock()
    token = token_crud.revoke(db, location_id, token_id, now)
    return schemas.CheckInToken.from_model(token, now)
