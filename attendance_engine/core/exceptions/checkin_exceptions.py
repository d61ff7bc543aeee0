from enum import Enum
from typing import Optional

from fastapi import HTTPException, status


class ErrorKind(str, Enum):
    VALIDATION_ERROR = 'VALIDATION_ERROR'
    AUTHENTICATION_ERROR = 'AUTHENTICATION_ERROR'
    NOT_FOUND = 'NOT_FOUND'
    DUPLICATE_CHECKIN_ERROR = 'DUPLICATE_CHECKIN_ERROR'
    STORE_ERROR = 'STORE_ERROR'


class NotFoundReason(str, Enum):
    LOCATION_NOT_FOUND = 'LOCATION_NOT_FOUND'
    NO_ASSIGNED_LOCATION = 'NO_ASSIGNED_LOCATION'
    WORKER_NOT_FOUND = 'WORKER_NOT_FOUND'
    TOKEN_NOT_FOUND = 'TOKEN_NOT_FOUND'
    CHECK_IN_NOT_FOUND = 'CHECK_IN_NOT_FOUND'


class CheckInError(HTTPException):
    """Base for every engine failure.

    The ``detail`` is rendered as ``{kind, reason, message}`` so clients can
    branch on ``kind``/``reason`` and show ``message``.
    """

    kind: ErrorKind
    status_code_for_kind: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, reason: Optional[str] = None):
        self.message = message
        self.reason = reason
        super().__init__(
            self.status_code_for_kind,
            {'kind': self.kind.value, 'reason': reason, 'message': message},
        )


class CheckInValidationError(CheckInError):
    kind = ErrorKind.VALIDATION_ERROR
    status_code_for_kind = status.HTTP_400_BAD_REQUEST


class AuthenticationError(CheckInError):
    kind = ErrorKind.AUTHENTICATION_ERROR
    status_code_for_kind = status.HTTP_401_UNAUTHORIZED


class NotFoundError(CheckInError):
    kind = ErrorKind.NOT_FOUND
    status_code_for_kind = status.HTTP_404_NOT_FOUND

    def __init__(self, reason: NotFoundReason, message: str):
        super().__init__(message, reason.value)


class DuplicateCheckInError(CheckInError):
    kind = ErrorKind.DUPLICATE_CHECKIN_ERROR
    status_code_for_kind = status.HTTP_409_CONFLICT

    def __init__(self, worker_id: int, work_date):
        super().__init__(f'Worker {worker_id} already checked in on {work_date}')


class StoreError(CheckInError):
    kind = ErrorKind.STORE_ERROR
    status_code_for_kind = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, detail=None):
        msg = 'The check-in could not be stored.'
        if detail:
            msg = f'{msg} Error detail: {detail}'
        super().__init__(msg)
