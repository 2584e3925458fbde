"""
Error taxonomy for the API.

Every error is an ``HTTPException`` so crud code can raise it wherever it
would raise ``HTTPException`` directly; the handler in ``main`` renders it
into the standard ``{success, message, errors, timestamp}`` envelope.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "ERROR"

    def __init__(self, detail: str, errors: Optional[Any] = None, status_code: Optional[int] = None):
        super().__init__(status_code=status_code or self.status_code, detail=detail)
        self.errors = errors


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class UnavailableError(AppError):
    code = "UNAVAILABLE"


class InvalidInputError(AppError):
    code = "INVALID_INPUT"


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class InvalidStateError(AppError):
    code = "INVALID_STATE"


class InvalidTransitionError(AppError):
    code = "INVALID_TRANSITION"


class UpstreamFailureError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "UPSTREAM_FAILURE"


class PromoRejection(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    NOT_YET_VALID = "NOT_YET_VALID"
    EXPIRED = "EXPIRED"
    BELOW_MINIMUM = "BELOW_MINIMUM"
    LIMIT_EXCEEDED = "LIMIT_EXCEEDED"
    ALREADY_USED = "ALREADY_USED"


class PromoRejectedError(AppError):
    code = "PROMO_REJECTED"

    def __init__(self, reason: PromoRejection, detail: str):
        status_code = status.HTTP_404_NOT_FOUND if reason == PromoRejection.NOT_FOUND else status.HTTP_400_BAD_REQUEST
        super().__init__(detail, errors={"reason": reason.value}, status_code=status_code)
        self.reason = reason


class PaymentDeclinedError(AppError):
    code = "PAYMENT_DECLINED"
