from dataclasses import dataclass

from fastapi import Request, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from .jwt_handler import verify_access_token
from database import get_db
from sqlalchemy.orm import Session
from crud.token_crud import is_token_revoked
from schemas import UserRole
from utils.errors import ForbiddenError, UnauthorizedError


@dataclass(frozen=True)
class Principal:
    """The authenticated caller. Role is resolved once, here, at the boundary."""
    user_id: int
    email: str
    role: UserRole
    jti: str = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def can_access(self, owner_id: int) -> bool:
        return self.is_admin or int(owner_id) == self.user_id


class JWTBearer(HTTPBearer):
    def __init__(self):
        # raise our own 401 instead of HTTPBearer's 403 when the header is missing
        super().__init__(auto_error=False)

    async def __call__(self, request: Request, db: Session = Depends(get_db)):
        credentials: HTTPAuthorizationCredentials = await super().__call__(request)
        if credentials:
            # Make scheme check case-insensitive
            if credentials.scheme.lower() != "bearer":
                raise UnauthorizedError("Invalid authentication scheme.")
            # Verify access token
            payload = verify_access_token(credentials.credentials)
            if payload is None:
                raise UnauthorizedError("Invalid or expired token.")
            # Check whether this token has been revoked
            jti = payload.get("jti")
            if jti and is_token_revoked(db, jti):
                raise UnauthorizedError("Token has been revoked.")
            return payload
        else:
            raise UnauthorizedError("Not authorized, login again")


def get_principal(payload: dict = Depends(JWTBearer())) -> Principal:
    try:
        role = UserRole(payload.get("role", UserRole.USER.value))
        return Principal(
            user_id=int(payload["user_id"]),
            email=payload.get("email", ""),
            role=role,
            jti=payload.get("jti"),
        )
    except (KeyError, TypeError, ValueError):
        raise UnauthorizedError("Invalid token payload")


def require_role(role: UserRole):
    def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role != role:
            raise ForbiddenError("Not authorized")
        return principal
    return dependency
