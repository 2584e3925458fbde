from jose import JWTError, ExpiredSignatureError, jwt
from datetime import datetime, timedelta, timezone
from fastapi import HTTPException
from passlib.context import CryptContext
from utils.config import settings
import uuid


def _create_token(payload: dict, secret: str, minutes: int, token_type: str) -> str:
    to_encode = payload.copy()
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=minutes)
    to_encode.update({
        "exp": expire,
        "iat": now,
        "jti": str(uuid.uuid4()),
        "type": token_type
    })
    return jwt.encode(to_encode, secret, algorithm=settings.ALGORITHM)

def create_access_token(payload: dict) -> str:
    return _create_token(payload, settings.SECRET_KEY_ACCESS, settings.ACCESS_TOKEN_EXPIRE_MINUTES, "access")

def create_refresh_token(payload: dict) -> str:
    return _create_token(payload, settings.SECRET_KEY_REFRESH, settings.REFRESH_TOKEN_EXPIRE_MINUTES, "refresh")

def verify_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY_ACCESS, algorithms=[settings.ALGORITHM])
        return payload if payload.get("type") == "access" else None
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has been expired, please login again")
    except JWTError:
        return None
    
def verify_refresh_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY_REFRESH, algorithms=[settings.ALGORITHM])
        return payload if payload.get("type") == "refresh" else None
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Refresh token has been expired, please login again")
    except JWTError:
        return None

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def hash_password(password: str):
    return pwd_context.hash(password)

def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)
