import datetime
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from model.revoked_token import RevokedToken
from utils.helper import utcnow

logger = logging.getLogger(__name__)


def revoke_token(db: Session, payload: Optional[dict]) -> Optional[RevokedToken]:
    """Denylist a decoded token by its ``jti``. Revoking twice is harmless."""
    jti = (payload or {}).get("jti")
    if not jti:
        return None
    existing = db.query(RevokedToken).filter(RevokedToken.jti == jti).first()
    if existing:
        return existing
    exp = payload.get("exp")
    rt = RevokedToken(
        jti=jti,
        token_type=payload.get("type") or "access",
        user_id=payload.get("user_id"),
        revoked_at=utcnow(),
        expires_at=datetime.datetime.fromtimestamp(exp, datetime.timezone.utc).replace(tzinfo=None) if exp else None,
    )
    db.add(rt)
    try:
        db.commit()
    except IntegrityError:
        # concurrent logout with the same token
        db.rollback()
        return db.query(RevokedToken).filter(RevokedToken.jti == jti).first()
    db.refresh(rt)
    return rt


def is_token_revoked(db: Session, jti: str) -> bool:
    if not jti:
        return False
    return db.query(RevokedToken.id).filter(RevokedToken.jti == jti).first() is not None


def purge_expired(db: Session) -> int:
    """Drop denylist rows whose tokens can no longer be presented."""
    removed = (
        db.query(RevokedToken)
        .filter(RevokedToken.expires_at.isnot(None), RevokedToken.expires_at < utcnow())
        .delete(synchronize_session=False)
    )
    db.commit()
    if removed:
        logger.info("auth.revocations_purged count=%s", removed)
    return removed
