from sqlalchemy import Column, Integer, String, DateTime
from database import Base
from utils.helper import utcnow

class RevokedToken(Base):
    """Denylist of logged-out JWT ids, kept until the token would have expired anyway."""
    __tablename__ = "revoked_tokens"
    id = Column(Integer, primary_key=True, index=True)
    jti = Column(String(64), unique=True, index=True, nullable=False)
    token_type = Column(String(16), nullable=False)   # access | refresh
    user_id = Column(Integer, nullable=True, index=True)
    revoked_at = Column(DateTime, default=utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=True, index=True)
