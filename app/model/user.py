from sqlalchemy import Column, Integer, String, DateTime, JSON
from database import Base
from utils.helper import utcnow

class User(Base):
    __tablename__ ="users"
    user_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, nullable=False, index=True)
    phone = Column(String(20), nullable=True)
    password= Column(String(255), nullable=False)
    role= Column(String(15), nullable=False, default="user")
    address = Column(JSON, nullable=True)   # default delivery address
    created_at= Column(DateTime, default=utcnow)
    updated_at= Column(DateTime, default=utcnow, onupdate=utcnow)
    last_login= Column(DateTime, nullable=True)
