import os
from dotenv import load_dotenv

load_dotenv()

class Settings():
    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./cravecart.db")
    MONGODB_URL: str = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
    MONGODB_DB: str = os.getenv("MONGODB_DB", "cravecart")
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    # JWT
    SECRET_KEY_ACCESS: str = os.getenv("SECRET_KEY_ACCESS", "cravecart-access-secret-change-in-production")
    SECRET_KEY_REFRESH: str = os.getenv("SECRET_KEY_REFRESH", "cravecart-refresh-secret-change-in-production")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))  # 24 hours
    REFRESH_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_MINUTES", 60 * 24 * 30))  # 30 days

    # CORS
    ALLOWED_ORIGINS: list = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:5174").split(",")
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")

    # Payment gateway (hosted checkout)
    PAYMENT_GATEWAY_URL: str = os.getenv("PAYMENT_GATEWAY_URL", "http://localhost:8081/checkout/sessions")
    PAYMENT_GATEWAY_KEY: str = os.getenv("PAYMENT_GATEWAY_KEY", "")
    PAYMENT_TIMEOUT_SECONDS: float = float(os.getenv("PAYMENT_TIMEOUT_SECONDS", "10"))
    CURRENCY: str = os.getenv("CURRENCY", "inr")

    # Notifications
    ENABLE_NOTIFICATION_CONSUMER: bool = os.getenv("ENABLE_NOTIFICATION_CONSUMER", "true").lower() == "true"

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
