from typing import List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "Veraawell Admin Identity"

    # MongoDB Config
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB_NAME: str = "veraawell"

    # Admin session tokens
    ADMIN_JWT_SECRET: str = "admin-secret"
    ADMIN_JWT_ALGORITHM: str = "HS256"
    ADMIN_TOKEN_EXPIRE_MINUTES: int = 60

    # Credentials
    BCRYPT_ROUNDS: int = 10
    RESET_TOKEN_BYTES: int = 32
    RESET_TOKEN_EXPIRE_MINUTES: int = 60
    TEMP_PASSWORD_BYTES: int = 8

    # 📧 SMTP
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASS: Optional[str] = None

    FRONTEND_BASE_URL: str = "http://localhost:5173"
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()
