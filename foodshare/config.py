import os
from datetime import timedelta

from dotenv import load_dotenv

# load .env first thing
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CLIENT_URL = os.getenv("CLIENT_URL", "http://localhost:3000")

    DATABASE_URL = os.getenv("DATABASE_URL")
    SQL_ECHO = _env_flag("SQL_ECHO")

    JWT_SECRET = os.getenv("JWT_SECRET")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE = timedelta(hours=int(os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", "24")))

    REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")

    EMAIL_HOST = os.getenv("EMAIL_HOST", "smtp.gmail.com")
    EMAIL_PORT = int(os.getenv("EMAIL_PORT", "587"))
    EMAIL_USER = os.getenv("EMAIL_USER")
    EMAIL_PASSWORD = os.getenv("EMAIL_PASSWORD")
    EMAIL_USE_TLS = _env_flag("EMAIL_USE_TLS", "true")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()

if not settings.DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable not set")

if not settings.JWT_SECRET:
    raise ValueError("JWT_SECRET environment variable not set")
