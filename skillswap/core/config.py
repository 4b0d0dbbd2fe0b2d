from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    DATABASE_URL: str
    MONGO_URI: str
    MONGO_DB_NAME: str = "skillswap"
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 5 * 60
    EMAIL_VERIFICATION_TOKEN_EXPIRE_MINUTES: int = 7 * 24 * 60
    SMTP_SERVER: str
    SMTP_PORT: int
    SMTP_USER: str
    SMTP_PASSWORD: str
    EMAILS_FROM_EMAIL: str
    EMAILS_FROM_NAME: str = "SkillSwap"
    BASE_URL: str = "http://localhost:8000/api"
    MEDIA_ROOT: str = "images"
    DB_ECHO: bool = False
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env", validate_assignment=True, extra="allow"
    )


@lru_cache
def get_settings():
    return Settings()
