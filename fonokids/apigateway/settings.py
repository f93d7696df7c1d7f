from __future__ import annotations
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    APP_NAME: str = Field(default="fonokids-backend")
    APP_VERSION: str = Field(default="0.1.0")
    API_PREFIX: str = Field(default="/api")
    LOG_LEVEL: str = Field(default="INFO")
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3001)

    # Database
    DATABASE_URL: str = Field(default="sqlite:///./fonokids.db")
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 2

    # Auth
    JWT_SECRET: Optional[str] = None
    ALLOW_INSECURE_DEV_SECRET: bool = False
    TOKEN_TTL_SECONDS: int = 86400        # 24 hours
    RESET_CODE_TTL_SECONDS: int = 600     # 10 minutes
    BCRYPT_ROUNDS: int = 10

    # Email
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    EMAIL_FROM: Optional[str] = None
    EMAIL_FROM_NAME: str = "FonoKids"
    SMTP_TIMEOUT_SECONDS: float = 10.0

    @property
    def smtp_configured(self) -> bool:
        return bool(self.SMTP_HOST and (self.EMAIL_FROM or self.SMTP_USER))
