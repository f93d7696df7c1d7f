from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigError

logger = logging.getLogger("fonokids.authservice")

DEV_SECRET = "fonokids-insecure-dev-secret"

@dataclass(frozen=True)
class AuthConfig:
    secret: str
    token_ttl_seconds: int = 86400        # 24 hours
    reset_code_ttl_seconds: int = 600     # 10 minutes
    bcrypt_rounds: int = 10
    algorithm: str = "HS256"

    @classmethod
    def build(
        cls,
        secret: Optional[str],
        *,
        allow_dev_secret: bool = False,
        token_ttl_seconds: int = 86400,
        reset_code_ttl_seconds: int = 600,
        bcrypt_rounds: int = 10,
    ) -> "AuthConfig":
        """
        Construct the process-wide auth configuration once at startup.
        A missing signing secret is fatal unless the dev fallback is explicitly allowed.
        """
        if not secret:
            if not allow_dev_secret:
                raise ConfigError("JWT_SECRET is not set; refusing to sign tokens with a default secret")
            logger.warning("JWT_SECRET is not set; using the insecure development secret")
            secret = DEV_SECRET
        if token_ttl_seconds <= 0 or reset_code_ttl_seconds <= 0:
            raise ConfigError("Token and reset-code lifetimes must be positive")
        if not 4 <= bcrypt_rounds <= 31:
            raise ConfigError("bcrypt rounds must be between 4 and 31")
        return cls(
            secret=secret,
            token_ttl_seconds=token_ttl_seconds,
            reset_code_ttl_seconds=reset_code_ttl_seconds,
            bcrypt_rounds=bcrypt_rounds,
        )
