from __future__ import annotations
from typing import Any, Dict

import bcrypt
import jwt

from .contracts import ClockPort, TokenClaims
from .errors import InvalidTokenError, TokenExpiredError

# bcrypt only reads this many bytes of the input
MAX_PASSWORD_BYTES = 72

class PasswordHasher:
    """
    bcrypt hasher. The salt is generated per hash and embedded in the digest.
    """
    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    @staticmethod
    def fits(password: str) -> bool:
        return len(password.encode("utf-8")) <= MAX_PASSWORD_BYTES

    def hash(self, password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, password: str, encoded: str) -> bool:
        if not encoded:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), encoded.encode("utf-8"))
        except (ValueError, TypeError):
            return False

class JWTTokenSigner:
    """
    HS256 session tokens via PyJWT. Expiry is checked against the injected clock
    so that lifetimes are testable without sleeping.
    """
    def __init__(self, secret: str, *, clock: ClockPort, ttl_seconds: int = 86400, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("JWTTokenSigner requires non-empty secret")
        self._secret = secret
        self._clock = clock
        self._ttl = ttl_seconds
        self._alg = algorithm

    def issue(self, account_id: int, username: str, email: str) -> str:
        now = int(self._clock.now().timestamp())
        claims = TokenClaims(user_id=account_id, username=username, email=email, iat=now, exp=now + self._ttl)
        return jwt.encode(claims.model_dump(), self._secret, algorithm=self._alg)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload: Dict[str, Any] = jwt.decode(
                token,
                self._secret,
                algorithms=[self._alg],
                options={"verify_exp": False, "verify_iat": False, "require": ["exp", "iat"]},
            )
            claims = TokenClaims.model_validate(payload)
        except (jwt.PyJWTError, ValueError) as ex:
            raise InvalidTokenError(details={"reason": str(ex)})
        if int(self._clock.now().timestamp()) >= claims.exp:
            raise TokenExpiredError()
        return claims
