from __future__ import annotations
import secrets
from datetime import datetime, timedelta
from typing import Callable

from .contracts import ResetCode

CODE_DIGITS = 6

CodeGenerator = Callable[[], str]

def generate_reset_code() -> str:
    """Uniform over 000000-999999, zero padded."""
    return f"{secrets.randbelow(10 ** CODE_DIGITS):0{CODE_DIGITS}d}"

def new_reset_code(*, account_id: int, email: str, code: str, now: datetime, ttl_seconds: int) -> ResetCode:
    return ResetCode(
        account_id=account_id,
        email=email,
        code=code,
        expires_at=now + timedelta(seconds=ttl_seconds),
        used=False,
        created_at=now,
    )

def is_active(code: ResetCode, now: datetime) -> bool:
    # expires_at == now counts as expired
    return not code.used and now < code.expires_at
