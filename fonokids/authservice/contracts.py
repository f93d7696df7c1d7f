from __future__ import annotations
from datetime import datetime
from typing import Optional, Protocol
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# ---------- Domain Models ----------
class Account(BaseModel):
    id: int
    username: str
    email: str
    full_name: Optional[str] = None
    password_hash: Optional[str] = None
    active: bool = True

class PublicAccount(BaseModel):
    id: int
    username: str
    email: str
    name: Optional[str] = None

    @classmethod
    def from_account(cls, account: Account) -> "PublicAccount":
        return cls(id=account.id, username=account.username, email=account.email, name=account.full_name)

class NewAccount(BaseModel):
    username: str
    email: str
    full_name: str
    password_hash: str

class ResetCode(BaseModel):
    account_id: int
    email: str
    code: str
    expires_at: datetime
    used: bool = False
    created_at: datetime

class TokenClaims(BaseModel):
    user_id: int
    username: str
    email: str
    iat: int
    exp: int

# ---------- Ports (Contracts) ----------
class ClockPort(Protocol):
    def now(self) -> datetime: ...

class CredentialStorePort(Protocol):
    """
    Accounts table. Every call reads current persisted state.
    """
    def get_by_id(self, account_id: int) -> Optional[Account]: ...
    def get_by_email(self, email: str) -> Optional[Account]: ...
    def get_by_login(self, login: str) -> Optional[Account]: ...
    def identity_taken(self, *, username: str, email: str) -> bool: ...
    def create_account(self, new: NewAccount, *, now: datetime) -> Account: ...

class ResetCodeStorePort(Protocol):
    """
    Reset-code table plus the atomic operations that span both tables.
    """
    def replace_reset_code(self, code: ResetCode) -> None:
        """Delete every code of code.account_id and insert `code`, atomically per account."""
        ...
    def find_active_code(self, *, email: str, code: str, now: datetime) -> Optional[ResetCode]: ...
    def consume_reset_code(self, *, email: str, code: str, password_hash: str, now: datetime) -> Optional[int]:
        """Re-check validity, set the password and mark the code used in one transaction.
        Returns the account id, or None when the code was no longer valid."""
        ...

class AuthStorePort(CredentialStorePort, ResetCodeStorePort, Protocol):
    pass

# ---------- Service I/O ----------
class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

class LoginRequest(_Request):
    username: Optional[str] = None
    password: Optional[str] = None

class CreateAccountRequest(_Request):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("full_name", "nombre_completo"))

class ForgotPasswordRequest(_Request):
    email: Optional[str] = None

class VerifyCodeRequest(_Request):
    email: Optional[str] = None
    code: Optional[str] = None

class ResetPasswordRequest(_Request):
    email: Optional[str] = None
    code: Optional[str] = None
    new_password: Optional[str] = Field(default=None, validation_alias=AliasChoices("new_password", "newPassword"))

class LoginResult(BaseModel):
    message: str = "Login successful"
    token: str
    user: PublicAccount

class CreateAccountResult(BaseModel):
    message: str = "User created successfully"
    user: PublicAccount

class ForgotPasswordResult(BaseModel):
    message: str = "Recovery code sent to your email"
    expires_in_minutes: int

class VerifyCodeResult(BaseModel):
    message: str = "Code verified"
    valid: bool = True

class ResetPasswordResult(BaseModel):
    message: str = "Password updated"
    success: bool = True

class ProfileResult(BaseModel):
    user: PublicAccount

# ---------- Error codes ----------
class AuthErrorCodes:
    MISSING_FIELDS = "MISSING_FIELDS"
    BAD_CREDENTIALS = "BAD_CREDENTIALS"
    NO_PASSWORD_SET = "NO_PASSWORD_SET"
    MISSING_TOKEN = "MISSING_TOKEN"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_OR_EXPIRED_CODE = "INVALID_OR_EXPIRED_CODE"
    PASSWORD_TOO_LONG = "PASSWORD_TOO_LONG"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    DELIVERY_FAILED = "DELIVERY_FAILED"
    INTERNAL = "INTERNAL"
