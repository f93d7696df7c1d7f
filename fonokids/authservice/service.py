from __future__ import annotations
import functools
import logging
from datetime import datetime, timezone
from typing import Callable, Optional, TypeVar

from fonokids.notifier import NotifierPort, render_reset_code_email

from .codes import CodeGenerator, generate_reset_code, new_reset_code
from .config import AuthConfig
from .contracts import (
    AuthStorePort, ClockPort, NewAccount, PublicAccount, TokenClaims,
    LoginRequest, CreateAccountRequest, ForgotPasswordRequest, VerifyCodeRequest, ResetPasswordRequest,
    LoginResult, CreateAccountResult, ForgotPasswordResult, VerifyCodeResult, ResetPasswordResult, ProfileResult,
)
from .crypto import JWTTokenSigner, PasswordHasher
from .errors import (
    AuthServiceError, ConflictError, DeliveryError, InternalError, InvalidCredentialsError,
    InvalidOrExpiredCodeError, MissingFieldsError, NoPasswordSetError, NotFoundError,
    PasswordTooLongError,
)

logger = logging.getLogger("fonokids.authservice")

T = TypeVar("T")

class SystemClock(ClockPort):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)

def _flow(name: str) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Domain errors pass through; anything else is logged and hidden behind InternalError."""
    def decorator(fn: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(fn)
        def wrapper(*args, **kwargs) -> T:
            try:
                return fn(*args, **kwargs)
            except AuthServiceError as ex:
                logger.info("auth.%s fail code=%s", name, ex.code)
                raise
            except Exception:
                logger.exception("auth.%s error", name)
                raise InternalError()
        return wrapper
    return decorator

def _require(*values: Optional[str], message: str = MissingFieldsError.message) -> None:
    if not all(v is not None and str(v).strip() for v in values):
        raise MissingFieldsError(message)

class AuthService:
    """
    Orchestrates login, account creation and the reset-code lifecycle over the
    credential/reset-code store, the password hasher, the token signer and the notifier.
    """
    def __init__(
        self,
        *,
        store: AuthStorePort,
        notifier: NotifierPort,
        cfg: AuthConfig,
        clock: Optional[ClockPort] = None,
        hasher: Optional[PasswordHasher] = None,
        signer: Optional[JWTTokenSigner] = None,
        code_generator: Optional[CodeGenerator] = None,
    ):
        self.store = store
        self.notifier = notifier
        self.cfg = cfg
        self.clock = clock or SystemClock()
        self.hasher = hasher or PasswordHasher(rounds=cfg.bcrypt_rounds)
        self.signer = signer or JWTTokenSigner(
            cfg.secret, clock=self.clock, ttl_seconds=cfg.token_ttl_seconds, algorithm=cfg.algorithm
        )
        self.code_generator = code_generator or generate_reset_code

    # --------- Core operations ----------
    def _check_password_length(self, password: str) -> None:
        if not self.hasher.fits(password):
            raise PasswordTooLongError()

    @_flow("login")
    def login(self, req: LoginRequest) -> LoginResult:
        _require(req.username, req.password, message="Username and password are required")
        account = self.store.get_by_login(req.username.strip())
        if account is None:
            raise InvalidCredentialsError()
        if not account.password_hash:
            raise NoPasswordSetError()
        if not self.hasher.verify(req.password, account.password_hash):
            raise InvalidCredentialsError()

        token = self.signer.issue(account.id, account.username, account.email)
        logger.info("auth.login ok account_id=%s", account.id)
        return LoginResult(token=token, user=PublicAccount.from_account(account))

    @_flow("create_account")
    def create_account(self, req: CreateAccountRequest) -> CreateAccountResult:
        _require(req.username, req.email, req.password, req.full_name)
        self._check_password_length(req.password)
        username = req.username.strip()
        email = req.email.strip()
        if self.store.identity_taken(username=username, email=email):
            raise ConflictError()

        new = NewAccount(
            username=username,
            email=email,
            full_name=req.full_name.strip(),
            password_hash=self.hasher.hash(req.password),
        )
        # the store raises ConflictError when a concurrent insert wins the unique constraint
        account = self.store.create_account(new, now=self.clock.now())
        logger.info("auth.create_account ok account_id=%s", account.id)
        return CreateAccountResult(user=PublicAccount.from_account(account))

    @_flow("forgot_password")
    def forgot_password(self, req: ForgotPasswordRequest) -> ForgotPasswordResult:
        _require(req.email, message="Email is required")
        email = req.email.strip()
        account = self.store.get_by_email(email)
        if account is None:
            raise NotFoundError("No account found for that email")

        now = self.clock.now()
        code = new_reset_code(
            account_id=account.id,
            email=email,
            code=self.code_generator(),
            now=now,
            ttl_seconds=self.cfg.reset_code_ttl_seconds,
        )
        self.store.replace_reset_code(code)
        logger.info("auth.forgot_password issued account_id=%s expires_at=%s", account.id, code.expires_at.isoformat())

        ttl_minutes = self.cfg.reset_code_ttl_seconds // 60
        message = render_reset_code_email(to=email, code=code.code, ttl_minutes=ttl_minutes, name=account.full_name)
        try:
            self.notifier.send(message)
        except Exception as ex:
            # the issued code stays valid; the caller retries the whole request
            logger.warning("auth.forgot_password delivery failed account_id=%s error=%s", account.id, ex)
            raise DeliveryError()
        return ForgotPasswordResult(expires_in_minutes=ttl_minutes)

    @_flow("verify_code")
    def verify_code(self, req: VerifyCodeRequest) -> VerifyCodeResult:
        _require(req.email, req.code, message="Email and code are required")
        found = self.store.find_active_code(email=req.email.strip(), code=req.code.strip(), now=self.clock.now())
        if found is None:
            raise InvalidOrExpiredCodeError()
        return VerifyCodeResult()

    @_flow("reset_password")
    def reset_password(self, req: ResetPasswordRequest) -> ResetPasswordResult:
        _require(req.email, req.code, req.new_password)
        self._check_password_length(req.new_password)
        email = req.email.strip()
        code = req.code.strip()
        if self.store.find_active_code(email=email, code=code, now=self.clock.now()) is None:
            raise InvalidOrExpiredCodeError()

        password_hash = self.hasher.hash(req.new_password)
        # validity is re-checked inside the consuming transaction
        account_id = self.store.consume_reset_code(
            email=email, code=code, password_hash=password_hash, now=self.clock.now()
        )
        if account_id is None:
            raise InvalidOrExpiredCodeError()
        logger.info("auth.reset_password ok account_id=%s", account_id)
        return ResetPasswordResult()

    @_flow("profile")
    def get_profile(self, claims: TokenClaims) -> ProfileResult:
        account = self.store.get_by_id(claims.user_id)
        if account is None:
            raise NotFoundError("User not found")
        return ProfileResult(user=PublicAccount.from_account(account))

    def verify_token(self, token: str) -> TokenClaims:
        return self.signer.verify(token)

