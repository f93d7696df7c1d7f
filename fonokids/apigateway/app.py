from __future__ import annotations
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI

from fonokids.authservice import AuthConfig, AuthService, SystemClock, auth_router
from fonokids.authservice.codes import CodeGenerator
from fonokids.authservice.contracts import AuthStorePort, ClockPort
from fonokids.notifier import LogNotifier, NotifierPort, SmtpNotifier
from fonokids.patientstore import SqlPatientStore, create_tables, make_engine, make_session_factory
from fonokids.profileservice import ProfileService, profile_router

from .errors import install_error_handlers
from .observability import RequestContextMiddleware, configure_logging
from .settings import Settings

logger = logging.getLogger("fonokids.apigateway")

def build_notifier(settings: Settings) -> NotifierPort:
    if settings.smtp_configured:
        return SmtpNotifier(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            from_address=settings.EMAIL_FROM,
            from_name=settings.EMAIL_FROM_NAME,
            timeout=settings.SMTP_TIMEOUT_SECONDS,
        )
    logger.warning("SMTP is not configured; reset codes will be written to the log")
    return LogNotifier()

def build_store(settings: Settings) -> SqlPatientStore:
    engine = make_engine(settings.DATABASE_URL, pool_size=settings.DB_POOL_SIZE, max_overflow=settings.DB_MAX_OVERFLOW)
    create_tables(engine)
    return SqlPatientStore(make_session_factory(engine))

def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[AuthStorePort] = None,
    notifier: Optional[NotifierPort] = None,
    clock: Optional[ClockPort] = None,
    code_generator: Optional[CodeGenerator] = None,
) -> FastAPI:
    settings = settings or Settings()
    configure_logging(settings.LOG_LEVEL)

    # fails fast on a missing signing secret
    cfg = AuthConfig.build(
        settings.JWT_SECRET,
        allow_dev_secret=settings.ALLOW_INSECURE_DEV_SECRET,
        token_ttl_seconds=settings.TOKEN_TTL_SECONDS,
        reset_code_ttl_seconds=settings.RESET_CODE_TTL_SECONDS,
        bcrypt_rounds=settings.BCRYPT_ROUNDS,
    )
    clock = clock or SystemClock()
    store = store or build_store(settings)
    notifier = notifier or build_notifier(settings)

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION)
    app.state.settings = settings
    app.state.auth_service = AuthService(
        store=store, notifier=notifier, cfg=cfg, clock=clock, code_generator=code_generator
    )
    app.state.profile_service = ProfileService(store=store, clock=clock)

    app.add_middleware(RequestContextMiddleware)
    install_error_handlers(app)

    # Routers
    app.include_router(auth_router, prefix=settings.API_PREFIX)
    app.include_router(profile_router, prefix=settings.API_PREFIX)

    @app.get("/health")
    def health():
        return {"status": "ok", "version": settings.APP_VERSION}

    return app

def main() -> None:
    settings = Settings()
    uvicorn.run("fonokids.apigateway.app:create_app", factory=True, host=settings.HOST, port=settings.PORT)
