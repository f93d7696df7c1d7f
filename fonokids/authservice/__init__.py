from .service import AuthService, SystemClock
from .crypto import JWTTokenSigner, PasswordHasher
from .config import AuthConfig
from .deps import get_auth_service, require_claims
from .routes import router as auth_router

__all__ = [
    "AuthService",
    "SystemClock",
    "JWTTokenSigner",
    "PasswordHasher",
    "AuthConfig",
    "get_auth_service",
    "require_claims",
    "auth_router",
]
