from typing import Optional

from fastapi import Depends, Header, Request

from .contracts import TokenClaims
from .errors import MissingTokenError
from .service import AuthService


def get_auth_service(request: Request) -> AuthService:
    """The service is built once by the app factory and kept on app.state."""
    return request.app.state.auth_service


def get_authorization_header(authorization: Optional[str] = Header(default=None, alias="Authorization")) -> Optional[str]:
    return authorization


def require_claims(
    auth: AuthService = Depends(get_auth_service),
    authorization: Optional[str] = Depends(get_authorization_header),
) -> TokenClaims:
    """
    Bearer-token guard. Missing token -> 401; bad or expired token -> 403.
    Claims come from the signature alone, the store is not consulted.
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        raise MissingTokenError()
    token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise MissingTokenError()
    return auth.verify_token(token)
