from __future__ import annotations
import contextvars
import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("fonokids.apigateway")

REQUEST_ID_HEADER = "x-request-id"

_request_id: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="-")


class RequestIdFilter(logging.Filter):
    """Stamps every record with the id of the request being served."""
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()
        return True


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"))

    root = logging.getLogger("fonokids")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    # idempotent across repeated app construction
    root.handlers = [handler]


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        token = _request_id.set(request_id)
        started = time.perf_counter()
        try:
            try:
                response: Response = await call_next(request)
            except Exception:
                logger.exception("%s %s raised after %dms", request.method, request.url.path, _elapsed_ms(started))
                raise
            response.headers[REQUEST_ID_HEADER] = request_id
            logger.info(
                "%s %s -> %s in %dms", request.method, request.url.path, response.status_code, _elapsed_ms(started)
            )
            return response
        finally:
            _request_id.reset(token)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
