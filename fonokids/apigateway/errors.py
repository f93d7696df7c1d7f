from __future__ import annotations
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from fonokids.authservice.errors import AuthServiceError

logger = logging.getLogger("fonokids.apigateway")

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})

async def handle_service_error(request: Request, exc: AuthServiceError) -> JSONResponse:
    logger.info(
        "request.error path=%s type=%s code=%s details=%s", request.url.path, exc.type, exc.code, exc.details or {}
    )
    return _error(exc.status_code, exc.message)

async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("request.invalid path=%s errors=%s", request.url.path, exc.errors())
    return _error(400, "Invalid request body")

async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request.unhandled path=%s", request.url.path)
    return _error(500, "Internal server error")

def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthServiceError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected)
