import traceback
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import ServiceError
from .logging import get_logger

logger = get_logger(__name__)

_STATUS_TO_CODE = {
    400: "validation_failed",
    401: "unauthorized",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    500: "server_fault",
}


def _error_response(
    status_code: int,
    message: str,
    code: Optional[str] = None,
    extra: Optional[dict] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    body = {"message": message, "error": code or _STATUS_TO_CODE.get(status_code, "server_fault")}
    if extra:
        body.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


def register_exception_handlers(app: FastAPI, expose_details: bool) -> None:
    """Install the JSON error handlers.

    ``expose_details`` adds diagnostics (exception text, stack) to 500 bodies
    and must be off in production.
    """

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        log_fn = logger.error if exc.status_code >= 500 else logger.warning
        log_fn(
            "service_error",
            path=request.url.path,
            method=request.method,
            status_code=exc.status_code,
            error_code=exc.error_code,
            message=exc.message,
        )
        extra = {"detail": exc.detail} if exc.detail and (exc.status_code < 500 or expose_details) else None
        return _error_response(exc.status_code, exc.message, exc.error_code, extra)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        logger.warning(
            "request_validation_failed",
            path=request.url.path,
            method=request.method,
            errors=len(exc.errors()),
        )
        errors = [
            {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg")}
            for err in exc.errors()
        ]
        return _error_response(400, "Invalid request.", "validation_failed", {"errors": errors})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        return _error_response(exc.status_code, message, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_uncaught(request: Request, exc: Exception):
        logger.exception(
            "unhandled_exception",
            exc_info=exc,
            path=request.url.path,
            method=request.method,
        )
        extra = None
        if expose_details:
            extra = {
                "detail": str(exc),
                "stack": traceback.format_exception(type(exc), exc, exc.__traceback__),
            }
        return _error_response(500, "Internal server error.", "server_fault", extra)
