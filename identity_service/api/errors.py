from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from identity_service.core import exceptions as domain_exceptions
from identity_service.core.exceptions import ErrorKind
from identity_service.logging import get_logger
from identity_service.services.validation import ValidationErrors

logger = get_logger(__name__)

# Caller-visible detail per kind. Server-side kinds never echo the message.
_PUBLIC_DETAIL: dict[ErrorKind, str | None] = {
    ErrorKind.BAD_REQUEST: None,
    ErrorKind.CONFLICT: None,
    ErrorKind.NOT_FOUND: None,
    ErrorKind.INTERNAL: "Internal Server Error",
}

_missing = set(ErrorKind) - set(_PUBLIC_DETAIL)
if _missing:  # pragma: no cover - guards against a kind added without a mapping
    names = sorted(k.name for k in _missing)
    raise RuntimeError(f"error kinds without a transport mapping: {names}")


def _http_exception_handler(_: Request, exc: HTTPException) -> JSONResponse:
    # Normalize to a consistent JSON body
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Unparseable body or wrong JSON types; field rules are the service's job.
    logger.warning("invalid_request_body", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"detail": "invalid request body"})


def _domain_error_handler(request: Request, exc: domain_exceptions.DomainError) -> JSONResponse:
    kind = exc.kind
    log = logger.bind(
        path=request.url.path,
        method=request.method,
        kind=kind.code,
        status=kind.status_code,
    )
    if kind is ErrorKind.INTERNAL:
        log.error("request_error", error=str(exc), cause=repr(exc.cause))
    else:
        log.info("request_error", error=str(exc))

    if isinstance(exc.cause, ValidationErrors):
        return JSONResponse(
            status_code=kind.status_code,
            content={"detail": exc.message, "errors": exc.cause.as_items()},
        )

    detail = _PUBLIC_DETAIL[kind] or exc.message
    return JSONResponse(status_code=kind.status_code, content={"detail": detail})


def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Hide internal details by default
    logger.error("unhandled_exception", path=request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


def install(app) -> None:
    # Register centralized exception handlers
    app.add_exception_handler(HTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(domain_exceptions.DomainError, _domain_error_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
