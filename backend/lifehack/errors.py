"""
Manejo centralizado de errores.

Traduce cualquier excepcion que escape de un endpoint a una respuesta
JSON con un formato unico (estilo RFC 7807, "problem details"):

    {
        "status": 409,
        "type": "https://httpstatuses.io/409/conflict",
        "title": "Conflict",
        "detail": "Category with name 'Cocina' already exists",
        "instance": "/api/admin/categories",
        "correlationId": "4f6c...",
        "errors": {"Name": ["..."]}      # solo en errores de validacion
    }

Asi el frontend siempre sabe como leer un error sin importar el
endpoint. Los errores 500 nunca exponen el mensaje interno: el detalle
real queda en los logs, enlazado por el correlationId.
"""

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from lifehack.exceptions import AppException, ErrorType, ValidationException
from lifehack.middleware import CORRELATION_ID_HEADER, correlation_id_for
from lifehack.models.schemas import ErrorResponse

logger = logging.getLogger(__name__)

GENERIC_ERROR_DETAIL = "An unexpected error occurred while processing the request. Please try again later."

# tipo de error -> (status HTTP, URI del tipo, titulo)
PROBLEM_TYPES = {
    ErrorType.VALIDATION: (400, "https://httpstatuses.io/400/validation-error", "Validation error"),
    ErrorType.NOT_FOUND: (404, "https://httpstatuses.io/404/resource-not-found", "Resource not found"),
    ErrorType.CONFLICT: (409, "https://httpstatuses.io/409/conflict", "Conflict"),
    ErrorType.INFRASTRUCTURE: (500, "https://httpstatuses.io/500/infrastructure-error", "Infrastructure error"),
}
GENERIC_PROBLEM = (500, "https://httpstatuses.io/500/generic-error", "Unexpected error")

HTTP_TITLES = {
    401: "Unauthorized",
    403: "Forbidden",
    404: "Resource not found",
    405: "Method not allowed",
    429: "Too many requests",
}


def problem_response(
    request: Request,
    status: int,
    type_uri: str,
    title: str,
    detail: str,
    errors: dict[str, list[str]] | None = None,
    headers: dict | None = None,
) -> JSONResponse:
    correlation_id = correlation_id_for(request)
    body = ErrorResponse(
        status=status,
        type=type_uri,
        title=title,
        detail=detail,
        instance=request.url.path,
        correlation_id=correlation_id,
        errors=errors or None,
    )
    response_headers = {CORRELATION_ID_HEADER: correlation_id}
    response_headers.update(headers or {})
    return JSONResponse(
        status_code=status,
        content=body.model_dump(by_alias=True, exclude_none=True),
        headers=response_headers,
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    status, type_uri, title = PROBLEM_TYPES[exc.error_type]

    if exc.error_type == ErrorType.INFRASTRUCTURE:
        cause = getattr(exc, "cause", None)
        logger.error(f"Infrastructure error on {request.url.path}: {exc.message}", exc_info=cause)
        return problem_response(request, status, type_uri, title, GENERIC_ERROR_DETAIL)

    logger.info(f"{exc.error_type.value} error on {request.url.path}: {exc.message}")
    errors = exc.errors if isinstance(exc, ValidationException) else None
    return problem_response(request, status, type_uri, title, exc.message, errors)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    status = exc.status_code
    title = HTTP_TITLES.get(status, "Error")
    return problem_response(
        request,
        status,
        f"https://httpstatuses.io/{status}",
        title,
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Errores de binding de FastAPI (JSON mal formado, UUID invalido en la
    ruta, campo obligatorio ausente...). Se responden como 400 con un
    mapa de errores por campo, igual que los de dominio.
    """
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(location) or "request"
        errors.setdefault(field, []).append(error.get("msg", "Invalid value"))

    status, type_uri, title = PROBLEM_TYPES[ErrorType.VALIDATION]
    return problem_response(request, status, type_uri, title, ValidationException.DEFAULT_MESSAGE, errors)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(f"Rate limit exceeded on {request.url.path}: {exc.detail}")
    return problem_response(
        request,
        429,
        "https://httpstatuses.io/429",
        HTTP_TITLES[429],
        f"Rate limit exceeded: {exc.detail}",
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled exception on {request.url.path}")
    status, type_uri, title = GENERIC_PROBLEM
    return problem_response(request, status, type_uri, title, GENERIC_ERROR_DETAIL)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
