"""
Middlewares propios de la API.

Un middleware es codigo que se ejecuta antes y despues de cada peticion.
Aqui definimos dos:

1. CorrelationIdMiddleware
   Cada peticion recibe un "correlation id": un identificador que viaja
   en el header X-Correlation-ID, aparece en todos los logs de esa
   peticion y se devuelve al cliente (tambien dentro de los errores).
   Si un usuario reporta un fallo, con ese id encontramos sus logs.

   El cliente puede enviar su propio id, pero solo lo aceptamos si mide
   como maximo 128 caracteres y usa caracteres seguros
   (letras, digitos, "-", "_", ".", ":"). Asi evitamos inyeccion de
   saltos de linea en los logs y headers gigantes. Si no es valido,
   generamos un UUID v4 nuevo.

2. SecurityHeadersMiddleware
   Agrega headers de seguridad a todas las respuestas, sin pisar los que
   un endpoint haya definido explicitamente:
       X-Content-Type-Options: nosniff
       X-Frame-Options: DENY
       Referrer-Policy: strict-origin-when-cross-origin
       Content-Security-Policy: default-src 'self'

El correlation id se guarda en un ContextVar: una variable "por
peticion" que cualquier modulo puede leer (los logs, el notificador de
eventos de seguridad) sin recibir el Request como parametro.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

CORRELATION_ID_HEADER = "X-Correlation-ID"
CORRELATION_ID_MAX_LENGTH = 128
CORRELATION_ID_PATTERN = re.compile(r"^[a-zA-Z0-9\-_.:]+$")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": "default-src 'self'",
}

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="-")


def get_correlation_id() -> str:
    return _correlation_id.get()


def resolve_correlation_id(value: str | None) -> str:
    """Retorna el id recibido si es seguro, o uno nuevo si no lo es."""
    if value and len(value) <= CORRELATION_ID_MAX_LENGTH and CORRELATION_ID_PATTERN.match(value):
        return value
    return str(uuid.uuid4())


def correlation_id_for(request: Request) -> str:
    return getattr(request.state, "correlation_id", None) or get_correlation_id()


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        correlation_id = resolve_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
        request.state.correlation_id = correlation_id
        token = _correlation_id.set(correlation_id)
        try:
            response = await call_next(request)
        finally:
            _correlation_id.reset(token)
        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            if name not in response.headers:
                response.headers[name] = value
        return response
