"""
Modulo de limitacion de tasa de peticiones (Rate Limiting).

Restringe cuantas peticiones puede hacer un mismo cliente (identificado
por su IP) en una ventana de tiempo. Sin este limite, un bot podria
saturar la API o abusar de operaciones sensibles como agregar favoritos
o crear perfiles en bucle.

Politicas:
----------
- FIXED_LIMIT ("100/minute"): endpoints publicos de lectura y todos los
  endpoints de administracion.
- STRICT_LIMIT ("10/minute"): operaciones del usuario final que escriben
  datos (favoritos y perfil).

Cuando un cliente excede su limite, SlowAPI lanza RateLimitExceeded sin
ejecutar el endpoint; main.py la traduce a una respuesta HTTP 429 con el
mismo formato de error que el resto de la API.

Arquitectura: Singleton implicito
---------------------------------
Una unica instancia de Limiter compartida por todos los routers, para
que todos cuenten sobre el mismo almacenamiento.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from lifehack.config import settings

FIXED_LIMIT = settings.RATE_LIMIT_FIXED
STRICT_LIMIT = settings.RATE_LIMIT_STRICT

# Los contadores viven en memoria del proceso. Con varias replicas se
# configuraria storage_uri apuntando a Redis.
limiter = Limiter(key_func=get_remote_address)
