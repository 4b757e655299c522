"""
Punto de entrada principal de la aplicacion FastAPI.

Este es el archivo "raiz" del backend. Aqui se:
1. Configura el logging (con el correlation id en cada linea).
2. Crea la instancia de la aplicacion FastAPI.
3. Registra los manejadores de errores (sobre de error comun).
4. Configura los middlewares (CORS, headers de seguridad, correlation id).
5. Registra todas las rutas (publicas, de usuario y de administracion).
6. Al arrancar, asegura la cuenta de administrador (si esta habilitado).

Arquitectura de la aplicacion (por capas):
------------------------------------------
    main.py (punto de entrada)
        |
        +-- routes/         (Controladores: reciben HTTP requests)
        |    +-- categories.py, tips.py            (publicas)
        |    +-- users.py, favorites.py            (usuario autenticado)
        |    +-- admin_*.py                        (rol Admin)
        |
        +-- services/       (Casos de uso: validan y orquestan)
        |
        +-- repositories/   (Persistencia: memoria o Firestore)
        |
        +-- models/         (Entidades, criterios de busqueda y schemas)
        |
        +-- auth.py, errors.py, middleware.py, dependencies.py
        +-- config.py       (Configuracion centralizada)
        +-- limiter.py      (Rate limiting)

El flujo de una peticion HTTP es:
    Cliente -> Correlation id -> Headers de seguridad -> CORS
            -> Rate limiter -> Router -> Endpoint -> Servicio -> Repositorio
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lifehack.config import settings
from lifehack.dependencies import get_container
from lifehack.errors import register_exception_handlers
from lifehack.limiter import limiter
from lifehack.logging_config import configure_logging
from lifehack.middleware import CORRELATION_ID_HEADER, CorrelationIdMiddleware, SecurityHeadersMiddleware
from lifehack.routes.admin_categories import router as admin_categories_router
from lifehack.routes.admin_dashboard import router as admin_dashboard_router
from lifehack.routes.admin_tips import router as admin_tips_router
from lifehack.routes.admin_users import router as admin_users_router
from lifehack.routes.categories import router as categories_router
from lifehack.routes.favorites import router as favorites_router
from lifehack.routes.tips import router as tips_router
from lifehack.routes.users import router as users_router
from lifehack.services.bootstrap import seed_admin_user

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Codigo que corre al arrancar la aplicacion.

    Usamos el container que resuelva FastAPI (respetando
    app.dependency_overrides) para que los tests puedan arrancar la app
    sin tocar Firebase.
    """
    container_factory = app.dependency_overrides.get(get_container, get_container)
    seed_admin_user(container_factory().user_service, settings)
    logger.info(f"Life Hacking Tips API started (env={settings.APP_ENV}, store={settings.DATA_STORE})")
    yield


# ---------- Creacion de la aplicacion ----------

app = FastAPI(title="Life Hacking Tips API", lifespan=lifespan)

# ---------- Rate limiter y manejo de errores ----------

# SlowAPI busca el limiter en app.state.
app.state.limiter = limiter

# Todos los errores (de dominio, de validacion, 401/403, 429 y los no
# controlados) salen con el mismo sobre JSON.
register_exception_handlers(app)

# ---------- Middlewares ----------

# Starlette ejecuta los middlewares en orden INVERSO al que se agregan:
# el ultimo agregado es el mas externo. CorrelationIdMiddleware va al
# final para que el id exista antes que cualquier otro codigo loguee.
#
# SEGURIDAD: NUNCA uses allow_origins=["*"] en produccion.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[CORRELATION_ID_HEADER],
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(CorrelationIdMiddleware)


# ---------- Health Check ----------

@app.get("/api/health")
async def health_check():
    """
    Endpoint de verificacion de salud del servidor.

    Retorna:
        dict: {"status": "ok"} si el servidor esta funcionando correctamente.
    """
    return {"status": "ok"}


# ---------- Registro de rutas ----------

app.include_router(categories_router)
app.include_router(tips_router)
app.include_router(users_router)
app.include_router(favorites_router)
app.include_router(admin_categories_router)
app.include_router(admin_tips_router)
app.include_router(admin_dashboard_router)
app.include_router(admin_users_router)
