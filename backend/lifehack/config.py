"""
Modulo de configuracion centralizada de la API de trucos (life hacks).

Todas las opciones que cambian entre entornos (desarrollo, staging,
produccion, tests) se leen desde variables de entorno con os.getenv.
Asi la misma imagen de Docker sirve para todos los entornos y ninguna
credencial queda escrita en el codigo fuente.

Grupos de configuracion:
1. Entorno y CORS.
2. Almacenamiento de datos (memoria o Firestore).
3. Firebase (autenticacion y Firestore).
4. Imagenes (S3 + CloudFront).
5. Rate limiting.
6. Cache de categorias.
7. Usuario administrador inicial (bootstrap).
8. Logging.

Patron de diseno: Singleton implicito
La instancia `settings` se crea una sola vez al importar el modulo y
todos los modulos que hacen `from lifehack.config import settings`
comparten la misma instancia.
"""

import os


def _as_bool(value: str | None, default: bool = False) -> bool:
    """Interpreta "1", "true", "yes" y "on" como verdadero."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    """
    Clase que encapsula toda la configuracion de la aplicacion.

    Es una clase simple (sin pydantic-settings): cada atributo lee su
    variable de entorno una vez, al importar el modulo. En tests se puede
    crear otra instancia o parchear atributos concretos.
    """

    # ---------- Entorno ----------

    # "development" relaja algunas reglas (ej: la politica de contrasena
    # del administrador inicial). Cualquier otro valor se trata como
    # entorno productivo.
    APP_ENV: str = os.getenv("APP_ENV", "development")

    # Origenes permitidos por CORS, separados por coma.
    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")

    # ---------- Almacenamiento de datos ----------

    # "memory": repositorios en memoria (tests y desarrollo local).
    # "firestore": repositorios respaldados por Google Cloud Firestore.
    DATA_STORE: str = os.getenv("DATA_STORE", "memory")

    # Prefijo que se antepone a los nombres de coleccion de Firestore.
    # En produccion es vacio; contra el emulador se usa "test_" para no
    # mezclar datos de pruebas con datos reales.
    FIRESTORE_COLLECTION_PREFIX: str = os.getenv("FIRESTORE_COLLECTION_PREFIX", "")

    # ---------- Firebase ----------

    # Ruta al JSON de la cuenta de servicio. Si esta vacia, el SDK usa
    # las Application Default Credentials del entorno.
    FIREBASE_CREDENTIALS_PATH: str = os.getenv("FIREBASE_CREDENTIALS_PATH", "")
    FIREBASE_PROJECT_ID: str = os.getenv("FIREBASE_PROJECT_ID", "")

    # ---------- Imagenes (S3 + CloudFront) ----------

    S3_BUCKET: str = os.getenv("S3_BUCKET", "lifehack-images")
    AWS_REGION: str = os.getenv("AWS_REGION", "us-east-1")

    # Dominio de la distribucion de CloudFront que sirve el bucket.
    # Las URLs publicas se construyen como https://{dominio}/{key}.
    CLOUDFRONT_DOMAIN: str = os.getenv("CLOUDFRONT_DOMAIN", "cdn.lifehack.local")

    # Tamano maximo de una imagen subida: 5 MB.
    MAX_IMAGE_SIZE: int = 5 * 1024 * 1024

    # Lista blanca de tipos de imagen y la extension que usamos al
    # guardarlas en S3 cuando el nombre original no trae una.
    ALLOWED_IMAGE_TYPES: dict[str, str] = {
        "image/jpeg": "jpg",
        "image/png": "png",
        "image/gif": "gif",
        "image/webp": "webp",
    }

    # Prefijos de S3 para cada tipo de imagen.
    CATEGORY_IMAGE_PREFIX: str = "categories"
    TIP_IMAGE_PREFIX: str = "tips"

    # ---------- Rate limiting ----------

    # Politica "fixed": lecturas y escrituras de administracion.
    RATE_LIMIT_FIXED: str = os.getenv("RATE_LIMIT_FIXED", "100/minute")

    # Politica "strict": operaciones sensibles del usuario final
    # (favoritos, alta/baja/edicion de perfil).
    RATE_LIMIT_STRICT: str = os.getenv("RATE_LIMIT_STRICT", "10/minute")

    # ---------- Cache ----------

    # Segundos que el listado y el detalle de categorias quedan en cache.
    CATEGORY_CACHE_TTL_SECONDS: int = int(os.getenv("CATEGORY_CACHE_TTL_SECONDS", "3600"))

    # ---------- Administrador inicial ----------

    ADMIN_SEED_ENABLED: bool = _as_bool(os.getenv("ADMIN_SEED_ENABLED"))
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "")
    ADMIN_DISPLAY_NAME: str = os.getenv("ADMIN_DISPLAY_NAME", "Administrator")

    # ---------- Logging ----------

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def is_development(self) -> bool:
        return self.APP_ENV.lower() == "development"


settings = Settings()
