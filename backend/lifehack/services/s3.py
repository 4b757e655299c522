"""
Modulo de servicio para Amazon S3 (almacenamiento de imagenes).

Toda la comunicacion con S3 pasa por este servicio. Las imagenes de
categorias y trucos se guardan en un bucket privado y se sirven al
publico a traves de una distribucion de CloudFront, por eso la URL que
devolvemos no es la de S3 sino https://{CLOUDFRONT_DOMAIN}/{key}.

Estructura de keys:
    public/categories/2025/03/{uuid}.png
    public/tips/2025/03/{uuid}.webp

- El prefijo "public/" es el unico que CloudFront expone.
- Anio y mes agrupan los objetos para facilitar limpiezas y auditorias.
- El nombre es un UUID: el nombre original del usuario nunca llega a S3
  (solo se guarda, sanitizado, como metadato de la imagen).

Cada objeto se sube con:
- ContentType: para que CloudFront lo sirva con el tipo correcto.
- ServerSideEncryption=AES256: cifrado en reposo.
- CacheControl de un anio: la key es unica, el contenido nunca cambia.

Patron de diseno: Servicio + Inyeccion de dependencias
------------------------------------------------------
El constructor acepta un `client` opcional: en tests pasamos el cliente
de moto (o un MagicMock) en vez del cliente real de AWS.
"""

import logging
import uuid
from datetime import datetime, timezone

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from lifehack.config import settings
from lifehack.exceptions import InfraException

logger = logging.getLogger(__name__)

CACHE_CONTROL = "public, max-age=31536000"


class S3Service:
    """
    Servicio que encapsula las operaciones con Amazon S3.

    Atributos:
        client: Cliente de boto3 para S3.
        bucket (str): Bucket donde se guardan las imagenes.
        cdn_domain (str): Dominio de CloudFront para las URLs publicas.
    """

    def __init__(self, client=None, bucket: str | None = None, cdn_domain: str | None = None):
        self.client = client or boto3.client("s3", region_name=settings.AWS_REGION)
        self.bucket = bucket or settings.S3_BUCKET
        self.cdn_domain = cdn_domain or settings.CLOUDFRONT_DOMAIN

    @staticmethod
    def build_key(prefix: str, extension: str, now: datetime | None = None) -> str:
        """
        Construye la key de un objeto nuevo.

        Parametros:
            prefix (str): "categories" o "tips".
            extension (str): Extension sin punto ("png"). Si viene vacia se
                usa "jpg".
            now (datetime | None): Fecha usada para anio/mes (UTC).

        Retorna:
            str: Ej. "public/tips/2025/03/2f1c...e9.png"
        """
        now = now or datetime.now(timezone.utc)
        ext = (extension or "jpg").lstrip(".").lower() or "jpg"
        return f"public/{prefix}/{now.year}/{now.month:02d}/{uuid.uuid4()}.{ext}"

    def public_url(self, key: str) -> str:
        return f"https://{self.cdn_domain}/{key}"

    def upload_image(self, data: bytes, key: str, content_type: str) -> str:
        """
        Sube una imagen y retorna su URL publica.

        Raises:
            InfraException: Si S3 rechaza la peticion o no hay conexion.
        """
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                ServerSideEncryption="AES256",
                CacheControl=CACHE_CONTROL,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to upload image to S3 (key={key}): {e}")
            raise InfraException("Failed to upload image to storage", e) from e

        logger.info(f"Uploaded image to s3://{self.bucket}/{key} ({len(data)} bytes)")
        return self.public_url(key)
