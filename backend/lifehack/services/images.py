"""
Caso de uso: subir imagenes de categorias y trucos.

Flujo:
    1. Validar la imagen (tamano, tipo declarado, magic bytes).
    2. Sanitizar el nombre original.
    3. Generar una key unica bajo public/{prefijo}/{anio}/{mes}/.
    4. Subir a S3 y construir la URL publica de CloudFront.
    5. Retornar los metadatos (ImageMetadata) para que el panel de
       administracion los adjunte al crear o editar la categoria/truco.

La subida es independiente de la creacion: primero se sube la imagen y
luego se envia su metadata en el cuerpo del POST/PUT de la entidad.
"""

import logging
import os

from lifehack.config import settings
from lifehack.exceptions import ValidationException
from lifehack.models.entities import ImageMetadata, utcnow
from lifehack.services.s3 import S3Service
from lifehack.services.validator import sanitize_file_name, validate_image

logger = logging.getLogger(__name__)


class ImageService:
    def __init__(self, storage: S3Service):
        self.storage = storage

    def upload(self, data: bytes, file_name: str | None, content_type: str | None, prefix: str) -> ImageMetadata:
        """
        Valida y sube una imagen.

        Raises:
            ValidationException: Si la imagen no pasa la validacion.
            InfraException: Si S3 falla.
        """
        result = validate_image(data, content_type)
        if not result.is_valid:
            raise ValidationException(result.error, errors={"File": [result.error]})

        safe_name = sanitize_file_name(file_name) or "image"
        extension = os.path.splitext(safe_name)[1].lstrip(".")
        if not extension:
            extension = settings.ALLOWED_IMAGE_TYPES[result.mime_type]

        key = S3Service.build_key(prefix, extension)
        url = self.storage.upload_image(data, key, result.mime_type)

        return ImageMetadata.create(
            image_url=url,
            image_storage_path=key,
            original_file_name=safe_name,
            content_type=result.mime_type,
            file_size_bytes=len(data),
            uploaded_at=utcnow(),
        )

    def upload_category_image(self, data: bytes, file_name: str | None, content_type: str | None) -> ImageMetadata:
        return self.upload(data, file_name, content_type, settings.CATEGORY_IMAGE_PREFIX)

    def upload_tip_image(self, data: bytes, file_name: str | None, content_type: str | None) -> ImageMetadata:
        return self.upload(data, file_name, content_type, settings.TIP_IMAGE_PREFIX)
