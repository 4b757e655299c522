"""
Modulo de validacion de imagenes subidas.

Es la primera linea de defensa antes de guardar una imagen en S3.
Verifica, en orden de costo:
1. Que el archivo no este vacio ni supere los 5 MB.
2. Que el Content-Type declarado este en la lista blanca
   (jpeg, png, gif, webp).
3. Que el tipo real del archivo, detectado por sus magic bytes con
   python-magic, coincida con el declarado.

Por que no confiamos solo en el Content-Type?
---------------------------------------------
Porque lo envia el cliente. Un atacante podria subir un HTML o un
ejecutable con Content-Type: image/png. Los magic bytes (la "firma" de
los primeros bytes del archivo) revelan el formato real:
    - PNG:  89 50 4E 47 0D 0A 1A 0A
    - JPEG: FF D8 FF
    - GIF:  47 49 46 38 ("GIF8")
    - WebP: 52 49 46 46 ("RIFF") ... 57 45 42 50 ("WEBP")

Ademas sanitizamos el nombre original del archivo, que se guarda como
metadato de la imagen y se muestra en el panel de administracion.
"""

import os
from dataclasses import dataclass

import magic

from lifehack.config import settings

MAX_FILE_NAME_LENGTH = 255


@dataclass
class ValidationResult:
    """
    Resultado de la validacion de una imagen.

    Atributos:
        is_valid (bool): True si paso todas las validaciones.
        mime_type (str): Tipo detectado por magic bytes (si se llego a
            detectar).
        error (str): Motivo del rechazo; vacio si is_valid es True.
    """
    is_valid: bool
    mime_type: str = ""
    error: str = ""


def sanitize_file_name(file_name: str | None) -> str:
    """
    Limpia el nombre de archivo enviado por el cliente.

    - Elimina bytes nulos.
    - Elimina secuencias de path traversal ("../" y "..\\").
    - Elimina separadores de ruta ("/" y "\\").
    - Recorta espacios.
    - Limita a 255 caracteres conservando la extension.

    Ejemplos:
        "../../etc/passwd"   -> "etcpasswd"
        "  foto\\x00.png  "   -> "foto.png"
    """
    sanitized = (file_name or "").replace("\0", "")
    sanitized = sanitized.replace("../", "").replace("..\\", "")
    sanitized = sanitized.replace("/", "").replace("\\", "")
    sanitized = sanitized.strip()

    if len(sanitized) > MAX_FILE_NAME_LENGTH:
        stem, ext = os.path.splitext(sanitized)
        if ext and len(ext) < MAX_FILE_NAME_LENGTH:
            sanitized = stem[:MAX_FILE_NAME_LENGTH - len(ext)] + ext
        else:
            sanitized = sanitized[:MAX_FILE_NAME_LENGTH]
    return sanitized


def validate_image(data: bytes, declared_content_type: str | None) -> ValidationResult:
    """
    Valida una imagen por tamano, tipo declarado y magic bytes.

    Parametros:
        data (bytes): Contenido completo del archivo.
        declared_content_type (str | None): Content-Type enviado por el
            cliente en el multipart.

    Retorna:
        ValidationResult
    """

    # --- Validacion 1: Tamano ---
    if len(data) > settings.MAX_IMAGE_SIZE:
        return ValidationResult(
            is_valid=False,
            error=f"File size cannot exceed {settings.MAX_IMAGE_SIZE // (1024 * 1024)}MB",
        )
    if not data:
        return ValidationResult(is_valid=False, error="File cannot be empty")

    # --- Validacion 2: Tipo declarado en la lista blanca ---
    content_type = (declared_content_type or "").strip().lower()
    if content_type not in settings.ALLOWED_IMAGE_TYPES:
        allowed = ", ".join(settings.ALLOWED_IMAGE_TYPES)
        return ValidationResult(is_valid=False, error=f"Content type must be one of: {allowed}")

    # --- Validacion 3: Magic bytes ---
    mime_type = magic.from_buffer(data, mime=True)
    if mime_type != content_type:
        return ValidationResult(
            is_valid=False,
            mime_type=mime_type,
            error="File format does not match the declared content type",
        )

    return ValidationResult(is_valid=True, mime_type=mime_type)
