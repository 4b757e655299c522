"""
Rutas de administracion de categorias.

    POST   /api/admin/categories          -> crea una categoria (201)
    PUT    /api/admin/categories/{id}     -> renombra / cambia la imagen
    DELETE /api/admin/categories/{id}     -> borrado logico en cascada (204)
    POST   /api/admin/categories/images   -> sube una imagen a S3 (201)

Todas exigen un token con rol Admin (ver lifehack.auth.require_admin).

Cada escritura emite un evento de auditoria: el de exito lo emitimos
aqui despues de la operacion, y el de fallo lo emite
`notifier.audited(...)` si el servicio lanza una excepcion. La excepcion
se vuelve a lanzar para que el manejador central arme la respuesta.
"""

import uuid

from fastapi import APIRouter, Depends, File, Response, UploadFile, status
from starlette.requests import Request

from lifehack.auth import Principal, require_admin
from lifehack.config import settings
from lifehack.dependencies import Container, get_container
from lifehack.limiter import FIXED_LIMIT, limiter
from lifehack.models.schemas import CategoryResponse, CreateCategoryRequest, ImageDto, UpdateCategoryRequest
from lifehack.services.security_events import SecurityEvents

router = APIRouter(prefix="/api/admin/categories", tags=["Admin: Category"])


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(FIXED_LIMIT)
def create_category(
    request: Request,
    body: CreateCategoryRequest,
    principal: Principal = Depends(require_admin),
    container: Container = Depends(get_container),
):
    notifier = container.notifier
    with notifier.audited(SecurityEvents.CATEGORY_CREATE_FAILED, principal.external_id, CategoryName=body.name):
        category = container.category_service.create_category(body)
    notifier.success(SecurityEvents.CATEGORY_CREATED, principal.external_id, CategoryId=str(category.id))
    return category


@router.put("/{category_id}", response_model=CategoryResponse)
@limiter.limit(FIXED_LIMIT)
def update_category(
    request: Request,
    category_id: uuid.UUID,
    body: UpdateCategoryRequest,
    principal: Principal = Depends(require_admin),
    container: Container = Depends(get_container),
):
    notifier = container.notifier
    with notifier.audited(SecurityEvents.CATEGORY_UPDATE_FAILED, principal.external_id, CategoryId=str(category_id)):
        category = container.category_service.update_category(category_id, body)
    notifier.success(SecurityEvents.CATEGORY_UPDATED, principal.external_id, CategoryId=str(category_id))
    return category


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(FIXED_LIMIT)
def delete_category(
    request: Request,
    category_id: uuid.UUID,
    principal: Principal = Depends(require_admin),
    container: Container = Depends(get_container),
):
    """
    Borra logicamente la categoria y todos sus trucos activos.

    Los registros no se eliminan: quedan con is_deleted=True y el mismo
    deleted_at, y dejan de aparecer en las lecturas publicas.
    """
    notifier = container.notifier
    with notifier.audited(SecurityEvents.CATEGORY_DELETE_FAILED, principal.external_id, CategoryId=str(category_id)):
        container.category_service.delete_category(category_id)
    notifier.success(SecurityEvents.CATEGORY_DELETED, principal.external_id, CategoryId=str(category_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/images", response_model=ImageDto, status_code=status.HTTP_201_CREATED)
@limiter.limit(FIXED_LIMIT)
def upload_category_image(
    request: Request,
    file: UploadFile = File(...),
    principal: Principal = Depends(require_admin),
    container: Container = Depends(get_container),
):
    """
    Sube la imagen de una categoria y retorna su metadata.

    El cliente guarda la metadata retornada y la envia luego en el campo
    `image` de POST/PUT /api/admin/categories.

    Leemos MAX_IMAGE_SIZE + 1 bytes: si llegan mas de MAX_IMAGE_SIZE el
    archivo es demasiado grande y el validador lo rechaza sin haber
    cargado el archivo completo en memoria.

    El handler es sincrono (def, no async def): FastAPI lo ejecuta en su
    threadpool y la subida con boto3 no bloquea el event loop.
    """
    data = file.file.read(settings.MAX_IMAGE_SIZE + 1)

    notifier = container.notifier
    with notifier.audited(
        SecurityEvents.CATEGORY_IMAGE_UPLOAD_FAILED,
        principal.external_id,
        FileName=file.filename,
        ContentType=file.content_type,
    ):
        image = container.image_service.upload_category_image(data, file.filename, file.content_type)
    notifier.success(
        SecurityEvents.CATEGORY_IMAGE_UPLOADED,
        principal.external_id,
        StoragePath=image.image_storage_path,
        FileSizeBytes=image.file_size_bytes,
    )
    return ImageDto.from_entity(image)
