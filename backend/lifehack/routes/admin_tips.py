"""
Rutas de administracion de trucos.

    POST   /api/admin/tips          -> crea un truco (201)
    PUT    /api/admin/tips/{id}     -> reemplaza el contenido del truco
    DELETE /api/admin/tips/{id}     -> borrado logico (204)
    POST   /api/admin/tips/images   -> sube una imagen a S3 (201)
"""

import uuid

from fastapi import APIRouter, Depends, File, Response, UploadFile, status
from starlette.requests import Request

from lifehack.auth import Principal, require_admin
from lifehack.config import settings
from lifehack.dependencies import Container, get_container
from lifehack.limiter import FIXED_LIMIT, limiter
from lifehack.models.schemas import CreateTipRequest, ImageDto, TipDetailResponse, UpdateTipRequest
from lifehack.services.security_events import SecurityEvents

router = APIRouter(prefix="/api/admin/tips", tags=["Admin: Tip"])


@router.post("", response_model=TipDetailResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(FIXED_LIMIT)
def create_tip(
    request: Request,
    body: CreateTipRequest,
    principal: Principal = Depends(require_admin),
    container: Container = Depends(get_container),
):
    notifier = container.notifier
    with notifier.audited(SecurityEvents.TIP_CREATE_FAILED, principal.external_id, CategoryId=str(body.category_id)):
        tip = container.tip_service.create_tip(body)
    notifier.success(SecurityEvents.TIP_CREATED, principal.external_id, TipId=str(tip.id))
    return tip


@router.put("/{tip_id}", response_model=TipDetailResponse)
@limiter.limit(FIXED_LIMIT)
def update_tip(
    request: Request,
    tip_id: uuid.UUID,
    body: UpdateTipRequest,
    principal: Principal = Depends(require_admin),
    container: Container = Depends(get_container),
):
    notifier = container.notifier
    with notifier.audited(SecurityEvents.TIP_UPDATE_FAILED, principal.external_id, TipId=str(tip_id)):
        tip = container.tip_service.update_tip(tip_id, body)
    notifier.success(SecurityEvents.TIP_UPDATED, principal.external_id, TipId=str(tip_id))
    return tip


@router.delete("/{tip_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(FIXED_LIMIT)
def delete_tip(
    request: Request,
    tip_id: uuid.UUID,
    principal: Principal = Depends(require_admin),
    container: Container = Depends(get_container),
):
    notifier = container.notifier
    with notifier.audited(SecurityEvents.TIP_DELETE_FAILED, principal.external_id, TipId=str(tip_id)):
        container.tip_service.delete_tip(tip_id)
    notifier.success(SecurityEvents.TIP_DELETED, principal.external_id, TipId=str(tip_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/images", response_model=ImageDto, status_code=status.HTTP_201_CREATED)
@limiter.limit(FIXED_LIMIT)
def upload_tip_image(
    request: Request,
    file: UploadFile = File(...),
    principal: Principal = Depends(require_admin),
    container: Container = Depends(get_container),
):
    # Igual que en categorias: nunca leemos mas de MAX_IMAGE_SIZE + 1 bytes.
    data = file.file.read(settings.MAX_IMAGE_SIZE + 1)

    notifier = container.notifier
    with notifier.audited(
        SecurityEvents.TIP_IMAGE_UPLOAD_FAILED,
        principal.external_id,
        FileName=file.filename,
        ContentType=file.content_type,
    ):
        image = container.image_service.upload_tip_image(data, file.filename, file.content_type)
    notifier.success(
        SecurityEvents.TIP_IMAGE_UPLOADED,
        principal.external_id,
        StoragePath=image.image_storage_path,
        FileSizeBytes=image.file_size_bytes,
    )
    return ImageDto.from_entity(image)
