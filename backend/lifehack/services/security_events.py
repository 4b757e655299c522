"""
Notificador de eventos de seguridad (auditoria).

Registra en el logger "lifehack.security" las operaciones relevantes
para auditoria: altas/bajas/cambios de usuarios, favoritos, escrituras
de categorias y trucos, subidas de imagenes y accesos denegados a
endpoints de administracion.

Cada evento lleva:
    - event_name: ej. "user.created", "favorite.add.failed"
    - subject_id: usuario (o entidad) afectado
    - outcome: "Success" o "Failure"
    - correlation_id: el mismo id que viaja en X-Correlation-ID
    - properties: contexto adicional (RoutePath, ExceptionType...)

Los fallos de alto valor (operaciones de usuario y accesos denegados)
se registran con nivel WARNING para que las alertas los detecten; el
resto con INFO.
"""

import logging
from contextlib import contextmanager

from lifehack.middleware import get_correlation_id

logger = logging.getLogger("lifehack.security")

SUCCESS = "Success"
FAILURE = "Failure"


class SecurityEvents:
    USER_CREATED = "user.created"
    USER_CREATE_FAILED = "user.create.failed"
    USER_UPDATED = "user.updated"
    USER_UPDATE_FAILED = "user.update.failed"
    USER_DELETED = "user.deleted"
    USER_DELETE_FAILED = "user.delete.failed"
    ADMIN_ACCESS_DENIED = "admin.endpoint.access.denied"
    FAVORITE_ADDED = "favorite.added"
    FAVORITE_ADD_FAILED = "favorite.add.failed"
    FAVORITE_REMOVED = "favorite.removed"
    FAVORITE_REMOVE_FAILED = "favorite.remove.failed"
    FAVORITES_MERGED = "favorites.merged"
    FAVORITES_MERGE_FAILED = "favorites.merge.failed"
    CATEGORY_CREATED = "category.created"
    CATEGORY_CREATE_FAILED = "category.create.failed"
    CATEGORY_UPDATED = "category.updated"
    CATEGORY_UPDATE_FAILED = "category.update.failed"
    CATEGORY_DELETED = "category.deleted"
    CATEGORY_DELETE_FAILED = "category.delete.failed"
    CATEGORY_IMAGE_UPLOADED = "category.image.upload.success"
    CATEGORY_IMAGE_UPLOAD_FAILED = "category.image.upload.failed"
    TIP_CREATED = "tip.created"
    TIP_CREATE_FAILED = "tip.create.failed"
    TIP_UPDATED = "tip.updated"
    TIP_UPDATE_FAILED = "tip.update.failed"
    TIP_DELETED = "tip.deleted"
    TIP_DELETE_FAILED = "tip.delete.failed"
    TIP_IMAGE_UPLOADED = "tip.image.upload.success"
    TIP_IMAGE_UPLOAD_FAILED = "tip.image.upload.failed"


HIGH_VALUE_FAILURES = {
    SecurityEvents.USER_CREATE_FAILED,
    SecurityEvents.USER_UPDATE_FAILED,
    SecurityEvents.USER_DELETE_FAILED,
    SecurityEvents.ADMIN_ACCESS_DENIED,
}


class SecurityEventNotifier:
    def notify(
        self,
        event_name: str,
        subject_id=None,
        outcome: str = SUCCESS,
        properties: dict | None = None,
        correlation_id: str | None = None,
    ) -> dict:
        """
        Registra un evento de seguridad y retorna el registro emitido
        (util para tests).
        """
        record = {
            "event_name": event_name,
            "subject_id": str(subject_id) if subject_id is not None else None,
            "outcome": outcome,
            "correlation_id": correlation_id or get_correlation_id(),
            "properties": dict(properties or {}),
        }

        level = logging.INFO
        if outcome == FAILURE and event_name in HIGH_VALUE_FAILURES:
            level = logging.WARNING

        logger.log(
            level,
            f"Security event {event_name} outcome={outcome} subject={record['subject_id']} "
            f"properties={record['properties']}",
            extra={"security_event": record},
        )
        return record

    def failure(self, event_name: str, subject_id=None, error: Exception | None = None, **properties) -> dict:
        if error is not None:
            properties.setdefault("ExceptionType", type(error).__name__)
        return self.notify(event_name, subject_id, FAILURE, properties)

    def success(self, event_name: str, subject_id=None, **properties) -> dict:
        return self.notify(event_name, subject_id, SUCCESS, properties)

    @contextmanager
    def audited(self, failure_event: str, subject_id=None, **properties):
        """
        Registra `failure_event` si el bloque lanza una excepcion y la
        vuelve a lanzar. El evento de exito lo emite el caller, que es
        quien conoce el id del recurso creado.
        """
        try:
            yield
        except Exception as e:
            self.failure(failure_event, subject_id, e, **properties)
            raise
