"""
Cache en memoria de las lecturas publicas de categorias.

El listado de categorias (con la cantidad de trucos de cada una) y el
detalle de cada categoria se piden mucho y cambian poco, asi que se
guardan en un TTLCache de cachetools durante una hora.

Claves:
    - "CategoryList":          el listado completo.
    - "Category_<uuid>":       una categoria concreta (uuid en minusculas
                               con guiones, el formato de str(UUID)).

Toda escritura que cambie lo que muestran esas lecturas debe invalidar
las claves afectadas: alta, edicion y borrado de categorias, y alta,
edicion y borrado de trucos (cambian los contadores).
"""

import logging
import threading
import uuid

from cachetools import TTLCache

logger = logging.getLogger(__name__)

CATEGORY_LIST_KEY = "CategoryList"
_CATEGORY_PREFIX = "Category_"


def category_key(category_id: uuid.UUID | str) -> str:
    return f"{_CATEGORY_PREFIX}{uuid.UUID(str(category_id))}"


class CategoryCache:
    """
    Envoltorio de TTLCache con las operaciones de invalidacion.

    TTLCache no es thread-safe y los endpoints sincronos corren en el
    threadpool de FastAPI, por eso cada acceso toma el lock.
    """

    def __init__(self, ttl_seconds: int = 3600, maxsize: int = 1024):
        self._cache = TTLCache(maxsize=maxsize, ttl=ttl_seconds)
        self._lock = threading.Lock()

    def get(self, key: str):
        with self._lock:
            return self._cache.get(key)

    def set(self, key: str, value) -> None:
        with self._lock:
            self._cache[key] = value

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._cache

    def invalidate_category_list(self) -> None:
        with self._lock:
            self._cache.pop(CATEGORY_LIST_KEY, None)
        logger.debug("Category list cache invalidated")

    def invalidate_category(self, category_id: uuid.UUID) -> None:
        with self._lock:
            self._cache.pop(category_key(category_id), None)

    def invalidate_category_and_list(self, *category_ids: uuid.UUID) -> None:
        self.invalidate_category_list()
        for category_id in category_ids:
            self.invalidate_category(category_id)
