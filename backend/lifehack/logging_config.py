"""
Configuracion de logging.

Usamos el modulo estandar `logging`. Cada modulo obtiene su propio
logger con logging.getLogger(__name__) y aqui configuramos un unico
handler de consola cuyo formato incluye el correlation id de la
peticion en curso.
"""

import logging

from lifehack.middleware import get_correlation_id

LOG_FORMAT = "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s"


class CorrelationIdFilter(logging.Filter):
    """Agrega `correlation_id` a cada registro de log."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())

    # Evita handlers duplicados si la app se crea mas de una vez (tests).
    if any(getattr(h, "_lifehack_handler", False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler._lifehack_handler = True
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
