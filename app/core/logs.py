"""Configuración del logging de la aplicación."""
import logging

from app.core.config import settings

FORMATO_LOG = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configurar_logging(nivel: str | None = None) -> None:
    """Aplica el nivel de log configurado (LOG_LEVEL) a la raíz y a los loggers de la app."""
    nivel = (nivel or settings.log_level).upper()
    logging.basicConfig(level=nivel, format=FORMATO_LOG)
    logging.getLogger("app").setLevel(nivel)
    # El eco SQL solo se controla con DEBUG=true (ver create_async_engine)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
