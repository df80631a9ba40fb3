"""
Configuracion de logging (loguru) para los jobs del pipeline.
"""
import sys
from typing import Optional

from loguru import logger

from place_enrichment.core.config import settings


CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"
)


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Reemplaza el sink por defecto de loguru.

    Args:
        level: Nivel minimo (DEBUG, INFO, ...). Default: settings.LOG_LEVEL
        log_file: Ruta de archivo opcional con rotacion. Default: settings.LOG_FILE
    """
    level = (level or settings.LOG_LEVEL).upper()
    log_file = settings.LOG_FILE if log_file is None else log_file

    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT)

    if log_file:
        logger.add(
            log_file,
            rotation="500 MB",
            retention="10 days",
            level=level,
        )
