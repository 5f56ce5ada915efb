"""
Configuración de logging de la API
"""

import logging
from logging import Logger


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO") -> Logger:
    """Configura el logging básico y retorna el logger raíz de la app"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    return logging.getLogger("app")


def mask_identity(identity: str) -> str:
    """Acorta una dirección para los logs (0x1234...abcd)"""
    if not identity or len(identity) < 12:
        return identity
    return f"{identity[:6]}...{identity[-4:]}"
