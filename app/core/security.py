"""
Seguridad: identidad de la wallet conectada y manejo de JWT

La firma de transacciones y la conexión de la wallet ocurren en el navegador.
El backend solo valida el formato de la dirección y emite un JWT con ella.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from app.core.config import get_settings

settings = get_settings()

# Dirección de cuenta Aptos: 0x + hasta 64 caracteres hex
APTOS_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{1,64}$")


class InvalidIdentityError(Exception):
    """Se lanza cuando la dirección de la wallet no tiene un formato válido"""
    pass


def normalize_identity(address: str) -> str:
    """
    Valida y normaliza una dirección de wallet

    Lanza InvalidIdentityError si el formato no es válido
    """
    address = (address or "").strip()
    if not APTOS_ADDRESS_PATTERN.match(address):
        raise InvalidIdentityError(f"Dirección inválida: {address!r}")
    return address.lower()


def create_access_token(identity: str) -> str:
    """
    Crea un JWT para que la wallet conectada pueda hacer requests autenticados

    El JWT contiene la identidad y expira según jwt_expire_minutes
    """
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=settings.jwt_expire_minutes)

    payload = {
        "sub": identity,     # Subject: la dirección de la wallet
        "exp": expire,       # Expiración
        "iat": now,          # Issued at (cuándo se creó)
    }

    # Firmo el token con nuestra clave secreta
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[dict]:
    """
    Decodifica y valida un JWT

    Retorna el payload si es válido, None si está expirado o corrupto
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        return None
