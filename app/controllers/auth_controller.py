"""
Controlador de autenticación - Conectar/desconectar la wallet (identidad)
"""

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from app.core.dependencies import CurrentIdentity, Quiz
from app.core.security import InvalidIdentityError, create_access_token, normalize_identity

router = APIRouter(prefix="/auth", tags=["auth"])


# Cuerpo de la request: dirección devuelta por la wallet al conectar
class ConnectRequest(BaseModel):
    address: str


# Respuesta con JWT
class ConnectResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    identity: str


class IdentityResponse(BaseModel):
    identity: str


@router.post("/connect", response_model=ConnectResponse)
async def connect(request: ConnectRequest):
    """
    Conecta una identidad.

    El frontend envía la dirección que devolvió la wallet (Petra), el backend
    la valida y devuelve un JWT para los endpoints que requieren identidad.
    """
    try:
        identity = normalize_identity(request.address)
    except InvalidIdentityError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )

    return ConnectResponse(
        access_token=create_access_token(identity),
        identity=identity
    )


@router.post("/disconnect", status_code=status.HTTP_204_NO_CONTENT)
async def disconnect(identity: CurrentIdentity, quiz: Quiz):
    """
    Desconecta la identidad actual.

    El quiz en curso se descarta (no se guarda ninguna puntuación parcial).
    """
    quiz.disconnect(identity)


@router.get("/me", response_model=IdentityResponse)
async def get_current_identity(identity: CurrentIdentity):
    """
    Devuelve la identidad actualmente conectada.

    Requiere un JWT válido en la cabecera `Authorization`.
    """
    return IdentityResponse(identity=identity)
