"""Dependencias compartidas por los routers: almacén, máquina de inscripciones y auth."""
from typing import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import decode_access_token
from app.models import RolUsuario, Usuario
from app.services.almacen import Almacen, AlmacenAcademico
from app.services.inscripciones import MaquinaInscripciones

security = HTTPBearer(auto_error=False)

# Roles con acceso de lectura; 'pendiente' solo ve /me
ROLES_LECTURA = (RolUsuario.ADMIN, RolUsuario.DOCENTE, RolUsuario.ESTUDIANTE)
ROLES_ACTAS = (RolUsuario.ADMIN, RolUsuario.DOCENTE)


async def get_almacen(db: AsyncSession = Depends(get_db)) -> Almacen:
    """Un almacén por request, sobre la sesión (y la transacción) del request."""
    return AlmacenAcademico(db)


async def get_maquina(almacen: Almacen = Depends(get_almacen)) -> MaquinaInscripciones:
    return MaquinaInscripciones(almacen)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    almacen: Almacen = Depends(get_almacen),
) -> Usuario:
    """Dependencia: exige un JWT válido y devuelve el usuario actual."""
    if not credentials or credentials.scheme != "Bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token de autenticación no proporcionado o inválido",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_access_token(credentials.credentials)
    if not payload or "sub" not in payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido o expirado",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        usuario_id = int(payload["sub"])
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido o expirado",
            headers={"WWW-Authenticate": "Bearer"},
        )
    usuario = await almacen.obtener_usuario(usuario_id)
    if not usuario:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuario no encontrado",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return usuario


def require_roles(*roles: str) -> Callable:
    """Dependencia que exige que el usuario actual tenga alguno de los roles indicados."""

    async def _check(current_user: Usuario = Depends(get_current_user)) -> Usuario:
        if current_user.rol not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="No tiene permisos para realizar esta acción",
            )
        return current_user

    return _check
