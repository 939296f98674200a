"""Endpoints de administración de usuarios y roles."""
import logging

from fastapi import APIRouter, Depends

from app.api.deps import get_almacen, require_roles
from app.models import RolUsuario, Usuario
from app.schemas.usuario import RolUpdateRequest, UsuarioItem, UsuarioListResponse
from app.services.almacen import Almacen

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/usuarios", tags=["usuarios"])


@router.get(
    "",
    response_model=UsuarioListResponse,
    summary="Listar usuarios",
    description="Lista todos los usuarios con su rol. Solo administradores.",
)
async def listar_usuarios(
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(RolUsuario.ADMIN)),
):
    usuarios = await almacen.listar_usuarios()
    return UsuarioListResponse(usuarios=[UsuarioItem.model_validate(u) for u in usuarios])


@router.patch(
    "/{usuario_id}/rol",
    response_model=UsuarioItem,
    summary="Asignar rol",
    responses={404: {"description": "Usuario no encontrado"}},
)
async def asignar_rol(
    usuario_id: int,
    body: RolUpdateRequest,
    almacen: Almacen = Depends(get_almacen),
    current_user: Usuario = Depends(require_roles(RolUsuario.ADMIN)),
):
    """Cambia el rol de un usuario (admin, docente, estudiante o pendiente)."""
    usuario = await almacen.actualizar_usuario(usuario_id, {"rol": body.rol})
    logger.info("Usuario %s: rol '%s' asignado por %s", usuario_id, body.rol, current_user.username)
    return usuario
