"""Routers de la API."""
from fastapi import APIRouter, Depends

from app.api.deps import get_current_user
from app.api.endpoints import (
    auth,
    carreras,
    correlatividades,
    dashboard,
    estudiantes,
    inscripciones,
    materias,
    materias_estudiante,
    usuarios,
)
from app.models import Usuario
from app.schemas.usuario import UsuarioItem

router = APIRouter()
router.include_router(auth.router)
router.include_router(usuarios.router)
router.include_router(carreras.router)
router.include_router(materias.router)
router.include_router(correlatividades.router)
router.include_router(estudiantes.router)
router.include_router(materias_estudiante.router)
router.include_router(inscripciones.router)
router.include_router(dashboard.router)


@router.get(
    "/me",
    response_model=UsuarioItem,
    tags=["api"],
    summary="Usuario actual (protegido)",
    responses={
        200: {"description": "Usuario obtenido correctamente"},
        401: {"description": "Token no enviado, inválido o expirado"},
    },
)
async def get_me(current_user: Usuario = Depends(get_current_user)):
    """
    Devuelve el usuario actual a partir del JWT. Disponible para cualquier rol, incluso 'pendiente'.
    **Requiere:** header `Authorization: Bearer <access_token>`.
    """
    return current_user


@router.get(
    "/",
    tags=["api"],
    summary="Raíz de la API v1",
    response_description="Mensaje de bienvenida y enlace a la documentación",
)
async def api_root():
    """Información básica de la API y enlace a la documentación Swagger."""
    return {"message": "Gestor Académico API v1", "docs": "/docs", "redoc": "/redoc"}
