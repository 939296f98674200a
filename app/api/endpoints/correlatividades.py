"""Endpoints para agregar y quitar correlatividades."""
import logging

from fastapi import APIRouter, Depends, status

from app.api.deps import get_almacen, require_roles
from app.core.exceptions import NoEncontrado
from app.models import RolUsuario, Usuario
from app.schemas.materia import CorrelatividadCreate, CorrelatividadItem, MateriaItem
from app.services import correlatividades as servicio
from app.services.almacen import Almacen

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/correlatividades", tags=["correlatividades"])


@router.post(
    "",
    response_model=CorrelatividadItem,
    status_code=status.HTTP_201_CREATED,
    summary="Agregar correlatividad",
    responses={
        400: {"description": "Autorreferencia, duplicada o genera un ciclo"},
        404: {"description": "Alguna de las materias no existe"},
    },
)
async def agregar_correlatividad(
    body: CorrelatividadCreate,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(RolUsuario.ADMIN)),
):
    c = await servicio.agregar_correlatividad(almacen, body.materia_id, body.materia_requerida_id)
    requerida = await almacen.obtener_materia(c.materia_requerida_id)
    return CorrelatividadItem(
        id=c.id,
        materia_id=c.materia_id,
        materia_requerida_id=c.materia_requerida_id,
        materia_requerida=MateriaItem.model_validate(requerida) if requerida else None,
    )


@router.delete(
    "/{correlatividad_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Eliminar correlatividad",
)
async def eliminar_correlatividad(
    correlatividad_id: int,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(RolUsuario.ADMIN)),
):
    if await almacen.obtener_correlatividad(correlatividad_id) is None:
        raise NoEncontrado("Correlatividad no encontrada")
    await almacen.eliminar_correlatividad(correlatividad_id)
    logger.info("Correlatividad %s eliminada", correlatividad_id)
