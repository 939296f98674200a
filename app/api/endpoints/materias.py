"""Endpoints de materias: ABM, correlativas y consulta de elegibilidad."""
import logging

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import ROLES_LECTURA, get_almacen, require_roles
from app.core.exceptions import NoEncontrado
from app.models import RolUsuario, Usuario
from app.schemas.materia import (
    CorrelatividadItem,
    ElegibilidadResponse,
    MateriaCreate,
    MateriaItem,
    MateriaUpdate,
)
from app.services.almacen import Almacen
from app.services.correlatividades import EvaluadorCorrelatividades

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/materias", tags=["materias"])


async def _materia_o_404(almacen: Almacen, materia_id: int):
    materia = await almacen.obtener_materia(materia_id)
    if materia is None:
        raise NoEncontrado("Materia no encontrada")
    return materia


@router.get(
    "",
    response_model=list[MateriaItem],
    summary="Listar materias",
    description="Lista todas las materias o, con `carrera_id`, las de una carrera ordenadas por año.",
)
async def listar_materias(
    carrera_id: int | None = Query(None, description="Filtrar por carrera"),
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    return await almacen.listar_materias(carrera_id)


@router.get("/{materia_id}", response_model=MateriaItem, summary="Obtener materia")
async def obtener_materia(
    materia_id: int,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    return await _materia_o_404(almacen, materia_id)


@router.post(
    "",
    response_model=MateriaItem,
    status_code=status.HTTP_201_CREATED,
    summary="Crear materia",
)
async def crear_materia(
    body: MateriaCreate,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(RolUsuario.ADMIN)),
):
    if await almacen.obtener_carrera(body.carrera_id) is None:
        raise NoEncontrado("Carrera no encontrada")
    materia = await almacen.crear_materia(body.model_dump())
    logger.info("Materia %s creada: %s", materia.id, materia.codigo)
    return materia


@router.patch("/{materia_id}", response_model=MateriaItem, summary="Actualizar materia")
async def actualizar_materia(
    materia_id: int,
    body: MateriaUpdate,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(RolUsuario.ADMIN)),
):
    cambios = body.model_dump(exclude_none=True)
    if "carrera_id" in cambios and await almacen.obtener_carrera(cambios["carrera_id"]) is None:
        raise NoEncontrado("Carrera no encontrada")
    return await almacen.actualizar_materia(materia_id, cambios)


@router.delete(
    "/{materia_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Eliminar materia",
    description="Elimina la materia y las correlatividades en las que participa.",
)
async def eliminar_materia(
    materia_id: int,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(RolUsuario.ADMIN)),
):
    await _materia_o_404(almacen, materia_id)
    await almacen.eliminar_materia(materia_id)
    logger.info("Materia %s eliminada", materia_id)


@router.get(
    "/{materia_id}/correlatividades",
    response_model=list[CorrelatividadItem],
    summary="Correlativas de la materia",
)
async def correlatividades_de_materia(
    materia_id: int,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    await _materia_o_404(almacen, materia_id)
    items = []
    for c in await almacen.obtener_correlatividades(materia_id):
        requerida = await almacen.obtener_materia(c.materia_requerida_id)
        items.append(
            CorrelatividadItem(
                id=c.id,
                materia_id=c.materia_id,
                materia_requerida_id=c.materia_requerida_id,
                materia_requerida=MateriaItem.model_validate(requerida) if requerida else None,
            )
        )
    return items


@router.get(
    "/{materia_id}/elegibilidad",
    response_model=ElegibilidadResponse,
    summary="¿Puede inscribirse el estudiante?",
    description="Evalúa las correlativas directas de la materia para un estudiante. No inscribe.",
)
async def elegibilidad(
    materia_id: int,
    estudiante_id: int = Query(..., description="ID del estudiante"),
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    await _materia_o_404(almacen, materia_id)
    resultado = await EvaluadorCorrelatividades(almacen).es_elegible(estudiante_id, materia_id)
    return ElegibilidadResponse(
        elegible=resultado.elegible,
        faltantes=[MateriaItem.model_validate(m) for m in resultado.faltantes],
        mensajes=resultado.mensajes,
    )
