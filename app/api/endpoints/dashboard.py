"""Endpoints del tablero de inicio."""
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, Query

from app.api.deps import ROLES_LECTURA, get_almacen, require_roles
from app.core.config import settings
from app.models import Usuario
from app.schemas.estadisticas import (
    ActividadesResponse,
    ActividadItem,
    EstadisticasResponse,
    ExamenesResponse,
    ExamenItem,
)
from app.services.almacen import Almacen

router = APIRouter(tags=["dashboard"])


@router.get(
    "/estadisticas",
    response_model=EstadisticasResponse,
    summary="Estadísticas generales",
    description="Cantidad de estudiantes, carreras, materias e inscripciones de los últimos meses.",
)
async def estadisticas(
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    desde = datetime.now(timezone.utc) - timedelta(days=30 * settings.meses_inscripciones_activas)
    return EstadisticasResponse(
        cantidad_estudiantes=len(await almacen.listar_estudiantes()),
        cantidad_carreras=len(await almacen.listar_carreras()),
        cantidad_materias=len(await almacen.listar_materias()),
        inscripciones_activas=await almacen.contar_inscripciones_desde(desde),
    )


@router.get("/actividades", response_model=ActividadesResponse, summary="Actividad reciente")
async def actividades(
    limite: int = Query(10, ge=1, le=100),
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    """Últimos cambios de estado o nota en materias de estudiantes."""
    items = []
    for me in await almacen.listar_actividad_reciente(limite):
        estudiante = await almacen.obtener_estudiante(me.estudiante_id)
        materia = await almacen.obtener_materia(me.materia_id)
        items.append(
            ActividadItem(
                id=me.id,
                estudiante_id=me.estudiante_id,
                legajo=estudiante.legajo if estudiante else None,
                materia_codigo=materia.codigo if materia else None,
                materia_nombre=materia.nombre if materia else None,
                estado=me.estado,
                nota=me.nota,
                actualizado_en=me.actualizado_en,
            )
        )
    return ActividadesResponse(actividades=items)


@router.get("/examenes", response_model=ExamenesResponse, summary="Próximos exámenes")
async def examenes(
    limite: int = Query(10, ge=1, le=100),
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    items = []
    for i in await almacen.listar_examenes_proximos(datetime.now(timezone.utc), limite):
        estudiante = await almacen.obtener_estudiante(i.estudiante_id)
        materia = await almacen.obtener_materia(i.materia_id)
        items.append(
            ExamenItem(
                inscripcion_id=i.id,
                estudiante_id=i.estudiante_id,
                legajo=estudiante.legajo if estudiante else None,
                materia_codigo=materia.codigo if materia else None,
                materia_nombre=materia.nombre if materia else None,
                fecha_examen=i.fecha_examen,
            )
        )
    return ExamenesResponse(examenes=items)
