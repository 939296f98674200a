"""Endpoints de carreras y su plan de estudios."""
import logging
from io import BytesIO

from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse

from app.api.deps import ROLES_LECTURA, get_almacen, require_roles
from app.core.exceptions import NoEncontrado
from app.models import RolUsuario, Usuario
from app.schemas.carrera import CantidadMateriasResponse, CarreraCreate, CarreraItem, CarreraUpdate
from app.schemas.materia import MateriaItem
from app.services import reporte_pdf_service
from app.services.almacen import Almacen

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/carreras", tags=["carreras"])


async def _carrera_o_404(almacen: Almacen, carrera_id: int):
    carrera = await almacen.obtener_carrera(carrera_id)
    if carrera is None:
        raise NoEncontrado("Carrera no encontrada")
    return carrera


@router.get("", response_model=list[CarreraItem], summary="Listar carreras")
async def listar_carreras(
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    return await almacen.listar_carreras()


@router.get("/{carrera_id}", response_model=CarreraItem, summary="Obtener carrera")
async def obtener_carrera(
    carrera_id: int,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    return await _carrera_o_404(almacen, carrera_id)


@router.post(
    "",
    response_model=CarreraItem,
    status_code=status.HTTP_201_CREATED,
    summary="Crear carrera",
)
async def crear_carrera(
    body: CarreraCreate,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(RolUsuario.ADMIN)),
):
    carrera = await almacen.crear_carrera(body.model_dump())
    logger.info("Carrera %s creada: %s", carrera.id, carrera.nombre)
    return carrera


@router.patch("/{carrera_id}", response_model=CarreraItem, summary="Actualizar carrera")
async def actualizar_carrera(
    carrera_id: int,
    body: CarreraUpdate,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(RolUsuario.ADMIN)),
):
    return await almacen.actualizar_carrera(carrera_id, body.model_dump(exclude_none=True))


@router.delete(
    "/{carrera_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Eliminar carrera",
    description="Elimina la carrera junto con sus materias y las correlatividades de esas materias.",
)
async def eliminar_carrera(
    carrera_id: int,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(RolUsuario.ADMIN)),
):
    await _carrera_o_404(almacen, carrera_id)
    await almacen.eliminar_carrera(carrera_id)
    logger.info("Carrera %s eliminada", carrera_id)


@router.get("/{carrera_id}/materias", response_model=list[MateriaItem], summary="Materias de la carrera")
async def materias_de_carrera(
    carrera_id: int,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    await _carrera_o_404(almacen, carrera_id)
    return await almacen.listar_materias(carrera_id)


@router.get(
    "/{carrera_id}/materias/anio/{anio}",
    response_model=list[MateriaItem],
    summary="Materias de un año del plan",
)
async def materias_por_anio(
    carrera_id: int,
    anio: int,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    await _carrera_o_404(almacen, carrera_id)
    return await almacen.listar_materias_por_anio(carrera_id, anio)


@router.get(
    "/{carrera_id}/cantidad-materias",
    response_model=CantidadMateriasResponse,
    summary="Cantidad de materias del plan",
)
async def cantidad_materias(
    carrera_id: int,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    await _carrera_o_404(almacen, carrera_id)
    return CantidadMateriasResponse(cantidad=len(await almacen.listar_materias(carrera_id)))


@router.get(
    "/{carrera_id}/plan/pdf",
    summary="Plan de estudios en PDF",
    responses={200: {"content": {"application/pdf": {}}, "description": "Archivo PDF generado"}},
)
async def plan_pdf(
    carrera_id: int,
    almacen: Almacen = Depends(get_almacen),
    current_user: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    carrera = await _carrera_o_404(almacen, carrera_id)
    materias = await almacen.listar_materias(carrera_id)
    codigos = {m.id: m.codigo for m in materias}

    filas = []
    for m in materias:
        correlativas = await almacen.obtener_correlatividades(m.id)
        filas.append(
            {
                "codigo": m.codigo,
                "nombre": m.nombre,
                "horas": m.horas,
                "anio": m.anio,
                "correlativas": [
                    codigos.get(c.materia_requerida_id, f"#{c.materia_requerida_id}") for c in correlativas
                ],
            }
        )

    pdf_bytes = reporte_pdf_service.generar_plan_estudios(
        {"nombre": carrera.nombre, "duracion_anios": carrera.duracion_anios},
        filas,
        usuario_nombre=current_user.nombre_completo,
    )
    filename = f"plan_estudios_{carrera.id}.pdf"
    return StreamingResponse(
        BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
