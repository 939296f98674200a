"""Endpoints de inscripciones a cursada y examen."""
from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import ROLES_LECTURA, get_almacen, get_maquina, require_roles
from app.models import Inscripcion, RolUsuario, Usuario
from app.schemas.estudiante import EstudianteItem
from app.schemas.inscripcion import InscripcionCreate, InscripcionDetalle, InscripcionItem
from app.schemas.materia import MateriaItem
from app.services.almacen import Almacen
from app.services.inscripciones import MaquinaInscripciones

router = APIRouter(prefix="/inscripciones", tags=["inscripciones"])


async def _detalle(almacen: Almacen, inscripcion: Inscripcion) -> InscripcionDetalle:
    estudiante = await almacen.obtener_estudiante(inscripcion.estudiante_id)
    materia = await almacen.obtener_materia(inscripcion.materia_id)
    return InscripcionDetalle(
        **InscripcionItem.model_validate(inscripcion).model_dump(),
        estudiante=EstudianteItem.model_validate(estudiante) if estudiante else None,
        materia=MateriaItem.model_validate(materia) if materia else None,
    )


@router.get("", response_model=list[InscripcionDetalle], summary="Listar inscripciones")
async def listar_inscripciones(
    estudiante_id: int | None = Query(None, description="Filtrar por estudiante"),
    materia_id: int | None = Query(None, description="Filtrar por materia"),
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    inscripciones = await almacen.listar_inscripciones(estudiante_id=estudiante_id, materia_id=materia_id)
    return [await _detalle(almacen, i) for i in inscripciones]


@router.post(
    "",
    response_model=InscripcionItem,
    status_code=status.HTTP_201_CREATED,
    summary="Inscribir a cursada o examen",
    description=(
        "Verifica las correlativas directas de la materia. En cursada, además abre la materia "
        "del estudiante en estado `cursando`. Un estudiante solo puede inscribirse a sí mismo."
    ),
    responses={
        400: {"description": "Correlativas sin cumplir (un mensaje por materia faltante) o datos inválidos"},
        403: {"description": "El estudiante intenta inscribir a otro"},
        404: {"description": "Materia o estudiante inexistente"},
    },
)
async def inscribir(
    body: InscripcionCreate,
    almacen: Almacen = Depends(get_almacen),
    maquina: MaquinaInscripciones = Depends(get_maquina),
    current_user: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    if current_user.rol == RolUsuario.ESTUDIANTE:
        propio = await almacen.obtener_estudiante_por_usuario(current_user.id)
        if propio is None or propio.id != body.estudiante_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Solo puede inscribirse a sí mismo",
            )
    return await maquina.inscribir(
        body.estudiante_id, body.materia_id, body.tipo, fecha_examen=body.fecha_examen
    )


@router.delete(
    "/{inscripcion_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Eliminar inscripción",
    description="Borra solo la inscripción; la materia del estudiante creada con ella se conserva.",
)
async def eliminar_inscripcion(
    inscripcion_id: int,
    maquina: MaquinaInscripciones = Depends(get_maquina),
    _: Usuario = Depends(require_roles(RolUsuario.ADMIN)),
):
    await maquina.eliminar_inscripcion(inscripcion_id)
