"""Endpoints para cargar y actualizar la situación de un estudiante en una materia."""
from fastapi import APIRouter, Depends, status

from app.api.deps import ROLES_ACTAS, get_maquina, require_roles
from app.models import Usuario
from app.schemas.materia_estudiante import (
    MateriaEstudianteCreate,
    MateriaEstudianteItem,
    MateriaEstudianteUpdate,
)
from app.services.inscripciones import MaquinaInscripciones

router = APIRouter(prefix="/materias-estudiante", tags=["materias-estudiante"])


@router.post(
    "",
    response_model=MateriaEstudianteItem,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar materia en el legajo",
    description="Carga directa (equivalencias, actas previas). Nota entre 4 y 10, obligatoria si estado=acreditada.",
    responses={
        400: {"description": "Estado o nota inválidos"},
        404: {"description": "Estudiante o materia inexistente"},
    },
)
async def registrar_materia(
    body: MateriaEstudianteCreate,
    maquina: MaquinaInscripciones = Depends(get_maquina),
    _: Usuario = Depends(require_roles(*ROLES_ACTAS)),
):
    return await maquina.registrar_materia(**body.model_dump())


@router.patch(
    "/{materia_estudiante_id}",
    response_model=MateriaEstudianteItem,
    summary="Actualizar estado y acta",
    description="Solo se modifican los campos enviados; un campo enviado como null borra el valor.",
    responses={
        400: {"description": "Estado o nota inválidos"},
        404: {"description": "Materia del estudiante no encontrada"},
    },
)
async def actualizar_estado(
    materia_estudiante_id: int,
    body: MateriaEstudianteUpdate,
    maquina: MaquinaInscripciones = Depends(get_maquina),
    _: Usuario = Depends(require_roles(*ROLES_ACTAS)),
):
    campos = body.model_dump(exclude_unset=True)
    estado = campos.pop("estado", None)
    return await maquina.actualizar_estado(materia_estudiante_id, estado, **campos)
