"""Endpoints de estudiantes: alta, listado con detalle, materias y legajo."""
import logging
from io import BytesIO

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse

from app.api.deps import ROLES_LECTURA, get_almacen, require_roles
from app.core.exceptions import DatosInvalidos, NoEncontrado
from app.core.security import hash_password
from app.models import Estudiante, RolUsuario, Usuario
from app.schemas.estudiante import (
    CarreraResumen,
    EstudianteCreate,
    EstudianteDetalle,
    EstudianteUpdate,
    LegajoMateriaItem,
    LegajoResponse,
    UsuarioResumen,
)
from app.schemas.materia import MateriaItem
from app.schemas.materia_estudiante import MateriaEstudianteDetalle, MateriaEstudianteItem
from app.services import reporte_pdf_service
from app.services.almacen import Almacen
from app.services.legajo import resumir_legajo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/estudiantes", tags=["estudiantes"])


async def _estudiante_o_404(almacen: Almacen, estudiante_id: int) -> Estudiante:
    estudiante = await almacen.obtener_estudiante(estudiante_id)
    if estudiante is None:
        raise NoEncontrado("Estudiante no encontrado")
    return estudiante


async def _detalle(almacen: Almacen, estudiante: Estudiante) -> EstudianteDetalle:
    usuario = await almacen.obtener_usuario(estudiante.usuario_id)
    carrera = await almacen.obtener_carrera(estudiante.carrera_id)
    return EstudianteDetalle(
        id=estudiante.id,
        usuario_id=estudiante.usuario_id,
        carrera_id=estudiante.carrera_id,
        legajo=estudiante.legajo,
        fecha_inscripcion=estudiante.fecha_inscripcion,
        estado=estudiante.estado,
        usuario=UsuarioResumen.model_validate(usuario) if usuario else None,
        carrera=CarreraResumen.model_validate(carrera) if carrera else None,
    )


@router.get("", response_model=list[EstudianteDetalle], summary="Listar estudiantes")
async def listar_estudiantes(
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    """Estudiantes ordenados por legajo, con su usuario y su carrera."""
    return [await _detalle(almacen, e) for e in await almacen.listar_estudiantes()]


@router.get(
    "/me",
    response_model=EstudianteDetalle,
    summary="Mi registro de estudiante",
    responses={404: {"description": "El usuario actual no es estudiante"}},
)
async def mi_estudiante(
    almacen: Almacen = Depends(get_almacen),
    current_user: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    estudiante = await almacen.obtener_estudiante_por_usuario(current_user.id)
    if estudiante is None:
        raise NoEncontrado("El usuario actual no tiene registro de estudiante")
    return await _detalle(almacen, estudiante)


@router.get("/{estudiante_id}", response_model=EstudianteDetalle, summary="Obtener estudiante")
async def obtener_estudiante(
    estudiante_id: int,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    return await _detalle(almacen, await _estudiante_o_404(almacen, estudiante_id))


@router.post(
    "",
    response_model=EstudianteDetalle,
    status_code=status.HTTP_201_CREATED,
    summary="Crear estudiante",
    description="Crea el usuario (rol estudiante) y el registro de estudiante. Usuario y legajo deben ser únicos.",
)
async def crear_estudiante(
    body: EstudianteCreate,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(RolUsuario.ADMIN)),
):
    if await almacen.obtener_usuario_por_username(body.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El nombre de usuario ya existe",
        )
    if await almacen.obtener_estudiante_por_legajo(body.legajo):
        raise DatosInvalidos(f"Ya existe un estudiante con legajo {body.legajo}")
    if await almacen.obtener_carrera(body.carrera_id) is None:
        raise NoEncontrado("Carrera no encontrada")

    usuario = await almacen.crear_usuario(
        {
            "username": body.username,
            "password_hash": hash_password(body.password),
            "nombre_completo": body.nombre_completo,
            "email": body.email,
            "rol": RolUsuario.ESTUDIANTE,
        }
    )
    estudiante = await almacen.crear_estudiante(
        {
            "usuario_id": usuario.id,
            "carrera_id": body.carrera_id,
            "legajo": body.legajo,
            "fecha_inscripcion": body.fecha_inscripcion,
            "estado": body.estado,
        }
    )
    logger.info("Estudiante %s creado (legajo %s)", estudiante.id, estudiante.legajo)
    return await _detalle(almacen, estudiante)


@router.patch("/{estudiante_id}", response_model=EstudianteDetalle, summary="Actualizar estudiante")
async def actualizar_estudiante(
    estudiante_id: int,
    body: EstudianteUpdate,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(RolUsuario.ADMIN)),
):
    cambios = body.model_dump(exclude_none=True)
    if "legajo" in cambios:
        otro = await almacen.obtener_estudiante_por_legajo(cambios["legajo"])
        if otro is not None and otro.id != estudiante_id:
            raise DatosInvalidos(f"Ya existe un estudiante con legajo {cambios['legajo']}")
    if "carrera_id" in cambios and await almacen.obtener_carrera(cambios["carrera_id"]) is None:
        raise NoEncontrado("Carrera no encontrada")
    estudiante = await almacen.actualizar_estudiante(estudiante_id, cambios)
    return await _detalle(almacen, estudiante)


@router.get(
    "/{estudiante_id}/materias",
    response_model=list[MateriaEstudianteDetalle],
    summary="Materias del estudiante",
)
async def materias_del_estudiante(
    estudiante_id: int,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    await _estudiante_o_404(almacen, estudiante_id)
    items = []
    for me in await almacen.obtener_materias_estudiante(estudiante_id):
        materia = await almacen.obtener_materia(me.materia_id)
        items.append(
            MateriaEstudianteDetalle(
                **MateriaEstudianteItem.model_validate(me).model_dump(),
                materia=MateriaItem.model_validate(materia) if materia else None,
            )
        )
    return items


@router.get("/{estudiante_id}/legajo", response_model=LegajoResponse, summary="Legajo del estudiante")
async def legajo(
    estudiante_id: int,
    almacen: Almacen = Depends(get_almacen),
    _: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    """Avance en la carrera, promedio y situación vigente por materia."""
    estudiante = await _estudiante_o_404(almacen, estudiante_id)
    resumen = await resumir_legajo(almacen, estudiante)
    return LegajoResponse(
        estudiante_id=estudiante.id,
        acreditadas=resumen.acreditadas,
        total_materias=resumen.total_materias,
        porcentaje=resumen.porcentaje,
        promedio=resumen.promedio,
        materias=[
            LegajoMateriaItem(
                id=f.registro.id,
                materia=MateriaItem.model_validate(f.materia),
                estado=f.registro.estado,
                nota=f.registro.nota,
                fecha=f.registro.fecha,
                libro=f.registro.libro,
                folio=f.registro.folio,
                vence_regularidad=f.vence,
            )
            for f in resumen.materias
        ],
    )


@router.get(
    "/{estudiante_id}/legajo/pdf",
    summary="Legajo en PDF",
    responses={200: {"content": {"application/pdf": {}}, "description": "Archivo PDF generado"}},
)
async def legajo_pdf(
    estudiante_id: int,
    almacen: Almacen = Depends(get_almacen),
    current_user: Usuario = Depends(require_roles(*ROLES_LECTURA)),
):
    estudiante = await _estudiante_o_404(almacen, estudiante_id)
    detalle = await _detalle(almacen, estudiante)
    resumen = await resumir_legajo(almacen, estudiante)
    pdf_bytes = reporte_pdf_service.generar_legajo(
        {
            "legajo": estudiante.legajo,
            "nombre_completo": detalle.usuario.nombre_completo if detalle.usuario else "",
            "carrera": detalle.carrera.nombre if detalle.carrera else "",
            "fecha_inscripcion": estudiante.fecha_inscripcion,
            "estado": estudiante.estado,
        },
        resumen,
        usuario_nombre=current_user.nombre_completo,
    )
    filename = f"legajo_{estudiante.id}.pdf"
    return StreamingResponse(
        BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
