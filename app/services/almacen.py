"""Almacén de entidades académicas.

``Almacen`` es la interfaz que consumen el evaluador de correlatividades, la
máquina de inscripciones y los endpoints. ``AlmacenAcademico`` la implementa
sobre una ``AsyncSession``: se construye una por request (ver
``app.api.deps.get_almacen``), sin instancias globales.

Los fallos de SQLAlchemy se traducen a errores de dominio: violaciones de
integridad a ``DatosInvalidos`` y el resto a ``AlmacenNoDisponible``. No se
reintenta ninguna operación.
"""
import functools
import logging
from datetime import datetime, timezone
from typing import Any, Protocol

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AlmacenNoDisponible, DatosInvalidos, ErrorGestion, NoEncontrado
from app.models import (
    Carrera,
    Correlatividad,
    Estudiante,
    Inscripcion,
    Materia,
    MateriaEstudiante,
    TipoInscripcion,
    Usuario,
)

logger = logging.getLogger(__name__)


class Almacen(Protocol):
    """Operaciones de persistencia usadas por la lógica académica."""

    # Usuarios
    async def obtener_usuario(self, usuario_id: int) -> Usuario | None: ...
    async def obtener_usuario_por_username(self, username: str) -> Usuario | None: ...
    async def listar_usuarios(self) -> list[Usuario]: ...
    async def crear_usuario(self, datos: dict[str, Any]) -> Usuario: ...
    async def actualizar_usuario(self, usuario_id: int, cambios: dict[str, Any]) -> Usuario: ...

    # Carreras
    async def listar_carreras(self) -> list[Carrera]: ...
    async def obtener_carrera(self, carrera_id: int) -> Carrera | None: ...
    async def crear_carrera(self, datos: dict[str, Any]) -> Carrera: ...
    async def actualizar_carrera(self, carrera_id: int, cambios: dict[str, Any]) -> Carrera: ...
    async def eliminar_carrera(self, carrera_id: int) -> None: ...

    # Materias
    async def listar_materias(self, carrera_id: int | None = None) -> list[Materia]: ...
    async def listar_materias_por_anio(self, carrera_id: int, anio: int) -> list[Materia]: ...
    async def obtener_materia(self, materia_id: int) -> Materia | None: ...
    async def crear_materia(self, datos: dict[str, Any]) -> Materia: ...
    async def actualizar_materia(self, materia_id: int, cambios: dict[str, Any]) -> Materia: ...
    async def eliminar_materia(self, materia_id: int) -> None: ...

    # Correlatividades
    async def obtener_correlatividades(self, materia_id: int) -> list[Correlatividad]: ...
    async def listar_todas_correlatividades(self) -> list[Correlatividad]: ...
    async def obtener_correlatividad(self, correlatividad_id: int) -> Correlatividad | None: ...
    async def agregar_correlatividad(self, datos: dict[str, Any]) -> Correlatividad: ...
    async def eliminar_correlatividad(self, correlatividad_id: int) -> None: ...

    # Estudiantes
    async def listar_estudiantes(self) -> list[Estudiante]: ...
    async def obtener_estudiante(self, estudiante_id: int) -> Estudiante | None: ...
    async def obtener_estudiante_por_usuario(self, usuario_id: int) -> Estudiante | None: ...
    async def obtener_estudiante_por_legajo(self, legajo: str) -> Estudiante | None: ...
    async def crear_estudiante(self, datos: dict[str, Any]) -> Estudiante: ...
    async def actualizar_estudiante(self, estudiante_id: int, cambios: dict[str, Any]) -> Estudiante: ...

    # Materias del estudiante
    async def obtener_materias_estudiante(self, estudiante_id: int) -> list[MateriaEstudiante]: ...
    async def obtener_materia_estudiante(self, materia_estudiante_id: int) -> MateriaEstudiante | None: ...
    async def agregar_materia_estudiante(self, datos: dict[str, Any]) -> MateriaEstudiante: ...
    async def actualizar_materia_estudiante(
        self, materia_estudiante_id: int, cambios: dict[str, Any]
    ) -> MateriaEstudiante: ...
    async def listar_actividad_reciente(self, limite: int = 10) -> list[MateriaEstudiante]: ...

    # Inscripciones
    async def listar_inscripciones(
        self, estudiante_id: int | None = None, materia_id: int | None = None
    ) -> list[Inscripcion]: ...
    async def obtener_inscripcion(self, inscripcion_id: int) -> Inscripcion | None: ...
    async def crear_inscripcion(self, datos: dict[str, Any]) -> Inscripcion: ...
    async def eliminar_inscripcion(self, inscripcion_id: int) -> None: ...
    async def listar_examenes_proximos(self, desde: datetime, limite: int = 10) -> list[Inscripcion]: ...
    async def contar_inscripciones_desde(self, desde: datetime) -> int: ...


def _traducir_errores(metodo):
    """Convierte fallos de SQLAlchemy/red en errores de dominio."""

    @functools.wraps(metodo)
    async def _envoltura(self, *args, **kwargs):
        try:
            return await metodo(self, *args, **kwargs)
        except ErrorGestion:
            raise
        except IntegrityError as exc:
            logger.warning("Restricción de integridad violada en %s: %s", metodo.__name__, exc.orig)
            raise DatosInvalidos("Los datos enviados violan una restricción de la base de datos") from exc
        except (SQLAlchemyError, OSError) as exc:
            logger.exception("Fallo del almacén en %s", metodo.__name__)
            raise AlmacenNoDisponible("No se pudo acceder a la base de datos") from exc

    return _envoltura


class AlmacenAcademico:
    """Implementación de ``Almacen`` sobre SQLAlchemy (async)."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    # ── Helpers ────────────────────────────────────────────────────

    async def _crear(self, modelo, datos: dict[str, Any]):
        obj = modelo(**datos)
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def _actualizar(self, modelo, obj_id: int, cambios: dict[str, Any], nombre: str):
        obj = await self.session.get(modelo, obj_id)
        if obj is None:
            raise NoEncontrado(f"{nombre} no encontrada")
        for campo, valor in cambios.items():
            setattr(obj, campo, valor)
        if hasattr(obj, "actualizado_en"):
            obj.actualizado_en = datetime.now(timezone.utc)
        await self.session.flush()
        return obj

    async def _listar(self, q) -> list:
        result = await self.session.execute(q)
        return list(result.scalars().all())

    # ── Usuarios ───────────────────────────────────────────────────

    @_traducir_errores
    async def obtener_usuario(self, usuario_id: int) -> Usuario | None:
        return await self.session.get(Usuario, usuario_id)

    @_traducir_errores
    async def obtener_usuario_por_username(self, username: str) -> Usuario | None:
        result = await self.session.execute(select(Usuario).where(Usuario.username == username))
        return result.scalar_one_or_none()

    @_traducir_errores
    async def listar_usuarios(self) -> list[Usuario]:
        return await self._listar(select(Usuario).order_by(Usuario.nombre_completo))

    @_traducir_errores
    async def crear_usuario(self, datos: dict[str, Any]) -> Usuario:
        return await self._crear(Usuario, datos)

    @_traducir_errores
    async def actualizar_usuario(self, usuario_id: int, cambios: dict[str, Any]) -> Usuario:
        return await self._actualizar(Usuario, usuario_id, cambios, "Usuario")

    # ── Carreras ───────────────────────────────────────────────────

    @_traducir_errores
    async def listar_carreras(self) -> list[Carrera]:
        return await self._listar(select(Carrera).order_by(Carrera.nombre))

    @_traducir_errores
    async def obtener_carrera(self, carrera_id: int) -> Carrera | None:
        return await self.session.get(Carrera, carrera_id)

    @_traducir_errores
    async def crear_carrera(self, datos: dict[str, Any]) -> Carrera:
        return await self._crear(Carrera, datos)

    @_traducir_errores
    async def actualizar_carrera(self, carrera_id: int, cambios: dict[str, Any]) -> Carrera:
        return await self._actualizar(Carrera, carrera_id, cambios, "Carrera")

    @_traducir_errores
    async def eliminar_carrera(self, carrera_id: int) -> None:
        """Elimina la carrera y, antes, cada una de sus materias (con sus correlatividades)."""
        for materia in await self.listar_materias(carrera_id):
            await self.eliminar_materia(materia.id)
        await self.session.execute(delete(Carrera).where(Carrera.id == carrera_id))
        await self.session.flush()

    # ── Materias ───────────────────────────────────────────────────

    @_traducir_errores
    async def listar_materias(self, carrera_id: int | None = None) -> list[Materia]:
        if carrera_id is not None:
            q = select(Materia).where(Materia.carrera_id == carrera_id).order_by(Materia.anio, Materia.id)
        else:
            q = select(Materia).order_by(Materia.carrera_id, Materia.id)
        return await self._listar(q)

    @_traducir_errores
    async def listar_materias_por_anio(self, carrera_id: int, anio: int) -> list[Materia]:
        q = (
            select(Materia)
            .where(Materia.carrera_id == carrera_id, Materia.anio == anio)
            .order_by(Materia.nombre)
        )
        return await self._listar(q)

    @_traducir_errores
    async def obtener_materia(self, materia_id: int) -> Materia | None:
        return await self.session.get(Materia, materia_id)

    @_traducir_errores
    async def crear_materia(self, datos: dict[str, Any]) -> Materia:
        return await self._crear(Materia, datos)

    @_traducir_errores
    async def actualizar_materia(self, materia_id: int, cambios: dict[str, Any]) -> Materia:
        return await self._actualizar(Materia, materia_id, cambios, "Materia")

    @_traducir_errores
    async def eliminar_materia(self, materia_id: int) -> None:
        """Elimina la materia y sus correlatividades en ambos sentidos."""
        await self.session.execute(
            delete(Correlatividad).where(
                or_(
                    Correlatividad.materia_id == materia_id,
                    Correlatividad.materia_requerida_id == materia_id,
                )
            )
        )
        await self.session.execute(delete(Materia).where(Materia.id == materia_id))
        await self.session.flush()

    # ── Correlatividades ───────────────────────────────────────────

    @_traducir_errores
    async def obtener_correlatividades(self, materia_id: int) -> list[Correlatividad]:
        q = select(Correlatividad).where(Correlatividad.materia_id == materia_id).order_by(Correlatividad.id)
        return await self._listar(q)

    @_traducir_errores
    async def listar_todas_correlatividades(self) -> list[Correlatividad]:
        return await self._listar(select(Correlatividad))

    @_traducir_errores
    async def obtener_correlatividad(self, correlatividad_id: int) -> Correlatividad | None:
        return await self.session.get(Correlatividad, correlatividad_id)

    @_traducir_errores
    async def agregar_correlatividad(self, datos: dict[str, Any]) -> Correlatividad:
        return await self._crear(Correlatividad, datos)

    @_traducir_errores
    async def eliminar_correlatividad(self, correlatividad_id: int) -> None:
        await self.session.execute(delete(Correlatividad).where(Correlatividad.id == correlatividad_id))
        await self.session.flush()

    # ── Estudiantes ────────────────────────────────────────────────

    @_traducir_errores
    async def listar_estudiantes(self) -> list[Estudiante]:
        return await self._listar(select(Estudiante).order_by(Estudiante.legajo))

    @_traducir_errores
    async def obtener_estudiante(self, estudiante_id: int) -> Estudiante | None:
        return await self.session.get(Estudiante, estudiante_id)

    @_traducir_errores
    async def obtener_estudiante_por_usuario(self, usuario_id: int) -> Estudiante | None:
        result = await self.session.execute(select(Estudiante).where(Estudiante.usuario_id == usuario_id))
        return result.scalar_one_or_none()

    @_traducir_errores
    async def obtener_estudiante_por_legajo(self, legajo: str) -> Estudiante | None:
        result = await self.session.execute(select(Estudiante).where(Estudiante.legajo == legajo))
        return result.scalar_one_or_none()

    @_traducir_errores
    async def crear_estudiante(self, datos: dict[str, Any]) -> Estudiante:
        return await self._crear(Estudiante, datos)

    @_traducir_errores
    async def actualizar_estudiante(self, estudiante_id: int, cambios: dict[str, Any]) -> Estudiante:
        return await self._actualizar(Estudiante, estudiante_id, cambios, "Estudiante")

    # ── Materias del estudiante ────────────────────────────────────

    @_traducir_errores
    async def obtener_materias_estudiante(self, estudiante_id: int) -> list[MateriaEstudiante]:
        q = (
            select(MateriaEstudiante)
            .where(MateriaEstudiante.estudiante_id == estudiante_id)
            .order_by(MateriaEstudiante.id)
        )
        return await self._listar(q)

    @_traducir_errores
    async def obtener_materia_estudiante(self, materia_estudiante_id: int) -> MateriaEstudiante | None:
        return await self.session.get(MateriaEstudiante, materia_estudiante_id)

    @_traducir_errores
    async def agregar_materia_estudiante(self, datos: dict[str, Any]) -> MateriaEstudiante:
        return await self._crear(MateriaEstudiante, datos)

    @_traducir_errores
    async def actualizar_materia_estudiante(
        self, materia_estudiante_id: int, cambios: dict[str, Any]
    ) -> MateriaEstudiante:
        return await self._actualizar(MateriaEstudiante, materia_estudiante_id, cambios, "Materia del estudiante")

    @_traducir_errores
    async def listar_actividad_reciente(self, limite: int = 10) -> list[MateriaEstudiante]:
        q = (
            select(MateriaEstudiante)
            .order_by(MateriaEstudiante.actualizado_en.desc(), MateriaEstudiante.id.desc())
            .limit(limite)
        )
        return await self._listar(q)

    # ── Inscripciones ──────────────────────────────────────────────

    @_traducir_errores
    async def listar_inscripciones(
        self, estudiante_id: int | None = None, materia_id: int | None = None
    ) -> list[Inscripcion]:
        q = select(Inscripcion).order_by(Inscripcion.id)
        if estudiante_id is not None:
            q = q.where(Inscripcion.estudiante_id == estudiante_id)
        if materia_id is not None:
            q = q.where(Inscripcion.materia_id == materia_id)
        return await self._listar(q)

    @_traducir_errores
    async def obtener_inscripcion(self, inscripcion_id: int) -> Inscripcion | None:
        return await self.session.get(Inscripcion, inscripcion_id)

    @_traducir_errores
    async def crear_inscripcion(self, datos: dict[str, Any]) -> Inscripcion:
        return await self._crear(Inscripcion, datos)

    @_traducir_errores
    async def eliminar_inscripcion(self, inscripcion_id: int) -> None:
        await self.session.execute(delete(Inscripcion).where(Inscripcion.id == inscripcion_id))
        await self.session.flush()

    @_traducir_errores
    async def listar_examenes_proximos(self, desde: datetime, limite: int = 10) -> list[Inscripcion]:
        q = (
            select(Inscripcion)
            .where(
                Inscripcion.tipo == TipoInscripcion.EXAMEN,
                Inscripcion.fecha_examen >= desde,
            )
            .order_by(Inscripcion.fecha_examen)
            .limit(limite)
        )
        return await self._listar(q)

    @_traducir_errores
    async def contar_inscripciones_desde(self, desde: datetime) -> int:
        q = select(func.count()).select_from(Inscripcion).where(Inscripcion.creado_en > desde)
        return (await self.session.execute(q)).scalar() or 0
