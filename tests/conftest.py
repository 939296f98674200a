"""
Fixtures compartidas: almacén en memoria, máquina de inscripciones y cliente HTTP.

El almacén en memoria cumple el protocolo ``Almacen`` con instancias ORM
transitorias (sin sesión), así las pruebas no necesitan PostgreSQL.
"""
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.deps import get_almacen
from app.core.exceptions import DatosInvalidos, NoEncontrado
from app.core.security import create_access_token, hash_password
from app.main import app
from app.models import (
    Carrera,
    Correlatividad,
    EstadoEstudiante,
    Estudiante,
    Inscripcion,
    Materia,
    MateriaEstudiante,
    RolUsuario,
    TipoInscripcion,
    Usuario,
)
from app.services.correlatividades import EvaluadorCorrelatividades
from app.services.inscripciones import MaquinaInscripciones


class AlmacenEnMemoria:
    """Doble de prueba del almacén: mismas reglas de unicidad, cascada y claves foráneas que el real."""

    def __init__(self) -> None:
        self.tablas: dict[type, dict[int, Any]] = {
            modelo: {}
            for modelo in (Usuario, Carrera, Materia, Correlatividad, Estudiante, MateriaEstudiante, Inscripcion)
        }
        self._proximo_id: dict[type, int] = {modelo: 1 for modelo in self.tablas}
        self._tick = 0

    # ── Helpers ────────────────────────────────────────────────────

    def _ahora(self) -> datetime:
        # Estrictamente creciente para ordenar por fecha de modificación
        self._tick += 1
        return datetime.now(timezone.utc) + timedelta(microseconds=self._tick)

    def _crear(self, modelo, datos: dict[str, Any]):
        obj = modelo(**datos)
        obj.id = self._proximo_id[modelo]
        self._proximo_id[modelo] += 1
        ahora = self._ahora()
        obj.creado_en = ahora
        if hasattr(modelo, "actualizado_en"):
            obj.actualizado_en = ahora
        self.tablas[modelo][obj.id] = obj
        return obj

    def _actualizar(self, modelo, obj_id: int, cambios: dict[str, Any], nombre: str):
        obj = self.tablas[modelo].get(obj_id)
        if obj is None:
            raise NoEncontrado(f"{nombre} no encontrada")
        for campo, valor in cambios.items():
            setattr(obj, campo, valor)
        obj.actualizado_en = self._ahora()
        return obj

    def _referenciada(self, modelo, campo: str, valor: int) -> bool:
        return any(getattr(o, campo) == valor for o in self.tablas[modelo].values())

    def _violacion_de_clave_foranea(self) -> DatosInvalidos:
        return DatosInvalidos("Los datos enviados violan una restricción de la base de datos")

    def filas(self, modelo) -> list:
        return sorted(self.tablas[modelo].values(), key=lambda o: o.id)

    # ── Usuarios ───────────────────────────────────────────────────

    async def obtener_usuario(self, usuario_id: int) -> Usuario | None:
        return self.tablas[Usuario].get(usuario_id)

    async def obtener_usuario_por_username(self, username: str) -> Usuario | None:
        return next((u for u in self.filas(Usuario) if u.username == username), None)

    async def listar_usuarios(self) -> list[Usuario]:
        return sorted(self.filas(Usuario), key=lambda u: u.nombre_completo)

    async def crear_usuario(self, datos: dict[str, Any]) -> Usuario:
        if await self.obtener_usuario_por_username(datos["username"]):
            raise DatosInvalidos("Los datos enviados violan una restricción de la base de datos")
        datos = {"rol": RolUsuario.ESTUDIANTE, **datos}
        return self._crear(Usuario, datos)

    async def actualizar_usuario(self, usuario_id: int, cambios: dict[str, Any]) -> Usuario:
        return self._actualizar(Usuario, usuario_id, cambios, "Usuario")

    # ── Carreras ───────────────────────────────────────────────────

    async def listar_carreras(self) -> list[Carrera]:
        return sorted(self.filas(Carrera), key=lambda c: c.nombre)

    async def obtener_carrera(self, carrera_id: int) -> Carrera | None:
        return self.tablas[Carrera].get(carrera_id)

    async def crear_carrera(self, datos: dict[str, Any]) -> Carrera:
        return self._crear(Carrera, datos)

    async def actualizar_carrera(self, carrera_id: int, cambios: dict[str, Any]) -> Carrera:
        return self._actualizar(Carrera, carrera_id, cambios, "Carrera")

    async def eliminar_carrera(self, carrera_id: int) -> None:
        # Claves foráneas: se valida todo antes de borrar, como el rollback del real
        materias = await self.listar_materias(carrera_id)
        if self._referenciada(Estudiante, "carrera_id", carrera_id):
            raise self._violacion_de_clave_foranea()
        for materia in materias:
            self._validar_borrado_de_materia(materia.id)
        for materia in materias:
            await self.eliminar_materia(materia.id)
        self.tablas[Carrera].pop(carrera_id, None)

    # ── Materias ───────────────────────────────────────────────────

    async def listar_materias(self, carrera_id: int | None = None) -> list[Materia]:
        if carrera_id is not None:
            return sorted(
                (m for m in self.filas(Materia) if m.carrera_id == carrera_id),
                key=lambda m: (m.anio, m.id),
            )
        return sorted(self.filas(Materia), key=lambda m: (m.carrera_id, m.id))

    async def listar_materias_por_anio(self, carrera_id: int, anio: int) -> list[Materia]:
        return sorted(
            (m for m in self.filas(Materia) if m.carrera_id == carrera_id and m.anio == anio),
            key=lambda m: m.nombre,
        )

    async def obtener_materia(self, materia_id: int) -> Materia | None:
        return self.tablas[Materia].get(materia_id)

    async def crear_materia(self, datos: dict[str, Any]) -> Materia:
        return self._crear(Materia, datos)

    async def actualizar_materia(self, materia_id: int, cambios: dict[str, Any]) -> Materia:
        return self._actualizar(Materia, materia_id, cambios, "Materia")

    def _validar_borrado_de_materia(self, materia_id: int) -> None:
        if self._referenciada(MateriaEstudiante, "materia_id", materia_id) or self._referenciada(
            Inscripcion, "materia_id", materia_id
        ):
            raise self._violacion_de_clave_foranea()

    async def eliminar_materia(self, materia_id: int) -> None:
        self._validar_borrado_de_materia(materia_id)
        for c in list(self.filas(Correlatividad)):
            if materia_id in (c.materia_id, c.materia_requerida_id):
                del self.tablas[Correlatividad][c.id]
        self.tablas[Materia].pop(materia_id, None)

    # ── Correlatividades ───────────────────────────────────────────

    async def obtener_correlatividades(self, materia_id: int) -> list[Correlatividad]:
        return [c for c in self.filas(Correlatividad) if c.materia_id == materia_id]

    async def listar_todas_correlatividades(self) -> list[Correlatividad]:
        return self.filas(Correlatividad)

    async def obtener_correlatividad(self, correlatividad_id: int) -> Correlatividad | None:
        return self.tablas[Correlatividad].get(correlatividad_id)

    async def agregar_correlatividad(self, datos: dict[str, Any]) -> Correlatividad:
        for c in self.filas(Correlatividad):
            if (c.materia_id, c.materia_requerida_id) == (datos["materia_id"], datos["materia_requerida_id"]):
                raise DatosInvalidos("Los datos enviados violan una restricción de la base de datos")
        return self._crear(Correlatividad, datos)

    async def eliminar_correlatividad(self, correlatividad_id: int) -> None:
        self.tablas[Correlatividad].pop(correlatividad_id, None)

    # ── Estudiantes ────────────────────────────────────────────────

    async def listar_estudiantes(self) -> list[Estudiante]:
        return sorted(self.filas(Estudiante), key=lambda e: e.legajo)

    async def obtener_estudiante(self, estudiante_id: int) -> Estudiante | None:
        return self.tablas[Estudiante].get(estudiante_id)

    async def obtener_estudiante_por_usuario(self, usuario_id: int) -> Estudiante | None:
        return next((e for e in self.filas(Estudiante) if e.usuario_id == usuario_id), None)

    async def obtener_estudiante_por_legajo(self, legajo: str) -> Estudiante | None:
        return next((e for e in self.filas(Estudiante) if e.legajo == legajo), None)

    async def crear_estudiante(self, datos: dict[str, Any]) -> Estudiante:
        if await self.obtener_estudiante_por_legajo(datos["legajo"]):
            raise DatosInvalidos("Los datos enviados violan una restricción de la base de datos")
        datos = {"estado": EstadoEstudiante.ACTIVO, **datos}
        return self._crear(Estudiante, datos)

    async def actualizar_estudiante(self, estudiante_id: int, cambios: dict[str, Any]) -> Estudiante:
        return self._actualizar(Estudiante, estudiante_id, cambios, "Estudiante")

    # ── Materias del estudiante ────────────────────────────────────

    async def obtener_materias_estudiante(self, estudiante_id: int) -> list[MateriaEstudiante]:
        return [me for me in self.filas(MateriaEstudiante) if me.estudiante_id == estudiante_id]

    async def obtener_materia_estudiante(self, materia_estudiante_id: int) -> MateriaEstudiante | None:
        return self.tablas[MateriaEstudiante].get(materia_estudiante_id)

    async def agregar_materia_estudiante(self, datos: dict[str, Any]) -> MateriaEstudiante:
        return self._crear(MateriaEstudiante, datos)

    async def actualizar_materia_estudiante(
        self, materia_estudiante_id: int, cambios: dict[str, Any]
    ) -> MateriaEstudiante:
        return self._actualizar(MateriaEstudiante, materia_estudiante_id, cambios, "Materia del estudiante")

    async def listar_actividad_reciente(self, limite: int = 10) -> list[MateriaEstudiante]:
        filas = sorted(self.filas(MateriaEstudiante), key=lambda me: (me.actualizado_en, me.id), reverse=True)
        return filas[:limite]

    # ── Inscripciones ──────────────────────────────────────────────

    async def listar_inscripciones(
        self, estudiante_id: int | None = None, materia_id: int | None = None
    ) -> list[Inscripcion]:
        return [
            i
            for i in self.filas(Inscripcion)
            if (estudiante_id is None or i.estudiante_id == estudiante_id)
            and (materia_id is None or i.materia_id == materia_id)
        ]

    async def obtener_inscripcion(self, inscripcion_id: int) -> Inscripcion | None:
        return self.tablas[Inscripcion].get(inscripcion_id)

    async def crear_inscripcion(self, datos: dict[str, Any]) -> Inscripcion:
        return self._crear(Inscripcion, datos)

    async def eliminar_inscripcion(self, inscripcion_id: int) -> None:
        self.tablas[Inscripcion].pop(inscripcion_id, None)

    async def listar_examenes_proximos(self, desde: datetime, limite: int = 10) -> list[Inscripcion]:
        examenes = [
            i
            for i in self.filas(Inscripcion)
            if i.tipo == TipoInscripcion.EXAMEN and i.fecha_examen is not None and i.fecha_examen >= desde
        ]
        return sorted(examenes, key=lambda i: i.fecha_examen)[:limite]

    async def contar_inscripciones_desde(self, desde: datetime) -> int:
        return sum(1 for i in self.filas(Inscripcion) if i.creado_en > desde)


# ── Escenario base ────────────────────────────────────────────────


async def crear_estudiante_de_prueba(
    almacen: AlmacenEnMemoria, carrera_id: int, username: str = "alumno", legajo: str = "1001"
) -> Estudiante:
    usuario = await almacen.crear_usuario(
        {
            "username": username,
            "password_hash": hash_password("1234"),
            "nombre_completo": f"Alumno {legajo}",
            "email": f"{username}@institutogestor.edu",
            "rol": RolUsuario.ESTUDIANTE,
        }
    )
    return await almacen.crear_estudiante(
        {
            "usuario_id": usuario.id,
            "carrera_id": carrera_id,
            "legajo": legajo,
            "fecha_inscripcion": datetime(2024, 3, 1, tzinfo=timezone.utc),
        }
    )


@pytest.fixture
def almacen() -> AlmacenEnMemoria:
    return AlmacenEnMemoria()


@pytest.fixture
async def plan(almacen):
    """Carrera con MAT101, MAT102 (1er año) y MAT201 que requiere MAT101."""
    carrera = await almacen.crear_carrera({"nombre": "Matemática Aplicada", "duracion_anios": 3})
    mat101 = await almacen.crear_materia(
        {"carrera_id": carrera.id, "codigo": "MAT101", "nombre": "Análisis I", "anio": 1, "horas": 96}
    )
    mat102 = await almacen.crear_materia(
        {"carrera_id": carrera.id, "codigo": "MAT102", "nombre": "Álgebra", "anio": 1, "horas": 96}
    )
    mat201 = await almacen.crear_materia(
        {"carrera_id": carrera.id, "codigo": "MAT201", "nombre": "Análisis II", "anio": 2, "horas": 96}
    )
    await almacen.agregar_correlatividad({"materia_id": mat201.id, "materia_requerida_id": mat101.id})
    return {"carrera": carrera, "MAT101": mat101, "MAT102": mat102, "MAT201": mat201}


@pytest.fixture
async def estudiante(almacen, plan):
    return await crear_estudiante_de_prueba(almacen, plan["carrera"].id)


@pytest.fixture
def nuevo_estudiante(almacen, plan):
    """Crea estudiantes adicionales en la carrera del plan."""

    async def _crear(username: str, legajo: str) -> Estudiante:
        return await crear_estudiante_de_prueba(almacen, plan["carrera"].id, username=username, legajo=legajo)

    return _crear


@pytest.fixture
def evaluador(almacen) -> EvaluadorCorrelatividades:
    return EvaluadorCorrelatividades(almacen)


@pytest.fixture
def maquina(almacen) -> MaquinaInscripciones:
    return MaquinaInscripciones(almacen)


# ── API ───────────────────────────────────────────────────────────


@pytest.fixture
async def client(almacen):
    """Cliente HTTP contra la app con el almacén en memoria (sin lifespan, sin base de datos)."""

    async def _almacen_de_prueba():
        return almacen

    app.dependency_overrides[get_almacen] = _almacen_de_prueba
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers(usuario: Usuario) -> dict[str, str]:
    token = create_access_token(subject=usuario.id, extra={"username": usuario.username, "rol": usuario.rol})
    return {"Authorization": f"Bearer {token}"}


async def _usuario(almacen: AlmacenEnMemoria, username: str, rol: str) -> Usuario:
    return await almacen.crear_usuario(
        {
            "username": username,
            "password_hash": hash_password("secreto"),
            "nombre_completo": username.capitalize(),
            "email": f"{username}@institutogestor.edu",
            "rol": rol,
        }
    )


@pytest.fixture
async def admin_headers(almacen) -> dict[str, str]:
    return auth_headers(await _usuario(almacen, "admin", RolUsuario.ADMIN))


@pytest.fixture
async def docente_headers(almacen) -> dict[str, str]:
    return auth_headers(await _usuario(almacen, "docente", RolUsuario.DOCENTE))


@pytest.fixture
async def pendiente_headers(almacen) -> dict[str, str]:
    return auth_headers(await _usuario(almacen, "nuevo", RolUsuario.PENDIENTE))


@pytest.fixture
async def estudiante_headers(almacen, estudiante) -> dict[str, str]:
    return auth_headers(await almacen.obtener_usuario(estudiante.usuario_id))
