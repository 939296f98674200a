"""
Pruebas de AlmacenAcademico sobre SQLite en memoria (aiosqlite)

Ejercitan las consultas reales: cascadas, claves foráneas, unicidad y la
traducción de errores de SQLAlchemy a errores de dominio.
"""
from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import BigInteger, event, func, select, text
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.pool import StaticPool

from app.api.deps import get_almacen
from app.core.database import Base
from app.core.exceptions import AlmacenNoDisponible, DatosInvalidos
from app.core.security import create_access_token, hash_password
from app.main import app
from app.models import Correlatividad, EstadoMateria, Materia, MateriaEstudiante, RolUsuario
from app.services.almacen import AlmacenAcademico
from app.services.inscripciones import MaquinaInscripciones

pytestmark = pytest.mark.integration


@compiles(BigInteger, "sqlite")
def _bigint_en_sqlite(type_, compiler, **kw):
    # INTEGER PRIMARY KEY es el único autoincremental en SQLite
    return "INTEGER"


def _activar_claves_foraneas(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
async def sesion():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    event.listen(engine.sync_engine, "connect", _activar_claves_foraneas)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    sesiones = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    async with sesiones() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def almacen_sql(sesion) -> AlmacenAcademico:
    return AlmacenAcademico(sesion)


@pytest.fixture
async def plan_sql(almacen_sql):
    """Carrera con MAT101 y MAT201 (requiere MAT101), y un estudiante inscripto en la carrera."""
    carrera = await almacen_sql.crear_carrera({"nombre": "Matemática Aplicada", "duracion_anios": 3})
    mat101 = await almacen_sql.crear_materia(
        {"carrera_id": carrera.id, "codigo": "MAT101", "nombre": "Análisis I", "anio": 1, "horas": 96}
    )
    mat201 = await almacen_sql.crear_materia(
        {"carrera_id": carrera.id, "codigo": "MAT201", "nombre": "Análisis II", "anio": 2, "horas": 96}
    )
    await almacen_sql.agregar_correlatividad({"materia_id": mat201.id, "materia_requerida_id": mat101.id})
    usuario = await almacen_sql.crear_usuario(
        {
            "username": "alumno",
            "password_hash": hash_password("1234"),
            "nombre_completo": "Alumno 1001",
            "email": "alumno@institutogestor.edu",
            "rol": RolUsuario.ESTUDIANTE,
        }
    )
    estudiante = await almacen_sql.crear_estudiante(
        {
            "usuario_id": usuario.id,
            "carrera_id": carrera.id,
            "legajo": "1001",
            "fecha_inscripcion": datetime(2024, 3, 1, tzinfo=timezone.utc),
        }
    )
    return {"carrera": carrera, "MAT101": mat101, "MAT201": mat201, "estudiante": estudiante}


async def _contar(sesion, modelo) -> int:
    return (await sesion.execute(select(func.count()).select_from(modelo))).scalar()


class TestAlmacenAcademico:
    """Reglas de integridad del almacén real"""

    async def test_valores_por_defecto(self, plan_sql):
        assert plan_sql["estudiante"].estado == "active"
        assert plan_sql["estudiante"].id is not None

    async def test_correlatividad_duplicada(self, almacen_sql, plan_sql):
        with pytest.raises(DatosInvalidos):
            await almacen_sql.agregar_correlatividad(
                {"materia_id": plan_sql["MAT201"].id, "materia_requerida_id": plan_sql["MAT101"].id}
            )

    async def test_legajo_duplicado(self, almacen_sql, plan_sql):
        otro = await almacen_sql.crear_usuario(
            {
                "username": "otro",
                "password_hash": hash_password("1234"),
                "nombre_completo": "Otro",
                "email": "otro@institutogestor.edu",
            }
        )
        with pytest.raises(DatosInvalidos):
            await almacen_sql.crear_estudiante(
                {
                    "usuario_id": otro.id,
                    "carrera_id": plan_sql["carrera"].id,
                    "legajo": "1001",
                    "fecha_inscripcion": datetime(2024, 3, 1, tzinfo=timezone.utc),
                }
            )

    async def test_eliminar_materia_borra_correlatividades(self, sesion, almacen_sql, plan_sql):
        await almacen_sql.eliminar_materia(plan_sql["MAT101"].id)

        assert await _contar(sesion, Correlatividad) == 0
        assert await almacen_sql.obtener_materia(plan_sql["MAT101"].id) is None
        assert await almacen_sql.obtener_materia(plan_sql["MAT201"].id) is not None

    async def test_materia_con_historial_no_se_elimina(self, sesion, almacen_sql, plan_sql):
        maquina = MaquinaInscripciones(almacen_sql)
        await maquina.inscribir(plan_sql["estudiante"].id, plan_sql["MAT101"].id, "cursada")
        await sesion.commit()

        with pytest.raises(DatosInvalidos):
            await almacen_sql.eliminar_materia(plan_sql["MAT101"].id)
        await sesion.rollback()

        assert await _contar(sesion, Materia) == 2
        assert await _contar(sesion, Correlatividad) == 1
        assert await _contar(sesion, MateriaEstudiante) == 1

    async def test_carrera_con_estudiantes_no_se_elimina(self, almacen_sql, plan_sql):
        with pytest.raises(DatosInvalidos):
            await almacen_sql.eliminar_carrera(plan_sql["carrera"].id)

    async def test_eliminar_carrera_sin_estudiantes(self, sesion, almacen_sql):
        carrera = await almacen_sql.crear_carrera({"nombre": "Profesorado", "duracion_anios": 4})
        a = await almacen_sql.crear_materia(
            {"carrera_id": carrera.id, "codigo": "PRO101", "nombre": "Didáctica", "anio": 1, "horas": 64}
        )
        b = await almacen_sql.crear_materia(
            {"carrera_id": carrera.id, "codigo": "PRO201", "nombre": "Práctica", "anio": 2, "horas": 64}
        )
        await almacen_sql.agregar_correlatividad({"materia_id": b.id, "materia_requerida_id": a.id})

        await almacen_sql.eliminar_carrera(carrera.id)

        assert await almacen_sql.obtener_carrera(carrera.id) is None
        assert await almacen_sql.listar_materias(carrera.id) == []
        assert await _contar(sesion, Correlatividad) == 0

    async def test_actualizar_materia_estudiante(self, almacen_sql, plan_sql):
        maquina = MaquinaInscripciones(almacen_sql)
        await maquina.inscribir(plan_sql["estudiante"].id, plan_sql["MAT101"].id, "cursada")
        (me,) = await almacen_sql.obtener_materias_estudiante(plan_sql["estudiante"].id)

        await maquina.actualizar_estado(me.id, EstadoMateria.ACREDITADA, nota=8)

        guardada = await almacen_sql.obtener_materia_estudiante(me.id)
        assert (guardada.estado, guardada.nota) == (EstadoMateria.ACREDITADA, 8)
        assert [r.id for r in await almacen_sql.listar_actividad_reciente()] == [me.id]

    async def test_tabla_inexistente_es_almacen_no_disponible(self, sesion, almacen_sql):
        await sesion.execute(text("DROP TABLE inscripciones"))
        with pytest.raises(AlmacenNoDisponible):
            await almacen_sql.listar_inscripciones()


class TestErroresDelAlmacenEnLaApi:
    """Códigos HTTP de los errores traducidos por el almacén real"""

    @pytest.fixture
    async def client_sql(self, almacen_sql):
        async def _almacen_de_prueba():
            return almacen_sql

        app.dependency_overrides[get_almacen] = _almacen_de_prueba
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
        app.dependency_overrides.clear()

    @pytest.fixture
    async def admin_sql_headers(self, almacen_sql) -> dict[str, str]:
        admin = await almacen_sql.crear_usuario(
            {
                "username": "admin",
                "password_hash": hash_password("secreto"),
                "nombre_completo": "Admin",
                "email": "admin@institutogestor.edu",
                "rol": RolUsuario.ADMIN,
            }
        )
        token = create_access_token(subject=admin.id, extra={"username": admin.username, "rol": admin.rol})
        return {"Authorization": f"Bearer {token}"}

    async def test_base_no_disponible_es_500(self, client_sql, sesion, admin_sql_headers):
        await sesion.execute(text("DROP TABLE inscripciones"))

        r = await client_sql.get("/api/v1/inscripciones", headers=admin_sql_headers)

        assert r.status_code == 500
        assert r.json()["detail"] == "No se pudo acceder a la base de datos"

    async def test_materia_con_historial_es_400(self, client_sql, almacen_sql, plan_sql, admin_sql_headers):
        await MaquinaInscripciones(almacen_sql).inscribir(plan_sql["estudiante"].id, plan_sql["MAT101"].id, "cursada")

        r = await client_sql.delete(f"/api/v1/materias/{plan_sql['MAT101'].id}", headers=admin_sql_headers)

        assert r.status_code == 400
