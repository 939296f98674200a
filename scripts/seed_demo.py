"""Carga datos de ejemplo: administrador, una carrera con materias, correlatividades y un estudiante."""
import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path

# Asegurar que el proyecto esté en el path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.core.database import AsyncSessionLocal, init_db
from app.core.security import hash_password
from app.models import RolUsuario
from app.services.almacen import AlmacenAcademico
from app.services.correlatividades import agregar_correlatividad
from app.services.datos_iniciales import asegurar_admin

CARRERA = {"nombre": "Tecnicatura en Matemática Aplicada", "duracion_anios": 3}

# (codigo, nombre, anio, horas)
MATERIAS = [
    ("MAT101", "Análisis Matemático I", 1, 96),
    ("MAT102", "Álgebra", 1, 96),
    ("MAT201", "Análisis Matemático II", 2, 96),
    ("MAT202", "Probabilidad y Estadística", 2, 64),
    ("MAT301", "Métodos Numéricos", 3, 64),
]

# materia -> materias requeridas
CORRELATIVAS = {
    "MAT201": ["MAT101"],
    "MAT202": ["MAT101", "MAT102"],
    "MAT301": ["MAT201", "MAT102"],
}

ESTUDIANTE = {
    "username": "estudiante1",
    "password": "1234",
    "nombre_completo": "Estudiante de Prueba",
    "email": "estudiante1@institutogestor.edu",
    "legajo": "1001",
}


async def seed_demo():
    await init_db()
    async with AsyncSessionLocal() as session:
        almacen = AlmacenAcademico(session)
        admin = await asegurar_admin(almacen)
        print(f"  = Administrador: {admin.username}")

        carrera = next(
            (c for c in await almacen.listar_carreras() if c.nombre == CARRERA["nombre"]),
            None,
        )
        if carrera is None:
            carrera = await almacen.crear_carrera(CARRERA)
            print(f"  + Carrera: {carrera.nombre}")
        else:
            print(f"  = Carrera: {carrera.nombre} (ya existe)")

        existentes = {m.codigo: m for m in await almacen.listar_materias(carrera.id)}
        for codigo, nombre, anio, horas in MATERIAS:
            if codigo in existentes:
                print(f"  = {codigo} (ya existe)")
                continue
            existentes[codigo] = await almacen.crear_materia(
                {"carrera_id": carrera.id, "codigo": codigo, "nombre": nombre, "anio": anio, "horas": horas}
            )
            print(f"  + {codigo} {nombre}")

        for codigo, requeridas in CORRELATIVAS.items():
            materia = existentes[codigo]
            ya = {c.materia_requerida_id for c in await almacen.obtener_correlatividades(materia.id)}
            for requerida in requeridas:
                if existentes[requerida].id in ya:
                    continue
                await agregar_correlatividad(almacen, materia.id, existentes[requerida].id)
                print(f"  + {codigo} requiere {requerida}")

        if await almacen.obtener_usuario_por_username(ESTUDIANTE["username"]) is None:
            usuario = await almacen.crear_usuario(
                {
                    "username": ESTUDIANTE["username"],
                    "password_hash": hash_password(ESTUDIANTE["password"]),
                    "nombre_completo": ESTUDIANTE["nombre_completo"],
                    "email": ESTUDIANTE["email"],
                    "rol": RolUsuario.ESTUDIANTE,
                }
            )
            await almacen.crear_estudiante(
                {
                    "usuario_id": usuario.id,
                    "carrera_id": carrera.id,
                    "legajo": ESTUDIANTE["legajo"],
                    "fecha_inscripcion": datetime.now(timezone.utc),
                }
            )
            print(f"  + Estudiante: {ESTUDIANTE['username']} / {ESTUDIANTE['password']} (legajo {ESTUDIANTE['legajo']})")

        await session.commit()
    print("Listo.")


if __name__ == "__main__":
    asyncio.run(seed_demo())
