"""Resumen del legajo: avance en la carrera, promedio y situación por materia."""
from dataclasses import dataclass, field
from datetime import datetime

from app.models import EstadoMateria, Estudiante, Materia, MateriaEstudiante
from app.services.almacen import Almacen

# Plazo de una regularidad (estado heredado) desde su fecha; solo informativo
VIGENCIA_REGULARIDAD_ANIOS = 2


def vencimiento_regularidad(fecha: datetime | None) -> datetime | None:
    if fecha is None:
        return None
    try:
        return fecha.replace(year=fecha.year + VIGENCIA_REGULARIDAD_ANIOS)
    except ValueError:
        # 29 de febrero
        return fecha.replace(year=fecha.year + VIGENCIA_REGULARIDAD_ANIOS, day=28)


@dataclass
class MateriaLegajo:
    materia: Materia
    registro: MateriaEstudiante
    vence: datetime | None = None


@dataclass
class ResumenLegajo:
    acreditadas: int
    total_materias: int
    porcentaje: int
    promedio: float
    materias: list[MateriaLegajo] = field(default_factory=list)


async def resumir_legajo(almacen: Almacen, estudiante: Estudiante) -> ResumenLegajo:
    """Arma el resumen con el registro más reciente de cada materia del estudiante.

    El total de materias es el del plan de la carrera del estudiante; el
    promedio considera solo materias acreditadas con nota.
    """
    plan = await almacen.listar_materias(estudiante.carrera_id)
    materias_por_id = {m.id: m for m in plan}

    vigentes: dict[int, MateriaEstudiante] = {}
    for registro in await almacen.obtener_materias_estudiante(estudiante.id):
        previo = vigentes.get(registro.materia_id)
        if previo is None or registro.id > previo.id:
            vigentes[registro.materia_id] = registro

    filas: list[MateriaLegajo] = []
    for materia_id, registro in vigentes.items():
        materia = materias_por_id.get(materia_id) or await almacen.obtener_materia(materia_id)
        if materia is None:
            continue
        vence = vencimiento_regularidad(registro.fecha) if registro.estado == EstadoMateria.REGULAR else None
        filas.append(MateriaLegajo(materia=materia, registro=registro, vence=vence))
    filas.sort(key=lambda f: (f.materia.anio, f.materia.codigo))

    acreditadas = [f for f in filas if f.registro.estado == EstadoMateria.ACREDITADA]
    notas = [f.registro.nota for f in acreditadas if f.registro.nota is not None]
    total = len(plan)

    return ResumenLegajo(
        acreditadas=len(acreditadas),
        total_materias=total,
        porcentaje=round(100 * len(acreditadas) / total) if total else 0,
        promedio=round(sum(notas) / len(notas), 1) if notas else 0.0,
        materias=filas,
    )
