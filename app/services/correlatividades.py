"""Evaluación de correlatividades (prerrequisitos entre materias).

Solo se revisan las correlatividades directas de la materia: si MAT201
requiere MAT101 y MAT101 requiere MAT100, inscribirse a MAT201 solo exige
MAT101.
"""
import logging
from collections import deque
from dataclasses import dataclass, field

from app.core.exceptions import DatosInvalidos, NoEncontrado, mensaje_materia_faltante
from app.models import Correlatividad, EstadoMateria, Materia
from app.services.almacen import Almacen

logger = logging.getLogger(__name__)


@dataclass
class ResultadoElegibilidad:
    """Resultado de evaluar si un estudiante puede inscribirse a una materia."""

    elegible: bool
    faltantes: list[Materia] = field(default_factory=list)

    @property
    def mensajes(self) -> list[str]:
        return [mensaje_materia_faltante(m) for m in self.faltantes]


class EvaluadorCorrelatividades:
    """Decide si un estudiante cumple las correlativas de una materia.

    Una correlativa se cumple si el estudiante tiene alguna fila de
    MateriaEstudiante para la materia requerida en estado ``acreditada`` o
    ``regular`` (valor heredado). Se informan todas las faltantes, no solo la
    primera. No escribe nada.
    """

    def __init__(self, almacen: Almacen) -> None:
        self.almacen = almacen

    async def es_elegible(self, estudiante_id: int, materia_id: int) -> ResultadoElegibilidad:
        correlatividades = await self.almacen.obtener_correlatividades(materia_id)
        if not correlatividades:
            return ResultadoElegibilidad(elegible=True)

        materias_estudiante = await self.almacen.obtener_materias_estudiante(estudiante_id)
        cumplidas = {
            me.materia_id
            for me in materias_estudiante
            if me.estado in EstadoMateria.HABILITANTES
        }

        faltantes: list[Materia] = []
        for correlatividad in correlatividades:
            if correlatividad.materia_requerida_id in cumplidas:
                continue
            requerida = await self.almacen.obtener_materia(correlatividad.materia_requerida_id)
            if requerida is None:
                # Correlatividad huérfana: se informa igual para no habilitar por omisión
                requerida = Materia(
                    id=correlatividad.materia_requerida_id,
                    codigo=f"#{correlatividad.materia_requerida_id}",
                    nombre="(materia inexistente)",
                )
            faltantes.append(requerida)

        if faltantes:
            logger.debug(
                "Estudiante %s no cumple correlativas de materia %s: %s",
                estudiante_id, materia_id, [m.codigo for m in faltantes],
            )
        return ResultadoElegibilidad(elegible=not faltantes, faltantes=faltantes)


def _alcanza(aristas: dict[int, set[int]], origen: int, destino: int) -> bool:
    """True si ``destino`` es alcanzable desde ``origen`` siguiendo las correlativas."""
    visitadas = {origen}
    pendientes = deque([origen])
    while pendientes:
        actual = pendientes.popleft()
        if actual == destino:
            return True
        for siguiente in aristas.get(actual, ()):
            if siguiente not in visitadas:
                visitadas.add(siguiente)
                pendientes.append(siguiente)
    return False


async def agregar_correlatividad(
    almacen: Almacen, materia_id: int, materia_requerida_id: int
) -> Correlatividad:
    """Registra que ``materia_id`` requiere ``materia_requerida_id``.

    Rechaza materias inexistentes, autorreferencias, duplicados y cualquier
    arista que cierre un ciclo (A requiere B ... requiere A).
    """
    if materia_id == materia_requerida_id:
        raise DatosInvalidos("Una materia no puede ser correlativa de sí misma")
    if await almacen.obtener_materia(materia_id) is None:
        raise NoEncontrado("Materia no encontrada")
    if await almacen.obtener_materia(materia_requerida_id) is None:
        raise NoEncontrado("Materia requerida no encontrada")

    aristas: dict[int, set[int]] = {}
    for c in await almacen.listar_todas_correlatividades():
        aristas.setdefault(c.materia_id, set()).add(c.materia_requerida_id)

    if materia_requerida_id in aristas.get(materia_id, set()):
        raise DatosInvalidos("La correlatividad ya existe")
    if _alcanza(aristas, materia_requerida_id, materia_id):
        raise DatosInvalidos("La correlatividad generaría un ciclo entre materias")

    correlatividad = await almacen.agregar_correlatividad(
        {"materia_id": materia_id, "materia_requerida_id": materia_requerida_id}
    )
    logger.info("Correlatividad agregada: materia %s requiere %s", materia_id, materia_requerida_id)
    return correlatividad
