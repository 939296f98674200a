"""Máquina de estados de la cursada de un estudiante en una materia.

Por cada par (estudiante, materia): sin registro → cursando → acreditada | libre.
Acreditada y libre son estables pero pueden volver a modificarse.
"""
import logging
from datetime import datetime
from typing import Any

from app.core.exceptions import CorrelatividadesNoCumplidas, DatosInvalidos, NoEncontrado
from app.models import EstadoMateria, Inscripcion, MateriaEstudiante, TipoInscripcion
from app.models.student_subject import NOTA_MAXIMA, NOTA_MINIMA
from app.services.almacen import Almacen
from app.services.correlatividades import EvaluadorCorrelatividades

logger = logging.getLogger(__name__)

CAMPOS_ACTA = ("nota", "fecha", "libro", "folio")

# Estados que impiden una nueva inscripción a cursada de la misma materia
_ESTADOS_VIGENTES = (EstadoMateria.CURSANDO, EstadoMateria.ACREDITADA)


def validar_estado(estado: str) -> None:
    if estado not in EstadoMateria.VALORES:
        raise DatosInvalidos(
            f"Estado inválido '{estado}'. Valores permitidos: {', '.join(EstadoMateria.VALORES)}"
        )


def validar_nota(estado: str, nota: int | None) -> None:
    """Nota en [4, 10] si se informa; acreditada exige nota."""
    if nota is not None and not NOTA_MINIMA <= nota <= NOTA_MAXIMA:
        raise DatosInvalidos(f"La nota debe estar entre {NOTA_MINIMA} y {NOTA_MAXIMA}")
    if estado == EstadoMateria.ACREDITADA and nota is None:
        raise DatosInvalidos("La nota es obligatoria para acreditar la materia")


class MaquinaInscripciones:
    """Inscripciones a cursada/examen y cambios de estado de la materia del estudiante."""

    def __init__(self, almacen: Almacen, evaluador: EvaluadorCorrelatividades | None = None) -> None:
        self.almacen = almacen
        self.evaluador = evaluador or EvaluadorCorrelatividades(almacen)

    async def inscribir(
        self,
        estudiante_id: int,
        materia_id: int,
        tipo: str,
        fecha_examen: datetime | None = None,
    ) -> Inscripcion:
        """Inscribe al estudiante; en cursada además abre la materia en estado ``cursando``.

        Si se rechaza (materia/estudiante inexistente, correlativas sin
        cumplir, datos inválidos) no se escribe nada.
        """
        if tipo not in TipoInscripcion.VALORES:
            raise DatosInvalidos(
                f"Tipo de inscripción inválido '{tipo}'. Valores permitidos: {', '.join(TipoInscripcion.VALORES)}"
            )
        if tipo == TipoInscripcion.EXAMEN and fecha_examen is None:
            raise DatosInvalidos("La fecha de examen es obligatoria para inscribirse a examen")
        if tipo == TipoInscripcion.CURSADA and fecha_examen is not None:
            raise DatosInvalidos("La inscripción a cursada no lleva fecha de examen")

        materia = await self.almacen.obtener_materia(materia_id)
        if materia is None:
            raise NoEncontrado("Materia no encontrada")
        if await self.almacen.obtener_estudiante(estudiante_id) is None:
            raise NoEncontrado("Estudiante no encontrado")

        resultado = await self.evaluador.es_elegible(estudiante_id, materia_id)
        if not resultado.elegible:
            logger.warning(
                "Inscripción rechazada: estudiante %s, materia %s (%s). %s",
                estudiante_id, materia.codigo, tipo, "; ".join(resultado.mensajes),
            )
            raise CorrelatividadesNoCumplidas(resultado.faltantes)

        if tipo == TipoInscripcion.CURSADA:
            for me in await self.almacen.obtener_materias_estudiante(estudiante_id):
                if me.materia_id == materia_id and me.estado in _ESTADOS_VIGENTES:
                    raise DatosInvalidos(
                        f"El estudiante ya tiene la materia {materia.codigo} en estado {me.estado}"
                    )

        inscripcion = await self.almacen.crear_inscripcion(
            {
                "estudiante_id": estudiante_id,
                "materia_id": materia_id,
                "tipo": tipo,
                "fecha_examen": fecha_examen,
            }
        )
        if tipo == TipoInscripcion.CURSADA:
            await self.almacen.agregar_materia_estudiante(
                {
                    "estudiante_id": estudiante_id,
                    "materia_id": materia_id,
                    "estado": EstadoMateria.CURSANDO,
                    "nota": None,
                    "fecha": None,
                    "libro": None,
                    "folio": None,
                }
            )
        logger.info(
            "Inscripción %s creada: estudiante %s, materia %s, tipo %s",
            inscripcion.id, estudiante_id, materia.codigo, tipo,
        )
        return inscripcion

    async def actualizar_estado(
        self, materia_estudiante_id: int, estado: str | None = None, **campos: Any
    ) -> MateriaEstudiante:
        """Cambia el estado y los datos de acta enviados (nota, fecha, libro, folio).

        Solo se sobrescriben los campos recibidos; un campo enviado como None
        borra el valor guardado. Pasar a ``acreditada`` exige la nota en la
        misma llamada. Sin ``estado`` se conserva el actual y una acreditada
        no puede quedar sin nota. No vuelve a revisar correlatividades.
        """
        desconocidos = set(campos) - set(CAMPOS_ACTA)
        if desconocidos:
            raise DatosInvalidos(f"Campos no permitidos: {', '.join(sorted(desconocidos))}")

        actual = await self.almacen.obtener_materia_estudiante(materia_estudiante_id)
        if actual is None:
            raise NoEncontrado("Materia del estudiante no encontrada")

        estado_anterior = actual.estado
        if estado is not None:
            validar_estado(estado)
            estado_final = estado
            validar_nota(estado_final, campos.get("nota"))
        else:
            estado_final = estado_anterior
            validar_nota(estado_final, campos["nota"] if "nota" in campos else actual.nota)

        cambios = dict(campos)
        if estado is not None:
            cambios["estado"] = estado
        actualizada = await self.almacen.actualizar_materia_estudiante(materia_estudiante_id, cambios)
        logger.info(
            "Materia del estudiante %s: %s -> %s",
            materia_estudiante_id, estado_anterior, estado_final,
        )
        return actualizada

    async def registrar_materia(
        self,
        estudiante_id: int,
        materia_id: int,
        estado: str,
        nota: int | None = None,
        fecha: datetime | None = None,
        libro: str | None = None,
        folio: str | None = None,
    ) -> MateriaEstudiante:
        """Carga directa de una materia en el legajo (ej. equivalencias o actas previas)."""
        validar_estado(estado)
        validar_nota(estado, nota)
        if await self.almacen.obtener_estudiante(estudiante_id) is None:
            raise NoEncontrado("Estudiante no encontrado")
        if await self.almacen.obtener_materia(materia_id) is None:
            raise NoEncontrado("Materia no encontrada")

        materia_estudiante = await self.almacen.agregar_materia_estudiante(
            {
                "estudiante_id": estudiante_id,
                "materia_id": materia_id,
                "estado": estado,
                "nota": nota,
                "fecha": fecha,
                "libro": libro,
                "folio": folio,
            }
        )
        logger.info(
            "Materia %s registrada para estudiante %s en estado %s",
            materia_id, estudiante_id, estado,
        )
        return materia_estudiante

    async def eliminar_inscripcion(self, inscripcion_id: int) -> None:
        """Borra solo la inscripción; la materia del estudiante creada con ella se conserva."""
        if await self.almacen.obtener_inscripcion(inscripcion_id) is None:
            raise NoEncontrado("Inscripción no encontrada")
        await self.almacen.eliminar_inscripcion(inscripcion_id)
        logger.info("Inscripción %s eliminada", inscripcion_id)
