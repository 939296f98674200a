"""Modelo MateriaEstudiante (situación de un estudiante en una materia)."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, DateTime, ForeignKey, Identity, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.subject import Materia


class EstadoMateria:
    """Valores de estado de la materia del estudiante.

    REGULAR es un valor heredado: se acepta al evaluar correlatividades pero
    ya no puede asignarse.
    """
    CURSANDO = "cursando"
    ACREDITADA = "acreditada"
    LIBRE = "libre"
    REGULAR = "regular"

    VALORES = (CURSANDO, ACREDITADA, LIBRE)
    HABILITANTES = (ACREDITADA, REGULAR)


NOTA_MINIMA = 4
NOTA_MAXIMA = 10


class MateriaEstudiante(Base):
    """Cursando / acreditada / libre, con nota, fecha y libro/folio del acta en papel.

    No hay restricción única (estudiante, materia): un recursado tras quedar
    libre agrega una fila nueva y conserva el historial.
    """

    __tablename__ = "materias_estudiante"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(BigInteger, Identity(always=True), primary_key=True)
    estudiante_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("estudiantes.id"), nullable=False, index=True
    )
    materia_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("materias.id"), nullable=False
    )
    estado: Mapped[str] = mapped_column(Text, nullable=False)
    nota: Mapped[int | None] = mapped_column(Integer, nullable=True)
    fecha: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    libro: Mapped[str | None] = mapped_column(Text, nullable=True)
    folio: Mapped[str | None] = mapped_column(Text, nullable=True)
    creado_en: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, server_default=func.now()
    )
    # Última modificación: ordena el feed de actividad
    actualizado_en: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, server_default=func.now(), onupdate=func.now()
    )

    materia: Mapped["Materia"] = relationship("Materia")
