"""Modelo Inscripción (a cursada o a examen)."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, DateTime, ForeignKey, Identity, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.student import Estudiante
    from app.models.subject import Materia


class TipoInscripcion:
    """Valores permitidos para el tipo de inscripción."""
    CURSADA = "cursada"
    EXAMEN = "examen"

    VALORES = (CURSADA, EXAMEN)


class Inscripcion(Base):
    """Inscripción de un estudiante a cursar una materia o a rendir su examen."""

    __tablename__ = "inscripciones"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(BigInteger, Identity(always=True), primary_key=True)
    estudiante_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("estudiantes.id"), nullable=False
    )
    materia_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("materias.id"), nullable=False
    )
    tipo: Mapped[str] = mapped_column(Text, nullable=False)
    fecha_examen: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    creado_en: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, server_default=func.now()
    )
    actualizado_en: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, server_default=func.now(), onupdate=func.now()
    )

    estudiante: Mapped["Estudiante"] = relationship("Estudiante")
    materia: Mapped["Materia"] = relationship("Materia")
