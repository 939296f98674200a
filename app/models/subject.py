"""Modelo Materia."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, DateTime, ForeignKey, Identity, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.career import Carrera


class Materia(Base):
    """Materia del plan de estudios: ej. MAT101 - Álgebra I, 1° año, 96 horas."""

    __tablename__ = "materias"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(BigInteger, Identity(always=True), primary_key=True)
    carrera_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("carreras.id"), nullable=False
    )
    # Único dentro de la carrera por convención; no se fuerza en BD
    codigo: Mapped[str] = mapped_column(Text, nullable=False)
    nombre: Mapped[str] = mapped_column(Text, nullable=False)
    anio: Mapped[int] = mapped_column(Integer, nullable=False)
    horas: Mapped[int] = mapped_column(Integer, nullable=False)
    creado_en: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, server_default=func.now()
    )
    actualizado_en: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, server_default=func.now(), onupdate=func.now()
    )

    carrera: Mapped["Carrera"] = relationship("Carrera", back_populates="materias")
