"""Modelo Estudiante (legajo)."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, DateTime, ForeignKey, Identity, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.user import Usuario
    from app.models.career import Carrera


class EstadoEstudiante:
    """Valores permitidos para el estado del estudiante."""
    ACTIVO = "active"
    INACTIVO = "inactive"
    EGRESADO = "graduated"

    VALORES = (ACTIVO, INACTIVO, EGRESADO)


class Estudiante(Base):
    """Estudiante con número de legajo único; 1:1 con su usuario."""

    __tablename__ = "estudiantes"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(BigInteger, Identity(always=True), primary_key=True)
    usuario_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("usuarios.id"), nullable=False, unique=True
    )
    carrera_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("carreras.id"), nullable=False
    )
    legajo: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    fecha_inscripcion: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    estado: Mapped[str] = mapped_column(
        Text, nullable=False, default=EstadoEstudiante.ACTIVO, server_default=text("'active'")
    )
    creado_en: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, server_default=func.now()
    )
    actualizado_en: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, server_default=func.now(), onupdate=func.now()
    )

    usuario: Mapped["Usuario"] = relationship("Usuario", back_populates="estudiante")
    carrera: Mapped["Carrera"] = relationship("Carrera")
