"""Modelo Usuario (acceso por rol)."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, DateTime, Identity, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.student import Estudiante


class RolUsuario:
    """Valores permitidos para el rol del usuario."""
    ADMIN = "admin"
    DOCENTE = "docente"
    ESTUDIANTE = "estudiante"
    PENDIENTE = "pendiente"

    VALORES = (ADMIN, DOCENTE, ESTUDIANTE, PENDIENTE)


class Usuario(Base):
    """Usuario del sistema. Los registrados por su cuenta quedan 'pendiente' hasta que un admin asigne rol."""

    __tablename__ = "usuarios"
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(BigInteger, Identity(always=True), primary_key=True)
    username: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    nombre_completo: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    rol: Mapped[str] = mapped_column(
        Text, nullable=False, default=RolUsuario.ESTUDIANTE, server_default=text("'estudiante'")
    )
    creado_en: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, server_default=func.now()
    )
    actualizado_en: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, server_default=func.now(), onupdate=func.now()
    )

    estudiante: Mapped["Estudiante | None"] = relationship("Estudiante", back_populates="usuario")
