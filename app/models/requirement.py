"""Modelo Correlatividad (materia → materia requerida)."""
from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Identity, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Correlatividad(Base):
    """Arista dirigida: materia_id no puede cursarse hasta cumplir materia_requerida_id."""

    __tablename__ = "correlatividades"
    __mapper_args__ = {"eager_defaults": True}
    __table_args__ = (
        UniqueConstraint(
            "materia_id", "materia_requerida_id",
            name="uq_correlatividades_materia_requerida"
        ),
    )

    id: Mapped[int] = mapped_column(BigInteger, Identity(always=True), primary_key=True)
    materia_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("materias.id", ondelete="CASCADE"), nullable=False
    )
    materia_requerida_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("materias.id", ondelete="CASCADE"), nullable=False
    )
    creado_en: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, server_default=func.now()
    )
