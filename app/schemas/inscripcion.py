"""Esquemas para inscripciones a cursada y examen."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.estudiante import EstudianteItem
from app.schemas.materia import MateriaItem


class InscripcionCreate(BaseModel):
    """Request para inscribir a un estudiante."""

    estudiante_id: int = Field(description="ID del estudiante")
    materia_id: int = Field(description="ID de la materia")
    tipo: str = Field(description="cursada o examen")
    fecha_examen: datetime | None = Field(default=None, description="Obligatoria si tipo=examen; no se admite en cursada")


class InscripcionItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    estudiante_id: int
    materia_id: int
    tipo: str
    fecha_examen: datetime | None = None
    creado_en: datetime | None = None


class InscripcionDetalle(InscripcionItem):
    estudiante: EstudianteItem | None = None
    materia: MateriaItem | None = None
