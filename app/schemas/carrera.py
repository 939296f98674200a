"""Esquemas para carreras."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CarreraCreate(BaseModel):
    """Request para crear una carrera."""
    nombre: str = Field(description="Nombre de la carrera", min_length=1)
    duracion_anios: int = Field(description="Duración en años", gt=0)


class CarreraUpdate(BaseModel):
    """Request para actualizar una carrera. Solo se modifican los campos enviados."""
    nombre: str | None = Field(default=None, min_length=1)
    duracion_anios: int | None = Field(default=None, gt=0)


class CarreraItem(BaseModel):
    """Carrera."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    nombre: str
    duracion_anios: int
    creado_en: datetime | None = None
    actualizado_en: datetime | None = None


class CantidadMateriasResponse(BaseModel):
    cantidad: int
