"""Esquemas para la situación del estudiante en cada materia."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.materia import MateriaItem


class MateriaEstudianteCreate(BaseModel):
    """Carga directa de una materia en el legajo (nota, acta)."""

    estudiante_id: int
    materia_id: int
    estado: str = Field(description="cursando, acreditada o libre")
    nota: int | None = Field(default=None, description="Nota (4 a 10). Obligatoria si estado=acreditada")
    fecha: datetime | None = Field(default=None, description="Fecha de acreditación")
    libro: str | None = Field(default=None, description="Libro de actas")
    folio: str | None = Field(default=None, description="Folio del libro de actas")


class MateriaEstudianteUpdate(BaseModel):
    """Cambio de estado/acta. Solo se modifican los campos enviados; enviar null borra el valor."""

    estado: str | None = Field(default=None, description="cursando, acreditada o libre")
    nota: int | None = None
    fecha: datetime | None = None
    libro: str | None = None
    folio: str | None = None


class MateriaEstudianteItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    estudiante_id: int
    materia_id: int
    estado: str
    nota: int | None = None
    fecha: datetime | None = None
    libro: str | None = None
    folio: str | None = None
    actualizado_en: datetime | None = None


class MateriaEstudianteDetalle(MateriaEstudianteItem):
    materia: MateriaItem | None = None
