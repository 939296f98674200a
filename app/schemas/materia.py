"""Esquemas para materias y correlatividades."""
from pydantic import BaseModel, ConfigDict, Field


class MateriaCreate(BaseModel):
    """Request para crear una materia en el plan de una carrera."""

    carrera_id: int = Field(description="ID de la carrera")
    codigo: str = Field(description="Código de la materia (ej. MAT101)", min_length=1)
    nombre: str = Field(description="Nombre de la materia", min_length=1)
    anio: int = Field(description="Año del plan en que se cursa", gt=0)
    horas: int = Field(description="Carga horaria", gt=0)


class MateriaUpdate(BaseModel):
    """Request para actualizar una materia. Solo se modifican los campos enviados."""

    carrera_id: int | None = None
    codigo: str | None = Field(default=None, min_length=1)
    nombre: str | None = Field(default=None, min_length=1)
    anio: int | None = Field(default=None, gt=0)
    horas: int | None = Field(default=None, gt=0)


class MateriaItem(BaseModel):
    """Materia del plan de estudios."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="ID de la materia")
    carrera_id: int | None = Field(default=None, description="ID de la carrera")
    codigo: str = Field(description="Código de la materia")
    nombre: str = Field(description="Nombre de la materia")
    anio: int | None = Field(default=None, description="Año del plan")
    horas: int | None = Field(default=None, description="Carga horaria")


class CorrelatividadCreate(BaseModel):
    """Request para registrar que una materia requiere otra."""

    materia_id: int = Field(description="Materia que exige la correlativa")
    materia_requerida_id: int = Field(description="Materia que debe estar acreditada")


class CorrelatividadItem(BaseModel):
    """Correlatividad con el detalle de la materia requerida."""

    id: int
    materia_id: int
    materia_requerida_id: int
    materia_requerida: MateriaItem | None = None


class ElegibilidadResponse(BaseModel):
    """Resultado de evaluar correlativas de una materia para un estudiante."""

    elegible: bool
    faltantes: list[MateriaItem] = Field(default_factory=list)
    mensajes: list[str] = Field(default_factory=list, description="Un mensaje por materia faltante")
