"""Esquemas del tablero de inicio: estadísticas, actividad reciente y próximos exámenes."""
from datetime import datetime

from pydantic import BaseModel, Field


class EstadisticasResponse(BaseModel):
    cantidad_estudiantes: int
    cantidad_carreras: int
    cantidad_materias: int
    inscripciones_activas: int = Field(description="Inscripciones creadas en los últimos meses configurados")


class ActividadItem(BaseModel):
    """Último cambio en la materia de un estudiante."""
    id: int
    estudiante_id: int
    legajo: str | None = None
    materia_codigo: str | None = None
    materia_nombre: str | None = None
    estado: str
    nota: int | None = None
    actualizado_en: datetime | None = None


class ActividadesResponse(BaseModel):
    actividades: list[ActividadItem]


class ExamenItem(BaseModel):
    inscripcion_id: int
    estudiante_id: int
    legajo: str | None = None
    materia_codigo: str | None = None
    materia_nombre: str | None = None
    fecha_examen: datetime


class ExamenesResponse(BaseModel):
    examenes: list[ExamenItem]
