"""Esquemas para estudiantes (alta con usuario, listado con detalle, legajo)."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.models.student import EstadoEstudiante
from app.schemas.materia import MateriaItem


def _validar_estado(v: str | None) -> str | None:
    if v is not None and v not in EstadoEstudiante.VALORES:
        raise ValueError(f"estado debe ser uno de: {', '.join(EstadoEstudiante.VALORES)}")
    return v


class EstudianteCreate(BaseModel):
    """Alta de estudiante: crea también su usuario con rol 'estudiante'."""

    username: str = Field(description="Nombre de usuario (único)", min_length=1)
    password: str = Field(description="Contraseña inicial", min_length=1)
    nombre_completo: str = Field(description="Nombre y apellido", min_length=1)
    email: EmailStr = Field(description="Correo electrónico")
    carrera_id: int = Field(description="ID de la carrera")
    legajo: str = Field(description="Número de legajo (único)", min_length=1)
    fecha_inscripcion: datetime = Field(description="Fecha de inscripción a la carrera")
    estado: str = Field(default=EstadoEstudiante.ACTIVO, description="active, inactive o graduated")

    @field_validator("estado")
    @classmethod
    def estado_valido(cls, v: str | None) -> str | None:
        return _validar_estado(v)


class EstudianteUpdate(BaseModel):
    """Datos del estudiante a modificar. Todos opcionales."""

    carrera_id: int | None = None
    legajo: str | None = Field(default=None, min_length=1)
    fecha_inscripcion: datetime | None = None
    estado: str | None = Field(default=None, description="active, inactive o graduated")

    @field_validator("estado")
    @classmethod
    def estado_valido(cls, v: str | None) -> str | None:
        return _validar_estado(v)


class EstudianteItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    usuario_id: int
    carrera_id: int
    legajo: str
    fecha_inscripcion: datetime
    estado: str


class UsuarioResumen(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    nombre_completo: str
    email: str
    rol: str


class CarreraResumen(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    nombre: str


class EstudianteDetalle(EstudianteItem):
    """Estudiante con su usuario y su carrera."""

    usuario: UsuarioResumen | None = None
    carrera: CarreraResumen | None = None


# ── Legajo ────────────────────────────────────────────────────────


class LegajoMateriaItem(BaseModel):
    id: int = Field(description="ID de la materia del estudiante")
    materia: MateriaItem
    estado: str
    nota: int | None = None
    fecha: datetime | None = None
    libro: str | None = None
    folio: str | None = None
    vence_regularidad: datetime | None = Field(
        default=None, description="Solo para el estado heredado 'regular': fecha + 2 años"
    )


class LegajoResponse(BaseModel):
    """Avance académico del estudiante."""

    estudiante_id: int
    acreditadas: int = Field(description="Materias acreditadas")
    total_materias: int = Field(description="Materias del plan de la carrera")
    porcentaje: int = Field(description="Avance (0-100)")
    promedio: float = Field(description="Promedio de materias acreditadas con nota")
    materias: list[LegajoMateriaItem] = Field(default_factory=list)
