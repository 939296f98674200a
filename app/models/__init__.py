"""Modelos SQLAlchemy (tablas de la base de datos)."""
from app.models.user import Usuario, RolUsuario
from app.models.career import Carrera
from app.models.subject import Materia
from app.models.requirement import Correlatividad
from app.models.student import Estudiante, EstadoEstudiante
from app.models.student_subject import MateriaEstudiante, EstadoMateria
from app.models.inscripcion import Inscripcion, TipoInscripcion

__all__ = [
    "Usuario",
    "RolUsuario",
    "Carrera",
    "Materia",
    "Correlatividad",
    "Estudiante",
    "EstadoEstudiante",
    "MateriaEstudiante",
    "EstadoMateria",
    "Inscripcion",
    "TipoInscripcion",
]
