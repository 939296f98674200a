"""Errores de dominio de la gestión académica.

Cada error conoce el código HTTP con el que se responde; el handler
registrado en ``app.main`` los convierte en ``{"detail": ...}``.
"""
from typing import TYPE_CHECKING, Any

from fastapi import status

if TYPE_CHECKING:
    from app.models.subject import Materia


class ErrorGestion(Exception):
    """Base de los errores de dominio."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detalle: str):
        super().__init__(detalle)
        self.detalle = detalle

    @property
    def detail(self) -> Any:
        return self.detalle


class NoEncontrado(ErrorGestion):
    """La materia, materia del estudiante, inscripción u otra entidad no existe."""

    status_code = status.HTTP_404_NOT_FOUND


class DatosInvalidos(ErrorGestion):
    """Entrada mal formada: estado inválido, nota faltante o fuera de rango, etc."""

    status_code = status.HTTP_400_BAD_REQUEST


class CorrelatividadesNoCumplidas(ErrorGestion):
    """Faltan materias correlativas; lleva un mensaje por cada materia faltante."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, faltantes: list["Materia"]):
        self.faltantes = faltantes
        self.mensajes = [mensaje_materia_faltante(m) for m in faltantes]
        super().__init__("; ".join(self.mensajes))

    @property
    def detail(self) -> Any:
        return {
            "error": self.detalle,
            "mensajes": self.mensajes,
            "faltantes": [
                {"id": m.id, "codigo": m.codigo, "nombre": m.nombre}
                for m in self.faltantes
            ],
        }


class AlmacenNoDisponible(ErrorGestion):
    """Falló la persistencia (conexión, driver). No se reintenta."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def mensaje_materia_faltante(materia: "Materia") -> str:
    """Mensaje para el usuario final por cada correlativa sin cumplir."""
    return f"Falta regularizar materia {materia.codigo} - {materia.nombre}"
