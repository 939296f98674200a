"""Esquemas para listado de usuarios y asignación de roles."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.user import RolUsuario


class UsuarioItem(BaseModel):
    """Usuario sin el hash de la contraseña."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(description="ID del usuario")
    username: str = Field(description="Nombre de usuario")
    nombre_completo: str = Field(description="Nombre y apellido")
    email: str = Field(description="Correo electrónico")
    rol: str = Field(description="admin, docente, estudiante o pendiente")
    creado_en: datetime | None = None


class UsuarioListResponse(BaseModel):
    """Respuesta del listado de usuarios."""

    usuarios: list[UsuarioItem] = Field(description="Lista de usuarios")


class RolUpdateRequest(BaseModel):
    """Body para que un administrador asigne rol a un usuario."""

    rol: str = Field(description="admin, docente, estudiante o pendiente")

    @field_validator("rol")
    @classmethod
    def rol_valido(cls, v: str) -> str:
        if v not in RolUsuario.VALORES:
            raise ValueError(f"rol debe ser uno de: {', '.join(RolUsuario.VALORES)}")
        return v
