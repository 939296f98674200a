"""Esquemas para autenticación y JWT."""
from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    """Body del endpoint de login."""

    username: str = Field(description="Nombre de usuario", min_length=1, examples=["admin"])
    password: str = Field(description="Contraseña en texto plano", min_length=1, examples=["qwerty"])


class RegistroRequest(BaseModel):
    """Body del registro público. El usuario queda con rol 'pendiente'."""

    username: str = Field(description="Nombre de usuario (único)", min_length=1)
    password: str = Field(description="Contraseña en texto plano", min_length=1)
    nombre_completo: str = Field(description="Nombre y apellido", min_length=1)
    email: EmailStr = Field(description="Correo electrónico")


class TokenResponse(BaseModel):
    """Respuesta con access_token JWT y datos del usuario."""

    access_token: str = Field(description="Token JWT para enviar en header Authorization: Bearer <token>")
    token_type: str = Field(default="bearer", description="Tipo de token (siempre 'bearer')")
    usuario_id: int = Field(description="ID del usuario autenticado")
    rol: str = Field(description="Rol del usuario autenticado")
