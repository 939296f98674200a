"""Endpoints de autenticación: login y registro."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_almacen
from app.core.security import create_access_token, hash_password, verify_password
from app.models import RolUsuario
from app.schemas.auth import LoginRequest, RegistroRequest, TokenResponse
from app.schemas.usuario import UsuarioItem
from app.services.almacen import Almacen

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Iniciar sesión",
    response_description="Token JWT para usar en el header Authorization",
    responses={
        200: {"description": "Login correcto, se devuelve el access_token"},
        401: {"description": "Usuario o contraseña incorrectos"},
        422: {"description": "Datos de entrada inválidos"},
    },
)
async def login(data: LoginRequest, almacen: Almacen = Depends(get_almacen)):
    """
    Autenticación con **usuario** y **contraseña**.
    Devuelve un **access_token** (JWT) para el header `Authorization: Bearer <access_token>`.
    """
    usuario = await almacen.obtener_usuario_por_username(data.username)
    if not usuario or not verify_password(data.password, usuario.password_hash or ""):
        logger.warning("Login fallido para '%s'", data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuario o contraseña incorrectos",
        )
    token = create_access_token(
        subject=usuario.id,
        extra={"username": usuario.username, "rol": usuario.rol},
    )
    return TokenResponse(access_token=token, usuario_id=usuario.id, rol=usuario.rol)


@router.post(
    "/register",
    response_model=UsuarioItem,
    status_code=status.HTTP_201_CREATED,
    summary="Registrarse",
    responses={
        201: {"description": "Usuario creado con rol 'pendiente'"},
        400: {"description": "El nombre de usuario ya existe"},
    },
)
async def register(data: RegistroRequest, almacen: Almacen = Depends(get_almacen)):
    """Crea un usuario con rol **pendiente**; un administrador debe asignarle un rol."""
    if await almacen.obtener_usuario_por_username(data.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El nombre de usuario ya existe",
        )
    usuario = await almacen.crear_usuario(
        {
            "username": data.username,
            "password_hash": hash_password(data.password),
            "nombre_completo": data.nombre_completo,
            "email": data.email,
            "rol": RolUsuario.PENDIENTE,
        }
    )
    logger.info("Usuario '%s' registrado (pendiente)", usuario.username)
    return usuario
