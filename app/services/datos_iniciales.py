"""Datos mínimos para arrancar: usuario administrador por defecto."""
import logging

from app.core.config import settings
from app.core.security import hash_password
from app.models import RolUsuario, Usuario
from app.services.almacen import Almacen

logger = logging.getLogger(__name__)


async def asegurar_admin(almacen: Almacen) -> Usuario:
    """Crea el administrador configurado (ADMIN_USERNAME/ADMIN_PASSWORD) si no existe."""
    existente = await almacen.obtener_usuario_por_username(settings.admin_username)
    if existente is not None:
        return existente
    admin = await almacen.crear_usuario(
        {
            "username": settings.admin_username,
            "password_hash": hash_password(settings.admin_password),
            "nombre_completo": settings.admin_nombre,
            "email": settings.admin_email,
            "rol": RolUsuario.ADMIN,
        }
    )
    logger.info("Usuario administrador '%s' creado", admin.username)
    return admin
