"""Punto de entrada de la aplicación FastAPI."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import router as api_router
from app.core.config import settings
from app.core.database import AsyncSessionLocal, init_db
from app.core.exceptions import ErrorGestion
from app.core.logs import configurar_logging
from app.models import *  # noqa: F401, F403 - Registra modelos en Base.metadata antes de init_db
from app.services.almacen import AlmacenAcademico
from app.services.datos_iniciales import asegurar_admin

logger = logging.getLogger(__name__)

# Documentación Swagger: disponible en /docs (OpenAPI 3.0)
OPENAPI_TAGS = [
    {
        "name": "auth",
        "description": "Autenticación: login con usuario y contraseña, y registro. Devuelve un JWT para usar en endpoints protegidos.",
    },
    {
        "name": "api",
        "description": "Endpoints generales de la API v1. Incluye rutas protegidas que requieren JWT.",
    },
    {
        "name": "usuarios",
        "description": "Listado de usuarios y asignación de roles (solo administradores).",
    },
    {
        "name": "carreras",
        "description": "Carreras y su plan de estudios (materias por año, PDF).",
    },
    {
        "name": "materias",
        "description": "Materias, sus correlativas y consulta de elegibilidad de un estudiante.",
    },
    {
        "name": "correlatividades",
        "description": "Alta y baja de correlatividades entre materias.",
    },
    {
        "name": "estudiantes",
        "description": "Estudiantes, sus materias y su legajo (JSON y PDF).",
    },
    {
        "name": "materias-estudiante",
        "description": "Situación de un estudiante en una materia: estado, nota y acta.",
    },
    {
        "name": "inscripciones",
        "description": "Inscripciones a cursada y examen con verificación de correlativas.",
    },
    {
        "name": "dashboard",
        "description": "Estadísticas, actividad reciente y próximos exámenes.",
    },
    {
        "name": "salud",
        "description": "Comprobación del estado del servicio.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gestiona el ciclo de vida: inicio y cierre de la aplicación."""
    configurar_logging()
    await init_db()

    async with AsyncSessionLocal() as session:
        await asegurar_admin(AlmacenAcademico(session))
        await session.commit()

    logger.info("%s iniciada", settings.app_name)
    yield


app = FastAPI(
    title=settings.app_name,
    description="""
API REST del **Gestor Académico**: carreras, materias, correlatividades, estudiantes e inscripciones.

## Autenticación

1. Obtén un token con **POST /api/v1/auth/login** (usuario y contraseña). Copia el `access_token` de la respuesta.
2. En Swagger UI, clic en **Authorize** y pega solo el token (sin escribir "Bearer").
3. Los usuarios registrados por su cuenta quedan con rol `pendiente` hasta que un administrador les asigne uno.
""",
    version="0.1.0",
    openapi_tags=OPENAPI_TAGS,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    swagger_ui_parameters={"persistAuthorization": True, "tryItOutEnabled": True},
)


@app.exception_handler(ErrorGestion)
async def error_gestion_handler(request: Request, exc: ErrorGestion):
    """Convierte los errores de dominio en respuestas {"detail": ...}."""
    if exc.status_code >= 500:
        logger.error("Error en %s %s: %s", request.method, request.url.path, exc.detalle)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get(
    "/health",
    tags=["salud"],
    summary="Estado del servicio",
    response_description="Indica que la API está en ejecución",
)
async def health_check():
    """Comprueba que el servicio está activo. No requiere autenticación."""
    return {"status": "ok", "message": "Servicio en ejecución"}
