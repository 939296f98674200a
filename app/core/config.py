"""Configuración de la aplicación mediante variables de entorno."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuración cargada desde .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Gestor Académico API"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # JWT
    jwt_secret_key: str = "cambiar-en-produccion-clave-secreta-muy-segura"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7  # 1 semana

    # PostgreSQL
    postgres_host: str = "127.0.0.1"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: str = ""
    postgres_db: str = "gestor_academico_bd"

    # Usuario administrador creado al iniciar si no existe
    admin_username: str = "admin"
    admin_password: str = "qwerty"
    admin_email: str = "admin@institutogestor.edu"
    admin_nombre: str = "Administrador"

    # Ventana para contar inscripciones activas en /estadisticas
    meses_inscripciones_activas: int = 6

    @property
    def database_url_async(self) -> str:
        """URL para SQLAlchemy con driver asyncpg."""
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


settings = Settings()
