"""Configuración de la aplicación mediante variables de entorno."""
from pydantic import Field
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
    app_name: str = "Escape Room Turnos API"
    debug: bool = False
    log_level: str = "INFO"

    # JWT (emitido por el servicio de identidad; aquí solo se valida)
    jwt_secret_key: str = "cambiar-en-produccion-clave-secreta-muy-segura"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24  # 24 horas

    # Base de datos. DATABASE_URL, si se define, tiene prioridad sobre POSTGRES_*
    database_url: str | None = None
    postgres_host: str = "127.0.0.1"
    postgres_port: int = 5432
    postgres_user: str = "postgres"
    postgres_password: str = ""
    postgres_db: str = "escape_room_bd"
    db_pool_size: int = 5
    db_max_overflow: int = 10

    # Inscripciones: espera máxima por la sección crítica de un escape room
    inscripcion_timeout_segundos: float = Field(default=5.0, gt=0)
    # Un turno programado pasa a finalizado cuando fecha + duración ya pasó
    duracion_turno_minutos: int = Field(default=60, gt=0)

    @property
    def database_url_async(self) -> str:
        """URL para SQLAlchemy async (asyncpg en producción)."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


settings = Settings()
