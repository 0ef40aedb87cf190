"""Punto de entrada de la aplicación FastAPI."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import router as api_router
from app.core.config import settings
from app.core.database import AsyncSessionLocal, init_db
from app.core.errores import AlmacenNoDisponibleError, NoEncontradoError
from app.models import *  # noqa: F401, F403 - Registra modelos en Base.metadata antes de init_db
from app.services.inscripcion_service import CoordinadorInscripciones

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

OPENAPI_TAGS = [
    {
        "name": "inscripciones",
        "description": "Unirse a un equipo, crear un equipo en un turno y abandonarlo.",
    },
    {
        "name": "turnos",
        "description": "Ocupación y disponibilidad de turnos; cambio de estado y reinicio (profesores).",
    },
    {
        "name": "api",
        "description": "Endpoints generales de la API v1.",
    },
    {
        "name": "salud",
        "description": "Comprobación del estado del servicio.",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gestiona el ciclo de vida: inicio y cierre de la aplicación."""
    await init_db()
    app.state.coordinador = CoordinadorInscripciones(
        AsyncSessionLocal,
        timeout_segundos=settings.inscripcion_timeout_segundos,
    )
    logger.info(
        "Coordinador de inscripciones listo (timeout %.1fs)",
        settings.inscripcion_timeout_segundos,
    )
    yield


app = FastAPI(
    title=settings.app_name,
    description="""
API REST de **inscripción en turnos de escape room**: los estudiantes se unen a
equipos dentro de un turno respetando el tamaño máximo de equipo (`team_size`),
el aforo del turno (`nmax`) y la regla de un único turno activo por escape room.

- **Swagger UI:** [GET /docs](/docs)
- **ReDoc:** [GET /redoc](/redoc)

Todas las rutas requieren `Authorization: Bearer <token>` emitido por el
servicio de identidad (`sub` = id del estudiante, `rol` = estudiante/profesor).
""",
    version="0.1.0",
    openapi_tags=OPENAPI_TAGS,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    swagger_ui_parameters={"persistAuthorization": True, "tryItOutEnabled": True},
)

# CORS: permitir acceso desde cualquier origen (frontend en otro puerto/dominio)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.exception_handler(NoEncontradoError)
async def no_encontrado_handler(request: Request, exc: NoEncontradoError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": exc.message, "codigo": exc.codigo},
    )


@app.exception_handler(AlmacenNoDisponibleError)
async def almacen_no_disponible_handler(request: Request, exc: AlmacenNoDisponibleError):
    logger.error("Almacén no disponible en %s: %s", request.url.path, exc.detalles.get("causa"))
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Servicio temporalmente no disponible, inténtelo de nuevo", "codigo": exc.codigo},
    )


@app.get(
    "/health",
    tags=["salud"],
    summary="Estado del servicio",
    response_description="Indica que la API está en ejecución",
)
async def health_check():
    """Comprueba que el servicio está activo. No requiere autenticación."""
    return {"status": "ok", "message": "Servicio en ejecución"}
