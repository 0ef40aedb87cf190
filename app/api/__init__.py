"""Routers de la API."""
from fastapi import APIRouter

from app.api.endpoints import inscripciones, turnos

router = APIRouter()
router.include_router(inscripciones.router)
router.include_router(turnos.router)


@router.get(
    "/",
    tags=["api"],
    summary="Raíz de la API v1",
    response_description="Mensaje de bienvenida y enlace a la documentación",
)
async def api_root():
    """Información básica de la API y enlace a la documentación Swagger."""
    return {"message": "Escape Room Turnos API v1", "docs": "/docs", "redoc": "/redoc"}
