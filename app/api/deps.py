"""Dependencias compartidas por los routers."""
from fastapi import HTTPException, Request, status

from app.services.inscripcion_service import CoordinadorInscripciones


def get_coordinador(request: Request) -> CoordinadorInscripciones:
    """Coordinador de inscripciones creado en el arranque de la aplicación."""
    coordinador = getattr(request.app.state, "coordinador", None)
    if coordinador is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Servicio de inscripciones no inicializado",
        )
    return coordinador
