"""Endpoints de inscripción en equipos: unirse, crear equipo y retirarse.

Los rechazos de negocio se devuelven como 409 con el resultado y un mensaje
para mostrar al estudiante; las entidades inexistentes como 404.
"""
from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.api.deps import get_coordinador
from app.api.endpoints.auth import get_current_estudiante_id
from app.schemas.inscripcion import (
    EquipoCreate,
    InscripcionResponse,
    RechazoResponse,
    RetiroResponse,
)
from app.services.inscripcion_service import (
    CoordinadorInscripciones,
    ResultadoInscripcion,
    ResultadoRetiro,
)

router = APIRouter(tags=["inscripciones"])

MENSAJES_INSCRIPCION = {
    ResultadoInscripcion.INSCRITO: "Inscripción realizada correctamente.",
    ResultadoInscripcion.YA_INSCRITO_MISMO_TURNO: "Ya estás inscrito en este equipo.",
    ResultadoInscripcion.YA_INSCRITO_EN_OTRO_TURNO: "Ya estás inscrito en otro turno o equipo de este escape room.",
    ResultadoInscripcion.EQUIPO_COMPLETO: "El equipo está completo.",
    ResultadoInscripcion.TURNO_COMPLETO: "El turno está completo.",
    ResultadoInscripcion.TURNO_CERRADO: "El turno ya no admite inscripciones.",
    ResultadoInscripcion.NO_ENCONTRADO: "Escape room, turno, equipo o estudiante no encontrado.",
}

MENSAJES_RETIRO = {
    ResultadoRetiro.RETIRADO: "Has abandonado el equipo.",
    ResultadoRetiro.NO_INSCRITO: "No perteneces a este equipo.",
    ResultadoRetiro.TURNO_CERRADO: "El turno ya terminó o fue cancelado.",
    ResultadoRetiro.NO_ENCONTRADO: "Equipo no encontrado.",
}

RESPUESTAS_RECHAZO = {
    404: {"description": "Escape room, turno, equipo o estudiante no encontrado"},
    409: {"model": RechazoResponse, "description": "Rechazo de negocio (capacidad, turno cerrado, ya inscrito)"},
    503: {"description": "Almacén no disponible; se puede reintentar"},
}


def _rechazar_inscripcion(resultado: ResultadoInscripcion) -> None:
    """Traduce un resultado no exitoso en HTTPException."""
    mensaje = MENSAJES_INSCRIPCION[resultado]
    if resultado is ResultadoInscripcion.NO_ENCONTRADO:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=mensaje)
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={"resultado": resultado.value, "mensaje": mensaje},
    )


@router.put(
    "/escape-rooms/{escape_room_id}/turnos/{turno_id}/equipos/{equipo_id}/miembros",
    response_model=InscripcionResponse,
    summary="Unirse a un equipo",
    description="Inscribe al estudiante autenticado en el equipo. 201 si se inscribe, 200 si ya estaba en ese equipo.",
    responses={201: {"description": "Inscripción realizada"}, **RESPUESTAS_RECHAZO},
)
async def unirse_a_equipo(
    escape_room_id: int,
    turno_id: int,
    equipo_id: int,
    response: Response,
    estudiante_id: int = Depends(get_current_estudiante_id),
    coordinador: CoordinadorInscripciones = Depends(get_coordinador),
):
    resultado = await coordinador.inscribir(escape_room_id, turno_id, equipo_id, estudiante_id)
    if not resultado.exitoso:
        _rechazar_inscripcion(resultado)

    if resultado is ResultadoInscripcion.INSCRITO:
        response.status_code = status.HTTP_201_CREATED
    return InscripcionResponse(
        resultado=resultado.value,
        mensaje=MENSAJES_INSCRIPCION[resultado],
        escape_room_id=escape_room_id,
        turno_id=turno_id,
        equipo_id=equipo_id,
    )


@router.post(
    "/escape-rooms/{escape_room_id}/turnos/{turno_id}/equipos",
    response_model=InscripcionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Crear equipo",
    description="Crea un equipo en el turno con el estudiante autenticado como primer miembro.",
    responses=RESPUESTAS_RECHAZO,
)
async def crear_equipo(
    escape_room_id: int,
    turno_id: int,
    body: EquipoCreate,
    estudiante_id: int = Depends(get_current_estudiante_id),
    coordinador: CoordinadorInscripciones = Depends(get_coordinador),
):
    resultado, equipo = await coordinador.crear_equipo_e_inscribir(
        escape_room_id, turno_id, body.nombre, estudiante_id
    )
    if resultado is not ResultadoInscripcion.INSCRITO:
        _rechazar_inscripcion(resultado)

    return InscripcionResponse(
        resultado=resultado.value,
        mensaje=MENSAJES_INSCRIPCION[resultado],
        escape_room_id=escape_room_id,
        turno_id=turno_id,
        equipo_id=equipo.id,
    )


@router.delete(
    "/equipos/{equipo_id}/miembros",
    response_model=RetiroResponse,
    summary="Abandonar un equipo",
    description="Retira al estudiante autenticado del equipo. Si el equipo queda vacío se elimina.",
    responses=RESPUESTAS_RECHAZO,
)
async def abandonar_equipo(
    equipo_id: int,
    estudiante_id: int = Depends(get_current_estudiante_id),
    coordinador: CoordinadorInscripciones = Depends(get_coordinador),
):
    resultado = await coordinador.retirar(equipo_id, estudiante_id)
    mensaje = MENSAJES_RETIRO[resultado]
    if resultado is ResultadoRetiro.NO_ENCONTRADO:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=mensaje)
    if resultado is not ResultadoRetiro.RETIRADO:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"resultado": resultado.value, "mensaje": mensaje},
        )
    return RetiroResponse(resultado=resultado.value, mensaje=mensaje, equipo_id=equipo_id)
