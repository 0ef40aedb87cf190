"""Endpoints de turnos: ocupación, disponibilidad, estado y reinicio."""
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_coordinador
from app.api.endpoints.auth import get_current_estudiante_id, get_token_payload, require_rol
from app.core.database import get_db
from app.core.security import ROL_PROFESOR
from app.schemas.inscripcion import RechazoResponse
from app.schemas.turno import (
    EquipoOcupacionItem,
    MisTurnosResponse,
    OcupacionTurnoResponse,
    ReinicioTurnoResponse,
    TurnoActivoItem,
    TurnoDisponibleItem,
    TurnoEstadoUpdate,
    TurnosDisponiblesResponse,
)
from app.services import registro
from app.services.inscripcion_service import CoordinadorInscripciones, ResultadoCambioEstado

router = APIRouter(prefix="/escape-rooms/{escape_room_id}", tags=["turnos"])


@router.get(
    "/turnos/disponibles",
    response_model=TurnosDisponiblesResponse,
    summary="Turnos con plazas libres",
    description="Turnos programados del escape room cuya ocupación no alcanza el aforo (nmax).",
)
async def listar_turnos_disponibles(
    escape_room_id: int,
    db: AsyncSession = Depends(get_db),
    _: dict[str, Any] = Depends(get_token_payload),
):
    disponibles = await registro.listar_turnos_disponibles(db, escape_room_id)
    return TurnosDisponiblesResponse(
        escape_room_id=escape_room_id,
        turnos=[
            TurnoDisponibleItem(
                id=d.turno.id,
                fecha=d.turno.fecha,
                ocupacion=d.ocupacion,
                plazas_libres=d.plazas_libres,
            )
            for d in disponibles
        ],
    )


@router.get(
    "/mis-turnos",
    response_model=MisTurnosResponse,
    summary="Turnos activos del estudiante",
    description="Turnos no finalizados ni cancelados del escape room en los que participa el estudiante autenticado.",
)
async def listar_mis_turnos(
    escape_room_id: int,
    db: AsyncSession = Depends(get_db),
    estudiante_id: int = Depends(get_current_estudiante_id),
):
    await registro.obtener_escape_room(db, escape_room_id)
    turnos = await registro.listar_turnos_activos_estudiante(db, escape_room_id, estudiante_id)
    return MisTurnosResponse(
        escape_room_id=escape_room_id,
        turnos=[TurnoActivoItem(id=t.id, fecha=t.fecha, estado=t.estado) for t in turnos],
    )


@router.get(
    "/turnos/{turno_id}/ocupacion",
    response_model=OcupacionTurnoResponse,
    summary="Ocupación de un turno",
)
async def ver_ocupacion_turno(
    escape_room_id: int,
    turno_id: int,
    db: AsyncSession = Depends(get_db),
    _: dict[str, Any] = Depends(get_token_payload),
):
    ocupacion = await registro.ocupacion_turno(db, escape_room_id, turno_id)
    return OcupacionTurnoResponse(
        escape_room_id=ocupacion.escape_room.id,
        turno_id=ocupacion.turno.id,
        estado=ocupacion.turno.estado,
        team_size=ocupacion.escape_room.team_size,
        nmax=ocupacion.escape_room.nmax,
        ocupacion=ocupacion.ocupacion,
        plazas_libres=ocupacion.plazas_libres,
        equipos=[EquipoOcupacionItem(**e._asdict()) for e in ocupacion.equipos],
    )


@router.patch(
    "/turnos/{turno_id}/estado",
    response_model=TurnoActivoItem,
    summary="Cambiar estado de un turno",
    description=(
        "Solo profesores. Un turno finalizado o cancelado deja de admitir inscripciones. "
        "Reabrirlo devuelve 409 si alguno de sus miembros ya está en otro turno activo."
    ),
    responses={409: {"model": RechazoResponse, "description": "Reapertura en conflicto"}},
)
async def actualizar_estado_turno(
    escape_room_id: int,
    turno_id: int,
    body: TurnoEstadoUpdate,
    coordinador: CoordinadorInscripciones = Depends(get_coordinador),
    _: dict[str, Any] = Depends(require_rol(ROL_PROFESOR)),
):
    resultado, turno = await coordinador.cambiar_estado_turno(escape_room_id, turno_id, body.estado)
    if resultado is ResultadoCambioEstado.MIEMBRO_CON_OTRO_TURNO:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "resultado": resultado.value,
                "mensaje": "Algún miembro del turno ya está inscrito en otro turno activo.",
            },
        )
    return TurnoActivoItem(id=turno.id, fecha=turno.fecha, estado=turno.estado)


@router.post(
    "/turnos/{turno_id}/reiniciar",
    response_model=ReinicioTurnoResponse,
    summary="Reiniciar un turno",
    description="Solo profesores. Elimina todos los equipos y membresías del turno.",
)
async def reiniciar_turno(
    escape_room_id: int,
    turno_id: int,
    coordinador: CoordinadorInscripciones = Depends(get_coordinador),
    _: dict[str, Any] = Depends(require_rol(ROL_PROFESOR)),
):
    eliminadas = await coordinador.reiniciar_turno(escape_room_id, turno_id)
    return ReinicioTurnoResponse(turno_id=turno_id, membresias_eliminadas=eliminadas)
