"""Registro de turnos y equipos: resuelve identificadores y reporta ocupación."""
from typing import NamedTuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errores import NoEncontradoError
from app.models import Equipo, EscapeRoom, Estudiante, EstadoTurno, MiembroEquipo, Turno
from app.services import almacen_miembros
from app.services.capacidad import plazas_libres


class EntidadesInscripcion(NamedTuple):
    escape_room: EscapeRoom
    turno: Turno
    equipo: Equipo | None
    estudiante: Estudiante


class OcupacionEquipo(NamedTuple):
    equipo_id: int
    nombre: str
    miembros: int
    plazas_libres: int | None


class OcupacionTurno(NamedTuple):
    escape_room: EscapeRoom
    turno: Turno
    ocupacion: int
    plazas_libres: int | None
    equipos: list[OcupacionEquipo]


class TurnoDisponible(NamedTuple):
    turno: Turno
    ocupacion: int
    plazas_libres: int | None


async def obtener_escape_room(
    db: AsyncSession, escape_room_id: int, bloquear: bool = False
) -> EscapeRoom:
    """Carga el escape room; con bloquear=True toma SELECT ... FOR UPDATE sobre su fila."""
    q = select(EscapeRoom).where(EscapeRoom.id == escape_room_id)
    if bloquear:
        q = q.with_for_update()
    result = await db.execute(q)
    escape_room = result.scalar_one_or_none()
    if escape_room is None:
        raise NoEncontradoError("EscapeRoom", escape_room_id)
    return escape_room


async def resolver_turno(
    db: AsyncSession, escape_room_id: int, turno_id: int, bloquear: bool = False
) -> tuple[EscapeRoom, Turno]:
    """Escape room y turno, verificando que el turno pertenece al escape room."""
    escape_room = await obtener_escape_room(db, escape_room_id, bloquear=bloquear)
    result = await db.execute(
        select(Turno).where(Turno.id == turno_id, Turno.escape_room_id == escape_room.id)
    )
    turno = result.scalar_one_or_none()
    if turno is None:
        raise NoEncontradoError("Turno", turno_id)
    return escape_room, turno


async def resolver(
    db: AsyncSession,
    escape_room_id: int,
    turno_id: int,
    equipo_id: int | None,
    estudiante_id: int,
    bloquear: bool = False,
) -> EntidadesInscripcion:
    """Resuelve (escape room, turno, equipo, estudiante) o lanza NoEncontradoError.

    Falla también si el equipo no pertenece al turno o el turno no pertenece al
    escape room. Con equipo_id=None solo se resuelven turno y estudiante.
    """
    escape_room, turno = await resolver_turno(db, escape_room_id, turno_id, bloquear=bloquear)

    equipo = None
    if equipo_id is not None:
        result = await db.execute(
            select(Equipo).where(Equipo.id == equipo_id, Equipo.turno_id == turno.id)
        )
        equipo = result.scalar_one_or_none()
        if equipo is None:
            raise NoEncontradoError("Equipo", equipo_id)

    estudiante = await db.get(Estudiante, estudiante_id)
    if estudiante is None:
        raise NoEncontradoError("Estudiante", estudiante_id)

    return EntidadesInscripcion(escape_room, turno, equipo, estudiante)


async def resolver_equipo(
    db: AsyncSession, equipo_id: int, bloquear: bool = False
) -> tuple[EscapeRoom, Turno, Equipo]:
    """Escape room, turno y equipo a partir del id de equipo."""
    escape_room_id = await escape_room_de_equipo(db, equipo_id)
    if escape_room_id is None:
        raise NoEncontradoError("Equipo", equipo_id)
    escape_room = await obtener_escape_room(db, escape_room_id, bloquear=bloquear)
    # Se relee tras el bloqueo: el equipo pudo borrarse mientras se esperaba
    equipo = await db.get(Equipo, equipo_id, populate_existing=True)
    if equipo is None:
        raise NoEncontradoError("Equipo", equipo_id)
    turno = await db.get(Turno, equipo.turno_id)
    return escape_room, turno, equipo


async def escape_room_de_equipo(db: AsyncSession, equipo_id: int) -> int | None:
    result = await db.execute(
        select(Turno.escape_room_id)
        .join(Equipo, Equipo.turno_id == Turno.id)
        .where(Equipo.id == equipo_id)
    )
    return result.scalar_one_or_none()


async def listar_turnos_activos_estudiante(
    db: AsyncSession, escape_room_id: int, estudiante_id: int
) -> list[Turno]:
    """Turnos abiertos del escape room en los que el estudiante ya participa."""
    return await almacen_miembros.turnos_activos_de_estudiante(db, escape_room_id, estudiante_id)


async def ocupacion_turno(db: AsyncSession, escape_room_id: int, turno_id: int) -> OcupacionTurno:
    """Ocupación actual del turno y de cada uno de sus equipos."""
    escape_room, turno = await resolver_turno(db, escape_room_id, turno_id)

    q = (
        select(Equipo.id, Equipo.nombre, func.count(MiembroEquipo.estudiante_id))
        .outerjoin(MiembroEquipo, MiembroEquipo.equipo_id == Equipo.id)
        .where(Equipo.turno_id == turno.id)
        .group_by(Equipo.id, Equipo.nombre)
        .order_by(Equipo.id)
    )
    result = await db.execute(q)
    equipos = [
        OcupacionEquipo(
            equipo_id=equipo_id,
            nombre=nombre,
            miembros=miembros,
            plazas_libres=plazas_libres(escape_room.team_size, miembros),
        )
        for equipo_id, nombre, miembros in result.all()
    ]
    ocupacion = sum(e.miembros for e in equipos)

    return OcupacionTurno(
        escape_room=escape_room,
        turno=turno,
        ocupacion=ocupacion,
        plazas_libres=plazas_libres(escape_room.nmax, ocupacion),
        equipos=equipos,
    )


async def listar_turnos_disponibles(
    db: AsyncSession, escape_room_id: int
) -> list[TurnoDisponible]:
    """Turnos programados con plazas libres, con su ocupación y plazas restantes."""
    escape_room = await obtener_escape_room(db, escape_room_id)

    q = (
        select(Turno, func.count(MiembroEquipo.estudiante_id))
        .outerjoin(Equipo, Equipo.turno_id == Turno.id)
        .outerjoin(MiembroEquipo, MiembroEquipo.equipo_id == Equipo.id)
        .where(
            Turno.escape_room_id == escape_room.id,
            Turno.estado == EstadoTurno.PROGRAMADO,
        )
        .group_by(Turno.id)
        .order_by(Turno.fecha, Turno.id)
    )
    result = await db.execute(q)
    return [
        TurnoDisponible(turno, ocupacion, plazas_libres(escape_room.nmax, ocupacion))
        for turno, ocupacion in result.all()
        if escape_room.nmax <= 0 or ocupacion < escape_room.nmax
    ]
