"""Almacén de membresías: lecturas y escrituras sobre equipos y sus miembros.

Todas las funciones operan dentro de la transacción de la sesión recibida; el
commit/rollback lo decide quien llama (el coordinador de inscripciones).
"""
from sqlalchemy import delete, func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.equipo import Equipo, MiembroEquipo
from app.models.turno import EstadoTurno, Turno


async def configurar_timeout(db: AsyncSession, segundos: float) -> None:
    """Limita la espera de bloqueos y sentencias de la transacción actual (solo PostgreSQL)."""
    if db.get_bind().dialect.name != "postgresql":
        return
    ms = int(segundos * 1000)
    await db.execute(text(f"SET LOCAL lock_timeout = '{ms}ms'"))
    await db.execute(text(f"SET LOCAL statement_timeout = '{ms}ms'"))


async def contar_miembros_equipo(db: AsyncSession, equipo_id: int) -> int:
    """Número de miembros actuales del equipo."""
    q = select(func.count()).select_from(MiembroEquipo).where(MiembroEquipo.equipo_id == equipo_id)
    result = await db.execute(q)
    return result.scalar_one()


async def contar_ocupacion_turno(db: AsyncSession, turno_id: int) -> int:
    """Suma de miembros de todos los equipos del turno."""
    q = (
        select(func.count())
        .select_from(MiembroEquipo)
        .join(Equipo, Equipo.id == MiembroEquipo.equipo_id)
        .where(Equipo.turno_id == turno_id)
    )
    result = await db.execute(q)
    return result.scalar_one()


async def equipos_activos_de_estudiante(
    db: AsyncSession, escape_room_id: int, estudiante_id: int
) -> list[Equipo]:
    """Equipos del estudiante en turnos no finalizados ni cancelados del escape room."""
    q = (
        select(Equipo)
        .join(MiembroEquipo, MiembroEquipo.equipo_id == Equipo.id)
        .join(Turno, Turno.id == Equipo.turno_id)
        .where(
            MiembroEquipo.estudiante_id == estudiante_id,
            Turno.escape_room_id == escape_room_id,
            Turno.estado.notin_(EstadoTurno.CERRADOS),
        )
        .order_by(Equipo.id)
    )
    result = await db.execute(q)
    return list(result.scalars().all())


async def turnos_activos_de_estudiante(
    db: AsyncSession, escape_room_id: int, estudiante_id: int
) -> list[Turno]:
    """Turnos no finalizados ni cancelados del escape room en los que participa el estudiante."""
    q = (
        select(Turno)
        .join(Equipo, Equipo.turno_id == Turno.id)
        .join(MiembroEquipo, MiembroEquipo.equipo_id == Equipo.id)
        .where(
            MiembroEquipo.estudiante_id == estudiante_id,
            Turno.escape_room_id == escape_room_id,
            Turno.estado.notin_(EstadoTurno.CERRADOS),
        )
        .distinct()
        .order_by(Turno.id)
    )
    result = await db.execute(q)
    return list(result.scalars().all())


async def miembros_con_otro_turno_activo(
    db: AsyncSession, escape_room_id: int, turno_id: int
) -> list[int]:
    """Estudiantes del turno que también participan en otro turno activo del escape room."""
    del_turno = (
        select(MiembroEquipo.estudiante_id)
        .join(Equipo, Equipo.id == MiembroEquipo.equipo_id)
        .where(Equipo.turno_id == turno_id)
    )
    q = (
        select(MiembroEquipo.estudiante_id)
        .join(Equipo, Equipo.id == MiembroEquipo.equipo_id)
        .join(Turno, Turno.id == Equipo.turno_id)
        .where(
            Turno.escape_room_id == escape_room_id,
            Turno.id != turno_id,
            Turno.estado.notin_(EstadoTurno.CERRADOS),
            MiembroEquipo.estudiante_id.in_(del_turno),
        )
        .distinct()
        .order_by(MiembroEquipo.estudiante_id)
    )
    result = await db.execute(q)
    return list(result.scalars().all())


async def obtener_miembro(
    db: AsyncSession, equipo_id: int, estudiante_id: int
) -> MiembroEquipo | None:
    q = select(MiembroEquipo).where(
        MiembroEquipo.equipo_id == equipo_id,
        MiembroEquipo.estudiante_id == estudiante_id,
    )
    result = await db.execute(q)
    return result.scalar_one_or_none()


async def insertar_miembro(db: AsyncSession, equipo_id: int, estudiante_id: int) -> MiembroEquipo:
    miembro = MiembroEquipo(equipo_id=equipo_id, estudiante_id=estudiante_id)
    db.add(miembro)
    await db.flush()
    return miembro


async def eliminar_miembro(db: AsyncSession, miembro: MiembroEquipo) -> None:
    await db.delete(miembro)
    await db.flush()


async def crear_equipo(db: AsyncSession, turno_id: int, nombre: str) -> Equipo:
    equipo = Equipo(turno_id=turno_id, nombre=nombre)
    db.add(equipo)
    await db.flush()
    return equipo


async def eliminar_equipo_si_vacio(db: AsyncSession, equipo_id: int) -> bool:
    """Borra el equipo si se quedó sin miembros. Devuelve True si se borró."""
    if await contar_miembros_equipo(db, equipo_id) > 0:
        return False
    await db.execute(delete(Equipo).where(Equipo.id == equipo_id))
    return True


async def eliminar_equipos_turno(db: AsyncSession, turno_id: int) -> int:
    """Borra todos los equipos del turno y sus membresías. Devuelve las membresías borradas."""
    ids_equipos = select(Equipo.id).where(Equipo.turno_id == turno_id)
    result = await db.execute(
        delete(MiembroEquipo)
        .where(MiembroEquipo.equipo_id.in_(ids_equipos))
        .execution_options(synchronize_session=False)
    )
    await db.execute(
        delete(Equipo)
        .where(Equipo.turno_id == turno_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0
