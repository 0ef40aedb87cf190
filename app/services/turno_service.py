"""Transiciones de estado de turnos ejecutadas por el proceso de planificación."""
from datetime import datetime, timedelta

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.turno import EstadoTurno, Turno


async def finalizar_turnos_vencidos(
    db: AsyncSession,
    ahora: datetime,
    duracion: timedelta,
) -> int:
    """Marca como finalizados los turnos programados cuya fecha + duración ya pasó.

    Devuelve el número de turnos finalizados. El commit lo hace quien llama.
    """
    limite = ahora - duracion
    result = await db.execute(
        update(Turno)
        .where(
            Turno.estado == EstadoTurno.PROGRAMADO,
            Turno.fecha.is_not(None),
            Turno.fecha <= limite,
        )
        .values(estado=EstadoTurno.FINALIZADO)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


async def cambiar_estado_turno(db: AsyncSession, turno: Turno, estado: str) -> Turno:
    """Cambia el estado de un turno validando el valor."""
    if estado not in (EstadoTurno.PROGRAMADO, *EstadoTurno.CERRADOS):
        raise ValueError(f"estado de turno inválido: {estado}")
    turno.estado = estado
    await db.flush()
    return turno
