"""Marca como finalizados los turnos programados que ya terminaron.

Pensado para ejecutarse periódicamente (cron). Un turno se considera terminado
cuando fecha + DURACION_TURNO_MINUTOS es anterior al momento actual.
"""
import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.services.turno_service import finalizar_turnos_vencidos


async def main():
    ahora = datetime.now(timezone.utc)
    duracion = timedelta(minutes=settings.duracion_turno_minutos)
    async with AsyncSessionLocal() as db:
        finalizados = await finalizar_turnos_vencidos(db, ahora, duracion)
        await db.commit()
    print(f"Turnos finalizados: {finalizados} (corte {(ahora - duracion).isoformat()})")


if __name__ == "__main__":
    asyncio.run(main())
