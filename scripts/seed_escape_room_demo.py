"""Crea un escape room de demostración con 3 turnos y 8 estudiantes.

team_size=2, nmax=4. Útil para probar los endpoints de inscripción desde /docs.
"""
import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select
from app.core.database import AsyncSessionLocal, init_db
from app.core.security import ROL_ESTUDIANTE, create_access_token
from app.models import EscapeRoom, Estudiante, Turno

TITULO = "Escape room de demostración"

ESTUDIANTES = [
    {"codigo_estudiante": f"DEMO-{i:03d}", "nombre": f"Estudiante{i}", "apellido": "Demo"}
    for i in range(1, 9)
]


async def seed_escape_room_demo():
    await init_db()
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(EscapeRoom).where(EscapeRoom.titulo == TITULO))
        escape_room = result.scalar_one_or_none()
        if not escape_room:
            escape_room = EscapeRoom(titulo=TITULO, team_size=2, nmax=4)
            session.add(escape_room)
            await session.flush()
            inicio = datetime.now(timezone.utc).replace(minute=0, second=0, microsecond=0)
            for dias in (1, 2, 3):
                session.add(Turno(escape_room_id=escape_room.id, fecha=inicio + timedelta(days=dias)))
            await session.flush()
            print(f"  + Escape room creado: {TITULO} (id={escape_room.id})")
        else:
            print(f"  = Escape room existente: {TITULO} (id={escape_room.id})")

        estudiantes = []
        for datos in ESTUDIANTES:
            result = await session.execute(
                select(Estudiante).where(Estudiante.codigo_estudiante == datos["codigo_estudiante"])
            )
            estudiante = result.scalar_one_or_none()
            if not estudiante:
                estudiante = Estudiante(**datos)
                session.add(estudiante)
                await session.flush()
                print(f"  + Estudiante creado: {datos['codigo_estudiante']} (id={estudiante.id})")
            estudiantes.append(estudiante)

        await session.commit()

    print("Listo. Tokens de prueba (Authorization: Bearer ...):")
    for e in estudiantes:
        token = create_access_token(subject=e.id, extra={"rol": ROL_ESTUDIANTE})
        print(f"  - {e.codigo_estudiante}: {token}")


if __name__ == "__main__":
    asyncio.run(seed_escape_room_demo())
