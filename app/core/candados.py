"""Secciones críticas en proceso, una por escape room."""
import asyncio
import logging
import weakref
from contextlib import asynccontextmanager

from app.core.errores import AlmacenNoDisponibleError

logger = logging.getLogger(__name__)


class CandadosPorEscapeRoom:
    """Un ``asyncio.Lock`` por escape room.

    Serializa dentro de un worker las operaciones que leen y modifican la
    ocupación de una misma actividad. Entre procesos la serialización la da el
    ``SELECT ... FOR UPDATE`` sobre la fila del escape room.

    Cada candado vive mientras alguna operación lo tiene o lo espera; después
    desaparece del registro.
    """

    def __init__(self, timeout_segundos: float) -> None:
        self.timeout_segundos = timeout_segundos
        self._candados: weakref.WeakValueDictionary[int, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _candado(self, escape_room_id: int) -> asyncio.Lock:
        candado = self._candados.get(escape_room_id)
        if candado is None:
            candado = asyncio.Lock()
            self._candados[escape_room_id] = candado
        return candado

    @asynccontextmanager
    async def seccion_critica(self, escape_room_id: int, operacion: str):
        """Adquiere el candado del escape room o falla con ``AlmacenNoDisponibleError``."""
        candado = self._candado(escape_room_id)
        try:
            await asyncio.wait_for(candado.acquire(), timeout=self.timeout_segundos)
        except asyncio.TimeoutError as exc:
            logger.warning(
                "Timeout (%.1fs) esperando la sección crítica del escape room %s para '%s'",
                self.timeout_segundos, escape_room_id, operacion,
            )
            raise AlmacenNoDisponibleError(
                operacion, causa=f"timeout esperando escape room {escape_room_id}"
            ) from exc
        try:
            yield
        finally:
            candado.release()
