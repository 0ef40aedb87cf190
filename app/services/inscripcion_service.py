"""Coordinador de inscripciones en equipos y turnos.

Cada operación pública es una única unidad de trabajo: se adquiere la sección
crítica del escape room (candado en proceso + SELECT ... FOR UPDATE sobre su
fila), se leen las ocupaciones dentro de la transacción, se evalúan las reglas
y solo entonces se escribe. Cualquier resultado distinto de éxito con mutación
hace rollback, de modo que un rechazo nunca deja cambios parciales.
"""
import logging
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.candados import CandadosPorEscapeRoom
from app.core.errores import AlmacenNoDisponibleError, NoEncontradoError
from app.models.equipo import Equipo
from app.models.turno import EstadoTurno, Turno
from app.services import almacen_miembros, registro, turno_service
from app.services.capacidad import DecisionCapacidad, evaluar_admision

logger = logging.getLogger(__name__)


class ResultadoInscripcion(str, Enum):
    """Resultado de un intento de inscripción."""
    INSCRITO = "inscrito"
    YA_INSCRITO_MISMO_TURNO = "ya_inscrito_mismo_turno"
    YA_INSCRITO_EN_OTRO_TURNO = "ya_inscrito_en_otro_turno"
    EQUIPO_COMPLETO = "equipo_completo"
    TURNO_COMPLETO = "turno_completo"
    TURNO_CERRADO = "turno_cerrado"
    NO_ENCONTRADO = "no_encontrado"

    @property
    def exitoso(self) -> bool:
        return self in (
            ResultadoInscripcion.INSCRITO,
            ResultadoInscripcion.YA_INSCRITO_MISMO_TURNO,
        )


class ResultadoRetiro(str, Enum):
    """Resultado de un intento de retiro de un equipo."""
    RETIRADO = "retirado"
    NO_INSCRITO = "no_inscrito"
    TURNO_CERRADO = "turno_cerrado"
    NO_ENCONTRADO = "no_encontrado"


class ResultadoCambioEstado(str, Enum):
    """Resultado de cambiar el estado de un turno."""
    ACTUALIZADO = "actualizado"
    MIEMBRO_CON_OTRO_TURNO = "miembro_con_otro_turno"


_RECHAZO_POR_CAPACIDAD = {
    DecisionCapacidad.EQUIPO_COMPLETO: ResultadoInscripcion.EQUIPO_COMPLETO,
    DecisionCapacidad.TURNO_COMPLETO: ResultadoInscripcion.TURNO_COMPLETO,
}


class CoordinadorInscripciones:
    """Orquesta inscripciones, retiros y reinicios respetando los límites de capacidad
    y la unicidad de turno activo por estudiante y escape room."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout_segundos: float = 5.0,
    ) -> None:
        self._session_factory = session_factory
        self.timeout_segundos = timeout_segundos
        self._candados = CandadosPorEscapeRoom(timeout_segundos)

    # ------------------------------------------------------------------
    # Inscripción en un equipo existente
    # ------------------------------------------------------------------

    async def inscribir(
        self,
        escape_room_id: int,
        turno_id: int,
        equipo_id: int,
        estudiante_id: int,
    ) -> ResultadoInscripcion:
        """Inscribe al estudiante en el equipo del turno indicado."""
        async with self._candados.seccion_critica(escape_room_id, "inscribir"):
            async with self._session_factory() as db:
                try:
                    resultado = await self._inscribir(
                        db, escape_room_id, turno_id, equipo_id, estudiante_id
                    )
                    if resultado is ResultadoInscripcion.INSCRITO:
                        await db.commit()
                    else:
                        await db.rollback()
                except SQLAlchemyError as exc:
                    await db.rollback()
                    logger.error(
                        "Fallo del almacén al inscribir estudiante %s en equipo %s (turno %s)",
                        estudiante_id, equipo_id, turno_id,
                        exc_info=True,
                    )
                    raise AlmacenNoDisponibleError("inscribir", causa=str(exc)) from exc

        logger.info(
            "Inscripción estudiante=%s escape_room=%s turno=%s equipo=%s -> %s",
            estudiante_id, escape_room_id, turno_id, equipo_id, resultado.value,
        )
        return resultado

    async def _inscribir(
        self,
        db: AsyncSession,
        escape_room_id: int,
        turno_id: int,
        equipo_id: int,
        estudiante_id: int,
    ) -> ResultadoInscripcion:
        await almacen_miembros.configurar_timeout(db, self.timeout_segundos)
        try:
            entidades = await registro.resolver(
                db, escape_room_id, turno_id, equipo_id, estudiante_id, bloquear=True
            )
        except NoEncontradoError as exc:
            logger.info("Inscripción sin entidad: %s", exc.message)
            return ResultadoInscripcion.NO_ENCONTRADO

        if not entidades.turno.abierto:
            return ResultadoInscripcion.TURNO_CERRADO

        # Unicidad antes que capacidad: una petición repetida sobre un equipo que
        # ella misma llenó sigue siendo idempotente
        equipos_activos = await almacen_miembros.equipos_activos_de_estudiante(
            db, escape_room_id, estudiante_id
        )
        if any(e.id == equipo_id for e in equipos_activos):
            return ResultadoInscripcion.YA_INSCRITO_MISMO_TURNO
        if equipos_activos:
            return ResultadoInscripcion.YA_INSCRITO_EN_OTRO_TURNO

        miembros = await almacen_miembros.contar_miembros_equipo(db, equipo_id)
        ocupacion = await almacen_miembros.contar_ocupacion_turno(db, turno_id)
        decision = evaluar_admision(entidades.escape_room, miembros, ocupacion)
        if decision is not DecisionCapacidad.ADMITIR:
            logger.debug(
                "Rechazo por capacidad en equipo %s: miembros=%s/%s ocupacion=%s/%s",
                equipo_id, miembros, entidades.escape_room.team_size,
                ocupacion, entidades.escape_room.nmax,
            )
            return _RECHAZO_POR_CAPACIDAD[decision]

        await almacen_miembros.insertar_miembro(db, equipo_id, estudiante_id)
        return ResultadoInscripcion.INSCRITO

    # ------------------------------------------------------------------
    # Creación de equipo con su fundador
    # ------------------------------------------------------------------

    async def crear_equipo_e_inscribir(
        self,
        escape_room_id: int,
        turno_id: int,
        nombre: str,
        estudiante_id: int,
    ) -> tuple[ResultadoInscripcion, Equipo | None]:
        """Crea un equipo en el turno e inscribe al estudiante como primer miembro."""
        async with self._candados.seccion_critica(escape_room_id, "crear_equipo"):
            async with self._session_factory() as db:
                try:
                    resultado, equipo = await self._crear_equipo_e_inscribir(
                        db, escape_room_id, turno_id, nombre, estudiante_id
                    )
                    if resultado is ResultadoInscripcion.INSCRITO:
                        await db.commit()
                    else:
                        await db.rollback()
                except SQLAlchemyError as exc:
                    await db.rollback()
                    logger.error(
                        "Fallo del almacén al crear equipo '%s' en turno %s",
                        nombre, turno_id,
                        exc_info=True,
                    )
                    raise AlmacenNoDisponibleError("crear_equipo", causa=str(exc)) from exc

        logger.info(
            "Creación de equipo '%s' estudiante=%s turno=%s -> %s",
            nombre, estudiante_id, turno_id, resultado.value,
        )
        return resultado, equipo

    async def _crear_equipo_e_inscribir(
        self,
        db: AsyncSession,
        escape_room_id: int,
        turno_id: int,
        nombre: str,
        estudiante_id: int,
    ) -> tuple[ResultadoInscripcion, Equipo | None]:
        await almacen_miembros.configurar_timeout(db, self.timeout_segundos)
        try:
            entidades = await registro.resolver(
                db, escape_room_id, turno_id, None, estudiante_id, bloquear=True
            )
        except NoEncontradoError as exc:
            logger.info("Creación de equipo sin entidad: %s", exc.message)
            return ResultadoInscripcion.NO_ENCONTRADO, None

        if not entidades.turno.abierto:
            return ResultadoInscripcion.TURNO_CERRADO, None

        if await almacen_miembros.equipos_activos_de_estudiante(db, escape_room_id, estudiante_id):
            return ResultadoInscripcion.YA_INSCRITO_EN_OTRO_TURNO, None

        ocupacion = await almacen_miembros.contar_ocupacion_turno(db, turno_id)
        decision = evaluar_admision(entidades.escape_room, 0, ocupacion)
        if decision is not DecisionCapacidad.ADMITIR:
            return _RECHAZO_POR_CAPACIDAD[decision], None

        equipo = await almacen_miembros.crear_equipo(db, turno_id, nombre)
        await almacen_miembros.insertar_miembro(db, equipo.id, estudiante_id)
        return ResultadoInscripcion.INSCRITO, equipo

    # ------------------------------------------------------------------
    # Retiro
    # ------------------------------------------------------------------

    async def retirar(self, equipo_id: int, estudiante_id: int) -> ResultadoRetiro:
        """Elimina la membresía; si el equipo queda vacío, también se elimina el equipo."""
        try:
            async with self._session_factory() as db:
                escape_room_id = await registro.escape_room_de_equipo(db, equipo_id)
        except SQLAlchemyError as exc:
            raise AlmacenNoDisponibleError("retirar", causa=str(exc)) from exc
        if escape_room_id is None:
            return ResultadoRetiro.NO_ENCONTRADO

        async with self._candados.seccion_critica(escape_room_id, "retirar"):
            async with self._session_factory() as db:
                try:
                    resultado = await self._retirar(db, equipo_id, estudiante_id)
                    if resultado is ResultadoRetiro.RETIRADO:
                        await db.commit()
                    else:
                        await db.rollback()
                except SQLAlchemyError as exc:
                    await db.rollback()
                    logger.error(
                        "Fallo del almacén al retirar estudiante %s del equipo %s",
                        estudiante_id, equipo_id,
                        exc_info=True,
                    )
                    raise AlmacenNoDisponibleError("retirar", causa=str(exc)) from exc

        logger.info(
            "Retiro estudiante=%s equipo=%s -> %s", estudiante_id, equipo_id, resultado.value
        )
        return resultado

    async def _retirar(
        self, db: AsyncSession, equipo_id: int, estudiante_id: int
    ) -> ResultadoRetiro:
        await almacen_miembros.configurar_timeout(db, self.timeout_segundos)
        try:
            _, turno, equipo = await registro.resolver_equipo(db, equipo_id, bloquear=True)
        except NoEncontradoError:
            return ResultadoRetiro.NO_ENCONTRADO

        if not turno.abierto:
            return ResultadoRetiro.TURNO_CERRADO

        miembro = await almacen_miembros.obtener_miembro(db, equipo.id, estudiante_id)
        if miembro is None:
            return ResultadoRetiro.NO_INSCRITO

        await almacen_miembros.eliminar_miembro(db, miembro)
        if await almacen_miembros.eliminar_equipo_si_vacio(db, equipo.id):
            logger.info("Equipo %s eliminado al quedar vacío", equipo.id)
        return ResultadoRetiro.RETIRADO

    # ------------------------------------------------------------------
    # Reinicio administrativo
    # ------------------------------------------------------------------

    async def reiniciar_turno(self, escape_room_id: int, turno_id: int) -> int:
        """Elimina todos los equipos y membresías del turno. Lanza NoEncontradoError."""
        async with self._candados.seccion_critica(escape_room_id, "reiniciar_turno"):
            async with self._session_factory() as db:
                try:
                    await almacen_miembros.configurar_timeout(db, self.timeout_segundos)
                    _, turno = await registro.resolver_turno(
                        db, escape_room_id, turno_id, bloquear=True
                    )
                    eliminadas = await almacen_miembros.eliminar_equipos_turno(db, turno.id)
                    await db.commit()
                except SQLAlchemyError as exc:
                    await db.rollback()
                    logger.error("Fallo del almacén al reiniciar turno %s", turno_id, exc_info=True)
                    raise AlmacenNoDisponibleError("reiniciar_turno", causa=str(exc)) from exc

        logger.warning(
            "Turno %s reiniciado: %s membresías eliminadas", turno_id, eliminadas
        )
        return eliminadas

    # ------------------------------------------------------------------
    # Cambio de estado
    # ------------------------------------------------------------------

    async def cambiar_estado_turno(
        self, escape_room_id: int, turno_id: int, estado: str
    ) -> tuple[ResultadoCambioEstado, Turno]:
        """Cambia el estado del turno. Lanza NoEncontradoError o ValueError.

        Reabrir un turno cerrado se rechaza si alguno de sus miembros ya está en
        otro turno activo del escape room.
        """
        async with self._candados.seccion_critica(escape_room_id, "cambiar_estado_turno"):
            async with self._session_factory() as db:
                try:
                    await almacen_miembros.configurar_timeout(db, self.timeout_segundos)
                    _, turno = await registro.resolver_turno(
                        db, escape_room_id, turno_id, bloquear=True
                    )
                    if estado == EstadoTurno.PROGRAMADO and not turno.abierto:
                        en_conflicto = await almacen_miembros.miembros_con_otro_turno_activo(
                            db, escape_room_id, turno.id
                        )
                        if en_conflicto:
                            await db.rollback()
                            logger.info(
                                "Reapertura del turno %s rechazada: estudiantes %s en otro turno activo",
                                turno_id, en_conflicto,
                            )
                            return ResultadoCambioEstado.MIEMBRO_CON_OTRO_TURNO, turno
                    turno = await turno_service.cambiar_estado_turno(db, turno, estado)
                    await db.commit()
                except SQLAlchemyError as exc:
                    await db.rollback()
                    logger.error(
                        "Fallo del almacén al cambiar estado del turno %s", turno_id, exc_info=True
                    )
                    raise AlmacenNoDisponibleError("cambiar_estado_turno", causa=str(exc)) from exc

        logger.info("Turno %s -> %s", turno_id, estado)
        return ResultadoCambioEstado.ACTUALIZADO, turno
