"""Jerarquía de excepciones del motor de inscripciones.

Los rechazos de negocio (equipo completo, turno completo, etc.) no son
excepciones: se devuelven como valores de ``ResultadoInscripcion``.
"""


class EscapeRoomError(Exception):
    """Base de todas las excepciones del dominio."""

    def __init__(
        self,
        message: str,
        codigo: str = "ESCAPE_ROOM_ERROR",
        detalles: dict | None = None,
    ):
        self.message = message
        self.codigo = codigo
        self.detalles = detalles or {}
        super().__init__(self.message)


class NoEncontradoError(EscapeRoomError):
    """Identificador inexistente o que no pertenece a su padre declarado."""

    def __init__(self, entidad: str, entidad_id: int):
        super().__init__(
            message=f"{entidad} {entidad_id} no encontrado",
            codigo="NO_ENCONTRADO",
            detalles={"entidad": entidad, "id": entidad_id},
        )
        self.entidad = entidad
        self.entidad_id = entidad_id


class AlmacenNoDisponibleError(EscapeRoomError):
    """Fallo de la transacción subyacente (error de BD o tiempo de espera agotado)."""

    def __init__(self, operacion: str, causa: str | None = None):
        super().__init__(
            message=f"No se pudo completar '{operacion}': almacén no disponible",
            codigo="ALMACEN_NO_DISPONIBLE",
            detalles={"operacion": operacion, "causa": causa},
        )
        self.operacion = operacion
