"""Esquemas para ocupación y disponibilidad de turnos."""
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

ESTADOS_TURNO = ["programado", "finalizado", "cancelado"]


class EquipoOcupacionItem(BaseModel):
    """Fila de ocupación por equipo."""
    equipo_id: int
    nombre: str
    miembros: int
    plazas_libres: int | None = Field(description="None si el escape room no limita el tamaño de equipo")


class OcupacionTurnoResponse(BaseModel):
    """Ocupación actual de un turno."""
    escape_room_id: int
    turno_id: int
    estado: str
    team_size: int
    nmax: int
    ocupacion: int
    plazas_libres: int | None = Field(description="None si el turno no tiene aforo máximo")
    equipos: list[EquipoOcupacionItem]


class TurnoDisponibleItem(BaseModel):
    """Turno con plazas libres."""
    id: int
    fecha: datetime | None
    ocupacion: int
    plazas_libres: int | None


class TurnosDisponiblesResponse(BaseModel):
    """Lista de turnos disponibles de un escape room."""
    escape_room_id: int
    turnos: list[TurnoDisponibleItem]


class TurnoActivoItem(BaseModel):
    """Turno abierto en el que participa el estudiante."""
    id: int
    fecha: datetime | None
    estado: str


class MisTurnosResponse(BaseModel):
    escape_room_id: int
    turnos: list[TurnoActivoItem]


class ReinicioTurnoResponse(BaseModel):
    turno_id: int
    membresias_eliminadas: int


class TurnoEstadoUpdate(BaseModel):
    """Request para cambiar el estado de un turno."""
    estado: str = Field(description="programado, finalizado o cancelado")

    @field_validator("estado")
    @classmethod
    def validar_estado(cls, v: str) -> str:
        if v not in ESTADOS_TURNO:
            raise ValueError(f"estado debe ser uno de: {', '.join(ESTADOS_TURNO)}")
        return v
