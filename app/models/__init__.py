"""Modelos SQLAlchemy (tablas de la base de datos)."""
from app.models.escape_room import EscapeRoom
from app.models.turno import Turno, EstadoTurno
from app.models.equipo import Equipo, MiembroEquipo
from app.models.student import Estudiante

__all__ = [
    "EscapeRoom",
    "Turno",
    "EstadoTurno",
    "Equipo",
    "MiembroEquipo",
    "Estudiante",
]
