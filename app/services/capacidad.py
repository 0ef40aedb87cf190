"""Política de capacidad: funciones puras sobre los límites del escape room."""
from enum import Enum

from app.models.escape_room import EscapeRoom


class DecisionCapacidad(str, Enum):
    """Resultado de evaluar si un equipo/turno admite un miembro más."""
    ADMITIR = "admitir"
    EQUIPO_COMPLETO = "equipo_completo"
    TURNO_COMPLETO = "turno_completo"


def evaluar_admision(
    escape_room: EscapeRoom,
    miembros_equipo: int,
    ocupacion_turno: int,
) -> DecisionCapacidad:
    """Decide si se admite un estudiante más dado el tamaño actual del equipo y del turno.

    team_size = 0 y nmax = 0 significan sin límite. El límite de equipo se evalúa primero.
    """
    if escape_room.modo_equipos and miembros_equipo >= escape_room.team_size:
        return DecisionCapacidad.EQUIPO_COMPLETO
    if escape_room.nmax > 0 and ocupacion_turno >= escape_room.nmax:
        return DecisionCapacidad.TURNO_COMPLETO
    return DecisionCapacidad.ADMITIR


def plazas_libres(limite: int, ocupados: int) -> int | None:
    """Plazas restantes para un límite; None si el límite es 0 (sin límite)."""
    if limite <= 0:
        return None
    return max(0, limite - ocupados)
