"""Esquemas para inscripción, creación de equipos y retiro."""
from pydantic import BaseModel, Field, field_validator


class InscripcionResponse(BaseModel):
    """Respuesta a un intento de inscripción."""
    resultado: str = Field(description="inscrito o ya_inscrito_mismo_turno")
    mensaje: str
    escape_room_id: int
    turno_id: int
    equipo_id: int


class RechazoResponse(BaseModel):
    """Detalle de un rechazo de negocio (409)."""
    resultado: str
    mensaje: str


class EquipoCreate(BaseModel):
    """Body para crear un equipo en un turno."""
    nombre: str = Field(description="Nombre del equipo", min_length=1, max_length=100)

    @field_validator("nombre")
    @classmethod
    def limpiar_nombre(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("el nombre del equipo no puede estar vacío")
        return v


class RetiroResponse(BaseModel):
    """Respuesta al retirarse de un equipo."""
    resultado: str
    mensaje: str
    equipo_id: int
