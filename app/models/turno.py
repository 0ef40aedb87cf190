"""Modelo Turno (ocurrencia programada de un escape room)."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, DateTime, ForeignKey, Identity, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntPK

if TYPE_CHECKING:
    from app.models.escape_room import EscapeRoom
    from app.models.equipo import Equipo


class EstadoTurno:
    """Valores permitidos para estado de turno."""
    PROGRAMADO = "programado"
    FINALIZADO = "finalizado"
    CANCELADO = "cancelado"

    # Un turno en estos estados ya no cuenta para la unicidad por actividad
    CERRADOS = (FINALIZADO, CANCELADO)


class Turno(Base):
    """Turno de un escape room. La ocupación se calcula, no se almacena."""

    __tablename__ = "turnos"

    id: Mapped[int] = mapped_column(BigIntPK, Identity(always=True), primary_key=True)
    escape_room_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("escape_rooms.id", ondelete="CASCADE"), nullable=False, index=True
    )
    fecha: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    estado: Mapped[str] = mapped_column(
        Text, nullable=False, default=EstadoTurno.PROGRAMADO, server_default=text("'programado'")
    )

    escape_room: Mapped["EscapeRoom"] = relationship("EscapeRoom", back_populates="turnos")
    equipos: Mapped[list["Equipo"]] = relationship(
        "Equipo", back_populates="turno", cascade="all, delete-orphan"
    )

    @property
    def abierto(self) -> bool:
        return self.estado == EstadoTurno.PROGRAMADO
