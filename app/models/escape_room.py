"""Modelo EscapeRoom (actividad con límites de capacidad)."""
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Identity, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntPK

if TYPE_CHECKING:
    from app.models.turno import Turno


class EscapeRoom(Base):
    """Escape room: team_size = máximo por equipo, nmax = máximo por turno (0 = sin límite)."""

    __tablename__ = "escape_rooms"
    __table_args__ = (
        CheckConstraint("team_size >= 0", name="ck_escape_rooms_team_size"),
        CheckConstraint("nmax >= 0", name="ck_escape_rooms_nmax"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, Identity(always=True), primary_key=True)
    titulo: Mapped[str] = mapped_column(Text, nullable=False)
    team_size: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    nmax: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    turnos: Mapped[list["Turno"]] = relationship(
        "Turno", back_populates="escape_room", cascade="all, delete-orphan"
    )

    @property
    def modo_equipos(self) -> bool:
        return self.team_size > 0
