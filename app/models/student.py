"""Modelo Estudiante."""
from typing import TYPE_CHECKING

from sqlalchemy import Identity, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntPK

if TYPE_CHECKING:
    from app.models.equipo import MiembroEquipo


class Estudiante(Base):
    """Estudiante con código institucional; participa en turnos a través de equipos."""

    __tablename__ = "estudiantes"

    id: Mapped[int] = mapped_column(BigIntPK, Identity(always=True), primary_key=True)
    codigo_estudiante: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    nombre: Mapped[str] = mapped_column(Text, nullable=False)
    apellido: Mapped[str] = mapped_column(Text, nullable=False)

    membresias: Mapped[list["MiembroEquipo"]] = relationship(
        "MiembroEquipo", back_populates="estudiante", cascade="all, delete-orphan"
    )
