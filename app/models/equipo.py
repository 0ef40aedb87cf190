"""Modelo Equipo y asociación equipo-estudiante (membresía)."""
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, DateTime, ForeignKey, Identity, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, BigIntPK

if TYPE_CHECKING:
    from app.models.turno import Turno
    from app.models.student import Estudiante


class Equipo(Base):
    """Equipo de estudiantes ligado a un único turno."""

    __tablename__ = "equipos"

    id: Mapped[int] = mapped_column(BigIntPK, Identity(always=True), primary_key=True)
    turno_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("turnos.id", ondelete="CASCADE"), nullable=False, index=True
    )
    nombre: Mapped[str] = mapped_column(Text, nullable=False)

    turno: Mapped["Turno"] = relationship("Turno", back_populates="equipos")
    miembros: Mapped[list["MiembroEquipo"]] = relationship(
        "MiembroEquipo", back_populates="equipo", cascade="all, delete-orphan"
    )


class MiembroEquipo(Base):
    """Tabla asociación: qué estudiantes forman cada equipo."""

    __tablename__ = "miembros_equipo"

    equipo_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("equipos.id", ondelete="CASCADE"), primary_key=True
    )
    estudiante_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("estudiantes.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    fecha_inscripcion: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    equipo: Mapped["Equipo"] = relationship("Equipo", back_populates="miembros")
    estudiante: Mapped["Estudiante"] = relationship("Estudiante", back_populates="membresias")
