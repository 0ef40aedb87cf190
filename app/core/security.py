"""Utilidades de seguridad: emisión y validación de JWT.

Los tokens los emite el servicio de identidad con el mismo secreto; aquí solo
se decodifican para obtener el estudiante que hace la petición.
"""
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from app.core.config import settings

ROL_ESTUDIANTE = "estudiante"
ROL_PROFESOR = "profesor"


def create_access_token(subject: str | int, extra: dict[str, Any] | None = None) -> str:
    """Genera un JWT con sub=subject y opcionalmente datos extra (ej. rol)."""
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {
        "sub": str(subject),
        "exp": expire,
        "iat": now,
    }
    if extra:
        payload.update(extra)
    return jwt.encode(
        payload,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Decodifica y valida el JWT; devuelve el payload o None si es inválido."""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.PyJWTError:
        return None
