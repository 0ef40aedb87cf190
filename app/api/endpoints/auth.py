"""Dependencias de identidad: obtienen el estudiante o profesor a partir del JWT.

El login y la gestión de contraseñas los hace el servicio de identidad; aquí
solo se valida el token recibido.
"""
from typing import Any, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.security import ROL_ESTUDIANTE, decode_access_token

security = HTTPBearer(auto_error=False)


async def get_token_payload(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict[str, Any]:
    """Dependencia: exige un JWT válido y devuelve su payload."""
    if not credentials or credentials.scheme != "Bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token de autenticación no proporcionado o inválido",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_access_token(credentials.credentials)
    if not payload or "sub" not in payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido o expirado",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


async def get_current_estudiante_id(
    payload: dict[str, Any] = Depends(get_token_payload),
) -> int:
    """Dependencia: id del estudiante que hace la petición."""
    if payload.get("rol", ROL_ESTUDIANTE) != ROL_ESTUDIANTE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Solo los estudiantes pueden inscribirse en turnos",
        )
    try:
        return int(payload["sub"])
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido o expirado",
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_rol(rol: str) -> Callable:
    """Dependencia que exige que el token tenga el rol indicado."""

    async def _check(payload: dict[str, Any] = Depends(get_token_payload)) -> dict[str, Any]:
        if payload.get("rol") != rol:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Se requiere el rol '{rol}'",
            )
        return payload

    return _check
