"""
Dependencias compartidas para FastAPI: storage, cache y autorización
del administrador.
"""
from typing import Optional, Dict, Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from core.cache import ProductCache
from core.config import settings
from core.security import decode_token
from core.storage import StorageService


security = HTTPBearer(auto_error=False)


def get_storage(request: Request) -> StorageService:
    return request.app.state.storage


def get_cache(request: Request) -> ProductCache:
    return request.app.state.cache


async def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[Dict[str, Any]]:
    """
    Verificar que la petición trae un token de administrador válido.

    Solo se exige cuando ADMIN_AUTH_REQUIRED está activo; en otro caso
    las rutas de escritura son públicas y se retorna None.
    """
    if not settings.ADMIN_AUTH_REQUIRED:
        return None

    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "success": False,
                "status_code": 401,
                "message": "Token de autenticación requerido",
                "error": "AUTHENTICATION_REQUIRED"
            },
            headers={"WWW-Authenticate": "Bearer"}
        )

    payload = decode_token(credentials.credentials)
    if not payload or payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "success": False,
                "status_code": 401,
                "message": "Token inválido o expirado",
                "error": "INVALID_TOKEN"
            },
            headers={"WWW-Authenticate": "Bearer"}
        )

    if payload.get("role") != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "success": False,
                "status_code": 403,
                "message": "No tienes permisos de administrador",
                "error": "ADMIN_REQUIRED"
            }
        )

    return payload
