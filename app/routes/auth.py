"""
Endpoints de autenticación del panel de administración.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from core.config import settings
from core.security import CredentialVerifier, SettingsCredentialVerifier, create_access_token
from schemas.auth import AdminLogin, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


def get_credential_verifier() -> CredentialVerifier:
    """Se puede sobreescribir con app.dependency_overrides para otro origen de credenciales"""
    return SettingsCredentialVerifier()


@router.post("/login")
async def login(
    credentials: AdminLogin,
    verifier: CredentialVerifier = Depends(get_credential_verifier)
):
    """
    Iniciar sesión como administrador.

    Retorna un token JWT de acceso para enviar como
    `Authorization: Bearer <token>` en las rutas de escritura.
    """
    if not verifier.verify(credentials.username, credentials.password):
        logger.warning(f"Intento de login fallido para usuario '{credentials.username}'")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "success": False,
                "status_code": 401,
                "message": "Credenciales inválidas",
                "error": "INVALID_CREDENTIALS"
            }
        )

    access_token = create_access_token(
        data={
            "sub": credentials.username,
            "role": "admin"
        }
    )

    token = TokenResponse(
        access_token=access_token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    )

    return {
        "success": True,
        "status_code": 200,
        "message": "Login exitoso",
        "data": {
            **token.model_dump(),
            "user": {
                "username": credentials.username,
                "role": "admin"
            }
        }
    }
