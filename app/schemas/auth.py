"""
Schemas de autenticación del panel de administración.
"""
from pydantic import BaseModel, Field


class AdminLogin(BaseModel):
    """Schema para login del administrador"""
    username: str = Field(..., min_length=1, max_length=100, description="Usuario administrador")
    password: str = Field(..., min_length=1, description="Contraseña")


class TokenResponse(BaseModel):
    """Schema para respuesta de token"""
    access_token: str = Field(..., description="Token de acceso JWT")
    token_type: str = Field(default="bearer", description="Tipo de token")
    expires_in: int = Field(..., description="Segundos hasta la expiración")
