"""
Utilidades para seguridad: contraseñas, JWT y verificación de credenciales
del administrador.
"""
import hmac
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

import bcrypt
from jose import JWTError, jwt

from core.config import settings


# ==================== PASSWORD HASHING ====================

def hash_password(password: str) -> str:
    """
    Hash password usando bcrypt (con salt aleatorio).
    Genera un hash de 60 caracteres.
    """
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verificar si una contraseña coincide con su hash.
    Un hash vacío o mal formado nunca coincide.
    """
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))
    except ValueError:
        return False


# ==================== CREDENTIAL VERIFICATION ====================

class CredentialVerifier(ABC):
    """
    Interfaz para verificar credenciales del panel de administración.
    Permite cambiar el origen de las credenciales (variables de entorno,
    tabla de usuarios, LDAP...) sin tocar los endpoints.
    """

    @abstractmethod
    def verify(self, username: str, password: str) -> bool:
        """Retorna True si las credenciales son válidas"""
        pass


class SettingsCredentialVerifier(CredentialVerifier):
    """
    Verifica contra ADMIN_USERNAME y ADMIN_PASSWORD_HASH (bcrypt).
    Si no hay hash configurado, ningún login es válido.
    """

    def __init__(self, username: Optional[str] = None, password_hash: Optional[str] = None):
        self.username = username if username is not None else settings.ADMIN_USERNAME
        self.password_hash = password_hash if password_hash is not None else settings.ADMIN_PASSWORD_HASH

    def verify(self, username: str, password: str) -> bool:
        username_ok = hmac.compare_digest(username.encode('utf-8'), self.username.encode('utf-8'))
        # Siempre verificar el hash para no filtrar por tiempo si el usuario existe
        password_ok = verify_password(password, self.password_hash)
        return username_ok and password_ok


# ==================== JWT TOKEN MANAGEMENT ====================

def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Crear un token JWT de acceso.

    Args:
        data: Datos a incluir en el token (payload)
        expires_delta: Tiempo de expiración personalizado (opcional)

    Returns:
        str: Token JWT codificado
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode.update({
        "exp": expire,
        "iat": now,
        "type": "access",
        "jti": str(uuid.uuid4())
    })

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decodificar y validar un token JWT.

    Returns:
        Dict con el payload del token o None si es inválido o expiró
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
