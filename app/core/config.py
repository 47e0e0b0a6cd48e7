import os
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # API Config
    API_TITLE: str = "Catalogo API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "API del catálogo de productos con panel de administración"
    ENV: str = os.getenv("ENV", "production")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ALLOW_ORIGINS: str = os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:3000")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "postgresql://user:pass@db:5432/catalogo")
    DB_CONNECT_RETRIES: int = int(os.getenv("DB_CONNECT_RETRIES", "5"))
    DB_CONNECT_DELAY: float = float(os.getenv("DB_CONNECT_DELAY", "5"))
    DB_AUTO_CREATE: bool = True

    # Redis (cache de listados)
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://redis:6379/0")
    CACHE_ENABLED: bool = False
    CACHE_TTL_SECONDS: int = 300

    # Security & JWT
    SECRET_KEY: str = os.getenv("SECRET_KEY", "your-secret-key-change-in-production-PLEASE")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    # Admin (hash bcrypt, nunca la contraseña en claro)
    ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
    ADMIN_PASSWORD_HASH: str = os.getenv("ADMIN_PASSWORD_HASH", "")
    ADMIN_AUTH_REQUIRED: bool = False

    # Upload Configuration
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "/app/uploads")
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024  # 5MB
    ALLOWED_EXTENSIONS: set = {"jpg", "jpeg", "png", "webp", "gif"}
    WEBP_QUALITY: int = 85
    MAX_IMAGE_DIMENSION: int = 1920

    # Listados
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100
    RELATED_LIMIT: int = 4

    # Limpieza de imágenes huérfanas
    ORPHAN_SWEEP_ENABLED: bool = True
    ORPHAN_SWEEP_INTERVAL_MINUTES: int = 60
    ORPHAN_SWEEP_GRACE_SECONDS: int = 3600

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
