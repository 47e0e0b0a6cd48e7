"""
Cache de productos en Redis.

Los listados se cachean con una clave derivada de la firma de la consulta
(filtros + orden + paginación) y el detalle por slug. Cualquier operación de
escritura (crear, actualizar, eliminar) invalida todas las claves de
productos, incluido el listado sin filtros.

Si Redis falla, el error se registra y se consulta la base de datos.
"""
import hashlib
import json
import logging
from typing import Any, Optional

import redis
from redis.exceptions import RedisError

from core.config import settings

logger = logging.getLogger(__name__)


class ProductCache:
    """Cache de listados y detalle de productos"""

    def __init__(self, client: Optional[redis.Redis] = None, ttl: int = 300, prefix: str = "products"):
        self.client = client
        self.ttl = ttl
        self.prefix = prefix

    @classmethod
    def from_settings(cls) -> "ProductCache":
        """Cache conectado a REDIS_URL, o deshabilitado si CACHE_ENABLED es False"""
        if not settings.CACHE_ENABLED:
            return cls(client=None)
        client = redis.from_url(settings.REDIS_URL, decode_responses=True)
        return cls(client=client, ttl=settings.CACHE_TTL_SECONDS)

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def list_key(self, signature: str) -> str:
        digest = hashlib.sha256(signature.encode("utf-8")).hexdigest()
        return f"{self.prefix}:list:{digest}"

    def slug_key(self, slug: str) -> str:
        return f"{self.prefix}:slug:{slug}"

    def get(self, key: str) -> Optional[Any]:
        if not self.enabled:
            return None
        try:
            data = self.client.get(key)
        except RedisError as e:
            logger.warning(f"Error leyendo cache {key}: {e}")
            return None
        return json.loads(data) if data else None

    def set(self, key: str, value: Any) -> None:
        if not self.enabled:
            return
        try:
            self.client.setex(key, self.ttl, json.dumps(value))
        except RedisError as e:
            logger.warning(f"Error guardando cache {key}: {e}")

    def invalidate(self) -> None:
        """Invalidar todas las claves de productos"""
        if not self.enabled:
            return
        try:
            keys = list(self.client.scan_iter(match=f"{self.prefix}:*"))
            if keys:
                self.client.delete(*keys)
                logger.debug(f"Cache invalidado: {len(keys)} clave(s)")
        except RedisError as e:
            logger.warning(f"Error invalidando cache de productos: {e}")

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
