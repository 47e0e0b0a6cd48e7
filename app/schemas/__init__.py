from .products import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
    ProductListQuery,
)
from .auth import AdminLogin, TokenResponse

__all__ = [
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "ProductListResponse",
    "ProductListQuery",
    "AdminLogin",
    "TokenResponse",
]
