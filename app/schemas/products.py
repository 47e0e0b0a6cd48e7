"""
Schemas para productos.
"""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from models.products import ProductCategory

TWO_PLACES = Decimal("0.01")
MAX_PRICE = Decimal("99999999.99")  # Numeric(10, 2)


def _quantize_price(value: Optional[Decimal]) -> Optional[Decimal]:
    """Redondear a exactamente 2 decimales"""
    if value is None:
        return None
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


# ==================== PRODUCT SCHEMAS ====================

class ProductBase(BaseModel):
    """Schema base para productos"""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=3, max_length=255, description="Título del producto")
    description: str = Field(..., min_length=1, description="Descripción del producto")
    category: ProductCategory = Field(..., description="Categoría del producto")
    price: Decimal = Field(..., ge=0, le=MAX_PRICE, description="Precio (no puede ser negativo)")
    availability: bool = Field(True, description="Disponible en stock")

    @field_validator("price")
    @classmethod
    def round_price(cls, value):
        return _quantize_price(value)


class ProductCreate(ProductBase):
    """Schema para crear producto (la imagen llega aparte, como archivo)"""
    pass


class ProductUpdate(BaseModel):
    """Schema para actualizar producto: solo los campos enviados"""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[ProductCategory] = None
    price: Optional[Decimal] = Field(None, ge=0, le=MAX_PRICE)
    availability: Optional[bool] = None

    @field_validator("price")
    @classmethod
    def round_price(cls, value):
        return _quantize_price(value)


class ProductResponse(BaseModel):
    """Schema de respuesta para producto"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    image: str
    category: ProductCategory
    price: Decimal
    availability: bool
    slug: str
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> float:
        # Número en el JSON, no string
        return float(_quantize_price(Decimal(price)))


class ProductListResponse(BaseModel):
    """Página de productos con metadata de paginación"""
    products: List[ProductResponse]
    total_pages: int = Field(..., serialization_alias="totalPages")
    current_page: int = Field(..., serialization_alias="currentPage")
    total: int


class ProductListQuery(BaseModel):
    """Opciones de búsqueda, filtros, orden y paginación (todas opcionales)"""
    search: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    sort_by: Optional[str] = None
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1)

    @classmethod
    def from_params(
        cls,
        search: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        sort_by: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> "ProductListQuery":
        """Construir desde los query params (category separado por comas)"""
        categories = [c.strip() for c in (category or "").split(",") if c.strip()]
        return cls(
            search=search.strip() if search and search.strip() else None,
            categories=categories,
            min_price=min_price,
            max_price=max_price,
            sort_by=sort_by,
            page=page,
            limit=limit,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def signature(self) -> str:
        """Firma estable de la consulta, usada como clave de cache"""
        return self.model_dump_json()
