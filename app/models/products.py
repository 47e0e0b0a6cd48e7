from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime, Text, Enum as SQLEnum
from sqlalchemy.sql import func
from core.database import Base
import enum

# Categorías fijas del catálogo
class ProductCategory(str, enum.Enum):
    CLOTHING = "Clothing"
    SHOES = "Shoes"
    ELECTRONICS = "Electronics"
    ACCESSORIES = "Accessories"
    HOME_GARDEN = "Home & Garden"
    SPORTS = "Sports"
    BOOKS = "Books"
    TOYS = "Toys"


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    image = Column(String(255), nullable=False)  # Ruta relativa, ej: /uploads/uuid.webp
    # Se guarda el valor ("Home & Garden"), no el nombre del miembro
    category = Column(
        SQLEnum(
            ProductCategory,
            name="product_category",
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        index=True,
    )
    price = Column(Numeric(10, 2), nullable=False)
    availability = Column(Boolean, nullable=False, default=True)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Product(id={self.id}, slug={self.slug}, category={self.category}, price={self.price})>"
