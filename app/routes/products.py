from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from core import product_service
from core.cache import ProductCache
from core.config import settings
from core.database import get_db
from core.dependencies import get_cache, get_storage, require_admin
from core.storage import ImageUpload, StorageService
from models.products import Product
from schemas.products import ProductListQuery, ProductListResponse, ProductResponse

router = APIRouter(
    prefix="/products",
    tags=["products"]
)


def serialize_product(product: Product) -> dict:
    """Producto en formato JSON (precio numérico con 2 decimales, fechas ISO)"""
    return ProductResponse.model_validate(product).model_dump(mode="json", by_alias=True)


async def read_upload(image: Optional[UploadFile]) -> Optional[ImageUpload]:
    """Leer el archivo subido; un campo de archivo vacío cuenta como no enviado"""
    if image is None or not image.filename:
        return None
    return ImageUpload(
        filename=image.filename,
        content_type=image.content_type,
        data=await image.read(),
    )


# ==================== PRODUCTOS ====================

@router.get("")
async def list_products(
    search: Optional[str] = Query(None, description="Buscar por título"),
    category: Optional[str] = Query(None, description="Categorías separadas por coma, ej: Shoes,Books"),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", description="Precio mínimo (inclusive)"),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", description="Precio máximo (inclusive)"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="price-asc, price-desc o más recientes"),
    page: int = Query(1, ge=1, description="Número de página"),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="Items por página"),
    db: Session = Depends(get_db),
    cache: ProductCache = Depends(get_cache)
):
    """
    Listar productos con búsqueda, filtros, orden y paginación.

    - **search**: Coincidencia parcial en el título (sin distinguir mayúsculas)
    - **category**: Una o varias categorías separadas por coma
    - **minPrice** / **maxPrice**: Rango de precio inclusivo
    - **sortBy**: `price-asc`, `price-desc`; por defecto más recientes primero
    - **page**: Número de página (default: 1)
    - **limit**: Productos por página (default: 20, max: 100)
    """
    options = ProductListQuery.from_params(
        search=search,
        category=category,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        page=page,
        limit=limit,
    )

    cache_key = cache.list_key(options.signature())
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    products, total = product_service.list_products(db, options)

    payload = ProductListResponse(
        products=[ProductResponse.model_validate(p) for p in products],
        total_pages=product_service.count_pages(total, options.limit),
        current_page=options.page,
        total=total,
    ).model_dump(mode="json", by_alias=True)

    cache.set(cache_key, payload)
    return payload


# Obtener productos relacionados (misma categoría)
@router.get("/{slug}/related")
async def get_related_products(
    slug: str,
    db: Session = Depends(get_db)
):
    """
    Obtener hasta 4 productos de la misma categoría, sin incluir el producto.
    """
    related = product_service.get_related_products(db, slug, limit=settings.RELATED_LIMIT)
    return [serialize_product(p) for p in related]


# Obtener producto por slug (descripcion amigable)
@router.get("/{slug}")
async def get_product_by_slug(
    slug: str,
    db: Session = Depends(get_db),
    cache: ProductCache = Depends(get_cache)
):
    """
    Obtener un producto por su slug (para URLs amigables).
    """
    cache_key = cache.slug_key(slug)
    cached = cache.get(cache_key)
    if cached is not None:
        return cached

    payload = serialize_product(product_service.get_product_by_slug(db, slug))
    cache.set(cache_key, payload)
    return payload


# ==================== ADMIN ENDPOINTS ====================
# Requieren token de administrador si ADMIN_AUTH_REQUIRED está activo

@router.post("", status_code=201)
async def create_product(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    availability: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None, description="Imagen del producto (requerida)"),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
    cache: ProductCache = Depends(get_cache),
    admin: Optional[dict] = Depends(require_admin)
):
    """
    Crear un nuevo producto (multipart/form-data).

    La imagen es obligatoria. El slug se genera a partir del título y debe
    ser único; si ya existe se responde 409.
    """
    product = product_service.create_product(
        db,
        storage,
        {
            "title": title,
            "description": description,
            "category": category,
            "price": price,
            "availability": availability,
        },
        await read_upload(image),
    )
    cache.invalidate()
    return serialize_product(product)


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    availability: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None, description="Nueva imagen (opcional)"),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
    cache: ProductCache = Depends(get_cache),
    admin: Optional[dict] = Depends(require_admin)
):
    """
    Actualizar un producto existente.

    Solo se actualizan los campos enviados. Si cambia el título se regenera
    el slug. Si se envía una imagen nueva, la anterior se elimina del disco.
    """
    product = product_service.update_product(
        db,
        storage,
        product_id,
        {
            "title": title,
            "description": description,
            "category": category,
            "price": price,
            "availability": availability,
        },
        await read_upload(image),
    )
    cache.invalidate()
    return serialize_product(product)


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
    cache: ProductCache = Depends(get_cache),
    admin: Optional[dict] = Depends(require_admin)
):
    """
    Eliminar un producto permanentemente junto con su imagen.

    ⚠️ PRECAUCIÓN: Esta acción es IRREVERSIBLE.
    """
    product_service.delete_product(db, storage, product_id)
    cache.invalidate()

    return {
        "success": True,
        "status_code": 200,
        "message": "Producto eliminado exitosamente",
        "data": {"id": product_id}
    }
