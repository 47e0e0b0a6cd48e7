"""
Servicio de productos: validación, slug, persistencia e imágenes.

Crear y actualizar siguen siempre los mismos pasos, en orden:

    validar -> generar slug -> verificar slug único -> guardar

La imagen se guarda antes de persistir el registro; si algo falla después,
la imagen recién guardada se elimina para no dejar archivos huérfanos.
La eliminación de imágenes viejas es best-effort y nunca bloquea la
operación principal.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import false
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import ConflictError, NotFoundError, ValidationError, describe_validation_errors
from core.slugs import slugify
from core.storage import ImageUpload, StorageService
from models.products import Product, ProductCategory
from schemas.products import ProductCreate, ProductListQuery, ProductUpdate

logger = logging.getLogger(__name__)

SORT_PRICE_ASC = "price-asc"
SORT_PRICE_DESC = "price-desc"

# Búsqueda de categorías sin distinguir mayúsculas
_CATEGORY_LOOKUP = {category.value.lower(): category for category in ProductCategory}


# ==================== PIPELINE ====================

def _clean_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Descartar campos no enviados (None) o vacíos en formularios"""
    return {
        key: value
        for key, value in fields.items()
        if value is not None and not (isinstance(value, str) and not value.strip())
    }


def _validate(schema, fields: Dict[str, Any]):
    try:
        return schema.model_validate(_clean_fields(fields))
    except PydanticValidationError as e:
        messages, details = describe_validation_errors(e.errors())
        raise ValidationError(messages, details)


def _derive_slug(title: str) -> str:
    slug = slugify(title)
    if not slug:
        raise ValidationError("El título debe contener al menos una letra o número")
    return slug


def _ensure_unique_slug(db: Session, slug: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Product.id).filter(Product.slug == slug)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if query.first():
        raise ConflictError(f"Ya existe un producto con el slug '{slug}'")


def _commit(db: Session) -> None:
    """
    Confirmar la transacción. Una violación del índice único del slug
    (escritura concurrente) se reporta como conflicto.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Violación de integridad al guardar producto: {e.orig}")
        raise ConflictError("Ya existe un producto con ese slug") from e
    except SQLAlchemyError:
        db.rollback()
        raise


# ==================== LECTURA ====================

def get_product_by_id(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise NotFoundError()
    return product


def get_product_by_slug(db: Session, slug: str) -> Product:
    product = db.query(Product).filter(Product.slug == slug).first()
    if not product:
        raise NotFoundError()
    return product


def get_related_products(db: Session, slug: str, limit: int = 4) -> List[Product]:
    """Productos de la misma categoría, excluyendo el propio producto"""
    product = get_product_by_slug(db, slug)
    return (
        db.query(Product)
        .filter(Product.category == product.category, Product.id != product.id)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .limit(limit)
        .all()
    )


def parse_categories(values: List[str]) -> List[ProductCategory]:
    """Convertir nombres de categoría; los desconocidos se ignoran"""
    return [
        _CATEGORY_LOOKUP[value.strip().lower()]
        for value in values
        if value.strip().lower() in _CATEGORY_LOOKUP
    ]


def list_products(db: Session, options: ProductListQuery) -> Tuple[List[Product], int]:
    """
    Listar productos con búsqueda, filtros, orden y paginación.

    Todos los filtros se combinan con AND. Retorna (productos de la página,
    total de coincidencias antes de paginar).
    """
    query = db.query(Product)

    if options.search:
        # "%" y "_" se buscan literalmente
        query = query.filter(Product.title.icontains(options.search, autoescape=True))

    if options.categories:
        categories = parse_categories(options.categories)
        # Categorías desconocidas no coinciden con nada
        query = query.filter(Product.category.in_(categories) if categories else false())

    if options.min_price is not None:
        query = query.filter(Product.price >= options.min_price)

    if options.max_price is not None:
        query = query.filter(Product.price <= options.max_price)

    # Contar total
    total = query.count()

    # Orden (id como desempate para paginación estable)
    if options.sort_by == SORT_PRICE_ASC:
        order = [Product.price.asc(), Product.id.asc()]
    elif options.sort_by == SORT_PRICE_DESC:
        order = [Product.price.desc(), Product.id.desc()]
    else:
        order = [Product.created_at.desc(), Product.id.desc()]

    products = query.order_by(*order).offset(options.offset).limit(options.limit).all()
    return products, total


def count_pages(total: int, limit: int) -> int:
    return (total + limit - 1) // limit


# ==================== ESCRITURA ====================

def create_product(
    db: Session,
    storage: StorageService,
    fields: Dict[str, Any],
    image: Optional[ImageUpload],
) -> Product:
    """
    Crear producto. La imagen es obligatoria.
    Si la validación o el guardado fallan, la imagen subida se elimina.
    """
    if image is None:
        raise ValidationError("La imagen del producto es requerida")

    image_path = storage.save_product_image(image)

    try:
        data = _validate(ProductCreate, fields)
        slug = _derive_slug(data.title)
        _ensure_unique_slug(db, slug)

        product = Product(**data.model_dump(), image=image_path, slug=slug)
        db.add(product)
        _commit(db)
        db.refresh(product)
    except Exception:
        storage.delete_file(image_path)
        raise

    logger.info(f"Producto creado: id={product.id} slug={product.slug}")
    return product


def update_product(
    db: Session,
    storage: StorageService,
    product_id: int,
    fields: Dict[str, Any],
    image: Optional[ImageUpload] = None,
) -> Product:
    """
    Actualizar solo los campos enviados. Si se envía título se regenera
    el slug; si se envía imagen se reemplaza y la anterior se elimina.
    """
    product = get_product_by_id(db, product_id)

    new_image_path = storage.save_product_image(image) if image is not None else None
    old_image_path = None

    try:
        data = _validate(ProductUpdate, fields)
        changes = data.model_dump(exclude_none=True)

        if "title" in changes:
            slug = _derive_slug(changes["title"])
            if slug != product.slug:
                _ensure_unique_slug(db, slug, exclude_id=product.id)
                product.slug = slug

        for field, value in changes.items():
            setattr(product, field, value)

        if new_image_path:
            old_image_path = product.image
            product.image = new_image_path

        _commit(db)
        db.refresh(product)
    except Exception:
        if new_image_path:
            storage.delete_file(new_image_path)
        raise

    # La imagen anterior solo se borra cuando el registro ya apunta a la nueva
    if old_image_path and old_image_path != product.image:
        storage.delete_file(old_image_path)

    logger.info(f"Producto actualizado: id={product.id} campos={sorted(changes)}")
    return product


def delete_product(db: Session, storage: StorageService, product_id: int) -> None:
    """Eliminar producto permanentemente junto con su imagen"""
    product = get_product_by_id(db, product_id)
    image_path = product.image

    db.delete(product)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    if not storage.delete_file(image_path):
        logger.debug(f"La imagen {image_path} del producto {product_id} ya no existía")

    logger.info(f"Producto eliminado: id={product_id}")
