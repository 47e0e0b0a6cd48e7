"""
Generación de slugs URL-friendly a partir del título del producto.
"""
import re
import unicodedata

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """
    Convertir un título en slug.

    "Zapatos Rojos (Talla 42)" -> "zapatos-rojos-talla-42"
    "Café & Té" -> "cafe-te"

    Los acentos se transliteran a ASCII; cualquier otra secuencia de
    caracteres no alfanuméricos se reemplaza por un solo guion.
    No garantiza unicidad: eso lo valida el servicio de productos.
    """
    normalized = unicodedata.normalize("NFKD", title or "")
    ascii_title = normalized.encode("ascii", "ignore").decode("ascii")
    return _NON_ALPHANUMERIC.sub("-", ascii_title.lower()).strip("-")
