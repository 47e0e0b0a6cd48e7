"""
Servicio para manejo de almacenamiento de imágenes de productos.
Optimiza imágenes automáticamente a formato WebP.
"""
import io
import logging
import uuid
from pathlib import Path
from typing import Iterator, NamedTuple, Optional

from PIL import Image, UnidentifiedImageError

from core.config import settings
from core.exceptions import ValidationError

logger = logging.getLogger(__name__)


class ImageUpload(NamedTuple):
    """Archivo subido ya leído en memoria"""
    filename: Optional[str]
    content_type: Optional[str]
    data: bytes


class StorageService:
    """Servicio para gestionar el almacenamiento de archivos."""

    def __init__(
        self,
        base_dir: Optional[str] = None,
        url_prefix: Optional[str] = None,
        max_file_size: Optional[int] = None,
    ):
        self.base_dir = Path(base_dir or settings.UPLOAD_DIR)
        self.url_prefix = (url_prefix or settings.UPLOAD_URL_PREFIX).rstrip("/")

        # Crear directorio si no existe
        self.base_dir.mkdir(parents=True, exist_ok=True)

        # Configuración de optimización
        self.max_size = (settings.MAX_IMAGE_DIMENSION, settings.MAX_IMAGE_DIMENSION)
        self.quality = settings.WEBP_QUALITY
        self.allowed_extensions = {f".{ext}" for ext in settings.ALLOWED_EXTENSIONS}
        self.max_file_size = max_file_size or settings.MAX_UPLOAD_SIZE

    def _validate_image(self, filename: Optional[str], content_type: Optional[str]) -> None:
        """Validar extensión y content type del archivo"""
        ext = Path(filename or "").suffix.lower()
        if ext not in self.allowed_extensions:
            raise ValidationError(
                f"Formato de imagen no permitido. Use: {', '.join(sorted(self.allowed_extensions))}"
            )

        if not content_type or not content_type.startswith("image/"):
            raise ValidationError("El archivo debe ser una imagen")

    def _optimize_image(self, contents: bytes) -> bytes:
        """Optimizar imagen y convertir a WebP"""
        if not contents:
            raise ValidationError("El archivo de imagen está vacío")

        if len(contents) > self.max_file_size:
            raise ValidationError(
                f"El archivo es muy grande. Máximo: {self.max_file_size / (1024 * 1024):g}MB"
            )

        try:
            image = Image.open(io.BytesIO(contents))
            image.load()

            # Convertir a RGB si es necesario (para WebP)
            if image.mode in ("RGBA", "LA", "P"):
                image = image.convert("RGBA")
                background = Image.new("RGB", image.size, (255, 255, 255))
                background.paste(image, mask=image.split()[-1])
                image = background
            elif image.mode != "RGB":
                image = image.convert("RGB")

            # Redimensionar si es necesario
            if image.size[0] > self.max_size[0] or image.size[1] > self.max_size[1]:
                image.thumbnail(self.max_size, Image.Resampling.LANCZOS)

            output = io.BytesIO()
            image.save(output, format="WEBP", quality=self.quality, method=6)
            return output.getvalue()

        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise ValidationError(f"Error al procesar imagen: {str(e)}")

    def save_product_image(self, upload: ImageUpload) -> str:
        """
        Guardar imagen de producto optimizada.
        Retorna la ruta relativa que se guarda en `Product.image`,
        por ejemplo "/uploads/3f2c...e1.webp".
        """
        self._validate_image(upload.filename, upload.content_type)

        optimized_data = self._optimize_image(upload.data)

        # Generar nombre único
        stored_name = f"{uuid.uuid4()}.webp"
        filepath = self.base_dir / stored_name

        with open(filepath, "wb") as f:
            f.write(optimized_data)

        logger.debug(f"Imagen guardada: {filepath}")
        return f"{self.url_prefix}/{stored_name}"

    def resolve_path(self, image_path: str) -> Path:
        """
        Convertir la ruta guardada en el registro a la ruta en disco.
        Solo se usa el nombre del archivo, así que nunca se sale de base_dir.
        """
        return self.base_dir / Path(str(image_path)).name

    def exists(self, image_path: str) -> bool:
        return bool(image_path) and self.resolve_path(image_path).is_file()

    def delete_file(self, image_path: Optional[str]) -> bool:
        """
        Eliminar un archivo de imagen (best-effort).
        Acepta "/uploads/uuid.webp" o solo "uuid.webp".

        Un archivo inexistente no es un error. Los errores de sistema de
        archivos se registran en el log y se retorna False.
        """
        if not image_path:
            return False

        path = self.resolve_path(image_path)
        try:
            path.unlink()
            logger.debug(f"Imagen eliminada: {path}")
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"No se pudo eliminar la imagen {path}: {e}")
            return False

    def iter_files(self, pattern: str = "*") -> Iterator[Path]:
        """Archivos actualmente en el directorio de uploads"""
        for path in self.base_dir.glob(pattern):
            if path.is_file():
                yield path

    def public_path(self, path: Path) -> str:
        return f"{self.url_prefix}/{path.name}"
