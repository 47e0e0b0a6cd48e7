"""
Fixtures compartidas para los tests.

Cada test usa su propia base SQLite y su propio directorio de uploads
dentro de tmp_path.
"""
import io
import os
import sys
import tempfile

import pytest
from PIL import Image

# Configuración mínima antes de importar la app (main crea la app al importarse)
_TMP_DIR = tempfile.mkdtemp(prefix="catalogo-tests-")
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'import.db')}"
os.environ["ORPHAN_SWEEP_ENABLED"] = "false"
os.environ["CACHE_ENABLED"] = "false"
os.environ["ADMIN_AUTH_REQUIRED"] = "false"
os.environ["ENV"] = "test"

# Agregar app al path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'app'))

from fastapi.testclient import TestClient

from core.config import settings
from core.database import Database
from core.storage import ImageUpload, StorageService


def make_image_bytes(fmt: str = "PNG", size=(32, 32), color=(200, 30, 30)) -> bytes:
    """Generar una imagen real en memoria"""
    mode = "RGBA" if fmt == "PNG" else "RGB"
    image = Image.new(mode, size, color)
    output = io.BytesIO()
    image.save(output, format=fmt)
    return output.getvalue()


@pytest.fixture
def app_settings(tmp_path, monkeypatch):
    """Apuntar la configuración a una base y uploads temporales"""
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "DB_CONNECT_RETRIES", 1)
    monkeypatch.setattr(settings, "DB_CONNECT_DELAY", 0)
    monkeypatch.setattr(settings, "ORPHAN_SWEEP_ENABLED", False)
    monkeypatch.setattr(settings, "CACHE_ENABLED", False)
    monkeypatch.setattr(settings, "ADMIN_AUTH_REQUIRED", False)
    return settings


@pytest.fixture
def client(app_settings):
    """Fixture para cliente HTTP (ejecuta el lifespan de la app)"""
    from main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def db_handle(tmp_path):
    handle = Database(f"sqlite:///{tmp_path / 'service.db'}").open()
    yield handle
    handle.close()


@pytest.fixture
def db(db_handle):
    """Fixture para sesión de base de datos de prueba"""
    session = db_handle.session()
    yield session
    session.close()


@pytest.fixture
def uploads_dir(tmp_path):
    return tmp_path / "service-uploads"


@pytest.fixture
def storage(uploads_dir):
    return StorageService(base_dir=str(uploads_dir))


@pytest.fixture
def image_upload():
    """Fábrica de uploads válidos"""
    def _make(filename: str = "foto.png", content_type: str = "image/png", **kwargs) -> ImageUpload:
        fmt = "JPEG" if filename.lower().endswith((".jpg", ".jpeg")) else "PNG"
        return ImageUpload(filename=filename, content_type=content_type, data=make_image_bytes(fmt, **kwargs))
    return _make


@pytest.fixture
def product_fields():
    """Fábrica de campos válidos de producto"""
    def _make(**overrides):
        fields = {
            "title": "Red Shoes",
            "description": "Zapatos rojos de cuero",
            "category": "Shoes",
            "price": "49.99",
            "availability": "true",
        }
        fields.update(overrides)
        return fields
    return _make


@pytest.fixture
def make_product(db, storage, product_fields, image_upload):
    """Crear productos directamente con el servicio"""
    from core import product_service

    def _make(**overrides):
        return product_service.create_product(db, storage, product_fields(**overrides), image_upload())
    return _make


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG")
