"""
Script para inicializar la base de datos.
Crea (o elimina con --drop) las tablas definidas en models/

Uso:
    python scripts/init_db.py
    python scripts/init_db.py --drop
"""
import os
import sys

# Agregar app al path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'app'))

from core.config import settings
from core.database import Database


def init_db(url: str = None):
    """Crear todas las tablas en la base de datos"""
    print("🔨 Creando tablas en la base de datos...")
    db = Database(url or settings.DATABASE_URL, retries=settings.DB_CONNECT_RETRIES,
                  delay=settings.DB_CONNECT_DELAY, auto_create=False).open()
    try:
        db.create_all()
    finally:
        db.close()
    print("✅ Tablas creadas exitosamente!")
    print("\n📋 Tablas disponibles:")
    print("   └── products")


def drop_db(url: str = None):
    """Eliminar todas las tablas de la base de datos"""
    print("⚠️  Eliminando todas las tablas...")
    db = Database(url or settings.DATABASE_URL, auto_create=False).open()
    try:
        db.drop_all()
    finally:
        db.close()
    print("✅ Tablas eliminadas!")


if __name__ == "__main__":
    if "--drop" in sys.argv[1:]:
        drop_db()
    else:
        init_db()
