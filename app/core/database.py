"""
Manejo de la conexión a la base de datos.

La conexión se representa con un objeto `Database` explícito que se abre al
arrancar la aplicación y se cierra al apagarla. Los endpoints obtienen la
sesión a través de `get_db`, que lee el handle desde `request.app.state`.
"""
import logging
import time
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

# Base para los modelos
Base = declarative_base()


class Database:
    """Handle de almacenamiento con ciclo de vida explícito (open/close)."""

    def __init__(self, url: str, retries: int = 1, delay: float = 0, auto_create: bool = True):
        self.url = url
        self.retries = max(1, retries)
        self.delay = delay
        self.auto_create = auto_create
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    def open(self) -> "Database":
        """
        Crear el engine y verificar la conexión.

        Reintenta `retries` veces esperando `delay` segundos entre intentos;
        si el último intento falla se propaga el error.
        """
        connect_args = {}
        if self.url.startswith("sqlite"):
            # TestClient y el scheduler usan hilos distintos
            connect_args["check_same_thread"] = False

        self.engine = create_engine(self.url, pool_pre_ping=True, connect_args=connect_args)

        for attempt in range(1, self.retries + 1):
            try:
                logger.info(f"Conectando a la base de datos (intento {attempt}/{self.retries})...")
                with self.engine.connect() as conn:
                    conn.execute(text("SELECT 1"))
                break
            except OperationalError as e:
                logger.error(f"No se pudo conectar a la base de datos (intento {attempt}/{self.retries}): {e}")
                if attempt == self.retries:
                    self.engine.dispose()
                    self.engine = None
                    raise
                time.sleep(self.delay)

        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

        if self.auto_create:
            self.create_all()

        logger.info("Base de datos conectada")
        return self

    def create_all(self) -> None:
        # Importar modelos para registrarlos en Base.metadata
        import models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        import models  # noqa: F401
        Base.metadata.drop_all(bind=self.engine)

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("La base de datos no está abierta")
        return self._session_factory()

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
            self._session_factory = None
            logger.info("Conexión a la base de datos cerrada")


# Dependency para FastAPI
def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.db.session()
    try:
        yield db
    finally:
        db.close()
