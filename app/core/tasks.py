"""
Tareas automáticas y programadas del sistema.
"""
from apscheduler.schedulers.background import BackgroundScheduler
from datetime import datetime, timezone
from core.config import settings
from core.database import Database
from core.storage import StorageService
from models.products import Product
import logging

logger = logging.getLogger(__name__)


def sweep_orphan_images(db_handle: Database, storage: StorageService, grace_seconds: int = 3600) -> list:
    """
    Eliminar imágenes que ningún producto referencia.

    Cubre los casos en que el proceso se cae entre guardar la imagen y
    confirmar (o limpiar) el registro. Solo elimina archivos con más de
    `grace_seconds` de antigüedad para no tocar uploads en curso.

    Retorna la lista de archivos eliminados.
    """
    db = db_handle.session()
    try:
        referenced = {storage.resolve_path(image).name for (image,) in db.query(Product.image).all()}
    finally:
        db.close()

    now = datetime.now(timezone.utc).timestamp()
    deleted = []

    # Solo imágenes de producto (save_product_image siempre escribe WebP)
    for path in storage.iter_files("*.webp"):
        if path.name in referenced:
            continue
        try:
            age = now - path.stat().st_mtime
        except FileNotFoundError:
            continue
        if age < grace_seconds:
            continue
        if storage.delete_file(path.name):
            deleted.append(path.name)

    if deleted:
        logger.info(f"✅ Tarea automática: {len(deleted)} imagen(es) huérfana(s) eliminada(s): {', '.join(deleted)}")
    else:
        logger.debug("✅ Tarea automática: No hay imágenes huérfanas para eliminar.")

    return deleted


def _run_sweep(db_handle: Database, storage: StorageService) -> None:
    try:
        sweep_orphan_images(db_handle, storage, settings.ORPHAN_SWEEP_GRACE_SECONDS)
    except Exception as e:
        # El scheduler debe seguir corriendo en la próxima ejecución
        logger.error(f"❌ Error al eliminar imágenes huérfanas: {str(e)}", exc_info=True)


def start_scheduler(db_handle: Database, storage: StorageService) -> BackgroundScheduler:
    """
    Iniciar el scheduler de tareas automáticas.
    Se llama al startup de la aplicación; retorna el scheduler para
    detenerlo en el shutdown.
    """
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        _run_sweep,
        'interval',
        minutes=settings.ORPHAN_SWEEP_INTERVAL_MINUTES,
        args=[db_handle, storage],
        id='sweep_orphan_images',
        name='Eliminar imágenes huérfanas',
        replace_existing=True
    )

    scheduler.start()
    logger.info("✅ Scheduler de tareas automáticas iniciado")
    return scheduler


def stop_scheduler(scheduler: BackgroundScheduler):
    """
    Detener el scheduler de tareas automáticas.
    Se llama al shutdown de la aplicación.
    """
    if scheduler.running:
        scheduler.shutdown()
        logger.info("✅ Scheduler de tareas automáticas detenido")
