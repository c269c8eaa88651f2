"""Celery tasks for background archive processing."""

import asyncio
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiofiles
from celery import Celery, Task
from celery.utils.log import get_task_logger

from print_quote_calculator.core.config import get_settings
from print_quote_calculator.models.entities import StoreData
from print_quote_calculator.models.quote import QuoteSnapshot
from print_quote_calculator.services.slicer import ArchiveImportError, SlicedArchiveService
from print_quote_calculator.services.snapshot import (
    QuoteSnapshotSerializer,
    SnapshotError,
    quote_archive_name,
)
from print_quote_calculator.services.store import EntityStore

settings = get_settings()
logger = get_task_logger(__name__)


def _run_eagerly() -> bool:
    return bool(
        os.getenv("PYTEST_CURRENT_TEST")
        or os.getenv("CELERY_TASK_ALWAYS_EAGER")
        or settings.task_always_eager
    )


# Initialize Celery with test-aware configuration
if _run_eagerly():
    # In-process execution needs no broker
    celery_app = Celery(
        "print_quote_calculator",
        broker="memory://",
        backend="rpc://",
    )
else:
    celery_app = Celery(
        "print_quote_calculator",
        broker=settings.celery_broker_url,
        backend=settings.celery_result_backend,
    )

celery_config = {
    "task_serializer": "json",
    "accept_content": ["json"],
    "result_serializer": "json",
    "timezone": "UTC",
    "enable_utc": True,
}

if _run_eagerly():
    celery_config.update(
        {
            "task_always_eager": True,
            "task_eager_propagates": True,
        }
    )

celery_app.conf.update(**celery_config)


def _processed_at() -> str:
    return datetime.now(timezone.utc).isoformat()


@celery_app.task(bind=True)
def import_sliced_archive(self: Task, file_path: str, cleanup: bool = False) -> dict:
    """
    Read print metrics, or an embedded quote, from a sliced archive.

    Args:
        file_path: Path to the .gcode.3mf archive
        cleanup: Remove the file afterwards

    Returns:
        Dictionary with the import results
    """
    logger.info(f"Importing archive {file_path}")

    try:
        service = SlicedArchiveService(settings=get_settings())
        imported = asyncio.run(service.import_file(file_path))
        result: dict[str, Any] = {
            "success": True,
            "file_name": imported.file_name,
            "warning": imported.warning,
            "metrics": imported.metrics.model_dump() if imported.metrics else None,
            "snapshot": (
                imported.snapshot.model_dump(mode="json", by_alias=True)
                if imported.snapshot
                else None
            ),
            "processed_at": _processed_at(),
        }
        return result

    except ArchiveImportError as e:
        logger.error(f"Archive import failed for {file_path}: {e}")
        return {
            "success": False,
            "error": str(e),
            "processed_at": _processed_at(),
        }

    finally:
        if cleanup:
            try:
                if os.path.exists(file_path):
                    os.remove(file_path)
                    logger.info(f"Cleaned up file: {file_path}")
            except OSError as e:
                logger.warning(f"Failed to cleanup file {file_path}: {e}")


async def write_quote_archive(
    archive_path: Path, snapshot: dict[str, Any], output_dir: Path
) -> Path:
    """Embed a snapshot document into a copy of an archive."""
    async with aiofiles.open(archive_path, "rb") as f:
        archive = await f.read()

    serializer = QuoteSnapshotSerializer(EntityStore(StoreData()), get_settings())
    data = serializer.embed_in_archive(archive, QuoteSnapshot.model_validate(snapshot))

    output_path = output_dir / quote_archive_name(archive_path.name)
    async with aiofiles.open(output_path, "wb") as f:
        await f.write(data)
    return output_path


@celery_app.task
def export_quote_archive(
    archive_path: str, snapshot: dict[str, Any], output_dir: str | None = None
) -> dict[str, Any]:
    """
    Write a `-withQuote` copy of an archive with the quote embedded.

    Args:
        archive_path: Source archive
        snapshot: Quote snapshot document (camelCase keys)
        output_dir: Target directory, defaults to the source's directory

    Returns:
        Dictionary with the written path
    """
    source = Path(archive_path)
    target_dir = Path(output_dir) if output_dir else source.parent

    try:
        output_path = asyncio.run(write_quote_archive(source, snapshot, target_dir))
    except (OSError, SnapshotError, ValueError) as e:
        logger.error(f"Quote export failed for {archive_path}: {e}")
        return {"success": False, "error": str(e)}

    logger.info(f"Quote embedded into {output_path}")
    return {"success": True, "output_path": str(output_path)}
