"""File-backed persistence for the quote database."""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

import aiofiles
import aiofiles.os
from pydantic import ValidationError

from print_quote_calculator.core.config import Settings, get_settings
from print_quote_calculator.models.entities import StoreData

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when the database cannot be read or written."""

    pass


class StoreRepository:
    """
    Reads and writes the database document.

    The connected database file is the user's copy; the cache file mirrors
    every save so the last state survives a lost or unwritable database.
    """

    def __init__(
        self: "StoreRepository", settings: Settings | None = None, data_file: Path | None = None
    ) -> None:
        self.settings = settings or get_settings()
        self.data_file = data_file or self.settings.data_file
        self.cache_file = self.settings.cache_file

    @property
    def is_connected(self: "StoreRepository") -> bool:
        return self.data_file is not None

    def connect(self: "StoreRepository", path: Path | str) -> None:
        self.data_file = Path(path)

    def disconnect(self: "StoreRepository") -> None:
        self.data_file = None

    async def _read(self: "StoreRepository", path: Path) -> StoreData:
        try:
            async with aiofiles.open(path, encoding="utf-8") as f:
                text = await f.read()
        except OSError as e:
            raise PersistenceError(f"Failed to read {path}: {e}") from e

        try:
            return StoreData.model_validate_json(text)
        except ValidationError as e:
            raise PersistenceError(f"Malformed database document {path}: {e}") from e

    async def _write(
        self: "StoreRepository", path: Path, data: StoreData, indent: int | None = 2
    ) -> None:
        payload = data.model_dump_json(by_alias=True, indent=indent)
        tmp_path = path.with_name(f"{path.name}.tmp")
        try:
            if path.parent != Path("."):
                await aiofiles.os.makedirs(path.parent, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp_path, path)
        except OSError as e:
            with contextlib.suppress(OSError):
                await aiofiles.os.remove(tmp_path)
            raise PersistenceError(f"Failed to write {path}: {e}") from e

    async def load(self: "StoreRepository") -> StoreData:
        """Load the connected database file."""
        if self.data_file is None:
            raise PersistenceError("No database file connected")
        data = await self._read(self.data_file)
        logger.info(f"Loaded database from {self.data_file}")
        return data

    async def load_cache(self: "StoreRepository") -> StoreData | None:
        """Load the cached copy, or None if there is no usable cache."""
        if not await aiofiles.os.path.exists(self.cache_file):
            return None
        try:
            return await self._read(self.cache_file)
        except PersistenceError as e:
            logger.warning(f"Ignoring unreadable cache: {e}")
            return None

    async def create(self: "StoreRepository", path: Path | str, data: StoreData) -> None:
        """Write a new database file and connect to it."""
        path = Path(path)
        await self._write(path, data)
        self.connect(path)
        await self._write(self.cache_file, data, indent=None)
        logger.info(f"Created database at {path}")

    async def save(self: "StoreRepository", data: StoreData) -> None:
        """
        Save to the connected file and the cache.

        The cache is written even when the database write fails, so it stays
        the fallback of record.
        """
        error: PersistenceError | None = None
        if self.data_file is not None:
            try:
                await self._write(self.data_file, data)
            except PersistenceError as e:
                logger.error(f"Database save failed: {e}")
                error = e

        await self._write(self.cache_file, data, indent=None)
        if error is not None:
            raise error


class Debouncer:
    """
    Coalesces bursts of calls into one call after a quiet period.

    Each `trigger()` drops a call that is still waiting and starts the wait
    again. A call that has started always runs to completion, and calls never
    overlap.
    """

    def __init__(
        self: "Debouncer",
        func: Callable[[], Awaitable[None]],
        delay: float,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self.func = func
        self.delay = delay
        self.on_error = on_error
        self._task: asyncio.Task[None] | None = None
        self._running: set[asyncio.Task[None]] = set()
        self._lock = asyncio.Lock()

    @property
    def pending(self: "Debouncer") -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self: "Debouncer") -> None:
        """Schedule the call; requires a running event loop."""
        loop = asyncio.get_running_loop()
        self.cancel()
        self._task = loop.create_task(self._run_later())

    def cancel(self: "Debouncer") -> None:
        """Drop a waiting call; one already running is left to finish."""
        if self.pending and self._task not in self._running:
            self._task.cancel()  # type: ignore[union-attr]
        self._task = None

    async def wait(self: "Debouncer") -> None:
        """Wait for calls already in progress."""
        if self._running:
            await asyncio.gather(*self._running)

    async def flush(self: "Debouncer") -> None:
        """Run a waiting call now, then wait for any call in progress."""
        if self.pending and self._task not in self._running:
            self.cancel()
            await self._run()
        await self.wait()

    async def _run_later(self: "Debouncer") -> None:
        await asyncio.sleep(self.delay)
        task = asyncio.current_task()
        self._running.add(task)  # type: ignore[arg-type]
        try:
            await self._run()
        finally:
            self._running.discard(task)  # type: ignore[arg-type]

    async def _run(self: "Debouncer") -> None:
        async with self._lock:
            try:
                await self.func()
            except Exception as e:
                if self.on_error is None:
                    raise
                self.on_error(e)
