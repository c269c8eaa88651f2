"""Quote session: wires the store, calculator, persistence and import together."""

import logging
from enum import Enum
from pathlib import Path
from typing import Any

import aiofiles
from pydantic import BaseModel

from print_quote_calculator.core.config import Settings, get_settings
from print_quote_calculator.core.presets import currency_symbol, find_currency
from print_quote_calculator.models.entities import (
    Filament,
    LaborPhase,
    LaborTask,
    MaintenanceTask,
    Printer,
)
from print_quote_calculator.models.quote import (
    ExtraCostRow,
    MaterialRow,
    QuoteForm,
    QuoteRequest,
    QuoteResult,
    QuoteSnapshot,
)
from print_quote_calculator.services.breakdown import (
    MathBreakdown,
    build_math_breakdown,
    render_breakdown_text,
)
from print_quote_calculator.services.collector import QuoteInputCollector
from print_quote_calculator.services.persistence import (
    Debouncer,
    PersistenceError,
    StoreRepository,
)
from print_quote_calculator.services.presets import PresetResolver
from print_quote_calculator.services.pricing import PricingService
from print_quote_calculator.services.slicer import (
    ArchiveImport,
    ArchiveImportError,
    PrintMetrics,
    SlicedArchiveService,
)
from print_quote_calculator.services.snapshot import (
    QuoteSnapshotSerializer,
    SnapshotError,
    snapshot_file_name,
)
from print_quote_calculator.services.store import EntityStore, default_data

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    """A message for the user."""

    level: NotificationLevel
    message: str


class QuoteSession:
    """
    One user's working state: the entity store, the quote form and its result.

    Every mutation recalculates the quote, so `result` always reflects the
    current store and form. Store mutations also schedule a debounced save
    when a repository is attached and an event loop is running.
    """

    def __init__(
        self: "QuoteSession",
        store: EntityStore | None = None,
        settings: Settings | None = None,
        repository: StoreRepository | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store or EntityStore(
            default_data(self.settings.default_currency),
            default_labor_rate=self.settings.default_labor_rate,
        )
        self.repository = repository

        self.presets = PresetResolver()
        self.collector = QuoteInputCollector(self.store)
        self.pricing = PricingService(self.store, self.settings)
        self.serializer = QuoteSnapshotSerializer(self.store, self.settings)
        self.archives = SlicedArchiveService(self.settings)

        self.form = QuoteForm()
        self.notifications: list[Notification] = []
        self.unsaved = False
        self._autosave = Debouncer(
            self.save_now,
            self.settings.autosave_delay_seconds,
            on_error=self._on_autosave_error,
        )
        self.request, self.result = self._calculate()

    # -- calculation -------------------------------------------------------

    def _calculate(self: "QuoteSession") -> tuple[QuoteRequest, QuoteResult]:
        with self.store.lock:
            request = self.collector.collect(self.form)
            return request, self.pricing.calculate_quote(request)

    def recalculate(self: "QuoteSession") -> QuoteResult:
        self.request, self.result = self._calculate()
        return self.result

    @property
    def currency_symbol(self: "QuoteSession") -> str:
        return currency_symbol(self.store.currency)

    def math_breakdown(self: "QuoteSession") -> MathBreakdown:
        return build_math_breakdown(self.result.costs, self.currency_symbol)

    def breakdown_text(self: "QuoteSession") -> str:
        return render_breakdown_text(self.math_breakdown(), self.currency_symbol)

    def summary(self: "QuoteSession") -> str:
        return self.pricing.format_cost_summary(self.result)

    # -- notifications -----------------------------------------------------

    def notify(
        self: "QuoteSession",
        message: str,
        level: NotificationLevel = NotificationLevel.INFO,
    ) -> None:
        self.notifications.append(Notification(level=level, message=message))
        if level is NotificationLevel.ERROR:
            logger.error(message)
        elif level is NotificationLevel.WARNING:
            logger.warning(message)
        else:
            logger.info(message)

    # -- store mutations ---------------------------------------------------

    def _store_changed(self: "QuoteSession") -> None:
        self.recalculate()
        self.schedule_save()

    def add_printer(self: "QuoteSession", **fields: Any) -> Printer:
        printer = self.store.create_printer(**fields)
        self._store_changed()
        return printer

    def update_printer(
        self: "QuoteSession", printer_id: str, field: str, value: Any
    ) -> Printer | None:
        printer = self.store.update_printer(printer_id, field, value)
        self._store_changed()
        return printer

    def delete_printer(self: "QuoteSession", printer_id: str) -> bool:
        deleted = self.store.delete_printer(printer_id)
        self._store_changed()
        return deleted

    def add_maintenance_task(self: "QuoteSession", printer_id: str) -> MaintenanceTask | None:
        task = self.store.add_maintenance_task(printer_id)
        self._store_changed()
        return task

    def update_maintenance_task(
        self: "QuoteSession", printer_id: str, index: int, field: str, value: Any
    ) -> MaintenanceTask | None:
        task = self.store.update_maintenance_task(printer_id, index, field, value)
        self._store_changed()
        return task

    def remove_maintenance_task(self: "QuoteSession", printer_id: str, index: int) -> bool:
        removed = self.store.remove_maintenance_task(printer_id, index)
        self._store_changed()
        return removed

    def add_filament(self: "QuoteSession", **fields: Any) -> Filament:
        filament = self.store.create_filament(**fields)
        self._store_changed()
        return filament

    def update_filament(
        self: "QuoteSession", filament_id: str, field: str, value: Any
    ) -> Filament | None:
        filament = self.store.update_filament(filament_id, field, value)
        self._store_changed()
        return filament

    def delete_filament(self: "QuoteSession", filament_id: str) -> bool:
        deleted = self.store.delete_filament(filament_id)
        self._store_changed()
        return deleted

    def add_labor_task(self: "QuoteSession", phase: LaborPhase | str, **fields: Any) -> LaborTask:
        task = self.store.add_labor_task(phase, **fields)
        self._store_changed()
        return task

    def update_labor_task(
        self: "QuoteSession", phase: LaborPhase | str, task_id: str, field: str, value: Any
    ) -> LaborTask | None:
        task = self.store.update_labor_task(phase, task_id, field, value)
        self._store_changed()
        return task

    def remove_labor_task(self: "QuoteSession", phase: LaborPhase | str, task_id: str) -> bool:
        removed = self.store.remove_labor_task(phase, task_id)
        self._store_changed()
        return removed

    def set_currency(self: "QuoteSession", code: str) -> str:
        """Switch the display currency; unknown codes fall back to USD."""
        currency = find_currency(code)
        self.store.set_currency(currency.code)
        self._store_changed()
        return currency.code

    def apply_printer_preset(
        self: "QuoteSession", printer_id: str, preset_name: str
    ) -> Printer | None:
        """Merge a printer model's known values into a printer."""
        fields = self.presets.printer_preset_fields(preset_name)
        with self.store.lock:
            printer = None
            for field, value in fields.items():
                printer = self.store.update_printer(printer_id, field, value)
        if fields:
            self._store_changed()
        return printer

    def apply_region_preset(self: "QuoteSession", printer_id: str, region: str) -> str | None:
        """
        Set a printer's electricity rate from a region.

        Returns the region's currency when it differs from the current one;
        the caller decides whether to call `set_currency`.
        """
        fields, currency = self.presets.region_rate_fields(region)
        if not fields:
            return None
        with self.store.lock:
            for field, value in fields.items():
                self.store.update_printer(printer_id, field, value)
        self._store_changed()
        return currency if currency and currency != self.store.currency else None

    # -- form mutations ----------------------------------------------------

    def update_form(self: "QuoteSession", **fields: Any) -> QuoteResult:
        """Replace raw form fields; the pricing inputs of inactive modes are kept."""
        self.form = QuoteForm.model_validate({**self.form.model_dump(), **fields})
        return self.recalculate()

    def set_print_time(
        self: "QuoteSession", days: Any = 0, hours: Any = 0, minutes: Any = 0
    ) -> QuoteResult:
        return self.update_form(days=days, hours=hours, minutes=minutes)

    def select_printer(self: "QuoteSession", printer_ref: str | None) -> QuoteResult:
        return self.update_form(printer=printer_ref or "")

    def set_pricing_mode(self: "QuoteSession", mode: str) -> QuoteResult:
        return self.update_form(pricing_mode=mode)

    def _first_filament_ref(self: "QuoteSession") -> str:
        with self.store.lock:
            first = self.store.filaments[0] if self.store.filaments else None
            return (first.id or first.name) if first else ""

    def add_material_row(
        self: "QuoteSession", material: str | None = None, quantity: Any = ""
    ) -> QuoteResult:
        """Append a material row; the first filament is selected when none is given."""
        if material is None:
            material = self._first_filament_ref()
        self.form.materials.append(MaterialRow(material=material, quantity=quantity))
        return self.recalculate()

    def update_material_row(self: "QuoteSession", index: int, **fields: Any) -> QuoteResult:
        row = self.form.materials[index]
        self.form.materials[index] = MaterialRow.model_validate({**row.model_dump(), **fields})
        return self.recalculate()

    def remove_material_row(self: "QuoteSession", index: int) -> QuoteResult:
        del self.form.materials[index]
        return self.recalculate()

    def add_extra_cost_row(self: "QuoteSession", name: str = "", value: Any = "") -> QuoteResult:
        self.form.extra_costs.append(ExtraCostRow(name=name, value=value))
        return self.recalculate()

    def update_extra_cost_row(self: "QuoteSession", index: int, **fields: Any) -> QuoteResult:
        row = self.form.extra_costs[index]
        self.form.extra_costs[index] = ExtraCostRow.model_validate({**row.model_dump(), **fields})
        return self.recalculate()

    def remove_extra_cost_row(self: "QuoteSession", index: int) -> QuoteResult:
        del self.form.extra_costs[index]
        return self.recalculate()

    # -- persistence -------------------------------------------------------

    def schedule_save(self: "QuoteSession") -> None:
        """Debounce a save; without a running loop the change stays unsaved."""
        if self.repository is None:
            return
        self.unsaved = True
        try:
            self._autosave.trigger()
        except RuntimeError:
            logger.debug("No running event loop; autosave deferred")

    def _on_autosave_error(self: "QuoteSession", error: Exception) -> None:
        self.notify(f"Autosave failed: {error}", NotificationLevel.ERROR)

    async def save_now(self: "QuoteSession") -> bool:
        """Write the store now; failures are reported, never raised."""
        if self.repository is None:
            return False
        try:
            await self.repository.save(self.store.snapshot())
        except PersistenceError as e:
            self.notify(f"Error saving database: {e}", NotificationLevel.ERROR)
            return False
        self.unsaved = False
        return True

    async def flush(self: "QuoteSession") -> None:
        """Run a pending autosave immediately."""
        await self._autosave.flush()

    def _ensure_repository(self: "QuoteSession") -> StoreRepository:
        if self.repository is None:
            self.repository = StoreRepository(self.settings)
        return self.repository

    async def open_database(self: "QuoteSession", path: Path | str) -> bool:
        """
        Load a database file, replacing the whole store.

        On failure the store and the connected file are left as they were.
        """
        # Pending edits belong to the database being left
        await self.flush()
        repository = self._ensure_repository()
        previous = repository.data_file
        repository.connect(path)
        try:
            data = await repository.load()
        except PersistenceError as e:
            repository.data_file = previous
            self.notify(f"Error opening database: {e}", NotificationLevel.ERROR)
            return False

        self._autosave.cancel()
        self.store.replace(data)
        self.recalculate()
        self.unsaved = False
        self.notify(f"Database loaded: {Path(path).name}", NotificationLevel.SUCCESS)
        return True

    async def create_database(self: "QuoteSession", path: Path | str) -> bool:
        """Write the current store to a new database file and connect to it."""
        repository = self._ensure_repository()
        try:
            await repository.create(path, self.store.snapshot())
        except PersistenceError as e:
            self.notify(f"Error creating database: {e}", NotificationLevel.ERROR)
            return False
        self.unsaved = False
        self.notify(f"Database created: {Path(path).name}", NotificationLevel.SUCCESS)
        return True

    async def restore_cached(self: "QuoteSession") -> bool:
        """Load the local cache, or the starter data when there is none."""
        self._autosave.cancel()
        await self._autosave.wait()
        repository = self._ensure_repository()
        data = await repository.load_cache()
        if data is None:
            self.store.replace(default_data(self.settings.default_currency))
            self.recalculate()
            return False
        self.store.replace(data)
        self.recalculate()
        return True

    # -- quote snapshots ---------------------------------------------------

    def save_quote(self: "QuoteSession") -> QuoteSnapshot:
        return self.serializer.save(self.request, self.result)

    async def save_quote_json(
        self: "QuoteSession", directory: Path | str = "."
    ) -> Path | None:
        """Write the current quote as a standalone snapshot file."""
        snapshot = self.save_quote()
        path = Path(directory) / snapshot_file_name(snapshot.timestamp)
        try:
            async with aiofiles.open(path, "w", encoding="utf-8") as f:
                await f.write(self.serializer.to_json(snapshot))
        except OSError as e:
            self.notify(f"Error saving quote: {e}", NotificationLevel.ERROR)
            return None
        self.notify(f"Quote saved: {path.name}", NotificationLevel.SUCCESS)
        return path

    def load_quote(
        self: "QuoteSession", snapshot: QuoteSnapshot | str | bytes
    ) -> QuoteResult | None:
        """
        Restore a saved quote into the form and recalculate.

        Saved totals are not reused. Returns None if the document is invalid.
        """
        if not isinstance(snapshot, QuoteSnapshot):
            try:
                snapshot = self.serializer.from_json(snapshot)
            except SnapshotError as e:
                self.notify(f"Error loading quote: {e}", NotificationLevel.ERROR)
                return None

        request = self.serializer.load(snapshot)
        self.form = QuoteForm.from_request(request)
        self._store_changed()
        self.notify("Quote loaded", NotificationLevel.SUCCESS)
        return self.result

    async def load_quote_file(self: "QuoteSession", path: Path | str) -> QuoteResult | None:
        """
        Load a quote from a snapshot file or from an archive with an embedded quote.

        Archives go through the archive import, so one without a saved quote
        still fills in its print metrics.
        """
        path = Path(path)
        archive_settings = self.archives.archive_settings
        extension = archive_settings.match_extension(path.name)
        if extension is None:
            allowed = ", ".join(archive_settings.allowed_extensions)
            self.notify(
                f"Unsupported file type. Please use {allowed} files.", NotificationLevel.ERROR
            )
            return None
        if extension.endswith(".3mf"):
            imported = await self.import_archive(path)
            return self.result if imported is not None else None

        try:
            async with aiofiles.open(path, encoding="utf-8") as f:
                text = await f.read()
        except OSError as e:
            self.notify(f"Error loading quote: {e}", NotificationLevel.ERROR)
            return None
        return self.load_quote(text)

    def embed_quote(self: "QuoteSession", archive: bytes) -> bytes:
        """Archive bytes with the current quote embedded."""
        return self.serializer.embed_in_archive(archive, self.save_quote())

    # -- archive import ----------------------------------------------------

    def apply_metrics(self: "QuoteSession", metrics: PrintMetrics) -> QuoteResult:
        """
        Put imported print metrics into the form.

        Material rows are replaced by one row per filament, each preselecting
        the first filament in the store.
        """
        fields: dict[str, Any] = {}
        if metrics.has_print_time:
            fields.update(days=metrics.days, hours=metrics.hours, minutes=metrics.minutes)
        if metrics.filament_source is not None:
            first = self._first_filament_ref()
            fields["materials"] = [
                MaterialRow(material=first, quantity=f"{grams:.2f}")
                for grams in metrics.filament_grams
            ]
        return self.update_form(**fields)

    def import_archive_bytes(
        self: "QuoteSession", data: bytes, file_name: str
    ) -> ArchiveImport | None:
        try:
            imported = self.archives.read_archive(data, file_name)
        except ArchiveImportError as e:
            self.notify(f"Error processing 3MF file: {e}", NotificationLevel.ERROR)
            return None
        return self._apply_import(imported)

    async def import_archive(self: "QuoteSession", path: Path | str) -> ArchiveImport | None:
        """Import a sliced archive; failures leave the quote untouched."""
        try:
            imported = await self.archives.import_file(path)
        except ArchiveImportError as e:
            self.notify(f"Error processing 3MF file: {e}", NotificationLevel.ERROR)
            return None
        return self._apply_import(imported)

    def _apply_import(self: "QuoteSession", imported: ArchiveImport) -> ArchiveImport:
        if imported.warning:
            self.notify(imported.warning, NotificationLevel.WARNING)
        if imported.snapshot is not None:
            self.load_quote(imported.snapshot)
        elif imported.metrics is not None:
            self.apply_metrics(imported.metrics)
            self.notify(
                f"Imported print data from {imported.file_name}", NotificationLevel.SUCCESS
            )
        return imported

    async def close(self: "QuoteSession") -> None:
        """Flush any pending save."""
        await self.flush()
