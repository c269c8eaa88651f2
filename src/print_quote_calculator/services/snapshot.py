"""Quote snapshot save/load, as JSON or embedded in a sliced archive."""

import io
import logging
import zipfile
from datetime import datetime, timezone

from pydantic import ValidationError

from print_quote_calculator.core.config import Settings, get_settings
from print_quote_calculator.models.quote import (
    ExtraCost,
    MaterialLine,
    PricingInput,
    PricingMode,
    PrintTime,
    QuoteRequest,
    QuoteResult,
    QuoteSnapshot,
    SnapshotMaterial,
    SnapshotPricing,
    SnapshotPrinter,
    SnapshotPrintTime,
    SnapshotTotals,
)
from print_quote_calculator.services.store import EntityStore

logger = logging.getLogger(__name__)


class SnapshotError(ValueError):
    """Raised when a snapshot document cannot be decoded."""

    pass


def snapshot_file_name(timestamp: datetime | None = None) -> str:
    """`quote_<date>T<hh-mm-ss>.json` for a standalone snapshot."""
    timestamp = timestamp or datetime.now(timezone.utc)
    return f"quote_{timestamp.strftime('%Y-%m-%dT%H-%M-%S')}.json"


def quote_archive_name(file_name: str) -> str:
    """Insert `-withQuote` before the archive's extension."""
    for suffix in (".gcode.3mf", ".3mf"):
        if file_name.endswith(suffix):
            return f"{file_name[: -len(suffix)]}-withQuote{suffix}"
    stem, dot, ext = file_name.rpartition(".")
    if dot and stem:
        return f"{stem}-withQuote.{ext}"
    return f"{file_name}-withQuote.3mf"


class QuoteSnapshotSerializer:
    """Converts between live quote state and self-contained snapshots."""

    def __init__(
        self: "QuoteSnapshotSerializer", store: EntityStore, settings: Settings | None = None
    ) -> None:
        self.store = store
        self.settings = settings or get_settings()

    @property
    def quote_entry(self: "QuoteSnapshotSerializer") -> str:
        return self.settings.archive.quote_entry  # type: ignore[union-attr]

    def save(
        self: "QuoteSnapshotSerializer",
        request: QuoteRequest,
        result: QuoteResult,
        timestamp: datetime | None = None,
    ) -> QuoteSnapshot:
        """Capture a request and its totals; material prices are copied, not referenced."""
        with self.store.lock:
            printer = self.store.resolve_printer(request.printer_ref)
            materials = []
            for line in request.materials:
                filament = self.store.resolve_filament(line.material_ref)
                if filament is None:
                    continue
                materials.append(
                    SnapshotMaterial(
                        material_id=filament.id or filament.name,
                        material_name=filament.name,
                        quantity=line.quantity_grams,
                        price_per_kg=filament.price_per_kg,
                    )
                )
            labor_tasks = self.store.labor_tasks.model_copy(deep=True)

        return QuoteSnapshot(
            timestamp=timestamp or datetime.now(timezone.utc),
            printer=SnapshotPrinter(id=printer.id, name=printer.name) if printer else None,
            print_time=SnapshotPrintTime(
                days=request.print_time.days,
                hours=request.print_time.hours,
                minutes=request.print_time.minutes,
                total_hours=request.print_time_hours,
            ),
            materials=materials,
            extra_costs=[c.model_copy() for c in request.extra_costs],
            labor_tasks=labor_tasks,
            pricing=SnapshotPricing(
                mode=request.pricing.mode.value,
                profit_percent=request.pricing.profit_percent,
                price_per_hour=request.pricing.price_per_hour,
                fixed_price=request.pricing.fixed_price,
            ),
            calculated=SnapshotTotals(
                final_price=result.final_price, total_cost=result.total_cost
            ),
        )

    def load(self: "QuoteSnapshotSerializer", snapshot: QuoteSnapshot) -> QuoteRequest:
        """
        Rebuild a quote request against the current store.

        Materials and the printer are re-resolved; anything no longer in the
        store is dropped. Labor lists in the store are replaced wholesale.
        Saved totals are ignored; the caller recalculates.
        """
        with self.store.lock:
            printer = None
            if snapshot.printer and snapshot.printer.id:
                printer = self.store.resolve_printer(snapshot.printer.id)

            materials = []
            for material in snapshot.materials:
                filament = self.store.resolve_filament(
                    material.material_id
                ) or self.store.resolve_filament(material.material_name)
                if filament is None or material.quantity <= 0:
                    continue
                materials.append(
                    MaterialLine(
                        material_ref=filament.id or filament.name,
                        quantity_grams=material.quantity,
                    )
                )

            if snapshot.labor_tasks is not None:
                self.store.replace_labor_tasks(
                    pre=snapshot.labor_tasks.pre, post=snapshot.labor_tasks.post
                )

        pricing = PricingInput()
        if snapshot.pricing is not None:
            saved = snapshot.pricing
            pricing = PricingInput(
                mode=PricingMode.parse(saved.mode),
                profit_percent=saved.profit_percent or 0.0,
                price_per_hour=saved.price_per_hour or 0.0,
                fixed_price=saved.fixed_price or 0.0,
            )

        return QuoteRequest(
            print_time=PrintTime(
                days=snapshot.print_time.days,
                hours=snapshot.print_time.hours,
                minutes=snapshot.print_time.minutes,
            ),
            printer_ref=printer.id if printer else None,
            materials=materials,
            extra_costs=[
                ExtraCost(name=c.name, value=c.value)
                for c in snapshot.extra_costs
                if c.name and c.value > 0
            ],
            pricing=pricing,
        )

    # -- encoding --------------------------------------------------------

    @staticmethod
    def to_json(snapshot: QuoteSnapshot) -> str:
        return snapshot.model_dump_json(by_alias=True, indent=2)

    @staticmethod
    def from_json(text: str | bytes) -> QuoteSnapshot:
        try:
            return QuoteSnapshot.model_validate_json(text)
        except ValidationError as e:
            raise SnapshotError(f"Invalid quote snapshot: {e}") from e

    def embed_in_archive(
        self: "QuoteSnapshotSerializer", archive: bytes, snapshot: QuoteSnapshot
    ) -> bytes:
        """
        Write the snapshot into an archive under the quote entry.

        Every other entry is copied unchanged, including its compression and
        metadata. An existing quote entry is replaced.
        """
        output = io.BytesIO()
        try:
            with (
                zipfile.ZipFile(io.BytesIO(archive)) as source,
                zipfile.ZipFile(output, "w") as target,
            ):
                target.comment = source.comment
                for info in source.infolist():
                    if info.filename == self.quote_entry:
                        continue
                    target.writestr(info, source.read(info))
                target.writestr(
                    self.quote_entry, self.to_json(snapshot), zipfile.ZIP_DEFLATED
                )
                logger.info(f"Embedded quote into archive as {self.quote_entry}")
        except zipfile.BadZipFile as e:
            raise SnapshotError(f"Not a valid archive: {e}") from e
        return output.getvalue()

    def extract_from_archive(
        self: "QuoteSnapshotSerializer", archive: bytes
    ) -> QuoteSnapshot | None:
        """The embedded snapshot, or None if the archive has none."""
        try:
            with zipfile.ZipFile(io.BytesIO(archive)) as source:
                if self.quote_entry not in source.namelist():
                    return None
                data = source.read(self.quote_entry)
        except zipfile.BadZipFile as e:
            raise SnapshotError(f"Not a valid archive: {e}") from e
        return self.from_json(data)
