"""Sliced-archive import: print metrics from an embedded slicer report."""

import io
import logging
import math
import re
import zipfile
import zlib
from pathlib import Path

import aiofiles
from pydantic import BaseModel, Field

from print_quote_calculator.core.config import ArchiveImportSettings, Settings, get_settings
from print_quote_calculator.core.numbers import parse_number, round_half_up
from print_quote_calculator.models.quote import QuoteSnapshot
from print_quote_calculator.services.snapshot import QuoteSnapshotSerializer, SnapshotError

logger = logging.getLogger(__name__)

PRINT_TIME_PATTERN = re.compile(
    r"model printing time:\s*(?:(\d+)d\s*)?(?:(\d+)h\s*)?(?:(\d+)m\s*)?(?:(\d+)s)?",
    re.IGNORECASE,
)
FILAMENT_WEIGHT_PATTERN = re.compile(
    r"total filament weight\s*\[g\]\s*:\s*([\d.,\s]+)", re.IGNORECASE
)
FILAMENT_LENGTH_PATTERN = re.compile(
    r"total filament length\s*\[mm\]\s*:\s*([\d.,\s]+)", re.IGNORECASE
)


class ArchiveImportError(Exception):
    """Custom exception for archive import errors."""

    pass


class PrintMetrics(BaseModel):
    """Print duration and per-filament quantities read from a slicer report."""

    days: int = 0
    hours: int = 0
    minutes: int = 0
    has_print_time: bool = False
    filament_grams: list[float] = Field(default_factory=list)
    filament_source: str | None = None  # "weight" or "length"
    report_path: str | None = None


class ArchiveImport(BaseModel):
    """Outcome of reading an archive: a saved quote, or fresh metrics."""

    file_name: str
    snapshot: QuoteSnapshot | None = None
    metrics: PrintMetrics | None = None
    warning: str | None = None


def _number_list(raw: str) -> list[float]:
    values = (parse_number(part.strip()) for part in raw.split(","))
    return [v for v in values if v is not None and v > 0]


def split_minutes(total_minutes: int) -> tuple[int, int, int]:
    """Minutes to (days, hours, minutes)."""
    days, remainder = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(remainder, 60)
    return days, hours, minutes


def filament_weight_from_length(length_mm: float, diameter_mm: float, density: float) -> float:
    """Grams of filament for a length, from cylinder volume times density."""
    volume_cm3 = math.pi * (diameter_mm / 20) ** 2 * length_mm / 10
    return volume_cm3 * density


def parse_report(text: str, settings: ArchiveImportSettings) -> PrintMetrics:
    """
    Extract metrics from slicer report text.

    Weight lines are preferred; lengths are converted using the configured
    filament diameter and density. Quantities are rounded to 0.01 g.
    """
    metrics = PrintMetrics()

    time_match = PRINT_TIME_PATTERN.search(text)
    if time_match and any(time_match.groups()):
        days, hours, minutes, seconds = (int(g) if g else 0 for g in time_match.groups())
        total_minutes = days * 24 * 60 + hours * 60 + minutes + round_half_up(seconds / 60)
        metrics.days, metrics.hours, metrics.minutes = split_minutes(total_minutes)
        metrics.has_print_time = True

    weight_match = FILAMENT_WEIGHT_PATTERN.search(text)
    length_match = FILAMENT_LENGTH_PATTERN.search(text)
    if weight_match:
        metrics.filament_grams = [round(w, 2) for w in _number_list(weight_match.group(1))]
        metrics.filament_source = "weight"
    elif length_match:
        metrics.filament_grams = [
            round(
                filament_weight_from_length(
                    length,
                    settings.filament_diameter_mm,
                    settings.filament_density_g_cm3,
                ),
                2,
            )
            for length in _number_list(length_match.group(1))
        ]
        metrics.filament_source = "length"

    return metrics


def _read_entry(archive: zipfile.ZipFile, name: str) -> bytes:
    """Read one archive entry; damaged or unreadable entries raise ArchiveImportError."""
    try:
        return archive.read(name)
    except (zipfile.BadZipFile, zlib.error, EOFError) as e:
        raise ArchiveImportError(f"Corrupt entry {name} in archive: {e}") from e
    except (RuntimeError, NotImplementedError) as e:
        # Encrypted entries and unsupported compression methods
        raise ArchiveImportError(f"Cannot read entry {name} in archive: {e}") from e


class SlicedArchiveService:
    """Service for reading sliced-model archives."""

    def __init__(self: "SlicedArchiveService", settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.archive_settings: ArchiveImportSettings = self.settings.archive  # type: ignore[assignment]

    def check_file_name(self: "SlicedArchiveService", file_name: str) -> str | None:
        """
        Validate an archive file name.

        Returns a warning for plain model archives, which usually carry no
        slicer report.

        Raises:
            ArchiveImportError: If the file is not an allowed .3mf archive
        """
        extension = self.archive_settings.match_extension(file_name)
        if extension is None or not extension.endswith(".3mf"):
            raise ArchiveImportError(
                "Only .gcode.3mf files are supported. Please export from your slicer."
            )
        if not file_name.lower().endswith(".gcode.3mf"):
            return (
                "This appears to be a regular .3mf file. "
                "Only .gcode.3mf files contain print data."
            )
        return None

    def find_report(self: "SlicedArchiveService", names: list[str]) -> str | None:
        """Locate the slicer report among archive entries."""
        for candidate in self.archive_settings.report_candidates:
            if candidate in names:
                return candidate
        report_dir = self.archive_settings.report_dir
        return next(
            (n for n in names if n.startswith(report_dir) and n.endswith(".gcode")),
            None,
        )

    def read_archive(self: "SlicedArchiveService", data: bytes, file_name: str) -> ArchiveImport:
        """
        Read a sliced archive.

        An embedded quote snapshot takes precedence over the slicer report.

        Raises:
            ArchiveImportError: If the archive is unusable
        """
        warning = self.check_file_name(file_name)
        if len(data) > self.archive_settings.max_file_size:
            max_mb = self.archive_settings.max_file_size // (1024 * 1024)
            raise ArchiveImportError(f"File too large. Maximum size: {max_mb}MB")

        try:
            archive = zipfile.ZipFile(io.BytesIO(data))
        except zipfile.BadZipFile as e:
            raise ArchiveImportError(f"Not a valid .3mf archive: {e}") from e

        with archive:
            names = archive.namelist()

            quote_entry = self.archive_settings.quote_entry
            if quote_entry in names:
                try:
                    snapshot = QuoteSnapshotSerializer.from_json(
                        _read_entry(archive, quote_entry)
                    )
                    logger.info(f"Loaded embedded quote from {file_name}")
                    return ArchiveImport(file_name=file_name, snapshot=snapshot, warning=warning)
                except (ArchiveImportError, SnapshotError) as e:
                    logger.warning(f"Could not load embedded quote data: {e}")

            report_path = self.find_report(names)
            if report_path is None:
                raise ArchiveImportError(
                    "G-code file not found in .3mf archive. This file may not be a "
                    '.gcode.3mf file. Please export "Plate Slice File" from your slicer.'
                )
            text = _read_entry(archive, report_path).decode("utf-8", errors="replace")

        metrics = parse_report(text, self.archive_settings)
        metrics.report_path = report_path
        logger.info(
            f"Imported {file_name}: {metrics.days}d {metrics.hours}h {metrics.minutes}m, "
            f"{len(metrics.filament_grams)} filament(s)"
        )
        return ArchiveImport(file_name=file_name, metrics=metrics, warning=warning)

    async def import_file(self: "SlicedArchiveService", path: str | Path) -> ArchiveImport:
        """
        Read an archive from disk.

        Raises:
            ArchiveImportError: If the file is missing or unusable
        """
        path = Path(path)
        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except OSError as e:
            raise ArchiveImportError(f"Archive file not readable: {path}") from e
        return self.read_archive(data, path.name)
