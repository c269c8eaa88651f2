"""Core test configuration and fixtures."""

import io
import os
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

# Configure Celery for testing before importing the tasks module
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "True"
os.environ["CELERY_TASK_EAGER_PROPAGATES"] = "True"

from print_quote_calculator.core.config import Settings
from print_quote_calculator.models.entities import Filament, Printer, StoreData
from print_quote_calculator.services.store import EntityStore, default_data

SAMPLE_REPORT = """; HEADER_BLOCK_START
; generated by OrcaSlicer 2.1.1
; model printing time: 2h 30m 40s; total estimated time: 2h 37m 5s
; total layer number: 150
; HEADER_BLOCK_END
G28
; filament used [mm] = 15000.00
; total filament length [mm] : 15000.00,1200.50
; total filament weight [g] : 45.12,3.61
"""


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings isolated from the environment, writing under tmp_path."""
    return Settings(
        cache_file=tmp_path / "cache.json",
        autosave_delay_seconds=0.01,
        _env_file=None,
    )


@pytest.fixture
def store() -> EntityStore:
    """Store seeded with the starter data."""
    return EntityStore(default_data())


@pytest.fixture
def scenario_store() -> EntityStore:
    """A printer and a material with round numbers for hand-checkable costs."""
    return EntityStore(
        StoreData(
            printers=[
                Printer(
                    id="printer-1",
                    name="Bench Printer",
                    kw_per_hour=0.2,
                    cost_per_kwh=0.15,
                    cost=200,
                    expected_lifetime_hours=5000,
                    include_depreciation=True,
                )
            ],
            filaments=[Filament(id="filament-1", name="PLA", price_per_kg=20)],
        )
    )


@pytest.fixture
def sample_report() -> str:
    return SAMPLE_REPORT


@pytest.fixture
def make_archive() -> Callable[[dict[str, str | bytes]], bytes]:
    """Build an in-memory zip archive from a mapping of entry name to content."""

    def _make(entries: dict[str, str | bytes]) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            for name, content in entries.items():
                archive.writestr(name, content)
        return buffer.getvalue()

    return _make


@pytest.fixture
def sliced_archive(make_archive: Callable[[dict[str, str | bytes]], bytes], sample_report: str) -> bytes:
    """A sliced archive with a model, a thumbnail and a slicer report."""
    return make_archive(
        {
            "3D/3dmodel.model": "<model/>",
            "Metadata/plate_1.png": b"\x89PNG\r\n\x1a\n",
            "Metadata/plate_1.gcode": sample_report,
        }
    )


@pytest.fixture
def damaged_archive() -> Callable[[dict[str, str], str], bytes]:
    """Build a stored archive in which one entry fails its CRC check."""

    def _make(entries: dict[str, str], target: str) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_STORED) as archive:
            for name, content in entries.items():
                archive.writestr(name, content)
        data = buffer.getvalue()
        start = data.index(entries[target].encode("utf-8"))
        return data[:start] + bytes([data[start] ^ 0xFF]) + data[start + 1 :]

    return _make
