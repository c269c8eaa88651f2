"""Unit tests for the sliced archive service."""

from collections.abc import Callable
from pathlib import Path

import pytest

from print_quote_calculator.core.config import Settings
from print_quote_calculator.models.quote import QuoteSnapshot
from print_quote_calculator.services.slicer import ArchiveImportError, SlicedArchiveService


class TestSlicedArchiveService:
    """Tests for the SlicedArchiveService class."""

    def test_check_file_name(self, test_settings: Settings):
        service = SlicedArchiveService(test_settings)

        assert service.check_file_name("part.gcode.3mf") is None
        assert "regular .3mf" in service.check_file_name("part.3mf")
        with pytest.raises(ArchiveImportError):
            service.check_file_name("part.stl")

    def test_check_file_name_follows_allowed_extensions(self, test_settings: Settings):
        test_settings.archive.allowed_extensions = [".json"]
        service = SlicedArchiveService(test_settings)

        with pytest.raises(ArchiveImportError):
            service.check_file_name("part.gcode.3mf")

    def test_find_report_prefers_candidates(self, test_settings: Settings):
        service = SlicedArchiveService(test_settings)

        names = ["Metadata/other.gcode", "Metadata/plate_2.gcode", "3D/3dmodel.model"]

        assert service.find_report(names) == "Metadata/plate_2.gcode"
        assert service.find_report(["Metadata/other.gcode"]) == "Metadata/other.gcode"
        assert service.find_report(["3D/3dmodel.model"]) is None

    def test_read_archive_metrics(self, test_settings: Settings, sliced_archive: bytes):
        imported = SlicedArchiveService(test_settings).read_archive(
            sliced_archive, "benchy.gcode.3mf"
        )

        assert imported.snapshot is None
        assert imported.warning is None
        metrics = imported.metrics
        assert (metrics.days, metrics.hours, metrics.minutes) == (0, 2, 31)
        assert metrics.filament_grams == [45.12, 3.61]
        assert metrics.filament_source == "weight"
        assert metrics.report_path == "Metadata/plate_1.gcode"

    def test_embedded_quote_takes_precedence(
        self,
        test_settings: Settings,
        make_archive: Callable[[dict[str, str | bytes]], bytes],
        sample_report: str,
    ):
        snapshot = QuoteSnapshot(calculated={"finalPrice": 8, "totalCost": 5})
        data = make_archive(
            {
                "Metadata/plate_1.gcode": sample_report,
                "Metadata/quote.json": snapshot.model_dump_json(by_alias=True),
            }
        )

        imported = SlicedArchiveService(test_settings).read_archive(data, "a.gcode.3mf")

        assert imported.metrics is None
        assert imported.snapshot.calculated.final_price == 8

    def test_corrupt_quote_falls_back_to_report(
        self,
        test_settings: Settings,
        make_archive: Callable[[dict[str, str | bytes]], bytes],
        sample_report: str,
    ):
        data = make_archive(
            {"Metadata/plate_1.gcode": sample_report, "Metadata/quote.json": "{broken"}
        )

        imported = SlicedArchiveService(test_settings).read_archive(data, "a.gcode.3mf")

        assert imported.snapshot is None
        assert imported.metrics.filament_grams == [45.12, 3.61]

    def test_missing_report(
        self, test_settings: Settings, make_archive: Callable[[dict[str, str | bytes]], bytes]
    ):
        data = make_archive({"3D/3dmodel.model": "<model/>"})

        with pytest.raises(ArchiveImportError, match="G-code file not found"):
            SlicedArchiveService(test_settings).read_archive(data, "a.3mf")

    def test_corrupt_report_entry(
        self,
        test_settings: Settings,
        damaged_archive: Callable[[dict[str, str], str], bytes],
        sample_report: str,
    ):
        data = damaged_archive(
            {"Metadata/plate_1.gcode": sample_report}, "Metadata/plate_1.gcode"
        )

        with pytest.raises(ArchiveImportError, match="Metadata/plate_1.gcode"):
            SlicedArchiveService(test_settings).read_archive(data, "a.gcode.3mf")

    def test_corrupt_quote_entry_falls_back_to_report(
        self,
        test_settings: Settings,
        damaged_archive: Callable[[dict[str, str], str], bytes],
        sample_report: str,
    ):
        quote = QuoteSnapshot(calculated={"finalPrice": 8}).model_dump_json(by_alias=True)
        data = damaged_archive(
            {"Metadata/quote.json": quote, "Metadata/plate_1.gcode": sample_report},
            "Metadata/quote.json",
        )

        imported = SlicedArchiveService(test_settings).read_archive(data, "a.gcode.3mf")

        assert imported.snapshot is None
        assert imported.metrics.filament_grams == [45.12, 3.61]

    def test_not_a_zip(self, test_settings: Settings):
        with pytest.raises(ArchiveImportError):
            SlicedArchiveService(test_settings).read_archive(b"not a zip", "a.gcode.3mf")

    def test_oversize_file(self, test_settings: Settings, sliced_archive: bytes):
        test_settings.archive.max_file_size = 10

        with pytest.raises(ArchiveImportError, match="too large"):
            SlicedArchiveService(test_settings).read_archive(sliced_archive, "a.gcode.3mf")

    @pytest.mark.asyncio
    async def test_import_file(self, test_settings: Settings, sliced_archive: bytes, tmp_path: Path):
        path = tmp_path / "benchy.gcode.3mf"
        path.write_bytes(sliced_archive)

        imported = await SlicedArchiveService(test_settings).import_file(path)

        assert imported.file_name == "benchy.gcode.3mf"
        assert imported.metrics.has_print_time

    @pytest.mark.asyncio
    async def test_import_missing_file(self, test_settings: Settings, tmp_path: Path):
        with pytest.raises(ArchiveImportError):
            await SlicedArchiveService(test_settings).import_file(tmp_path / "gone.gcode.3mf")
