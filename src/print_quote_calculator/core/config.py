"""Application configuration settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from print_quote_calculator.core.presets import CURRENCIES


class ArchiveImportSettings(BaseModel):
    """Configuration for reading sliced-model archives."""

    # Entry holding an embedded quote snapshot
    quote_entry: str = "Metadata/quote.json"

    # Slicer report lookup order, then any .gcode under report_dir
    report_candidates: list[str] = [
        "Metadata/plate_1.gcode",
        "Metadata/plate_2.gcode",
        "Metadata/plate_3.gcode",
    ]
    report_dir: str = "Metadata/"

    # Used to turn filament length into weight when the report has no weight
    filament_diameter_mm: float = 1.75
    filament_density_g_cm3: float = 1.26

    allowed_extensions: list[str] = [".3mf", ".json"]
    max_file_size: int = 200 * 1024 * 1024  # 200MB

    @field_validator("allowed_extensions")
    @classmethod
    def normalize_extensions(
        cls: type["ArchiveImportSettings"], extensions: list[str]
    ) -> list[str]:
        """Normalize file extensions to lowercase with dots."""
        return [
            ext.lower() if ext.startswith(".") else f".{ext.lower()}"
            for ext in extensions
        ]

    def match_extension(self: "ArchiveImportSettings", file_name: str) -> str | None:
        """The longest allowed extension the file name ends with, if any."""
        lower = file_name.lower()
        matches = [ext for ext in self.allowed_extensions if lower.endswith(ext)]
        return max(matches, key=len, default=None)

    @model_validator(mode="after")
    def validate_filament_geometry(self: "ArchiveImportSettings") -> "ArchiveImportSettings":
        """Diameter and density feed a volume formula and must be positive."""
        if self.filament_diameter_mm <= 0:
            raise ValueError("filament_diameter_mm must be positive")
        if self.filament_density_g_cm3 <= 0:
            raise ValueError("filament_density_g_cm3 must be positive")
        return self


class Settings(BaseSettings):
    """Application settings."""

    # Storage settings
    data_file: Path | None = None
    cache_file: Path = Path(".print_quote_cache.json")
    autosave_delay_seconds: float = 1.0

    # Quote defaults
    default_currency: str = "USD"
    default_labor_rate: float = 20.0

    # Archive import settings
    archive: ArchiveImportSettings | None = None

    # Celery settings
    celery_broker_url: str = "redis://localhost:6379/0"
    celery_result_backend: str = "redis://localhost:6379/0"
    task_always_eager: bool = True  # Run background jobs in-process

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_nested_delimiter="__",
    )

    @model_validator(mode="after")
    def initialize_archive_settings(self: "Settings") -> "Settings":
        """Initialize archive import settings if not already set."""
        if self.archive is None:
            self.archive = ArchiveImportSettings()
        return self

    @field_validator("default_currency")
    @classmethod
    def validate_currency(cls: type["Settings"], code: str) -> str:
        """Currency is a display label and must be a known code."""
        code = code.strip().upper()
        if code not in {currency.code for currency in CURRENCIES}:
            raise ValueError(f"Unknown currency code: {code}")
        return code

    @field_validator("autosave_delay_seconds")
    @classmethod
    def validate_autosave_delay(cls: type["Settings"], delay: float) -> float:
        """Negative delays are treated as immediate saves."""
        return max(delay, 0.0)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
