"""Entity models persisted in the quote database."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from print_quote_calculator.core.numbers import coerce_float


class EntityKind(str, Enum):
    """Kinds of entities with minted ids."""

    PRINTER = "printer"
    FILAMENT = "filament"
    LABOR = "labor"


class LaborPhase(str, Enum):
    """When a labor task happens relative to printing."""

    PRE = "pre"
    POST = "post"

    @property
    def default_label(self: "LaborPhase") -> str:
        return "Pre-processing" if self is LaborPhase.PRE else "Post-processing"


class EntityModel(BaseModel):
    """Base for persisted entities: camelCase on disk, unknown keys kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="allow",
    )


class MaintenanceTask(EntityModel):
    """Recurring cost paid once every `interval_hours` of printing."""

    name: str = ""
    cost: float = 0.0
    interval_hours: float = 1000.0

    @field_validator("cost", "interval_hours", mode="before")
    @classmethod
    def coerce_numbers(cls: type["MaintenanceTask"], v: Any) -> float:
        return coerce_float(v)

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls: type["MaintenanceTask"], v: Any) -> str:
        return "" if v is None else str(v)


class Printer(EntityModel):
    """A printer with its power draw and amortized machine costs."""

    id: str | None = None
    name: str = "New Printer"
    kw_per_hour: float = 0.2
    cost_per_kwh: float = 0.12
    cost: float = 0.0
    expected_lifetime_hours: float = 5000.0
    include_depreciation: bool = True
    maintenance_tasks: list[MaintenanceTask] = Field(default_factory=list)

    @field_validator(
        "kw_per_hour", "cost_per_kwh", "cost", "expected_lifetime_hours", mode="before"
    )
    @classmethod
    def coerce_numbers(cls: type["Printer"], v: Any) -> float:
        return coerce_float(v)

    @field_validator("include_depreciation", mode="before")
    @classmethod
    def default_depreciation_on(cls: type["Printer"], v: Any) -> Any:
        """Only an explicit false switches depreciation off."""
        return True if v is None else v

    @field_validator("maintenance_tasks", mode="before")
    @classmethod
    def default_maintenance(cls: type["Printer"], v: Any) -> Any:
        return [] if v is None else v


class Filament(EntityModel):
    """A print material priced per kilogram."""

    id: str | None = None
    name: str = "New Material"
    price_per_kg: float = 20.0

    @field_validator("price_per_kg", mode="before")
    @classmethod
    def coerce_price(cls: type["Filament"], v: Any) -> float:
        return coerce_float(v)


class LaborTask(EntityModel):
    """A unit of manual work before or after printing."""

    id: str | None = None
    name: str = ""
    hours: float = 0.0
    minutes: float = 0.0
    rate: float = 0.0

    @field_validator("hours", "minutes", "rate", mode="before")
    @classmethod
    def coerce_numbers(cls: type["LaborTask"], v: Any) -> float:
        return coerce_float(v)

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls: type["LaborTask"], v: Any) -> str:
        return "" if v is None else str(v)

    @property
    def time_hours(self: "LaborTask") -> float:
        return self.hours + self.minutes / 60


class LaborTasks(EntityModel):
    """Labor task lists by phase."""

    pre: list[LaborTask] = Field(default_factory=list)
    post: list[LaborTask] = Field(default_factory=list)

    @field_validator("pre", "post", mode="before")
    @classmethod
    def default_list(cls: type["LaborTasks"], v: Any) -> Any:
        return [] if v is None else v

    def for_phase(self: "LaborTasks", phase: LaborPhase) -> list[LaborTask]:
        return self.pre if phase is LaborPhase.PRE else self.post


class StoreData(EntityModel):
    """The persisted database document."""

    currency: str = "USD"
    printers: list[Printer] = Field(default_factory=list)
    filaments: list[Filament] = Field(default_factory=list)
    labor_tasks: LaborTasks = Field(default_factory=LaborTasks)

    @field_validator("printers", "filaments", mode="before")
    @classmethod
    def default_list(cls: type["StoreData"], v: Any) -> Any:
        return [] if v is None else v

    @field_validator("labor_tasks", mode="before")
    @classmethod
    def default_labor(cls: type["StoreData"], v: Any) -> Any:
        return {} if v is None else v

    @field_validator("currency", mode="before")
    @classmethod
    def default_currency(cls: type["StoreData"], v: Any) -> Any:
        return "USD" if not v else v

    def to_document(self: "StoreData") -> dict[str, Any]:
        """Serialize to the on-disk JSON shape."""
        return self.model_dump(mode="json", by_alias=True)
