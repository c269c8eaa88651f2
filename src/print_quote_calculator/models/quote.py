"""Quote-related data models."""

import contextlib
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from print_quote_calculator.core.numbers import coerce_float, coerce_int
from print_quote_calculator.models.entities import LaborPhase, LaborTasks

RawValue = str | int | float | None


class PricingMode(str, Enum):
    """Strategies for turning total cost into a sale price."""

    PROFIT_PERCENT = "profit-percent"
    PRICE_PER_HOUR = "price-per-hour"
    FIXED_PRICE = "fixed-price"

    @classmethod
    def parse(cls: type["PricingMode"], value: Any) -> "PricingMode":
        """Parse a mode, defaulting to profit-percent for unknown values."""
        try:
            return cls(getattr(value, "value", value))
        except ValueError:
            return cls.PROFIT_PERCENT


# ---------------------------------------------------------------------------
# Raw form state
# ---------------------------------------------------------------------------


class MaterialRow(BaseModel):
    """A material row as entered: selected material and quantity text."""

    material: str = ""
    quantity: RawValue = ""


class ExtraCostRow(BaseModel):
    """An extra cost row as entered."""

    name: str = ""
    value: RawValue = ""


class QuoteForm(BaseModel):
    """Raw quote inputs; every field may hold unparsed text."""

    days: RawValue = 0
    hours: RawValue = 0
    minutes: RawValue = 0
    printer: str = ""
    materials: list[MaterialRow] = Field(default_factory=list)
    extra_costs: list[ExtraCostRow] = Field(default_factory=list)

    # Each mode keeps its own input while another mode is active
    pricing_mode: str = PricingMode.PROFIT_PERCENT.value
    profit_percent: RawValue = 0
    price_per_hour: RawValue = 0
    fixed_price: RawValue = 0

    @classmethod
    def from_request(cls: type["QuoteForm"], request: "QuoteRequest") -> "QuoteForm":
        """Build form state that collects back into the same request."""
        return cls(
            days=request.print_time.days,
            hours=request.print_time.hours,
            minutes=request.print_time.minutes,
            printer=request.printer_ref or "",
            materials=[
                MaterialRow(material=line.material_ref, quantity=line.quantity_grams)
                for line in request.materials
            ],
            extra_costs=[
                ExtraCostRow(name=cost.name, value=cost.value)
                for cost in request.extra_costs
            ],
            pricing_mode=request.pricing.mode.value,
            profit_percent=request.pricing.profit_percent,
            price_per_hour=request.pricing.price_per_hour,
            fixed_price=request.pricing.fixed_price,
        )


# ---------------------------------------------------------------------------
# Normalized request
# ---------------------------------------------------------------------------


class PrintTime(BaseModel):
    """Print duration as entered in days, hours and minutes."""

    days: int = 0
    hours: int = 0
    minutes: int = 0

    @field_validator("days", "hours", "minutes", mode="before")
    @classmethod
    def coerce_numbers(cls: type["PrintTime"], v: Any) -> int:
        return coerce_int(v)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_hours(self: "PrintTime") -> float:
        """Collapse to hours; no rounding."""
        return self.days * 24 + self.hours + self.minutes / 60


class MaterialLine(BaseModel):
    """A material reference (id or legacy name) and its quantity."""

    material_ref: str
    quantity_grams: float = Field(..., gt=0)


class ExtraCost(BaseModel):
    """A named flat cost added to the quote."""

    name: str = ""
    value: float = 0.0

    @field_validator("value", mode="before")
    @classmethod
    def coerce_value(cls: type["ExtraCost"], v: Any) -> float:
        return coerce_float(v)

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls: type["ExtraCost"], v: Any) -> str:
        return "" if v is None else str(v)


class PricingInput(BaseModel):
    """Selected pricing mode plus the stored input of every mode."""

    mode: PricingMode = PricingMode.PROFIT_PERCENT
    profit_percent: float = 0.0
    price_per_hour: float = 0.0
    fixed_price: float = 0.0

    @field_validator("mode", mode="before")
    @classmethod
    def parse_mode(cls: type["PricingInput"], v: Any) -> PricingMode:
        return PricingMode.parse(v)

    @field_validator("profit_percent", "price_per_hour", "fixed_price", mode="before")
    @classmethod
    def coerce_numbers(cls: type["PricingInput"], v: Any) -> float:
        return coerce_float(v)


class QuoteRequest(BaseModel):
    """Normalized inputs for one calculation."""

    print_time: PrintTime = Field(default_factory=PrintTime)
    printer_ref: str | None = None
    materials: list[MaterialLine] = Field(default_factory=list)
    extra_costs: list[ExtraCost] = Field(default_factory=list)
    pricing: PricingInput = Field(default_factory=PricingInput)

    @property
    def print_time_hours(self: "QuoteRequest") -> float:
        return self.print_time.total_hours


# ---------------------------------------------------------------------------
# Computed costs
# ---------------------------------------------------------------------------


class MaterialCostLine(BaseModel):
    """Cost of one material line item."""

    material_id: str | None
    name: str
    quantity_grams: float
    price_per_kg: float
    cost: float


class ElectricityCost(BaseModel):
    """Energy used while printing."""

    applied: bool = False
    print_time_hours: float = 0.0
    kw_per_hour: float = 0.0
    cost_per_kwh: float = 0.0
    cost: float = 0.0


class DepreciationCost(BaseModel):
    """Linear write-off of the printer purchase price."""

    printer_cost: float
    lifetime_hours: float
    per_hour: float
    cost: float


class MaintenanceCostLine(BaseModel):
    """Amortized share of one maintenance task."""

    name: str
    task_cost: float
    interval_hours: float
    per_hour: float
    cost: float


class MachineCost(BaseModel):
    """Depreciation plus maintenance."""

    applied: bool = False
    print_time_hours: float = 0.0
    depreciation: DepreciationCost | None = None
    maintenance: list[MaintenanceCostLine] = Field(default_factory=list)
    depreciation_cost: float = 0.0
    maintenance_cost: float = 0.0
    total: float = 0.0


class LaborCostLine(BaseModel):
    """Cost of one labor task with time or rate."""

    name: str
    phase: LaborPhase
    time_hours: float
    rate: float
    cost: float


class CostBreakdown(BaseModel):
    """Every intermediate value of a calculation, shared by display and math."""

    print_time_hours: float = 0.0
    printer_id: str | None = None
    printer_name: str | None = None

    materials: list[MaterialCostLine] = Field(default_factory=list)
    material_cost: float = 0.0

    extra_costs: list[ExtraCost] = Field(default_factory=list)
    extra_cost: float = 0.0

    electricity: ElectricityCost = Field(default_factory=ElectricityCost)
    machine: MachineCost = Field(default_factory=MachineCost)

    labor: list[LaborCostLine] = Field(default_factory=list)
    labor_cost: float = 0.0
    processing_time_hours: float = 0.0

    total_cost: float = 0.0
    total_time_hours: float = 0.0

    @property
    def electricity_cost(self: "CostBreakdown") -> float:
        return self.electricity.cost

    @property
    def machine_cost(self: "CostBreakdown") -> float:
        return self.machine.total


class PricingResult(BaseModel):
    """Sale price and derived figures."""

    mode: PricingMode
    final_price: float
    profit_margin: float
    price_per_hour: float


class QuoteResult(BaseModel):
    """Costs and price for one request."""

    costs: CostBreakdown
    pricing: PricingResult

    @property
    def total_cost(self: "QuoteResult") -> float:
        return self.costs.total_cost

    @property
    def final_price(self: "QuoteResult") -> float:
        return self.pricing.final_price


# ---------------------------------------------------------------------------
# Persisted snapshot
# ---------------------------------------------------------------------------


class SnapshotModel(BaseModel):
    """camelCase on disk, tolerant of missing and extra keys."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


def _optional_text(v: Any) -> str | None:
    """Numbers become text; null and structured values become None."""
    if isinstance(v, bool) or not isinstance(v, (str, int, float)):
        return None
    return str(v)


class SnapshotPrinter(SnapshotModel):
    id: str | None = None
    name: str | None = None

    @field_validator("id", "name", mode="before")
    @classmethod
    def coerce_text(cls: type["SnapshotPrinter"], v: Any) -> str | None:
        return _optional_text(v)


class SnapshotPrintTime(SnapshotModel):
    days: int = 0
    hours: int = 0
    minutes: int = 0
    total_hours: float = 0.0

    @field_validator("days", "hours", "minutes", mode="before")
    @classmethod
    def coerce_parts(cls: type["SnapshotPrintTime"], v: Any) -> int:
        return coerce_int(v)

    @field_validator("total_hours", mode="before")
    @classmethod
    def coerce_total(cls: type["SnapshotPrintTime"], v: Any) -> float:
        return coerce_float(v)


class SnapshotMaterial(SnapshotModel):
    """A material with its price captured at save time."""

    material_id: str | None = None
    material_name: str | None = None
    quantity: float = 0.0
    price_per_kg: float = 0.0

    @field_validator("quantity", "price_per_kg", mode="before")
    @classmethod
    def coerce_numbers(cls: type["SnapshotMaterial"], v: Any) -> float:
        return coerce_float(v)

    @field_validator("material_id", "material_name", mode="before")
    @classmethod
    def coerce_text(cls: type["SnapshotMaterial"], v: Any) -> str | None:
        return _optional_text(v)


class SnapshotPricing(SnapshotModel):
    mode: str = PricingMode.PROFIT_PERCENT.value
    profit_percent: float | None = None
    price_per_hour: float | None = None
    fixed_price: float | None = None

    @field_validator("mode", mode="before")
    @classmethod
    def parse_mode(cls: type["SnapshotPricing"], v: Any) -> str:
        """Missing or unknown modes read as profit-percent."""
        return PricingMode.parse(v).value

    @field_validator("profit_percent", "price_per_hour", "fixed_price", mode="before")
    @classmethod
    def coerce_numbers(cls: type["SnapshotPricing"], v: Any) -> float | None:
        return None if v is None else coerce_float(v)


class SnapshotTotals(SnapshotModel):
    """Totals at save time; historical record only."""

    final_price: float = 0.0
    total_cost: float = 0.0


class QuoteSnapshot(SnapshotModel):
    """A self-contained record of one computed quote."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    printer: SnapshotPrinter | None = None
    print_time: SnapshotPrintTime = Field(default_factory=SnapshotPrintTime)
    materials: list[SnapshotMaterial] = Field(default_factory=list)
    extra_costs: list[ExtraCost] = Field(default_factory=list)
    labor_tasks: LaborTasks | None = None
    pricing: SnapshotPricing | None = None
    calculated: SnapshotTotals = Field(default_factory=SnapshotTotals)

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_timestamp(cls: type["QuoteSnapshot"], v: Any) -> datetime:
        """Unreadable timestamps become the load time."""
        if isinstance(v, datetime):
            return v
        if isinstance(v, str):
            with contextlib.suppress(ValueError):
                return datetime.fromisoformat(v.strip())
        return datetime.now(timezone.utc)

    @field_validator("materials", "extra_costs", mode="before")
    @classmethod
    def default_list(cls: type["QuoteSnapshot"], v: Any) -> Any:
        return [] if v is None else v

    @field_validator("print_time", "calculated", mode="before")
    @classmethod
    def default_block(cls: type["QuoteSnapshot"], v: Any) -> Any:
        return {} if v is None else v
