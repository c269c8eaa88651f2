"""Line-by-line derivations of each cost component."""

import math
from enum import Enum

from pydantic import BaseModel, Field

from print_quote_calculator.models.quote import CostBreakdown


class CostComponent(str, Enum):
    """Cost components with a derivation."""

    MATERIAL = "material"
    EXTRA = "extra"
    ELECTRICITY = "electricity"
    MACHINE = "machine"
    LABOR = "labor"


class MathLine(BaseModel):
    """One step of a derivation."""

    label: str
    expression: str = ""
    result: float | None = None
    is_total: bool = False


class ComponentMath(BaseModel):
    """Derivation of one component; `has_data` is false for placeholder lines."""

    component: CostComponent
    has_data: bool
    lines: list[MathLine] = Field(default_factory=list)
    total: float = 0.0


class MathBreakdown(BaseModel):
    """Derivations for every component, in display order."""

    components: list[ComponentMath]

    def get(self: "MathBreakdown", component: CostComponent) -> ComponentMath:
        return next(c for c in self.components if c.component == component)


def format_currency(value: float, symbol: str = "$") -> str:
    return f"{symbol}{value:.2f}"


def format_duration(hours: float) -> str:
    """Hours as `<h>h <m>m`."""
    whole = math.floor(hours)
    minutes = math.floor((hours - whole) * 60 + 0.5)
    return f"{whole}h {minutes}m"


def format_number(value: float) -> str:
    """Shortest plain rendering: 100.0 -> '100', 0.150 -> '0.15'."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.6f}".rstrip("0").rstrip(".")


def _no_data(component: CostComponent, message: str) -> ComponentMath:
    return ComponentMath(component=component, has_data=False, lines=[MathLine(label=message)])


def _material_math(costs: CostBreakdown, symbol: str) -> ComponentMath:
    if not costs.materials:
        return _no_data(CostComponent.MATERIAL, "No materials added")
    lines = [
        MathLine(
            label=line.name,
            expression=(
                f"{format_number(line.quantity_grams)}g ÷ 1000 × "
                f"{symbol}{format_number(line.price_per_kg)}/kg"
            ),
            result=line.cost,
        )
        for line in costs.materials
    ]
    lines.append(MathLine(label="Total Material", result=costs.material_cost, is_total=True))
    return ComponentMath(
        component=CostComponent.MATERIAL, has_data=True, lines=lines, total=costs.material_cost
    )


def _extra_math(costs: CostBreakdown) -> ComponentMath:
    if not costs.extra_costs:
        return _no_data(CostComponent.EXTRA, "No extra costs")
    lines = [MathLine(label=extra.name, result=extra.value) for extra in costs.extra_costs]
    lines.append(MathLine(label="Total Extra", result=costs.extra_cost, is_total=True))
    return ComponentMath(
        component=CostComponent.EXTRA, has_data=True, lines=lines, total=costs.extra_cost
    )


def _electricity_math(costs: CostBreakdown, symbol: str) -> ComponentMath:
    electricity = costs.electricity
    if not electricity.applied:
        return _no_data(CostComponent.ELECTRICITY, "Select a printer")
    hours = f"{electricity.print_time_hours:.2f}"
    kw = format_number(electricity.kw_per_hour)
    rate = format_number(electricity.cost_per_kwh)
    lines = [
        MathLine(label="Print Time", expression=f"{hours} hours"),
        MathLine(label="Power", expression=f"{kw} kW"),
        MathLine(label="Rate", expression=f"{symbol}{rate}/kWh"),
        MathLine(
            label="Total Electricity",
            expression=f"{hours}h × {kw}kW × {symbol}{rate}",
            result=electricity.cost,
            is_total=True,
        ),
    ]
    return ComponentMath(
        component=CostComponent.ELECTRICITY, has_data=True, lines=lines, total=electricity.cost
    )


def _machine_math(costs: CostBreakdown, symbol: str) -> ComponentMath:
    machine = costs.machine
    if not machine.applied:
        return _no_data(CostComponent.MACHINE, "Select a printer")

    hours = f"{machine.print_time_hours:.2f}h"
    lines = []
    if machine.depreciation:
        dep = machine.depreciation
        lines.append(
            MathLine(
                label="Depreciation",
                expression=(
                    f"{format_currency(dep.printer_cost, symbol)} ÷ "
                    f"{dep.lifetime_hours:,.0f}h × {hours}"
                ),
                result=dep.cost,
            )
        )
    for task in machine.maintenance:
        lines.append(
            MathLine(
                label=task.name or "Maintenance",
                expression=(
                    f"{format_currency(task.task_cost, symbol)} ÷ "
                    f"{format_number(task.interval_hours)}h × {hours}"
                ),
                result=task.cost,
            )
        )
    if not lines:
        return _no_data(CostComponent.MACHINE, "Machine costs disabled")

    lines.append(MathLine(label="Total Machine Cost", result=machine.total, is_total=True))
    return ComponentMath(
        component=CostComponent.MACHINE, has_data=True, lines=lines, total=machine.total
    )


def _labor_math(costs: CostBreakdown, symbol: str) -> ComponentMath:
    if not costs.labor:
        return _no_data(CostComponent.LABOR, "No labor tasks with time")
    lines = [
        MathLine(
            label=task.name,
            expression=f"{task.time_hours:.2f}h × {format_currency(task.rate, symbol)}",
            result=task.cost,
        )
        for task in costs.labor
    ]
    lines.append(MathLine(label="Total Labor", result=costs.labor_cost, is_total=True))
    return ComponentMath(
        component=CostComponent.LABOR, has_data=True, lines=lines, total=costs.labor_cost
    )


def build_math_breakdown(costs: CostBreakdown, symbol: str = "$") -> MathBreakdown:
    """Explain a computed breakdown; reads the engine's values, never recomputes them."""
    return MathBreakdown(
        components=[
            _material_math(costs, symbol),
            _extra_math(costs),
            _electricity_math(costs, symbol),
            _machine_math(costs, symbol),
            _labor_math(costs, symbol),
        ]
    )


def render_breakdown_text(breakdown: MathBreakdown, symbol: str = "$") -> str:
    """Plain-text rendering of a math breakdown."""
    out = []
    for component in breakdown.components:
        out.append(f"[{component.component.value}]")
        for line in component.lines:
            text = f"  {line.label}"
            if line.expression:
                text += f": {line.expression}"
            if line.result is not None:
                prefix = " = " if line.expression else ": "
                text += f"{prefix}{format_currency(line.result, symbol)}"
            out.append(text)
    return "\n".join(out)
