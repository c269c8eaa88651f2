"""Cost engine: material, electricity, machine, labor and extra costs."""

from print_quote_calculator.models.entities import LaborPhase, LaborTasks, Printer
from print_quote_calculator.models.quote import (
    CostBreakdown,
    DepreciationCost,
    ElectricityCost,
    ExtraCost,
    LaborCostLine,
    MachineCost,
    MaintenanceCostLine,
    MaterialCostLine,
    QuoteRequest,
)
from print_quote_calculator.services.store import EntityStore


def material_cost(quantity_grams: float, price_per_kg: float) -> float:
    """Cost of a quantity in grams at a price per kilogram."""
    return (quantity_grams / 1000) * price_per_kg


def electricity_cost(printer: Printer | None, print_time_hours: float) -> ElectricityCost:
    """Energy cost for the print time only; labor time draws no power."""
    if printer is None or print_time_hours <= 0:
        return ElectricityCost()
    return ElectricityCost(
        applied=True,
        print_time_hours=print_time_hours,
        kw_per_hour=printer.kw_per_hour,
        cost_per_kwh=printer.cost_per_kwh,
        cost=print_time_hours * printer.kw_per_hour * printer.cost_per_kwh,
    )


def machine_cost(printer: Printer | None, print_time_hours: float) -> MachineCost:
    """
    Depreciation plus scheduled maintenance, both amortized linearly per hour.

    Depreciation needs depreciation enabled and a nonzero cost and lifetime.
    Maintenance tasks need a positive cost and interval. Anything else
    contributes zero.
    """
    if printer is None or print_time_hours <= 0:
        return MachineCost()

    depreciation = None
    if (
        printer.include_depreciation is not False
        and printer.cost
        and printer.expected_lifetime_hours
    ):
        per_hour = printer.cost / printer.expected_lifetime_hours
        depreciation = DepreciationCost(
            printer_cost=printer.cost,
            lifetime_hours=printer.expected_lifetime_hours,
            per_hour=per_hour,
            cost=per_hour * print_time_hours,
        )

    maintenance = []
    for task in printer.maintenance_tasks:
        if task.cost > 0 and task.interval_hours > 0:
            per_hour = task.cost / task.interval_hours
            maintenance.append(
                MaintenanceCostLine(
                    name=task.name,
                    task_cost=task.cost,
                    interval_hours=task.interval_hours,
                    per_hour=per_hour,
                    cost=per_hour * print_time_hours,
                )
            )

    depreciation_total = depreciation.cost if depreciation else 0.0
    maintenance_total = sum((line.cost for line in maintenance), 0.0)

    return MachineCost(
        applied=True,
        print_time_hours=print_time_hours,
        depreciation=depreciation,
        maintenance=maintenance,
        depreciation_cost=depreciation_total,
        maintenance_cost=maintenance_total,
        total=depreciation_total + maintenance_total,
    )


def labor_costs(labor_tasks: LaborTasks) -> tuple[list[LaborCostLine], float, float]:
    """
    Labor lines, total labor cost and total processing time.

    Tasks with neither time nor rate are left out of both the sum and the lines.
    """
    lines: list[LaborCostLine] = []
    cost_total = 0.0
    time_total = 0.0
    for phase in LaborPhase:
        for task in labor_tasks.for_phase(phase):
            time = task.time_hours
            rate = task.rate
            if time > 0 or rate > 0:
                cost = time * rate
                time_total += time
                cost_total += cost
                lines.append(
                    LaborCostLine(
                        name=task.name or phase.default_label,
                        phase=phase,
                        time_hours=time,
                        rate=rate,
                        cost=cost,
                    )
                )
    return lines, cost_total, time_total


class CostEngine:
    """Computes every cost component of a quote request against the store."""

    def __init__(self: "CostEngine", store: EntityStore) -> None:
        self.store = store

    def calculate(self: "CostEngine", request: QuoteRequest) -> CostBreakdown:
        with self.store.lock:
            return self._calculate(request)

    def _calculate(self: "CostEngine", request: QuoteRequest) -> CostBreakdown:
        print_time = request.print_time_hours
        printer = self.store.resolve_printer(request.printer_ref)

        materials: list[MaterialCostLine] = []
        materials_total = 0.0
        for line in request.materials:
            filament = self.store.resolve_filament(line.material_ref)
            if filament is None:
                continue
            cost = material_cost(line.quantity_grams, filament.price_per_kg)
            materials_total += cost
            materials.append(
                MaterialCostLine(
                    material_id=filament.id,
                    name=filament.name,
                    quantity_grams=line.quantity_grams,
                    price_per_kg=filament.price_per_kg,
                    cost=cost,
                )
            )

        extras = [ExtraCost(name=c.name, value=c.value) for c in request.extra_costs]
        extras_total = sum((extra.value for extra in extras), 0.0)

        electricity = electricity_cost(printer, print_time)
        machine = machine_cost(printer, print_time)
        labor, labor_total, processing_time = labor_costs(self.store.labor_tasks)

        total = (
            materials_total + extras_total + electricity.cost + machine.total + labor_total
        )

        return CostBreakdown(
            print_time_hours=print_time,
            printer_id=printer.id if printer else None,
            printer_name=printer.name if printer else None,
            materials=materials,
            material_cost=materials_total,
            extra_costs=extras,
            extra_cost=extras_total,
            electricity=electricity,
            machine=machine,
            labor=labor,
            labor_cost=labor_total,
            processing_time_hours=processing_time,
            total_cost=total,
            total_time_hours=print_time + processing_time,
        )
