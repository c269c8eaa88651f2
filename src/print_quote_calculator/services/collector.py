"""Builds normalized quote requests from raw form state."""

from print_quote_calculator.core.numbers import coerce_float
from print_quote_calculator.models.quote import (
    ExtraCost,
    MaterialLine,
    PricingInput,
    PrintTime,
    QuoteForm,
    QuoteRequest,
)
from print_quote_calculator.services.store import EntityStore


class QuoteInputCollector:
    """Turns raw quote inputs into a `QuoteRequest`. Never raises on bad text."""

    def __init__(self: "QuoteInputCollector", store: EntityStore) -> None:
        self.store = store

    def collect(self: "QuoteInputCollector", form: QuoteForm) -> QuoteRequest:
        with self.store.lock:
            return QuoteRequest(
                print_time=PrintTime(days=form.days, hours=form.hours, minutes=form.minutes),
                printer_ref=form.printer or None,
                materials=self._collect_materials(form),
                extra_costs=self._collect_extra_costs(form),
                pricing=PricingInput(
                    mode=form.pricing_mode,
                    profit_percent=form.profit_percent,
                    price_per_hour=form.price_per_hour,
                    fixed_price=form.fixed_price,
                ),
            )

    def _collect_materials(self: "QuoteInputCollector", form: QuoteForm) -> list[MaterialLine]:
        lines = []
        for row in form.materials:
            quantity = coerce_float(row.quantity)
            if not row.material or quantity <= 0:
                continue
            # Rows pointing at deleted materials are dropped, not errors
            filament = self.store.resolve_filament(row.material)
            if filament is None:
                continue
            lines.append(
                MaterialLine(
                    material_ref=filament.id or filament.name,
                    quantity_grams=quantity,
                )
            )
        return lines

    def _collect_extra_costs(self: "QuoteInputCollector", form: QuoteForm) -> list[ExtraCost]:
        costs = []
        for row in form.extra_costs:
            value = coerce_float(row.value)
            if row.name and value > 0:
                costs.append(ExtraCost(name=row.name, value=value))
        return costs
