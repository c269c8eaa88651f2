"""Unit tests for the quote input collector."""

import pytest

from print_quote_calculator.models.quote import (
    ExtraCostRow,
    MaterialRow,
    PricingMode,
    QuoteForm,
)
from print_quote_calculator.services.collector import QuoteInputCollector
from print_quote_calculator.services.store import EntityStore


class TestQuoteInputCollector:
    """Tests for turning raw form state into a request."""

    def test_print_time_from_raw_text(self, store: EntityStore):
        request = QuoteInputCollector(store).collect(
            QuoteForm(days="1", hours="2", minutes="30")
        )

        assert request.print_time_hours == pytest.approx(26.5)

    def test_non_numeric_fields_become_zero(self, store: EntityStore):
        request = QuoteInputCollector(store).collect(
            QuoteForm(days="", hours="soon", minutes=None, profit_percent="lots")
        )

        assert request.print_time_hours == 0
        assert request.pricing.profit_percent == 0.0

    def test_material_rows_filtered(self, store: EntityStore):
        form = QuoteForm(
            materials=[
                MaterialRow(material="filament-1", quantity="100"),
                MaterialRow(material="", quantity="50"),
                MaterialRow(material="filament-2", quantity="0"),
                MaterialRow(material="filament-2", quantity="abc"),
                MaterialRow(material="filament-99", quantity="10"),
                MaterialRow(material="PETG", quantity="12.5g"),
            ]
        )

        request = QuoteInputCollector(store).collect(form)

        assert [(m.material_ref, m.quantity_grams) for m in request.materials] == [
            ("filament-1", 100.0),
            ("filament-3", 12.5),
        ]

    def test_extra_costs_need_name_and_positive_value(self, store: EntityStore):
        form = QuoteForm(
            extra_costs=[
                ExtraCostRow(name="Packaging", value="1.50"),
                ExtraCostRow(name="", value="3"),
                ExtraCostRow(name="Free", value="0"),
                ExtraCostRow(name="Refund", value="-2"),
            ]
        )

        request = QuoteInputCollector(store).collect(form)

        assert [(c.name, c.value) for c in request.extra_costs] == [("Packaging", 1.5)]

    def test_printer_selection(self, store: EntityStore):
        collector = QuoteInputCollector(store)

        assert collector.collect(QuoteForm(printer="printer-1")).printer_ref == "printer-1"
        assert collector.collect(QuoteForm(printer="")).printer_ref is None

    def test_unknown_pricing_mode(self, store: EntityStore):
        request = QuoteInputCollector(store).collect(QuoteForm(pricing_mode="discount"))

        assert request.pricing.mode is PricingMode.PROFIT_PERCENT
