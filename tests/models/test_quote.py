"""Unit tests for Pydantic quote models."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from print_quote_calculator.models.quote import (
    ExtraCost,
    MaterialLine,
    PricingInput,
    PricingMode,
    PrintTime,
    QuoteForm,
    QuoteRequest,
    QuoteSnapshot,
)


class TestPricingMode:
    """Tests for PricingMode enum."""

    def test_pricing_mode_values(self):
        assert PricingMode.PROFIT_PERCENT == "profit-percent"
        assert PricingMode.PRICE_PER_HOUR == "price-per-hour"
        assert PricingMode.FIXED_PRICE == "fixed-price"

    @pytest.mark.parametrize("value", ["markup", "", None, 3])
    def test_unknown_mode_defaults_to_profit_percent(self, value):
        assert PricingMode.parse(value) is PricingMode.PROFIT_PERCENT

    def test_parse_accepts_enum_members(self):
        assert PricingMode.parse(PricingMode.FIXED_PRICE) is PricingMode.FIXED_PRICE


class TestPrintTime:
    """Tests for PrintTime normalization."""

    def test_total_hours_is_not_rounded(self):
        print_time = PrintTime(days=1, hours=2, minutes=20)

        assert print_time.total_hours == pytest.approx(26 + 20 / 60)

    def test_raw_text_is_parsed_as_integers(self):
        print_time = PrintTime(days="1", hours="2.9h", minutes="abc")

        assert (print_time.days, print_time.hours, print_time.minutes) == (1, 2, 0)

    def test_total_hours_serialized(self):
        assert PrintTime(hours=3).model_dump()["total_hours"] == 3.0


class TestRequestModels:
    """Tests for normalized request models."""

    def test_material_line_requires_positive_quantity(self):
        with pytest.raises(ValidationError):
            MaterialLine(material_ref="filament-1", quantity_grams=0)

    def test_extra_cost_coerces_value(self):
        extra = ExtraCost(name="Magnets", value="2.5 each")

        assert extra.value == 2.5

    def test_pricing_input_keeps_every_mode_value(self):
        pricing = PricingInput(
            mode="fixed-price", profit_percent="20", price_per_hour="x", fixed_price="45"
        )

        assert pricing.mode is PricingMode.FIXED_PRICE
        assert pricing.profit_percent == 20.0
        assert pricing.price_per_hour == 0.0
        assert pricing.fixed_price == 45.0

    def test_form_from_request(self):
        request = QuoteRequest(
            print_time=PrintTime(days=0, hours=5, minutes=15),
            printer_ref="printer-2",
            materials=[MaterialLine(material_ref="filament-3", quantity_grams=12.5)],
            extra_costs=[ExtraCost(name="Box", value=1.2)],
            pricing=PricingInput(mode=PricingMode.PRICE_PER_HOUR, price_per_hour=4),
        )

        form = QuoteForm.from_request(request)

        assert form.hours == 5
        assert form.minutes == 15
        assert form.printer == "printer-2"
        assert form.materials[0].material == "filament-3"
        assert form.materials[0].quantity == 12.5
        assert form.extra_costs[0].name == "Box"
        assert form.pricing_mode == "price-per-hour"
        assert form.price_per_hour == 4.0


class TestQuoteSnapshot:
    """Tests for the snapshot document shape."""

    def test_camel_case_document(self):
        snapshot = QuoteSnapshot.model_validate(
            {
                "timestamp": "2024-05-01T10:00:00.000Z",
                "printer": {"id": "printer-1", "name": "Ender 3 V3"},
                "printTime": {"days": 0, "hours": 2, "minutes": 30, "totalHours": 2.5},
                "materials": [
                    {
                        "materialId": "filament-1",
                        "materialName": "PLA",
                        "quantity": 40,
                        "pricePerKg": 20,
                    }
                ],
                "extraCosts": [{"name": "Paint", "value": 3}],
                "laborTasks": {"pre": [], "post": [{"name": "Sanding", "hours": 1}]},
                "pricing": {"mode": "profit-percent", "profitPercent": 30},
                "calculated": {"finalPrice": 10.4, "totalCost": 8},
            }
        )

        assert isinstance(snapshot.timestamp, datetime)
        assert snapshot.print_time.total_hours == 2.5
        assert snapshot.materials[0].material_name == "PLA"
        assert snapshot.labor_tasks.post[0].hours == 1.0
        assert snapshot.pricing.profit_percent == 30.0
        assert snapshot.calculated.final_price == 10.4

    def test_partial_document_uses_defaults(self):
        snapshot = QuoteSnapshot.model_validate(
            {"printer": None, "materials": None, "printTime": None}
        )

        assert snapshot.printer is None
        assert snapshot.materials == []
        assert snapshot.print_time.hours == 0
        assert snapshot.labor_tasks is None
        assert snapshot.pricing is None

    @pytest.mark.parametrize("mode", [None, "", "per-gram", 3])
    def test_missing_pricing_mode_reads_as_profit_percent(self, mode):
        snapshot = QuoteSnapshot.model_validate(
            {"pricing": {"mode": mode, "profitPercent": 10}}
        )

        assert snapshot.pricing.mode == "profit-percent"
        assert snapshot.pricing.profit_percent == 10.0

    def test_loose_ids_are_tolerated(self):
        snapshot = QuoteSnapshot.model_validate(
            {
                "printer": {"id": None, "name": 42},
                "materials": [{"materialId": 7, "materialName": None, "quantity": "5"}],
            }
        )

        assert snapshot.printer.id is None
        assert snapshot.printer.name == "42"
        assert snapshot.materials[0].material_id == "7"
        assert snapshot.materials[0].material_name is None

    @pytest.mark.parametrize("timestamp", [None, "yesterday", 1714557600000, ""])
    def test_unreadable_timestamp_becomes_load_time(self, timestamp):
        before = datetime.now(timezone.utc)

        snapshot = QuoteSnapshot.model_validate({"timestamp": timestamp})

        assert snapshot.timestamp >= before

    def test_json_with_null_mode(self):
        snapshot = QuoteSnapshot.model_validate_json(
            '{"printTime": {"hours": 2}, "pricing": {"mode": null, "profitPercent": 10}}'
        )

        assert PricingMode.parse(snapshot.pricing.mode) is PricingMode.PROFIT_PERCENT
        assert snapshot.print_time.hours == 2

    def test_dump_uses_camel_case(self):
        data = QuoteSnapshot().model_dump(by_alias=True)

        assert "printTime" in data
        assert "extraCosts" in data
        assert "finalPrice" in data["calculated"]
