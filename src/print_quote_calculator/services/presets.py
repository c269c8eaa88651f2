"""Preset lookup for printer models and regional electricity rates."""

from typing import Any

from print_quote_calculator.core.presets import (
    ELECTRICITY_RATES,
    PRINTER_PRESETS,
    PrinterPreset,
    RegionRate,
)


class PresetResolver:
    """Looks up presets and projects their values onto printer fields."""

    def __init__(
        self: "PresetResolver",
        printer_presets: list[PrinterPreset] | None = None,
        region_rates: list[RegionRate] | None = None,
    ) -> None:
        self.printer_presets = PRINTER_PRESETS if printer_presets is None else printer_presets
        self.region_rates = ELECTRICITY_RATES if region_rates is None else region_rates

    def resolve_printer_preset(self: "PresetResolver", name: str) -> PrinterPreset | None:
        return next((p for p in self.printer_presets if p.name == name), None)

    def resolve_region_rate(self: "PresetResolver", region: str) -> RegionRate | None:
        return next((r for r in self.region_rates if r.region == region), None)

    def printer_preset_fields(self: "PresetResolver", name: str) -> dict[str, Any]:
        """
        Printer field values to merge for a preset.

        Each of power, cost and lifetime is merged on its own; a null value
        leaves the printer's field untouched. A preset with no values at all
        (the freeform entry) merges nothing, not even its name.
        """
        preset = self.resolve_printer_preset(name)
        if preset is None:
            return {}

        fields: dict[str, Any] = {}
        if preset.power is not None:
            fields["kw_per_hour"] = preset.power
        if preset.cost is not None:
            fields["cost"] = preset.cost
        if preset.lifetime is not None:
            fields["expected_lifetime_hours"] = preset.lifetime
        if fields:
            fields = {"name": preset.name, **fields}
        return fields

    def region_rate_fields(
        self: "PresetResolver", region: str
    ) -> tuple[dict[str, Any], str | None]:
        """
        Printer field values for a region, plus the currency it proposes.

        The caller decides whether to switch to the proposed currency.
        """
        rate = self.resolve_region_rate(region)
        if rate is None or rate.rate is None:
            return {}, None
        return {"cost_per_kwh": rate.rate}, rate.currency
