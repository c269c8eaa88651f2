"""Pricing calculation service."""

from print_quote_calculator.core.config import Settings, get_settings
from print_quote_calculator.core.presets import currency_symbol
from print_quote_calculator.models.quote import (
    PricingInput,
    PricingMode,
    PricingResult,
    QuoteRequest,
    QuoteResult,
)
from print_quote_calculator.services.breakdown import format_currency, format_duration
from print_quote_calculator.services.costs import CostEngine
from print_quote_calculator.services.store import EntityStore


def _margin(final_price: float, total_cost: float) -> float:
    """Markup over cost in percent; zero when there is no cost basis."""
    return ((final_price - total_cost) / total_cost) * 100 if total_cost > 0 else 0.0


def apply_pricing(
    pricing: PricingInput, total_cost: float, print_time_hours: float
) -> PricingResult:
    """
    Derive the sale price for the selected mode.

    profit-percent: cost * (1 + percent / 100); the margin is the percent itself.
    price-per-hour: print hours * rate; margin relative to cost.
    fixed-price: the entered price; margin relative to cost.
    """
    mode = pricing.mode
    if mode is PricingMode.PRICE_PER_HOUR:
        final_price = print_time_hours * pricing.price_per_hour
        return PricingResult(
            mode=mode,
            final_price=final_price,
            profit_margin=_margin(final_price, total_cost),
            price_per_hour=pricing.price_per_hour,
        )

    if mode is PricingMode.FIXED_PRICE:
        final_price = pricing.fixed_price
        profit_margin = _margin(final_price, total_cost)
    else:
        final_price = total_cost * (1 + pricing.profit_percent / 100)
        profit_margin = pricing.profit_percent

    return PricingResult(
        mode=mode,
        final_price=final_price,
        profit_margin=profit_margin,
        price_per_hour=final_price / print_time_hours if print_time_hours > 0 else 0.0,
    )


class PricingService:
    """Service for calculating print costs and prices."""

    def __init__(
        self: "PricingService", store: EntityStore, settings: Settings | None = None
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store
        self.engine = CostEngine(store)

    def calculate_quote(self: "PricingService", request: QuoteRequest) -> QuoteResult:
        """
        Calculate costs and the final price for a quote request.

        Total cost = material + extra + electricity + machine + labor.
        The same inputs always give the same result.

        Args:
            request: Normalized quote request

        Returns:
            QuoteResult with the cost breakdown and pricing
        """
        costs = self.engine.calculate(request)
        pricing = apply_pricing(request.pricing, costs.total_cost, costs.print_time_hours)
        return QuoteResult(costs=costs, pricing=pricing)

    def format_cost_summary(
        self: "PricingService", result: QuoteResult, currency: str | None = None
    ) -> str:
        """Format a quote result for display."""
        symbol = currency_symbol(currency or self.store.currency)
        costs = result.costs

        def money(value: float) -> str:
            return format_currency(value, symbol)

        return f"""Cost Breakdown:
Material: {money(costs.material_cost)}
Extra: {money(costs.extra_cost)}
Electricity: {money(costs.electricity_cost)}
Machine: {money(costs.machine_cost)}
Labor: {money(costs.labor_cost)}
Total Cost: {money(costs.total_cost)}
Final Price: {money(result.final_price)}
Profit Margin: {result.pricing.profit_margin:.1f}%
Price per Hour: {money(result.pricing.price_per_hour)}
Total Time: {format_duration(costs.total_time_hours)}"""
