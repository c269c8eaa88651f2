"""Static reference data: printer models, electricity rates and currencies."""

from pydantic import BaseModel


class PrinterPreset(BaseModel):
    """A known printer model; null values mark a freeform entry."""

    name: str
    brand: str
    power: float | None  # kW
    lifetime: float | None  # hours
    cost: float | None


class RegionRate(BaseModel):
    """Typical electricity rate for a region."""

    region: str
    rate: float | None  # per kWh
    currency: str | None


class Currency(BaseModel):
    """Display currency; no conversion is ever applied."""

    code: str
    symbol: str
    name: str


CURRENCIES: list[Currency] = [
    Currency(code="USD", symbol="$", name="US Dollar"),
    Currency(code="CAD", symbol="CA$", name="Canadian Dollar"),
    Currency(code="EUR", symbol="€", name="Euro"),
    Currency(code="GBP", symbol="£", name="British Pound"),
    Currency(code="AUD", symbol="A$", name="Australian Dollar"),
    Currency(code="NZD", symbol="NZ$", name="New Zealand Dollar"),
    Currency(code="BRL", symbol="R$", name="Brazilian Real"),
    Currency(code="MXN", symbol="MX$", name="Mexican Peso"),
    Currency(code="JPY", symbol="¥", name="Japanese Yen"),
    Currency(code="KRW", symbol="₩", name="South Korean Won"),
    Currency(code="INR", symbol="₹", name="Indian Rupee"),
    Currency(code="SGD", symbol="S$", name="Singapore Dollar"),
    Currency(code="ZAR", symbol="R", name="South African Rand"),
    Currency(code="AED", symbol="د.إ", name="UAE Dirham"),
    Currency(code="ILS", symbol="₪", name="Israeli Shekel"),
    Currency(code="PLN", symbol="zł", name="Polish Zloty"),
    Currency(code="SEK", symbol="kr", name="Swedish Krona"),
    Currency(code="NOK", symbol="kr", name="Norwegian Krone"),
    Currency(code="CLP", symbol="CLP$", name="Chilean Peso"),
    Currency(code="COP", symbol="COP$", name="Colombian Peso"),
    Currency(code="ARS", symbol="AR$", name="Argentine Peso"),
]

PRINTER_PRESETS: list[PrinterPreset] = [
    PrinterPreset(name="H2D", brand="Bambu Lab", power=0.45, lifetime=10000, cost=1999),
    PrinterPreset(name="X1 Carbon Combo", brand="Bambu Lab", power=0.35, lifetime=8000, cost=1449),
    PrinterPreset(name="X1E", brand="Bambu Lab", power=0.38, lifetime=10000, cost=1699),
    PrinterPreset(name="P1S Combo", brand="Bambu Lab", power=0.30, lifetime=7000, cost=949),
    PrinterPreset(name="P1P", brand="Bambu Lab", power=0.28, lifetime=7000, cost=599),
    PrinterPreset(name="A1", brand="Bambu Lab", power=0.22, lifetime=5000, cost=399),
    PrinterPreset(name="A1 Mini", brand="Bambu Lab", power=0.18, lifetime=5000, cost=299),
    PrinterPreset(name="K2 Plus Combo", brand="Creality", power=0.45, lifetime=8000, cost=1299),
    PrinterPreset(name="K1 Max", brand="Creality", power=0.38, lifetime=7000, cost=699),
    PrinterPreset(name="K1C", brand="Creality", power=0.35, lifetime=7000, cost=499),
    PrinterPreset(name="K1", brand="Creality", power=0.35, lifetime=7000, cost=449),
    PrinterPreset(name="Ender 3 V3", brand="Creality", power=0.25, lifetime=5000, cost=199),
    PrinterPreset(name="Ender 3 V3 KE", brand="Creality", power=0.28, lifetime=5000, cost=249),
    PrinterPreset(name="Ender 3 V3 SE", brand="Creality", power=0.22, lifetime=5000, cost=179),
    PrinterPreset(name="Ender 3 Pro / V2", brand="Creality", power=0.22, lifetime=5000, cost=200),
    PrinterPreset(name="CR-10 / CR-10S", brand="Creality", power=0.28, lifetime=6000, cost=450),
    PrinterPreset(name="Core One", brand="Prusa", power=0.30, lifetime=8000, cost=1199),
    PrinterPreset(name="MK4S Assembled", brand="Prusa", power=0.15, lifetime=8000, cost=1099),
    PrinterPreset(name="MK4S Kit", brand="Prusa", power=0.15, lifetime=8000, cost=799),
    PrinterPreset(name="MK3S+", brand="Prusa", power=0.12, lifetime=8000, cost=800),
    PrinterPreset(name="Mini+", brand="Prusa", power=0.08, lifetime=6000, cost=430),
    PrinterPreset(name="XL (Single)", brand="Prusa", power=0.35, lifetime=10000, cost=1999),
    PrinterPreset(name="XL (5 Toolheads)", brand="Prusa", power=0.50, lifetime=10000, cost=3499),
    PrinterPreset(name="Q1 Pro", brand="Qidi", power=0.35, lifetime=6000, cost=469),
    PrinterPreset(name="X-Max 3", brand="Qidi", power=0.40, lifetime=7000, cost=799),
    PrinterPreset(name="X-Plus 3", brand="Qidi", power=0.38, lifetime=7000, cost=599),
    PrinterPreset(name="Kobra 3 Combo", brand="Anycubic", power=0.35, lifetime=6000, cost=599),
    PrinterPreset(name="Kobra 2 Pro", brand="Anycubic", power=0.28, lifetime=5000, cost=299),
    PrinterPreset(name="Kobra 2", brand="Anycubic", power=0.25, lifetime=5000, cost=270),
    PrinterPreset(name="Neptune 4 Max", brand="Elegoo", power=0.32, lifetime=6000, cost=469),
    PrinterPreset(name="Neptune 4 Pro", brand="Elegoo", power=0.28, lifetime=6000, cost=259),
    PrinterPreset(name="Neptune 4 Plus", brand="Elegoo", power=0.30, lifetime=6000, cost=349),
    PrinterPreset(name="Neptune 3 Pro", brand="Elegoo", power=0.24, lifetime=5000, cost=260),
    PrinterPreset(name="Adventurer 5M Pro", brand="Flashforge", power=0.32, lifetime=6000, cost=499),
    PrinterPreset(name="Adventurer 5M", brand="Flashforge", power=0.28, lifetime=6000, cost=379),
    PrinterPreset(name="M5C", brand="Ankermake", power=0.25, lifetime=5000, cost=299),
    PrinterPreset(name="M5", brand="Ankermake", power=0.28, lifetime=5000, cost=499),
    PrinterPreset(name="SV08", brand="Sovol", power=0.35, lifetime=6000, cost=499),
    PrinterPreset(name="SV07 Plus", brand="Sovol", power=0.32, lifetime=5000, cost=449),
    PrinterPreset(name="SV06", brand="Sovol", power=0.24, lifetime=5000, cost=260),
    PrinterPreset(name="Sidewinder X2", brand="Artillery", power=0.30, lifetime=5000, cost=400),
    PrinterPreset(name="Genius Pro", brand="Artillery", power=0.24, lifetime=5000, cost=280),
    PrinterPreset(name="Voron 2.4", brand="Voron (DIY)", power=0.35, lifetime=10000, cost=1500),
    PrinterPreset(name="Voron Trident", brand="Voron (DIY)", power=0.32, lifetime=10000, cost=1200),
    PrinterPreset(name="S6 Secure", brand="Ultimaker", power=0.35, lifetime=10000, cost=4500),
    PrinterPreset(name="S8 Secure", brand="Ultimaker", power=0.40, lifetime=10000, cost=6000),
    PrinterPreset(name="S5 Pro Bundle", brand="Ultimaker", power=0.35, lifetime=10000, cost=7500),
    PrinterPreset(name="Saturn 4 Ultra", brand="Elegoo (Resin)", power=0.07, lifetime=3000, cost=549),
    PrinterPreset(name="Saturn 3", brand="Elegoo (Resin)", power=0.06, lifetime=3000, cost=450),
    PrinterPreset(name="Mars 5 Ultra", brand="Elegoo (Resin)", power=0.05, lifetime=3000, cost=289),
    PrinterPreset(name="Mars 3 Pro", brand="Elegoo (Resin)", power=0.05, lifetime=3000, cost=250),
    PrinterPreset(name="Photon Mono M7 Pro", brand="Anycubic (Resin)", power=0.06, lifetime=3000, cost=449),
    PrinterPreset(name="Photon Mono M5s", brand="Anycubic (Resin)", power=0.05, lifetime=3000, cost=299),
    PrinterPreset(name="Sonic Mini 8K", brand="Phrozen (Resin)", power=0.06, lifetime=3000, cost=350),
    PrinterPreset(name="Custom / Other", brand="Other", power=None, lifetime=None, cost=None),
]

ELECTRICITY_RATES: list[RegionRate] = [
    RegionRate(region="USA (Average)", rate=0.18, currency="USD"),
    RegionRate(region="USA - California", rate=0.32, currency="USD"),
    RegionRate(region="USA - Texas", rate=0.14, currency="USD"),
    RegionRate(region="USA - New York", rate=0.22, currency="USD"),
    RegionRate(region="USA - Florida", rate=0.15, currency="USD"),
    RegionRate(region="USA - Hawaii", rate=0.42, currency="USD"),
    RegionRate(region="USA - Idaho", rate=0.12, currency="USD"),
    RegionRate(region="USA - Washington", rate=0.11, currency="USD"),
    RegionRate(region="Canada (Average)", rate=0.12, currency="CAD"),
    RegionRate(region="Canada - Ontario", rate=0.15, currency="CAD"),
    RegionRate(region="Canada - Quebec", rate=0.08, currency="CAD"),
    RegionRate(region="Canada - British Columbia", rate=0.13, currency="CAD"),
    RegionRate(region="Canada - Alberta", rate=0.16, currency="CAD"),
    RegionRate(region="Mexico", rate=0.09, currency="MXN"),
    RegionRate(region="UK", rate=0.30, currency="GBP"),
    RegionRate(region="Germany", rate=0.35, currency="EUR"),
    RegionRate(region="France", rate=0.20, currency="EUR"),
    RegionRate(region="Spain", rate=0.24, currency="EUR"),
    RegionRate(region="Italy", rate=0.28, currency="EUR"),
    RegionRate(region="Netherlands", rate=0.29, currency="EUR"),
    RegionRate(region="Belgium", rate=0.30, currency="EUR"),
    RegionRate(region="Portugal", rate=0.22, currency="EUR"),
    RegionRate(region="Poland", rate=0.18, currency="PLN"),
    RegionRate(region="Sweden", rate=0.20, currency="SEK"),
    RegionRate(region="Norway", rate=0.12, currency="NOK"),
    RegionRate(region="Switzerland", rate=0.22, currency="EUR"),
    RegionRate(region="Austria", rate=0.26, currency="EUR"),
    RegionRate(region="Ireland", rate=0.32, currency="EUR"),
    RegionRate(region="Australia", rate=0.28, currency="AUD"),
    RegionRate(region="New Zealand", rate=0.24, currency="NZD"),
    RegionRate(region="Japan", rate=0.27, currency="JPY"),
    RegionRate(region="South Korea", rate=0.12, currency="KRW"),
    RegionRate(region="Singapore", rate=0.20, currency="SGD"),
    RegionRate(region="India", rate=0.09, currency="INR"),
    RegionRate(region="China", rate=0.08, currency="USD"),
    RegionRate(region="Hong Kong", rate=0.15, currency="USD"),
    RegionRate(region="Taiwan", rate=0.10, currency="USD"),
    RegionRate(region="Brazil", rate=0.16, currency="BRL"),
    RegionRate(region="Argentina", rate=0.06, currency="ARS"),
    RegionRate(region="Chile", rate=0.16, currency="CLP"),
    RegionRate(region="Colombia", rate=0.14, currency="COP"),
    RegionRate(region="South Africa", rate=0.14, currency="ZAR"),
    RegionRate(region="UAE", rate=0.09, currency="AED"),
    RegionRate(region="Israel", rate=0.17, currency="ILS"),
    RegionRate(region="Saudi Arabia", rate=0.05, currency="USD"),
    RegionRate(region="Custom / Other", rate=None, currency=None),
]


def find_currency(code: str | None) -> Currency:
    """Look up a currency by code, falling back to the first entry (USD)."""
    for currency in CURRENCIES:
        if currency.code == code:
            return currency
    return CURRENCIES[0]


def currency_symbol(code: str | None) -> str:
    """Display symbol for a currency code."""
    return find_currency(code).symbol
