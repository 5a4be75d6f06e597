# venue_booking/domain/pricing.py

from dataclasses import asdict, dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum

TAX_RATE = Decimal("0.08")
SERVICE_FEE_RATE = Decimal("0.05")

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


class PricingUnit(str, Enum):
    HOUR = "hour"
    DAY = "day"


class VenueType(str, Enum):
    INDOOR = "indoor"
    OUTDOOR = "outdoor"
    HYBRID = "hybrid"


class MealType(str, Enum):
    VEG = "veg"
    NONVEG = "nonveg"
    BUFFET = "buffet"


class ServingStyle(str, Enum):
    PLATED = "plated"
    BUFFET = "buffet"
    FAMILY_STYLE = "family_style"
    COCKTAIL = "cocktail"


class PaymentMethod(str, Enum):
    CARD = "card"
    BKASH = "bkash"
    NAGAD = "nagad"
    ROCKET = "rocket"


@dataclass(frozen=True)
class VenueLine:
    venue_id: str
    name: str
    pricing_unit: PricingUnit
    rate: Decimal
    requested_units: int
    minimum_units: int
    billed_units: int
    cost: Decimal


@dataclass(frozen=True)
class MealLine:
    meal_id: str
    name: str
    price_per_person: Decimal
    people: int
    cost: Decimal


@dataclass(frozen=True)
class CostBreakdown:
    """
    Itemized bill for one booking. Recomputed on every quote and
    payment attempt; each Payment keeps a snapshot for replays.
    """

    venue: VenueLine
    meal: MealLine | None
    subtotal: Decimal
    tax: Decimal
    service_fee: Decimal
    total: Decimal
    tax_rate: Decimal = TAX_RATE
    service_fee_rate: Decimal = SERVICE_FEE_RATE

    @property
    def venue_cost(self) -> Decimal:
        return self.venue.cost

    @property
    def meal_cost(self) -> Decimal:
        return self.meal.cost if self.meal else Decimal("0.00")

    @classmethod
    def build(cls, venue: VenueLine, meal: MealLine | None) -> "CostBreakdown":
        meal_cost = meal.cost if meal else Decimal("0.00")
        subtotal = to_money(venue.cost + meal_cost)
        tax = to_money(subtotal * TAX_RATE)
        service_fee = to_money(subtotal * SERVICE_FEE_RATE)
        return cls(
            venue=venue,
            meal=meal,
            subtotal=subtotal,
            tax=tax,
            service_fee=service_fee,
            total=subtotal + tax + service_fee,
        )

    def to_snapshot(self) -> dict:
        return _stringify(asdict(self))

    @classmethod
    def from_snapshot(cls, snapshot: dict) -> "CostBreakdown":
        venue = dict(snapshot["venue"])
        venue["pricing_unit"] = PricingUnit(venue["pricing_unit"])
        for key in ("rate", "cost"):
            venue[key] = Decimal(venue[key])

        meal = None
        if snapshot.get("meal"):
            meal = dict(snapshot["meal"])
            for key in ("price_per_person", "cost"):
                meal[key] = Decimal(meal[key])
            meal = MealLine(**meal)

        return cls(
            venue=VenueLine(**venue),
            meal=meal,
            **{
                key: Decimal(snapshot[key])
                for key in ("subtotal", "tax", "service_fee", "total", "tax_rate", "service_fee_rate")
            },
        )


def _stringify(value):
    # JSON columns cannot hold Decimal or Enum values.
    if isinstance(value, dict):
        return {key: _stringify(item) for key, item in value.items()}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    return value
