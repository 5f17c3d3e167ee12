from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from .enums import CategoryName, LifecycleState, PaymentType, ServiceMethod

# topping code -> portion ("1/1", "1/2", "2/2") -> quantity level ("0".."2")
ItemOptions = dict[str, dict[str, str]]


def normalize_options(value: Any) -> ItemOptions:
    """Check the code -> portion -> level shape and stringify levels.

    Only the structure is checked; whether a code or level is legal for an
    item is decided by the provider when the order is validated.
    """
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError("options must be a mapping of topping code to portions")
    normalized: ItemOptions = {}
    for code, portions in value.items():
        if not isinstance(portions, Mapping):
            raise ValueError(
                f"options[{code!r}] must map a portion (e.g. '1/1') to a level"
            )
        levels: dict[str, str] = {}
        for portion, level in portions.items():
            if isinstance(level, bool) or not isinstance(level, (str, int, float)):
                raise ValueError(f"options[{code!r}][{portion!r}] must be a level")
            levels[str(portion)] = str(level)
        normalized[str(code)] = levels
    return normalized


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


class WaitRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: int
    max: int

    def describe(self) -> str:
        return f"{self.min}-{self.max} min"


class Store(BaseModel):
    model_config = ConfigDict(frozen=True)

    store_id: str
    address: str = ""
    phone: str = ""
    is_open: bool = False
    is_online_capable: bool = False
    allows_delivery: bool = False
    allows_carryout: bool = False
    delivery_wait: WaitRange | None = None
    carryout_wait: WaitRange | None = None
    distance: float | None = None


# ---------------------------------------------------------------------------
# Menu
# ---------------------------------------------------------------------------


class MenuVariant(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    price: float = 0.0


class ToppingOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    quantities: list[str] = Field(default_factory=lambda: ["0", "1"])
    portions: list[str] = Field(default_factory=lambda: ["1/1"])


class SideOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    name: str


class MenuItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    description: str = ""
    product_type: str = ""
    variants: list[MenuVariant] = Field(default_factory=list)
    toppings: list[ToppingOption] = Field(default_factory=list)
    sides: list[SideOption] = Field(default_factory=list)


class MenuCategory(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: CategoryName
    items: list[MenuItem]


class Menu(BaseModel):
    model_config = ConfigDict(frozen=True)

    store_id: str
    categories: list[MenuCategory] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Order aggregate
# ---------------------------------------------------------------------------


class Address(BaseModel):
    """Structured form of a free-text address, as the provider expects it."""

    street: str = ""
    city: str = ""
    region: str = ""
    postal_code: str = ""

    def to_remote(self) -> dict[str, str]:
        return {
            "Street": self.street,
            "City": self.city,
            "Region": self.region,
            "PostalCode": self.postal_code,
            "Type": "House",
        }


class Customer(BaseModel):
    first_name: str
    last_name: str
    phone: str
    email: str | None = None
    address: str | None = None


class LineItem(BaseModel):
    code: str
    options: ItemOptions = Field(default_factory=dict)
    quantity: int = Field(default=1, ge=1)

    @field_validator("options", mode="before")
    @classmethod
    def _check_options(cls, value: Any) -> ItemOptions:
        return normalize_options(value)


class PricingBreakdown(BaseModel):
    subtotal: float
    tax: float
    total: float
    # Only present for delivery orders
    delivery_fee: float | None = None


class PlacementConfirmation(BaseModel):
    remote_order_id: str
    order_status: str
    estimated_delivery_time: str | None = None
    estimated_ready_time: str | None = None
    pickup_location: str | None = None
    pickup_instructions: str | None = None


class PaymentInstruction(BaseModel):
    """A single payment attached to one placement call. Never stored."""

    type: PaymentType
    amount: float
    number: SecretStr | None = None
    card_type: str | None = None
    expiration: str | None = None
    security_code: SecretStr | None = None
    postal_code: str | None = None
    tip_amount: float | None = None

    def to_remote(self) -> dict[str, Any]:
        if self.type is PaymentType.CASH:
            payment: dict[str, Any] = {"Type": "Cash", "Amount": self.amount}
        else:
            payment = {
                "Type": "CreditCard",
                "Amount": self.amount,
                "Number": self.number.get_secret_value() if self.number else "",
                "CardType": self.card_type or "",
                "Expiration": self.expiration or "",
                "SecurityCode": (
                    self.security_code.get_secret_value()
                    if self.security_code
                    else ""
                ),
                "PostalCode": self.postal_code or "",
            }
        if self.tip_amount:
            payment["TipAmount"] = self.tip_amount
        return payment


class Order(BaseModel):
    order_id: str = ""
    store_id: str
    service_method: ServiceMethod
    customer: Customer
    items: list[LineItem] = Field(default_factory=list)
    remote_order_id: str = ""
    is_valid: bool | None = None
    validation_error: str | None = None
    pricing: PricingBreakdown | None = None
    pricing_error: str | None = None
    confirmation: PlacementConfirmation | None = None
    placement_error: str | None = None

    @property
    def is_priced(self) -> bool:
        return self.pricing is not None and bool(self.pricing.total)

    @property
    def lifecycle_state(self) -> LifecycleState:
        """Derive the lifecycle state from which fields are populated."""
        if self.confirmation is not None:
            return LifecycleState.PLACED
        if self.placement_error is not None:
            return LifecycleState.PLACEMENT_FAILED
        if self.pricing_error is not None:
            return LifecycleState.PRICING_FAILED
        if self.pricing is not None:
            return LifecycleState.PRICED
        if self.is_valid is True:
            return LifecycleState.VALIDATED
        if self.is_valid is False:
            return LifecycleState.VALIDATION_FAILED
        if self.items:
            return LifecycleState.HAS_ITEMS
        return LifecycleState.CREATED


# ---------------------------------------------------------------------------
# Caller-supplied payment details
# ---------------------------------------------------------------------------


class PaymentDetails(BaseModel):
    """Payment fields as supplied by the caller for one placement."""

    type: PaymentType
    card_number: SecretStr | None = None
    expiration: str | None = None
    security_code: SecretStr | None = None
    postal_code: str | None = None
    tip_amount: float | None = Field(default=None, ge=0)
