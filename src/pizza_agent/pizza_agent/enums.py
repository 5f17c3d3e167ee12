from enum import StrEnum


class ServiceMethod(StrEnum):
    DELIVERY = "Delivery"
    CARRYOUT = "Carryout"

    @classmethod
    def from_order_type(cls, order_type: str) -> "ServiceMethod":
        """Map caller-facing order type ("delivery"/"carryout") to a method."""
        return cls.DELIVERY if order_type.lower() == "delivery" else cls.CARRYOUT

    @property
    def order_type(self) -> str:
        return self.value.lower()


class PaymentType(StrEnum):
    CREDIT = "credit"
    CASH = "cash"


class CategoryName(StrEnum):
    PIZZAS = "Pizzas"
    PASTAS = "Pastas"
    SANDWICHES = "Sandwiches"
    SIDES = "Sides"
    DRINKS = "Drinks"
    DESSERTS = "Desserts"
    OTHER = "Other"


class LifecycleState(StrEnum):
    CREATED = "created"
    HAS_ITEMS = "has_items"
    VALIDATED = "validated"
    VALIDATION_FAILED = "validation_failed"
    PRICED = "priced"
    PRICING_FAILED = "pricing_failed"
    PLACED = "placed"
    PLACEMENT_FAILED = "placement_failed"
