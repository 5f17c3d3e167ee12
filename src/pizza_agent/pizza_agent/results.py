"""Plain structured results returned by the workflow operations.

Fields left as None are omitted from to_dict(), so e.g. a carryout pricing
never carries a delivery_fee key and a failed result never carries data.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from .enums import LifecycleState, ServiceMethod
from .models import ItemOptions, LineItem, Menu, PlacementConfirmation, PricingBreakdown


class ResultModel(BaseModel):
    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class StoreSummary(ResultModel):
    store_id: str
    address: str
    phone: str
    is_open: bool
    allows_delivery: bool
    allows_carryout: bool
    estimated_delivery_time: str
    estimated_carryout_time: str
    distance: str | None = None


class StoreLookupResult(ResultModel):
    stores: list[StoreSummary]


class MenuResult(ResultModel):
    menu: Menu

    def to_dict(self) -> dict[str, Any]:
        return self.menu.model_dump(mode="json", exclude_none=True)


class CustomerEcho(ResultModel):
    first_name: str
    last_name: str
    address: str | None = None


class StoreEcho(ResultModel):
    store_id: str
    address: str


class IndexedItem(ResultModel):
    index: int
    code: str
    options: ItemOptions = Field(default_factory=dict)
    quantity: int

    @classmethod
    def from_items(cls, items: list[LineItem]) -> list["IndexedItem"]:
        return [
            cls(index=i, code=item.code, options=item.options, quantity=item.quantity)
            for i, item in enumerate(items)
        ]


class OrderCreated(ResultModel):
    order_id: str
    status: Literal["created"] = "created"
    order_type: str
    customer: CustomerEcho
    store: StoreEcho | None = None


class ItemsUpdated(ResultModel):
    order_id: str
    status: Literal["updated"] = "updated"
    items: list[IndexedItem]


class ItemRemoved(ResultModel):
    order_id: str
    status: Literal["item_removed"] = "item_removed"
    remaining_items_count: int


class OrderSnapshot(ResultModel):
    order_id: str
    store_id: str
    service_method: ServiceMethod
    customer: dict[str, str | None]
    address: str | None = None
    items: list[IndexedItem]
    lifecycle_state: LifecycleState
    pricing: PricingBreakdown | None = None
    confirmation: PlacementConfirmation | None = None


class ValidationResult(ResultModel):
    order_id: str
    status: Literal["validated", "validation_failed"]
    is_valid: bool
    error: str | None = None


class PricingResult(ResultModel):
    order_id: str
    status: Literal["priced", "pricing_failed"]
    pricing: PricingBreakdown | None = None
    error: str | None = None


class PlacementResult(ResultModel):
    order_id: str
    status: Literal["placed", "placement_failed"]
    order_type: str | None = None
    confirmation: PlacementConfirmation | None = None
    error: str | None = None


class OrderDetails(ResultModel):
    items: list[str]
    placed_at: str


class TrackingResult(ResultModel):
    status: str
    estimated_delivery_time: str | None = None
    estimated_ready_time: str | None = None
    order_details: OrderDetails | None = None
    tracker: dict[str, bool] | None = None
    pickup_location: str | None = None
    error: str | None = None
