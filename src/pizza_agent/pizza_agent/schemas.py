"""Argument schemas for the agent-facing tools.

These are the declared shapes the tool runtime validates each invocation
against before dispatching to a workflow operation.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from .models import Customer, ItemOptions, PaymentDetails, normalize_options


class FindNearbyStoresArgs(BaseModel):
    address: str = Field(description="Full address to search for nearby stores")


class GetMenuArgs(BaseModel):
    store_id: str = Field(description="ID of the store to get the menu from")


class CustomerArgs(BaseModel):
    first_name: str
    last_name: str
    phone: str
    email: str | None = None
    address: str | None = Field(
        default=None,
        description="Full address; required for delivery, optional for carryout",
    )

    def to_customer(self) -> Customer:
        return Customer(**self.model_dump())


class CreateOrderArgs(BaseModel):
    store_id: str = Field(description="ID of the store to order from")
    customer: CustomerArgs
    order_type: Literal["delivery", "carryout"] = Field(
        description="Type of order: delivery or carryout"
    )


class ItemArgs(BaseModel):
    code: str = Field(
        description="Menu code for the item (e.g. '14SCREEN' for a large hand tossed pizza)"
    )
    options: ItemOptions | None = Field(
        default=None,
        description=(
            "Customizations: topping code -> portion ('1/1' whole, '1/2' or '2/2' "
            "halves) -> amount ('0' none, '1' normal, '2' double)"
        ),
    )
    quantity: int = Field(default=1, ge=1, description="Number of this item to add")

    @field_validator("options", mode="before")
    @classmethod
    def _check_options(cls, value: Any) -> ItemOptions | None:
        return None if value is None else normalize_options(value)


class AddItemArgs(BaseModel):
    order_id: str = Field(description="ID of the order to add the item to")
    item: ItemArgs


class RemoveItemArgs(BaseModel):
    order_id: str = Field(description="ID of the order to modify")
    item_index: int = Field(
        description="Zero-based index of the item to remove (see get_order_state)"
    )


class OrderIdArgs(BaseModel):
    order_id: str = Field(description="ID of the order")


class PaymentArgs(BaseModel):
    type: Literal["credit", "cash"] = Field(description="Payment method")
    card_number: str | None = None
    expiration: str | None = Field(default=None, description="Card expiration, MMYY")
    security_code: str | None = None
    postal_code: str | None = Field(default=None, description="Billing postal code")
    tip_amount: float | None = Field(
        default=None, ge=0, description="Tip in dollars; delivery orders only"
    )

    def to_details(self) -> PaymentDetails:
        return PaymentDetails(**self.model_dump())


class PlaceOrderArgs(BaseModel):
    order_id: str = Field(description="ID of the order to place")
    payment: PaymentArgs


class TrackOrderArgs(BaseModel):
    phone_number: str = Field(description="Phone number used for the order")
    store_id: str = Field(description="ID of the store the order was placed at")
    order_id: str | None = Field(
        default=None, description="Provider order ID, if known"
    )
