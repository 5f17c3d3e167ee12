"""Order lifecycle operations.

    create -> add/remove items -> validate -> price -> place

Each operation reads the order from the session, checks its local
preconditions before any remote call, talks to the provider at most once,
and writes the order back before returning. Local precondition failures
raise and leave the session untouched. Provider rejections (invalid order,
pricing refused, card declined) are returned as results with a failed
status; provider outages raise RemoteSystemError.

Adding or removing items after validation or pricing does not reset those
results. Callers re-price before placing if the items changed.
"""

import re
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from loguru import logger
from pydantic import ValidationError

from .address import parse_address
from .client import CommerceClient
from .enums import PaymentType, ServiceMethod
from .errors import (
    ItemIndexError,
    OrderNotFoundError,
    OrderWorkflowError,
    PreconditionError,
    RemoteSystemError,
)
from .models import (
    Customer,
    LineItem,
    Order,
    PaymentDetails,
    PaymentInstruction,
    PlacementConfirmation,
    PricingBreakdown,
)
from .outcomes import Rejected, SystemFault, call_remote
from .payloads import build_order_payload
from .policy import card_type_for, require_address, require_card_details
from .results import (
    CustomerEcho,
    IndexedItem,
    ItemRemoved,
    ItemsUpdated,
    OrderCreated,
    OrderSnapshot,
    PlacementResult,
    PricingResult,
    StoreEcho,
    ValidationResult,
)
from .session import SessionStore

ORDER_TYPES = ("delivery", "carryout")

PICKUP_INSTRUCTIONS = (
    "Please bring your order confirmation and payment card for verification."
)

_WAIT_RANGE = re.compile(r"(\d+)\s*-\s*(\d+)")
_WAIT_SINGLE = re.compile(r"(\d+)")

# ---------------------------------------------------------------------------
# Session helpers
# ---------------------------------------------------------------------------


def _load(session: SessionStore, order_id: str) -> Order:
    order = session.get_order(order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    return order


def _save(session: SessionStore, order: Order) -> None:
    if session.update_order(order.order_id, order) is None:
        # Only reachable if another caller drops the order mid-operation.
        raise OrderWorkflowError(
            f"Order {order.order_id} disappeared from the session during update",
            code="order_vanished",
        )


# ---------------------------------------------------------------------------
# Creation & items
# ---------------------------------------------------------------------------


def create_order(
    session: SessionStore, store_id: str, order_type: str, customer: Customer
) -> OrderCreated:
    """Start a new, empty order. No remote call is made."""
    if not store_id or not store_id.strip():
        raise PreconditionError("A store_id is required to create an order")
    if order_type.lower() not in ORDER_TYPES:
        raise PreconditionError(
            f"Unknown order_type {order_type!r}; expected one of {', '.join(ORDER_TYPES)}"
        )
    blank = [
        name
        for name in ("first_name", "last_name", "phone")
        if not getattr(customer, name).strip()
    ]
    if blank:
        raise PreconditionError(f"Customer fields are required: {', '.join(blank)}")

    service_method = ServiceMethod.from_order_type(order_type)
    require_address(service_method, customer.address)

    order_id = session.create_order(
        Order(store_id=store_id, service_method=service_method, customer=customer)
    )
    logger.info(
        "Created {} order {} at store {}", service_method.value, order_id, store_id
    )

    store = session.find_store(store_id)
    return OrderCreated(
        order_id=order_id,
        order_type=service_method.order_type,
        customer=CustomerEcho(
            first_name=customer.first_name,
            last_name=customer.last_name,
            address=customer.address,
        ),
        store=StoreEcho(store_id=store.store_id, address=store.address) if store else None,
    )


def add_item(
    session: SessionStore,
    order_id: str,
    code: str,
    options: dict[str, Any] | None = None,
    quantity: int = 1,
) -> ItemsUpdated:
    """Append one line item. Options are checked for shape only."""
    order = _load(session, order_id)
    if not code or not code.strip():
        raise PreconditionError("An item code is required")
    try:
        item = LineItem(code=code.strip(), options=options, quantity=quantity)
    except ValidationError as exc:
        raise PreconditionError(f"Invalid item {code!r}: {exc.errors()[0]['msg']}") from exc

    order.items.append(item)
    _save(session, order)
    logger.info("Order {}: added {}x {}", order_id, item.quantity, item.code)
    return ItemsUpdated(order_id=order_id, items=IndexedItem.from_items(order.items))


def remove_item(session: SessionStore, order_id: str, item_index: int) -> ItemRemoved:
    """Remove the line item at a zero-based position."""
    order = _load(session, order_id)
    if item_index < 0 or item_index >= len(order.items):
        raise ItemIndexError(item_index, len(order.items))

    removed = order.items.pop(item_index)
    _save(session, order)
    logger.info("Order {}: removed item {} ({})", order_id, item_index, removed.code)
    return ItemRemoved(order_id=order_id, remaining_items_count=len(order.items))


def get_order_state(session: SessionStore, order_id: str) -> OrderSnapshot:
    order = _load(session, order_id)
    customer = order.customer
    return OrderSnapshot(
        order_id=order.order_id,
        store_id=order.store_id,
        service_method=order.service_method,
        customer={
            "first_name": customer.first_name,
            "last_name": customer.last_name,
            "email": customer.email,
            "phone": customer.phone,
        },
        address=customer.address,
        items=IndexedItem.from_items(order.items),
        lifecycle_state=order.lifecycle_state,
        pricing=order.pricing,
        confirmation=order.confirmation,
    )


# ---------------------------------------------------------------------------
# Validation & pricing
# ---------------------------------------------------------------------------


def _remote_order_id(data: dict[str, Any], fallback: str) -> str:
    return str(data.get("Order", {}).get("OrderID") or fallback)


def validate_order(
    session: SessionStore, client: CommerceClient, order_id: str
) -> ValidationResult:
    order = _load(session, order_id)
    if not order.items:
        raise PreconditionError("Order has no items", code="order_empty")

    outcome = call_remote("validate_order", client.validate_order, build_order_payload(order))
    if isinstance(outcome, SystemFault):
        outcome.raise_error(f"Failed to validate order {order_id}")

    if isinstance(outcome, Rejected):
        order.is_valid = False
        order.validation_error = outcome.reason
        _save(session, order)
        return ValidationResult(
            order_id=order_id,
            status="validation_failed",
            is_valid=False,
            error=outcome.reason,
        )

    order.is_valid = True
    order.validation_error = None
    order.remote_order_id = _remote_order_id(outcome.data, order.remote_order_id)
    _save(session, order)
    logger.info("Order {} validated", order_id)
    return ValidationResult(order_id=order_id, status="validated", is_valid=True)


def _money(value: Any) -> float:
    try:
        return round(float(value or 0), 2)
    except (TypeError, ValueError):
        return 0.0


def extract_pricing(data: dict[str, Any], service_method: ServiceMethod) -> PricingBreakdown:
    """Normalize the provider's amounts into a pricing breakdown."""
    remote_order = data.get("Order") or {}
    amounts = remote_order.get("Amounts")
    if not isinstance(amounts, dict):
        raise RemoteSystemError("price-order response has no Amounts section")
    breakdown = remote_order.get("AmountsBreakdown") or {}

    def pick(key: str, *fallbacks: str) -> float:
        if key in amounts:
            return _money(amounts[key])
        for name in fallbacks:
            if name in breakdown:
                return _money(breakdown[name])
        return 0.0

    pricing = PricingBreakdown(
        subtotal=pick("Menu", "FoodAndBeverage"),
        tax=pick("Tax", "Tax"),
        total=pick("Customer", "Customer"),
    )
    if service_method is ServiceMethod.DELIVERY:
        pricing.delivery_fee = pick("Surcharge", "DeliveryFee", "Surcharge")
    return pricing


def price_order(session: SessionStore, client: CommerceClient, order_id: str) -> PricingResult:
    order = _load(session, order_id)

    outcome = call_remote("price_order", client.price_order, build_order_payload(order))
    if isinstance(outcome, SystemFault):
        outcome.raise_error(f"Failed to price order {order_id}")

    if isinstance(outcome, Rejected):
        order.pricing_error = outcome.reason
        _save(session, order)
        return PricingResult(order_id=order_id, status="pricing_failed", error=outcome.reason)

    order.pricing = extract_pricing(outcome.data, order.service_method)
    order.pricing_error = None
    order.remote_order_id = _remote_order_id(outcome.data, order.remote_order_id)
    _save(session, order)
    logger.info("Order {} priced: total {:.2f}", order_id, order.pricing.total)
    return PricingResult(order_id=order_id, status="priced", pricing=order.pricing)


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------


def wait_bounds(raw: Any) -> tuple[int, int] | None:
    """Read the provider's wait estimate ("17-27" or 17) as (low, high)."""
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, (int, float)):
        return int(raw), int(raw) + 10
    match = _WAIT_RANGE.search(str(raw))
    if match:
        return int(match[1]), int(match[2])
    match = _WAIT_SINGLE.search(str(raw))
    if match:
        return int(match[1]), int(match[1]) + 10
    return None


def build_payment(order: Order, payment: PaymentDetails) -> PaymentInstruction:
    """Turn caller payment fields into the single instruction sent to the provider."""
    tip = payment.tip_amount or None
    if tip and order.service_method is not ServiceMethod.DELIVERY:
        logger.debug("Order {}: dropping tip on a carryout order", order.order_id)
        tip = None

    if payment.type is PaymentType.CASH:
        return PaymentInstruction(type=payment.type, amount=order.pricing.total, tip_amount=tip)

    number = payment.card_number.get_secret_value()
    postal_code = payment.postal_code
    if not postal_code and order.customer.address:
        postal_code = parse_address(order.customer.address).postal_code or None
    return PaymentInstruction(
        type=payment.type,
        amount=order.pricing.total,
        number=payment.card_number,
        card_type=card_type_for(number),
        expiration=payment.expiration,
        security_code=payment.security_code,
        postal_code=postal_code,
        tip_amount=tip,
    )


def build_confirmation(
    session: SessionStore,
    order: Order,
    data: dict[str, Any],
    now: datetime,
) -> PlacementConfirmation:
    remote_order = data.get("Order") or {}
    bounds = wait_bounds(remote_order.get("EstimatedWaitMinutes"))
    confirmation = PlacementConfirmation(
        remote_order_id=str(remote_order.get("OrderID") or order.remote_order_id),
        order_status=str(remote_order.get("OrderStatus") or "Placed"),
    )
    if order.service_method is ServiceMethod.DELIVERY:
        confirmation.estimated_delivery_time = (
            f"{bounds[0]}-{bounds[1]} minutes" if bounds else "Unknown"
        )
    else:
        confirmation.estimated_ready_time = (
            (now + timedelta(minutes=bounds[0])).strftime("%I:%M %p") if bounds else "Unknown"
        )
        store = session.find_store(order.store_id)
        confirmation.pickup_location = (
            store.address if store else remote_order.get("StoreAddress") or None
        )
        confirmation.pickup_instructions = PICKUP_INSTRUCTIONS
    return confirmation


def place_order(
    session: SessionStore,
    client: CommerceClient,
    order_id: str,
    payment: PaymentDetails,
    clock: Callable[[], datetime] = datetime.now,
) -> PlacementResult:
    """Place a priced order with exactly one payment attached.

    Card data lives only in this call's locals; nothing of it is written
    to the session or the log.
    """
    order = _load(session, order_id)
    if not order.is_priced:
        raise PreconditionError("Order must be priced before placing", code="order_not_priced")
    require_card_details(
        payment.type,
        card_number=payment.card_number.get_secret_value() if payment.card_number else None,
        expiration=payment.expiration,
        security_code=payment.security_code.get_secret_value() if payment.security_code else None,
    )
    require_address(order.service_method, order.customer.address, payment.type)

    instruction = build_payment(order, payment)
    payload = build_order_payload(order, payments=[instruction])
    outcome = call_remote("place_order", client.place_order, payload)
    if isinstance(outcome, SystemFault):
        # Outage leaves the order priced and retryable.
        return PlacementResult(order_id=order_id, status="placement_failed", error=outcome.detail)

    if isinstance(outcome, Rejected):
        order.placement_error = outcome.reason
        _save(session, order)
        return PlacementResult(order_id=order_id, status="placement_failed", error=outcome.reason)

    order.confirmation = build_confirmation(session, order, outcome.data, clock())
    order.placement_error = None
    _save(session, order)
    logger.info(
        "Order {} placed (remote id {})", order_id, order.confirmation.remote_order_id
    )
    return PlacementResult(
        order_id=order_id,
        status="placed",
        order_type=order.service_method.order_type,
        confirmation=order.confirmation,
    )
