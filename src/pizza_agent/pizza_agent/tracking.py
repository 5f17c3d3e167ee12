"""Order tracking by phone number or provider order id.

Tracking never touches the session: it is correlated with the provider's
records by phone/store (or remote order id), not by local order ids.

The provider reports progress as a free-text status. STATUS_STAGES maps the
known spellings onto TrackingStage, an ordered enumeration; a milestone is
reached when the current stage compares at or past it. Statuses not in the
table are logged and treated as "placed" because the provider's vocabulary
is not fully known.
"""

import re
from enum import IntEnum
from typing import Any

from loguru import logger

from .client import CommerceClient
from .errors import PreconditionError
from .outcomes import Rejected, SystemFault, call_remote
from .results import OrderDetails, TrackingResult


class TrackingStage(IntEnum):
    PLACED = 0
    PREPARATION = 1
    BAKING = 2
    QUALITY_CHECK = 3
    DISPATCHED = 4  # out for delivery / ready for pickup
    COMPLETE = 5

    def reached(self, milestone: "TrackingStage") -> bool:
        return self >= milestone


STATUS_STAGES: dict[str, TrackingStage] = {
    "placed": TrackingStage.PLACED,
    "order placed": TrackingStage.PLACED,
    "preparing": TrackingStage.PREPARATION,
    "prep": TrackingStage.PREPARATION,
    "makeline": TrackingStage.PREPARATION,
    "baking": TrackingStage.BAKING,
    "bake": TrackingStage.BAKING,
    "oven": TrackingStage.BAKING,
    "quality check": TrackingStage.QUALITY_CHECK,
    "routing station": TrackingStage.QUALITY_CHECK,
    "out for delivery": TrackingStage.DISPATCHED,
    "out the door": TrackingStage.DISPATCHED,
    "on the way": TrackingStage.DISPATCHED,
    "ready for pickup": TrackingStage.DISPATCHED,
    "ready for carryout": TrackingStage.DISPATCHED,
    "complete": TrackingStage.COMPLETE,
    "completed": TrackingStage.COMPLETE,
    "delivered": TrackingStage.COMPLETE,
    "picked up": TrackingStage.COMPLETE,
}

DELIVERY_MILESTONES: tuple[tuple[str, TrackingStage], ...] = (
    ("order_placed", TrackingStage.PLACED),
    ("preparation", TrackingStage.PREPARATION),
    ("baking", TrackingStage.BAKING),
    ("quality_check", TrackingStage.QUALITY_CHECK),
    ("out_for_delivery", TrackingStage.DISPATCHED),
    ("delivered", TrackingStage.COMPLETE),
)

CARRYOUT_MILESTONES: tuple[tuple[str, TrackingStage], ...] = (
    ("order_placed", TrackingStage.PLACED),
    ("preparation", TrackingStage.PREPARATION),
    ("baking", TrackingStage.BAKING),
    ("quality_check", TrackingStage.QUALITY_CHECK),
    ("ready_for_pickup", TrackingStage.DISPATCHED),
    ("picked_up", TrackingStage.COMPLETE),
)

OUT_FOR_DELIVERY_ESTIMATE = "5-15 minutes"
READY_NOW = "Ready now"

_NON_DIGITS = re.compile(r"\D")


def normalize_phone(phone_number: str) -> str:
    return _NON_DIGITS.sub("", phone_number or "")


def parse_stage(status: str | None) -> TrackingStage | None:
    key = " ".join((status or "").lower().replace("-", " ").split())
    return STATUS_STAGES.get(key)


def milestones(stage: TrackingStage, delivery: bool) -> dict[str, bool]:
    checklist = DELIVERY_MILESTONES if delivery else CARRYOUT_MILESTONES
    return {name: stage.reached(milestone) for name, milestone in checklist}


def _estimated_time(data: dict[str, Any]) -> str:
    if data.get("EstimatedDeliveryTime"):
        return str(data["EstimatedDeliveryTime"])
    for item in data.get("StatusItems") or []:
        kind = str(item.get("Type", ""))
        if ("Time" in kind or "Estimated" in kind) and item.get("Value"):
            return str(item["Value"])
    return "Unknown"


def build_tracking_result(data: dict[str, Any]) -> TrackingResult:
    status = str(data.get("OrderStatus") or "Unknown")
    stage = parse_stage(status)
    if stage is None:
        logger.warning("Unrecognized tracking status {!r}; treating as placed", status)
        stage = TrackingStage.PLACED
    delivery = data.get("ServiceMethod") == "Delivery"

    estimate = _estimated_time(data)
    if stage is TrackingStage.DISPATCHED:
        estimate = OUT_FOR_DELIVERY_ESTIMATE if delivery else READY_NOW

    description = data.get("OrderDescription") or ""
    details = OrderDetails(
        items=[part.strip() for part in description.split(",") if part.strip()]
        or ["Order items not available"],
        placed_at=str(data.get("PlacedTime") or data.get("StartTime") or "Unknown"),
    )

    result = TrackingResult(
        status=status, order_details=details, tracker=milestones(stage, delivery)
    )
    if delivery:
        result.estimated_delivery_time = estimate
    else:
        result.estimated_ready_time = estimate
        if data.get("StoreName") and data.get("StoreAddress"):
            result.pickup_location = f"{data['StoreName']}, {data['StoreAddress']}"
    return result


def track_order(
    client: CommerceClient,
    phone_number: str,
    store_id: str,
    order_id: str | None = None,
) -> TrackingResult:
    phone = normalize_phone(phone_number)
    if not phone:
        raise PreconditionError("A phone number with digits is required to track an order")
    if not store_id or not store_id.strip():
        raise PreconditionError("A store_id is required to track an order")

    if order_id:
        outcome = call_remote("track_by_id", client.track_by_id, store_id, order_id)
    else:
        outcome = call_remote("track_by_phone", client.track_by_phone, phone, store_id)

    if isinstance(outcome, SystemFault):
        outcome.raise_error("Failed to track order")
    if isinstance(outcome, Rejected):
        return TrackingResult(status="tracking_failed", error=outcome.reason)

    result = build_tracking_result(outcome.data)
    logger.info("Tracked order at store {}: {}", store_id, result.status)
    return result
