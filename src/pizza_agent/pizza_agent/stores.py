"""Store lookup: resolve an address to nearby stores that can take an order."""

from typing import Any

from loguru import logger

from .client import CommerceClient
from .errors import StoreLookupError
from .models import Store, WaitRange
from .outcomes import Rejected, SystemFault, call_remote
from .results import StoreLookupResult, StoreSummary
from .session import SessionStore


def _wait_range(raw: dict[str, Any] | None) -> WaitRange | None:
    if not raw or raw.get("Min") is None or raw.get("Max") is None:
        return None
    return WaitRange(min=int(raw["Min"]), max=int(raw["Max"]))


def _distance(raw: Any) -> float | None:
    try:
        return float(raw) if raw is not None else None
    except (TypeError, ValueError):
        return None


def parse_store(raw: dict[str, Any]) -> Store:
    """Map one store-locator entry onto a Store."""
    service_open = raw.get("ServiceIsOpen") or {}
    waits = raw.get("ServiceMethodEstimatedWaitMinutes") or {}
    address = (raw.get("AddressDescription") or "").strip()
    return Store(
        store_id=str(raw.get("StoreID", "")),
        address=", ".join(line.strip() for line in address.splitlines() if line.strip()),
        phone=raw.get("Phone") or "",
        is_open=bool(raw.get("IsOpen")),
        is_online_capable=bool(raw.get("IsOnlineCapable")),
        allows_delivery=bool(service_open.get("Delivery")),
        allows_carryout=bool(service_open.get("Carryout")),
        delivery_wait=_wait_range(waits.get("Delivery")),
        carryout_wait=_wait_range(waits.get("Carryout")),
        distance=_distance(raw.get("MinDistance")),
    )


def summarize_store(store: Store) -> StoreSummary:
    return StoreSummary(
        store_id=store.store_id,
        address=store.address,
        phone=store.phone,
        is_open=store.is_open,
        allows_delivery=store.allows_delivery,
        allows_carryout=store.allows_carryout,
        estimated_delivery_time=(
            store.delivery_wait.describe() if store.delivery_wait else "Unknown"
        ),
        estimated_carryout_time=(
            store.carryout_wait.describe() if store.carryout_wait else "Unknown"
        ),
        distance=f"{store.distance:.1f} miles" if store.distance is not None else None,
    )


def rank_stores(stores: list[Store]) -> list[Store]:
    """Keep open, online-orderable stores, nearest first.

    The sort is stable, so equal distances keep the provider's order.
    Stores without a distance go last.
    """
    orderable = [s for s in stores if s.is_online_capable and s.is_open]
    return sorted(
        orderable,
        key=lambda s: (s.distance is None, s.distance if s.distance is not None else 0.0),
    )


def find_nearby_stores(
    session: SessionStore, client: CommerceClient, address: str
) -> StoreLookupResult:
    if not address or not address.strip():
        raise StoreLookupError("An address is required to find nearby stores")

    outcome = call_remote("find_stores", client.find_stores, address)
    if isinstance(outcome, Rejected):
        raise StoreLookupError(f"Failed to find nearby stores: {outcome.reason}")
    if isinstance(outcome, SystemFault):
        outcome.raise_error("Failed to find nearby stores")

    stores = rank_stores([parse_store(raw) for raw in outcome.data])
    session.record_stores(stores)
    logger.info("Found {} orderable stores near {!r}", len(stores), address)
    return StoreLookupResult(stores=[summarize_store(s) for s in stores])
