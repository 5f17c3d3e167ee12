"""Remote commerce client.

CommerceClient is the narrow interface the workflow operations depend on.
DominosClient implements it against the Domino's online ordering ("power")
JSON API and the order tracker service.

Error contract for every method:
    CommerceRejectedError  the provider answered and refused the request
    RemoteSystemError      transport failure, HTTP error or unreadable body
"""

from typing import Any, Protocol

import requests
from loguru import logger

from .address import split_address_lines
from .config import Settings
from .errors import CommerceRejectedError, RemoteSystemError

DEFAULT_ORDER_URL = "https://order.dominos.com/power"
DEFAULT_TRACKER_URL = "https://tracker.dominos.com/tracker-presentation-service/v2"

# Provider status codes on order responses
STATUS_FAILURE = -1


class CommerceClient(Protocol):
    def find_stores(self, address: str) -> list[dict[str, Any]]: ...

    def fetch_menu(self, store_id: str) -> dict[str, Any]: ...

    def validate_order(self, payload: dict[str, Any]) -> dict[str, Any]: ...

    def price_order(self, payload: dict[str, Any]) -> dict[str, Any]: ...

    def place_order(self, payload: dict[str, Any]) -> dict[str, Any]: ...

    def track_by_phone(self, phone: str, store_id: str) -> dict[str, Any]: ...

    def track_by_id(self, store_id: str, order_id: str) -> dict[str, Any]: ...


def describe_status_items(response: dict[str, Any]) -> str:
    """Collect the provider's status codes/messages into one reason string."""
    items = list(response.get("StatusItems") or [])
    order = response.get("Order")
    if isinstance(order, dict):
        items.extend(order.get("StatusItems") or [])
    reasons = []
    for item in items:
        code = item.get("Code", "")
        message = item.get("Message") or item.get("PulseText") or ""
        text = f"{code}: {message}" if code and message else code or message
        if text and text not in reasons:
            reasons.append(text)
    return "; ".join(reasons) or "Rejected by provider"


class DominosClient:
    """Synchronous JSON client for the Domino's ordering and tracker APIs."""

    def __init__(
        self,
        order_url: str = DEFAULT_ORDER_URL,
        tracker_url: str = DEFAULT_TRACKER_URL,
        *,
        market: str = "UNITED_STATES",
        language: str = "en",
        timeout: float = 15.0,
        http: requests.Session | None = None,
    ) -> None:
        self.order_url = order_url.rstrip("/")
        self.tracker_url = tracker_url.rstrip("/")
        self.market = market
        self.language = language
        self.timeout = timeout
        self._http = http or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "DominosClient":
        return cls(
            settings.dominos_order_url,
            settings.dominos_tracker_url,
            market=settings.dominos_market,
            language=settings.dominos_language,
            timeout=settings.dominos_timeout,
        )

    # --- transport ---

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = self._http.request(method, url, timeout=self.timeout, **kwargs)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise RemoteSystemError(f"{method} {url} failed: {exc}") from exc
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteSystemError(f"{method} {url} returned invalid JSON") from exc

    def _post_order(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.order_url}/{endpoint}"
        body = self._request(
            "POST",
            url,
            json=payload,
            headers={
                "Referer": "https://order.dominos.com/en/pages/order/",
                "Content-Type": "application/json",
            },
        )
        if not isinstance(body, dict):
            raise RemoteSystemError(f"{endpoint} response is not an object")
        if body.get("Status") == STATUS_FAILURE:
            raise CommerceRejectedError(describe_status_items(body), body.get("StatusItems"))
        if not isinstance(body.get("Order"), dict):
            raise RemoteSystemError(f"{endpoint} response has no Order section")
        return body

    # --- store locator & menu ---

    def find_stores(self, address: str) -> list[dict[str, Any]]:
        street, city_line = split_address_lines(address)
        body = self._request(
            "GET",
            f"{self.order_url}/store-locator",
            params={"s": street, "c": city_line, "type": "Delivery"},
        )
        if not isinstance(body, dict):
            raise RemoteSystemError("store-locator response is not an object")
        if body.get("Status") == STATUS_FAILURE:
            raise CommerceRejectedError(
                f"Could not locate address {address!r}: {describe_status_items(body)}"
            )
        stores = body.get("Stores")
        if stores is None:
            raise RemoteSystemError("store-locator response has no Stores section")
        logger.debug("store-locator returned {} stores", len(stores))
        return stores

    def fetch_menu(self, store_id: str) -> dict[str, Any]:
        body = self._request(
            "GET",
            f"{self.order_url}/store/{store_id}/menu",
            params={"lang": self.language, "structured": "true"},
        )
        if not isinstance(body, dict):
            raise RemoteSystemError(f"menu response for store {store_id} is not an object")
        return body

    # --- order lifecycle ---

    def validate_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._post_order("validate-order", payload)

    def price_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._post_order("price-order", payload)

    def place_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._post_order("place-order", payload)

    # --- tracking ---

    def _track(self, params: dict[str, str], store_id: str) -> dict[str, Any]:
        body = self._request(
            "GET",
            f"{self.tracker_url}/orders",
            params=params,
            headers={
                "Accept": "application/json",
                "dpz-language": self.language,
                "dpz-market": self.market,
            },
        )
        orders = body if isinstance(body, list) else [body] if body else []
        orders = [o for o in orders if isinstance(o, dict)]
        matching = [o for o in orders if str(o.get("StoreID", store_id)) == store_id]
        if not matching:
            raise CommerceRejectedError("No tracking information found")
        return matching[0]

    def track_by_phone(self, phone: str, store_id: str) -> dict[str, Any]:
        return self._track({"phonenumber": phone}, store_id)

    def track_by_id(self, store_id: str, order_id: str) -> dict[str, Any]:
        return self._track({"storeid": store_id, "orderkey": order_id}, store_id)
