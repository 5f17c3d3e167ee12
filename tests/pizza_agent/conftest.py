"""Shared pytest fixtures for pizza_agent tests.

No network: every test talks to FakeCommerceClient, which replays canned
provider payloads and records each call it receives.
"""

import copy
from typing import Any

import pytest

from pizza_agent.errors import CommerceRejectedError, RemoteSystemError
from pizza_agent.models import Customer
from pizza_agent.session import SessionStore

# ---------------------------------------------------------------------------
# Sample provider payloads
# ---------------------------------------------------------------------------

RAW_STORES: list[dict[str, Any]] = [
    {
        "StoreID": "4336",
        "AddressDescription": "2 Portola Plaza\nMonterey, CA 93940",
        "Phone": "831-555-0100",
        "IsOpen": True,
        "IsOnlineCapable": True,
        "ServiceIsOpen": {"Delivery": True, "Carryout": True},
        "ServiceMethodEstimatedWaitMinutes": {
            "Delivery": {"Min": 20, "Max": 30},
            "Carryout": {"Min": 10, "Max": 15},
        },
        "MinDistance": 1.2,
    },
    {
        "StoreID": "1001",
        "AddressDescription": "400 Alvarado St\nMonterey, CA 93940",
        "Phone": "831-555-0101",
        "IsOpen": True,
        "IsOnlineCapable": True,
        "ServiceIsOpen": {"Delivery": False, "Carryout": True},
        "ServiceMethodEstimatedWaitMinutes": {"Carryout": {"Min": 8, "Max": 12}},
        "MinDistance": 0.4,
    },
    {
        "StoreID": "2002",
        "AddressDescription": "1 Closed Way\nMonterey, CA 93940",
        "IsOpen": False,
        "IsOnlineCapable": True,
        "MinDistance": 0.1,
    },
    {
        "StoreID": "3003",
        "AddressDescription": "9 Phone Only Rd\nMonterey, CA 93940",
        "IsOpen": True,
        "IsOnlineCapable": False,
        "MinDistance": 0.2,
    },
    {
        "StoreID": "5005",
        "AddressDescription": "77 Unknown Distance Ave\nSeaside, CA 93955",
        "IsOpen": True,
        "IsOnlineCapable": True,
    },
    {
        "StoreID": "6006",
        "AddressDescription": "12 Lighthouse Ave\nPacific Grove, CA 93950",
        "IsOpen": True,
        "IsOnlineCapable": True,
        "MinDistance": "1.2",
    },
]

RAW_MENU: dict[str, Any] = {
    "Products": {
        "S_PIZZA": {
            "Code": "S_PIZZA",
            "Name": "Hand Tossed Pizza",
            "ProductType": "Pizza",
            "Description": "Garlic-seasoned crust with a rich, buttery taste.",
            "Variants": ["14SCREEN", "12SCREEN", "14SCREEN"],
            "AvailableToppings": "X=0:0.5:1:1.5,C=0:0.5:1:1.5,P",
        },
        "S_WINGS": {
            "Code": "S_WINGS",
            "Name": "Plain Wings",
            "ProductType": "Wings",
            "Variants": ["W08PPLNW"],
            "AvailableSides": "SIDRAN=0:1,SIDBLU",
        },
        "S_BREAD": {
            "Code": "S_BREAD",
            "Name": "Garlic Bread Twists",
            "ProductType": "Bread",
            "Variants": ["B8PCGT"],
        },
        "F_COKE": {
            "Code": "F_COKE",
            "Name": "Coke",
            "ProductType": "Drinks",
            "Variants": ["2LCOKE"],
        },
        "F_LAVA": {
            "Code": "F_LAVA",
            "Name": "Chocolate Lava Crunch Cakes",
            "ProductType": "Dessert",
            "Variants": ["MARBRWNE"],
        },
        "S_MYSTERY": {
            "Code": "S_MYSTERY",
            "Name": "Mystery Box",
            "ProductType": "Mystery",
            "Variants": [],
        },
    },
    "Variants": {
        "14SCREEN": {"Name": 'Large (14") Hand Tossed Pizza', "Price": "13.99"},
        "12SCREEN": {"Name": 'Medium (12") Hand Tossed Pizza', "Price": "11.99"},
        "W08PPLNW": {"Name": "Plain Wings (8 pc)", "Price": "8.99"},
        "B8PCGT": {"Name": "Garlic Bread Twists", "Price": "7.99"},
        "2LCOKE": {"Name": "Coke 2-Liter", "Price": "3.49"},
        "MARBRWNE": {"Name": "Lava Crunch Cakes", "Price": "6.99"},
    },
    "Toppings": {
        "Pizza": {
            "X": {"Name": "Robust Inspired Tomato Sauce"},
            "C": {"Name": "Cheese"},
            "P": {"Name": "Pepperoni"},
        }
    },
    "Sides": {
        "Wings": {
            "SIDRAN": {"Name": "Ranch"},
            "SIDBLU": {"Name": "Blue Cheese"},
        }
    },
}

VALIDATE_RESPONSE: dict[str, Any] = {"Status": 0, "Order": {"OrderID": "ABC123"}}

PRICE_RESPONSE: dict[str, Any] = {
    "Status": 0,
    "Order": {
        "OrderID": "ABC123",
        "Amounts": {"Menu": 13.99, "Surcharge": 3.99, "Tax": 1.52, "Customer": 19.5},
    },
}

PLACE_RESPONSE: dict[str, Any] = {
    "Status": 1,
    "Order": {"OrderID": "ABC123", "OrderStatus": "Placed", "EstimatedWaitMinutes": "25-35"},
}

TRACK_RESPONSE: dict[str, Any] = {
    "StoreID": "4336",
    "OrderStatus": "Oven",
    "ServiceMethod": "Delivery",
    "OrderDescription": '1 Large (14") Hand Tossed Pizza, 1 Coke 2-Liter',
    "PlacedTime": "2026-10-19T18:05:00",
    "EstimatedDeliveryTime": "18:45",
}


# ---------------------------------------------------------------------------
# Fake commerce client
# ---------------------------------------------------------------------------


class FakeCommerceClient:
    """In-memory CommerceClient: canned responses, recorded calls.

    respond(method, value) replaces the canned response; when value is an
    exception instance it is raised instead of returned.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple]] = []
        self.responses: dict[str, Any] = {
            "find_stores": RAW_STORES,
            "fetch_menu": RAW_MENU,
            "validate_order": VALIDATE_RESPONSE,
            "price_order": PRICE_RESPONSE,
            "place_order": PLACE_RESPONSE,
            "track_by_phone": TRACK_RESPONSE,
            "track_by_id": TRACK_RESPONSE,
        }

    def respond(self, method: str, value: Any) -> None:
        self.responses[method] = value

    def reject(self, method: str, reason: str) -> None:
        self.respond(method, CommerceRejectedError(reason))

    def fail(self, method: str, detail: str = "connection reset") -> None:
        self.respond(method, RemoteSystemError(detail))

    def called(self, method: str) -> list[tuple]:
        """Argument tuples of every call to one method."""
        return [args for name, args in self.calls if name == method]

    def _call(self, method: str, *args: Any) -> Any:
        self.calls.append((method, args))
        value = self.responses[method]
        if isinstance(value, Exception):
            raise value
        return copy.deepcopy(value)

    def find_stores(self, address):
        return self._call("find_stores", address)

    def fetch_menu(self, store_id):
        return self._call("fetch_menu", store_id)

    def validate_order(self, payload):
        return self._call("validate_order", payload)

    def price_order(self, payload):
        return self._call("price_order", payload)

    def place_order(self, payload):
        return self._call("place_order", payload)

    def track_by_phone(self, phone, store_id):
        return self._call("track_by_phone", phone, store_id)

    def track_by_id(self, store_id, order_id):
        return self._call("track_by_id", store_id, order_id)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def client() -> FakeCommerceClient:
    return FakeCommerceClient()


@pytest.fixture
def session() -> SessionStore:
    """A fresh, empty session."""
    return SessionStore(session_id="test-session")


@pytest.fixture
def raw_stores() -> list[dict[str, Any]]:
    return copy.deepcopy(RAW_STORES)


@pytest.fixture
def raw_menu() -> dict[str, Any]:
    return copy.deepcopy(RAW_MENU)


@pytest.fixture
def delivery_customer() -> Customer:
    return Customer(
        first_name="Ada",
        last_name="Lovelace",
        phone="(831) 555-0199",
        email="ada@example.com",
        address="2 Portola Plaza, Monterey, CA 93940",
    )


@pytest.fixture
def carryout_customer() -> Customer:
    """Customer with no address on file."""
    return Customer(first_name="Alan", last_name="Turing", phone="831-555-0142")
