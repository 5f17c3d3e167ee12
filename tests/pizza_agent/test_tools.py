"""Tests for the agent-facing tool wrappers."""

import pytest

from pizza_agent.tools import build_tools

TOOL_NAMES = [
    "find_nearby_stores",
    "get_menu",
    "create_order",
    "add_item_to_order",
    "remove_item_from_order",
    "get_order_state",
    "validate_order",
    "price_order",
    "place_order",
    "track_order",
]

DELIVERY_CUSTOMER = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "phone": "831-555-0199",
    "address": "2 Portola Plaza, Monterey, CA 93940",
}


@pytest.fixture
def tools(session, client):
    return {tool.name: tool for tool in build_tools(session, client)}


def _create(tools, order_type="delivery", customer=None) -> str:
    result = tools["create_order"].invoke(
        {
            "store_id": "4336",
            "customer": customer or DELIVERY_CUSTOMER,
            "order_type": order_type,
        }
    )
    return result["order_id"]


class TestToolSurface:
    def test_tool_names(self, tools):
        assert list(tools) == TOOL_NAMES

    def test_descriptions(self, tools):
        assert all(tool.description for tool in tools.values())

    def test_required_arguments(self, tools):
        """Declared schemas mark the required arguments."""
        schema = tools["track_order"].args_schema.model_json_schema()
        assert set(schema["required"]) == {"phone_number", "store_id"}
        schema = tools["add_item_to_order"].args_schema.model_json_schema()
        assert set(schema["required"]) == {"order_id", "item"}


class TestToolFlow:
    """End-to-end ordering through the tools with the fake client."""

    def test_full_delivery_flow(self, tools, client):
        stores = tools["find_nearby_stores"].invoke(
            {"address": "2 Portola Plaza, Monterey, CA 93940"}
        )
        assert stores["stores"][0]["store_id"] == "1001"

        menu = tools["get_menu"].invoke({"store_id": "4336"})
        assert menu["categories"][0]["name"] == "Pizzas"

        order_id = _create(tools)
        added = tools["add_item_to_order"].invoke(
            {"order_id": order_id, "item": {"code": "14SCREEN", "options": {"P": {"1/1": "1"}}}}
        )
        assert added["items"] == [
            {"index": 0, "code": "14SCREEN", "options": {"P": {"1/1": "1"}}, "quantity": 1}
        ]

        assert tools["validate_order"].invoke({"order_id": order_id})["status"] == "validated"
        priced = tools["price_order"].invoke({"order_id": order_id})
        assert priced["pricing"]["total"] == 19.5

        placed = tools["place_order"].invoke(
            {
                "order_id": order_id,
                "payment": {
                    "type": "credit",
                    "card_number": "4111111111111111",
                    "expiration": "1230",
                    "security_code": "123",
                    "tip_amount": 3,
                },
            }
        )
        assert placed["status"] == "placed"
        assert placed["confirmation"]["estimated_delivery_time"] == "25-35 minutes"

        state = tools["get_order_state"].invoke({"order_id": order_id})
        assert state["lifecycle_state"] == "placed"

        tracked = tools["track_order"].invoke(
            {"phone_number": "831-555-0199", "store_id": "4336"}
        )
        assert tracked["tracker"]["baking"] is True

    def test_remove_item(self, tools):
        order_id = _create(tools)
        for code in ("A", "B"):
            tools["add_item_to_order"].invoke({"order_id": order_id, "item": {"code": code}})
        result = tools["remove_item_from_order"].invoke({"order_id": order_id, "item_index": 0})
        assert result["remaining_items_count"] == 1


class TestToolErrors:
    """Workflow errors come back as the tool output instead of raising."""

    def test_precondition_message_returned(self, tools, session):
        customer = {k: v for k, v in DELIVERY_CUSTOMER.items() if k != "address"}
        result = tools["create_order"].invoke(
            {"store_id": "4336", "customer": customer, "order_type": "delivery"}
        )
        assert result == "Delivery orders require a customer address"
        assert len(session) == 0

    def test_unknown_order(self, tools):
        result = tools["get_order_state"].invoke({"order_id": "nope"})
        assert result == "Order not found: nope"

    def test_place_before_price(self, tools, client):
        order_id = _create(tools)
        result = tools["place_order"].invoke(
            {"order_id": order_id, "payment": {"type": "cash"}}
        )
        assert result == "Order must be priced before placing"
        assert client.called("place_order") == []

    def test_remote_fault_message_returned(self, tools, client):
        client.fail("fetch_menu", "502 Bad Gateway")
        result = tools["get_menu"].invoke({"store_id": "4336"})
        assert "502 Bad Gateway" in result
