"""Agent-facing tools, one per workflow operation.

build_tools() binds a session and a commerce client into a list of LangChain
StructuredTools. Each tool validates its arguments against a schema from
schemas.py, runs the operation, and returns a plain dict. Workflow errors
become ToolExceptions so the agent sees the reason as the tool output
instead of the graph crashing.
"""

import functools
from collections.abc import Callable
from typing import Any

from langchain_core.tools import StructuredTool, ToolException
from loguru import logger
from pydantic import BaseModel

from . import menu, ordering, stores, tracking
from .client import CommerceClient
from .errors import OrderWorkflowError
from .schemas import (
    AddItemArgs,
    CreateOrderArgs,
    CustomerArgs,
    FindNearbyStoresArgs,
    GetMenuArgs,
    ItemArgs,
    OrderIdArgs,
    PaymentArgs,
    PlaceOrderArgs,
    RemoveItemArgs,
    TrackOrderArgs,
)
from .session import SessionStore


def _as_tool_errors(fn: Callable[..., dict[str, Any]]) -> Callable[..., dict[str, Any]]:
    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> dict[str, Any]:
        try:
            return fn(*args, **kwargs)
        except OrderWorkflowError as exc:
            logger.warning("Tool {} failed [{}]: {}", fn.__name__, exc.code, exc.message)
            raise ToolException(exc.message) from exc

    return wrapper


def _tool(
    fn: Callable[..., dict[str, Any]], args_schema: type[BaseModel], description: str
) -> StructuredTool:
    return StructuredTool.from_function(
        func=_as_tool_errors(fn),
        name=fn.__name__,
        description=description,
        args_schema=args_schema,
        handle_tool_error=True,
    )


def build_tools(session: SessionStore, client: CommerceClient) -> list[StructuredTool]:
    """Create the tool set for one session."""

    def find_nearby_stores(address: str) -> dict[str, Any]:
        return stores.find_nearby_stores(session, client, address).to_dict()

    def get_menu(store_id: str) -> dict[str, Any]:
        return menu.get_menu(session, client, store_id).to_dict()

    def create_order(store_id: str, customer: Any, order_type: str) -> dict[str, Any]:
        customer_args = CustomerArgs.model_validate(customer)
        return ordering.create_order(
            session, store_id, order_type, customer_args.to_customer()
        ).to_dict()

    def add_item_to_order(order_id: str, item: Any) -> dict[str, Any]:
        item_args = ItemArgs.model_validate(item)
        return ordering.add_item(
            session, order_id, item_args.code, item_args.options, item_args.quantity
        ).to_dict()

    def remove_item_from_order(order_id: str, item_index: int) -> dict[str, Any]:
        return ordering.remove_item(session, order_id, item_index).to_dict()

    def get_order_state(order_id: str) -> dict[str, Any]:
        return ordering.get_order_state(session, order_id).to_dict()

    def validate_order(order_id: str) -> dict[str, Any]:
        return ordering.validate_order(session, client, order_id).to_dict()

    def price_order(order_id: str) -> dict[str, Any]:
        return ordering.price_order(session, client, order_id).to_dict()

    def place_order(order_id: str, payment: Any) -> dict[str, Any]:
        payment_args = PaymentArgs.model_validate(payment)
        return ordering.place_order(
            session, client, order_id, payment_args.to_details()
        ).to_dict()

    def track_order(
        phone_number: str, store_id: str, order_id: str | None = None
    ) -> dict[str, Any]:
        return tracking.track_order(client, phone_number, store_id, order_id).to_dict()

    return [
        _tool(
            find_nearby_stores,
            FindNearbyStoresArgs,
            "Find open stores that take online orders near an address, nearest first.",
        ),
        _tool(
            get_menu,
            GetMenuArgs,
            "Get the menu for a store, grouped by category, with item and topping codes.",
        ),
        _tool(
            create_order,
            CreateOrderArgs,
            "Create a new, empty delivery or carryout order for a customer.",
        ),
        _tool(
            add_item_to_order,
            AddItemArgs,
            "Add an item (menu code, optional topping options, quantity) to an order.",
        ),
        _tool(
            remove_item_from_order,
            RemoveItemArgs,
            "Remove the item at a zero-based index from an order.",
        ),
        _tool(
            get_order_state,
            OrderIdArgs,
            "Show an order's store, customer, indexed items and current status.",
        ),
        _tool(
            validate_order,
            OrderIdArgs,
            "Check an order with the store before pricing it.",
        ),
        _tool(
            price_order,
            OrderIdArgs,
            "Get the subtotal, tax, delivery fee and total for an order.",
        ),
        _tool(
            place_order,
            PlaceOrderArgs,
            "Place a priced order with cash or credit card payment.",
        ),
        _tool(
            track_order,
            TrackOrderArgs,
            "Track an order's progress by phone number and store.",
        ),
    ]
