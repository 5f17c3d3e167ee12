"""Menu retrieval: fetch a store's menu and group it for browsing.

The provider's menu payload has three sections this module relies on:

    Products  product code -> name, type, variant codes, available toppings
    Variants  variant code -> sized/crusted sellable code with a price
    Toppings  product type -> topping code -> name

A payload missing any of them is reported as incomplete menu data, which
in practice means the store is closed or the id is wrong.
"""

from typing import Any

from loguru import logger

from .client import CommerceClient
from .enums import CategoryName
from .errors import IncompleteMenuError, RemoteSystemError
from .models import Menu, MenuCategory, MenuItem, MenuVariant, SideOption, ToppingOption
from .outcomes import Rejected, SystemFault, call_remote
from .results import MenuResult
from .session import SessionStore

REQUIRED_SECTIONS = ("Products", "Variants", "Toppings")

# Raw provider product types, grouped into the categories shown to callers.
PRODUCT_TYPE_CATEGORIES: dict[str, CategoryName] = {
    "Pizza": CategoryName.PIZZAS,
    "Pasta": CategoryName.PASTAS,
    "Sandwich": CategoryName.SANDWICHES,
    "Sides": CategoryName.SIDES,
    "Wings": CategoryName.SIDES,
    "Bread": CategoryName.SIDES,
    "GSalad": CategoryName.SIDES,
    "Salad": CategoryName.SIDES,
    "Chips": CategoryName.SIDES,
    "Tots": CategoryName.SIDES,
    "Loaded Tots": CategoryName.SIDES,
    "Drinks": CategoryName.DRINKS,
    "Dessert": CategoryName.DESSERTS,
    "Desserts": CategoryName.DESSERTS,
}

# Enum definition order is the display order.
CATEGORY_ORDER: tuple[CategoryName, ...] = tuple(CategoryName)

PIZZA_PORTIONS = ["1/1", "1/2", "2/2"]
WHOLE_PORTION = ["1/1"]
DEFAULT_QUANTITIES = ["0", "1"]


def category_for(product_type: str | None) -> CategoryName:
    return PRODUCT_TYPE_CATEGORIES.get(product_type or "", CategoryName.OTHER)


def _lookup_name(section: dict[str, Any], product_type: str, code: str) -> str:
    """Find a topping/side name, preferring the product type's own table."""
    typed = section.get(product_type)
    if isinstance(typed, dict) and isinstance(typed.get(code), dict):
        return typed[code].get("Name") or code
    for table in section.values():
        if isinstance(table, dict) and isinstance(table.get(code), dict):
            return table[code].get("Name") or code
    return code


def parse_available_toppings(
    available: str | None, product_type: str, toppings: dict[str, Any]
) -> list[ToppingOption]:
    """Parse "X=0:0.5:1:1.5,C=0:1,P" into topping options."""
    if not available:
        return []
    portions = PIZZA_PORTIONS if product_type == "Pizza" else WHOLE_PORTION
    options: dict[str, ToppingOption] = {}
    for entry in available.split(","):
        code, _, quantities = entry.strip().partition("=")
        if not code or code in options:
            continue
        options[code] = ToppingOption(
            code=code,
            name=_lookup_name(toppings, product_type, code),
            quantities=quantities.split(":") if quantities else list(DEFAULT_QUANTITIES),
            portions=list(portions),
        )
    return list(options.values())


def parse_available_sides(
    available: str | None, product_type: str, sides: dict[str, Any]
) -> list[SideOption]:
    if not available:
        return []
    seen: dict[str, SideOption] = {}
    for entry in available.split(","):
        code = entry.strip().partition("=")[0]
        if code and code not in seen:
            seen[code] = SideOption(code=code, name=_lookup_name(sides, product_type, code))
    return list(seen.values())


def _price(raw: Any) -> float:
    try:
        return float(raw or 0)
    except (TypeError, ValueError):
        return 0.0


def build_item(product: dict[str, Any], raw_menu: dict[str, Any]) -> MenuItem:
    """Aggregate a product and its variants into one menu item."""
    product_type = product.get("ProductType") or ""
    variants: dict[str, MenuVariant] = {}
    for code in product.get("Variants") or []:
        if code in variants:
            continue
        raw_variant = raw_menu["Variants"].get(code) or {}
        variants[code] = MenuVariant(
            code=code,
            name=raw_variant.get("Name") or code,
            price=_price(raw_variant.get("Price")),
        )
    return MenuItem(
        code=product.get("Code", ""),
        name=product.get("Name") or product.get("Code", ""),
        description=product.get("Description") or "",
        product_type=product_type,
        variants=sorted(variants.values(), key=lambda v: v.code),
        toppings=parse_available_toppings(
            product.get("AvailableToppings"), product_type, raw_menu["Toppings"]
        ),
        sides=parse_available_sides(
            product.get("AvailableSides"), product_type, raw_menu.get("Sides") or {}
        ),
    )


def build_menu(store_id: str, raw_menu: dict[str, Any]) -> Menu:
    missing = [name for name in REQUIRED_SECTIONS if not isinstance(raw_menu.get(name), dict)]
    if missing:
        raise IncompleteMenuError(store_id, missing)

    grouped: dict[CategoryName, list[MenuItem]] = {name: [] for name in CATEGORY_ORDER}
    for product in raw_menu["Products"].values():
        if not isinstance(product, dict):
            continue
        grouped[category_for(product.get("ProductType"))].append(
            build_item(product, raw_menu)
        )

    categories = [
        MenuCategory(name=name, items=sorted(items, key=lambda i: (i.name, i.code)))
        for name, items in grouped.items()
        if items
    ]
    return Menu(store_id=store_id, categories=categories)


def get_menu(session: SessionStore, client: CommerceClient, store_id: str) -> MenuResult:
    """Select a store and fetch its menu into the session."""
    if session.select_store(store_id) is None:
        # Not among the last search results; accept the id as given.
        session.remember_store_id(store_id)

    outcome = call_remote("fetch_menu", client.fetch_menu, store_id)
    if isinstance(outcome, Rejected):
        raise RemoteSystemError(f"Failed to get menu for store {store_id}: {outcome.reason}")
    if isinstance(outcome, SystemFault):
        outcome.raise_error(f"Failed to get menu for store {store_id}")

    menu = build_menu(store_id, outcome.data)
    session.record_menu(menu)
    logger.info(
        "Menu for store {}: {} categories, {} items",
        store_id,
        len(menu.categories),
        sum(len(c.items) for c in menu.categories),
    )
    return MenuResult(menu=menu)
