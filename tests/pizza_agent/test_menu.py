"""Tests for menu retrieval and grouping."""

import pytest

from pizza_agent.enums import CategoryName
from pizza_agent.errors import IncompleteMenuError, RemoteSystemError
from pizza_agent.menu import build_menu, category_for, get_menu, parse_available_toppings
from pizza_agent.stores import parse_store


def _find_item(menu, code):
    return next(i for c in menu.categories for i in c.items if i.code == code)


class TestBuildMenu:
    """Grouping of raw products into categories."""

    def test_category_order_and_omission(self, raw_menu):
        """Categories follow the fixed order; empty ones are left out."""
        menu = build_menu("4336", raw_menu)
        assert [c.name for c in menu.categories] == [
            CategoryName.PIZZAS,
            CategoryName.SIDES,
            CategoryName.DRINKS,
            CategoryName.DESSERTS,
            CategoryName.OTHER,
        ]

    def test_sides_consolidated_and_sorted(self, raw_menu):
        """Wings and Bread both land in Sides, sorted by name."""
        menu = build_menu("4336", raw_menu)
        sides = next(c for c in menu.categories if c.name is CategoryName.SIDES)
        assert [i.name for i in sides.items] == ["Garlic Bread Twists", "Plain Wings"]

    def test_variants_deduplicated_and_sorted(self, raw_menu):
        pizza = _find_item(build_menu("4336", raw_menu), "S_PIZZA")
        assert [v.code for v in pizza.variants] == ["12SCREEN", "14SCREEN"]
        assert pizza.variants[1].price == 13.99

    def test_variant_belongs_to_one_product(self, raw_menu):
        """Each variant code appears under exactly one product."""
        menu = build_menu("4336", raw_menu)
        owners = [
            item.code
            for category in menu.categories
            for item in category.items
            if any(v.code == "14SCREEN" for v in item.variants)
        ]
        assert owners == ["S_PIZZA"]

    def test_sides_parsed(self, raw_menu):
        wings = _find_item(build_menu("4336", raw_menu), "S_WINGS")
        assert [(s.code, s.name) for s in wings.sides] == [
            ("SIDRAN", "Ranch"),
            ("SIDBLU", "Blue Cheese"),
        ]

    @pytest.mark.parametrize("section", ["Products", "Variants", "Toppings"])
    def test_missing_section(self, raw_menu, section):
        """A payload without a required section means a closed or invalid store."""
        del raw_menu[section]
        with pytest.raises(IncompleteMenuError, match="closed or invalid") as exc_info:
            build_menu("4336", raw_menu)
        assert exc_info.value.missing == [section]
        assert isinstance(exc_info.value, RemoteSystemError)

    def test_unknown_product_type_is_other(self):
        assert category_for("Mystery") is CategoryName.OTHER
        assert category_for(None) is CategoryName.OTHER
        assert category_for("GSalad") is CategoryName.SIDES


class TestToppings:
    """Parsing of AvailableToppings strings."""

    def test_quantities_and_names(self, raw_menu):
        toppings = parse_available_toppings(
            "X=0:0.5:1:1.5,C=0:1,P", "Pizza", raw_menu["Toppings"]
        )
        assert [t.code for t in toppings] == ["X", "C", "P"]
        assert toppings[0].name == "Robust Inspired Tomato Sauce"
        assert toppings[0].quantities == ["0", "0.5", "1", "1.5"]
        assert toppings[2].quantities == ["0", "1"]

    def test_pizza_portions(self, raw_menu):
        """Pizza toppings can go on either half; other products take whole only."""
        pizza = parse_available_toppings("P", "Pizza", raw_menu["Toppings"])
        wings = parse_available_toppings("P", "Wings", raw_menu["Toppings"])
        assert pizza[0].portions == ["1/1", "1/2", "2/2"]
        assert wings[0].portions == ["1/1"]

    def test_unknown_code_keeps_code_as_name(self, raw_menu):
        toppings = parse_available_toppings("ZZ=0:1", "Pizza", raw_menu["Toppings"])
        assert toppings[0].name == "ZZ"

    def test_empty(self, raw_menu):
        assert parse_available_toppings(None, "Pizza", raw_menu["Toppings"]) == []


class TestGetMenu:
    """get_menu() selects the store and records the menu."""

    def test_records_menu_and_selects_candidate(self, session, client, raw_stores):
        session.record_stores([parse_store(raw_stores[0])])
        result = get_menu(session, client, "4336")
        assert session.menu == result.menu
        assert session.selected_store.store_id == "4336"
        assert client.called("fetch_menu") == [("4336",)]

    def test_unknown_store_selected_by_id(self, session, client):
        """A store outside the last search is still remembered by id."""
        get_menu(session, client, "9999")
        assert session.selected_store_id == "9999"
        assert session.selected_store is None

    def test_to_dict_is_the_menu(self, session, client):
        data = get_menu(session, client, "4336").to_dict()
        assert data["store_id"] == "4336"
        assert data["categories"][0]["name"] == "Pizzas"

    def test_incomplete_menu_not_recorded(self, session, client, raw_menu):
        del raw_menu["Toppings"]
        client.respond("fetch_menu", raw_menu)
        with pytest.raises(IncompleteMenuError):
            get_menu(session, client, "4336")
        assert session.menu is None

    def test_system_fault(self, session, client):
        client.fail("fetch_menu", "503 Service Unavailable")
        with pytest.raises(RemoteSystemError, match="503"):
            get_menu(session, client, "4336")
