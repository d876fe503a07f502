"""Unit tests for matching interpreted orders against the catalog."""
from decimal import Decimal

import pytest

from smartorder.services.catalog.base import Product
from smartorder.services.ordering.models import ParsedOrderItem, ResolutionOutcome
from smartorder.services.ordering.resolver import CartResolver, match_product, resolve_cart


@pytest.fixture
def coke_catalog():
    return [
        Product(
            id="1",
            name="Coke",
            price=Decimal("2.50"),
            category="Drinks",
            image_url="https://placehold.co/300x200.png",
            ai_hint="soda drink",
        )
    ]


class TestMatchProduct:
    """Test product name matching."""

    def test_case_insensitive(self, coke_catalog):
        assert match_product(coke_catalog, "COKE").id == "1"
        assert match_product(coke_catalog, "coke").id == "1"
        assert match_product(coke_catalog, "  Coke ").id == "1"

    def test_no_partial_match(self, coke_catalog):
        assert match_product(coke_catalog, "Cok") is None
        assert match_product(coke_catalog, "Diet Coke") is None

    def test_first_match_wins(self):
        products = [
            Product(id="a", name="Tea", price=Decimal("1"), category="Drinks"),
            Product(id="b", name="tea", price=Decimal("2"), category="Drinks"),
        ]
        assert match_product(products, "TEA").id == "a"


class TestResolveCart:
    """Test cart resolution and totals."""

    def test_single_item_quantity(self, coke_catalog):
        resolution = resolve_cart(coke_catalog, [ParsedOrderItem(item_name="coke", quantity=2)])

        assert len(resolution.lines) == 1
        line = resolution.lines[0]
        assert line.product_id == "1"
        assert line.name == "Coke"
        assert line.quantity == 2
        assert line.unit_price == Decimal("2.50")
        assert line.image_url == "https://placehold.co/300x200.png"
        assert line.ai_hint == "soda drink"
        assert resolution.total_amount == Decimal("5.00")
        assert resolution.unmatched_names == []
        assert resolution.outcome == ResolutionOutcome.PROCESSED

    def test_partial_match(self, coke_catalog):
        resolution = resolve_cart(
            coke_catalog,
            [
                ParsedOrderItem(item_name="Coke", quantity=1),
                ParsedOrderItem(item_name="Yak Burger", quantity=1),
            ],
        )

        assert [line.name for line in resolution.lines] == ["Coke"]
        assert resolution.unmatched_names == ["Yak Burger"]
        assert resolution.total_amount == Decimal("2.50")
        assert resolution.outcome == ResolutionOutcome.PARTIAL

    def test_empty_interpreter_output(self, coke_catalog):
        resolution = resolve_cart(coke_catalog, [])

        assert resolution.lines == []
        assert resolution.unmatched_names == []
        assert resolution.total_amount == Decimal("0")
        assert resolution.outcome == ResolutionOutcome.NOTHING_UNDERSTOOD

    def test_nothing_matched_is_distinct(self, coke_catalog):
        resolution = resolve_cart(coke_catalog, [ParsedOrderItem(item_name="Unicorn Steak")])

        assert resolution.lines == []
        assert resolution.unmatched_names == ["Unicorn Steak"]
        assert resolution.total_amount == Decimal("0")
        assert resolution.outcome == ResolutionOutcome.NOTHING_MATCHED

    def test_lines_follow_input_order(self, catalog_products):
        items = [
            ParsedOrderItem(item_name="fries"),
            ParsedOrderItem(item_name="Mystery Soup"),
            ParsedOrderItem(item_name="burger", quantity=2),
            ParsedOrderItem(item_name="coke", quantity=3),
        ]
        resolution = resolve_cart(catalog_products, items)

        assert [line.name for line in resolution.lines] == ["Fries", "Burger", "Coke"]
        assert resolution.unmatched_names == ["Mystery Soup"]

    def test_total_is_sum_of_lines(self, catalog_products):
        items = [
            ParsedOrderItem(item_name="Burger", quantity=2),
            ParsedOrderItem(item_name="Fries", quantity=1),
            ParsedOrderItem(item_name="Iced Lemon Tea", quantity=3),
        ]
        resolution = resolve_cart(catalog_products, items)

        expected = sum(line.quantity * line.unit_price for line in resolution.lines)
        assert resolution.total_amount == expected
        assert resolution.total_amount == Decimal("32.50")

    def test_special_requests_carried(self, catalog_products):
        resolution = resolve_cart(
            catalog_products,
            [ParsedOrderItem(item_name="Burger", special_requests="no onions")],
        )
        assert resolution.lines[0].special_requests == "no onions"

    def test_ambiguous_item_reports_alternatives(self, catalog_products):
        resolution = resolve_cart(
            catalog_products,
            [
                ParsedOrderItem(
                    item_name="tea",
                    is_ambiguous=True,
                    alternatives=["Iced Lemon Tea", "Milk Tea"],
                )
            ],
        )
        assert resolution.unmatched_names == ["tea"]
        assert resolution.clarifications == {"tea": ["Iced Lemon Tea", "Milk Tea"]}


class TestCartResolver:
    """Test resolver against a catalog store."""

    @pytest.mark.asyncio
    async def test_resolves_against_store(self, memory_store):
        resolver = CartResolver(memory_store)
        resolution = await resolver.resolve([ParsedOrderItem(item_name="COKE", quantity=4)])

        assert resolution.lines[0].product_id == "p-coke"
        assert resolution.total_amount == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_uses_current_catalog_price(self, memory_store):
        await memory_store.update_product("p-coke", {"price": Decimal("3.00")})
        resolution = await CartResolver(memory_store).resolve([ParsedOrderItem(item_name="Coke")])

        assert resolution.lines[0].unit_price == Decimal("3.00")

    @pytest.mark.asyncio
    async def test_resolves_against_sql_store(self, sql_store):
        resolution = await CartResolver(sql_store).resolve(
            [ParsedOrderItem(item_name="fries", quantity=2), ParsedOrderItem(item_name="Yak Burger")]
        )

        assert resolution.lines[0].unit_price == Decimal("3.50")
        assert resolution.total_amount == Decimal("7.00")
        assert resolution.unmatched_names == ["Yak Burger"]
