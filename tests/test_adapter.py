"""
Tests for shaping Grocy responses into tool results.
"""

import pytest

from grocy_mcp.adapter import GrocyAdapter, as_float, index_by_id, normalise_id


@pytest.fixture()
def adapter():
    return GrocyAdapter()


class TestCoercion:
    """Tests for numeric coercion of Grocy fields."""

    def test_numeric_string(self):
        assert as_float("2.5") == 2.5

    @pytest.mark.parametrize("value", [None, "", "n/a"])
    def test_missing_or_invalid(self, value):
        assert as_float(value) == 0.0

    def test_normalise_string_id(self):
        assert normalise_id("12") == 12

    def test_normalise_keeps_non_numeric(self):
        assert normalise_id("abc") == "abc"

    def test_index_by_id(self):
        indexed = index_by_id([{"id": "1", "name": "a"}, {"id": 2, "name": "b"}])
        assert indexed[1]["name"] == "a"
        assert indexed[2]["name"] == "b"


class TestShortfall:
    """Tests for recipe shortfall calculation."""

    def test_scales_by_servings(self, adapter):
        positions = [{"product_id": 7, "amount": 2, "note": "diced"}]
        [item] = adapter.shortfall(positions, {7: 4.0}, servings=3)
        assert item == {
            "product_id": 7,
            "needed": 6.0,
            "in_stock": 4.0,
            "missing": 2.0,
            "note": "diced",
        }

    def test_enough_in_stock(self, adapter):
        [item] = adapter.shortfall([{"product_id": 7, "amount": "1"}], {7: 5.0}, servings=1)
        assert item["missing"] == 0.0

    def test_product_not_in_stock(self, adapter):
        [item] = adapter.shortfall([{"product_id": "8", "amount": 1.5}], {}, servings=2)
        assert item["product_id"] == 8
        assert item["in_stock"] == 0.0
        assert item["missing"] == 3.0

    def test_stock_amounts(self, adapter):
        stock = [{"product_id": "3", "amount_aggregated": "4.5"}, {"product_id": 4}]
        assert adapter.stock_amounts(stock) == {3: 4.5, 4: 0.0}


class TestIngredientStatus:
    """Tests for per-ingredient stock coverage."""

    def test_fulfilled_and_missing(self, adapter):
        positions = [
            {"product_id": 1, "amount": 1},
            {"product_id": 2, "amount": 2},
        ]
        products = [{"id": 1, "name": "Flour"}]
        status = adapter.ingredient_status(positions, products, {1: 3.0, 2: 1.0}, servings=1)

        assert status[0]["product_name"] == "Flour"
        assert status[0]["fulfilled"] is True
        assert status[1]["product_name"] == "Unknown"
        assert status[1]["fulfilled"] is False
        assert status[1]["missing"] == 1.0


class TestBulkStockEntry:
    """Tests for bulk stock summaries."""

    def test_not_in_stock(self, adapter):
        assert adapter.bulk_stock_entry(5, {}) == {
            "product_id": 5,
            "amount": 0,
            "amount_aggregated": 0,
            "in_stock": False,
        }

    def test_in_stock(self, adapter):
        stock_map = {
            5: {
                "product_id": 5,
                "amount": 2,
                "amount_aggregated": 3,
                "best_before_date": "2030-01-01",
                "is_aggregated_amount": 1,
                "product": {"name": "Yeast"},
            }
        }
        entry = adapter.bulk_stock_entry(5, stock_map)
        assert entry["product_name"] == "Yeast"
        assert entry["amount_aggregated"] == 3
        assert "in_stock" not in entry


class TestConvertToStockUnit:
    """Tests for ingredient conversion via product stock units."""

    def test_converts_grams_to_kilograms(self, adapter):
        units = {2: {"id": 2, "name": "kg"}}
        conversion = adapter.convert_to_stock_unit(2500, "g", {"qu_id_stock": "2"}, units)
        assert conversion.amount == 2.5

    def test_unknown_stock_unit(self, adapter):
        assert adapter.convert_to_stock_unit(10, "g", {"qu_id_stock": 9}, {}) is None


class TestBrewingIngredient:
    """Tests for the BeerSmith ingredient export."""

    @pytest.mark.parametrize(
        "group_name,hint",
        [
            ("Hops", "hops"),
            ("Base Malts", "grain"),
            ("Fermentables", "grain"),
            ("Yeast", "yeast"),
            ("Additives", "misc"),
            ("Spices", "spices"),
        ],
    )
    def test_group_hint(self, adapter, group_name, hint):
        assert adapter.product_group_hint({"name": group_name}) == hint

    def test_no_group(self, adapter):
        assert adapter.product_group_hint(None) == "other"

    def test_ingredient_shape(self, adapter):
        product = {"id": 3, "name": "Cascade", "qu_id_stock": 1, "product_group_id": 4}
        ingredient = adapter.brewing_ingredient(
            product,
            units_map={1: {"name": "g"}},
            groups_map={4: {"name": "Hops"}},
            stock_map={3: {"last_price": "0.12"}},
        )
        assert ingredient == {
            "name": "Cascade",
            "price": 0.12,
            "qu_id": "g",
            "product_group": "hops",
            "product_id": 3,
        }

    def test_ingredient_without_unit_or_stock(self, adapter):
        ingredient = adapter.brewing_ingredient({"id": 3, "name": "Salt"}, {}, {}, {})
        assert ingredient["qu_id"] == "unit"
        assert ingredient["price"] == 0.0
        assert ingredient["product_group"] == "other"
