"""
Tests for the Grocy HTTP client.
"""

import json

import httpx
import pytest

from conftest import api


class TestRequests:
    """Tests for request construction and response handling."""

    async def test_sends_api_key_and_joins_path(self, grocy, grocy_api):
        route = grocy_api.get(api("/system/info")).mock(
            return_value=httpx.Response(200, json={"grocy_version": {"Version": "4.0.0"}})
        )

        info = await grocy.get_system_info()

        assert info["grocy_version"]["Version"] == "4.0.0"
        request = route.calls.last.request
        assert str(request.url) == "http://grocy.test/api/system/info"
        assert request.headers["GROCY-API-KEY"] == "test-api-key"
        assert request.headers["Accept"] == "application/json"

    async def test_no_content_returns_none(self, grocy, grocy_api):
        grocy_api.post(api("/tasks/3/complete")).mock(return_value=httpx.Response(204))
        assert await grocy.complete_task(3) is None

    async def test_empty_body_returns_none(self, grocy, grocy_api):
        grocy_api.put(api("/objects/shopping_list/4")).mock(return_value=httpx.Response(200))
        assert await grocy.update_shopping_list_item(4, {"amount": 1}) is None

    async def test_error_status_raises(self, grocy, grocy_api):
        grocy_api.get(api("/objects/recipes/99")).mock(
            return_value=httpx.Response(404, json={"error_message": "Not found"})
        )
        with pytest.raises(httpx.HTTPStatusError):
            await grocy.get_recipe(99)


class TestStock:
    """Tests for stock endpoints."""

    async def test_add_product_stock_body(self, grocy, grocy_api):
        route = grocy_api.post(api("/stock/products/5/add")).mock(
            return_value=httpx.Response(200, json=[{"id": 1}])
        )

        await grocy.add_product_stock(5, 2, "2099-12-31")

        assert json.loads(route.calls.last.request.content) == {
            "amount": 2,
            "best_before_date": "2099-12-31",
        }

    async def test_consume_omits_spoiled_when_unset(self, grocy, grocy_api):
        route = grocy_api.post(api("/stock/products/5/consume")).mock(
            return_value=httpx.Response(200, json=[])
        )

        await grocy.consume_product_stock(5, 1)

        assert json.loads(route.calls.last.request.content) == {"amount": 1}

    async def test_search_products_substring(self, grocy, grocy_api):
        grocy_api.get(api("/objects/products")).mock(
            return_value=httpx.Response(
                200,
                json=[{"id": 1, "name": "Whole Milk"}, {"id": 2, "name": "Bread"}],
            )
        )
        assert await grocy.search_products("MILK") == [{"id": 1, "name": "Whole Milk"}]


class TestShoppingList:
    """Tests for shopping list endpoints."""

    async def test_add_to_shopping_list_body(self, grocy, grocy_api):
        route = grocy_api.post(api("/objects/shopping_list")).mock(
            return_value=httpx.Response(200, json={"created_object_id": 12})
        )

        result = await grocy.add_to_shopping_list(5, 2, note="For cake")

        assert result == {"created_object_id": 12}
        assert json.loads(route.calls.last.request.content) == {
            "product_id": 5,
            "shopping_list_id": 1,
            "amount": 2,
            "note": "For cake",
        }

    async def test_clear_targets_default_list(self, grocy, grocy_api):
        route = grocy_api.post(api("/stock/shoppinglist/clear")).mock(
            return_value=httpx.Response(204)
        )

        await grocy.clear_shopping_list()

        assert json.loads(route.calls.last.request.content) == {"list_id": 1}


class TestRecipes:
    """Tests for recipe endpoints."""

    async def test_positions_filtered_by_recipe(self, grocy, grocy_api):
        grocy_api.get(api("/objects/recipes_pos")).mock(
            return_value=httpx.Response(
                200,
                json=[
                    {"id": 1, "recipe_id": "3", "product_id": 7},
                    {"id": 2, "recipe_id": 4, "product_id": 8},
                    {"id": 3, "recipe_id": 3, "product_id": 9},
                ],
            )
        )

        positions = await grocy.get_recipe_positions(3)

        assert [p["id"] for p in positions] == [1, 3]
