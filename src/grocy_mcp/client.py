"""Grocy API client."""

import logging
from typing import Any

import httpx

from grocy_mcp.config import GrocyConfig

log = logging.getLogger(__name__)

DEFAULT_SHOPPING_LIST_ID = 1


class GrocyClient:
    """
    Client for interacting with the Grocy REST API.

    One HTTP client bound to the configured API root and key is shared by
    every tool. Errors are raised as httpx exceptions and never retried.

    See: https://github.com/grocy/grocy/wiki/API-Reference
    """

    def __init__(self, config: GrocyConfig):
        """
        Initialize the Grocy client.

        Args:
            config: Grocy configuration with API root and key
        """
        self.config = config
        self.headers = {
            "GROCY-API-KEY": config.api_key,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        self._http = httpx.AsyncClient(base_url=config.base_url, headers=self.headers)

    async def _request(
        self,
        method: str,
        endpoint: str,
        **kwargs,
    ) -> Any:
        """Make an API request."""
        log.debug("%s %s", method, endpoint)
        response = await self._http.request(method, endpoint, **kwargs)
        response.raise_for_status()

        if response.status_code == 204:
            return None
        if not response.content:
            return None
        return response.json()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._http.aclose()

    # ==================== System ====================

    async def get_system_info(self) -> dict[str, Any]:
        """Get Grocy system information."""
        return await self._request("GET", "/system/info")

    async def get_system_config(self) -> dict[str, Any]:
        """Get Grocy system configuration."""
        return await self._request("GET", "/system/config")

    async def get_userfields(self, entity: str, object_id: int) -> dict[str, Any]:
        """Get custom user field values for an object."""
        return await self._request("GET", f"/userfields/{entity}/{object_id}")

    # ==================== Products ====================

    async def get_products(self) -> list[dict[str, Any]]:
        """Get all products."""
        return await self._request("GET", "/objects/products")

    async def search_products(self, query: str) -> list[dict[str, Any]]:
        """Search products by name (case-insensitive substring)."""
        products = await self.get_products()
        query_lower = query.lower()
        return [p for p in products if query_lower in (p.get("name") or "").lower()]

    # ==================== Stock ====================

    async def get_stock(self) -> list[dict[str, Any]]:
        """Get current stock for all products."""
        return await self._request("GET", "/stock")

    async def get_volatile_stock(self) -> dict[str, Any]:
        """Get volatile stock (expiring soon, already expired, etc.)."""
        return await self._request("GET", "/stock/volatile")

    async def get_product_stock(self, product_id: int) -> dict[str, Any]:
        """Get stock details for a specific product."""
        return await self._request("GET", f"/stock/products/{product_id}")

    async def add_product_stock(
        self,
        product_id: int,
        amount: float,
        best_before_date: str,
        price: float | None = None,
    ) -> Any:
        """
        Add stock for a product (purchase).

        Args:
            product_id: Product ID
            amount: Amount to add
            best_before_date: Best before date (YYYY-MM-DD)
            price: Optional unit price

        Returns:
            Transaction details
        """
        data: dict[str, Any] = {"amount": amount, "best_before_date": best_before_date}
        if price is not None:
            data["price"] = price

        return await self._request(
            "POST",
            f"/stock/products/{product_id}/add",
            json=data,
        )

    async def consume_product_stock(
        self,
        product_id: int,
        amount: float,
        spoiled: bool | None = None,
    ) -> Any:
        """
        Consume stock for a product.

        Args:
            product_id: Product ID
            amount: Amount to consume
            spoiled: Whether the stock was spoiled (omitted when None)

        Returns:
            Transaction details
        """
        data: dict[str, Any] = {"amount": amount}
        if spoiled is not None:
            data["spoiled"] = spoiled

        return await self._request(
            "POST",
            f"/stock/products/{product_id}/consume",
            json=data,
        )

    async def transfer_product_stock(
        self,
        product_id: int,
        amount: float,
        location_id_from: int,
        location_id_to: int,
    ) -> Any:
        """Transfer stock between locations."""
        return await self._request(
            "POST",
            f"/stock/products/{product_id}/transfer",
            json={
                "amount": amount,
                "location_id_from": location_id_from,
                "location_id_to": location_id_to,
            },
        )

    async def inventory_product(
        self,
        product_id: int,
        new_amount: float,
        best_before_date: str | None = None,
    ) -> Any:
        """Set the absolute stock amount for a product (stocktaking)."""
        data: dict[str, Any] = {"new_amount": new_amount}
        if best_before_date:
            data["best_before_date"] = best_before_date

        return await self._request(
            "POST",
            f"/stock/products/{product_id}/inventory",
            json=data,
        )

    async def open_product(self, product_id: int, amount: float = 1) -> Any:
        """Mark a product as opened."""
        return await self._request(
            "POST",
            f"/stock/products/{product_id}/open",
            json={"amount": amount},
        )

    async def get_product_by_barcode(self, barcode: str) -> dict[str, Any]:
        """Look up a product (with stock details) by barcode."""
        return await self._request("GET", f"/stock/products/by-barcode/{barcode}")

    async def get_product_stock_entries(self, product_id: int) -> list[dict[str, Any]]:
        """Get all stock entries for a product."""
        return await self._request("GET", f"/stock/products/{product_id}/entries")

    # ==================== Shopping List ====================

    async def get_shopping_list(self) -> list[dict[str, Any]]:
        """Get all shopping list items across lists."""
        return await self._request("GET", "/objects/shopping_list")

    async def add_to_shopping_list(
        self,
        product_id: int,
        amount: float,
        note: str | None = None,
        shopping_list_id: int = DEFAULT_SHOPPING_LIST_ID,
    ) -> dict[str, Any]:
        """
        Add item to shopping list.

        Uses the generic objects endpoint; the stock shopping-list endpoint
        ignores the amount.

        Args:
            product_id: Product ID
            amount: Amount needed
            note: Optional note
            shopping_list_id: Shopping list ID (default 1)

        Returns:
            Response with created_object_id
        """
        data: dict[str, Any] = {
            "product_id": product_id,
            "shopping_list_id": shopping_list_id,
            "amount": amount,
        }
        if note is not None:
            data["note"] = note

        return await self._request("POST", "/objects/shopping_list", json=data)

    async def update_shopping_list_item(self, item_id: int, updates: dict[str, Any]) -> Any:
        """Update a shopping list item."""
        return await self._request("PUT", f"/objects/shopping_list/{item_id}", json=updates)

    async def remove_shopping_list_item(self, item_id: int) -> None:
        """Delete a shopping list item."""
        await self._request("DELETE", f"/objects/shopping_list/{item_id}")

    async def clear_shopping_list(self, list_id: int = DEFAULT_SHOPPING_LIST_ID) -> None:
        """Clear all items from a shopping list."""
        await self._request("POST", "/stock/shoppinglist/clear", json={"list_id": list_id})

    async def add_missing_products_to_shopping_list(
        self,
        list_id: int = DEFAULT_SHOPPING_LIST_ID,
    ) -> None:
        """Add all products below min stock to the shopping list."""
        await self._request(
            "POST",
            "/stock/shoppinglist/add-missing-products",
            json={"list_id": list_id},
        )

    async def add_expired_products_to_shopping_list(
        self,
        list_id: int = DEFAULT_SHOPPING_LIST_ID,
    ) -> None:
        """Add all expired products to the shopping list."""
        await self._request(
            "POST",
            "/stock/shoppinglist/add-expired-products",
            json={"list_id": list_id},
        )

    # ==================== Recipes ====================

    async def get_recipes(self) -> list[dict[str, Any]]:
        """Get all recipes."""
        return await self._request("GET", "/objects/recipes")

    async def get_recipe(self, recipe_id: int) -> dict[str, Any]:
        """Get a specific recipe."""
        return await self._request("GET", f"/objects/recipes/{recipe_id}")

    async def get_recipe_fulfillment(self, recipe_id: int) -> dict[str, Any]:
        """Get fulfillment status for a recipe."""
        return await self._request("GET", f"/recipes/{recipe_id}/fulfillment")

    async def consume_recipe(self, recipe_id: int) -> None:
        """Consume all ingredients for a recipe."""
        await self._request("POST", f"/recipes/{recipe_id}/consume")

    async def add_recipe_to_shopping_list(self, recipe_id: int) -> None:
        """Add a recipe's unfulfilled ingredients to the shopping list."""
        await self._request(
            "POST",
            f"/recipes/{recipe_id}/add-not-fulfilled-products-to-shoppinglist",
        )

    async def create_recipe(self, recipe_data: dict[str, Any]) -> dict[str, Any]:
        """Create a new recipe."""
        return await self._request("POST", "/objects/recipes", json=recipe_data)

    async def get_recipe_positions(self, recipe_id: int) -> list[dict[str, Any]]:
        """Get ingredients (positions) for a recipe."""
        positions = await self._request("GET", "/objects/recipes_pos")
        return [p for p in positions if _same_id(p.get("recipe_id"), recipe_id)]

    async def add_recipe_ingredient(self, position: dict[str, Any]) -> dict[str, Any]:
        """Add an ingredient position to a recipe."""
        return await self._request("POST", "/objects/recipes_pos", json=position)

    # ==================== Chores ====================

    async def get_chores(self) -> list[dict[str, Any]]:
        """Get all chores."""
        return await self._request("GET", "/objects/chores")

    async def get_chore(self, chore_id: int) -> dict[str, Any]:
        """Get chore details including execution history."""
        return await self._request("GET", f"/chores/{chore_id}")

    async def execute_chore(self, chore_id: int, tracked_time: str | None = None) -> Any:
        """Mark a chore as executed."""
        data: dict[str, Any] = {}
        if tracked_time:
            data["tracked_time"] = tracked_time
        return await self._request("POST", f"/chores/{chore_id}/execute", json=data)

    # ==================== Tasks ====================

    async def get_tasks(self) -> list[dict[str, Any]]:
        """Get all tasks."""
        return await self._request("GET", "/objects/tasks")

    async def create_task(self, task_data: dict[str, Any]) -> dict[str, Any]:
        """Create a new task."""
        return await self._request("POST", "/objects/tasks", json=task_data)

    async def complete_task(self, task_id: int) -> None:
        """Mark a task as completed."""
        await self._request("POST", f"/tasks/{task_id}/complete")

    # ==================== Batteries ====================

    async def get_batteries(self) -> list[dict[str, Any]]:
        """Get all batteries."""
        return await self._request("GET", "/objects/batteries")

    async def get_battery(self, battery_id: int) -> dict[str, Any]:
        """Get battery charge status."""
        return await self._request("GET", f"/batteries/{battery_id}")

    async def charge_battery(self, battery_id: int, tracked_time: str | None = None) -> Any:
        """Track a battery charge."""
        data: dict[str, Any] = {}
        if tracked_time:
            data["tracked_time"] = tracked_time
        return await self._request("POST", f"/batteries/{battery_id}/charge", json=data)

    # ==================== Master Data ====================

    async def get_locations(self) -> list[dict[str, Any]]:
        """Get all storage locations."""
        return await self._request("GET", "/objects/locations")

    async def get_product_groups(self) -> list[dict[str, Any]]:
        """Get all product groups."""
        return await self._request("GET", "/objects/product_groups")

    async def get_quantity_units(self) -> list[dict[str, Any]]:
        """Get all quantity units."""
        return await self._request("GET", "/objects/quantity_units")

    # ==================== Generic CRUD ====================

    async def get_entity(self, entity_type: str, entity_id: int) -> dict[str, Any]:
        """Get a specific entity by type and ID."""
        return await self._request("GET", f"/objects/{entity_type}/{entity_id}")

    async def create_entity(self, entity_type: str, data: dict[str, Any]) -> dict[str, Any]:
        """Create a new entity."""
        return await self._request("POST", f"/objects/{entity_type}", json=data)

    async def update_entity(
        self,
        entity_type: str,
        entity_id: int,
        data: dict[str, Any],
    ) -> Any:
        """Update an entity."""
        return await self._request("PUT", f"/objects/{entity_type}/{entity_id}", json=data)

    async def delete_entity(self, entity_type: str, entity_id: int) -> None:
        """Delete an entity."""
        await self._request("DELETE", f"/objects/{entity_type}/{entity_id}")


def _same_id(value: Any, expected: int) -> bool:
    """Compare a Grocy id (sometimes delivered as a string) with an int."""
    try:
        return int(value) == expected
    except (TypeError, ValueError):
        return False
