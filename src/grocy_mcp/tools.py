"""MCP tool definitions for Grocy."""

import functools
import json
import logging
from typing import Annotated, Any

import httpx
from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field

from grocy_mcp.adapter import GrocyAdapter, as_float, index_by_id, normalise_id
from grocy_mcp.client import GrocyClient
from grocy_mcp.matching import match_products
from grocy_mcp.models import RecipeIngredientInput, RecipeInput, ShoppingListItemInput
from grocy_mcp.units import format_amount

log = logging.getLogger(__name__)

# Grocy treats this as "no best before date"
DEFAULT_BEST_BEFORE_DATE = "2099-12-31"

ProductId = Annotated[int, "Product ID"]
EntityName = Annotated[
    str,
    "Entity type (e.g., 'products', 'locations', 'recipes', 'chores', 'tasks', "
    "'batteries', 'quantity_units', 'shopping_locations')",
]
ObjectId = Annotated[int, "Entity ID"]
Servings = Annotated[float, Field(gt=0, description="Number of servings to calculate for (default: 1)")]


def _json(data: Any) -> str:
    """Pretty-print a Grocy response for the tool result."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def format_error(exc: Exception) -> str:
    """
    Build the text of an error result.

    The message is followed by the JSON body Grocy returned, if any.
    """
    body = ""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = json.dumps(exc.response.json())
        except ValueError:
            body = exc.response.text
    return f"Error: {exc}\n{body}"


def _reports_errors(func):
    """Turn any failure inside a tool into an error-flagged tool result."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except ToolError:
            raise
        except Exception as e:
            log.warning("Tool %s failed: %s", func.__name__, e)
            raise ToolError(format_error(e)) from e

    return wrapper


def register_tools(
    mcp: FastMCP,
    client: GrocyClient,
    adapter: GrocyAdapter | None = None,
) -> None:
    """
    Register all Grocy MCP tools.

    Tools are listed by the server in the order they are registered here.

    Args:
        mcp: Server to register the tools on
        client: Grocy client shared by every tool
        adapter: Response adapter (a default one is created if omitted)
    """
    adapter = adapter or GrocyAdapter()

    # ==================== Stock Management ====================

    @mcp.tool()
    @_reports_errors
    async def get_stock() -> str:
        """Get current stock information for all products."""
        return _json(await client.get_stock())

    @mcp.tool()
    @_reports_errors
    async def get_volatile_stock() -> str:
        """Get volatile stock information (products expiring soon)."""
        return _json(await client.get_volatile_stock())

    @mcp.tool()
    @_reports_errors
    async def get_product_details(product_id: ProductId) -> str:
        """Get details for a specific product by ID."""
        return _json(await client.get_product_stock(product_id))

    @mcp.tool()
    @_reports_errors
    async def add_product(
        product_id: Annotated[int, "Product ID to add stock for"],
        amount: Annotated[float, "Amount to add"],
        best_before_date: Annotated[str | None, "Best before date (YYYY-MM-DD format, optional)"] = None,
        price: Annotated[float | None, "Price per unit (optional)"] = None,
    ) -> str:
        """Add stock of a product (purchase)."""
        await client.add_product_stock(
            product_id=product_id,
            amount=amount,
            best_before_date=best_before_date or DEFAULT_BEST_BEFORE_DATE,
            price=price,
        )
        return f"Successfully added {format_amount(amount)} units of product {product_id}"

    @mcp.tool()
    @_reports_errors
    async def consume_product(
        product_id: Annotated[int, "Product ID to consume"],
        amount: Annotated[float, "Amount to consume"],
        spoiled: Annotated[bool | None, "Mark as spoiled (optional)"] = None,
    ) -> str:
        """Consume/remove stock of a product."""
        await client.consume_product_stock(product_id, amount, spoiled=spoiled)
        return f"Successfully consumed {format_amount(amount)} units of product {product_id}"

    @mcp.tool()
    @_reports_errors
    async def transfer_product(
        product_id: Annotated[int, "Product ID to transfer"],
        amount: Annotated[float, "Amount to transfer"],
        location_id_from: Annotated[int, "Source location ID"],
        location_id_to: Annotated[int, "Destination location ID"],
    ) -> str:
        """Transfer product stock to a different location."""
        await client.transfer_product_stock(product_id, amount, location_id_from, location_id_to)
        return f"Successfully transferred {format_amount(amount)} units of product {product_id}"

    @mcp.tool()
    @_reports_errors
    async def inventory_product(
        product_id: ProductId,
        new_amount: Annotated[float, "New absolute stock amount"],
        best_before_date: Annotated[str | None, "Best before date (YYYY-MM-DD, optional)"] = None,
    ) -> str:
        """Set absolute stock amount for a product (inventory/stocktaking)."""
        await client.inventory_product(product_id, new_amount, best_before_date)
        return f"Successfully set stock of product {product_id} to {format_amount(new_amount)}"

    @mcp.tool()
    @_reports_errors
    async def open_product(
        product_id: Annotated[int, "Product ID to open"],
        amount: Annotated[float, "Amount to open (default: 1)"] = 1,
    ) -> str:
        """Mark a product as opened."""
        await client.open_product(product_id, amount)
        return f"Successfully opened {format_amount(amount)} unit(s) of product {product_id}"

    @mcp.tool()
    @_reports_errors
    async def get_product_by_barcode(barcode: Annotated[str, "Product barcode"]) -> str:
        """Get product information by scanning barcode."""
        return _json(await client.get_product_by_barcode(barcode))

    @mcp.tool()
    @_reports_errors
    async def get_products() -> str:
        """Get list of all products in Grocy."""
        return _json(await client.get_products())

    @mcp.tool()
    @_reports_errors
    async def search_products(query: Annotated[str, "Search term"]) -> str:
        """Search for products by name."""
        return _json(await client.search_products(query))

    @mcp.tool()
    @_reports_errors
    async def get_product_entries(product_id: ProductId) -> str:
        """Get all stock entries for a specific product."""
        return _json(await client.get_product_stock_entries(product_id))

    @mcp.tool()
    @_reports_errors
    async def get_locations() -> str:
        """Get all storage locations."""
        return _json(await client.get_locations())

    # ==================== Generic Entities ====================

    @mcp.tool()
    @_reports_errors
    async def create_entity(
        entity: EntityName,
        data: Annotated[dict[str, Any], "Entity data as JSON object"],
    ) -> str:
        """Create a new entity (product, location, recipe, chore, task, etc.)."""
        result = await client.create_entity(entity, data) or {}
        return (
            f"Successfully created {entity} with ID: {result.get('created_object_id')}\n"
            f"{_json(result)}"
        )

    @mcp.tool()
    @_reports_errors
    async def update_entity(
        entity: EntityName,
        object_id: Annotated[int, "Entity ID to update"],
        data: Annotated[dict[str, Any], "Updated entity data as JSON object"],
    ) -> str:
        """Update an existing entity."""
        await client.update_entity(entity, object_id, data)
        return f"Successfully updated {entity} {object_id}"

    @mcp.tool()
    @_reports_errors
    async def delete_entity(
        entity: EntityName,
        object_id: Annotated[int, "Entity ID to delete"],
    ) -> str:
        """Delete an entity."""
        await client.delete_entity(entity, object_id)
        return f"Successfully deleted {entity} {object_id}"

    @mcp.tool()
    @_reports_errors
    async def get_entity(entity: EntityName, object_id: ObjectId) -> str:
        """Get a specific entity by ID."""
        return _json(await client.get_entity(entity, object_id))

    # ==================== Shopping List ====================

    @mcp.tool()
    @_reports_errors
    async def get_shopping_list() -> str:
        """Get all items on shopping lists."""
        return _json(await client.get_shopping_list())

    @mcp.tool()
    @_reports_errors
    async def add_to_shopping_list(
        product_id: Annotated[int, "Product ID to add"],
        amount: Annotated[float, "Quantity to add (default: 1)"] = 1,
        note: Annotated[str | None, "Optional note for this item"] = None,
    ) -> str:
        """Add a product to shopping list with specified quantity."""
        result = await client.add_to_shopping_list(product_id, amount, note=note or None) or {}
        return (
            f"Successfully added {format_amount(amount)} unit(s) of product {product_id} "
            f"to shopping list (entry ID: {result.get('created_object_id')})"
        )

    @mcp.tool()
    @_reports_errors
    async def remove_from_shopping_list(
        product_id: Annotated[int, "Product ID to remove"],
        amount: Annotated[float | None, "Quantity to remove (default: removes all)"] = None,
    ) -> str:
        """
        Remove a product from shopping list or reduce its quantity.

        The first shopping list entry for the product is reduced by the
        amount; it is deleted when nothing would remain.
        """
        items = await client.get_shopping_list()
        entries = [i for i in items if normalise_id(i.get("product_id")) == product_id]

        if not entries:
            return f"Product {product_id} not found on shopping list"

        entry = entries[0]
        new_amount = 0.0 if amount is None else as_float(entry.get("amount")) - amount

        if new_amount <= 0:
            await client.remove_shopping_list_item(entry["id"])
            return f"Successfully removed product {product_id} from shopping list"

        await client.update_shopping_list_item(entry["id"], {"amount": new_amount})
        return (
            f"Successfully reduced product {product_id} to "
            f"{format_amount(new_amount)} unit(s) on shopping list"
        )

    @mcp.tool()
    @_reports_errors
    async def add_missing_products_to_shopping_list() -> str:
        """Add all products below their minimum stock amount to shopping list."""
        await client.add_missing_products_to_shopping_list()
        return "Successfully added missing products to shopping list"

    @mcp.tool()
    @_reports_errors
    async def add_expired_products_to_shopping_list() -> str:
        """Add all expired products to shopping list."""
        await client.add_expired_products_to_shopping_list()
        return "Successfully added expired products to shopping list"

    @mcp.tool()
    @_reports_errors
    async def clear_shopping_list() -> str:
        """Clear entire shopping list."""
        await client.clear_shopping_list()
        return "Successfully cleared shopping list"

    # ==================== Recipes ====================

    @mcp.tool()
    @_reports_errors
    async def get_recipes() -> str:
        """Get all recipes."""
        return _json(await client.get_recipes())

    @mcp.tool()
    @_reports_errors
    async def get_recipe_fulfillment(recipe_id: Annotated[int, "Recipe ID"]) -> str:
        """Check if recipe requirements are fulfilled by current stock."""
        return _json(await client.get_recipe_fulfillment(recipe_id))

    @mcp.tool()
    @_reports_errors
    async def consume_recipe(recipe_id: Annotated[int, "Recipe ID to consume"]) -> str:
        """Consume products needed for a recipe."""
        await client.consume_recipe(recipe_id)
        return f"Successfully consumed recipe {recipe_id}"

    @mcp.tool()
    @_reports_errors
    async def add_recipe_to_shopping_list(recipe_id: Annotated[int, "Recipe ID"]) -> str:
        """Add missing products for recipe to shopping list."""
        await client.add_recipe_to_shopping_list(recipe_id)
        return f"Successfully added recipe {recipe_id} to shopping list"

    # ==================== Chores ====================

    @mcp.tool()
    @_reports_errors
    async def get_chores() -> str:
        """Get all chores."""
        return _json(await client.get_chores())

    @mcp.tool()
    @_reports_errors
    async def get_chore_details(chore_id: Annotated[int, "Chore ID"]) -> str:
        """Get details for a specific chore."""
        return _json(await client.get_chore(chore_id))

    @mcp.tool()
    @_reports_errors
    async def execute_chore(
        chore_id: Annotated[int, "Chore ID to execute"],
        tracked_time: Annotated[str | None, "Execution timestamp (optional, ISO format)"] = None,
    ) -> str:
        """Mark a chore as completed."""
        await client.execute_chore(chore_id, tracked_time)
        return f"Successfully executed chore {chore_id}"

    # ==================== Tasks ====================

    @mcp.tool()
    @_reports_errors
    async def get_tasks() -> str:
        """Get all tasks."""
        return _json(await client.get_tasks())

    @mcp.tool()
    @_reports_errors
    async def create_task(
        name: Annotated[str, "Task name"],
        description: Annotated[str | None, "Task description (optional)"] = None,
        due_date: Annotated[str | None, "Due date (YYYY-MM-DD, optional)"] = None,
    ) -> str:
        """Create a new task."""
        task_data = {"name": name}
        if description:
            task_data["description"] = description
        if due_date:
            task_data["due_date"] = due_date

        result = await client.create_task(task_data) or {}
        return f"Successfully created task with ID: {result.get('created_object_id')}"

    @mcp.tool()
    @_reports_errors
    async def complete_task(task_id: Annotated[int, "Task ID to complete"]) -> str:
        """Mark a task as completed."""
        await client.complete_task(task_id)
        return f"Successfully completed task {task_id}"

    # ==================== Batteries ====================

    @mcp.tool()
    @_reports_errors
    async def get_batteries() -> str:
        """Get all batteries and their charge status."""
        return _json(await client.get_batteries())

    @mcp.tool()
    @_reports_errors
    async def get_battery_details(battery_id: Annotated[int, "Battery ID"]) -> str:
        """Get details for a specific battery."""
        return _json(await client.get_battery(battery_id))

    @mcp.tool()
    @_reports_errors
    async def charge_battery(
        battery_id: Annotated[int, "Battery ID to charge"],
        tracked_time: Annotated[str | None, "Charge timestamp (optional, ISO format)"] = None,
    ) -> str:
        """Track battery charging."""
        await client.charge_battery(battery_id, tracked_time)
        return f"Successfully charged battery {battery_id}"

    # ==================== System & Info ====================

    @mcp.tool()
    @_reports_errors
    async def get_system_info() -> str:
        """Get Grocy system information."""
        return _json(await client.get_system_info())

    @mcp.tool()
    @_reports_errors
    async def get_system_config() -> str:
        """
        Get Grocy system configuration settings.

        Includes the CURRENCY symbol and FEATURE_FLAG_* settings.
        """
        return _json(await client.get_system_config())

    @mcp.tool()
    @_reports_errors
    async def get_userfields(
        entity: Annotated[str, "Entity name (e.g., 'products', 'chores')"],
        object_id: Annotated[int, "Object ID"],
    ) -> str:
        """Get custom user fields for an entity."""
        return _json(await client.get_userfields(entity, object_id))

    @mcp.tool()
    @_reports_errors
    async def get_quantity_units() -> str:
        """Get all quantity units (g, kg, pieces, ...)."""
        return _json(await client.get_quantity_units())

    @mcp.tool()
    @_reports_errors
    async def get_product_groups() -> str:
        """Get all product groups."""
        return _json(await client.get_product_groups())

    # ==================== Bulk Operations & Smart Tools ====================

    @mcp.tool()
    @_reports_errors
    async def create_recipe_with_ingredients(
        recipe: Annotated[RecipeInput, "Recipe data (name, description, etc.)"],
        ingredients: Annotated[list[RecipeIngredientInput], "Array of ingredients"],
        source_unit: Annotated[
            str | None,
            "Optional: Unit that amounts are provided in (e.g., 'g', 'gram', 'grams'). "
            "If specified, amounts will be converted to each product's stock unit.",
        ] = None,
    ) -> str:
        """
        Create a complete recipe with all ingredients in a single operation.

        Supports automatic unit conversion when source_unit is specified
        (e.g., from grams to kg). Each ingredient is added independently;
        failures are reported per ingredient.
        """
        product_map: dict[Any, dict[str, Any]] = {}
        units_map: dict[Any, dict[str, Any]] = {}
        if source_unit:
            product_map = index_by_id(await client.get_products())
            units_map = index_by_id(await client.get_quantity_units())

        recipe_result = await client.create_recipe({
            "name": recipe.name,
            "description": recipe.description,
            "base_servings": recipe.base_servings,
        }) or {}
        recipe_id = recipe_result.get("created_object_id")

        details = []
        for ingredient in ingredients:
            final_amount = ingredient.amount
            conversion_note = ""

            if source_unit:
                product = product_map.get(ingredient.product_id)
                if not product:
                    details.append({
                        "product_id": ingredient.product_id,
                        "status": "failed",
                        "error": "Product not found",
                    })
                    continue

                conversion = adapter.convert_to_stock_unit(
                    ingredient.amount, source_unit, product, units_map
                )
                if conversion:
                    final_amount = conversion.amount
                    conversion_note = conversion.note

            try:
                await client.add_recipe_ingredient({
                    "recipe_id": recipe_id,
                    "product_id": ingredient.product_id,
                    "amount": final_amount,
                    "note": f"{ingredient.note or ''} {conversion_note}".strip(),
                    "only_check_single_unit_in_stock": ingredient.only_check_single_unit_in_stock,
                })
            except httpx.HTTPError as e:
                details.append({
                    "product_id": ingredient.product_id,
                    "status": "failed",
                    "error": str(e),
                })
                continue

            result: dict[str, Any] = {"product_id": ingredient.product_id, "status": "added"}
            if conversion_note:
                result["conversion"] = conversion_note
            details.append(result)

        return _json({
            "recipe_id": recipe_id,
            "recipe_name": recipe.name,
            "ingredients_added": sum(1 for d in details if d["status"] == "added"),
            "ingredients_failed": sum(1 for d in details if d["status"] == "failed"),
            "details": details,
        })

    @mcp.tool()
    @_reports_errors
    async def add_recipe_missing_to_shopping_list(
        recipe_id: Annotated[int, "Recipe ID"],
        servings: Servings = 1,
    ) -> str:
        """Check what ingredients are missing for a recipe and add them to shopping list."""
        # Fails fast on unknown recipes
        await client.get_recipe_fulfillment(recipe_id)

        positions = await client.get_recipe_positions(recipe_id)
        stock_amounts = adapter.stock_amounts(await client.get_stock())

        details = []
        for item in adapter.shortfall(positions, stock_amounts, servings):
            if item["missing"] <= 0:
                continue
            try:
                await client.add_to_shopping_list(
                    product_id=item["product_id"],
                    amount=item["missing"],
                    note=f"For recipe ({format_amount(servings)} servings)",
                )
            except httpx.HTTPError as e:
                details.append({
                    "product_id": item["product_id"],
                    "status": "failed",
                    "error": str(e),
                })
                continue
            details.append({
                "product_id": item["product_id"],
                "status": "added",
                "needed": item["needed"],
                "in_stock": item["in_stock"],
                "added_to_list": item["missing"],
            })

        return _json({
            "recipe_id": recipe_id,
            "servings": servings,
            "items_added": sum(1 for d in details if d["status"] == "added"),
            "items_failed": sum(1 for d in details if d["status"] == "failed"),
            "details": details,
        })

    @mcp.tool()
    @_reports_errors
    async def match_product_by_name(
        name: Annotated[str, Field(min_length=1, description="Product name to search for")],
        fuzzy: Annotated[bool, "Enable fuzzy matching (default: true)"] = True,
        limit: Annotated[int, Field(ge=1, description="Maximum results to return (default: 5)")] = 5,
    ) -> str:
        """Find products by name with fuzzy matching and confidence scores."""
        matches = match_products(name, await client.get_products(), fuzzy=fuzzy, limit=limit)
        return _json({
            "query": name,
            "matches_found": len(matches),
            "results": [m.to_dict() for m in matches],
        })

    @mcp.tool()
    @_reports_errors
    async def bulk_get_stock(
        product_ids: Annotated[list[int], "Array of product IDs to check"],
    ) -> str:
        """Get stock levels for multiple products in a single call."""
        stock_map = index_by_id(await client.get_stock(), field="product_id")
        return _json({
            "products_checked": len(product_ids),
            "results": [adapter.bulk_stock_entry(pid, stock_map) for pid in product_ids],
        })

    @mcp.tool()
    @_reports_errors
    async def get_recipe_with_stock_status(
        recipe_id: Annotated[int, "Recipe ID"],
        servings: Servings = 1,
    ) -> str:
        """Get recipe details with current stock status for all ingredients."""
        recipe = await client.get_recipe(recipe_id) or {}
        positions = await client.get_recipe_positions(recipe_id)
        products = await client.get_products()
        stock_amounts = adapter.stock_amounts(await client.get_stock())

        ingredients = adapter.ingredient_status(positions, products, stock_amounts, servings)
        return _json({
            "recipe_id": recipe_id,
            "recipe_name": recipe.get("name"),
            "servings": servings,
            "can_make": all(i["fulfilled"] for i in ingredients),
            "missing_ingredients_count": sum(1 for i in ingredients if not i["fulfilled"]),
            "ingredients": ingredients,
        })

    @mcp.tool()
    @_reports_errors
    async def bulk_add_to_shopping_list(
        items: Annotated[list[ShoppingListItemInput], "Array of items to add"],
    ) -> str:
        """
        Add multiple products to shopping list in one operation.

        Every item is attempted; failures are reported per item.
        """
        details = []
        for item in items:
            try:
                result = await client.add_to_shopping_list(
                    product_id=item.product_id,
                    amount=item.amount,
                    note=item.note or "",
                ) or {}
            except httpx.HTTPError as e:
                details.append({
                    "product_id": item.product_id,
                    "amount": item.amount,
                    "status": "failed",
                    "error": str(e),
                })
                continue
            details.append({
                "product_id": item.product_id,
                "amount": item.amount,
                "status": "added",
                "entry_id": result.get("created_object_id"),
            })

        return _json({
            "items_requested": len(items),
            "items_added": sum(1 for d in details if d["status"] == "added"),
            "items_failed": sum(1 for d in details if d["status"] == "failed"),
            "details": details,
        })

    # ==================== BeerSmith Integration ====================

    @mcp.tool()
    @_reports_errors
    async def list_brewing_ingredients(
        product_group_filter: Annotated[
            str | None,
            "Optional: Filter by product group name (e.g., 'Brewing', 'Hops', 'Grains')",
        ] = None,
        include_all_products: Annotated[
            bool,
            "If true, include all products. If false (default), only include products with pricing data.",
        ] = False,
    ) -> str:
        """
        Export brewing ingredients with pricing data for BeerSmith integration.

        Returns products with name, price, quantity unit, and product group.
        """
        products = await client.get_products()
        units_map = index_by_id(await client.get_quantity_units())
        groups_map = index_by_id(await client.get_product_groups())
        stock_map = index_by_id(await client.get_stock(), field="product_id")

        group_filter = (product_group_filter or "").lower()
        ingredients = []
        for product in products:
            if group_filter:
                group = groups_map.get(normalise_id(product.get("product_group_id")))
                if not group or group_filter not in (group.get("name") or "").lower():
                    continue

            ingredient = adapter.brewing_ingredient(product, units_map, groups_map, stock_map)
            if not include_all_products and not ingredient["price"]:
                continue
            ingredients.append(ingredient)

        return _json({"count": len(ingredients), "ingredients": ingredients})
