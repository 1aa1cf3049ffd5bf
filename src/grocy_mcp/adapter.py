"""
Adapter for shaping Grocy API responses into tool results.

Grocy sometimes delivers numeric fields as strings, so every calculation
goes through ``as_float``.
"""

from typing import Any

from grocy_mcp.units import Conversion, convert_ingredient_amount


def as_float(value: Any) -> float:
    """Coerce a Grocy numeric field to float (missing or blank → 0)."""
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def normalise_id(value: Any) -> Any:
    """Return an id as int when Grocy delivered it as a numeric string."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return value


def index_by_id(objects: list[dict[str, Any]], field: str = "id") -> dict[Any, dict[str, Any]]:
    """Build an id → object map, normalising string ids to ints."""
    return {normalise_id(o.get(field)): o for o in objects}


class GrocyAdapter:
    """
    Converts Grocy API responses into the JSON structures returned by tools.

    Handles recipe shortfall calculations, bulk stock lookups, gram-based
    unit conversion and the brewing ingredient export.
    """

    def stock_amounts(self, stock: list[dict[str, Any]]) -> dict[Any, float]:
        """Map product id → aggregated stock amount."""
        return {
            normalise_id(s.get("product_id")): as_float(s.get("amount_aggregated"))
            for s in stock
        }

    def shortfall(
        self,
        positions: list[dict[str, Any]],
        stock_amounts: dict[Any, float],
        servings: float,
    ) -> list[dict[str, Any]]:
        """
        Calculate how much of each recipe ingredient is missing.

        needed = position amount × servings,
        missing = max(0, needed − aggregated stock).

        Args:
            positions: Recipe positions (recipes_pos objects)
            stock_amounts: Output of ``stock_amounts``
            servings: Number of servings to cook

        Returns:
            One entry per position with needed, in_stock and missing amounts
        """
        results = []
        for pos in positions:
            product_id = normalise_id(pos.get("product_id"))
            needed = as_float(pos.get("amount")) * servings
            in_stock = stock_amounts.get(product_id, 0.0)
            results.append({
                "product_id": product_id,
                "needed": needed,
                "in_stock": in_stock,
                "missing": max(0.0, needed - in_stock),
                "note": pos.get("note") or "",
            })
        return results

    def ingredient_status(
        self,
        positions: list[dict[str, Any]],
        products: list[dict[str, Any]],
        stock_amounts: dict[Any, float],
        servings: float,
    ) -> list[dict[str, Any]]:
        """Describe stock coverage for every ingredient of a recipe."""
        product_map = index_by_id(products)
        return [
            {
                "product_id": item["product_id"],
                "product_name": product_map.get(item["product_id"], {}).get("name") or "Unknown",
                "amount_needed": item["needed"],
                "amount_in_stock": item["in_stock"],
                "fulfilled": item["in_stock"] >= item["needed"],
                "missing": item["missing"],
                "note": item["note"],
            }
            for item in self.shortfall(positions, stock_amounts, servings)
        ]

    def bulk_stock_entry(
        self,
        product_id: int,
        stock_map: dict[Any, dict[str, Any]],
    ) -> dict[str, Any]:
        """Summarise stock for one product, or report it as not in stock."""
        stock = stock_map.get(product_id)
        if stock is None:
            return {
                "product_id": product_id,
                "amount": 0,
                "amount_aggregated": 0,
                "in_stock": False,
            }
        return {
            "product_id": product_id,
            "product_name": (stock.get("product") or {}).get("name") or "Unknown",
            "amount": stock.get("amount"),
            "amount_aggregated": stock.get("amount_aggregated"),
            "best_before_date": stock.get("best_before_date"),
            "is_aggregated_amount": stock.get("is_aggregated_amount"),
        }

    def convert_to_stock_unit(
        self,
        amount: float,
        source_unit: str,
        product: dict[str, Any],
        units_map: dict[Any, dict[str, Any]],
    ) -> Conversion | None:
        """
        Convert an ingredient amount into the product's stock unit.

        Returns None when the product's stock unit is unknown, in which case
        the amount is used as given.
        """
        stock_unit = units_map.get(normalise_id(product.get("qu_id_stock")))
        if not stock_unit:
            return None
        return convert_ingredient_amount(amount, source_unit, stock_unit.get("name") or "")

    def product_group_hint(self, group: dict[str, Any] | None) -> str:
        """
        Map a Grocy product group onto a BeerSmith ingredient category.

        Returns one of "hops", "grain", "yeast", "misc", the lower-cased
        group name, or "other" when the product has no group.
        """
        if not group:
            return "other"

        name = (group.get("name") or "").lower()
        if "hop" in name:
            return "hops"
        if any(x in name for x in ["grain", "malt", "ferment"]):
            return "grain"
        if "yeast" in name:
            return "yeast"
        if any(x in name for x in ["misc", "additive", "other"]):
            return "misc"
        return name or "other"

    def brewing_ingredient(
        self,
        product: dict[str, Any],
        units_map: dict[Any, dict[str, Any]],
        groups_map: dict[Any, dict[str, Any]],
        stock_map: dict[Any, dict[str, Any]],
    ) -> dict[str, Any]:
        """Format a product for the BeerSmith ingredient export."""
        product_id = normalise_id(product.get("id"))
        stock = stock_map.get(product_id) or {}
        unit = units_map.get(normalise_id(product.get("qu_id_stock"))) or {}
        group = groups_map.get(normalise_id(product.get("product_group_id")))

        return {
            "name": product.get("name"),
            "price": as_float(stock.get("last_price")),
            "qu_id": unit.get("name") or "unit",
            "product_group": self.product_group_hint(group),
            "product_id": product_id,
        }
