"""
Argument models for composite Grocy tools.

All models use Pydantic v2 so FastMCP can publish their JSON schema and
validate tool arguments before a handler runs.
"""

from pydantic import BaseModel, ConfigDict, Field


class RecipeInput(BaseModel):
    """Recipe header used by create_recipe_with_ingredients."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Recipe name")
    description: str = Field(default="", description="Recipe description/instructions")
    base_servings: float = Field(default=1, gt=0, description="Base servings (default: 1)")


class RecipeIngredientInput(BaseModel):
    """One ingredient position of a new recipe."""

    model_config = ConfigDict(frozen=True)

    product_id: int = Field(..., description="Product ID")
    amount: float = Field(
        ...,
        description=(
            "Amount needed in source_unit "
            "(or product's stock unit if source_unit not specified)"
        ),
    )
    note: str | None = Field(default=None, description="Optional note")
    only_check_single_unit_in_stock: bool = Field(
        default=False,
        description="Check single unit only",
    )


class ShoppingListItemInput(BaseModel):
    """One item for bulk_add_to_shopping_list."""

    model_config = ConfigDict(frozen=True)

    product_id: int = Field(..., description="Product ID")
    amount: float = Field(..., description="Quantity")
    note: str | None = Field(default=None, description="Optional note")
