"""
Unit conversion for recipe ingredient amounts.

Recipe amounts are commonly written in grams while Grocy products are
stocked in their own quantity unit. Conversion is gram-based: amounts given
in grams are converted into kilograms, ounces or pounds (or left as grams).
Any other pairing is reported as "no conversion" instead of failing.
"""

from dataclasses import dataclass
from enum import Enum

from grocy_mcp.exceptions import UnitConversionError


class MassUnit(str, Enum):
    """Mass units understood by the converter."""

    G = "g"
    KG = "kg"
    OZ = "oz"
    LB = "lb"


# Grams per unit
MASS_TO_GRAMS: dict[MassUnit, float] = {
    MassUnit.G: 1.0,
    MassUnit.KG: 1000.0,
    MassUnit.OZ: 28.3495,
    MassUnit.LB: 453.592,
}

UNIT_ALIASES: dict[str, MassUnit] = {
    "g": MassUnit.G,
    "gram": MassUnit.G,
    "grams": MassUnit.G,
    "kg": MassUnit.KG,
    "kilogram": MassUnit.KG,
    "kilograms": MassUnit.KG,
    "oz": MassUnit.OZ,
    "ounce": MassUnit.OZ,
    "ounces": MassUnit.OZ,
    "lb": MassUnit.LB,
    "pound": MassUnit.LB,
    "pounds": MassUnit.LB,
}


def format_amount(value: float, decimals: int | None = None) -> str:
    """
    Render an amount for human-readable messages.

    Integral values lose their trailing ".0"; with ``decimals`` the value is
    fixed to that many places.
    """
    if decimals is not None:
        return f"{value:.{decimals}f}"
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def parse_mass_unit(name: str) -> MassUnit:
    """
    Resolve a unit name (e.g. "Grams", "kg", "pound") to a MassUnit.

    Raises:
        UnitConversionError: If the name is not a known mass unit
    """
    try:
        return UNIT_ALIASES[name.strip().lower()]
    except KeyError as e:
        raise UnitConversionError(f"Unknown mass unit: {name}") from e


def convert_from_grams(grams: float, to_unit: MassUnit | str) -> float:
    """
    Convert an amount in grams to another mass unit.

    Raises:
        UnitConversionError: If the target unit is unknown
    """
    if not isinstance(to_unit, MassUnit):
        to_unit = parse_mass_unit(to_unit)
    return grams / MASS_TO_GRAMS[to_unit]


@dataclass(frozen=True)
class Conversion:
    """Result of converting an ingredient amount into a stock unit."""

    amount: float
    note: str
    converted: bool


def convert_ingredient_amount(amount: float, source_unit: str, stock_unit: str) -> Conversion:
    """
    Convert a recipe amount from ``source_unit`` into a product's stock unit.

    Only gram sources are converted. The returned note describes what
    happened, e.g. "(2500g → 2.5kg)" or "(no conversion: ml → kg)".

    Args:
        amount: Amount expressed in the source unit
        source_unit: Unit the amount is written in
        stock_unit: Name of the product's stock quantity unit

    Returns:
        Conversion with the final amount and a note
    """
    no_conversion = Conversion(
        amount=amount,
        note=f"(no conversion: {source_unit} → {stock_unit})",
        converted=False,
    )

    try:
        source = parse_mass_unit(source_unit)
        target = parse_mass_unit(stock_unit)
    except UnitConversionError:
        return no_conversion

    if source is not MassUnit.G:
        return no_conversion

    grams = format_amount(amount)
    if target is MassUnit.G:
        return Conversion(amount=amount, note=f"({grams}g)", converted=True)

    converted = convert_from_grams(amount, target)
    # Imperial units are shown to two decimals
    decimals = None if target is MassUnit.KG else 2
    return Conversion(
        amount=converted,
        note=f"({grams}g → {format_amount(converted, decimals)}{target.value})",
        converted=True,
    )
