"""
Canonical units, alias resolution and same-dimension conversion.
Mass and volume are never converted into each other here; that needs an
ingredient-specific density (see quantity_normalizer).
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Dimension(str, Enum):
    MASS = "mass"
    VOLUME = "volume"
    COUNT = "count"


class CanonicalUnit(str, Enum):
    G = "g"
    KG = "kg"
    OZ = "oz"
    LB = "lb"
    ML = "ml"
    L = "l"
    TSP = "tsp"
    TBSP = "tbsp"
    CUP = "cup"
    FL_OZ = "fl_oz"
    EACH = "each"

    @property
    def dimension(self) -> Dimension:
        if self in _GRAMS_PER_UNIT:
            return Dimension.MASS
        if self in _ML_PER_UNIT:
            return Dimension.VOLUME
        return Dimension.COUNT


# Conversion constants
_GRAMS_PER_UNIT = {
    CanonicalUnit.G: 1.0,
    CanonicalUnit.KG: 1000.0,
    CanonicalUnit.OZ: 28.3495,
    CanonicalUnit.LB: 453.592,
}
_ML_PER_UNIT = {
    CanonicalUnit.ML: 1.0,
    CanonicalUnit.L: 1000.0,
    CanonicalUnit.TSP: 5.0,
    CanonicalUnit.TBSP: 15.0,
    CanonicalUnit.CUP: 240.0,
    CanonicalUnit.FL_OZ: 29.5735,
}

_ALIASES: dict[CanonicalUnit, tuple[str, ...]] = {
    CanonicalUnit.G: ("g", "gr", "gram", "grams", "gramme", "grammes"),
    CanonicalUnit.KG: ("kg", "kgs", "kilo", "kilos", "kilogram", "kilograms"),
    CanonicalUnit.OZ: ("oz", "ozs", "ounce", "ounces", "net wt oz"),
    CanonicalUnit.LB: ("lb", "lbs", "pound", "pounds", "#"),
    CanonicalUnit.ML: ("ml", "mls", "milliliter", "milliliters", "millilitre", "millilitres"),
    CanonicalUnit.L: ("l", "lt", "ltr", "liter", "liters", "litre", "litres"),
    CanonicalUnit.TSP: ("tsp", "tsps", "tspn", "teaspoon", "teaspoons"),
    CanonicalUnit.TBSP: ("tbsp", "tbsps", "tbs", "tbl", "tblsp", "tablespoon", "tablespoons"),
    CanonicalUnit.CUP: ("c", "cup", "cups"),
    CanonicalUnit.FL_OZ: ("fl oz", "floz", "fl_oz", "fl ounce", "fluid ounce", "fluid ounces", "fl ozs"),
    CanonicalUnit.EACH: (
        "each", "ea", "unit", "units", "piece", "pieces", "pc", "pcs", "ct", "count",
        "item", "items", "whole", "clove", "cloves", "sprig", "sprigs", "head", "heads",
        "bunch", "bunches", "small", "medium", "large", "stalk", "stalks",
    ),
}

_ALIAS_LOOKUP: dict[str, CanonicalUnit] = {
    alias: unit for unit, aliases in _ALIASES.items() for alias in aliases
}

_PUNCT_RE = re.compile(r"[.,;:()\[\]{}'\"]")


def _clean(text: str) -> str:
    s = _PUNCT_RE.sub(" ", text.lower())
    return " ".join(s.split())


def resolve(unit_text: Optional[str]) -> Optional[CanonicalUnit]:
    """
    Map free-text unit ("Tbsp.", "tablespoons", "fl. oz") to a CanonicalUnit.
    Returns None when unresolved; downstream treats that as EACH.
    """
    if not unit_text:
        return None
    key = _clean(str(unit_text))
    if not key:
        return None
    if key in _ALIAS_LOOKUP:
        return _ALIAS_LOOKUP[key]
    # Plurals not spelled out in the alias table
    for suffix in ("es", "s"):
        if key.endswith(suffix) and key[: -len(suffix)] in _ALIAS_LOOKUP:
            return _ALIAS_LOOKUP[key[: -len(suffix)]]
    return None


def resolve_or_each(unit_text: Optional[str]) -> CanonicalUnit:
    return resolve(unit_text) or CanonicalUnit.EACH


def aliases_of(unit: CanonicalUnit) -> tuple[str, ...]:
    return _ALIASES[unit]


def _factor(unit: CanonicalUnit) -> Optional[float]:
    if unit in _GRAMS_PER_UNIT:
        return _GRAMS_PER_UNIT[unit]
    return _ML_PER_UNIT.get(unit)


def is_convertible(from_unit: CanonicalUnit, to_unit: CanonicalUnit) -> bool:
    if from_unit == to_unit:
        return True
    if from_unit.dimension != to_unit.dimension:
        return False
    return _factor(from_unit) is not None and _factor(to_unit) is not None


def convert(amount: float, from_unit: CanonicalUnit, to_unit: CanonicalUnit) -> float:
    """
    Same-dimension conversion via per-unit gram/ml factors.
    Cross-dimension or unknown factors return amount unconverted; callers
    check is_convertible() to flag that.
    """
    if from_unit == to_unit:
        return amount
    if not is_convertible(from_unit, to_unit):
        return amount
    return amount * _factor(from_unit) / _factor(to_unit)


def to_base(amount: float, unit: CanonicalUnit) -> tuple[float, Dimension]:
    """Express amount in grams (mass), ml (volume) or pieces (count)."""
    dim = unit.dimension
    if dim == Dimension.MASS:
        return convert(amount, unit, CanonicalUnit.G), dim
    if dim == Dimension.VOLUME:
        return convert(amount, unit, CanonicalUnit.ML), dim
    return amount, dim


@dataclass(frozen=True)
class PackageSize:
    amount: float
    unit: CanonicalUnit

    @property
    def display(self) -> str:
        amount = f"{self.amount:g}"
        unit = "fl oz" if self.unit == CanonicalUnit.FL_OZ else self.unit.value
        return f"{amount} {unit}"


_NUM = r"(\d+(?:\.\d+)?)"

# Order matters: fl oz before oz, multipacks before single sizes
_PACKAGE_PATTERNS: tuple[tuple[re.Pattern, Optional[CanonicalUnit]], ...] = (
    (re.compile(_NUM + r"\s*(?:-\s*)?(?:pk|pack|ct|count)?\s*(?:x|×|/)\s*" + _NUM + r"\s*(fl\s*oz|oz|lbs?|g|kg|ml|l)\b"), None),
    (re.compile(_NUM + r"\s*(?:fl\.?\s*oz|fluid\s*ounces?|floz)\b"), CanonicalUnit.FL_OZ),
    (re.compile(r"(?:approx\.?\s*)?" + _NUM + r"\s*(?:lbs?|pounds?)\b"), CanonicalUnit.LB),
    (re.compile(_NUM + r"\s*(?:oz|ounces?)\b"), CanonicalUnit.OZ),
    (re.compile(_NUM + r"\s*(?:kg|kilograms?)\b"), CanonicalUnit.KG),
    (re.compile(_NUM + r"\s*(?:g|grams?)\b"), CanonicalUnit.G),
    (re.compile(_NUM + r"\s*(?:ml|milliliters?|millilitres?)\b"), CanonicalUnit.ML),
    (re.compile(_NUM + r"\s*(?:l|liters?|litres?)\b"), CanonicalUnit.L),
    (re.compile(_NUM + r"\s*(?:ct|count|each|ea|whole|pieces?|items?|pk|pack)\b"), CanonicalUnit.EACH),
)


def parse_package_size(size_text: Optional[str]) -> Optional[PackageSize]:
    """
    Parse a retail size string: "46 fl oz bottle", "Approx. 3.5 lbs",
    "6 x 12 oz", "1 dozen", "12 ct", "each".
    """
    if not size_text:
        return None
    s = str(size_text).strip().lower()
    if not s:
        return None
    for pattern, unit in _PACKAGE_PATTERNS:
        m = pattern.search(s)
        if not m:
            continue
        if unit is None:
            count, each_size, raw_unit = float(m.group(1)), float(m.group(2)), m.group(3)
            single = resolve(" ".join(raw_unit.split()))
            if single is None:
                continue
            return PackageSize(count * each_size, single)
        amount = float(m.group(1))
        if amount <= 0:
            return None
        return PackageSize(amount, unit)
    if m := re.search(_NUM + r"?\s*(?:dozen|doz)\b", s):
        dozens = float(m.group(1)) if m.group(1) else 1.0
        return PackageSize(12.0 * dozens, CanonicalUnit.EACH)
    if m := re.search(_NUM, s):
        amount = float(m.group(1))
        return PackageSize(amount, CanonicalUnit.EACH) if amount > 0 else None
    if re.search(r"\b(each|ea|whole|item|piece|bunch|head)\b", s):
        return PackageSize(1.0, CanonicalUnit.EACH)
    return None
