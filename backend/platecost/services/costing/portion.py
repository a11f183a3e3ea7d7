"""
Portion cost: what a recipe's quantity of an ingredient costs given a priced package.

Regimes
- count: recipe in pieces, package sold in pieces -> whole packages are bought.
- divisible: mass/volume on a common base (g or ml); cost is the consumed share.
- unit-mismatch: no bridge between recipe and package dimensions -> 25% guess, low confidence.
- fallback: no catalog entry -> $/kg when grams are known, else amount buckets.
"""

import math
from typing import Optional

from platecost.services.catalog.matcher import match
from platecost.services.costing.models import (
    CatalogEntry,
    Confidence,
    CostBreakdown,
    CostRegime,
    Ingredient,
    MatchResult,
)
from platecost.services.units.quantity_normalizer import (
    GRAMS_PER_CUP,
    grams_per_each,
    to_grams,
    to_milliliters,
)
from platecost.services.units.unit_model import (
    CanonicalUnit,
    Dimension,
    PackageSize,
    convert,
    resolve_or_each,
)

DEFAULT_FALLBACK_PRICE_PER_KG = 8.0
MIN_FALLBACK_COST = 0.01
MISMATCH_UTILIZATION = 0.25

# (max amount, $ per unit); small counts carry a small-package premium
_AMOUNT_BUCKETS: tuple[tuple[float, float], ...] = (
    (1.0, 2.5),
    (3.0, 1.8),
    (10.0, 1.2),
    (math.inf, 0.8),
)

_EPS = 1e-9


def _floor4(x: float) -> float:
    return math.floor(x * 10000) / 10000


def _fmt(amount: float, unit: str) -> str:
    return f"{round(amount, 2):g} {unit}"


def _unit_label(unit: CanonicalUnit) -> str:
    return "fl oz" if unit == CanonicalUnit.FL_OZ else unit.value


def _count_cost(ingredient: Ingredient, entry: CatalogEntry, price: float, confidence: Confidence) -> CostBreakdown:
    pieces = ingredient.amount
    per_pack = entry.package.amount
    packages = max(1, math.ceil(pieces / per_pack - _EPS))
    purchased = packages * per_pack
    waste = max(0.0, purchased - pieces)
    utilization = 1.0 if waste <= _EPS else _floor4(pieces / purchased)
    return CostBreakdown(
        portion_cost=packages * price,
        package_price=price,
        packages_needed=packages,
        waste_amount=0.0 if waste <= _EPS else round(waste, 4),
        waste_unit=_unit_label(entry.package.unit),
        utilization_ratio=utilization,
        confidence=confidence,
        regime=CostRegime.COUNT,
        explanation=(
            f"{packages} x {entry.package.display} @ ${price:.2f}; "
            f"uses {_fmt(pieces, 'each')} of {_fmt(purchased, 'each')}"
        ),
    )


def _recipe_in_grams(ingredient: Ingredient) -> tuple[Optional[float], bool]:
    estimate = to_grams(ingredient)
    if estimate is None:
        return None, False
    return estimate.grams, estimate.precision.is_low


def _recipe_in_ml(ingredient: Ingredient) -> tuple[Optional[float], bool]:
    ml = to_milliliters(ingredient)
    if ml is not None:
        return ml, False
    # Measured by weight or count: bridge through the ingredient's grams-per-cup density
    estimate = to_grams(ingredient)
    hit = match(ingredient.name, GRAMS_PER_CUP)
    if estimate is None or hit is None:
        return None, False
    ml = estimate.grams / GRAMS_PER_CUP[hit.key] * convert(1.0, CanonicalUnit.CUP, CanonicalUnit.ML)
    return ml, estimate.precision.is_low


def _divisible_bases(ingredient: Ingredient, package: PackageSize) -> Optional[tuple[float, float, float, bool]]:
    """
    (recipe_base, package_base, base_per_package_unit, low_precision) on a shared
    base unit, or None when no bridge exists.
    """
    dim = package.unit.dimension
    if dim == Dimension.MASS:
        recipe, low = _recipe_in_grams(ingredient)
        per_unit = convert(1.0, package.unit, CanonicalUnit.G)
    elif dim == Dimension.VOLUME:
        recipe, low = _recipe_in_ml(ingredient)
        per_unit = convert(1.0, package.unit, CanonicalUnit.ML)
    else:
        # Sold by the piece, measured by weight/volume: bridge via grams per item
        each_g = grams_per_each(ingredient.name)
        recipe, low = _recipe_in_grams(ingredient)
        if each_g is None:
            return None
        per_unit = each_g
    if recipe is None or recipe <= 0:
        return None
    return recipe, package.amount * per_unit, per_unit, low


def _divisible_cost(
    ingredient: Ingredient,
    entry: CatalogEntry,
    price: float,
    confidence: Confidence,
    bases: tuple[float, float, float, bool],
) -> CostBreakdown:
    recipe_base, package_base, per_unit, low = bases
    if low:
        confidence = Confidence.LOW
    share = recipe_base / package_base
    unit_label = _unit_label(entry.package.unit)
    recipe_display = _fmt(recipe_base / per_unit, unit_label)

    if entry.loose:
        portion = price * share
        return CostBreakdown(
            portion_cost=portion,
            package_price=portion,
            packages_needed=1,
            waste_amount=0.0,
            waste_unit=unit_label,
            utilization_ratio=1.0,
            confidence=confidence,
            regime=CostRegime.DIVISIBLE,
            explanation=f"{recipe_display} @ ${price:.2f} per {entry.package.display}",
        )

    # packages_needed is informational; portion and waste are against one package.
    packages = max(1, math.ceil(share - _EPS))
    waste_base = max(0.0, package_base - recipe_base)
    if waste_base <= _EPS * package_base:
        waste_base = 0.0
    utilization = 1.0 if waste_base == 0.0 else min(share, 1.0)
    return CostBreakdown(
        portion_cost=price * utilization,
        package_price=price,
        packages_needed=packages,
        waste_amount=round(waste_base / per_unit, 4),
        waste_unit=unit_label,
        utilization_ratio=utilization,
        confidence=confidence,
        regime=CostRegime.DIVISIBLE,
        explanation=(
            f"uses {recipe_display} of {packages} x {entry.package.display} @ ${price:.2f}"
        ),
    )


def _mismatch_cost(entry: CatalogEntry, price: float) -> CostBreakdown:
    return CostBreakdown(
        portion_cost=price * MISMATCH_UTILIZATION,
        package_price=price,
        packages_needed=1,
        waste_amount=round(entry.package.amount * (1 - MISMATCH_UTILIZATION), 4),
        waste_unit=_unit_label(entry.package.unit),
        utilization_ratio=MISMATCH_UTILIZATION,
        confidence=Confidence.LOW,
        regime=CostRegime.UNIT_MISMATCH,
        explanation=f"recipe unit not convertible to {entry.package.display}; assumed 25% used",
    )


def cost(
    ingredient: Ingredient,
    entry: CatalogEntry,
    price_factor: float = 1.0,
    confidence: Confidence = Confidence.MEDIUM,
) -> CostBreakdown:
    """Cost of the recipe's quantity of one ingredient from a priced package."""
    price = entry.effective_price * price_factor
    recipe_unit = resolve_or_each(ingredient.unit)
    if entry.is_count_package and recipe_unit == CanonicalUnit.EACH:
        return _count_cost(ingredient, entry, price, confidence)
    bases = _divisible_bases(ingredient, entry.package)
    if bases is None:
        return _mismatch_cost(entry, price)
    return _divisible_cost(ingredient, entry, price, confidence, bases)


def package_fit(ingredient: Ingredient, package: PackageSize) -> float:
    """|log(package / needed)| on a shared base; 0 is a perfect fit, inf means no bridge."""
    if package.unit == CanonicalUnit.EACH and resolve_or_each(ingredient.unit) == CanonicalUnit.EACH:
        needed, offered = ingredient.amount, package.amount
    else:
        bases = _divisible_bases(ingredient, package)
        if bases is None:
            return math.inf
        needed, offered = bases[0], bases[1]
    if needed <= 0 or offered <= 0:
        return math.inf
    return abs(math.log(offered / needed))


def fallback_cost(
    ingredient: Ingredient,
    price_per_kg: float = DEFAULT_FALLBACK_PRICE_PER_KG,
    multiplier: float = 1.0,
) -> CostBreakdown:
    """Heuristic when nothing in any catalog matched. Always positive and finite."""
    estimate = to_grams(ingredient)
    if estimate is not None:
        raw = estimate.grams / 1000 * price_per_kg
        how = f"{_fmt(estimate.grams, 'g')} @ ${price_per_kg:.2f}/kg generic rate"
    else:
        amount = ingredient.amount
        per_unit = next(
            (rate for limit, rate in _AMOUNT_BUCKETS if amount <= limit), _AMOUNT_BUCKETS[-1][1]
        )
        raw = amount * per_unit
        how = f"{amount:g} x ${per_unit:.2f} generic per-unit rate"
    value = raw * multiplier
    if not math.isfinite(value) or value < MIN_FALLBACK_COST:
        value = MIN_FALLBACK_COST
    return CostBreakdown(
        portion_cost=value,
        package_price=value,
        packages_needed=1,
        waste_amount=0.0,
        waste_unit="",
        utilization_ratio=1.0,
        confidence=Confidence.LOW,
        regime=CostRegime.FALLBACK,
        explanation=how,
    )


def cost_match(
    result: MatchResult,
    fallback_price_per_kg: float = DEFAULT_FALLBACK_PRICE_PER_KG,
    multiplier: float = 1.0,
) -> CostBreakdown:
    if result.entry is None:
        return fallback_cost(result.ingredient, fallback_price_per_kg, multiplier)
    return cost(result.ingredient, result.entry, result.price_factor, result.confidence)
