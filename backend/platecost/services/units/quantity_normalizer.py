"""
(amount, unit, name) -> grams / millilitres / pieces.

to_grams runs an ordered list of strategies, most precise first:
explicit override, mass unit, ingredient tables (grams per cup / per each),
then the 1 ml ~= 1 g water approximation. Each strategy returns a tagged
GramsEstimate or None.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from platecost.services.catalog.matcher import match
from platecost.services.costing.models import Ingredient
from platecost.services.units.unit_model import (
    CanonicalUnit,
    Dimension,
    convert,
    resolve_or_each,
)

# Typical weight of one whole item
GRAMS_PER_EACH: dict[str, float] = {
    # Vegetables
    "onion": 150, "yellow onion": 150, "white onion": 150, "red onion": 140, "sweet onion": 180,
    "carrot": 60, "baby carrot": 8, "large carrot": 120,
    "tomato": 120, "roma tomato": 100, "beefsteak tomato": 200, "heirloom tomato": 250,
    "cherry tomato": 15, "grape tomato": 12,
    "bell pepper": 120, "red bell pepper": 120, "green bell pepper": 110,
    "yellow bell pepper": 120, "orange bell pepper": 120,
    "jalapeño": 15, "jalapeno": 15, "serrano pepper": 8, "poblano pepper": 80, "habanero": 10,
    "potato": 170, "russet potato": 180, "red potato": 150, "yukon potato": 160,
    "sweet potato": 200, "baby potato": 40,
    "garlic": 3, "garlic clove": 3, "garlic bulb": 45, "shallot": 30,
    "green onion": 15, "scallion": 15,
    # Mushrooms
    "white mushroom": 20, "baby bella mushroom": 25, "portobello mushroom": 85,
    "shiitake mushroom": 30, "cremini mushroom": 25, "oyster mushroom": 40,
    # Squash, cucumbers, others
    "zucchini": 200, "yellow squash": 200, "butternut squash": 1000, "acorn squash": 800,
    "spaghetti squash": 1200, "eggplant": 450, "japanese eggplant": 300,
    "english cucumber": 300, "persian cucumber": 150, "pickling cucumber": 80,
    "artichoke": 150, "baby artichoke": 75, "corn on the cob": 150, "ear of corn": 150,
    # Eggs
    "egg": 50, "large egg": 50, "medium egg": 45, "small egg": 40, "jumbo egg": 60, "quail egg": 10,
    # Fruit
    "lemon": 90, "meyer lemon": 100, "lime": 70, "key lime": 30,
    "orange": 180, "navel orange": 200, "blood orange": 170, "grapefruit": 400,
    "apple": 150, "granny smith apple": 160, "honeycrisp apple": 180, "gala apple": 140,
    "pear": 180, "banana": 120, "plantain": 200, "avocado": 150, "hass avocado": 160,
    "mango": 300, "pineapple": 1500,
    # Spices and herbs sold whole
    "vanilla bean": 5, "cinnamon stick": 3, "bay leaf": 0.5, "whole nutmeg": 8, "cardamom pod": 0.3,
    "basil bunch": 25, "cilantro bunch": 30, "parsley bunch": 30, "mint bunch": 25,
    "dill bunch": 25, "thyme sprig": 2, "rosemary sprig": 3, "sage leaf": 0.5,
}

# Weight of one US cup, chopped/packed as usually measured
GRAMS_PER_CUP: dict[str, float] = {
    # Vegetables
    "onion": 160, "yellow onion": 160, "white onion": 160, "red onion": 160,
    "green onion": 100, "scallion": 100, "carrot": 128, "baby carrots": 128,
    "tomato": 180, "roma tomato": 180, "cherry tomatoes": 150, "grape tomatoes": 150,
    "celery": 101, "bell pepper": 150, "red bell pepper": 150, "green bell pepper": 150,
    "jalapeño": 90, "potato": 210, "sweet potato": 200,
    "garlic": 136, "minced garlic": 136, "ginger": 96, "fresh ginger": 96,
    "spinach": 30, "baby spinach": 30, "kale": 67, "lettuce": 47, "arugula": 20,
    "basil": 24, "fresh basil": 24, "parsley": 60, "fresh parsley": 60,
    "cilantro": 16, "fresh cilantro": 16,
    "white mushroom": 70, "cremini mushroom": 70, "shiitake mushroom": 65,
    "zucchini": 124, "butternut squash": 245, "cucumber": 119,
    # Grains and legumes
    "rice": 185, "white rice": 185, "brown rice": 195, "jasmine rice": 185,
    "basmati rice": 185, "wild rice": 160, "quinoa": 170, "pasta": 100, "cooked pasta": 220,
    "oats": 80, "rolled oats": 80, "steel cut oats": 170, "couscous": 175, "bulgur": 140,
    "barley": 200, "beans": 175, "black beans": 175, "pinto beans": 175, "kidney beans": 175,
    "chickpeas": 164, "garbanzo beans": 164, "lentils": 200, "split peas": 200,
    # Baking
    "flour": 120, "all-purpose flour": 120, "bread flour": 120, "cake flour": 115,
    "almond flour": 96, "coconut flour": 112, "sugar": 200, "brown sugar": 220,
    "powdered sugar": 120, "honey": 340, "maple syrup": 315,
    "cornstarch": 120, "baking powder": 200, "baking soda": 220, "cocoa powder": 85,
    # Fats and dairy
    "butter": 227, "oil": 218, "olive oil": 218, "vegetable oil": 218, "coconut oil": 218,
    "milk": 240, "heavy cream": 240, "sour cream": 240, "yogurt": 240, "greek yogurt": 240,
    "cheese": 113, "cheddar cheese": 113, "mozzarella cheese": 113, "parmesan cheese": 100,
    "feta cheese": 150, "goat cheese": 150, "cream cheese": 225, "ricotta cheese": 250,
    # Nuts, dried fruit, pantry
    "almonds": 95, "walnuts": 100, "pecans": 99, "cashews": 112, "peanuts": 146,
    "pine nuts": 135, "sesame seeds": 144, "raisins": 165, "dried cranberries": 120,
    "canned tomatoes": 240, "diced tomatoes": 240, "crushed tomatoes": 240,
    "tomato paste": 240, "coconut milk": 240, "frozen peas": 145, "frozen corn": 165,
    "bread crumbs": 110, "panko": 50, "olives": 140, "capers": 142,
}

_DENSITY_TABLES = {**GRAMS_PER_CUP, **GRAMS_PER_EACH}

_CUP_FAMILY = (CanonicalUnit.CUP, CanonicalUnit.TBSP, CanonicalUnit.TSP)


class Precision(str, Enum):
    EXPLICIT = "explicit"
    MEASURED = "measured"
    DENSITY = "density"
    WATER_APPROX = "water_approx"

    @property
    def is_low(self) -> bool:
        return self == Precision.WATER_APPROX


@dataclass(frozen=True)
class GramsEstimate:
    grams: float
    precision: Precision


def count_of(ingredient: Ingredient) -> float:
    """Whole pieces a count-unit ingredient asks for: round half up, at least one."""
    return float(max(1, math.floor(ingredient.amount + 0.5)))


def table_key(name: str) -> Optional[str]:
    hit = match(name, _DENSITY_TABLES)
    return hit.key if hit else None


def grams_per_each(name: str) -> Optional[float]:
    hit = match(name, GRAMS_PER_EACH)
    return GRAMS_PER_EACH[hit.key] if hit else None


def _explicit(ingredient: Ingredient, unit: CanonicalUnit) -> Optional[GramsEstimate]:
    if ingredient.weight_grams is not None and ingredient.weight_grams > 0:
        return GramsEstimate(float(ingredient.weight_grams), Precision.EXPLICIT)
    return None


def _mass_unit(ingredient: Ingredient, unit: CanonicalUnit) -> Optional[GramsEstimate]:
    if unit.dimension == Dimension.MASS:
        return GramsEstimate(convert(ingredient.amount, unit, CanonicalUnit.G), Precision.MEASURED)
    return None


def _ingredient_tables(ingredient: Ingredient, unit: CanonicalUnit) -> Optional[GramsEstimate]:
    key = table_key(ingredient.name)
    if key is None:
        return None
    if unit in _CUP_FAMILY and key in GRAMS_PER_CUP:
        cups = convert(ingredient.amount, unit, CanonicalUnit.CUP)
        return GramsEstimate(cups * GRAMS_PER_CUP[key], Precision.DENSITY)
    if unit == CanonicalUnit.EACH and key in GRAMS_PER_EACH:
        return GramsEstimate(count_of(ingredient) * GRAMS_PER_EACH[key], Precision.DENSITY)
    return None


def _water_approx(ingredient: Ingredient, unit: CanonicalUnit) -> Optional[GramsEstimate]:
    if unit.dimension == Dimension.VOLUME:
        return GramsEstimate(convert(ingredient.amount, unit, CanonicalUnit.ML), Precision.WATER_APPROX)
    return None


GRAMS_STRATEGIES: tuple[Callable[[Ingredient, CanonicalUnit], Optional[GramsEstimate]], ...] = (
    _explicit,
    _mass_unit,
    _ingredient_tables,
    _water_approx,
)


def to_grams(ingredient: Ingredient) -> Optional[GramsEstimate]:
    """Best available gram estimate, or None when nothing applies."""
    unit = resolve_or_each(ingredient.unit)
    for strategy in GRAMS_STRATEGIES:
        estimate = strategy(ingredient, unit)
        if estimate is not None:
            return estimate
    return None


def to_milliliters(ingredient: Ingredient) -> Optional[float]:
    unit = resolve_or_each(ingredient.unit)
    if unit.dimension != Dimension.VOLUME:
        return None
    return convert(ingredient.amount, unit, CanonicalUnit.ML)
