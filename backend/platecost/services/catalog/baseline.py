"""
Static baseline price model: USD per kg, per litre and per whole item.
Used when no live provider answers, and as the deadline fallback.
"""

from dataclasses import dataclass, field
from typing import Optional

from platecost.services.catalog.location import location_multiplier
from platecost.services.catalog.matcher import CatalogMatch, match
from platecost.services.costing.models import (
    CatalogEntry,
    Confidence,
    Ingredient,
    MatchReason,
    MatchResult,
)
from platecost.services.units.quantity_normalizer import to_grams, to_milliliters
from platecost.services.units.unit_model import CanonicalUnit, Dimension, PackageSize, resolve_or_each

PRICE_PER_KG: dict[str, float] = {
    # Vegetables
    "onion": 4.4, "yellow onion": 4.4, "white onion": 4.4, "red onion": 5.5,
    "green onion": 8.8, "scallion": 8.8, "carrot": 3.8, "baby carrots": 5.5,
    "tomato": 6.6, "roma tomato": 6.6, "cherry tomatoes": 11.0, "grape tomatoes": 11.0,
    "plum tomatoes": 7.7, "heirloom tomatoes": 13.2, "celery": 5.5,
    "bell pepper": 8.8, "red bell pepper": 8.8, "green bell pepper": 7.7,
    "yellow bell pepper": 8.8, "orange bell pepper": 8.8, "pepper": 8.8,
    "jalapeño": 11.0, "serrano pepper": 13.2, "poblano pepper": 11.0, "habanero": 22.0,
    "potato": 3.3, "russet potato": 3.3, "red potato": 4.4, "yukon potato": 4.4,
    "sweet potato": 5.5, "baby potato": 6.6,
    "garlic": 15.4, "minced garlic": 15.4, "fresh garlic": 15.4, "garlic powder": 22.0,
    "ginger": 13.2, "fresh ginger": 13.2, "ground ginger": 44.0,
    # Citrus
    "lemon": 6.6, "meyer lemon": 8.8, "lime": 7.7, "key lime": 11.0,
    "orange": 5.5, "navel orange": 5.5, "grapefruit": 4.4,
    # Greens and herbs
    "spinach": 11.0, "baby spinach": 13.2, "kale": 8.8, "lettuce": 6.6,
    "romaine lettuce": 6.6, "mixed greens": 13.2, "arugula": 15.4,
    "basil": 44.0, "fresh basil": 44.0, "oregano": 44.0, "parsley": 22.0,
    "fresh parsley": 22.0, "cilantro": 22.0, "fresh cilantro": 22.0, "thyme": 44.0,
    "rosemary": 44.0, "sage": 44.0, "dill": 33.0, "mint": 33.0,
    # Poultry
    "chicken": 15.4, "whole chicken": 8.8, "chicken breast": 19.8, "chicken thighs": 13.2,
    "chicken wings": 11.0, "chicken drumsticks": 9.9, "turkey": 17.6,
    "ground turkey": 15.4, "turkey breast": 22.0,
    # Beef and pork
    "beef": 28.6, "ground beef": 17.6, "beef stew meat": 22.0, "chuck roast": 19.8,
    "ribeye steak": 44.0, "sirloin steak": 33.0, "flank steak": 26.4,
    "pork": 13.2, "ground pork": 11.0, "pork chops": 15.4, "pork shoulder": 11.0,
    "pork tenderloin": 17.6, "bacon": 22.0, "ham": 17.6, "sausage": 15.4,
    "italian sausage": 17.6,
    # Seafood
    "salmon": 44.0, "tuna": 33.0, "cod": 26.4, "shrimp": 33.0, "crab": 55.0,
    "scallops": 55.0, "mussels": 11.0, "clams": 13.2,
    # Grains
    "rice": 4.4, "white rice": 4.4, "brown rice": 5.5, "jasmine rice": 6.6,
    "basmati rice": 7.7, "wild rice": 11.0, "quinoa": 13.2, "pasta": 2.2,
    "spaghetti": 2.2, "penne pasta": 2.2, "couscous": 6.6, "bulgur": 5.5, "barley": 4.4,
    "oats": 3.3, "rolled oats": 3.3,
    # Legumes
    "beans": 4.4, "black beans": 4.4, "pinto beans": 4.4, "kidney beans": 4.4,
    "chickpeas": 5.5, "garbanzo beans": 5.5, "lentils": 6.6, "split peas": 4.4,
    # Baking and pantry
    "flour": 2.2, "all-purpose flour": 2.2, "bread flour": 3.3, "almond flour": 22.0,
    "sugar": 2.2, "brown sugar": 2.2, "powdered sugar": 3.3, "honey": 11.0,
    "maple syrup": 22.0, "cornstarch": 4.4, "baking powder": 11.0, "baking soda": 2.2,
    "yeast": 22.0, "bread crumbs": 6.6, "panko": 8.8,
    # Dairy
    "butter": 17.6, "unsalted butter": 17.6, "salted butter": 17.6,
    "cheese": 22.0, "cheddar cheese": 22.0, "mozzarella cheese": 19.8,
    "feta cheese": 26.4, "goat cheese": 33.0, "cream cheese": 17.6,
    "ricotta cheese": 13.2, "parmesan cheese": 33.0, "pecorino romano": 35.2,
    # Seasonings
    "salt": 1.1, "sea salt": 4.4, "kosher salt": 2.2, "black pepper": 44.0,
    "cayenne pepper": 33.0, "paprika": 22.0, "chili powder": 22.0, "cumin": 33.0,
    "turmeric": 22.0, "cinnamon": 22.0, "nutmeg": 44.0, "vanilla extract": 220.0,
    # Oils
    "oil": 11.0, "vegetable oil": 8.8, "olive oil": 26.4, "olive oil extra virgin": 30.0,
    "coconut oil": 17.6, "sesame oil": 26.4, "canola oil": 7.7,
    # Condiments
    "ketchup": 6.6, "mustard": 5.5, "dijon mustard": 8.8, "mayonnaise": 8.8,
    "soy sauce": 8.8, "hot sauce": 11.0, "balsamic vinegar": 15.4,
    "apple cider vinegar": 8.8, "white vinegar": 3.3, "rice vinegar": 11.0,
    # Nuts, canned, frozen
    "walnuts": 22.0, "pecans": 33.0, "almonds": 19.8, "cashews": 26.4, "pine nuts": 88.0,
    "peanuts": 11.0, "sesame seeds": 15.4, "olives": 15.4, "capers": 33.0,
    "canned tomatoes": 4.4, "diced tomatoes": 4.4, "crushed tomatoes": 4.4,
    "tomato paste": 8.8, "tomato sauce": 3.3, "coconut milk": 6.6,
    "frozen peas": 4.4, "frozen corn": 3.3,
    "lemon juice": 11.0, "lime juice": 13.2,
}

PRICE_PER_LITER: dict[str, float] = {
    "milk": 1.0, "whole milk": 1.0, "2% milk": 1.0, "skim milk": 1.0, "almond milk": 3.0,
    "oat milk": 4.0, "soy milk": 2.5, "coconut milk": 3.5, "heavy cream": 8.0,
    "half and half": 4.0, "buttermilk": 2.5, "sour cream": 6.0, "yogurt": 4.0,
    "greek yogurt": 8.0,
    "oil": 6.0, "vegetable oil": 5.5, "olive oil": 12.0, "extra virgin olive oil": 15.0,
    "coconut oil": 10.0, "sesame oil": 15.0, "canola oil": 4.5, "peanut oil": 8.0,
    "balsamic vinegar": 12.0, "apple cider vinegar": 6.0, "white vinegar": 2.5,
    "rice vinegar": 8.0, "red wine vinegar": 8.0, "white wine vinegar": 8.0,
    "soy sauce": 6.0, "fish sauce": 10.0, "worcestershire sauce": 8.0, "hot sauce": 8.0,
    "chicken broth": 3.0, "beef broth": 3.5, "vegetable broth": 3.0, "chicken stock": 3.5,
    "beef stock": 4.0, "vegetable stock": 3.5,
    "white wine": 15.0, "red wine": 15.0, "cooking wine": 8.0, "mirin": 18.0, "sherry": 20.0,
    "orange juice": 4.0, "lemon juice": 8.0, "lime juice": 10.0, "apple juice": 3.5,
    "tomato juice": 3.0, "coconut water": 8.0,
    # Tap water is free
    "water": 0.0,
}

PRICE_PER_EACH: dict[str, float] = {
    "egg": 0.5, "large egg": 0.5, "medium egg": 0.45, "small egg": 0.4, "jumbo egg": 0.6,
    "egg yolk": 0.25, "egg white": 0.25, "quail egg": 0.8,
    "lemon": 1.2, "meyer lemon": 1.5, "lime": 0.8, "key lime": 0.5, "orange": 1.0,
    "grapefruit": 1.8, "apple": 1.0, "pear": 1.3, "banana": 0.3, "plantain": 1.2,
    "avocado": 2.0, "mango": 2.5, "pineapple": 5.0,
    "onion": 0.8, "yellow onion": 0.8, "white onion": 0.8, "red onion": 1.0, "sweet onion": 1.2,
    "bell pepper": 2.5, "red bell pepper": 2.5, "green bell pepper": 2.0,
    "jalapeño": 0.3, "poblano pepper": 1.5, "tomato": 1.5, "roma tomato": 1.2,
    "potato": 0.6, "sweet potato": 1.2, "carrot": 0.4, "zucchini": 1.5, "eggplant": 3.0,
    "english cucumber": 2.0, "butternut squash": 4.0,
    "garlic clove": 0.1, "garlic": 0.1, "garlic bulb": 1.5, "shallot": 0.8,
    "green onion": 0.2, "scallion": 0.2,
    "white mushroom": 0.5, "portobello mushroom": 2.5, "artichoke": 3.0, "ear of corn": 1.0,
    "basil bunch": 3.0, "cilantro bunch": 2.0, "parsley bunch": 2.0, "thyme sprig": 0.3,
    "rosemary sprig": 0.3, "bay leaf": 0.1, "cinnamon stick": 0.5, "vanilla bean": 4.0,
}

BASELINE_PROVENANCE = "baseline"


@dataclass(frozen=True)
class _PriceTable:
    prices: dict[str, float]
    package: PackageSize
    label: str


@dataclass
class BaselineCatalog:
    """
    Static catalog lookup. Entries are loose goods priced per kg, per litre or
    per whole item, scaled by the location multiplier.
    """

    per_kg: dict[str, float] = field(default_factory=lambda: dict(PRICE_PER_KG))
    per_liter: dict[str, float] = field(default_factory=lambda: dict(PRICE_PER_LITER))
    per_each: dict[str, float] = field(default_factory=lambda: dict(PRICE_PER_EACH))

    def _tables(self) -> dict[str, _PriceTable]:
        return {
            "kg": _PriceTable(self.per_kg, PackageSize(1.0, CanonicalUnit.KG), "per kg"),
            "l": _PriceTable(self.per_liter, PackageSize(1.0, CanonicalUnit.L), "per l"),
            "each": _PriceTable(self.per_each, PackageSize(1.0, CanonicalUnit.EACH), "each"),
        }

    def _candidate_tables(self, ingredient: Ingredient) -> list[str]:
        """
        Weight pricing when grams are resolvable, then volume pricing for
        volume units, then per-item pricing for count units.
        """
        unit = resolve_or_each(ingredient.unit)
        order = []
        if to_grams(ingredient) is not None:
            order.append("kg")
        if to_milliliters(ingredient) is not None:
            order.append("l")
        if unit.dimension == Dimension.COUNT:
            order.append("each")
        return order

    def lookup(self, ingredient: Ingredient, location: Optional[str] = None) -> MatchResult:
        tables = self._tables()
        for table_name in self._candidate_tables(ingredient):
            table = tables[table_name]
            hit = match(ingredient.name, table.prices)
            if hit is None:
                continue
            entry = self._entry(hit, table, location)
            return MatchResult(
                ingredient=ingredient,
                entry=entry,
                confidence=Confidence.HIGH if hit.reason == MatchReason.EXACT else Confidence.MEDIUM,
                match_reason=hit.reason,
                price_factor=hit.price_factor,
            )
        return MatchResult(
            ingredient=ingredient,
            entry=None,
            confidence=Confidence.LOW,
            match_reason=MatchReason.FALLBACK_ESTIMATE,
        )

    def _entry(self, hit: CatalogMatch, table: _PriceTable, location: Optional[str]) -> CatalogEntry:
        price = table.prices[hit.key] * location_multiplier(location)
        return CatalogEntry(
            description=f"{hit.key} ({table.label})",
            package=table.package,
            package_price=price,
            provenance=BASELINE_PROVENANCE,
            loose=True,
        )


baseline_catalog = BaselineCatalog()
