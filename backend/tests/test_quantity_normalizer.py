import pytest

from platecost.services.costing.models import Ingredient
from platecost.services.units.quantity_normalizer import (
    Precision,
    count_of,
    grams_per_each,
    to_grams,
    to_milliliters,
)


def test_explicit_weight_wins():
    est = to_grams(Ingredient("flour", 2, "cup", weight_grams=300))
    assert est.grams == 300
    assert est.precision == Precision.EXPLICIT


def test_mass_units_convert_directly():
    est = to_grams(Ingredient("beef", 1, "lb"))
    assert est.grams == pytest.approx(453.592)
    assert est.precision == Precision.MEASURED


def test_cup_density():
    est = to_grams(Ingredient("flour", 1, "cup"))
    assert est.grams == pytest.approx(120)
    assert est.precision == Precision.DENSITY


def test_tablespoons_use_cup_density():
    est = to_grams(Ingredient("olive oil", 2, "tbsp"))
    assert est.grams == pytest.approx(27.25)


def test_count_uses_grams_per_each():
    assert to_grams(Ingredient("egg", 2, "")).grams == pytest.approx(100)
    assert to_grams(Ingredient("onion", 1, "medium")).grams == pytest.approx(150)


def test_count_rounds_half_up_to_whole_pieces():
    assert count_of(Ingredient("egg", 1.5)) == 2
    assert count_of(Ingredient("egg", 0.2)) == 1
    assert to_grams(Ingredient("egg", 1.5)).grams == pytest.approx(100)


def test_unknown_volume_falls_back_to_water():
    est = to_grams(Ingredient("unobtainium", 2, "tbsp"))
    assert est.grams == pytest.approx(30)
    assert est.precision == Precision.WATER_APPROX
    assert est.precision.is_low


def test_unknown_count_has_no_weight():
    assert to_grams(Ingredient("unobtainium", 3, "")) is None
    assert grams_per_each("unobtainium") is None


def test_to_milliliters():
    assert to_milliliters(Ingredient("milk", 1, "cup")) == 240
    assert to_milliliters(Ingredient("milk", 1, "lb")) is None
