import math

import pytest

from platecost.services.costing.models import CatalogEntry, Confidence, CostRegime, Ingredient
from platecost.services.costing.portion import cost, fallback_cost, package_fit
from platecost.services.units.unit_model import CanonicalUnit, PackageSize


def _entry(amount, unit, price, **kwargs):
    return CatalogEntry(description="test item", package=PackageSize(amount, unit), package_price=price, **kwargs)


def test_count_buys_whole_packages():
    br = cost(Ingredient("egg", 3), _entry(12, CanonicalUnit.EACH, 3.60))
    assert br.regime == CostRegime.COUNT
    assert br.packages_needed == 1
    assert br.portion_cost == pytest.approx(3.60)
    assert br.waste_amount == pytest.approx(9)
    assert br.utilization_ratio == 0.25


def test_count_spills_into_second_package():
    br = cost(Ingredient("egg", 13), _entry(12, CanonicalUnit.EACH, 3.60))
    assert br.packages_needed == 2
    assert br.portion_cost == pytest.approx(7.20)


def test_count_exact_fit_has_no_waste():
    br = cost(Ingredient("egg", 12), _entry(12, CanonicalUnit.EACH, 3.60))
    assert br.packages_needed == 1
    assert br.waste_amount == 0.0
    assert br.utilization_ratio == 1.0


def test_divisible_costs_consumed_share():
    br = cost(Ingredient("flour", 500, "g"), _entry(5, CanonicalUnit.LB, 4.00))
    assert br.regime == CostRegime.DIVISIBLE
    assert br.packages_needed == 1
    assert br.portion_cost == pytest.approx(4.00 * 500 / (5 * 453.592))
    assert br.utilization_ratio == pytest.approx(0.2204, abs=1e-4)
    assert br.waste_unit == "lb"
    assert br.waste_amount == pytest.approx(5 - 500 / 453.592, abs=1e-3)


def test_divisible_bridges_volume_recipe_to_mass_package():
    br = cost(Ingredient("flour", 1, "cup"), _entry(1, CanonicalUnit.KG, 2.00))
    assert br.portion_cost == pytest.approx(0.24)
    assert br.confidence == Confidence.MEDIUM


def test_divisible_needs_more_than_one_package():
    br = cost(Ingredient("butter", 1000, "g"), _entry(454, CanonicalUnit.G, 5.00))
    assert br.packages_needed == 3
    assert br.portion_cost == pytest.approx(5.00)
    assert br.utilization_ratio == 1.0
    assert br.waste_amount == 0.0


@pytest.mark.parametrize("grams", [100, 454, 1000, 2270])
def test_divisible_portion_is_package_price_times_utilization(grams):
    br = cost(Ingredient("butter", grams, "g"), _entry(454, CanonicalUnit.G, 5.00))
    assert br.portion_cost == pytest.approx(br.package_price * br.utilization_ratio)
    assert br.portion_cost <= br.package_price + 1e-9
    if br.utilization_ratio == 1.0:
        assert br.waste_amount == 0.0


def test_loose_goods_have_no_waste():
    entry = _entry(1, CanonicalUnit.KG, 4.4, loose=True)
    br = cost(Ingredient("onion", 1), entry)
    assert br.portion_cost == pytest.approx(0.66)
    assert br.package_price == pytest.approx(0.66)
    assert br.waste_amount == 0.0
    assert br.utilization_ratio == 1.0


def test_promo_price_used_when_lower():
    entry = _entry(1, CanonicalUnit.KG, 4.00, promo_price=3.00)
    assert entry.effective_price == 3.00
    br = cost(Ingredient("flour", 500, "g"), entry)
    assert br.portion_cost == pytest.approx(1.50)
    assert _entry(1, CanonicalUnit.KG, 4.00, promo_price=5.00).effective_price == 4.00


def test_price_factor_scales_price():
    br = cost(Ingredient("egg yolk", 1), _entry(1, CanonicalUnit.EACH, 0.50), price_factor=0.5)
    assert br.portion_cost == pytest.approx(0.25)


def test_unit_mismatch_assumes_quarter_used():
    br = cost(Ingredient("unobtainium", 2), _entry(1, CanonicalUnit.KG, 10.00))
    assert br.regime == CostRegime.UNIT_MISMATCH
    assert br.portion_cost == pytest.approx(2.50)
    assert br.utilization_ratio == 0.25
    assert br.confidence == Confidence.LOW


def test_water_approximation_is_low_confidence():
    br = cost(Ingredient("unobtainium", 100, "ml"), _entry(1, CanonicalUnit.KG, 10.00), confidence=Confidence.HIGH)
    assert br.portion_cost == pytest.approx(1.00)
    assert br.confidence == Confidence.LOW


def test_fallback_by_weight():
    br = fallback_cost(Ingredient("unobtainium", 200, "g"), price_per_kg=8.0)
    assert br.portion_cost == pytest.approx(1.60)
    assert br.regime == CostRegime.FALLBACK
    assert br.confidence == Confidence.LOW


def test_fallback_by_amount_bucket():
    assert fallback_cost(Ingredient("unobtainium", 2)).portion_cost == pytest.approx(3.60)
    assert fallback_cost(Ingredient("unobtainium", 2), multiplier=1.5).portion_cost == pytest.approx(5.40)


def test_fallback_has_minimum():
    br = fallback_cost(Ingredient("unobtainium", 0.001, "g"))
    assert br.portion_cost == 0.01
    assert br.portion_cost > 0 and math.isfinite(br.portion_cost)


def test_package_fit():
    assert package_fit(Ingredient("egg", 12), PackageSize(12, CanonicalUnit.EACH)) == 0.0
    small = package_fit(Ingredient("onion", 1), PackageSize(1, CanonicalUnit.LB))
    large = package_fit(Ingredient("onion", 1), PackageSize(10, CanonicalUnit.LB))
    assert small < large
    assert package_fit(Ingredient("unobtainium", 2), PackageSize(1, CanonicalUnit.KG)) == math.inf


def test_five_eggs_from_a_dozen():
    br = cost(Ingredient("egg", 5, "each"), _entry(12, CanonicalUnit.EACH, 3.00))
    assert br.packages_needed == 1
    assert br.portion_cost == pytest.approx(3.00)
    assert 0 <= br.utilization_ratio <= 1
