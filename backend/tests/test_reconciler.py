import threading

import pytest

from platecost.services.costing.models import Confidence, Ingredient, MatchReason
from platecost.services.pricing.cache import PriceCache
from platecost.services.pricing.circuit_breaker import CircuitBreaker, CircuitState
from platecost.services.pricing.reconciler import PriceReconciler
from platecost.services.providers.base import BaseProvider, ProviderQuote
from platecost.services.units.unit_model import CanonicalUnit
from platecost.utils.timing import Deadline

ONION = Ingredient("onion", 1)


def _quote(provider, size=3.0, unit=CanonicalUnit.LB, price=3.00, confidence=Confidence.HIGH):
    return ProviderQuote(
        provider=provider,
        matched_description=f"{provider} yellow onions",
        package_price=price,
        package_size=size,
        package_unit=unit,
        confidence=confidence,
    )


class FakeProvider(BaseProvider):
    def __init__(self, name, quote=None, error=None, block=None):
        self.name = name
        self.quote = quote
        self.error = error
        self.block = block
        self.calls = 0

    def get_ingredient_price(self, name, location):
        self.calls += 1
        if self.block is not None:
            self.block.wait(5)
        if self.error is not None:
            raise self.error
        return self.quote


@pytest.fixture
def make_reconciler():
    created = []

    def _make(providers, **kwargs):
        kwargs.setdefault("provider_timeout_s", 2.0)
        r = PriceReconciler(providers, PriceCache(ttl_seconds=60), **kwargs)
        created.append(r)
        return r

    yield _make
    for r in created:
        r.shutdown()


def test_no_providers_uses_baseline(make_reconciler):
    res = make_reconciler([]).reconcile(ONION, None)
    assert res.match.entry.provenance == "baseline"
    assert res.breakdown.portion_cost == pytest.approx(0.66)
    assert res.breakdown.confidence == Confidence.HIGH
    assert not res.needs_review


def test_provider_quote_wins_over_baseline(make_reconciler):
    res = make_reconciler([FakeProvider("fake", quote=_quote("fake"))]).reconcile(ONION, "10001")
    assert res.match.match_reason == MatchReason.PROVIDER
    assert res.match.entry.provenance == "fake"
    assert res.breakdown.confidence == Confidence.HIGH
    assert res.breakdown.portion_cost == pytest.approx(3.00 * 150 / (3 * 453.592))


def test_provider_error_degrades_to_baseline(make_reconciler):
    provider = FakeProvider("broken", error=RuntimeError("boom"))
    reconciler = make_reconciler([provider])
    res = reconciler.reconcile(ONION, None)
    assert res.match.entry.provenance == "baseline"
    assert res.breakdown.confidence == Confidence.MEDIUM
    assert res.provider_failed
    assert res.needs_review
    assert res.failures == ["broken:error"]


def test_failing_provider_does_not_block_healthy_one(make_reconciler):
    providers = [FakeProvider("broken", error=RuntimeError("boom")), FakeProvider("fake", quote=_quote("fake"))]
    res = make_reconciler(providers).reconcile(ONION, None)
    assert res.match.entry.provenance == "fake"
    assert res.breakdown.confidence == Confidence.MEDIUM
    assert res.needs_review


def test_slow_provider_times_out(make_reconciler):
    release = threading.Event()
    slow = FakeProvider("slow", quote=_quote("slow"), block=release)
    try:
        res = make_reconciler([slow], provider_timeout_s=0.05).reconcile(ONION, None)
    finally:
        release.set()
    assert res.match.entry.provenance == "baseline"
    assert res.failures == ["slow:timeout"]
    assert res.needs_review


def test_quotes_are_cached(make_reconciler):
    provider = FakeProvider("fake", quote=_quote("fake"))
    reconciler = make_reconciler([provider])
    reconciler.reconcile(ONION, "10001")
    res = reconciler.reconcile(Ingredient("Onion", 2), "New York, NY 10001")
    assert provider.calls == 1
    assert res.match.entry.provenance == "fake"


def test_invalid_quotes_are_not_cached(make_reconciler):
    provider = FakeProvider("fake", quote=_quote("fake", price=0.0))
    reconciler = make_reconciler([provider])
    assert reconciler.reconcile(ONION, None).match.entry.provenance == "baseline"
    reconciler.reconcile(ONION, None)
    assert provider.calls == 2


def test_open_circuit_skips_provider(make_reconciler):
    provider = FakeProvider("broken", error=RuntimeError("boom"))
    breakers = {"broken": CircuitBreaker("broken", failure_threshold=1)}
    reconciler = make_reconciler([provider], breakers=breakers)
    reconciler.reconcile(ONION, None)
    res = reconciler.reconcile(ONION, None)
    assert provider.calls == 1
    assert res.failures == ["broken:circuit_open"]
    assert res.needs_review
    assert reconciler.provider_status() == [{"name": "broken", "circuit": CircuitState.OPEN.value}]


def test_selection_prefers_confidence_then_fit(make_reconciler):
    big = FakeProvider("big", quote=_quote("big", size=10.0))
    small = FakeProvider("small", quote=_quote("small", size=1.0))
    assert make_reconciler([big, small]).reconcile(ONION, None).match.entry.provenance == "small"

    big = FakeProvider("big", quote=_quote("big", size=10.0))
    small = FakeProvider("small", quote=_quote("small", size=1.0, confidence=Confidence.MEDIUM))
    assert make_reconciler([big, small]).reconcile(ONION, None).match.entry.provenance == "big"


def test_ties_break_by_registration_order(make_reconciler):
    first = FakeProvider("first", quote=_quote("first"))
    second = FakeProvider("second", quote=_quote("second"))
    assert make_reconciler([first, second]).reconcile(ONION, None).match.entry.provenance == "first"


def test_expired_deadline_skips_providers(make_reconciler):
    provider = FakeProvider("fake", quote=_quote("fake"))
    res = make_reconciler([provider]).reconcile(ONION, None, Deadline(0))
    assert provider.calls == 0
    assert res.deadline_hit
    assert not res.provider_failed
    assert res.match.entry.provenance == "baseline"
    assert res.breakdown.confidence == Confidence.MEDIUM
