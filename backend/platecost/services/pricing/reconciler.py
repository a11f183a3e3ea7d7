"""
Multi-provider reconciliation for one ingredient.

Cached quotes are used first; the remaining providers are queried concurrently on
a shared pool, each bounded by min(provider timeout, time left on the deadline).
The best quote wins by confidence, then by package size closest to what the
recipe needs, then by registration order. No usable quote -> baseline catalog.
"""

import dataclasses
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Optional, Sequence

from platecost.logging import get_logger
from platecost.services.catalog.baseline import BaselineCatalog, baseline_catalog
from platecost.services.catalog.location import location_multiplier
from platecost.services.costing.models import (
    CostBreakdown,
    Ingredient,
    MatchReason,
    MatchResult,
)
from platecost.services.costing.portion import (
    DEFAULT_FALLBACK_PRICE_PER_KG,
    cost,
    cost_match,
    package_fit,
)
from platecost.services.pricing.cache import PriceCache, cache_key
from platecost.services.pricing.circuit_breaker import CircuitBreaker
from platecost.services.providers.base import PriceProvider, ProviderQuote
from platecost.services.units.unit_model import PackageSize
from platecost.utils.timing import Deadline

logger = get_logger(__name__)


@dataclass
class Reconciliation:
    match: MatchResult
    breakdown: CostBreakdown
    provider_failed: bool = False
    deadline_hit: bool = False
    failures: list[str] = field(default_factory=list)

    @property
    def needs_review(self) -> bool:
        return self.provider_failed or self.deadline_hit


class PriceReconciler:
    def __init__(
        self,
        providers: Sequence[PriceProvider],
        cache: PriceCache,
        baseline: Optional[BaselineCatalog] = None,
        provider_timeout_s: float = 4.0,
        max_workers: int = 16,
        fallback_price_per_kg: float = DEFAULT_FALLBACK_PRICE_PER_KG,
        breakers: Optional[dict[str, CircuitBreaker]] = None,
    ) -> None:
        self.providers = list(providers)
        self.cache = cache
        self.baseline = baseline or baseline_catalog
        self.provider_timeout_s = provider_timeout_s
        self.fallback_price_per_kg = fallback_price_per_kg
        self.breakers = breakers if breakers is not None else {}
        for p in self.providers:
            self.breakers.setdefault(p.name, CircuitBreaker(p.name))
        # Long-lived: abandoned (timed-out) calls finish in the background, bounded by their httpx timeout
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, max_workers), thread_name_prefix="platecost-provider"
        )

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def provider_status(self) -> list[dict]:
        return [
            {"name": p.name, "circuit": self.breakers[p.name].state.value}
            for p in self.providers
        ]

    def baseline_result(self, ingredient: Ingredient, location: Optional[str]) -> Reconciliation:
        """Static-catalog result with no provider involvement."""
        result = self.baseline.lookup(ingredient, location)
        breakdown = cost_match(result, self.fallback_price_per_kg, location_multiplier(location))
        return Reconciliation(match=result, breakdown=breakdown)

    def reconcile(
        self,
        ingredient: Ingredient,
        location: Optional[str],
        deadline: Optional[Deadline] = None,
    ) -> Reconciliation:
        deadline = deadline or Deadline.never()
        if not self.providers:
            return self.baseline_result(ingredient, location)
        if deadline.expired():
            logger.info("pricing.deadline_skip ingredient=%s", ingredient.name)
            res = self.baseline_result(ingredient, location)
            return self.degrade(res, deadline_hit=True, failures=["deadline"], provider_failed=False)

        quotes: list[tuple[int, ProviderQuote]] = []
        failures: list[str] = []
        pending: dict[Future, tuple[int, PriceProvider, str]] = {}

        for order, provider in enumerate(self.providers):
            breaker = self.breakers[provider.name]
            if not breaker.allow_request():
                logger.info("pricing.circuit_open provider=%s", provider.name)
                failures.append(f"{provider.name}:circuit_open")
                continue
            key = cache_key(provider.name, ingredient.name, location)
            cached = self.cache.get(key)
            if cached is not None:
                quotes.append((order, cached))
                continue
            fut = self._executor.submit(provider.get_ingredient_price, ingredient.name, location)
            pending[fut] = (order, provider, key)

        deadline_hit = False
        if pending:
            timeout = deadline.bound(self.provider_timeout_s)
            done, not_done = wait(list(pending), timeout=timeout)
            for fut in done:
                order, provider, key = pending[fut]
                breaker = self.breakers[provider.name]
                try:
                    quote = fut.result()
                except Exception as e:
                    logger.warning("pricing.provider_failed provider=%s error=%s", provider.name, e)
                    breaker.record_failure()
                    failures.append(f"{provider.name}:error")
                    continue
                breaker.record_success()
                if quote is not None and quote.package_price > 0 and quote.package_size > 0:
                    self.cache.set(key, quote)
                    quotes.append((order, quote))
            for fut in not_done:
                order, provider, _ = pending[fut]
                fut.cancel()
                logger.warning(
                    "pricing.provider_failed provider=%s error=timeout after=%.2fs",
                    provider.name,
                    timeout if timeout is not None else -1,
                )
                self.breakers[provider.name].record_failure()
                failures.append(f"{provider.name}:timeout")
            deadline_hit = bool(not_done) and deadline.expired()

        best = self._select(ingredient, quotes)
        if best is None:
            res = self.baseline_result(ingredient, location)
        else:
            entry = best.to_entry()
            match = MatchResult(
                ingredient=ingredient,
                entry=entry,
                confidence=best.confidence,
                match_reason=MatchReason.PROVIDER,
            )
            res = Reconciliation(match=match, breakdown=cost(ingredient, entry, confidence=best.confidence))

        if failures:
            return self.degrade(res, deadline_hit=deadline_hit, failures=failures)
        return res

    @staticmethod
    def _select(ingredient: Ingredient, quotes: list[tuple[int, ProviderQuote]]) -> Optional[ProviderQuote]:
        if not quotes:
            return None

        def rank(item: tuple[int, ProviderQuote]):
            order, quote = item
            fit = package_fit(ingredient, PackageSize(quote.package_size, quote.package_unit))
            return (-quote.confidence.rank, fit, order)

        return min(quotes, key=rank)[1]

    @staticmethod
    def degrade(
        res: Reconciliation, deadline_hit: bool, failures: list[str], provider_failed: bool = True
    ) -> Reconciliation:
        breakdown = dataclasses.replace(
            res.breakdown, confidence=res.breakdown.confidence.downgrade()
        )
        return Reconciliation(
            match=res.match,
            breakdown=breakdown,
            provider_failed=provider_failed,
            deadline_hit=deadline_hit,
            failures=failures,
        )
