"""
Recipe aggregation: validate each ingredient, cost them in parallel, and roll
the per-item breakdowns up into recipe totals and review diagnostics.
"""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout, as_completed
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from pydantic import ValidationError

from platecost.config import Settings, settings as default_settings
from platecost.logging import get_logger
from platecost.schemas.cost import IngredientIn
from platecost.services.catalog.baseline import BaselineCatalog
from platecost.services.costing.models import (
    Confidence,
    CostBreakdown,
    CostRegime,
    Ingredient,
    IngredientCost,
    MatchReason,
    MatchResult,
    RecipeCostResult,
    RejectedIngredient,
)
from platecost.services.costing.portion import MIN_FALLBACK_COST, fallback_cost
from platecost.services.pricing.cache import PriceCache
from platecost.services.pricing.circuit_breaker import CircuitBreaker
from platecost.services.pricing.reconciler import PriceReconciler, Reconciliation
from platecost.services.providers.base import PriceProvider
from platecost.services.providers.registry import build_providers
from platecost.utils.timing import Deadline, time_span

logger = get_logger(__name__)

_CENT = Decimal("0.01")


class RecipeInputError(ValueError):
    """Structural misuse of the input contract (e.g. no ingredient list)."""


def round_currency(value: float) -> float:
    return float(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def _error_summary(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "ingredient"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def parse_ingredients(raw: Any) -> tuple[list[tuple[int, Ingredient]], list[RejectedIngredient]]:
    """Validate entries one by one. Only a missing/non-list payload is fatal."""
    if not isinstance(raw, (list, tuple)):
        raise RecipeInputError("ingredients must be a list")
    valid: list[tuple[int, Ingredient]] = []
    rejected: list[RejectedIngredient] = []
    for index, item in enumerate(raw):
        try:
            parsed = IngredientIn.model_validate(item)
        except ValidationError as e:
            rejected.append(RejectedIngredient(index=index, original=item, error=_error_summary(e)))
            continue
        valid.append(
            (
                index,
                Ingredient(
                    name=parsed.name,
                    amount=parsed.amount,
                    unit=(parsed.unit or "").strip(),
                    weight_grams=parsed.weight_grams,
                ),
            )
        )
    return valid, rejected


def _price_label(rec: Reconciliation) -> str:
    entry = rec.match.entry
    if entry is None:
        return "estimated"
    if entry.loose:
        return f"${entry.effective_price:.2f} per {entry.package.display}"
    return f"${entry.effective_price:.2f} / {entry.package.display}"


def _to_item(ingredient: Ingredient, rec: Reconciliation) -> IngredientCost:
    br = rec.breakdown
    entry = rec.match.entry
    return IngredientCost(
        original=ingredient.original,
        matched_description=entry.description if entry else None,
        price_label=_price_label(rec),
        estimated_cost=round_currency(br.portion_cost),
        confidence=br.confidence,
        needs_review=br.confidence == Confidence.LOW or rec.needs_review,
        packages_needed=br.packages_needed,
        package_size=entry.package.display if entry else None,
        portion_cost=round_currency(br.portion_cost),
        package_price=round_currency(br.package_price),
        provenance=entry.provenance if entry else "fallback",
        match_reason=rec.match.match_reason,
        utilization_ratio=br.utilization_ratio,
        waste_amount=br.waste_amount,
        waste_unit=br.waste_unit,
        store_location=entry.store_location if entry else None,
        explanation=br.explanation,
    )


class RecipeCostEstimator:
    def __init__(
        self,
        reconciler: PriceReconciler,
        max_workers: int = 8,
        default_deadline_s: Optional[float] = None,
    ) -> None:
        self.reconciler = reconciler
        self.max_workers = max(1, max_workers)
        self.default_deadline_s = default_deadline_s

    def estimate_recipe_cost(
        self,
        ingredients: Any,
        servings: int,
        location: Optional[str] = None,
        deadline_s: Optional[float] = None,
    ) -> RecipeCostResult:
        valid, rejected = parse_ingredients(ingredients)
        deadline = Deadline(deadline_s if deadline_s is not None else self.default_deadline_s)
        for r in rejected:
            logger.info("estimate.rejected index=%s error=%s", r.index, r.error)

        with time_span("estimate.total", ingredients=len(valid), rejected=len(rejected), location=location):
            reconciled = self._run(valid, location, deadline)

        items = [_to_item(ing, reconciled[idx]) for idx, ing in valid]
        return self._aggregate(items, rejected, servings, reconciled)

    def _run(
        self,
        valid: list[tuple[int, Ingredient]],
        location: Optional[str],
        deadline: Deadline,
    ) -> dict[int, Reconciliation]:
        results: dict[int, Reconciliation] = {}
        if not valid:
            return results
        by_index = dict(valid)
        executor = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(valid)), thread_name_prefix="platecost-ingredient"
        )
        try:
            futures = {
                executor.submit(self.reconciler.reconcile, ing, location, deadline): idx
                for idx, ing in valid
            }
            try:
                for fut in as_completed(futures, timeout=deadline.remaining()):
                    idx = futures[fut]
                    try:
                        results[idx] = fut.result()
                    except Exception as e:
                        logger.exception("estimate.ingredient_failed name=%s error=%s", by_index[idx].name, e)
                        results[idx] = self._recover(
                            by_index[idx], location, deadline_hit=False, failures=["error"], provider_failed=True
                        )
            except FuturesTimeout:
                logger.warning("estimate.deadline_expired pending=%s", len(valid) - len(results))
            for fut, idx in futures.items():
                if idx in results:
                    continue
                fut.cancel()
                results[idx] = self._recover(
                    by_index[idx], location, deadline_hit=True, failures=["deadline"], provider_failed=False
                )
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return results

    def _recover(
        self,
        ingredient: Ingredient,
        location: Optional[str],
        deadline_hit: bool,
        failures: list[str],
        provider_failed: bool,
    ) -> Reconciliation:
        """Baseline result for an item that did not reconcile; never raises."""
        try:
            rec = self.reconciler.baseline_result(ingredient, location)
            return PriceReconciler.degrade(
                rec, deadline_hit=deadline_hit, failures=failures, provider_failed=provider_failed
            )
        except Exception as e:
            logger.warning("estimate.baseline_failed name=%s error=%s", ingredient.name, e)
        try:
            breakdown = fallback_cost(ingredient, self.reconciler.fallback_price_per_kg)
        except Exception:
            breakdown = CostBreakdown(
                portion_cost=MIN_FALLBACK_COST,
                package_price=MIN_FALLBACK_COST,
                packages_needed=1,
                waste_amount=0.0,
                waste_unit="",
                utilization_ratio=1.0,
                confidence=Confidence.LOW,
                regime=CostRegime.FALLBACK,
                explanation="no estimate available",
            )
        return Reconciliation(
            match=MatchResult(ingredient, None, Confidence.LOW, MatchReason.FALLBACK_ESTIMATE),
            breakdown=breakdown,
            provider_failed=provider_failed,
            deadline_hit=deadline_hit,
            failures=failures + ["baseline"],
        )

    @staticmethod
    def _aggregate(
        items: list[IngredientCost],
        rejected: list[RejectedIngredient],
        servings: int,
        reconciled: dict[int, Reconciliation],
    ) -> RecipeCostResult:
        total = sum((Decimal(str(i.portion_cost)) for i in items), Decimal("0"))
        package_total = Decimal("0")
        waste_total = Decimal("0")
        for rec in reconciled.values():
            br = rec.breakdown
            if br.regime == CostRegime.FALLBACK:
                spend = Decimal(str(round_currency(br.portion_cost)))
            elif br.regime == CostRegime.COUNT:
                spend = Decimal(str(round_currency(br.package_price * br.packages_needed)))
            else:
                spend = Decimal(str(round_currency(br.package_price)))
            package_total += spend
            waste_total += max(Decimal("0"), spend - Decimal(str(round_currency(br.portion_cost))))

        total_cost = round_currency(float(total))
        confidence = min((i.confidence for i in items), default=Confidence.LOW)
        utilization = (
            round(sum(i.utilization_ratio for i in items) / len(items), 4) if items else 0.0
        )
        return RecipeCostResult(
            total_cost=total_cost,
            cost_per_serving=round_currency(float(total) / max(servings, 1)),
            servings=servings,
            confidence=confidence,
            items=items,
            rejected=rejected,
            total_package_cost=round_currency(float(package_total)),
            total_waste_value=round_currency(float(waste_total)),
            average_utilization=utilization,
            needs_review_count=sum(1 for i in items if i.needs_review),
        )


def build_estimator(
    settings: Optional[Settings] = None,
    providers: Optional[list[PriceProvider]] = None,
    cache: Optional[PriceCache] = None,
    baseline: Optional[BaselineCatalog] = None,
) -> RecipeCostEstimator:
    """Wire providers, cache, breakers and baseline from settings."""
    s = settings or default_settings
    providers = build_providers(s) if providers is None else providers
    cache = cache or PriceCache(
        ttl_seconds=s.price_cache_ttl_minutes * 60,
        max_entries=s.price_cache_max_entries,
    )
    breakers = {
        p.name: CircuitBreaker(
            p.name,
            failure_threshold=s.circuit_failure_threshold,
            window_s=s.circuit_window_s,
            reset_s=s.circuit_reset_s,
        )
        for p in providers
    }
    reconciler = PriceReconciler(
        providers=providers,
        cache=cache,
        baseline=baseline,
        provider_timeout_s=s.provider_timeout_s,
        max_workers=s.provider_max_workers,
        fallback_price_per_kg=s.fallback_price_per_kg,
        breakers=breakers,
    )
    return RecipeCostEstimator(
        reconciler,
        max_workers=s.ingredient_batch_max_workers,
        default_deadline_s=s.request_deadline_s,
    )
