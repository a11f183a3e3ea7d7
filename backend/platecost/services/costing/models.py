"""
Domain types shared by normalization, matching, costing and reconciliation.
Frozen dataclasses: an ingredient or a priced package never changes while a
recipe is being costed.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from platecost.services.units.unit_model import CanonicalUnit, PackageSize


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]

    def __lt__(self, other: "Confidence") -> bool:
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: "Confidence") -> bool:
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: "Confidence") -> bool:
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: "Confidence") -> bool:
        if not isinstance(other, Confidence):
            return NotImplemented
        return self.rank >= other.rank

    def downgrade(self) -> "Confidence":
        """One tier lower; LOW stays LOW."""
        if self == Confidence.HIGH:
            return Confidence.MEDIUM
        return Confidence.LOW


_CONFIDENCE_RANK = {Confidence.LOW: 0, Confidence.MEDIUM: 1, Confidence.HIGH: 2}


class MatchReason(str, Enum):
    EXACT = "exact"
    ALIAS = "alias"
    SUBSTRING = "substring"
    FALLBACK_ESTIMATE = "fallback-estimate"
    PROVIDER = "provider"


class CostRegime(str, Enum):
    COUNT = "count"
    DIVISIBLE = "divisible"
    UNIT_MISMATCH = "unit-mismatch"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class Ingredient:
    name: str
    amount: float
    unit: str = ""
    weight_grams: Optional[float] = None

    @property
    def original(self) -> str:
        parts = [f"{self.amount:g}", self.unit, self.name]
        return " ".join(p for p in parts if p)


@dataclass(frozen=True)
class CatalogEntry:
    description: str
    package: PackageSize
    package_price: float
    provenance: str = "baseline"
    promo_price: Optional[float] = None
    store_location: Optional[str] = None
    stock_level: Optional[str] = None
    # Sold loose by weight/volume (deli, produce by the lb): buy exactly what is needed
    loose: bool = False

    @property
    def effective_price(self) -> float:
        if self.promo_price is not None and 0 < self.promo_price < self.package_price:
            return self.promo_price
        return self.package_price

    @property
    def is_count_package(self) -> bool:
        return self.package.unit == CanonicalUnit.EACH


@dataclass(frozen=True)
class MatchResult:
    ingredient: Ingredient
    entry: Optional[CatalogEntry]
    confidence: Confidence
    match_reason: MatchReason
    price_factor: float = 1.0


@dataclass(frozen=True)
class CostBreakdown:
    portion_cost: float
    package_price: float
    packages_needed: int
    waste_amount: float
    waste_unit: str
    utilization_ratio: float
    confidence: Confidence
    regime: CostRegime
    explanation: str = ""


@dataclass
class IngredientCost:
    """Per-ingredient diagnostic record surfaced to the review UI."""

    original: str
    matched_description: Optional[str]
    price_label: str
    estimated_cost: float
    confidence: Confidence
    needs_review: bool
    packages_needed: int
    package_size: Optional[str]
    portion_cost: float
    package_price: float
    provenance: str
    match_reason: MatchReason
    utilization_ratio: float
    waste_amount: float
    waste_unit: str
    store_location: Optional[str] = None
    explanation: str = ""


@dataclass
class RejectedIngredient:
    index: int
    original: Any
    error: str


@dataclass
class RecipeCostResult:
    total_cost: float
    cost_per_serving: float
    servings: int
    confidence: Confidence
    items: list[IngredientCost] = field(default_factory=list)
    rejected: list[RejectedIngredient] = field(default_factory=list)
    total_package_cost: float = 0.0
    total_waste_value: float = 0.0
    average_utilization: float = 0.0
    needs_review_count: int = 0
