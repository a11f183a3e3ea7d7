"""
Live pricing provider interface and the normalized quote every provider returns.
Raw responses are validated with pydantic at each provider's boundary; only
ProviderQuote crosses into reconciliation.
"""

import re
from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from platecost.logging import get_logger
from platecost.services.costing.models import CatalogEntry, Confidence
from platecost.services.units.unit_model import CanonicalUnit, PackageSize

logger = get_logger(__name__)

_MEASURE_PREFIX_RE = re.compile(
    r"^\d+(?:[./]\d+)?\s*(?:cups?|tbsp|tsp|lbs?|oz|pounds?|ounces?|cloves?|pieces?|g|kg|ml)?\s+",
    re.IGNORECASE,
)
_PARENS_RE = re.compile(r"\([^)]*\)")


@dataclass(frozen=True)
class ProviderQuote:
    provider: str
    matched_description: str
    package_price: float
    package_size: float
    package_unit: CanonicalUnit
    confidence: Confidence
    promo_price: Optional[float] = None
    store_location: Optional[str] = None
    stock_level: Optional[str] = None
    loose: bool = False

    def to_entry(self) -> CatalogEntry:
        return CatalogEntry(
            description=self.matched_description,
            package=PackageSize(self.package_size, self.package_unit),
            package_price=self.package_price,
            provenance=self.provider,
            promo_price=self.promo_price,
            store_location=self.store_location,
            stock_level=self.stock_level,
            loose=self.loose,
        )


@runtime_checkable
class PriceProvider(Protocol):
    name: str

    def get_ingredient_price(self, name: str, location: Optional[str]) -> Optional[ProviderQuote]:
        ...

    def get_multiple_ingredient_prices(
        self, names: list[str], location: Optional[str]
    ) -> dict[str, Optional[ProviderQuote]]:
        ...


class BaseProvider:
    """Shared helpers. Subclasses implement get_ingredient_price and may raise on transport errors."""

    name = "provider"
    substitutions: dict[str, str] = {}

    def get_ingredient_price(self, name: str, location: Optional[str]) -> Optional[ProviderQuote]:
        raise NotImplementedError

    def get_multiple_ingredient_prices(
        self, names: list[str], location: Optional[str]
    ) -> dict[str, Optional[ProviderQuote]]:
        results: dict[str, Optional[ProviderQuote]] = {}
        for name in names:
            try:
                results[name] = self.get_ingredient_price(name, location)
            except Exception as e:
                logger.warning("%s.batch_item_failed name=%s error=%s", self.name, name, e)
                results[name] = None
        return results

    def clean_query(self, ingredient: str) -> str:
        return clean_query(ingredient, self.substitutions)


def clean_query(ingredient: str, substitutions: Optional[dict[str, str]] = None) -> str:
    """
    Search text for a store catalog: leading measurement, parentheses and
    anything after a comma dropped, then known renames applied.
    """
    cleaned = _MEASURE_PREFIX_RE.sub("", (ingredient or "").strip())
    cleaned = _PARENS_RE.sub("", cleaned)
    cleaned = cleaned.split(",")[0]
    cleaned = " ".join(cleaned.split())
    lower = cleaned.lower()
    for original, replacement in (substitutions or {}).items():
        if original in lower:
            return replacement
    return cleaned


def parse_price(price: object) -> Optional[float]:
    if price is None or price == "":
        return None
    if isinstance(price, (int, float)):
        return float(price)
    try:
        s = str(price).replace("$", "").replace(",", "").strip()
        return float(s) if s else None
    except ValueError:
        return None


def grade_confidence(similarity: float, in_stock: bool, high: float, medium: float) -> Confidence:
    if similarity > high and in_stock:
        return Confidence.HIGH
    if similarity > medium:
        return Confidence.MEDIUM
    return Confidence.LOW
