"""
Kroger Products/Locations API provider.
Token acquisition is external: a supplier callable returns a current bearer token.
"""

import threading
from typing import Callable, Optional

import httpx
from pydantic import BaseModel

from platecost.config import settings
from platecost.logging import get_logger
from platecost.services.catalog.location import extract_zip
from platecost.services.catalog.matcher import text_similarity
from platecost.services.providers.base import BaseProvider, ProviderQuote, grade_confidence
from platecost.services.units.unit_model import CanonicalUnit, parse_package_size

logger = get_logger(__name__)

KROGER_TIMEOUT = 10.0
IN_STOCK_LEVELS = frozenset({"HIGH", "LOW", "INSTOCK", "IN_STOCK"})


class KrogerPrice(BaseModel):
    regular: float = 0.0
    promo: float | None = None


class KrogerInventory(BaseModel):
    stockLevel: str | None = None


class KrogerItem(BaseModel):
    price: KrogerPrice | None = None
    size: str = ""
    soldBy: str | None = None
    inventory: KrogerInventory | None = None


class KrogerProduct(BaseModel):
    productId: str
    description: str = ""
    brand: str | None = None
    items: list[KrogerItem] = []


class KrogerProductsResponse(BaseModel):
    data: list[KrogerProduct] = []


class KrogerAddress(BaseModel):
    addressLine1: str = ""
    city: str = ""
    state: str = ""
    zipCode: str = ""


class KrogerLocation(BaseModel):
    locationId: str
    name: str = ""
    address: KrogerAddress | None = None


class KrogerLocationsResponse(BaseModel):
    data: list[KrogerLocation] = []


def _in_stock(item: KrogerItem) -> bool:
    # Missing inventory means the store does not report it; treat as available
    if item.inventory is None or not item.inventory.stockLevel:
        return True
    return item.inventory.stockLevel.upper() in IN_STOCK_LEVELS


class KrogerProvider(BaseProvider):
    name = "kroger"
    substitutions = {
        "scotch bonnet pepper": "hot pepper",
        "plum tomatoes": "roma tomatoes",
        "long-grain rice": "white rice",
        "sunflower oil": "vegetable oil",
        "vegetable stock": "vegetable broth",
    }

    def __init__(
        self,
        token_supplier: Callable[[], str],
        base_url: Optional[str] = None,
        timeout: float = KROGER_TIMEOUT,
    ) -> None:
        self._token_supplier = token_supplier
        self._base_url = (base_url or settings.kroger_base_url).rstrip("/")
        self._timeout = timeout
        self._locations: dict[str, Optional[KrogerLocation]] = {}
        self._lock = threading.Lock()

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self._token_supplier()}", "Accept": "application/json"}

    def find_locations(self, zip_code: str, limit: int = 5) -> list[KrogerLocation]:
        logger.info("kroger.find_locations zip=%s", zip_code)
        resp = httpx.get(
            f"{self._base_url}/locations",
            headers=self._headers(),
            params={"filter.zipCode.near": zip_code, "filter.limit": limit},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        return KrogerLocationsResponse.model_validate(resp.json()).data

    def search_products(self, query: str, location_id: str, limit: int = 10) -> list[KrogerProduct]:
        logger.info("kroger.search_products query=%s location_id=%s limit=%s", query, location_id, limit)
        resp = httpx.get(
            f"{self._base_url}/products",
            headers=self._headers(),
            params={
                "filter.term": query,
                "filter.locationId": location_id,
                "filter.limit": limit,
            },
            timeout=self._timeout,
        )
        resp.raise_for_status()
        return KrogerProductsResponse.model_validate(resp.json()).data

    def _store_for(self, zip_code: str) -> Optional[KrogerLocation]:
        with self._lock:
            if zip_code in self._locations:
                return self._locations[zip_code]
        locations = self.find_locations(zip_code)
        store = locations[0] if locations else None
        with self._lock:
            self._locations[zip_code] = store
        return store

    def get_ingredient_price(self, name: str, location: Optional[str]) -> Optional[ProviderQuote]:
        zip_code = extract_zip(location) or extract_zip(settings.default_location)
        if not zip_code:
            logger.info("kroger.no_zip location=%s", location)
            return None
        store = self._store_for(zip_code)
        if store is None:
            logger.warning("kroger.no_store zip=%s", zip_code)
            return None

        query = self.clean_query(name)
        products = [p for p in self.search_products(query, store.locationId) if p.items]
        if not products:
            logger.info("kroger.no_products query=%s", query)
            return None
        in_stock = [p for p in products if _in_stock(p.items[0])]
        best = in_stock[0] if in_stock else products[0]
        item = best.items[0]
        price = item.price.regular if item.price else 0.0
        if price <= 0:
            return None

        loose = (item.soldBy or "").upper() == "WEIGHT"
        package = parse_package_size(item.size)
        if loose:
            # Weight-sold items are priced per lb
            package_amount, package_unit = 1.0, CanonicalUnit.LB
        elif package is None:
            package_amount, package_unit = 1.0, CanonicalUnit.EACH
        else:
            package_amount, package_unit = package.amount, package.unit

        similarity = text_similarity(query, best.description)
        confidence = grade_confidence(similarity, _in_stock(item), high=0.6, medium=0.3)
        store_label = store.name
        if store.address and store.address.city:
            store_label = f"{store.name}, {store.address.city}"
        return ProviderQuote(
            provider=self.name,
            matched_description=best.description,
            package_price=price,
            package_size=package_amount,
            package_unit=package_unit,
            confidence=confidence,
            promo_price=item.price.promo if item.price and item.price.promo else None,
            store_location=store_label,
            stock_level=item.inventory.stockLevel if item.inventory else None,
            loose=loose,
        )
