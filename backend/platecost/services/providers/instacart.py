"""Instacart pricing through the parse.bot scraper API (get_stores, search_products)."""

import threading
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field

from platecost.config import settings
from platecost.logging import get_logger
from platecost.services.catalog.location import extract_zip
from platecost.services.catalog.matcher import text_similarity
from platecost.services.providers.base import BaseProvider, ProviderQuote, grade_confidence, parse_price
from platecost.services.units.unit_model import CanonicalUnit, parse_package_size

logger = get_logger(__name__)

INSTACART_TIMEOUT = 30.0


class InstacartStore(BaseModel):
    slug: str
    name: str = ""


class InstacartStoresData(BaseModel):
    stores: list[InstacartStore] = []


class InstacartStoresResponse(BaseModel):
    data: InstacartStoresData = Field(default_factory=InstacartStoresData)
    status: str | None = None


class InstacartProduct(BaseModel):
    id: Any = None
    name: str
    price: Any = None
    size: str | None = None
    brand: str | None = None
    available: bool | None = None
    stock_status: str | None = None

    @property
    def is_available(self) -> bool:
        if self.available is not None:
            return self.available
        if self.stock_status:
            return self.stock_status.lower() not in ("out_of_stock", "unavailable")
        return True


class InstacartProductsData(BaseModel):
    products: list[InstacartProduct] = []


class InstacartProductsResponse(BaseModel):
    data: InstacartProductsData = Field(default_factory=InstacartProductsData)
    status: str | None = None


class InstacartClient:
    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None) -> None:
        self._base_url = (base_url or settings.instacart_base_url).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.instacart_api_key

    def _headers(self) -> dict:
        return {"X-API-Key": self._api_key}

    def get_stores(self, postal_code: str) -> dict:
        logger.info("instacart.get_stores postal_code=%s", postal_code)
        resp = httpx.get(
            f"{self._base_url}/get_stores",
            headers=self._headers(),
            params={"postal_code": postal_code},
            timeout=INSTACART_TIMEOUT,
        )
        resp.raise_for_status()
        return resp.json()

    def search_products(self, query: str, postal_code: str, retailer_slug: str, limit: int = 5) -> dict:
        logger.info(
            "instacart.search_products query=%s postal=%s retailer=%s limit=%s",
            query,
            postal_code,
            retailer_slug,
            limit,
        )
        resp = httpx.get(
            f"{self._base_url}/search_products",
            headers=self._headers(),
            params={
                "query": query,
                "postal_code": postal_code,
                "retailer_slug": retailer_slug,
                "limit": limit,
            },
            timeout=INSTACART_TIMEOUT,
        )
        resp.raise_for_status()
        return resp.json()


class InstacartProvider(BaseProvider):
    name = "instacart"
    substitutions = {
        "scotch bonnet pepper": "hot pepper",
        "plum tomatoes": "tomatoes",
        "long-grain rice": "rice",
        "sunflower oil": "cooking oil",
        "vegetable stock": "vegetable broth",
    }

    def __init__(self, client: Optional[InstacartClient] = None, search_limit: int = 5) -> None:
        self._client = client or InstacartClient()
        self._search_limit = search_limit
        self._stores: dict[str, Optional[InstacartStore]] = {}
        self._lock = threading.Lock()

    def _store_for(self, postal_code: str) -> Optional[InstacartStore]:
        with self._lock:
            if postal_code in self._stores:
                return self._stores[postal_code]
        payload = InstacartStoresResponse.model_validate(self._client.get_stores(postal_code))
        store = payload.data.stores[0] if payload.data.stores else None
        with self._lock:
            self._stores[postal_code] = store
        return store

    def get_ingredient_price(self, name: str, location: Optional[str]) -> Optional[ProviderQuote]:
        postal_code = extract_zip(location) or extract_zip(settings.default_location)
        if not postal_code:
            return None
        store = self._store_for(postal_code)
        if store is None:
            logger.warning("instacart.no_store postal_code=%s", postal_code)
            return None

        query = self.clean_query(name)
        payload = InstacartProductsResponse.model_validate(
            self._client.search_products(query, postal_code, store.slug, limit=self._search_limit)
        )
        priced = [p for p in payload.data.products if (parse_price(p.price) or 0) > 0]
        if not priced:
            logger.info("instacart.no_products query=%s retailer=%s", query, store.slug)
            return None
        available = [p for p in priced if p.is_available]
        best = available[0] if available else priced[0]

        package = parse_package_size(best.size)
        similarity = text_similarity(query, best.name)
        return ProviderQuote(
            provider=self.name,
            matched_description=best.name,
            package_price=parse_price(best.price),
            package_size=package.amount if package else 1.0,
            package_unit=package.unit if package else CanonicalUnit.EACH,
            confidence=grade_confidence(similarity, best.is_available, high=0.7, medium=0.4),
            store_location=store.name or store.slug,
            stock_level=best.stock_status or ("available" if best.is_available else "out_of_stock"),
        )
