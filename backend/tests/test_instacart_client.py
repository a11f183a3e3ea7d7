import respx
from httpx import Response

from platecost.services.costing.models import Confidence
from platecost.services.providers.instacart import InstacartClient, InstacartProvider
from platecost.services.units.unit_model import CanonicalUnit

BASE_URL = "https://example.com"
STORES = {"data": {"stores": [{"slug": "costco", "name": "Costco"}]}, "status": "success"}


@respx.mock
def test_instacart_search_products(monkeypatch):
    monkeypatch.setattr("platecost.services.providers.instacart.settings.instacart_base_url", BASE_URL)
    monkeypatch.setattr("platecost.services.providers.instacart.settings.instacart_api_key", "test-key")
    client = InstacartClient()

    route = respx.get(f"{BASE_URL}/search_products").mock(
        return_value=Response(
            200,
            json={
                "data": {"products": [{"name": "Milk", "price": "$1.99"}]},
                "status": "success",
            },
        )
    )

    result = client.search_products(query="milk", postal_code="10001", retailer_slug="costco", limit=1)
    assert result["status"] == "success"
    assert result["data"]["products"][0]["name"] == "Milk"
    assert route.calls.last.request.headers["X-API-Key"] == "test-key"


@respx.mock
def test_instacart_provider_quote():
    respx.get(f"{BASE_URL}/get_stores").mock(return_value=Response(200, json=STORES))
    respx.get(f"{BASE_URL}/search_products").mock(
        return_value=Response(
            200,
            json={
                "data": {
                    "products": [
                        {"id": 1, "name": "Whole Milk", "price": "$4.29", "size": "1 gal", "available": False},
                        {"id": 2, "name": "Kirkland Whole Milk", "price": "$3.99", "size": "64 fl oz", "available": True},
                    ]
                }
            },
        )
    )
    provider = InstacartProvider(client=InstacartClient(api_key="k", base_url=BASE_URL))

    quote = provider.get_ingredient_price("1 cup whole milk", "10001")

    assert quote.provider == "instacart"
    assert quote.matched_description == "Kirkland Whole Milk"
    assert quote.package_price == 3.99
    assert quote.package_size == 64.0
    assert quote.package_unit == CanonicalUnit.FL_OZ
    assert quote.store_location == "Costco"
    assert quote.confidence in (Confidence.HIGH, Confidence.MEDIUM)


@respx.mock
def test_instacart_unpriced_products_return_none():
    respx.get(f"{BASE_URL}/get_stores").mock(return_value=Response(200, json=STORES))
    respx.get(f"{BASE_URL}/search_products").mock(
        return_value=Response(200, json={"data": {"products": [{"name": "Milk", "price": None}]}})
    )
    provider = InstacartProvider(client=InstacartClient(api_key="k", base_url=BASE_URL))
    assert provider.get_ingredient_price("milk", "10001") is None


@respx.mock
def test_instacart_no_store_returns_none():
    respx.get(f"{BASE_URL}/get_stores").mock(return_value=Response(200, json={"data": {"stores": []}}))
    provider = InstacartProvider(client=InstacartClient(api_key="k", base_url=BASE_URL))
    assert provider.get_ingredient_price("milk", "10001") is None


@respx.mock
def test_instacart_batch_isolates_failures():
    respx.get(f"{BASE_URL}/get_stores").mock(return_value=Response(200, json=STORES))
    respx.get(f"{BASE_URL}/search_products").mock(return_value=Response(500))
    provider = InstacartProvider(client=InstacartClient(api_key="k", base_url=BASE_URL))
    assert provider.get_multiple_ingredient_prices(["milk", "eggs"], "10001") == {"milk": None, "eggs": None}
