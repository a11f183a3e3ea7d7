"""Default pricing location from the client IP."""

import httpx

from fastapi import APIRouter, Request

from platecost.config import settings
from platecost.logging import get_logger
from platecost.services.catalog.location import location_multiplier

router = APIRouter()
logger = get_logger(__name__)

GEO_URL = "http://ip-api.com/json"
GEO_TIMEOUT = 5.0


def _client_ip(request: Request) -> str:
    """Proxy headers first (Cloudflare, X-Forwarded-For, X-Real-IP), then the socket peer."""
    cf_ip = request.headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip.strip()
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client:
        return request.client.host or "127.0.0.1"
    return "127.0.0.1"


def _default(country: str | None, error: str) -> dict:
    return {
        "postal_code": settings.default_location,
        "country_code": country,
        "in_us": country == "US",
        "price_multiplier": location_multiplier(settings.default_location),
        "error": error,
    }


@router.get("/location")
def get_location(request: Request) -> dict:
    client_ip = _client_ip(request)
    logger.info("location.request client_ip=%s", client_ip)

    try:
        resp = httpx.get(
            f"{GEO_URL}/{client_ip}",
            params={"fields": "status,message,countryCode,zip"},
            timeout=GEO_TIMEOUT,
        )
        resp.raise_for_status()
        data = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("location.geo_failed ip=%s error=%s", client_ip, e)
        return _default(None, "Could not determine location. Using default.")

    if data.get("status") != "success":
        logger.info("location.geo_invalid ip=%s message=%s", client_ip, data.get("message", "unknown"))
        return _default(None, "Could not determine location. Using default.")

    country = (data.get("countryCode") or "").upper() or None
    zip_val = (data.get("zip") or "").strip()
    if country != "US":
        logger.info("location.outside_us ip=%s country=%s", client_ip, country)
        return _default(country, "Prices are US-based. Using default location.")
    if not zip_val:
        return _default(country, "Postal code unavailable. Using default.")

    postal = zip_val[:10]
    return {
        "postal_code": postal,
        "country_code": country,
        "in_us": True,
        "price_multiplier": location_multiplier(postal),
    }
