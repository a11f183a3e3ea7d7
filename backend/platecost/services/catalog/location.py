"""
Regional price multipliers for baseline (static) prices, keyed by city, state or
country name, with coarse US ZIP-range tiers. Live provider prices are already
local and are never scaled.
"""

import re
from typing import Optional

DEFAULT_MULTIPLIER = 1.0

# Cost-of-living style multipliers
LOCATION_MULTIPLIERS: dict[str, float] = {
    # High-cost US cities
    "san francisco": 1.8, "new york city": 1.6, "manhattan": 1.7, "brooklyn": 1.4,
    "los angeles": 1.4, "seattle": 1.5, "boston": 1.4, "washington dc": 1.3, "miami": 1.3,
    "chicago": 1.2, "oakland": 1.6, "san jose": 1.7, "honolulu": 1.9, "anchorage": 1.6,
    # Medium-cost US cities
    "denver": 1.1, "austin": 1.1, "portland": 1.2, "atlanta": 1.0, "philadelphia": 1.1,
    "phoenix": 0.9, "dallas": 0.9, "houston": 0.9, "san antonio": 0.8, "nashville": 1.0,
    "charlotte": 0.9, "raleigh": 0.9, "minneapolis": 1.0, "milwaukee": 0.9, "cleveland": 0.8,
    "detroit": 0.8, "kansas city": 0.8, "st louis": 0.8, "cincinnati": 0.8, "columbus": 0.9,
    "indianapolis": 0.8, "jacksonville": 0.9, "tampa": 0.9, "orlando": 0.9,
    # Low-cost US cities
    "birmingham": 0.7, "memphis": 0.7, "louisville": 0.7, "tulsa": 0.7, "oklahoma city": 0.7,
    "little rock": 0.6, "jackson": 0.6, "shreveport": 0.6, "huntsville": 0.7,
    "chattanooga": 0.7, "knoxville": 0.7, "lexington": 0.7, "wichita": 0.7, "omaha": 0.8,
    "des moines": 0.8, "sioux falls": 0.8, "fargo": 0.8, "bismarck": 0.8,
    # US states
    "california": 1.3, "new york state": 1.2, "new york": 1.2, "hawaii": 1.8, "alaska": 1.5,
    "massachusetts": 1.2, "washington": 1.2, "maryland": 1.1, "connecticut": 1.1,
    "new jersey": 1.1, "oregon": 1.1, "colorado": 1.0, "virginia": 1.0, "florida": 1.0,
    "texas": 0.9, "illinois": 1.0, "pennsylvania": 1.0, "ohio": 0.9, "georgia": 0.9,
    "north carolina": 0.9, "michigan": 0.9, "tennessee": 0.8, "indiana": 0.8,
    "missouri": 0.8, "wisconsin": 0.9, "minnesota": 1.0, "arizona": 0.9, "louisiana": 0.8,
    "kentucky": 0.8, "oklahoma": 0.8, "iowa": 0.8, "utah": 0.9, "nevada": 1.0,
    "new mexico": 0.8, "west virginia": 0.7, "nebraska": 0.8, "idaho": 0.9, "maine": 1.0,
    "new hampshire": 1.0, "rhode island": 1.1, "vermont": 1.1, "delaware": 1.0,
    "montana": 0.9, "wyoming": 0.9, "south dakota": 0.8, "north dakota": 0.9,
    "alabama": 0.7, "mississippi": 0.7, "arkansas": 0.7, "kansas": 0.8, "south carolina": 0.8,
    # International cities
    "london": 1.5, "paris": 1.3, "tokyo": 1.4, "sydney": 1.3, "toronto": 1.1,
    "vancouver": 1.2, "zurich": 1.8, "geneva": 1.7, "oslo": 1.6, "stockholm": 1.3,
    "copenhagen": 1.4, "amsterdam": 1.2, "dublin": 1.2, "singapore": 1.3, "hong kong": 1.4,
    "dubai": 1.1, "mumbai": 0.4, "delhi": 0.4, "bangalore": 0.4, "mexico city": 0.5,
    "sao paulo": 0.6, "buenos aires": 0.5, "cape town": 0.4, "johannesburg": 0.4,
    "cairo": 0.3, "istanbul": 0.4, "moscow": 0.7, "beijing": 0.5, "shanghai": 0.6,
    "seoul": 0.8, "bangkok": 0.4, "kuala lumpur": 0.4, "manila": 0.3, "jakarta": 0.3,
    # Countries
    "usa": 1.0, "us": 1.0, "united states": 1.0, "canada": 1.0, "uk": 1.2,
    "united kingdom": 1.2, "australia": 1.1, "germany": 1.1, "france": 1.2, "italy": 1.0,
    "spain": 0.9, "netherlands": 1.2, "belgium": 1.1, "switzerland": 1.7, "austria": 1.1,
    "sweden": 1.3, "norway": 1.5, "denmark": 1.4, "finland": 1.2, "japan": 1.2,
    "south korea": 0.9, "india": 0.4, "china": 0.5, "mexico": 0.5, "brazil": 0.6,
    "argentina": 0.5, "chile": 0.7, "south africa": 0.4, "thailand": 0.4, "malaysia": 0.4,
    "philippines": 0.3, "indonesia": 0.3, "vietnam": 0.3, "turkey": 0.4, "egypt": 0.3,
    "russia": 0.7,
}

# (low, high, multiplier); first containing range wins
_ZIP_TIERS: tuple[tuple[int, int, float], ...] = (
    (90000, 96199, 1.4),  # California
    (10000, 14999, 1.4),  # New York
    (98000, 99499, 1.4),  # Washington
    (96700, 96999, 1.4),  # Hawaii
    (80000, 81999, 1.1),  # Colorado
    (78000, 79999, 1.1),  # Texas (Austin area)
    (97000, 97999, 1.1),  # Oregon
    (30000, 31999, 1.1),  # Georgia (Atlanta area)
    (19000, 19999, 1.1),  # Pennsylvania (Philadelphia area)
    (35000, 36999, 0.8),  # Alabama
    (38000, 39999, 0.8),  # Mississippi
    (72000, 72999, 0.8),  # Arkansas
    (73000, 74999, 0.8),  # Oklahoma
)

_ZIP_RE = re.compile(r"\b(\d{5})(?:-\d{4})?\b")


def extract_zip(location: Optional[str]) -> Optional[str]:
    if not location:
        return None
    m = _ZIP_RE.search(location)
    return m.group(1) if m else None


def normalize_location(location: Optional[str]) -> str:
    """Cache-key form: the ZIP when present, else lower-case collapsed text."""
    if not location:
        return "default"
    zip_code = extract_zip(location)
    if zip_code:
        return zip_code
    return " ".join(location.lower().replace(",", " ").split()) or "default"


def _zip_multiplier(zip_code: str) -> Optional[float]:
    z = int(zip_code)
    for low, high, multiplier in _ZIP_TIERS:
        if low <= z <= high:
            return multiplier
    return None


def location_multiplier(location: Optional[str]) -> float:
    """
    Resolve a multiplier: exact name, then "city, state" parts, then US ZIP
    tier, then any single word, else 1.0.
    """
    if not location:
        return DEFAULT_MULTIPLIER
    lower = location.strip().lower()
    if not lower or lower == "default":
        return DEFAULT_MULTIPLIER
    if lower in LOCATION_MULTIPLIERS:
        return LOCATION_MULTIPLIERS[lower]

    parts = [p.strip() for p in lower.split(",") if p.strip()]
    if len(parts) >= 2:
        for part in parts[:2]:
            if part in LOCATION_MULTIPLIERS:
                return LOCATION_MULTIPLIERS[part]

    zip_code = extract_zip(lower)
    if zip_code:
        tier = _zip_multiplier(zip_code)
        if tier is not None:
            return tier

    for word in re.split(r"[\s,]+", lower):
        if word in LOCATION_MULTIPLIERS:
            return LOCATION_MULTIPLIERS[word]
    return DEFAULT_MULTIPLIER
