"""
Postal Code Reference

Validates destination PIN codes against the India Post lookup API
(https://api.postalpincode.in) or a bundled reference table, and works out
which PIN codes a seller can deliver to from their base PIN code.
"""

import asyncio
import logging
import math
import re
import time
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

import httpx

logger = logging.getLogger(__name__)

PINCODE_PATTERN = re.compile(r"^\d{6}$")

DEFAULT_DELIVERY_RADIUS_KM = 20.0
EARTH_RADIUS_KM = 6371.0

# Numeric neighbours of the base PIN code checked when building coverage
COVERAGE_CANDIDATE_LIMIT = 50


@dataclass(frozen=True)
class PincodeInfo:
    """Post office details for a PIN code"""
    pincode: str
    area: str
    district: str
    state: str
    lat: Optional[float] = None
    lng: Optional[float] = None


# Serviceable reference used offline
REFERENCE_PINCODES: list[PincodeInfo] = [
    PincodeInfo("380001", "Ahmedabad GPO", "Ahmedabad", "Gujarat", 23.0225, 72.5714),
    PincodeInfo("380004", "Navrangpura", "Ahmedabad", "Gujarat", 23.0365, 72.5611),
    PincodeInfo("380009", "Satellite", "Ahmedabad", "Gujarat", 23.0300, 72.5300),
    PincodeInfo("380015", "Bopal", "Ahmedabad", "Gujarat", 23.0120, 72.5100),
    PincodeInfo("380050", "Gandhinagar", "Gandhinagar", "Gujarat", 23.2156, 72.6369),
    PincodeInfo("380051", "Gandhinagar Sector 1", "Gandhinagar", "Gujarat", 23.2200, 72.6500),
    PincodeInfo("380052", "Gandhinagar Sector 2", "Gandhinagar", "Gujarat", 23.2300, 72.6400),
    PincodeInfo("395001", "Surat GPO", "Surat", "Gujarat", 21.1702, 72.8311),
    PincodeInfo("395006", "Adajan", "Surat", "Gujarat", 21.1959, 72.7933),
    PincodeInfo("395007", "Vesu", "Surat", "Gujarat", 21.1418, 72.7709),
    PincodeInfo("390001", "Vadodara GPO", "Vadodara", "Gujarat", 22.3072, 73.1812),
    PincodeInfo("360001", "Rajkot GPO", "Rajkot", "Gujarat", 22.3039, 70.8022),
    PincodeInfo("364001", "Bhavnagar GPO", "Bhavnagar", "Gujarat", 21.7645, 72.1519),
    PincodeInfo("388120", "Vallabh Vidyanagar", "Anand", "Gujarat", 22.5645, 72.9289),
]

# Known post office coordinates; the lookup API does not return any
PINCODE_COORDINATES: dict[str, tuple[float, float]] = {
    info.pincode: (info.lat, info.lng) for info in REFERENCE_PINCODES
}
PINCODE_COORDINATES.update({
    "110001": (28.6139, 77.2090),
    "400001": (19.0760, 72.8777),
    "411001": (18.5204, 73.8567),
    "560001": (12.9716, 77.5946),
    "600001": (13.0827, 80.2707),
    "700001": (22.5726, 88.3639),
    "302001": (26.9124, 75.7873),
})

# Rough state centres for PIN codes without known coordinates
STATE_COORDINATES: dict[str, tuple[float, float]] = {
    "Gujarat": (22.2587, 71.1924),
    "Maharashtra": (19.7515, 75.7139),
    "Delhi": (28.7041, 77.1025),
    "Karnataka": (15.3173, 75.7139),
    "Tamil Nadu": (11.1271, 78.6569),
    "Rajasthan": (27.0238, 74.2179),
    "Madhya Pradesh": (22.9734, 78.6569),
    "Uttar Pradesh": (26.8467, 80.9462),
    "West Bengal": (22.9868, 87.8550),
}
INDIA_CENTRE = (20.5937, 78.9629)


def is_well_formed_pincode(pincode: Optional[str]) -> bool:
    return bool(pincode) and PINCODE_PATTERN.match(pincode) is not None


def approximate_coordinates(pincode: str, state: str) -> tuple[float, float]:
    """Exact coordinates when known, else the state centre"""
    return PINCODE_COORDINATES.get(pincode) or STATE_COORDINATES.get(state, INDIA_CENTRE)


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points"""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def _has_coordinates(info: Optional[PincodeInfo]) -> bool:
    return info is not None and info.lat is not None and info.lng is not None


class PostalCodeReference(Protocol):
    async def get_pincode_info(self, pincode: str) -> Optional[PincodeInfo]: ...

    async def is_pincode_valid(self, pincode: str) -> bool: ...

    async def calculate_pincode_distance(self, pincode1: str, pincode2: str) -> float: ...

    async def is_pincode_serviceable(
        self, seller_pincode: str, customer_pincode: str, max_radius_km: float = DEFAULT_DELIVERY_RADIUS_KM
    ) -> bool: ...

    async def generate_covered_pincodes(
        self, base_pincode: str, radius_km: float = DEFAULT_DELIVERY_RADIUS_KM
    ) -> list[str]: ...

    async def close(self) -> None: ...


class BasePincodeDirectory:
    """
    Distance and delivery coverage on top of get_pincode_info.

    Subclasses provide the lookup and the candidate PIN codes considered
    when building a seller's coverage.
    """

    def __init__(self, cache_ttl_seconds: int = 24 * 60 * 60):
        self.cache_ttl_seconds = cache_ttl_seconds
        self._coverage_cache: dict[tuple[str, float], tuple[float, list[str]]] = {}

    async def get_pincode_info(self, pincode: str) -> Optional[PincodeInfo]:
        raise NotImplementedError

    def coverage_candidates(self, base_pincode: str) -> list[str]:
        """Numeric neighbours of the base PIN code, nearest first"""
        base = int(base_pincode)
        candidates = []
        offset = 1
        while len(candidates) < COVERAGE_CANDIDATE_LIMIT and offset <= 10 ** 6:
            for value in (base + offset, base - offset):
                if 100000 <= value <= 999999:
                    candidates.append(str(value))
            offset += 1
        return candidates[:COVERAGE_CANDIDATE_LIMIT]

    async def is_pincode_valid(self, pincode: str) -> bool:
        """Check that a PIN code exists"""
        if not is_well_formed_pincode(pincode):
            return False
        return await self.get_pincode_info(pincode) is not None

    async def calculate_pincode_distance(self, pincode1: str, pincode2: str) -> float:
        """
        Distance in km between two PIN codes.

        Falls back to the numeric difference / 1000 when either side has
        no coordinates, and to infinity for malformed PIN codes.
        """
        info1, info2 = await asyncio.gather(
            self.get_pincode_info(pincode1), self.get_pincode_info(pincode2)
        )
        if not (_has_coordinates(info1) and _has_coordinates(info2)):
            if not (is_well_formed_pincode(pincode1) and is_well_formed_pincode(pincode2)):
                return math.inf
            return abs(int(pincode1) - int(pincode2)) / 1000
        return haversine_km(info1.lat, info1.lng, info2.lat, info2.lng)

    async def is_pincode_serviceable(
        self,
        seller_pincode: str,
        customer_pincode: str,
        max_radius_km: float = DEFAULT_DELIVERY_RADIUS_KM,
    ) -> bool:
        distance = await self.calculate_pincode_distance(seller_pincode, customer_pincode)
        return distance <= max_radius_km

    async def generate_covered_pincodes(
        self,
        base_pincode: str,
        radius_km: float = DEFAULT_DELIVERY_RADIUS_KM,
    ) -> list[str]:
        """
        PIN codes within radius_km of the base PIN code, sorted.

        The base PIN code is always included. Without coordinates for the
        base only the base itself is returned.
        """
        if not is_well_formed_pincode(base_pincode):
            return []

        cache_key = (base_pincode, radius_km)
        cached = self._coverage_cache.get(cache_key)
        if cached and time.monotonic() - cached[0] < self.cache_ttl_seconds:
            logger.debug(f"Using cached coverage for {base_pincode}")
            return list(cached[1])

        base_info = await self.get_pincode_info(base_pincode)
        if not _has_coordinates(base_info):
            logger.warning(f"Base pincode {base_pincode} not found or missing coordinates")
            return [base_pincode]

        candidates = self.coverage_candidates(base_pincode)
        infos = await asyncio.gather(*(self.get_pincode_info(p) for p in candidates))

        covered = {base_pincode}
        for pincode, info in zip(candidates, infos):
            if not _has_coordinates(info):
                continue
            if haversine_km(base_info.lat, base_info.lng, info.lat, info.lng) <= radius_km:
                covered.add(pincode)

        result = sorted(covered)
        self._coverage_cache[cache_key] = (time.monotonic(), result)
        logger.info(f"Found {len(result)} pincodes within {radius_km}km of {base_pincode}")
        return list(result)

    def clear_cache(self) -> None:
        self._coverage_cache.clear()

    async def close(self) -> None:
        pass


class StaticPincodeDirectory(BasePincodeDirectory):
    """Postal code reference served from an in-memory table"""

    def __init__(self, entries: Optional[Iterable[PincodeInfo]] = None, cache_ttl_seconds: int = 24 * 60 * 60):
        super().__init__(cache_ttl_seconds)
        entries = REFERENCE_PINCODES if entries is None else entries
        self._entries = {info.pincode: info for info in entries}

    async def get_pincode_info(self, pincode: str) -> Optional[PincodeInfo]:
        return self._entries.get(pincode)

    def coverage_candidates(self, base_pincode: str) -> list[str]:
        # The whole table is known, so every entry is a candidate
        return [p for p in self._entries if p != base_pincode]


class PincodeDirectory(BasePincodeDirectory):
    """
    Client for the India Post PIN code lookup API.

    Successful lookups are cached for cache_ttl_seconds. Network and
    parsing failures are logged and reported as "not found".
    """

    def __init__(
        self,
        base_url: str = "https://api.postalpincode.in",
        cache_ttl_seconds: int = 24 * 60 * 60,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(cache_ttl_seconds)
        self.base_url = base_url.rstrip("/")
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)
        self._cache: dict[str, tuple[float, PincodeInfo]] = {}

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def get_pincode_info(self, pincode: str) -> Optional[PincodeInfo]:
        """Fetch post office details for a PIN code"""
        cached = self._cache.get(pincode)
        if cached and time.monotonic() - cached[0] < self.cache_ttl_seconds:
            logger.debug(f"Using cached data for pincode {pincode}")
            return cached[1]

        try:
            response = await self._http_client.get(f"{self.base_url}/pincode/{pincode}")
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error fetching pincode {pincode}: {e}")
            return None

        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            logger.error(f"Invalid API response format for pincode {pincode}")
            return None

        result = data[0]
        post_offices = result.get("PostOffice") or []
        if result.get("Status") != "Success" or not post_offices:
            logger.warning(f"No data found for pincode {pincode}")
            return None

        post_office = post_offices[0]
        state = post_office.get("State", "")
        lat, lng = approximate_coordinates(pincode, state)
        info = PincodeInfo(
            pincode=post_office.get("Pincode") or pincode,
            area=post_office.get("Name", ""),
            district=post_office.get("District", ""),
            state=state,
            lat=lat,
            lng=lng,
        )
        self._cache[pincode] = (time.monotonic(), info)
        return info

    def clear_cache(self) -> None:
        super().clear_cache()
        self._cache.clear()
