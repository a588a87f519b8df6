"""
NASA NeoWs (Near Earth Object Web Service) client.

Fetches close-approach feeds and single objects and flattens them into
``NeoAsteroid`` records that can seed an impact simulation. The feed falls
back to a small built-in catalogue when the upstream is unreachable, so the
simulator stays usable offline or when the DEMO_KEY rate limit is hit.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, asdict
from datetime import date, timedelta
from typing import Any, Dict, List, Optional
import httpx

from .config import Settings, mask_key
from .impact_model import AsteroidParameters

logger = logging.getLogger(__name__)

DEFAULT_FEED_DAYS = 7
DEFAULT_ENTRY_ANGLE_DEG = 45.0


class NeoServiceError(RuntimeError):
    """NeoWs returned an error status or a payload we cannot parse."""


@dataclass(frozen=True)
class NeoAsteroid:
    id: str
    name: str
    diameter_min_m: float
    diameter_max_m: float
    velocity_kms: float
    close_approach_date: str
    is_potentially_hazardous: bool
    absolute_magnitude: float

    @property
    def diameter_avg_m(self) -> float:
        return (self.diameter_min_m + self.diameter_max_m) / 2.0

    def to_parameters(self, latitude: float, longitude: float,
                      angle_deg: float = DEFAULT_ENTRY_ANGLE_DEG) -> AsteroidParameters:
        return AsteroidParameters(
            diameter_m=self.diameter_avg_m,
            velocity_kms=self.velocity_kms,
            angle_deg=angle_deg,
            latitude=latitude,
            longitude=longitude,
        )

    def as_dict(self) -> dict:
        out = asdict(self)
        out["diameter_avg_m"] = self.diameter_avg_m
        return out


def parse_neo(neo: Dict[str, Any]) -> NeoAsteroid:
    """Flatten one NeoWs object, using its first close-approach record."""
    try:
        d = neo["estimated_diameter"]["meters"]
        approach = neo["close_approach_data"][0]
        return NeoAsteroid(
            id=str(neo["id"]),
            name=neo["name"],
            diameter_min_m=float(d["estimated_diameter_min"]),
            diameter_max_m=float(d["estimated_diameter_max"]),
            velocity_kms=float(approach["relative_velocity"]["kilometers_per_second"]),
            close_approach_date=approach["close_approach_date"],
            is_potentially_hazardous=bool(neo["is_potentially_hazardous_asteroid"]),
            absolute_magnitude=float(neo["absolute_magnitude_h"]),
        )
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise NeoServiceError(f"Malformed NeoWs object {neo.get('id')!r}: {e!r}") from e


def _get_with_retries(client: httpx.Client, url: str, params: Dict[str, Any],
                      attempts: int = 3, backoff_s: float = 0.8) -> httpx.Response:
    last_exc = None
    for i in range(1, attempts + 1):
        try:
            logger.debug("[http.try] attempt=%s url=%s", i, url)
            r = client.get(url, params=params)
            logger.debug("[http.try] status=%s attempt=%s", r.status_code, i)
            return r
        except httpx.ReadTimeout as e:
            last_exc = e
            logger.warning("[http.timeout] attempt=%s url=%s error=%s", i, url, e)
            if i < attempts:
                time.sleep(backoff_s * i)
    raise last_exc


class NeoClient:
    def __init__(self, settings: Settings, transport: Optional[httpx.BaseTransport] = None,
                 retry_backoff_s: float = 0.8):
        self.settings = settings
        self._transport = transport
        self._retry_backoff_s = retry_backoff_s

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.settings.http_timeout_s, transport=self._transport)

    def _get_json(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.settings.nasa_base_url}{path}"
        params = dict(params, api_key=self.settings.nasa_api_key)
        printable = dict(params, api_key=mask_key(params["api_key"]))
        logger.info("[request] GET %s params=%s", url, printable)
        try:
            with self._client() as client:
                r = _get_with_retries(client, url, params, backoff_s=self._retry_backoff_s)
                r.raise_for_status()
                return r.json()
        except httpx.HTTPError as e:
            raise NeoServiceError(f"NeoWs request failed: {e}") from e
        except ValueError as e:
            raise NeoServiceError(f"NeoWs returned non-JSON: {e}") from e

    def fetch_feed_strict(self, start_date: Optional[str] = None,
                          end_date: Optional[str] = None) -> List[NeoAsteroid]:
        """Close approaches in [start, end]; raises NeoServiceError on any upstream problem."""
        today = date.today()
        start = start_date or today.isoformat()
        end = end_date or (today + timedelta(days=DEFAULT_FEED_DAYS)).isoformat()
        logger.info("[nasa.feed] start=%s end=%s", start, end)

        data = self._get_json("/feed", {"start_date": start, "end_date": end})
        by_date = data.get("near_earth_objects")
        if not isinstance(by_date, dict):
            raise NeoServiceError("NeoWs feed missing 'near_earth_objects'.")

        asteroids = [parse_neo(neo) for day in by_date for neo in by_date[day]]
        logger.info("[nasa.feed] days=%s asteroids=%s", len(by_date), len(asteroids))
        return asteroids

    def fetch_feed(self, start_date: Optional[str] = None,
                   end_date: Optional[str] = None) -> List[NeoAsteroid]:
        """Like fetch_feed_strict, but serves the built-in catalogue when NeoWs fails."""
        try:
            return self.fetch_feed_strict(start_date, end_date)
        except NeoServiceError as e:
            logger.error("[nasa.feed.error] %s; serving mock catalogue", e)
            return mock_asteroids()

    def fetch_by_id(self, neo_id: str) -> Optional[NeoAsteroid]:
        logger.info("[nasa.lookup] id=%s", neo_id)
        try:
            return parse_neo(self._get_json(f"/neo/{neo_id}", {}))
        except NeoServiceError as e:
            logger.error("[nasa.lookup.error] id=%s %s", neo_id, e)
            return None


def mock_asteroids() -> List[NeoAsteroid]:
    return [
        NeoAsteroid("2099942", "Apophis", 310.0, 340.0, 7.42, "2029-04-13", True, 19.7),
        NeoAsteroid("2101955", "Bennu", 490.0, 492.0, 6.3, "2135-09-25", True, 20.9),
        NeoAsteroid("433", "Eros", 16800.0, 17000.0, 23.5, "2056-01-31", False, 10.4),
        NeoAsteroid("99942", "2004 MN4", 210.0, 280.0, 12.6, "2029-04-13", True, 19.7),
        NeoAsteroid("162173", "Ryugu", 900.0, 920.0, 8.9, "2076-12-05", False, 19.2),
    ]


def historical_impacts() -> List[dict]:
    """Famous events with their quoted energies (Mt), for loading as presets."""
    return [
        {"name": "Chicxulub (Dinosaur Extinction)", "diameter_m": 10000.0, "velocity_kms": 20.0,
         "location": {"lat": 21.3, "lon": -89.5}, "energy_mt": 100_000_000.0},
        {"name": "Tunguska Event", "diameter_m": 60.0, "velocity_kms": 15.0,
         "location": {"lat": 60.9, "lon": 101.9}, "energy_mt": 15.0},
        {"name": "Chelyabinsk Meteor", "diameter_m": 20.0, "velocity_kms": 19.0,
         "location": {"lat": 55.1, "lon": 61.4}, "energy_mt": 0.5},
        {"name": "Barringer Crater", "diameter_m": 50.0, "velocity_kms": 12.8,
         "location": {"lat": 35.0, "lon": -111.0}, "energy_mt": 10.0},
    ]
