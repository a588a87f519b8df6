from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, asdict, fields
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import httpx

from .config import Settings
from .impact_model import AsteroidParameters, ImpactResult
from .mitigation_model import MitigationStrategy

logger = logging.getLogger(__name__)

TABLE = "asteroid_simulations"
DEFAULT_NAME = "Unnamed Simulation"


class StoreError(RuntimeError):
    """The persistence backend rejected or failed a request."""


@dataclass
class SimulationRecord:
    diameter_meters: float
    velocity_km_s: float
    impact_lat: float
    impact_lon: float
    angle_degrees: float = 45.0
    name: str = DEFAULT_NAME
    mass_kg: Optional[float] = None
    energy_megatons: Optional[float] = None
    crater_diameter_km: Optional[float] = None
    is_ocean_impact: bool = False
    mitigation_applied: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[str] = None
    user_id: Optional[str] = None

    @classmethod
    def from_results(cls, name: Optional[str], params: AsteroidParameters, result: ImpactResult,
                     mitigation: MitigationStrategy | str | None = None) -> "SimulationRecord":
        strategy = MitigationStrategy(mitigation) if mitigation else MitigationStrategy.NONE
        return cls(
            name=name or DEFAULT_NAME,
            diameter_meters=params.diameter_m,
            velocity_km_s=params.velocity_kms,
            angle_degrees=params.angle_deg,
            impact_lat=params.latitude,
            impact_lon=params.longitude,
            mass_kg=result.mass_kg,
            energy_megatons=result.energy_mt,
            crater_diameter_km=result.crater_diameter_km,
            is_ocean_impact=result.is_ocean_impact,
            mitigation_applied=None if strategy is MitigationStrategy.NONE else strategy.value,
        )

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "SimulationRecord":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in row.items() if k in known})

    def to_parameters(self) -> AsteroidParameters:
        return AsteroidParameters(
            diameter_m=float(self.diameter_meters),
            velocity_kms=float(self.velocity_km_s),
            angle_deg=float(self.angle_degrees),
            latitude=float(self.impact_lat),
            longitude=float(self.impact_lon),
        )

    def as_row(self) -> Dict[str, Any]:
        """Insertable row: server-assigned columns are dropped when unset."""
        row = asdict(self)
        for k in ("id", "created_at", "user_id"):
            if row[k] is None:
                del row[k]
        return row

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


class InMemorySimulationStore:
    """Process-local store used when no Supabase project is configured, and in tests."""

    def __init__(self):
        self._rows: Dict[str, SimulationRecord] = {}

    def save(self, record: SimulationRecord) -> SimulationRecord:
        row = SimulationRecord.from_row(record.as_dict())
        row.id = row.id or str(uuid.uuid4())
        row.created_at = row.created_at or datetime.now(timezone.utc).isoformat()
        self._rows[row.id] = row
        logger.info("[store.insert] backend=memory id=%s name=%r", row.id, row.name)
        return row

    def recent(self, limit: int = 10) -> List[SimulationRecord]:
        # ties on created_at keep insertion order, newest first
        rows = sorted(enumerate(self._rows.values()), key=lambda p: (p[1].created_at, p[0]), reverse=True)
        return [r for _, r in rows[:max(limit, 0)]]

    def get(self, simulation_id: str) -> Optional[SimulationRecord]:
        return self._rows.get(simulation_id)


class SupabaseSimulationStore:
    """
    ``asteroid_simulations`` through Supabase's PostgREST endpoint.
    Reads degrade to empty results on failure; writes raise StoreError.
    """

    def __init__(self, url: str, anon_key: str, timeout_s: float = 10.0,
                 transport: Optional[httpx.BaseTransport] = None):
        self.endpoint = f"{url.rstrip('/')}/rest/v1/{TABLE}"
        self._headers = {
            "apikey": anon_key,
            "Authorization": f"Bearer {anon_key}",
            "Content-Type": "application/json",
        }
        self._timeout_s = timeout_s
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseSimulationStore":
        return cls(settings.supabase_url, settings.supabase_anon_key, timeout_s=settings.http_timeout_s)

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self._timeout_s, headers=self._headers, transport=self._transport)

    def save(self, record: SimulationRecord) -> SimulationRecord:
        try:
            with self._client() as client:
                r = client.post(self.endpoint, json=[record.as_row()],
                                headers={"Prefer": "return=representation"})
                r.raise_for_status()
                rows = r.json()
        except httpx.HTTPError as e:
            logger.error("[store.insert.error] %s", e)
            raise StoreError(f"Error saving simulation: {e}") from e
        except ValueError as e:
            raise StoreError(f"Supabase returned non-JSON: {e}") from e

        if not rows:
            raise StoreError("Supabase returned no row for the inserted simulation.")
        saved = SimulationRecord.from_row(rows[0])
        logger.info("[store.insert] backend=supabase id=%s name=%r", saved.id, saved.name)
        return saved

    def recent(self, limit: int = 10) -> List[SimulationRecord]:
        params = {"select": "*", "order": "created_at.desc", "limit": str(limit)}
        try:
            with self._client() as client:
                r = client.get(self.endpoint, params=params)
                r.raise_for_status()
                return [SimulationRecord.from_row(row) for row in r.json()]
        except (httpx.HTTPError, ValueError) as e:
            logger.error("[store.recent.error] %s", e)
            return []

    def get(self, simulation_id: str) -> Optional[SimulationRecord]:
        params = {"select": "*", "id": f"eq.{simulation_id}", "limit": "1"}
        try:
            with self._client() as client:
                r = client.get(self.endpoint, params=params)
                r.raise_for_status()
                rows = r.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("[store.get.error] id=%s %s", simulation_id, e)
            return None
        return SimulationRecord.from_row(rows[0]) if rows else None


def store_from_settings(settings: Settings):
    if settings.supabase_configured:
        logger.info("[store] backend=supabase url=%s", settings.supabase_url)
        return SupabaseSimulationStore.from_settings(settings)
    logger.info("[store] backend=memory (SUPABASE_URL/SUPABASE_ANON_KEY not set)")
    return InMemorySimulationStore()
