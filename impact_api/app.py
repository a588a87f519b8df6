import logging
import random
from typing import Optional
from fastapi import FastAPI, Query, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .config import Settings, load_settings, configure_logging
from .geo import impact_zones_geojson
from .impact_model import AsteroidParameters, ImpactCalculator, InvalidParameter, ocean_basin
from .mitigation_model import MitigationCalculator, MitigationStrategy, strategy_catalog
from .nasa_client import NeoClient, historical_impacts
from .simulation_store import SimulationRecord, StoreError, store_from_settings

logger = logging.getLogger(__name__)


# -------------------------------
# Request models
# -------------------------------
class AsteroidIn(BaseModel):
    diameter_m: float = Field(..., gt=0, description="Asteroid diameter in meters")
    velocity_kms: float = Field(..., gt=0, description="Impact velocity in km/s")
    angle_deg: float = Field(45.0, ge=0, le=90, description="Entry angle to horizontal in degrees")
    latitude: float = Field(..., ge=-90, le=90, description="Impact latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Impact longitude in decimal degrees")

    def to_parameters(self) -> AsteroidParameters:
        return AsteroidParameters(
            diameter_m=self.diameter_m,
            velocity_kms=self.velocity_kms,
            angle_deg=self.angle_deg,
            latitude=self.latitude,
            longitude=self.longitude,
        )


class MitigationRequest(BaseModel):
    asteroid: AsteroidIn
    strategy: MitigationStrategy = Field(MitigationStrategy.KINETIC_IMPACTOR)
    warning_time_years: float = Field(5.0, ge=0, description="Years between launch and impact")


class ZonesRequest(BaseModel):
    asteroid: AsteroidIn
    circle_steps: int = Field(64, ge=16, le=512, description="Resolution of each ring")


class SimulationIn(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    asteroid: AsteroidIn
    mitigation: MitigationStrategy = Field(MitigationStrategy.NONE)


def create_app(settings: Optional[Settings] = None, store=None, neo_client: Optional[NeoClient] = None,
               rng: Optional[random.Random] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings)

    store = store if store is not None else store_from_settings(settings)
    neo_client = neo_client or NeoClient(settings)
    impacts = ImpactCalculator(rng=rng if rng is not None else settings.rng_seed)
    # /isOcean has its own stream, independent of the impact sequence
    ocean_lookup = ImpactCalculator(rng=random.Random(settings.rng_seed))
    mitigations = MitigationCalculator()

    app = FastAPI(title="Asteroid Impact Simulator", version="1.0.0")

    @app.exception_handler(InvalidParameter)
    def invalid_parameter_handler(request: Request, exc: InvalidParameter):
        return JSONResponse(status_code=422, content={"detail": str(exc), "field": exc.field})

    # -------------------------------
    # Health + small utility endpoint
    # -------------------------------
    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/isOcean")
    def is_ocean(
        lat: float = Query(..., ge=-90, le=90, description="Latitude in decimal degrees"),
        lon: float = Query(..., ge=-180, le=180, description="Longitude in decimal degrees"),
    ):
        basin = ocean_basin(lat, lon)
        return {"ocean": ocean_lookup.is_ocean_impact(lat, lon), "basin": basin, "estimated": basin is None}

    # -------------------------------
    # Impact simulation endpoints
    # -------------------------------
    @app.post("/impact/summary")
    def impact_summary(req: AsteroidIn):
        params = req.to_parameters()
        result = impacts.compute(params)
        logger.info("[impact] d=%sm v=%skm/s angle=%s at=[%s,%s] energy_mt=%.3g ocean=%s",
                    params.diameter_m, params.velocity_kms, params.angle_deg,
                    params.latitude, params.longitude, result.energy_mt, result.is_ocean_impact)
        return {"asteroid": req.model_dump(), "impact": result.as_dict()}

    @app.post("/impact/zones")
    def impact_zones(req: ZonesRequest):
        params = req.asteroid.to_parameters()
        result = impacts.compute(params)
        return impact_zones_geojson(params, result, steps=req.circle_steps)

    @app.get("/mitigation/strategies")
    def mitigation_strategies():
        return strategy_catalog()

    @app.post("/mitigation")
    def mitigation(req: MitigationRequest):
        params = req.asteroid.to_parameters()
        result = impacts.compute(params)
        outcome = mitigations.compute(req.strategy, result.mass_kg, params.diameter_m,
                                      params.velocity_kms, req.warning_time_years)
        logger.info("[mitigation] strategy=%s years=%s success=%s", req.strategy.value,
                    req.warning_time_years, None if outcome is None else outcome.success_probability)
        return {
            "impact": result.as_dict(),
            "mitigation": None if outcome is None else outcome.as_dict(),
        }

    # -------------------------------
    # Asteroid catalogue (NASA NeoWs)
    # -------------------------------
    @app.get("/asteroids")
    def asteroids(
        start_date: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD"),
        end_date: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD"),
    ):
        return [a.as_dict() for a in neo_client.fetch_feed(start_date, end_date)]

    @app.get("/asteroids/historical")
    def asteroids_historical():
        return historical_impacts()

    @app.get("/asteroids/{neo_id}")
    def asteroid_by_id(neo_id: str):
        neo = neo_client.fetch_by_id(neo_id)
        if neo is None:
            raise HTTPException(status_code=404, detail=f"Asteroid {neo_id} not found.")
        return neo.as_dict()

    # -------------------------------
    # Saved simulations
    # -------------------------------
    @app.post("/simulations", status_code=201)
    def save_simulation(req: SimulationIn):
        params = req.asteroid.to_parameters()
        result = impacts.compute(params)
        record = SimulationRecord.from_results(req.name, params, result, req.mitigation)
        try:
            saved = store.save(record)
        except StoreError as e:
            raise HTTPException(status_code=502, detail=str(e))
        return {"simulation": saved.as_dict(), "impact": result.as_dict()}

    @app.get("/simulations")
    def recent_simulations(limit: int = Query(10, ge=1, le=100)):
        return [r.as_dict() for r in store.recent(limit)]

    @app.get("/simulations/{simulation_id}")
    def simulation_by_id(simulation_id: str):
        record = store.get(simulation_id)
        if record is None:
            raise HTTPException(status_code=404, detail=f"Simulation {simulation_id} not found.")
        # Saved rows only keep the headline numbers; recompute the rest on the stored terrain.
        result = impacts.compute(record.to_parameters(), is_ocean=record.is_ocean_impact)
        return {"simulation": record.as_dict(), "impact": result.as_dict()}

    return app


app = create_app()
