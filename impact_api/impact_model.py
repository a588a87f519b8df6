from __future__ import annotations
from dataclasses import dataclass
from math import pi, sin, radians, log10, isfinite
import random

# -----------------------------
# Physical constants & defaults
# -----------------------------
ASTEROID_DENSITY = 3000.0        # kg/m^3, average stony asteroid
TNT_J_PER_KT = 4.184e9           # J per "kiloton" as used by the simulator's energy scale
EARTH_OCEAN_COVERAGE = 0.71      # fraction of Earth's surface covered by ocean
AVG_OCEAN_DEPTH_M = 4000.0       # m

# Crater scaling: D = C * E_J^0.22 * sin(angle)^(1/3) * terrain
CRATER_SCALING_CONSTANT = 1.8e-3
CRATER_ENERGY_EXPONENT = 0.22
CRATER_DEPTH_RATIO = 4.0         # diameter / depth
TERRAIN_FACTOR_OCEAN = 0.8
TERRAIN_FACTOR_LAND = 1.0

# Blast / thermal radius power laws on energy in Mt (km)
SHOCKWAVE_EXPONENT = 0.33
SHOCKWAVE_COEFF_KM = 2.5
THERMAL_EXPONENT = 0.41
THERMAL_COEFF_KM = 3.2

# Richter correlation M = (2/3) log10(E_J) - 2.9
SEISMIC_SLOPE = 2.0 / 3.0
SEISMIC_OFFSET = 2.9

# Tsunami: H = min(D_m / 10, depth/2) * E_Mt^0.25 * 0.1
TSUNAMI_ENERGY_EXPONENT = 0.25
TSUNAMI_CRATER_DIVISOR = 10.0
TSUNAMI_DEPTH_CAP_RATIO = 0.5
TSUNAMI_HEIGHT_SCALE = 0.1

# People per km^2 for each coarse region bucket
POPULATION_DENSITIES = {
    "north_america": 25,
    "south_america": 23,
    "europe": 73,
    "africa": 45,
    "asia": 150,
    "oceania": 5,
    "ocean": 0,
}


class InvalidParameter(ValueError):
    """Raised when an impact or mitigation input is outside its physical range."""

    def __init__(self, field: str, value: float, expected: str):
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field}={value!r}: expected {expected}.")


@dataclass(frozen=True)
class AsteroidParameters:
    diameter_m: float
    velocity_kms: float
    angle_deg: float  # to HORIZONTAL, 90 = vertical
    latitude: float
    longitude: float

    def __post_init__(self):
        if not (self.diameter_m > 0.0 and isfinite(self.diameter_m)):
            raise InvalidParameter("diameter_m", self.diameter_m, "finite and > 0")
        if not (self.velocity_kms > 0.0 and isfinite(self.velocity_kms)):
            raise InvalidParameter("velocity_kms", self.velocity_kms, "finite and > 0")
        if not 0.0 <= self.angle_deg <= 90.0:
            raise InvalidParameter("angle_deg", self.angle_deg, "within [0, 90]")
        if not -90.0 <= self.latitude <= 90.0:
            raise InvalidParameter("latitude", self.latitude, "within [-90, 90]")
        if not -180.0 <= self.longitude <= 180.0:
            raise InvalidParameter("longitude", self.longitude, "within [-180, 180]")

    @property
    def radius_m(self) -> float:
        return 0.5 * self.diameter_m

    @property
    def velocity_mps(self) -> float:
        return self.velocity_kms * 1000.0

    @property
    def angle_rad(self) -> float:
        return radians(self.angle_deg)


@dataclass(frozen=True)
class ImpactResult:
    mass_kg: float
    energy_mt: float
    crater_diameter_km: float
    crater_depth_km: float
    shockwave_radius_km: float
    thermal_radius_km: float
    seismic_magnitude: float
    is_ocean_impact: bool
    affected_population: int
    region: str
    tsunami_height_m: float | None = None

    def as_dict(self) -> dict:
        return {
            "mass_kg": self.mass_kg,
            "energy_mt": self.energy_mt,
            "crater_diameter_km": self.crater_diameter_km,
            "crater_depth_km": self.crater_depth_km,
            "shockwave_radius_km": self.shockwave_radius_km,
            "thermal_radius_km": self.thermal_radius_km,
            "seismic_magnitude": self.seismic_magnitude,
            "is_ocean_impact": self.is_ocean_impact,
            "tsunami_height_m": self.tsunami_height_m,
            "affected_population": self.affected_population,
            "region": self.region,
        }


def mt_to_joules(energy_mt: float) -> float:
    return energy_mt * 1e6 * TNT_J_PER_KT


def ocean_basin(lat: float, lon: float) -> str | None:
    """Name of the ocean bounding box containing (lat, lon), or None outside all three."""
    if (lon > 120.0 or lon < -70.0) and abs(lat) < 60.0:
        return "pacific"
    if -70.0 < lon < -10.0 and abs(lat) < 60.0:
        return "atlantic"
    if 40.0 < lon < 120.0 and -50.0 < lat < 20.0:
        return "indian"
    return None


def population_region(lat: float, lon: float) -> str:
    """
    Coarse continent bucket. First match wins, so overlapping boxes
    (e.g. Africa/Asia around lon 40-50) resolve in declaration order.
    """
    if abs(lat) >= 60.0:
        return "ocean"
    if -130.0 < lon < -60.0 and lat > 15.0:
        return "north_america"
    if -80.0 < lon < -35.0 and lat < 15.0:
        return "south_america"
    if -10.0 < lon < 40.0 and lat > 35.0:
        return "europe"
    if -20.0 < lon < 50.0 and -35.0 < lat < 35.0:
        return "africa"
    if 40.0 < lon < 150.0:
        return "asia"
    if 110.0 < lon < 180.0 and lat < -10.0:
        return "oceania"
    return "ocean"


class ImpactCalculator:
    """
    Mass + energy + crater + shockwave + thermal + seismic + tsunami + population.
    Outside the three ocean boxes the land/ocean call is a Bernoulli draw on
    the injected RNG; pass a seeded random.Random (or a seed) for reproducible runs.
    """

    def __init__(self, rng: random.Random | int | None = None,
                 ocean_depth_m: float = AVG_OCEAN_DEPTH_M):
        if rng is None or isinstance(rng, int):
            rng = random.Random(rng)
        self.rng = rng
        self.ocean_depth_m = ocean_depth_m

    # ---------- Energetics ----------
    def mass_kg(self, diameter_m: float) -> float:
        r = 0.5 * diameter_m
        return (4.0 / 3.0) * pi * r * r * r * ASTEROID_DENSITY

    def energy_mt(self, mass_kg: float, velocity_kms: float) -> float:
        v = velocity_kms * 1000.0
        energy_J = 0.5 * mass_kg * v * v
        return energy_J / TNT_J_PER_KT / 1000.0

    # ---------- Ocean / land ----------
    def is_ocean_impact(self, lat: float, lon: float) -> bool:
        if ocean_basin(lat, lon) is not None:
            return True
        return self.rng.random() < EARTH_OCEAN_COVERAGE

    # ---------- Crater ----------
    def crater_diameter_km(self, energy_mt: float, angle_deg: float, is_ocean: bool) -> float:
        energy_J = mt_to_joules(energy_mt)
        angle_eff = sin(radians(angle_deg)) ** (1.0 / 3.0)
        terrain = TERRAIN_FACTOR_OCEAN if is_ocean else TERRAIN_FACTOR_LAND
        D_m = CRATER_SCALING_CONSTANT * energy_J ** CRATER_ENERGY_EXPONENT * angle_eff * terrain
        return D_m / 1000.0

    def crater_depth_km(self, crater_diameter_km: float) -> float:
        return crater_diameter_km / CRATER_DEPTH_RATIO

    # ---------- Blast / thermal ----------
    def shockwave_radius_km(self, energy_mt: float) -> float:
        return energy_mt ** SHOCKWAVE_EXPONENT * SHOCKWAVE_COEFF_KM

    def thermal_radius_km(self, energy_mt: float) -> float:
        return energy_mt ** THERMAL_EXPONENT * THERMAL_COEFF_KM

    # ---------- Seismic ----------
    def seismic_magnitude(self, energy_mt: float) -> float:
        return SEISMIC_SLOPE * log10(mt_to_joules(energy_mt)) - SEISMIC_OFFSET

    # ---------- Tsunami ----------
    def tsunami_height_m(self, energy_mt: float, crater_diameter_km: float,
                         water_depth_m: float | None = None) -> float:
        depth = self.ocean_depth_m if water_depth_m is None else water_depth_m
        crater_m = crater_diameter_km * 1000.0
        initial = min(crater_m / TSUNAMI_CRATER_DIVISOR, depth * TSUNAMI_DEPTH_CAP_RATIO)
        return initial * energy_mt ** TSUNAMI_ENERGY_EXPONENT * TSUNAMI_HEIGHT_SCALE

    # ---------- Population ----------
    def affected_population(self, lat: float, lon: float,
                            shockwave_radius_km: float, thermal_radius_km: float) -> int:
        density = POPULATION_DENSITIES.get(population_region(lat, lon), 0)
        area_km2 = pi * max(shockwave_radius_km, thermal_radius_km) ** 2
        return int(round(density * area_km2))

    # ---------- Convenience summary ----------
    def compute(self, params: AsteroidParameters, is_ocean: bool | None = None) -> ImpactResult:
        """
        Full impact summary. ``is_ocean`` pins the land/ocean call (e.g. to a
        previously stored outcome) and skips the RNG draw; None decides it here.
        """
        mass = self.mass_kg(params.diameter_m)
        energy = self.energy_mt(mass, params.velocity_kms)
        # crater and seismic terms work on mt_to_joules(energy), the largest intermediate
        if not isfinite(mt_to_joules(energy)):
            raise InvalidParameter("diameter_m", params.diameter_m,
                                   "a size and velocity with a finite impact energy")
        if is_ocean is None:
            ocean = self.is_ocean_impact(params.latitude, params.longitude)
        else:
            ocean = bool(is_ocean)
        crater = self.crater_diameter_km(energy, params.angle_deg, ocean)
        shock = self.shockwave_radius_km(energy)
        thermal = self.thermal_radius_km(energy)

        return ImpactResult(
            mass_kg=mass,
            energy_mt=energy,
            crater_diameter_km=crater,
            crater_depth_km=self.crater_depth_km(crater),
            shockwave_radius_km=shock,
            thermal_radius_km=thermal,
            seismic_magnitude=self.seismic_magnitude(energy),
            is_ocean_impact=ocean,
            affected_population=self.affected_population(
                params.latitude, params.longitude, shock, thermal),
            region=population_region(params.latitude, params.longitude),
            tsunami_height_m=self.tsunami_height_m(energy, crater) if ocean else None,
        )
