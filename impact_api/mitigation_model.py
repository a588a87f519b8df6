from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from .impact_model import InvalidParameter

# -----------------------------
# Mission constants
# -----------------------------
SECONDS_PER_YEAR = 365.25 * 24 * 3600
G_NEWTON = 6.674e-11             # m^3 kg^-1 s^-2

# Kinetic impactor (DART-like)
IMPACTOR_MASS_KG = 500.0
IMPACTOR_SPEED_MPS = 10_000.0
IMPACTOR_BETA = 1.5              # momentum enhancement from ejecta

# Nuclear standoff burst
NUCLEAR_YIELD_J = 4.184e15       # 1 Mt
NUCLEAR_COUPLING = 0.1
NUCLEAR_MAX_REDUCTION_PCT = 15.0

# Gravity tractor
TRACTOR_MASS_KG = 1000.0
TRACTOR_STANDOFF_M = 100.0
TRACTOR_MAX_REDUCTION_PCT = 8.0

# Ion beam shepherd
ION_THRUST_N = 0.5
ION_EFFICIENCY = 0.7
ION_MAX_REDUCTION_PCT = 10.0


class MitigationStrategy(str, Enum):
    NONE = "none"
    KINETIC_IMPACTOR = "kinetic_impactor"
    NUCLEAR_DEVICE = "nuclear_device"
    GRAVITY_TRACTOR = "gravity_tractor"
    ION_BEAM = "ion_beam"


@dataclass(frozen=True)
class MitigationOutcome:
    strategy: MitigationStrategy
    success_probability: float
    velocity_change_mps: float
    trajectory_deflection_km: float
    warning_time_needed_years: float
    energy_reduction_pct: float
    description: str

    def as_dict(self) -> dict:
        return {
            "strategy": self.strategy.value,
            "success_probability": self.success_probability,
            "velocity_change_mps": self.velocity_change_mps,
            "trajectory_deflection_km": self.trajectory_deflection_km,
            "warning_time_needed_years": self.warning_time_needed_years,
            "energy_reduction_pct": self.energy_reduction_pct,
            "description": self.description,
        }


_CATALOG = [
    {"id": MitigationStrategy.NONE, "name": "No Mitigation",
     "description": "Natural impact scenario without intervention",
     "warning_time": None, "tech_level": None},
    {"id": MitigationStrategy.KINETIC_IMPACTOR, "name": "Kinetic Impactor",
     "description": "High-speed spacecraft collision (DART mission style)",
     "warning_time": "5+ years", "tech_level": "Current Technology"},
    {"id": MitigationStrategy.NUCLEAR_DEVICE, "name": "Nuclear Standoff Burst",
     "description": "Nuclear detonation near asteroid surface",
     "warning_time": "3+ years", "tech_level": "Available Technology"},
    {"id": MitigationStrategy.GRAVITY_TRACTOR, "name": "Gravity Tractor",
     "description": "Spacecraft gravitational pull over long duration",
     "warning_time": "10+ years", "tech_level": "Experimental"},
    {"id": MitigationStrategy.ION_BEAM, "name": "Ion Beam Shepherd",
     "description": "Focused ion beam ablation",
     "warning_time": "8+ years", "tech_level": "Experimental"},
]


def strategy_catalog() -> list[dict]:
    return [dict(entry, id=entry["id"].value) for entry in _CATALOG]


class MitigationCalculator:
    """
    Deflection outcome for one strategy. Each branch is independent closed-form
    arithmetic over asteroid mass/size/speed and the available warning time.
    """

    # ---------- Strategies ----------
    def kinetic_impactor(self, mass_kg: float, velocity_kms: float, years: float) -> MitigationOutcome:
        dv = IMPACTOR_BETA * (IMPACTOR_MASS_KG * IMPACTOR_SPEED_MPS) / mass_kg
        t = years * SECONDS_PER_YEAR
        ratio = dv / (velocity_kms * 1000.0)
        return MitigationOutcome(
            strategy=MitigationStrategy.KINETIC_IMPACTOR,
            success_probability=min(years / 5.0, 0.95),
            velocity_change_mps=dv,
            trajectory_deflection_km=dv * t / 1000.0,
            warning_time_needed_years=5,
            energy_reduction_pct=max(0.0, min((2.0 * ratio - ratio * ratio) * 100.0, 100.0)),
            description="High-speed spacecraft collision to change asteroid momentum. "
                        "Most viable current technology.",
        )

    def nuclear_device(self, mass_kg: float, years: float) -> MitigationOutcome:
        impulse = NUCLEAR_COUPLING * NUCLEAR_YIELD_J / 1000.0
        dv = impulse / mass_kg
        t = years * SECONDS_PER_YEAR
        return MitigationOutcome(
            strategy=MitigationStrategy.NUCLEAR_DEVICE,
            success_probability=min(years / 3.0, 0.90),
            velocity_change_mps=dv,
            trajectory_deflection_km=dv * t / 1000.0,
            warning_time_needed_years=3,
            energy_reduction_pct=min(dv / 1000.0 * 50.0, NUCLEAR_MAX_REDUCTION_PCT),
            description="Nuclear standoff burst to vaporize surface material and create thrust. "
                        "High-risk, high-reward option.",
        )

    def gravity_tractor(self, mass_kg: float, years: float) -> MitigationOutcome:
        force = G_NEWTON * TRACTOR_MASS_KG * mass_kg / TRACTOR_STANDOFF_M**2
        accel = force / mass_kg
        t = years * SECONDS_PER_YEAR
        dv = accel * t
        return MitigationOutcome(
            strategy=MitigationStrategy.GRAVITY_TRACTOR,
            success_probability=min(years / 10.0, 0.85),
            velocity_change_mps=dv,
            trajectory_deflection_km=dv * t / 2000.0,
            warning_time_needed_years=10,
            energy_reduction_pct=min(dv / 100.0 * 5.0, TRACTOR_MAX_REDUCTION_PCT),
            description="Spacecraft uses gravitational attraction to slowly pull asteroid off course. "
                        "Requires very long warning time.",
        )

    def ion_beam(self, mass_kg: float, years: float) -> MitigationOutcome:
        accel = ION_THRUST_N * ION_EFFICIENCY / mass_kg
        t = years * SECONDS_PER_YEAR
        dv = accel * t
        return MitigationOutcome(
            strategy=MitigationStrategy.ION_BEAM,
            success_probability=min(years / 8.0, 0.80),
            velocity_change_mps=dv,
            trajectory_deflection_km=dv * t / 2000.0,
            warning_time_needed_years=8,
            energy_reduction_pct=min(dv / 100.0 * 6.0, ION_MAX_REDUCTION_PCT),
            description="Ion beam directed at asteroid surface to create ablation thrust. "
                        "Experimental but promising technology.",
        )

    # ---------- Dispatch ----------
    def compute(self, strategy: MitigationStrategy | str, mass_kg: float, diameter_m: float,
                velocity_kms: float, warning_time_years: float) -> MitigationOutcome | None:
        strategy = MitigationStrategy(strategy)  # ValueError on unknown ids
        if strategy is MitigationStrategy.NONE:
            return None

        if not mass_kg > 0.0:
            raise InvalidParameter("mass_kg", mass_kg, "> 0")
        if not diameter_m > 0.0:
            raise InvalidParameter("diameter_m", diameter_m, "> 0")
        if not velocity_kms > 0.0:
            raise InvalidParameter("velocity_kms", velocity_kms, "> 0")
        if not warning_time_years >= 0.0:
            raise InvalidParameter("warning_time_years", warning_time_years, ">= 0")

        if strategy is MitigationStrategy.KINETIC_IMPACTOR:
            return self.kinetic_impactor(mass_kg, velocity_kms, warning_time_years)
        if strategy is MitigationStrategy.NUCLEAR_DEVICE:
            return self.nuclear_device(mass_kg, warning_time_years)
        if strategy is MitigationStrategy.GRAVITY_TRACTOR:
            return self.gravity_tractor(mass_kg, warning_time_years)
        return self.ion_beam(mass_kg, warning_time_years)
