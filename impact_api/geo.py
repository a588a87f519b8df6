from __future__ import annotations
import logging
import math

from .impact_model import AsteroidParameters, ImpactResult

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0088

# Map styling for each damage ring, innermost first
ZONE_STYLES = {
    "crater": {"label": "Crater", "color": "#7c3aed"},
    "shockwave": {"label": "Severe Damage Zone", "color": "#dc2626"},
    "thermal": {"label": "Thermal Radiation Zone", "color": "#f59e0b"},
}


def destination_point(lon_deg: float, lat_deg: float, bearing_rad: float, distance_km: float):
    """Point reached from (lon,lat) going 'distance_km' along 'bearing_rad' on a sphere."""
    δ = distance_km / EARTH_RADIUS_KM
    φ1 = math.radians(lat_deg)
    λ1 = math.radians(lon_deg)
    θ = bearing_rad

    sinφ2 = math.sin(φ1)*math.cos(δ) + math.cos(φ1)*math.sin(δ)*math.cos(θ)
    φ2 = math.asin(sinφ2)
    y = math.sin(θ)*math.sin(δ)*math.cos(φ1)
    x = math.cos(δ) - math.sin(φ1)*math.sin(φ2)
    λ2 = λ1 + math.atan2(y, x)
    # normalize lon to [-180, 180)
    lon2 = math.degrees((λ2 + math.pi) % (2*math.pi) - math.pi)
    lat2 = math.degrees(φ2)
    return lon2, lat2


def circle_ring(lon: float, lat: float, radius_km: float, steps: int = 64) -> list:
    """Closed ring of [lon, lat] pairs approximating a geodesic circle."""
    coords = []
    for i in range(steps + 1):
        b = 2 * math.pi * (i / steps)
        x, y = destination_point(lon, lat, b, radius_km)
        coords.append([x, y])
    coords[-1] = coords[0]
    return coords


def circle_as_geojson(lon: float, lat: float, radius_km: float, steps: int = 64,
                      properties: dict | None = None) -> dict:
    return {
        "type": "Feature",
        "properties": dict(properties or {}),
        "geometry": {"type": "Polygon", "coordinates": [circle_ring(lon, lat, radius_km, steps)]},
    }


def impact_zones_geojson(params: AsteroidParameters, result: ImpactResult, steps: int = 64) -> dict:
    """
    FeatureCollection with the crater rim, shockwave and thermal rings centred on
    the impact point, plus a Point feature for the impact itself.
    """
    radii = {
        "crater": result.crater_diameter_km / 2.0,
        "shockwave": result.shockwave_radius_km,
        "thermal": result.thermal_radius_km,
    }
    features = []
    for zone, radius_km in radii.items():
        style = ZONE_STYLES[zone]
        features.append(circle_as_geojson(
            params.longitude, params.latitude, radius_km, steps=steps,
            properties={"zone": zone, "label": style["label"], "color": style["color"],
                        "radius_km": radius_km},
        ))
    features.append({
        "type": "Feature",
        "properties": {"zone": "impact", "is_ocean_impact": result.is_ocean_impact},
        "geometry": {"type": "Point", "coordinates": [params.longitude, params.latitude]},
    })
    logger.debug("[geojson.zones] center=[%s,%s] radii_km=%s steps=%s",
                 params.longitude, params.latitude, radii, steps)
    return {"type": "FeatureCollection", "features": features}
