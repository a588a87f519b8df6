import math
import unittest

from impact_api.geo import destination_point, circle_as_geojson, impact_zones_geojson, EARTH_RADIUS_KM
from impact_api.impact_model import AsteroidParameters, ImpactCalculator


def great_circle_km(lon1, lat1, lon2, lat2):
    φ1, φ2 = math.radians(lat1), math.radians(lat2)
    dφ = φ2 - φ1
    dλ = math.radians(lon2 - lon1)
    a = math.sin(dφ / 2) ** 2 + math.cos(φ1) * math.cos(φ2) * math.sin(dλ / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


class TestGeometry(unittest.TestCase):
    def test_one_degree_north(self):
        km_per_degree = 2 * math.pi * EARTH_RADIUS_KM / 360
        lon, lat = destination_point(0.0, 0.0, 0.0, km_per_degree)
        self.assertAlmostEqual(lon, 0.0, places=6)
        self.assertAlmostEqual(lat, 1.0, places=6)

    def test_longitude_wraps(self):
        lon, _ = destination_point(179.5, 0.0, math.pi / 2, 200.0)
        self.assertLess(lon, -178.0)

    def test_circle_is_closed_and_round(self):
        feature = circle_as_geojson(10.0, 45.0, 50.0, steps=32, properties={"zone": "x"})
        ring = feature["geometry"]["coordinates"][0]
        self.assertEqual(len(ring), 33)
        self.assertEqual(ring[0], ring[-1])
        self.assertEqual(feature["properties"], {"zone": "x"})
        for lon, lat in ring:
            self.assertAlmostEqual(great_circle_km(10.0, 45.0, lon, lat), 50.0, places=3)


class TestImpactZones(unittest.TestCase):
    def test_zone_features(self):
        params = AsteroidParameters(500.0, 20.0, 45.0, 48.0, 2.0)
        result = ImpactCalculator(rng=0).compute(params)
        gj = impact_zones_geojson(params, result, steps=16)

        self.assertEqual(gj["type"], "FeatureCollection")
        zones = {f["properties"]["zone"]: f for f in gj["features"]}
        self.assertEqual(set(zones), {"crater", "shockwave", "thermal", "impact"})
        self.assertAlmostEqual(zones["crater"]["properties"]["radius_km"], result.crater_diameter_km / 2)
        self.assertAlmostEqual(zones["thermal"]["properties"]["radius_km"], result.thermal_radius_km)
        self.assertEqual(zones["impact"]["geometry"]["coordinates"], [2.0, 48.0])
        self.assertEqual(zones["shockwave"]["properties"]["color"], "#dc2626")


if __name__ == '__main__':
    unittest.main()
