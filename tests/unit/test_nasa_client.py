import unittest

import httpx

from impact_api.config import Settings
from impact_api.impact_model import AsteroidParameters
from impact_api.nasa_client import (
    NeoClient, NeoServiceError, parse_neo, mock_asteroids, historical_impacts,
)


def neo_payload(neo_id="3542519", name="(2010 PK9)", dmin=120.0, dmax=280.0, speed="18.1274", hazardous=True):
    return {
        "id": neo_id,
        "name": name,
        "absolute_magnitude_h": 21.3,
        "is_potentially_hazardous_asteroid": hazardous,
        "estimated_diameter": {
            "meters": {"estimated_diameter_min": dmin, "estimated_diameter_max": dmax},
        },
        "close_approach_data": [
            {"close_approach_date": "2025-10-05",
             "relative_velocity": {"kilometers_per_second": speed}},
            {"close_approach_date": "2031-01-01",
             "relative_velocity": {"kilometers_per_second": "99.0"}},
        ],
    }


FEED = {
    "element_count": 3,
    "near_earth_objects": {
        "2025-10-05": [neo_payload(), neo_payload("2000433", "433 Eros", 16000.0, 17000.0, "5.5", False)],
        "2025-10-06": [neo_payload("54016", "(2020 AB)", 10.0, 20.0, "7.0", False)],
    },
}


def client_for(handler, **settings):
    return NeoClient(Settings(**settings), transport=httpx.MockTransport(handler), retry_backoff_s=0.0)


class TestParse(unittest.TestCase):
    def test_parse_uses_first_close_approach(self):
        neo = parse_neo(neo_payload())
        self.assertEqual(neo.id, "3542519")
        self.assertAlmostEqual(neo.velocity_kms, 18.1274)
        self.assertEqual(neo.close_approach_date, "2025-10-05")
        self.assertAlmostEqual(neo.diameter_avg_m, 200.0)
        self.assertTrue(neo.is_potentially_hazardous)

    def test_parse_rejects_malformed_objects(self):
        broken = neo_payload()
        broken["close_approach_data"] = []
        with self.assertRaises(NeoServiceError):
            parse_neo(broken)

    def test_to_parameters(self):
        p = parse_neo(neo_payload()).to_parameters(10.0, 20.0)
        self.assertEqual(p, AsteroidParameters(200.0, 18.1274, 45.0, 10.0, 20.0))


class TestFeed(unittest.TestCase):
    def test_feed_flattens_all_days(self):
        seen = {}

        def handler(request):
            seen["url"] = request.url
            return httpx.Response(200, json=FEED)

        asteroids = client_for(handler, nasa_api_key="abc123xyz").fetch_feed("2025-10-05", "2025-10-06")
        self.assertEqual([a.id for a in asteroids], ["3542519", "2000433", "54016"])
        self.assertEqual(seen["url"].path, "/neo/rest/v1/feed")
        self.assertEqual(seen["url"].params["start_date"], "2025-10-05")
        self.assertEqual(seen["url"].params["end_date"], "2025-10-06")
        self.assertEqual(seen["url"].params["api_key"], "abc123xyz")

    def test_feed_defaults_to_a_week(self):
        seen = {}

        def handler(request):
            seen["params"] = request.url.params
            return httpx.Response(200, json={"near_earth_objects": {}})

        self.assertEqual(client_for(handler).fetch_feed(), [])
        self.assertIn("start_date", seen["params"])
        self.assertIn("end_date", seen["params"])
        self.assertEqual(seen["params"]["api_key"], "DEMO_KEY")

    def test_upstream_error_serves_mock_catalogue(self):
        client = client_for(lambda request: httpx.Response(429, json={"error": "rate limited"}))
        names = [a.name for a in client.fetch_feed()]
        self.assertEqual(names, [a.name for a in mock_asteroids()])
        self.assertIn("Apophis", names)

    def test_strict_feed_raises(self):
        client = client_for(lambda request: httpx.Response(500, text="boom"))
        with self.assertRaises(NeoServiceError):
            client.fetch_feed_strict()

    def test_non_json_body(self):
        client = client_for(lambda request: httpx.Response(200, text="<html>"))
        with self.assertRaises(NeoServiceError):
            client.fetch_feed_strict()

    def test_read_timeout_is_retried(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) < 3:
                raise httpx.ReadTimeout("slow", request=request)
            return httpx.Response(200, json=FEED)

        self.assertEqual(len(client_for(handler).fetch_feed_strict()), 3)
        self.assertEqual(len(attempts), 3)

    def test_gives_up_after_three_timeouts(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with self.assertRaises(NeoServiceError):
            client_for(handler).fetch_feed_strict()


class TestLookup(unittest.TestCase):
    def test_fetch_by_id(self):
        def handler(request):
            self.assertEqual(request.url.path, "/neo/rest/v1/neo/3542519")
            return httpx.Response(200, json=neo_payload())

        self.assertEqual(client_for(handler).fetch_by_id("3542519").name, "(2010 PK9)")

    def test_missing_id_is_none(self):
        client = client_for(lambda request: httpx.Response(404, json={"code": 404}))
        self.assertIsNone(client.fetch_by_id("0"))


class TestCatalogues(unittest.TestCase):
    def test_mock_asteroids(self):
        bennu = {a.name: a for a in mock_asteroids()}["Bennu"]
        self.assertAlmostEqual(bennu.diameter_avg_m, 491.0)

    def test_historical_impacts(self):
        events = {e["name"]: e for e in historical_impacts()}
        self.assertEqual(len(events), 4)
        self.assertEqual(events["Tunguska Event"]["location"], {"lat": 60.9, "lon": 101.9})


if __name__ == '__main__':
    unittest.main()
