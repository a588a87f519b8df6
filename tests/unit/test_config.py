import os
import unittest
from unittest import mock

from impact_api import config


class TestSettings(unittest.TestCase):
    def load(self, env):
        with mock.patch.dict(os.environ, env, clear=True), mock.patch.object(config, "load_dotenv"):
            return config.load_settings()

    def test_defaults(self):
        s = self.load({})
        self.assertEqual(s.nasa_api_key, "DEMO_KEY")
        self.assertEqual(s.nasa_base_url, config.NASA_NEO_BASE_URL)
        self.assertIsNone(s.rng_seed)
        self.assertFalse(s.supabase_configured)
        self.assertEqual(s.log_level, "INFO")

    def test_environment_overrides(self):
        s = self.load({
            "NASA_API_KEY": "secret-key",
            "NASA_NEO_BASE_URL": "http://localhost:9000/neo/",
            "SUPABASE_URL": "https://proj.supabase.co",
            "SUPABASE_ANON_KEY": "anon",
            "HTTP_TIMEOUT_S": "2.5",
            "IMPACT_RNG_SEED": "42",
            "LOG_LEVEL": "debug",
        })
        self.assertEqual(s.nasa_api_key, "secret-key")
        self.assertEqual(s.nasa_base_url, "http://localhost:9000/neo")
        self.assertTrue(s.supabase_configured)
        self.assertEqual(s.http_timeout_s, 2.5)
        self.assertEqual(s.rng_seed, 42)
        self.assertEqual(s.log_level, "DEBUG")

    def test_supabase_needs_both_values(self):
        self.assertFalse(self.load({"SUPABASE_URL": "https://proj.supabase.co"}).supabase_configured)


class TestMaskKey(unittest.TestCase):
    def test_mask_key(self):
        self.assertEqual(config.mask_key("abcdefghij"), "abc***hij")
        self.assertEqual(config.mask_key("short"), "***")
        self.assertIsNone(config.mask_key(None))


if __name__ == '__main__':
    unittest.main()
