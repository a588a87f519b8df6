import logging
import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

NASA_NEO_BASE_URL = "https://api.nasa.gov/neo/rest/v1"


def mask_key(s: Optional[str]) -> Optional[str]:
    if not s:
        return s
    return s[:3] + "***" + s[-3:] if len(s) > 6 else "***"


@dataclass(frozen=True)
class Settings:
    nasa_api_key: str = "DEMO_KEY"
    nasa_base_url: str = NASA_NEO_BASE_URL
    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    http_timeout_s: float = 10.0
    rng_seed: Optional[int] = None
    log_level: str = "INFO"

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)


def load_settings() -> Settings:
    """Read settings from the environment, after loading a local .env if present."""
    load_dotenv()
    seed = os.getenv("IMPACT_RNG_SEED")
    return Settings(
        nasa_api_key=os.getenv("NASA_API_KEY") or "DEMO_KEY",
        nasa_base_url=(os.getenv("NASA_NEO_BASE_URL") or NASA_NEO_BASE_URL).rstrip("/"),
        supabase_url=os.getenv("SUPABASE_URL") or None,
        supabase_anon_key=os.getenv("SUPABASE_ANON_KEY") or None,
        http_timeout_s=float(os.getenv("HTTP_TIMEOUT_S", "10.0")),
        rng_seed=int(seed) if seed not in (None, "") else None,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level, format='%(asctime)s - %(message)s')
