from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def project_root_dir() -> Path:
    return Path(__file__).resolve().parent


def dotenv_path() -> Path:
    """Return the .env file to load: the working directory first, then the sources folder."""
    for candidate in (Path.cwd() / '.env', project_root_dir() / '.env'):
        if candidate.exists() and candidate.is_file():
            return candidate
    return project_root_dir() / '.env'


def _is_placeholder(value: str) -> bool:
    v = (value or '').strip()
    if not v:
        return True
    return v.lower() in {'x', 'changeme', 'your_api_key', 'your_client_id', 'your_client_secret',
                         'your_token', 'placeholder', 'example'}


def _secret(name: str) -> str:
    value = (os.getenv(name) or '').strip()
    return '' if _is_placeholder(value) else value


@dataclass(frozen=True)
class Settings:
    database_url: str
    log_path: Optional[str]
    signup_credits: int
    http_timeout: float
    amadeus_client_id: str
    amadeus_client_secret: str
    amadeus_base_url: str
    google_places_api_key: str
    places_api_base_url: str
    opentripmap_api_key: str
    unsplash_access_key: str
    resend_api_key: str
    email_from: str
    stripe_secret_key: str
    stripe_webhook_secret: str
    stripe_price_id: str
    checkout_success_url: str
    checkout_cancel_url: str
    firebase_credentials_path: Optional[str]

    @property
    def has_amadeus(self) -> bool:
        return bool(self.amadeus_client_id and self.amadeus_client_secret)


def load_settings() -> Settings:
    """Read settings from the environment, after loading .env when present.

    Variables already set in the environment win over the .env file.
    """
    env_file = dotenv_path()
    if env_file.exists():
        load_dotenv(dotenv_path=str(env_file), override=False)

    return Settings(
        database_url=os.getenv('DATABASE_URL', 'sqlite:///./tripplanner.db'),
        log_path=os.getenv('LOG_PATH') or None,
        signup_credits=int(os.getenv('SIGNUP_CREDITS', '1')),
        http_timeout=float(os.getenv('HTTP_TIMEOUT', '10')),
        amadeus_client_id=_secret('AMADEUS_CLIENT_ID'),
        amadeus_client_secret=_secret('AMADEUS_CLIENT_SECRET'),
        amadeus_base_url=os.getenv('AMADEUS_BASE_URL', 'https://api.amadeus.com').rstrip('/'),
        google_places_api_key=_secret('GOOGLE_PLACES_API_KEY'),
        places_api_base_url=os.getenv('PLACES_API_BASE_URL', 'https://maps.googleapis.com').rstrip('/'),
        opentripmap_api_key=_secret('OPENTRIPMAP_API_KEY'),
        unsplash_access_key=_secret('UNSPLASH_ACCESS_KEY'),
        resend_api_key=_secret('RESEND_API_KEY'),
        email_from=os.getenv('EMAIL_FROM', 'Trip Planner <itinerary@tripplanner.app>'),
        stripe_secret_key=_secret('STRIPE_SECRET_KEY'),
        stripe_webhook_secret=_secret('STRIPE_WEBHOOK_SECRET'),
        stripe_price_id=_secret('STRIPE_PRICE_ID'),
        checkout_success_url=os.getenv('CHECKOUT_SUCCESS_URL', 'http://localhost:5173/?checkout=success'),
        checkout_cancel_url=os.getenv('CHECKOUT_CANCEL_URL', 'http://localhost:5173/?checkout=cancelled'),
        firebase_credentials_path=os.getenv('FIREBASE_CREDENTIALS_PATH') or None,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
