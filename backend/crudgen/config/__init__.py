"""Environment-driven settings for generated applications.

Values come from the process environment, optionally seeded from a local .env file.
"""
from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_DATABASE_URL = 'sqlite:///dev.db'
DEFAULT_ENV = 'dev'
DEFAULT_TOKEN_PREFIX = 'Bearer'
DEFAULT_URL_PREFIX = '/api'


@dataclass(frozen=True)
class Settings:
    jwt_secret_key: Optional[str]
    database_url: str
    env: str


def get_settings() -> Settings:
    return Settings(
        jwt_secret_key=os.getenv('JWT_SECRET_KEY') or None,
        database_url=os.getenv('DATABASE_URL', DEFAULT_DATABASE_URL),
        env=os.getenv('CRUDGEN_ENV', DEFAULT_ENV),
    )


__all__ = [
    'Settings',
    'get_settings',
    'DEFAULT_DATABASE_URL',
    'DEFAULT_ENV',
    'DEFAULT_TOKEN_PREFIX',
    'DEFAULT_URL_PREFIX',
]
