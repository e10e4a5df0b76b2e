"""
Runtime settings loaded from the environment (and a local .env file).

Static defaults live in constants.py; this module only covers values that
differ per deployment, such as the AI enhancement API key.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from PV_Libs.constants import (
    DEFAULT_ENHANCE_MODEL,
    DEFAULT_LOG_LEVEL,
    ENV_API_KEY,
    ENV_API_KEY_FALLBACK,
    ENV_ENHANCE_MODEL,
    ENV_LOG_LEVEL,
)


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str]
    enhance_model: str
    log_level: str


def get_settings(load_env: bool = True) -> Settings:
    """
    Read settings from the environment.

    A missing API key is not an error here; it only matters once an
    enhancement is requested.
    """
    if load_env:
        load_dotenv()

    api_key = os.getenv(ENV_API_KEY) or os.getenv(ENV_API_KEY_FALLBACK) or None
    return Settings(
        api_key=api_key,
        enhance_model=os.getenv(ENV_ENHANCE_MODEL) or DEFAULT_ENHANCE_MODEL,
        log_level=(os.getenv(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper(),
    )
