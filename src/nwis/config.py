"""
NWIS Configuration

Service addresses, HTTP timeout and log level, read from the environment.
A .env file in the working directory is honored via python-dotenv.

Environment variables (all optional):
- NWIS_WATERSERVICES_URL: base for the iv and gwlevels services
- NWIS_WATERDATA_URL: base for the measurements and rating services
- NWIS_PEAK_URL: peak flow service endpoint
- NWIS_TIMEOUT: request timeout in seconds
- NWIS_USER_AGENT: User-Agent header sent with each request
- LOG_LEVEL: logging level name
"""

import logging
import os

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, validator


DEFAULT_WATERSERVICES_URL = "https://waterservices.usgs.gov/nwis/"
DEFAULT_WATERDATA_URL = "https://waterdata.usgs.gov/"
DEFAULT_PEAK_URL = "https://nwis.waterdata.usgs.gov/usa/nwis/peak/"
DEFAULT_TIMEOUT = 60  # seconds
DEFAULT_USER_AGENT = "nwis-retrieval/0.1.0"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class NWISSettings(BaseModel):
    """Runtime settings for the NWIS client."""
    waterservices_url: str = Field(DEFAULT_WATERSERVICES_URL, description="Base URL for iv/gwlevels")
    waterdata_url: str = Field(DEFAULT_WATERDATA_URL, description="Base URL for measurements/rating")
    peak_url: str = Field(DEFAULT_PEAK_URL, description="Peak flow endpoint")
    timeout: float = Field(DEFAULT_TIMEOUT, description="HTTP timeout in seconds", gt=0)
    user_agent: str = Field(DEFAULT_USER_AGENT, description="User-Agent header")
    log_level: str = Field("INFO", description="Logging level name")

    @validator('waterservices_url', 'waterdata_url')
    def base_url_must_end_with_slash(cls, v):
        """Base addresses are joined with relative paths"""
        return v if v.endswith('/') else v + '/'

    @validator('log_level')
    def log_level_must_be_known(cls, v):
        level = v.upper()
        # getLevelName maps known names to ints
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @classmethod
    def from_env(cls) -> "NWISSettings":
        """Build settings from environment variables, loading .env first."""
        load_dotenv(find_dotenv(usecwd=True))

        values = {}
        env_map = {
            'waterservices_url': 'NWIS_WATERSERVICES_URL',
            'waterdata_url': 'NWIS_WATERDATA_URL',
            'peak_url': 'NWIS_PEAK_URL',
            'timeout': 'NWIS_TIMEOUT',
            'user_agent': 'NWIS_USER_AGENT',
            'log_level': 'LOG_LEVEL',
        }
        for field_name, env_name in env_map.items():
            value = os.getenv(env_name)
            if value:
                values[field_name] = value

        return cls(**values)


def get_settings() -> NWISSettings:
    """Return settings freshly read from the environment."""
    return NWISSettings.from_env()


def configure_logging(level: str = None) -> None:
    """Configure root logging for scripts and notebooks using this package."""
    logging.basicConfig(
        level=level or get_settings().log_level,
        format=LOG_FORMAT
    )
