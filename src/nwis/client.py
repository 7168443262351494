"""
NWIS Web Services HTTP Client

Performs the single blocking GET behind every NWIS reader.

API Documentation: https://waterservices.usgs.gov/docs/

Design Principles:
- One request per call, no retries and no caching
- Transport failures and non-success statuses surface as NetworkError
- The response Date header is kept as the query time
"""

import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

import requests
from requests.adapters import HTTPAdapter

from .config import NWISSettings, get_settings
from .exceptions import NetworkError
from .schemas import NWISResponse

logger = logging.getLogger(__name__)


# USGS Parameter Codes (common ones for streamflow and groundwater monitoring)
class ParameterCodes:
    """Common USGS parameter codes."""
    DISCHARGE = "00060"  # Discharge, cubic feet per second
    GAGE_HEIGHT = "00065"  # Gage height, feet
    WATER_TEMP = "00010"  # Temperature, water, degrees Celsius
    PRECIPITATION = "00045"  # Precipitation, total, inches
    SPECIFIC_CONDUCTANCE = "00095"  # Specific conductance, uS/cm at 25C
    DISSOLVED_OXYGEN = "00300"  # Dissolved oxygen, mg/L
    PH = "00400"  # pH, standard units
    TURBIDITY = "63680"  # Turbidity, FNU
    GW_LEVEL_BELOW_SURFACE = "72019"  # Depth to water level, feet below land surface


class NWISClient:
    """
    Client for fetching raw documents from the NWIS web services.

    The client is stateless apart from its requests session; each call is
    independent.
    """

    def __init__(
        self,
        settings: Optional[NWISSettings] = None,
        timeout: Optional[float] = None
    ):
        """
        Initialize NWIS client.

        Args:
            settings: Service settings; read from the environment when omitted
            timeout: Request timeout in seconds, overriding settings.timeout
        """
        self.settings = settings or get_settings()
        self.timeout = timeout or self.settings.timeout
        self.session = self._create_session()
        logger.debug(f"NWIS client initialized with timeout={self.timeout}s")

    def _create_session(self) -> requests.Session:
        """Create requests session without retry logic."""
        session = requests.Session()
        session.headers.update({'User-Agent': self.settings.user_agent})

        adapter = HTTPAdapter(max_retries=0)
        session.mount("https://", adapter)
        session.mount("http://", adapter)

        return session

    def get(self, url: str) -> NWISResponse:
        """
        Fetch one NWIS document.

        Args:
            url: Fully qualified request URL

        Returns:
            NWISResponse with the decoded body and the service's query time

        Raises:
            NetworkError: The request failed or returned a non-success status
        """
        logger.info(f"Requesting {url}")

        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()

        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.error(f"HTTP error fetching NWIS data: {e}")
            raise NetworkError(f"HTTP {status} for {url}", url=url, status_code=status) from e

        except requests.exceptions.RequestException as e:
            logger.error(f"Error fetching NWIS data: {e}")
            raise NetworkError(f"Request failed for {url}: {e}", url=url) from e

        return NWISResponse(
            url=url,
            text=response.text,
            status_code=response.status_code,
            query_time=self._query_time(response),
        )

    @staticmethod
    def _query_time(response: requests.Response) -> datetime:
        """Time the service answered, from the Date header when present."""
        header = response.headers.get('Date')
        if header:
            try:
                return parsedate_to_datetime(header).astimezone(timezone.utc)
            except (TypeError, ValueError):
                logger.debug(f"Unparseable Date header: {header}")
        return datetime.now(timezone.utc)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "NWISClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
