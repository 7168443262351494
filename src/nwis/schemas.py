"""
NWIS Data Schemas

Pydantic models for NWIS requests and results.

Design Principles:
- Requests are validated before any URL is built
- Column names are generated from structured keys carried with each result
- Out-of-band metadata travels in NWISResult next to the table
"""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

import pandas as pd
from pydantic import BaseModel, Field, validator


class NWISService(str, Enum):
    """NWIS services this package reads from."""
    INSTANTANEOUS = "iv"
    PEAK = "peak"
    RATING = "rating"
    MEASUREMENTS = "measurements"
    GROUNDWATER = "gwlevels"


# Short names accepted in place of the service path
SERVICE_ALIASES = {
    "uv": NWISService.INSTANTANEOUS,
    "meas": NWISService.MEASUREMENTS,
}


class NWISFormat(str, Enum):
    """Response representations."""
    XML = "xml"
    WML1 = "wml1"
    RDB = "rdb"


class RatingType(str, Enum):
    """Rating table variants published by the rating service."""
    BASE = "base"
    CORRECTED = "corr"
    EXPANDED_SHIFT_ADJUSTED = "exsa"


# Layout of the leading columns of every WaterML table
LEADING_COLUMNS = ["agency_cd", "site_no", "datetime", "tz_cd"]


def _is_missing(value) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip() == ""


class NWISQuery(BaseModel):
    """
    Validated request parameters.

    site_numbers and parameter_cd accept a single string or an ordered list.
    Missing parameter codes (None, "", NaN) mean "not applicable".
    """
    site_numbers: List[str]
    parameter_cd: Optional[List[str]] = None
    start_date: str = ""
    end_date: str = ""
    service: NWISService = NWISService.INSTANTANEOUS
    format: NWISFormat = NWISFormat.XML
    rating_type: RatingType = RatingType.BASE

    @validator('site_numbers', pre=True)
    def normalize_sites(cls, v):
        if isinstance(v, str):
            v = [v]
        sites = [str(site).strip() for site in v]
        if not sites or any(site == "" for site in sites):
            raise ValueError("At least one non-empty site number is required")
        return sites

    @validator('parameter_cd', pre=True)
    def normalize_parameter_codes(cls, v):
        if isinstance(v, (list, tuple)):
            codes = [str(code).strip() for code in v if not _is_missing(code)]
        elif _is_missing(v):
            codes = []
        else:
            codes = [str(v).strip()]

        if not codes:
            return None

        bad = [code for code in codes if len(code) != 5 or not code.isdigit()]
        if bad:
            raise ValueError(f"The following parameter codes appear mistyped: {', '.join(bad)}")
        return codes

    @validator('start_date', 'end_date', pre=True)
    def dates_default_to_empty(cls, v):
        if _is_missing(v):
            return ""
        return str(v).strip()

    @validator('service', pre=True)
    def resolve_service_alias(cls, v):
        if isinstance(v, str) and v in SERVICE_ALIASES:
            return SERVICE_ALIASES[v]
        return v


class ColumnKey(BaseModel):
    """
    Structured identity of a qualifier/value column pair.

    The "X_D_P_S" name is only produced by value_name/code_name:
    X is literal, D the optional method description, P the parameter code
    and S the statistic code.
    """
    parameter_cd: str
    statistic_cd: Optional[str] = None
    description: Optional[str] = None

    class Config:
        frozen = True

    @property
    def value_name(self) -> str:
        parts = ["X"]
        if self.description:
            parts.append(self.description)
        parts.append(self.parameter_cd)
        if self.statistic_cd:
            parts.append(self.statistic_cd)
        return "_".join(parts)

    @property
    def code_name(self) -> str:
        return f"{self.value_name}_cd"


class NWISResult(BaseModel):
    """
    A retrieved table plus the metadata describing how it was obtained.

    comment is set for RDB responses, rating for base rating tables and
    columns for WaterML responses.
    """
    data: pd.DataFrame
    url: str
    site_info: pd.DataFrame = Field(default_factory=pd.DataFrame)
    variable_info: pd.DataFrame = Field(default_factory=pd.DataFrame)
    statistic_info: pd.DataFrame = Field(default_factory=pd.DataFrame)
    query_time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    comment: Optional[List[str]] = None
    rating: Optional[List[str]] = None
    columns: List[ColumnKey] = []

    class Config:
        arbitrary_types_allowed = True

    def __len__(self) -> int:
        return len(self.data)

    @property
    def empty(self) -> bool:
        return self.data.empty

    def replace_data(self, data: pd.DataFrame) -> "NWISResult":
        """Return a copy of this result carrying a different table."""
        return self.model_copy(update={'data': data})


class NWISResponse(BaseModel):
    """Body of one NWIS response and when the service produced it."""
    url: str
    text: str
    status_code: int = 200
    query_time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
