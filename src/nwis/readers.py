"""
NWIS Dataset Readers

One entry point per NWIS dataset. Every reader runs the same pipeline:

    build URL -> fetch + import (WaterML or RDB) -> optional post-process

and differs only in its NWISDataset configuration.

Returned tables:
- read_nwis_uv: datetime parsed to UTC (or tz), honoring each row's offset
- read_nwis_peak, read_nwis_rating, read_nwis_meas: RDB tables, dates as text
- read_nwis_gwl: datetime kept as text; historical groundwater records mix
  date-only and date-time values, so uniform parsing is left to the caller
"""

import logging
from typing import Callable, Dict, List, Optional, Union

import numpy as np
import pandas as pd
from pydantic import BaseModel

from .client import NWISClient
from .exceptions import FormatError
from .rdb import import_rdb1
from .schemas import NWISFormat, NWISQuery, NWISResult, NWISService, RatingType
from .url_builder import build_url
from .waterml import import_waterml1

logger = logging.getLogger(__name__)


RATING_MARKER = "//RATING "
PERCENT_DIFF_COLUMN = "diff_from_rating_pc"


def extract_rating_tokens(comment: Optional[List[str]]) -> List[str]:
    """
    Collect the whitespace-separated tokens of every //RATING comment line.

    Returns an empty list when no such line exists.
    """
    tokens: List[str] = []
    for line in comment or []:
        if RATING_MARKER in line:
            tokens.extend(line.split(RATING_MARKER, 1)[1].split())
    return tokens


def coerce_numeric(frame: pd.DataFrame, column: str) -> pd.Series:
    """
    Convert a text column to numbers, failing on anything unparseable.

    Blank values become NaN.

    Raises:
        FormatError: Some non-blank value is not a number
    """
    series = frame[column]
    if pd.api.types.is_numeric_dtype(series):
        return series.astype(float)

    text = series.where(series.isna(), series.astype(str).str.strip())
    text = text.replace("", np.nan)
    converted = pd.to_numeric(text, errors="coerce")

    bad = text[text.notna() & converted.isna()]
    if not bad.empty:
        raise FormatError(
            f"Column {column} holds non-numeric values: {list(bad.unique()[:5])}"
        )
    return converted.astype(float)


def _attach_rating(result: NWISResult, query: NWISQuery) -> NWISResult:
    if query.rating_type != RatingType.BASE:
        return result
    rating = extract_rating_tokens(result.comment)
    if not rating:
        logger.warning(f"No {RATING_MARKER.strip()} line in rating table from {result.url}")
    return result.model_copy(update={'rating': rating})


def _coerce_percent_difference(result: NWISResult, query: NWISQuery) -> NWISResult:
    if PERCENT_DIFF_COLUMN not in result.data.columns:
        return result
    data = result.data.copy()
    data[PERCENT_DIFF_COLUMN] = coerce_numeric(data, PERCENT_DIFF_COLUMN)
    return result.replace_data(data)


class NWISDataset(BaseModel):
    """How one NWIS dataset is requested and shaped."""
    name: str
    service: NWISService
    format: NWISFormat
    as_datetime: bool
    postprocess: Optional[Callable[[NWISResult, NWISQuery], NWISResult]] = None

    class Config:
        arbitrary_types_allowed = True

    @property
    def importer(self) -> Callable[..., NWISResult]:
        return import_rdb1 if self.format == NWISFormat.RDB else import_waterml1


DATASETS: Dict[str, NWISDataset] = {
    "uv": NWISDataset(
        name="uv",
        service=NWISService.INSTANTANEOUS,
        format=NWISFormat.XML,
        as_datetime=True,
    ),
    # no WaterML representation exists for peak, rating or measurements
    "peak": NWISDataset(
        name="peak",
        service=NWISService.PEAK,
        format=NWISFormat.RDB,
        as_datetime=False,
    ),
    "rating": NWISDataset(
        name="rating",
        service=NWISService.RATING,
        format=NWISFormat.RDB,
        as_datetime=False,
        postprocess=_attach_rating,
    ),
    "meas": NWISDataset(
        name="meas",
        service=NWISService.MEASUREMENTS,
        format=NWISFormat.RDB,
        as_datetime=False,
        postprocess=_coerce_percent_difference,
    ),
    "gwl": NWISDataset(
        name="gwl",
        service=NWISService.GROUNDWATER,
        format=NWISFormat.WML1,
        as_datetime=False,
    ),
}


def read_nwis(
    dataset: str,
    site_numbers: Union[str, List[str]],
    parameter_cd: Union[str, List[str], None] = None,
    start_date: str = "",
    end_date: str = "",
    tz: str = "",
    rating_type: str = "base",
    client: Optional[NWISClient] = None
) -> NWISResult:
    """
    Run the retrieval pipeline for a registered dataset.

    Args:
        dataset: Key of DATASETS ("uv", "peak", "rating", "meas", "gwl")
        site_numbers: Site number or list of site numbers
        parameter_cd: Parameter code(s), where the service takes them
        start_date: YYYY-MM-DD or "" for the service default
        end_date: YYYY-MM-DD or "" for the service default
        tz: Output zone for parsed timestamps; "" means UTC
        rating_type: base, corr or exsa (rating dataset only)
        client: HTTP client; one is created from the environment when omitted

    Raises:
        KeyError: Unknown dataset
        ValueError: Invalid request parameters
        NetworkError: The request failed
        ParseError: The response could not be parsed
        FormatError: A column could not be coerced during post-processing
    """
    config = DATASETS[dataset]
    query = NWISQuery(
        site_numbers=site_numbers,
        parameter_cd=parameter_cd,
        start_date=start_date,
        end_date=end_date,
        service=config.service,
        format=config.format,
        rating_type=rating_type,
    )

    client = client or NWISClient()
    url = build_url(query, client.settings)

    logger.info(f"Reading NWIS {config.name} data for {len(query.site_numbers)} site(s)")
    result = config.importer(url, as_datetime=config.as_datetime, tz=tz, client=client)

    if config.postprocess is not None:
        result = config.postprocess(result, query)
    return result


def read_nwis_uv(
    site_numbers: Union[str, List[str]],
    parameter_cd: Union[str, List[str]],
    start_date: str = "",
    end_date: str = "",
    tz: str = "",
    *,
    client: Optional[NWISClient] = None
) -> NWISResult:
    """
    Read instantaneous values.

    Returns a table with agency_cd, site_no, datetime, tz_cd followed by a
    qualifier/value column pair (X_<P>_<S>_cd, X_<P>_<S>) per parameter and
    statistic. datetime is converted to UTC using each row's own offset, so
    multi-site requests spanning zones stay consistent; pass tz (e.g.
    "America/Chicago") to express it in another zone instead.

    Example:
        >>> result = read_nwis_uv('05114000', '00060', '2014-10-10', '2014-10-10')
        >>> result.data.columns[:4].tolist()
        ['agency_cd', 'site_no', 'datetime', 'tz_cd']
    """
    return read_nwis("uv", site_numbers, parameter_cd, start_date, end_date, tz=tz, client=client)


def read_nwis_peak(
    site_number: str,
    start_date: str = "",
    end_date: str = "",
    *,
    client: Optional[NWISClient] = None
) -> NWISResult:
    """Read annual peak flow events. Peak dates may be partial (month or day 00) and stay text."""
    return read_nwis("peak", site_number, None, start_date, end_date, client=client)


def read_nwis_rating(
    site_number: str,
    type: str = "base",
    *,
    client: Optional[NWISClient] = None
) -> NWISResult:
    """
    Read the current rating table for an active streamgage.

    Args:
        site_number: USGS site number
        type: "base", "corr" or "exsa"

    For the base table, the tokens of the "//RATING" comment lines are
    attached as result.rating (empty list when absent).
    """
    return read_nwis("rating", site_number, rating_type=type, client=client)


def read_nwis_meas(
    site_number: str,
    start_date: str = "",
    end_date: str = "",
    tz: str = "",
    *,
    client: Optional[NWISClient] = None
) -> NWISResult:
    """
    Read surface-water field measurements.

    diff_from_rating_pc is returned as a float column.

    Raises:
        FormatError: diff_from_rating_pc holds non-numeric values
    """
    return read_nwis("meas", site_number, None, start_date, end_date, tz=tz, client=client)


def read_nwis_gwl(
    site_numbers: Union[str, List[str]],
    start_date: str = "",
    end_date: str = "",
    *,
    client: Optional[NWISClient] = None
) -> NWISResult:
    """
    Read groundwater level measurements.

    datetime is returned as the raw text the service sent; depending on the
    year a record may carry a date only or a full timestamp.
    """
    return read_nwis("gwl", site_numbers, None, start_date, end_date, client=client)
