"""URL builders for the NWIS web services."""

import logging
from typing import List, Optional, Union

from .config import NWISSettings, get_settings
from .schemas import NWISFormat, NWISQuery, NWISService

logger = logging.getLogger(__name__)


# format query value per representation, for services offering both
_WATERSERVICES_FORMATS = {
    NWISService.INSTANTANEOUS: {
        NWISFormat.XML: "waterml,1.1",
        NWISFormat.WML1: "waterml,1.1",
        NWISFormat.RDB: "rdb,1.0",
    },
    NWISService.GROUNDWATER: {
        NWISFormat.XML: "waterml",
        NWISFormat.WML1: "waterml",
        NWISFormat.RDB: "rdb,1.0",
    },
}


def _date_range(query: NWISQuery, start_key: str, end_key: str) -> str:
    url = ""
    if query.start_date:
        url += f"&{start_key}={query.start_date}"
    if query.end_date:
        url += f"&{end_key}={query.end_date}"
    return url


def build_waterservices_url(query: NWISQuery, base_url: str) -> str:
    fmt = _WATERSERVICES_FORMATS[query.service][query.format]
    url = f"{base_url}{query.service.value}/?site={','.join(query.site_numbers)}&format={fmt}"
    if query.parameter_cd and query.service != NWISService.GROUNDWATER:
        url += f"&parameterCd={','.join(query.parameter_cd)}"
    return url + _date_range(query, "startDT", "endDT")


def build_peak_url(query: NWISQuery, peak_url: str) -> str:
    url = f"{peak_url}?site_no={','.join(query.site_numbers)}&range_selection=date_range&format=rdb"
    return url + _date_range(query, "begin_date", "end_date")


def build_measurements_url(query: NWISQuery, base_url: str) -> str:
    url = (
        f"{base_url}nwis/measurements?site_no={','.join(query.site_numbers)}"
        f"&range_selection=date_range&format=rdb"
    )
    return url + _date_range(query, "begin_date", "end_date")


def build_rating_url(query: NWISQuery, base_url: str) -> str:
    return (
        f"{base_url}nwisweb/get_ratings?site_no={','.join(query.site_numbers)}"
        f"&file_type={query.rating_type.value}"
    )


def construct_nwis_url(
    site_numbers: Union[str, List[str]],
    parameter_cd: Union[str, List[str], None] = None,
    start_date: str = "",
    end_date: str = "",
    service: str = "iv",
    format: str = "xml",
    rating_type: str = "base",
    settings: Optional[NWISSettings] = None
) -> str:
    """
    Build the request URL for one NWIS service.

    Args:
        site_numbers: Site number or ordered list of site numbers
        parameter_cd: Parameter code(s); None, "" or NaN omits the component
        start_date: YYYY-MM-DD, or "" for the service default
        end_date: YYYY-MM-DD, or "" for the service default
        service: One of iv (uv), peak, rating, measurements (meas), gwlevels
        format: xml/wml1 or rdb; only iv and gwlevels offer both
        rating_type: base, corr or exsa; rating service only
        settings: Service addresses; read from the environment when omitted

    Returns:
        Fully qualified request URL

    Raises:
        ValueError: Mistyped parameter codes or unknown service/format/rating type

    Example:
        >>> construct_nwis_url('05114000', '00060', '2014-10-10', '2014-10-10', 'uv')
        'https://waterservices.usgs.gov/nwis/iv/?site=05114000&format=waterml,1.1&parameterCd=00060&startDT=2014-10-10&endDT=2014-10-10'
    """
    query = NWISQuery(
        site_numbers=site_numbers,
        parameter_cd=parameter_cd,
        start_date=start_date,
        end_date=end_date,
        service=service,
        format=format,
        rating_type=rating_type,
    )
    return build_url(query, settings)


def build_url(query: NWISQuery, settings: Optional[NWISSettings] = None) -> str:
    """Build the request URL for an already validated query."""
    settings = settings or get_settings()

    if query.service in _WATERSERVICES_FORMATS:
        url = build_waterservices_url(query, settings.waterservices_url)
    elif query.service == NWISService.PEAK:
        url = build_peak_url(query, settings.peak_url)
    elif query.service == NWISService.MEASUREMENTS:
        url = build_measurements_url(query, settings.waterdata_url)
    else:
        url = build_rating_url(query, settings.waterdata_url)

    logger.debug(f"Built {query.service.value} URL: {url}")
    return url
