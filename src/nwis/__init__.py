"""
USGS NWIS Data Retrieval

Readers for instantaneous values, peak flows, rating tables, field
measurements and groundwater levels from the USGS National Water
Information System web services. Each reader returns an NWISResult: a
pandas DataFrame plus the URL, site/variable/statistic tables and query
time describing it.
"""

from .client import NWISClient, ParameterCodes
from .columns import rename_nwis_columns
from .config import NWISSettings, configure_logging, get_settings
from .exceptions import FormatError, NetworkError, NWISError, ParseError
from .rdb import import_rdb1, parse_rdb1
from .readers import (
    read_nwis,
    read_nwis_gwl,
    read_nwis_meas,
    read_nwis_peak,
    read_nwis_rating,
    read_nwis_uv,
)
from .schemas import (
    ColumnKey,
    NWISFormat,
    NWISQuery,
    NWISResult,
    NWISService,
    RatingType,
)
from .url_builder import construct_nwis_url
from .waterml import import_waterml1, parse_waterml1

__all__ = [
    'NWISClient',
    'ParameterCodes',
    'NWISSettings',
    'configure_logging',
    'get_settings',
    'NWISError',
    'NetworkError',
    'ParseError',
    'FormatError',
    'ColumnKey',
    'NWISFormat',
    'NWISQuery',
    'NWISResult',
    'NWISService',
    'RatingType',
    'construct_nwis_url',
    'import_waterml1',
    'parse_waterml1',
    'import_rdb1',
    'parse_rdb1',
    'read_nwis',
    'read_nwis_uv',
    'read_nwis_peak',
    'read_nwis_rating',
    'read_nwis_meas',
    'read_nwis_gwl',
    'rename_nwis_columns',
]
