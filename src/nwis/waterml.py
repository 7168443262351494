"""
WaterML 1.1 Importer

Parses NWIS WaterML 1.1 time-series responses into one wide table with a
qualifier/value column pair per parameter/statistic combination, plus site,
variable and statistic side tables.

Design Principles:
- Every timestamp is placed using its own reported offset
- Zero matching observations yield an empty table, not an exception
- Malformed markup fails fast with ParseError
"""

import logging
import re
import xml.etree.ElementTree as ET
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .client import NWISClient
from .exceptions import ParseError
from .schemas import LEADING_COLUMNS, ColumnKey, NWISResult
from .timezones import parse_offset_timestamps, resolve_timezone, zone_code_for_offset

logger = logging.getLogger(__name__)


ROOT_TAG = "timeSeriesResponse"

_OFFSET_PATTERN = re.compile(r"(Z|[+-]\d{2}:\d{2})$")


class _Namespace:
    """Qualifies local tag names with the document's namespace."""

    def __init__(self, root: ET.Element):
        self.prefix = root.tag.split("}")[0] + "}" if root.tag.startswith("{") else ""

    def __call__(self, *names: str) -> str:
        return "/".join(self.prefix + name for name in names)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _text(elem: Optional[ET.Element]) -> Optional[str]:
    if elem is None or elem.text is None:
        return None
    return elem.text.strip()


def _float_or_nan(text: Optional[str]) -> float:
    try:
        return float(text)
    except (TypeError, ValueError):
        return np.nan


def _sanitize_description(text: Optional[str]) -> Optional[str]:
    """Reduce a method description to a column-name-safe token."""
    if not text:
        return None
    token = re.sub(r"[^0-9A-Za-z]+", "_", text.replace("[", "").replace("]", "")).strip("_")
    return token or None


def _timestamp_offset(raw: str) -> Optional[str]:
    if "T" not in raw:
        return None
    match = _OFFSET_PATTERN.search(raw)
    return match.group(1) if match else None


def _parse_site(source: ET.Element, ns: _Namespace) -> Dict:
    site_code = source.find(ns("siteCode"))
    default_zone = source.find(ns("timeZoneInfo", "defaultTimeZone"))
    dst_zone = source.find(ns("timeZoneInfo", "daylightSavingsTimeZone"))
    geog = source.find(ns("geoLocation", "geogLocation"))

    site = {
        'station_nm': _text(source.find(ns("siteName"))),
        'site_no': _text(site_code),
        'agency_cd': site_code.get("agencyCode") if site_code is not None else None,
        'network': site_code.get("network") if site_code is not None else None,
        'timeZoneOffset': default_zone.get("zoneOffset") if default_zone is not None else None,
        'timeZoneAbbreviation': default_zone.get("zoneAbbreviation") if default_zone is not None else None,
        'dstTimeZoneOffset': dst_zone.get("zoneOffset") if dst_zone is not None else None,
        'dstTimeZoneAbbreviation': dst_zone.get("zoneAbbreviation") if dst_zone is not None else None,
        'dec_lat_va': _float_or_nan(_text(geog.find(ns("latitude")))) if geog is not None else np.nan,
        'dec_lon_va': _float_or_nan(_text(geog.find(ns("longitude")))) if geog is not None else np.nan,
        'srs': geog.get("srs") if geog is not None else None,
    }

    for prop in source.findall(ns("siteProperty")):
        name = prop.get("name")
        if name:
            site[name] = _text(prop)

    return site


def _site_zones(site: Dict) -> Dict[str, str]:
    zones = {}
    if site.get('timeZoneOffset'):
        zones[site['timeZoneOffset']] = site.get('timeZoneAbbreviation')
    if site.get('dstTimeZoneOffset'):
        zones.setdefault(site['dstTimeZoneOffset'], site.get('dstTimeZoneAbbreviation'))
    return zones


def _parse_variable(variable: ET.Element, ns: _Namespace) -> Tuple[Dict, Optional[Dict]]:
    variable_row = {
        'parameterCd': _text(variable.find(ns("variableCode"))),
        'parameter_nm': _text(variable.find(ns("variableName"))),
        'parameter_desc': _text(variable.find(ns("variableDescription"))),
        'valueType': _text(variable.find(ns("valueType"))),
        'param_units': _text(variable.find(ns("unit", "unitCode"))),
        'noDataValue': _float_or_nan(_text(variable.find(ns("noDataValue")))),
    }

    statistic_row = None
    for option in variable.findall(ns("options", "option")):
        if option.get("name") == "Statistic":
            statistic_row = {
                'statisticCd': option.get("optionCode"),
                'statisticName': _text(option),
            }
            break

    return variable_row, statistic_row


def _parse_values_block(
    block: ET.Element,
    ns: _Namespace,
    site: Dict,
    variable_row: Dict,
    statistic_cd: Optional[str]
) -> Tuple[ColumnKey, pd.DataFrame]:
    description = _sanitize_description(_text(block.find(ns("method", "methodDescription"))))
    key = ColumnKey(
        parameter_cd=variable_row['parameterCd'],
        statistic_cd=statistic_cd,
        description=description,
    )
    zones = _site_zones(site)

    rows = []
    for value in block.findall(ns("value")):
        raw_time = value.get("dateTime", "")
        qualifiers = value.get("qualifiers")
        rows.append({
            'agency_cd': site['agency_cd'],
            'site_no': site['site_no'],
            'datetime': raw_time,
            'tz_cd': zone_code_for_offset(_timestamp_offset(raw_time), zones),
            key.code_name: ",".join(qualifiers.split()) if qualifiers else None,
            key.value_name: _text(value),
        })

    frame = pd.DataFrame(rows, columns=LEADING_COLUMNS + [key.code_name, key.value_name])
    values = pd.to_numeric(frame[key.value_name], errors="coerce")
    no_data = variable_row['noDataValue']
    if not np.isnan(no_data):
        values = values.mask(values == no_data)
    frame[key.value_name] = values.astype(float)

    return key, frame


def _merge_site_frames(frames_by_key: Dict[ColumnKey, List[pd.DataFrame]]) -> pd.DataFrame:
    merged = None
    for frames in frames_by_key.values():
        frame = pd.concat(frames, ignore_index=True) if len(frames) > 1 else frames[0]
        if merged is None:
            merged = frame
        else:
            merged = merged.merge(frame, on=LEADING_COLUMNS, how="outer")
    return merged


def parse_waterml1(
    text: str,
    url: str,
    as_datetime: bool = True,
    tz: str = "",
    query_time: Optional[datetime] = None
) -> NWISResult:
    """
    Parse a WaterML 1.1 document.

    Args:
        text: Response body
        url: URL the body was fetched from
        as_datetime: Convert the datetime column to timezone-aware timestamps
        tz: Output zone for parsed timestamps; "" means UTC
        query_time: When the service produced the response

    Returns:
        NWISResult with data, site_info, variable_info and statistic_info

    Raises:
        ParseError: Body is not a WaterML timeSeriesResponse
        ValueError: Unknown tz
    """
    resolve_timezone(tz)

    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ParseError(f"Response from {url} is not well-formed XML: {e}") from e

    if _local_name(root.tag) != ROOT_TAG:
        raise ParseError(f"Expected {ROOT_TAG} document from {url}, got {_local_name(root.tag)}")

    ns = _Namespace(root)

    sites: Dict[str, Dict] = {}
    variables: Dict[str, Dict] = {}
    statistics: Dict[str, Dict] = {}
    frames_by_site: Dict[str, Dict[ColumnKey, List[pd.DataFrame]]] = {}
    keys: List[ColumnKey] = []

    for series in root.findall(ns("timeSeries")):
        source = series.find(ns("sourceInfo"))
        variable = series.find(ns("variable"))
        if source is None or variable is None:
            raise ParseError(f"timeSeries without sourceInfo/variable in response from {url}")

        site = _parse_site(source, ns)
        variable_row, statistic_row = _parse_variable(variable, ns)
        sites.setdefault(site['site_no'], site)
        variables.setdefault(variable_row['parameterCd'], variable_row)
        if statistic_row:
            statistics.setdefault(statistic_row['statisticCd'], statistic_row)
        statistic_cd = statistic_row['statisticCd'] if statistic_row else None

        for block in series.findall(ns("values")):
            key, frame = _parse_values_block(block, ns, site, variable_row, statistic_cd)
            if frame.empty:
                continue
            if key not in keys:
                keys.append(key)
            frames_by_site.setdefault(site['site_no'], {}).setdefault(key, []).append(frame)

    columns = list(LEADING_COLUMNS)
    for key in keys:
        columns.extend([key.code_name, key.value_name])

    if frames_by_site:
        data = pd.concat(
            [_merge_site_frames(frames) for frames in frames_by_site.values()],
            ignore_index=True
        ).reindex(columns=columns)
    else:
        logger.warning(f"No observations in response from {url}")
        data = pd.DataFrame(columns=columns)

    if as_datetime:
        data['datetime'] = parse_offset_timestamps(data['datetime'], tz)

    data = data.sort_values(['site_no', 'datetime'], kind="stable").reset_index(drop=True)

    logger.info(f"Parsed {len(data)} rows for {len(sites)} sites and {len(keys)} series")

    extra = {"query_time": query_time} if query_time is not None else {}
    return NWISResult(
        data=data,
        url=url,
        site_info=pd.DataFrame(list(sites.values())),
        variable_info=pd.DataFrame(list(variables.values())),
        statistic_info=pd.DataFrame(list(statistics.values()), columns=['statisticCd', 'statisticName']),
        columns=keys,
        **extra
    )


def import_waterml1(
    url: str,
    as_datetime: bool = True,
    tz: str = "",
    client: Optional[NWISClient] = None
) -> NWISResult:
    """
    Fetch and parse a WaterML 1.1 document.

    Raises:
        NetworkError: The request failed
        ParseError: The body is not WaterML
    """
    resolve_timezone(tz)
    client = client or NWISClient()
    response = client.get(url)
    return parse_waterml1(response.text, url, as_datetime=as_datetime, tz=tz, query_time=response.query_time)
