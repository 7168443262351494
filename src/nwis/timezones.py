"""
Time Zone Handling

NWIS reports local times together with a zone abbreviation (tz_cd) or a
numeric offset. Timestamps are normalized to UTC unless the caller names an
output zone.
"""

import logging
from typing import Optional

import pandas as pd
import pytz

logger = logging.getLogger(__name__)


# Offsets from UTC in hours for the tz_cd codes NWIS emits
TZ_CODE_OFFSETS = {
    "UTC": 0.0,
    "GMT": 0.0,
    "ZULU": 0.0,
    "AST": -4.0,
    "ADT": -3.0,
    "EST": -5.0,
    "EDT": -4.0,
    "CST": -6.0,
    "CDT": -5.0,
    "MST": -7.0,
    "MDT": -6.0,
    "PST": -8.0,
    "PDT": -7.0,
    "AKST": -9.0,
    "AKDT": -8.0,
    "HST": -10.0,
    "HDT": -9.0,
    "SST": -11.0,
    "GST": 10.0,
    "CHST": 10.0,
}


def resolve_timezone(tz: Optional[str]):
    """
    Resolve the output zone for parsed timestamps.

    Args:
        tz: IANA zone name such as "America/Chicago", or "" for UTC

    Returns:
        pytz timezone

    Raises:
        ValueError: Unknown zone name
    """
    if not tz:
        return pytz.UTC
    try:
        return pytz.timezone(tz)
    except pytz.exceptions.UnknownTimeZoneError as e:
        raise ValueError(f"Unknown time zone: {tz}") from e


def parse_offset_timestamps(values: pd.Series, tz: Optional[str] = "") -> pd.Series:
    """
    Parse ISO timestamps that carry their own UTC offset.

    Each row is converted using its own offset, so rows from sites in
    different zones (or either side of a DST change) stay correct.
    """
    zone = resolve_timezone(tz)
    parsed = pd.to_datetime(values, utc=True, errors="coerce", format="ISO8601")
    return parsed.dt.tz_convert(zone)


def localize_with_codes(
    values: pd.Series,
    tz_codes: pd.Series,
    tz: Optional[str] = ""
) -> pd.Series:
    """
    Parse local date/times and place them using each row's tz_cd.

    Rows whose code is unknown or whose value cannot be parsed become NaT.
    """
    zone = resolve_timezone(tz)
    local = pd.to_datetime(values, errors="coerce", format="mixed")
    offsets = pd.to_numeric(tz_codes.astype("string").str.upper().map(TZ_CODE_OFFSETS), errors="coerce")

    unknown = sorted(set(tz_codes[offsets.isna() & tz_codes.notna()].astype(str)))
    if unknown:
        logger.warning(f"Unrecognized tz_cd values: {unknown}")

    utc = local - pd.to_timedelta(offsets, unit="h")
    return utc.dt.tz_localize("UTC").dt.tz_convert(zone)


def zone_code_for_offset(offset: Optional[str], zones: dict) -> Optional[str]:
    """
    Pick the abbreviation whose offset matches a timestamp suffix.

    Args:
        offset: Offset text such as "-05:00", or None
        zones: Mapping of offset text to abbreviation for one site
    """
    if offset is None:
        return None
    if offset in ("Z", "+00:00", "-00:00"):
        return zones.get("+00:00", zones.get("-00:00", "UTC"))
    return zones.get(offset)
