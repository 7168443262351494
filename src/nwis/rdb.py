"""
RDB Importer

Parses the USGS tab-delimited RDB format:

    # comment lines
    agency_cd<TAB>site_no<TAB>peak_dt ...     <- header
    5s<TAB>15s<TAB>10d ...                    <- column type declarations
    USGS<TAB>01594440<TAB>1950-03-01 ...      <- data

Type codes end in s (string), n (numeric) or d (date/time); the leading
digits give the field width and are ignored.
"""

import csv
import io
import logging
import re
from datetime import datetime
from typing import List, Optional

import pandas as pd

from .client import NWISClient
from .exceptions import ParseError
from .schemas import NWISResult
from .timezones import localize_with_codes, resolve_timezone

logger = logging.getLogger(__name__)


_TYPE_PATTERN = re.compile(r"^\d*([sndSND])$")


def split_rdb(text: str):
    """
    Split an RDB body into comment lines, header, type row and data lines.

    Raises:
        ParseError: The body is not RDB
    """
    lines = text.splitlines()

    comment: List[str] = []
    index = 0
    while index < len(lines) and lines[index].startswith("#"):
        comment.append(lines[index])
        index += 1

    remaining = [line for line in lines[index:] if line.strip() != ""]
    if not remaining:
        # only comments: the service matched nothing
        return comment, [], [], []

    if remaining[0].lstrip().startswith("<"):
        raise ParseError("Response is HTML/XML, not RDB")

    header = remaining[0].split("\t")
    if len(remaining) < 2:
        raise ParseError("RDB header is not followed by a type declaration row")

    types = remaining[1].split("\t")
    if len(types) != len(header):
        raise ParseError(
            f"RDB type row has {len(types)} fields for {len(header)} columns"
        )

    type_codes = []
    for code in types:
        match = _TYPE_PATTERN.match(code.strip())
        if not match:
            raise ParseError(f"Invalid RDB column type declaration: {code!r}")
        type_codes.append(match.group(1).lower())

    return comment, header, type_codes, remaining[2:]


def _convert_numeric(frame: pd.DataFrame, column: str) -> None:
    present = frame[column].notna()
    converted = pd.to_numeric(frame[column], errors="coerce")
    if converted[present].isna().any():
        bad = frame.loc[present & converted.isna(), column].unique()[:5]
        logger.warning(f"Column {column} declared numeric but holds {list(bad)}; left as text")
        return
    frame[column] = converted


def _convert_dates(frame: pd.DataFrame, column: str, tz: str) -> None:
    if 'tz_cd' in frame.columns:
        frame[column] = localize_with_codes(frame[column], frame['tz_cd'], tz)
    else:
        frame[column] = pd.to_datetime(frame[column], errors="coerce", format="mixed")


def parse_rdb1(
    text: str,
    url: str,
    as_datetime: bool = False,
    tz: str = "",
    query_time: Optional[datetime] = None
) -> NWISResult:
    """
    Parse an RDB document.

    Args:
        text: Response body
        url: URL the body was fetched from
        as_datetime: Parse date-typed columns; local times are placed with
            the row's tz_cd when that column exists
        tz: Output zone for parsed timestamps; "" means UTC
        query_time: When the service produced the response

    Returns:
        NWISResult with data and the leading comment block

    Raises:
        ParseError: Body is not RDB
        ValueError: Unknown tz
    """
    resolve_timezone(tz)
    comment, header, type_codes, data_lines = split_rdb(text)

    if data_lines:
        try:
            data = pd.read_csv(
                io.StringIO("\n".join(data_lines)),
                sep="\t",
                header=None,
                names=header,
                dtype=str,
                keep_default_na=False,
                na_values=[""],
                quoting=csv.QUOTE_NONE,
            )
        except pd.errors.ParserError as e:
            raise ParseError(f"Malformed RDB rows in response from {url}: {e}") from e
    else:
        logger.warning(f"No rows in response from {url}")
        data = pd.DataFrame({name: pd.Series(dtype=object) for name in header})

    for column, code in zip(header, type_codes):
        if code == "n":
            _convert_numeric(data, column)
        elif code == "d" and as_datetime:
            _convert_dates(data, column, tz)

    logger.info(f"Parsed {len(data)} rows and {len(comment)} comment lines")

    extra = {"query_time": query_time} if query_time is not None else {}
    return NWISResult(
        data=data,
        url=url,
        comment=comment,
        **extra
    )


def import_rdb1(
    url: str,
    as_datetime: bool = False,
    tz: str = "",
    client: Optional[NWISClient] = None
) -> NWISResult:
    """
    Fetch and parse an RDB document.

    Raises:
        NetworkError: The request failed
        ParseError: The body is not RDB
    """
    resolve_timezone(tz)
    client = client or NWISClient()
    response = client.get(url)
    return parse_rdb1(response.text, url, as_datetime=as_datetime, tz=tz, query_time=response.query_time)
