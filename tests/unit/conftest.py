"""Shared fixtures: canned NWIS payloads and a client that never touches the network."""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add src to path
src_path = Path(__file__).parent.parent.parent / 'src'
sys.path.insert(0, str(src_path))

from nwis.config import NWISSettings
from nwis.schemas import NWISResponse


QUERY_TIME = datetime(2014, 10, 10, 12, 0, tzinfo=timezone.utc)


class FakeClient:
    """Stands in for NWISClient; returns one canned body and records URLs."""

    def __init__(self, payload: str, settings: NWISSettings = None):
        self.payload = payload
        self.settings = settings or NWISSettings()
        self.urls = []

    def get(self, url):
        self.urls.append(url)
        return NWISResponse(url=url, text=self.payload, query_time=QUERY_TIME)


def rdb(comment, header, types, rows):
    """Assemble an RDB body from comment lines and tab-separated fields."""
    lines = list(comment)
    lines.append("\t".join(header))
    lines.append("\t".join(types))
    lines.extend("\t".join(row) for row in rows)
    return "\n".join(lines) + "\n"


WATERML_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<ns1:timeSeriesResponse xmlns:ns1="http://www.cuahsi.org/waterML/1.1/" '
    'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">\n'
    '  <ns1:queryInfo><ns1:note title="filter:sites">04024430,01594440</ns1:note></ns1:queryInfo>\n'
)

WATERML_FOOTER = '</ns1:timeSeriesResponse>\n'


def _source_info(site_no, name, std, dst, lat, lon):
    return f"""
    <ns1:sourceInfo xsi:type="ns1:SiteInfoType">
      <ns1:siteName>{name}</ns1:siteName>
      <ns1:siteCode network="NWIS" agencyCode="USGS">{site_no}</ns1:siteCode>
      <ns1:timeZoneInfo>
        <ns1:defaultTimeZone zoneOffset="{std[0]}" zoneAbbreviation="{std[1]}"/>
        <ns1:daylightSavingsTimeZone zoneOffset="{dst[0]}" zoneAbbreviation="{dst[1]}"/>
      </ns1:timeZoneInfo>
      <ns1:geoLocation>
        <ns1:geogLocation srs="EPSG:4326" xsi:type="ns1:LatLonPointType">
          <ns1:latitude>{lat}</ns1:latitude>
          <ns1:longitude>{lon}</ns1:longitude>
        </ns1:geogLocation>
      </ns1:geoLocation>
      <ns1:siteProperty name="siteTypeCd">ST</ns1:siteProperty>
      <ns1:siteProperty name="hucCd">04010301</ns1:siteProperty>
    </ns1:sourceInfo>"""


def _variable(code, name, description, unit, statistic=None):
    options = ""
    if statistic:
        options = (
            f'<ns1:options><ns1:option name="Statistic" optionCode="{statistic[0]}">'
            f'{statistic[1]}</ns1:option></ns1:options>'
        )
    return f"""
    <ns1:variable ns1:oid="45807197">
      <ns1:variableCode network="NWIS" vocabulary="NWIS:UnitValues" default="true">{code}</ns1:variableCode>
      <ns1:variableName>{name}</ns1:variableName>
      <ns1:variableDescription>{description}</ns1:variableDescription>
      <ns1:valueType>Derived Value</ns1:valueType>
      <ns1:unit><ns1:unitCode>{unit}</ns1:unitCode></ns1:unit>
      {options}
      <ns1:noDataValue>-999999.0</ns1:noDataValue>
    </ns1:variable>"""


def _values(values, method=""):
    body = "\n".join(
        f'      <ns1:value qualifiers="{qualifiers}" dateTime="{stamp}">{value}</ns1:value>'
        for stamp, value, qualifiers in values
    )
    return f"""
    <ns1:values>
{body}
      <ns1:method methodID="69928"><ns1:methodDescription>{method}</ns1:methodDescription></ns1:method>
    </ns1:values>"""


CENTRAL = (("-06:00", "CST"), ("-05:00", "CDT"))
EASTERN = (("-05:00", "EST"), ("-04:00", "EDT"))

DISCHARGE = ("00060", "Streamflow, ft&#179;/s", "Discharge, cubic feet per second", "ft3/s")
GAGE_HEIGHT = ("00065", "Gage height, ft", "Gage height, feet", "ft")
INSTANTANEOUS = ("00000", "Instantaneous")


UV_TWO_SITES = (
    WATERML_HEADER
    + '  <ns1:timeSeries name="USGS:04024430:00060:00000">'
    + _source_info("04024430", "NEMADJI RIVER NEAR SOUTH SUPERIOR, WI", *CENTRAL, 46.6332, -92.0938)
    + _variable(*DISCHARGE, statistic=INSTANTANEOUS)
    + _values([
        # fall-back night: 01:xx occurs twice, once per offset
        ("2013-11-03T01:00:00.000-06:00", "77.0", "A"),
        ("2013-11-03T00:45:00.000-05:00", "79.0", "A"),
        ("2013-11-03T01:45:00.000-05:00", "78.0", "A"),
    ])
    + '\n  </ns1:timeSeries>\n'
    + '  <ns1:timeSeries name="USGS:01594440:00060:00000">'
    + _source_info("01594440", "PATUXENT RIVER NEAR BOWIE, MD", *EASTERN, 38.9559, -76.6938)
    + _variable(*DISCHARGE, statistic=INSTANTANEOUS)
    + _values([
        ("2014-10-10T00:00:00.000-04:00", "1030", "P"),
        ("2014-10-10T00:15:00.000-04:00", "-999999", "P Ice"),
    ])
    + '\n  </ns1:timeSeries>\n'
    + '  <ns1:timeSeries name="USGS:01594440:00065:00000">'
    + _source_info("01594440", "PATUXENT RIVER NEAR BOWIE, MD", *EASTERN, 38.9559, -76.6938)
    + _variable(*GAGE_HEIGHT, statistic=INSTANTANEOUS)
    + _values([
        ("2014-10-10T00:00:00.000-04:00", "2.50", "P"),
    ])
    + '\n  </ns1:timeSeries>\n'
    + WATERML_FOOTER
)


UV_WITH_METHODS = (
    WATERML_HEADER
    + '  <ns1:timeSeries name="USGS:05114000:00060:00000">'
    + _source_info("05114000", "SOURIS RIVER NR SHERWOOD, ND", *CENTRAL, 48.99, -101.96)
    + _variable(*DISCHARGE, statistic=INSTANTANEOUS)
    + _values([("2014-10-10T00:00:00.000-05:00", "12.0", "P")], method="[Discontinued 2014-11-27]")
    + _values([("2014-10-10T00:00:00.000-05:00", "13.0", "P")], method="From multiparameter sonde")
    + '\n  </ns1:timeSeries>\n'
    + WATERML_FOOTER
)


GWL_MIXED = (
    WATERML_HEADER
    + '  <ns1:timeSeries name="USGS:434400121275801:72019">'
    + _source_info("434400121275801", "23S/07E-16DCB01", ("-08:00", "PST"), ("-07:00", "PDT"), 43.73, -121.46)
    + _variable("72019", "Depth to water level, ft below land surface",
                "Depth to water level, feet below land surface", "ft")
    + _values([
        ("2015-06-01T12:00:00", "13.95", "A"),
        ("2010-05-01", "14.20", "A"),
    ])
    + '\n  </ns1:timeSeries>\n'
    + WATERML_FOOTER
)


WATERML_EMPTY = WATERML_HEADER + WATERML_FOOTER


PEAK_RDB = rdb(
    [
        "# U.S. Geological Survey",
        "# National Water Information System",
        "#",
        "# Retrieved: 2014-09-18 13:01:18 EDT",
    ],
    ["agency_cd", "site_no", "peak_dt", "peak_tm", "peak_va", "peak_cd", "gage_ht", "gage_ht_cd"],
    ["5s", "15s", "10d", "6s", "8s", "27s", "8s", "13s"],
    [
        ["USGS", "01594440", "1890-00-00", "", "5000", "7", "", ""],
        ["USGS", "01594440", "1950-03-01", "", "12100", "", "14.36", ""],
        ["USGS", "01594440", "1972-06-23", "", "37000", "", "22.10", ""],
    ],
)


RATING_BASE_RDB = rdb(
    [
        "# //UNITED STATES GEOLOGICAL SURVEY       http://water.usgs.gov/",
        "# //NATIONAL WATER INFORMATION SYSTEM     http://water.usgs.gov/data.html",
        "# //FILE TYPE=\"NWIS RATING\"",
        "# //RATING  EXSA  CORR",
    ],
    ["INDEP", "SHIFT", "DEP", "STOR"],
    ["16N", "16N", "16N", "1S"],
    [
        ["0.20", "0.00", "0.00", "*"],
        ["0.21", "0.00", "0.01", ""],
        ["0.22", "0.00", "0.03", ""],
    ],
)


RATING_NO_MARKER_RDB = rdb(
    ["# //UNITED STATES GEOLOGICAL SURVEY       http://water.usgs.gov/"],
    ["INDEP", "DEP"],
    ["16N", "16N"],
    [["0.20", "0.00"]],
)


def meas_rdb(percent_values):
    return rdb(
        [
            "# U.S. Geological Survey",
            "# Surface water measurements",
        ],
        ["agency_cd", "site_no", "measurement_nu", "measurement_dt", "tz_cd",
         "gage_height_va", "discharge_va", "diff_from_rating_pc"],
        ["5s", "15s", "6s", "19d", "6s", "12n", "12n", "5s"],
        [
            ["USGS", "01594440", str(number), f"2014-0{number}-12 10:05:00", "EDT", "3.10", "250", value]
            for number, value in enumerate(percent_values, start=1)
        ],
    )


@pytest.fixture
def uv_client():
    return FakeClient(UV_TWO_SITES)


@pytest.fixture
def gwl_client():
    return FakeClient(GWL_MIXED)
