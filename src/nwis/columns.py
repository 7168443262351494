"""
Readable names for NWIS value columns.

X_00060_00000 -> Flow_Inst and X_00060_00000_cd -> Flow_Inst_cd. Names are
derived from the structured column keys carried by the result; a bare data
frame has its keys recovered from the X_ column names.
"""

import logging
import re
from typing import Dict, List, Union

import pandas as pd

from .schemas import ColumnKey, NWISResult

logger = logging.getLogger(__name__)


PARAMETER_NAMES = {
    "00060": "Flow",
    "00065": "GH",
    "00010": "Wtemp",
    "00045": "Precip",
    "00095": "SpecCond",
    "00300": "DO",
    "00400": "pH",
    "63680": "Turb",
    "72019": "GWL",
    "62611": "GWL_NAVD88",
}

STATISTIC_NAMES = {
    "00000": "Inst",
    "00001": "Max",
    "00002": "Min",
    "00003": "Mean",
    "00006": "Sum",
    "00007": "Mode",
    "00008": "Median",
    "00009": "STD",
    "00010": "Var",
    "00011": "Inst",
    "00012": "EquivMean",
    "00021": "HighTide",
    "00022": "LowTide",
    "00023": "HighHighTide",
    "00024": "LowLowTide",
}

# description is matched lazily so X_00060_00000 reads as parameter + statistic
VALUE_COLUMN_PATTERN = re.compile(r"^X_(?:(.+?)_)??(\d{5})(?:_(\d{5}))?$")


def readable_name(key: ColumnKey, parameter_names: Dict[str, str] = PARAMETER_NAMES) -> str:
    """Readable value column name for a key; unknown parameters keep the X_ name."""
    parameter = parameter_names.get(key.parameter_cd)
    if parameter is None:
        return key.value_name

    parts = []
    if key.description:
        parts.append(key.description)
    parts.append(parameter)
    if key.statistic_cd:
        parts.append(STATISTIC_NAMES.get(key.statistic_cd, key.statistic_cd))
    return "_".join(parts)


def column_keys(columns) -> List[ColumnKey]:
    """
    Recover column keys from X_[desc_]P[_S] value column names.

    Used for bare data frames, which carry no keys of their own. Qualifier
    (_cd) columns and names that do not follow the pattern are skipped.
    """
    keys = []
    for column in columns:
        match = VALUE_COLUMN_PATTERN.match(str(column))
        if match is None:
            continue
        description, parameter_cd, statistic_cd = match.groups()
        keys.append(ColumnKey(
            parameter_cd=parameter_cd,
            statistic_cd=statistic_cd,
            description=description,
        ))
    return keys


def rename_nwis_columns(
    result: Union[NWISResult, pd.DataFrame],
    **parameter_names: str
) -> Union[NWISResult, pd.DataFrame]:
    """
    Rename the qualifier/value columns of a WaterML result or its table.

    Args:
        result: Result returned by read_nwis_uv or read_nwis_gwl, or a bare
            data frame with X_ column names
        **parameter_names: Overrides keyed "p" + parameter code,
            e.g. p00060="Discharge"

    Returns:
        New result (or data frame, matching the input) with readable names

    Example:
        >>> renamed = rename_nwis_columns(result, p00065="Stage")
        >>> 'Stage_Inst' in renamed.data.columns
        True
    """
    names = dict(PARAMETER_NAMES)
    for argument, name in parameter_names.items():
        if not argument.startswith("p"):
            raise TypeError(f"Unexpected argument {argument}; use p<parameter code>=<name>")
        names[argument[1:]] = name

    if isinstance(result, pd.DataFrame):
        keys = column_keys(result.columns)
    else:
        keys = result.columns

    mapping = {}
    for key in keys:
        readable = readable_name(key, names)
        mapping[key.value_name] = readable
        mapping[key.code_name] = f"{readable}_cd"

    logger.debug(f"Renaming columns: {mapping}")
    if isinstance(result, pd.DataFrame):
        return result.rename(columns=mapping)
    return result.replace_data(result.data.rename(columns=mapping))
