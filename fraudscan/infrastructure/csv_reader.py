"""CSV upload decoding into raw transaction records"""

import io
import re
from typing import Dict, List, Optional
import pandas as pd
from fraudscan.domain.models import RawRecord
from fraudscan.domain.exceptions import CSVParseError, NoDataError

# Normalised header name -> RawRecord field
COLUMN_ALIASES: Dict[str, str] = {
    "ba": "business_area",
    "businessarea": "business_area",
    "monthly": "period",
    "month": "period",
    "period": "period",
    "actcode": "activity_code",
    "activitycode": "activity_code",
    "amount": "amount",
}

NO_DATA_MESSAGE = "No data found in CSV file or the format is invalid"


def _normalise_header(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "", str(name).lower())


def _resolve_columns(columns) -> Dict[str, Optional[str]]:
    """Map each RawRecord field to the first matching CSV column"""
    resolved: Dict[str, Optional[str]] = {
        "business_area": None,
        "period": None,
        "activity_code": None,
        "amount": None,
    }
    for column in columns:
        target = COLUMN_ALIASES.get(_normalise_header(column))
        if target and resolved[target] is None:
            resolved[target] = column
    return resolved


def _cell(row: dict, column: Optional[str]) -> str:
    if column is None:
        return ""
    value = row.get(column)
    # Short rows come back as NaN even with dtype=str
    return value if isinstance(value, str) else ""


def _read_frame(content: bytes) -> pd.DataFrame:
    options = dict(dtype=str, keep_default_na=False, skip_blank_lines=True, encoding="utf-8-sig")
    width = len(pd.read_csv(io.BytesIO(content), nrows=0, **options).columns)

    # Rows wider than the header keep their leading cells instead of shifting columns
    return pd.read_csv(
        io.BytesIO(content),
        index_col=False,
        engine="python",
        on_bad_lines=lambda fields: fields[:width],
        **options,
    )


def read_transactions(content: bytes) -> List[RawRecord]:
    """
    Decode an uploaded CSV (with header row) into raw records.

    All cells are kept as text; unknown columns are ignored and missing
    ones read as empty strings. Cells beyond the header width are dropped.

    Raises:
        NoDataError: File is empty or has a header but no data rows
        CSVParseError: File cannot be decoded or tokenised
    """
    if not content or not content.strip():
        raise NoDataError(NO_DATA_MESSAGE)

    try:
        df = _read_frame(content)
    except pd.errors.EmptyDataError as e:
        raise NoDataError(NO_DATA_MESSAGE) from e
    except (pd.errors.ParserError, UnicodeDecodeError, ValueError) as e:
        raise CSVParseError(f"Error parsing CSV: {e}") from e

    if df.empty:
        raise NoDataError(NO_DATA_MESSAGE)

    columns = _resolve_columns(df.columns)

    return [
        RawRecord(
            business_area=_cell(row, columns["business_area"]),
            period=_cell(row, columns["period"]),
            activity_code=_cell(row, columns["activity_code"]),
            amount=_cell(row, columns["amount"]),
        )
        for row in df.to_dict(orient="records")
    ]
