import io
import logging
import time
from datetime import date, datetime, time as dt_time
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from utils.errors import DecodeError

logger = logging.getLogger(__name__)


def _to_native(value: Any) -> Any:
    """
    Convert a pandas cell into a plain JSON friendly Python value.

    Integral floats become ints, dates and times become ISO strings.
    """
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    if isinstance(value, (datetime, date, dt_time)):
        return value.isoformat()
    return value


def _is_empty(value: Any) -> bool:
    if isinstance(value, str):
        return value == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def read_rows(content: bytes) -> List[Dict[str, Any]]:
    """
    Decode the first sheet of a spreadsheet into row records.

    Headers become keys verbatim. Empty cells are left out of their row
    and rows without any value are skipped.

    Args:
        content: Raw bytes of an .xlsx or .xls workbook

    Returns:
        List of rows in sheet order, each a mapping of header to cell value

    Raises:
        DecodeError: If the bytes cannot be read as a spreadsheet
    """
    if not content:
        logger.error("Uploaded file is empty")
        raise DecodeError("Uploaded file is empty")

    try:
        start_time = time.time()
        # Text such as "NA" or "null" stays text; only blank cells are empty
        df = pd.read_excel(
            io.BytesIO(content), sheet_name=0, keep_default_na=False, na_values=[]
        )
        read_time = time.time() - start_time
    except Exception as e:
        logger.error(
            "Failed to read Excel file",
            extra={"error": str(e), "error_type": type(e).__name__}
        )
        raise DecodeError(f"Failed to read Excel file: {str(e)}") from e

    logger.info(
        "Successfully read Excel file",
        extra={
            "row_count": len(df),
            "column_count": len(df.columns),
            "read_time_seconds": f"{read_time:.2f}"
        }
    )

    headers = [str(column) for column in df.columns]
    rows = []
    for values in df.itertuples(index=False, name=None):
        row = {
            header: _to_native(value)
            for header, value in zip(headers, values)
            if not _is_empty(value)
        }
        if row:
            rows.append(row)
    return rows
