"""Spreadsheet / CSV decoding into loosely-typed row records.

Every input (inventory and the three management reports) goes through
``read_table``. Only the first sheet of a workbook is read, the first row
is the header, and empty cells are left out of the row mapping entirely
so "column missing" and "cell empty" look the same to callers.
"""

import asyncio
import csv
import datetime
import io
import logging
import math
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)

_ZIP_MAGIC = b"PK\x03\x04"
_OLE_MAGIC = b"\xd0\xcf\x11\xe0"
_CSV_ENCODINGS = ("utf-8-sig", "cp1254", "latin-1")
_CSV_DELIMITERS = (",", ";", "\t")


class IngestionError(ValueError):
    """Raised when an input file cannot be decoded into rows."""


def _read_source(source) -> tuple[bytes, str]:
    """Return (content, display name) for a path, bytes, or file-like object."""
    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            return path.read_bytes(), path.name
        except OSError as exc:
            raise IngestionError(f"Could not read {path}: {exc}") from exc
    if isinstance(source, (bytes, bytearray)):
        return bytes(source), ""
    name = getattr(source, "name", "") or ""
    content = source.read()
    if isinstance(content, str):
        content = content.encode("utf-8")
    return content, Path(str(name)).name


def _to_cell(value):
    """Convert one decoded cell to str/int/float, ISO date string, or None."""
    if value is None:
        return None
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return int(value)
        return value
    if value is pd.NaT:
        return None
    if isinstance(value, datetime.datetime):
        # Timezone-aware cells are shifted to the reader's local calendar day.
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date().isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _records(df: pd.DataFrame):
    headers = [str(c).strip() for c in df.columns]
    for values in df.itertuples(index=False, name=None):
        row = {}
        for header, value in zip(headers, values):
            cell = _to_cell(value)
            if cell is not None:
                row[header] = cell
        if row:
            yield row


def _read_workbook(content: bytes, name: str) -> pd.DataFrame:
    try:
        return pd.read_excel(io.BytesIO(content), sheet_name=0, engine="openpyxl", dtype=object)
    except Exception as exc:
        raise IngestionError(f"Could not read workbook {name or '<upload>'}: {exc}") from exc


def _separator(text: str):
    """Return None so pandas sniffs the delimiter, or "," for a one-column header."""
    header = text.split("\n", 1)[0]
    return None if any(d in header for d in _CSV_DELIMITERS) else ","


def _csv_frame(text: str, label: str) -> pd.DataFrame:
    sep = _separator(text)
    width = len(pd.read_csv(io.StringIO(text), sep=sep, engine="python", nrows=0).columns)

    def truncate(fields):
        logger.warning("%s: row with %d fields cut to %d columns", label, len(fields), width)
        return fields[:width]

    return pd.read_csv(
        io.StringIO(text),
        sep=sep,
        engine="python",
        dtype=str,
        keep_default_na=False,
        on_bad_lines=truncate,
    )


def _read_csv(content: bytes, name: str) -> pd.DataFrame:
    label = name or "<upload>"
    if not content.strip():
        raise IngestionError(f"{label} is empty")
    for enc in _CSV_ENCODINGS:
        try:
            text = content.decode(enc)
        except UnicodeDecodeError:
            continue
        try:
            return _csv_frame(text, label)
        except pd.errors.EmptyDataError as exc:
            raise IngestionError(f"{label} has no header row") from exc
        except (pd.errors.ParserError, csv.Error) as exc:
            raise IngestionError(f"{label} is not a well-formed CSV file: {exc}") from exc
    raise IngestionError(f"Could not decode {label}. Try saving as UTF-8.")


def read_table(source) -> list[dict]:
    """
    Decode a CSV or XLSX file into a list of row mappings.

    Parameters
    ----------
    source : path, bytes, or file-like object (optionally with a .name)

    Returns
    -------
    list of dict: header -> cell value (str, int, float, or "YYYY-MM-DD")

    Raises
    ------
    IngestionError if the file is unreadable, corrupt or in an unsupported format.
    """
    content, name = _read_source(source)
    lowered = name.lower()

    if content.startswith(_OLE_MAGIC) or lowered.endswith(".xls"):
        raise IngestionError(f"{name or '<upload>'}: legacy .xls workbooks are not supported, save as .xlsx")
    if content.startswith(_ZIP_MAGIC) or lowered.endswith((".xlsx", ".xlsm")):
        df = _read_workbook(content, name)
    else:
        df = _read_csv(content, name)

    rows = list(_records(df))
    logger.info("Read %d rows from %s", len(rows), name or "<upload>")
    return rows


async def read_table_async(source) -> list[dict]:
    """Decode ``source`` off the event loop so several files can be read at once."""
    return await asyncio.to_thread(read_table, source)
