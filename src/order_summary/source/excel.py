"""Order-details workbook parsing.

Reads the vendor's "Export all data to Excel" workbook into order records.

What it does:
- Reads the first sheet only.
- Detects the header row (the first one carrying both "Date" and "Time");
  title rows above it are ignored.
- Maps headers to logical names (``Order #`` -> order_number, ``Type`` ->
  order_type, ``Payment`` -> payment_method, ``Tips`` -> tip, ...).
- Drops completely empty rows. Totals/footer rows are kept here and fall
  out later because they carry no parseable date or time.

Single file:
  python -m order_summary.source.excel path/to/order-details-2025-03-26.xlsx
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Iterable

import pandas as pd

from order_summary.exceptions import ParseFailedError
from order_summary.orders.cleaning import is_missing, strip_invisibles, to_snake
from order_summary.orders.records import OrderRecord

logger = logging.getLogger(__name__)

# snake_case header -> logical column
HEADER_MAP = {
    "date": "date",
    "order_date": "date",
    "time": "time",
    "order_time": "time",
    "order": "order_number",
    "order_number": "order_number",
    "order_no": "order_number",
    "type": "order_type",
    "order_type": "order_type",
    "payment": "payment_method",
    "payment_type": "payment_method",
    "payment_method": "payment_method",
    "total": "total",
    "order_total": "total",
    "tips": "tip",
    "tip": "tip",
}

REQUIRED_COLUMNS = ["date", "time", "order_type", "payment_method", "total"]


def detect_header_row(
    df_no_header: pd.DataFrame, sentinels: Iterable[str] = ("date", "time")
) -> int:
    """Return the index of the first row containing every sentinel as a cell."""
    wanted = set(sentinels)
    max_scan = min(40, len(df_no_header))
    for i in range(max_scan):
        cells = {to_snake(c) for c in df_no_header.iloc[i].tolist() if not is_missing(c)}
        if wanted <= cells:
            return i
    return 0


def normalize_headers(columns: Iterable[Any]) -> list[str]:
    """Map raw headers to logical names; unknown headers become snake_case.

    Only the first occurrence of a logical name is kept as such, later
    duplicates get a numeric suffix.
    """
    out: list[str] = []
    seen: dict[str, int] = {}
    for c in columns:
        snake = to_snake(c) if not is_missing(c) else ""
        name = HEADER_MAP.get(snake, snake or "unnamed")
        n = seen.get(name, 0)
        out.append(name if n == 0 else f"{name}_{n}")
        seen[name] = n + 1
    return out


def read_order_details(path: str | Path) -> pd.DataFrame:
    """Load an order-details workbook into a DataFrame with logical columns.

    Args:
        path: Path to the .xlsx export.

    Returns:
        DataFrame with at least REQUIRED_COLUMNS; ``order_number`` and
        ``tip`` are added empty when the export lacks them.

    Raises:
        ParseFailedError: If the file cannot be read or lacks required columns.
    """
    path = Path(path)
    try:
        raw = pd.read_excel(path, sheet_name=0, header=None, dtype=object, engine="openpyxl")
    except (OSError, ValueError, KeyError) as e:
        raise ParseFailedError(f"Could not read workbook {path}: {e}") from e
    except Exception as e:  # openpyxl raises zipfile/InvalidFileException on corrupt files
        raise ParseFailedError(f"Could not decode workbook {path}: {e}") from e

    if raw.empty:
        raise ParseFailedError(f"Workbook {path} is empty")

    header_idx = detect_header_row(raw)
    df = raw.iloc[header_idx + 1 :].copy()
    df.columns = normalize_headers(raw.iloc[header_idx].tolist())
    df = df.dropna(how="all").reset_index(drop=True)

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ParseFailedError(
            f"Workbook {path} is missing required columns {missing}. "
            f"Found: {list(df.columns)}"
        )
    for optional in ("order_number", "tip"):
        if optional not in df.columns:
            df[optional] = None

    logger.info("Read %d row(s) from %s", len(df), path.name)
    return df


def _text(value: Any) -> str:
    return strip_invisibles(value) or ""


def _order_number(value: Any) -> str | None:
    if is_missing(value):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return _text(value) or None


def frame_to_records(df: pd.DataFrame) -> list[OrderRecord]:
    """Convert a DataFrame from ``read_order_details`` into order records."""
    records = []
    for row in df.to_dict(orient="records"):
        records.append(
            OrderRecord(
                date=row.get("date"),
                time_of_day=row.get("time"),
                channel=_text(row.get("order_type")),
                payment_method=_text(row.get("payment_method")),
                total=row.get("total"),
                tip=row.get("tip"),
                order_number=_order_number(row.get("order_number")),
            )
        )
    return records


def load_orders(path: str | Path) -> list[OrderRecord]:
    """Read a workbook straight into order records.

    Raises:
        ParseFailedError: If the workbook cannot be decoded.
    """
    return frame_to_records(read_order_details(path))


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Print the rows of an order-details export")
    p.add_argument("path", type=Path)
    p.add_argument("-v", "--verbose", action="store_true")
    args = p.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )
    try:
        df = read_order_details(args.path)
    except ParseFailedError as e:
        logger.error("%s", e)
        return 1
    print(df.to_string(index=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
