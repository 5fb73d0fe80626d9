"""Shared utilities for cleaning order-details export values.

The vendor workbook mixes real spreadsheet types with display strings:
amounts may arrive as floats or as ``"$1,234.50"``, dates as ``"Mar 26 2025"``
or as Excel dates, and labels carry stray non-breaking spaces.

Examples:
    >>> to_float("$1,234.50")
    1234.5
    >>> to_float("(3.00)")
    -3.0
    >>> normalize_label("  Web Pick Up ")
    'web pick up'
"""

from __future__ import annotations

import math
import re
import unicodedata
from typing import Any, Optional

import pandas as pd

NBSP = "\u00a0"  # Non-breaking space
NNBSP = "\u202f"  # Narrow non-breaking space
ZW = "".join(chr(c) for c in (0x200B, 0x200C, 0x200D, 0xFEFF))  # Zero-width characters

# Everything except digits, separators, sign and parentheses
_CURRENCY_RE = re.compile(r"[^\d,.\-\(\)\s]")


def is_missing(x: Any) -> bool:
    """True for None, NaN and NaT."""
    if x is None:
        return True
    try:
        return bool(pd.isna(x))
    except (TypeError, ValueError):
        return False


def strip_invisibles(x: Any) -> Optional[str]:
    """Remove invisible whitespace characters and collapse spaces.

    Examples:
        >>> strip_invisibles("  To Go  ")
        'To Go'
        >>> strip_invisibles(None) is None
        True
    """
    if is_missing(x):
        return None
    s = str(x)
    s = s.replace("\r", "").replace("\t", " ").replace(NBSP, " ").replace(NNBSP, " ")
    s = re.sub(r"[%s]" % re.escape(ZW), "", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def normalize_label(x: Any) -> str:
    """Normalize a free-text label for case-insensitive matching.

    Strips invisibles and accents, collapses whitespace and lowercases.
    Missing values become the empty string.
    """
    base = strip_invisibles(x)
    if not base:
        return ""
    base = unicodedata.normalize("NFKD", base)
    base = "".join(ch for ch in base if not unicodedata.combining(ch))
    return base.lower()


def to_float(x: Any) -> Optional[float]:
    """Parse a monetary amount as printed in the US-locale export.

    Handles currency symbols, thousands commas and negatives written in
    parentheses. Booleans are not amounts.

    Returns:
        Parsed float, or None when the value is blank or non-numeric.

    Examples:
        >>> to_float(12)
        12.0
        >>> to_float("$ 1,000")
        1000.0
        >>> to_float("n/a") is None
        True
    """
    if is_missing(x) or isinstance(x, bool):
        return None
    if isinstance(x, (int, float)):
        v = float(x)
        return None if math.isinf(v) else v

    s = strip_invisibles(x) or ""
    neg = False
    if s.startswith("(") and s.endswith(")"):
        neg, s = True, s[1:-1].strip()

    s = _CURRENCY_RE.sub("", s)
    s = re.sub(r"\s+", "", s)
    if not s or not re.search(r"\d", s):
        return None

    # 1,234 / 1,234.56: comma is a thousands separator
    if re.fullmatch(r"-?\d{1,3}(?:,\d{3})+(?:\.\d+)?", s):
        s = s.replace(",", "")
    elif "," in s and "." not in s:
        s = s.replace(",", ".")

    try:
        v = float(s)
    except ValueError:
        return None
    return -v if neg else v


def to_snake(s: Any) -> str:
    """Convert a header to snake_case.

    Examples:
        >>> to_snake("Order #")
        'order'
        >>> to_snake("Order Type")
        'order_type'
    """
    s1 = normalize_label(s)
    s1 = re.sub(r"[^\w\s]", " ", s1)
    s1 = re.sub(r"\s+", "_", s1).strip("_")
    return s1


def slugify(value: str) -> str:
    """Filename-friendly slug; "unknown" when nothing is left.

    Examples:
        >>> slugify("Piqua Main St.")
        'piqua-main-st'
    """
    value = normalize_label(value)
    value = re.sub(r"[^\w\s-]", "", value)
    value = re.sub(r"[-\s]+", "-", value).strip("-_")
    return value or "unknown"
