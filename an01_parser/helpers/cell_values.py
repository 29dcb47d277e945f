"""
Helpers for reading individual cells of an AN01 sheet.

Purpose:
    The AN01 workbooks come from many authors and mix number cells with
    numbers typed as text ("1 234,56 €", "12,5"). The functions here turn a
    raw `CellValue` into the value a parser needs and never raise: a cell
    that cannot be read falls back to the documented default of its caller.

Rounding:
    All monetary values and scores go through `round2`, which adds the
    machine epsilon before rounding half up, so that binary representations
    like 2.00499999... of 2.005 still round to 2.01.
"""

import math
import re
import sys
import unicodedata
from typing import Optional

from ..constants import RANK_SENTINEL
from ..models import CellValue, Score

_LEADING_FLOAT_RE = re.compile(r"\s*([-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)")
_LEADING_INT_RE = re.compile(r"\s*([-+]?\d+)")
_AMOUNT_NOISE_RE = re.compile(r"[^0-9,.\-]")


def round2(value: float) -> float:
    """Rounds to 2 decimals, half up, with an epsilon correction."""
    return math.floor((value + sys.float_info.epsilon) * 100 + 0.5) / 100


def is_number(value: CellValue) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_blank(value: CellValue) -> bool:
    """An empty cell or a numeric zero; whitespace-only text is not blank."""
    if is_number(value):
        return value == 0
    return value is None or value == ""


def cell_text(value: CellValue) -> str:
    """Text form of a cell. Integral floats lose their trailing `.0`."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_label(text: str) -> str:
    """Lower-cases, trims and strips diacritics ("Synthèse " -> "synthese")."""
    decomposed = unicodedata.normalize("NFKD", text.strip().casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _parse_leading_float(text: str) -> Optional[float]:
    match = _LEADING_FLOAT_RE.match(text)
    if not match:
        return None
    number = float(match.group(1))
    return number if math.isfinite(number) else None


def _normalize_decimal_separators(text: str) -> str:
    """
    Brings a cleaned amount string to a `float()`-compatible form.

    - both separators present: the right-most is the decimal one;
    - several commas or several periods: thousands separators;
    - a single comma: decimal separator.
    """
    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            return text.replace(".", "").replace(",", ".")
        return text.replace(",", "")
    if text.count(",") > 1:
        return text.replace(",", "")
    if text.count(".") > 1:
        return text.replace(".", "")
    return text.replace(",", ".")


def parse_amount(value: CellValue) -> Optional[float]:
    """
    Reads an amount cell.

    Numbers are used as is. Text keeps only digits, separators and the minus
    sign ("1 234,56 €" -> "1234,56") before conversion.

    Returns:
        The amount, or None when nothing numeric can be read.
    """
    if is_number(value):
        number = float(value)
        return number if math.isfinite(number) else None
    if not isinstance(value, str):
        return None

    cleaned = _AMOUNT_NOISE_RE.sub("", value)
    if not cleaned:
        return None
    return _parse_leading_float(_normalize_decimal_separators(cleaned))


def parse_rank(value: CellValue) -> int:
    """Integer rank of a cell; `RANK_SENTINEL` (99) when missing, zero or negative."""
    rank: Optional[int] = None
    if is_number(value):
        if math.isfinite(value):
            rank = int(value)
    elif isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        if match:
            rank = int(match.group(1))

    if rank is None or rank < 1:
        return RANK_SENTINEL
    return rank


def parse_score(value: CellValue) -> float:
    """Score rounded to 2 decimals; 0 when unparseable. Accepts "12,5"."""
    number: Optional[float] = None
    if is_number(value):
        number = float(value) if math.isfinite(value) else None
    elif isinstance(value, str):
        number = _parse_leading_float(value.replace(",", "."))

    if number is None:
        return 0.0
    return round2(number)


def parse_criterion_score(value: CellValue) -> Optional[Score]:
    """
    Score of a technical criterion.

    Returns:
        None for an empty cell, a rounded float for a number or text
        starting with a number ("3,5", "4/5" -> 4.0), otherwise the text
        itself ("Conforme", "NC").
    """
    if is_number(value):
        return round2(float(value))
    if value is None or value == "":
        return None

    text = str(value)
    number = _parse_leading_float(text.replace(",", ".", 1))
    if number is None:
        return text
    return round2(number)
