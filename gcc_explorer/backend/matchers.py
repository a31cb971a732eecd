"""
Predicate builders used by the filtering pipeline and the facet engine.

Categorical and keyword matchers support combined include/exclude
selections; the range matcher treats zero and blanks as "no value" and lets
the caller decide whether those rows pass.
"""
import math
import re
from typing import Callable, Iterable

from models import FilterValue, RangeTuple


Matcher = Callable[[str | None], bool]
NumberParser = Callable[[object], float]


# ============================================================================
# Categorical / Keyword Matchers
# ============================================================================

def _split_modes(filter_values: Iterable[FilterValue]) -> tuple[list[str], list[str]]:
    includes: list[str] = []
    excludes: list[str] = []
    for item in filter_values:
        if item.mode == "exclude":
            excludes.append(item.value)
        else:
            includes.append(item.value)
    return includes, excludes


def create_value_matcher(filter_values: list[FilterValue]) -> Matcher:
    """
    Build an exact-match predicate for a categorical dimension.

    - No values configured: everything matches
    - Excluded values never match (checked first)
    - With include values: candidate must be one of them (OR)
    - Only exclude values: anything not excluded matches

    Missing candidates are compared as the empty string.
    """
    if not filter_values:
        return lambda candidate: True

    includes, excludes = _split_modes(filter_values)
    include_set = frozenset(includes)
    exclude_set = frozenset(excludes)

    def match(candidate: str | None) -> bool:
        value = candidate if candidate is not None else ""
        if value in exclude_set:
            return False
        if include_set:
            return value in include_set
        return True

    return match


def create_keyword_matcher(filter_values: list[FilterValue]) -> Matcher:
    """
    Build a case-insensitive substring predicate for free-text dimensions.

    A candidate containing any exclude keyword is rejected; otherwise it must
    contain at least one include keyword, if any are configured.
    """
    if not filter_values:
        return lambda candidate: True

    includes, excludes = _split_modes(filter_values)
    include_keywords = [k.lower() for k in includes]
    exclude_keywords = [k.lower() for k in excludes]

    def match(candidate: str | None) -> bool:
        text = (candidate or "").lower()
        if any(keyword in text for keyword in exclude_keywords):
            return False
        if include_keywords:
            return any(keyword in text for keyword in include_keywords)
        return True

    return match


# ============================================================================
# Number Parsing
# ============================================================================

def normalize_number(value: object) -> float:
    """Coerce a cell to a float. Blanks, junk and non-finite values become 0."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        num = float(value)
    else:
        try:
            num = float(str(value).strip())
        except ValueError:
            return 0.0
    return num if math.isfinite(num) else 0.0


# Scale suffixes seen in revenue exports ("1.2M", "3 Bn", "450 million")
REVENUE_MULTIPLIERS = {
    "k": 1e3,
    "thousand": 1e3,
    "m": 1e6,
    "mn": 1e6,
    "mm": 1e6,
    "million": 1e6,
    "b": 1e9,
    "bn": 1e9,
    "billion": 1e9,
    "t": 1e12,
    "tn": 1e12,
    "trillion": 1e12,
}

_REVENUE_PATTERN = re.compile(r"^(-?\d+(?:\.\d+)?)\s*([a-z]*)$")


def parse_revenue(value: object) -> float:
    """
    Parse a revenue cell that may carry formatting.

    Handles currency symbols and codes, thousands separators, whitespace and
    scale suffixes (K, M/Mn, B/Bn, T and their spelled-out forms).
    Anything unparseable returns 0.

    Examples:
        parse_revenue(1500) -> 1500.0
        parse_revenue("$1,250,000") -> 1250000.0
        parse_revenue("1.2M") -> 1200000.0
        parse_revenue("USD 3 Bn") -> 3000000000.0
    """
    if value is None or value == "" or isinstance(value, (int, float)):
        return normalize_number(value)

    text = str(value).strip().lower()
    text = re.sub(r"^(usd|inr|eur|gbp|us\$)", "", text)
    text = re.sub(r"[$€£₹,\s]", "", text)
    if not text:
        return 0.0

    match = _REVENUE_PATTERN.match(text)
    if not match:
        return 0.0

    number, suffix = match.groups()
    if suffix and suffix not in REVENUE_MULTIPLIERS:
        return 0.0
    result = float(number) * REVENUE_MULTIPLIERS.get(suffix, 1.0)
    return result if math.isfinite(result) else 0.0


# ============================================================================
# Range Matcher
# ============================================================================

def range_filter_match(
    value_range: RangeTuple,
    value: object,
    include_null: bool,
    parser: NumberParser = normalize_number,
) -> bool:
    """
    Check a numeric cell against an inclusive [min, max] range.

    Zero and null/empty cells count as "no value": they match only when
    include_null is set. Cells with a value must fall inside the range
    regardless of the flag.
    """
    num_value = parser(value)
    if num_value == 0 or value is None or value == "":
        return include_null
    low, high = value_range
    return low <= num_value <= high


def create_range_matcher(
    value_range: RangeTuple,
    include_null: bool,
    parser: NumberParser = normalize_number,
) -> Callable[[object], bool]:
    """Bind range_filter_match to one configured range."""
    return lambda value: range_filter_match(value_range, value, include_null, parser)
