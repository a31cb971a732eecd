"""
Default filter state, slider bounds and the active-filter summary.
"""
from typing import Any

import numpy as np

from models import Account, BaseRanges, Center, Filters, RangeBounds
from matchers import normalize_number, parse_revenue


DEFAULT_RANGE: tuple[float, float] = (0, 1_000_000)

RANGE_FIELDS = [
    "account_revenue_range",
    "account_years_in_india_range",
    "account_first_center_year_range",
    "center_inc_year_range",
]

INCLUDE_NULL_FIELDS = [
    "include_null_revenue",
    "include_null_years_in_india",
    "include_null_first_center_year",
    "include_null_center_inc_year",
]

LIST_FIELDS = [
    name for name in Filters.model_fields
    if name not in RANGE_FIELDS and name not in INCLUDE_NULL_FIELDS
]

# Filters range field -> BaseRanges attribute
RANGE_BOUNDS_FIELDS = {
    "account_revenue_range": "revenue_range",
    "account_years_in_india_range": "years_in_india_range",
    "account_first_center_year_range": "first_center_year_range",
    "center_inc_year_range": "center_inc_year_range",
}


# ============================================================================
# Base Ranges
# ============================================================================

def _min_max_range(values: list[float]) -> RangeBounds:
    """Min/max over the positive finite values, or the default range."""
    arr = np.asarray(values, dtype=float)
    arr = arr[np.isfinite(arr) & (arr > 0)]
    if arr.size == 0:
        return RangeBounds(min=DEFAULT_RANGE[0], max=DEFAULT_RANGE[1])
    return RangeBounds(min=float(arr.min()), max=float(arr.max()))


def calculate_base_ranges(accounts: list[Account], centers: list[Center]) -> BaseRanges:
    """
    Compute slider bounds from the full (unfiltered) dataset.

    Zero and unparseable cells are "no value" and never widen a range.
    """
    return BaseRanges(
        revenue_range=_min_max_range([parse_revenue(a.account_hq_revenue) for a in accounts]),
        years_in_india_range=_min_max_range([normalize_number(a.years_in_india) for a in accounts]),
        first_center_year_range=_min_max_range(
            [normalize_number(a.account_first_center_year) for a in accounts]
        ),
        center_inc_year_range=_min_max_range([normalize_number(c.center_inc_year) for c in centers]),
    )


def bounds_as_range(bounds: RangeBounds) -> tuple[float, float]:
    return (bounds.min, bounds.max)


# ============================================================================
# Default / Reset State
# ============================================================================

def create_default_filters(base_ranges: BaseRanges | None = None) -> Filters:
    """
    Fresh filter state: no selections, every include-null flag on.

    Ranges span the given base ranges, or [0, 1_000_000] when none are given.
    """
    if base_ranges is None:
        return Filters()

    return Filters(**{
        field: bounds_as_range(getattr(base_ranges, bounds_field))
        for field, bounds_field in RANGE_BOUNDS_FIELDS.items()
    })


def _coerce_range(value: Any) -> tuple[float, float] | None:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        return None
    low, high = (normalize_number(v) for v in value)
    return (low, high)


def with_filter_defaults(partial: dict | Filters | None) -> Filters:
    """
    Merge a partial or legacy filter blob over the defaults.

    Accepts camelCase or snake_case keys. Unknown keys are ignored and
    malformed ranges fall back to the default range.
    """
    if isinstance(partial, Filters):
        return partial.model_copy(deep=True)
    if not partial:
        return create_default_filters()

    defaults = create_default_filters()
    known_keys = {}
    for name, field in Filters.model_fields.items():
        for key in (field.alias, name):
            if key in partial:
                known_keys[name] = partial[key]
                break

    for name in RANGE_FIELDS:
        if name in known_keys:
            known_keys[name] = _coerce_range(known_keys[name]) or getattr(defaults, name)

    # Older blobs stored selections as bare strings
    for name in LIST_FIELDS:
        values = known_keys.get(name)
        if isinstance(values, list):
            known_keys[name] = [{"value": v} if isinstance(v, str) else v for v in values]

    return Filters.model_validate(known_keys)


# ============================================================================
# Active Filter Summary
# ============================================================================

def count_active_filters(filters: Filters, base_ranges: BaseRanges | None = None) -> int:
    """
    Number of active filter "chips" shown in the sidebar header.

    Each selected value counts once, each range that differs from its
    bounds counts once, and each include-null flag that is set counts once.
    """
    total = sum(len(getattr(filters, name)) for name in LIST_FIELDS)

    for field, bounds_field in RANGE_BOUNDS_FIELDS.items():
        reference = (
            bounds_as_range(getattr(base_ranges, bounds_field))
            if base_ranges is not None
            else DEFAULT_RANGE
        )
        low, high = getattr(filters, field)
        if low != reference[0] or high != reference[1]:
            total += 1

    total += sum(1 for name in INCLUDE_NULL_FIELDS if getattr(filters, name))
    return total
