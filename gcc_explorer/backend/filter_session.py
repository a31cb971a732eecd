"""
Stateful filter session for one dashboard view.

Holds the loaded data, the pending (being edited) and applied filter
states, and the slider bounds. The revenue slider follows the dynamic
revenue range while in AUTO mode; once the user edits it directly the
session switches to MANUAL and recomputed bounds only clamp the user's
selection.
"""
import math
from enum import Enum

from models import (
    AvailableOptions,
    BaseRanges,
    ChartBundle,
    DashboardData,
    FilteredData,
    Filters,
    RangeBounds,
    RangeTuple,
)
from charts import build_chart_bundle
from defaults import (
    bounds_as_range,
    calculate_base_ranges,
    count_active_filters,
    create_default_filters,
    with_filter_defaults,
)
from facets import get_available_options, get_dynamic_revenue_range
from filtering import get_account_names, get_filtered_data


class RevenueRangeMode(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"


# Filters range field -> bounds attribute on the session
_RANGE_BOUNDS = {
    "account_revenue_range": "revenue_bounds",
    "account_years_in_india_range": "years_in_india_bounds",
    "account_first_center_year_range": "first_center_year_bounds",
    "center_inc_year_range": "center_inc_year_bounds",
}


# ============================================================================
# Range Input Helpers
# ============================================================================

def parse_number_or(text: str | float | None, fallback: float) -> float:
    """Parse a typed number, returning fallback for blanks and junk."""
    if text is None:
        return fallback
    try:
        value = float(str(text).strip())
    except ValueError:
        return fallback
    return value if math.isfinite(value) else fallback


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


# ============================================================================
# Session
# ============================================================================

class FilterSession:
    """
    Pending/applied filter state over one DashboardData snapshot.

    Edits go to `pending`; `apply()` makes them the `applied` state that
    drives filtered data, options and charts.
    """

    def __init__(self, data: DashboardData):
        self.data = data
        self.base_ranges: BaseRanges = calculate_base_ranges(data.accounts, data.centers)
        self.revenue_mode = RevenueRangeMode.AUTO
        self._reset_bounds()
        self.pending: Filters = create_default_filters(self.base_ranges)
        self.applied: Filters = self.pending.model_copy(deep=True)
        self.account_names = get_account_names(data.accounts)
        self._sync_revenue_range()

    def _reset_bounds(self) -> None:
        self.revenue_bounds = self.base_ranges.revenue_range.model_copy()
        self.years_in_india_bounds = self.base_ranges.years_in_india_range.model_copy()
        self.first_center_year_bounds = self.base_ranges.first_center_year_range.model_copy()
        self.center_inc_year_bounds = self.base_ranges.center_inc_year_range.model_copy()

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    def set_pending(self, filters: Filters) -> None:
        self.pending = filters.model_copy(deep=True)

    def apply(self) -> Filters:
        """Promote pending to applied and re-sync the revenue slider."""
        self.applied = self.pending.model_copy(deep=True)
        self._sync_revenue_range()
        return self.applied

    def reset(self) -> Filters:
        """Clear every selection and return the revenue slider to AUTO."""
        self.revenue_mode = RevenueRangeMode.AUTO
        self._reset_bounds()
        self.pending = create_default_filters(self.base_ranges)
        self.applied = self.pending.model_copy(deep=True)
        self._sync_revenue_range()
        return self.applied

    def load_saved(self, saved: Filters | dict) -> Filters:
        """
        Apply a saved filter set. Its revenue range is a manual choice,
        intersected with the revenue bounds of the loaded filters.
        """
        self.revenue_mode = RevenueRangeMode.MANUAL
        self.pending = with_filter_defaults(saved)
        self.applied = self.pending.model_copy(deep=True)
        self._sync_revenue_range()
        return self.applied

    def replace_data(self, data: DashboardData) -> None:
        """
        Swap in a new snapshot.

        Base ranges are recomputed and written into both filter states;
        selections are kept.
        """
        self.data = data
        self.base_ranges = calculate_base_ranges(data.accounts, data.centers)
        self.account_names = get_account_names(data.accounts)
        self.revenue_mode = RevenueRangeMode.AUTO
        self._reset_bounds()

        ranges = {field: bounds_as_range(getattr(self, attr)) for field, attr in _RANGE_BOUNDS.items()}
        self.pending = self.pending.model_copy(update=ranges)
        self.applied = self.applied.model_copy(update=ranges)
        self._sync_revenue_range()

    def _sync_revenue_range(self) -> None:
        """Recompute revenue bounds from the applied filters and follow/clamp."""
        self.revenue_bounds = get_dynamic_revenue_range(self.data.accounts, self.applied)
        bounds = self.revenue_bounds

        if self.revenue_mode == RevenueRangeMode.AUTO:
            new_range = (bounds.min, bounds.max)
        else:
            low, high = self.pending.account_revenue_range
            new_range = (max(low, bounds.min), min(high, bounds.max))

        if new_range != tuple(self.pending.account_revenue_range):
            self.pending = self.pending.model_copy(update={"account_revenue_range": new_range})
            self.applied = self.applied.model_copy(update={"account_revenue_range": new_range})

    # ------------------------------------------------------------------
    # Range edits
    # ------------------------------------------------------------------

    def _bounds_for(self, field: str) -> RangeBounds:
        return getattr(self, _RANGE_BOUNDS[field])

    def _set_pending_range(self, field: str, value: RangeTuple) -> RangeTuple:
        if field == "account_revenue_range":
            self.revenue_mode = RevenueRangeMode.MANUAL
        self.pending = self.pending.model_copy(update={field: value})
        return value

    def set_range_min(self, field: str, text: str | float | None) -> RangeTuple:
        """Typed min edit: clamped into [bounds.min, current max]."""
        bounds = self._bounds_for(field)
        _, high = getattr(self.pending, field)
        value = clamp(parse_number_or(text, bounds.min), bounds.min, high)
        return self._set_pending_range(field, (value, high))

    def set_range_max(self, field: str, text: str | float | None) -> RangeTuple:
        """Typed max edit: clamped into [current min, bounds.max]."""
        bounds = self._bounds_for(field)
        low, _ = getattr(self.pending, field)
        value = clamp(parse_number_or(text, bounds.max), low, bounds.max)
        return self._set_pending_range(field, (low, value))

    def set_range(self, field: str, value: RangeTuple) -> RangeTuple:
        """Slider edit: both ends clamped into the bounds."""
        bounds = self._bounds_for(field)
        low = clamp(min(value), bounds.min, bounds.max)
        high = clamp(max(value), bounds.min, bounds.max)
        return self._set_pending_range(field, (low, high))

    def set_min_revenue(self, text):
        return self.set_range_min("account_revenue_range", text)

    def set_max_revenue(self, text):
        return self.set_range_max("account_revenue_range", text)

    def set_revenue_range(self, value: RangeTuple):
        return self.set_range("account_revenue_range", value)

    # ------------------------------------------------------------------
    # Derived views (always from the applied state)
    # ------------------------------------------------------------------

    def filtered_data(self) -> FilteredData:
        return get_filtered_data(self.data, self.applied)

    def available_options(self) -> AvailableOptions:
        return get_available_options(self.data, self.applied)

    def chart_data(self) -> ChartBundle:
        return build_chart_bundle(self.filtered_data(), self.data.tech)

    def total_active_filters(self) -> int:
        """Active filter count, with ranges compared against the live slider bounds."""
        live_bounds = BaseRanges(
            revenue_range=self.revenue_bounds,
            years_in_india_range=self.years_in_india_bounds,
            first_center_year_range=self.first_center_year_bounds,
            center_inc_year_range=self.center_inc_year_bounds,
        )
        return count_active_filters(self.applied, live_bounds)
