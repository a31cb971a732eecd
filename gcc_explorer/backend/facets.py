"""
Facet counts for the filter sidebar.

Each categorical dimension is counted with every *other* dimension of its
group applied (leave-one-out), so a selected value never hides its
siblings. Groups cascade: centers are counted only for accounts that match
the whole account group, functions only for centers that match the whole
center group, prospects only for matching accounts.
"""
from collections import Counter
from typing import Callable

from models import (
    Account,
    AvailableOptions,
    DashboardData,
    FilterOption,
    Filters,
    RangeBounds,
)
from matchers import create_keyword_matcher, create_value_matcher, parse_revenue
from filtering import (
    account_gate_matcher,
    build_center_software_index,
    center_gate_matcher,
)


DEFAULT_REVENUE_BOUNDS = (0, 1_000_000)

# (filter/option field, row attribute) per group
ACCOUNT_DIMENSIONS = [
    ("account_countries", "account_hq_country"),
    ("account_industries", "account_hq_industry"),
    ("account_primary_categories", "account_primary_category"),
    ("account_primary_natures", "account_primary_nature"),
    ("account_nasscom_statuses", "account_nasscom_status"),
    ("account_employees_ranges", "account_hq_employee_range"),
    ("account_center_employees", "account_center_employees_range"),
]

CENTER_DIMENSIONS = [
    ("center_types", "center_type"),
    ("center_focus", "center_focus"),
    ("center_cities", "center_city"),
    ("center_states", "center_state"),
    ("center_countries", "center_country"),
    ("center_employees", "center_employees_range"),
    ("center_statuses", "center_status"),
]

PROSPECT_DIMENSIONS = [
    ("prospect_departments", "prospect_department"),
    ("prospect_levels", "prospect_level"),
    ("prospect_cities", "prospect_city"),
]


# ============================================================================
# Helpers
# ============================================================================

def to_sorted_options(counts: Counter) -> list[FilterOption]:
    """Count descending, ties broken alphabetically by value."""
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [FilterOption(value=value, count=count) for value, count in ordered]


class _DimensionGroup:
    """Leave-one-out counter over one group of categorical dimensions."""

    def __init__(self, dimensions: list[tuple[str, str]], filters: Filters):
        self.dimensions = dimensions
        self.matchers: list[Callable] = [
            create_value_matcher(getattr(filters, filter_field))
            for filter_field, _ in dimensions
        ]
        self.counts: dict[str, Counter] = {option_field: Counter() for option_field, _ in dimensions}

    def observe(self, row) -> bool:
        """Count one row; return True when it matches every dimension."""
        values = [getattr(row, attr) or "" for _, attr in self.dimensions]
        hits = [match(value) for match, value in zip(self.matchers, values)]
        misses = hits.count(False)

        for i, (option_field, _) in enumerate(self.dimensions):
            # Every other dimension must match; this one is ignored
            if misses == 0 or (misses == 1 and not hits[i]):
                self.counts[option_field][values[i]] += 1

        return misses == 0

    def matches_all(self, row) -> bool:
        """True when the row matches every dimension; nothing is counted."""
        return all(match(getattr(row, attr)) for match, (_, attr) in zip(self.matchers, self.dimensions))

    def options(self) -> dict[str, list[FilterOption]]:
        return {field: to_sorted_options(counter) for field, counter in self.counts.items()}


# ============================================================================
# Available Options
# ============================================================================

def get_available_options(data: DashboardData, filters: Filters) -> AvailableOptions:
    """
    Compute the option list and count for every categorical dimension.

    Hard gates (never left out):
        - accounts: name keyword, revenue, years-in-India, first-center-year
        - centers: incorporation year, software keyword
        - prospects: title keyword
    """
    match_account_gates = account_gate_matcher(filters)
    match_center_gates = center_gate_matcher(filters, build_center_software_index(data.tech))
    match_title = create_keyword_matcher(filters.prospect_title_keywords)

    # Accounts
    account_group = _DimensionGroup(ACCOUNT_DIMENSIONS, filters)
    valid_account_names: set[str] = set()
    for account in data.accounts:
        if not match_account_gates(account):
            continue
        if account_group.observe(account):
            valid_account_names.add(account.account_global_legal_name)

    # Centers
    center_group = _DimensionGroup(CENTER_DIMENSIONS, filters)
    valid_center_keys: set[str] = set()
    for center in data.centers:
        if center.account_global_legal_name not in valid_account_names:
            continue
        if not match_center_gates(center):
            continue
        if center_group.observe(center):
            valid_center_keys.add(center.cn_unique_key)

    # Functions
    function_counts: Counter = Counter(
        func.function_name or ""
        for func in data.functions
        if func.cn_unique_key in valid_center_keys
    )

    # Prospects
    prospect_group = _DimensionGroup(PROSPECT_DIMENSIONS, filters)
    for prospect in data.prospects:
        if prospect.account_global_legal_name not in valid_account_names:
            continue
        if not match_title(prospect.prospect_title):
            continue
        prospect_group.observe(prospect)

    return AvailableOptions(
        **account_group.options(),
        **center_group.options(),
        function_types=to_sorted_options(function_counts),
        **prospect_group.options(),
    )


# ============================================================================
# Dynamic Revenue Range
# ============================================================================

def get_dynamic_revenue_range(accounts: list[Account], filters: Filters) -> RangeBounds:
    """
    Revenue slider bounds for the accounts that pass every other account filter.

    The name keyword and the revenue range itself are not applied, so the
    bounds never collapse onto the user's own selection.
    """
    match_categories = _DimensionGroup(ACCOUNT_DIMENSIONS, filters)
    match_gates = account_gate_matcher(filters, apply_revenue=False, apply_name=False)

    revenues = []
    for account in accounts:
        if not (match_gates(account) and match_categories.matches_all(account)):
            continue
        revenue = parse_revenue(account.account_hq_revenue)
        if revenue > 0:
            revenues.append(revenue)

    if not revenues:
        return RangeBounds(min=DEFAULT_REVENUE_BOUNDS[0], max=DEFAULT_REVENUE_BOUNDS[1])
    return RangeBounds(min=min(revenues), max=max(revenues))
