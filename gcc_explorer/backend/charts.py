"""
Chart series for the dashboard tabs, computed from filtered collections.
"""
from collections import Counter, defaultdict
from typing import Iterable

from models import (
    Account,
    AccountChartData,
    Center,
    CenterChartData,
    ChartBundle,
    ChartData,
    FilteredData,
    Function,
    Prospect,
    ProspectChartData,
    SummaryCounts,
    Tech,
)


UNKNOWN_LABEL = "Unknown"


def _to_chart_data(counts: Counter) -> list[ChartData]:
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [ChartData(name=name, value=value) for name, value in ordered]


def calculate_chart_data(rows: Iterable, field: str) -> list[ChartData]:
    """
    Count rows per value of `field`, largest first.

    Blank or missing values are grouped under "Unknown".
    """
    counts = Counter(str(getattr(row, field, None) or UNKNOWN_LABEL) for row in rows)
    return _to_chart_data(counts)


def calculate_function_chart_data(functions: list[Function], center_keys: Iterable[str]) -> list[ChartData]:
    """Count function names, restricted to the given centers."""
    key_set = set(center_keys)
    counts = Counter(
        func.function_name or UNKNOWN_LABEL
        for func in functions
        if func.cn_unique_key in key_set
    )
    return _to_chart_data(counts)


# ============================================================================
# Per-Tab Chart Data
# ============================================================================

def get_account_chart_data(accounts: list[Account]) -> AccountChartData:
    return AccountChartData(
        region_data=calculate_chart_data(accounts, "account_hq_region"),
        primary_nature_data=calculate_chart_data(accounts, "account_primary_nature"),
        revenue_range_data=calculate_chart_data(accounts, "account_hq_revenue_range"),
        employees_range_data=calculate_chart_data(accounts, "account_hq_employee_range"),
    )


def get_center_chart_data(centers: list[Center], functions: list[Function]) -> CenterChartData:
    return CenterChartData(
        center_type_data=calculate_chart_data(centers, "center_type"),
        employees_range_data=calculate_chart_data(centers, "center_employees_range"),
        city_data=calculate_chart_data(centers, "center_city"),
        function_data=calculate_function_chart_data(functions, (c.cn_unique_key for c in centers)),
    )


def get_prospect_chart_data(prospects: list[Prospect]) -> ProspectChartData:
    return ProspectChartData(
        department_data=calculate_chart_data(prospects, "prospect_department"),
        level_data=calculate_chart_data(prospects, "prospect_level"),
    )


def get_tech_chart_data(tech: list[Tech], center_keys: Iterable[str] | None = None) -> dict[str, list[ChartData]]:
    """
    Software counts grouped by category (treemap source).

    When center_keys is given only tech rows of those centers are counted.
    """
    key_set = set(center_keys) if center_keys is not None else None
    by_category: dict[str, Counter] = defaultdict(Counter)
    for row in tech:
        if key_set is not None and row.cn_unique_key not in key_set:
            continue
        software = (row.software_in_use or "").strip()
        if not software:
            continue
        by_category[row.software_category or UNKNOWN_LABEL][software] += 1

    return {category: _to_chart_data(counts) for category, counts in sorted(by_category.items())}


def summary_counts(filtered: FilteredData) -> SummaryCounts:
    """Headline card numbers plus the center status breakdown."""
    statuses = Counter(c.center_status or UNKNOWN_LABEL for c in filtered.filtered_centers)
    return SummaryCounts(
        accounts=len(filtered.filtered_accounts),
        centers=len(filtered.filtered_centers),
        functions=len(filtered.filtered_functions),
        services=len(filtered.filtered_services),
        prospects=len(filtered.filtered_prospects),
        center_statuses=dict(statuses.most_common()),
    )


def build_chart_bundle(filtered: FilteredData, tech: list[Tech]) -> ChartBundle:
    """All chart series for one filtered view."""
    center_keys = [c.cn_unique_key for c in filtered.filtered_centers]
    return ChartBundle(
        summary=summary_counts(filtered),
        accounts=get_account_chart_data(filtered.filtered_accounts),
        centers=get_center_chart_data(filtered.filtered_centers, filtered.filtered_functions),
        prospects=get_prospect_chart_data(filtered.filtered_prospects),
        tech=get_tech_chart_data(tech, center_keys),
    )
