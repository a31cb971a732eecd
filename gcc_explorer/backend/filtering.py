"""
Multi-entity filtering pipeline.

Applies account, center, function, prospect and software filters across the
six row collections and keeps them mutually consistent: centers follow their
accounts, functions/services follow their centers, and function or prospect
filters narrow their parents in turn.
"""
from models import (
    Account,
    Center,
    DashboardData,
    Filters,
    FilteredData,
    Tech,
)
from matchers import (
    create_keyword_matcher,
    create_range_matcher,
    create_value_matcher,
    parse_revenue,
)


# Upper end of an unrestricted range (JavaScript's Number.MAX_SAFE_INTEGER,
# which saved filter sets use as "no limit").
MAX_SAFE_INTEGER = 2**53 - 1

SOFTWARE_SEPARATOR = " | "


# ============================================================================
# Filter Group Predicates
# ============================================================================

def _range_is_restricted(value_range) -> bool:
    return value_range[0] > 0 or value_range[1] < MAX_SAFE_INTEGER


def has_account_filters(filters: Filters) -> bool:
    """
    True when any account-level filter deviates from "unrestricted".

    Include-null flags count as active when set, so with default filters
    centers and prospects are always gated by the surviving account set.
    """
    return bool(
        filters.account_countries
        or filters.account_industries
        or filters.account_primary_categories
        or filters.account_primary_natures
        or filters.account_nasscom_statuses
        or filters.account_employees_ranges
        or filters.account_center_employees
        or _range_is_restricted(filters.account_revenue_range)
        or filters.include_null_revenue
        or _range_is_restricted(filters.account_years_in_india_range)
        or filters.include_null_years_in_india
        or _range_is_restricted(filters.account_first_center_year_range)
        or filters.include_null_first_center_year
        or filters.account_name_keywords
    )


def has_center_filters(filters: Filters) -> bool:
    return bool(
        filters.center_types
        or filters.center_focus
        or filters.center_cities
        or filters.center_states
        or filters.center_countries
        or filters.center_employees
        or filters.center_statuses
    )


def has_function_filters(filters: Filters) -> bool:
    return bool(filters.function_types)


def has_software_filters(filters: Filters) -> bool:
    return bool(filters.center_software_in_use_keywords)


def has_prospect_filters(filters: Filters) -> bool:
    return bool(
        filters.prospect_departments
        or filters.prospect_levels
        or filters.prospect_cities
        or filters.prospect_title_keywords
    )


# ============================================================================
# Derived Indexes
# ============================================================================

def build_center_software_index(tech: list[Tech]) -> dict[str, str]:
    """
    Map cn_unique_key -> all software in use at that center, joined with " | ".

    Rows with a blank key or blank software are skipped.
    """
    index: dict[str, str] = {}
    for row in tech:
        software = (row.software_in_use or "").strip()
        if not software or not row.cn_unique_key:
            continue
        existing = index.get(row.cn_unique_key)
        index[row.cn_unique_key] = f"{existing}{SOFTWARE_SEPARATOR}{software}" if existing else software
    return index


def get_account_names(accounts: list[Account]) -> list[str]:
    """Unique non-empty legal names in first-seen order."""
    return list(dict.fromkeys(a.account_global_legal_name for a in accounts if a.account_global_legal_name))


# ============================================================================
# Pipeline
# ============================================================================

def account_gate_matcher(filters: Filters, *, apply_revenue: bool = True, apply_name: bool = True):
    """
    Predicate over the non-categorical account filters: the revenue,
    years-in-India and first-center-year ranges and the name keywords.

    Facet counting applies these as hard gates. The revenue slider's own
    bounds are computed with `apply_revenue=False, apply_name=False`.
    """
    match_name = create_keyword_matcher(filters.account_name_keywords if apply_name else [])
    match_revenue = create_range_matcher(
        filters.account_revenue_range, filters.include_null_revenue, parse_revenue
    )
    match_years_in_india = create_range_matcher(
        filters.account_years_in_india_range, filters.include_null_years_in_india
    )
    match_first_center_year = create_range_matcher(
        filters.account_first_center_year_range, filters.include_null_first_center_year
    )

    def match(account: Account) -> bool:
        return (
            (not apply_revenue or match_revenue(account.account_hq_revenue))
            and match_years_in_india(account.years_in_india)
            and match_first_center_year(account.account_first_center_year)
            and match_name(account.account_global_legal_name)
        )

    return match


def center_gate_matcher(filters: Filters, software_index: dict[str, str]):
    """Predicate over the incorporation-year range and the software keywords."""
    match_inc_year = create_range_matcher(
        filters.center_inc_year_range, filters.include_null_center_inc_year
    )
    match_software = create_keyword_matcher(filters.center_software_in_use_keywords)

    def match(center: Center) -> bool:
        return (
            match_inc_year(center.center_inc_year)
            and match_software(software_index.get(center.cn_unique_key, ""))
        )

    return match


def account_matcher(filters: Filters):
    """Predicate combining every account-level filter."""
    match_country = create_value_matcher(filters.account_countries)
    match_industry = create_value_matcher(filters.account_industries)
    match_category = create_value_matcher(filters.account_primary_categories)
    match_nature = create_value_matcher(filters.account_primary_natures)
    match_nasscom = create_value_matcher(filters.account_nasscom_statuses)
    match_employees_range = create_value_matcher(filters.account_employees_ranges)
    match_center_employees = create_value_matcher(filters.account_center_employees)
    match_gates = account_gate_matcher(filters)

    def match(account: Account) -> bool:
        return (
            match_country(account.account_hq_country)
            and match_industry(account.account_hq_industry)
            and match_category(account.account_primary_category)
            and match_nature(account.account_primary_nature)
            and match_nasscom(account.account_nasscom_status)
            and match_employees_range(account.account_hq_employee_range)
            and match_center_employees(account.account_center_employees_range)
            and match_gates(account)
        )

    return match


def get_filtered_data(data: DashboardData, filters: Filters) -> FilteredData:
    """
    Filter all collections and reconcile them through the surviving centers.

    Steps:
        1. Build the center -> software index from tech rows
        2. Filter accounts, collecting surviving legal names
        3. Filter centers (gated by accounts when account filters are active)
        4. Filter functions; an active function filter narrows centers
        5. Filter prospects; an active prospect filter narrows accounts/centers
        6. Keep services of surviving centers
        7. Re-derive accounts, functions and prospects from the final centers

    Args:
        data: Unfiltered collections (never mutated)
        filters: Current filter state

    Returns:
        FilteredData whose lists preserve input order
    """
    account_gate = has_account_filters(filters)
    function_active = has_function_filters(filters)
    prospect_active = has_prospect_filters(filters)

    software_index = build_center_software_index(data.tech) if has_software_filters(filters) else {}

    # Accounts
    match_account = account_matcher(filters)
    filtered_accounts = [a for a in data.accounts if match_account(a)]
    account_names = {a.account_global_legal_name for a in filtered_accounts}

    # Centers
    match_type = create_value_matcher(filters.center_types)
    match_focus = create_value_matcher(filters.center_focus)
    match_city = create_value_matcher(filters.center_cities)
    match_state = create_value_matcher(filters.center_states)
    match_country = create_value_matcher(filters.center_countries)
    match_employees = create_value_matcher(filters.center_employees)
    match_status = create_value_matcher(filters.center_statuses)
    match_center_gates = center_gate_matcher(filters, software_index)

    filtered_centers = []
    for center in data.centers:
        if account_gate and center.account_global_legal_name not in account_names:
            continue
        if not (
            match_type(center.center_type)
            and match_focus(center.center_focus)
            and match_city(center.center_city)
            and match_state(center.center_state)
            and match_country(center.center_country)
            and match_employees(center.center_employees_range)
            and match_status(center.center_status)
            and match_center_gates(center)
        ):
            continue
        filtered_centers.append(center)
    center_keys = {c.cn_unique_key for c in filtered_centers}

    # Functions (reverse constraint on centers)
    match_function = create_value_matcher(filters.function_types)
    filtered_functions = []
    function_center_keys: set[str] = set()
    for func in data.functions:
        if func.cn_unique_key not in center_keys:
            continue
        if not function_active or match_function(func.function_name):
            filtered_functions.append(func)
            if function_active:
                function_center_keys.add(func.cn_unique_key)

    if function_active:
        filtered_centers = [c for c in filtered_centers if c.cn_unique_key in function_center_keys]
        center_keys = function_center_keys

    # Prospects (reverse constraint on accounts and centers)
    match_department = create_value_matcher(filters.prospect_departments)
    match_level = create_value_matcher(filters.prospect_levels)
    match_prospect_city = create_value_matcher(filters.prospect_cities)
    match_title = create_keyword_matcher(filters.prospect_title_keywords)

    filtered_prospects = []
    for prospect in data.prospects:
        if account_gate and prospect.account_global_legal_name not in account_names:
            continue
        matches = (
            match_department(prospect.prospect_department)
            and match_level(prospect.prospect_level)
            and match_prospect_city(prospect.prospect_city)
            and match_title(prospect.prospect_title)
        )
        if matches or not prospect_active:
            filtered_prospects.append(prospect)

    if prospect_active:
        account_names = {p.account_global_legal_name for p in filtered_prospects}
        filtered_accounts = [a for a in filtered_accounts if a.account_global_legal_name in account_names]
        filtered_centers = [c for c in filtered_centers if c.account_global_legal_name in account_names]
        center_keys = {c.cn_unique_key for c in filtered_centers}

    # Services
    filtered_services = [s for s in data.services if s.cn_unique_key in center_keys]

    # Final consistency pass: centers are the source of truth
    final_account_names = {c.account_global_legal_name for c in filtered_centers}

    return FilteredData(
        filtered_accounts=[a for a in filtered_accounts if a.account_global_legal_name in final_account_names],
        filtered_centers=filtered_centers,
        filtered_functions=[f for f in filtered_functions if f.cn_unique_key in center_keys],
        filtered_services=filtered_services,
        filtered_prospects=[p for p in filtered_prospects if p.account_global_legal_name in final_account_names],
    )
