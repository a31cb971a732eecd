"""
Pydantic models for row collections, filter state and API schemas.
"""
from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# Numeric columns arrive as numbers, formatted strings ("$1.2M") or blanks.
NumericLike = Optional[Union[float, str]]


# ============================================================================
# Row Collections
# ============================================================================

class Row(BaseModel):
    """Base row: unknown columns are kept so exports carry the full record."""
    model_config = ConfigDict(extra="allow")


class Account(Row):
    account_global_legal_name: str
    account_hq_country: Optional[str] = None
    account_hq_region: Optional[str] = None
    account_hq_industry: Optional[str] = None
    account_hq_sub_industry: Optional[str] = None
    account_primary_category: Optional[str] = None
    account_primary_nature: Optional[str] = None
    account_nasscom_status: Optional[str] = None
    account_hq_revenue: NumericLike = None
    account_hq_revenue_range: Optional[str] = None
    account_hq_employee_count: NumericLike = None
    account_hq_employee_range: Optional[str] = None
    account_center_employees: NumericLike = None
    account_center_employees_range: Optional[str] = None
    years_in_india: NumericLike = None
    account_first_center_year: NumericLike = None


class Center(Row):
    cn_unique_key: str
    account_global_legal_name: str = ""
    center_name: Optional[str] = None
    center_status: Optional[str] = None
    center_type: Optional[str] = None
    center_focus: Optional[str] = None
    center_city: Optional[str] = None
    center_state: Optional[str] = None
    center_country: Optional[str] = None
    center_region: Optional[str] = None
    center_employees: NumericLike = None
    center_employees_range: Optional[str] = None
    center_inc_year: NumericLike = None
    lat: NumericLike = None
    lng: NumericLike = None


class Function(Row):
    cn_unique_key: str
    function_name: Optional[str] = None


class Service(Row):
    cn_unique_key: str
    account_global_legal_name: Optional[str] = None
    center_name: Optional[str] = None
    primary_service: Optional[str] = None
    focus_region: Optional[str] = None
    it: Optional[str] = None
    erd: Optional[str] = None
    fna: Optional[str] = None
    hr: Optional[str] = None
    procurement: Optional[str] = None
    sales_marketing: Optional[str] = None
    customer_support: Optional[str] = None
    others: Optional[str] = None
    software_vendor: Optional[str] = None
    software_in_use: Optional[str] = None


class Tech(Row):
    cn_unique_key: str = ""
    account_global_legal_name: Optional[str] = None
    software_in_use: Optional[str] = None
    software_category: Optional[str] = None


class Prospect(Row):
    account_global_legal_name: str = ""
    center_name: Optional[str] = None
    prospect_first_name: Optional[str] = None
    prospect_last_name: Optional[str] = None
    prospect_title: Optional[str] = None
    prospect_department: Optional[str] = None
    prospect_level: Optional[str] = None
    prospect_city: Optional[str] = None
    prospect_state: Optional[str] = None
    prospect_country: Optional[str] = None
    prospect_email: Optional[str] = None
    prospect_linkedin_link: Optional[str] = None


class DashboardData(BaseModel):
    """One loaded snapshot of all six collections."""
    accounts: list[Account] = Field(default_factory=list)
    centers: list[Center] = Field(default_factory=list)
    functions: list[Function] = Field(default_factory=list)
    services: list[Service] = Field(default_factory=list)
    tech: list[Tech] = Field(default_factory=list)
    prospects: list[Prospect] = Field(default_factory=list)


# ============================================================================
# Filter State
# ============================================================================

class CamelModel(BaseModel):
    """Snake_case attributes with camelCase JSON aliases; both accepted on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FilterValue(BaseModel):
    value: str
    mode: Literal["include", "exclude"] = "include"


RangeTuple = tuple[float, float]


class Filters(CamelModel):
    """Every filter dimension of the dashboard."""
    # Account filters
    account_countries: list[FilterValue] = Field(default_factory=list)
    account_industries: list[FilterValue] = Field(default_factory=list)
    account_primary_categories: list[FilterValue] = Field(default_factory=list)
    account_primary_natures: list[FilterValue] = Field(default_factory=list)
    account_nasscom_statuses: list[FilterValue] = Field(default_factory=list)
    account_employees_ranges: list[FilterValue] = Field(default_factory=list)
    account_center_employees: list[FilterValue] = Field(default_factory=list)
    account_revenue_range: RangeTuple = (0, 1_000_000)
    include_null_revenue: bool = True
    account_years_in_india_range: RangeTuple = (0, 1_000_000)
    include_null_years_in_india: bool = True
    account_first_center_year_range: RangeTuple = (0, 1_000_000)
    include_null_first_center_year: bool = True
    account_name_keywords: list[FilterValue] = Field(default_factory=list)
    # Center filters
    center_types: list[FilterValue] = Field(default_factory=list)
    center_focus: list[FilterValue] = Field(default_factory=list)
    center_cities: list[FilterValue] = Field(default_factory=list)
    center_states: list[FilterValue] = Field(default_factory=list)
    center_countries: list[FilterValue] = Field(default_factory=list)
    center_employees: list[FilterValue] = Field(default_factory=list)
    center_statuses: list[FilterValue] = Field(default_factory=list)
    center_inc_year_range: RangeTuple = (0, 1_000_000)
    include_null_center_inc_year: bool = True
    # Function / tech filters
    function_types: list[FilterValue] = Field(default_factory=list)
    center_software_in_use_keywords: list[FilterValue] = Field(default_factory=list)
    # Prospect filters
    prospect_departments: list[FilterValue] = Field(default_factory=list)
    prospect_levels: list[FilterValue] = Field(default_factory=list)
    prospect_cities: list[FilterValue] = Field(default_factory=list)
    prospect_title_keywords: list[FilterValue] = Field(default_factory=list)


class RangeBounds(BaseModel):
    min: float = 0
    max: float = 1_000_000


class BaseRanges(CamelModel):
    """Slider bounds computed from the unfiltered dataset."""
    revenue_range: RangeBounds = Field(default_factory=RangeBounds)
    years_in_india_range: RangeBounds = Field(default_factory=RangeBounds)
    first_center_year_range: RangeBounds = Field(default_factory=RangeBounds)
    center_inc_year_range: RangeBounds = Field(default_factory=RangeBounds)


# ============================================================================
# Filtering Results
# ============================================================================

class FilteredData(CamelModel):
    filtered_accounts: list[Account] = Field(default_factory=list)
    filtered_centers: list[Center] = Field(default_factory=list)
    filtered_functions: list[Function] = Field(default_factory=list)
    filtered_services: list[Service] = Field(default_factory=list)
    filtered_prospects: list[Prospect] = Field(default_factory=list)


class FilterOption(BaseModel):
    value: str
    count: int


class AvailableOptions(CamelModel):
    """Facet counts per categorical dimension, sorted by count descending."""
    account_countries: list[FilterOption] = Field(default_factory=list)
    account_industries: list[FilterOption] = Field(default_factory=list)
    account_primary_categories: list[FilterOption] = Field(default_factory=list)
    account_primary_natures: list[FilterOption] = Field(default_factory=list)
    account_nasscom_statuses: list[FilterOption] = Field(default_factory=list)
    account_employees_ranges: list[FilterOption] = Field(default_factory=list)
    account_center_employees: list[FilterOption] = Field(default_factory=list)
    center_types: list[FilterOption] = Field(default_factory=list)
    center_focus: list[FilterOption] = Field(default_factory=list)
    center_cities: list[FilterOption] = Field(default_factory=list)
    center_states: list[FilterOption] = Field(default_factory=list)
    center_countries: list[FilterOption] = Field(default_factory=list)
    center_employees: list[FilterOption] = Field(default_factory=list)
    center_statuses: list[FilterOption] = Field(default_factory=list)
    function_types: list[FilterOption] = Field(default_factory=list)
    prospect_departments: list[FilterOption] = Field(default_factory=list)
    prospect_levels: list[FilterOption] = Field(default_factory=list)
    prospect_cities: list[FilterOption] = Field(default_factory=list)


# ============================================================================
# Charts
# ============================================================================

class ChartData(BaseModel):
    name: str
    value: int


class AccountChartData(CamelModel):
    region_data: list[ChartData] = Field(default_factory=list)
    primary_nature_data: list[ChartData] = Field(default_factory=list)
    revenue_range_data: list[ChartData] = Field(default_factory=list)
    employees_range_data: list[ChartData] = Field(default_factory=list)


class CenterChartData(CamelModel):
    center_type_data: list[ChartData] = Field(default_factory=list)
    employees_range_data: list[ChartData] = Field(default_factory=list)
    city_data: list[ChartData] = Field(default_factory=list)
    function_data: list[ChartData] = Field(default_factory=list)


class ProspectChartData(CamelModel):
    department_data: list[ChartData] = Field(default_factory=list)
    level_data: list[ChartData] = Field(default_factory=list)


class SummaryCounts(CamelModel):
    accounts: int = 0
    centers: int = 0
    functions: int = 0
    services: int = 0
    prospects: int = 0
    center_statuses: dict[str, int] = Field(default_factory=dict)


class ChartBundle(CamelModel):
    summary: SummaryCounts
    accounts: AccountChartData
    centers: CenterChartData
    prospects: ProspectChartData
    tech: dict[str, list[ChartData]] = Field(default_factory=dict)


# ============================================================================
# Saved Filters
# ============================================================================

class SavedFilter(CamelModel):
    id: int
    name: str
    filters: Filters
    created_at: datetime
    updated_at: Optional[datetime] = None


class SavedFilterRequest(BaseModel):
    """Request body for creating or updating a saved filter set."""
    name: str = Field(min_length=1, max_length=200)
    filters: Filters


# ============================================================================
# API Requests / Responses
# ============================================================================

class ExportRequest(CamelModel):
    """Request body for POST /export. Datasets default to all four."""
    filters: Filters = Field(default_factory=Filters)
    datasets: list[Literal["accounts", "centers", "services", "prospects"]] = Field(
        default_factory=lambda: ["accounts", "centers", "services", "prospects"]
    )
    filename_base: Optional[str] = Field(default=None, pattern=r"^[\w\-. ]{1,120}$")


class FilterSummaryResponse(CamelModel):
    active_filter_count: int


class ConfigResponse(CamelModel):
    """Response model for GET /config endpoint."""
    row_counts: dict[str, int]
    account_names: list[str] = Field(default_factory=list)
    base_ranges: BaseRanges
    default_filters: Filters


class StatusResponse(CamelModel):
    loaded: bool
    source: Optional[str] = None
    loaded_at: Optional[datetime] = None
    row_counts: dict[str, int] = Field(default_factory=dict)
    orphan_centers: int = 0


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""
    status: str = "ok"
