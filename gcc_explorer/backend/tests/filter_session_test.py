import pytest
from filter_session import FilterSession, RevenueRangeMode, clamp, parse_number_or
from models import Account, DashboardData, FilterValue


def inc(value):
    return FilterValue(value=value, mode="include")


@pytest.mark.parametrize(
    "text, expected",
    [("42", 42.0), (" 7.5 ", 7.5), ("", 3.0), ("abc", 3.0), (None, 3.0), ("inf", 3.0), (12, 12.0)],
)
def test_parse_number_or(text, expected):
    assert parse_number_or(text, 3.0) == expected


def test_clamp():
    assert clamp(5, 0, 10) == 5
    assert clamp(-1, 0, 10) == 0
    assert clamp(11, 0, 10) == 10


def test_session_starts_in_auto_with_base_ranges(dashboard_data):
    session = FilterSession(dashboard_data)

    assert session.revenue_mode == RevenueRangeMode.AUTO
    assert session.applied.account_revenue_range == (800_000, 4_000_000)
    assert session.pending.center_inc_year_range == (2003, 2024)
    assert session.account_names == ["Acme Technologies", "Beta Foods", "Gamma Corp", "Delta Bank"]


def test_auto_mode_follows_dynamic_revenue_range(dashboard_data):
    session = FilterSession(dashboard_data)
    pending = session.pending.model_copy(update={"account_countries": [inc("India")]})
    session.set_pending(pending)
    session.apply()

    assert session.revenue_mode == RevenueRangeMode.AUTO
    assert (session.revenue_bounds.min, session.revenue_bounds.max) == (800_000, 2_500_000)
    assert session.pending.account_revenue_range == (800_000, 2_500_000)
    assert session.applied.account_revenue_range == (800_000, 2_500_000)


def test_manual_edit_switches_mode_and_clamps_on_resync(dashboard_data):
    session = FilterSession(dashboard_data)

    session.set_min_revenue("1000000")
    assert session.revenue_mode == RevenueRangeMode.MANUAL
    assert session.pending.account_revenue_range == (1_000_000, 4_000_000)

    session.set_pending(session.pending.model_copy(update={"account_countries": [inc("India")]}))
    session.apply()

    # Bounds shrink to India's revenues; the user's range is intersected
    assert session.applied.account_revenue_range == (1_000_000, 2_500_000)
    assert session.revenue_mode == RevenueRangeMode.MANUAL


def test_min_and_max_edits_are_clamped(dashboard_data):
    session = FilterSession(dashboard_data)

    assert session.set_min_revenue("10") == (800_000, 4_000_000)
    assert session.set_max_revenue("99999999") == (800_000, 4_000_000)
    assert session.set_max_revenue("100") == (800_000, 800_000)
    assert session.set_min_revenue("not a number") == (800_000, 800_000)


def test_slider_edit_clamps_both_ends(dashboard_data):
    session = FilterSession(dashboard_data)
    assert session.set_range("account_years_in_india_range", (0, 100)) == (5, 20)
    assert session.set_range("account_years_in_india_range", (15, 8)) == (8, 15)
    # Non-revenue ranges never touch the revenue mode
    assert session.revenue_mode == RevenueRangeMode.AUTO


def test_other_range_edits(dashboard_data):
    session = FilterSession(dashboard_data)
    assert session.set_range_min("center_inc_year_range", "2010") == (2010, 2024)
    assert session.set_range_max("center_inc_year_range", "2000") == (2010, 2010)
    assert session.set_range_min("account_first_center_year_range", "") == (2003, 2015)


def test_pending_edits_do_not_affect_applied_until_apply(dashboard_data):
    session = FilterSession(dashboard_data)
    session.set_pending(session.pending.model_copy(update={"account_countries": [inc("USA")]}))

    assert len(session.filtered_data().filtered_accounts) == 4
    session.apply()
    assert [a.account_global_legal_name for a in session.filtered_data().filtered_accounts] == ["Gamma Corp"]


def test_reset_returns_to_auto_and_defaults(dashboard_data):
    session = FilterSession(dashboard_data)
    session.set_min_revenue("2000000")
    session.set_pending(session.pending.model_copy(update={"account_countries": [inc("India")]}))
    session.apply()

    session.reset()
    assert session.revenue_mode == RevenueRangeMode.AUTO
    assert session.applied.account_countries == []
    assert session.applied.account_revenue_range == (800_000, 4_000_000)
    assert session.total_active_filters() == 4


def test_load_saved_switches_to_manual(dashboard_data):
    session = FilterSession(dashboard_data)
    applied = session.load_saved({
        "accountCountries": [{"value": "India", "mode": "include"}],
        "accountRevenueRange": [1_000_000, 3_000_000],
    })

    assert session.revenue_mode == RevenueRangeMode.MANUAL
    # India accounts span 800k..2.5M, so the saved upper end is clamped
    assert (session.revenue_bounds.min, session.revenue_bounds.max) == (800_000, 2_500_000)
    assert applied.account_revenue_range == (1_000_000, 2_500_000)
    assert session.pending == session.applied


def test_revenue_edits_after_load_saved_use_loaded_bounds(dashboard_data):
    session = FilterSession(dashboard_data)
    session.load_saved({"accountCountries": [{"value": "India"}]})

    assert session.set_max_revenue("9000000") == (800_000, 2_500_000)


def test_replace_data_recomputes_ranges(dashboard_data):
    session = FilterSession(dashboard_data)
    session.set_min_revenue("1000000")

    session.replace_data(DashboardData(accounts=[
        Account(account_global_legal_name="Solo", account_hq_revenue=5_000_000, years_in_india=3),
    ]))

    assert session.revenue_mode == RevenueRangeMode.AUTO
    assert session.account_names == ["Solo"]
    assert session.applied.account_revenue_range == (5_000_000, 5_000_000)
    assert session.applied.account_years_in_india_range == (3, 3)
    assert session.pending.center_inc_year_range == (0, 1_000_000)


def test_derived_views(dashboard_data):
    session = FilterSession(dashboard_data)

    assert {o.value for o in session.available_options().account_countries} == {"India", "USA", "Germany"}
    charts = session.chart_data()
    assert charts.summary.accounts == 4
    assert charts.summary.centers == 5
