import pytest
from matchers import (
    create_keyword_matcher,
    create_range_matcher,
    create_value_matcher,
    normalize_number,
    parse_revenue,
    range_filter_match,
)
from models import FilterValue


def inc(value):
    return FilterValue(value=value, mode="include")


def exc(value):
    return FilterValue(value=value, mode="exclude")


def test_value_matcher_empty_matches_everything():
    match = create_value_matcher([])
    assert match("India")
    assert match("")
    assert match(None)


def test_value_matcher_include_is_or():
    match = create_value_matcher([inc("India"), inc("USA")])
    assert match("India")
    assert match("USA")
    assert not match("Germany")


def test_value_matcher_exclude_only():
    match = create_value_matcher([exc("India")])
    assert not match("India")
    assert match("USA")
    assert match(None)


def test_value_matcher_exclude_wins_over_include():
    match = create_value_matcher([inc("India"), exc("India"), inc("USA")])
    assert not match("India")
    assert match("USA")


def test_value_matcher_treats_missing_as_empty_string():
    match = create_value_matcher([inc("")])
    assert match(None)
    assert match("")
    assert not match("India")


def test_value_matcher_is_exact_and_case_sensitive():
    match = create_value_matcher([inc("India")])
    assert not match("india")
    assert not match("India ")


def test_keyword_matcher_is_case_insensitive_substring():
    match = create_keyword_matcher([inc("tech")])
    assert match("Acme Technologies")
    assert match("BIGTECH")
    assert not match("Acme Foods")


def test_keyword_matcher_exclude_rejects():
    match = create_keyword_matcher([inc("acme"), exc("foods")])
    assert match("Acme Technologies")
    assert not match("Acme Foods")
    assert not match("Globex")


def test_keyword_matcher_handles_missing_text():
    assert create_keyword_matcher([])(None)
    assert not create_keyword_matcher([inc("x")])(None)
    assert create_keyword_matcher([exc("x")])(None)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, 0.0),
        ("", 0.0),
        ("abc", 0.0),
        ("12.5", 12.5),
        (7, 7.0),
        (float("nan"), 0.0),
        (float("inf"), 0.0),
    ],
)
def test_normalize_number(value, expected):
    assert normalize_number(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (1500, 1500.0),
        ("1500", 1500.0),
        ("$1,250,000", 1_250_000.0),
        ("1.2M", 1_200_000.0),
        ("3 Bn", 3_000_000_000.0),
        ("USD 450 million", 450_000_000.0),
        ("250k", 250_000.0),
        ("2T", 2_000_000_000_000.0),
        ("₹ 10 Mn", 10_000_000.0),
        ("n/a", 0.0),
        ("12 apples", 0.0),
        (None, 0.0),
        ("", 0.0),
    ],
)
def test_parse_revenue(value, expected):
    assert parse_revenue(value) == pytest.approx(expected)


def test_range_match_inclusive_bounds():
    assert range_filter_match((10, 20), 10, include_null=False)
    assert range_filter_match((10, 20), 20, include_null=False)
    assert not range_filter_match((10, 20), 21, include_null=False)
    assert not range_filter_match((10, 20), 9, include_null=False)


def test_range_match_null_toggle():
    for empty in (None, "", 0, "0", "not a number"):
        assert range_filter_match((10, 20), empty, include_null=True)
        assert not range_filter_match((10, 20), empty, include_null=False)


def test_range_match_value_outside_range_ignores_null_flag():
    assert not range_filter_match((10, 20), 50, include_null=True)


def test_range_matcher_with_revenue_parser():
    match = create_range_matcher((1_000_000, 5_000_000), False, parse_revenue)
    assert match("$2.5M")
    assert not match("$7M")
    assert not match("unknown")
