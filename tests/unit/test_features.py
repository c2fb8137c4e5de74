"""Unit tests for the feature engine"""

import pytest
from unittest.mock import patch
from fraudscan.domain.models import RawRecord
from fraudscan.domain.features import (
    SuspicionPolicy,
    DEFAULT_POLICY,
    aggregate,
    compute_features,
    is_valid,
    parse_amount,
)
from fraudscan.domain.exceptions import FeatureComputationError


def raw(business_area="A", activity_code="X", amount="100", period="2024-01") -> RawRecord:
    return RawRecord(business_area=business_area, period=period, activity_code=activity_code, amount=amount)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("100", 100.0),
        ("1,250.50", 1250.5),
        ("1,000,000", 1_000_000.0),
        (" 42 ", 42.0),
        ("-75.5", -75.5),
        ("", 0.0),
        (None, 0.0),
        ("abc", 0.0),
        ("12abc", 12.0),
        ("1000 THB", 1000.0),
        ("1.2.3", 1.2),
        ("$100", 0.0),
        ("1e400", 0.0),
        ("nan", 0.0),
        ("inf", 0.0),
    ],
)
def test_parse_amount(text, expected):
    """Test amount parsing reads the numeric prefix and falls back to zero"""
    assert parse_amount(text) == expected


def test_is_valid_requires_business_area_and_activity_code():
    assert is_valid(raw())
    assert not is_valid(raw(business_area=""))
    assert not is_valid(raw(activity_code=""))


def test_aggregate_average_is_total_over_count():
    """Test category averages and business area counts from the first pass"""
    snapshot = aggregate([
        raw(activity_code="X", amount="100"),
        raw(activity_code="X", amount="1,000"),
        raw(business_area="B", activity_code="Y", amount="30"),
    ])

    x = snapshot.category_stats["X"]
    assert x.total_amount == 1100.0
    assert x.count == 2
    assert x.average == 550.0
    assert snapshot.category_stats["Y"].average == 30.0
    assert snapshot.business_area_frequency == {"A": 2, "B": 1}


def test_aggregate_skips_invalid_rows():
    snapshot = aggregate([raw(business_area="", amount="999"), raw(activity_code="", amount="999"), raw()])

    assert snapshot.category_stats["X"].count == 1
    assert snapshot.category_stats["X"].total_amount == 100.0
    assert "" not in snapshot.business_area_frequency


def test_snapshot_lookups_for_unknown_keys_are_zero():
    snapshot = aggregate([raw()])

    assert snapshot.category_average("missing") == 0.0
    assert snapshot.frequency("missing") == 0


def test_snapshot_is_read_only():
    snapshot = aggregate([raw()])

    with pytest.raises(TypeError):
        snapshot.category_stats["Z"] = None  # type: ignore[index]


def test_ids_are_original_positions_with_gaps():
    """Test skipped rows leave gaps instead of renumbering"""
    result = compute_features([
        raw(),
        raw(business_area=""),
        raw(),
        raw(activity_code=""),
        raw(),
    ])

    assert [r.id for r in result.records] == [0, 2, 4]


def test_two_row_scenario_not_flagged():
    """100 and 1,000 in the same code: average 550, ratio ~1.818"""
    result = compute_features([raw(amount="100"), raw(amount="1000")])

    second = result.records[1]
    assert second.category_average == 550.0
    assert second.deviation_ratio == pytest.approx(1000 / 550)
    assert second.business_area_frequency == 2
    assert second.is_candidate is False


def test_large_deviation_flagged():
    rows = [raw(amount="100") for _ in range(9)] + [raw(amount="5,000")]
    result = compute_features(rows)

    outlier = result.records[-1]
    assert outlier.deviation_ratio == pytest.approx(5000 / 590)
    assert outlier.is_candidate is True
    assert result.candidate_count == 1


def test_high_volume_business_area_flagged_at_lower_ratio(high_volume_rows):
    """Test the high-volume clause catches a ratio between 2.0 and 3.0"""
    result = compute_features(high_volume_rows)

    outlier = result.records[-1]
    assert outlier.business_area_frequency == 150
    assert outlier.category_average == pytest.approx(118.0)
    assert 2.0 < outlier.deviation_ratio < 3.0
    assert outlier.is_candidate is True
    assert result.candidate_count == 1


def test_three_times_other_rows_in_high_volume_area():
    """Outlier at 3x the other rows of its code, inside a 150-row business area"""
    rows = [raw(business_area="Z", activity_code="P", amount="10") for _ in range(140)]
    rows += [raw(business_area="Z", activity_code="Q", amount="100") for _ in range(9)]
    rows.append(raw(business_area="Z", activity_code="Q", amount="300"))

    outlier = compute_features(rows).records[-1]

    assert outlier.deviation_ratio == pytest.approx(2.5)
    assert outlier.is_candidate is True


def test_same_ratio_in_low_volume_area_not_flagged():
    rows = [raw(amount="100") for _ in range(9)] + [raw(amount="280")]

    outlier = compute_features(rows).records[-1]

    assert 2.0 < outlier.deviation_ratio < 3.0
    assert outlier.is_candidate is False


def test_zero_average_gives_zero_ratio():
    """Test no division by zero when a category sums to zero"""
    result = compute_features([raw(amount="0"), raw(amount="n/a"), raw(amount="-5"), raw(amount="5")])

    assert all(r.category_average == 0.0 for r in result.records)
    assert all(r.deviation_ratio == 0.0 for r in result.records)
    assert not any(r.is_candidate for r in result.records)


def test_empty_input_yields_no_records():
    result = compute_features([])

    assert result.records == ()
    assert dict(result.snapshot.category_stats) == {}


def test_compute_features_is_idempotent(high_volume_rows):
    assert compute_features(high_volume_rows) == compute_features(high_volume_rows)


@pytest.mark.parametrize(
    "ratio,frequency,expected",
    [
        (3.0, 1, False),  # not strictly greater
        (3.01, 1, True),
        (2.5, 100, False),  # frequency must exceed 100
        (2.5, 101, True),
        (2.0, 500, False),  # ratio must exceed 2.0
        (2.01, 500, True),
        (0.0, 10_000, False),
    ],
)
def test_default_policy_boundaries(ratio, frequency, expected):
    """Test the suspicion rule at its thresholds"""
    assert DEFAULT_POLICY.is_candidate(ratio, frequency) is expected


def test_custom_policy_changes_flags():
    rows = [raw(amount="100") for _ in range(9)] + [raw(amount="280")]
    policy = SuspicionPolicy(deviation_threshold=2.0)

    assert compute_features(rows, policy).records[-1].is_candidate is True


def test_unexpected_failure_is_wrapped():
    """Test internal errors surface as a computation error, not a crash"""
    with patch("fraudscan.domain.features.build_records", side_effect=RuntimeError("boom")):
        with pytest.raises(FeatureComputationError, match="boom"):
            compute_features([raw()])
