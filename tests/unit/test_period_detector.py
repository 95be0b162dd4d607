"""Tests for grouping missing timestamps into periods."""

from gapfill.missing_data.models import MissingPeriod
from gapfill.missing_data.period_detector import MissingPeriodDetector
from gapfill.missing_data.time_index import build_time_index

from ..helpers import build_series, change_and_cumulative, hours


def _detect(records, change_columns=1, logger=None):
    return MissingPeriodDetector(logger).detect(records, build_time_index(records), change_columns)


def test_single_bounded_period(scenario_records):
    periods = _detect(scenario_records)
    assert len(periods) == 1
    period = periods[0]
    assert period.missing_times == [hours(1), hours(2)]
    assert period.channels == ["A"]
    assert period.start_time == hours(0)
    assert period.end_time == hours(3)
    assert period.missing_hours == 2
    assert period.is_bounded


def test_channels_with_same_span_are_grouped(mock_logger):
    records = build_series({
        "B": change_and_cumulative([1.0, None, 3.0], [1.0, None, 6.0]),
        "A": change_and_cumulative([1.0, None, 3.0], [1.0, None, 6.0]),
        "C": change_and_cumulative([1.0, 2.0, None], [1.0, 3.0, None]),
    })
    periods = _detect(records, logger=mock_logger)

    assert [(p.channels, p.missing_times) for p in periods] == [
        (["A", "B"], [hours(1)]),
        (["C"], [hours(2)]),
    ]
    assert periods[1].end_time is None
    assert mock_logger.messages_at("DEBUG")


def test_absent_cumulative_marks_timestamp_missing():
    records = build_series({"A": change_and_cumulative([1.0, 2.0, 3.0], [1.0, None, 6.0])})
    periods = _detect(records)
    assert len(periods) == 1
    assert periods[0].missing_times == [hours(1)]


def test_leading_gap_sorts_first():
    records = build_series({
        "A": change_and_cumulative([1.0, 2.0, None, 4.0], [1.0, 3.0, None, 10.0]),
        "B": change_and_cumulative([None, 2.0, 3.0, 4.0], [None, 2.0, 5.0, 9.0]),
    })
    periods = _detect(records)
    assert periods[0].channels == ["B"]
    assert periods[0].start_time is None
    assert periods[1].channels == ["A"]
    assert periods[1].start_time == hours(1)


def test_non_adjacent_runs_are_separate_periods():
    records = build_series({
        "A": change_and_cumulative([1.0, None, 3.0, None, 5.0], [1.0, None, 6.0, None, 15.0]),
    })
    periods = _detect(records)
    assert [p.missing_times for p in periods] == [[hours(1)], [hours(3)]]


def test_complete_dataset_has_no_periods():
    records = build_series({"A": change_and_cumulative([1.0, 2.0], [1.0, 3.0])})
    assert _detect(records) == []
    assert _detect([]) == []


def test_record_without_channel_is_not_a_gap():
    records = build_series({"A": change_and_cumulative([1.0, 2.0, 3.0], [1.0, 3.0, 6.0])})
    records[1].rows.clear()
    assert _detect(records) == []


def test_period_sort_key_orders_by_bounds():
    early = MissingPeriod([hours(2)], ["A"], start_time=hours(1), end_time=hours(3))
    late = MissingPeriod([hours(5)], ["A"], start_time=hours(4), end_time=hours(6))
    leading = MissingPeriod([hours(0)], ["B"], end_time=hours(1))
    assert sorted([late, early, leading], key=MissingPeriod.sort_key) == [leading, early, late]
