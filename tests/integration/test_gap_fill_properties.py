"""End-to-end properties of a gap-fill run over a multi-channel dataset."""

import copy
import random
from datetime import datetime, timedelta

import pytest

from gapfill.core.records import make_record
from gapfill.missing_data.engine import GapFillEngine
from gapfill.settings import GapFillConfig
from gapfill.utils.fill_cache import FillValueCache

pytestmark = pytest.mark.integration

CHANNELS = ("P-01", "P-02", "P-03")
CHANGE_COLUMNS = 3


def _dataset(timestamps=48, seed=7, leading_gap=True):
    """Monitoring-style series: three change columns and their running totals.

    Contiguous gaps blank both halves of a channel; one channel starts with a
    gap so it has no earlier neighbor.
    """
    rng = random.Random(seed)
    start = datetime(2024, 1, 1)
    totals = {name: [0.0] * CHANGE_COLUMNS for name in CHANNELS}
    series = []
    for i in range(timestamps):
        channels = {}
        for name in CHANNELS:
            changes = [round(rng.uniform(-5, 5), 2) for _ in range(CHANGE_COLUMNS)]
            totals[name] = [round(t + c, 2) for t, c in zip(totals[name], changes, strict=True)]
            channels[name] = changes + list(totals[name])
        series.append(make_record(start + timedelta(hours=8 * i), channels))

    gaps = [("P-01", 3, 5), ("P-02", 10, 12), ("P-01", 20, 20), ("P-03", 30, 35)]
    if leading_gap:
        gaps.append(("P-02", 0, 1))
    for name, first, last in gaps:
        for position in range(first, last + 1):
            row = series[position].row(name)
            for column in range(CHANGE_COLUMNS * 2):
                row.set(column, None)
    return series


def _values(records):
    return [[row.values for row in record.rows] for record in records]


def _config(**overrides):
    return GapFillConfig(change_columns_per_row=CHANGE_COLUMNS, **overrides)


def test_fills_stay_between_original_neighbors(mock_logger):
    original = _dataset()
    records = copy.deepcopy(original)

    GapFillEngine(_config(), mock_logger).run(records)

    for name in CHANNELS:
        for column in range(CHANGE_COLUMNS):
            known = [
                (i, r.row(name).get(column))
                for i, r in enumerate(original)
                if r.row(name).get(column) is not None
            ]
            for position, record in enumerate(records):
                if original[position].row(name).get(column) is not None:
                    continue
                value = record.row(name).get(column)
                if value is None:
                    continue
                before = max(v for v in known if v[0] < position)[1]
                after = min(v for v in known if v[0] > position)[1]
                assert min(before, after) <= value <= max(before, after)


def test_filled_cumulative_follows_changes(mock_logger):
    original = _dataset()
    records = copy.deepcopy(original)

    GapFillEngine(_config(), mock_logger).run(records)

    checked = 0
    for name in CHANNELS:
        for column in range(CHANGE_COLUMNS):
            total_column = column + CHANGE_COLUMNS
            for position in range(1, len(records)):
                if original[position].row(name).get(total_column) is not None:
                    continue
                total = records[position].row(name).get(total_column)
                if total is None:
                    continue
                prev_total = records[position - 1].row(name).get(total_column)
                change = records[position].row(name).get(column)
                assert total - prev_total == pytest.approx(change, abs=1e-9)
                checked += 1
    assert checked == 13 * CHANGE_COLUMNS


def test_leading_gap_is_left_unresolved(mock_logger):
    records = _dataset()

    stats = GapFillEngine(_config(), mock_logger).run(records)

    for position in (0, 1):
        assert records[position].row("P-02").values == [None] * (CHANGE_COLUMNS * 2)
    assert stats.cache_misses == 2 * CHANGE_COLUMNS
    assert stats.unresolved_points == 2 * CHANGE_COLUMNS
    # P-01 3..5 and 20, P-02 10..12, P-03 30..35
    assert stats.fills == (3 + 1 + 3 + 6) * CHANGE_COLUMNS


def test_second_run_is_idempotent(mock_logger):
    records = _dataset()
    engine = GapFillEngine(_config(), mock_logger)
    engine.run(records)
    filled = _values(records)

    stats = engine.run(records)

    assert stats.fills == 0
    assert stats.cumulative_fills == 0
    assert _values(records) == filled


def test_warm_cache_gives_identical_values(mock_logger):
    cache = FillValueCache()
    cold = _dataset()
    warm = _dataset()

    cold_stats = GapFillEngine(_config(), mock_logger, cache=cache).run(cold)
    warm_stats = GapFillEngine(_config(), mock_logger, cache=cache).run(warm)

    assert _values(warm) == _values(cold)
    assert cold_stats.cache_hits == 0
    assert warm_stats.cache_hits == cold_stats.fills
    assert warm_stats.fills == 0


def test_parallel_columns_match_sequential(mock_logger):
    sequential = _dataset()
    parallel = _dataset()

    seq_stats = GapFillEngine(_config(), mock_logger).run(sequential)
    par_stats = GapFillEngine(
        _config(enable_parallel_value_columns=True, max_workers=3), mock_logger,
    ).run(parallel)

    assert _values(parallel) == _values(sequential)
    assert par_stats == seq_stats


@pytest.mark.parametrize("policy", ["midpoint", "position_weighted"])
def test_no_absent_cells_remain_in_bounded_gaps(policy, mock_logger):
    records = _dataset(leading_gap=False)

    GapFillEngine(_config(fill_policy=policy), mock_logger).run(records)

    for record in records:
        for row in record.rows:
            assert row.is_all_valid


@pytest.mark.slow
def test_large_dataset_parallel(mock_logger):
    sequential = _dataset(timestamps=2000, seed=11)
    parallel = copy.deepcopy(sequential)

    GapFillEngine(_config(), mock_logger).run(sequential)
    GapFillEngine(_config(enable_parallel_value_columns=True), mock_logger).run(parallel)

    assert _values(parallel) == _values(sequential)
