"""
Tests for tile splitting and fork-join execution.
"""

from __future__ import annotations

import threading

import numpy as np
import pytest

from hdrgrid import FilterCancelled
from hdrgrid.parallel import reduce_tiles, run_tiles, split


@pytest.mark.parametrize(
    "width, height, n",
    [(10, 10, 1), (10, 10, 4), (7, 3, 6), (1, 50, 8), (640, 480, 12), (5, 5, 7)],
)
def test_split_covers_image_exactly_once(width: int, height: int, n: int) -> None:
    coverage = np.zeros((height, width), dtype=int)
    tiles = split(width, height, n)

    assert 1 <= len(tiles) <= max(n, 1)
    for tile in tiles:
        assert tile.width > 0 and tile.height > 0
        coverage[tile.y1:tile.y2, tile.x1:tile.x2] += 1
    assert np.all(coverage == 1)


def test_split_of_empty_image() -> None:
    assert split(0, 10, 4) == []


def test_run_tiles_returns_results_in_tile_order() -> None:
    tiles = split(40, 30, 6)
    results = run_tiles(40, 30, lambda tile: (tile.x1, tile.y1), workers=6)
    assert results == [(tile.x1, tile.y1) for tile in tiles]


def test_parallel_reduction_matches_sequential() -> None:
    rng = np.random.default_rng(30)
    image = rng.random((33, 47))

    def tile_sum(tile) -> float:
        return float(image[tile.y1:tile.y2, tile.x1:tile.x2].sum())

    total = reduce_tiles(run_tiles(47, 33, tile_sum, workers=4), lambda a, b: a + b)
    assert total == pytest.approx(image.sum())


def test_cancellation_is_checked_before_each_tile() -> None:
    cancel = threading.Event()
    cancel.set()
    seen = []

    for workers in (1, 4):
        with pytest.raises(FilterCancelled):
            run_tiles(20, 20, seen.append, workers=workers, cancel=cancel)
    assert seen == []


def test_reduce_requires_results() -> None:
    with pytest.raises(ValueError):
        reduce_tiles([], max)
