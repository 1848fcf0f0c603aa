"""
Fork-join execution over rectangular image tiles.
"""

from __future__ import annotations

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import reduce
from typing import Callable, List, Optional, Sequence, TypeVar

from hdrgrid.core.errors import FilterCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Tile:
    """Half-open pixel rectangle ``[x1, x2) × [y1, y2)``."""

    x1: int
    y1: int
    x2: int
    y2: int

    @property
    def width(self) -> int:
        return self.x2 - self.x1

    @property
    def height(self) -> int:
        return self.y2 - self.y1


def split(width: int, height: int, n: int) -> List[Tile]:
    """
    Split a ``width × height`` image into at most ``n`` tiles.

    The grid of tiles uses the factorisation of ``n`` closest to a square,
    covers every pixel exactly once and never yields an empty tile.
    """

    if width <= 0 or height <= 0:
        return []
    if n < 2:
        return [Tile(0, 0, width, height)]

    rows = int(math.sqrt(n))
    while n % rows:
        rows -= 1
    cols = n // rows
    # Wider images get more columns
    if height > width:
        rows, cols = cols, rows

    xs = _boundaries(width, cols)
    ys = _boundaries(height, rows)

    return [
        Tile(x1, y1, x2, y2)
        for y1, y2 in zip(ys[:-1], ys[1:])
        for x1, x2 in zip(xs[:-1], xs[1:])
    ]


def _boundaries(extent: int, parts: int) -> List[int]:
    parts = min(parts, extent)
    bounds = [extent * i // parts for i in range(parts + 1)]
    return sorted(set(bounds))


def run_tiles(
    width: int,
    height: int,
    fn: Callable[[Tile], T],
    workers: int = 1,
    cancel: Optional[threading.Event] = None,
) -> List[T]:
    """
    Run ``fn`` on every tile and return the results in tile order.

    Returns once all tiles are done (join barrier). ``cancel`` is checked
    before each tile starts; a set event raises :class:`FilterCancelled`.
    """

    tiles = split(width, height, workers)

    def run(tile: Tile) -> T:
        if cancel is not None and cancel.is_set():
            raise FilterCancelled(f"Cancelled before tile {tile}")
        return fn(tile)

    if workers <= 1 or len(tiles) <= 1:
        return [run(tile) for tile in tiles]

    logger.debug("Running %d tiles on %d workers", len(tiles), workers)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(run, tile) for tile in tiles]
        return [future.result() for future in futures]


def reduce_tiles(results: Sequence[T], combine: Callable[[T, T], T]) -> T:
    """Fold per-tile results with an associative, commutative ``combine``."""

    if not results:
        raise ValueError("No tile results to reduce")
    return reduce(combine, results)
