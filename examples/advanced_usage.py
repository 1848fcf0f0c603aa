"""
Advanced hdrgrid usage scenarios.
"""

from __future__ import annotations

import logging
import threading

import numpy as np

from hdrgrid import (
    BilateralConfig,
    DurandConfig,
    DurandToneMapper,
    FastBilateral,
    FilterCancelled,
    FilterState,
    HDRImage,
    SizeError,
)


def example_step_by_step() -> HDRImage:
    """Drive the filter through its phases explicitly."""

    img = HDRImage(np.random.rand(256, 256, 3) * 500.0)
    bilateral = FastBilateral(img, BilateralConfig.automatic(sigma_space=16.0, workers=4))

    geometry = bilateral.scan_statistics()
    print(f"{bilateral.state.value}: sigma_range={geometry.sigma_range:0.3f}, size={geometry.size}")

    bilateral.build_lattice()
    print(f"{bilateral.state.value}: mass={bilateral.lattice.mass.sum():0.1f}")

    bilateral.perform()
    assert bilateral.state == FilterState.QUERYABLE
    return bilateral.materialize()


def example_with_intermediate_results() -> dict:
    """Retrieve intermediate maps of the tone mapper for inspection."""

    img_hdr = np.random.rand(256, 256, 3) * 500.0
    tmo = DurandToneMapper(DurandConfig(contrast=8.0, sigma_space=12.0))
    results = tmo.process(img_hdr, return_intermediate=True)
    keys = ", ".join(results.keys())
    print(f"Intermediate results available: {keys}")
    return results


def example_cell_limit() -> None:
    """Refuse lattices larger than a cell limit."""

    img = HDRImage(np.random.rand(512, 512, 3) * 1000.0)
    config = BilateralConfig(sigma_space=2.0, sigma_range=1.0, max_cells=1_000_000)
    try:
        FastBilateral(img, config).perform()
    except SizeError as exc:
        print(f"Lattice refused: {exc}")


def example_cancellation() -> None:
    """Cancel a running filter from another thread."""

    img = HDRImage(np.random.rand(512, 512, 3) * 1000.0)
    cancel = threading.Event()
    bilateral = FastBilateral(img, BilateralConfig.automatic(sigma_space=4.0, workers=8), cancel=cancel)

    timer = threading.Timer(0.01, cancel.set)
    timer.start()
    try:
        bilateral.materialize()
        print("Finished before cancellation")
    except FilterCancelled:
        print(f"Cancelled in state {bilateral.state.value}")
    finally:
        timer.cancel()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print("Running hdrgrid advanced examples...")
    example_step_by_step()
    example_with_intermediate_results()
    example_cell_limit()
    example_cancellation()
