"""Performance helpers for benchmarking and profiling the laboratory pipeline."""

from __future__ import annotations

import cProfile
import io
import pstats
import statistics
import timeit
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Mapping, Sequence

from .app import PrngLabApp
from .generators import GeneratorParameters, generate
from .tests import RandomnessTest, run_randomness_battery


def _summarise(runs: Sequence[float]) -> Mapping[str, float]:
    return {
        "min": min(runs),
        "max": max(runs),
        "mean": statistics.fmean(runs),
    }


def benchmark_generation(
    algorithm: str,
    params: GeneratorParameters,
    *,
    repeat: int = 5,
    **options: Any,
) -> Mapping[str, float]:
    """Benchmark :func:`~prnglab.generators.generate` for one configuration."""

    timer = timeit.Timer(lambda: generate(algorithm, params, **options))
    return _summarise(timer.repeat(repeat=repeat, number=1))


def benchmark_battery(
    values: Sequence[float],
    tests: Sequence[RandomnessTest] | None = None,
    *,
    repeat: int = 5,
) -> Mapping[str, float]:
    """Benchmark the randomness battery on ``values``."""

    cached_values = tuple(values)
    timer = timeit.Timer(lambda: run_randomness_battery(cached_values, tests))
    return _summarise(timer.repeat(repeat=repeat, number=1))


def profile_application(config_path: Path, *, input_path: Path | None = None, repeat: int = 1) -> str:
    """Profile the end-to-end application pipeline using :mod:`cProfile`."""

    app = PrngLabApp(stream=io.StringIO())
    profiler = cProfile.Profile()
    for _ in range(repeat):
        profiler.runcall(app.run, config_path, input_path)
    return _format_stats(profiler, 25)


@contextmanager
def capture_profile(
    app: PrngLabApp | None = None,
) -> Iterator[tuple[PrngLabApp, Callable[[int], str]]]:
    """Context manager capturing profiling data for manual inspection.

    The yielded tuple contains the :class:`PrngLabApp` instance to use for the
    profiled operations and a callable that returns a formatted profile
    summary when invoked.
    """

    profiler = cProfile.Profile()
    target_app = app or PrngLabApp(stream=io.StringIO())
    profiler.enable()

    def exporter(limit: int = 25) -> str:
        profiler.disable()
        return _format_stats(profiler, limit)

    try:
        yield target_app, exporter
    finally:
        profiler.disable()


def _format_stats(profiler: cProfile.Profile, limit: int) -> str:
    stream = io.StringIO()
    stats = pstats.Stats(profiler, stream=stream)
    stats.strip_dirs().sort_stats("cumulative").print_stats(limit)
    return stream.getvalue()


__all__ = [
    "benchmark_battery",
    "benchmark_generation",
    "capture_profile",
    "profile_application",
]
