"""
Performance benchmarks for the utility selector.

Run standalone: python benchmarks/benchmark_selector.py
"""
import random
import statistics
import time
from typing import Tuple

from utility_ai.config import SelectorConfig
from utility_ai.harness import make_scripted_action
from utility_ai.selection import ActionCatalog, UtilitySelector
from utility_ai.types import Agent


def create_selector(n_actions: int, **config) -> UtilitySelector:
    """Create a selector with `n_actions` scripted actions of random score."""
    rng = random.Random(7)
    catalog = ActionCatalog()
    names = []
    for i in range(n_actions):
        name = f"Action{i}"
        catalog.register(make_scripted_action(name, score=rng.uniform(0.1, 10.0)))
        names.append(name)

    selector = UtilitySelector(
        Agent("bench", body="pawn"),
        SelectorConfig(actions=names, **config),
        catalog=catalog,
        rng=random.Random(42),
    )
    selector.initialise()
    return selector


def benchmark(fn, iterations: int = 1000) -> Tuple[float, float, float]:
    """
    Benchmark a function.

    Returns:
        (mean_ms, min_ms, max_ms)
    """
    times = []

    for _ in range(iterations):
        start = time.perf_counter()
        fn()
        elapsed = (time.perf_counter() - start) * 1000
        times.append(elapsed)

    return (
        statistics.mean(times),
        min(times),
        max(times),
    )


def benchmark_cycle(n_actions: int, **config) -> float:
    """Benchmark one decision cycle over `n_actions` actions."""
    selector = create_selector(n_actions, **config)
    t = [0.0]

    def run():
        t[0] += 0.016
        selector.tick_delta_time += 0.016
        selector.tick_utility_ai(now=t[0])

    mean, min_t, max_t = benchmark(run, iterations=5000)
    label = ", ".join(f"{k}={v}" for k, v in config.items()) or "default"
    print(f"decision cycle ({n_actions} actions, {label}):")
    print(f"  Mean: {mean:.4f}ms  Min: {min_t:.4f}ms  Max: {max_t:.4f}ms")
    return mean


def main():
    print("=" * 60)
    print("Utility selector benchmarks")
    print("=" * 60)
    for n in (4, 16, 64):
        benchmark_cycle(n)
    benchmark_cycle(64, randomize_on_equality=True, equality_tolerance=1.0)
    benchmark_cycle(64, invert_scoring=True)


if __name__ == "__main__":
    main()
