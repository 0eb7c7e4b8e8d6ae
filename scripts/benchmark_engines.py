#!/usr/bin/env python3
"""
Benchmark the force engines on star-of-stars demo graphs.

Usage:
    uv run python scripts/benchmark_engines.py [--engines NAME,...] [--sizes N,...]

Examples:
    uv run python scripts/benchmark_engines.py
    uv run python scripts/benchmark_engines.py --engines sequential,threads
    uv run python scripts/benchmark_engines.py --sizes 5x20,20x50 --iterations 50
    uv run python scripts/benchmark_engines.py --engines numba --dtype float64
"""

from __future__ import annotations

import argparse
import json
import time
from typing import Any, Callable

import numpy as np

from spring_embedder import (
    BackendInitializationError,
    ForceEngine,
    FruchtermanReingoldLayout,
    ParallelForceEngine,
    SequentialForceEngine,
    star_of_stars,
)


def parse_sizes(text: str) -> list[tuple[int, int]]:
    """Parse ``"5x20,20x50"`` into [(centers, nodes_per_center), ...]."""
    sizes = []
    for part in text.split(","):
        centers, nodes = part.lower().split("x")
        sizes.append((int(centers), int(nodes)))
    return sizes


def benchmark_engine(
    engine: ForceEngine,
    centers: int,
    nodes_per_center: int,
    iterations: int,
    size: tuple[int, int],
) -> dict[str, Any]:
    """
    Time one layout run.

    Returns:
        Dict with timing and graph size
    """
    graph = star_of_stars(centers, nodes_per_center)
    layout = FruchtermanReingoldLayout(size=size, engine=engine, random_seed=42)

    start = time.perf_counter()
    layout.layout(graph, iterations)
    elapsed = time.perf_counter() - start

    return {
        "time_seconds": elapsed,
        "ms_per_iteration": elapsed * 1000.0 / max(iterations, 1),
        "num_nodes": graph.vertex_count,
        "num_edges": graph.edge_count,
    }


def run_benchmarks(
    engines: list[str] | None = None,
    sizes: list[tuple[int, int]] | None = None,
    iterations: int = 100,
    dtype: str = "float32",
    size: tuple[int, int] = (1000, 1000),
) -> list[dict]:
    """Run benchmarks for every engine on every graph size."""
    all_engines: dict[str, Callable[[], ForceEngine]] = {
        "sequential": SequentialForceEngine,
        "threads": lambda: ParallelForceEngine(backend="threads", dtype=np.dtype(dtype)),
        "numba": lambda: ParallelForceEngine(backend="numba", dtype=np.dtype(dtype)),
    }

    if engines:
        selected = {}
        for name in engines:
            if name in all_engines:
                selected[name] = all_engines[name]
            else:
                print(f"Warning: Unknown engine '{name}', skipping")
        all_engines = selected

    sizes = sizes or [(5, 10), (10, 20), (20, 25)]
    results = []

    print(f"\nBenchmarking {len(all_engines)} engines on {len(sizes)} graphs")
    print(f"Iterations: {iterations}, Canvas: {size[0]}x{size[1]}, Buffers: {dtype}")
    print("=" * 80)

    for engine_name, factory in all_engines.items():
        try:
            engine = factory()
        except BackendInitializationError as e:
            print(f"  {engine_name:12s}: UNAVAILABLE - {e}")
            continue

        with engine:
            for centers, nodes in sizes:
                # Sequential repulsion is O(n^2) in pure Python
                if engine_name == "sequential" and centers * nodes > 1000:
                    print(f"  {engine_name:12s} {centers}x{nodes}: SKIPPED (too slow)")
                    continue

                result = benchmark_engine(engine, centers, nodes, iterations, size)
                graph_name = f"star_{centers}x{nodes}"
                print(
                    f"  {engine_name:12s} {graph_name:14s}: {result['time_seconds']:.4f}s "
                    f"({result['ms_per_iteration']:.2f} ms/iteration)"
                )
                results.append({"graph": graph_name, "engine": engine_name, **result})

    # Summary
    print("\n" + "=" * 80)
    print("SUMMARY (times in seconds)")
    print("=" * 80)

    graph_names = [f"star_{c}x{n}" for c, n in sizes]
    engine_names = list(all_engines.keys())

    print(f"{'Graph':<25s}", end="")
    for name in engine_names:
        print(f"{name:>12s}", end="")
    print()
    print("-" * (25 + 12 * len(engine_names)))

    for graph in graph_names:
        print(f"{graph:<25s}", end="")
        for name in engine_names:
            matching = [r for r in results if r["graph"] == graph and r["engine"] == name]
            if matching:
                print(f"{matching[0]['time_seconds']:>12.4f}", end="")
            else:
                print(f"{'--':>12s}", end="")
        print()

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark force engines")
    parser.add_argument(
        "--engines", help="Comma-separated engines (sequential, threads, numba)"
    )
    parser.add_argument("--sizes", help="Comma-separated CENTERSxNODES graph sizes")
    parser.add_argument("--iterations", type=int, default=100, help="Layout iterations")
    parser.add_argument(
        "--dtype", choices=["float32", "float64"], default="float32", help="Buffer precision"
    )
    parser.add_argument("--output", help="Output JSON file for results")

    args = parser.parse_args()

    results = run_benchmarks(
        engines=args.engines.split(",") if args.engines else None,
        sizes=parse_sizes(args.sizes) if args.sizes else None,
        iterations=args.iterations,
        dtype=args.dtype,
    )

    if args.output and results:
        with open(args.output, "w") as f:
            json.dump(results, f, indent=2)
        print(f"\nResults saved to {args.output}")


if __name__ == "__main__":
    main()
