#!/usr/bin/env python3
"""
Lay out the star-of-stars demo graph and write one PNG per iteration.

Usage:
    uv run python scripts/animate.py [--engine sequential|parallel] [--output DIR]

Examples:
    uv run python scripts/animate.py
    uv run python scripts/animate.py --engine parallel --backend numba --iterations 300
    uv run python scripts/animate.py --centers 8 --nodes-per-center 40 --every 5 -v

Turn the frames into a video with e.g.:
    ffmpeg -framerate 30 -i frames/iteration-%04d.png layout.mp4
"""

from __future__ import annotations

import argparse
import logging

import numpy as np

from spring_embedder import FrameRenderer, FruchtermanReingoldLayout, star_of_stars


def main():
    parser = argparse.ArgumentParser(description="Animate a Fruchterman-Reingold layout")
    parser.add_argument(
        "--engine", choices=["sequential", "parallel"], default="sequential", help="Force engine"
    )
    parser.add_argument(
        "--backend", choices=["threads", "numba"], default="threads", help="Parallel backend"
    )
    parser.add_argument(
        "--dtype", choices=["float32", "float64"], default="float32", help="Parallel precision"
    )
    parser.add_argument("--iterations", type=int, default=200, help="Layout iterations")
    parser.add_argument("--width", type=int, default=640, help="Canvas width in pixels")
    parser.add_argument("--height", type=int, default=480, help="Canvas height in pixels")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for placement")
    parser.add_argument("--centers", type=int, default=5, help="Sub-hubs of the demo graph")
    parser.add_argument(
        "--nodes-per-center", type=int, default=20, help="Leaves per sub-hub"
    )
    parser.add_argument("--output", default="frames", help="Directory for PNG frames")
    parser.add_argument("--every", type=int, default=1, help="Write every n-th iteration")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log each iteration")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    size = (args.width, args.height)
    engine_options = None
    if args.engine == "parallel":
        engine_options = {"backend": args.backend, "dtype": np.dtype(args.dtype)}

    graph = star_of_stars(args.centers, args.nodes_per_center)
    renderer = FrameRenderer(args.output, size, every=args.every)

    with FruchtermanReingoldLayout(
        size=size,
        engine=args.engine,
        engine_options=engine_options,
        renderer=renderer,
        random_seed=args.seed,
    ) as layout:
        layout.layout(graph, args.iterations)

    print(f"Wrote {len(renderer.written)} frames to {renderer.output_dir}/")


if __name__ == "__main__":
    main()
