from __future__ import annotations

import argparse
import sys
import time

import numpy as np

from .anneal import AnnealConfig
from .io import read_cflp
from .orchestrator import default_outer_config, solve_with_data
from .solution import emit_solution, is_feasible


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Solve a CFLP instance with two-layer simulated annealing.")
    parser.add_argument("instance", help="CFLP instance file")
    parser.add_argument("k", type=int, help="maximum number of open facilities")
    parser.add_argument("time_limit", type=float, nargs="?", default=None, help="time limit (seconds)")
    parser.add_argument("--seed", type=int, default=None, help="random seed")
    parser.add_argument("--max-iter", type=int, default=100, help="outer proposals per temperature")
    parser.add_argument("--inner-max-iter", type=int, default=5, help="inner proposals per temperature")
    parser.add_argument("--head", action="store_true", help="print only the first 5 customers")
    args = parser.parse_args(argv)

    if args.k < 1:
        print("k must be a positive integer", file=sys.stderr)
        return 1

    data = read_cflp(args.instance)
    outer = default_outer_config()
    outer.max_iter = args.max_iter
    inner = AnnealConfig(max_iter=args.inner_max_iter)

    start = time.monotonic()
    solution = solve_with_data(
        data,
        args.k,
        rng=np.random.default_rng(args.seed),
        outer_config=outer,
        inner_config=inner,
        time_limit_sec=args.time_limit,
    )
    elapsed = time.monotonic() - start
    emit_solution(solution, head=args.head)
    print(
        f"feasible={is_feasible(data, solution, args.k)} time_s={elapsed:.2f}",
        file=sys.stderr,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
