from __future__ import annotations

import time
import warnings
from pathlib import Path
from typing import Callable, Iterable, Optional

import numpy as np

from .anneal import AnnealConfig, accept, anneal_assignment, deadline_passed
from .constructor import InitConfig, build_initial_solution
from .core import ProblemData, Solution
from .moves import DEFAULT_MAX_ATTEMPTS, propose_facility
from .solution import is_feasible


def default_outer_config() -> AnnealConfig:
    return AnnealConfig(start_temp=10.0, end_temp=1.0, alpha=0.5, max_iter=100)


def solve_with_data(
    data: ProblemData,
    k: int,
    rng: Optional[np.random.Generator] = None,
    outer_config: Optional[AnnealConfig] = None,
    inner_config: Optional[AnnealConfig] = None,
    init_config: Optional[InitConfig] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    time_limit_sec: Optional[float] = None,
    on_improve: Optional[Callable[[Solution], None]] = None,
) -> Solution:
    """
    Two-layer simulated annealing for the CFLP.
    Outer loop proposes facility flips (repaired to feasibility under k and
    assigned greedily), each refined by the inner assignment annealer, then
    accepted with the Metropolis rule. best only takes feasible candidates
    that are strictly cheaper than it, so an infeasible bootstrap can survive.
    on_improve is called with the new best whenever it improves.
    If best is still infeasible at the end a RuntimeWarning is issued and it is
    returned anyway.
    """
    if k < 1:
        raise ValueError(f"k must be at least 1, got {k}")
    rng = rng if rng is not None else np.random.default_rng()
    outer_config = outer_config or default_outer_config()
    inner_config = inner_config or AnnealConfig()
    outer_config.validate()
    inner_config.validate()

    deadline = None
    if time_limit_sec is not None:
        deadline = time.monotonic() + time_limit_sec

    current = build_initial_solution(data, k, rng, init_config)
    best = current
    best_feasible = is_feasible(data, best, k)
    if best_feasible and on_improve is not None:
        on_improve(best)

    temp = outer_config.start_temp
    while temp > outer_config.end_temp and not deadline_passed(deadline):
        for _ in range(outer_config.max_iter):
            if deadline_passed(deadline):
                break
            heuristic = propose_facility(data, current, k, rng, max_attempts=max_attempts)
            candidate = anneal_assignment(data, heuristic, rng, inner_config, deadline=deadline)

            if is_feasible(data, candidate, k) and candidate.cost < best.cost:
                best = candidate
                best_feasible = True
                if on_improve is not None:
                    on_improve(best)

            if accept(current.cost, candidate.cost, temp, rng):
                current = candidate
        temp *= outer_config.alpha

    if not best_feasible:
        warnings.warn("did not find a feasible solution", RuntimeWarning, stacklevel=2)
    return best


def solve(
    instance_path: str | Path,
    k: int,
    seed: Optional[int] = None,
    outer_config: Optional[AnnealConfig] = None,
    inner_config: Optional[AnnealConfig] = None,
    time_limit_sec: Optional[float] = None,
    on_improve: Optional[Callable[[Solution], None]] = None,
) -> Solution:
    """Convenience wrapper that loads an instance then solves."""
    from .io import read_cflp

    data = read_cflp(instance_path)
    return solve_with_data(
        data,
        k,
        rng=np.random.default_rng(seed),
        outer_config=outer_config,
        inner_config=inner_config,
        time_limit_sec=time_limit_sec,
        on_improve=on_improve,
    )


def best_of(
    data: ProblemData,
    k: int,
    seeds: Iterable[int],
    outer_config: Optional[AnnealConfig] = None,
    inner_config: Optional[AnnealConfig] = None,
    time_limit_sec: Optional[float] = None,
) -> Solution:
    """
    Run one independent search per seed, each with its own generator, and
    return the cheapest feasible result (cheapest overall if none is feasible).
    """
    results = []
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        for seed in seeds:
            results.append(
                solve_with_data(
                    data,
                    k,
                    rng=np.random.default_rng(seed),
                    outer_config=outer_config,
                    inner_config=inner_config,
                    time_limit_sec=time_limit_sec,
                )
            )
    if not results:
        raise ValueError("best_of needs at least one seed")
    feasible = [s for s in results if is_feasible(data, s, k)]
    pool = feasible or results
    best = min(pool, key=lambda s: s.cost)
    if not feasible:
        warnings.warn("did not find a feasible solution", RuntimeWarning, stacklevel=2)
    return best
