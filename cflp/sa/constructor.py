from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .core import ProblemData, Solution
from .moves import NoFeasibleNeighborError


@dataclass
class InitConfig:
    """Configuration for the initial constructor."""

    # cap on random open/closed draws when k <= m / 2
    max_draws: int = 10_000


def _draw_open_facilities(data: ProblemData, k: int, rng: np.random.Generator, cfg: InitConfig) -> np.ndarray:
    if k > data.m / 2:
        return np.ones(data.m, dtype=bool)
    total_demand = int(data.demand.sum())
    for _ in range(cfg.max_draws):
        opened = rng.random(data.m) < 0.5
        if int(np.sum(data.capacity[opened])) >= total_demand:
            return opened
    raise NoFeasibleNeighborError(
        f"No open facility vector with enough capacity after {cfg.max_draws} draws"
    )


def build_initial_solution(
    data: ProblemData,
    k: int,
    rng: np.random.Generator,
    cfg: Optional[InitConfig] = None,
) -> Solution:
    """
    Capacity-balancing bootstrap.
    - Opens all facilities when k > m / 2, otherwise draws random open vectors
      until the open capacity covers total demand.
    - Sends each client's demand to the open facility with the largest remaining
      capacity (lowest index on ties), splitting across facilities as needed.
    The result may open more than k facilities.
    """
    if cfg is None:
        cfg = InitConfig()

    opened = _draw_open_facilities(data, k, rng, cfg)
    assignment = np.zeros((data.m, data.n), dtype=np.int64)
    capacities = np.where(opened, data.capacity, 0).astype(np.int64)

    for i in range(data.n):
        remaining = int(data.demand[i])
        while remaining > 0:
            j = int(np.argmax(capacities))
            amount = min(remaining, int(capacities[j]))
            assignment[j, i] += amount
            capacities[j] -= amount
            remaining -= amount

    return Solution.build(data, opened, assignment)
