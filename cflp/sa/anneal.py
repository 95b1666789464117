from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .core import ProblemData, Solution
from .moves import propose_assignment


@dataclass
class AnnealConfig:
    """Geometric cooling schedule: max_iter proposals per temperature, then temp *= alpha."""

    start_temp: float = 10.0
    end_temp: float = 1.0
    alpha: float = 0.5
    max_iter: int = 5

    def validate(self) -> None:
        if not self.start_temp > 0:
            raise ValueError(f"start_temp must be positive, got {self.start_temp}")
        if not self.end_temp > 0:
            raise ValueError(f"end_temp must be positive, got {self.end_temp}")
        if not self.end_temp < self.start_temp:
            raise ValueError(f"end_temp ({self.end_temp}) must be below start_temp ({self.start_temp})")
        if not 0 < self.alpha < 1:
            raise ValueError(f"alpha must be in (0, 1), got {self.alpha}")
        if self.max_iter <= 0:
            raise ValueError(f"max_iter must be positive, got {self.max_iter}")


def accept(current_cost: float, candidate_cost: float, temp: float, rng: np.random.Generator) -> bool:
    """Metropolis rule: always take strict improvements, else with prob exp(-delta / temp)."""
    if candidate_cost < current_cost:
        return True
    return rng.random() < math.exp((current_cost - candidate_cost) / temp)


def deadline_passed(deadline: Optional[float]) -> bool:
    return deadline is not None and time.monotonic() >= deadline


def anneal_assignment(
    data: ProblemData,
    solution: Solution,
    rng: np.random.Generator,
    cfg: Optional[AnnealConfig] = None,
    deadline: Optional[float] = None,
) -> Solution:
    """
    Simulated annealing over demand-transfer moves for a fixed facility decision.
    Returns the cheapest assignment seen (the input if nothing improved).
    deadline is a time.monotonic() timestamp checked between proposals.
    """
    if cfg is None:
        cfg = AnnealConfig()
    cfg.validate()

    current = solution
    best = solution
    temp = cfg.start_temp

    while temp > cfg.end_temp:
        for _ in range(cfg.max_iter):
            if deadline_passed(deadline):
                return best
            candidate = propose_assignment(data, current, rng)
            if candidate.cost < best.cost:
                best = candidate
            if accept(current.cost, candidate.cost, temp, rng):
                current = candidate
        temp *= cfg.alpha

    return best
