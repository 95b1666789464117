from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np


class ProblemDataError(ValueError):
    """Base class for invalid CFLP input data."""


class DemandExceedsCapacityError(ProblemDataError):
    pass


class FixedCostDimensionError(ProblemDataError):
    pass


class VarCostColumnError(ProblemDataError):
    pass


class VarCostRowError(ProblemDataError):
    pass


def _frozen(values, dtype) -> np.ndarray:
    arr = np.array(values, dtype=dtype, copy=True)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class ProblemData:
    """
    Immutable CFLP instance.

    Internal indices are 0-based: facilities j = 0..m-1, clients i = 0..n-1.
    var_cost has shape (n, m), i.e. client x facility.
    big_m_facility / big_m_client are upper bounds used as exclusion weights.
    """

    fixed_cost: np.ndarray  # (m,)
    var_cost: np.ndarray  # (n, m)
    capacity: np.ndarray  # (m,)
    demand: np.ndarray  # (n,)
    m: int
    n: int
    big_m_facility: float
    big_m_client: float

    @classmethod
    def build(cls, fixed_cost, var_cost, capacity, demand) -> "ProblemData":
        """
        Validate raw arrays and derive dimensions and upper bounds.
        Checks (in order): total demand vs total capacity, fixed cost vs capacity
        length, variable cost columns vs capacity, variable cost rows vs demand.
        """
        fixed = _frozen(fixed_cost, np.float64).reshape(-1)
        var = _frozen(var_cost, np.float64)
        cap = _frozen(capacity, np.int64).reshape(-1)
        dem = _frozen(demand, np.int64).reshape(-1)

        if var.ndim != 2:
            raise ProblemDataError(f"Variable cost must be a 2-D matrix, got {var.ndim} dimensions")

        if int(dem.sum()) > int(cap.sum()):
            raise DemandExceedsCapacityError(
                f"Demand exceeds capacity: {int(dem.sum())} > {int(cap.sum())}"
            )
        if cap.shape[0] != fixed.shape[0]:
            raise FixedCostDimensionError(
                f"Dimension capacity ({cap.shape[0]}) and fix cost ({fixed.shape[0]}) dont match"
            )
        if cap.shape[0] != var.shape[1]:
            raise VarCostColumnError(
                f"Dimension capacity ({cap.shape[0]}) and variable cost columns ({var.shape[1]}) dont match"
            )
        if dem.shape[0] != var.shape[0]:
            raise VarCostRowError(
                f"Dimension demand ({dem.shape[0]}) and variable cost rows ({var.shape[0]}) dont match"
            )

        if cap.shape[0] == 0 or dem.shape[0] == 0:
            raise ProblemDataError("Need at least one facility and one client")
        if np.any(fixed < 0) or np.any(var < 0):
            raise ProblemDataError("Costs must be non-negative")
        if np.any(cap <= 0) or np.any(dem <= 0):
            raise ProblemDataError("Capacities and demands must be positive")

        return cls(
            fixed_cost=fixed,
            var_cost=var,
            capacity=cap,
            demand=dem,
            m=int(cap.shape[0]),
            n=int(dem.shape[0]),
            big_m_facility=float(var.sum()) + 1.0,
            big_m_client=float(var.max()) + 1.0,
        )


def compute_cost(data: ProblemData, open_facilities: np.ndarray, assignment: np.ndarray) -> float:
    """Fixed cost of open facilities plus sum of var_cost[i, j] * assignment[j, i]."""
    total = float(np.dot(data.fixed_cost, np.asarray(open_facilities, dtype=np.float64)))
    total += float(np.sum(data.var_cost.T * assignment))
    return total


@dataclass(frozen=True, eq=False)
class Solution:
    """
    Snapshot of a candidate solution.

    open_facilities[j] is True iff facility j is open.
    assignment[j, i] is the demand of client i served by facility j (shape (m, n)).
    cost is computed once in build() and always equals compute_cost().
    """

    open_facilities: np.ndarray
    assignment: np.ndarray
    cost: float

    @classmethod
    def build(cls, data: ProblemData, open_facilities, assignment) -> "Solution":
        opened = _frozen(open_facilities, bool).reshape(-1)
        assign = _frozen(assignment, np.int64)
        if opened.shape != (data.m,):
            raise ValueError(f"open_facilities must have length {data.m}, got {opened.shape}")
        if assign.shape != (data.m, data.n):
            raise ValueError(f"assignment must have shape {(data.m, data.n)}, got {assign.shape}")
        return cls(
            open_facilities=opened,
            assignment=assign,
            cost=compute_cost(data, opened, assign),
        )

    @property
    def num_open(self) -> int:
        return int(np.count_nonzero(self.open_facilities))

    def open_indices(self) -> List[int]:
        return [int(j) for j in np.flatnonzero(self.open_facilities)]

    def assignment_triples(self) -> List[Tuple[int, int, int]]:
        """Sparse (client, facility, amount) triples with amount > 0, ordered by client."""
        triples: List[Tuple[int, int, int]] = []
        m, n = self.assignment.shape
        for i in range(n):
            for j in range(m):
                amount = int(self.assignment[j, i])
                if amount != 0:
                    triples.append((i, j, amount))
        return triples
