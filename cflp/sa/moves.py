from __future__ import annotations

import numpy as np

from .core import ProblemData, Solution
from .greedy import greedy_assignment
from .solution import is_feasible

DEFAULT_MAX_ATTEMPTS = 10_000


class NoFeasibleNeighborError(RuntimeError):
    """Raised when a bounded repair or draw loop finds no feasible candidate."""


def propose_facility(
    data: ProblemData,
    solution: Solution,
    k: int,
    rng: np.random.Generator,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Solution:
    """
    Flip the open/closed status of a random facility and re-assign greedily.
    While the candidate is infeasible under k, flip another random index of the
    same candidate (flips accumulate). Raises NoFeasibleNeighborError after
    max_attempts flips.
    """
    candidate = solution.open_facilities.copy()
    for _ in range(max_attempts):
        idx = int(rng.integers(data.m))
        candidate[idx] = not candidate[idx]
        neighbor = Solution.build(data, candidate, greedy_assignment(data, candidate))
        if is_feasible(data, neighbor, k):
            return neighbor
    raise NoFeasibleNeighborError(f"No feasible facility flip found in {max_attempts} attempts")


def propose_assignment(data: ProblemData, solution: Solution, rng: np.random.Generator) -> Solution:
    """
    Move a random part of one client's demand to a facility with free capacity.
    - j_free: random facility with free capacity (capacity * open - load > 0).
    - i_rand: random client; j_rand: random facility currently serving i_rand.
    - Moves a random amount in [1, min(free[j_free], assignment[j_rand, i_rand])].
    Open facilities are unchanged. When j_free == j_rand the assignment does not
    change. If nothing can move the input solution is returned.
    """
    assignment = solution.assignment
    free_capacity = np.where(solution.open_facilities, data.capacity, 0) - assignment.sum(axis=1)

    free_js = np.flatnonzero(free_capacity > 0)
    if free_js.size == 0:
        return solution
    j_free = int(rng.choice(free_js))

    i_rand = int(rng.integers(data.n))
    serving = np.flatnonzero(assignment[:, i_rand] != 0)
    if serving.size == 0:
        return solution
    j_rand = int(rng.choice(serving))

    upper = min(int(free_capacity[j_free]), int(assignment[j_rand, i_rand]))
    if upper < 1:
        return solution
    cap_move = int(rng.integers(1, upper + 1))

    moved = assignment.copy()
    moved[j_free, i_rand] += cap_move
    moved[j_rand, i_rand] -= cap_move
    return Solution.build(data, solution.open_facilities, moved)
