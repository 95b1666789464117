from __future__ import annotations

import io
import sys
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .core import ProblemData, Solution, compute_cost


@dataclass(frozen=True)
class FeasibilityReport:
    demand_covered: bool
    capacity_respected: bool
    within_open_cap: bool
    any_open: bool
    closed_unused: bool = True  # only evaluated when strict=True

    @property
    def feasible(self) -> bool:
        return (
            self.demand_covered
            and self.capacity_respected
            and self.within_open_cap
            and self.any_open
            and self.closed_unused
        )


def feasibility_report(data: ProblemData, solution: Solution, k: int, strict: bool = False) -> FeasibilityReport:
    """
    Evaluate each feasibility condition separately.
    - Demand: every client's demand is fully allocated.
    - Capacity: no facility serves more than its capacity.
    - Cap: at most k facilities open.
    - At least one facility open.
    - (strict) no demand is served by a closed facility.
    """
    assignment = solution.assignment
    num_open = solution.num_open
    closed_unused = True
    if strict:
        closed_unused = bool(np.all(assignment[~solution.open_facilities] == 0))
    return FeasibilityReport(
        demand_covered=bool(np.array_equal(assignment.sum(axis=0), data.demand)),
        capacity_respected=bool(np.all(assignment.sum(axis=1) <= data.capacity)),
        within_open_cap=num_open <= k,
        any_open=num_open >= 1,
        closed_unused=closed_unused,
    )


def is_feasible(
    data: ProblemData,
    solution: Solution,
    k: int,
    verbose: bool = False,
    strict: bool = False,
) -> bool:
    report = feasibility_report(data, solution, k, strict=strict)
    if verbose:
        print(
            f"feasibility demand={report.demand_covered} capacity={report.capacity_respected} "
            f"open_cap={report.within_open_cap} any_open={report.any_open}"
            + (f" closed_unused={report.closed_unused}" if strict else ""),
            file=sys.stderr,
        )
    return report.feasible


def validate_solution(data: ProblemData, solution: Solution, k: int, strict: bool = False) -> None:
    """
    Raise ValueError on the first violated condition or on a stale cost.
    """
    report = feasibility_report(data, solution, k, strict=strict)
    if not report.demand_covered:
        served = solution.assignment.sum(axis=0)
        bad = [int(i) for i in np.flatnonzero(served != data.demand)]
        raise ValueError(f"Demand not covered for clients {bad}")
    if not report.capacity_respected:
        load = solution.assignment.sum(axis=1)
        bad = [int(j) for j in np.flatnonzero(load > data.capacity)]
        raise ValueError(f"Facilities {bad} exceed capacity")
    if not report.within_open_cap:
        raise ValueError(f"{solution.num_open} facilities open, cap is {k}")
    if not report.any_open:
        raise ValueError("No facility open")
    if not report.closed_unused:
        raise ValueError("Closed facility serves demand")

    recomputed = compute_cost(data, solution.open_facilities, solution.assignment)
    if abs(recomputed - solution.cost) > 1e-6:
        raise ValueError(f"Cost mismatch: recomputed {recomputed} vs cost {solution.cost}")


def emit_solution(solution: Solution, out: Optional[io.TextIOBase] = None, head: bool = False) -> None:
    """
    Print a solution in human readable form to stdout (or provided stream).
    Facility and customer numbers are 1-based; amounts are rounded to whole units.
    With head=True only the first 5 customers are listed.
    """
    out_stream = sys.stdout if out is None else out
    out_stream.write(f"Total cost {solution.cost:.2f}\n")
    opened = " ".join(str(j + 1) for j in solution.open_indices())
    out_stream.write(f"Open facilities: {opened}\n")
    out_stream.write("Assignment:\n")
    for i, j, amount in solution.assignment_triples():
        if head and i >= 5:
            break
        out_stream.write(f"customer {i + 1:3d} gets {round(amount):8d} from facility {j + 1:3d}\n")
    out_stream.flush()
