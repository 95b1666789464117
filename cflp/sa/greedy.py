from __future__ import annotations

import numpy as np

from .core import ProblemData


def greedy_assignment(data: ProblemData, open_facilities: np.ndarray) -> np.ndarray:
    """
    Assign each client's demand to the cheapest open facility with capacity left.
    - Closed or exhausted facilities are weighted with big_m_client so argmin skips them.
    - Ties go to the lowest facility index.
    - Per client at most m*n picks; if demand is still open the partial assignment
      is returned as is.
    Returns an (m, n) int matrix, assignment[j, i] = demand of client i served by j.
    """
    opened = np.asarray(open_facilities, dtype=bool).reshape(-1)
    assignment = np.zeros((data.m, data.n), dtype=np.int64)
    facility_cap = np.where(opened, data.capacity, 0).astype(np.int64)
    customer_demand = data.demand.astype(np.int64)
    failsafe_limit = data.m * data.n

    for i in range(data.n):
        failsafe = 0
        while customer_demand[i] > 0:
            if failsafe >= failsafe_limit:
                break
            failsafe += 1
            weights = np.where(facility_cap > 0, data.var_cost[i], data.big_m_client)
            j = int(np.argmin(weights))
            amount = min(int(customer_demand[i]), int(facility_cap[j]))
            assignment[j, i] += amount
            facility_cap[j] -= amount
            customer_demand[i] -= amount
    return assignment
