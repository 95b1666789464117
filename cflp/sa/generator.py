from __future__ import annotations

import numpy as np

from .core import ProblemData


def generate_instance(
    rng: np.random.Generator,
    facility_number: int = 10,
    client_number: int = 15,
    cost_bound_fix: float = 1000,
    cost_bound_var: float = 100,
    demand_bound: int = 30,
    capacity_bound: int = 1000,
) -> ProblemData:
    """
    Random CFLP instance.
    Demands are drawn from [demand_bound // 10, demand_bound], capacities from
    [capacity_bound // 10, capacity_bound]; costs are uniform up to their bound,
    rounded to 2 decimals. Demand and capacity are redrawn (at most 100 times)
    while total demand exceeds total capacity; a still infeasible draw is
    rejected by ProblemData validation.
    """

    def draw_demand_capacity():
        demand = rng.integers(max(1, demand_bound // 10), demand_bound, size=client_number, endpoint=True)
        capacity = rng.integers(max(1, capacity_bound // 10), capacity_bound, size=facility_number, endpoint=True)
        return demand, capacity

    demand, capacity = draw_demand_capacity()
    var_cost = np.round(rng.random((client_number, facility_number)) * cost_bound_var, 2)
    fixed_cost = np.round(rng.random(facility_number) * cost_bound_fix, 2)

    failsafe = 0
    while demand.sum() > capacity.sum():
        failsafe += 1
        if failsafe > 100:
            break
        demand, capacity = draw_demand_capacity()

    return ProblemData.build(fixed_cost, var_cost, capacity, demand)
