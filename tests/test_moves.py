from __future__ import annotations

import numpy as np
import pytest

from cflp.sa import (
    NoFeasibleNeighborError,
    ProblemData,
    Solution,
    greedy_assignment,
    is_feasible,
    propose_assignment,
    propose_facility,
)


def scenario_a() -> ProblemData:
    return ProblemData.build(
        fixed_cost=[1000, 1000, 1000],
        var_cost=[[4, 6, 9], [5, 4, 7], [6, 3, 4], [8, 5, 3], [10, 8, 4]],
        capacity=[500, 500, 500],
        demand=[80, 270, 250, 160, 180],
    )


def greedy_solution(data: ProblemData, opened) -> Solution:
    opened = np.asarray(opened, dtype=bool)
    return Solution.build(data, opened, greedy_assignment(data, opened))


def test_demand_transfer_conserves_client_and_moves_between_two_facilities():
    data = scenario_a()
    rng = np.random.default_rng(5)
    sol = greedy_solution(data, [True, True, True])
    for _ in range(200):
        cand = propose_assignment(data, sol, rng)
        assert np.array_equal(cand.open_facilities, sol.open_facilities)
        diff = cand.assignment - sol.assignment
        changed_clients = np.flatnonzero(np.any(diff != 0, axis=0))
        assert changed_clients.size <= 1
        if changed_clients.size == 1:
            i = changed_clients[0]
            column = diff[:, i]
            assert column.sum() == 0
            gained = np.flatnonzero(column > 0)
            lost = np.flatnonzero(column < 0)
            assert gained.size == 1 and lost.size == 1
            moved = column[gained[0]]
            load_diff = cand.assignment.sum(axis=1) - sol.assignment.sum(axis=1)
            assert load_diff[gained[0]] == moved
            assert load_diff[lost[0]] == -moved
        assert np.array_equal(cand.assignment.sum(axis=0), data.demand)
        assert np.all(cand.assignment.sum(axis=1) <= data.capacity)
        assert np.all(cand.assignment >= 0)
        sol = cand


def test_demand_transfer_only_targets_open_facilities_with_room():
    data = scenario_a()
    rng = np.random.default_rng(1)
    sol = greedy_solution(data, [False, True, True])
    for _ in range(100):
        sol = propose_assignment(data, sol, rng)
        assert sol.assignment[0].sum() == 0


def test_demand_transfer_without_free_capacity_is_a_no_op():
    data = ProblemData.build(
        fixed_cost=[0, 0],
        var_cost=[[1, 2], [2, 1]],
        capacity=[5, 5],
        demand=[5, 5],
    )
    sol = greedy_solution(data, [True, True])
    cand = propose_assignment(data, sol, np.random.default_rng(0))
    assert cand is sol


def test_demand_transfer_cost_is_recomputed():
    data = scenario_a()
    rng = np.random.default_rng(3)
    sol = greedy_solution(data, [True, True, True])
    for _ in range(50):
        sol = propose_assignment(data, sol, rng)
        expected = float(np.dot(data.fixed_cost, sol.open_facilities)) + float(
            np.sum(data.var_cost.T * sol.assignment)
        )
        assert sol.cost == expected


def test_facility_flip_returns_feasible_neighbor():
    data = scenario_a()
    rng = np.random.default_rng(2)
    sol = greedy_solution(data, [True, True, True])
    for _ in range(30):
        cand = propose_facility(data, sol, 2, rng)
        assert is_feasible(data, cand, 2)
        assert np.array_equal(cand.assignment, greedy_assignment(data, cand.open_facilities))
        sol = cand


def test_facility_flip_does_not_mutate_input():
    data = scenario_a()
    sol = greedy_solution(data, [False, True, True])
    before = sol.open_facilities.copy()
    propose_facility(data, sol, 2, np.random.default_rng(4))
    assert np.array_equal(sol.open_facilities, before)


def test_facility_flip_gives_up_with_typed_error():
    data = scenario_a()
    sol = greedy_solution(data, [True, True, True])
    # a single facility never covers 940 units of demand
    with pytest.raises(NoFeasibleNeighborError):
        propose_facility(data, sol, 1, np.random.default_rng(0), max_attempts=50)


def test_demand_transfer_within_single_open_facility_leaves_assignment_unchanged():
    data = ProblemData.build(
        fixed_cost=[0, 0],
        var_cost=[[1, 2], [1, 2]],
        capacity=[100, 100],
        demand=[5, 5],
    )
    sol = greedy_solution(data, [True, False])
    rng = np.random.default_rng(8)
    for _ in range(20):
        cand = propose_assignment(data, sol, rng)
        assert np.array_equal(cand.assignment, sol.assignment)
        assert np.array_equal(cand.open_facilities, sol.open_facilities)
        assert cand.cost == sol.cost
