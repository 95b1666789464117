from .core import (
    DemandExceedsCapacityError,
    FixedCostDimensionError,
    ProblemData,
    ProblemDataError,
    Solution,
    VarCostColumnError,
    VarCostRowError,
    compute_cost,
)
from .solution import FeasibilityReport, emit_solution, feasibility_report, is_feasible, validate_solution
from .greedy import greedy_assignment
from .moves import NoFeasibleNeighborError, propose_assignment, propose_facility
from .constructor import InitConfig, build_initial_solution
from .anneal import AnnealConfig, anneal_assignment
from .orchestrator import best_of, solve, solve_with_data
from .io import format_cflp, parse_cflp_text, read_cflp, write_cflp
from .generator import generate_instance

__all__ = [
    "ProblemData",
    "Solution",
    "compute_cost",
    "ProblemDataError",
    "DemandExceedsCapacityError",
    "FixedCostDimensionError",
    "VarCostColumnError",
    "VarCostRowError",
    "FeasibilityReport",
    "feasibility_report",
    "is_feasible",
    "validate_solution",
    "emit_solution",
    "greedy_assignment",
    "NoFeasibleNeighborError",
    "propose_facility",
    "propose_assignment",
    "InitConfig",
    "build_initial_solution",
    "AnnealConfig",
    "anneal_assignment",
    "solve_with_data",
    "solve",
    "best_of",
    "read_cflp",
    "write_cflp",
    "parse_cflp_text",
    "format_cflp",
    "generate_instance",
]
