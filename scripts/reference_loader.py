#!/usr/bin/env python3
from __future__ import annotations

import json
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np

from cflp.sa.core import ProblemData, Solution
from cflp.sa.io import read_cflp

_CUSTOMER_LINE = re.compile(r"customer\s+(\d+)\s+gets\s+(\d+)\s+from\s+facility\s+(\d+)", re.IGNORECASE)


@dataclass
class ReferenceSolution:
    """A parsed .sol file. Indices are 0-based; the file uses 1-based ids."""

    cost: Optional[float] = None
    open_facilities: List[int] = field(default_factory=list)
    triples: List[Tuple[int, int, int]] = field(default_factory=list)


def parse_sol_text(text: str) -> ReferenceSolution:
    ref = ReferenceSolution()
    for raw in text.splitlines():
        line = raw.strip()
        upper = line.upper()
        if upper.startswith("OPEN FACILITIES"):
            _, ids = line.split(":", 1)
            ref.open_facilities = [int(tok) - 1 for tok in ids.split()]
        elif upper.startswith("COST") or upper.startswith("TOTAL COST"):
            try:
                ref.cost = float(line.split()[-1])
            except ValueError:
                ref.cost = None
        else:
            match = _CUSTOMER_LINE.match(line)
            if match:
                client, amount, facility = (int(g) for g in match.groups())
                ref.triples.append((client - 1, facility - 1, amount))
    return ref


def reference_to_solution(data: ProblemData, ref: ReferenceSolution) -> Solution:
    """Rebuild a Solution on data from a parsed reference."""
    opened = np.zeros(data.m, dtype=bool)
    assignment = np.zeros((data.m, data.n), dtype=np.int64)
    for j in ref.open_facilities:
        if not 0 <= j < data.m:
            raise ValueError(f"reference opens unknown facility {j + 1}")
        opened[j] = True
    for i, j, amount in ref.triples:
        if not (0 <= i < data.n and 0 <= j < data.m):
            raise ValueError(f"reference assigns customer {i + 1} to facility {j + 1} out of range")
        assignment[j, i] += amount
    return Solution.build(data, opened, assignment)


def check_reference(data: ProblemData, ref: ReferenceSolution, tol: float = 1e-6) -> float:
    """
    Recompute the reference cost on data. Returns the computed cost; raises
    ValueError when the stated Cost line disagrees with it.
    """
    computed = reference_to_solution(data, ref).cost
    if ref.cost is not None and abs(computed - ref.cost) > tol * max(1.0, abs(ref.cost)):
        raise ValueError(f"stated cost {ref.cost} does not match computed cost {computed}")
    return computed


def load_references_from_json(json_path: Path) -> Dict[str, float]:
    if not json_path.exists():
        return {}
    data = json.loads(json_path.read_text())
    return {name: float(cost) for name, cost in data.items()}


def load_references_from_solutions(folder: Path) -> Dict[str, Tuple[float, str]]:
    """
    Load reference solutions from *.sol files in a folder.
    When the paired .cflp is present the solution is checked against it and
    mismatching files are skipped; otherwise the stated Cost is trusted.
    Returns mapping: instance.cflp -> (cost, sol_text).
    """
    out: Dict[str, Tuple[float, str]] = {}
    for sol_file in sorted(folder.glob("*.sol")):
        text = sol_file.read_text()
        ref = parse_sol_text(text)
        instance_path = sol_file.with_suffix(".cflp")
        cost = ref.cost
        if instance_path.exists():
            try:
                cost = check_reference(read_cflp(instance_path), ref)
            except ValueError as exc:
                print(f"Skipping {sol_file.name}: {exc}", file=sys.stderr)
                continue
        if cost is None:
            continue
        out[instance_path.name] = (cost, text)
    return out


def load_references(folder: Path) -> Dict[str, Tuple[float, str]]:
    """
    Merge references.json costs with checked .sol files; a .sol file wins on cost.
    Returns mapping: instance name -> (reference_cost, sol_text or "").
    """
    merged: Dict[str, Tuple[float, str]] = {
        inst: (cost, "") for inst, cost in load_references_from_json(folder / "references.json").items()
    }
    merged.update(load_references_from_solutions(folder))
    return merged


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="List reference costs found in a folder.")
    parser.add_argument("folder")
    args = parser.parse_args()
    for name, (cost, _) in load_references(Path(args.folder)).items():
        print(name, cost)
