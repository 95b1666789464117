from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Tuple

import numpy as np

from .core import ProblemData

SECTIONS = ("FIXED_COST_SECTION", "CAPACITY_SECTION", "DEMAND_SECTION", "VARIABLE_COST_SECTION")


def _parse_header_value(line: str) -> Tuple[str, str]:
    if ":" in line:
        key, val = line.split(":", 1)
        return key.strip().upper(), val.strip()
    parts = line.split()
    return (parts[0].strip().upper(), parts[1].strip() if len(parts) > 1 else "")


def _indexed_values(rows: Dict[int, List[str]], count: int, section: str) -> List[List[str]]:
    """Order rows by their 1-based file id and check every id 1..count is present."""
    missing = [idx for idx in range(1, count + 1) if idx not in rows]
    if missing:
        raise ValueError(f"{section} missing ids {missing[:5]}")
    return [rows[idx] for idx in range(1, count + 1)]


def parse_cflp_text(text: str) -> Tuple[str, ProblemData]:
    """
    Parse a CFLP instance. File ids are 1-based; internal indices are 0-based.
    Returns (name, ProblemData).
    """
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]

    name = ""
    facilities: int | None = None
    clients: int | None = None
    rows: Dict[str, Dict[int, List[str]]] = {sec: {} for sec in SECTIONS}

    section = None
    for raw in lines:
        upper = raw.upper()
        if upper.startswith("EOF"):
            break
        if upper in SECTIONS:
            section = upper
            continue
        if section is None:
            key, val = _parse_header_value(raw)
            if key == "NAME":
                name = val
            elif key == "FACILITIES":
                facilities = int(val)
            elif key == "CLIENTS":
                clients = int(val)
            continue
        parts = raw.split()
        if len(parts) < 2:
            continue
        rows[section][int(parts[0])] = parts[1:]

    if facilities is None or clients is None:
        raise ValueError("CFLP file missing FACILITIES or CLIENTS")
    for sec in SECTIONS:
        if not rows[sec]:
            raise ValueError(f"CFLP file missing {sec}")

    fixed = [float(r[0]) for r in _indexed_values(rows["FIXED_COST_SECTION"], facilities, "FIXED_COST_SECTION")]
    capacity = [int(float(r[0])) for r in _indexed_values(rows["CAPACITY_SECTION"], facilities, "CAPACITY_SECTION")]
    demand = [int(float(r[0])) for r in _indexed_values(rows["DEMAND_SECTION"], clients, "DEMAND_SECTION")]
    var_cost = [
        [float(v) for v in r]
        for r in _indexed_values(rows["VARIABLE_COST_SECTION"], clients, "VARIABLE_COST_SECTION")
    ]
    return name, ProblemData.build(fixed, var_cost, capacity, demand)


def read_cflp(path: str | Path) -> ProblemData:
    path = Path(path)
    _, data = parse_cflp_text(path.read_text())
    return data


def format_cflp(data: ProblemData, name: str = "") -> str:
    def num(x: float) -> str:
        return np.format_float_positional(float(x), trim="-")

    out = [
        f"NAME : {name}",
        f"FACILITIES : {data.m}",
        f"CLIENTS : {data.n}",
        "FIXED_COST_SECTION",
    ]
    out.extend(f"{j + 1} {num(data.fixed_cost[j])}" for j in range(data.m))
    out.append("CAPACITY_SECTION")
    out.extend(f"{j + 1} {int(data.capacity[j])}" for j in range(data.m))
    out.append("DEMAND_SECTION")
    out.extend(f"{i + 1} {int(data.demand[i])}" for i in range(data.n))
    out.append("VARIABLE_COST_SECTION")
    for i in range(data.n):
        out.append(f"{i + 1} " + " ".join(num(c) for c in data.var_cost[i]))
    out.append("EOF")
    return "\n".join(out) + "\n"


def write_cflp(path: str | Path, data: ProblemData, name: str = "") -> None:
    Path(path).write_text(format_cflp(data, name or Path(path).stem))
