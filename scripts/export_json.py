#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sqlite3
import sys
from pathlib import Path

from cflp.sa.io import read_cflp


def export_run(conn: sqlite3.Connection, run_id: int) -> dict:
    cur = conn.cursor()
    cur.execute("SELECT dataset, k, seed, time_limit_s, notes FROM runs WHERE run_id=?", (run_id,))
    row = cur.fetchone()
    if row is None:
        raise ValueError(f"run_id {run_id} not found")
    dataset, k, seed, time_limit_s, notes = row
    cur.execute(
        """
        SELECT instance, solver_cost, solver_sol_text, open_facilities, time_ms, valid
        FROM solver_instances
        WHERE run_id=?
        """,
        (run_id,),
    )
    solver_rows = cur.fetchall()
    cur.execute("SELECT instance, ref_cost, ref_sol_text FROM refs")
    ref_rows = {r[0]: (r[1], r[2]) for r in cur.fetchall()}

    instances = []
    for inst, solver_cost, solver_sol, open_count, time_ms, valid in solver_rows:
        ref_cost, ref_sol = ref_rows.get(inst, (None, ""))
        gap_pct = None
        if solver_cost is not None and ref_cost is not None and ref_cost != 0:
            gap_pct = 100.0 * (solver_cost - ref_cost) / ref_cost
        facilities = None
        clients = None
        total_demand = None
        try:
            data = read_cflp(Path(dataset) / inst)
        except (OSError, ValueError) as exc:
            print(f"skipping instance data for {inst}: {exc}", file=sys.stderr)
        else:
            facilities = data.m
            clients = data.n
            total_demand = int(data.demand.sum())
        instances.append(
            {
                "instance": inst,
                "solver_cost": solver_cost,
                "solver_sol": solver_sol,
                "open_facilities": open_count,
                "ref_cost": ref_cost,
                "ref_sol": ref_sol,
                "gap_pct": gap_pct,
                "valid": bool(valid),
                "time_ms": time_ms,
                "facilities": facilities,
                "clients": clients,
                "total_demand": total_demand,
            }
        )
    return {
        "run_id": run_id,
        "dataset": dataset,
        "k": k,
        "seed": seed,
        "time_limit_s": time_limit_s,
        "notes": notes,
        "instances": instances,
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Export run results to JSON.")
    parser.add_argument("--db", required=True, help="SQLite DB path")
    parser.add_argument("--run-id", type=int, required=True, help="Run ID to export")
    parser.add_argument("--out", required=True, help="Output JSON file")
    args = parser.parse_args(argv)

    conn = sqlite3.connect(args.db)
    data = export_run(conn, args.run_id)
    Path(args.out).write_text(json.dumps(data, indent=2))
    conn.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
