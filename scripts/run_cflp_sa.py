#!/usr/bin/env python3
from __future__ import annotations

import argparse
import io
import sqlite3
import sys
import time
import warnings
from pathlib import Path

import numpy as np

from cflp.sa import (
    AnnealConfig,
    emit_solution,
    is_feasible,
    read_cflp,
    solve_with_data,
    validate_solution,
)


def ensure_schema(conn: sqlite3.Connection) -> None:
    cur = conn.cursor()
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS runs (
            run_id INTEGER PRIMARY KEY AUTOINCREMENT,
            dataset TEXT,
            k INTEGER,
            seed INTEGER,
            time_limit_s REAL,
            ts DATETIME DEFAULT CURRENT_TIMESTAMP,
            notes TEXT
        )
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS solver_instances (
            run_id INTEGER,
            instance TEXT,
            solver_cost REAL,
            solver_sol_text TEXT,
            open_facilities INTEGER,
            time_ms REAL,
            valid INTEGER
        )
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS refs (
            instance TEXT PRIMARY KEY,
            ref_cost REAL,
            ref_sol_text TEXT
        )
        """
    )
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS instances (
            instance TEXT PRIMARY KEY,
            dataset TEXT
        )
        """
    )
    conn.commit()


def emit_solution_text(solution) -> str:
    buf = io.StringIO()
    emit_solution(solution, out=buf)
    return buf.getvalue()


def run_one_instance(
    cflp_path: Path,
    k: int,
    time_limit: float | None,
    seed: int | None = None,
    max_iter: int = 100,
    inner_max_iter: int = 5,
) -> tuple[float | None, str, int, float, int]:
    """
    Run solver on a single instance.
    Returns (cost, sol_text, open_count, time_ms, valid_flag).
    """
    start = time.time()
    try:
        data = read_cflp(cflp_path)
        with warnings.catch_warnings():
            # infeasible results are recorded as valid=0 instead
            warnings.simplefilter("ignore", RuntimeWarning)
            solution = solve_with_data(
                data,
                k,
                rng=np.random.default_rng(seed),
                outer_config=AnnealConfig(max_iter=max_iter),
                inner_config=AnnealConfig(max_iter=inner_max_iter),
                time_limit_sec=time_limit,
            )
        cost = solution.cost
        sol_text = emit_solution_text(solution)
        open_count = solution.num_open
        valid = 0
        if is_feasible(data, solution, k):
            validate_solution(data, solution, k)
            valid = 1
    except Exception as exc:  # noqa: BLE001
        cost = None
        sol_text = f"ERROR: {exc}"
        open_count = 0
        valid = 0
    time_ms = (time.time() - start) * 1000.0
    return cost, sol_text, open_count, time_ms, valid


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the CFLP annealer over a dataset and log to SQLite.")
    parser.add_argument("--dataset", required=True, help="Folder containing .cflp files")
    parser.add_argument("--k", type=int, required=True, help="maximum number of open facilities")
    parser.add_argument("--db", required=True, help="SQLite DB path to write results into")
    parser.add_argument("--time-limit", type=float, default=None, help="time limit per instance (seconds)")
    parser.add_argument("--seed", type=int, default=None, help="random seed used for every instance")
    parser.add_argument("--notes", default="", help="Optional notes for the run")
    parser.add_argument("--references", default=None, help="Folder containing reference .sol files or references.json")
    parser.add_argument("--max-iter", type=int, default=100, help="outer proposals per temperature")
    parser.add_argument("--inner-max-iter", type=int, default=5, help="inner proposals per temperature")
    args = parser.parse_args(argv)

    dataset_dir = Path(args.dataset)
    cflp_files = sorted(dataset_dir.glob("*.cflp"))
    if not cflp_files:
        print(f"No .cflp files found in {dataset_dir}", file=sys.stderr)
        return 1

    conn = sqlite3.connect(args.db)
    ensure_schema(conn)
    if args.references:
        from scripts.reference_loader import load_references

        ref_map = load_references(Path(args.references))
        cur = conn.cursor()
        for inst, (cost, text) in ref_map.items():
            cur.execute(
                "INSERT OR REPLACE INTO refs(instance, ref_cost, ref_sol_text) VALUES (?, ?, ?)",
                (inst, cost, text),
            )
        conn.commit()

    cur = conn.cursor()
    cur.execute(
        "INSERT INTO runs(dataset, k, seed, time_limit_s, notes) VALUES (?, ?, ?, ?, ?)",
        (str(dataset_dir), args.k, args.seed, args.time_limit, args.notes),
    )
    run_id = cur.lastrowid
    conn.commit()

    cur.executemany(
        "INSERT OR IGNORE INTO instances(instance, dataset) VALUES (?, ?)",
        [(cf.name, str(dataset_dir)) for cf in cflp_files],
    )
    conn.commit()

    for cflp_path in cflp_files:
        cost, sol_text, open_count, time_ms, valid = run_one_instance(
            cflp_path,
            k=args.k,
            time_limit=args.time_limit,
            seed=args.seed,
            max_iter=args.max_iter,
            inner_max_iter=args.inner_max_iter,
        )
        cur.execute(
            """
            INSERT INTO solver_instances(run_id, instance, solver_cost, solver_sol_text, open_facilities, time_ms, valid)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (run_id, cflp_path.name, cost, sol_text, open_count, time_ms, valid),
        )
        conn.commit()
        print(f"[run {run_id}] {cflp_path.name}: cost={cost} valid={valid} time_ms={time_ms:.1f}", file=sys.stderr)

    conn.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
