# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Shared utilities for benchmark runs: save/load results, logging, summary tables."""

import csv
import logging
import os

from stagflow.io import save_run


def save_bench_results(results, outdir, run_name, params=None):
    """Save the full results as JSON and a per-operator summary CSV.

    Args:
        results: dict of benchmark name -> timing dict from run_all_benchmarks.
        outdir: output directory path.
        run_name: stem for the output file names.
        params: optional dict of run parameters stored alongside the timings.

    Returns:
        list of summary row dicts.
    """
    os.makedirs(outdir, exist_ok=True)
    save_run({"params": params or {}, "results": results},
             os.path.join(outdir, f"{run_name}.json"))

    summary_rows = []
    for name, r in results.items():
        summary_rows.append({
            "operator": name,
            "median_ms": r["median_ms"],
            "mean_ms": r["mean_ms"],
            "std_ms": r["std_ms"],
            "n_iter": r["n_iter"],
        })

    if summary_rows:
        csv_path = os.path.join(outdir, f"{run_name}_summary.csv")
        with open(csv_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=summary_rows[0].keys())
            writer.writeheader()
            writer.writerows(summary_rows)

    return summary_rows


def load_bench_summary(csv_path):
    """Read a summary CSV into a list of dicts with proper types.

    Timing columns are converted to float and n_iter to int.
    """
    rows = []
    with open(csv_path, "r") as f:
        reader = csv.DictReader(f)
        for row in reader:
            typed = {}
            for k, v in row.items():
                if k in ("median_ms", "mean_ms", "std_ms"):
                    typed[k] = float(v)
                elif k == "n_iter":
                    typed[k] = int(v)
                else:
                    typed[k] = v
            rows.append(typed)
    return rows


def configure_logging(outdir, run_name, level=logging.INFO):
    """Set up file + console logging on the 'stagflow' logger.

    Args:
        outdir: directory for the log file.
        run_name: used in the log filename.
        level: logging level for the logger and both handlers.

    Returns:
        the configured logger.
    """
    os.makedirs(outdir, exist_ok=True)
    logger = logging.getLogger("stagflow")
    logger.setLevel(level)

    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    log_path = os.path.join(outdir, f"{run_name}.log")
    fh = logging.FileHandler(log_path)
    fh.setLevel(level)
    fh.setFormatter(fmt)
    logger.addHandler(fh)

    # Console handler (only if none already exists)
    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
               for h in logger.handlers):
        ch = logging.StreamHandler()
        ch.setLevel(level)
        ch.setFormatter(fmt)
        logger.addHandler(ch)

    return logger


def print_summary_table(summary_rows):
    """Print a formatted summary table to stdout."""
    header = f"{'operator':<28} {'median ms':>10} {'mean ms':>10} {'std ms':>10} {'n':>6}"
    print(header)
    print("-" * len(header))
    for row in summary_rows:
        print(
            f"{row['operator']:<28} {row['median_ms']:>10.3f} {row['mean_ms']:>10.3f} "
            f"{row['std_ms']:>10.3f} {row['n_iter']:>6d}"
        )
