# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Command-line interface for stagflow operator benchmarks."""

import argparse
import logging
import os

from stagflow.benchmark import profile_operators, run_all_benchmarks
from stagflow.bench_utils import configure_logging, print_summary_table, save_bench_results


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="stagflow-bench",
        description="Time the staggered-grid stencil operators on random fields.",
    )
    parser.add_argument(
        "-N", "--size", nargs=3, type=int, default=[32, 32, 32],
        metavar=("NX", "NY", "NZ"),
        help="Grid cells per axis (default: 32 32 32)",
    )
    parser.add_argument(
        "--n-iter", type=int, default=None,
        help="Timed calls per operator (default: per-benchmark setting)",
    )
    parser.add_argument(
        "--profile", action="store_true",
        help="Also print a cProfile of repeated full tendency evaluations",
    )
    parser.add_argument(
        "--name", type=str, default="bench",
        help="Stem for output file names (default: bench)",
    )
    parser.add_argument(
        "--outdir", type=str, default="results",
        help="Output directory (default: results/)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log at DEBUG level",
    )

    args = parser.parse_args(argv)

    configure_logging(args.outdir, args.name,
                      level=logging.DEBUG if args.verbose else logging.INFO)

    N = tuple(args.size)
    print(f"Grid: N={N}, n_iter={args.n_iter or 'default'}")
    print()

    results = run_all_benchmarks(N=N, n_iter=args.n_iter)

    params = {"Nx": N[0], "Ny": N[1], "Nz": N[2], "n_iter": args.n_iter}
    summary_rows = save_bench_results(results, args.outdir, args.name, params=params)
    print()
    print_summary_table(summary_rows)

    if args.profile:
        print()
        print(profile_operators(N=N))

    print(f"\nResults saved to {args.outdir}/")
    print(f"Summary: {os.path.join(args.outdir, args.name + '_summary.csv')}")
