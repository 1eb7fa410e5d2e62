#!/usr/bin/env python
"""Validate the sliced stencils against the loop-form kernels on several grids.

For every (position, axis) move, runs the vectorized difference and average
and the Numba loop-form versions on the same random field and compares them.
Both evaluate the same two-point formulas, so agreement is expected to
rounding; any mismatch points at a wrong slice or boundary row.
"""

import os
import sys
import time

import numpy as np

# Allow running without pip install -e .
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from stagflow.fields import Field
from stagflow.grid import RegularCartesianGrid
from stagflow.operators.primitives import RULES, average, difference
from stagflow.operators.reference import average_reference, difference_reference

SIZES = [(2, 2, 2), (3, 5, 4), (16, 8, 12), (64, 64, 32)]
ABS_TOL = 1e-13

OPS = [
    ("delta", difference, difference_reference),
    ("avg", average, average_reference),
]


def main():
    print(f"Loop-kernel validation: {len(SIZES)} grids x {len(RULES)} moves x {len(OPS)} ops")
    print("=" * 72)

    all_pass = True
    rows = []
    rng = np.random.default_rng(2026)

    for N in SIZES:
        g = RegularCartesianGrid(N=N, L=(1.0, 2.0, 0.5))
        t0 = time.time()
        worst = 0.0
        n_fail = 0
        for (position, axis), (target, _) in RULES.items():
            f = Field(g, position, rng.standard_normal(g.shape))
            for name, fast_op, loop_op in OPS:
                fast, slow = Field(g, target), Field(g, target)
                fast_op(g, f, fast, axis)
                loop_op(g, f, slow, axis)
                err = float(np.max(np.abs(fast.data - slow.data)))
                worst = max(worst, err)
                if err > ABS_TOL:
                    n_fail += 1
                    print(f"  FAIL  N={N} {name}_{'xyz'[axis]} {position.name} -> "
                          f"{target.name}: max err {err:.2e}")
        elapsed = time.time() - t0
        case_pass = n_fail == 0
        all_pass = all_pass and case_pass
        rows.append((N, worst, n_fail, case_pass, elapsed))

    print(f"\n{'Grid':<18} {'Max err':>10} {'Failures':>10} {'Status':>8} {'Time':>8}")
    print("-" * 58)
    for N, worst, n_fail, case_pass, elapsed in rows:
        status = "PASS" if case_pass else "FAIL"
        print(f"{str(N):<18} {worst:>10.2e} {n_fail:>10d} {status:>8} {elapsed:>7.1f}s")

    print()
    if all_pass:
        print("ALL GRIDS PASSED")
    else:
        print("SOME GRIDS FAILED")
        sys.exit(1)


if __name__ == "__main__":
    main()
