# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Benchmarking utilities for the stencil operators.

Micro-benchmarks time one operator family each on random fields; the
loop-form reference stencil is timed alongside for comparison. A cProfile
run over one full right-hand-side evaluation is also available.
"""

import cProfile
import io
import logging
import pstats
import time

import numpy as np

logger = logging.getLogger(__name__)


def _make_test_data(N=(32, 32, 32), L=(1.0, 1.0, 1.0), dtype=np.float64, seed=0):
    """Create a grid, random velocities, a random tracer and a scratch pool."""
    from stagflow.fields import CellField, VelocityFields
    from stagflow.grid import RegularCartesianGrid
    from stagflow.scratch import ScratchPool

    grid = RegularCartesianGrid(N=N, L=L, dtype=dtype)
    rng = np.random.default_rng(seed)
    U = VelocityFields.allocate(grid)
    for c in U:
        c.set(rng.standard_normal(grid.shape))
    Q = CellField(grid).set(rng.standard_normal(grid.shape))
    return grid, U, Q, ScratchPool(grid)


def _time_fn(fn, args=(), kwargs=None, n_warmup=3, n_iter=100):
    """Time a function over n_iter calls, returning median and stats."""
    kwargs = kwargs or {}
    for _ in range(n_warmup):
        fn(*args, **kwargs)
    times = []
    for _ in range(n_iter):
        t0 = time.perf_counter_ns()
        fn(*args, **kwargs)
        t1 = time.perf_counter_ns()
        times.append((t1 - t0) * 1e-6)  # ms
    times = np.array(times)
    return {
        "median_ms": float(np.median(times)),
        "mean_ms": float(np.mean(times)),
        "std_ms": float(np.std(times)),
        "min_ms": float(np.min(times)),
        "max_ms": float(np.max(times)),
        "n_iter": n_iter,
    }


def bench_difference(N=(32, 32, 32), n_iter=200):
    """Benchmark delta_x/y/z of a cell field onto faces."""
    from stagflow.fields import FaceFieldX, FaceFieldY, FaceFieldZ
    from stagflow.operators.primitives import delta_x, delta_y, delta_z
    g, _, Q, _ = _make_test_data(N)
    fx, fy, fz = FaceFieldX(g), FaceFieldY(g), FaceFieldZ(g)

    def all_axes():
        delta_x(g, Q, fx)
        delta_y(g, Q, fy)
        delta_z(g, Q, fz)

    return _time_fn(all_axes, n_iter=n_iter)


def bench_reference_difference(N=(32, 32, 32), n_iter=50):
    """Benchmark the loop-form difference on the same fields."""
    from stagflow.fields import FaceFieldX, FaceFieldY, FaceFieldZ
    from stagflow.operators.reference import difference_reference
    g, _, Q, _ = _make_test_data(N)
    fx, fy, fz = FaceFieldX(g), FaceFieldY(g), FaceFieldZ(g)

    def all_axes():
        difference_reference(g, Q, fx, 0)
        difference_reference(g, Q, fy, 1)
        difference_reference(g, Q, fz, 2)

    return _time_fn(all_axes, n_iter=n_iter)


def bench_average(N=(32, 32, 32), n_iter=200):
    """Benchmark avg_x/y/z of a cell field onto faces."""
    from stagflow.fields import FaceFieldX, FaceFieldY, FaceFieldZ
    from stagflow.operators.primitives import avg_x, avg_y, avg_z
    g, _, Q, _ = _make_test_data(N)
    fx, fy, fz = FaceFieldX(g), FaceFieldY(g), FaceFieldZ(g)

    def all_axes():
        avg_x(g, Q, fx)
        avg_y(g, Q, fy)
        avg_z(g, Q, fz)

    return _time_fn(all_axes, n_iter=n_iter)


def bench_divergence(N=(32, 32, 32), n_iter=200):
    from stagflow.fields import CellField
    from stagflow.operators.composite import divergence
    g, U, _, tmp = _make_test_data(N)
    out = CellField(g)
    return _time_fn(divergence, args=(g, U.u, U.v, U.w, out, tmp), n_iter=n_iter)


def bench_advective_flux_divergence(N=(32, 32, 32), n_iter=200):
    from stagflow.fields import CellField
    from stagflow.operators.composite import advective_flux_divergence
    g, U, Q, tmp = _make_test_data(N)
    out = CellField(g)
    return _time_fn(advective_flux_divergence, args=(g, U.u, U.v, U.w, Q, out, tmp),
                    n_iter=n_iter)


def bench_momentum_advection(N=(32, 32, 32), n_iter=100):
    """Benchmark u·∇u, u·∇v and u·∇w together."""
    from stagflow.fields import SourceTerms
    from stagflow.operators.composite import (
        momentum_advection_u, momentum_advection_v, momentum_advection_w,
    )
    g, U, _, tmp = _make_test_data(N)
    G = SourceTerms.allocate(g)

    def all_components():
        momentum_advection_u(g, U, G.Gu, tmp)
        momentum_advection_v(g, U, G.Gv, tmp)
        momentum_advection_w(g, U, G.Gw, tmp)

    return _time_fn(all_components, n_iter=n_iter)


def bench_scalar_diffusion(N=(32, 32, 32), n_iter=200):
    from stagflow.fields import CellField
    from stagflow.operators.composite import scalar_diffusion
    g, _, Q, tmp = _make_test_data(N)
    out = CellField(g)
    return _time_fn(scalar_diffusion, args=(g, Q, out, 1e-2, 1e-3, tmp), n_iter=n_iter)


def bench_vector_diffusion(N=(32, 32, 32), n_iter=100):
    """Benchmark ν∇²u, ν∇²v and ν∇²w together."""
    from stagflow.fields import SourceTerms
    from stagflow.operators.composite import (
        vector_diffusion_u, vector_diffusion_v, vector_diffusion_w,
    )
    g, U, _, tmp = _make_test_data(N)
    G = SourceTerms.allocate(g)

    def all_components():
        vector_diffusion_u(g, U.u, G.Gu, 1e-2, 1e-3, tmp)
        vector_diffusion_v(g, U.v, G.Gv, 1e-2, 1e-3, tmp)
        vector_diffusion_w(g, U.w, G.Gw, 1e-2, 1e-3, tmp)

    return _time_fn(all_components, n_iter=n_iter)


def bench_laplacian_ppn(N=(32, 32, 32), n_iter=200):
    from stagflow.fields import CellField
    from stagflow.operators.laplacian import laplacian_ppn
    g, _, Q, _ = _make_test_data(N)
    out = CellField(g)
    return _time_fn(laplacian_ppn, args=(g, Q, out), n_iter=n_iter)


def _full_tendencies(g, U, Q, tmp, G, n_evals):
    """Evaluate every operator a solver needs for one right-hand side."""
    from stagflow.operators.composite import (
        advective_flux_divergence, scalar_diffusion,
        momentum_advection_u, momentum_advection_v, momentum_advection_w,
        vector_diffusion_u, vector_diffusion_v, vector_diffusion_w,
    )
    for _ in range(n_evals):
        momentum_advection_u(g, U, G.Gu, tmp)
        momentum_advection_v(g, U, G.Gv, tmp)
        momentum_advection_w(g, U, G.Gw, tmp)
        vector_diffusion_u(g, U.u, G.Gu, 1e-2, 1e-3, tmp)
        vector_diffusion_v(g, U.v, G.Gv, 1e-2, 1e-3, tmp)
        vector_diffusion_w(g, U.w, G.Gw, 1e-2, 1e-3, tmp)
        advective_flux_divergence(g, U.u, U.v, U.w, Q, G.GT, tmp)
        scalar_diffusion(g, Q, G.GS, 1e-2, 1e-3, tmp)


def profile_operators(N=(32, 32, 32), n_evals=20):
    """Run cProfile over repeated full tendency evaluations, return stats as string."""
    from stagflow.fields import SourceTerms
    g, U, Q, tmp = _make_test_data(N)
    G = SourceTerms.allocate(g)
    pr = cProfile.Profile()
    pr.enable()
    _full_tendencies(g, U, Q, tmp, G, n_evals)
    pr.disable()
    s = io.StringIO()
    ps = pstats.Stats(pr, stream=s).sort_stats("cumulative")
    ps.print_stats(30)
    return s.getvalue()


BENCHMARKS = [
    ("difference", bench_difference),
    ("average", bench_average),
    ("divergence", bench_divergence),
    ("advective_flux_divergence", bench_advective_flux_divergence),
    ("momentum_advection", bench_momentum_advection),
    ("scalar_diffusion", bench_scalar_diffusion),
    ("vector_diffusion", bench_vector_diffusion),
    ("laplacian_ppn", bench_laplacian_ppn),
    ("reference_difference", bench_reference_difference),
]


def run_all_benchmarks(N=(32, 32, 32), n_iter=None, verbose=True):
    """Run all micro-benchmarks. Returns dict of results keyed by name."""
    N = tuple(N)
    logger.info("Starting benchmarks: N=%s, %d operators", N, len(BENCHMARKS))
    results = {}

    for name, fn in BENCHMARKS:
        if verbose:
            print(f"  {name}...", end="", flush=True)
        kwargs = {"N": N}
        if n_iter is not None:
            kwargs["n_iter"] = n_iter
        r = fn(**kwargs)
        results[name] = r
        logger.debug("%s: median %.3f ms over %d calls", name, r["median_ms"], r["n_iter"])
        if verbose:
            print(f" {r['median_ms']:.3f} ms (median, n={r['n_iter']})")

    logger.info("Benchmarks complete: %d operators timed", len(results))
    return results


def compare_results(before, after):
    """Print a comparison table of two benchmark result sets."""
    print(f"\n{'Benchmark':<28} {'Before':>10} {'After':>10} {'Speedup':>10}")
    print("-" * 61)
    for key in before:
        if key not in after:
            continue
        b = before[key]["median_ms"]
        a = after[key]["median_ms"]
        speedup = b / a if a > 0 else float("inf")
        print(f"{key:<28} {b:>8.3f}ms {a:>8.3f}ms {speedup:>9.1f}x")


if __name__ == "__main__":
    print("=" * 61)
    print("stagflow operator benchmarks")
    print("=" * 61)
    print()

    print("cProfile of 20 tendency evaluations (N=32^3):")
    print(profile_operators())

    print("Micro-benchmarks (N=32^3):")
    run_all_benchmarks()
