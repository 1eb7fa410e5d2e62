# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import numpy as np


def test_imports():
    from stagflow.grid import RegularCartesianGrid
    from stagflow.fields import CellField, VelocityFields
    from stagflow.scratch import ScratchPool, OperatorTemporaryFields
    from stagflow.operators import primitives, composite, laplacian, reference, indexing
    from stagflow import diagnostics, io, bench_utils, benchmark, cli
    assert OperatorTemporaryFields is ScratchPool


def test_one_tendency_evaluation():
    """Assemble the tracer tendency of a random flow and check it is finite."""
    from stagflow.fields import CellField, VelocityFields
    from stagflow.grid import RegularCartesianGrid
    from stagflow.operators.composite import advective_flux_divergence, scalar_diffusion
    from stagflow.scratch import ScratchPool

    g = RegularCartesianGrid(N=(8, 8, 8), L=(1.0, 1.0, 1.0))
    tmp = ScratchPool(g)
    rng = np.random.default_rng(0)
    U = VelocityFields.allocate(g)
    for c in U:
        c.set(rng.standard_normal(g.shape))
    T = CellField(g, rng.standard_normal(g.shape))

    GT = CellField(g)
    diff = CellField(g)
    advective_flux_divergence(g, U.u, U.v, U.w, T, GT, tmp)
    scalar_diffusion(g, T, diff, 1e-3, 1e-4, tmp)
    GT.data[...] = diff.data - GT.data
    assert np.all(np.isfinite(GT.data))
