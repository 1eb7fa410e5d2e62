# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import numpy as np
from numba import njit

from stagflow.errors import PositionError, ShapeError
from stagflow.fields import Position
from stagflow.operators.indexing import incmod, decmod


@njit(cache=True)
def _laplacian_ppn_impl(f, out, dx, dy, dz):
    """Numba-compiled 7-point Laplacian, periodic in x/y, Neumann in z."""
    Nx, Ny, Nz = f.shape
    idx2 = 1.0 / (dx * dx)
    idy2 = 1.0 / (dy * dy)
    idz2 = 1.0 / (dz * dz)

    for i in range(Nx):
        ip = incmod(i, Nx)
        im = decmod(i, Nx)
        for j in range(Ny):
            jp = incmod(j, Ny)
            jm = decmod(j, Ny)
            for k in range(Nz):
                fc = f[i, j, k]
                lap_h = ((f[ip, j, k] - 2 * fc + f[im, j, k]) * idx2
                         + (f[i, jp, k] - 2 * fc + f[i, jm, k]) * idy2)

                if k == 0:
                    # One-sided at the top layer.
                    lap_z = (f[i, j, 1] - fc) * idz2
                elif k == Nz - 1:
                    # One-sided at the bottom layer.
                    lap_z = (f[i, j, k - 1] - fc) * idz2
                else:
                    lap_z = (f[i, j, k + 1] - 2 * fc + f[i, j, k - 1]) * idz2

                out[i, j, k] = lap_h + lap_z


def laplacian_ppn(g, f, out):
    """Laplacian of a cell field with periodic x/y and Neumann top/bottom.

    Interior layers use the standard 7-point stencil. On the top and bottom
    layers the vertical second difference is replaced by the one-sided
    difference toward the interior, which is the discrete operator of a
    pressure problem with zero normal gradient at both vertical ends.
    This stencil is not a composition of the two-point differences, so it
    is written in index form. ``out`` must not share memory with ``f``.
    """
    if f.position is not Position.CELL or out.position is not Position.CELL:
        raise PositionError(
            f"laplacian_ppn needs CELL fields, got {f.position.name} -> {out.position.name}"
        )
    if f.data.shape != g.shape or out.data.shape != g.shape:
        raise ShapeError(f"laplacian_ppn: fields must have grid shape {g.shape}")
    if np.shares_memory(f.data, out.data):
        raise ValueError("laplacian_ppn cannot run in place: out shares memory with f")
    _laplacian_ppn_impl(np.ascontiguousarray(f.data), out.data, g.Δx, g.Δy, g.Δz)
