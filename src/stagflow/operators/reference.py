# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Loop-form stencils, one grid point at a time.

These spell out the index arithmetic of every primitive in
``stagflow.operators.primitives`` with explicit periodic wrapping. They are
slow and exist to cross-check the sliced implementations.
"""

import numpy as np
from numba import njit

from stagflow.operators.indexing import incmod, decmod
from stagflow.operators.primitives import _resolve


@njit(cache=True)
def difference_loop(f, out, axis, to_center):
    """Numba-compiled difference along ``axis`` (z is Neumann, k = 0 on top)."""
    Nx, Ny, Nz = f.shape
    for i in range(Nx):
        for j in range(Ny):
            for k in range(Nz):
                if axis == 0:
                    if to_center:
                        out[i, j, k] = f[incmod(i, Nx), j, k] - f[i, j, k]
                    else:
                        out[i, j, k] = f[i, j, k] - f[decmod(i, Nx), j, k]
                elif axis == 1:
                    if to_center:
                        out[i, j, k] = f[i, incmod(j, Ny), k] - f[i, j, k]
                    else:
                        out[i, j, k] = f[i, j, k] - f[i, decmod(j, Ny), k]
                else:
                    if to_center:
                        if k == Nz - 1:
                            out[i, j, k] = f[i, j, k]
                        else:
                            out[i, j, k] = f[i, j, k] - f[i, j, k + 1]
                    else:
                        if k == 0:
                            out[i, j, k] = 0.0
                        else:
                            out[i, j, k] = f[i, j, k - 1] - f[i, j, k]


@njit(cache=True)
def average_loop(f, out, axis, to_center):
    """Numba-compiled two-point average along ``axis``."""
    Nx, Ny, Nz = f.shape
    for i in range(Nx):
        for j in range(Ny):
            for k in range(Nz):
                if axis == 0:
                    if to_center:
                        out[i, j, k] = (f[incmod(i, Nx), j, k] + f[i, j, k]) / 2
                    else:
                        out[i, j, k] = (f[i, j, k] + f[decmod(i, Nx), j, k]) / 2
                elif axis == 1:
                    if to_center:
                        out[i, j, k] = (f[i, incmod(j, Ny), k] + f[i, j, k]) / 2
                    else:
                        out[i, j, k] = (f[i, j, k] + f[i, decmod(j, Ny), k]) / 2
                else:
                    if to_center:
                        if k == Nz - 1:
                            out[i, j, k] = 0.5 * f[i, j, k]
                        else:
                            out[i, j, k] = (f[i, j, k + 1] + f[i, j, k]) / 2
                    else:
                        if k == 0:
                            out[i, j, k] = f[i, j, k]
                        else:
                            out[i, j, k] = (f[i, j, k] + f[i, j, k - 1]) / 2


def difference_reference(g, f, out, axis):
    to_center = _resolve(g, f, out, axis, "delta_")
    difference_loop(np.ascontiguousarray(f.data), out.data, axis, to_center)


def average_reference(g, f, out, axis):
    to_center = _resolve(g, f, out, axis, "avg_")
    average_loop(np.ascontiguousarray(f.data), out.data, axis, to_center)
