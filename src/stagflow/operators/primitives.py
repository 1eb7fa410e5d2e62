# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Two-point difference and average stencils on the staggered grid.

x and y are periodic, z is Neumann with k = 0 at the top. Each operator
moves a field half a cell along one axis, and the direction is fixed by the
input position:

    to-face   (input centered on the axis: cell -> face, face -> edge)
        out[i] = f[i] - f[i-1],  wrapping at i = 0
    to-center (input staggered on the axis: face -> cell, edge -> face)
        out[i] = f[i+1] - f[i],  wrapping at i = N-1

Composed, the two directions give a centered second difference.

In z the top face carries no flux and nothing is stored below the bottom
layer:

    difference, to-face:    out[k=0] = 0,         out[k] = f[k-1] - f[k]
    difference, to-center:  out[k=Nz-1] = f[Nz-1], out[k] = f[k] - f[k+1]
    average,    to-face:    out[k=0] = f[0]
    average,    to-center:  out[k=Nz-1] = f[Nz-1] / 2

Output buffers must not overlap the input.
"""

import numpy as np

from stagflow.errors import PositionError, ShapeError
from stagflow.fields import Position
from stagflow.scratch import check_leases

X, Y, Z = 0, 1, 2
_AXIS_NAMES = "xyz"


def _build_rules():
    rules = {}
    for position in Position:
        for axis in (X, Y, Z):
            target = position.toggled(axis)
            if target is not None:
                rules[(position, axis)] = (target, position.staggered(axis))
    return rules


# (input position, axis) -> (output position, to_center)
RULES = _build_rules()


def lookup(position, axis):
    """Output position and direction for moving ``position`` along ``axis``."""
    try:
        return RULES[(position, axis)]
    except KeyError:
        raise PositionError(
            f"No {_AXIS_NAMES[axis]}-stencil defined for {position.name} fields"
        ) from None


def _resolve(g, f, out, axis, name):
    if f.data.shape != g.shape or out.data.shape != g.shape:
        raise ShapeError(
            f"{name}: input shape {f.data.shape} and output shape {out.data.shape} "
            f"must both equal grid shape {g.shape}"
        )
    check_leases(f, out)
    target, to_center = lookup(f.position, axis)
    if out.position is not target:
        raise PositionError(
            f"{name}{_AXIS_NAMES[axis]} of a {f.position.name} field writes "
            f"{target.name}, got a {out.position.name} output"
        )
    return to_center


def _sl(axis, s):
    idx = [slice(None)] * 3
    idx[axis] = s
    return tuple(idx)


# ---------------------------------------------------------------------------
# Periodic kernels (x, y)
# ---------------------------------------------------------------------------

def _difference_periodic_to_face(f, out, axis):
    np.subtract(f[_sl(axis, slice(1, None))], f[_sl(axis, slice(None, -1))],
                out=out[_sl(axis, slice(1, None))])
    np.subtract(f[_sl(axis, 0)], f[_sl(axis, -1)], out=out[_sl(axis, 0)])


def _difference_periodic_to_center(f, out, axis):
    np.subtract(f[_sl(axis, slice(1, None))], f[_sl(axis, slice(None, -1))],
                out=out[_sl(axis, slice(None, -1))])
    np.subtract(f[_sl(axis, 0)], f[_sl(axis, -1)], out=out[_sl(axis, -1)])


def _average_periodic_to_face(f, out, axis):
    head, body = out[_sl(axis, 0)], out[_sl(axis, slice(1, None))]
    np.add(f[_sl(axis, slice(1, None))], f[_sl(axis, slice(None, -1))], out=body)
    np.add(f[_sl(axis, 0)], f[_sl(axis, -1)], out=head)
    body *= 0.5
    head *= 0.5


def _average_periodic_to_center(f, out, axis):
    body, tail = out[_sl(axis, slice(None, -1))], out[_sl(axis, -1)]
    np.add(f[_sl(axis, slice(1, None))], f[_sl(axis, slice(None, -1))], out=body)
    np.add(f[_sl(axis, 0)], f[_sl(axis, -1)], out=tail)
    body *= 0.5
    tail *= 0.5


# ---------------------------------------------------------------------------
# Neumann kernels (z, k = 0 at the top)
# ---------------------------------------------------------------------------

def _difference_neumann_to_face(f, out, axis):
    np.subtract(f[:, :, :-1], f[:, :, 1:], out=out[:, :, 1:])
    out[:, :, 0] = 0


def _difference_neumann_to_center(f, out, axis):
    np.subtract(f[:, :, :-1], f[:, :, 1:], out=out[:, :, :-1])
    out[:, :, -1] = f[:, :, -1]


def _average_neumann_to_face(f, out, axis):
    body = out[:, :, 1:]
    np.add(f[:, :, 1:], f[:, :, :-1], out=body)
    body *= 0.5
    out[:, :, 0] = f[:, :, 0]


def _average_neumann_to_center(f, out, axis):
    body = out[:, :, :-1]
    np.add(f[:, :, 1:], f[:, :, :-1], out=body)
    body *= 0.5
    # Zero below the bottom: (f[end] + 0) / 2.
    np.multiply(f[:, :, -1], 0.5, out=out[:, :, -1])


# (periodic, to_center) -> kernel
_DIFFERENCE_KERNELS = {
    (True, False): _difference_periodic_to_face,
    (True, True): _difference_periodic_to_center,
    (False, False): _difference_neumann_to_face,
    (False, True): _difference_neumann_to_center,
}

_AVERAGE_KERNELS = {
    (True, False): _average_periodic_to_face,
    (True, True): _average_periodic_to_center,
    (False, False): _average_neumann_to_face,
    (False, True): _average_neumann_to_center,
}


def difference(g, f, out, axis):
    """Difference ``f`` along ``axis`` into ``out`` (delta_x/y/z for axis 0/1/2)."""
    to_center = _resolve(g, f, out, axis, "delta_")
    _DIFFERENCE_KERNELS[(axis != Z, to_center)](f.data, out.data, axis)


def average(g, f, out, axis):
    """Two-point average of ``f`` along ``axis`` into ``out``."""
    to_center = _resolve(g, f, out, axis, "avg_")
    _AVERAGE_KERNELS[(axis != Z, to_center)](f.data, out.data, axis)


def delta_x(g, f, out):
    """Compute f_E - f_W between neighbouring points in x, periodic."""
    difference(g, f, out, X)


def delta_y(g, f, out):
    """Compute f_N - f_S between neighbouring points in y, periodic."""
    difference(g, f, out, Y)


def delta_z(g, f, out):
    """Compute f_T - f_B between neighbouring points in z, Neumann at top and bottom."""
    difference(g, f, out, Z)


def avg_x(g, f, out):
    average(g, f, out, X)


def avg_y(g, f, out):
    average(g, f, out, Y)


def avg_z(g, f, out):
    average(g, f, out, Z)
