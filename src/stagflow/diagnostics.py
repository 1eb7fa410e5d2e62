# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import numpy as np

from stagflow.errors import PositionError
from stagflow.fields import Position
from stagflow.operators.composite import divergence
from stagflow.operators.primitives import avg_x, avg_y, avg_z, delta_x, delta_y
from stagflow.scratch import ScratchPool


def vertical_vorticity(g, U, out, tmp):
    """Vertical vorticity ∂v/∂x - ∂u/∂y on z-edges.

    Uses fE1 and fE2.
    """
    u, v, _ = U
    if out.position is not Position.EDGE_Z:
        raise PositionError(f"vorticity is stored on EDGE_Z, got {out.position.name}")
    dv_dx = tmp.borrow("fE1", Position.EDGE_Z, label="delta_x(v)")
    du_dy = tmp.borrow("fE2", Position.EDGE_Z, label="delta_y(u)")
    delta_x(g, v, dv_dx)
    delta_y(g, u, du_dy)
    out.data[...] = dv_dx.data / g.Δx - du_dy.data / g.Δy


def velocity_divergence(g, U, out, tmp):
    """Cell-centered ∇·u of the staggered velocity. Uses fC1, fC2, fC3."""
    divergence(g, U.u, U.v, U.w, out, tmp)


def max_abs_divergence(g, U, tmp):
    div = tmp.borrow("fFX", Position.CELL, label="div(u)")
    velocity_divergence(g, U, div, tmp)
    return float(np.max(np.abs(div.data)))


def max_abs_vorticity(g, U, tmp):
    zeta = tmp.borrow("fFY", Position.EDGE_Z, label="vorticity")
    vertical_vorticity(g, U, zeta, tmp)
    return float(np.max(np.abs(zeta.data)))


def kinetic_energy(g, U, tmp):
    """Domain-integrated 0.5 |u|^2 from velocities averaged to cell centers."""
    ubar = tmp.borrow("fC1", Position.CELL, label="avg_x(u)")
    vbar = tmp.borrow("fC2", Position.CELL, label="avg_y(v)")
    wbar = tmp.borrow("fC3", Position.CELL, label="avg_z(w)")
    avg_x(g, U.u, ubar)
    avg_y(g, U.v, vbar)
    avg_z(g, U.w, wbar)
    ke = 0.5 * (np.sum(ubar.data**2) + np.sum(vbar.data**2) + np.sum(wbar.data**2))
    return float(ke * g.V)


def tracer_content(g, Q):
    """Volume integral of a cell-centered tracer."""
    return float(np.sum(Q.data, dtype=np.float64) * g.V)


def advective_cfl(g, U, dt):
    """Advective CFL number dt * max(|u|/Δx, |v|/Δy, |w|/Δz)."""
    u, v, w = U
    rate = max(
        np.max(np.abs(u.data)) / g.Δx,
        np.max(np.abs(v.data)) / g.Δy,
        np.max(np.abs(w.data)) / g.Δz,
    )
    return float(dt * rate)


class FieldDiagnostics:
    """Accumulate flow diagnostics over a run and summarize them.

    Usage:
        diag = FieldDiagnostics(grid)
        for each sampled step:
            diag.accumulate(U, t, Q=tracer, dt=dt)
        result = diag.finalize()
    """

    def __init__(self, grid, tmp=None):
        self.grid = grid
        self.tmp = tmp if tmp is not None else ScratchPool(grid)
        self.samples = []

    def accumulate(self, U, t, Q=None, dt=None):
        """Store the scalar diagnostics of one snapshot."""
        g, tmp = self.grid, self.tmp
        sample = {
            "t": t,
            "kinetic_energy": kinetic_energy(g, U, tmp),
            "max_divergence": max_abs_divergence(g, U, tmp),
            "max_vorticity": max_abs_vorticity(g, U, tmp),
        }
        if Q is not None:
            sample["tracer_content"] = tracer_content(g, Q)
        if dt is not None:
            sample["cfl"] = advective_cfl(g, U, dt)
        self.samples.append(sample)

    def finalize(self):
        """Time series and summary statistics of the accumulated samples."""
        if not self.samples:
            raise ValueError("No samples accumulated")

        def series(key):
            return [s[key] for s in self.samples if key in s]

        ke = np.array(series("kinetic_energy"))
        result = {
            "n_samples": len(self.samples),
            "t": series("t"),
            "kinetic_energy": ke.tolist(),
            "mean_kinetic_energy": float(np.mean(ke)),
            "max_divergence": float(np.max(series("max_divergence"))),
            "max_vorticity": float(np.max(series("max_vorticity"))),
        }

        content = series("tracer_content")
        if content:
            # Relative drift of the tracer integral; absolute when it starts at 0.
            drift = content[-1] - content[0]
            if content[0] != 0:
                drift /= abs(content[0])
            result["tracer_content"] = content
            result["tracer_drift"] = float(drift)

        cfl = series("cfl")
        if cfl:
            result["max_cfl"] = float(np.max(cfl))

        return result
