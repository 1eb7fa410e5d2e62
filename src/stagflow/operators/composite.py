# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Finite-volume operators built from the two-point stencils.

Every operator writes into a caller-owned ``out`` field and works through
the scratch slots of a ``ScratchPool`` (``tmp``). A slot is re-borrowed
under a new name inside one call; each docstring lists the steps in the
order they must run as ``reads -> writes``. A slot is only re-borrowed
after the last read of its previous contents.

All operators return None.
"""

from stagflow.errors import PositionError
from stagflow.fields import Position
from stagflow.operators.primitives import (
    avg_x, avg_y, avg_z, delta_x, delta_y, delta_z,
)
from stagflow.scratch import check_leases

CELL = Position.CELL
FACE_X, FACE_Y, FACE_Z = Position.FACE_X, Position.FACE_Y, Position.FACE_Z
EDGE_X, EDGE_Y, EDGE_Z = Position.EDGE_X, Position.EDGE_Y, Position.EDGE_Z


def _require(field, position, name):
    if field.position is not position:
        raise PositionError(f"{name} must be {position.name}, got {field.position.name}")


def divergence(g, fx, fy, fz, out, tmp):
    """Divergence (1/V) (Ax δx fx + Ay δy fy + Az δz fz).

    Face components (fx, fy, fz at FACE_X, FACE_Y, FACE_Z) give a CELL
    result through fC1, fC2, fC3. Cell components give a face result
    (any face position for ``out``) through fFX, fFY, fFZ.

    Steps:
        1. fx, fy, fz -> three slots
        2. three slots -> out
    """
    positions = (fx.position, fy.position, fz.position)
    if positions == (FACE_X, FACE_Y, FACE_Z) and out.position is CELL:
        slots = (("fC1", CELL), ("fC2", CELL), ("fC3", CELL))
    elif positions == (CELL, CELL, CELL) and out.position.is_face:
        slots = (("fFX", FACE_X), ("fFY", FACE_Y), ("fFZ", FACE_Z))
    else:
        raise PositionError(
            "divergence needs face components with a CELL output or cell components "
            f"with a face output, got {[p.name for p in positions]} -> {out.position.name}"
        )

    dfx = tmp.borrow(*slots[0], label="delta_x(fx)")
    dfy = tmp.borrow(*slots[1], label="delta_y(fy)")
    dfz = tmp.borrow(*slots[2], label="delta_z(fz)")

    delta_x(g, fx, dfx)
    delta_y(g, fy, dfy)
    delta_z(g, fz, dfz)

    check_leases(dfx, dfy, dfz)
    out.data[...] = (1 / g.V) * (g.Ax * dfx.data + g.Ay * dfy.data + g.Az * dfz.data)


def advective_flux_divergence(g, u, v, w, Q, out, tmp):
    """Divergence of the advective flux of a cell-centered tracer Q.

    Steps:
        1. Q            -> fFX, fFY, fFZ   (Q averaged to faces)
        2. fF*, u, v, w -> fF*             (in place: A * velocity * Q on faces)
        3.              -> fFZ[:, :, 0]    (zero flux through the top)
        4. fF*          -> fC1, fC2, fC3   (flux differences)
        5. fC*          -> out

    Areas are folded into the fluxes, so step 5 only divides by V.
    """
    _require(Q, CELL, "Q")
    _require(out, CELL, "out")

    qx = tmp.borrow("fFX", FACE_X, label="avg_x(Q)")
    qy = tmp.borrow("fFY", FACE_Y, label="avg_y(Q)")
    qz = tmp.borrow("fFZ", FACE_Z, label="avg_z(Q)")

    avg_x(g, Q, qx)
    avg_y(g, Q, qy)
    avg_z(g, Q, qz)

    flux_x = tmp.borrow("fFX", FACE_X, label="flux_x")
    flux_y = tmp.borrow("fFY", FACE_Y, label="flux_y")
    flux_z = tmp.borrow("fFZ", FACE_Z, label="flux_z")

    flux_x.data[...] = g.Ax * u.data * qx.data
    flux_y.data[...] = g.Ay * v.data * qy.data
    flux_z.data[...] = g.Az * w.data * qz.data

    # Imposing zero vertical flux through the top layer.
    flux_z.data[:, :, 0] = 0

    dflux_x = tmp.borrow("fC1", CELL, label="delta_x(flux_x)")
    dflux_y = tmp.borrow("fC2", CELL, label="delta_y(flux_y)")
    dflux_z = tmp.borrow("fC3", CELL, label="delta_z(flux_z)")

    delta_x(g, flux_x, dflux_x)
    delta_y(g, flux_y, dflux_y)
    delta_z(g, flux_z, dflux_z)

    check_leases(dflux_x, dflux_y, dflux_z)
    out.data[...] = (1 / g.V) * (dflux_x.data + dflux_y.data + dflux_z.data)


def momentum_advection_u(g, U, out, tmp):
    """Advection of u by the velocity field, u·∇u, on FACE_X.

    Steps:
        1. u        -> fC1    (avg_x u)
        2. fC1      -> fC1    (Ax * ubar^2)
        3. fC1      -> fFX    (delta_x)
        4. u, v     -> fE1, fE2  (avg_y u, avg_x v)
        5. fE1, fE2 -> fE1    (Ay * product)
        6. fE1      -> fFY    (delta_y)
        7. u, w     -> fE1, fE2  (avg_z u, avg_x w)
        8. fE1, fE2 -> fE1    (Az * product)
        9. fE1      -> fFZ    (delta_z)
       10. fF*      -> out
    """
    u, v, w = U
    _require(out, FACE_X, "out")

    duu_dx = tmp.borrow("fFX", FACE_X, label="d(uu)/dx")
    duv_dy = tmp.borrow("fFY", FACE_X, label="d(uv)/dy")
    duw_dz = tmp.borrow("fFZ", FACE_X, label="d(uw)/dz")

    ubar_x = tmp.borrow("fC1", CELL, label="avg_x(u)")
    avg_x(g, u, ubar_x)
    uu = tmp.borrow("fC1", CELL, label="uu")
    uu.data[...] = g.Ax * ubar_x.data**2
    delta_x(g, uu, duu_dx)

    ubar_y = tmp.borrow("fE1", EDGE_Z, label="avg_y(u)")
    vbar_x = tmp.borrow("fE2", EDGE_Z, label="avg_x(v)")
    avg_y(g, u, ubar_y)
    avg_x(g, v, vbar_x)
    uv = tmp.borrow("fE1", EDGE_Z, label="uv")
    uv.data[...] = g.Ay * ubar_y.data * vbar_x.data
    delta_y(g, uv, duv_dy)

    ubar_z = tmp.borrow("fE1", EDGE_Y, label="avg_z(u)")
    wbar_x = tmp.borrow("fE2", EDGE_Y, label="avg_x(w)")
    avg_z(g, u, ubar_z)
    avg_x(g, w, wbar_x)
    uw = tmp.borrow("fE1", EDGE_Y, label="uw")
    uw.data[...] = g.Az * ubar_z.data * wbar_x.data
    delta_z(g, uw, duw_dz)

    check_leases(duu_dx, duv_dy, duw_dz)
    out.data[...] = (1 / g.V) * (duu_dx.data + duv_dy.data + duw_dz.data)


def momentum_advection_v(g, U, out, tmp):
    """Advection of v by the velocity field, u·∇v, on FACE_Y.

    Steps:
        1. v, u     -> fE1, fE2  (avg_x v, avg_y u)
        2. fE1, fE2 -> fE1    (Ax * product)
        3. fE1      -> fFX    (delta_x)
        4. v        -> fC1    (avg_y v)
        5. fC1      -> fC1    (Ay * vbar^2)
        6. fC1      -> fFY    (delta_y)
        7. v, w     -> fE1, fE2  (avg_z v, avg_y w)
        8. fE1, fE2 -> fE1    (Az * product)
        9. fE1      -> fFZ    (delta_z)
       10. fF*      -> out
    """
    u, v, w = U
    _require(out, FACE_Y, "out")

    dvu_dx = tmp.borrow("fFX", FACE_Y, label="d(vu)/dx")
    dvv_dy = tmp.borrow("fFY", FACE_Y, label="d(vv)/dy")
    dvw_dz = tmp.borrow("fFZ", FACE_Y, label="d(vw)/dz")

    vbar_x = tmp.borrow("fE1", EDGE_Z, label="avg_x(v)")
    ubar_y = tmp.borrow("fE2", EDGE_Z, label="avg_y(u)")
    avg_x(g, v, vbar_x)
    avg_y(g, u, ubar_y)
    vu = tmp.borrow("fE1", EDGE_Z, label="vu")
    vu.data[...] = g.Ax * vbar_x.data * ubar_y.data
    delta_x(g, vu, dvu_dx)

    vbar_y = tmp.borrow("fC1", CELL, label="avg_y(v)")
    avg_y(g, v, vbar_y)
    vv = tmp.borrow("fC1", CELL, label="vv")
    vv.data[...] = g.Ay * vbar_y.data**2
    delta_y(g, vv, dvv_dy)

    vbar_z = tmp.borrow("fE1", EDGE_X, label="avg_z(v)")
    wbar_y = tmp.borrow("fE2", EDGE_X, label="avg_y(w)")
    avg_z(g, v, vbar_z)
    avg_y(g, w, wbar_y)
    vw = tmp.borrow("fE1", EDGE_X, label="vw")
    vw.data[...] = g.Az * vbar_z.data * wbar_y.data
    delta_z(g, vw, dvw_dz)

    check_leases(dvu_dx, dvv_dy, dvw_dz)
    out.data[...] = (1 / g.V) * (dvu_dx.data + dvv_dy.data + dvw_dz.data)


def momentum_advection_w(g, U, out, tmp):
    """Advection of w by the velocity field, u·∇w, on FACE_Z.

    Steps:
        1. w, u     -> fE1, fE2  (avg_x w, avg_z u)
        2. fE1, fE2 -> fE1    (Ax * product)
        3. fE1      -> fFX    (delta_x)
        4. w, v     -> fE1, fE2  (avg_y w, avg_z v)
        5. fE1, fE2 -> fE1    (Ay * product)
        6. fE1      -> fFY    (delta_y)
        7. w        -> fC1    (avg_z w)
        8. fC1      -> fC1    (Az * wbar^2)
        9. fC1      -> fFZ    (delta_z)
       10. fF*      -> out
    """
    u, v, w = U
    _require(out, FACE_Z, "out")

    dwu_dx = tmp.borrow("fFX", FACE_Z, label="d(wu)/dx")
    dwv_dy = tmp.borrow("fFY", FACE_Z, label="d(wv)/dy")
    dww_dz = tmp.borrow("fFZ", FACE_Z, label="d(ww)/dz")

    wbar_x = tmp.borrow("fE1", EDGE_Y, label="avg_x(w)")
    ubar_z = tmp.borrow("fE2", EDGE_Y, label="avg_z(u)")
    avg_x(g, w, wbar_x)
    avg_z(g, u, ubar_z)
    wu = tmp.borrow("fE1", EDGE_Y, label="wu")
    wu.data[...] = g.Ax * wbar_x.data * ubar_z.data
    delta_x(g, wu, dwu_dx)

    wbar_y = tmp.borrow("fE1", EDGE_X, label="avg_y(w)")
    vbar_z = tmp.borrow("fE2", EDGE_X, label="avg_z(v)")
    avg_y(g, w, wbar_y)
    avg_z(g, v, vbar_z)
    wv = tmp.borrow("fE1", EDGE_X, label="wv")
    wv.data[...] = g.Ay * wbar_y.data * vbar_z.data
    delta_y(g, wv, dwv_dy)

    wbar_z = tmp.borrow("fC1", CELL, label="avg_z(w)")
    avg_z(g, w, wbar_z)
    ww = tmp.borrow("fC1", CELL, label="ww")
    ww.data[...] = g.Az * wbar_z.data**2
    delta_z(g, ww, dww_dz)

    check_leases(dwu_dx, dwv_dy, dww_dz)
    out.data[...] = (1 / g.V) * (dwu_dx.data + dwv_dy.data + dww_dz.data)


def scalar_diffusion(g, Q, out, kappa_h, kappa_v, tmp):
    """Laplacian diffusion κ∇²Q of a cell field with horizontal/vertical diffusivity.

    Steps:
        1. Q   -> fFX, fFY, fFZ   (differences)
        2. fF* -> fF*             (in place: κ / Δ)
        3. fF* -> fC1, fC2, fC3 -> out   (divergence)

    All reads of Q finish in step 1, so ``out`` may be ``Q``.
    """
    _require(Q, CELL, "Q")
    _require(out, CELL, "out")

    dQx = tmp.borrow("fFX", FACE_X, label="delta_x(Q)")
    dQy = tmp.borrow("fFY", FACE_Y, label="delta_y(Q)")
    dQz = tmp.borrow("fFZ", FACE_Z, label="delta_z(Q)")

    delta_x(g, Q, dQx)
    delta_y(g, Q, dQy)
    delta_z(g, Q, dQz)

    kgrad_x = tmp.borrow("fFX", FACE_X, label="kappa grad_x(Q)")
    kgrad_y = tmp.borrow("fFY", FACE_Y, label="kappa grad_y(Q)")
    kgrad_z = tmp.borrow("fFZ", FACE_Z, label="kappa grad_z(Q)")

    kgrad_x.data[...] = kappa_h * dQx.data / g.Δx
    kgrad_y.data[...] = kappa_h * dQy.data / g.Δy
    kgrad_z.data[...] = kappa_v * dQz.data / g.Δz

    divergence(g, kgrad_x, kgrad_y, kgrad_z, out, tmp)


def vector_diffusion_u(g, u, out, nu_h, nu_v, tmp):
    """Laplacian viscosity ν∇²u of the face-x velocity.

    Steps:
        1. u   -> fC1 -> fC1 (A ν / Δ) -> fFX   (x: through cells)
        2. u   -> fE1 -> fE1 (A ν / Δ) -> fFY   (y: through z-edges)
        3. u   -> fE1 -> fE1 (A ν / Δ) -> fFZ   (z: through y-edges)
        4. fF* -> out

    All reads of u finish before step 4, so ``out`` may be ``u``.
    """
    _require(u, FACE_X, "u")
    _require(out, FACE_X, "out")

    lap_x = tmp.borrow("fFX", FACE_X, label="nu d2u/dx2")
    lap_y = tmp.borrow("fFY", FACE_X, label="nu d2u/dy2")
    lap_z = tmp.borrow("fFZ", FACE_X, label="nu d2u/dz2")

    du_dx = tmp.borrow("fC1", CELL, label="delta_x(u)")
    delta_x(g, u, du_dx)
    flux_x = tmp.borrow("fC1", CELL, label="nu grad_x(u)")
    flux_x.data[...] = g.Ax * nu_h * du_dx.data / g.Δx
    delta_x(g, flux_x, lap_x)

    du_dy = tmp.borrow("fE1", EDGE_Z, label="delta_y(u)")
    delta_y(g, u, du_dy)
    flux_y = tmp.borrow("fE1", EDGE_Z, label="nu grad_y(u)")
    flux_y.data[...] = g.Ay * nu_h * du_dy.data / g.Δy
    delta_y(g, flux_y, lap_y)

    du_dz = tmp.borrow("fE1", EDGE_Y, label="delta_z(u)")
    delta_z(g, u, du_dz)
    flux_z = tmp.borrow("fE1", EDGE_Y, label="nu grad_z(u)")
    flux_z.data[...] = g.Az * nu_v * du_dz.data / g.Δz
    delta_z(g, flux_z, lap_z)

    check_leases(lap_x, lap_y, lap_z)
    out.data[...] = (1 / g.V) * (lap_x.data + lap_y.data + lap_z.data)


def vector_diffusion_v(g, v, out, nu_h, nu_v, tmp):
    """Laplacian viscosity ν∇²v of the face-y velocity.

    Steps:
        1. v   -> fE1 -> fE1 (A ν / Δ) -> fFX   (x: through z-edges)
        2. v   -> fC1 -> fC1 (A ν / Δ) -> fFY   (y: through cells)
        3. v   -> fE1 -> fE1 (A ν / Δ) -> fFZ   (z: through x-edges)
        4. fF* -> out
    """
    _require(v, FACE_Y, "v")
    _require(out, FACE_Y, "out")

    lap_x = tmp.borrow("fFX", FACE_Y, label="nu d2v/dx2")
    lap_y = tmp.borrow("fFY", FACE_Y, label="nu d2v/dy2")
    lap_z = tmp.borrow("fFZ", FACE_Y, label="nu d2v/dz2")

    dv_dx = tmp.borrow("fE1", EDGE_Z, label="delta_x(v)")
    delta_x(g, v, dv_dx)
    flux_x = tmp.borrow("fE1", EDGE_Z, label="nu grad_x(v)")
    flux_x.data[...] = g.Ax * nu_h * dv_dx.data / g.Δx
    delta_x(g, flux_x, lap_x)

    dv_dy = tmp.borrow("fC1", CELL, label="delta_y(v)")
    delta_y(g, v, dv_dy)
    flux_y = tmp.borrow("fC1", CELL, label="nu grad_y(v)")
    flux_y.data[...] = g.Ay * nu_h * dv_dy.data / g.Δy
    delta_y(g, flux_y, lap_y)

    dv_dz = tmp.borrow("fE1", EDGE_X, label="delta_z(v)")
    delta_z(g, v, dv_dz)
    flux_z = tmp.borrow("fE1", EDGE_X, label="nu grad_z(v)")
    flux_z.data[...] = g.Az * nu_v * dv_dz.data / g.Δz
    delta_z(g, flux_z, lap_z)

    check_leases(lap_x, lap_y, lap_z)
    out.data[...] = (1 / g.V) * (lap_x.data + lap_y.data + lap_z.data)


def vector_diffusion_w(g, w, out, nu_h, nu_v, tmp):
    """Laplacian viscosity ν∇²w of the face-z velocity.

    Steps:
        1. w   -> fE1 -> fE1 (A ν / Δ) -> fFX   (x: through y-edges)
        2. w   -> fE1 -> fE1 (A ν / Δ) -> fFY   (y: through x-edges)
        3. w   -> fC1 -> fC1 (A ν / Δ) -> fFZ   (z: through cells)
        4. fF* -> out
    """
    _require(w, FACE_Z, "w")
    _require(out, FACE_Z, "out")

    lap_x = tmp.borrow("fFX", FACE_Z, label="nu d2w/dx2")
    lap_y = tmp.borrow("fFY", FACE_Z, label="nu d2w/dy2")
    lap_z = tmp.borrow("fFZ", FACE_Z, label="nu d2w/dz2")

    dw_dx = tmp.borrow("fE1", EDGE_Y, label="delta_x(w)")
    delta_x(g, w, dw_dx)
    flux_x = tmp.borrow("fE1", EDGE_Y, label="nu grad_x(w)")
    flux_x.data[...] = g.Ax * nu_h * dw_dx.data / g.Δx
    delta_x(g, flux_x, lap_x)

    dw_dy = tmp.borrow("fE1", EDGE_X, label="delta_y(w)")
    delta_y(g, w, dw_dy)
    flux_y = tmp.borrow("fE1", EDGE_X, label="nu grad_y(w)")
    flux_y.data[...] = g.Ay * nu_h * dw_dy.data / g.Δy
    delta_y(g, flux_y, lap_y)

    dw_dz = tmp.borrow("fC1", CELL, label="delta_z(w)")
    delta_z(g, w, dw_dz)
    flux_z = tmp.borrow("fC1", CELL, label="nu grad_z(w)")
    flux_z.data[...] = g.Az * nu_v * dw_dz.data / g.Δz
    delta_z(g, flux_z, lap_z)

    check_leases(lap_x, lap_y, lap_z)
    out.data[...] = (1 / g.V) * (lap_x.data + lap_y.data + lap_z.data)


_HORIZONTAL_LAPLACIANS = {
    CELL: scalar_diffusion,
    FACE_X: vector_diffusion_u,
    FACE_Y: vector_diffusion_v,
    FACE_Z: vector_diffusion_w,
}


def horizontal_biharmonic_diffusion(g, f, out, kappa4_h, tmp):
    """Horizontal biharmonic diffusion -κ₄ (∇h²)² f of a tracer or velocity component.

    Applies the horizontal Laplacian twice; the second pass reads and
    writes ``out``.
    """
    try:
        laplacian_h = _HORIZONTAL_LAPLACIANS[f.position]
    except KeyError:
        raise PositionError(
            f"biharmonic diffusion is defined for cell and face fields, got {f.position.name}"
        ) from None
    laplacian_h(g, f, out, 1.0, 0.0, tmp)
    laplacian_h(g, out, out, -kappa4_h, 0.0, tmp)
