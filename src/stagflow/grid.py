# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import logging

import numpy as np

from stagflow.errors import DegenerateGridError

logger = logging.getLogger(__name__)


class RegularCartesianGrid:
    """3D regular Cartesian grid with uniform spacing along each axis.

    The domain is x in [0, Lx), y in [0, Ly) (both periodic) and
    z in [-Lz, 0]. Vertical index k = 0 is the top layer (the surface) and
    k = Nz - 1 the bottom layer.

    Attributes:
        Nx, Ny, Nz: number of cells along each axis
        Lx, Ly, Lz: domain lengths
        Δx, Δy, Δz: cell spacings (also available as dx, dy, dz)
        Ax, Ay, Az: face areas normal to x, y, z
        V: cell volume
        dtype: numpy dtype of field data allocated on this grid
        xC, yC, zC: cell-center coordinates, shapes (Nx,), (Ny,), (Nz,)
        xF, yF, zF: face coordinates; zF[0] = 0 is the surface face

    Instances are immutable once constructed.
    """

    def __init__(self, N, L, dtype=np.float64):
        if len(N) != 3 or len(L) != 3:
            raise ValueError(f"N and L must have 3 entries, got N={N}, L={L}")

        Nx, Ny, Nz = (int(n) for n in N)
        Lx, Ly, Lz = (float(l) for l in L)

        for name, n in zip(("Nx", "Ny", "Nz"), (Nx, Ny, Nz)):
            if n < 1:
                raise ValueError(f"{name} must be positive, got {n}")
            if n < 2:
                raise DegenerateGridError(
                    f"{name} must be >= 2 (two-point stencils need a neighbour), got {n}"
                )
        for name, l in zip(("Lx", "Ly", "Lz"), (Lx, Ly, Lz)):
            if not l > 0:
                raise ValueError(f"{name} must be positive, got {l}")

        set_ = super().__setattr__
        set_("Nx", Nx)
        set_("Ny", Ny)
        set_("Nz", Nz)
        set_("Lx", Lx)
        set_("Ly", Ly)
        set_("Lz", Lz)
        set_("dtype", np.dtype(dtype))

        Δx, Δy, Δz = Lx / Nx, Ly / Ny, Lz / Nz
        set_("Δx", Δx)
        set_("Δy", Δy)
        set_("Δz", Δz)

        # Face areas and cell volume.
        set_("Ax", Δy * Δz)
        set_("Ay", Δx * Δz)
        set_("Az", Δx * Δy)
        set_("V", Δx * Δy * Δz)

        set_("xF", np.arange(Nx) * Δx)
        set_("yF", np.arange(Ny) * Δy)
        set_("zF", -np.arange(Nz) * Δz)
        set_("xC", (np.arange(Nx) + 0.5) * Δx)
        set_("yC", (np.arange(Ny) + 0.5) * Δy)
        set_("zC", -(np.arange(Nz) + 0.5) * Δz)
        for name in ("xF", "yF", "zF", "xC", "yC", "zC"):
            getattr(self, name).flags.writeable = False

        logger.debug("Created grid N=(%d, %d, %d) L=(%g, %g, %g)",
                     Nx, Ny, Nz, Lx, Ly, Lz)

    @classmethod
    def from_params(cls, params):
        """Build a grid from a dict with Nx, Ny, Nz, Lx, Ly, Lz and optional dtype."""
        missing = [k for k in ("Nx", "Ny", "Nz", "Lx", "Ly", "Lz") if k not in params]
        if missing:
            raise ValueError(f"Missing grid parameters: {', '.join(missing)}")
        return cls(
            N=(params["Nx"], params["Ny"], params["Nz"]),
            L=(params["Lx"], params["Ly"], params["Lz"]),
            dtype=params.get("dtype", np.float64),
        )

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def shape(self):
        return (self.Nx, self.Ny, self.Nz)

    @property
    def dx(self):
        return self.Δx

    @property
    def dy(self):
        return self.Δy

    @property
    def dz(self):
        return self.Δz

    def __repr__(self):
        return (f"RegularCartesianGrid(N=({self.Nx}, {self.Ny}, {self.Nz}), "
                f"L=({self.Lx:g}, {self.Ly:g}, {self.Lz:g}))")
