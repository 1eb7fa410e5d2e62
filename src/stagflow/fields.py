# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Position-tagged fields on a staggered (Arakawa C) grid.

Every field stores an array of shape (Nx, Ny, Nz) with no halo. Its
position says where on the cell the samples live, encoded as the
staggering along (x, y, z): 1 means the sample sits on the west/south/top
face of the cell along that axis, 0 means it sits at the cell center.
"""

import enum
from collections import namedtuple

import numpy as np

from stagflow.errors import PositionError, ShapeError


class Position(enum.Enum):
    CELL = (0, 0, 0)
    FACE_X = (1, 0, 0)
    FACE_Y = (0, 1, 0)
    FACE_Z = (0, 0, 1)
    EDGE_X = (0, 1, 1)
    EDGE_Y = (1, 0, 1)
    EDGE_Z = (1, 1, 0)

    @property
    def staggering(self):
        return self.value

    def staggered(self, axis):
        """True if samples sit on faces along ``axis`` (0, 1 or 2)."""
        return bool(self.value[axis])

    def toggled(self, axis):
        """Position reached by moving half a cell along ``axis``, or None."""
        s = list(self.value)
        s[axis] = 1 - s[axis]
        try:
            return Position(tuple(s))
        except ValueError:
            return None  # cell vertex, not a supported storage position

    @property
    def is_face(self):
        return sum(self.value) == 1

    @property
    def is_edge(self):
        return sum(self.value) == 2


EDGE_POSITIONS = (Position.EDGE_X, Position.EDGE_Y, Position.EDGE_Z)


def nodes(grid, position):
    """Coordinate vectors (x, y, z) of the sample points of ``position``."""
    sx, sy, sz = position.staggering
    x = grid.xF if sx else grid.xC
    y = grid.yF if sy else grid.yC
    z = grid.zF if sz else grid.zC
    return x, y, z


class Field:
    """Array-backed field tagged with its storage position.

    Args:
        grid: RegularCartesianGrid the field lives on.
        position: Position of the samples.
        data: optional existing array of shape grid.shape. It is used
            without copying; a zero array is allocated when omitted.

    Attributes:
        grid, position, data
        lease: set by ScratchPool for borrowed views, None otherwise.
    """

    def __init__(self, grid, position, data=None):
        if not isinstance(position, Position):
            raise TypeError(f"position must be a Position, got {position!r}")
        if data is None:
            data = np.zeros(grid.shape, dtype=grid.dtype)
        else:
            data = np.asarray(data)
            if data.shape != grid.shape:
                raise ShapeError(
                    f"{position.name} field data has shape {data.shape}, grid has {grid.shape}"
                )
        self.grid = grid
        self.position = position
        self.data = data
        self.lease = None

    @property
    def shape(self):
        return self.data.shape

    def nodes(self):
        return nodes(self.grid, self.position)

    def set(self, value):
        """Set the field from a scalar, an array, or a callable f(x, y, z)."""
        if callable(value):
            x, y, z = np.meshgrid(*self.nodes(), indexing="ij")
            self.data[...] = value(x, y, z)
        else:
            self.data[...] = value
        return self

    def fill(self, value):
        self.data.fill(value)
        return self

    def __repr__(self):
        return f"{type(self).__name__}({self.position.name}, shape={self.data.shape})"


class CellField(Field):
    def __init__(self, grid, data=None):
        super().__init__(grid, Position.CELL, data)


class FaceFieldX(Field):
    def __init__(self, grid, data=None):
        super().__init__(grid, Position.FACE_X, data)


class FaceFieldY(Field):
    def __init__(self, grid, data=None):
        super().__init__(grid, Position.FACE_Y, data)


class FaceFieldZ(Field):
    def __init__(self, grid, data=None):
        super().__init__(grid, Position.FACE_Z, data)


class EdgeField(Field):
    """Field on cell edges; ``position`` names the edge direction."""

    def __init__(self, grid, position=Position.EDGE_Z, data=None):
        if position not in EDGE_POSITIONS:
            raise PositionError(f"EdgeField position must be an edge, got {position}")
        super().__init__(grid, position, data)


class VelocityFields(namedtuple("VelocityFields", ["u", "v", "w"])):
    """Staggered velocity components u (face-x), v (face-y), w (face-z)."""

    __slots__ = ()

    @classmethod
    def allocate(cls, grid):
        return cls(FaceFieldX(grid), FaceFieldY(grid), FaceFieldZ(grid))


class TracerFields(namedtuple("TracerFields", ["T", "S"])):
    __slots__ = ()

    @classmethod
    def allocate(cls, grid):
        return cls(CellField(grid), CellField(grid))


class PressureFields(namedtuple("PressureFields", ["pHY", "pNHS"])):
    """Hydrostatic and non-hydrostatic pressure, both cell-centered."""

    __slots__ = ()

    @classmethod
    def allocate(cls, grid):
        return cls(CellField(grid), CellField(grid))


class SourceTerms(namedtuple("SourceTerms", ["Gu", "Gv", "Gw", "GT", "GS"])):
    __slots__ = ()

    @classmethod
    def allocate(cls, grid):
        return cls(FaceFieldX(grid), FaceFieldY(grid), FaceFieldZ(grid),
                   CellField(grid), CellField(grid))


class ForcingFields(namedtuple("ForcingFields", ["Fu", "Fv", "Fw", "FT", "FS"])):
    __slots__ = ()

    @classmethod
    def allocate(cls, grid):
        return cls(FaceFieldX(grid), FaceFieldY(grid), FaceFieldZ(grid),
                   CellField(grid), CellField(grid))
