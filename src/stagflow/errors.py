# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Exceptions raised for precondition violations in grids, fields and operators."""


class DegenerateGridError(ValueError):
    """Grid has an axis with fewer than 2 cells."""


class ShapeError(ValueError):
    """Field data shape is inconsistent with the grid or with another field."""


class PositionError(TypeError):
    """Operator called with a field at a position it is not defined for."""


class ScratchAliasingError(RuntimeError):
    """A scratch view was used after its slot was re-borrowed for another quantity."""
