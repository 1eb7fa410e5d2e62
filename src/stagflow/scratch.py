# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Reusable scratch buffers shared by the composite operators.

A pool owns a fixed set of named buffers. Composite operators borrow a
slot by name *as* a given position, and deliberately borrow the same slot
again under a different logical name later in the same call. The contract
each operator follows is write-after-read: all reads of a slot for one
quantity finish before the slot is overwritten with the next.

Every borrow bumps the slot's generation and stamps the returned view with
a lease. With ``checked=True`` the primitive operators reject views whose
lease is stale, i.e. whose slot has been re-borrowed since.
"""

import logging
from collections import namedtuple

import numpy as np

from stagflow.errors import ScratchAliasingError
from stagflow.fields import Field, Position

logger = logging.getLogger(__name__)

# Slot name -> home position. Three cell, three face, two edge buffers.
SLOTS = {
    "fC1": Position.CELL,
    "fC2": Position.CELL,
    "fC3": Position.CELL,
    "fFX": Position.FACE_X,
    "fFY": Position.FACE_Y,
    "fFZ": Position.FACE_Z,
    "fE1": Position.EDGE_Z,
    "fE2": Position.EDGE_Z,
}

Lease = namedtuple("Lease", ["pool", "slot", "generation", "label"])


class ScratchPool:
    """Named arena of scratch fields for one grid.

    Args:
        grid: RegularCartesianGrid; every buffer has shape grid.shape.
        checked: enable stale-lease detection in the primitive operators.
    """

    def __init__(self, grid, checked=False):
        self.grid = grid
        self.checked = checked
        self._buffers = {name: np.zeros(grid.shape, dtype=grid.dtype) for name in SLOTS}
        self._generation = dict.fromkeys(SLOTS, 0)
        self._labels = dict.fromkeys(SLOTS)
        logger.debug("Allocated scratch pool: %d slots of shape %s (checked=%s)",
                     len(SLOTS), grid.shape, checked)

    @property
    def slots(self):
        return tuple(SLOTS)

    def buffer(self, slot):
        """Raw array behind ``slot``."""
        return self._buffers[slot]

    def borrow(self, slot, position=None, label=None):
        """Return a view of ``slot`` tagged with ``position``.

        Any earlier view of the same slot becomes stale. ``position``
        defaults to the slot's home position; ``label`` names the logical
        quantity for error messages.
        """
        if slot not in self._buffers:
            raise KeyError(f"Unknown scratch slot {slot!r}; available: {', '.join(SLOTS)}")
        if position is None:
            position = SLOTS[slot]
        generation = self._generation[slot] + 1
        self._generation[slot] = generation
        self._labels[slot] = label
        view = Field(self.grid, position, self._buffers[slot])
        view.lease = Lease(self, slot, generation, label)
        return view

    def is_live(self, field):
        lease = field.lease
        if lease is None or lease.pool is not self:
            return True
        return lease.generation == self._generation[lease.slot]

    def check(self, *fields):
        """Raise ScratchAliasingError if any of ``fields`` holds a stale lease."""
        for f in fields:
            if not self.is_live(f):
                lease = f.lease
                msg = (f"scratch slot {lease.slot!r} read as {lease.label or '?'} after "
                       f"being re-borrowed as {self._labels[lease.slot] or '?'}")
                logger.error(msg)
                raise ScratchAliasingError(msg)

    def zero(self):
        for buf in self._buffers.values():
            buf.fill(0)


OperatorTemporaryFields = ScratchPool


def check_leases(*fields):
    """Check scratch views against their pools when the pool is in checked mode."""
    for f in fields:
        lease = f.lease
        if lease is not None and lease.pool.checked:
            lease.pool.check(f)
