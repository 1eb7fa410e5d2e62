# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""JSON persistence for benchmark and diagnostics results."""

import enum
import json

import numpy as np

from stagflow.grid import RegularCartesianGrid


def grid_to_dict(grid):
    return {
        "Nx": grid.Nx, "Ny": grid.Ny, "Nz": grid.Nz,
        "Lx": grid.Lx, "Ly": grid.Ly, "Lz": grid.Lz,
        "dtype": grid.dtype.name,
    }


class _NumpyEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.bool_):
            return bool(obj)
        if isinstance(obj, enum.Enum):
            return obj.name
        if isinstance(obj, RegularCartesianGrid):
            return grid_to_dict(obj)
        return super().default(obj)


def save_run(result, path):
    with open(path, "w") as f:
        json.dump(result, f, cls=_NumpyEncoder, indent=2)


def load_run(path):
    with open(path, "r") as f:
        return json.load(f)
