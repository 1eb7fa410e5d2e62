# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import numpy as np
from stagflow.fields import (
    CellField, EdgeField, FaceFieldX, FaceFieldY, FaceFieldZ, ForcingFields,
    Position, PressureFields, SourceTerms, TracerFields, VelocityFields, nodes,
)
from stagflow.grid import RegularCartesianGrid


def _grid():
    return RegularCartesianGrid(N=(4, 3, 2), L=(4.0, 3.0, 2.0))


def test_positions_toggle_between_cells_faces_and_edges():
    assert Position.CELL.toggled(0) is Position.FACE_X
    assert Position.FACE_X.toggled(0) is Position.CELL
    assert Position.FACE_X.toggled(1) is Position.EDGE_Z
    assert Position.FACE_X.toggled(2) is Position.EDGE_Y
    assert Position.FACE_Y.toggled(2) is Position.EDGE_X
    assert Position.EDGE_Z.toggled(1) is Position.FACE_X
    assert Position.EDGE_Z.toggled(2) is None  # cell vertex


def test_face_and_edge_classification():
    assert all(p.is_face for p in (Position.FACE_X, Position.FACE_Y, Position.FACE_Z))
    assert all(p.is_edge for p in (Position.EDGE_X, Position.EDGE_Y, Position.EDGE_Z))
    assert not Position.CELL.is_face and not Position.CELL.is_edge


def test_field_defaults_to_zeros_of_grid_dtype():
    g = RegularCartesianGrid(N=(4, 3, 2), L=(1.0, 1.0, 1.0), dtype=np.float32)
    f = FaceFieldZ(g)
    assert f.position is Position.FACE_Z
    assert f.data.shape == (4, 3, 2)
    assert f.data.dtype == np.float32
    assert not f.data.any()


def test_field_wraps_data_without_copy():
    g = _grid()
    arr = np.ones(g.shape)
    f = CellField(g, arr)
    f.data[0, 0, 0] = 5.0
    assert arr[0, 0, 0] == 5.0


def test_set_from_callable_uses_position_nodes():
    """Face-x samples sit at xF, cell samples at xC."""
    g = _grid()
    u = FaceFieldX(g).set(lambda x, y, z: x)
    c = CellField(g).set(lambda x, y, z: x)
    assert np.allclose(u.data[:, 0, 0], g.xF)
    assert np.allclose(c.data[:, 0, 0], g.xC)
    w = FaceFieldZ(g).set(lambda x, y, z: z)
    assert np.allclose(w.data[0, 0, :], g.zF)


def test_set_scalar_and_fill():
    g = _grid()
    f = CellField(g).set(3.0)
    assert np.all(f.data == 3.0)
    f.fill(0.0)
    assert not f.data.any()


def test_nodes_of_edges():
    g = _grid()
    x, y, z = nodes(g, Position.EDGE_Y)
    assert np.array_equal(x, g.xF)
    assert np.array_equal(y, g.yC)
    assert np.array_equal(z, g.zF)
    e = EdgeField(g, Position.EDGE_Y)
    assert all(np.array_equal(a, b) for a, b in zip(e.nodes(), (x, y, z)))


def test_field_groups_allocate_native_positions():
    g = _grid()
    U = VelocityFields.allocate(g)
    assert [c.position for c in U] == [Position.FACE_X, Position.FACE_Y, Position.FACE_Z]
    u, v, w = U
    assert u is U.u and w is U.w

    tracers = TracerFields.allocate(g)
    assert all(c.position is Position.CELL for c in tracers)
    pressures = PressureFields.allocate(g)
    assert pressures.pHY.position is Position.CELL

    for group in (SourceTerms.allocate(g), ForcingFields.allocate(g)):
        assert [c.position for c in group] == [
            Position.FACE_X, Position.FACE_Y, Position.FACE_Z, Position.CELL, Position.CELL,
        ]
    assert isinstance(U.v, FaceFieldY)
