# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

import numpy as np
import pytest
from stagflow.diagnostics import (
    FieldDiagnostics, advective_cfl, kinetic_energy, max_abs_divergence,
    tracer_content, vertical_vorticity,
)
from stagflow.errors import PositionError
from stagflow.fields import CellField, EdgeField, Position, VelocityFields
from stagflow.grid import RegularCartesianGrid
from stagflow.scratch import ScratchPool


def _grid():
    return RegularCartesianGrid(N=(8, 6, 4), L=(2.0, 3.0, 1.0))


def test_vorticity_of_sinusoidal_v():
    """ζ = δx v / Δx of v = sin(2πx/Lx) is the sampled cosine, scaled."""
    g = _grid()
    tmp = ScratchPool(g)
    U = VelocityFields.allocate(g)
    U.v.set(lambda x, y, z: np.sin(2 * np.pi * x / g.Lx))
    zeta = EdgeField(g, Position.EDGE_Z)
    vertical_vorticity(g, U, zeta, tmp)

    amp = 2 * np.sin(np.pi * g.Δx / g.Lx) / g.Δx
    expected = amp * np.cos(2 * np.pi * g.xF / g.Lx)
    assert np.allclose(zeta.data, expected[:, None, None])


def test_vorticity_requires_z_edges():
    g = _grid()
    with pytest.raises(PositionError):
        vertical_vorticity(g, VelocityFields.allocate(g), CellField(g), ScratchPool(g))


def test_divergence_free_shear_flow():
    g = _grid()
    U = VelocityFields.allocate(g)
    U.u.set(lambda x, y, z: np.sin(2 * np.pi * y / g.Ly))
    assert max_abs_divergence(g, U, ScratchPool(g)) < 1e-12


def test_kinetic_energy_of_uniform_flow():
    g = _grid()
    U = VelocityFields.allocate(g)
    U.u.set(1.0)
    ke = kinetic_energy(g, U, ScratchPool(g))
    assert np.isclose(ke, 0.5 * g.Lx * g.Ly * g.Lz)


def test_tracer_content_and_cfl():
    g = _grid()
    Q = CellField(g).set(2.0)
    assert np.isclose(tracer_content(g, Q), 2.0 * g.Lx * g.Ly * g.Lz)

    U = VelocityFields.allocate(g)
    U.u.set(-2.0)
    assert np.isclose(advective_cfl(g, U, 0.01), 0.01 * 2.0 / g.Δx)


def test_field_diagnostics_summary():
    g = _grid()
    diag = FieldDiagnostics(g)
    U = VelocityFields.allocate(g)
    U.u.set(1.0)
    Q = CellField(g).set(1.0)
    diag.accumulate(U, 0.0, Q=Q, dt=0.1)
    U.u.set(2.0)
    diag.accumulate(U, 1.0, Q=Q, dt=0.1)

    result = diag.finalize()
    assert result["n_samples"] == 2
    assert result["t"] == [0.0, 1.0]
    assert result["kinetic_energy"][1] == pytest.approx(4 * result["kinetic_energy"][0])
    assert result["tracer_drift"] == 0.0
    assert result["max_cfl"] == pytest.approx(0.1 * 2.0 / g.Δx)
    assert result["max_divergence"] < 1e-12
    assert result["max_vorticity"] < 1e-12


def test_field_diagnostics_without_optional_samples():
    g = _grid()
    diag = FieldDiagnostics(g, tmp=ScratchPool(g, checked=True))
    diag.accumulate(VelocityFields.allocate(g), 0.0)
    result = diag.finalize()
    assert "tracer_content" not in result
    assert "max_cfl" not in result


def test_field_diagnostics_empty_raises():
    with pytest.raises(ValueError):
        FieldDiagnostics(_grid()).finalize()


def test_tracer_drift_from_zero_content_is_absolute():
    g = _grid()
    diag = FieldDiagnostics(g)
    U = VelocityFields.allocate(g)
    Q = CellField(g)
    diag.accumulate(U, 0.0, Q=Q)
    Q.set(0.5)
    diag.accumulate(U, 1.0, Q=Q)
    result = diag.finalize()
    assert result["tracer_drift"] == pytest.approx(0.5 * g.Lx * g.Ly * g.Lz)


def test_tracer_drift_is_relative():
    g = _grid()
    diag = FieldDiagnostics(g)
    U = VelocityFields.allocate(g)
    Q = CellField(g).set(2.0)
    diag.accumulate(U, 0.0, Q=Q)
    Q.set(3.0)
    diag.accumulate(U, 1.0, Q=Q)
    assert diag.finalize()["tracer_drift"] == pytest.approx(0.5)
