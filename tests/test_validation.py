"""Tests for result diagnostics."""

import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy.sparse import linalg as spla

from estream.operators.assembly import assemble_system
from estream.transport.solver import TransportResult
from estream.validation import (
    check_boundaries,
    column_content,
    relative_l2,
    relative_linf,
    steady_state_residual,
    total_flux,
)


def make_result(grid, streams, cube, velocity=1e7):
    """Wrap a flux cube [n_t, n_mu, n_z] in a TransportResult."""
    n_t = cube.shape[0]
    return TransportResult(
        flux_history=cube.reshape(n_t, -1).T.copy(),
        times=np.arange(n_t, dtype=float),
        grid=grid,
        streams=streams,
        velocity=velocity,
        refinement_factor=1,
        internal_dt=1.0,
        cfl=1.0,
    )


class TestTotals:
    """Tests for total_flux and column_content."""

    def test_total_flux(self, small_grid, two_streams):
        cube = np.ones((2, 2, 3))
        cube[1, 1] = 2.0
        result = make_result(small_grid, two_streams, cube)

        assert_allclose(total_flux(result), [6.0, 9.0])
        assert_allclose(total_flux(result, weights=[1.0, 0.5]), [4.5, 6.0])

    def test_column_content_non_uniform(self, stretched_grid, two_streams):
        """Constant flux integrates to flux * column height / v."""
        cube = np.full((1, 2, stretched_grid.n_z), 3.0)
        result = make_result(stretched_grid, two_streams, cube, velocity=2.0)

        assert_allclose(column_content(result), [[3.0 * 660.0 / 2.0]] * 2)


class TestSteadyStateResidual:
    """Tests for steady_state_residual."""

    def test_fixed_point_has_zero_residual(self, uniform_grid, four_streams, scatter_factory):
        n_z, n_mu = uniform_grid.n_z, four_streams.n_mu
        system = assemble_system(
            uniform_grid, four_streams, 1e7, 1e-5,
            np.full(n_z, 1e-4), scatter_factory(n_z, n_mu, 1e-5), np.zeros(n_mu),
        )
        q = np.full(system.size, 1e-3)
        fixed_point = spla.spsolve((system.lhs - system.rhs).tocsc(), q)

        assert steady_state_residual(system, fixed_point, q) < 1e-12
        assert steady_state_residual(system, 2.0 * fixed_point, q) > 1e-3


class TestBoundaryCheck:
    """Tests for check_boundaries."""

    def test_detects_each_violation(self, small_grid, two_streams):
        boundary = np.array([[1.0, 1.0, 1.0], [0.0, 0.0, 0.0]])
        cube = np.zeros((3, 2, 3))
        cube[1:, 0, 2] = 1.0
        cube[1:, 1, 1:] = 4.0

        report = check_boundaries(make_result(small_grid, two_streams, cube), boundary)
        assert report.is_valid()

        cube[2, 0, 0] = 0.1
        cube[1, 0, 2] = 1.5
        cube[2, 1, 2] = 3.0
        report = check_boundaries(make_result(small_grid, two_streams, cube), boundary)

        assert report.bottom_max == pytest.approx(0.1)
        assert report.top_down_max == pytest.approx(0.5)
        assert report.top_up_gradient_max == pytest.approx(1.0)
        assert not report.is_valid()

    def test_initial_column_not_checked(self, small_grid, two_streams):
        cube = np.zeros((2, 2, 3))
        cube[0] = 5.0
        cube[1, 0, 2] = 1.0
        report = check_boundaries(
            make_result(small_grid, two_streams, cube), np.ones((2, 2))
        )
        assert report.is_valid()


class TestRelativeNorms:
    """Tests for relative_l2 and relative_linf."""

    def test_identical(self):
        x = np.array([1.0, -2.0, 3.0])
        assert relative_l2(x, x) == 0.0
        assert relative_linf(x, x) == 0.0

    def test_values(self):
        ref = np.array([3.0, 4.0])
        assert relative_l2(ref * 1.1, ref) == pytest.approx(0.1)
        assert relative_linf(np.array([3.0, 4.4]), ref) == pytest.approx(0.1)

    def test_zero_reference(self):
        assert relative_l2(np.ones(3), np.zeros(3)) == 0.0
        assert relative_linf(np.ones(3), np.zeros(3)) == 0.0
