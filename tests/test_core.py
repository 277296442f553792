"""Tests for core modules: grid, streams, state, constants."""

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from estream.core.constants import electron_speed
from estream.core.grid import AltitudeGrid, as_grid
from estream.core.state import FluxState, stacked_index
from estream.core.streams import StreamSet, as_streams
from estream.config.enums import StreamDirection
from estream.exceptions import ConfigurationError


class TestAltitudeGrid:
    """Tests for AltitudeGrid."""

    def test_initialization(self, small_grid):
        """Test spacing and sizes of a uniform grid."""
        assert small_grid.n_z == 3
        assert_allclose(small_grid.dz, [1000.0, 1000.0])
        assert small_grid.dz_min == 1000.0
        assert small_grid.is_uniform
        assert small_grid.bottom == 0.0
        assert small_grid.top == 2000.0

    def test_ghost_spacings(self, stretched_grid):
        """Ghost points replicate the outermost intervals."""
        forward = stretched_grid.forward_spacing()
        backward = stretched_grid.backward_spacing()

        assert forward.size == stretched_grid.n_z
        assert backward.size == stretched_grid.n_z
        assert forward[-1] == forward[-2] == 180.0
        assert backward[0] == backward[1] == 50.0
        assert_allclose(forward[:-1], backward[1:])
        assert not stretched_grid.is_uniform
        assert stretched_grid.dz_min == 50.0

    def test_rejects_non_monotonic(self):
        """Test that decreasing altitudes raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match="strictly increasing"):
            AltitudeGrid(np.array([0.0, 200.0, 100.0, 300.0]))

    def test_rejects_repeated_points(self):
        """Test that equal neighbours raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match="strictly increasing"):
            AltitudeGrid(np.array([0.0, 100.0, 100.0]))

    def test_rejects_too_few_points(self):
        """Two boundary rows need at least three altitudes."""
        with pytest.raises(ConfigurationError, match="at least 3"):
            AltitudeGrid(np.array([0.0, 100.0]))

    def test_rejects_nan(self):
        with pytest.raises(ConfigurationError, match="non-finite"):
            AltitudeGrid(np.array([0.0, np.nan, 100.0]))

    def test_is_read_only(self, small_grid):
        with pytest.raises(ValueError):
            small_grid.z[0] = 5.0

    def test_as_grid_accepts_sequence(self, small_grid):
        assert as_grid(small_grid) is small_grid
        assert_array_equal(as_grid([0, 1, 2]).z, [0.0, 1.0, 2.0])


class TestStreamSet:
    """Tests for StreamSet."""

    def test_directions(self, four_streams):
        """Sign of mu selects the direction."""
        assert four_streams.n_mu == 4
        assert_array_equal(four_streams.is_down, [True, True, False, False])
        assert_array_equal(four_streams.is_up, [False, False, True, True])
        assert four_streams.direction(0) is StreamDirection.DOWN
        assert four_streams.direction(3) is StreamDirection.UP

    def test_rejects_zero_cosine(self):
        """Test that a zero directional cosine raises ConfigurationError."""
        with pytest.raises(ConfigurationError, match="zero"):
            StreamSet(np.array([-1.0, 0.0, 1.0]))

    def test_rejects_out_of_range_cosine(self):
        with pytest.raises(ConfigurationError, match=r"\[-1, 1\]"):
            StreamSet(np.array([-1.5, 1.0]))

    def test_rejects_mismatched_solid_angle(self):
        with pytest.raises(ConfigurationError, match="solid_angle"):
            StreamSet(np.array([-1.0, 1.0]), solid_angle=np.array([1.0]))

    def test_from_pitch_angle_limits_two_hemispheres(self):
        """Hemispheres have mean cosine -1/2 and 1/2 and solid angle 2 pi."""
        streams = StreamSet.from_pitch_angle_limits([180.0, 90.0, 0.0])

        assert_allclose(streams.mu, [-0.5, 0.5])
        assert_allclose(streams.solid_angle, [2 * np.pi, 2 * np.pi])
        assert_allclose(streams.pitch_angle_limits, [180.0, 90.0, 0.0])

    def test_from_pitch_angle_limits_covers_sphere(self):
        """Band solid angles add up to 4 pi."""
        streams = StreamSet.from_pitch_angle_limits([180, 150, 120, 90, 60, 30, 0])

        assert streams.n_mu == 6
        assert_allclose(streams.solid_angle.sum(), 4 * np.pi)
        assert np.all(np.diff(streams.mu) > 0)

    def test_permuted(self, four_streams):
        permuted = four_streams.permuted([3, 1, 0, 2])
        assert_allclose(permuted.mu, [0.8, -0.4, -0.9, 0.3])

    def test_permuted_rejects_non_permutation(self, four_streams):
        with pytest.raises(ConfigurationError, match="permutation"):
            four_streams.permuted([0, 0, 1, 2])

    def test_as_streams_accepts_sequence(self, two_streams):
        assert as_streams(two_streams) is two_streams
        assert_array_equal(as_streams([-1, 1]).mu, [-1.0, 1.0])


class TestFluxState:
    """Tests for the (stream, altitude) state container."""

    def test_stacking_is_stream_major(self):
        """Row i_mu * n_z + i_z holds (i_mu, i_z)."""
        vector = np.arange(12, dtype=float)
        state = FluxState.from_vector(vector, n_mu=3, n_z=4)

        assert state[(1, 0)] == vector[4]
        assert state[(2, 3)] == vector[11]
        assert stacked_index(2, 3, 4) == 11
        assert_array_equal(state.stream(1), [4.0, 5.0, 6.0, 7.0])
        assert_array_equal(state.as_vector(), vector)

    def test_setitem(self):
        state = FluxState.zeros(2, 3)
        state[(1, 2)] = 7.0
        assert state.as_vector()[5] == 7.0
        assert state.total() == 7.0

    def test_from_vector_size_mismatch(self):
        with pytest.raises(ConfigurationError, match="expected"):
            FluxState.from_vector(np.zeros(5), n_mu=2, n_z=3)

    def test_from_any_forms(self):
        """Vector, matrix, profile list and FluxState give the same state."""
        matrix = np.arange(6, dtype=float).reshape(2, 3)
        expected = matrix.reshape(-1)

        for value in (expected, matrix, [matrix[0], matrix[1]], FluxState(matrix)):
            state = FluxState.from_any(value, n_mu=2, n_z=3)
            assert_array_equal(state.as_vector(), expected)

    def test_from_any_copies(self):
        matrix = np.zeros((2, 3))
        state = FluxState.from_any(matrix, n_mu=2, n_z=3)
        state[(0, 0)] = 1.0
        assert matrix[0, 0] == 0.0

    def test_from_any_rejects_wrong_profile_count(self):
        with pytest.raises(ConfigurationError, match="stream profiles"):
            FluxState.from_any([np.zeros(3)], n_mu=2, n_z=3)

    def test_from_any_rejects_wrong_shape(self):
        with pytest.raises(ConfigurationError):
            FluxState.from_any(np.zeros((3, 2, 2)), n_mu=2, n_z=3)

    def test_permuted(self):
        state = FluxState(np.array([[1.0, 2.0], [3.0, 4.0]]))
        assert_array_equal(state.permuted([1, 0]).flux, [[3.0, 4.0], [1.0, 2.0]])


class TestElectronSpeed:
    """Tests for the speed-energy relation."""

    def test_low_energy_matches_classical(self):
        """At 1 keV the relativistic speed is within 0.5% of sqrt(2E/m)."""
        classical = np.sqrt(2 * 1000.0 * 1.602176634e-19 / 9.1093837e-31)
        assert electron_speed(1000.0) == pytest.approx(classical, rel=5e-3)

    def test_below_light_speed(self):
        speeds = electron_speed(np.array([1e2, 1e4, 1e6, 1e8]))
        assert np.all(np.diff(speeds) > 0)
        assert np.all(speeds < 2.99792458e8)

    def test_rejects_nonpositive(self):
        with pytest.raises(ValueError):
            electron_speed(0.0)
