"""Pytest configuration and shared fixtures for estream tests."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from estream.config import SolverConfig
from estream.core.grid import AltitudeGrid
from estream.core.streams import StreamSet


# Fixtures for core modules


@pytest.fixture
def small_grid():
    """Three-point grid from the two-stream example."""
    return AltitudeGrid(np.array([0.0, 1000.0, 2000.0]))


@pytest.fixture
def uniform_grid():
    """Uniform 11-point grid, 100 m spacing."""
    return AltitudeGrid(np.linspace(0.0, 1000.0, 11))


@pytest.fixture
def fine_grid():
    """Uniform 201-point grid, 10 m spacing."""
    return AltitudeGrid(np.linspace(0.0, 2000.0, 201))


@pytest.fixture
def stretched_grid():
    """Non-uniform grid with spacing growing with altitude."""
    return AltitudeGrid(np.array([0.0, 50.0, 120.0, 210.0, 330.0, 480.0, 660.0]))


@pytest.fixture
def two_streams():
    """One downward and one upward stream."""
    return StreamSet(np.array([-1.0, 1.0]))


@pytest.fixture
def four_streams():
    """Two downward and two upward streams."""
    return StreamSet(np.array([-0.9, -0.4, 0.3, 0.8]))


@pytest.fixture
def default_config():
    """Default solver settings."""
    return SolverConfig()


# Helper function fixtures


@pytest.fixture
def two_stream_example(small_grid, two_streams):
    """Inputs of the two-stream example: downward flux 1.0 entering at the top."""
    n_t = 3
    return dict(
        grid=small_grid,
        streams=two_streams,
        velocity=1e7,
        loss_coeff=np.zeros(3),
        scatter_coeff=np.zeros((3, 2, 2)),
        diffusion_coeff=0.0,
        initial_state=np.zeros(6),
        boundary_flux=np.array([[1.0] * n_t, [0.0] * n_t]),
        source_term=None,
        time_axis=np.array([0.0, 1e-4, 2e-4]),
    )


def isotropic_scatter(n_z, n_mu, rate):
    """Scattering array [n_z, n_mu, n_mu] with ``rate`` between every pair."""
    return np.full((n_z, n_mu, n_mu), rate)


@pytest.fixture
def scatter_factory():
    return isotropic_scatter
