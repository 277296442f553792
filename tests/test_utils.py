"""Tests for HDF5 export, plotting and the command-line interface."""

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from estream.cli import build_parser, load_inputs, main
from estream.core.streams import StreamSet
from estream.transport.solver import solve
from estream.utils import load_result_hdf5, plot_stream_history, save_result_hdf5


@pytest.fixture
def example_result(two_stream_example):
    return solve(**two_stream_example)


def write_inputs(path, ex, **extra):
    """Store the two-stream example as an .npz archive."""
    arrays = dict(
        altitude=ex["grid"].z,
        mu=ex["streams"].mu,
        velocity=np.array(ex["velocity"]),
        loss=ex["loss_coeff"],
        initial=ex["initial_state"],
        boundary=ex["boundary_flux"],
        times=ex["time_axis"],
    )
    arrays.update(extra)
    np.savez(path, **arrays)
    return path


class TestHDF5Export:
    """Tests for save_result_hdf5 / load_result_hdf5."""

    def test_roundtrip(self, example_result, tmp_path):
        path = save_result_hdf5(example_result, tmp_path / "out" / "result.h5", energy_eV=500.0)
        loaded, energy = load_result_hdf5(path)

        assert path.exists()
        assert energy == 500.0
        assert_array_equal(loaded.flux_history, example_result.flux_history)
        assert_array_equal(loaded.times, example_result.times)
        assert_array_equal(loaded.grid.z, example_result.grid.z)
        assert_array_equal(loaded.streams.mu, example_result.streams.mu)
        assert loaded.refinement_factor == example_result.refinement_factor
        assert loaded.velocity == example_result.velocity

    def test_without_energy_or_solid_angle(self, example_result, tmp_path):
        loaded, energy = load_result_hdf5(save_result_hdf5(example_result, tmp_path / "r.h5"))
        assert energy is None
        assert loaded.streams.solid_angle is None

    def test_solid_angle_stored(self, two_stream_example, tmp_path):
        streams = StreamSet(np.array([-0.5, 0.5]), solid_angle=np.array([np.pi, np.pi]))
        two_stream_example["streams"] = streams
        result = solve(**two_stream_example)

        loaded, _ = load_result_hdf5(save_result_hdf5(result, tmp_path / "r.h5"))
        assert_allclose(loaded.streams.solid_angle, [np.pi, np.pi])


class TestVisualization:
    """Tests for plot_stream_history."""

    def test_saves_figure(self, example_result, tmp_path):
        path = tmp_path / "stream0.png"
        plot_stream_history(example_result, 0, save_path=str(path))
        assert path.exists()

    def test_all_zero_stream(self, example_result, tmp_path):
        path = tmp_path / "stream1.png"
        plot_stream_history(example_result, 1, title="upward", save_path=str(path))
        assert path.exists()


class TestCLI:
    """Tests for the estream command line."""

    def test_parser(self):
        args = build_parser().parse_args(["run", "in.npz", "--output", "x.h5"])
        assert args.command == "run"
        assert str(args.output) == "x.h5"
        assert args.config is None

    def test_load_inputs_optional_arrays(self, two_stream_example, tmp_path):
        path = write_inputs(tmp_path / "in.npz", two_stream_example, energy=np.array(250.0))
        inputs = load_inputs(path)

        assert inputs["scatter"] is None
        assert inputs["source"] is None
        assert float(inputs["energy"]) == 250.0

    def test_load_inputs_missing_array(self, tmp_path):
        path = tmp_path / "bad.npz"
        np.savez(path, altitude=np.zeros(3))
        with pytest.raises(KeyError, match="mu"):
            load_inputs(path)

    def test_run_writes_result(self, two_stream_example, tmp_path):
        inputs = write_inputs(tmp_path / "in.npz", two_stream_example, energy=np.array(250.0))
        output = tmp_path / "result.h5"

        assert main(["run", str(inputs), "--output", str(output)]) == 0
        loaded, energy = load_result_hdf5(output)
        assert energy == 250.0
        assert_allclose(loaded.flux_history[1, 1:], [1.0 / 3.0, 7.0 / 9.0])

    def test_run_with_config(self, two_stream_example, tmp_path):
        inputs = write_inputs(tmp_path / "in.npz", two_stream_example)
        config = tmp_path / "solver.yaml"
        config.write_text("solver:\n  linear_solver: dense_inverse\n")
        output = tmp_path / "result.h5"

        assert main(["run", str(inputs), "--config", str(config), "--output", str(output)]) == 0
        assert output.exists()

    def test_run_reports_bad_input(self, two_stream_example, tmp_path):
        inputs = write_inputs(
            tmp_path / "in.npz", two_stream_example, altitude=np.array([0.0, 2000.0, 1000.0])
        )
        output = tmp_path / "result.h5"

        assert main(["run", str(inputs), "--output", str(output)]) == 1
        assert not output.exists()

    def test_run_reports_bad_config(self, two_stream_example, tmp_path):
        inputs = write_inputs(tmp_path / "in.npz", two_stream_example)
        output = tmp_path / "result.h5"
        unknown_key = tmp_path / "unknown.yaml"
        unknown_key.write_text("solver:\n  cfl_limit: 10\n")
        fractional = tmp_path / "fractional.yaml"
        fractional.write_text("solver:\n  max_refinements: 2.5\n")

        for config in (unknown_key, fractional, tmp_path / "missing.yaml"):
            argv = ["run", str(inputs), "--config", str(config), "--output", str(output)]
            assert main(argv) == 1
        assert not output.exists()

    def test_info(self, capsys):
        assert main(["info"]) == 0
        assert "cfl_max" in capsys.readouterr().out
