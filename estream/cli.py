"""Command-line interface for running single-energy transport solves.

Usage:
    python -m estream.cli run inputs.npz --output result.h5
    python -m estream.cli run inputs.npz --config solver.yaml --output result.h5
    python -m estream.cli info
"""

import argparse
import logging
import sys
from pathlib import Path

import numpy as np
import yaml

from estream.config import (
    create_default_config,
    get_defaults,
    load_solver_config,
    validate_config,
    warn_if_unsafe,
)
from estream.core.streams import StreamSet
from estream.exceptions import TransportError
from estream.transport.solver import solve
from estream.utils.exporters import save_result_hdf5

logger = logging.getLogger(__name__)

REQUIRED_ARRAYS = ("altitude", "mu", "velocity", "loss", "initial", "boundary", "times")
OPTIONAL_ARRAYS = ("scatter", "source", "diffusion", "solid_angle", "energy")


def load_inputs(path) -> dict:
    """Load named solver inputs from an .npz archive.

    Required arrays: altitude, mu, velocity, loss, initial, boundary, times.
    Optional arrays: scatter, source, diffusion, solid_angle, energy.
    """
    with np.load(path) as archive:
        missing = [name for name in REQUIRED_ARRAYS if name not in archive.files]
        if missing:
            raise KeyError(f"{path} lacks required arrays: {', '.join(missing)}")
        inputs = {name: archive[name] for name in REQUIRED_ARRAYS}
        for name in OPTIONAL_ARRAYS:
            inputs[name] = archive[name] if name in archive.files else None
    return inputs


def cmd_run(args: argparse.Namespace) -> int:
    """Solve the problem stored in an .npz archive and write HDF5."""
    try:
        config = load_solver_config(args.config) if args.config else create_default_config()
        validate_config(config)
    except (OSError, yaml.YAMLError, TransportError) as e:
        logger.error(f"Invalid solver config {args.config}: {e}")
        return 1
    warn_if_unsafe(config)

    try:
        inputs = load_inputs(args.input)
        streams = StreamSet(inputs["mu"], solid_angle=inputs["solid_angle"])
    except (KeyError, TransportError) as e:
        logger.error(f"Invalid input {args.input}: {e}")
        return 1
    energy = None if inputs["energy"] is None else float(inputs["energy"])

    logger.info(f"Solving {args.input} ({streams.n_mu} streams, {inputs['altitude'].size} altitudes)")
    try:
        result = solve(
            inputs["altitude"],
            streams,
            float(inputs["velocity"]),
            inputs["loss"],
            inputs["scatter"],
            inputs["diffusion"],
            inputs["initial"],
            inputs["boundary"],
            inputs["source"],
            inputs["times"],
            config=config,
        )
    except TransportError as e:
        logger.error(f"Solve failed: {e}")
        return 1

    save_result_hdf5(result, args.output, energy_eV=energy)
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    """Print the default configuration."""
    print("=" * 60)
    print("estream default configuration")
    print("=" * 60)
    print(yaml.safe_dump(get_defaults(), sort_keys=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Multi-stream time-dependent electron transport",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Solve with default settings
  python -m estream.cli run inputs.npz --output result.h5

  # Solve with a tighter Courant bound
  python -m estream.cli run inputs.npz --config solver.yaml --output result.h5

  # Show defaults
  python -m estream.cli info
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    run_parser = subparsers.add_parser("run", help="Solve one energy from an .npz archive")
    run_parser.add_argument("input", type=Path, help="Input .npz archive")
    run_parser.add_argument("--config", type=Path, default=None, help="Solver YAML config")
    run_parser.add_argument(
        "--output",
        type=Path,
        default=Path("flux_history.h5"),
        help="Output HDF5 file (default: flux_history.h5)",
    )

    subparsers.add_parser("info", help="Display the default configuration")
    return parser


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "run":
        return cmd_run(args)
    if args.command == "info":
        return cmd_info(args)
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
