"""Run a simulation from a config file: python -m ljmd CONFIG"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from . import __version__
from .config import load_config
from .errors import SimulationError
from .logging_config import setup_logging
from .simulate import run

logger = logging.getLogger("ljmd")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m ljmd",
        description="Lennard-Jones FCC crystal molecular dynamics (NVE).",
    )
    parser.add_argument("config", help="JSON or YAML simulation config")
    parser.add_argument("--steps", type=int, help="override n_steps from the config")
    parser.add_argument(
        "--log-level",
        default="INFO",
        type=str.upper,
        choices=LOG_LEVELS,
        help="logging level",
    )
    parser.add_argument("--log-file", help="also write logs to this file")
    parser.add_argument("--version", action="version", version=f"ljmd {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        setup_logging(args.log_level, args.log_file)
        config = load_config(args.config)
        if args.steps is not None:
            config.n_steps = args.steps
            config.validate()
        result = run(config)
    except (SimulationError, ValueError, OSError) as exc:
        logger.error("Simulation failed: %s", exc)
        return 1

    timings = result.timings
    logger.info(
        "N=%d  steps=%d  strategy=%s  relative drift=%.3e  mean T=%.4f",
        result.n_particles,
        result.n_steps,
        result.strategy,
        result.energy_drift,
        result.mean_temperature,
    )
    logger.info(
        "Timings: cell %.3fs  neighbor %.3fs (%d builds)  force %.3fs  %.1f steps/s",
        timings.cell_list_build,
        timings.neighbor_list_build,
        timings.neighbor_list_builds,
        timings.force_evaluation,
        result.steps_per_second,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
