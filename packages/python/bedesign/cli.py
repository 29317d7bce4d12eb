"""
Command line entry point: ``python -m bedesign`` or ``bedesign``.

Runs the parallel vs crossover comparison and prints the written files.

Examples:
    python -m bedesign --root .
    python -m bedesign --root out --nsim 20000 --seed 7 --backend plotly
    python -m bedesign --config project.json --log-level DEBUG
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .config import ProjectConfig
from .data import load_csv
from .errors import BEDesignError
from .logging_config import setup_logging
from .pipeline import run_project
from .viz.backends import available_backends

logger = logging.getLogger(__name__)


def _seed(value: str) -> Optional[int]:
    if value.strip().lower() == "none":
        return None
    try:
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"seed must be an integer or 'none', got {value!r}") from None


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="bedesign",
        description="Parallel vs crossover bioequivalence design comparison",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    p.add_argument("--root", type=Path, default=None,
                   help="Directory receiving outputs/, docs/ and the figures (default: .)")
    p.add_argument("--config", type=Path, default=None,
                   help="JSON file with ProjectConfig fields")
    p.add_argument("--nsim", type=int, default=None,
                   help="Monte-Carlo draws for planning power and the sample size search")
    p.add_argument("--seed", type=_seed, default=argparse.SUPPRESS,
                   help="Random seed, or 'none' for fresh entropy")
    p.add_argument("--backend", choices=available_backends(), default=None,
                   help="Plotting backend")
    p.add_argument("--parallel-csv", type=Path, default=None,
                   help="CSV replacing the packaged parallel study")
    p.add_argument("--crossover-csv", type=Path, default=None,
                   help="CSV replacing the packaged crossover study")
    p.add_argument("--log-level", default="INFO",
                   help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    p.add_argument("--log-file", type=Path, default=None,
                   help="Also write the log to this file")
    return p


def build_config(args: argparse.Namespace) -> ProjectConfig:
    """
    Configuration from defaults, the optional JSON file, ``BEDESIGN_*``
    environment variables and finally the command line options.
    """
    config = ProjectConfig.from_json(args.config) if args.config else ProjectConfig()
    config = config.with_env()

    if args.root is not None:
        config = dataclasses.replace(config, root=args.root)
    if args.backend is not None:
        config = dataclasses.replace(config, backend=args.backend)

    power = config.power
    if args.nsim is not None:
        power = dataclasses.replace(power, nsim=args.nsim, search_nsim=args.nsim)
    if hasattr(args, "seed"):
        power = dataclasses.replace(power, seed=args.seed)
    if power is not config.power:
        config = dataclasses.replace(config, power=power)
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        setup_logging(args.log_level, log_file=args.log_file)
    except ValueError as err:
        print(f"error: {err}", file=sys.stderr)
        return 2

    try:
        config = build_config(args)
        datasets = {}
        if args.parallel_csv is not None:
            datasets["parallel"] = load_csv(args.parallel_csv)
        if args.crossover_csv is not None:
            datasets["crossover"] = load_csv(args.crossover_csv)
        result = run_project(config, datasets=datasets)
    except (BEDesignError, ValueError, OSError) as err:
        logger.error("%s", err)
        return 1

    written: List[Path] = result.written
    print("Saved:")
    for path in written:
        print(f" - {path}")
    return 0
