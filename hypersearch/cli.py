from __future__ import annotations

import argparse
import logging
import math
import os
import shutil
import sys
from dataclasses import dataclass
from typing import Optional

import optuna

from .errors import HypersearchError, SpawnError, UsageError
from .evaluator import LossEvaluator, SearchSession
from .search import best_hyperparam
from .template import PLACEHOLDER, has_placeholder

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 0.01
KNOWN_TOOLS = ("vw",)


@dataclass(frozen=True)
class SearchConfig:
    lower: float
    upper: float
    tolerance: float
    command: tuple[str, ...]
    timeout: float = 0.0
    timeout_loss: Optional[float] = None
    verbose: bool = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hypersearch",
        usage="%(prog)s [options, before the bounds] lower_bound upper_bound [tolerance] command [args...]",
        description=(
            "Golden-section search for the value of one hyperparameter that minimizes "
            "the last 'average loss = <x>' reported by a command. Every '%' in the "
            "command is replaced by the candidate value."
        ),
        epilog="Use '--' before negative bounds in exponent notation, e.g. -- -1e-3 1 ...",
    )
    parser.add_argument("-t", "--timeout", default="0", help="Seconds allowed per evaluation (0 = no limit)")
    parser.add_argument(
        "--timeout-loss",
        default=None,
        help="Loss assigned to a timed-out evaluation instead of aborting (requires --timeout)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("lower_bound")
    parser.add_argument("upper_bound")
    parser.add_argument("rest", nargs=argparse.REMAINDER, metavar="[tolerance] command [args...]")
    return parser


def _number(raw: str, what: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise UsageError(f"{what} must be a number, got {raw!r}") from None
    if not math.isfinite(value):
        raise UsageError(f"{what} must be finite, got {raw!r}")
    return value


def parse_args(argv: Optional[list[str]] = None, parser: Optional[argparse.ArgumentParser] = None) -> SearchConfig:
    parser = parser or build_parser()
    ns = parser.parse_args(argv)

    lower = _number(ns.lower_bound, "lower_bound")
    upper = _number(ns.upper_bound, "upper_bound")

    rest = list(ns.rest)
    tolerance = DEFAULT_TOLERANCE
    if rest:
        try:
            tolerance = float(rest[0])
        except ValueError:
            pass
        else:
            rest = rest[1:]
            if not 0 < tolerance < 1:
                raise UsageError(f"tolerance must be in (0, 1), got {tolerance:g}")

    if not rest:
        raise UsageError("missing command to evaluate")
    if not has_placeholder(rest):
        raise UsageError(f"command must contain the placeholder {PLACEHOLDER!r} somewhere")

    if rest[0].startswith("-"):
        raise UsageError(f"options must come before the bounds, got {rest[0]!r} where the command should start")

    timeout = _number(ns.timeout, "--timeout")
    timeout_loss = None if ns.timeout_loss is None else _number(ns.timeout_loss, "--timeout-loss")
    if timeout < 0:
        raise UsageError("--timeout must be >= 0")
    if timeout_loss is not None and timeout <= 0:
        raise UsageError("--timeout-loss requires a positive --timeout")

    return SearchConfig(
        lower=lower,
        upper=upper,
        tolerance=tolerance,
        command=tuple(rest),
        timeout=timeout,
        timeout_loss=timeout_loss,
        verbose=bool(ns.verbose),
    )


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    optuna.logging.set_verbosity(optuna.logging.WARNING)


def check_command(command: tuple[str, ...]) -> None:
    """
    Sanity check on the program to run. An explicit path that cannot be
    executed is fatal; anything else that does not look runnable only warns.
    """
    program = command[0]
    if PLACEHOLDER in program:
        return
    if os.sep in program or (os.altsep and os.altsep in program):
        if not os.path.isfile(program):
            raise SpawnError(f"no such file: {program}")
        if not os.access(program, os.X_OK):
            raise SpawnError(f"not executable: {program}")
        return
    if shutil.which(program) is None and not any(tool in program for tool in KNOWN_TOOLS):
        logger.warning("%s is not on PATH and does not look like a known tool, trying anyway", program)


def run_search(config: SearchConfig) -> tuple[float, float]:
    check_command(config.command)

    session = SearchSession(config.lower, config.upper)
    evaluator = LossEvaluator(
        config.command,
        session,
        timeout=config.timeout or None,
        timeout_loss=config.timeout_loss,
    )
    logger.info(
        "searching [%g, %g] tolerance=%g: %s",
        config.lower, config.upper, config.tolerance, " ".join(config.command),
    )
    best, loss = best_hyperparam(evaluator, config.lower, config.upper, config.tolerance)

    study = session.study
    logger.info("%d evaluations, best trial #%d: %s", len(study.trials), study.best_trial.number, study.best_trial.params)
    return best, loss


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    try:
        config = parse_args(argv, parser)
    except UsageError as e:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {e}", file=sys.stderr)
        return 2

    configure_logging(config.verbose)
    try:
        best, loss = run_search(config)
    except HypersearchError as e:
        logger.error("%s", e)
        return 1

    print(f"{best:g}\t{loss:g}")
    return 0
