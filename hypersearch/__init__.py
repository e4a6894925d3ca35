"""
Single-parameter hyperparameter search over an external command.

The command is run once per candidate value with every ``%`` replaced by that
value; the last ``average loss = <x>`` it prints is the loss to minimize.
"""

from .errors import HypersearchError, LossParseError, SpawnError, SubprocessFailedError, UsageError
from .evaluator import LossEvaluator, SearchSession, parse_loss
from .runner import ProcessResult, run
from .search import PHI, RESPHI, argmin3, best_hyperparam, golden_section
from .template import PLACEHOLDER, instantiate, render_rate

__all__ = [
    "HypersearchError",
    "LossEvaluator",
    "LossParseError",
    "PHI",
    "PLACEHOLDER",
    "ProcessResult",
    "RESPHI",
    "SearchSession",
    "SpawnError",
    "SubprocessFailedError",
    "UsageError",
    "argmin3",
    "best_hyperparam",
    "golden_section",
    "instantiate",
    "parse_loss",
    "render_rate",
    "run",
]
