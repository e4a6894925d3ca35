"""
Memoized loss evaluation: rate -> command -> child process -> parsed loss.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Callable, Optional, Sequence

import optuna
from optuna.distributions import FloatDistribution

from .errors import LossParseError, SubprocessFailedError
from .runner import ProcessResult, run
from .template import instantiate, render_rate

logger = logging.getLogger(__name__)

LOSS_RE = re.compile(r"average loss = (\d+\.?\d*|\.\d+)")

Runner = Callable[[Sequence[str], Optional[float]], ProcessResult]


def parse_loss(lines: Sequence[str]) -> Optional[float]:
    """Return the value of the last ``average loss = <number>`` line, or None."""
    loss = None
    for line in lines:
        m = LOSS_RE.search(line)
        if m:
            loss = float(m.group(1))
    return loss


class SearchSession:
    """
    State of one search run: the loss cache, the best loss seen so far and an
    in-memory optuna study that keeps every computed evaluation as a trial.
    """

    def __init__(self, lower: float, upper: float):
        self.cache: dict[float, float] = {}
        self.best_loss = math.inf
        self.distribution = FloatDistribution(min(lower, upper), max(lower, upper))
        self.study = optuna.create_study(direction="minimize")

    def record(self, rate: float, loss: float, command: Sequence[str], timed_out: bool = False) -> bool:
        is_best = loss < self.best_loss
        if is_best:
            self.best_loss = loss
        self.cache[rate] = loss
        trial = optuna.trial.create_trial(
            params={"rate": rate},
            distributions={"rate": self.distribution},
            value=loss,
            user_attrs={"command": " ".join(command), "timed_out": timed_out},
        )
        self.study.add_trial(trial)
        return is_best


class LossEvaluator:
    def __init__(
        self,
        template: Sequence[str],
        session: SearchSession,
        timeout: Optional[float] = None,
        timeout_loss: Optional[float] = None,
        runner: Runner = run,
    ):
        self.template = tuple(template)
        self.session = session
        self.timeout = timeout
        self.timeout_loss = timeout_loss
        self.runner = runner
        self.calls = 0

    def __call__(self, rate: float) -> float:
        cache = self.session.cache
        if rate in cache:
            return cache[rate]

        command = instantiate(self.template, rate)
        result = self.runner(command, self.timeout)
        self.calls += 1

        timed_out = False
        if result.status != 0:
            if not (result.timed_out and self.timeout_loss is not None):
                raise SubprocessFailedError(command, result.status, result.lines)
            timed_out = True
            loss = self.timeout_loss
        else:
            loss = parse_loss(result.lines)
            if loss is None:
                raise LossParseError(command, result.lines)

        is_best = self.session.record(rate, loss, command, timed_out=timed_out)
        logger.info(
            "trying %s ... loss %g%s%s",
            render_rate(rate),
            loss,
            " (timeout)" if timed_out else "",
            " (best)" if is_best else "",
        )
        return loss
