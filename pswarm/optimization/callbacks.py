# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import time
import logging
import pswarm.common.typing as tp
from .particle import Best

if tp.TYPE_CHECKING:
    from .solver import ParticleSwarmOptimizationSolver

global_logger = logging.getLogger(__name__)

# -------------------------------------------------------------------------------------


class IterationLogger:
    """Logger to register as "iteration" callback in a solver, for logging
    the best point regularly.

    Parameters
    ----------
    logger:
        given logger that callback will use to log
    log_level:
        log level that logger will write to
    log_interval_iterations: int
        max number of iterations before performing another log
    log_interval_seconds:
        max number of seconds before performing another log
    """

    def __init__(
        self,
        *,
        logger: logging.Logger = global_logger,
        log_level: int = logging.INFO,
        log_interval_iterations: int = 1,
        log_interval_seconds: float = 60.0,
    ) -> None:
        assert log_interval_iterations > 0
        assert log_interval_seconds > 0
        self._logger = logger
        self._log_level = log_level
        self._log_interval_iterations = int(log_interval_iterations)
        self._log_interval_seconds = log_interval_seconds
        self._next_iteration = self._log_interval_iterations
        self._next_time = time.time() + log_interval_seconds

    def __call__(
        self,
        solver: "ParticleSwarmOptimizationSolver",
        iteration: int,
        attractor: Best,
        overall_best: Best,
    ) -> None:
        if iteration == 1:  # new run
            self._next_iteration = self._log_interval_iterations
        if time.time() >= self._next_time or iteration >= self._next_iteration:
            self._next_time = time.time() + self._log_interval_seconds
            self._next_iteration = iteration + self._log_interval_iterations
            self._logger.log(
                self._log_level,
                "After iteration %s (%s evaluations), best height is %s at %s",
                iteration,
                solver.num_evaluations,
                overall_best.height,
                overall_best.position.tolist(),
            )

# -------------------------------------------------------------------------------------


class HistoryRecorder:
    """Records the heights of each iteration, to register as "iteration" callback.
    Rows are (iteration, attractor height, overall best height); they are reset
    when a new run starts.
    """

    def __init__(self) -> None:
        self.rows: tp.List[tp.Tuple[int, float, float]] = []

    def __call__(
        self,
        solver: "ParticleSwarmOptimizationSolver",  # pylint: disable=unused-argument
        iteration: int,
        attractor: Best,
        overall_best: Best,
    ) -> None:
        if iteration == 1:
            self.rows = []
        self.rows.append((iteration, attractor.height, overall_best.height))

    @property
    def best_heights(self) -> tp.List[float]:
        return [row[2] for row in self.rows]

# -------------------------------------------------------------------------------------
# exit conditions, called with (iteration, overall best) at the end of each iteration


def max_iterations(num: int) -> tp.ExitCondition:
    """Stops after the given number of iterations"""
    assert num > 0, "The number of iterations must be strictly positive"

    def condition(iteration: int, best: Best) -> bool:  # pylint: disable=unused-argument
        return iteration >= num

    return condition


def target_height(threshold: float, tolerance: tp.Optional[float] = None) -> tp.ExitCondition:
    """Stops when the best height reaches the threshold, or when it is within
    the tolerance of the threshold if a tolerance is provided
    """

    def condition(iteration: int, best: Best) -> bool:  # pylint: disable=unused-argument
        if tolerance is None:
            return best.height >= threshold
        return abs(best.height - threshold) < tolerance

    return condition


class Stagnation:
    """Exit condition stopping when the best height did not improve by more than
    min_improvement for patience iterations in a row
    """

    def __init__(self, patience: int, min_improvement: float = 0.0) -> None:
        assert patience > 0
        self.patience = patience
        self.min_improvement = min_improvement
        self._reference = -float("inf")
        self._last_improvement = 0

    def __call__(self, iteration: int, best: Best) -> bool:
        if iteration == 1:  # new run
            self._reference, self._last_improvement = -float("inf"), 1
        if best.height > self._reference + self.min_improvement:
            self._reference = best.height
            self._last_improvement = iteration
        return iteration - self._last_improvement >= self.patience


def any_of(*conditions: tp.ExitCondition) -> tp.ExitCondition:
    """Stops as soon as one of the conditions is met (all are evaluated, in order)"""
    assert conditions, "At least one condition is required"

    def condition(iteration: int, best: Best) -> bool:
        return any([cond(iteration, best) for cond in conditions])

    return condition
