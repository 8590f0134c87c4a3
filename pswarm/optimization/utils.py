# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import logging
from numbers import Real
from concurrent import futures
import numpy as np
import pswarm.common.typing as tp
from pswarm.common import errors
from .particle import Particle


logger = logging.getLogger(__name__)


class DelayedJob:
    """Future-like object which delays computation
    """

    def __init__(self, func: tp.Callable[..., tp.Any], *args: tp.Any, **kwargs: tp.Any) -> None:
        self.func = func
        self.args = args
        self.kwargs = kwargs
        self._result: tp.Optional[tp.Any] = None
        self._computed = False

    def done(self) -> bool:
        return True

    def result(self) -> tp.Any:
        if not self._computed:
            self._result = self.func(*self.args, **self.kwargs)
            self._computed = True
        return self._result


class SequentialExecutor:
    """Executor which run sequentially and locally
    (just calls the function and returns a DelayedJob)
    """

    def submit(self, fn: tp.Callable[..., tp.Any], *args: tp.Any, **kwargs: tp.Any) -> DelayedJob:
        return DelayedJob(fn, *args, **kwargs)


def _as_height(value: tp.Any) -> float:
    if isinstance(value, np.ndarray) and value.size == 1:
        value = value.item()
    if isinstance(value, bool) or not isinstance(value, Real):
        raise errors.PSwarmTypeError(
            f"Objective function must return a float height (got {value!r} of type {type(value)})"
        )
    return float(value)


def evaluate(
    particles: tp.Sequence[Particle],
    objective: tp.ObjectiveFunction,
    concurrent: bool = False,
    executor: tp.Optional[tp.ExecutorLike] = None,
) -> tp.List[float]:
    """Evaluates the objective function on the current position of each particle
    and tells them the heights.

    Parameters
    ----------
    particles: sequence of Particle
        the particles to evaluate, in swarm order
    objective: callable
        function taking a position and returning its height
    concurrent: bool
        whether to run one job per particle at once, and wait for all of them (the objective
        function must then be thread safe). Otherwise, particles are evaluated one at a time.
    executor: Executor
        executor used for the concurrent evaluation. It must provide a :code:`submit(callable, *args)`
        method returning a Future-like object with a :code:`result()` method.
        Defaults to a :code:`concurrent.futures.ThreadPoolExecutor` living for the duration of the call.

    Returns
    -------
    list of float
        the heights, in particle order

    Note
    ----
    - in sequential mode, an error from the objective function is raised straight away,
      and the following particles are not evaluated.
    - in concurrent mode, all jobs are waited for, then the error of the first failing
      particle (in swarm order) is raised.
    - in both cases, the particles are only told their heights if all evaluations succeeded,
      and they are told in swarm order.
    """
    # each job gets its own copy, so that the objective function cannot alter the particles
    positions = [np.array(particle.position, copy=True) for particle in particles]
    if not concurrent:
        heights = [_as_height(objective(x)) for x in positions]
    elif executor is not None:
        heights = _join([executor.submit(objective, x) for x in positions])
    else:
        with futures.ThreadPoolExecutor(max_workers=max(1, len(positions))) as pool:
            heights = _join([pool.submit(objective, x) for x in positions])
    for particle, height in zip(particles, heights):
        particle.tell(height)
    return heights


def _join(jobs: tp.List[tp.JobLike[tp.Any]]) -> tp.List[float]:
    """Waits for all jobs, then raises the first error if any"""
    heights: tp.List[float] = []
    failure: tp.Optional[BaseException] = None
    for k, job in enumerate(jobs):
        try:
            heights.append(_as_height(job.result()))
        except Exception as e:  # pylint: disable=broad-except
            if failure is None:
                failure = e
            else:
                logger.debug("Evaluation of particle #%s also failed: %r", k, e)
    if failure is not None:
        raise failure
    return heights
