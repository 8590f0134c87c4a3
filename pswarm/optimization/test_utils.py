# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import time
import threading
from concurrent import futures
import pytest
import numpy as np
import pswarm.common.typing as tp
from pswarm.common import testing
from pswarm.common import errors
from . import utils
from .particle import Particle


def _particles(num: int = 6) -> tp.List[Particle]:
    return [Particle([float(k), -float(k)], [0.0, 0.0]) for k in range(num)]


class FailingFunction:
    """Fails on positions whose first coordinate is in the failures"""

    def __init__(self, *failures: float) -> None:
        self.failures = failures
        self.counter = testing.CountingFunction()

    def __call__(self, x: np.ndarray) -> float:
        height = self.counter(x)
        if x[0] in self.failures:
            raise ValueError(f"Failure at {x[0]}")
        return height


def test_sequential_executor() -> None:
    func = testing.CountingFunction()
    executor = utils.SequentialExecutor()
    job1 = executor.submit(func, np.array([3.0]))
    np.testing.assert_equal(job1.done(), True)
    np.testing.assert_equal(job1.result(), -9)
    np.testing.assert_equal(func.count, 1)
    job2 = executor.submit(func, np.array([3.0]))
    np.testing.assert_equal(job2.done(), True)
    np.testing.assert_equal(func.count, 1)  # not computed just yet
    job2.result()
    np.testing.assert_equal(func.count, 2)


@testing.parametrized(
    sequential=(False, None),
    threads=(True, None),
    sequential_executor=(True, utils.SequentialExecutor()),
)
def test_evaluate(concurrent: bool, executor: tp.Optional[tp.ExecutorLike]) -> None:
    particles = _particles()
    func = testing.CountingFunction()
    heights = utils.evaluate(particles, func, concurrent=concurrent, executor=executor)
    np.testing.assert_array_equal(heights, [-2.0 * k ** 2 for k in range(6)])
    np.testing.assert_equal(func.count, 6)
    for particle, height in zip(particles, heights):
        np.testing.assert_equal(particle.height, height)
        np.testing.assert_equal(particle.best.height, height)  # type: ignore


def test_sequential_and_concurrent_are_equivalent() -> None:
    rng = np.random.RandomState(12)
    positions = rng.uniform(-5, 5, size=(20, 3))
    outputs = []
    for concurrent in (False, True):
        particles = [Particle(x, np.zeros(3)) for x in positions]
        outputs.append(utils.evaluate(particles, testing.CountingFunction(), concurrent=concurrent))
    np.testing.assert_array_equal(outputs[0], outputs[1])


def test_evaluate_runs_concurrently() -> None:
    num = 4
    barrier = threading.Barrier(num, timeout=10)

    def func(x: np.ndarray) -> float:
        barrier.wait()  # would time out if the jobs were not running at the same time
        return float(x[0])

    particles = _particles(num)
    heights = utils.evaluate(particles, func, concurrent=True)
    np.testing.assert_array_equal(heights, range(num))


def test_evaluate_works_on_copies() -> None:
    def func(x: np.ndarray) -> float:
        x[0] = 12
        return 0.0

    particles = _particles(2)
    utils.evaluate(particles, func)
    np.testing.assert_array_equal(particles[1].position, [1, -1])


def test_sequential_failure() -> None:
    particles = _particles()
    func = FailingFunction(2, 4)
    with pytest.raises(ValueError, match="Failure at 2"):
        utils.evaluate(particles, func)
    np.testing.assert_equal(func.counter.count, 3)  # fail fast
    assert all(p.height is None for p in particles)


def test_concurrent_failure() -> None:
    particles = _particles()

    class SlowFailingFunction(FailingFunction):
        def __call__(self, x: np.ndarray) -> float:
            if x[0] == 4:
                time.sleep(0.05)  # the first failing particle fails last
            return super().__call__(x)

    func = SlowFailingFunction(4, 5)
    with pytest.raises(ValueError, match="Failure at 4"):
        utils.evaluate(particles, func, concurrent=True)
    np.testing.assert_equal(func.counter.count, 6)  # all jobs were waited for
    assert all(p.height is None for p in particles)


def test_evaluate_with_custom_executor() -> None:
    particles = _particles(3)
    with futures.ThreadPoolExecutor(max_workers=2) as executor:
        heights = utils.evaluate(particles, testing.CountingFunction(), concurrent=True, executor=executor)
    np.testing.assert_array_equal(heights, [0, -2, -8])


@testing.parametrized(
    string=("blublu", True),
    array=(np.array([1.0, 2.0]), True),
    boolean=(True, True),
    none=(None, True),
    numpy_float=(np.float32(2.5), False),
    integer=(3, False),
    single_array=(np.array([1.5]), False),
)
def test_evaluate_height_types(value: tp.Any, error: bool) -> None:
    particles = _particles(1)
    if error:
        with pytest.raises(errors.PSwarmTypeError):
            utils.evaluate(particles, lambda x: value)
    else:
        utils.evaluate(particles, lambda x: value)
        assert isinstance(particles[0].height, float)
