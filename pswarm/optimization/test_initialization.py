# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import pytest
import numpy as np
import pswarm.common.typing as tp
from pswarm.common import testing
from pswarm.common import errors
from . import initialization as init
from .constraints import ConstraintSet


CONSTRAINTS = ConstraintSet([-100, 0, 5], [100, 1, 5])


class Generator:
    """Returns successive vectors [k, k]"""

    def __init__(self, dimension: int = 2) -> None:
        self.count = 0
        self.dimension = dimension

    def __call__(self) -> tp.List[float]:
        self.count += 1
        return [float(self.count)] * self.dimension


def test_positions_priority() -> None:
    rng = np.random.RandomState(12)
    start = [[1, 2, 5], [3, 4, 5]]
    func = Generator(3)
    out = init.resolve_positions(2, rng, start_positions=start, random_position_func=func, constraints=CONSTRAINTS)
    np.testing.assert_array_equal(out, start)
    assert not func.count
    out = init.resolve_positions(2, rng, random_position_func=func, constraints=CONSTRAINTS)
    np.testing.assert_array_equal(out, [[1, 1, 1], [2, 2, 2]])
    np.testing.assert_equal(func.count, 2)


def test_positions_in_box() -> None:
    out = init.resolve_positions(500, np.random.RandomState(12), constraints=CONSTRAINTS)
    np.testing.assert_equal(out.shape, (500, 3))
    testing.assert_within_bounds(out, CONSTRAINTS.min, CONSTRAINTS.max)
    np.testing.assert_array_equal(out[:, 2], 5)  # degenerated dimension
    assert out[:, 0].min() < -50 and out[:, 0].max() > 50  # spread over the box


def test_velocities_priority() -> None:
    rng = np.random.RandomState(12)
    positions = np.array([[0.0, 0.5, 5.0], [1.0, 0.0, 5.0]])
    start = [[1, 1, 1], [2, 2, 2]]
    out = init.resolve_velocities(positions, rng, start_velocities=start, random_velocity_func=Generator(3))
    np.testing.assert_array_equal(out, start)
    out = init.resolve_velocities(positions, rng, random_velocity_func=Generator(3), constraints=CONSTRAINTS)
    np.testing.assert_array_equal(out, [[1, 1, 1], [2, 2, 2]])


def test_velocities_keep_one_step_in_box() -> None:
    rng = np.random.RandomState(12)
    positions = init.resolve_positions(100, rng, constraints=CONSTRAINTS)
    velocities = init.resolve_velocities(positions, rng, constraints=CONSTRAINTS)
    np.testing.assert_equal(velocities.shape, positions.shape)
    testing.assert_within_bounds(positions + velocities, CONSTRAINTS.min - 1e-9, CONSTRAINTS.max + 1e-9)


def test_initialization_is_reproducible() -> None:
    outputs = []
    for _ in range(2):
        rng = np.random.RandomState(42)
        positions = init.resolve_positions(10, rng, constraints=CONSTRAINTS)
        outputs.append((positions, init.resolve_velocities(positions, rng, constraints=CONSTRAINTS)))
    for first, second in zip(*outputs):
        np.testing.assert_array_equal(first, second)


def test_not_enough_information() -> None:
    rng = np.random.RandomState(12)
    with pytest.raises(errors.ConfigurationError, match="initialize particle positions"):
        init.resolve_positions(4, rng)
    with pytest.raises(errors.ConfigurationError, match="initialize particle velocities"):
        init.resolve_velocities(np.zeros((4, 2)), rng, random_velocity_func=None)


@testing.parametrized(
    wrong_count=(dict(start_positions=[[0, 0, 5]] * 3), "provided 3 particle positions for a swarm of size 4"),
    ragged=(dict(start_positions=[[0, 0, 5]] * 3 + [[0, 0]]), "same dimension"),
    wrong_dimension=(dict(start_positions=[[0, 0]] * 4), "constraints have dimension 3"),
    wrong_func=(dict(random_position_func=Generator(2)), "constraints have dimension 3"),
    scalars=(dict(start_positions=[0, 1, 2, 3]), "must be vectors"),
)
def test_positions_dimension_errors(kwargs: tp.Dict[str, tp.Any], message: str) -> None:
    with pytest.raises(errors.DimensionMismatchError, match=message):
        init.resolve_positions(4, np.random.RandomState(12), constraints=CONSTRAINTS, **kwargs)


def test_velocities_dimension_errors() -> None:
    rng = np.random.RandomState(12)
    with pytest.raises(errors.DimensionMismatchError, match="positions have dimension 2"):
        init.resolve_velocities(np.zeros((2, 2)), rng, start_velocities=[[0, 0, 0]] * 2)
    with pytest.raises(errors.ConfigurationError, match="must be finite"):
        init.resolve_velocities(np.zeros((2, 2)), rng, start_velocities=[[0, np.nan]] * 2)
