# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""Resolution of the initial positions and velocities of the swarm.

Strategies are tried in order of priority, the first one which applies provides
the values:

1. explicit start values,
2. a random generator function, called once per particle,
3. uniform sampling derived from the constraints (SPSO 2006-2011).
"""

import numpy as np
import pswarm.common.typing as tp
from pswarm.common import errors
from .constraints import ConstraintSet


class Strategy:
    """Base class for initialization strategies.
    :code:`__call__` returns a (swarm size, dimension) array, or :code:`None` if
    the strategy does not have the information it needs.
    """

    def __call__(
        self, swarm_size: int, rng: np.random.RandomState, positions: tp.Optional[np.ndarray] = None
    ) -> tp.Optional[np.ndarray]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return self.__class__.__name__


class StartValues(Strategy):
    """Uses values provided by the user"""

    def __init__(self, values: tp.Optional[tp.Sequence[tp.ArrayLike]]) -> None:
        self.values = values

    def __call__(
        self, swarm_size: int, rng: np.random.RandomState, positions: tp.Optional[np.ndarray] = None
    ) -> tp.Optional[np.ndarray]:
        if self.values is None:
            return None
        return _stack(self.values, name="start values")


class RandomFunction(Strategy):
    """Calls a user-provided generator once for each particle"""

    def __init__(self, func: tp.Optional[tp.VectorFunc]) -> None:
        self.func = func

    def __call__(
        self, swarm_size: int, rng: np.random.RandomState, positions: tp.Optional[np.ndarray] = None
    ) -> tp.Optional[np.ndarray]:
        if self.func is None:
            return None
        return _stack([self.func() for _ in range(swarm_size)], name="random function outputs")


class UniformInBox(Strategy):
    """Samples positions uniformly in the constraint box,
    independently along each dimension
    """

    def __init__(self, constraints: tp.Optional[ConstraintSet]) -> None:
        self.constraints = constraints

    def __call__(
        self, swarm_size: int, rng: np.random.RandomState, positions: tp.Optional[np.ndarray] = None
    ) -> tp.Optional[np.ndarray]:
        if self.constraints is None:
            return None
        cst = self.constraints
        return cst.min + rng.uniform(0.0, 1.0, size=(swarm_size, cst.dimension)) * cst.span  # type: ignore


class UniformReachable(Strategy):
    """Samples velocities so that the position reached after one step with this velocity
    lies in the constraint box: for each particle and dimension, uniformly between
    min - x and max - x (SPSO 2011)
    """

    def __init__(self, constraints: tp.Optional[ConstraintSet]) -> None:
        self.constraints = constraints

    def __call__(
        self, swarm_size: int, rng: np.random.RandomState, positions: tp.Optional[np.ndarray] = None
    ) -> tp.Optional[np.ndarray]:
        if self.constraints is None:
            return None
        assert positions is not None, "Positions are required to initialize velocities"
        min_vel = self.constraints.min - positions
        max_vel = self.constraints.max - positions
        return min_vel + rng.uniform(0.0, 1.0, size=positions.shape) * (max_vel - min_vel)  # type: ignore


def _stack(values: tp.Sequence[tp.ArrayLike], name: str) -> np.ndarray:
    rows = [np.asarray(v, dtype=float) for v in values]
    if any(row.ndim != 1 for row in rows):
        raise errors.DimensionMismatchError(f"All {name} must be vectors")
    sizes = sorted({row.size for row in rows})
    if len(sizes) > 1:
        raise errors.DimensionMismatchError(f"All {name} must share the same dimension (got dimensions {sizes})")
    return np.array(rows, dtype=float)


def resolve(
    strategies: tp.Sequence[Strategy],
    swarm_size: int,
    rng: np.random.RandomState,
    name: str,
    constraints: tp.Optional[ConstraintSet] = None,
    positions: tp.Optional[np.ndarray] = None,
) -> np.ndarray:
    """Returns the values of the first strategy which applies, after checking that
    they fit the swarm size and the constraints dimension

    Raises
    ------
    ConfigurationError
        if no strategy applies
    DimensionMismatchError
        if the values do not have the expected shape
    """
    for strategy in strategies:
        values = strategy(swarm_size, rng, positions=positions)
        if values is None:
            continue
        if values.ndim != 2 or values.shape[0] != swarm_size:
            raise errors.DimensionMismatchError(
                f"{strategy} provided {values.shape[0] if values.ndim else 0} particle {name} "
                f"for a swarm of size {swarm_size}"
            )
        if not values.shape[1]:
            raise errors.DimensionMismatchError(f"{strategy} provided empty particle {name}")
        if constraints is not None:
            constraints.check_dimension(values, name=f"particle {name}")
        if positions is not None and values.shape != positions.shape:
            raise errors.DimensionMismatchError(
                f"Particle {name} have dimension {values.shape[1]} but positions have dimension {positions.shape[1]}"
            )
        if not np.all(np.isfinite(values)):
            raise errors.ConfigurationError(f"Particle {name} provided by {strategy} must be finite")
        return values
    raise errors.ConfigurationError(f"Not enough information to initialize particle {name}!")


def resolve_positions(
    swarm_size: int,
    rng: np.random.RandomState,
    start_positions: tp.Optional[tp.Sequence[tp.ArrayLike]] = None,
    random_position_func: tp.Optional[tp.VectorFunc] = None,
    constraints: tp.Optional[ConstraintSet] = None,
) -> np.ndarray:
    strategies = [StartValues(start_positions), RandomFunction(random_position_func), UniformInBox(constraints)]
    return resolve(strategies, swarm_size, rng, name="positions", constraints=constraints)


def resolve_velocities(
    positions: np.ndarray,
    rng: np.random.RandomState,
    start_velocities: tp.Optional[tp.Sequence[tp.ArrayLike]] = None,
    random_velocity_func: tp.Optional[tp.VectorFunc] = None,
    constraints: tp.Optional[ConstraintSet] = None,
) -> np.ndarray:
    strategies = [
        StartValues(start_velocities),
        RandomFunction(random_velocity_func),
        UniformReachable(constraints),
    ]
    return resolve(
        strategies, positions.shape[0], rng, name="velocities", constraints=constraints, positions=positions
    )
