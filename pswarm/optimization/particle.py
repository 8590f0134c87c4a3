# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import math
import warnings
import numpy as np
import pswarm.common.typing as tp
from pswarm.common import errors


class Best(tp.NamedTuple):
    """Snapshot of a (position, height) pair, for the best point observed
    within a scope (a particle, an iteration or a whole run)
    """

    position: np.ndarray
    height: float

    @classmethod
    def snapshot(cls, position: tp.ArrayLike, height: float) -> "Best":
        position = np.array(position, dtype=float, copy=True)
        position.flags.writeable = False
        return cls(position, float(height))

    @staticmethod
    def max(first: tp.Optional["Best"], second: tp.Optional["Best"]) -> tp.Optional["Best"]:
        """Returns the highest of both, the first one on ties"""
        if first is None:
            return second
        if second is None:
            return first
        return second if second.height > first.height else first

    def __eq__(self, other: tp.Any) -> bool:  # arrays do not compare as tuple items
        if not isinstance(other, Best):
            return False
        return self.height == other.height and bool(np.array_equal(self.position, other.position))

    def __ne__(self, other: tp.Any) -> bool:
        return not self == other

    def __hash__(self) -> int:
        return hash((tuple(self.position.tolist()), self.height))  # consistent with __eq__ for -0.0

    def __repr__(self) -> str:
        return f"Best(position={self.position.tolist()}, height={self.height})"


class Particle:
    """Candidate solution of the swarm, with its own position, velocity
    and personal best.

    Parameters
    ----------
    position: array-like
        initial position, its size sets the dimension of the particle
    velocity: array-like
        initial velocity, must have the same dimension as the position
    """

    def __init__(self, position: tp.ArrayLike, velocity: tp.ArrayLike) -> None:
        self.position = np.array(position, dtype=float, copy=True)
        self.velocity = np.array(velocity, dtype=float, copy=True)
        if self.position.ndim != 1 or not self.position.size:
            raise errors.DimensionMismatchError(f"Position must be a non-empty vector (got shape {self.position.shape})")
        if self.velocity.shape != self.position.shape:
            raise errors.DimensionMismatchError(
                f"Velocity shape {self.velocity.shape} does not match position shape {self.position.shape}"
            )
        self.height: tp.Optional[float] = None
        self.best: tp.Optional[Best] = None

    @property
    def dimension(self) -> int:
        return self.position.size

    def tell(self, height: float) -> None:
        """Records the height of the objective at the current position, and updates
        the personal best if it is at least as high
        """
        height = float(height)
        if math.isnan(height):
            warnings.warn(
                f"Objective returned NaN at {self.position.tolist()}, using -inf instead", errors.BadHeightWarning
            )
            height = -float("inf")
        self.height = height
        if self.best is None or height >= self.best.height:
            self.best = Best.snapshot(self.position, height)

    def move(
        self,
        attractor: Best,
        omega: float,
        phip: float,
        phig: float,
        rng: np.random.RandomState,
    ) -> None:
        """Updates velocity and position with the canonical PSO rule:
        v <- omega * v + phip * rp * (personal_best - x) + phig * rg * (attractor - x)
        x <- x + v
        with rp and rg drawn uniformly in [0, 1) independently for each dimension.
        """
        if self.best is None:
            raise errors.PSwarmRuntimeError("Particle cannot move before being evaluated at least once")
        if attractor.position.shape != self.position.shape:
            raise errors.DimensionMismatchError(
                f"Attractor has dimension {attractor.position.size} but particle has {self.dimension}"
            )
        rp = rng.uniform(0.0, 1.0, size=self.dimension)
        rg = rng.uniform(0.0, 1.0, size=self.dimension)
        self.velocity = (
            omega * self.velocity
            + phip * rp * (self.best.position - self.position)
            + phig * rg * (attractor.position - self.position)
        )
        self.position = self.position + self.velocity

    def __repr__(self) -> str:
        return (
            f"Particle(position={self.position.tolist()}, velocity={self.velocity.tolist()}, "
            f"height={self.height}, best={self.best})"
        )
