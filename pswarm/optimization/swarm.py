# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import math
from numbers import Real
import logging
import numpy as np
import pswarm.common.typing as tp
from pswarm.common import errors
from . import confinement as conf
from .constraints import ConstraintSet
from .particle import Best
from .particle import Particle


logger = logging.getLogger(__name__)


class Coefficients(tp.NamedTuple):
    """Coefficients of the velocity update rule.
    Defaults follow SPSO 2011.

    Parameters
    ----------
    omega: float
        inertia weight (defaults to 1 / (2 ln 2) ~ 0.721)
    phip: float
        cognitive coefficient, attraction toward the particle personal best (defaults to 0.5 + ln 2 ~ 1.193)
    phig: float
        social coefficient, attraction toward the swarm attractor (defaults to 0.5 + ln 2 ~ 1.193)

    Note
    ----
    Reference:
    M. Zambrano-Bigiarini, M. Clerc and R. Rojas,
    Standard Particle Swarm Optimisation 2011 at CEC-2013: A baseline for future PSO improvements,
    2013 IEEE Congress on Evolutionary Computation, Cancun, 2013, pp. 2337-2344.
    """

    omega: float = 0.5 / math.log(2.0)
    phip: float = 0.5 + math.log(2.0)
    phig: float = 0.5 + math.log(2.0)

    def check(self) -> "Coefficients":
        """Returns the coefficients if they are valid, raises a ConfigurationError otherwise"""
        for name, value in self._asdict().items():
            if not isinstance(value, Real) or not math.isfinite(value):
                raise errors.ConfigurationError(f"Coefficient {name} must be a finite number (got {value!r})")
        if self.phip < 0 or self.phig < 0:
            raise errors.ConfigurationError(f"Coefficients phip and phig must be non-negative (got {self})")
        return self


class Swarm:
    """Ordered population of particles, evaluated and mutated together.

    Parameters
    ----------
    positions: array-like
        initial positions, of shape (swarm size, dimension)
    velocities: array-like
        initial velocities, of same shape as the positions
    constraints: ConstraintSet or None
        box in which the particles are confined after each move
    coefficients: Coefficients or None
        coefficients of the update rule (defaults to SPSO 2011 values)
    confinement: str or callable
        name of the registered confinement policy ("clamp", "bounce" or "none")
        or a custom policy. It is only applied when constraints are provided.
    random_state: np.random.RandomState or None
        random state for the uniform draws of the update rule
    """

    def __init__(
        self,
        positions: tp.ArrayLike,
        velocities: tp.ArrayLike,
        constraints: tp.Optional[ConstraintSet] = None,
        coefficients: tp.Optional[Coefficients] = None,
        confinement: tp.Union[str, conf.Confinement] = conf.DEFAULT,
        random_state: tp.Optional[np.random.RandomState] = None,
    ) -> None:
        positions = np.asarray(positions, dtype=float)
        velocities = np.asarray(velocities, dtype=float)
        if positions.ndim != 2 or not positions.shape[0]:
            raise errors.DimensionMismatchError(
                f"Positions must be of shape (swarm size, dimension) (got {positions.shape})"
            )
        if velocities.shape != positions.shape:
            raise errors.DimensionMismatchError(
                f"Velocities shape {velocities.shape} does not match positions shape {positions.shape}"
            )
        if constraints is not None:
            constraints.check_dimension(positions, name="positions")
        self.constraints = constraints
        self.coefficients = (Coefficients() if coefficients is None else coefficients).check()
        self._confine = conf.get_confinement(confinement)
        self._rng = np.random.RandomState() if random_state is None else random_state
        self.particles = [Particle(x, v) for x, v in zip(positions, velocities)]
        self.attractor: tp.Optional[Best] = None

    @property
    def dimension(self) -> int:
        return self.particles[0].dimension

    @property
    def positions(self) -> np.ndarray:
        return np.array([particle.position for particle in self.particles])

    @property
    def velocities(self) -> np.ndarray:
        return np.array([particle.velocity for particle in self.particles])

    def __len__(self) -> int:
        return len(self.particles)

    def __iter__(self) -> tp.Iterator[Particle]:
        return iter(self.particles)

    def __getitem__(self, index: int) -> Particle:
        return self.particles[index]

    def update_attractor(self) -> Best:
        """Scans the particles in order and returns the highest personal best
        (first encountered on ties). The swarm attractor is updated if it is improved.
        """
        best: tp.Optional[Best] = None
        for k, particle in enumerate(self.particles):
            if particle.best is None:
                raise errors.PSwarmRuntimeError(f"Particle #{k} was not evaluated")
            best = Best.max(best, particle.best)
        assert best is not None
        self.attractor = Best.max(self.attractor, best)
        return best

    def mutate(self) -> None:
        """Moves all particles according to the update rule, and confines them
        within the constraints if any
        """
        if self.attractor is None:
            raise errors.PSwarmRuntimeError("update_attractor must be called before mutating the swarm")
        omega, phip, phig = self.coefficients
        num_confined = 0
        for particle in self.particles:
            particle.move(self.attractor, omega, phip, phig, rng=self._rng)
            if self.constraints is not None:
                position, velocity = self._confine(particle.position, particle.velocity, self.constraints)
                num_confined += position is not particle.position
                particle.position, particle.velocity = position, velocity
        if num_confined:
            logger.debug("Confined %s particle(s) within constraints", num_confined)

    def __repr__(self) -> str:
        return f"Swarm(size={len(self)}, dimension={self.dimension}, attractor={self.attractor})"
