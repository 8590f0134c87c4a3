# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""Confinement policies, applied to particles which left the constraint box
after a move. Each policy takes the new position and velocity of a particle
and returns the confined position and velocity (new arrays).
"""

import numpy as np
import pswarm.common.typing as tp
from pswarm.common.decorators import Registry
from .constraints import ConstraintSet


Confinement = tp.Callable[[np.ndarray, np.ndarray, ConstraintSet], tp.Tuple[np.ndarray, np.ndarray]]
registry: Registry[Confinement] = Registry("confinement policy")
DEFAULT = "clamp"


@registry.register_as("clamp")
def clamp(
    position: np.ndarray, velocity: np.ndarray, constraints: ConstraintSet
) -> tp.Tuple[np.ndarray, np.ndarray]:
    """Clamps the coordinates out of the box to the violated bound, and stops
    the particle along those dimensions (velocity set to 0)
    """
    outside = (position < constraints.min) | (position > constraints.max)
    if not outside.any():
        return position, velocity
    velocity = np.where(outside, 0.0, velocity)
    return np.clip(position, constraints.min, constraints.max), velocity


@registry.register_as("bounce")
def bounce(
    position: np.ndarray, velocity: np.ndarray, constraints: ConstraintSet
) -> tp.Tuple[np.ndarray, np.ndarray]:
    """Clamps the coordinates out of the box to the violated bound, and
    reverses and halves the velocity along those dimensions (SPSO 2011 rule)
    """
    outside = (position < constraints.min) | (position > constraints.max)
    if not outside.any():
        return position, velocity
    velocity = np.where(outside, -0.5 * velocity, velocity)
    return np.clip(position, constraints.min, constraints.max), velocity


@registry.register_as("none")
def unconfined(
    position: np.ndarray, velocity: np.ndarray, constraints: ConstraintSet  # pylint: disable=unused-argument
) -> tp.Tuple[np.ndarray, np.ndarray]:
    """Lets the particles fly out of the box"""
    return position, velocity


def get_confinement(policy: tp.Union[str, Confinement]) -> Confinement:
    """Returns the confinement policy, given its registered name or as a callable"""
    if callable(policy):
        return policy
    return registry.find(policy)
