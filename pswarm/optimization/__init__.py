# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from .particle import Best
from .particle import Particle
from .constraints import ConstraintSet
from .swarm import Coefficients
from .swarm import Swarm
from .solver import ParticleSwarmOptimizationSolver
from . import callbacks
