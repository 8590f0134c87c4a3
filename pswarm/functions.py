# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""Classical test functions, written as heights to maximize
(their maximum is 0).
"""

import numpy as np
import pswarm.common.typing as tp
from pswarm.common.decorators import Registry


registry: Registry[tp.ObjectiveFunction] = Registry("function")


@registry.register
def parabola(x: tp.ArrayLike) -> float:
    """Downward parabola -sum(x**2), maximal at the origin"""
    x = np.asarray(x, dtype=float)
    return -float(x.dot(x))


@registry.register
def rastrigin(x: tp.ArrayLike) -> float:
    """Opposite of the Rastrigin function, highly multimodal, maximal at the origin"""
    x = np.asarray(x, dtype=float)
    cosi = float(np.sum(np.cos(2 * np.pi * x)))
    return -float(10 * (len(x) - cosi) + x.dot(x))


@registry.register
def rosenbrock(x: tp.ArrayLike) -> float:
    """Opposite of the Rosenbrock function, maximal at (1, ..., 1)"""
    x = np.asarray(x, dtype=float)
    x_m_1 = x[:-1] - 1
    x_diff = x[:-1] ** 2 - x[1:]
    return -float(100 * x_diff.dot(x_diff) + x_m_1.dot(x_m_1))
