# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import numpy as np
import pswarm.common.typing as tp
from pswarm.common import testing
from . import functions


@testing.parametrized(
    parabola=("parabola", [0, 0, 0], [1, 2, 3], -14),
    rastrigin=("rastrigin", [0, 0], [1, 0], -1),
    rosenbrock=("rosenbrock", [1, 1, 1], [0, 0], -1),
)
def test_functions(name: str, optimum: tp.List[float], point: tp.List[float], expected: float) -> None:
    func = functions.registry.find(name)
    np.testing.assert_almost_equal(func(optimum), 0)
    np.testing.assert_almost_equal(func(point), expected)
    assert isinstance(func(np.array(point)), float)


def test_registry() -> None:
    assert sorted(functions.registry) == ["parabola", "rastrigin", "rosenbrock"]
