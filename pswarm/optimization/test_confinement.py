# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import pytest
import numpy as np
from pswarm.common import errors
from . import confinement as conf
from .constraints import ConstraintSet


CONSTRAINTS = ConstraintSet([-1, -1, -1], [1, 1, 1])


def test_clamp() -> None:
    position, velocity = conf.clamp(np.array([2.0, 0.5, -3.0]), np.array([1.5, 0.2, -2.5]), CONSTRAINTS)
    np.testing.assert_array_equal(position, [1, 0.5, -1])
    np.testing.assert_array_equal(velocity, [0, 0.2, 0])


def test_bounce() -> None:
    position, velocity = conf.bounce(np.array([2.0, 0.5, -3.0]), np.array([1.5, 0.2, -2.5]), CONSTRAINTS)
    np.testing.assert_array_equal(position, [1, 0.5, -1])
    np.testing.assert_array_equal(velocity, [-0.75, 0.2, 1.25])


def test_unconfined() -> None:
    x, v = np.array([2.0, 0.5, -3.0]), np.array([1.5, 0.2, -2.5])
    position, velocity = conf.get_confinement("none")(x, v, CONSTRAINTS)
    assert position is x and velocity is v


@pytest.mark.parametrize("name", ["clamp", "bounce"])  # type: ignore
def test_inside_is_untouched(name: str) -> None:
    x, v = np.array([1.0, 0.5, -1.0]), np.array([1.5, 0.2, -2.5])
    position, velocity = conf.get_confinement(name)(x, v, CONSTRAINTS)
    assert position is x and velocity is v


def test_get_confinement() -> None:
    assert conf.get_confinement(conf.DEFAULT) is conf.clamp
    assert conf.get_confinement(conf.bounce) is conf.bounce
    assert sorted(conf.registry) == ["bounce", "clamp", "none"]
    with pytest.raises(errors.ConfigurationError, match='Unknown confinement policy "blublu"'):
        conf.get_confinement("blublu")
