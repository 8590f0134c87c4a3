# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import pytest
import numpy as np
import pswarm.common.typing as tp
from pswarm.common import testing
from pswarm.common import errors
from . import constraints as cst


def test_constraint_set() -> None:
    constraints = cst.ConstraintSet(min=[-1, 0], max=[1, 3])
    np.testing.assert_equal(constraints.dimension, 2)
    np.testing.assert_array_equal(constraints.span, [2, 3])
    assert constraints.contains([1, 0])
    assert not constraints.contains([1.1, 0])
    assert constraints == cst.ConstraintSet.from_dict({"min": (-1, 0), "max": (1, 3)})
    assert hash(constraints) == hash(cst.ConstraintSet([-1, -0.0], [1, 3]))
    assert repr(constraints) == "ConstraintSet(min=[-1.0, 0.0], max=[1.0, 3.0])"
    with pytest.raises(ValueError):
        constraints.min[0] = 12  # read-only


def test_constraint_set_copies_input() -> None:
    lower = np.array([0.0, 0.0])
    constraints = cst.ConstraintSet(lower, [1, 1])
    lower[0] = 12
    np.testing.assert_array_equal(constraints.min, [0, 0])


@testing.parametrized(
    inverted=([1, 0], [0, 1], errors.ConfigurationError),
    different_sizes=([0, 0], [1, 1, 1], errors.DimensionMismatchError),
    empty=([], [], errors.ConfigurationError),
    matrix=([[0, 0]], [[1, 1]], errors.DimensionMismatchError),
    infinite=([0, -np.inf], [1, 1], errors.ConfigurationError),
    not_numbers=(["a", "b"], [1, 1], errors.ConfigurationError),
)
def test_constraint_set_errors(lower: tp.Any, upper: tp.Any, error: tp.Type[Exception]) -> None:
    with pytest.raises(error):
        cst.ConstraintSet(lower, upper)


def test_check_dimension() -> None:
    constraints = cst.ConstraintSet([0, 0], [1, 1])
    constraints.check_dimension(np.zeros((4, 2)))
    with pytest.raises(errors.DimensionMismatchError, match="blublu has dimension 3"):
        constraints.check_dimension(np.zeros(3), name="blublu")


def test_as_constraints() -> None:
    constraints = cst.ConstraintSet([0], [1])
    assert cst.as_constraints(None) is None
    assert cst.as_constraints(constraints) is constraints
    assert cst.as_constraints({"min": [0], "max": [1]}) == constraints
    with pytest.raises(errors.ConfigurationError, match="missing key"):
        cst.as_constraints({"min": [0]})
    with pytest.raises(TypeError):
        cst.as_constraints([0, 1])  # type: ignore
