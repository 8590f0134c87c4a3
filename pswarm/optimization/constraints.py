# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

from collections import abc
import numpy as np
import pswarm.common.typing as tp
from pswarm.common import errors


def as_vector(x: tp.ArrayLike, name: str = "vector") -> np.ndarray:
    """Converts to a 1-dimensional float array, raising a ConfigurationError
    if the input cannot be interpreted as a finite vector
    """
    try:
        out = np.array(x, dtype=float, copy=True)
    except (TypeError, ValueError) as e:
        raise errors.ConfigurationError(f"{name} must be a vector of floats (got {x!r})") from e
    if out.ndim != 1:
        raise errors.DimensionMismatchError(f"{name} must be 1-dimensional (got shape {out.shape})")
    if not np.all(np.isfinite(out)):
        raise errors.ConfigurationError(f"{name} must only contain finite values (got {out})")
    return out


class ConstraintSet:
    """Immutable box of feasible values, defined by per-dimension
    minimum and maximum bounds.

    Parameters
    ----------
    min: array-like
        lower bounds, one per dimension
    max: array-like
        upper bounds, one per dimension (max[i] >= min[i])
    """

    def __init__(self, min: tp.ArrayLike, max: tp.ArrayLike) -> None:  # pylint: disable=redefined-builtin
        lower = as_vector(min, name="constraints min")
        upper = as_vector(max, name="constraints max")
        if not lower.size:
            raise errors.ConfigurationError("Constraints must have at least one dimension")
        if lower.shape != upper.shape:
            raise errors.DimensionMismatchError(
                f"Constraints min and max must have the same dimension (got {lower.size} and {upper.size})"
            )
        if np.any(lower > upper):
            raise errors.ConfigurationError(f"Constraints min must be lower than max (got {lower} and {upper})")
        for array in (lower, upper):
            array.flags.writeable = False
        self._min = lower
        self._max = upper

    @classmethod
    def from_dict(cls, bounds: tp.Mapping[str, tp.ArrayLike]) -> "ConstraintSet":
        """Builds the constraint set from a mapping with "min" and "max" keys"""
        missing = {"min", "max"} - set(bounds)
        if missing:
            raise errors.ConfigurationError(f"Constraints are missing key(s) {sorted(missing)}")
        return cls(bounds["min"], bounds["max"])

    @property
    def min(self) -> np.ndarray:
        return self._min

    @property
    def max(self) -> np.ndarray:
        return self._max

    @property
    def dimension(self) -> int:
        return self._min.size

    @property
    def span(self) -> np.ndarray:
        return self._max - self._min

    def contains(self, x: tp.ArrayLike) -> bool:
        """Checks whether the point lies within the box (bounds included)"""
        x = np.asarray(x, dtype=float)
        return bool(np.all(x >= self._min) and np.all(x <= self._max))

    def check_dimension(self, x: np.ndarray, name: str = "vector") -> None:
        if x.shape[-1] != self.dimension:
            raise errors.DimensionMismatchError(
                f"{name} has dimension {x.shape[-1]} but constraints have dimension {self.dimension}"
            )

    def __eq__(self, other: tp.Any) -> bool:
        if not isinstance(other, ConstraintSet):
            return False
        return bool(np.array_equal(self._min, other._min) and np.array_equal(self._max, other._max))

    def __hash__(self) -> int:
        return hash((tuple(self._min.tolist()), tuple(self._max.tolist())))

    def __repr__(self) -> str:
        return f"ConstraintSet(min={self._min.tolist()}, max={self._max.tolist()})"


def as_constraints(
    constraints: tp.Union[None, ConstraintSet, tp.Mapping[str, tp.ArrayLike]]
) -> tp.Optional[ConstraintSet]:
    """Normalizes the different accepted forms of constraints"""
    if constraints is None or isinstance(constraints, ConstraintSet):
        return constraints
    if isinstance(constraints, abc.Mapping):
        return ConstraintSet.from_dict(constraints)
    raise errors.PSwarmTypeError(
        f"Constraints must be a ConstraintSet or a mapping with min and max keys (got {type(constraints)})"
    )
