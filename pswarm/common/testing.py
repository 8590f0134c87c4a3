# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import inspect
import threading
import typing as tp
try:
    import pytest
except ImportError:
    pass  # makes most of this module usable without pytest
import numpy as np


def printed_assert_equal(actual: tp.Any, desired: tp.Any, err_msg: str = '') -> None:
    try:
        np.testing.assert_equal(actual, desired, err_msg=err_msg)
    except AssertionError as e:
        print("\n" + "# " * 12 + "DEBUG MESSAGE " + "# " * 12)
        print(f"Expected: {desired}\nbut got:  {actual}")
        raise e


def assert_within_bounds(points: tp.Iterable[tp.Any], lower: tp.Any, upper: tp.Any) -> None:
    """Asserts that all points lie in the [lower, upper] box (bounds included),
    with an error message listing the offending points.
    This function should only be used in tests.
    """
    lower, upper = (np.asarray(b, dtype=float) for b in (lower, upper))
    outside = [np.asarray(x) for x in points if np.any(np.asarray(x) < lower) or np.any(np.asarray(x) > upper)]
    if outside:
        text = "\n - ".join(str(x) for x in outside[:10])
        raise AssertionError(f"{len(outside)} point(s) outside of [{lower}, {upper}]:\n - {text}")


class CountingFunction:
    """Objective function recording all the points it was called on.
    It is thread safe so it can be used for concurrent evaluations.

    Parameters
    ----------
    func: callable
        the underlying objective, defaults to the downward parabola -sum(x**2)
    """

    def __init__(self, func: tp.Optional[tp.Callable[[np.ndarray], float]] = None) -> None:
        self._func = func
        self._lock = threading.Lock()
        self.calls: tp.List[np.ndarray] = []

    @property
    def count(self) -> int:
        return len(self.calls)

    def __call__(self, x: np.ndarray) -> float:
        with self._lock:
            self.calls.append(np.array(x, copy=True))
        if self._func is not None:
            return self._func(x)
        return -float(np.sum(np.asarray(x) ** 2))


class parametrized:
    """Simplified decorator API for specifying named parametrized test with pytests
    (like with old "genty" package)
    See example of use in test_testing

    Parameters
    ----------
    **kwargs:
        name of the argument is converted as id of the experiments, and the provided tuple
        contains a value for each of the arguments of the underlying function (in the definition order).
    """

    def __init__(self, **kwargs: tp.Tuple[tp.Any, ...]):
        self.ids = sorted(kwargs)
        self.params = tuple(kwargs[name] for name in self.ids)
        assert self.params
        self.num_params = len(self.params[0])
        assert all(isinstance(p, (tuple, list)) for p in self.params)
        assert all(self.num_params == len(p) for p in self.params[1:])

    def __call__(self, func: tp.Callable[..., None]) -> tp.Any:  # type is lost here :(
        names = list(inspect.signature(func).parameters.keys())
        assert len(names) == self.num_params, f"Parameter names: {names}"
        return pytest.mark.parametrize(
            ",".join(names), self.params if self.num_params > 1 else [p[0] for p in self.params], ids=self.ids)(func)
