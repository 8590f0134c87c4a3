# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.


# base classes


class PSwarmError(Exception):
    """Base class for error raised by pswarm"""


class PSwarmWarning(Warning):
    pass


# errors
# pylint: disable=too-many-ancestors


class EarlyStopping(StopIteration, PSwarmError):
    """Stops the solver loop after the current iteration if raised"""


class PSwarmRuntimeError(RuntimeError, PSwarmError):
    """Runtime error raised by pswarm"""


class PSwarmTypeError(TypeError, PSwarmError):
    """Type error raised by pswarm"""


class PSwarmValueError(ValueError, PSwarmError):
    """Value error raised by pswarm"""


class ConfigurationError(PSwarmValueError):
    """The solver settings do not allow to build or run the swarm
    (eg: not enough information to initialize positions or velocities)
    """


class DimensionMismatchError(ConfigurationError):
    """Vectors provided to the solver do not share the same dimension"""


# warnings


class PSwarmRuntimeWarning(RuntimeWarning, PSwarmWarning):
    """Runtime warning raised by pswarm"""


class BadHeightWarning(PSwarmRuntimeWarning):
    """Provided height is unhelpful (NaN)"""
