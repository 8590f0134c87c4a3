# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import typing as tp
from . import errors


X = tp.TypeVar("X")


# pylint does not understand Dict[str, X],
# so we reimplement the MutableMapping interface
class Registry(tp.MutableMapping[str, X]):
    """Registers functions or classes by name, as a dict.

    Parameters
    ----------
    kind: str
        what is registered, only used in error messages (eg: "confinement policy")
    """

    def __init__(self, kind: str = "object") -> None:
        super().__init__()
        self.kind = kind
        self.data: tp.Dict[str, X] = {}

    def register(self, obj: X) -> X:
        """Decorator method for registering functions/classes under their own name"""
        name = getattr(obj, "__name__", obj.__class__.__name__)
        self.register_name(name, obj)
        return obj

    def register_as(self, name: str) -> tp.Callable[[X], X]:
        """Decorator for registering a function/class under a custom name"""

        def decorator(obj: X) -> X:
            self.register_name(name, obj)
            return obj

        return decorator

    def register_name(self, name: str, obj: X) -> None:
        if name in self:
            raise RuntimeError(f'Encountered a name collision "{name}"')
        self[name] = obj

    def unregister(self, name: str) -> None:
        if name in self:
            del self[name]

    def find(self, name: str) -> X:
        """Returns the registered object, or raises a ConfigurationError
        listing the available names
        """
        if name not in self:
            raise errors.ConfigurationError(
                f'Unknown {self.kind} "{name}" (available: {", ".join(sorted(self))})'
            )
        return self[name]

    def __getitem__(self, key: str) -> X:
        return self.data[key]

    def __setitem__(self, key: str, value: X) -> None:
        self.data[key] = value

    def __delitem__(self, key: str) -> None:
        del self.data[key]

    def __iter__(self) -> tp.Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)
