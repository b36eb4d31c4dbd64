# SPDX-FileCopyrightText: 2021 Malte Kliemann, Ole Kliemann
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Generation configuration and type overrides.

An override option has the form ``<key>=<value>``. The key is one of

- ``<function>#<parameter>``: a specific parameter of a function
- ``<function>@``: the return of a function
- ``#<type>``: any parameter of the given type
- ``@<type>``: any return of the given type

and the value has the form

```
<Type>[:<ExposedType>[<<ArgType>]][~<ExpressionModifier>][/<SizeExpression>]
```

The ``$`` character in the expression modifier and the size expression
is a placeholder for the parameter or return expression. A modifier
without ``$`` is treated as if the placeholder was at its end.
"""

from __future__ import annotations

import dataclasses
from typing import Iterable, Optional

from cppumockgen import utils
from cppumockgen.types import MockedType

PLACEHOLDER = "$"

_PARAMETER_ONLY = {
    MockedType.OUTPUT,
    MockedType.INPUT_OF_TYPE,
    MockedType.OUTPUT_OF_TYPE,
    MockedType.MEMORY_BUFFER,
    MockedType.POD,
    MockedType.SKIP,
}

_WITH_EXPOSED_TYPE = {MockedType.INPUT_OF_TYPE, MockedType.OUTPUT_OF_TYPE}


@dataclasses.dataclass(frozen=True)
class OverrideSpec:
    """For user-defined type translations."""

    kind: MockedType
    exposed_type_name: str = ""
    expectation_arg_type_name: str = ""
    expr_mod_front: str = ""
    expr_mod_back: str = ""
    size_expr_front: str = ""
    size_expr_back: str = ""
    has_size_expr_placeholder: bool = False

    @classmethod
    def parse(cls, value: str, option: str, is_return: bool) -> OverrideSpec:
        """Parse the value part of an override option.

        Args:
            value: The part of the option following the ``=``
            option: The full option, used in error messages
            is_return: ``True`` if the option overrides a return

        Raises:
            utils.CppUMockGenRuntimeError: If ``value`` is malformed
        """
        if not value:
            _raise("Override option specification cannot be empty", option)

        head, sep, modifier = value.partition("~")
        if sep and not modifier:
            _raise(
                "Override option argument expression cannot be empty if specified",
                option,
            )

        tag, size_expr = _split_tag(head, option)
        try:
            kind = MockedType.from_tag(tag)
        except ValueError:
            _raise("Invalid override option type", option)

        if is_return and kind in _PARAMETER_ONLY:
            _raise("Override option type not allowed for return types", option)

        exposed, arg_type = "", ""
        if kind in _WITH_EXPOSED_TYPE:
            exposed, _, arg_type = _tag_remainder(head).partition("<")
            if not exposed:
                _raise("Override option exposed type cannot be empty", option)
            if not arg_type:
                arg_type = exposed
        elif _tag_remainder(head):
            _raise("Override option type does not accept an exposed type", option)

        if kind == MockedType.MEMORY_BUFFER:
            if not size_expr:
                modifier, _, size_expr = modifier.partition("/")
            if not size_expr:
                _raise("Override option size expression is mandatory", option)
        elif size_expr:
            _raise("Override option size expression only allowed for MemoryBuffer", option)

        front, back = _split_placeholder(modifier, option)
        size_front, size_back = _split_placeholder(size_expr, option)
        return cls(
            kind=kind,
            exposed_type_name=exposed,
            expectation_arg_type_name=arg_type,
            expr_mod_front=front,
            expr_mod_back=back,
            size_expr_front=size_front,
            size_expr_back=size_back,
            has_size_expr_placeholder=PLACEHOLDER in size_expr,
        )

    def apply(self, expr: str) -> str:
        """Wrap ``expr`` with the expression modifier."""
        return self.expr_mod_front + expr + self.expr_mod_back

    def apply_size(self, expr: str) -> str:
        """Return the size expression for ``expr``."""
        if not self.has_size_expr_placeholder:
            return self.size_expr_front
        return self.size_expr_front + expr + self.size_expr_back


def _tag_remainder(head: str) -> str:
    """Return the text following the first ``:`` of ``head``."""
    _, _, remainder = head.partition(":")
    return remainder.split("/")[0]


def _split_tag(head: str, option: str) -> tuple[str, str]:
    tag_and_exposed, _, size_expr = head.partition("/")
    tag = tag_and_exposed.partition(":")[0]
    if not tag:
        _raise("Override option type cannot be empty", option)
    return tag, size_expr


def _split_placeholder(text: str, option: str) -> tuple[str, str]:
    count = text.count(PLACEHOLDER)
    if count > 1:
        _raise(
            "Override option expression contains more than one placeholder ($)",
            option,
        )
    front, _, back = text.partition(PLACEHOLDER)
    return front, back


def _raise(message: str, option: str) -> None:
    raise utils.CppUMockGenRuntimeError(f"{message} <{option}>.")


def is_return_key(key: str) -> bool:
    return key.startswith("@") or key.endswith("@")


class OverrideRegistry:
    """Map override keys to ``OverrideSpec`` objects."""

    def __init__(self, options: Iterable[str] = ()) -> None:
        """Args:
        options: Override options of the form ``<key>=<value>``

        Raises:
            utils.CppUMockGenRuntimeError:
                If an option is malformed or a key is passed twice
        """
        self._map: dict[str, OverrideSpec] = {}
        for option in options:
            key, sep, value = option.partition("=")
            if not sep:
                _raise("Invalid override option", option)
            if not key or key in {"#", "@"}:
                _raise("Override option key cannot be empty", option)
            spec = OverrideSpec.parse(value, option, is_return_key(key))
            if key in self._map:
                raise utils.CppUMockGenRuntimeError(
                    f"Override option key <{key}> can only be passed once."
                )
            self._map[key] = spec

    def get(self, key: str) -> Optional[OverrideSpec]:
        return self._map.get(key)

    def __len__(self) -> int:
        return len(self._map)


class Config:
    """Settings which affect the generated code."""

    def __init__(
        self, use_underlying_typedef: bool = False, override_options: Iterable[str] = ()
    ) -> None:
        self.use_underlying_typedef = use_underlying_typedef
        self.overrides = OverrideRegistry(override_options)

    def get_type_override(self, key: str) -> Optional[OverrideSpec]:
        return self.overrides.get(key)
