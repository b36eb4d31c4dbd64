# SPDX-FileCopyrightText: 2021 Malte Kliemann, Ole Kliemann
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Classes for C/C++ type and declaration infos.

``Type`` is a parser independent snapshot of a ``clang.cindex.Type``.
It is created using ``Type.from_clang`` and is immutable and hashable,
so that classifications may be cached per type. Tests may construct
``Type`` objects directly without loading libclang:

```python
Type(TypeKind.POINTER, "const int *", inner=Type(TypeKind.INT, "const int", const=True))
```

The remaining classes hold the results of the classification and
signature extraction and are consumed by the emitters.
"""

from __future__ import annotations

import dataclasses
import enum
import re
from typing import Optional

import clang.cindex
from clang.cindex import TypeKind

POINTER_KINDS = {
    TypeKind.POINTER,
    TypeKind.LVALUEREFERENCE,
    TypeKind.RVALUEREFERENCE,
}

ARRAY_KINDS = {
    TypeKind.CONSTANTARRAY,
    TypeKind.INCOMPLETEARRAY,
}

# Kinds which are transparent for the classification.
SUGAR_KINDS = {
    TypeKind.TYPEDEF,
    TypeKind.ELABORATED,
}


@dataclasses.dataclass(frozen=True)
class Type:
    """For C/C++ types.

    Depending on ``kind``, ``inner`` holds the pointee (pointers), the
    referent (references), the element type (arrays) or the named type
    (elaborated types). For typedefs, ``inner`` holds the declared
    underlying type and ``canonical`` the fully resolved type.
    """

    kind: TypeKind
    spelling: str
    const: bool = False
    inner: Optional[Type] = None
    canonical: Optional[Type] = None
    size: Optional[int] = None

    @classmethod
    def from_clang(cls, type_: clang.cindex.Type) -> Type:
        kind = type_.kind
        inner = None
        canonical = None
        size = None
        if kind in POINTER_KINDS:
            inner = cls.from_clang(type_.get_pointee())
        elif kind in ARRAY_KINDS:
            inner = cls.from_clang(type_.get_array_element_type())
            if kind == TypeKind.CONSTANTARRAY:
                size = type_.get_array_size()
        elif kind == TypeKind.ELABORATED:
            inner = cls.from_clang(type_.get_named_type())
        elif kind == TypeKind.TYPEDEF:
            declaration = type_.get_declaration()
            inner = cls.from_clang(declaration.underlying_typedef_type)
            canonical = cls.from_clang(type_.get_canonical())
        return cls(
            kind=kind,
            spelling=type_.spelling,
            const=type_.is_const_qualified(),
            inner=inner,
            canonical=canonical,
            size=size,
        )

    def is_sugar(self) -> bool:
        return self.kind in SUGAR_KINDS

    def is_pointer(self) -> bool:
        return self.kind in POINTER_KINDS or self.kind in ARRAY_KINDS

    def is_reference(self) -> bool:
        return self.kind in {TypeKind.LVALUEREFERENCE, TypeKind.RVALUEREFERENCE}

    def is_array(self) -> bool:
        return self.kind in ARRAY_KINDS


_ABSTRACT_DECLARATOR = re.compile(r"\(([*&][^()]*)\)")


def declare(spelling: str, declarator: str) -> str:
    """Declare ``declarator`` with the type ``spelling``.

    If ``spelling`` contains an abstract declarator like ``(*)``, the
    declarator is put inside of it.

    Example:
        >>> declare("void (*)(int)", "cb")  # "void (*cb)(int)"
        >>> declare("int *", "p")  # "int * p"
    """
    for match in _ABSTRACT_DECLARATOR.finditer(spelling):
        # Skip template arguments like std::function<void (*)(int)>.
        head = spelling[: match.start()]
        if head.count("<") != head.count(">"):
            continue
        inner = match.group(1)
        separator = " " if inner[-1].isalnum() else ""
        return (
            spelling[: match.start()]
            + f"({inner}{separator}{declarator})"
            + spelling[match.end() :]
        )
    return f"{spelling} {declarator}"


class MockedType(enum.Enum):
    """The categories known by the CppUTest mock registry."""

    BOOL = "Bool"
    INT = "Int"
    UNSIGNED_INT = "UnsignedInt"
    LONG = "Long"
    UNSIGNED_LONG = "UnsignedLong"
    DOUBLE = "Double"
    STRING = "String"
    POINTER = "Pointer"
    CONST_POINTER = "ConstPointer"
    OUTPUT = "Output"
    INPUT_OF_TYPE = "InputOfType"
    OUTPUT_OF_TYPE = "OutputOfType"
    MEMORY_BUFFER = "MemoryBuffer"
    POD = "POD"
    SKIP = "Skip"

    @classmethod
    def from_tag(cls, tag: str) -> MockedType:
        """Raises:
        ValueError: If ``tag`` is not the name of a category
        """
        return cls(tag)

    @property
    def registry_name(self) -> str:
        """The type name used in the registry's call names, e.g.
        ``LongInt`` for ``returnLongIntValue``."""
        return _REGISTRY_NAMES.get(self, self.value)

    @property
    def base_type(self) -> str:
        """The C++ type matching the registry's value type."""
        return _BASE_TYPES[self]

    def is_return_type(self) -> bool:
        return self in _BASE_TYPES

    def can_be_ignored(self) -> bool:
        return self not in {
            MockedType.OUTPUT,
            MockedType.OUTPUT_OF_TYPE,
            MockedType.SKIP,
        }


_REGISTRY_NAMES = {
    MockedType.LONG: "LongInt",
    MockedType.UNSIGNED_LONG: "UnsignedLongInt",
}

_BASE_TYPES = {
    MockedType.BOOL: "bool",
    MockedType.INT: "int",
    MockedType.UNSIGNED_INT: "unsigned int",
    MockedType.LONG: "long",
    MockedType.UNSIGNED_LONG: "unsigned long",
    MockedType.DOUBLE: "double",
    MockedType.STRING: "const char*",
    MockedType.POINTER: "void*",
    MockedType.CONST_POINTER: "const void*",
}


@dataclasses.dataclass(frozen=True)
class ClassifiedReturn:
    """For classified return types.

    ``ret_prefix`` and ``ret_suffix`` wrap the registry's return call in
    the mock. The remaining fields describe the expected return value
    parameter of the expectation helpers: ``expect_type`` is its type,
    ``is_by_ref`` means its address is passed to the registry and
    ``needs_cast`` forces a cast to the category's base type.

    Results are shared between declarations by the classifier's cache
    and must not be modified.
    """

    spelling: str
    category: Optional[MockedType] = None
    ret_prefix: str = ""
    ret_suffix: str = ""
    expect_type: str = ""
    is_by_ref: bool = False
    needs_cast: bool = False
    use_base_type: bool = False
    is_rvalue_ref: bool = False
    is_function_pointer: bool = False

    def is_void(self) -> bool:
        return self.category is None


@dataclasses.dataclass(frozen=True)
class ClassifiedArgument:
    """For classified function parameters.

    The mock passes ``arg_prefix + name + arg_suffix`` to the registry,
    the expectation passes ``expect_prefix + value + expect_suffix``,
    where ``value`` is the expectation parameter (or its ``getValue()``
    if the parameter is ignorable).
    """

    name: str
    spelling: str
    category: MockedType
    arg_prefix: str = ""
    arg_suffix: str = ""
    exposed_type: str = ""
    size_expr: str = ""
    expect_type: str = ""
    expect_prefix: str = ""
    expect_suffix: str = ""
    has_size_param: bool = False
    use_base_type: bool = False
    force_not_ignored: bool = False
    is_rvalue_ref: bool = False
    array_suffix: str = ""

    def is_skipped(self) -> bool:
        return self.category == MockedType.SKIP

    def can_be_ignored(self) -> bool:
        return self.category.can_be_ignored() and not self.force_not_ignored

    def get_signature(self) -> str:
        """Return the parameter as declared in the mock's signature."""
        if self.is_skipped():
            return self.spelling
        if self.array_suffix:
            return f"{self.spelling} {self.name}{self.array_suffix}"
        return declare(self.spelling, self.name)

    def get_mock_expr(self) -> str:
        return self.arg_prefix + self.name + self.arg_suffix


class DeclKind(enum.Enum):
    FUNCTION = "Function"
    METHOD = "Method"
    CONSTRUCTOR = "Constructor"
    DESTRUCTOR = "Destructor"


class ExceptionSpec(enum.Enum):
    ANY = ""
    NONE = " noexcept"
    DYNAMIC_NONE = " throw()"
    DYNAMIC = " throw(__put_exception_types_manually_here__)"
    MS_ANY = " throw(...)"

    @property
    def suffix(self) -> str:
        return self.value


@dataclasses.dataclass
class DeclInfo:
    """For mockable function declarations."""

    qualified_name: str
    kind: DeclKind = DeclKind.FUNCTION
    class_name: Optional[str] = None
    is_static: bool = False
    is_const_method: bool = False
    exception_spec: ExceptionSpec = ExceptionSpec.ANY
    return_: Optional[ClassifiedReturn] = None
    arguments: list[ClassifiedArgument] = dataclasses.field(default_factory=list)

    def has_object(self) -> bool:
        """Return ``True`` if calls are registered on ``this``."""
        if self.kind == DeclKind.DESTRUCTOR:
            return True
        return self.kind == DeclKind.METHOD and not self.is_static

    def is_void(self) -> bool:
        return self.return_ is None or self.return_.is_void()

    def get_leaf_name(self) -> str:
        return self.qualified_name.split("::")[-1]

    def get_scopes(self) -> list[str]:
        """Return the namespaces and classes enclosing the declaration."""
        return self.qualified_name.split("::")[:-1]
