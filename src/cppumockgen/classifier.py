# SPDX-FileCopyrightText: 2021 Malte Kliemann, Ole Kliemann
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Classification of return and parameter types.

``Classifier.classify_return`` and ``Classifier.classify_argument`` map
a ``types.Type`` (and optionally an ``config.OverrideSpec``) to the
category used by the mock registry, together with the casts and
decorations that the emitters splice into the generated code.

Typedef and elaborated layers are resolved iteratively. The outermost
spelling is kept for every cast that is emitted, the resolved type
decides the category.
"""

from __future__ import annotations

import dataclasses
from typing import Optional

from clang.cindex import TypeKind

from cppumockgen import utils
from cppumockgen.config import OverrideSpec
from cppumockgen.types import ClassifiedArgument, ClassifiedReturn, MockedType, Type

# Primitive kinds mapped to (category, needs cast on return).
_PRIMITIVES = {
    TypeKind.BOOL: (MockedType.BOOL, False),
    TypeKind.INT: (MockedType.INT, False),
    TypeKind.SHORT: (MockedType.INT, True),
    TypeKind.CHAR_S: (MockedType.INT, True),
    TypeKind.SCHAR: (MockedType.INT, True),
    TypeKind.WCHAR: (MockedType.INT, True),
    TypeKind.UINT: (MockedType.UNSIGNED_INT, False),
    TypeKind.USHORT: (MockedType.UNSIGNED_INT, True),
    TypeKind.CHAR_U: (MockedType.UNSIGNED_INT, True),
    TypeKind.UCHAR: (MockedType.UNSIGNED_INT, True),
    TypeKind.CHAR16: (MockedType.UNSIGNED_INT, True),
    TypeKind.LONG: (MockedType.LONG, False),
    TypeKind.LONGLONG: (MockedType.LONG, True),
    TypeKind.ULONG: (MockedType.UNSIGNED_LONG, False),
    TypeKind.ULONGLONG: (MockedType.UNSIGNED_LONG, True),
    TypeKind.CHAR32: (MockedType.UNSIGNED_LONG, True),
    TypeKind.FLOAT: (MockedType.DOUBLE, True),
    TypeKind.DOUBLE: (MockedType.DOUBLE, False),
    TypeKind.LONGDOUBLE: (MockedType.DOUBLE, True),
}

_STRING_CHARS = {TypeKind.CHAR_S}

_RECORDS = {TypeKind.RECORD, TypeKind.UNEXPOSED}

_FUNCTIONS = {TypeKind.FUNCTIONPROTO, TypeKind.FUNCTIONNOPROTO}

_KEYWORDS = ("const ", "volatile ", "struct ", "class ", "union ", "enum ")


def resolve(type_: Type) -> tuple[Type, bool]:
    """Strip typedef and elaborated layers off ``type_``.

    Returns:
        The first type which is neither a typedef nor elaborated, and
        ``True`` if any of the stripped layers was const qualified
    """
    const = type_.const
    while type_.is_sugar():
        if type_.inner is not None:
            type_ = type_.inner
        elif type_.canonical is not None:
            type_ = type_.canonical
        else:
            raise utils.CppUMockGenRuntimeError(
                f"Unable to resolve type '{type_.spelling}'"
            )
        const = const or type_.const
    return type_, const


def get_bare_spelling(spelling: str) -> str:
    """Strip qualifiers, tag keywords and trailing pointer/reference
    symbols off ``spelling``.

    Example:
        >>> get_bare_spelling("const struct Struct1 *")  # "Struct1"
    """
    result = spelling.rstrip(" *&")
    if result.endswith(" const"):
        result = result[: -len(" const")]
    stripped = True
    while stripped:
        stripped = False
        for each in _KEYWORDS:
            if result.startswith(each):
                result = result[len(each) :]
                stripped = True
    return result


def add_const(spelling: str) -> str:
    if spelling.startswith("const "):
        return spelling
    return "const " + spelling


def _unsupported(type_: Type) -> utils.CppUMockGenRuntimeError:
    return utils.CppUMockGenRuntimeError(
        f"Internal error: Unsupported type kind '{type_.kind.name}'"
        f" for type '{type_.spelling}'"
    )


class Classifier:
    """Classify types for the mock registry.

    Results are cached per type for the lifetime of the object.
    """

    def __init__(self, use_underlying_typedef: bool = False) -> None:
        """Args:
        use_underlying_typedef:
            Expose the canonical record name instead of the spelling as
            written in ``InputOfType``/``OutputOfType`` parameters
        """
        self.use_underlying_typedef = use_underlying_typedef
        self._cache = {}

    def classify_return(
        self, type_: Type, override: Optional[OverrideSpec] = None
    ) -> ClassifiedReturn:
        """Classify the return type of a function.

        Raises:
            utils.CppUMockGenRuntimeError: If the type kind is not supported
        """
        key = ("return", type_, override)
        if key not in self._cache:
            if override is not None:
                result = self._override_return(type_, override)
            else:
                result = self._classify_return(type_)
            self._cache[key] = result
        return self._cache[key]

    def classify_argument(
        self, name: str, type_: Type, override: Optional[OverrideSpec] = None
    ) -> ClassifiedArgument:
        """Classify the parameter ``name`` of type ``type_``.

        Raises:
            utils.CppUMockGenRuntimeError: If the type kind is not supported
        """
        key = ("argument", name, type_, override)
        if key not in self._cache:
            if override is not None:
                result = self._override_argument(name, type_, override)
            else:
                result = self._classify_argument(name, type_)
            self._cache[key] = result
        return self._cache[key]

    def _override_return(self, type_: Type, override: OverrideSpec) -> ClassifiedReturn:
        return ClassifiedReturn(
            spelling=type_.spelling,
            category=override.kind,
            ret_prefix=override.expr_mod_front,
            ret_suffix=override.expr_mod_back,
            expect_type=override.kind.base_type,
            use_base_type=True,
        )

    def _classify_return(self, type_: Type) -> ClassifiedReturn:
        spelling = type_.spelling
        resolved, _ = resolve(type_)
        kind = resolved.kind

        if kind == TypeKind.VOID:
            return ClassifiedReturn(spelling=spelling)

        if type_.kind == TypeKind.TYPEDEF or (
            type_.kind == TypeKind.ELABORATED and type_.inner.kind == TypeKind.TYPEDEF
        ):
            return self._classify_typedef_return(type_, resolved)

        if kind in _PRIMITIVES or kind == TypeKind.ENUM:
            category, needs_cast = _PRIMITIVES.get(kind, (MockedType.INT, True))
            if not needs_cast:
                return ClassifiedReturn(
                    spelling=spelling, category=category, expect_type=spelling
                )
            return ClassifiedReturn(
                spelling=spelling,
                category=category,
                ret_prefix=f"static_cast<{spelling}>(",
                ret_suffix=")",
                expect_type=spelling,
                needs_cast=True,
            )

        if kind in _RECORDS:
            return ClassifiedReturn(
                spelling=spelling,
                category=MockedType.CONST_POINTER,
                ret_prefix=f"*static_cast<{add_const(spelling)}*>(",
                ret_suffix=")",
                expect_type=add_const(spelling) + " &",
                is_by_ref=True,
                needs_cast=True,
            )

        if resolved.is_pointer() and not resolved.is_array():
            return self._classify_pointer_return(spelling, resolved, enable_cast=True)

        raise _unsupported(resolved)

    def _classify_typedef_return(self, type_: Type, resolved: Type) -> ClassifiedReturn:
        """Classify a return type spelled as a typedef.

        A const qualified typedef of a pointer makes the pointer const,
        not the pointee, so the category follows the pointee only.
        """
        spelling = type_.spelling
        if resolved.is_pointer() and not resolved.is_array():
            result = self._classify_pointer_return(spelling, resolved, enable_cast=False)
            if result.is_function_pointer:
                return result
            return dataclasses.replace(
                result,
                ret_prefix=f"static_cast<{spelling}>(" + result.ret_prefix,
                ret_suffix=result.ret_suffix + ")",
                expect_type=spelling,
                needs_cast=True,
            )

        if resolved.kind in _RECORDS:
            return ClassifiedReturn(
                spelling=spelling,
                category=MockedType.CONST_POINTER,
                ret_prefix=f"*static_cast<{add_const(spelling)}*>(",
                ret_suffix=")",
                expect_type=add_const(spelling) + " &",
                is_by_ref=True,
                needs_cast=True,
            )

        if resolved.kind in _PRIMITIVES or resolved.kind == TypeKind.ENUM:
            category, _ = _PRIMITIVES.get(resolved.kind, (MockedType.INT, True))
            return ClassifiedReturn(
                spelling=spelling,
                category=category,
                ret_prefix=f"static_cast<{spelling}>(",
                ret_suffix=")",
                expect_type=spelling,
                needs_cast=True,
            )

        raise _unsupported(resolved)

    def _classify_pointer_return(
        self, spelling: str, pointer: Type, enable_cast: bool
    ) -> ClassifiedReturn:
        pointee = pointer.inner
        target, pointee_const = resolve(pointee)
        is_reference = pointer.is_reference()
        category = MockedType.CONST_POINTER if pointee_const else MockedType.POINTER

        if target.kind in _FUNCTIONS:
            if is_reference:
                raise _unsupported(pointer)
            return ClassifiedReturn(
                spelling=spelling,
                category=MockedType.POINTER,
                ret_prefix=f"reinterpret_cast<{spelling}>(",
                ret_suffix=")",
                expect_type=spelling,
                needs_cast=True,
                is_function_pointer=True,
            )

        if not is_reference and target.kind in _STRING_CHARS and pointee_const:
            return ClassifiedReturn(
                spelling=spelling, category=MockedType.STRING, expect_type=spelling
            )

        if not is_reference and target.kind == TypeKind.VOID:
            return ClassifiedReturn(spelling=spelling, category=category, expect_type=spelling)

        if is_reference:
            ret_prefix = f"*static_cast<{pointee.spelling}*>("
            ret_suffix = ")"
            if pointer.kind == TypeKind.RVALUEREFERENCE:
                return ClassifiedReturn(
                    spelling=spelling,
                    category=category,
                    ret_prefix="std::move(" + ret_prefix,
                    ret_suffix=ret_suffix + ")",
                    expect_type=pointee.spelling + " &",
                    is_by_ref=True,
                    needs_cast=True,
                    is_rvalue_ref=True,
                )
            return ClassifiedReturn(
                spelling=spelling,
                category=category,
                ret_prefix=ret_prefix,
                ret_suffix=ret_suffix,
                expect_type=spelling,
                is_by_ref=True,
                needs_cast=True,
            )
        if enable_cast:
            return ClassifiedReturn(
                spelling=spelling,
                category=category,
                ret_prefix=f"static_cast<{pointee.spelling}*>(",
                ret_suffix=")",
                expect_type=spelling,
                needs_cast=True,
            )
        return ClassifiedReturn(
            spelling=spelling, category=category, expect_type=spelling, needs_cast=True
        )

    def _override_argument(
        self, name: str, type_: Type, override: OverrideSpec
    ) -> ClassifiedArgument:
        kind = override.kind
        fields = dict(
            name=name,
            spelling=_get_signature_spelling(type_),
            category=kind,
            arg_prefix=override.expr_mod_front,
            arg_suffix=override.expr_mod_back,
            exposed_type=override.exposed_type_name,
            use_base_type=True,
            is_rvalue_ref=type_.kind == TypeKind.RVALUEREFERENCE,
            force_not_ignored=type_.kind == TypeKind.RVALUEREFERENCE,
            array_suffix=_get_array_suffix(type_),
        )
        if kind == MockedType.SKIP:
            fields.update(spelling=type_.spelling, array_suffix="")
        elif kind in {MockedType.MEMORY_BUFFER, MockedType.POD}:
            if kind == MockedType.MEMORY_BUFFER:
                size_expr = override.apply_size(name)
            else:
                size_expr = f"sizeof(*{override.apply(name)})"
            fields.update(
                arg_prefix=(
                    "static_cast<const unsigned char *>(static_cast<const void *>("
                    + override.expr_mod_front
                ),
                arg_suffix=override.expr_mod_back + "))",
                size_expr=size_expr,
                expect_type="const void*",
                expect_prefix="static_cast<const unsigned char *>(",
                expect_suffix=")",
                has_size_param=True,
            )
        elif kind == MockedType.OUTPUT:
            fields.update(expect_type="const void*", has_size_param=True)
        elif kind == MockedType.INPUT_OF_TYPE:
            fields.update(
                expect_type=add_const(override.expectation_arg_type_name) + " &",
                expect_prefix="&",
            )
        elif kind == MockedType.OUTPUT_OF_TYPE:
            fields.update(
                expect_type=add_const(override.expectation_arg_type_name) + " *"
            )
        else:
            fields.update(expect_type=kind.base_type)
        return ClassifiedArgument(**fields)

    def _classify_argument(self, name: str, type_: Type) -> ClassifiedArgument:
        spelling = _get_signature_spelling(type_)
        array_suffix = _get_array_suffix(type_)
        resolved, _ = resolve(type_)
        kind = resolved.kind

        if kind in _PRIMITIVES:
            category, _ = _PRIMITIVES[kind]
            return ClassifiedArgument(
                name=name, spelling=spelling, category=category, expect_type=type_.spelling
            )

        if kind == TypeKind.ENUM:
            return ClassifiedArgument(
                name=name,
                spelling=spelling,
                category=MockedType.INT,
                arg_prefix="static_cast<int>(",
                arg_suffix=")",
                expect_type=type_.spelling,
                expect_prefix="static_cast<int>(",
                expect_suffix=")",
            )

        if kind in _RECORDS:
            return ClassifiedArgument(
                name=name,
                spelling=spelling,
                category=MockedType.INPUT_OF_TYPE,
                arg_prefix="&",
                exposed_type=self._get_exposed_type(type_),
                expect_type=add_const(type_.spelling) + " &",
                expect_prefix="&",
            )

        if resolved.is_pointer():
            fields = self._classify_pointer_argument(name, type_, resolved)
            return ClassifiedArgument(
                spelling=spelling, array_suffix=array_suffix, **fields
            )

        raise _unsupported(resolved)

    def _classify_pointer_argument(self, name: str, type_: Type, pointer: Type) -> dict:
        """Return the fields of the classified pointer or reference
        parameter ``name``, except for its spelling."""
        pointee = pointer.inner
        target, pointee_const = resolve(pointee)
        is_reference = pointer.is_reference()
        is_rvalue = pointer.kind == TypeKind.RVALUEREFERENCE
        if pointer.kind == TypeKind.POINTER:
            pointer_spelling = type_.spelling
        else:
            pointer_spelling = pointee.spelling + " *"

        result = dict(
            name=name,
            category=MockedType.CONST_POINTER if pointee_const else MockedType.POINTER,
            arg_prefix="&" if is_reference else "",
            expect_type=pointer_spelling,
            force_not_ignored=is_rvalue,
            is_rvalue_ref=is_rvalue,
        )

        if target.kind in _FUNCTIONS:
            result.update(
                category=MockedType.POINTER,
                arg_prefix="reinterpret_cast<void*>(" + result["arg_prefix"],
                arg_suffix=")",
                expect_prefix="reinterpret_cast<void*>(",
                expect_suffix=")",
            )
        elif target.kind == TypeKind.POINTER or target.kind == TypeKind.VOID:
            pass
        elif target.kind in _STRING_CHARS and pointee_const and not is_reference:
            result.update(category=MockedType.STRING)
        elif self._is_typedef_pointer(type_):
            # Pointers hidden behind a typedef are passed on as plain pointers.
            pass
        elif target.kind in _RECORDS:
            result.update(exposed_type=self._get_exposed_type(pointee))
            if pointee_const:
                result.update(
                    category=MockedType.INPUT_OF_TYPE,
                    expect_type=add_const(pointee.spelling) + " &",
                    expect_prefix="&",
                )
            else:
                result.update(
                    category=MockedType.OUTPUT_OF_TYPE,
                    expect_type=add_const(pointee.spelling) + " *",
                )
        elif target.kind in _PRIMITIVES or target.kind == TypeKind.ENUM:
            if not pointee_const:
                result.update(
                    category=MockedType.OUTPUT,
                    expect_type=add_const(pointee.spelling) + " *",
                )
        else:
            raise _unsupported(target)
        return result

    @staticmethod
    def _is_typedef_pointer(type_: Type) -> bool:
        resolved = type_
        while resolved.kind == TypeKind.ELABORATED:
            resolved = resolved.inner
        return resolved.kind == TypeKind.TYPEDEF and not resolve(type_)[0].is_array()

    def _get_exposed_type(self, type_: Type) -> str:
        if self.use_underlying_typedef:
            resolved, _ = resolve(type_)
            return get_bare_spelling(resolved.spelling)
        return get_bare_spelling(type_.spelling)


def _get_signature_spelling(type_: Type) -> str:
    """Return the spelling of ``type_`` to put in front of the parameter
    name. Arrays are split into element type and ``[]`` suffix."""
    if type_.is_array():
        return type_.inner.spelling
    return type_.spelling


def _get_array_suffix(type_: Type) -> str:
    if not type_.is_array():
        return ""
    if type_.size is None:
        return "[]"
    return f"[{type_.size}]"
