# SPDX-FileCopyrightText: 2021 Malte Kliemann, Ole Kliemann
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Signature extraction and mockability of function declarations.

``from_node`` creates a ``types.DeclInfo`` from a ``translator.Node``
whose cursor is a function, method, constructor or destructor
declaration. ``is_mockable`` decides whether a mock must be generated
for the declaration.
"""

from __future__ import annotations

import clang.cindex
from clang.cindex import AccessSpecifier, CursorKind, ExceptionSpecificationKind

from cppumockgen import translator
from cppumockgen.classifier import Classifier
from cppumockgen.config import Config
from cppumockgen.types import DeclInfo, DeclKind, ExceptionSpec, Type

FUNCTION_CURSORS = {
    CursorKind.FUNCTION_DECL: DeclKind.FUNCTION,
    CursorKind.CXX_METHOD: DeclKind.METHOD,
    CursorKind.CONSTRUCTOR: DeclKind.CONSTRUCTOR,
    CursorKind.DESTRUCTOR: DeclKind.DESTRUCTOR,
}

CLASS_CURSORS = {
    CursorKind.CLASS_DECL,
    CursorKind.STRUCT_DECL,
    CursorKind.UNION_DECL,
}

_EXCEPTION_SPECS = {
    ExceptionSpecificationKind.BASIC_NOEXCEPT: ExceptionSpec.NONE,
    ExceptionSpecificationKind.COMPUTED_NOEXCEPT: ExceptionSpec.NONE,
    ExceptionSpecificationKind.DYNAMIC_NONE: ExceptionSpec.DYNAMIC_NONE,
    ExceptionSpecificationKind.DYNAMIC: ExceptionSpec.DYNAMIC,
    ExceptionSpecificationKind.MS_ANY: ExceptionSpec.MS_ANY,
}

UNNAMED_ARG_PREFIX = "_unnamedArg"

# Scopes which do not contribute to qualified names.
_TRANSPARENT_CURSORS = {
    CursorKind.LINKAGE_SPEC,
    CursorKind.UNEXPOSED_DECL,
}


def get_qualified_name(cursor: clang.cindex.Cursor) -> str:
    """Join the spellings of ``cursor`` and its semantic parents up to
    the translation unit with ``::``.

    Linkage specifications and anonymous namespaces are skipped.
    """
    names = []
    while cursor is not None and cursor.kind != CursorKind.TRANSLATION_UNIT:
        if cursor.kind not in _TRANSPARENT_CURSORS and cursor.spelling:
            names.append(cursor.spelling)
        cursor = cursor.semantic_parent
    return "::".join(reversed(names))


def get_exception_spec(cursor: clang.cindex.Cursor) -> ExceptionSpec:
    return _EXCEPTION_SPECS.get(cursor.exception_specification_kind, ExceptionSpec.ANY)


def _is_public_class_member(cursor: clang.cindex.Cursor) -> bool:
    """Check that every class enclosing ``cursor`` is accessible."""
    parent = cursor.semantic_parent
    while parent is not None and parent.kind in CLASS_CURSORS:
        if parent.access_specifier in {
            AccessSpecifier.PRIVATE,
            AccessSpecifier.PROTECTED,
        }:
            return False
        parent = parent.semantic_parent
    return True


def is_mockable(node: translator.Node) -> bool:
    """Check if a mock must be generated for the declaration of ``node``.

    Redeclarations, declarations with a definition in the translation
    unit and declarations which can't be called from outside of their
    class are not mockable.
    """
    cursor = node.cursor
    kind = FUNCTION_CURSORS.get(cursor.kind)
    if kind is None:
        return False
    if cursor.canonical != cursor:
        return False
    if cursor.get_definition() is not None:
        return False
    if kind == DeclKind.FUNCTION:
        return True
    if not _is_public_class_member(cursor):
        return False
    if kind == DeclKind.METHOD:
        if cursor.is_pure_virtual_method():
            return False
        return (
            cursor.access_specifier == AccessSpecifier.PUBLIC
            or cursor.is_virtual_method()
        )
    return cursor.access_specifier != AccessSpecifier.PRIVATE


def from_node(node: translator.Node, config: Config, classifier: Classifier) -> DeclInfo:
    """Extract the signature of a function declaration.

    Args:
        node: The declaration; must have one of the ``FUNCTION_CURSORS`` kinds
        config: Holds the type overrides
        classifier: Classifies the return and parameter types

    Raises:
        ValueError: If the cursor kind is not a function kind
        utils.CppUMockGenRuntimeError:
            If a parameter or return type is not supported
    """
    cursor = node.cursor
    kind = FUNCTION_CURSORS.get(cursor.kind)
    if kind is None:
        keys = ", ".join(each.name for each in FUNCTION_CURSORS)
        raise ValueError(
            f"Invalid CursorKind. Expected: {keys}; received: {cursor.kind.name}"
        )

    qualified_name = get_qualified_name(cursor)
    result = DeclInfo(
        qualified_name=qualified_name,
        kind=kind,
        exception_spec=get_exception_spec(cursor),
    )
    if kind != DeclKind.FUNCTION:
        result.class_name = get_qualified_name(cursor.semantic_parent)
    if kind == DeclKind.METHOD:
        result.is_static = cursor.is_static_method()
        result.is_const_method = cursor.is_const_method()

    if kind in {DeclKind.FUNCTION, DeclKind.METHOD}:
        type_ = Type.from_clang(cursor.result_type)
        override = config.get_type_override(qualified_name + "@")
        if override is None:
            override = config.get_type_override("@" + type_.spelling)
        result.return_ = classifier.classify_return(type_, override)

    for i, arg in enumerate(cursor.get_arguments()):
        name = arg.spelling or f"{UNNAMED_ARG_PREFIX}{i}"
        type_ = Type.from_clang(arg.type)
        override = config.get_type_override(f"{qualified_name}#{name}")
        if override is None:
            override = config.get_type_override("#" + type_.spelling)
        result.arguments.append(classifier.classify_argument(name, type_, override))

    return result
