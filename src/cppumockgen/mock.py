# SPDX-FileCopyrightText: 2021 Malte Kliemann, Ole Kliemann
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Generate mock definitions."""

from __future__ import annotations

from cppumockgen import utils
from cppumockgen.types import ClassifiedArgument, DeclInfo, DeclKind, MockedType, declare

MOCK_SUPPORT = "mock()"


def generate_mock(decl: DeclInfo) -> str:
    """Generate the mock definition of ``decl``."""
    return _generate_signature(decl) + "\n{\n" + utils.indent(_generate_body(decl)) + "\n}\n"


def _generate_signature(decl: DeclInfo) -> str:
    result = decl.qualified_name
    result += "(" + ", ".join(each.get_signature() for each in decl.arguments) + ")"
    if decl.is_const_method:
        result += " const"
    result += decl.exception_spec.suffix
    if decl.kind in {DeclKind.FUNCTION, DeclKind.METHOD}:
        # Function pointer returns wrap the declarator, e.g. void (*f(int a))(int).
        return declare(decl.return_.spelling, result)
    return result


def _generate_body(decl: DeclInfo) -> str:
    call = f'{MOCK_SUPPORT}.actualCall("{decl.qualified_name}")'
    if decl.has_object():
        call += ".onObject(this)"
    for each in decl.arguments:
        call += _generate_parameter_call(each)

    if decl.is_void():
        return call + ";"
    return_ = decl.return_
    call += f".return{return_.category.registry_name}Value()"
    return "return " + return_.ret_prefix + call + return_.ret_suffix + ";"


def _generate_parameter_call(arg: ClassifiedArgument) -> str:
    if arg.is_skipped():
        return ""
    name = f'"{arg.name}"'
    expr = arg.get_mock_expr()
    category = arg.category
    if category == MockedType.INPUT_OF_TYPE:
        return f'.withParameterOfType("{arg.exposed_type}", {name}, {expr})'
    if category == MockedType.OUTPUT_OF_TYPE:
        return f'.withOutputParameterOfType("{arg.exposed_type}", {name}, {expr})'
    if category in {MockedType.MEMORY_BUFFER, MockedType.POD}:
        return f".withMemoryBufferParameter({name}, {expr}, {arg.size_expr})"
    if category == MockedType.OUTPUT:
        return f".withOutputParameter({name}, {expr})"
    return f".with{category.registry_name}Parameter({name}, {expr})"
