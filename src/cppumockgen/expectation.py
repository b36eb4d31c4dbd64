# SPDX-FileCopyrightText: 2021 Malte Kliemann, Ole Kliemann
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Generate expectation helper prototypes and implementations.

For every mocked declaration ``ns1::Class1::method1``, two helpers are
declared in the namespace ``expect::ns1$::Class1$``:

```cpp
MockExpectedCall& method1(<args>);
MockExpectedCall& method1(unsigned int __numCalls__, <args>);
```

The first expects one call, the second expects ``__numCalls__`` calls.
Input parameters are wrapped in ``CppUMockGen::Parameter`` so that the
user may pass ``IgnoreParameter::YES`` instead of a value.
"""

from __future__ import annotations

import collections

from cppumockgen import utils
from cppumockgen.types import ClassifiedArgument, DeclInfo, DeclKind, MockedType, declare

NAMESPACE = "expect"
SCOPE_SUFFIX = "$"
PARAMETER_TEMPLATE = "CppUMockGen::Parameter"
IGNORE_DEFAULT = "::CppUMockGen::IgnoreParameter::YES"
EXPECTED_CALL_TYPE = "MockExpectedCall&"
NUM_CALLS = "__numCalls__"
OBJECT = "__object__"
RETURN = "__return__"
EXPECTED_CALL = "__expectedCall__"
IGNORE_OTHER_PARAMS = "__ignoreOtherParams__"
SIZEOF_PREFIX = "__sizeof_"

"""We're using an ``OrderedDict`` to ensure that for example ``<=>`` is
replaced _before_ ``<=``, so that ``operator<=>`` becomes
``operatorSpaceShip`` instead of ``operatorLesserOrEqualGreater``.
"""
_OPERATOR_SYMBOLS = collections.OrderedDict(
    [
        ("<=>", "SpaceShip"),
        ("->*", "PointerToMember"),
        ("==", "Equal"),
        ("!=", "NotEqual"),
        ("<=", "LesserOrEqual"),
        (">=", "GreaterOrEqual"),
        ("<<", "StreamLeft"),
        (">>", "StreamRight"),
        ("&&", "And"),
        ("||", "Or"),
        ("++", "Increment"),
        ("--", "Decrement"),
        ("->", "Arrow"),
        ("()", "Call"),
        ("[]", "Brackets"),
        ("+", "Plus"),
        ("-", "Minus"),
        ("*", "Ast"),
        ("/", "Div"),
        ("%", "Modulo"),
        ("^", "Caret"),
        ("&", "Amp"),
        ("|", "Pipe"),
        ("~", "Tilde"),
        ("!", "Not"),
        ("=", "Assign"),
        ("<", "Lesser"),
        (">", "Greater"),
        (",", "Comma"),
    ]
)


def get_helper_name(decl: DeclInfo) -> str:
    """Return the name of the expectation helpers of ``decl``."""
    scopes = decl.get_scopes()
    if decl.kind == DeclKind.CONSTRUCTOR:
        return scopes[-1] + SCOPE_SUFFIX + "ctor"
    if decl.kind == DeclKind.DESTRUCTOR:
        return scopes[-1] + SCOPE_SUFFIX + "dtor"
    result = decl.get_leaf_name()
    if result.startswith("operator"):
        for symbol, name in _OPERATOR_SYMBOLS.items():
            result = result.replace(symbol, name)
        result = result.replace(" ", "")
    return result


def _open_namespaces(decl: DeclInfo) -> str:
    scopes = [f"namespace {each}{SCOPE_SUFFIX} {{" for each in decl.get_scopes()]
    return " ".join([f"namespace {NAMESPACE} {{"] + scopes) + "\n"


def _close_namespaces(decl: DeclInfo) -> str:
    return " ".join("}" * (len(decl.get_scopes()) + 1)) + "\n"


def _get_parameters(decl: DeclInfo, is_prototype: bool) -> list[str]:
    result = []
    if decl.has_object():
        object_ = f"{PARAMETER_TEMPLATE}<const {decl.class_name}*> {OBJECT}"
        if is_prototype and decl.kind == DeclKind.DESTRUCTOR:
            object_ += " = " + IGNORE_DEFAULT
        result.append(object_)
    for each in decl.arguments:
        if each.is_skipped():
            continue
        if each.can_be_ignored():
            result.append(f"{PARAMETER_TEMPLATE}<{each.expect_type}> {each.name}")
        else:
            result.append(declare(each.expect_type, each.name))
        if each.has_size_param:
            result.append(f"size_t {SIZEOF_PREFIX}{each.name}")
    if not decl.is_void():
        result.append(declare(decl.return_.expect_type, RETURN))
    return result


def _get_parameter_names(decl: DeclInfo) -> list[str]:
    result = []
    if decl.has_object():
        result.append(OBJECT)
    for each in decl.arguments:
        if each.is_skipped():
            continue
        result.append(each.name)
        if each.has_size_param:
            result.append(SIZEOF_PREFIX + each.name)
    if not decl.is_void():
        result.append(RETURN)
    return result


def _get_signatures(decl: DeclInfo, is_prototype: bool) -> tuple[str, str]:
    name = get_helper_name(decl)
    params = _get_parameters(decl, is_prototype)
    single = f"{EXPECTED_CALL_TYPE} {name}({', '.join(params)})"
    multiple = (
        f"{EXPECTED_CALL_TYPE} {name}({', '.join([f'unsigned int {NUM_CALLS}'] + params)})"
    )
    return single, multiple


def generate_prototype(decl: DeclInfo) -> str:
    """Generate the declarations of the expectation helpers of ``decl``."""
    single, multiple = _get_signatures(decl, is_prototype=True)
    result = _open_namespaces(decl)
    result += single + ";\n"
    result += multiple + ";\n"
    result += _close_namespaces(decl)
    return result


def generate_implementation(decl: DeclInfo) -> str:
    """Generate the definitions of the expectation helpers of ``decl``."""
    single, multiple = _get_signatures(decl, is_prototype=False)
    name = get_helper_name(decl)
    delegate = f"return {name}({', '.join(['1'] + _get_parameter_names(decl))});"
    result = _open_namespaces(decl)
    result += single + "\n{\n" + utils.indent(delegate) + "\n}\n"
    result += multiple + "\n{\n" + utils.indent(_generate_body(decl)) + "\n}\n"
    result += _close_namespaces(decl)
    return result


def _generate_body(decl: DeclInfo) -> str:
    args = [each for each in decl.arguments if not each.is_skipped()]
    any_skipped = len(args) != len(decl.arguments)
    any_ignorable = any(each.can_be_ignored() for each in args)

    lines = []
    if any_ignorable and not any_skipped:
        lines.append(f"bool {IGNORE_OTHER_PARAMS} = false;")
    lines.append(
        f"{EXPECTED_CALL_TYPE} {EXPECTED_CALL} = "
        f'mock().expectNCalls({NUM_CALLS}, "{decl.qualified_name}");'
    )
    if decl.has_object():
        lines.append(
            f"if(!{OBJECT}.isIgnored()) {{ {EXPECTED_CALL}.onObject("
            f"const_cast<{decl.class_name}*>({OBJECT}.getValue())); }}"
        )
    for each in args:
        lines.append(_generate_argument(each, any_skipped))
    if not decl.is_void():
        lines.append(f"{EXPECTED_CALL}.andReturnValue({_get_return_expr(decl)});")
    if any_skipped:
        lines.append(f"{EXPECTED_CALL}.ignoreOtherParameters();")
    elif any_ignorable:
        lines.append(
            f"if({IGNORE_OTHER_PARAMS}) {{ {EXPECTED_CALL}.ignoreOtherParameters(); }}"
        )
    lines.append(f"return {EXPECTED_CALL};")
    return "\n".join(lines)


def _generate_argument(arg: ClassifiedArgument, any_skipped: bool) -> str:
    if not arg.can_be_ignored():
        return f"{EXPECTED_CALL}{_generate_parameter_call(arg, arg.name)};"
    call = f"{EXPECTED_CALL}{_generate_parameter_call(arg, arg.name + '.getValue()')};"
    if any_skipped:
        return f"if(!{arg.name}.isIgnored()) {{ {call} }}"
    return (
        f"if({arg.name}.isIgnored()) {{ {IGNORE_OTHER_PARAMS} = true; }}"
        f" else {{ {call} }}"
    )


def _generate_parameter_call(arg: ClassifiedArgument, value: str) -> str:
    name = f'"{arg.name}"'
    expr = arg.expect_prefix + value + arg.expect_suffix
    category = arg.category
    if arg.has_size_param:
        size = SIZEOF_PREFIX + arg.name
    else:
        size = f"sizeof(*{value})"
    if category == MockedType.INPUT_OF_TYPE:
        return f'.withParameterOfType("{arg.exposed_type}", {name}, {expr})'
    if category == MockedType.OUTPUT_OF_TYPE:
        return f'.withOutputParameterOfTypeReturning("{arg.exposed_type}", {name}, {expr})'
    if category in {MockedType.MEMORY_BUFFER, MockedType.POD}:
        return f".withMemoryBufferParameter({name}, {expr}, {size})"
    if category == MockedType.OUTPUT:
        return f".withOutputParameterReturning({name}, {expr}, {size})"
    return f".with{category.registry_name}Parameter({name}, {expr})"


def _get_return_expr(decl: DeclInfo) -> str:
    return_ = decl.return_
    result = RETURN
    if return_.is_by_ref:
        result = "&" + result
    if return_.is_function_pointer:
        result = f"reinterpret_cast<void*>({result})"
    elif return_.needs_cast and not return_.use_base_type:
        result = f"static_cast<{return_.category.base_type}>({result})"
    return result
