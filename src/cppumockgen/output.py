# SPDX-FileCopyrightText: 2021 Malte Kliemann, Ole Kliemann
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Headings and include directives of the generated files."""

from __future__ import annotations

import os
from typing import Optional

from cppumockgen import outputfile
from cppumockgen import utils

TOOL_NAME = "CppUMockGen"
MOCK_SUPPORT_INCLUDE_PATH = "CppUTestExt/MockSupport.h"
EXPECTATION_INCLUDE_PATH = "CppUMockGen.hpp"


def generate_heading(gen_opts: str = "") -> str:
    """Generate the auto-generated banner.

    Args:
        gen_opts: The generation options echoed in the banner; omitted if empty
    """
    result = "/*\n"
    result += f" * This file has been auto-generated by {TOOL_NAME} v{utils.VERSION}.\n"
    result += " *\n"
    result += " * Contents will NOT be preserved if it is regenerated!!!\n"
    if gen_opts:
        result += " *\n"
        result += f" * {outputfile.GENERATION_OPTIONS_LABEL} {gen_opts}\n"
    result += " */\n\n"
    return result


def _include_quotes(path: str) -> str:
    return f'#include "{path}"\n'


def _include_angled_brackets(path: str) -> str:
    return f"#include <{path}>\n"


def get_include_path(input_path: str, base_dir: Optional[str] = None) -> str:
    """Return the path used to include ``input_path``.

    The path is relative to ``base_dir`` if specified; otherwise, only
    the file name is used.
    """
    if base_dir:
        relative = os.path.relpath(os.path.abspath(input_path), os.path.abspath(base_dir))
        return relative.replace(os.sep, "/")
    return os.path.basename(input_path)


def generate_input_include(
    input_path: str, interpret_as_cpp: bool, base_dir: Optional[str] = None
) -> str:
    """Include the input file, wrapped in ``extern "C"`` for C input."""
    include = _include_quotes(get_include_path(input_path, base_dir))
    if interpret_as_cpp:
        return include
    return 'extern "C" {\n' + include + "}\n"


def generate_mock_includes(
    input_path: str, interpret_as_cpp: bool, base_dir: Optional[str] = None
) -> str:
    result = generate_input_include(input_path, interpret_as_cpp, base_dir)
    result += "\n"
    result += _include_angled_brackets(MOCK_SUPPORT_INCLUDE_PATH)
    result += "\n"
    return result


def generate_user_code_section(user_code: str = "") -> str:
    """Wrap ``user_code`` in the markers which preserve it on regeneration."""
    result = f"// {outputfile.USER_CODE_BEGIN}\n"
    result += user_code
    result += f"// {outputfile.USER_CODE_END}\n"
    result += "\n"
    return result


def generate_expectation_header_includes(
    input_path: str, interpret_as_cpp: bool, base_dir: Optional[str] = None
) -> str:
    result = _include_angled_brackets(EXPECTATION_INCLUDE_PATH)
    result += "\n"
    result += generate_input_include(input_path, interpret_as_cpp, base_dir)
    result += "\n"
    result += _include_angled_brackets(MOCK_SUPPORT_INCLUDE_PATH)
    result += "\n"
    return result


def generate_expectation_impl_includes(header_path: str) -> str:
    return _include_quotes(os.path.basename(header_path)) + "\n"
