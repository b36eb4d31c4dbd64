# SPDX-FileCopyrightText: 2021 Malte Kliemann, Ole Kliemann
#
# SPDX-License-Identifier: GPL-3.0-or-later

VERSION = "0.6.0"
PROGRAM_NAME = "cppumockgen"
INDENT_WIDTH = 4


def indent(value: str, depth: int = 1, width: int = INDENT_WIDTH) -> str:
    """Indent a string according to depth.

    Args:
        value: The string to indent
        depth: The depth of the string (number of tabs/indents)
        width: Indent width
    """
    result = value
    result = depth * width * " " + result
    result = result.replace("\n", "\n" + depth * width * " ")
    return result


class CppUMockGenRuntimeError(Exception):
    pass
