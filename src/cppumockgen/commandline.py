# SPDX-FileCopyrightText: 2021 Malte Kliemann, Ole Kliemann
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Commandline client for cppumockgen."""

from __future__ import annotations

import argparse
import os
import shlex
import sys
import textwrap
from typing import Optional

from cppumockgen import output
from cppumockgen import outputfile
from cppumockgen import translator
from cppumockgen import utils
from cppumockgen.config import Config
from cppumockgen.parser import Parser

EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1
EXIT_PARSE_ERROR = 2

STDOUT_SENTINEL = "@"
CONFIG_FILE_OPTIONS = {"-f", "--config-file"}
_QUOTED_CHARS = set(" \t=&|,;^%@$!#*?(){}[]<>\\")

_parser = argparse.ArgumentParser(
    prog=utils.PROGRAM_NAME,
    description="Generate CppUTest mocks and expectations from a C/C++ header",
    formatter_class=argparse.RawTextHelpFormatter,
    epilog=textwrap.dedent(
        """
At least one of --mock-output and --expect-output is required. If the
output path is empty or a directory, the file name is derived from the
input file (<input>_mock.cpp, <input>_expect.hpp and <input>_expect.cpp).
Pass @ as output path to print to stdout.

Headers with the extensions .hpp, .hxx and .hh are parsed as C++.

Override options have the form <key>=<value>, where <key> is one of
<function>#<parameter>, <function>@, #<type> or @<type>, and <value> is

    <Type>[:<ExposedType>[<<ArgType>]][~<Expression>][/<SizeExpression>]

The $ character in <Expression> and <SizeExpression> stands for the
parameter or return expression.

The clang-library-file parameter may be specified using the command
line interface, or by setting the CLANG_LIBRARY_FILE environment
variable.
        """
    ),
)
_parser.add_argument("input_positional", nargs="?", metavar="input", help="input file")
_parser.add_argument("--input", "-i", help="input file")
_parser.add_argument(
    "--mock-output", "-m", nargs="?", const="", help="mock output directory or file"
)
_parser.add_argument(
    "--expect-output",
    "-e",
    nargs="?",
    const="",
    help="expectation output directory or file",
)
_parser.add_argument(
    "--cpp", "-x", action="store_true", help="force interpretation of the input as C++"
)
_parser.add_argument("--std", "-s", help="language standard (e.g. c++14, gnu99)")
_parser.add_argument(
    "--underlying-typedef",
    "-u",
    action="store_true",
    help="use the underlying type of typedefs for InputOfType/OutputOfType",
)
_parser.add_argument(
    "--include-path", "-I", action="append", default=[], help="include path"
)
_parser.add_argument(
    "--base-directory", "-B", help="base directory path for the input include"
)
_parser.add_argument(
    "--type-override", "-t", action="append", default=[], help="override option"
)
_parser.add_argument(
    "--config-file", "-f", action="append", default=[], help="file with further options"
)
_parser.add_argument(
    "--regen",
    "-r",
    action="store_true",
    help="use the generation options of the previously generated output file",
)
_parser.add_argument(
    "--clang-library-file",
    "-l",
    default=os.environ.get("CLANG_LIBRARY_FILE", None),
    help="path to the libclang .dll/.so/.dylib",
)
_parser.add_argument(
    "--version",
    "-v",
    action="version",
    version=f"{output.TOOL_NAME} v{utils.VERSION}",
)


def expand_config_files(args: list[str], seen: Optional[set[str]] = None) -> list[str]:
    """Replace config file options by the options contained in the
    files.

    Config files are split like a shell command line and may contain
    further config file options. Every file is processed only once.

    Raises:
        utils.CppUMockGenRuntimeError: If a config file can't be read
    """
    if seen is None:
        seen = set()
    result = []
    it = iter(args)
    for each in it:
        if each in CONFIG_FILE_OPTIONS:
            path = next(it, None)
            if path is None:
                # Leave the error message to argparse.
                result.append(each)
                continue
        elif each.startswith("--config-file="):
            path = each[len("--config-file=") :]
        else:
            result.append(each)
            continue

        key = os.path.abspath(path)
        if key in seen:
            continue
        seen.add(key)
        try:
            with open(path, "r") as f:
                content = f.read()
        except IOError as e:
            raise utils.CppUMockGenRuntimeError(
                f"Error opening config file '{path}': {e.strerror}"
            )
        try:
            tokens = shlex.split(content, comments=True)
        except ValueError as e:
            raise utils.CppUMockGenRuntimeError(
                f"Error parsing config file '{path}': {e}"
            )
        result += expand_config_files(tokens, seen)
    return result


def parse_args(args: list[str]) -> argparse.Namespace:
    args = _parser.parse_args(expand_config_files(args))

    if args.input is None:
        args.input = args.input_positional

    include = os.environ.get("CPPUMOCKGEN_INCLUDE", None)
    if include is not None:
        args.include_path.append(include)

    return args


def _quote(value: str) -> str:
    if not _QUOTED_CHARS.intersection(value):
        return value
    return '"' + value + '"'


def get_generation_options(args: argparse.Namespace) -> str:
    """Return the options which affect the generated code, as passed on
    the command line."""
    result = []
    if args.cpp:
        result.append("-x")
    if args.std:
        result.append(f"-s {_quote(args.std)}")
    if args.underlying_typedef:
        result.append("-u")
    for each in args.type_override:
        result.append(f"-t {_quote(each)}")
    return " ".join(result)


def get_output_path(path: str, input_path: str, suffix: str) -> str:
    """Derive the output path from the input file name if ``path`` is
    empty or a directory."""
    base, _ = os.path.splitext(os.path.basename(input_path))
    if not path:
        return base + suffix
    if os.path.isdir(path):
        return os.path.join(path, base + suffix)
    return path


def _get_output_paths(
    args: argparse.Namespace,
) -> tuple[Optional[str], Optional[str], Optional[str]]:
    """Return the paths of the mock file, the expectation header and the
    expectation implementation; ``None`` if the file is not requested."""
    mock_path = header_path = impl_path = None
    if args.mock_output is not None:
        mock_path = args.mock_output
        if mock_path != STDOUT_SENTINEL:
            mock_path = get_output_path(mock_path, args.input, "_mock.cpp")
    if args.expect_output is not None:
        header_path = impl_path = args.expect_output
        if args.expect_output != STDOUT_SENTINEL:
            base, _ = os.path.splitext(
                get_output_path(args.expect_output, args.input, "_expect.hpp")
            )
            header_path = base + ".hpp"
            impl_path = base + ".cpp"
    return mock_path, header_path, impl_path


def load_generation_options(
    args: argparse.Namespace, paths: list[Optional[str]]
) -> argparse.Namespace:
    """Replace the generation options of ``args`` by the options echoed
    in the first existing file of ``paths``.

    Raises:
        utils.CppUMockGenRuntimeError:
            If none of the files exists or the options can't be parsed
    """
    for each in paths:
        if each is not None and each != STDOUT_SENTINEL and os.path.isfile(each):
            gen_opts = outputfile.parse_file(each).gen_opts or ""
            break
    else:
        raise utils.CppUMockGenRuntimeError(
            "Regeneration requested, but no previously generated output file exists"
        )
    try:
        previous = _parser.parse_args(shlex.split(gen_opts))
    except ValueError as e:
        raise utils.CppUMockGenRuntimeError(
            f"Error parsing generation options '{gen_opts}': {e}"
        )
    result = argparse.Namespace(**vars(args))
    result.cpp = previous.cpp
    result.std = previous.std
    result.underlying_typedef = previous.underlying_typedef
    result.type_override = previous.type_override
    return result


def _write(path: str, generate) -> None:
    if path == STDOUT_SENTINEL:
        generate(sys.stdout)
        return
    try:
        with open(path, "w") as f:
            generate(f)
    except IOError as e:
        raise utils.CppUMockGenRuntimeError(str(e))


def generate(args: argparse.Namespace) -> int:
    """Generate the requested files and save them on disk.

    Returns:
        The exit code

    Raises:
        utils.CppUMockGenRuntimeError:
            If the options are invalid or reading or writing any of the
            files fails
    """
    if not args.input:
        raise utils.CppUMockGenRuntimeError("No input file specified")
    if args.mock_output is None and args.expect_output is None:
        raise utils.CppUMockGenRuntimeError(
            "At least the mock generation option (-m) or the expectation"
            " generation option (-e) must be specified"
        )

    mock_path, header_path, impl_path = _get_output_paths(args)
    if args.regen:
        args = load_generation_options(args, [mock_path, header_path])

    config = Config(args.underlying_typedef, args.type_override)
    interpret_as_cpp = args.cpp or translator.is_cpp_file(args.input)

    if args.clang_library_file:
        translator.set_library_file(args.clang_library_file)

    parser = Parser()
    if not parser.parse(
        args.input,
        config,
        interpret_as_cpp,
        args.std,
        args.include_path,
        sys.stderr,
    ):
        return EXIT_PARSE_ERROR

    gen_opts = get_generation_options(args)

    if mock_path is not None:
        user_code = ""
        if mock_path != STDOUT_SENTINEL:
            user_code = outputfile.parse_file(mock_path).user_code
        _write(
            mock_path,
            lambda f: parser.generate_mock(f, gen_opts, args.base_directory, user_code),
        )

    if header_path is not None:
        _write(
            header_path,
            lambda f: parser.generate_expectation_header(
                f, gen_opts, args.base_directory
            ),
        )
        _write(
            impl_path,
            lambda f: parser.generate_expectation_impl(f, gen_opts, header_path),
        )

    return EXIT_SUCCESS


# This method is the entry point of the cppumockgen script.
def main() -> None:
    try:
        args = parse_args(sys.argv[1:])
        code = generate(args)
    except utils.CppUMockGenRuntimeError as e:
        print(f"{utils.PROGRAM_NAME}: error: {e}\n", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)
    sys.exit(code)
