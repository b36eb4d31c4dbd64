# SPDX-FileCopyrightText: 2021 Malte Kliemann, Ole Kliemann
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""The main generator driver.

Example:

```python
parser = Parser()
if parser.parse("foo.h", Config(), False, None, [], sys.stderr):
    with open("foo_mock.cpp", "w") as f:
        parser.generate_mock(f)
```
"""

from __future__ import annotations

import os
import sys
import warnings
from typing import Iterable, Iterator, Optional, TextIO

from clang.cindex import CursorKind

from cppumockgen import expectation
from cppumockgen import function
from cppumockgen import mock
from cppumockgen import output
from cppumockgen import translator
from cppumockgen import utils
from cppumockgen.classifier import Classifier
from cppumockgen.config import Config
from cppumockgen.types import DeclInfo

# Cursors whose children are searched for function declarations.
CONTAINER_CURSORS = {
    CursorKind.NAMESPACE,
    CursorKind.CLASS_DECL,
    CursorKind.STRUCT_DECL,
    CursorKind.LINKAGE_SPEC,
    CursorKind.UNEXPOSED_DECL,
}

NO_MOCKABLE_FUNCTION = "The input file does not contain any mockable function."


def collect_declarations(
    root: translator.Node, config: Config, classifier: Classifier
) -> Iterator[DeclInfo]:
    """Yield the mockable declarations under ``root`` in source order.

    Raises:
        utils.CppUMockGenRuntimeError:
            If a parameter or return type is not supported
    """
    for each in root.get_children():
        kind = each.cursor.kind
        if kind in function.FUNCTION_CURSORS:
            if function.is_mockable(each):
                yield function.from_node(each, config, classifier)
        elif kind in CONTAINER_CURSORS:
            yield from collect_declarations(each, config, classifier)


class Parser:
    """Parse a C/C++ header and generate mocks and expectations for the
    functions it declares."""

    def __init__(self) -> None:
        self._input_path = ""
        self._interpret_as_cpp = False
        self._decls: list[DeclInfo] = []

    @property
    def declarations(self) -> list[DeclInfo]:
        return self._decls

    def parse(
        self,
        input_path: str,
        config: Config,
        interpret_as_cpp: bool,
        language_standard: Optional[str],
        include_paths: Iterable[str],
        error: TextIO = sys.stderr,
    ) -> bool:
        """Parse ``input_path`` and collect its mockable declarations.

        Args:
            input_path: The header to parse
            config: Holds the type overrides
            interpret_as_cpp: Parse the input as C++ instead of C
            language_standard: Passed to clang as ``-std``, if specified
            include_paths: Additional include paths
            error: The stream which diagnostics are written to

        Returns:
            ``True`` if the input was parsed successfully and contains
            at least one mockable declaration
        """
        self._input_path = input_path
        self._interpret_as_cpp = interpret_as_cpp
        self._decls = []

        if not os.path.isfile(input_path):
            error.write(f"INPUT ERROR: Input file '{input_path}' does not exist.\n")
            return False

        flags = translator.get_compiler_flags(
            interpret_as_cpp, language_standard, include_paths
        )
        root, diagnostics = translator.translate_file(input_path, flags)

        errors = 0
        for each in diagnostics:
            if each.is_error:
                errors += 1
                error.write(f"PARSE ERROR: {each.text}\n")
            else:
                error.write(f"PARSE WARNING: {each.text}\n")
        if errors:
            return False

        classifier = Classifier(config.use_underlying_typedef)
        try:
            self._decls = list(collect_declarations(root, config, classifier))
        except utils.CppUMockGenRuntimeError as e:
            error.write(f"PARSE ERROR: {e}\n")
            return False

        if not self._decls:
            error.write(f"PARSE ERROR: {NO_MOCKABLE_FUNCTION}\n")
            return False
        return True

    def generate_mock(
        self,
        out: TextIO,
        gen_opts: str = "",
        base_dir: Optional[str] = None,
        user_code: str = "",
    ) -> None:
        """Write the mock definitions to ``out``.

        ``user_code`` is placed in the user code section after the
        includes.
        """
        out.write(output.generate_heading(gen_opts))
        out.write(
            output.generate_mock_includes(
                self._input_path, self._interpret_as_cpp, base_dir
            )
        )
        out.write(output.generate_user_code_section(user_code))
        for each in self._decls:
            out.write(mock.generate_mock(each))
            out.write("\n")

    def generate_expectation_header(
        self, out: TextIO, gen_opts: str = "", base_dir: Optional[str] = None
    ) -> None:
        """Write the declarations of the expectation helpers to ``out``."""
        out.write(output.generate_heading(gen_opts))
        out.write(
            output.generate_expectation_header_includes(
                self._input_path, self._interpret_as_cpp, base_dir
            )
        )
        for each in self._decls:
            out.write(expectation.generate_prototype(each))
            out.write("\n")

    def generate_expectation_impl(
        self, out: TextIO, gen_opts: str = "", header_path: str = ""
    ) -> None:
        """Write the definitions of the expectation helpers to ``out``.

        Args:
            out: The output stream
            gen_opts: The generation options echoed in the heading
            header_path: The path of the expectation header
        """
        out.write(output.generate_heading(gen_opts))
        out.write(output.generate_expectation_impl_includes(header_path))
        for each in self._decls:
            out.write(expectation.generate_implementation(each))
            out.write("\n")


def generate_mock(
    input_path: str,
    config: Config,
    interpret_as_cpp: bool,
    language_standard: Optional[str],
    include_paths: Iterable[str],
    out: TextIO,
    error: TextIO = sys.stderr,
) -> bool:
    """Parse ``input_path`` and write its mocks to ``out``.

    Deprecated: Use ``Parser.parse`` followed by ``Parser.generate_mock``.
    """
    warnings.warn(
        "generate_mock() is deprecated; use Parser.parse() and Parser.generate_mock()",
        DeprecationWarning,
        stacklevel=2,
    )
    parser = Parser()
    if not parser.parse(
        input_path, config, interpret_as_cpp, language_standard, include_paths, error
    ):
        return False
    parser.generate_mock(out)
    return True
