# SPDX-FileCopyrightText: 2021 Malte Kliemann, Ole Kliemann
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""libclang wrapper module.

This module translates a C/C++ source into the corresponding AST using
``translate`` or ``translate_file``. Unless libclang is found in the
default locations, you must set the path to the
``libclang.dll/.so/.dylib`` _file_ using ``set_library_file`` before
translating.
"""

from __future__ import annotations

import dataclasses
from typing import Iterable, Optional

import clang.cindex

from cppumockgen import utils

DIAGNOSTIC_FORMAT_OPTIONS = (
    clang.cindex.Diagnostic.DisplaySourceLocation
    | clang.cindex.Diagnostic.DisplayColumn
    | clang.cindex.Diagnostic.DisplayOption
)

CPP_EXTENSIONS = {"hpp", "hxx", "hh"}


def set_library_file(file: str) -> None:
    """Args:
    file: path to libclang dynamic library.

    Has no effect if libclang is already loaded.
    """
    if clang.cindex.Config.loaded:
        return
    clang.cindex.Config.set_library_file(file)


@dataclasses.dataclass
class Diagnostic:
    """For parser diagnostics with a severity of warning or higher."""

    text: str
    is_error: bool


class Node:
    """Wrapper class for ``clang.cindex.Cursor`` which tracks file
    membership."""

    def __init__(self, cursor: clang.cindex.Cursor, path: str) -> None:
        """Args:
        cursor: The wrapper cursor
        path: The file that the cursor belongs to
        """
        self._cursor = cursor
        self._path = path

    @property
    def cursor(self) -> clang.cindex.Cursor:
        return self._cursor

    @property
    def path(self) -> str:
        return self._path

    def get_children(self) -> list[Node]:
        """Get all children from the same file."""
        return [
            Node(each, self._path)
            for each in self._cursor.get_children()
            if str(each.location.file) == self._path
        ]


def is_cpp_file(path: str) -> bool:
    """Check if ``path`` has the extension of a C++ header."""
    _, _, extension = path.rpartition(".")
    return extension.lower() in CPP_EXTENSIONS


def get_compiler_flags(
    interpret_as_cpp: bool,
    language_standard: Optional[str] = None,
    include_paths: Iterable[str] = (),
) -> list[str]:
    """Assemble the compiler flags for parsing a C or C++ header."""
    result = ["-x", "c++" if interpret_as_cpp else "c"]
    if language_standard:
        result.append("-std=" + language_standard)
    for each in include_paths:
        result.append("-I" + each)
    return result


def _get_diagnostics(tu: clang.cindex.TranslationUnit) -> list[Diagnostic]:
    result = []
    for each in tu.diagnostics:
        if each.severity < clang.cindex.Diagnostic.Warning:
            continue
        result.append(
            Diagnostic(
                text=each.format(DIAGNOSTIC_FORMAT_OPTIONS),
                is_error=each.severity >= clang.cindex.Diagnostic.Error,
            )
        )
    return result


def translate_file(
    path: str, compiler_flags: Optional[list[str]] = None
) -> tuple[Node, list[Diagnostic]]:
    """Translate the content of ``path`` into its AST.

    Args:
        path: The path to the file
        compiler_flags: A list of compiler flags used for parsing

    Returns:
        The root node and the diagnostics reported by clang

    Raises:
        clang.cindex.LibclangError:
            If the libclang path is not set or not found (see
            ``set_library_file``)
        utils.CppUMockGenRuntimeError:
            If clang fails to load the translation unit
    """
    if compiler_flags is None:
        compiler_flags = []

    index = clang.cindex.Index.create()
    try:
        tu = index.parse(path, compiler_flags)
    except clang.cindex.TranslationUnitLoadError as e:
        raise utils.CppUMockGenRuntimeError(f"{path}: {e}")
    return Node(tu.cursor, path), _get_diagnostics(tu)


def translate(
    path: str, source: str, compiler_flags: Optional[list[str]] = None
) -> tuple[Node, list[Diagnostic]]:
    """Translate a string with C/C++ code into its AST.

    Args:
        path: The path of the parsed file
        source: The C/C++ source
        compiler_flags: A list of compiler flags used for parsing

    Raises:
        clang.cindex.LibclangError:
            If the libclang path is not set or not found (see
            ``set_library_file``)
        utils.CppUMockGenRuntimeError:
            If ``path`` is empty or clang fails to load the translation
            unit

    Note: The ``path`` parameter is required due to ``clang`` details.
    It need not be a real path, but it must be non-empty. Choosing a
    unique name is useful, as it is used in clang's diagnostics.
    """
    if not path:
        raise utils.CppUMockGenRuntimeError(
            "translate failed: Parameter 'path' is empty. Expected non-empty string"
        )

    if compiler_flags is None:
        compiler_flags = []

    index = clang.cindex.Index.create()
    try:
        tu = index.parse(path, compiler_flags, unsaved_files=[(path, source)])
    except clang.cindex.TranslationUnitLoadError as e:
        raise utils.CppUMockGenRuntimeError(str(e))
    return Node(tu.cursor, path), _get_diagnostics(tu)
