# SPDX-FileCopyrightText: 2021 Malte Kliemann, Ole Kliemann
#
# SPDX-License-Identifier: GPL-3.0-or-later

import os

import clang.cindex
import pytest

from cppumockgen import translator


@pytest.fixture(scope="module")
def set_library_file():
    path = os.environ.get("CLANG_LIBRARY_FILE", None)
    if path is not None:
        translator.set_library_file(path)
    try:
        clang.cindex.conf.lib
    except clang.cindex.LibclangError as e:
        pytest.skip(f"libclang not available: {e}")
