# SPDX-FileCopyrightText: 2021 Malte Kliemann, Ole Kliemann
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Read back files written by an earlier run.

Two things survive a regeneration: the user code section of the mock
file, which is copied into the new file, and the generation options
echoed in the heading, which ``--regen`` uses instead of the options on
the command line.

```cpp
// CPPUMOCKGEN_USER_CODE_BEGIN
#include "helpers.h"
// CPPUMOCKGEN_USER_CODE_END
```

The markers may be written as ``//`` or ``/*`` comments. A section
without end marker is discarded.
"""

from __future__ import annotations

import dataclasses
import re
from typing import Iterable, Optional

from cppumockgen import utils

USER_CODE_BEGIN = "CPPUMOCKGEN_USER_CODE_BEGIN"
USER_CODE_END = "CPPUMOCKGEN_USER_CODE_END"
GENERATION_OPTIONS_LABEL = "Generation options:"

_USER_CODE_BEGIN = re.compile(r"(?://|/\*)\s*" + USER_CODE_BEGIN)
_USER_CODE_END = re.compile(r"(?://|/\*)\s*" + USER_CODE_END)
_GENERATION_OPTIONS = re.compile(
    r"^\s*\*\s*" + re.escape(GENERATION_OPTIONS_LABEL) + r"[ \t]*(.*?)\s*$"
)


@dataclasses.dataclass
class OutputFile:
    """For the contents of a previously generated file.

    ``gen_opts`` is ``None`` if the heading has no generation options.
    """

    user_code: str = ""
    gen_opts: Optional[str] = None


def parse(lines: Iterable[str]) -> OutputFile:
    result = OutputFile()
    capture = False
    user_code = []
    for line in lines:
        line = line.rstrip("\r\n")
        if _USER_CODE_BEGIN.search(line):
            capture = True
        elif _USER_CODE_END.search(line):
            capture = False
        elif capture:
            user_code.append(line + "\n")
        elif result.gen_opts is None:
            match = _GENERATION_OPTIONS.match(line)
            if match is not None:
                result.gen_opts = match.group(1)
    if not capture:
        result.user_code = "".join(user_code)
    return result


def parse_file(path: str) -> OutputFile:
    """Parse the file at ``path``; a missing file yields an empty result.

    Raises:
        utils.CppUMockGenRuntimeError: If the file exists but can't be read
    """
    try:
        with open(path, "r") as f:
            return parse(f)
    except FileNotFoundError:
        return OutputFile()
    except IOError as e:
        raise utils.CppUMockGenRuntimeError(
            f"Error reading output file '{path}': {e.strerror}"
        )
