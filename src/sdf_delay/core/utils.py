#!/usr/bin/env python3
#
# Copyright 2020-2022 F4PGA Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Utility functions for SDF escaping and timescale conversion."""

from __future__ import annotations

import re

_IDENT_CHAR = re.compile(r"[A-Za-z0-9_]")

_UNIT_SECONDS = {
    "us": 1e-6,
    "ns": 1e-9,
    "ps": 1e-12,
}


def unescape(text: str) -> str:
    r"""Drop SDF escape backslashes, keeping each escaped character.

    >>> unescape(r'a\.b')
    'a.b'

    >>> unescape(r'bus\[3\]')
    'bus[3]'

    >>> unescape(r'back\\slash')
    'back\\slash'

    >>> unescape('plain')
    'plain'
    """
    if "\\" not in text:
        return text
    out = []
    chars = iter(text)
    for c in chars:
        if c == "\\":
            out.append(next(chars, ""))
        else:
            out.append(c)
    return "".join(out)


def escape_identifier(name: str) -> str:
    r"""Escape every character that cannot appear bare in an SDF identifier.

    >>> escape_identifier('a.b')
    'a\\.b'

    >>> escape_identifier('u_1')
    'u_1'

    >>> escape_identifier('gen[0]')
    'gen\\[0\\]'
    """
    return "".join(c if _IDENT_CHAR.match(c) else "\\" + c for c in name)


def get_scale_seconds(magnitude: float, unit: str) -> float:
    """Convert an SDF timescale to a floating point number of seconds.

    >>> get_scale_seconds(1, 'ns')
    1e-09

    >>> get_scale_seconds(1.0, 'ps')
    1e-12

    >>> round(get_scale_seconds(100.0, 'us'), 9)
    0.0001

    >>> try:
    ...     get_scale_seconds(1, 's')
    ... except ValueError as e:
    ...     print(e)
    Invalid SDF timescale unit 's'
    """
    try:
        scale = _UNIT_SECONDS[unit]
    except KeyError:
        raise ValueError(f"Invalid SDF timescale unit {unit!r}") from None
    return magnitude * scale
