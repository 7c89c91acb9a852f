# Copyright 2026 Google LLC
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


"""Shared leaf-level types used across cratelicense.

This module must have **zero** imports from other ``cratelicense``
modules to avoid circular-import chains.  It is safe to import
from any module in the project.
"""

from __future__ import annotations

import enum

__all__ = [
    'DependencyKind',
]


class DependencyKind(str, enum.Enum):
    """Role a dependency edge plays for its dependent package."""

    NORMAL = 'normal'
    DEVELOPMENT = 'dev'
    BUILD = 'build'

    @classmethod
    def from_cargo(cls, kind: str | None) -> DependencyKind:
        """Map a ``dep_kinds[].kind`` value from ``cargo metadata``.

        Cargo reports normal dependencies as ``null``.

        Raises:
            ValueError: If *kind* is not a known dependency kind.
        """
        if kind is None or kind == 'normal':
            return cls.NORMAL
        return cls(kind)

