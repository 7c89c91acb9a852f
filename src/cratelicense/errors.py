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


"""Error taxonomy for cratelicense.

Only two failures are fatal to a report built from well-formed input:
:class:`MissingResolveData` and :class:`NoRootPackage`. The remaining
fatal errors come from the I/O edges of the tool (running ``cargo``,
reading config). Malformed license expressions never escape the
normalizer; see :mod:`cratelicense.normalize`.
"""

from __future__ import annotations

__all__ = [
    'CargoMetadataError',
    'ConfigError',
    'CrateLicenseError',
    'MissingResolveData',
    'NoRootPackage',
]


class CrateLicenseError(Exception):
    """Base class for errors that abort a license report.

    Attributes:
        hint: Optional actionable suggestion shown under the message.
    """

    def __init__(self, message: str, *, hint: str = '') -> None:
        """Initialize with a message and an optional hint."""
        super().__init__(message)
        self.hint = hint


class MissingResolveData(CrateLicenseError):
    """The metadata document has no ``resolve`` section.

    Happens when ``cargo metadata`` was run with ``--no-deps``.
    """

    def __init__(self) -> None:
        """Initialize with the standard message."""
        super().__init__(
            'missing `resolve` in `cargo metadata` output',
            hint='Run `cargo metadata --format-version 1` without `--no-deps`.',
        )


class NoRootPackage(CrateLicenseError):
    """Neither a root package nor any workspace member was found."""

    def __init__(self) -> None:
        """Initialize with the standard message."""
        super().__init__(
            'no root package and no workspace members in `cargo metadata` output',
            hint='Point --manifest-path at a Cargo.toml that declares a package or a workspace.',
        )


class CargoMetadataError(CrateLicenseError):
    """``cargo metadata`` could not be run or returned unusable output.

    Attributes:
        stderr: Captured standard error of the cargo process, if any.
    """

    def __init__(self, message: str, *, stderr: str = '', hint: str = '') -> None:
        """Initialize with a message, cargo's stderr and an optional hint."""
        super().__init__(message, hint=hint)
        self.stderr = stderr


class ConfigError(CrateLicenseError):
    """The ``cratelicense.toml`` file is malformed."""
