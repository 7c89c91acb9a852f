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


"""Tests for report rendering."""

from __future__ import annotations

import io
import json

import pytest
from cratelicense.details import DependencyDetails
from cratelicense.render import (
    TSV_FIELDS,
    format_grouped,
    format_per_line,
    group_by_license,
    should_use_color,
    to_gitlab,
    to_json,
    to_tsv,
)

_ROWS = [
    DependencyDetails('anyhow', '1.0.81', authors='David Tolnay <dtolnay@gmail.com>', license='Apache-2.0 OR MIT'),
    DependencyDetails('mystery', '0.0.1'),
    DependencyDetails('ring', '0.17.8', license='ISC AND MIT AND OpenSSL'),
    DependencyDetails('serde', '1.0.197', authors='Erick Tryzelaar|David Tolnay', license='Apache-2.0 OR MIT'),
]


# ── Human-readable ───────────────────────────────────────────────────


class TestGrouped:
    """Tests for the grouped listing."""

    def test_group_by_license(self) -> None:
        """Groups are keyed by license in sorted order; None becomes N/A."""
        groups = group_by_license(_ROWS)
        assert list(groups) == ['Apache-2.0 OR MIT', 'ISC AND MIT AND OpenSSL', 'N/A']
        assert [d.name for d in groups['Apache-2.0 OR MIT']] == ['anyhow', 'serde']

    def test_plain(self) -> None:
        """One line per license with a count."""
        assert format_grouped(_ROWS) == (
            'Apache-2.0 OR MIT (2): anyhow, serde\nISC AND MIT AND OpenSSL (1): ring\nN/A (1): mystery\n'
        )

    def test_authors(self) -> None:
        """With authors, names and authors get their own lines."""
        out = format_grouped(_ROWS[:1] + _ROWS[3:], authors=True)
        assert out == (
            'Apache-2.0 OR MIT (2)\nanyhow, serde\nby David Tolnay <dtolnay@gmail.com>, Erick Tryzelaar|David Tolnay\n'
        )

    def test_color(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Color mode emits ANSI escapes."""
        monkeypatch.setenv('TERM', 'xterm-256color')
        assert '\x1b[' in format_grouped(_ROWS, color=True)

    def test_no_color(self) -> None:
        """Plain mode emits none."""
        assert '\x1b[' not in format_grouped(_ROWS)


class TestPerLine:
    """Tests for the per-line listing."""

    def test_plain(self) -> None:
        """``name: version, "license",`` per crate."""
        out = format_per_line(_ROWS[:2])
        assert out == 'anyhow: 1.0.81, "Apache-2.0 OR MIT",\nmystery: 0.0.1, "N/A",\n'

    def test_authors(self) -> None:
        """Authors are appended after ``by``."""
        out = format_per_line(_ROWS[1:2], authors=True)
        assert out == 'mystery: 0.0.1, "N/A", by "N/A"\n'


# ── Machine-readable ─────────────────────────────────────────────────


class TestTsv:
    """Tests for TSV output."""

    def test_header_and_rows(self) -> None:
        """Header first; absent fields are empty cells."""
        lines = to_tsv(_ROWS[:2]).splitlines()
        assert lines[0].split('\t') == list(TSV_FIELDS)
        assert lines[2].split('\t') == ['mystery', '0.0.1', '', '', '', '', '']
        assert len(lines) == 3


class TestJson:
    """Tests for JSON output."""

    def test_nulls(self) -> None:
        """Absent fields are null, not N/A."""
        data = json.loads(to_json(_ROWS))
        assert [d['name'] for d in data] == ['anyhow', 'mystery', 'ring', 'serde']
        assert data[1]['license'] is None
        assert data[3]['authors'] == 'Erick Tryzelaar|David Tolnay'

    def test_empty(self) -> None:
        """No rows is an empty array."""
        assert json.loads(to_json([])) == []


class TestGitlab:
    """Tests for the GitLab license scanning report."""

    def test_report(self) -> None:
        """Top-level licenses are the distinct ids, sorted, with names and URLs."""
        report = json.loads(to_gitlab(_ROWS))
        assert report['version'] == '2.1'
        assert [lic['id'] for lic in report['licenses']] == ['Apache-2.0', 'ISC', 'MIT', 'OpenSSL']
        mit = next(lic for lic in report['licenses'] if lic['id'] == 'MIT')
        assert mit['name'] == 'MIT License'
        assert mit['url'] == 'https://spdx.org/licenses/MIT.html'
        deps = {d['name']: d for d in report['dependencies']}
        assert deps['serde']['licenses'] == ['Apache-2.0', 'MIT']
        assert deps['mystery']['licenses'] == []
        assert deps['ring']['package_manager'] == 'cargo'

    def test_unparseable_license_kept_whole(self) -> None:
        """A license that is not an expression is reported verbatim."""
        report = json.loads(to_gitlab([DependencyDetails('odd', '1.0.0', license='see LICENSE (custom)')]))
        assert report['dependencies'][0]['licenses'] == ['see LICENSE (custom)']


# ── Color detection ──────────────────────────────────────────────────


class TestShouldUseColor:
    """Tests for should_use_color."""

    def test_explicit(self) -> None:
        """always/never ignore the environment."""
        assert should_use_color('always') is True
        assert should_use_color('never') is False

    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """NO_COLOR wins over FORCE_COLOR."""
        monkeypatch.setenv('NO_COLOR', '1')
        monkeypatch.setenv('FORCE_COLOR', '1')
        assert should_use_color() is False

    def test_force_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """FORCE_COLOR enables color without a TTY."""
        monkeypatch.delenv('NO_COLOR', raising=False)
        monkeypatch.setenv('FORCE_COLOR', '1')
        assert should_use_color() is True

    def test_not_a_tty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Captured stdout is not a TTY."""
        monkeypatch.delenv('NO_COLOR', raising=False)
        monkeypatch.delenv('FORCE_COLOR', raising=False)
        monkeypatch.setattr('sys.stdout', io.StringIO())
        assert should_use_color() is False
