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


"""Tests for cratelicense.toml loading and writing."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from cratelicense.config import CrateLicenseConfig, config_from_dict, load_config, write_config
from cratelicense.errors import ConfigError
from cratelicense.reachability import FilterPolicy

_FULL = """\
[policy]
avoid-dev-deps = true
avoid-proc-macros = true

[output]
format = "tsv"
authors = true
color = "never"
"""


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_defaults(self, tmp_path: Path) -> None:
        """No file means default settings."""
        assert load_config(tmp_path / 'cratelicense.toml') == CrateLicenseConfig()

    def test_values(self, tmp_path: Path) -> None:
        """Known keys populate the config."""
        path = tmp_path / 'cratelicense.toml'
        path.write_text(_FULL, encoding='utf-8')
        config = load_config(path)
        assert config.policy == FilterPolicy(exclude_dev=True, exclude_proc_macros=True)
        assert config.output_format == 'tsv'
        assert config.authors is True
        assert config.color == 'never'

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Broken TOML is a ConfigError."""
        path = tmp_path / 'cratelicense.toml'
        path.write_text('[policy\n', encoding='utf-8')
        with pytest.raises(ConfigError):
            load_config(path)


class TestConfigFromDict:
    """Tests for config_from_dict validation."""

    def test_empty(self) -> None:
        """An empty document gives defaults."""
        assert config_from_dict({}) == CrateLicenseConfig()

    def test_bad_bool(self) -> None:
        """Policy flags must be booleans."""
        with pytest.raises(ConfigError, match='must be true or false'):
            config_from_dict({'policy': {'root-only': 'yes'}})

    def test_bad_format(self) -> None:
        """Unknown output formats are rejected."""
        with pytest.raises(ConfigError, match='must be one of'):
            config_from_dict({'output': {'format': 'xml'}})

    def test_bad_color(self) -> None:
        """Unknown color modes are rejected."""
        with pytest.raises(ConfigError, match='must be one of'):
            config_from_dict({'output': {'color': 'sometimes'}})

    def test_section_not_table(self) -> None:
        """A scalar where a table belongs is rejected."""
        with pytest.raises(ConfigError, match='must be a table'):
            config_from_dict({'policy': True})

    @patch('cratelicense.config.logger')
    def test_unknown_keys_warn(self, mock_logger: MagicMock) -> None:
        """Unknown tables and keys are warned about, not fatal."""
        config = config_from_dict({
            'policy': {'avoid-dev-deps': True, 'avoid-everything': True},
            'output': {'theme': 'dark'},
            'extra': {},
        })
        assert config.policy.exclude_dev is True
        events = [c.args[0] for c in mock_logger.warning.call_args_list]
        assert events == ['unknown_config_table', 'unknown_config_key', 'unknown_config_key']


class TestWriteConfig:
    """Tests for write_config."""

    def test_creates_file(self, tmp_path: Path) -> None:
        """A new file round-trips through load_config."""
        path = tmp_path / 'cratelicense.toml'
        config = CrateLicenseConfig(
            policy=FilterPolicy(exclude_build=True, direct_deps_only=True),
            output_format='json',
            color='always',
        )
        write_config(path, config)
        assert load_config(path) == config

    def test_preserves_comments(self, tmp_path: Path) -> None:
        """Comments and foreign keys survive a rewrite."""
        path = tmp_path / 'cratelicense.toml'
        path.write_text(
            '# Release binaries only.\n[policy]\n# tests are not shipped\navoid-dev-deps = true\n[extra]\nkeep = 1\n',
            encoding='utf-8',
        )
        write_config(path, CrateLicenseConfig(policy=FilterPolicy(exclude_dev=True, exclude_build=True)))
        text = path.read_text(encoding='utf-8')
        assert '# Release binaries only.' in text
        assert '# tests are not shipped' in text
        assert 'avoid-build-deps = true' in text
        assert '[output]' in text
        assert 'keep = 1' in text
