# Copyright (c) Nex-AGI. All rights reserved.
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

"""Unit tests for configuration loading."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from querytable.config import ConfigError, DataTableConfig, load_yaml_with_env


def write_yaml(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "querytable.yaml"
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


class TestLoadYamlWithEnv:
    """Tests for ${env.NAME} expansion."""

    def test_substitutes_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("QT_PAGE_SIZE", "25")
        path = write_yaml(tmp_path, "default_items_per_page: ${env.QT_PAGE_SIZE}\n")

        assert load_yaml_with_env(path) == {"default_items_per_page": 25}

    def test_missing_variable_raises(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("QT_MISSING", raising=False)
        path = write_yaml(tmp_path, "default_items_per_page: ${env.QT_MISSING}\n")

        with pytest.raises(ConfigError, match="QT_MISSING"):
            load_yaml_with_env(path)


class TestDataTableConfig:
    """Tests for DataTableConfig."""

    def test_defaults(self):
        assert DataTableConfig().default_items_per_page == 10

    def test_rejects_unknown_keys(self):
        with pytest.raises(ValueError):
            DataTableConfig.model_validate({"page_size": 5})

    def test_rejects_negative_page_size(self):
        with pytest.raises(ValueError):
            DataTableConfig(default_items_per_page=-1)

    def test_from_yaml_top_level(self, tmp_path: Path):
        path = write_yaml(tmp_path, "default_items_per_page: 50\n")

        assert DataTableConfig.from_yaml(path).default_items_per_page == 50

    def test_from_yaml_section(self, tmp_path: Path):
        path = write_yaml(
            tmp_path,
            """
            datatable:
              default_items_per_page: 5
            """,
        )

        assert DataTableConfig.from_yaml(str(path)).default_items_per_page == 5

    def test_from_yaml_empty_file(self, tmp_path: Path):
        path = write_yaml(tmp_path, "")

        assert DataTableConfig.from_yaml(path) == DataTableConfig()

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            DataTableConfig.from_yaml(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = write_yaml(tmp_path, "datatable: [unclosed\n")

        with pytest.raises(ConfigError, match="YAML parsing error"):
            DataTableConfig.from_yaml(path)

    def test_non_mapping_document(self, tmp_path: Path):
        path = write_yaml(tmp_path, "- a\n- b\n")

        with pytest.raises(ConfigError, match="Invalid configuration file"):
            DataTableConfig.from_yaml(path)

    def test_non_mapping_section(self, tmp_path: Path):
        path = write_yaml(tmp_path, "datatable: 5\n")

        with pytest.raises(ConfigError, match="must be a mapping"):
            DataTableConfig.from_yaml(path)

    def test_invalid_values(self, tmp_path: Path):
        path = write_yaml(tmp_path, "default_items_per_page: lots\n")

        with pytest.raises(ConfigError, match="Invalid data-table configuration"):
            DataTableConfig.from_yaml(path)
