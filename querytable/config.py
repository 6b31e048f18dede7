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

"""Configuration for data-table queries."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


_ENV_PATTERN = re.compile(r"\$\{env\.([A-Za-z_][A-Za-z0-9_]*)\}")


def load_yaml_with_env(path: str | os.PathLike[str]) -> Any:
    """Load a YAML file, replacing ``${env.NAME}`` placeholders first."""
    with open(path, encoding="utf-8") as f:
        config_text = f.read()

    def _replace_env(match: re.Match[str]) -> str:
        env_name = match.group(1)
        if env_name not in os.environ:
            raise ConfigError(f"Environment variable '{env_name}' is not set")
        return os.environ[env_name]

    return yaml.safe_load(_ENV_PATTERN.sub(_replace_env, config_text))


class DataTableConfig(BaseModel):
    """Settings shared by all queries built from one configuration.

    Attributes:
        default_items_per_page: Page size used when a request gives none
            or an unreadable one
    """

    model_config = ConfigDict(extra="forbid")

    default_items_per_page: int = Field(default=10, ge=0)

    @classmethod
    def from_yaml(cls, config_path: str | os.PathLike[str]) -> DataTableConfig:
        """Load configuration from a YAML file.

        The file may hold the settings at top level or under a
        ``datatable`` key.

        Raises:
            ConfigError: If the file is missing, unparsable or invalid
        """
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        try:
            config = load_yaml_with_env(path)
        except yaml.YAMLError as e:
            raise ConfigError(f"YAML parsing error in {config_path}: {e}") from e

        if config is None:
            return cls()
        if not isinstance(config, dict):
            raise ConfigError(f"Invalid configuration file: {config_path}")
        config = cast(dict[str, Any], config)
        section = config.get("datatable", config)
        if not isinstance(section, dict):
            raise ConfigError(f"'datatable' must be a mapping in {config_path}")

        try:
            return cls.model_validate(section)
        except ValidationError as e:
            raise ConfigError(f"Invalid data-table configuration: {e}") from e
