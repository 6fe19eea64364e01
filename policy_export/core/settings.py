# Copyright 2026 Pramod Kumar Voola
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

# -----------------------------------------------------------------------------
# EXPORT SETTINGS & STORAGE CONFIG
# -----------------------------------------------------------------------------
# Responsibility: Load exporter settings from policy_export.yaml (defaults if
# the file is missing), apply environment overrides, and work out where a
# Policyfile's lock lives.
#
# Environment:
# - POLICY_EXPORT_CONFIG: Alternate settings file
# - POLICY_EXPORT_CACHE_PATH: Cookbook cache used for cache_key sources
# - POLICY_EXPORT_STAGING_ROOT: Where staging directories are created
# -----------------------------------------------------------------------------

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator
from rich.console import Console

from policy_export.core.errors import LockInvalid

console = Console()

# Settings file location
CONFIG_PATH = Path(__file__).parent.parent.parent / "policy_export.yaml"

DEFAULT_COOKBOOK_CACHE = "~/.chefdk/cache/cookbooks"


class ExportSettings(BaseModel):
    """
    Pydantic model for exporter settings.

    Loaded from policy_export.yaml at startup.
    """

    cookbook_cache_path: Path = Field(
        default_factory=lambda: Path(DEFAULT_COOKBOOK_CACHE).expanduser()
    )
    ignore_filename: str = "chefignore"
    archive_extension: str = "tgz"
    staging_prefix: str = "policy-export"
    staging_root: Path | None = None

    @field_validator("cookbook_cache_path", "staging_root")
    @classmethod
    def _expand_user(cls, value: Path | None) -> Path | None:
        return value.expanduser() if value is not None else None


def load_settings(config_path: Path | None = None) -> ExportSettings:
    """
    Load settings from YAML, then apply environment overrides.

    Args:
        config_path: Settings file. Defaults to POLICY_EXPORT_CONFIG or
            policy_export.yaml in the project root.

    Returns:
        ExportSettings with validated values.
    """
    path = config_path or Path(os.getenv("POLICY_EXPORT_CONFIG", str(CONFIG_PATH)))

    data: dict = {}
    if path.exists():
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        console.print(f"[cyan][SETTINGS] Loaded {path}[/cyan]")
    else:
        console.print("[dim][SETTINGS] No settings file, using defaults[/dim]")

    cache_path = os.getenv("POLICY_EXPORT_CACHE_PATH")
    if cache_path:
        data["cookbook_cache_path"] = cache_path
    staging_root = os.getenv("POLICY_EXPORT_STAGING_ROOT")
    if staging_root:
        data["staging_root"] = staging_root

    return ExportSettings(**data)


class StorageConfig:
    """
    Where a policy's files live on disk.

    `use_policyfile` accepts either the Policyfile.rb or its lock and derives
    the other; relative cookbook paths in the lock resolve against the
    Policyfile's directory.
    """

    def __init__(self, cache_path: Path | None = None) -> None:
        self.cache_path = cache_path or Path(DEFAULT_COOKBOOK_CACHE).expanduser()
        self.policyfile_filename: Path | None = None
        self.policyfile_lock_filename: Path | None = None

    def use_policyfile(self, policyfile: Path) -> "StorageConfig":
        name = policyfile.name
        if name.endswith(".lock.json"):
            self.policyfile_lock_filename = policyfile
            self.policyfile_filename = policyfile.with_name(name[: -len(".lock.json")] + ".rb")
        elif name.endswith(".rb"):
            self.policyfile_filename = policyfile
            self.policyfile_lock_filename = policyfile.with_name(name[: -len(".rb")] + ".lock.json")
        else:
            raise LockInvalid(
                f"Policyfile filename must end with `.rb' or `.lock.json' (got {policyfile})"
            )
        return self

    @property
    def relative_paths_root(self) -> Path:
        if self.policyfile_filename is None:
            return Path.cwd()
        return self.policyfile_filename.parent

    @property
    def policyfile_lock_expanded_path(self) -> Path:
        if self.policyfile_lock_filename is None:
            raise LockInvalid("No policyfile configured")
        return self.policyfile_lock_filename.expanduser().resolve()
