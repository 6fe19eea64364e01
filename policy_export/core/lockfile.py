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
# LOCK VALIDATOR
# -----------------------------------------------------------------------------
# Responsibility: Read Policyfile.lock.json, build a PolicyLock from it and
# make sure every cookbook it pins can actually be exported: a concrete
# version, a source directory that exists, and metadata that agrees with the
# lock about the cookbook's name.
#
# Nothing is exported from a lock that has not passed through here.
# -----------------------------------------------------------------------------

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.console import Console

from policy_export.core.errors import LockInvalid, LockNotFound
from policy_export.core.settings import StorageConfig
from policy_export.domain.models import CookbookLock, PolicyLock

console = Console()

METADATA_JSON = "metadata.json"


class LockValidator:
    """
    Loads and validates a policy lock.

    JSON decoding is delegated to the json module; the structural checks on
    the lock and its cookbook references happen here.
    """

    def __init__(self, storage_config: StorageConfig) -> None:
        self._storage_config = storage_config

    @property
    def lock_path(self) -> Path:
        return self._storage_config.policyfile_lock_expanded_path

    def assert_lockfile_exists(self) -> None:
        """
        Raises:
            LockNotFound: No lockfile at the expected path.
        """
        if not self.lock_path.exists():
            raise LockNotFound(
                f"No lockfile at {self.lock_path} - you need to run `install` before `export`"
            )

    def read_lock_data(self) -> dict[str, Any]:
        """
        Read and decode the lockfile.

        Returns:
            The raw lock document.

        Raises:
            LockNotFound: No lockfile at the expected path.
            LockInvalid: The file cannot be read or does not hold a UTF-8 JSON
                object.
        """
        self.assert_lockfile_exists()
        try:
            with open(self.lock_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise LockInvalid(f"Error reading lockfile {self.lock_path}", cause=e) from e

        if not isinstance(data, dict):
            raise LockInvalid(f"Lockfile {self.lock_path} must contain a JSON object")
        return data

    def load(self) -> PolicyLock:
        """Read the lockfile and validate it."""
        return self.validate(self.read_lock_data())

    def validate(self, lock_data: dict[str, Any]) -> PolicyLock:
        """
        Build a PolicyLock and check every cookbook it references.

        Args:
            lock_data: The decoded lock document.

        Returns:
            PolicyLock with each cookbook's source path and metadata filled in.

        Raises:
            LockInvalid: Malformed lock or an unusable cookbook reference.
        """
        try:
            lock = PolicyLock.from_lock_data(lock_data)
        except ValidationError as e:
            raise LockInvalid(f"Invalid lockfile data in {self.lock_path}", cause=e) from e

        for cookbook in lock.cookbook_locks.values():
            self._validate_cookbook(cookbook)

        console.print(
            f"[green][LOCK] Validated {lock.name} ({lock.revision_id}): "
            f"{len(lock.cookbook_locks)} cookbooks[/green]"
        )
        return lock

    def _validate_cookbook(self, cookbook: CookbookLock) -> None:
        cookbook_path = self._cookbook_path(cookbook)
        if not cookbook_path.is_dir():
            raise LockInvalid(
                f"Cookbook '{cookbook.name}' ({cookbook.version}) not found at {cookbook_path}"
            )
        cookbook.cookbook_path = cookbook_path
        cookbook.metadata = self._load_metadata(cookbook, cookbook_path)

    def _cookbook_path(self, cookbook: CookbookLock) -> Path:
        """Local sources resolve against the Policyfile dir; cached ones by cache_key."""
        local_path = cookbook.source or cookbook.source_options.get("path")
        if local_path:
            return (self._storage_config.relative_paths_root / local_path).resolve()
        if cookbook.cache_key:
            return self._storage_config.cache_path / cookbook.cache_key
        raise LockInvalid(f"Cookbook '{cookbook.name}' has neither a source path nor a cache_key")

    def _load_metadata(self, cookbook: CookbookLock, cookbook_path: Path) -> dict[str, Any]:
        """
        Load the cookbook's metadata.json, or a minimal document if it has none.

        Cookbooks that only ship metadata.rb get {name, version} from the lock.
        """
        metadata_path = cookbook_path / METADATA_JSON
        if not metadata_path.exists():
            return {"name": cookbook.name, "version": cookbook.version}

        try:
            with open(metadata_path, encoding="utf-8") as f:
                metadata = json.load(f)
        except (OSError, ValueError) as e:
            raise LockInvalid(f"Error reading cookbook metadata {metadata_path}", cause=e) from e

        if not isinstance(metadata, dict):
            raise LockInvalid(f"Cookbook metadata {metadata_path} must contain a JSON object")

        metadata_name = metadata.get("name", cookbook.name)
        if metadata_name != cookbook.name:
            raise LockInvalid(
                f"Cookbook at {cookbook_path} is named '{metadata_name}', "
                f"but the lock expects '{cookbook.name}'"
            )
        return metadata
