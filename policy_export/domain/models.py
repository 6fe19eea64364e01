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
# DOMAIN MODELS - POLICY LOCK & EXPORT REQUEST
# -----------------------------------------------------------------------------
# These Pydantic models describe a resolved policy lock and the request to
# export it. The lock is produced by the install step; the exporter only
# reads it (the version rewrite happens on a copy of the metadata).
#
# The raw lock document is kept alongside the parsed model so it round-trips
# losslessly, including fields this package does not understand.
# -----------------------------------------------------------------------------

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, Field, PrivateAttr, model_validator

# Concrete dotted version, e.g. "1.2.0". Ranges like "~> 1.2" are rejected.
DottedVersion = Annotated[str, Field(pattern=r"^\d+(\.\d+)*$")]


class CookbookLock(BaseModel):
    """
    A single pinned cookbook inside a policy lock.

    `cookbook_path` and `metadata` are not part of the lock document; the
    LockValidator fills them in after locating the cookbook source.
    """

    name: str = Field(..., min_length=1)
    version: DottedVersion
    identifier: str | None = None
    dotted_decimal_identifier: DottedVersion | None = None
    source: str | None = None
    cache_key: str | None = None
    source_options: dict[str, Any] = Field(default_factory=dict)

    cookbook_path: Path | None = Field(None, exclude=True)
    metadata: dict[str, Any] = Field(default_factory=dict, exclude=True)

    @property
    def resolved_version(self) -> str:
        """The version baked into the exported cookbook."""
        return self.dotted_decimal_identifier or self.version

    @property
    def export_dirname(self) -> str:
        return f"{self.name}-{self.resolved_version}"


class PolicyLock(BaseModel):
    """
    A fully resolved policy: name, revision and the cookbooks it pins.

    Built with `from_lock_data`, which keeps a private copy of the original
    document so `to_lock` can re-serialize it verbatim.
    """

    name: str = Field(..., min_length=1)
    revision_id: str = Field(..., min_length=1)
    cookbook_locks: dict[str, CookbookLock]

    _lock_data: dict[str, Any] = PrivateAttr(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _name_cookbook_locks(cls, data: Any) -> Any:
        """Cookbook entries are keyed by name; copy the key into each entry."""
        if not isinstance(data, dict):
            return data
        locks = data.get("cookbook_locks")
        if isinstance(locks, dict):
            data = {
                **data,
                "cookbook_locks": {
                    name: {**entry, "name": name} if isinstance(entry, dict) else entry
                    for name, entry in locks.items()
                },
            }
        return data

    @classmethod
    def from_lock_data(cls, data: dict[str, Any]) -> "PolicyLock":
        lock = cls.model_validate(data)
        lock._lock_data = copy.deepcopy(data)
        return lock

    def to_lock(self) -> dict[str, Any]:
        """Return the full lock document, unknown fields included."""
        return copy.deepcopy(self._lock_data)


class ExportRequest(BaseModel):
    """
    Where and how to export. Immutable for one export transaction.

    Fields:
    - export_dir: Destination directory (created on commit if missing)
    - root_dir: Directory relative cookbook sources are resolved against
    - archive: Write a single .tgz instead of a directory tree
    - force: Overwrite existing cookbooks/data bags at the destination
    """

    export_dir: Path
    root_dir: Path
    archive: bool = False
    force: bool = False

    class Config:
        """Requests never change once a transaction starts."""

        frozen = True


@dataclass(frozen=True)
class ExportContext:
    """State of one export transaction, passed explicitly to each stage."""

    lock: PolicyLock
    request: ExportRequest
    staging_dir: Path
