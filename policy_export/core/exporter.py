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
# THE EXPORTER - POLICY EXPORT TRANSACTION
# -----------------------------------------------------------------------------
# Responsibility: Turn a Policyfile.lock.json into a standalone repo that
# chef-zero can serve, either as a directory tree or a single .tgz.
#
# Flow:
# 1. Lockfile must exist (LockNotFound otherwise)
# 2. Lock is validated (LockInvalid)
# 3. Destination must be clean unless forced (ConflictError)
# 4. Export is assembled in a staging dir (ExportAssemblyError)
# 5. Staged repo is committed: archive or directory move (CommitError)
# 6. Staging dir is removed, always. If removal fails after a successful
#    commit the export stands and the leftover dir is reported as a warning.
#
# The destination is only touched in step 5. One export per destination at
# a time: concurrent exports to the same directory are the caller's problem.
# -----------------------------------------------------------------------------

import json
from pathlib import Path
from typing import Any

from rich.console import Console

from policy_export.core.assembler import ExportAssembler
from policy_export.core.commit import commit_strategy_for
from policy_export.core.errors import (
    CommitError,
    ExportAssemblyError,
    PolicyExportError,
    StagingCleanupError,
)
from policy_export.core import layout
from policy_export.core.guard import ConflictGuard
from policy_export.core.ignore import PackageFilter
from policy_export.core.lockfile import LockValidator
from policy_export.core.settings import ExportSettings, StorageConfig, load_settings
from policy_export.core.staging import staging_area
from policy_export.domain.models import ExportContext, ExportRequest, PolicyLock

console = Console()

DEFAULT_POLICYFILE = "Policyfile.rb"


class ExportRepo:
    """
    Exports a locked policy to a directory or archive.

    Usage:
        ExportRepo(export_dir="out", root_dir="~/policies/base").run()
    """

    def __init__(
        self,
        export_dir: str | Path,
        policyfile: str | Path | None = None,
        root_dir: str | Path | None = None,
        archive: bool = False,
        force: bool = False,
        settings: ExportSettings | None = None,
        package_filter: PackageFilter | None = None,
    ) -> None:
        self._settings = settings or load_settings()

        root = Path(root_dir).expanduser() if root_dir else Path.cwd()
        self.request = ExportRequest(
            export_dir=Path(export_dir).expanduser().resolve(),
            root_dir=root.resolve(),
            archive=archive,
            force=force,
        )

        policyfile_full_path = self.request.root_dir / (policyfile or DEFAULT_POLICYFILE)
        self.storage_config = StorageConfig(self._settings.cookbook_cache_path).use_policyfile(
            policyfile_full_path
        )

        self._validator = LockValidator(self.storage_config)
        self._guard = ConflictGuard()
        self._assembler = ExportAssembler(
            package_filter or PackageFilter(self._settings.ignore_filename)
        )

        self._policy_data: dict[str, Any] | None = None
        self._policyfile_lock: PolicyLock | None = None

    @property
    def export_dir(self) -> Path:
        return self.request.export_dir

    @property
    def archive(self) -> bool:
        return self.request.archive

    @property
    def lock_path(self) -> Path:
        return self.storage_config.policyfile_lock_expanded_path

    @property
    def policy_data(self) -> dict[str, Any]:
        """The raw lock document as read from disk."""
        if self._policy_data is None:
            self._policy_data = self._validator.read_lock_data()
        return self._policy_data

    @property
    def policyfile_lock(self) -> PolicyLock:
        return self._policyfile_lock or self.validate_lockfile()

    @property
    def policy_name(self) -> str:
        return self.policyfile_lock.name

    @property
    def archive_file_location(self) -> Path | None:
        """Where archive mode writes the .tgz; None in directory mode."""
        if not self.archive:
            return None
        lock = self.policyfile_lock
        return layout.archive_path(
            self.export_dir, lock.name, lock.revision_id, self._settings.archive_extension
        )

    def validate_lockfile(self) -> PolicyLock:
        if self._policyfile_lock is None:
            self._policyfile_lock = self._validator.validate(self.policy_data)
        return self._policyfile_lock

    def run(self) -> Path:
        """
        Validate the lock and export it.

        Returns:
            The archive path in archive mode, else the export directory.

        Raises:
            LockNotFound, LockInvalid, ConflictError, ExportAssemblyError,
            CommitError
        """
        console.print(f"[cyan][EXPORTER] Exporting policy from {self.lock_path}[/cyan]")
        self._validator.assert_lockfile_exists()
        lock = self.validate_lockfile()
        self._guard.check(self.request)
        self._write_updated_lockfile(lock)
        return self._export(lock)

    def export(self) -> Path:
        """
        Export an already validated lock: conflict check, stage, commit.

        Returns:
            The archive path in archive mode, else the export directory.
        """
        self._guard.check(self.request)
        return self._export(self.policyfile_lock)

    def _export(self, lock: PolicyLock) -> Path:
        try:
            with staging_area(self._settings.staging_prefix, self._settings.staging_root) as staging_dir:
                context = ExportContext(lock=lock, request=self.request, staging_dir=staging_dir)
                self._assembler.assemble(context)
                strategy = commit_strategy_for(self.request, self._settings.archive_extension)
                result = strategy.commit(context)
        except StagingCleanupError as e:
            console.print(
                f"[yellow][EXPORTER] Export committed, but staging dir {e.staging_dir} "
                f"was left behind: {e.cause}[/yellow]"
            )
        except CommitError as e:
            raise CommitError(self._failure_message(), cause=e, inconsistent=e.inconsistent) from e
        except (PolicyExportError, OSError) as e:
            console.print(f"[red][EXPORTER] Export failed: {e}[/red]")
            raise ExportAssemblyError(self._failure_message(), cause=e) from e

        console.print(f"[green][EXPORTER] Exported policy '{lock.name}' to {result}[/green]")
        return result

    def _failure_message(self) -> str:
        return f"Failed to export policy (in {self.lock_path}) to {self.export_dir}"

    def _write_updated_lockfile(self, lock: PolicyLock) -> None:
        """Re-serialize the validated lock over the original lockfile."""
        try:
            with open(self.lock_path, "w") as f:
                json.dump(lock.to_lock(), f, indent=2)
        except OSError as e:
            raise ExportAssemblyError(f"Failed to write lockfile {self.lock_path}", cause=e) from e
