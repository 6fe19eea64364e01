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
# COMMIT STRATEGIES - ARCHIVE OR DIRECTORY
# -----------------------------------------------------------------------------
# Responsibility: Make a fully staged export visible at the destination.
#
# - ArchiveCommit: Pack the staging dir into <policy>-<revision>.tgz in the
#   destination. Existing cookbooks/data bags there are left alone.
# - DirectoryCommit: Replace cookbooks/ and data_bags/policyfiles/ at the
#   destination and move the staged lockfile and client.rb next to them.
#
# Directory commits are a sequence of moves, not one atomic rename. A failure
# part way leaves the destination inconsistent and is reported as such; it
# must not be retried without cleaning up first.
# -----------------------------------------------------------------------------

import shutil
import tarfile
from pathlib import Path
from typing import Protocol

from rich.console import Console

from policy_export.core import layout
from policy_export.core.errors import CommitError
from policy_export.domain.models import ExportContext, ExportRequest
from policy_export.infra.archive import write_tgz

console = Console()


class CommitStrategy(Protocol):
    def commit(self, context: ExportContext) -> Path: ...


class ArchiveCommit:
    """Streams the staging directory into a single compressed tarball."""

    def __init__(self, extension: str = "tgz") -> None:
        self._extension = extension

    def archive_path(self, context: ExportContext) -> Path:
        return layout.archive_path(
            context.request.export_dir, context.lock.name, context.lock.revision_id, self._extension
        )

    def commit(self, context: ExportContext) -> Path:
        """
        Returns:
            Path to the written archive.

        Raises:
            CommitError: The archive could not be written. No partial file is
                left behind, so the destination stays consistent.
        """
        archive_path = self.archive_path(context)
        console.print(f"[cyan][COMMIT] Archiving {context.lock.name} to {archive_path}[/cyan]")
        try:
            context.request.export_dir.mkdir(parents=True, exist_ok=True)
            write_tgz(context.staging_dir, archive_path)
        except (OSError, tarfile.TarError) as e:
            raise CommitError(
                f"Failed to write archive {archive_path}", cause=e, inconsistent=False
            ) from e
        return archive_path


class DirectoryCommit:
    """Moves the staged repo into the destination directory."""

    def commit(self, context: ExportContext) -> Path:
        """
        Replace the destination's exported content with the staged repo.

        The ConflictGuard has already established that anything removed here
        is either absent or meant to be overwritten. Cookbooks move first.

        Returns:
            The export directory.

        Raises:
            CommitError: A removal or move failed; the destination may be
                left half updated.
        """
        staging_dir = context.staging_dir
        export_dir = context.request.export_dir
        console.print(f"[cyan][COMMIT] Moving staged repo into {export_dir}[/cyan]")
        try:
            for existing in (layout.cookbooks_dir(export_dir), layout.policyfiles_data_bag_dir(export_dir)):
                if existing.is_dir() and not existing.is_symlink():
                    shutil.rmtree(existing)
                elif existing.exists() or existing.is_symlink():
                    existing.unlink()

            export_dir.mkdir(parents=True, exist_ok=True)
            shutil.move(str(layout.cookbooks_dir(staging_dir)), str(layout.cookbooks_dir(export_dir)))
            layout.data_bags_dir(export_dir).mkdir(exist_ok=True)
            shutil.move(
                str(layout.policyfiles_data_bag_dir(staging_dir)),
                str(layout.policyfiles_data_bag_dir(export_dir)),
            )
            shutil.move(str(layout.lockfile_path(staging_dir)), str(layout.lockfile_path(export_dir)))
            shutil.move(str(layout.client_rb_path(staging_dir)), str(layout.client_rb_path(export_dir)))
        except OSError as e:
            console.print(f"[red][COMMIT] Move failed, {export_dir} may be inconsistent[/red]")
            raise CommitError(
                f"Failed to move staged repo into {export_dir}; "
                "the export dir may be left inconsistent and must be cleaned before retrying",
                cause=e,
            ) from e

        console.print(f"[green][COMMIT] Exported to {export_dir}[/green]")
        return export_dir


def commit_strategy_for(request: ExportRequest, archive_extension: str = "tgz") -> CommitStrategy:
    """Archive and directory commits are mutually exclusive; the request picks one."""
    if request.archive:
        return ArchiveCommit(archive_extension)
    return DirectoryCommit()
