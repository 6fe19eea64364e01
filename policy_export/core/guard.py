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
# CONFLICT GUARD
# -----------------------------------------------------------------------------
# Responsibility: Refuse to export over a destination that already holds
# exported content, unless forced. Runs before any staging work so the cheap
# rejection comes first.
#
# Archive mode only adds a single file next to whatever is there, so it is
# never blocked.
# -----------------------------------------------------------------------------

from pathlib import Path

from rich.console import Console

from policy_export.core import layout
from policy_export.core.errors import ConflictError
from policy_export.domain.models import ExportRequest

console = Console()


class ConflictGuard:
    """Checks a destination for entries an export would overwrite."""

    def conflicts(self, export_dir: Path) -> list[Path]:
        """
        Existing entries an in-place export would replace.

        Returns:
            Everything under cookbooks/ and data_bags/policyfiles/ (or the
            path itself when it is not a directory), plus the lockfile if
            present. Empty means the destination is clean.
        """
        entries: list[Path] = []
        for directory in (layout.cookbooks_dir(export_dir), layout.policyfiles_data_bag_dir(export_dir)):
            if directory.is_dir():
                entries.extend(sorted(directory.iterdir(), key=lambda p: p.name))
            elif directory.exists() or directory.is_symlink():
                entries.append(directory)

        lockfile = layout.lockfile_path(export_dir)
        if lockfile.exists():
            entries.append(lockfile)
        return entries

    def check(self, request: ExportRequest) -> None:
        """
        Raises:
            ConflictError: Destination not clean, and neither force nor
                archive mode was requested.
        """
        if request.archive:
            return
        if request.force:
            console.print(f"[yellow][GUARD] Force export: {request.export_dir} will be overwritten[/yellow]")
            return

        conflicts = self.conflicts(request.export_dir)
        if conflicts:
            console.print(f"[red][GUARD] Export dir not clean: {len(conflicts)} conflicting entries[/red]")
            raise ConflictError(
                f"Export dir ({request.export_dir}) not clean. Refusing to export. "
                f"(Conflicting files: {', '.join(str(p) for p in conflicts)})",
                conflicts=conflicts,
            )
