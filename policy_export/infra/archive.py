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
# ARCHIVE INFRASTRUCTURE - Deterministic .tgz writer
# -----------------------------------------------------------------------------
# Responsibility: Pack a directory tree into a gzip-compressed tarball.
#
# - Entries are added in a sorted, depth-first walk so identical trees give
#   identical entry lists
# - Owner ids/names are cleared so the packing user does not leak in
# - The tarball is written to a hidden .partial file next to the target and
#   renamed into place, so a failed write never leaves a half archive behind
# -----------------------------------------------------------------------------

import os
import tarfile
from collections.abc import Iterator
from pathlib import Path

from rich.console import Console

console = Console()


def walk_sorted(root: Path) -> Iterator[Path]:
    """Yield every entry below root, depth-first, siblings sorted by name."""
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        yield entry
        if entry.is_dir() and not entry.is_symlink():
            yield from walk_sorted(entry)


def _normalize(info: tarfile.TarInfo) -> tarfile.TarInfo:
    info.uid = 0
    info.gid = 0
    info.uname = ""
    info.gname = ""
    return info


def write_tgz(source_dir: Path, archive_path: Path) -> int:
    """
    Pack source_dir into archive_path.

    Entry names are relative to source_dir (no leading "./").

    Args:
        source_dir: Directory to pack.
        archive_path: Final location of the .tgz.

    Returns:
        Number of entries written.

    Raises:
        OSError, tarfile.TarError: Packing failed; archive_path is unchanged.
    """
    partial_path = archive_path.with_name(f".{archive_path.name}.partial")
    count = 0
    try:
        with tarfile.open(partial_path, "w:gz") as tar:
            for entry in walk_sorted(source_dir):
                arcname = entry.relative_to(source_dir).as_posix()
                tar.add(entry, arcname=arcname, recursive=False, filter=_normalize)
                count += 1
        os.replace(partial_path, archive_path)
    except (OSError, tarfile.TarError):
        partial_path.unlink(missing_ok=True)
        raise

    console.print(f"[green][ARCHIVE] Wrote {archive_path} ({count} entries)[/green]")
    return count
