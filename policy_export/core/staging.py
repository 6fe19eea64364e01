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
# STAGING AREA
# -----------------------------------------------------------------------------
# Responsibility: A throwaway directory where an export is assembled before
# anything becomes visible at the destination. Always removed when the
# transaction ends, pass or fail.
#
# The name carries the pid and a UTC timestamp so concurrent runs are easy to
# tell apart in the temp dir.
# -----------------------------------------------------------------------------

import os
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console

from policy_export.core.errors import ExportAssemblyError, StagingCleanupError

console = Console()


def staging_dir_prefix(prefix: str) -> str:
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"{prefix}-{os.getpid()}-{timestamp}-"


def _remove(staging_dir: Path) -> None:
    if staging_dir.exists():
        shutil.rmtree(staging_dir)
    console.print(f"[dim][STAGING] Removed {staging_dir}[/dim]")


@contextmanager
def staging_area(prefix: str = "policy-export", root: Path | None = None) -> Iterator[Path]:
    """
    Create a staging directory and remove it on every exit path.

    Args:
        prefix: Leading part of the directory name.
        root: Parent directory; the system temp dir when None.

    Yields:
        Path to the empty staging directory.

    Raises:
        ExportAssemblyError: The staging directory cannot be created.
        StagingCleanupError: The block succeeded but the directory could not
            be removed. When the block itself raised, a removal failure is
            only logged and the block's exception propagates.
    """
    try:
        staging_dir = Path(tempfile.mkdtemp(prefix=staging_dir_prefix(prefix), dir=root))
    except OSError as e:
        location = root or tempfile.gettempdir()
        raise ExportAssemblyError(f"Unable to create staging directory in {location}", cause=e) from e

    console.print(f"[dim][STAGING] Created {staging_dir}[/dim]")
    try:
        yield staging_dir
    except BaseException:
        try:
            _remove(staging_dir)
        except OSError as cleanup_error:
            console.print(f"[red][STAGING] Could not remove {staging_dir}: {cleanup_error}[/red]")
        raise

    try:
        _remove(staging_dir)
    except OSError as e:
        raise StagingCleanupError(
            f"Unable to remove staging directory {staging_dir}", staging_dir=staging_dir, cause=e
        ) from e
