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
# EXPORT ERRORS
# -----------------------------------------------------------------------------
# Every failure an export can hit, each carrying a human readable message and
# the underlying cause. Nothing here is retried; callers decide whether to
# clean up and run the whole export again.
# -----------------------------------------------------------------------------

from pathlib import Path


class PolicyExportError(Exception):
    """
    Base class for export failures.

    Attributes:
        kind: Short machine readable error kind.
        message: Context message (names the lockfile and/or destination).
        cause: The exception that triggered this one, if any.
    """

    kind = "export_error"

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def causes(self) -> list[BaseException]:
        """Walk the chain of wrapped causes, innermost last."""
        chain: list[BaseException] = []
        current = self.cause
        while current is not None:
            chain.append(current)
            current = current.cause if isinstance(current, PolicyExportError) else None
        return chain


class LockNotFound(PolicyExportError):
    """Raised when no lockfile exists; `install` has to run first."""

    kind = "lock_not_found"


class LockInvalid(PolicyExportError):
    """Raised when the lockfile is malformed or references a missing cookbook."""

    kind = "lock_invalid"


class ConflictError(PolicyExportError):
    """
    Raised when the destination already holds exported content.

    Pass force to overwrite, or clean the destination.
    """

    kind = "conflict"

    def __init__(self, message: str, conflicts: list[Path]) -> None:
        super().__init__(message)
        self.conflicts = conflicts


class ExportAssemblyError(PolicyExportError):
    """Raised on any failure while staging; the destination is untouched."""

    kind = "assembly"


class CommitError(PolicyExportError):
    """
    Raised when the staged repo cannot be committed to the destination.

    `inconsistent` is True when some moves already happened; the destination
    must then be cleaned by hand before exporting again.
    """

    kind = "commit"

    def __init__(
        self, message: str, cause: BaseException | None = None, inconsistent: bool = True
    ) -> None:
        super().__init__(message, cause)
        self.inconsistent = inconsistent


class StagingCleanupError(PolicyExportError):
    """
    Raised when the staging directory cannot be removed after a successful
    export. The destination is complete; only the staging dir is left over.
    """

    kind = "staging_cleanup"

    def __init__(self, message: str, staging_dir: Path, cause: BaseException | None = None) -> None:
        super().__init__(message, cause)
        self.staging_dir = staging_dir
