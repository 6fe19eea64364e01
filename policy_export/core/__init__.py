# -----------------------------------------------------------------------------
# CORE LAYER
# -----------------------------------------------------------------------------
# The business logic of a policy export:
# - LockValidator: Reads and checks Policyfile.lock.json
# - ConflictGuard: Refuses to overwrite an unclean destination
# - PackageFilter: chefignore-aware cookbook file selection
# - ExportAssembler: Builds the repo in a staging dir
# - ArchiveCommit / DirectoryCommit: Make the staged repo visible
# - ExportRepo: The whole transaction
# -----------------------------------------------------------------------------

from .assembler import ExportAssembler
from .commit import ArchiveCommit, DirectoryCommit, commit_strategy_for
from .errors import (
    CommitError,
    ConflictError,
    ExportAssemblyError,
    LockInvalid,
    LockNotFound,
    PolicyExportError,
    StagingCleanupError,
)
from .exporter import ExportRepo
from .guard import ConflictGuard
from .ignore import Chefignore, IgnoreMatcher, PackageFilter
from .lockfile import LockValidator
from .settings import ExportSettings, StorageConfig, load_settings
from .staging import staging_area

__all__ = [
    "ExportAssembler",
    "ArchiveCommit", "DirectoryCommit", "commit_strategy_for",
    "CommitError", "ConflictError", "ExportAssemblyError",
    "LockInvalid", "LockNotFound", "PolicyExportError", "StagingCleanupError",
    "ExportRepo",
    "ConflictGuard",
    "Chefignore", "IgnoreMatcher", "PackageFilter",
    "LockValidator",
    "ExportSettings", "StorageConfig", "load_settings",
    "staging_area",
]
