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
# PACKAGE FILTER - CHEFIGNORE
# -----------------------------------------------------------------------------
# Responsibility: Decide which top-level entries of a cookbook get exported.
# Each cookbook may carry a `chefignore` file of glob patterns; entries whose
# base name matches any pattern are skipped. Rules only apply at the cookbook
# root - a kept directory is copied whole.
# -----------------------------------------------------------------------------

from fnmatch import fnmatchcase
from pathlib import Path
from typing import Callable, Protocol

from rich.console import Console

console = Console()

DEFAULT_IGNORE_FILENAME = "chefignore"


class IgnoreMatcher(Protocol):
    """Anything that can say whether a base name is ignored."""

    def matches(self, name: str) -> bool: ...


class Chefignore:
    """
    Glob patterns loaded from a chefignore file.

    Blank lines and `#` comments are skipped. A missing file ignores nothing.
    """

    def __init__(self, ignore_file: Path) -> None:
        self.ignore_file = ignore_file
        self.patterns = self._load_patterns(ignore_file)

    @staticmethod
    def _load_patterns(ignore_file: Path) -> list[str]:
        if not ignore_file.is_file():
            return []
        patterns = []
        with open(ignore_file) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#"):
                    patterns.append(line)
        return patterns

    def matches(self, name: str) -> bool:
        return any(fnmatchcase(name, pattern) for pattern in self.patterns)


class PackageFilter:
    """
    Lists the entries of a cookbook source directory that should be copied.

    The matcher factory is injectable so the filtering can be tested without
    writing ignore files.
    """

    def __init__(
        self,
        ignore_filename: str = DEFAULT_IGNORE_FILENAME,
        matcher_factory: Callable[[Path], IgnoreMatcher] | None = None,
    ) -> None:
        self._ignore_filename = ignore_filename
        self._matcher_factory = matcher_factory or Chefignore

    def matcher_for(self, source_dir: Path) -> IgnoreMatcher:
        return self._matcher_factory(source_dir / self._ignore_filename)

    def filter(self, source_dir: Path) -> list[Path]:
        """
        Top-level entries of source_dir to export, sorted by name.

        Hidden entries (dotfiles such as .git) are never exported.
        """
        matcher = self.matcher_for(source_dir)
        selected = []
        for entry in sorted(source_dir.iterdir(), key=lambda p: p.name):
            if entry.name.startswith("."):
                continue
            if matcher.matches(entry.name):
                console.print(f"[dim][FILTER] Ignored {entry.name}[/dim]")
                continue
            selected.append(entry)
        return selected
