"""
Pytest configuration and fixtures for policy export tests.
"""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from policy_export.core.settings import ExportSettings  # noqa: E402


@pytest.fixture
def settings(tmp_path):
    """Settings with staging and cookbook cache inside tmp_path."""
    staging_root = tmp_path / "staging"
    staging_root.mkdir()
    cache = tmp_path / "cache"
    cache.mkdir()
    return ExportSettings(cookbook_cache_path=cache, staging_root=staging_root)


@pytest.fixture
def policy_root(tmp_path):
    """Directory holding Policyfile.rb and its lock."""
    root = tmp_path / "policy"
    root.mkdir()
    (root / "Policyfile.rb").write_text("name 'base'\nrun_list 'app::default'\n")
    return root


@pytest.fixture
def cookbook_source(policy_root):
    """A local 'app' cookbook with a chefignore excluding *.tmp."""
    source = policy_root / "cookbooks" / "app"
    (source / "recipes").mkdir(parents=True)
    (source / "recipes" / "default.rb").write_text("log 'hello'\n")
    (source / "a.rb").write_text("# helper\n")
    (source / "b.tmp").write_text("scratch")
    (source / "chefignore").write_text("# editor leftovers\n\n*.tmp\n")
    (source / "metadata.rb").write_text("name 'app'\nversion '1.2.0'\n")
    (source / "metadata.json").write_text(
        json.dumps(
            {
                "name": "app",
                "version": "1.2.0",
                "description": "Test application",
                "dependencies": {},
            }
        )
    )
    return source


@pytest.fixture
def lock_data():
    """A lock pinning app 1.2.0 from a local path."""
    return {
        "revision_id": "abc123",
        "name": "base",
        "run_list": ["recipe[app::default]"],
        "cookbook_locks": {
            "app": {
                "version": "1.2.0",
                "identifier": "6f1c2c1f5ec55e58b4b6c4bc1e0e8a7b9a0e3b0b",
                "source": "cookbooks/app",
                "cache_key": None,
                "source_options": {"path": "cookbooks/app"},
                "scm_info": None,
            }
        },
        "default_attributes": {},
        "override_attributes": {},
        "solution_dependencies": {
            "Policyfile": [["app", ">= 0.0.0"]],
            "dependencies": {"app (1.2.0)": []},
        },
    }


@pytest.fixture
def lockfile(policy_root, cookbook_source, lock_data):
    """Write lock_data as Policyfile.lock.json and return its path."""
    path = policy_root / "Policyfile.lock.json"
    path.write_text(json.dumps(lock_data, indent=2))
    return path


@pytest.fixture
def export_dir(tmp_path):
    return tmp_path / "export"


def snapshot(root: Path) -> dict[str, bytes | None]:
    """Map of relative path -> file bytes (None for dirs) under root."""
    if not root.exists():
        return {}
    return {
        p.relative_to(root).as_posix(): (p.read_bytes() if p.is_file() else None)
        for p in sorted(root.rglob("*"))
    }


@pytest.fixture
def tree_snapshot():
    return snapshot
