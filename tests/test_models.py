"""
Tests for the policy lock domain models.
"""

import pytest
from pydantic import ValidationError

from policy_export.domain.models import CookbookLock, ExportRequest, PolicyLock


class TestCookbookLock:
    """Tests for CookbookLock."""

    def test_export_dirname_uses_version(self):
        """Directory name is <name>-<version>."""
        cookbook = CookbookLock(name="app", version="1.2.0")
        assert cookbook.export_dirname == "app-1.2.0"

    def test_dotted_decimal_identifier_wins(self):
        """The dotted decimal identifier is the resolved version when present."""
        cookbook = CookbookLock(
            name="app", version="1.2.0", dotted_decimal_identifier="1.2.5042136"
        )
        assert cookbook.resolved_version == "1.2.5042136"
        assert cookbook.export_dirname == "app-1.2.5042136"

    @pytest.mark.parametrize("version", ["~> 1.2", ">= 1.0.0", "1.x", ""])
    def test_version_must_be_concrete(self, version):
        """Version constraints are not valid locked versions."""
        with pytest.raises(ValidationError):
            CookbookLock(name="app", version=version)


class TestPolicyLock:
    """Tests for PolicyLock."""

    def test_cookbook_names_from_keys(self, lock_data):
        """Cookbook entries take their name from the mapping key."""
        lock = PolicyLock.from_lock_data(lock_data)
        assert lock.cookbook_locks["app"].name == "app"
        assert lock.cookbook_locks["app"].source == "cookbooks/app"

    def test_to_lock_is_lossless(self, lock_data):
        """Unknown fields survive re-serialization."""
        lock_data["custom_field"] = {"kept": True}
        lock_data["cookbook_locks"]["app"]["origin"] = "https://supermarket.example"
        lock = PolicyLock.from_lock_data(lock_data)
        assert lock.to_lock() == lock_data

    def test_to_lock_returns_copy(self, lock_data):
        """Mutating the returned document does not change the lock."""
        lock = PolicyLock.from_lock_data(lock_data)
        document = lock.to_lock()
        document["id"] = "base-local"
        assert "id" not in lock.to_lock()

    def test_cookbook_order_preserved(self, lock_data):
        """Cookbooks keep the lock's order."""
        lock_data["cookbook_locks"] = {
            name: {"version": "1.0.0", "source": name} for name in ["zed", "alpha", "mid"]
        }
        lock = PolicyLock.from_lock_data(lock_data)
        assert list(lock.cookbook_locks) == ["zed", "alpha", "mid"]

    def test_missing_revision_rejected(self, lock_data):
        """revision_id is required."""
        del lock_data["revision_id"]
        with pytest.raises(ValidationError):
            PolicyLock.from_lock_data(lock_data)


class TestExportRequest:
    """Tests for ExportRequest."""

    def test_request_is_immutable(self, tmp_path):
        """Requests cannot change mid-transaction."""
        request = ExportRequest(export_dir=tmp_path / "out", root_dir=tmp_path)
        with pytest.raises(ValidationError):
            request.force = True

    def test_defaults(self, tmp_path):
        """Directory mode without force by default."""
        request = ExportRequest(export_dir=tmp_path / "out", root_dir=tmp_path)
        assert request.archive is False
        assert request.force is False
