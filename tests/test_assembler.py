"""
Tests for assembling an export in the staging directory.
"""

import json
from unittest.mock import patch

import pytest

from policy_export.core.assembler import ExportAssembler
from policy_export.core.errors import ExportAssemblyError
from policy_export.core.lockfile import LockValidator
from policy_export.core.settings import StorageConfig
from policy_export.domain.models import ExportContext, ExportRequest, PolicyLock


@pytest.fixture
def lock(policy_root, lockfile, settings):
    storage = StorageConfig(settings.cookbook_cache_path).use_policyfile(policy_root / "Policyfile.rb")
    return LockValidator(storage).load()


@pytest.fixture
def context(lock, tmp_path, export_dir, policy_root):
    staging_dir = tmp_path / "stage"
    staging_dir.mkdir()
    request = ExportRequest(export_dir=export_dir, root_dir=policy_root)
    return ExportContext(lock=lock, request=request, staging_dir=staging_dir)


class TestExportAssembler:
    """Tests for ExportAssembler."""

    def test_repo_structure(self, context):
        """Every artifact lands in the staging dir."""
        ExportAssembler().assemble(context)
        staging = context.staging_dir
        assert (staging / "cookbooks" / "app-1.2.0").is_dir()
        assert (staging / "data_bags" / "policyfiles" / "base-local.json").is_file()
        assert (staging / "Policyfile.lock.json").is_file()
        assert (staging / "client.rb").is_file()

    def test_cookbook_files_filtered(self, context):
        """chefignore applies; directories are copied recursively."""
        ExportAssembler().assemble(context)
        cookbook = context.staging_dir / "cookbooks" / "app-1.2.0"
        assert (cookbook / "a.rb").read_text() == "# helper\n"
        assert (cookbook / "recipes" / "default.rb").is_file()
        assert not (cookbook / "b.tmp").exists()

    def test_metadata_rewritten(self, context):
        """metadata.rb is dropped and metadata.json carries the locked version."""
        ExportAssembler().assemble(context)
        cookbook = context.staging_dir / "cookbooks" / "app-1.2.0"
        assert not (cookbook / "metadata.rb").exists()
        metadata = json.loads((cookbook / "metadata.json").read_text())
        assert metadata["version"] == "1.2.0"
        assert metadata["description"] == "Test application"
        assert '\n  "version": "1.2.0"' in (cookbook / "metadata.json").read_text()

    def test_dotted_decimal_identifier_version(self, lock, context):
        """The resolved identifier names the directory and the metadata version."""
        lock.cookbook_locks["app"].dotted_decimal_identifier = "1.2.31337"
        ExportAssembler().assemble(context)
        cookbook = context.staging_dir / "cookbooks" / "app-1.2.31337"
        metadata = json.loads((cookbook / "metadata.json").read_text())
        assert metadata["version"] == "1.2.31337"

    def test_policyfile_data_item(self, context, lock_data):
        """The data bag item wraps the lock with id base-local."""
        ExportAssembler().assemble(context)
        item_path = context.staging_dir / "data_bags" / "policyfiles" / "base-local.json"
        item = json.loads(item_path.read_text())
        assert item["id"] == "base-local"
        assert item["name"] == "data_bag_item_policyfiles_base-local"
        assert item["data_bag"] == "policyfiles"
        assert item["json_class"] == "Chef::DataBagItem"
        assert item["raw_data"] == {**lock_data, "id": "base-local"}

    def test_lockfile_copied(self, context, lock_data):
        """The staged lock round-trips to the original document."""
        ExportAssembler().assemble(context)
        staged = json.loads((context.staging_dir / "Policyfile.lock.json").read_text())
        assert staged == lock_data
        assert "id" not in staged

    def test_client_rb(self, context):
        """client.rb enables policyfile compatibility mode."""
        ExportAssembler().assemble(context)
        client_rb = (context.staging_dir / "client.rb").read_text()
        assert "use_policyfile true" in client_rb
        assert "deployment_group 'base-local'" in client_rb
        assert "versioned_cookbooks true" in client_rb
        assert "policy_document_native_api false" in client_rb

    def test_io_failure_wrapped(self, context):
        """I/O errors become ExportAssemblyError with the cause attached."""
        with patch("policy_export.core.assembler.shutil.copytree", side_effect=OSError("disk full")):
            with pytest.raises(ExportAssemblyError) as exc_info:
                ExportAssembler().assemble(context)
        assert isinstance(exc_info.value.cause, OSError)

    def test_unvalidated_lock_rejected(self, context, lock_data):
        """Locks must be validated before assembly."""
        raw = PolicyLock.from_lock_data(lock_data)
        unvalidated = ExportContext(lock=raw, request=context.request, staging_dir=context.staging_dir)
        with pytest.raises(ExportAssemblyError):
            ExportAssembler().assemble(unvalidated)
