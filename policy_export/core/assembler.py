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
# THE ASSEMBLER - STAGED REPO BUILDER
# -----------------------------------------------------------------------------
# Responsibility: Build the complete exported repo inside the staging
# directory:
#
# 1. cookbooks/ and data_bags/policyfiles/
# 2. cookbooks/<name>-<version>/ per locked cookbook, chefignore applied,
#    metadata.json rewritten with the locked version
# 3. data_bags/policyfiles/<policy>-local.json
# 4. Policyfile.lock.json
# 5. client.rb
#
# Every artifact is derived from the lock on each run; nothing is merged with
# a previous export. Failures abort the assembly and the staging directory is
# thrown away by the caller.
# -----------------------------------------------------------------------------

import json
import shutil
from pathlib import Path
from typing import Any

from rich.console import Console

from policy_export.core import layout
from policy_export.core.errors import ExportAssemblyError, PolicyExportError
from policy_export.core.ignore import PackageFilter
from policy_export.domain.models import CookbookLock, ExportContext, PolicyLock

console = Console()

# Copied verbatim from the source, these may still carry an unresolved version.
STALE_METADATA_FILES = ("metadata.rb", "metadata.json")

CLIENT_RB_TEMPLATE = """\
### Chef Client Configuration ###
# The settings in this file will configure chef to apply the exported policy in
# this directory. To use it, run:
#
# chef-client -c client.rb -z
#

use_policyfile true

# compatibility mode settings are used because chef-zero doesn't yet support
# native mode:
deployment_group '{policy_name}-{policy_group}'
versioned_cookbooks true
policy_document_native_api false

"""


def _write_json(path: Path, document: Any) -> None:
    with open(path, "w") as f:
        json.dump(document, f, indent=2)


class ExportAssembler:
    """
    Writes every exported artifact into a staging directory.

    Stateless apart from its package filter; the transaction's lock and
    staging path arrive in the ExportContext.

    Exported metadata.json starts from the cookbook's own metadata.json. A
    cookbook that only ships metadata.rb is exported with just its name and
    locked version; the other metadata.rb fields are not carried over.
    """

    def __init__(self, package_filter: PackageFilter | None = None) -> None:
        self._package_filter = package_filter or PackageFilter()

    def assemble(self, context: ExportContext) -> None:
        """
        Build the exported repo under context.staging_dir.

        Raises:
            ExportAssemblyError: Any I/O or serialization failure.
        """
        lock = context.lock
        console.print(f"[cyan][ASSEMBLER] Staging {lock.name} in {context.staging_dir}[/cyan]")
        try:
            self._create_repo_structure(context.staging_dir)
            for cookbook in lock.cookbook_locks.values():
                self._copy_cookbook(cookbook, context.staging_dir)
            self._create_policyfile_data_item(lock, context.staging_dir)
            self._copy_policyfile_lock(lock, context.staging_dir)
            self._create_client_rb(lock, context.staging_dir)
        except PolicyExportError:
            raise
        except (OSError, TypeError, ValueError) as e:
            raise ExportAssemblyError(
                f"Failed to stage policy {lock.name} in {context.staging_dir}", cause=e
            ) from e

        console.print(
            f"[green][ASSEMBLER] Staged {len(lock.cookbook_locks)} cookbooks for {lock.name}[/green]"
        )

    def _create_repo_structure(self, staging_dir: Path) -> None:
        layout.cookbooks_dir(staging_dir).mkdir(parents=True, exist_ok=True)
        layout.policyfiles_data_bag_dir(staging_dir).mkdir(parents=True, exist_ok=True)

    def _copy_cookbook(self, cookbook: CookbookLock, staging_dir: Path) -> None:
        if cookbook.cookbook_path is None:
            raise ExportAssemblyError(f"Cookbook '{cookbook.name}' has not been validated")

        export_path = layout.cookbooks_dir(staging_dir) / cookbook.export_dirname
        export_path.mkdir(exist_ok=True)

        for entry in self._package_filter.filter(cookbook.cookbook_path):
            target = export_path / entry.name
            if entry.is_dir() and not entry.is_symlink():
                shutil.copytree(entry, target, symlinks=True)
            else:
                shutil.copy2(entry, target, follow_symlinks=False)

        for name in STALE_METADATA_FILES:
            (export_path / name).unlink(missing_ok=True)

        metadata = dict(cookbook.metadata)
        metadata.setdefault("name", cookbook.name)
        metadata["version"] = cookbook.resolved_version
        _write_json(export_path / "metadata.json", metadata)

        console.print(f"[dim][ASSEMBLER] Copied cookbook {cookbook.export_dirname}[/dim]")

    def _create_policyfile_data_item(self, lock: PolicyLock, staging_dir: Path) -> None:
        """
        Write the policy as a data bag item for chef-zero's compatibility mode.

        json_class is required by chef-client's compatibility mode reader.
        """
        policy_id = layout.policy_id(lock.name)
        lock_data = lock.to_lock()
        lock_data["id"] = policy_id

        data_item = {
            "id": policy_id,
            "name": f"data_bag_item_{layout.POLICYFILES_DATA_BAG}_{policy_id}",
            "data_bag": layout.POLICYFILES_DATA_BAG,
            "raw_data": lock_data,
            "json_class": "Chef::DataBagItem",
        }
        item_path = layout.policyfiles_data_bag_dir(staging_dir) / f"{policy_id}.json"
        _write_json(item_path, data_item)

    def _copy_policyfile_lock(self, lock: PolicyLock, staging_dir: Path) -> None:
        _write_json(layout.lockfile_path(staging_dir), lock.to_lock())

    def _create_client_rb(self, lock: PolicyLock, staging_dir: Path) -> None:
        config = CLIENT_RB_TEMPLATE.format(policy_name=lock.name, policy_group=layout.POLICY_GROUP)
        with open(layout.client_rb_path(staging_dir), "w") as f:
            f.write(config)
