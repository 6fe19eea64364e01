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
# EXPORTED REPO LAYOUT
# -----------------------------------------------------------------------------
# Path helpers shared by staging, the conflict guard and both commit modes.
# The same layout is used inside the staging directory and at the
# destination:
#
#   cookbooks/<name>-<version>/...
#   data_bags/policyfiles/<policy>-local.json
#   Policyfile.lock.json
#   client.rb
# -----------------------------------------------------------------------------

from pathlib import Path

# Exported policies are served by a local chef-zero with a single iteration,
# so the policy group is always this well-known value.
POLICY_GROUP = "local"

COOKBOOKS_DIR = "cookbooks"
DATA_BAGS_DIR = "data_bags"
POLICYFILES_DATA_BAG = "policyfiles"
LOCKFILE_NAME = "Policyfile.lock.json"
CLIENT_RB_NAME = "client.rb"


def policy_id(policy_name: str) -> str:
    return f"{policy_name}-{POLICY_GROUP}"


def cookbooks_dir(root: Path) -> Path:
    return root / COOKBOOKS_DIR


def data_bags_dir(root: Path) -> Path:
    return root / DATA_BAGS_DIR


def policyfiles_data_bag_dir(root: Path) -> Path:
    return root / DATA_BAGS_DIR / POLICYFILES_DATA_BAG


def lockfile_path(root: Path) -> Path:
    return root / LOCKFILE_NAME


def client_rb_path(root: Path) -> Path:
    return root / CLIENT_RB_NAME


def archive_path(export_dir: Path, policy_name: str, revision_id: str, extension: str) -> Path:
    """Archive file for one policy revision, placed directly in export_dir."""
    return export_dir / f"{policy_name}-{revision_id}.{extension}"
