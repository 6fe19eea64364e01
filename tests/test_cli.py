"""
Tests for the policy-export command line.
"""

import pytest
from click.testing import CliRunner

from policy_export.cli import main


@pytest.fixture
def cli_env(tmp_path, settings, monkeypatch):
    """Keep the CLI's settings and .env lookup inside tmp_path."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("POLICY_EXPORT_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.setenv("POLICY_EXPORT_STAGING_ROOT", str(settings.staging_root))
    monkeypatch.setenv("POLICY_EXPORT_CACHE_PATH", str(settings.cookbook_cache_path))


class TestCli:
    """Tests for the policy-export command."""

    def test_directory_export(self, cli_env, lockfile, policy_root, export_dir):
        """A directory export prints how to converge with it."""
        result = CliRunner().invoke(main, [str(export_dir), "--root-dir", str(policy_root)])
        assert result.exit_code == 0, result.output
        assert "Exported policy 'base'" in result.output
        assert "chef-client -z" in result.output
        assert (export_dir / "client.rb").is_file()

    def test_archive_export(self, cli_env, lockfile, policy_root, export_dir):
        """--archive writes the .tgz."""
        result = CliRunner().invoke(main, [str(export_dir), "-D", str(policy_root), "--archive"])
        assert result.exit_code == 0, result.output
        assert (export_dir / "base-abc123.tgz").is_file()

    def test_missing_lock_exits_nonzero(self, cli_env, policy_root, export_dir):
        """Errors are reported and exit with status 1."""
        result = CliRunner().invoke(main, [str(export_dir), "-D", str(policy_root)])
        assert result.exit_code == 1
        assert "lock_not_found" in result.output

    def test_conflict_then_force(self, cli_env, lockfile, policy_root, export_dir):
        """A dirty destination needs --force."""
        (export_dir / "cookbooks" / "app-0.9.0").mkdir(parents=True)
        result = CliRunner().invoke(main, [str(export_dir), "-D", str(policy_root)])
        assert result.exit_code == 1
        assert "conflict" in result.output

        result = CliRunner().invoke(main, [str(export_dir), "-D", str(policy_root), "--force"])
        assert result.exit_code == 0, result.output
        assert not (export_dir / "cookbooks" / "app-0.9.0").exists()
