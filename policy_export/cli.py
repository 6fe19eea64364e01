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
# POLICY EXPORT - COMMAND LINE
# -----------------------------------------------------------------------------
# Usage:
#   policy-export EXPORT_DIR [POLICYFILE] [--root-dir DIR] [--archive] [--force]
#
# Loads .env from the working directory, so POLICY_EXPORT_* settings can live
# there.
# -----------------------------------------------------------------------------

import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console

from policy_export import __version__
from policy_export.core import ExportRepo, PolicyExportError, load_settings
from policy_export.core.errors import CommitError

console = Console()


def _describe(error: PolicyExportError) -> str:
    lines = [error.message]
    for cause in error.causes():
        message = cause.message if isinstance(cause, PolicyExportError) else str(cause)
        lines.append(f"  caused by: {message}")
    return "\n".join(lines)


@click.command()
@click.version_option(__version__)
@click.argument("export_dir", type=click.Path(file_okay=False))
@click.argument("policyfile", required=False)
@click.option("--root-dir", "-D", type=click.Path(file_okay=False), help="Policyfile directory")
@click.option("--archive", "-a", is_flag=True, help="Write a single .tgz archive")
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing export")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Settings YAML")
def main(
    export_dir: str,
    policyfile: str | None,
    root_dir: str | None,
    archive: bool,
    force: bool,
    config_path: str | None,
):
    """Export a locked policy to EXPORT_DIR for use with chef-zero."""
    load_dotenv(Path.cwd() / ".env")

    try:
        settings = load_settings(Path(config_path) if config_path else None)
        exporter = ExportRepo(
            export_dir=export_dir,
            policyfile=policyfile,
            root_dir=root_dir,
            archive=archive,
            force=force,
            settings=settings,
        )
        result = exporter.run()
    except PolicyExportError as e:
        console.print(f"[bold red]Export failed ({e.kind}):[/bold red] {_describe(e)}")
        if isinstance(e, CommitError) and e.inconsistent:
            console.print("[yellow]The export dir may be inconsistent; clean it before retrying.[/yellow]")
        sys.exit(1)

    click.echo(f"Exported policy '{exporter.policy_name}' to {result}")
    if not archive:
        click.echo("")
        click.echo("To converge this system with the exported policy, run:")
        click.echo(f"  cd {result}")
        click.echo("  chef-client -z")


if __name__ == "__main__":
    main()
