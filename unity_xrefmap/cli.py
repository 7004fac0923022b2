"""unity-xrefmap CLI — build DocFX xrefmaps for Unity release branches."""

import logging
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from unity_xrefmap import __version__

console = Console()

EXIT_VERSION_FAILED = 1
EXIT_SETUP_FAILED = 2


@click.command()
@click.version_option(version=__version__)
@click.argument("versions", nargs=-1)
@click.option("--config", "-c", "config_path", default=None, type=click.Path(exists=True, dir_okay=False), help="YAML config file")
@click.option("--repository", "-r", default=None, help="Local path of the UnityCsReference clone")
@click.option("--repository-url", default=None, help="URL to clone from when the local clone is missing")
@click.option("--metadata", "-m", default=None, help="Directory docfx writes metadata into")
@click.option("--output", "-o", default=None, help="Output root for <version>/xrefmap.yml")
@click.option("--working-dir", "-w", default=None, help="Directory to run docfx in")
@click.option("--timeout", type=float, default=None, help="Seconds before a docfx run is killed")
@click.option("--fetch/--no-fetch", default=None, help="Fetch origin before listing branches")
@click.option("--verbose", "-v", is_flag=True, help="Log docfx output and per-file progress")
def main(
    versions: tuple,
    config_path: str | None,
    repository: str | None,
    repository_url: str | None,
    metadata: str | None,
    output: str | None,
    working_dir: str | None,
    timeout: float | None,
    fetch: bool | None,
    verbose: bool,
):
    """Generate xrefmap.yml files for Unity scripting API versions.

    VERSIONS restricts the run to exact release versions (e.g. 2021.3).
    Without it, every origin/<year>.<minor> branch is processed.
    """
    from unity_xrefmap.config import XRefMapConfig, load_config
    from unity_xrefmap.errors import SetupError
    from unity_xrefmap.log import configure_logging
    from unity_xrefmap.pipeline import VersionPipeline
    from unity_xrefmap.utils.docfx import DocfxRunner
    from unity_xrefmap.utils.git_ops import GitVersionSource

    configure_logging(logging.DEBUG if verbose else logging.INFO)

    console.print("\n[bold blue]unity-xrefmap[/] — Building XRef maps\n")

    try:
        config = load_config(config_path) if config_path else XRefMapConfig()
        config = config.with_overrides(
            repository_path=repository,
            repository_url=repository_url,
            metadata_path=metadata,
            output_path=output,
            working_dir=working_dir,
            tool_timeout_seconds=timeout,
            fetch=fetch,
        )

        generator = DocfxRunner(
            config.tool_command,
            working_dir=config.working_dir,
            timeout=config.tool_timeout_seconds,
        )
        with GitVersionSource(config.repository_url, config.repository_path, fetch=config.fetch) as source:
            report = VersionPipeline(config, source, generator).run(versions)
    except SetupError as e:
        console.print(f"[red]Setup failed:[/] {escape(str(e))}")
        sys.exit(EXIT_SETUP_FAILED)

    if not report.results:
        console.print("[yellow]No release branches found.[/]")
        return

    table = Table(title=f"XRef maps ({report.summary()})")
    table.add_column("Version", style="cyan")
    table.add_column("Status")
    table.add_column("References", justify="right")
    table.add_column("Details")

    styles = {"succeeded": "green", "skipped": "yellow", "failed": "red", "filtered": "dim"}
    for result in report.results:
        style = styles.get(result.status, "")
        details = str(result.output_path) if result.output_path else result.reason
        table.add_row(
            result.version,
            f"[{style}]{result.status}[/]",
            str(result.reference_count) if result.reference_count else "",
            escape(details),
        )

    console.print(table)

    if report.failed:
        sys.exit(EXIT_VERSION_FAILED)


if __name__ == "__main__":
    main()
