"""
Skillforge CLI - Command line interface for the Skillforge build.

Commands:
- build: Load sources, transform for every provider, package and mirror
- list: Show the commands and skills found in the source tree
- locate: Print the archive a download key resolves to
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from skillforge import __version__
from skillforge.config import config
from skillforge.engine.orchestrator import BuildOrchestrator
from skillforge.errors import SkillforgeError
from skillforge.models.build import BuildResult
from skillforge.models.definitions import CanonicalModel
from skillforge.store.downloads import DownloadIndex
from skillforge.store.mirror import MirrorSync
from skillforge.store.packaging import PackagingService
from skillforge.store.source_repository import SourceRepository


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def print_build_result(result: BuildResult) -> None:
    """Print build result in a formatted way."""
    click.echo("\n=== Build ===")
    for record in result.stages:
        click.echo(f"  ✓ {record.stage.value}")
    for archive in result.archives:
        click.echo(f"  {archive.provider:<12} {archive.entry_count:>4} files  {archive.path}")
    if result.extracts:
        click.echo(f"  {len(result.extracts)} single-entry downloads")
    for warning in result.warnings:
        click.echo(f"  ! {warning}")


def print_model_summary(model: CanonicalModel) -> None:
    """Print the loaded definitions."""
    click.echo(f"\n{'Command':<20} {'Category':<14} {'Ready':<6}")
    click.echo("-" * 42)
    for command in model.commands:
        click.echo(f"/{command.id:<19} {command.category.value:<14} {'yes' if command.ready else 'no':<6}")
    click.echo(f"\n{'Skill':<20} {'Focus areas':<14} {'Ready':<6}")
    click.echo("-" * 42)
    for skill in model.skills:
        click.echo(f"{skill.id:<20} {len(skill.focus_areas):<14} {'yes' if skill.ready else 'no':<6}")
    click.echo(f"\nPattern categories: {len(model.pattern_pairs)}")


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose: bool):
    """Skillforge - cross-provider command and skill builder"""
    configure_logging(verbose)


@cli.command()
@click.option('--source', '-s', type=click.Path(file_okay=False, path_type=Path), help='Definition store root')
@click.option('--dist', '-d', type=click.Path(file_okay=False, path_type=Path), help='Output root for provider trees')
@click.option('--downloads', type=click.Path(file_okay=False, path_type=Path), help='Output root for archives')
@click.option('--mirror-dir', type=click.Path(file_okay=False, path_type=Path), help='Local mirror directory')
@click.option('--no-mirror', is_flag=True, default=False, help='Skip syncing Claude Code output into the local mirror')
@click.option('--exclude-pending', is_flag=True, default=False, help='Leave entries marked not-ready out of the build')
@click.option('--parallel', is_flag=True, default=False, help='Run the provider transforms concurrently')
@click.option('--output', '-o', type=click.Path(dir_okay=False, path_type=Path), help='Write the build result as JSON')
def build(
    source: Optional[Path],
    dist: Optional[Path],
    downloads: Optional[Path],
    mirror_dir: Optional[Path],
    no_mirror: bool,
    exclude_pending: bool,
    parallel: bool,
    output: Optional[Path],
):
    """
    Build every provider bundle from the source definitions.

    Exits 0 on success and 1 when any stage fails.
    """
    dist_dir = dist or config.dist_dir
    download_dir = downloads or (dist_dir / "downloads" if dist else config.download_dir)

    try:
        orchestrator = BuildOrchestrator(
            repository=SourceRepository(source or config.source_dir),
            packaging=PackagingService(dist_dir=dist_dir, download_dir=download_dir),
            mirror=MirrorSync(mirror_dir or config.mirror_dir),
            include_pending=False if exclude_pending else None,
            parallel=True if parallel else None,
            sync_mirror=False if no_mirror else None,
        )
        result = orchestrator.run()
    except Exception as e:
        click.echo(f"\n✗ Error: {str(e)}", err=True)
        sys.exit(2)

    print_build_result(result)

    if output:
        with open(output, 'w', encoding='utf-8') as f:
            json.dump(result.model_dump(mode='json'), f, indent=2, ensure_ascii=False, default=str)
        click.echo(f"\nResult written to: {output}")

    if result.ok:
        click.echo(f"\n✓ {result.diagnostic()}")
        sys.exit(0)
    click.echo(f"\n✗ {result.diagnostic()}", err=True)
    sys.exit(1)


@cli.command(name='list')
@click.option('--source', '-s', type=click.Path(file_okay=False, path_type=Path), help='Definition store root')
def list_definitions(source: Optional[Path]):
    """
    List the commands and skills in the source tree.
    """
    try:
        model = SourceRepository(source or config.source_dir).load()
    except SkillforgeError as e:
        click.echo(f"✗ {str(e)}", err=True)
        sys.exit(1)

    if model.is_empty:
        click.echo("No commands or skills found")
        sys.exit(0)
    print_model_summary(model)


@cli.command()
@click.argument('provider')
@click.argument('kind', required=False)
@click.argument('entry_id', required=False)
@click.option('--downloads', type=click.Path(file_okay=False, path_type=Path), help='Archive root')
def locate(provider: str, kind: Optional[str], entry_id: Optional[str], downloads: Optional[Path]):
    """
    Print the archive a download resolves to.

    PROVIDER alone names the whole bundle; PROVIDER KIND ID names one entry
    (e.g. "claude-code command audit").
    """
    if (kind is None) != (entry_id is None):
        click.echo("Error: KIND and ENTRY_ID must be given together", err=True)
        sys.exit(1)

    key = provider if kind is None else f"{provider}/{kind}/{entry_id}"
    try:
        path = DownloadIndex(downloads or config.download_dir).resolve(key)
    except SkillforgeError as e:
        click.echo(f"✗ {str(e)}", err=True)
        sys.exit(1)
    click.echo(str(path))


if __name__ == '__main__':
    cli()
