"""
Command-line interface for the editorconfig-formatter.

This module provides CLI commands for formatting files with the fixes an
external detector reports, previewing those fixes, and restoring backups.
"""

import sys
import json
import click
import logging
from pathlib import Path
from rich.console import Console
from rich.table import Table
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.panel import Panel

from .. import __version__
from ..core.config import DEFAULT_MAX_PASSES, FormatterConfig
from ..core.detector import CommandDetector
from ..core.exceptions import FormatError
from ..core.formatter import FormatRunner, collect_files, restore_backup
from ..core.handler import DEFAULT_BACKUP_SUFFIX
from ..core.resource import DEFAULT_ENCODING
from ..core.summary import FileStatus

console = Console()

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

detector_option = click.option('--detector', '-d', required=True,
                               help='Detector command; receives the file path as last argument '
                                    'and the content on stdin, prints violations as JSON')
encoding_option = click.option('--encoding', default=DEFAULT_ENCODING, show_default=True,
                               help='Character encoding of the files')
max_passes_option = click.option('--max-passes', type=click.IntRange(min=1), default=DEFAULT_MAX_PASSES,
                                 show_default=True, help='Maximum formatting passes per file')
backup_suffix_option = click.option('--backup-suffix', default=DEFAULT_BACKUP_SUFFIX, show_default=True,
                                    help='Suffix of backup files')


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
def main(verbose):
    """editorconfig-formatter - Apply detected style fixes to files."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        console.print("[dim]Verbose mode enabled[/dim]")


@main.command()
@click.argument('paths', nargs=-1, required=True, type=click.Path(exists=True))
@detector_option
@click.option('--backup/--no-backup', default=False, help='Keep the original of each changed file')
@backup_suffix_option
@encoding_option
@max_passes_option
@click.option('--pattern', default='*', show_default=True, help='Glob pattern for files inside directories')
@click.option('--recursive/--no-recursive', default=True, help='Descend into subdirectories')
@click.option('--dry-run', is_flag=True, help='Show what would be fixed without making changes')
@click.option('--output', '-o', type=click.Path(), help='Output file for the run summary (JSON format)')
def format(paths, detector, backup, backup_suffix, encoding, max_passes, pattern, recursive, dry_run, output):
    """Format files by applying the fixes reported by the detector."""
    if dry_run:
        console.print("[dim]Running in dry-run mode - no changes will be made[/dim]")

    try:
        config = FormatterConfig(backup=backup, backup_suffix=backup_suffix, encoding=encoding,
                                 max_passes=max_passes, dry_run=dry_run)
        runner = FormatRunner(CommandDetector(detector), config)
    except ValueError as e:
        raise click.BadParameter(str(e))

    files = collect_files(paths, pattern=pattern, recursive=recursive, backup_suffix=backup_suffix)
    if not files:
        console.print("[yellow]No files found to format[/yellow]")
        return

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console
    ) as progress:
        task = progress.add_task(f"Formatting {len(files)} files...", total=None)
        summary = runner.format_files(files)
        progress.update(task, description="Done")

    display_summary(summary, dry_run)

    if output:
        save_summary_to_file(summary, output)
        console.print(f"[green]Summary saved to {output}[/green]")

    if summary.failed_files:
        sys.exit(1)


@main.command()
@click.argument('filepath', type=click.Path(exists=True, dir_okay=False))
@detector_option
@encoding_option
@max_passes_option
def preview(filepath, detector, encoding, max_passes):
    """Preview a file with its fixes applied."""
    console.print(f"[bold magenta]Preview fixes for:[/bold magenta] {filepath}")

    runner = FormatRunner(CommandDetector(detector), FormatterConfig(encoding=encoding, max_passes=max_passes))
    try:
        content = runner.preview_file(filepath)
        report = runner.handler.last_report
    except (FormatError, IndexError) as e:
        console.print(f"[red]Error generating preview: {e}[/red]")
        sys.exit(1)

    if report.status == FileStatus.UNCHANGED:
        console.print("[green]File has no violations to fix![/green]")
        return

    console.print(Panel(content, title="Formatted Content", border_style="green"))
    console.print(f"[green]Would apply {report.fixes_applied} fixes in {report.passes} passes[/green]")


@main.command()
@click.argument('filepath', type=click.Path(dir_okay=False))
@backup_suffix_option
def restore(filepath, backup_suffix):
    """Restore a file from its backup."""
    try:
        backup_file = restore_backup(filepath, backup_suffix)
    except FormatError as e:
        console.print(f"[red]Failed to restore {filepath}: {e}[/red]")
        sys.exit(1)
    console.print(f"[green]Restored {filepath} from {backup_file}[/green]")


def display_summary(summary, dry_run=False):
    """Display per-file results and run totals."""
    table = Table(title="Files")
    table.add_column("File", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Fixes", justify="center")
    table.add_column("Passes", justify="center")
    table.add_column("Details", style="dim")

    status_styles = {
        FileStatus.UNCHANGED: "green",
        FileStatus.FORMATTED: "yellow",
        FileStatus.FAILED: "red",
    }
    for report in summary.all_reports():
        style = status_styles.get(report.status, "white")
        if report.error:
            details = report.error
        elif report.backup_path:
            details = f"backup: {report.backup_path.name}"
        else:
            details = ""
        table.add_row(
            str(report.path),
            f"[{style}]{report.status.value}[/{style}]",
            str(report.fixes_applied),
            str(report.passes),
            details
        )
    console.print(table)

    verb = "Would format" if dry_run else "Formatted"
    summary_text = f"""
Processed Files: {summary.processed_files}
{verb}: {summary.edited_files}
Failed: {summary.failed_files}
Fixes Applied: {summary.total_fixes}
Success Rate: {summary.success_rate:.1f}%
    """.strip()
    console.print(Panel(summary_text, title="Summary", border_style="blue"))


def save_summary_to_file(summary, output_path):
    """Save the run summary as JSON."""
    with open(Path(output_path), 'w') as f:
        json.dump(summary.to_dict(), f, indent=2)


if __name__ == '__main__':
    main()
