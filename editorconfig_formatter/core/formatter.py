"""
Formatter Module

This module drives detection and fixing over whole files: it opens each file
as an editable document, alternates detection with formatting passes until
the handler reports the file finished, and keeps the run summary.
"""

import os
from pathlib import Path
from typing import Iterable, List, Optional, Union
import logging

from .config import FormatterConfig
from .detector import Detector
from .document import EditableDocument
from .exceptions import FormatError
from .handler import FormattingHandler
from .models import ReturnState
from .summary import FileReport, RunSummary

logger = logging.getLogger(__name__)


class FormatRunner:
    """
    Driver for formatting files with a detector.

    This class provides:
    - Repeated detection and fixing of a file until no conflicts remain
    - A bound on the number of passes per file
    - Multi-file runs that continue past files that fail
    - Previews of the fixed content without writing anything
    """

    def __init__(self, detector: Detector, config: Optional[FormatterConfig] = None):
        """
        Initialize the runner.

        Args:
            detector: Source of the violations of each file
            config: Run settings, defaults when omitted
        """
        self.detector = detector
        self.config = config or FormatterConfig()
        self.handler = FormattingHandler(
            backup=self.config.backup,
            backup_suffix=self.config.backup_suffix,
            dry_run=self.config.dry_run
        )

    def _run_passes(self, document: EditableDocument):
        handler = self.handler
        handler.start_file(document)
        for pass_number in range(1, self.config.max_passes + 1):
            try:
                for violation in self.detector.detect(document):
                    handler.handle(violation)
            except Exception:
                handler.abandon_file()
                raise
            state = handler.end_file()
            if state == ReturnState.FINISHED:
                return
            logger.debug(f"Pass {pass_number} over {document} deferred fixes, detecting again")

        handler.abandon_file()
        raise FormatError(f"Could not format file {document}: still conflicting after {self.config.max_passes} passes")

    def format_file(self, path: Union[str, Path]) -> FileReport:
        """
        Format a single file.

        Args:
            path: File to format

        Returns:
            Report of what was done to the file

        Raises:
            FormatError: If the file cannot be read, detected, or written
        """
        document = EditableDocument(path, self.config.encoding)
        self._run_passes(document)
        report = self.handler.last_report
        logger.debug(f"Finished {path}: {report.status.value}, {report.fixes_applied} fixes in {report.passes} passes")
        return report

    def format_files(self, paths: Iterable[Union[str, Path]]) -> RunSummary:
        """
        Format several files, one after another.

        A file that fails is logged and recorded as failed; the remaining
        files are still processed.

        Args:
            paths: Files to format

        Returns:
            Summary of the run
        """
        summary = self.handler.start_files(RunSummary())
        for path in paths:
            logger.info(f"Formatting file: {path}")
            try:
                self.format_file(path)
            except (FormatError, IndexError) as e:
                logger.error(f"Failed to format {path}: {e}")
                summary.record_failure(Path(path), e)
        return self.handler.end_files()

    def preview_file(self, path: Union[str, Path]) -> str:
        """
        Get the content a file would have after formatting, leaving it untouched.

        Args:
            path: File to preview

        Returns:
            The fixed content
        """
        original_dry_run = self.handler.dry_run
        self.handler.dry_run = True
        try:
            document = EditableDocument(path, self.config.encoding)
            self._run_passes(document)
            return document.as_string()
        finally:
            self.handler.dry_run = original_dry_run


def restore_backup(path: Union[str, Path], backup_suffix: str) -> Path:
    """
    Move ``<path><backup_suffix>`` back over ``path``.

    Args:
        path: The formatted file
        backup_suffix: Suffix the backup was created with

    Returns:
        Path of the backup that was restored

    Raises:
        FormatError: If there is no backup or it cannot be moved
    """
    path = Path(path)
    backup_file = Path(str(path) + backup_suffix)
    if not backup_file.is_file():
        raise FormatError(f"No backup found for {path} at {backup_file}")
    try:
        os.replace(backup_file, path)
    except OSError as e:
        raise FormatError(f"Could not restore {path} from {backup_file}") from e
    logger.info(f"Restored {path} from backup {backup_file}")
    return backup_file


def collect_files(paths: Iterable[Union[str, Path]], pattern: str = "*", recursive: bool = True,
                  backup_suffix: Optional[str] = None) -> List[Path]:
    """
    Expand directories into the files to format.

    Args:
        paths: Files and directories
        pattern: Glob pattern files inside directories must match
        recursive: Whether to descend into subdirectories
        backup_suffix: Files found inside directories ending with this suffix
            are skipped; files named explicitly are kept

    Returns:
        Sorted, de-duplicated list of files
    """
    files = []
    for path in map(Path, paths):
        if path.is_dir():
            candidates = path.rglob(pattern) if recursive else path.glob(pattern)
            files.extend(p for p in candidates
                         if p.is_file() and not (backup_suffix and p.name.endswith(backup_suffix)))
        else:
            files.append(path)

    logger.info(f"Found {len(set(files))} files to format")
    return sorted(set(files))
