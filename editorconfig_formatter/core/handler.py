"""
Formatting Handler Module

This module applies the fixes of detected violations to an open document,
one pass at a time, and persists the document once a pass finishes without
conflicts.
"""

import os
import logging
from pathlib import Path
from typing import List, Optional, Set

from .document import EditableDocument
from .exceptions import FormatError
from .models import ReturnState, Violation
from .summary import FileReport, FileStatus, RunSummary

logger = logging.getLogger(__name__)

DEFAULT_BACKUP_SUFFIX = ".orig"


class FormattingHandler:
    """
    Pass coordinator for the violations of one file at a time.

    This class provides:
    - Collection of the violations reported for the open file
    - Application of at most one fix per source line per pass
    - The recheck signal when same-line fixes had to be deferred
    - Backup and storage of the document once a pass completes cleanly

    Usage follows the detector's lifecycle: ``start_files()``, then per file
    ``start_file()``, ``handle()`` for each violation and ``end_file()``,
    repeating detection and ``end_file()`` while it returns
    ``RECHECK_NEEDED``, and finally ``end_files()``.
    """

    def __init__(self, backup: bool = False, backup_suffix: str = DEFAULT_BACKUP_SUFFIX,
                 dry_run: bool = False):
        """
        Initialize the handler.

        Args:
            backup: Whether to keep the original file as ``<path><backup_suffix>``
            backup_suffix: Suffix appended to the path of the backup file
            dry_run: Apply fixes in memory only, never touching the disk
        """
        self.backup = backup
        self.backup_suffix = backup_suffix
        self.dry_run = dry_run
        self.summary = RunSummary()
        self.violations: List[Violation] = []
        self._current_file: Optional[EditableDocument] = None
        self._report: Optional[FileReport] = None

    @property
    def current_file(self) -> Optional[EditableDocument]:
        return self._current_file

    @property
    def last_report(self) -> Optional[FileReport]:
        """Report of the most recently finished file."""
        return self._report if self._current_file is None else None

    def start_files(self, summary: Optional[RunSummary] = None) -> RunSummary:
        """Begin a run, recording into ``summary`` or a fresh one."""
        self.summary = summary if summary is not None else RunSummary()
        return self.summary

    def start_file(self, document: EditableDocument):
        """
        Open a file for formatting.

        Args:
            document: The document the following violations belong to

        Raises:
            FormatError: If another file is still open
        """
        if self._current_file is not None:
            raise FormatError(f"Cannot start {document} while {self._current_file} is still open")
        self._current_file = document
        self._report = FileReport(document.path, FileStatus.UNCHANGED)
        self.violations.clear()

    def handle(self, violation: Violation):
        """Collect a violation for the current pass."""
        self.violations.append(violation)

    def has_violations(self) -> bool:
        return bool(self.violations)

    def abandon_file(self):
        """Release the open file without recording it."""
        self._current_file = None
        self._report = None
        self.violations.clear()

    def end_file(self) -> ReturnState:
        """
        Resolve the violations collected for the open file.

        Returns:
            ``FINISHED`` once the file has been fully handled, or
            ``RECHECK_NEEDED`` if some fixes were deferred because another
            fix already edited their line in this pass

        Raises:
            FormatError: If the file cannot be read, backed up or written
            IndexError: If a violation's location does not exist in the
                document
        """
        document = self._current_file
        if document is None:
            raise FormatError("No file is open")
        report = self._report
        report.passes += 1

        try:
            if not self.violations:
                logger.debug(f"No formatting violations found in file {document}")
                state = ReturnState.FINISHED
            else:
                count = len(self.violations)
                logger.debug(f"Fixing {count} formatting {'violation' if count == 1 else 'violations'} in file {document}")
                state = self._apply_pass(document, report)

            if state == ReturnState.FINISHED:
                self._backup_and_store_if_needed(document, report)
                self._current_file = None
                self.summary.record(report)
            return state
        except (OSError, UnicodeError) as e:
            self.abandon_file()
            raise FormatError(f"Could not format file {document}") from e
        except Exception:
            self.abandon_file()
            raise
        finally:
            self.violations.clear()

    def _apply_pass(self, document: EditableDocument, report: FileReport) -> ReturnState:
        # Later edits locate their line against the already edited buffer,
        # which is only sound when lines are visited in ascending order.
        ordered = sorted(self.violations, key=lambda v: v.location.line)
        lines_edited: Set[int] = set()
        recheck_needed = False

        for violation in ordered:
            location = violation.location
            if location.line in lines_edited:
                recheck_needed = True
                report.fixes_deferred += 1
                continue
            line_start = document.find_line_start(location.line)
            edit_offset = line_start + location.column - 1
            fix = violation.fix
            logger.debug(f"About to perform '{fix.message}' at line {location.line}, column {location.column}, "
                         f"lineStartOffset {line_start}, editOffset {edit_offset}")
            fix.fix(document, edit_offset)
            lines_edited.add(location.line)
            report.fixes_applied += 1

        if recheck_needed:
            logger.debug(f"Deferred same-line fixes in {document}, recheck needed")
            return ReturnState.RECHECK_NEEDED
        return ReturnState.FINISHED

    def backup_path_for(self, path: Path) -> Path:
        return Path(str(path) + self.backup_suffix)

    def _backup_and_store_if_needed(self, document: EditableDocument, report: FileReport):
        if not document.loaded or not document.changed():
            return
        report.status = FileStatus.FORMATTED
        if self.dry_run:
            logger.debug(f"Dry run, not writing {document}")
            return
        if self.backup:
            backup_file = self.backup_path_for(document.path)
            if backup_file.exists():
                raise FileExistsError(f"Backup file {backup_file} already exists")
            os.rename(document.path, backup_file)
            report.backup_path = backup_file
            logger.info(f"Created backup: {backup_file}")
        document.store()
        report.stored = True

    def end_files(self) -> RunSummary:
        processed = self.summary.processed_files
        edited = self.summary.edited_files
        logger.info(f"Processed {processed} {'file' if processed == 1 else 'files'}")
        logger.info(f"Formatted {edited} {'file' if edited == 1 else 'files'}")
        return self.summary
