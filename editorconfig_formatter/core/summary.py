"""
Run Summary Module

This module collects the per-file outcomes of a formatting run and derives
the totals reported at the end of it.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class FileStatus(Enum):
    """Outcome categories for a processed file."""
    UNCHANGED = "Unchanged"
    FORMATTED = "Formatted"
    FAILED = "Failed"


@dataclass
class FileReport:
    """What happened to a single file."""
    path: Path
    status: FileStatus
    passes: int = 0
    fixes_applied: int = 0
    fixes_deferred: int = 0
    stored: bool = False
    backup_path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def filename(self) -> str:
        return self.path.name

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': str(self.path),
            'status': self.status.value,
            'passes': self.passes,
            'fixes_applied': self.fixes_applied,
            'fixes_deferred': self.fixes_deferred,
            'stored': self.stored,
            'backup_path': str(self.backup_path) if self.backup_path else None,
            'error': self.error,
        }


@dataclass
class RunSummary:
    """
    Accumulator for the reports of one run.

    Only files that reached a final state are counted as processed; a file
    whose processing failed is listed under ``failures`` instead.
    """
    reports: List[FileReport] = field(default_factory=list)
    failures: List[FileReport] = field(default_factory=list)

    def record(self, report: FileReport):
        self.reports.append(report)

    def record_failure(self, path: Path, error: Exception):
        logger.debug(f"Recording failure for {path}: {error}")
        self.failures.append(FileReport(Path(path), FileStatus.FAILED, error=str(error)))

    @property
    def processed_files(self) -> int:
        return len(self.reports)

    @property
    def edited_files(self) -> int:
        return sum(1 for r in self.reports if r.status == FileStatus.FORMATTED)

    @property
    def failed_files(self) -> int:
        return len(self.failures)

    @property
    def total_fixes(self) -> int:
        return sum(r.fixes_applied for r in self.reports)

    @property
    def success_rate(self) -> float:
        total = self.processed_files + self.failed_files
        return (self.processed_files / total * 100) if total > 0 else 100.0

    def all_reports(self) -> List[FileReport]:
        return self.reports + self.failures

    def to_dict(self) -> Dict[str, Any]:
        return {
            'summary': {
                'processed_files': self.processed_files,
                'edited_files': self.edited_files,
                'failed_files': self.failed_files,
                'total_fixes': self.total_fixes,
                'success_rate': self.success_rate,
            },
            'files': [r.to_dict() for r in self.all_reports()],
        }
