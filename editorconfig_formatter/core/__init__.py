"""
Core modules for loading documents, applying fixes, and persisting results.
"""

from .config import FormatterConfig
from .detector import CommandDetector, Detector
from .document import EditableDocument, content_fingerprint
from .edits import Delete, Edit, Insert, Replace
from .exceptions import DetectorError, FormatError
from .formatter import FormatRunner, collect_files, restore_backup
from .handler import FormattingHandler
from .models import Location, ReturnState, Violation
from .parser import ViolationParser
from .resource import Resource
from .summary import FileReport, FileStatus, RunSummary

__all__ = [
    'FormatterConfig',
    'CommandDetector',
    'Detector',
    'EditableDocument',
    'content_fingerprint',
    'Delete',
    'Edit',
    'Insert',
    'Replace',
    'DetectorError',
    'FormatError',
    'FormatRunner',
    'collect_files',
    'restore_backup',
    'FormattingHandler',
    'Location',
    'ReturnState',
    'Violation',
    'ViolationParser',
    'Resource',
    'FileReport',
    'FileStatus',
    'RunSummary'
]
