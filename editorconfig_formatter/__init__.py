"""
editorconfig-formatter

Applies the fixes of detected style violations to files, safely and one
line edit per pass at a time.
"""

__version__ = "1.0.0"

from .core.document import EditableDocument
from .core.edits import Delete, Edit, Insert, Replace
from .core.models import Location, ReturnState, Violation
from .core.handler import FormattingHandler
from .core.formatter import FormatRunner

__all__ = [
    'EditableDocument',
    'Edit',
    'Insert',
    'Delete',
    'Replace',
    'Location',
    'Violation',
    'ReturnState',
    'FormattingHandler',
    'FormatRunner'
]
