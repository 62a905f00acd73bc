"""
Formatter configuration.
"""

from dataclasses import dataclass

from .handler import DEFAULT_BACKUP_SUFFIX
from .resource import DEFAULT_ENCODING

DEFAULT_MAX_PASSES = 100


@dataclass
class FormatterConfig:
    """Settings for a formatting run."""
    backup: bool = False
    backup_suffix: str = DEFAULT_BACKUP_SUFFIX
    encoding: str = DEFAULT_ENCODING
    max_passes: int = DEFAULT_MAX_PASSES
    dry_run: bool = False

    def __post_init__(self):
        if not self.backup_suffix:
            raise ValueError("backup_suffix must not be empty")
        if self.max_passes < 1:
            raise ValueError(f"max_passes must be at least 1, got {self.max_passes}")
