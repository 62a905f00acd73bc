"""
Value types shared by the detector adapters and the formatting handler.
"""

from dataclasses import dataclass
from enum import Enum

from .edits import Edit


class ReturnState(Enum):
    """Outcome of a formatting pass over one file."""
    FINISHED = "finished"
    RECHECK_NEEDED = "recheck_needed"


@dataclass(frozen=True)
class Location:
    """A 1-based line and column in a file."""
    line: int
    column: int

    def __post_init__(self):
        if self.line < 1 or self.column < 1:
            raise ValueError(f"Location is 1-based, got line {self.line}, column {self.column}")

    def __str__(self):
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Violation:
    """A detected issue at a location together with the edit that fixes it."""
    location: Location
    fix: Edit
    rule: str = ""
    message: str = ""
