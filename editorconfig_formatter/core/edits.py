"""
Edits Module

An edit is the corrective part of a violation: a single bounded mutation of
a document anchored at one absolute offset. The detector decides what the
edit is; the handler decides where and when it is applied.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from .document import EditableDocument


class Edit(ABC):
    """A fix that can be applied to a document at a given offset."""

    @property
    @abstractmethod
    def message(self) -> str:
        """Human-readable description of the fix."""

    @abstractmethod
    def fix(self, document: EditableDocument, offset: int):
        """Apply the fix to ``document`` at ``offset``."""


def _escape(text: str) -> str:
    return text.replace('\r', '\\r').replace('\n', '\\n').replace('\t', '\\t')


@dataclass(frozen=True)
class Insert(Edit):
    """Insert ``text`` at the offset."""
    text: str
    description: str = field(default="", compare=False)

    @property
    def message(self) -> str:
        return self.description or f"Insert '{_escape(self.text)}'"

    def fix(self, document: EditableDocument, offset: int):
        document.insert(offset, self.text)


@dataclass(frozen=True)
class Delete(Edit):
    """Delete ``length`` characters starting at the offset."""
    length: int
    description: str = field(default="", compare=False)

    def __post_init__(self):
        if self.length < 0:
            raise ValueError(f"Delete length must not be negative, got {self.length}")

    @property
    def message(self) -> str:
        return self.description or f"Delete {self.length} {'character' if self.length == 1 else 'characters'}"

    def fix(self, document: EditableDocument, offset: int):
        document.delete(offset, offset + self.length)


@dataclass(frozen=True)
class Replace(Edit):
    """Replace ``length`` characters starting at the offset with ``text``."""
    length: int
    text: str
    description: str = field(default="", compare=False)

    def __post_init__(self):
        if self.length < 0:
            raise ValueError(f"Replace length must not be negative, got {self.length}")

    @property
    def message(self) -> str:
        return self.description or f"Replace {self.length} {'character' if self.length == 1 else 'characters'} with '{_escape(self.text)}'"

    def fix(self, document: EditableDocument, offset: int):
        document.replace(offset, offset + self.length, self.text)
