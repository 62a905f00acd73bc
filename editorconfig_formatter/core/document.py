"""
Editable Document Module

This module provides the in-memory text buffer that fixes are applied to.
The buffer is bound to one file, loaded lazily on first access, and knows
whether its content has diverged from what was read from disk.
"""

import io
import logging
import re
from pathlib import Path
from typing import Optional, TextIO, Union

from .exceptions import FormatError
from .resource import DEFAULT_ENCODING, Resource

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024

_INT_MASK = 0xFFFFFFFF
_EOL_PATTERN = re.compile(r'\r\n|\r|\n')


def update_fingerprint(seed: int, chunk: str) -> int:
    """
    Fold ``chunk`` into a running content fingerprint.

    Computes ``h = 31 * h + code_unit`` over the UTF-16 code units of the
    chunk with signed 32-bit wraparound, so that feeding a text in pieces
    gives the same value as feeding it whole.

    Args:
        seed: Fingerprint of the content preceding ``chunk`` (0 for none)
        chunk: Text to fold in

    Returns:
        Signed 32-bit fingerprint
    """
    h = seed & _INT_MASK
    for char in chunk:
        code = ord(char)
        if code > 0xFFFF:
            code -= 0x10000
            h = (31 * h + (0xD800 + (code >> 10))) & _INT_MASK
            h = (31 * h + (0xDC00 + (code & 0x3FF))) & _INT_MASK
        else:
            h = (31 * h + code) & _INT_MASK
    return h - 0x100000000 if h & 0x80000000 else h


def content_fingerprint(text: str) -> int:
    """Fingerprint of a whole text, used for change detection."""
    return update_fingerprint(0, text)


class EditableDocument(Resource):
    """
    A mutable character buffer over a single file.

    This class provides:
    - Lazy, single loading of the file content
    - Line start lookup for 1-based line numbers
    - Offset based insert, delete and replace
    - Change detection against the content last read or written
    - Persistence back to the file

    Offsets are never adjusted on behalf of the caller: every edit must be
    computed against the buffer as it is at the time of that edit.
    """

    def __init__(self, path: Union[str, Path], encoding: str = DEFAULT_ENCODING):
        super().__init__(path, encoding)
        self._text: Optional[str] = None
        self._baseline_hash = 0

    @classmethod
    def from_text(cls, path: Union[str, Path], text: str,
                  encoding: str = DEFAULT_ENCODING) -> 'EditableDocument':
        """Create a document whose content is already loaded."""
        document = cls(path, encoding)
        document._text = text
        document._baseline_hash = content_fingerprint(text)
        return document

    @property
    def loaded(self) -> bool:
        return self._text is not None

    def _ensure_loaded(self) -> str:
        if self._text is None:
            try:
                with super().open_reader() as reader:
                    chunks = []
                    fingerprint = 0
                    while True:
                        chunk = reader.read(CHUNK_SIZE)
                        if not chunk:
                            break
                        chunks.append(chunk)
                        fingerprint = update_fingerprint(fingerprint, chunk)
            except (OSError, UnicodeError) as e:
                raise FormatError(f"Could not read {self.path}") from e
            self._text = ''.join(chunks)
            self._baseline_hash = fingerprint
            logger.debug(f"Loaded {len(self._text)} characters from {self.path}")
        return self._text

    def _check_span(self, start: int, end: int):
        length = len(self._ensure_loaded())
        if start < 0 or end > length or start > end:
            raise IndexError(f"Span [{start}, {end}) out of range for length {length} in {self.path}")

    def as_string(self) -> str:
        """Return the whole current content, loading it if needed."""
        return self._ensure_loaded()

    def length(self) -> int:
        """Return the number of characters in the buffer."""
        return len(self._ensure_loaded())

    def __len__(self):
        return self.length()

    def char_at(self, index: int) -> str:
        """
        Return the character at an offset.

        Args:
            index: 0-based character offset

        Raises:
            IndexError: If the offset is outside the buffer
        """
        text = self._ensure_loaded()
        if index < 0 or index >= len(text):
            raise IndexError(f"Index {index} out of range for length {len(text)} in {self.path}")
        return text[index]

    def sub_sequence(self, start: int, end: int) -> str:
        """Return the characters in the half-open span ``[start, end)``."""
        self._check_span(start, end)
        return self._text[start:end]

    def insert(self, offset: int, text: str):
        """
        Insert text before the character at ``offset``.

        Args:
            offset: Position to insert at, ``length()`` appends
            text: Text to insert

        Raises:
            IndexError: If the offset is outside ``[0, length()]``
        """
        self._check_span(offset, offset)
        self._text = self._text[:offset] + text + self._text[offset:]

    def delete(self, start: int, end: int):
        """
        Remove the half-open span ``[start, end)``.

        Raises:
            IndexError: If the span does not lie within the buffer
        """
        self._check_span(start, end)
        self._text = self._text[:start] + self._text[end:]

    def replace(self, start: int, end: int, text: str):
        """
        Replace the half-open span ``[start, end)`` with ``text``.

        Raises:
            IndexError: If the span does not lie within the buffer
        """
        self._check_span(start, end)
        self._text = self._text[:start] + text + self._text[end:]

    def find_line_start(self, line_number: int) -> int:
        """
        Find the offset of the first character of a line.

        ``\\r\\n`` counts as a single terminator, so the start of the next line
        is after both characters. Content ending with a terminator has a
        final empty line starting at the end of the buffer.

        Args:
            line_number: 1-based line number

        Returns:
            Character offset of the start of the line

        Raises:
            IndexError: If the buffer has fewer than ``line_number`` lines
        """
        text = self._ensure_loaded()
        if line_number == 1:
            return 0
        if line_number > 1:
            current_line = 2
            for match in _EOL_PATTERN.finditer(text):
                if current_line == line_number:
                    return match.end()
                current_line += 1
        raise IndexError(f"No such line {line_number} in {self.path}")

    def changed(self) -> bool:
        """Whether the content differs from what was last loaded or stored."""
        return content_fingerprint(self._ensure_loaded()) != self._baseline_hash

    def open_reader(self) -> TextIO:
        """Reader over the current in-memory content, not the file on disk."""
        return io.StringIO(self._ensure_loaded(), newline='')

    def store(self):
        """
        Write the whole content to the file, overwriting it in place.

        Raises:
            OSError: If the file cannot be written. A partial write is not
                rolled back.
        """
        text = self._ensure_loaded()
        with open(self.path, 'w', encoding=self.encoding, newline='') as writer:
            for start in range(0, len(text), CHUNK_SIZE):
                writer.write(text[start:start + CHUNK_SIZE])
        self._baseline_hash = content_fingerprint(text)
        logger.debug(f"Stored {len(text)} characters to {self.path}")
