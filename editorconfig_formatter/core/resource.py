"""
Resource Module

A resource is the identity of a file for I/O: a path plus the character
encoding its content is read and written with.
"""

from pathlib import Path
from typing import TextIO, Union

DEFAULT_ENCODING = "utf-8"


class Resource:
    """A file path bound to a character encoding."""

    def __init__(self, path: Union[str, Path], encoding: str = DEFAULT_ENCODING):
        self.path = Path(path)
        self.encoding = encoding

    def open_reader(self) -> TextIO:
        """
        Open the file for reading.

        Line terminators are passed through untranslated so that offsets
        computed on the content match the bytes on disk.
        """
        return open(self.path, 'r', encoding=self.encoding, newline='')

    def __str__(self):
        return str(self.path)

    def __repr__(self):
        return f"{type(self).__name__}(path='{self.path}', encoding='{self.encoding}')"
