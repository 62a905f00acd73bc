"""
Exceptions raised while formatting files.
"""


class FormatError(Exception):
    """A file could not be read, formatted or written."""


class DetectorError(FormatError):
    """The external detector could not be run or produced unusable output."""
