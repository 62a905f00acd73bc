"""
Violation Parser Module

This module turns the JSON output of an external detector into violations.

The detector reports a list of objects (or an object with a ``violations``
list), each shaped like::

    {"line": 3, "column": 5, "rule": "trim_trailing_whitespace",
     "message": "Trailing whitespace", "fix": {"kind": "delete", "length": 2}}

Supported fix kinds are ``insert`` (``text``), ``delete`` (``length``) and
``replace`` (``length`` and ``text``).
"""

import json
from typing import Any, Dict, List, Union
import logging

from .edits import Delete, Edit, Insert, Replace
from .exceptions import DetectorError
from .models import Location, Violation

logger = logging.getLogger(__name__)


class ViolationParser:
    """
    Parser for detector output.

    This class provides:
    - Decoding of the detector's JSON payload
    - Validation of locations and fix parameters
    - Construction of the matching edit for each fix kind
    """

    def __init__(self):
        """Initialize the parser."""
        self.fix_builders = {
            'insert': self._build_insert,
            'delete': self._build_delete,
            'replace': self._build_replace,
        }

    def parse(self, payload: Union[str, bytes, list, dict]) -> List[Violation]:
        """
        Parse detector output.

        Args:
            payload: Raw JSON text, or an already decoded document

        Returns:
            Violations in the order the detector reported them

        Raises:
            DetectorError: If the payload is not valid detector output
        """
        if isinstance(payload, (str, bytes)):
            if not payload.strip():
                return []
            try:
                payload = json.loads(payload)
            except ValueError as e:
                raise DetectorError(f"Detector output is not valid JSON: {e}") from e

        if isinstance(payload, dict):
            payload = payload.get('violations')
        if not isinstance(payload, list):
            raise DetectorError("Detector output must be a list of violations")

        violations = [self.parse_violation(entry, index) for index, entry in enumerate(payload)]
        logger.debug(f"Parsed {len(violations)} violations from detector output")
        return violations

    def parse_violation(self, entry: Dict[str, Any], index: int = 0) -> Violation:
        """Build a single violation from one decoded entry."""
        if not isinstance(entry, dict):
            raise DetectorError(f"Violation #{index} is not an object")
        try:
            location = Location(self._require_int(entry, 'line', index),
                                self._require_int(entry, 'column', index))
        except ValueError as e:
            raise DetectorError(f"Violation #{index}: {e}") from e

        fix = entry.get('fix')
        if not isinstance(fix, dict):
            raise DetectorError(f"Violation #{index} has no fix")
        kind = fix.get('kind')
        builder = self.fix_builders.get(kind)
        if builder is None:
            raise DetectorError(f"Violation #{index} has unknown fix kind {kind!r}")

        message = str(entry.get('message', ''))
        try:
            edit = builder(fix, index, message)
        except ValueError as e:
            raise DetectorError(f"Violation #{index}: {e}") from e

        return Violation(location, edit, rule=str(entry.get('rule', '')), message=message)

    def _require_int(self, data: Dict[str, Any], key: str, index: int) -> int:
        value = data.get(key)
        # bool is an int subclass
        if not isinstance(value, int) or isinstance(value, bool):
            raise DetectorError(f"Violation #{index} has no integer '{key}'")
        return value

    def _require_str(self, data: Dict[str, Any], key: str, index: int) -> str:
        value = data.get(key)
        if not isinstance(value, str):
            raise DetectorError(f"Violation #{index} has no string '{key}'")
        return value

    def _build_insert(self, fix: Dict[str, Any], index: int, message: str) -> Edit:
        return Insert(self._require_str(fix, 'text', index), description=message)

    def _build_delete(self, fix: Dict[str, Any], index: int, message: str) -> Edit:
        return Delete(self._require_int(fix, 'length', index), description=message)

    def _build_replace(self, fix: Dict[str, Any], index: int, message: str) -> Edit:
        return Replace(self._require_int(fix, 'length', index),
                       self._require_str(fix, 'text', index),
                       description=message)
