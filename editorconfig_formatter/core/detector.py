"""
Detector Module

Violations are produced by a detector that lives outside this package. This
module defines the interface the formatter consumes and an adapter that runs
an external detector command over the current content of a document.
"""

import shlex
import subprocess
from typing import Iterable, List, Optional, Protocol, Sequence, Union
import logging

from .document import EditableDocument
from .exceptions import DetectorError
from .models import Violation
from .parser import ViolationParser

logger = logging.getLogger(__name__)


class Detector(Protocol):
    """Anything that reports the violations of a document."""

    def detect(self, document: EditableDocument) -> Iterable[Violation]:
        """Report violations ordered by non-decreasing line number."""


class CommandDetector:
    """
    Detector backed by an external command.

    The command is run once per pass with the file path appended to its
    arguments and the document's current content on stdin, so that later
    passes see the partially fixed buffer rather than the file on disk. It
    must print its violations as JSON on stdout (see ``ViolationParser``).
    """

    def __init__(self, command: Union[str, Sequence[str]], timeout: int = 30,
                 parser: Optional[ViolationParser] = None):
        """
        Initialize the detector.

        Args:
            command: Command line, as a string or an argument list
            timeout: Seconds to wait for the command on each run
            parser: Parser for the command's output
        """
        self.command: List[str] = shlex.split(command) if isinstance(command, str) else list(command)
        if not self.command:
            raise ValueError("Detector command must not be empty")
        self.timeout = timeout
        self.parser = parser or ViolationParser()

    def _run_detector(self, document: EditableDocument) -> subprocess.CompletedProcess:
        args = self.command + [str(document.path)]
        try:
            return subprocess.run(
                args,
                input=document.as_string(),
                capture_output=True,
                text=True,
                encoding=document.encoding,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired as e:
            raise DetectorError(f"Detector timed out after {self.timeout}s on {document}") from e
        except OSError as e:
            raise DetectorError(f"Could not run detector {self.command[0]}: {e}") from e
        except UnicodeError as e:
            raise DetectorError(f"Detector input or output for {document} is not valid {document.encoding}") from e

    def detect(self, document: EditableDocument) -> List[Violation]:
        result = self._run_detector(document)
        if result.returncode != 0 and not result.stdout.strip():
            stderr = result.stderr.strip()
            raise DetectorError(f"Detector exited with status {result.returncode} on {document}: {stderr}")
        if result.stderr.strip():
            logger.debug(f"Detector stderr for {document}: {result.stderr.strip()}")

        violations = self.parser.parse(result.stdout)
        logger.debug(f"Detector reported {len(violations)} violations in {document}")
        return violations
