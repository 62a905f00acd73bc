"""
Integration tests for the complete formatting workflow.

These tests verify that detectors, the handler and the runner work together
over real files, and that the CLI drives them end to end.
"""

import json
import sys

import pytest
from click.testing import CliRunner

from editorconfig_formatter.cli.commands import main
from editorconfig_formatter.core.config import FormatterConfig
from editorconfig_formatter.core.detector import CommandDetector
from editorconfig_formatter.core.edits import Delete, Insert, Replace
from editorconfig_formatter.core.exceptions import FormatError
from editorconfig_formatter.core.formatter import FormatRunner, collect_files, restore_backup
from editorconfig_formatter.core.models import Location, Violation
from editorconfig_formatter.core.summary import FileStatus

DETECTOR_SCRIPT = '''
import json
import sys

content = sys.stdin.read()
violations = []
for number, line in enumerate(content.split("\\n"), start=1):
    stripped = line.rstrip(" ")
    if len(stripped) != len(line):
        violations.append({
            "line": number,
            "column": len(stripped) + 1,
            "rule": "trim_trailing_whitespace",
            "message": "Trailing whitespace",
            "fix": {"kind": "delete", "length": len(line) - len(stripped)},
        })
print(json.dumps(violations))
'''


class TabDetector:
    """Reports every tab as a violation to be replaced by four spaces."""

    def __init__(self):
        self.calls = 0

    def detect(self, document):
        self.calls += 1
        violations = []
        for number, line in enumerate(document.as_string().split("\n"), start=1):
            for column, char in enumerate(line, start=1):
                if char == "\t":
                    violations.append(Violation(Location(number, column), Replace(1, "    "), rule="indent_style"))
        return violations


class FinalNewlineDetector:
    """Reports a missing newline at the end of the file."""

    def detect(self, document):
        text = document.as_string()
        if not text or text.endswith("\n"):
            return []
        lines = text.split("\n")
        return [Violation(Location(len(lines), len(lines[-1]) + 1), Insert("\n"), rule="insert_final_newline")]


class ConflictingDetector:
    """Always reports two conflicting no-op fixes on line 1."""

    def detect(self, document):
        return [Violation(Location(1, 1), Delete(0)), Violation(Location(1, 2), Delete(0))]


class TestFormatRunner:
    """Test the runner over real files."""

    def test_multi_pass_until_no_conflicts(self, tmp_path):
        """Same-line fixes are spread over passes until the file is clean."""
        path = tmp_path / "file.c"
        path.write_text("\t\ta\nb\tc\n")
        detector = TabDetector()
        runner = FormatRunner(detector)

        report = runner.format_file(path)

        assert path.read_text() == "        a\nb    c\n"
        assert report.status == FileStatus.FORMATTED
        assert report.passes == 2
        assert report.fixes_applied == 3
        assert report.fixes_deferred == 1
        assert detector.calls == 2

    def test_clean_file_untouched(self, tmp_path):
        """Files without violations are not rewritten."""
        path = tmp_path / "file.c"
        path.write_text("a\n")
        mtime = path.stat().st_mtime_ns
        runner = FormatRunner(FinalNewlineDetector(), FormatterConfig(backup=True))

        report = runner.format_file(path)

        assert report.status == FileStatus.UNCHANGED
        assert path.stat().st_mtime_ns == mtime
        assert not (tmp_path / "file.c.orig").exists()

    def test_backup_and_restore(self, tmp_path):
        """Backups keep the original and can be restored."""
        path = tmp_path / "file.c"
        path.write_text("int x;")
        runner = FormatRunner(FinalNewlineDetector(), FormatterConfig(backup=True, backup_suffix=".bak"))

        report = runner.format_file(path)

        backup = tmp_path / "file.c.bak"
        assert report.backup_path == backup
        assert backup.read_text() == "int x;"
        assert path.read_text() == "int x;\n"

        assert restore_backup(path, ".bak") == backup
        assert path.read_text() == "int x;"
        assert not backup.exists()

    def test_restore_without_backup(self, tmp_path):
        """Restoring needs a backup."""
        path = tmp_path / "file.c"
        path.write_text("x")

        with pytest.raises(FormatError, match="No backup"):
            restore_backup(path, ".bak")

    def test_crlf_file(self, tmp_path):
        """Offsets stay right on CRLF files and terminators are preserved."""
        path = tmp_path / "file.c"
        path.write_bytes(b"a\r\n\tb\r\n")
        runner = FormatRunner(TabDetector())

        runner.format_file(path)

        assert path.read_bytes() == b"a\r\n    b\r\n"

    def test_max_passes(self, tmp_path):
        """A detector that never converges is stopped."""
        path = tmp_path / "file.c"
        path.write_text("ab\n")
        runner = FormatRunner(ConflictingDetector(), FormatterConfig(max_passes=3))

        with pytest.raises(FormatError, match="3 passes"):
            runner.format_file(path)
        assert runner.handler.current_file is None

    def test_format_files_continues_after_failure(self, tmp_path):
        """One failing file does not stop the run."""
        good = tmp_path / "good.c"
        good.write_text("x")
        missing = tmp_path / "missing.c"
        runner = FormatRunner(FinalNewlineDetector())

        summary = runner.format_files([missing, good])

        assert summary.processed_files == 1
        assert summary.edited_files == 1
        assert summary.failed_files == 1
        assert summary.failures[0].path == missing
        assert good.read_text() == "x\n"
        assert summary.success_rate == 50.0

    def test_format_files_continues_after_undecodable_detector_output(self, tmp_path):
        """A detector printing bytes that do not decode fails each file, not the run."""
        script = tmp_path / "garbage.py"
        script.write_text("import sys\nsys.stdout.buffer.write(b'\\xff\\xfe')\n")
        first = tmp_path / "first.c"
        second = tmp_path / "second.c"
        for path in (first, second):
            path.write_text("x")
        runner = FormatRunner(CommandDetector([sys.executable, str(script)]))

        summary = runner.format_files([first, second])

        assert summary.failed_files == 2
        assert summary.processed_files == 0
        assert first.read_text() == "x"
        assert second.read_text() == "x"
        assert runner.handler.current_file is None

    def test_summary_export(self, tmp_path):
        """Summaries serialize to plain data."""
        path = tmp_path / "file.c"
        path.write_text("x")
        summary = FormatRunner(FinalNewlineDetector()).format_files([path])

        data = summary.to_dict()

        assert data['summary']['processed_files'] == 1
        assert data['summary']['total_fixes'] == 1
        assert data['files'][0]['status'] == "Formatted"
        json.dumps(data)

    def test_preview_does_not_write(self, tmp_path):
        """Previews return the fixed content and leave the file alone."""
        path = tmp_path / "file.c"
        path.write_text("\tx")
        runner = FormatRunner(TabDetector(), FormatterConfig(backup=True))

        assert runner.preview_file(path) == "    x"
        assert path.read_text() == "\tx"
        assert list(tmp_path.iterdir()) == [path]
        assert runner.handler.dry_run is False

    def test_collect_files(self, tmp_path):
        """Directories expand to the files inside them, minus backups."""
        (tmp_path / "sub").mkdir()
        top = tmp_path / "a.c"
        nested = tmp_path / "sub" / "b.c"
        for path in (top, nested, tmp_path / "a.c.orig", tmp_path / "notes.md"):
            path.write_text("x")

        assert collect_files([tmp_path], pattern="*.c") == [top, nested]
        assert collect_files([tmp_path], pattern="*.c", recursive=False) == [top]
        assert tmp_path / "a.c.orig" not in collect_files([tmp_path], backup_suffix=".orig")
        assert collect_files([top, top]) == [top]

    def test_collect_files_keeps_named_backup(self, tmp_path):
        """Files named explicitly are kept even when they look like backups."""
        backup_file = tmp_path / "a.c.orig"
        backup_file.write_text("x")

        assert collect_files([backup_file], backup_suffix=".orig") == [backup_file]
        assert collect_files([tmp_path], backup_suffix=".orig") == []


class TestCli:
    """Test the command-line interface with a real detector process."""

    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    @pytest.fixture
    def detector(self, tmp_path):
        script = tmp_path / "detector.py"
        script.write_text(DETECTOR_SCRIPT)
        return f'"{sys.executable}" "{script}"'

    @pytest.fixture
    def source(self, tmp_path):
        directory = tmp_path / "src"
        directory.mkdir()
        path = directory / "main.c"
        path.write_text("int x;  \nint y; \n")
        return path

    def test_format(self, detector, source):
        """The format command fixes files in place."""
        result = self.runner.invoke(main, ['format', str(source), '--detector', detector])

        assert result.exit_code == 0, result.output
        assert source.read_text() == "int x;\nint y;\n"

    def test_format_directory_with_backup(self, detector, source):
        """Directories are walked and backups created."""
        result = self.runner.invoke(main, ['format', str(source.parent), '--detector', detector,
                                           '--pattern', '*.c', '--backup', '--backup-suffix', '.bak'])

        assert result.exit_code == 0, result.output
        assert source.read_text() == "int x;\nint y;\n"
        assert (source.parent / "main.c.bak").read_text() == "int x;  \nint y; \n"

    def test_format_dry_run(self, detector, source):
        """Dry runs change nothing on disk."""
        result = self.runner.invoke(main, ['format', str(source), '--detector', detector, '--dry-run'])

        assert result.exit_code == 0, result.output
        assert source.read_text() == "int x;  \nint y; \n"

    def test_format_writes_summary(self, detector, source, tmp_path):
        """The run summary can be saved as JSON."""
        output = tmp_path / "summary.json"
        result = self.runner.invoke(main, ['format', str(source), '--detector', detector, '-o', str(output)])

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert data['summary']['edited_files'] == 1
        assert data['summary']['total_fixes'] == 2

    def test_format_failure_exit_code(self, source, tmp_path):
        """A detector that cannot run fails the command."""
        result = self.runner.invoke(main, ['format', str(source), '--detector', str(tmp_path / "no-such-detector")])

        assert result.exit_code == 1
        assert source.read_text() == "int x;  \nint y; \n"

    def test_format_rejects_zero_passes(self, detector, source):
        """At least one pass is required."""
        result = self.runner.invoke(main, ['format', str(source), '--detector', detector, '--max-passes', '0'])

        assert result.exit_code == 2

    def test_preview(self, detector, source):
        """Preview shows the fixed content without writing it."""
        result = self.runner.invoke(main, ['preview', str(source), '--detector', detector])

        assert result.exit_code == 0, result.output
        assert "int y;" in result.output
        assert source.read_text() == "int x;  \nint y; \n"

    def test_restore(self, detector, source):
        """Restore brings back the original content."""
        self.runner.invoke(main, ['format', str(source), '--detector', detector, '--backup'])
        result = self.runner.invoke(main, ['restore', str(source)])

        assert result.exit_code == 0, result.output
        assert source.read_text() == "int x;  \nint y; \n"

    def test_restore_without_backup(self, source):
        """Restoring a file without backup fails."""
        result = self.runner.invoke(main, ['restore', str(source)])

        assert result.exit_code == 1
