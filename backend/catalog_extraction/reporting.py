"""
Reporting of extraction progress.

The extraction operation never prints. It notifies an ExtractionReporter about
every asset and every skipped group; reporters decide what to do with that.
"""

import sys
from typing import Dict, List, Optional, TextIO


class AssetResult:
    """Outcome of extracting a single asset."""

    def __init__(
        self,
        group_name: str,
        file_name: str,
        path: Optional[str] = None,
        error: Optional[Exception] = None
    ):
        self.group_name = group_name
        self.file_name = file_name
        self.path = path
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict:
        """Convert to dictionary representation."""
        return {
            "group": self.group_name,
            "file": self.file_name,
            "path": self.path,
            "ok": self.ok,
            "error": type(self.error).__name__ if self.error else None,
            "detail": str(self.error) if self.error else None
        }


class ExtractionReport:
    """Per-asset results and skipped groups of one extraction run."""

    def __init__(self, output_path: str = ""):
        self.output_path = output_path
        self.results: List[AssetResult] = []
        self.skipped_groups: Dict[str, str] = {}

    @property
    def extracted(self) -> int:
        return sum(1 for result in self.results if result.ok)

    @property
    def failed(self) -> int:
        return sum(1 for result in self.results if not result.ok)

    def failures(self) -> List[AssetResult]:
        return [result for result in self.results if not result.ok]

    def to_dict(self) -> Dict:
        return {
            "output_path": self.output_path,
            "extracted": self.extracted,
            "failed": self.failed,
            "skipped_groups": dict(self.skipped_groups),
            "assets": [result.to_dict() for result in self.results]
        }


class ExtractionReporter:
    """Receives extraction notifications. All callbacks default to no-ops."""

    def extraction_started(self, output_path: str) -> None:
        pass

    def asset_extracted(self, group_name: str, file_name: str, path: str) -> None:
        pass

    def asset_failed(self, group_name: str, file_name: str, error: Exception) -> None:
        pass

    def group_failed(self, group_name: str, path: str, error: Exception) -> None:
        pass

    def extraction_finished(self, report: ExtractionReport) -> None:
        pass


class MultiReporter(ExtractionReporter):
    """Forwards every notification to several reporters."""

    def __init__(self, *reporters: ExtractionReporter):
        self.reporters = list(reporters)

    def extraction_started(self, output_path: str) -> None:
        for reporter in self.reporters:
            reporter.extraction_started(output_path)

    def asset_extracted(self, group_name: str, file_name: str, path: str) -> None:
        for reporter in self.reporters:
            reporter.asset_extracted(group_name, file_name, path)

    def asset_failed(self, group_name: str, file_name: str, error: Exception) -> None:
        for reporter in self.reporters:
            reporter.asset_failed(group_name, file_name, error)

    def group_failed(self, group_name: str, path: str, error: Exception) -> None:
        for reporter in self.reporters:
            reporter.group_failed(group_name, path, error)

    def extraction_finished(self, report: ExtractionReport) -> None:
        for reporter in self.reporters:
            reporter.extraction_finished(report)


class TerminalStyle:
    """Formatting of console status words."""

    def __init__(self, bold: str = "", red: str = "", reset: str = ""):
        self.bold = bold
        self.red = red
        self.reset = reset

    def ok(self, text: str = "OK") -> str:
        return f"{self.bold}{text}{self.reset}"

    def failed(self, text: str = "FAILED") -> str:
        return f"{self.bold}{self.red}{text}{self.reset}"


ANSI_STYLE = TerminalStyle(bold="\x1b[1m", red="\x1b[31m", reset="\x1b[0m")
PLAIN_STYLE = TerminalStyle()


class ConsoleReporter(ExtractionReporter):
    """Prints one status line per asset and a final tally."""

    def __init__(self, stream: Optional[TextIO] = None, style: Optional[TerminalStyle] = None):
        self.stream = stream
        if style is None:
            style = ANSI_STYLE if self._is_tty() else PLAIN_STYLE
        self.style = style

    def _is_tty(self) -> bool:
        stream = self.stream or sys.stdout
        return hasattr(stream, "isatty") and stream.isatty()

    def _write(self, line: str) -> None:
        print(line, file=self.stream or sys.stdout)

    def asset_extracted(self, group_name: str, file_name: str, path: str) -> None:
        self._write(f"Extracting: {group_name}/{file_name} {self.style.ok()}")

    def asset_failed(self, group_name: str, file_name: str, error: Exception) -> None:
        self._write(
            f"Extracting: {group_name}/{file_name} {self.style.failed()} "
            f"{type(error).__name__}: {error}"
        )

    def group_failed(self, group_name: str, path: str, error: Exception) -> None:
        self._write(f"Skipping group: {group_name} {self.style.failed()} {error}")

    def extraction_finished(self, report: ExtractionReport) -> None:
        self._write(f"Extracted {report.extracted} assets, {report.failed} failed")
