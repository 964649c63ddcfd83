"""
Tests for extraction reporting.
"""

import io
from unittest.mock import Mock

from catalog_extraction.catalog import AssetGroup, AssetsCatalog, NamedAsset
from catalog_extraction.core import ExtractOperation
from catalog_extraction.errors import RenditionMissingData
from catalog_extraction.renditions import DataRendition
from catalog_extraction.reporting import (
    ANSI_STYLE,
    PLAIN_STYLE,
    AssetResult,
    ConsoleReporter,
    ExtractionReport,
    ExtractionReporter,
    MultiReporter,
    TerminalStyle,
)


class TestAssetResult:
    """Test cases for AssetResult class."""

    def test_success_to_dict(self):
        result = AssetResult("AppIcon", "AppIcon.png", path="/out/AppIcon.png")
        assert result.ok
        assert result.to_dict() == {
            "group": "AppIcon",
            "file": "AppIcon.png",
            "path": "/out/AppIcon.png",
            "ok": True,
            "error": None,
            "detail": None
        }

    def test_failure_to_dict(self):
        result = AssetResult("AppIcon", "AppIcon.png", error=RenditionMissingData("no data"))
        data = result.to_dict()

        assert not result.ok
        assert data["error"] == "RenditionMissingData"
        assert data["detail"] == "no data"

    def test_report_tally(self):
        report = ExtractionReport("/out")
        report.results.append(AssetResult("a", "a.png", path="/out/a.png"))
        report.results.append(AssetResult("b", "b.png", error=RenditionMissingData("no data")))
        report.skipped_groups["c/d"] = "cannot create"

        data = report.to_dict()
        assert data["extracted"] == 1
        assert data["failed"] == 1
        assert data["skipped_groups"] == {"c/d": "cannot create"}
        assert len(data["assets"]) == 2


class TestTerminalStyle:

    def test_ansi_style(self):
        assert ANSI_STYLE.ok() == "\x1b[1mOK\x1b[0m"
        assert ANSI_STYLE.failed() == "\x1b[1m\x1b[31mFAILED\x1b[0m"

    def test_plain_style(self):
        assert PLAIN_STYLE.ok() == "OK"
        assert PLAIN_STYLE.failed() == "FAILED"

    def test_custom_style(self):
        style = TerminalStyle(bold="<b>", red="<r>", reset="</>")
        assert style.failed("NO") == "<b><r>NO</>"


class TestConsoleReporter:
    """Test cases for console output."""

    def test_console_lines(self, tmp_path):
        from test_catalog_extraction import raster_asset

        stream = io.StringIO()
        catalog = AssetsCatalog([
            AssetGroup("devices/mix/d_iphone_ipad_mac", [
                raster_asset("d_iphone_ipad_mac@2x.png"),
                NamedAsset("broken.png", DataRendition()),
            ]),
        ])
        ExtractOperation(str(tmp_path), reporter=ConsoleReporter(stream, PLAIN_STYLE)).read(catalog)

        lines = stream.getvalue().splitlines()
        assert lines[0] == "Extracting: devices/mix/d_iphone_ipad_mac/d_iphone_ipad_mac@2x.png OK"
        assert lines[1].startswith("Extracting: devices/mix/d_iphone_ipad_mac/broken.png FAILED RenditionMissingData")
        assert lines[2] == "Extracted 1 assets, 1 failed"

    def test_plain_style_for_non_tty(self):
        reporter = ConsoleReporter(io.StringIO())
        assert reporter.style is PLAIN_STYLE

    def test_group_failure_line(self):
        stream = io.StringIO()
        reporter = ConsoleReporter(stream, PLAIN_STYLE)
        reporter.group_failed("a/b", "/out/a", OSError("denied"))

        assert stream.getvalue() == "Skipping group: a/b FAILED denied\n"


class TestMultiReporter:

    def test_forwards_to_all(self):
        first = Mock(spec=ExtractionReporter)
        second = Mock(spec=ExtractionReporter)
        reporter = MultiReporter(first, second)

        reporter.extraction_started("/out")
        reporter.asset_extracted("g", "f.png", "/out/f.png")
        report = ExtractionReport("/out")
        reporter.extraction_finished(report)

        for mock in (first, second):
            mock.extraction_started.assert_called_once_with("/out")
            mock.asset_extracted.assert_called_once_with("g", "f.png", "/out/f.png")
            mock.extraction_finished.assert_called_once_with(report)
