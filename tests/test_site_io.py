"""Tests for CSV input and output."""

import csv
from datetime import datetime

import pytest

from ssr_audit.models import PageDepth, SSRResult
from ssr_audit.site_io import ResultWriter, read_site_urls, timestamped_output_path


class TestReadSiteUrls:
    """Test suite for read_site_urls."""

    def test_reads_url_column_in_order(self, tmp_path):
        path = tmp_path / "word-cloud-input.csv"
        path.write_text(
            "name,url\nA,https://a.example.com\nB,https://b.example.com\nC,\n",
            encoding="utf-8",
        )

        assert read_site_urls(path) == ["https://a.example.com", "https://b.example.com"]

    def test_missing_url_column(self, tmp_path):
        path = tmp_path / "input.csv"
        path.write_text("site\nhttps://a.example.com\n", encoding="utf-8")

        with pytest.raises(ValueError):
            read_site_urls(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            read_site_urls(tmp_path / "missing.csv")


class TestTimestampedOutputPath:
    """Test suite for timestamped_output_path."""

    def test_name_format(self, tmp_path):
        path = timestamped_output_path(tmp_path, datetime(2024, 3, 5, 14, 7, 9))

        assert path == tmp_path / "word-cloud-output-20240305_140709.csv"


class TestResultWriter:
    """Test suite for ResultWriter."""

    def test_header_written_once(self, tmp_path):
        path = tmp_path / "out" / "results.csv"
        writer = ResultWriter(path)

        writer.write_rows([
            SSRResult("https://a.com", "https://a.com/", True, 42.5, PageDepth.HOMEPAGE),
        ])
        writer.write_rows([
            SSRResult("https://b.com", "https://b.com", False, "N/A", "N/A"),
            SSRResult("https://c.com", "https://c.com", False, "Error", "Error"),
        ])

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))

        assert rows == [
            ["Base URL", "Analyzed URL", "Is Framework Detected", "SSR Percentage", "Page Depth"],
            ["https://a.com", "https://a.com/", "true", "42.50", "Homepage"],
            ["https://b.com", "https://b.com", "false", "N/A", "N/A"],
            ["https://c.com", "https://c.com", "false", "Error", "Error"],
        ]
        assert writer.rows_written == 3

    def test_url_with_comma_is_quoted(self, tmp_path):
        path = tmp_path / "results.csv"
        ResultWriter(path).write_rows([
            SSRResult("https://a.com", "https://a.com/x?tags=a,b", True, 1.0, PageDepth.DEEP),
        ])

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))

        assert rows[1][1] == "https://a.com/x?tags=a,b"

    def test_appending_to_existing_file_skips_header(self, tmp_path):
        path = tmp_path / "results.csv"
        ResultWriter(path).write_rows([SSRResult("https://a.com", "https://a.com", False, "N/A", "N/A")])
        ResultWriter(path).write_rows([SSRResult("https://b.com", "https://b.com", False, "N/A", "N/A")])

        lines = path.read_text(encoding="utf-8").splitlines()

        assert len(lines) == 3
        assert lines[0].startswith("Base URL")
