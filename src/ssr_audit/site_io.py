"""CSV input and output for audit batches."""

import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Union

from ssr_audit.constants import OUTPUT_FILE_PREFIX, RESULT_COLUMNS, TIMESTAMP_FORMAT
from ssr_audit.models import SSRResult

logger = logging.getLogger(__name__)


def read_site_urls(path: Union[str, Path]) -> List[str]:
    """Read site URLs from the ``url`` column of a CSV file, in file order.

    Blank values are skipped.
    """
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None or "url" not in reader.fieldnames:
            raise ValueError(f"{path} has no 'url' column")
        urls = [row["url"].strip() for row in reader if (row.get("url") or "").strip()]

    logger.info(f"Found {len(urls)} websites to analyze in {path}")
    return urls


def timestamped_output_path(output_dir: Union[str, Path], timestamp: Optional[datetime] = None) -> Path:
    """Output file name that will not collide with earlier runs."""
    if timestamp is None:
        timestamp = datetime.now()
    return Path(output_dir) / f"{OUTPUT_FILE_PREFIX}-{timestamp.strftime(TIMESTAMP_FORMAT)}.csv"


class ResultWriter:
    """Appends SSR result rows to a CSV file, writing the header once."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.rows_written = 0
        self._header_written = self.path.exists() and self.path.stat().st_size > 0

    def write_rows(self, rows: Iterable[SSRResult]) -> int:
        """Append rows. Returns how many were written."""
        records = [row.to_row() for row in rows]

        with open(self.path, "a", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=list(RESULT_COLUMNS))
            if not self._header_written:
                writer.writeheader()
                self._header_written = True
            writer.writerows(records)

        self.rows_written += len(records)
        return len(records)
