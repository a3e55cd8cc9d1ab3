"""
Traffic Report Ingestor — Parser for the marketplace listing traffic export.

The export is a quirky CSV:
    Row 0: "Disclaimers"
    Row 1: "• This report includes …"
    Row 2: (blank)
    Row 3: "Report for …" (quoted, one big field)
    Row 4: Column headers (first column "Listing title")
    Row 5+: Data rows

Rows are accepted only if they carry at least the minimum column count and a
non-empty title; anything else is dropped so one corrupt row cannot abort a
multi-thousand-row report. Only a missing header row is fatal.

Usage:
    python -m Listing_Engine.processors.source_0_traffic_report.report_ingestor <report.csv>
"""

from __future__ import annotations

import io
import logging
import re

import pandas as pd

from Listing_Engine.config import settings
from Listing_Engine.schemas import Listing, ReportPeriod

from .core.columns import build_listing_fields

logger = logging.getLogger(__name__)

# Dates as printed in the "Report for …" preamble row
_DATE_PATTERN = re.compile(
    r"\d{4}-\d{2}-\d{2}"
    r"|\d{1,2}/\d{1,2}/\d{2,4}"
    r"|[A-Z][a-z]{2,8}\.? \d{1,2}, \d{4}"
)


class ParseError(ValueError):
    """The text has no recognisable header row."""


class TrafficReportIngestor:
    """
    Turns raw traffic-report text into typed Listing records.

    Usage:
        ingestor = TrafficReportIngestor()
        listings = ingestor.ingest(text)
        ingestor.dropped_rows, ingestor.report_period
    """

    def __init__(
        self,
        header_sentinel: str | None = None,
        min_columns: int | None = None,
    ):
        self.header_sentinel = header_sentinel or settings.REPORT_HEADER_SENTINEL
        self.min_columns = min_columns if min_columns is not None else settings.REPORT_MIN_COLUMNS
        self._dropped_rows: int = 0
        self._report_period: ReportPeriod | None = None
        self._columns: list[str] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def ingest(self, text: str) -> list[Listing]:
        """
        Full pipeline: locate header -> read rows -> clean cells -> build listings.

        Raises:
            ParseError: if no line starts with the header sentinel.
        """
        lines = text.splitlines()
        header_idx = self._find_header(lines)
        self._report_period = extract_report_period("\n".join(lines[:header_idx]))

        data_lines, dropped = self._balanced_lines(lines[header_idx + 1:])
        if dropped:
            logger.debug("Dropping %d row(s) with unbalanced quotes", dropped)

        frame, widths = self._read_rows("\n".join([lines[header_idx], *data_lines]))
        self._columns = list(frame.columns)

        listings: list[Listing] = []

        for pos, raw in enumerate(frame.to_dict("records")):
            if widths.iloc[pos] < self.min_columns:
                dropped += 1
                logger.debug("Dropping short row %d (%d fields)", pos + 1, widths.iloc[pos])
                continue

            fields = build_listing_fields(raw)
            if not fields["title"]:
                dropped += 1
                logger.debug("Dropping row %d without a title", pos + 1)
                continue

            listings.append(Listing(**fields))

        self._dropped_rows = dropped
        if dropped:
            logger.warning("Traffic report: dropped %d malformed row(s)", dropped)
        logger.info("Traffic report: parsed %d listing(s)", len(listings))
        return listings

    @property
    def dropped_rows(self) -> int:
        return self._dropped_rows

    @property
    def report_period(self) -> ReportPeriod | None:
        return self._report_period

    @property
    def columns(self) -> list[str]:
        return self._columns

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _find_header(self, lines: list[str]) -> int:
        for idx, line in enumerate(lines):
            if line.startswith(self.header_sentinel):
                return idx
        raise ParseError(
            f'Could not find header row in CSV. Expected a row starting with "{self.header_sentinel}".'
        )

    @staticmethod
    def _balanced_lines(lines: list[str]) -> tuple[list[str], int]:
        """
        Drop physical lines with an unbalanced quote count.

        Every export row sits on one line, so an odd number of quotes marks a
        corrupt row. Left in, its open quote would swallow the rows after it.
        """
        kept = [line for line in lines if line.count('"') % 2 == 0]
        return kept, len(lines) - len(kept)

    @staticmethod
    def _read_rows(body: str) -> tuple[pd.DataFrame, pd.Series]:
        """
        Read header + data rows as strings.

        Returns the frame and the number of fields each data row actually
        carried: explicit empty cells stay "" while cells missing from short
        rows become NaN. Fields beyond the header are trimmed, blank lines
        are skipped.
        """
        width = len(pd.read_csv(io.StringIO(body), nrows=0, dtype=str).columns)

        frame = pd.read_csv(
            io.StringIO(body),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            on_bad_lines=lambda row: row[:width],
            engine="python",
        )
        frame.columns = [str(c).strip() for c in frame.columns]
        return frame, frame.notna().sum(axis=1)


def parse(text: str) -> list[Listing]:
    """Parse raw traffic-report text into listings (see TrafficReportIngestor)."""
    return TrafficReportIngestor().ingest(text)


def extract_report_period(preamble: str) -> ReportPeriod | None:
    """
    Pull the covered date range out of the preamble.

    Prefers the "Report for …" line; returns None unless two dates are found.
    """
    lines = preamble.splitlines()
    candidates = [ln for ln in lines if "report for" in ln.lower()] or lines
    for line in candidates:
        dates = _DATE_PATTERN.findall(line)
        if len(dates) >= 2:
            return ReportPeriod(start=dates[0], end=dates[1])
    return None


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    import json
    import os
    import sys
    from datetime import datetime, timezone

    from .analyzer import ListingAnalyzer, build_snapshot

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if len(sys.argv) != 2:
        print(f"usage: python -m {__spec__.name} <report.csv>")
        sys.exit(2)

    path = sys.argv[1]
    with open(path, encoding="utf-8-sig") as fh:
        raw_text = fh.read()

    snapshot = build_snapshot(raw_text, os.path.basename(path), datetime.now(timezone.utc))
    result = ListingAnalyzer().analyze(list(snapshot.listings))
    print(json.dumps(
        {"snapshot_id": snapshot.id, "listing_count": snapshot.listing_count, **result},
        indent=2,
        default=str,
    ))
