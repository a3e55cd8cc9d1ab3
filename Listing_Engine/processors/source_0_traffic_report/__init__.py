"""
Source 0 — Traffic Report: parse one export and analyze it.

Public API:
    parse(text)                                  -> list[Listing]
    build_snapshot(text, filename, uploaded_at)  -> Snapshot
    ListingAnalyzer().analyze(listings)          -> dict
"""

from .analyzer import ListingAnalyzer, build_snapshot
from .report_ingestor import ParseError, TrafficReportIngestor, extract_report_period, parse
