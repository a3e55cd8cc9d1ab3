"""Shared fixtures for the engine tests."""

import os

import pytest

FIXTURES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "fixtures")


@pytest.fixture
def report_text():
    with open(os.path.join(FIXTURES_DIR, "traffic_report.csv"), encoding="utf-8") as fh:
        return fh.read()
