"""
Core utilities for Source 0 — Traffic Report processing.

Modules:
    cleaning  — Cell cleaning (="..." IDs, "1,150.0%" percents, "-" sentinels)
    columns   — Export header -> Listing field mapping
    sports    — Ordered sport classification rule table
"""
