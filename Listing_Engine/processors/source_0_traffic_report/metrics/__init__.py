"""
Metrics — Pure-function business-logic modules for Source 0.

Each module returns dictionaries or schema records. No UI, no I/O, no side effects.

Modules:
    health         — Health score, badge, recommendation, enrichment
    aggregates     — KPIs, promoted/organic split, sports, priority, trending
    keywords       — Title keyword aggregation and median-standing proxy
    profitability  — COGS, margin and versioned settings migration
"""
