"""
Processors — Source-specific data pipelines.

    source_0_traffic_report  one report: parse, score, keywords, COGS
    source_1_history         many reports: timeline, trends, comparisons
"""
