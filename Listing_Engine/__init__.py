"""
Listing_Engine — Analytics engine for marketplace listing traffic reports.

Submodules:
    - config: Paths, constants and environment-driven Settings
    - schemas: Pydantic record types shared by every processor
    - processors: Source-specific data pipelines
        source_0_traffic_report  single-report parsing, scoring, keywords, COGS
        source_1_history         cross-report timeline and trend engine
"""
