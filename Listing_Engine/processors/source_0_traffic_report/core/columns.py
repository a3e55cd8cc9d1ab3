"""
Column Map — Traffic report header -> Listing field resolution.

Header names match the marketplace export exactly. Each entry names the
Listing field it fills and the cleaner that converts the raw cell.
"""

from __future__ import annotations

from .cleaning import clean_value, parse_integer, parse_percent

TITLE_COLUMN = "Listing title"
ITEM_ID_COLUMN = "eBay item ID"
PROMOTED_STATUS_COLUMN = "Current promoted listings status"

# field name -> (export header, cleaner)
TEXT_COLUMNS = {
    "title":           TITLE_COLUMN,
    "item_id":         ITEM_ID_COLUMN,
    "start_date":      "Item Start Date",
    "category":        "Category",
    "promoted_status": PROMOTED_STATUS_COLUMN,
}

INTEGER_COLUMNS = {
    "quantity_available":              "Quantity available",
    "total_impressions":               "Total impressions",
    "quantity_sold":                   "Quantity sold",
    "top20_promoted_impressions":      "Top 20 search slot impressions from promoted listings",
    "top20_organic_impressions":       "Top 20 search slot organic impressions",
    "rest_search_impressions":         "Rest of search slot impressions",
    "total_search_impressions":        "Total Search Impressions",
    "non_search_promoted_impressions": "Non-search promoted listings impressions",
    "non_search_organic_impressions":  "Non-search organic impressions",
    "total_promoted_impressions":      "Total Promoted Listings impressions (applies to eBay site only)",
    "total_offsite_impressions":       "Total Promoted Offsite impressions (applies to off-eBay only)",
    "total_organic_impressions":       "Total organic impressions on eBay site",
    "total_page_views":                "Total page views",
    "page_views_promoted":             "Page views via promoted listings impressions on eBay site",
    "page_views_promoted_offsite":     "Page views via promoted listings Impressions from outside eBay (search engines, affilliates)",
    "page_views_organic":              "Page views via organic impressions on eBay site",
    "page_views_organic_offsite":      "Page views from organic impressions outside eBay (Includes page views from search engines)",
}

PERCENT_COLUMNS = {
    "ctr":                            "Click-through rate = Page views from eBay site/Total impressions",
    "top20_pct":                      "% Top 20 Search Impressions",
    "conversion_rate":                "Sales conversion rate = Quantity sold/Total page views",
    "top20_promoted_change_pct":      "% change in top 20 search slot impressions from promoted listings",
    "top20_organic_change_pct":       "% change in top 20 search slot impressions",
    "non_search_promoted_change_pct": "% Change in non-search promoted listings impressions",
    "non_search_organic_change_pct":  "% Change in non-search organic impressions",
}


def build_listing_fields(raw: dict) -> dict:
    """
    Map one raw row (header -> cell) to Listing keyword arguments.

    Columns absent from the export resolve to None / "" like an empty cell.
    """
    fields: dict = {}

    for field, header in TEXT_COLUMNS.items():
        fields[field] = clean_value(raw.get(header)) or ""

    for field, header in INTEGER_COLUMNS.items():
        fields[field] = parse_integer(raw.get(header))

    for field, header in PERCENT_COLUMNS.items():
        fields[field] = parse_percent(raw.get(header))

    fields["is_promoted"] = fields["promoted_status"].lower() == "promoted"
    return fields
