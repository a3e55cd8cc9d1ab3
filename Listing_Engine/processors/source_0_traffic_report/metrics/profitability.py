"""
Profitability (COGS) — Per-listing and portfolio net margin.

Per sale:
    shipping method  explicit override, else price > threshold -> high-cost method,
                     otherwise the low-cost method
    fee              price * fee_rate
    materials        sum of unit costs flagged include_per_sale that apply to the method
    cogs             fee + materials + flat postage
    net profit       price - cogs
    margin           net profit / price * 100 (0 when price is 0)

Per-listing money is rounded to 4 places before any portfolio sum, portfolio
totals to 2 places.

Settings are a versioned record. migrate_settings() is the one-way upgrade
from any older version: the structural defaults (materials and shipping
table) are reset, the user's fee rate is kept.
"""

from __future__ import annotations

import logging
from typing import Sequence

from Listing_Engine.schemas import CogsSettings, ListingProfit, PortfolioProfit, PricedListing

logger = logging.getLogger(__name__)

# Bump whenever the default materials / shipping structure changes
SETTINGS_VERSION = 3

_MONEY_PLACES = 4
_TOTAL_PLACES = 2

_DEFAULTS = {
    "version": SETTINGS_VERSION,
    "fee_rate": 0.1325,
    "shipping": {
        "methods": {
            "envelope": {"label": "eBay Std Envelope", "postage": 1.03},
            "ground":   {"label": "Ground Advantage",  "postage": 5.08},
        },
        "threshold": 20.00,  # listings above $20 auto-assign ground
        "low_cost_method": "envelope",
        "high_cost_method": "ground",
    },
    "materials": [
        {"id": "sleeve",  "name": "Ultra Pro Penny Sleeves",        "pack_count": 500, "pack_price":  8.58, "unit_cost": 0.02, "include_per_sale": True,  "methods": ["envelope", "ground"]},
        {"id": "topldr",  "name": "Ultra Pro 3x4 Top Loader",       "pack_count": 200, "pack_price": 33.98, "unit_cost": 0.17, "include_per_sale": True,  "methods": ["envelope", "ground"]},
        {"id": "teambag", "name": "Team Bags 3x4 (35pt) - DEDC",    "pack_count": 100, "pack_price":  5.25, "unit_cost": 0.05, "include_per_sale": True,  "methods": ["envelope", "ground"]},
        {"id": "env",     "name": "Ding Defend Shipping Envelopes", "pack_count": 110, "pack_price": 24.97, "unit_cost": 0.23, "include_per_sale": True,  "methods": ["envelope"]},
        {"id": "bubble",  "name": "Bubble Mailers 4x7 Poly Padded", "pack_count":  50, "pack_price":  9.88, "unit_cost": 0.20, "include_per_sale": True,  "methods": ["ground"]},
        {"id": "hobb",    "name": "Hobby Armor 3.5x4.5",            "pack_count":  50, "pack_price":  8.56, "unit_cost": 0.17, "include_per_sale": False, "methods": ["envelope", "ground"]},
        {"id": "graded",  "name": "Graded Card Sleeves Resealable", "pack_count": 300, "pack_price":  7.99, "unit_cost": 0.03, "include_per_sale": False, "methods": ["envelope", "ground"]},
    ],
}

# Keys older records used for the fee rate
_FEE_RATE_KEYS = ("fee_rate", "feeRate", "ebayFeeRate")
_VERSION_KEYS = ("version", "_version")


class CogsError(ValueError):
    """Invalid profitability input, e.g. an unknown shipping method."""


# ------------------------------------------------------------------
# Settings
# ------------------------------------------------------------------

def default_settings() -> CogsSettings:
    return CogsSettings.model_validate(_DEFAULTS)


def settings_version(raw: dict) -> int:
    """Schema version of a persisted record; 0 when it carries none."""
    for key in _VERSION_KEYS:
        if raw.get(key) is not None:
            return int(raw[key])
    return 0


def migrate_settings(raw: dict) -> CogsSettings:
    """
    Upgrade a persisted settings record to SETTINGS_VERSION.

    Stale records get fresh default materials and shipping; a customized fee
    rate carries over. Current records are validated unchanged.
    """
    version = settings_version(raw)
    if version >= SETTINGS_VERSION:
        return CogsSettings.model_validate({**raw, "version": version})

    fresh = dict(_DEFAULTS)
    for key in _FEE_RATE_KEYS:
        if raw.get(key) is not None:
            fresh["fee_rate"] = raw[key]
            break

    logger.info("Migrated COGS settings v%d -> v%d (materials reset)", version, SETTINGS_VERSION)
    return CogsSettings.model_validate(fresh)


def load_settings(raw: dict | None) -> CogsSettings:
    """Settings from a persisted record, defaults when there is none."""
    if not raw:
        return default_settings()
    return migrate_settings(raw)


def dump_settings(settings: CogsSettings) -> dict:
    """Record to hand back to the persistence layer, stamped with the current version."""
    data = settings.model_dump(by_alias=True)
    data["version"] = SETTINGS_VERSION
    return data


# ------------------------------------------------------------------
# Calculation
# ------------------------------------------------------------------

def select_shipping_method(listing: PricedListing, settings: CogsSettings) -> str:
    """Explicit override first, otherwise the single price-threshold rule."""
    rules = settings.shipping
    if listing.shipping_override:
        if listing.shipping_override not in rules.methods:
            raise CogsError(f"Unknown shipping method '{listing.shipping_override}'")
        return listing.shipping_override

    price = listing.price or 0.0
    return rules.high_cost_method if price > rules.threshold else rules.low_cost_method


def calc_listing(listing: PricedListing | dict, settings: CogsSettings | None = None) -> ListingProfit:
    """COGS and profit for one sale of *listing*."""
    if isinstance(listing, dict):
        listing = PricedListing.model_validate(listing)
    settings = settings or default_settings()

    price = listing.price or 0.0
    qty = listing.quantity or 1

    method = select_shipping_method(listing, settings)
    ship = settings.shipping.methods[method]

    ebay_fee = price * settings.fee_rate
    material_cost = sum(
        m.unit_cost
        for m in settings.materials
        if m.include_per_sale and (not m.methods or method in m.methods)
    )
    postage = ship.postage

    cogs = ebay_fee + material_cost + postage
    net_profit = price - cogs
    margin = net_profit / price * 100 if price > 0 else 0.0

    return ListingProfit(
        shipping_method=method,
        shipping_label=ship.label,
        shipping_cost=postage,
        ebay_fee=round(ebay_fee, _MONEY_PLACES),
        material_cost=round(material_cost, _MONEY_PLACES),
        cogs=round(cogs, _MONEY_PLACES),
        net_profit=round(net_profit, _MONEY_PLACES),
        margin=round(margin, 2),
        qty=qty,
        total_net_profit=round(net_profit * qty, _MONEY_PLACES),
        total_cogs=round(cogs * qty, _MONEY_PLACES),
    )


def calc_portfolio(
    listings: Sequence[PricedListing | dict],
    settings: CogsSettings | None = None,
) -> PortfolioProfit:
    """Inventory value, COGS and net profit summed over *listings*."""
    settings = settings or default_settings()

    total_value = 0.0
    total_cogs = 0.0
    total_net_profit = 0.0
    total_qty = 0

    for raw in listings:
        listing = PricedListing.model_validate(raw) if isinstance(raw, dict) else raw
        price = listing.price or 0.0
        qty = listing.quantity or 1
        result = calc_listing(listing, settings)

        total_value += price * qty
        total_cogs += result.cogs * qty
        total_net_profit += result.net_profit * qty
        total_qty += qty

    avg_margin = total_net_profit / total_value * 100 if total_value > 0 else 0.0

    return PortfolioProfit(
        total_value=round(total_value, _TOTAL_PLACES),
        total_cogs=round(total_cogs, _TOTAL_PLACES),
        total_net_profit=round(total_net_profit, _TOTAL_PLACES),
        avg_margin=round(avg_margin, _TOTAL_PLACES),
        total_qty=total_qty,
        listing_count=len(listings),
    )
