"""
Pydantic schemas for COGS (cost of goods sold) settings and results
"""

from typing import Dict, List, Optional

from pydantic import Field, field_validator, model_validator

from .base import EngineModel


class ShippingMethod(EngineModel):
    """A flat-rate postage option"""

    label: str
    postage: float = Field(..., ge=0, description="Flat postage per sale")


class ShippingRules(EngineModel):
    """
    Shipping method table plus the single price threshold used for auto-selection:
    price > threshold -> high_cost_method, else low_cost_method.
    """

    methods: Dict[str, ShippingMethod]
    threshold: float = Field(20.00, ge=0)
    low_cost_method: str = "envelope"
    high_cost_method: str = "ground"

    @model_validator(mode="after")
    def validate_auto_methods(self):
        """Both auto-selected methods must exist in the table"""
        for key in (self.low_cost_method, self.high_cost_method):
            if key not in self.methods:
                raise ValueError(f"Shipping method '{key}' is not defined in methods")
        return self


class Material(EngineModel):
    """A packing supply bought in packs and consumed per sale"""

    id: str
    name: str
    pack_count: int = Field(..., gt=0)
    pack_price: float = Field(..., ge=0)
    unit_cost: float = Field(..., ge=0, description="Cost per unit, pack_price / pack_count rounded to cents")
    include_per_sale: bool = True
    methods: List[str] = Field(default_factory=list, description="Shipping methods it applies to; empty = all")

    @model_validator(mode="before")
    @classmethod
    def derive_unit_cost(cls, data):
        """Fill unit_cost from the pack when it was not given"""
        if isinstance(data, dict):
            unit = data.get("unit_cost", data.get("unitCost"))
            count = data.get("pack_count", data.get("packCount"))
            price = data.get("pack_price", data.get("packPrice"))
            if unit is None and count and price is not None:
                data = {**data, "unit_cost": round(float(price) / int(count), 2)}
        return data


class CogsSettings(EngineModel):
    """Versioned COGS configuration record"""

    version: int = Field(..., ge=1)
    fee_rate: float = Field(..., ge=0, le=1, description="Marketplace final value fee rate")
    shipping: ShippingRules
    materials: List[Material] = Field(default_factory=list)


class PricedListing(EngineModel):
    """Minimal listing input for profitability: price, quantity and an optional method override"""

    item_id: str = ""
    price: Optional[float] = Field(None, ge=0)
    quantity: Optional[int] = Field(None, ge=0)
    shipping_override: Optional[str] = None

    @field_validator("shipping_override")
    @classmethod
    def blank_override_is_none(cls, v):
        """An empty override means "use the auto rule" """
        if v is not None and not v.strip():
            return None
        return v


class ListingProfit(EngineModel):
    """Per-sale cost breakdown for one listing"""

    shipping_method: str
    shipping_label: str
    shipping_cost: float
    ebay_fee: float
    material_cost: float
    cogs: float
    net_profit: float
    margin: float
    qty: int
    total_net_profit: float
    total_cogs: float


class PortfolioProfit(EngineModel):
    """Profitability summed over a set of listings"""

    total_value: float
    total_cogs: float
    total_net_profit: float
    avg_margin: float
    total_qty: int
    listing_count: int
