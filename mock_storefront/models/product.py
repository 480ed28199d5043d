"""Product models for mock storefront"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ProductCategory(str, Enum):
    MEN = "men"
    WOMEN = "women"
    ACCESSORIES = "accessories"


class ProductVariant(BaseModel):
    """Size/color combination of a product"""
    variant_id: str
    size: Optional[str] = None
    color: Optional[str] = None
    sku: str
    stock_quantity: int = Field(ge=0, default=100)


class Product(BaseModel):
    """Product in the catalog; prices are whole currency units"""
    id: str
    name: str
    description: str
    price: int = Field(gt=0)
    category: ProductCategory
    image_url: Optional[str] = None
    variants: list[ProductVariant] = []
    stock_quantity: int = Field(ge=0, default=100)

    def find_variant(self, variant_id: str) -> Optional[ProductVariant]:
        return next((v for v in self.variants if v.variant_id == variant_id), None)
