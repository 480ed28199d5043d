"""Mock product database"""

from typing import Optional

from ..models.product import Product, ProductCategory, ProductVariant

# Mock product catalog, prices in INR
PRODUCTS: dict[str, Product] = {
    "prod-001": Product(
        id="prod-001",
        name="Classic Cotton Kurta",
        description="Breathable handloom cotton kurta with a straight cut.",
        price=1000,
        category=ProductCategory.MEN,
        image_url="/images/cotton-kurta.jpg",
        variants=[
            ProductVariant(variant_id="var-001-m-white", size="M", color="White", sku="KRT-CTN-M-WHT"),
            ProductVariant(variant_id="var-001-l-white", size="L", color="White", sku="KRT-CTN-L-WHT"),
            ProductVariant(variant_id="var-001-l-indigo", size="L", color="Indigo", sku="KRT-CTN-L-IND", stock_quantity=5),
        ],
    ),
    "prod-002": Product(
        id="prod-002",
        name="Silk Blend Saree",
        description="Lightweight silk blend saree with zari border.",
        price=5000,
        category=ProductCategory.WOMEN,
        image_url="/images/silk-saree.jpg",
        variants=[
            ProductVariant(variant_id="var-002-maroon", color="Maroon", sku="SAR-SLK-MRN"),
            ProductVariant(variant_id="var-002-teal", color="Teal", sku="SAR-SLK-TEA"),
        ],
    ),
    "prod-003": Product(
        id="prod-003",
        name="Leather Kolhapuri Chappal",
        description="Hand-stitched leather sandals.",
        price=1500,
        category=ProductCategory.ACCESSORIES,
        image_url="/images/kolhapuri.jpg",
    ),
    "prod-004": Product(
        id="prod-004",
        name="Block Print Dupatta",
        description="Hand block printed cotton dupatta.",
        price=450,
        category=ProductCategory.WOMEN,
        image_url="/images/dupatta.jpg",
        stock_quantity=3,
    ),
}


class ProductDatabase:
    """In-memory product catalog"""

    def __init__(self, products: Optional[dict[str, Product]] = None):
        self._seed = products if products is not None else PRODUCTS
        self.reset()

    def reset(self) -> None:
        """Restore the seed catalog and its stock levels"""
        self.products = {pid: p.model_copy(deep=True) for pid, p in self._seed.items()}

    def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by ID"""
        return self.products.get(product_id)

    def available_stock(self, product: Product, variant_id: Optional[str] = None) -> int:
        """Stock of the variant when given, otherwise of the product"""
        if variant_id:
            variant = product.find_variant(variant_id)
            return variant.stock_quantity if variant else 0
        return product.stock_quantity

    def decrement_stock(self, product_id: str, variant_id: Optional[str], quantity: int) -> None:
        """Take sold units out of stock, never below zero"""
        product = self.get_product(product_id)
        if not product:
            return
        if variant_id:
            variant = product.find_variant(variant_id)
            if variant:
                variant.stock_quantity = max(0, variant.stock_quantity - quantity)
            return
        product.stock_quantity = max(0, product.stock_quantity - quantity)


# Singleton instance
product_db = ProductDatabase()
